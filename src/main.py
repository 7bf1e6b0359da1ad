import asyncio
import logging
import sys

from config.config import KeepaliveConfig
from config.logging_config import setup_logging
from contracts.run_summary import RunSummary
from core.errors import ConfigurationError
from core.keepalive_runner import KeepaliveRunner

logger = logging.getLogger(__name__)

EXIT_CONFIG_ERROR = 1


async def run_keepalive(config: KeepaliveConfig) -> RunSummary:
    """
    Run one keepalive pass, folding any unexpected fault into the summary.
    """
    try:
        return await KeepaliveRunner(config).run()
    except Exception as e:
        logger.exception(f"[FATAL] {e}")
        return RunSummary(error=str(e) or type(e).__name__)


def main(environ=None) -> int:
    setup_logging()
    try:
        config = KeepaliveConfig.from_env(environ)
    except ConfigurationError as e:
        logger.error(f"[FATAL] {e}")
        return EXIT_CONFIG_ERROR

    summary = asyncio.run(run_keepalive(config))
    return summary.exit_code


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
