import logging
import logging.config
import os

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DEFAULT_LOG_LEVEL = "INFO"

logger = logging.getLogger(__name__)


def normalize_level(log_level):
    """Upper-cased level name, or INFO when the name is not a known logging level."""
    level = str(log_level or DEFAULT_LOG_LEVEL).strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        return DEFAULT_LOG_LEVEL
    return level


def build_logging_config(log_level=None, log_file=None):
    """
    Build the dictConfig mapping. The file handler is only added when a log file is set.
    """
    log_level = normalize_level(log_level or os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL))
    log_file = log_file if log_file is not None else os.getenv("LOG_FILE")

    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "default",
            "level": log_level,
        },
    }
    if log_file:
        handlers["file"] = {
            "class": "logging.FileHandler",
            "filename": log_file,
            "formatter": "default",
            "level": log_level,
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": LOG_FORMAT,
            },
        },
        "handlers": handlers,
        "root": {
            "handlers": list(handlers),
            "level": log_level,
        },
    }


def setup_logging(log_level=None, log_file=None):
    """
    Configure logging. If the full configuration cannot be applied (for example an
    unwritable log file), fall back to console-only logging and log a warning.
    """
    try:
        logging.config.dictConfig(build_logging_config(log_level, log_file))
    except (ValueError, OSError) as e:
        logging.config.dictConfig(build_logging_config(log_level, ""))
        logger.warning(f"Logging setup failed ({e}); using console logging only.")
