import logging
import os
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict

from core.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_WARM_ENDPOINT = "/warm"
DEFAULT_TIMEOUT_MS = 8000
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_BASE_DELAY_MS = 1500
DEFAULT_WARM_RECHECK_DELAY_MS = 1500
DEFAULT_USER_AGENT = "keepalive-probe/1.0"
DEFAULT_METRICS_JOB = "keepalive_probe"


def _env_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        logger.warning(f"{name}={raw!r} is not an integer; using default {default}")
        return default
    if value < 0:
        logger.warning(f"{name}={value} is negative; using default {default}")
        return default
    return value


def _env_flag(environ: Mapping[str, str], name: str, default: bool) -> bool:
    raw = environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() == "true"


class KeepaliveConfig(BaseModel):
    """
    Immutable settings for one keepalive run, built once at startup.
    """

    model_config = ConfigDict(frozen=True)

    api_url: str
    warm_endpoint: str = DEFAULT_WARM_ENDPOINT
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_base_delay_ms: int = DEFAULT_RETRY_BASE_DELAY_MS
    enable_warm_after_unwarmed: bool = True
    warm_recheck_delay_ms: int = DEFAULT_WARM_RECHECK_DELAY_MS
    user_agent: str = DEFAULT_USER_AGENT
    pushgateway_url: Optional[str] = None
    metrics_job: str = DEFAULT_METRICS_JOB

    @property
    def base_url(self) -> str:
        """API URL without trailing slashes."""
        return self.api_url.rstrip("/")

    def url_for(self, path: str) -> str:
        return self.base_url + path

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "KeepaliveConfig":
        """
        Build the configuration from environment variables.

        Args:
            environ (Optional[Mapping[str, str]]): Variables to read. Defaults to os.environ.

        Returns:
            KeepaliveConfig: The frozen configuration.

        Raises:
            ConfigurationError: If API_URL is missing or blank.
        """
        environ = os.environ if environ is None else environ
        api_url = (environ.get("API_URL") or "").strip()
        if not api_url:
            raise ConfigurationError("API_URL env/secret not set.")

        return cls(
            api_url=api_url,
            warm_endpoint=environ.get("WARM_ENDPOINT") or DEFAULT_WARM_ENDPOINT,
            timeout_ms=_env_int(environ, "PING_TIMEOUT_MS", DEFAULT_TIMEOUT_MS),
            max_retries=_env_int(environ, "MAX_RETRIES", DEFAULT_MAX_RETRIES),
            retry_base_delay_ms=_env_int(
                environ, "RETRY_BASE_DELAY_MS", DEFAULT_RETRY_BASE_DELAY_MS
            ),
            enable_warm_after_unwarmed=_env_flag(
                environ, "ENABLE_WARM_AFTER_UNWARMED", True
            ),
            warm_recheck_delay_ms=_env_int(
                environ, "WARM_RECHECK_DELAY_MS", DEFAULT_WARM_RECHECK_DELAY_MS
            ),
            user_agent=environ.get("KEEPALIVE_USER_AGENT") or DEFAULT_USER_AGENT,
            pushgateway_url=environ.get("PUSHGATEWAY_URL") or None,
            metrics_job=environ.get("METRICS_JOB") or DEFAULT_METRICS_JOB,
        )
