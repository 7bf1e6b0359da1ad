"""
Error types raised while configuring and probing the keepalive target.
"""


class ConfigurationError(Exception):
    """Required configuration is missing; the run cannot start."""


class ProbeError(Exception):
    """Base class for failures of a single probe attempt. All of them are retryable."""


class ProbeTransportError(ProbeError):
    """Connection refused, DNS failure, timeout or an unusable URL."""


class ServerError(ProbeError):
    """The target answered with a 5xx status."""

    def __init__(self, status: int):
        super().__init__(f"Server {status}")
        self.status = status
