import asyncio
import json
import logging
import time
from typing import Awaitable, Callable, Optional

import httpx

from config.config import KeepaliveConfig
from contracts.probe_result import ProbeResult
from core.errors import ProbeError, ProbeTransportError, ServerError
from core.probe_metrics import ProbeMetrics

logger = logging.getLogger(__name__)

ACCEPT_HEADER = "application/json,text/plain,*/*"
PREVIEW_CHARS = 120


class RetryingProbe:
    """
    Issues HTTP requests against the configured API with bounded retries and
    exponential backoff. Transport errors, timeouts and 5xx responses are retried;
    any other status is returned as a result.
    """

    def __init__(
        self,
        config: KeepaliveConfig,
        client: Optional[httpx.AsyncClient] = None,
        metrics: Optional[ProbeMetrics] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize the RetryingProbe.

        Args:
            config (KeepaliveConfig): Run configuration.
            client (Optional[httpx.AsyncClient]): Client to reuse. When omitted a client
                is opened and closed for every probe call.
            metrics (Optional[ProbeMetrics]): Metrics sink for attempts and latencies.
            sleep (Callable): Coroutine function taking seconds, used for backoff.
        """
        self.config = config
        self.client = client
        self.metrics = metrics or ProbeMetrics()
        self.sleep = sleep

    @property
    def timeout_seconds(self) -> Optional[float]:
        """Per-request timeout in seconds; a configured 0 means no timeout."""
        if self.config.timeout_ms == 0:
            return None
        return self.config.timeout_ms / 1000.0

    def backoff_delay_ms(self, attempt_index: int) -> int:
        """Delay after the failed attempt with 0-based index `attempt_index`."""
        return self.config.retry_base_delay_ms * (2**attempt_index)

    def _headers(self, method: str) -> dict:
        headers = {"User-Agent": self.config.user_agent, "Accept": ACCEPT_HEADER}
        if method == "POST":
            headers["Content-Length"] = "0"
        return headers

    async def probe(self, path: str, label: str, method: str = "GET") -> Optional[ProbeResult]:
        """
        Probe `path` under the base URL until it succeeds or attempts run out.

        Returns:
            Optional[ProbeResult]: The first non-5xx response, or None once every
            attempt has failed.
        """
        if self.client is not None:
            return await self._probe_with(self.client, path, label, method)
        async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
            return await self._probe_with(client, path, label, method)

    async def _probe_with(
        self, client: httpx.AsyncClient, path: str, label: str, method: str
    ) -> Optional[ProbeResult]:
        url = self.config.url_for(path)
        total_attempts = self.config.max_retries + 1
        for attempt in range(total_attempts):
            try:
                result = await self._attempt(client, url, label, method)
            except ProbeError as e:
                if attempt == total_attempts - 1:
                    logger.error(
                        f"[PING][{label}] Failed after {attempt + 1} attempts: {e}"
                    )
                    self.metrics.record_result(label, False)
                    return None
                delay_ms = self.backoff_delay_ms(attempt)
                logger.warning(
                    f"[PING][{label}] Attempt {attempt + 1} failed ({e}). Retrying in {delay_ms}ms..."
                )
                await self.sleep(delay_ms / 1000.0)
                continue
            result.attempts = attempt + 1
            self.metrics.record_result(label, True)
            return result
        return None

    async def _attempt(
        self, client: httpx.AsyncClient, url: str, label: str, method: str
    ) -> ProbeResult:
        start = time.monotonic()
        try:
            resp = await asyncio.wait_for(
                client.request(
                    method,
                    url,
                    headers=self._headers(method),
                    content=b"" if method == "POST" else None,
                    timeout=self.timeout_seconds,
                ),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            self.metrics.record_attempt(label, "transport_error")
            raise ProbeTransportError("Timeout") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            self.metrics.record_attempt(label, "transport_error")
            raise ProbeTransportError(str(e) or type(e).__name__) from e

        elapsed = time.monotonic() - start
        elapsed_ms = round(elapsed * 1000, 1)
        logger.info(f"[PING][{label}] {url} -> {resp.status_code} in {elapsed_ms:.0f}ms")

        result = ProbeResult(
            label=label,
            url=url,
            method=method,
            status=resp.status_code,
            elapsed_ms=elapsed_ms,
            **parse_body(resp.text),
        )
        if result.json_body is not None:
            logger.info(
                f"[PING][{label}] JSON: {json.dumps(result.json_body, separators=(',', ':'))}"
            )
        elif result.raw:
            logger.info(f"[PING][{label}] RAW: {result.preview(PREVIEW_CHARS)}")

        if resp.status_code >= 500:
            self.metrics.record_attempt(label, "server_error", elapsed)
            raise ServerError(resp.status_code)
        self.metrics.record_attempt(label, "success", elapsed)
        return result


def parse_body(text: str) -> dict:
    """
    Split a response body into its JSON value and raw text.

    A blank body yields no JSON and an empty raw string; an unparseable body keeps
    only the raw text.
    """
    if not text or not text.strip():
        return {"json_body": None, "raw": ""}
    try:
        return {"json_body": json.loads(text), "raw": text}
    except (ValueError, RecursionError):
        return {"json_body": None, "raw": text}
