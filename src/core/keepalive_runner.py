import asyncio
import logging
from typing import Awaitable, Callable, Optional

from config.config import KeepaliveConfig
from contracts.probe_result import warm_state
from contracts.run_summary import RunSummary
from core.probe_metrics import ProbeMetrics
from core.retrying_probe import RetryingProbe

logger = logging.getLogger(__name__)

FAST_HEALTH_PATH = "/fast-health"
HEALTH_PATH = "/healthz"


class KeepaliveRunner:
    """
    Runs one keepalive pass: fast-health, full health, and a warm-up followed by a
    health re-check when the service reports itself as not warmed.
    """

    def __init__(
        self,
        config: KeepaliveConfig,
        probe: Optional[RetryingProbe] = None,
        metrics: Optional[ProbeMetrics] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.config = config
        self.metrics = metrics or (probe.metrics if probe else ProbeMetrics())
        self.probe = probe or RetryingProbe(config, metrics=self.metrics, sleep=sleep)
        self.sleep = sleep

    def log_banner(self):
        logger.info("--- Keepalive Ping ---")
        logger.info(f"API_URL: {self.config.api_url}")
        logger.info(f"WARM_ENDPOINT: {self.config.warm_endpoint}")
        logger.info(f"Timeout (ms): {self.config.timeout_ms}")
        logger.info(f"Max Retries: {self.config.max_retries}")

    async def run(self) -> RunSummary:
        self.log_banner()

        fast = await self.probe.probe(FAST_HEALTH_PATH, "fast-health")
        health = await self.probe.probe(HEALTH_PATH, "healthz")

        summary = RunSummary(
            fast_health_ok=fast is not None,
            health_ok=health is not None,
            warmed_initial=warm_state(health),
        )

        if health is not None and health.json_body:
            if not summary.warmed_initial and self.config.enable_warm_after_unwarmed:
                await self._warm_up(summary)

        self.log_summary(summary)
        self.metrics.push(self.config.pushgateway_url, self.config.metrics_job)
        return summary

    async def _warm_up(self, summary: RunSummary):
        logger.info("Service not warmed -> sending warm request...")
        summary.warm_triggered = True
        warm = await self.probe.probe(self.config.warm_endpoint, "warm", method="POST")
        summary.warm_ok = warm is not None

        await self.sleep(self.config.warm_recheck_delay_ms / 1000.0)
        recheck = await self.probe.probe(HEALTH_PATH, "healthz-after-warm")
        summary.warmed_after_warm = warm_state(recheck)

    @staticmethod
    def log_summary(summary: RunSummary):
        if summary.all_failed:
            logger.error("[SUMMARY] All pings failed.")
            return
        logger.info(f"[SUMMARY] Fast health success? {summary.fast_health_ok}")
        logger.info(f"[SUMMARY] Health success? {summary.health_ok}")
        logger.info(f"[SUMMARY] Warmed (initial)? {summary.warmed_initial}")
        if summary.warm_triggered:
            logger.info(f"[SUMMARY] Warm request success? {summary.warm_ok}")
            logger.info(f"[SUMMARY] Warmed (after warm)? {summary.warmed_after_warm}")
