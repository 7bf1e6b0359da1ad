import logging
from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, push_to_gateway

logger = logging.getLogger(__name__)


class ProbeMetrics:
    """
    Prometheus metrics for one keepalive run, kept in a private registry so the
    run can be pushed to a Pushgateway as a batch job.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        """
        Initialize the ProbeMetrics.

        Args:
            registry (Optional[CollectorRegistry]): Registry to hold the metrics.
                A fresh one is created when omitted.
        """
        self.registry = registry or CollectorRegistry()
        self.ATTEMPTS = Counter(
            "keepalive_probe_attempts",
            "Probe attempts by label and outcome",
            ["label", "outcome"],
            registry=self.registry,
        )
        self.LATENCY = Histogram(
            "keepalive_probe_latency_seconds",
            "Probe attempt latency in seconds",
            ["label"],
            registry=self.registry,
        )
        self.PROBE_UP = Gauge(
            "keepalive_probe_up",
            "1 if the last probe for the label succeeded, 0 otherwise",
            ["label"],
            registry=self.registry,
        )
        self.LAST_RUN = Gauge(
            "keepalive_last_run_timestamp_seconds",
            "Unix time the last keepalive run finished",
            registry=self.registry,
        )

    def record_attempt(self, label: str, outcome: str, elapsed_seconds: Optional[float] = None):
        self.ATTEMPTS.labels(label=label, outcome=outcome).inc()
        if elapsed_seconds is not None:
            self.LATENCY.labels(label=label).observe(elapsed_seconds)

    def record_result(self, label: str, ok: bool):
        self.PROBE_UP.labels(label=label).set(1 if ok else 0)

    def attempt_count(self, label: str, outcome: str) -> float:
        value = self.registry.get_sample_value(
            "keepalive_probe_attempts_total", {"label": label, "outcome": outcome}
        )
        return value or 0.0

    def push(self, gateway: Optional[str], job: str) -> bool:
        """
        Push the registry to a Pushgateway. Failures are logged, never raised.

        Returns:
            bool: True if the metrics were pushed.
        """
        if not gateway:
            logger.debug("No Pushgateway configured; skipping metrics push.")
            return False
        self.LAST_RUN.set_to_current_time()
        try:
            push_to_gateway(gateway, job=job, registry=self.registry)
        except Exception as e:
            logger.warning(f"[METRICS] Failed to push metrics to {gateway}: {e}")
            return False
        logger.info(f"[METRICS] Pushed metrics to {gateway} as job {job}")
        return True
