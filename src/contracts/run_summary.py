from typing import Optional

from pydantic import BaseModel


class RunSummary(BaseModel):
    """
    Aggregated outcome of one keepalive run.
    """

    fast_health_ok: bool = False
    health_ok: bool = False
    warmed_initial: bool = False
    warm_triggered: bool = False
    warm_ok: Optional[bool] = None
    warmed_after_warm: Optional[bool] = None
    error: Optional[str] = None

    @property
    def all_failed(self) -> bool:
        return not self.fast_health_ok and not self.health_ok

    @property
    def exit_code(self) -> int:
        # A completed run never fails the scheduler, whatever the probes reported.
        return 0
