from typing import Any, Optional

from pydantic import BaseModel


class ProbeResult(BaseModel):
    """
    Data model representing the outcome of a successful probe attempt.
    """

    label: str
    url: str
    method: str = "GET"
    status: int
    json_body: Optional[Any] = None
    raw: str = ""
    elapsed_ms: float = 0.0
    attempts: int = 1

    def preview(self, limit: int = 120) -> str:
        """
        Return the raw body cut to `limit` characters, with "..." appended when truncated.
        """
        if len(self.raw) > limit:
            return self.raw[:limit] + "..."
        return self.raw


def warm_state(result: Optional[ProbeResult]) -> bool:
    """
    Whether the backing service reports itself as warmed.

    Only a JSON object with a truthy "warmed" field counts as warmed.
    """
    if result is None or not isinstance(result.json_body, dict):
        return False
    return bool(result.json_body.get("warmed"))
