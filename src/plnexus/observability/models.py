"""Trace record models.

A trace event is written once as a JSON line and never read back by the
process. Field names are kept short since the file is meant for `jq`.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Final, Literal

from pydantic import BaseModel, ConfigDict, Field

Layer = Literal["CLI", "DOMAIN", "INFRA", "SYSTEM"]

# Lower is more severe. An event passes when its level <= the system level.
LOG_LEVELS: Final[dict[str, int]] = {"error": 0, "warn": 1, "info": 2, "debug": 3}
DEFAULT_LEVEL: Final[str] = "info"


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a `Z` suffix."""
    now = datetime.now(tz=timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def level_rank(level: Any) -> int:
    """Numeric rank of a level name; unknown names rank as `info`."""
    if isinstance(level, str):
        return LOG_LEVELS.get(level.strip().lower(), LOG_LEVELS[DEFAULT_LEVEL])
    return LOG_LEVELS[DEFAULT_LEVEL]


class TraceEvent(BaseModel):
    """One observability record: `{ts, sid, lyr, evt, dat}`."""

    model_config = ConfigDict(frozen=True)

    ts: str = Field(default_factory=utc_timestamp)
    sid: str
    lyr: str
    evt: str
    dat: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def build(cls, *, sid: str, layer: str, event: str, data: dict[str, Any] | None = None) -> "TraceEvent":
        """Create an event with upper-cased layer and event names."""
        return cls(sid=sid, lyr=layer.upper(), evt=event.upper(), dat=dict(data or {}))
