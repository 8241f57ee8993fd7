"""Market data value objects."""

from __future__ import annotations

import math
import time
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, field_validator

STALE_AFTER_MS: Final[int] = 60_000
UNKNOWN_SOURCE: Final[str] = "UNKNOWN"


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


class MarketQuote(BaseModel):
    """One priced snapshot of a symbol."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    price: float
    timestamp: int
    source: str = UNKNOWN_SOURCE

    @field_validator("symbol", mode="before")
    def validate_symbol(cls, v: Any) -> str:
        """Require a non-empty string; normalize to upper case."""
        if not isinstance(v, str) or not v.strip():
            raise ValueError("symbol must be a non-empty string")
        return v.strip().upper()

    @field_validator("price", mode="before")
    def validate_price(cls, v: Any) -> float:
        if not _is_number(v):
            raise ValueError(f"price must be a number. Got: {v!r}")
        if v < 0:
            raise ValueError(f"price must be non-negative. Got: {v!r}")
        return float(v)

    @field_validator("timestamp", mode="before")
    def validate_timestamp(cls, v: Any) -> int:
        if not _is_number(v):
            raise ValueError(f"timestamp must be a valid number. Got: {v!r}")
        return int(v)

    @field_validator("source", mode="before")
    def default_source(cls, v: Any) -> Any:
        if v is None or v == "":
            return UNKNOWN_SOURCE
        return v

    def get_age(self, now: int | None = None) -> int:
        """Milliseconds elapsed since the quote was captured."""
        return (now if now is not None else now_ms()) - self.timestamp

    def is_stale(self, now: int | None = None) -> bool:
        """True once the quote is older than one minute."""
        return self.get_age(now) > STALE_AFTER_MS
