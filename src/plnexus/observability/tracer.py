"""Session-scoped span tracer.

One `SpanTracer` is built per process by the orchestrator and handed to every
component that traces. It records timestamped events to
`<root>/logs/traces/<namespace>-<YYYY-MM-DD>.trace.log` and wraps operations
as timed spans.

The tracer never lets its own failures reach the caller: initialization,
serialization and write errors are logged through the diagnostic logger and
dropped, while a traced operation's result or exception passes through as-is.
"""

from __future__ import annotations

import asyncio
import inspect
import platform
import secrets
import string
import sys
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any, TypeVar

from .logging import get_logger
from .models import DEFAULT_LEVEL, LOG_LEVELS, Layer, TraceEvent, level_rank
from .sinks import JsonLinesTraceSink, TraceSink

_T = TypeVar("_T")

SESSION_ID_LENGTH = 8
_SESSION_ALPHABET = string.ascii_uppercase + string.digits

logger = get_logger(__name__)


def new_session_id(length: int = SESSION_ID_LENGTH) -> str:
    """Random uppercase alphanumeric token identifying one process run."""
    return "".join(secrets.choice(_SESSION_ALPHABET) for _ in range(length))


def trace_file_path(root: str | Path, namespace: str, day: date | None = None) -> Path:
    """`<root>/logs/traces/<namespace>-<YYYY-MM-DD>.trace.log` for the local date."""
    day = day or date.today()
    return Path(root) / "logs" / "traces" / f"{namespace}-{day.isoformat()}.trace.log"


@dataclass(frozen=True)
class TraceSession:
    """Identity and destination of one process run's traces."""

    sid: str
    trace_file: Path


class SpanTracer:
    """Records trace events and timed spans for a single session."""

    def __init__(
        self,
        *,
        enabled: bool = False,
        level: str = DEFAULT_LEVEL,
        environment: str = "development",
        sink_factory: Callable[[Path], TraceSink] = JsonLinesTraceSink,
    ) -> None:
        """Create an uninitialized tracer.

        Args:
            enabled: Global switch, consulted on every `record`/`trace_span` call.
            level: System level; events more verbose than this are dropped.
            environment: Runtime environment descriptor reported in `TRACER_READY`.
            sink_factory: Builds the sink for the session's trace file.
        """
        self.enabled = enabled
        self.level = level
        self.environment = environment
        self._sink_factory = sink_factory
        self._session: TraceSession | None = None
        self._sink: TraceSink | None = None

    @property
    def level(self) -> str:
        return self._level

    @level.setter
    def level(self, value: str) -> None:
        normalized = value.strip().lower()
        if normalized == "warning":
            normalized = "warn"
        if normalized not in LOG_LEVELS:
            raise ValueError(f"Unknown trace level {value!r}. Expected one of: {', '.join(LOG_LEVELS)}")
        self._level = normalized

    @property
    def session(self) -> TraceSession | None:
        return self._session

    @property
    def is_initialized(self) -> bool:
        return self._session is not None

    async def initialize(self, root: str | Path, namespace: str = "plnexus") -> None:
        """Start the session and make sure the trace directory exists.

        Safe to call multiple times; only the first successful call has effect.
        """
        if self._session is not None:
            return

        try:
            sid = new_session_id()
            trace_file = trace_file_path(root, namespace)
            await asyncio.to_thread(trace_file.parent.mkdir, parents=True, exist_ok=True)
            sink = self._sink_factory(trace_file)
        except Exception as exc:  # noqa: BLE001 - tracing must not crash the caller
            logger.error("tracer_initialization_failed", root=str(root), error=str(exc))
            return

        self._session = TraceSession(sid=sid, trace_file=trace_file)
        self._sink = sink

        await self.record(
            "SYSTEM",
            "TRACER_READY",
            {
                "sid": sid,
                "env": self.environment,
                "python": platform.python_version(),
                "platform": sys.platform,
            },
        )

    async def record(self, layer: Layer | str, event: str, data: dict[str, Any] | None = None) -> None:
        """Append one event to the trace file, subject to the switch and level filter."""
        if not self.enabled or self._session is None or self._sink is None:
            return

        data = data or {}
        if level_rank(data.get("level", DEFAULT_LEVEL)) > LOG_LEVELS[self._level]:
            return

        await _best_effort(self._write, layer, event, data)

    async def _write(self, layer: str, event: str, data: dict[str, Any]) -> None:
        if self._session is None or self._sink is None:
            return
        entry = TraceEvent.build(sid=self._session.sid, layer=layer, event=event, data=data)
        await asyncio.to_thread(self._sink.write, entry)

    async def trace_span(
        self,
        layer: Layer | str,
        label: str,
        operation: Callable[[], Awaitable[_T] | _T],
        meta: dict[str, Any] | None = None,
    ) -> _T:
        """Run `operation` between `<LABEL>_START` and `<LABEL>_COMPLETE`/`<LABEL>_FAILED` events.

        The operation's return value and exception are passed through unchanged.
        With tracing disabled the operation is simply awaited, with no events.
        """
        if not self.enabled:
            return await _call(operation)

        meta = dict(meta or {})
        await self.record(layer, f"{label}_START", meta)

        start = time.perf_counter()
        try:
            result = await _call(operation)
        except Exception as exc:
            await self.record(
                layer,
                f"{label}_FAILED",
                {**meta, "durationMs": _elapsed_ms(start), "error": str(exc)},
            )
            raise

        await self.record(layer, f"{label}_COMPLETE", {**meta, "durationMs": _elapsed_ms(start)})
        return result


async def _call(operation: Callable[[], Awaitable[_T] | _T]) -> _T:
    result = operation()
    if inspect.isawaitable(result):
        return await result
    return result


async def _best_effort(fn: Callable[..., Awaitable[None]], *args: Any) -> None:
    """Run a tracer write, reporting any failure to the diagnostic logger only."""
    try:
        await fn(*args)
    except Exception as exc:  # noqa: BLE001 - tracer failures are discarded
        logger.error("trace_write_failed", error=str(exc), error_type=type(exc).__name__)


def _elapsed_ms(start: float) -> float:
    return round(max(0.0, (time.perf_counter() - start) * 1000.0), 3)
