"""Trace sinks (storage backends)."""

from __future__ import annotations

import json
import threading
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from .models import TraceEvent


def serialize_event(event: TraceEvent) -> str:
    """Render an event as one compact JSON line (newline included)."""
    payload = {"ts": event.ts, "sid": event.sid, "lyr": event.lyr, "evt": event.evt, "dat": event.dat}
    return json.dumps(payload, separators=(",", ":"), default=str) + "\n"


class TraceSink(Protocol):
    """A synchronous sink for trace events.

    Sinks are synchronous; the tracer moves blocking writes to a worker thread.
    """

    def write(self, event: TraceEvent) -> None:
        """Persist a single event."""


class JsonLinesTraceSink:
    """Append-only JSON-lines file.

    Each event is serialized before the file is opened and written with a
    single `write` call in append mode, so concurrent processes sharing the
    file may interleave lines but never split one.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def write(self, event: TraceEvent) -> None:
        line = serialize_event(event)
        with self.path.open("a", encoding="utf-8") as fh:
            fh.write(line)


class InMemoryTraceSink:
    """In-memory sink for tests and local debugging."""

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path) if path is not None else None
        self._lock = threading.Lock()
        self._events: list[TraceEvent] = []

    def write(self, event: TraceEvent) -> None:
        # Fail the same way the file sink would on unserializable metadata.
        serialize_event(event)
        with self._lock:
            self._events.append(event)

    def snapshot(self) -> Sequence[TraceEvent]:
        """Return a point-in-time copy of all recorded events."""
        with self._lock:
            return list(self._events)
