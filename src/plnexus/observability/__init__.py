"""Observability primitives.

- `SpanTracer`: session-scoped execution traces written as JSON lines.
- `configure_logging` / `get_logger`: structured diagnostic logging (stderr +
  optional rotated files), the only channel tracer failures are reported on.
"""

from .logging import configure_logging, get_logger
from .models import LOG_LEVELS, Layer, TraceEvent
from .sinks import InMemoryTraceSink, JsonLinesTraceSink, TraceSink
from .tracer import SpanTracer, TraceSession

__all__ = [
    "InMemoryTraceSink",
    "JsonLinesTraceSink",
    "LOG_LEVELS",
    "Layer",
    "SpanTracer",
    "TraceEvent",
    "TraceSession",
    "TraceSink",
    "configure_logging",
    "get_logger",
]
