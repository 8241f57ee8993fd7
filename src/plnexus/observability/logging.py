"""Diagnostic logging configuration.

Diagnostics go to stderr so stdout stays reserved for rendered quotes. When a
log directory is given, two daily-rotated files are written as JSON lines:
`combined.log` (everything) and `error.log` (errors only).

Tracer failures are reported here and nowhere else.
"""

from __future__ import annotations

import logging
import logging.handlers
import sys
from pathlib import Path

import structlog
from structlog.types import FilteringBoundLogger

_LEVELS = {
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}

COMBINED_BACKUP_DAYS = 14
ERROR_BACKUP_DAYS = 30


def _shared_processors() -> list:
    return [
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]


def _file_handler(path: Path, *, level: int, backup_count: int) -> logging.Handler:
    handler = logging.handlers.TimedRotatingFileHandler(
        path, when="midnight", backupCount=backup_count, encoding="utf-8"
    )
    handler.setLevel(level)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ],
            foreign_pre_chain=_shared_processors(),
        )
    )
    return handler


def configure_logging(level: str = "info", *, log_dir: str | Path | None = None) -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        level: error, warn, info or debug (any case).
        log_dir: Directory for rotated `combined.log` / `error.log`; console only when None.
    """
    log_level = _LEVELS.get(level.strip().lower(), logging.INFO)

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
            ],
            foreign_pre_chain=_shared_processors(),
        )
    )
    handlers: list[logging.Handler] = [console]

    if log_dir is not None:
        directory = Path(log_dir)
        directory.mkdir(parents=True, exist_ok=True)
        handlers.append(_file_handler(directory / "combined.log", level=logging.DEBUG, backup_count=COMBINED_BACKUP_DAYS))
        handlers.append(_file_handler(directory / "error.log", level=logging.ERROR, backup_count=ERROR_BACKUP_DAYS))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
        existing.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(log_level)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_shared_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """Return a structlog logger (typically `get_logger(__name__)`)."""
    return structlog.get_logger(name)
