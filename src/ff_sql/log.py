"""
Driver loggers for ff-sql, built on structlog.

A driver accepts any object with ``debug/info/warning/error`` methods taking
an event string plus keyword fields. ``get_logger`` returns the default one.
"""

import copy
import logging
import sys
from typing import Any

import structlog
from structlog.types import Processor


def default_processors() -> list[Processor]:
    """Level, timestamp and a plain console line per event."""
    return [
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
        structlog.dev.ConsoleRenderer(colors=False),
    ]


class ScopedLogger:
    """
    structlog logger for one driver, writing to stderr.

    The scope name is bound as ``logger`` on every event, and events below
    ``level`` are dropped before any processor runs.

    Example:
        logger = ScopedLogger("ff_sql.postgres", level=logging.DEBUG)
        logger.info("Connected to PostgreSQL database", database="app")
    """

    def __init__(
        self,
        name: str,
        level: int = logging.INFO,
        processors: list[Processor] | None = None,
        **context: Any,
    ):
        self.name = name
        self.level = level
        self._logger = structlog.wrap_logger(
            structlog.PrintLogger(sys.stderr),
            wrapper_class=structlog.make_filtering_bound_logger(level),
            processors=processors if processors is not None else default_processors(),
        ).bind(logger=name, **context)

    def bind(self, **fields: Any) -> "ScopedLogger":
        """Return a copy that adds ``fields`` to every event."""
        bound = copy.copy(self)
        bound._logger = self._logger.bind(**fields)
        return bound

    def debug(self, event: str, **fields: Any) -> None:
        self._logger.debug(event, **fields)

    def info(self, event: str, **fields: Any) -> None:
        self._logger.info(event, **fields)

    def warning(self, event: str, **fields: Any) -> None:
        self._logger.warning(event, **fields)

    def error(self, event: str, **fields: Any) -> None:
        self._logger.error(event, **fields)

    def __repr__(self) -> str:
        return f"ScopedLogger({self.name!r}, level={logging.getLevelName(self.level)})"


class NullLogger:
    """
    Logger that discards every event.

    Example:
        db = SQLite(logger=NullLogger("quiet"))
    """

    def __init__(self, name: str = "null"):
        self.name = name

    def bind(self, **fields: Any) -> "NullLogger":
        return self

    def _discard(self, event: str, **fields: Any) -> None:
        return None

    debug = info = warning = error = _discard

    def __repr__(self) -> str:
        return f"NullLogger({self.name!r})"


def get_logger(name: str, level: int = logging.INFO, **context: Any) -> ScopedLogger:
    """
    Get the default driver logger.

    Args:
        name: Scope bound as ``logger``, e.g. "ff_sql.sqlite"
        level: Minimum level to emit
        **context: Fields bound to every event

    Returns:
        ScopedLogger instance
    """
    return ScopedLogger(name, level=level, **context)
