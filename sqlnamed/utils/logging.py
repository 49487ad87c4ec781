"""Logging helpers for sqlnamed.

Library loggers are children of ``sqlnamed`` and carry no handlers until the
application calls :func:`configure_logging` or attaches its own. Resolution,
preparation and batch execution emit DEBUG records whose ``extra_fields``
(slot counts, field names, row counts) the :class:`StructuredFormatter`
merges into its JSON output.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any

from sqlnamed._serialization import encode_json

if TYPE_CHECKING:
    from logging import LogRecord

__all__ = (
    "CorrelationIDFilter",
    "StructuredFormatter",
    "configure_logging",
    "correlation_id_var",
    "get_correlation_id",
    "get_logger",
    "log_with_context",
    "set_correlation_id",
)

ROOT_LOGGER_NAME = "sqlnamed"
SIMPLE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

correlation_id_var: ContextVar[str | None] = ContextVar("sqlnamed_correlation_id", default=None)


def set_correlation_id(correlation_id: str | None) -> None:
    """Tag records emitted in the current context with ``correlation_id``; ``None`` clears it."""
    correlation_id_var.set(correlation_id)


def get_correlation_id() -> str | None:
    return correlation_id_var.get()


class StructuredFormatter(logging.Formatter):
    """Render records as one JSON object per line."""

    def format(self, record: LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
        }
        correlation_id = getattr(record, "correlation_id", None) or get_correlation_id()
        if correlation_id:
            entry["correlation_id"] = correlation_id
        entry.update(getattr(record, "extra_fields", None) or {})
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return str(encode_json(entry))


class CorrelationIDFilter(logging.Filter):
    """Stamp ``correlation_id`` on every record; ``None`` outside a tagged context."""

    def filter(self, record: LogRecord) -> bool:
        record.correlation_id = get_correlation_id()  # type: ignore[attr-defined]
        return True


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``sqlnamed`` or one of its children.

    Args:
        name: Dotted suffix such as ``"statement"``. Names already under
            ``sqlnamed`` are used as given.

    Returns:
        The logger, with a :class:`CorrelationIDFilter` attached once
    """
    if not name:
        return logging.getLogger(ROOT_LOGGER_NAME)
    if name != ROOT_LOGGER_NAME and not name.startswith(f"{ROOT_LOGGER_NAME}."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    logger = logging.getLogger(name)
    if not any(isinstance(f, CorrelationIDFilter) for f in logger.filters):
        logger.addFilter(CorrelationIDFilter())
    return logger


def _handler(handler: logging.Handler, formatter: logging.Formatter) -> logging.Handler:
    handler.setFormatter(formatter)
    return handler


def configure_logging(
    level: int | str = "INFO",
    format_style: str = "structured",
    log_to_file: str | None = None,
    extra_handlers: list[logging.Handler] | None = None,
) -> None:
    """Send ``sqlnamed`` records to stdout (and optionally a file) instead of the root logger.

    Args:
        level: Level name or number for the ``sqlnamed`` logger
        format_style: ``"structured"`` for JSON lines, ``"simple"`` for plain text on the console
        log_to_file: Path of a file that always receives JSON lines
        extra_handlers: Handlers attached as given, with their own formatters
    """
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level.upper() if isinstance(level, str) else level)

    console_formatter = StructuredFormatter() if format_style == "structured" else logging.Formatter(SIMPLE_FORMAT)
    handlers = [_handler(logging.StreamHandler(sys.stdout), console_formatter)]
    if log_to_file:
        handlers.append(_handler(logging.FileHandler(log_to_file), StructuredFormatter()))
    handlers.extend(extra_handlers or ())

    root_logger.handlers[:] = handlers
    root_logger.propagate = False
    log_with_context(
        root_logger,
        logging.DEBUG,
        "sqlnamed logging configured",
        format_style=format_style,
        handlers_count=len(handlers),
    )


def log_with_context(logger: logging.Logger, level: int, message: str, **extra_fields: Any) -> None:
    """Log ``message`` with ``extra_fields`` attached to the record as ``record.extra_fields``.

    The record points at the caller's line, not at this helper.
    """
    if logger.isEnabledFor(level):
        logger.log(level, message, extra={"extra_fields": extra_fields}, stacklevel=2)
