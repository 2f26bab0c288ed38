"""Logging helpers for sqlrepo.

All loggers live under the ``sqlrepo`` namespace. Records carry the correlation
id of the current context, and the structured formatter renders them as one
JSON object per line, including any fields passed with :func:`log_with_context`.
"""

from __future__ import annotations

import logging
import sys
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any

from sqlrepo.utils.serializers import to_json

if TYPE_CHECKING:
    from collections.abc import Generator, Iterable

__all__ = (
    "CorrelationIDFilter",
    "StructuredFormatter",
    "configure_logging",
    "correlation_context",
    "correlation_id_var",
    "get_correlation_id",
    "get_logger",
    "log_with_context",
    "set_correlation_id",
)

ROOT_LOGGER_NAME = "sqlrepo"
EXTRA_FIELDS_ATTR = "extra_fields"
SIMPLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

correlation_id_var: ContextVar[str | None] = ContextVar("sqlrepo_correlation_id", default=None)


def set_correlation_id(correlation_id: str | None) -> None:
    correlation_id_var.set(correlation_id)


def get_correlation_id() -> str | None:
    return correlation_id_var.get()


@contextmanager
def correlation_context(correlation_id: str | None = None) -> Generator[str, None, None]:
    """Tag every record logged inside the block with one correlation id.

    Args:
        correlation_id: Id to use; a random one is generated when omitted.

    Yields:
        The active correlation id.
    """
    active = correlation_id or uuid.uuid4().hex
    token = correlation_id_var.set(active)
    try:
        yield active
    finally:
        correlation_id_var.reset(token)


class CorrelationIDFilter(logging.Filter):
    """Copies the context's correlation id onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        correlation_id = get_correlation_id()
        if correlation_id is not None:
            record.correlation_id = correlation_id
        return True


class StructuredFormatter(logging.Formatter):
    """Renders a record as a single JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
        }
        correlation_id = getattr(record, "correlation_id", None) or get_correlation_id()
        if correlation_id is not None:
            entry["correlation_id"] = correlation_id
        for key, value in (getattr(record, EXTRA_FIELDS_ATTR, None) or {}).items():
            entry.setdefault(key, value)
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return to_json(entry)


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger under the ``sqlrepo`` namespace.

    Args:
        name: Dotted name relative to ``sqlrepo``; the package logger when omitted.

    Returns:
        The logger, with a :class:`CorrelationIDFilter` attached once.
    """
    if name is None:
        return logging.getLogger(ROOT_LOGGER_NAME)
    if name != ROOT_LOGGER_NAME and not name.startswith(f"{ROOT_LOGGER_NAME}."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    logger = logging.getLogger(name)
    if not any(isinstance(existing, CorrelationIDFilter) for existing in logger.filters):
        logger.addFilter(CorrelationIDFilter())
    return logger


def log_with_context(logger: logging.Logger, level: int, message: str, /, *args: Any, **fields: Any) -> None:
    """Log ``message`` with structured ``fields`` rendered by :class:`StructuredFormatter`.

    Fields are only collected when ``level`` is enabled for ``logger``.
    """
    if logger.isEnabledFor(level):
        logger.log(level, message, *args, extra={EXTRA_FIELDS_ATTR: fields}, stacklevel=2)


def configure_logging(
    level: str = "INFO",
    format_style: str = "structured",
    log_to_file: str | None = None,
    extra_handlers: Iterable[logging.Handler] | None = None,
) -> None:
    """Install handlers on the ``sqlrepo`` logger, replacing any previous ones.

    Args:
        level: Level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        format_style: ``"structured"`` for JSON lines, anything else for plain text.
        log_to_file: Optional path of a file receiving structured records.
        extra_handlers: Handlers added as they are.
    """
    package_logger = logging.getLogger(ROOT_LOGGER_NAME)
    package_logger.setLevel(level.upper())
    package_logger.handlers.clear()

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(StructuredFormatter() if format_style == "structured" else logging.Formatter(SIMPLE_FORMAT))
    package_logger.addHandler(console)

    if log_to_file:
        file_handler = logging.FileHandler(log_to_file)
        file_handler.setFormatter(StructuredFormatter())
        package_logger.addHandler(file_handler)

    for handler in extra_handlers or ():
        package_logger.addHandler(handler)

    package_logger.propagate = False
    log_with_context(
        package_logger,
        logging.INFO,
        "sqlrepo logging configured",
        log_level=level.upper(),
        format_style=format_style,
        handlers=len(package_logger.handlers),
    )
