"""Per-thread fields (acting user, request and transfer ids) for log records."""

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any


class LogContext:
    """Fields merged into every record that passes a ContextFilter."""

    _local = threading.local()

    @classmethod
    def get(cls) -> dict[str, Any]:
        fields = getattr(cls._local, "fields", None)
        if fields is None:
            fields = cls._local.fields = {}
        return fields

    @classmethod
    def set(cls, **fields: Any) -> None:
        cls.get().update(fields)

    @classmethod
    def replace(cls, fields: dict[str, Any]) -> None:
        cls._local.fields = dict(fields)

    @classmethod
    def clear(cls) -> None:
        cls.replace({})


class ContextFilter(logging.Filter):
    """Copies LogContext fields onto a record; values passed via ``extra`` win."""

    def filter(self, record: logging.LogRecord) -> bool:
        for name, value in LogContext.get().items():
            record.__dict__.setdefault(name, value)
        return True


@contextmanager
def log_context(**fields: Any) -> Iterator[None]:
    """Add fields for the duration of the block, then restore the enclosing set."""
    saved = dict(LogContext.get())
    LogContext.set(**fields)
    try:
        yield
    finally:
        LogContext.replace(saved)


@contextmanager
def log_session_context(username: str, **fields: Any) -> Iterator[None]:
    """Tag records with the acting user.

    ``correlation_id`` defaults to ``session:<username>`` so every line
    emitted on behalf of one login can be grouped.
    """
    fields.setdefault("correlation_id", f"session:{username}")
    with log_context(username=username, **fields):
        yield
