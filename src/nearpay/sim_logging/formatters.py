"""Text and JSON renderings of simulation log records."""

import json
import logging
from datetime import UTC, datetime

CONTEXT_FIELDS = ("username", "request_id", "transfer_id", "correlation_id")


class JSONFormatter(logging.Formatter):
    """One JSON object per line, carrying whichever context fields are set."""

    def __init__(
        self,
        environment: str = "development",
        context_fields: tuple[str, ...] = CONTEXT_FIELDS,
    ):
        super().__init__()
        self.environment = environment
        self.context_fields = context_fields

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "env": self.environment,
        }
        payload.update(
            (name, getattr(record, name))
            for name in self.context_fields
            if hasattr(record, name)
        )
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class DevFormatter(logging.Formatter):
    """Single-line text; the acting user is appended in brackets when known."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s [%(levelname)8s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )

    def formatMessage(self, record: logging.LogRecord) -> str:
        line = super().formatMessage(record)
        username = getattr(record, "username", None)
        return f"{line} [{username}]" if username else line
