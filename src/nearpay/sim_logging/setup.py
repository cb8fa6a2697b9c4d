"""Root logger configuration for the simulation process."""

import logging
import sys
from typing import TextIO

from .context import ContextFilter
from .filters import DefaultCorrelationFilter, PIIFilter
from .formatters import DevFormatter, JSONFormatter

QUIET_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool", "faker.factory")


def build_handler(
    json_output: bool = False,
    environment: str = "development",
    stream: TextIO | None = None,
) -> logging.Handler:
    """Stream handler that fills context fields before masking PII."""
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(JSONFormatter(environment) if json_output else DevFormatter())
    for log_filter in (ContextFilter(), DefaultCorrelationFilter(), PIIFilter()):
        handler.addFilter(log_filter)
    return handler


def setup_logging(
    level: str = "INFO",
    json_output: bool = False,
    environment: str = "development",
    stream: TextIO | None = None,
) -> logging.Handler:
    """Replace any root handlers with a single filtered one and return it."""
    root = logging.getLogger()
    root.handlers.clear()
    handler = build_handler(json_output, environment, stream)
    root.addHandler(handler)
    root.setLevel(level.upper())

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return handler
