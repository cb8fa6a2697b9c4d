"""Structured logging for the simulation."""

from .context import ContextFilter, LogContext, log_context, log_session_context
from .filters import DefaultCorrelationFilter, PIIFilter
from .formatters import DevFormatter, JSONFormatter
from .setup import build_handler, setup_logging

__all__ = [
    "ContextFilter",
    "DefaultCorrelationFilter",
    "DevFormatter",
    "JSONFormatter",
    "LogContext",
    "PIIFilter",
    "build_handler",
    "log_context",
    "log_session_context",
    "setup_logging",
]
