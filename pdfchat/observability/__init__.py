"""
Observability package.

Logging configuration, structured-log helpers and request correlation.
"""

from pdfchat.observability.correlation import (
    clear_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from pdfchat.observability.log_utils import log_exception_with_context, log_with_context
from pdfchat.observability.logger import configure_logging, get_logger

__all__ = [
    "clear_correlation_id",
    "configure_logging",
    "get_correlation_id",
    "get_logger",
    "log_exception_with_context",
    "log_with_context",
    "set_correlation_id",
]
