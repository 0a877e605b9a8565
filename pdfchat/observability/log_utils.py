"""
Structured logging helpers for the retrieval pipeline.

Context passed as keyword arguments is attached to the record via ``extra``
after being flattened to short strings, so a large text batch or an
unprintable object never breaks or floods a log line.

Dependencies: logging (stdlib)
System role: Logging helper functions
"""

import logging
from collections.abc import Mapping
from typing import Any

MAX_VALUE_CHARS = 500


def _render(value: Any, max_length: int = MAX_VALUE_CHARS) -> str:
    # Collections are summarized by size; document texts are never logged whole.
    try:
        if isinstance(value, str):
            text = value
        elif isinstance(value, Mapping):
            text = f"dict({len(value)} keys)"
        elif isinstance(value, (list, tuple, set)):
            text = f"{type(value).__name__}({len(value)} items)"
        else:
            text = str(value)
    except Exception as e:
        return f"<unrenderable {type(value).__name__}: {type(e).__name__}>"

    if len(text) > max_length:
        return f"{text[:max_length]}... (truncated, {len(text)} total)"
    return text


def _extra(context: Mapping[str, Any]) -> dict[str, str]:
    return {key: _render(value) for key, value in context.items()}


def log_with_context(logger: logging.Logger, level: int, message: str, **context) -> None:
    """
    Log ``message`` at ``level`` with rendered context fields.

    Args:
        logger: Logger instance
        level: Log level (logging.INFO, etc.)
        message: Log message
        **context: Fields such as source, chunk_count, elapsed_ms
    """
    logger.log(level, message, extra=_extra(context))


def log_exception_with_context(
    logger: logging.Logger,
    message: str,
    exc: BaseException,
    **context,
) -> None:
    """
    Log a failed pipeline step at ERROR with its traceback.

    Adds ``error_type`` and ``error_msg`` to the rendered context.

    Args:
        logger: Logger instance
        message: Log message
        exc: Exception that aborted the step
        **context: Fields such as stage, source, text_count
    """
    fields = _extra(context)
    fields["error_type"] = type(exc).__name__
    fields["error_msg"] = _render(str(exc))
    logger.error(message, exc_info=exc, extra=fields)
