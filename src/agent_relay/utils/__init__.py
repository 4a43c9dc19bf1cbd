"""Utility modules for agent-relay."""

from .id import (
    generate_request_id,
    generate_session_id,
    generate_tool_call_id,
    generate_uuid,
)
from .logging import ColoredFormatter, LogEntry, LoggerContext, LogLevel, StructuredFormatter, get_logger, setup_logging
from .retry import async_retry_with_exponential_backoff, is_retryable_error

__all__ = [
    # ID generation
    "generate_uuid",
    "generate_session_id",
    "generate_request_id",
    "generate_tool_call_id",
    # Retry
    "async_retry_with_exponential_backoff",
    "is_retryable_error",
    # Logging
    "setup_logging",
    "get_logger",
    "LogLevel",
    "LogEntry",
    "StructuredFormatter",
    "ColoredFormatter",
    "LoggerContext",
]
