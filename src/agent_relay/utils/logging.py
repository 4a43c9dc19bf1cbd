"""Logging configuration for agent-relay.

Orchestration steps are logged with the session and agent they belong to.
Records may carry a ``context`` mapping (see ``LoggerContext``) which the
formatters in this module render alongside the message.
"""

import json
import logging
import sys
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class LogLevel(str, Enum):
    """Log level enumeration."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogEntry(BaseModel):
    """Structured log entry.

    Attributes:
        timestamp: Log timestamp
        level: Log level
        message: Log message
        logger: Logger name
        session_id: Session the record belongs to, if known
        agent: Agent identifier the record belongs to, if known
        context: Additional context
    """

    timestamp: str
    level: str
    message: str
    logger: str
    session_id: str | None = None
    agent: str | None = None
    context: dict[str, Any] = Field(default_factory=dict)


def _record_context(record: logging.LogRecord) -> dict[str, Any]:
    context = getattr(record, "context", None)
    return dict(context) if isinstance(context, dict) else {}


class StructuredFormatter(logging.Formatter):
    """Formatter for structured log output (JSON lines or plain text)."""

    def __init__(self, format_type: str = "json") -> None:
        """Initialize the structured formatter.

        Args:
            format_type: Output format ("json" or "text")
        """
        super().__init__()
        self.format_type = format_type

    def format(self, record: logging.LogRecord) -> str:
        context = _record_context(record)
        entry = LogEntry(
            timestamp=datetime.fromtimestamp(record.created).isoformat(),
            level=record.levelname,
            message=record.getMessage(),
            logger=record.name,
            session_id=context.pop("session_id", None),
            agent=context.pop("agent", None),
            context=context,
        )

        if record.exc_info:
            entry.context["exception"] = self.formatException(record.exc_info)

        if self.format_type == "json":
            return json.dumps(entry.model_dump(exclude_none=True), default=str)

        scope = ""
        if entry.session_id or entry.agent:
            scope = f" [{entry.session_id or '-'}/{entry.agent or '-'}]"
        return f"{entry.timestamp} [{entry.level}] {entry.logger}{scope}: {entry.message}"


class ColoredFormatter(logging.Formatter):
    """Colored console formatter using ANSI escape codes."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
        "RESET": "\033[0m",
    }

    def format(self, record: logging.LogRecord) -> str:
        level_color = self.COLORS.get(record.levelname, "")
        reset_color = self.COLORS["RESET"]
        level_name = f"{level_color}{record.levelname}{reset_color}"

        context = _record_context(record)
        suffix = ""
        if context:
            pairs = " ".join(f"{key}={value}" for key, value in context.items())
            suffix = f" ({pairs})"

        message = f"[{level_name}] {record.name}: {record.getMessage()}{suffix}"
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return message


def setup_logging(
    level: str | LogLevel = "INFO",
    format_type: str = "text",
    use_colors: bool = True,
    log_file: str | None = None,
) -> None:
    """Set up logging for agent-relay.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_type: Output format ("json", "text")
        use_colors: Whether to use colors in console output
        log_file: Optional file to write logs to
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper() if isinstance(level, str) else level.value))
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    if use_colors and format_type == "text":
        console_handler.setFormatter(ColoredFormatter())
    else:
        console_handler.setFormatter(StructuredFormatter(format_type=format_type))
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(StructuredFormatter(format_type=format_type))
        root_logger.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance.

    Args:
        name: Logger name (usually __name__ of the module)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


class LoggerContext:
    """Context manager that stamps context onto every record of a logger.

    Example:
        with LoggerContext(logger, {"session_id": "s-1", "agent": "billing"}):
            logger.info("Routing tool call")
    """

    def __init__(self, logger: logging.Logger, context: dict[str, Any]) -> None:
        self.logger = logger
        self.context = context
        self.old_factory: Any = None

    def __enter__(self) -> "LoggerContext":
        self.old_factory = self.logger.makeRecord

        def make_record_with_context(
            name: str,
            level: int,
            fn: str,
            lno: int,
            msg: str,
            args: Any,
            exc_info: Any,
            func: str | None = None,
            extra: dict[str, Any] | None = None,
            sinfo: str | None = None,
        ) -> logging.LogRecord:
            record = self.old_factory(  # type: ignore
                name, level, fn, lno, msg, args, exc_info, func, extra, sinfo
            )
            if not hasattr(record, "context"):
                record.context = {}
            record.context.update(self.context)
            return record

        self.logger.makeRecord = make_record_with_context  # type: ignore[method-assign]
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self.old_factory:
            self.logger.makeRecord = self.old_factory  # type: ignore[method-assign]
