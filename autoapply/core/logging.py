"""Structured logging for the auto-apply engine.

Log lines are key=value pairs. Drafting context (grant, section, category,
generation mode) is promoted to top-level keys so a single application run
can be followed across the pipeline.
"""

import logging
import sys
from typing import Any

# Context keys lifted from `extra` onto the record, in output order
CONTEXT_FIELDS = ("grant_id", "section_id", "category", "mode")


def _format_value(value: Any) -> str:
    text = str(value)
    if not text or any(ch.isspace() for ch in text):
        return f'"{text}"'
    return text


class StructuredFormatter(logging.Formatter):
    """Key=value structured log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as structured output."""
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "module": record.module,
            "function": record.funcName,
        }
        for key in CONTEXT_FIELDS:
            if hasattr(record, key):
                log_data[key] = getattr(record, key)

        if hasattr(record, "extra_data"):
            log_data.update(record.extra_data)

        line = " ".join(f"{k}={_format_value(v)}" for k, v in log_data.items())
        line = f"{line} message={_format_value(record.getMessage())}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def _level_from_settings() -> int:
    try:
        from autoapply.core.config import get_settings

        settings = get_settings()
    except Exception:
        # Settings may be unreadable while the config module itself is loading
        return logging.INFO

    if settings.LOG_LEVEL:
        level = logging.getLevelName(settings.LOG_LEVEL.upper())
        return level if isinstance(level, int) else logging.INFO
    return logging.DEBUG if settings.AUTOAPPLY_ENV == "dev" else logging.INFO


def get_logger(name: str) -> logging.Logger:
    """
    Get a configured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger writing structured lines to stdout
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(StructuredFormatter())
        logger.addHandler(handler)
        logger.setLevel(_level_from_settings())

    return logger


def log_with_context(logger: logging.Logger, level: int, msg: str, **kwargs: Any) -> None:
    """
    Log with drafting context.

    Args:
        logger: Logger instance
        level: Log level (logging.INFO, etc.)
        msg: Log message
        **kwargs: Context fields; grant_id, section_id, category and mode are
            promoted to top-level keys, the rest are appended as-is
    """
    extra: dict[str, Any] = {key: kwargs.pop(key) for key in CONTEXT_FIELDS if key in kwargs}
    extra["extra_data"] = kwargs
    logger.log(level, msg, extra=extra)
