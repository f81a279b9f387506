"""Structured logging configuration for Haulage.

Configurable via environment variables:
- HAULAGE_LOG_LEVEL: Set log level (DEBUG, INFO, WARNING, ERROR). Default: INFO
- HAULAGE_LOG_FORMAT: Set format ('text' or 'json'). Default: text

Records emitted through a TickLogger carry ``colony`` and ``tick`` fields,
which both formatters render.

Usage:
    from haulage.logging_config import configure_logging
    configure_logging()  # Call once at application startup
"""

from __future__ import annotations

import json
import logging
import os
import sys
from collections.abc import MutableMapping
from datetime import UTC, datetime
from typing import Any, ClassVar

# Attributes every LogRecord has; anything else was passed through ``extra``
_RESERVED_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "thread",
        "threadName",
        "processName",
        "process",
        "message",
        "msecs",
        "relativeCreated",
        "taskName",
    }
)

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def _tick_scope(record: logging.LogRecord) -> str:
    """Render '<colony>@<tick>' when the record carries tick context."""
    colony = getattr(record, "colony", None)
    tick = getattr(record, "tick", None)
    if colony is None and tick is None:
        return ""
    return f"{colony or '-'}@{tick if tick is not None else '-'}"


class JSONFormatter(logging.Formatter):
    """JSON lines formatter; extra fields are nested under 'extra'."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.levelno in (logging.DEBUG, logging.ERROR, logging.CRITICAL):
            log_data["source"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        extra = {k: v for k, v in record.__dict__.items() if k not in _RESERVED_ATTRS}
        if extra:
            log_data["extra"] = extra

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Text formatter.

    Format: TIMESTAMP LEVEL [LOGGER] (COLONY@TICK) MESSAGE
    For DEBUG/ERROR: includes file:line in source
    """

    LEVEL_COLORS: ClassVar[dict[str, str]] = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[1;31m",  # Bold red
    }
    RESET: ClassVar[str] = "\033[0m"

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__()
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
        level = record.levelname

        if self.use_colors:
            color = self.LEVEL_COLORS.get(level, "")
            level_str = f"{color}{level:8s}{self.RESET}"
        else:
            level_str = f"{level:8s}"

        logger_name = record.name.removeprefix("haulage.")
        scope = _tick_scope(record)
        scope_str = f" ({scope})" if scope else ""

        parts = [f"{timestamp} {level_str} [{logger_name}]{scope_str} {record.getMessage()}"]

        if record.levelno in (logging.DEBUG, logging.ERROR, logging.CRITICAL):
            parts.append(f" ({record.filename}:{record.lineno})")

        if record.exc_info:
            parts.append(f"\n{self.formatException(record.exc_info)}")

        return "".join(parts)


class TickLogger(logging.LoggerAdapter):
    """Logger adapter that stamps every record with colony and tick."""

    def __init__(self, logger: logging.Logger, colony: str, tick: int) -> None:
        super().__init__(logger, {"colony": colony, "tick": tick})

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs


def get_log_level() -> int:
    """Read HAULAGE_LOG_LEVEL, defaulting to INFO for unknown values."""
    level_name = os.environ.get("HAULAGE_LOG_LEVEL", "INFO").upper()
    return _LEVELS.get(level_name, logging.INFO)


def get_log_format() -> str:
    """Read HAULAGE_LOG_FORMAT ('text' or 'json'), defaulting to text."""
    format_name = os.environ.get("HAULAGE_LOG_FORMAT", "text").lower()
    if format_name not in ("text", "json"):
        return "text"
    return format_name


def configure_logging(
    level: int | None = None,
    format_type: str | None = None,
    use_colors: bool = True,
) -> None:
    """Configure the 'haulage' logger namespace.

    Args:
        level: Log level. If None, reads from HAULAGE_LOG_LEVEL.
        format_type: 'text' or 'json'. If None, reads from HAULAGE_LOG_FORMAT.
        use_colors: Whether to use colors in text format (only if stderr is TTY).
    """
    if level is None:
        level = get_log_level()
    if format_type is None:
        format_type = get_log_format()

    handler = logging.StreamHandler(sys.stderr)
    if format_type == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(TextFormatter(use_colors=use_colors))

    root_logger = logging.getLogger("haulage")
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.propagate = False

    root_logger.debug(
        "Logging configured: level=%s, format=%s",
        logging.getLevelName(level),
        format_type,
    )


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the haulage namespace."""
    if not name.startswith("haulage"):
        name = f"haulage.{name}"
    return logging.getLogger(name)
