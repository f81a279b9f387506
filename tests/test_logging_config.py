"""Tests for logging configuration module."""

from __future__ import annotations

import json
import logging
import os
from io import StringIO
from unittest.mock import patch

from haulage.logging_config import (
    JSONFormatter,
    TextFormatter,
    TickLogger,
    configure_logging,
    get_log_format,
    get_log_level,
    get_logger,
)


def make_record(
    name: str = "haulage.test",
    level: int = logging.INFO,
    msg: str = "Test message",
    args: tuple = (),
    pathname: str = "test.py",
    lineno: int = 42,
) -> logging.LogRecord:
    return logging.LogRecord(
        name=name,
        level=level,
        pathname=pathname,
        lineno=lineno,
        msg=msg,
        args=args,
        exc_info=None,
    )


class TestGetLogLevel:
    """Tests for get_log_level function."""

    def test_default_is_info(self) -> None:
        """Default log level should be INFO."""
        with patch.dict(os.environ, {}, clear=True):
            assert get_log_level() == logging.INFO

    def test_debug_level(self) -> None:
        """HAULAGE_LOG_LEVEL=DEBUG should return logging.DEBUG."""
        with patch.dict(os.environ, {"HAULAGE_LOG_LEVEL": "DEBUG"}):
            assert get_log_level() == logging.DEBUG

    def test_warn_alias(self) -> None:
        """WARN should work as alias for WARNING."""
        with patch.dict(os.environ, {"HAULAGE_LOG_LEVEL": "WARN"}):
            assert get_log_level() == logging.WARNING

    def test_case_insensitive(self) -> None:
        with patch.dict(os.environ, {"HAULAGE_LOG_LEVEL": "error"}):
            assert get_log_level() == logging.ERROR

    def test_invalid_level_defaults_to_info(self) -> None:
        with patch.dict(os.environ, {"HAULAGE_LOG_LEVEL": "LOUD"}):
            assert get_log_level() == logging.INFO


class TestGetLogFormat:
    """Tests for get_log_format function."""

    def test_default_is_text(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            assert get_log_format() == "text"

    def test_json_format(self) -> None:
        with patch.dict(os.environ, {"HAULAGE_LOG_FORMAT": "JSON"}):
            assert get_log_format() == "json"

    def test_invalid_format_defaults_to_text(self) -> None:
        with patch.dict(os.environ, {"HAULAGE_LOG_FORMAT": "xml"}):
            assert get_log_format() == "text"


class TestJSONFormatter:
    """Tests for JSON log formatter."""

    def test_formats_as_valid_json(self) -> None:
        data = json.loads(JSONFormatter().format(make_record(name="test.logger")))

        assert data["message"] == "Test message"
        assert data["level"] == "INFO"
        assert data["logger"] == "test.logger"
        assert "timestamp" in data

    def test_includes_source_for_debug(self) -> None:
        """Debug logs should include source location."""
        record = make_record(level=logging.DEBUG, pathname="/path/to/file.py", lineno=100)

        data = json.loads(JSONFormatter().format(record))

        assert data["source"]["line"] == 100
        assert data["source"]["file"] == "/path/to/file.py"

    def test_no_source_for_info(self) -> None:
        data = json.loads(JSONFormatter().format(make_record()))

        assert "source" not in data

    def test_formats_message_with_args(self) -> None:
        record = make_record(msg="Matched %d of %s", args=(3, "W1N1"))

        data = json.loads(JSONFormatter().format(record))

        assert data["message"] == "Matched 3 of W1N1"

    def test_carries_tick_extras(self) -> None:
        """Colony and tick from a TickLogger end up under 'extra'."""
        record = make_record()
        record.colony = "W1N1"
        record.tick = 42

        data = json.loads(JSONFormatter().format(record))

        assert data["extra"] == {"colony": "W1N1", "tick": 42}


class TestTextFormatter:
    """Tests for text log formatter."""

    def test_formats_basic_message(self) -> None:
        output = TextFormatter(use_colors=False).format(make_record())

        assert "Test message" in output
        assert "INFO" in output

    def test_shortens_logger_name(self) -> None:
        """Logger names under haulage should be shortened."""
        record = make_record(name="haulage.logistics.network")

        output = TextFormatter(use_colors=False).format(record)

        assert "[logistics.network]" in output
        assert "haulage.logistics.network" not in output

    def test_includes_source_for_debug(self) -> None:
        record = make_record(level=logging.DEBUG, lineno=99)
        record.filename = "test.py"

        output = TextFormatter(use_colors=False).format(record)

        assert "test.py:99" in output

    def test_renders_tick_scope(self) -> None:
        record = make_record()
        record.colony = "W1N1"
        record.tick = 7

        output = TextFormatter(use_colors=False).format(record)

        assert "(W1N1@7)" in output


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def test_configures_haulage_logger(self) -> None:
        configure_logging(level=logging.DEBUG, format_type="text")
        logger = logging.getLogger("haulage")

        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, TextFormatter)

    def test_uses_json_formatter(self) -> None:
        configure_logging(level=logging.INFO, format_type="json")
        logger = logging.getLogger("haulage")

        assert isinstance(logger.handlers[0].formatter, JSONFormatter)

    def test_reads_from_environment(self) -> None:
        with patch.dict(
            os.environ, {"HAULAGE_LOG_LEVEL": "WARNING", "HAULAGE_LOG_FORMAT": "json"}
        ):
            configure_logging()
        logger = logging.getLogger("haulage")

        assert logger.level == logging.WARNING
        assert isinstance(logger.handlers[0].formatter, JSONFormatter)


class TestGetLogger:
    """Tests for get_logger convenience function."""

    def test_prefixes_haulage(self) -> None:
        assert get_logger("my_module").name == "haulage.my_module"

    def test_preserves_haulage_prefix(self) -> None:
        assert get_logger("haulage.engine").name == "haulage.engine"


class TestTickLogger:
    """Tests for the tick-scoped adapter."""

    def test_stamps_colony_and_tick(self) -> None:
        buffer = StringIO()
        handler = logging.StreamHandler(buffer)
        handler.setFormatter(JSONFormatter())
        logger = logging.getLogger("haulage.test_tick_logger")
        logger.handlers.clear()
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
        logger.propagate = False

        TickLogger(logger, "W1N1", 12).info("Pass done", extra={"matched": 2})

        data = json.loads(buffer.getvalue().strip())
        assert data["message"] == "Pass done"
        assert data["extra"] == {"colony": "W1N1", "tick": 12, "matched": 2}
