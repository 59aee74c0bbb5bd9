"""
Unit Tests: Structured Logging
"""

import io
import json
import logging
import sys

import pytest

from inflight.core.errors import PermanentTransportError
from inflight.observability.logging import (
    ContextFormatter,
    JsonFormatter,
    LogLevel,
    current_log_context,
    log_context,
    setup_logging,
)


def make_record(msg="hello %s", args=("world",), **extra):
    record = logging.LogRecord("inflight.test", logging.INFO, __file__, 1, msg, args, None)
    record.__dict__.update(extra)
    return record


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestJsonFormatter:
    """Tests for JsonFormatter."""

    def test_base_fields(self):
        """Test timestamp, level, logger and message fields."""
        data = json.loads(JsonFormatter().format(make_record()))
        assert data["message"] == "hello world"
        assert data["level"] == "INFO"
        assert data["logger"] == "inflight.test"
        assert "@timestamp" in data

    def test_extras_included(self):
        """Test record extras are emitted."""
        data = json.loads(JsonFormatter().format(make_record(attempt=3)))
        assert data["attempt"] == 3

    def test_context_fields_included(self):
        """Test log_context fields are emitted."""
        with log_context(operation="put", key="p/abc"):
            data = json.loads(JsonFormatter().format(make_record()))
        assert data["operation"] == "put"
        assert data["key"] == "p/abc"

    def test_exception_rendered(self):
        """Test exc_info is rendered as text."""
        try:
            raise ValueError("boom")
        except ValueError:
            record = logging.LogRecord(
                "inflight.test", logging.ERROR, __file__, 1, "failed", (), sys.exc_info(),
            )
        data = json.loads(JsonFormatter().format(record))
        assert "ValueError: boom" in data["exception"]


class TestLogContext:
    """Tests for log_context nesting."""

    def test_nested_and_restored(self):
        """Test nested contexts merge and unwind."""
        assert current_log_context() == {}
        with log_context(operation="get"):
            with log_context(key="p/n"):
                assert current_log_context() == {"operation": "get", "key": "p/n"}
            assert current_log_context() == {"operation": "get"}
        assert current_log_context() == {}


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_json_output(self, restore_root_logger):
        """Test level filtering with JSON output."""
        stream = io.StringIO()
        setup_logging(LogLevel.INFO, json_output=True, stream=stream)

        logging.getLogger("inflight.test").debug("hidden")
        logging.getLogger("inflight.test").info("shown")

        lines = stream.getvalue().splitlines()
        assert len(lines) == 1
        assert json.loads(lines[0])["message"] == "shown"

    def test_sdk_loggers_quieted(self, restore_root_logger):
        """Test SDK loggers are held at WARNING."""
        setup_logging(LogLevel.DEBUG, json_output=False, stream=io.StringIO())
        assert logging.getLogger("botocore").level == logging.WARNING

    def test_level_by_name(self, restore_root_logger):
        """Test levels given by name; handler replaces existing ones."""
        handler = setup_logging("warning", stream=io.StringIO())
        assert handler.level == logging.WARNING
        assert logging.getLogger().handlers == [handler]


class TestErrorFields:
    """Tests for flattening logged InflightErrors."""

    def test_error_code_lifted(self):
        """Test logged error dicts are flattened."""
        error = PermanentTransportError.from_cause("get", "p/n", KeyError("n"))
        data = json.loads(JsonFormatter().format(make_record(error=error.to_dict())))

        assert data["error_code"] == "TRANSPORT_PERMANENT"
        assert data["error_id"] == error.error_id
        assert data["retryable"] is False
        assert data["error"]["context"] == {"operation": "get", "key": "p/n"}


class TestContextFormatter:
    """Tests for plain-text output."""

    def test_fields_appended(self):
        """Test context fields trail the text line."""
        with log_context(operation="put", key="p/abc"):
            line = ContextFormatter().format(make_record())
        assert line.endswith("inflight.test: hello world operation=put key=p/abc")

    def test_no_context(self):
        """Test lines without context are unchanged."""
        assert ContextFormatter().format(make_record()).endswith("hello world")
