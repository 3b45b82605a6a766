"""Tests for logging configuration and formatters."""

import json
import logging
import sys

import pytest

from build_notifier.logging import ComponentLoggerAdapter, get_logger
from build_notifier.logging.config import (
    ContextualFilter,
    JSONFormatter,
    KeyValueFormatter,
    configure_logging,
)
from build_notifier.logging.context import log_context


@pytest.fixture
def logger():
    """Create a test logger with no handlers."""
    test_logger = logging.getLogger("test_logger")
    test_logger.setLevel(logging.DEBUG)
    test_logger.handlers.clear()

    yield test_logger

    test_logger.handlers.clear()


@pytest.fixture
def restore_root_logger():
    """Put the root logger back after configure_logging replaced its handlers."""
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    yield root_logger
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)


def make_record(logger, message="Test message", **extra):
    return logger.makeRecord("test", logging.INFO, "test.py", 1, message, (), None, extra=extra or None)


def test_json_formatter_basic(logger):
    """JSONFormatter produces valid JSON with mandatory fields."""
    log_obj = json.loads(JSONFormatter().format(make_record(logger)))

    assert log_obj["level"] == "INFO"
    assert log_obj["message"] == "Test message"
    assert log_obj["logger"] == "test"
    assert "timestamp" in log_obj


def test_json_formatter_with_extra_fields(logger):
    """JSONFormatter includes extra fields."""
    record = make_record(logger, event="notification.endpoint.sent", payload_bytes=42, flag=True)
    log_obj = json.loads(JSONFormatter().format(record))

    assert log_obj["event"] == "notification.endpoint.sent"
    assert log_obj["payload_bytes"] == 42
    assert log_obj["flag"] is True
    assert "name" not in log_obj
    assert "msg" not in log_obj


def test_json_formatter_stringifies_unknown_types(logger):
    record = make_record(logger, endpoint=object())
    log_obj = json.loads(JSONFormatter().format(record))
    assert isinstance(log_obj["endpoint"], str)


def test_json_formatter_includes_exception(logger):
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        record = logger.makeRecord("test", logging.ERROR, "test.py", 1, "Failed", (), sys.exc_info())

    log_obj = json.loads(JSONFormatter().format(record))
    assert "RuntimeError: boom" in log_obj["exc_info"]


def test_timestamp_format_in_json(logger):
    """Timestamps are ISO-8601 UTC with milliseconds and a Z suffix."""
    timestamp = json.loads(JSONFormatter().format(make_record(logger)))["timestamp"]

    assert timestamp.endswith("Z")
    assert "T" in timestamp
    assert len(timestamp) == 24  # 2025-11-04T10:30:00.123Z


def test_contextual_filter_adds_static_fields(logger):
    record = make_record(logger)
    ContextualFilter(service="test-service", environment="test").filter(record)

    assert record.service == "test-service"
    assert record.environment == "test"


def test_contextual_filter_defaults(logger):
    record = make_record(logger)
    ContextualFilter().filter(record)

    assert record.service == "build-notifier"
    assert record.environment == "local"


def test_contextual_filter_adds_context_fields(logger):
    with log_context(phase="STARTED", job="team/app", build_number=42):
        record = make_record(logger)
        ContextualFilter().filter(record)

    assert record.phase == "STARTED"
    assert record.job == "team/app"
    assert record.build_number == 42


def test_explicit_extra_wins_over_context(logger):
    with log_context(endpoint="HTTP:http://a/"):
        record = make_record(logger, endpoint="TCP:b:1")
        ContextualFilter().filter(record)

    assert record.endpoint == "TCP:b:1"


def test_json_formatter_with_context(logger):
    """Full pipeline: context + filter + JSON formatter."""
    with log_context(phase="COMPLETED", endpoint="HTTP:http://a/"):
        record = make_record(logger, "Notified endpoint", event="notification.endpoint.sent")
        ContextualFilter(environment="test").filter(record)
        log_obj = json.loads(JSONFormatter().format(record))

    assert log_obj["message"] == "Notified endpoint"
    assert log_obj["event"] == "notification.endpoint.sent"
    assert log_obj["service"] == "build-notifier"
    assert log_obj["environment"] == "test"
    assert log_obj["phase"] == "COMPLETED"
    assert log_obj["endpoint"] == "HTTP:http://a/"


def test_key_value_formatter(logger):
    formatter = KeyValueFormatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    record = make_record(
        logger,
        event="notification.endpoint.failed",
        error="connection refused",
        retried=False,
        url=None,
    )
    ContextualFilter().filter(record)

    output = formatter.format(record)

    assert "[INFO] test: Test message" in output
    assert "event=notification.endpoint.failed" in output
    assert 'error="connection refused"' in output
    assert "retried=false" in output
    assert "url=null" in output
    assert "service=" not in output


def test_get_logger_with_component(logger):
    adapter = get_logger("test_logger", component="transport")

    assert isinstance(adapter, ComponentLoggerAdapter)
    assert adapter.process("msg", {"extra": {"event": "x"}}) == (
        "msg",
        {"extra": {"component": "transport", "event": "x"}},
    )


def test_get_logger_call_extra_wins():
    adapter = get_logger("test_logger", component="transport")
    _, kwargs = adapter.process("msg", {"extra": {"component": "override"}})
    assert kwargs["extra"]["component"] == "override"


def test_get_logger_without_component():
    assert isinstance(get_logger("test_logger"), logging.Logger)


def test_configure_logging_invalid_level():
    with pytest.raises(ValueError, match="Invalid log level"):
        configure_logging(level="INVALID")


def test_configure_logging_invalid_format():
    with pytest.raises(ValueError, match="Invalid log format"):
        configure_logging(format_type="invalid")


@pytest.mark.parametrize(
    "format_type,formatter_class",
    [("json", JSONFormatter), ("key-value", KeyValueFormatter)],
)
def test_configure_logging_formats(restore_root_logger, format_type, formatter_class):
    configure_logging(level="debug", format_type=format_type, environment="test")

    assert restore_root_logger.level == logging.DEBUG
    assert len(restore_root_logger.handlers) == 1

    handler = restore_root_logger.handlers[0]
    assert isinstance(handler.formatter, formatter_class)
    assert any(isinstance(f, ContextualFilter) for f in handler.filters)
