"""Smoke tests for structured logging output from producers.

Supports: the JSON log shape emitted through ``stompline.core.logging``.
"""

import json
import logging
import sys

import pytest

from stompline.core.logging import JSONFormatter, get_logger


class LogCapture(logging.Handler):
    """Custom handler to capture log records for testing."""

    def __init__(self):
        super().__init__()
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


@pytest.fixture
def log_capture():
    """Capture everything logged under the ``stompline`` logger."""
    logger = logging.getLogger("stompline")
    handler = LogCapture()
    handler.setLevel(logging.DEBUG)

    original_handlers = logger.handlers.copy()
    original_level = logger.level

    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)

    yield handler

    logger.removeHandler(handler)
    logger.handlers = original_handlers
    logger.level = original_level


def test_failover_logs_transport_failure_with_fields(producer, broker_a, log_capture):
    broker_a.up = False

    producer.send("/queue/logged", {}, "x")

    failures = [r for r in log_capture.records if "Transport failure" in r.getMessage()]
    assert len(failures) == 1
    record = failures[0]
    assert record.levelno == logging.WARNING
    assert record.destination == "/queue/logged"
    assert record.group == 0
    assert record.attempt == 1

    switches = [r for r in log_capture.records if "Switching" in r.getMessage()]
    assert switches and switches[0].group == 1


def test_flush_logged_with_depth(producer, log_capture):
    producer.begin()
    producer.send("/q", {}, "a")
    producer.send("/q", {}, "b")
    producer.commit()

    buffered = [r for r in log_capture.records if "Buffered frame" in r.getMessage()]
    assert [r.depth for r in buffered] == [1, 1]

    flushes = [r for r in log_capture.records if "Flushing" in r.getMessage()]
    assert len(flushes) == 1
    assert "2 buffered frames" in flushes[0].getMessage()
    assert flushes[0].depth == 0


def test_json_formatter_output(producer, broker_a, log_capture):
    broker_a.up = False
    producer.send("/queue/json", {}, "x")

    record = next(r for r in log_capture.records if "Transport failure" in r.getMessage())
    log_data = json.loads(JSONFormatter().format(record))

    assert log_data["level"] == "WARNING"
    assert log_data["logger"] == "stompline.delivery"
    assert log_data["destination"] == "/queue/json"
    assert log_data["attempt"] == 1
    assert "timestamp" in log_data


def test_json_formatter_includes_exception():
    try:
        raise RuntimeError("kaboom")
    except RuntimeError:
        record = logging.getLogger("stompline.test").makeRecord(
            "stompline.test", logging.ERROR, __file__, 1, "failed", (), sys.exc_info()
        )
    log_data = json.loads(JSONFormatter().format(record))
    assert "kaboom" in log_data["exception"]


def test_get_logger_configures_once():
    logger = get_logger("stompline.test.once", level=logging.DEBUG)
    again = get_logger("stompline.test.once", level=logging.DEBUG)
    assert logger is again
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0].formatter, JSONFormatter)
    assert logger.propagate is False