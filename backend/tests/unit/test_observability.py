"""Unit tests for request id correlation and JSON logging."""

import json
import logging

from channelsignal.observability.logging_config import JSONFormatter, RequestIDFilter
from channelsignal.observability.request_id import get_request_id, request_context


def make_record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="channelsignal.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Processed email",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_request_context_binds_and_resets():
    before = get_request_id()

    with request_context("req-123") as request_id:
        assert request_id == "req-123"
        assert get_request_id() == "req-123"

    assert get_request_id() == before


def test_request_context_generates_id():
    with request_context() as request_id:
        assert request_id
        assert get_request_id() == request_id


def test_json_formatter_includes_request_id_and_extras():
    record = make_record(message_id="msg-1", outcome="processed")

    with request_context("req-abc"):
        RequestIDFilter().filter(record)

    data = json.loads(JSONFormatter().format(record))

    assert data["request_id"] == "req-abc"
    assert data["message"] == "Processed email"
    assert data["level"] == "INFO"
    assert data["message_id"] == "msg-1"
    assert data["outcome"] == "processed"
    assert "user_id" not in data
