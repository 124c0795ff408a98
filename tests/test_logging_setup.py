"""Test request id propagation into log records."""
import logging

from core.logging_setup import RequestIdFilter, get_request_id, request_id_context


def make_record():
    return logging.LogRecord("test", logging.INFO, __file__, 1, "msg", None, None)


def test_default_request_id():
    assert get_request_id() == "-"
    record = make_record()
    assert RequestIdFilter().filter(record)
    assert record.request_id == "-"


def test_filter_uses_current_request_id():
    token = request_id_context.set("req-42")
    try:
        assert get_request_id() == "req-42"
        record = make_record()
        RequestIdFilter().filter(record)
        assert record.request_id == "req-42"
    finally:
        request_id_context.reset(token)
