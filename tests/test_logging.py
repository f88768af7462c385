import json
import logging

from fencemark.utils.logging import (
    JSONFormatter,
    RequestContextFilter,
    bind_request_id,
    current_request_id,
    log_security_event,
    reset_request_id,
)


def make_record(**extra):
    record = logging.LogRecord("fencemark.test", logging.INFO, __file__, 1, "Quote generated", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_filter_stamps_bound_request_id():
    token = bind_request_id("req-123")
    try:
        record = make_record()
        assert RequestContextFilter().filter(record) is True
        assert record.request_id == "req-123"
    finally:
        reset_request_id(token)
    assert current_request_id() is None


def test_filter_keeps_explicit_request_id():
    token = bind_request_id("req-123")
    try:
        record = make_record(request_id="req-explicit")
        RequestContextFilter().filter(record)
        assert record.request_id == "req-explicit"
    finally:
        reset_request_id(token)


def test_filter_outside_a_request():
    record = make_record()
    RequestContextFilter().filter(record)
    assert not hasattr(record, "request_id")


def test_json_formatter_copies_context_fields():
    record = make_record(organization_id="org-1", user_id="user-1", request_id="req-1", unrelated="x")
    data = json.loads(JSONFormatter().format(record))

    assert data["message"] == "Quote generated"
    assert data["organization_id"] == "org-1"
    assert data["request_id"] == "req-1"
    assert "unrelated" not in data


def test_security_events_are_tagged(caplog):
    logger = logging.getLogger("fencemark.security")
    with caplog.at_level(logging.WARNING, logger="fencemark.security"):
        log_security_event("failed_login", {"email": "owner@acme-fencing.com"}, logger)

    [record] = caplog.records
    assert record.security_event is True
    assert record.event_type == "failed_login"
    assert record.getMessage() == "SECURITY EVENT: failed_login"


def test_response_echoes_request_id(client):
    response = client.get("/health", headers={"X-Request-ID": "trace-42"})
    assert response.headers["X-Request-ID"] == "trace-42"
    assert "X-Process-Time" in response.headers
