"""Unit tests for structured logging."""

import json
import logging

from jobportal.logging_config import (
    REDACTED,
    JsonFormatter,
    RequestIdFilter,
    SecretRedactionFilter,
    request_id_var,
)


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("jobportal.test", logging.WARNING, __file__, 1, "Email delivery failed", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_extra_fields():
    record = _record(account_id="abc", kind="delivery_failed")

    payload = json.loads(JsonFormatter().format(record))

    assert payload["message"] == "Email delivery failed"
    assert payload["level"] == "WARNING"
    assert payload["account_id"] == "abc"
    assert payload["kind"] == "delivery_failed"


def test_request_id_filter_reads_context():
    token = request_id_var.set("req-42")
    try:
        record = _record()
        RequestIdFilter().filter(record)
    finally:
        request_id_var.reset(token)

    assert record.request_id == "req-42"
    assert json.loads(JsonFormatter().format(record))["request_id"] == "req-42"


def test_request_id_filter_placeholder_outside_requests():
    record = _record()
    RequestIdFilter().filter(record)

    assert record.request_id == "-"
    assert "request_id" not in json.loads(JsonFormatter().format(record))


def test_secret_fields_are_masked():
    record = _record(
        account_id="abc",
        code="482913",
        token="a" * 40,
        password="Secret123",
        reset_url="http://localhost:5173/reset-password/" + "b" * 40,
    )

    assert SecretRedactionFilter().filter(record) is True

    payload = json.loads(JsonFormatter().format(record))
    assert payload["account_id"] == "abc"
    for key in ("code", "token", "password", "reset_url"):
        assert payload[key] == REDACTED
    assert "482913" not in JsonFormatter().format(record)


def test_redaction_leaves_ordinary_records_alone():
    record = _record(purpose="verification")

    SecretRedactionFilter().filter(record)

    assert record.purpose == "verification"
    assert not hasattr(record, "code")


def test_json_formatter_stringifies_unserializable_extras():
    record = _record(account_id=object())

    payload = json.loads(JsonFormatter().format(record))

    assert payload["account_id"].startswith("<object object")
