"""Unit tests for structured logging"""

import io
import json
import logging

import pytest
from pesa_shield.infrastructure.observability.logging import CustomJsonFormatter, log_alert_event, log_assessment


@pytest.fixture
def audit_stream():
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s", service_name="test-svc"))
    audit = logging.getLogger("pesa_shield.audit")
    previous_level = audit.level
    audit.addHandler(handler)
    audit.setLevel(logging.INFO)
    try:
        yield stream
    finally:
        audit.removeHandler(handler)
        audit.setLevel(previous_level)


def records(stream: io.StringIO) -> list:
    return [json.loads(line) for line in stream.getvalue().splitlines()]


def test_assessment_record_is_json_with_service_metadata(audit_stream):
    log_assessment("tx_1", "M-Pesa", 0.123456, "low", False, 1.23456)

    record = records(audit_stream)[-1]
    assert record["message"] == "Transaction assessed"
    assert record["service"] == "test-svc"
    assert record["level"] == "INFO"
    assert record["risk_score"] == 0.1235
    assert record["duration_ms"] == 1.235
    assert record["alert_generated"] is False
    assert record["timestamp"]


def test_alert_event_record(audit_stream):
    log_alert_event("resolved", "alert_abc", "resolved", actor="analyst@pesa.tz")
    log_alert_event("emitted", "alert_def", "warning")

    resolved, emitted = records(audit_stream)[-2:]
    assert resolved["step"] == "alert_resolved"
    assert resolved["actor"] == "analyst@pesa.tz"
    assert emitted["alert_id"] == "alert_def"
    assert "actor" not in emitted
