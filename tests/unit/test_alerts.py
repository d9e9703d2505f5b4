"""Unit tests for alert construction, the alert state machine and the live feed"""

import pytest
from datetime import datetime, timedelta
from pesa_shield.domain.alerts import alert_type_for, build_alert_message, create_alert, should_alert
from pesa_shield.domain.models import AlertType, RiskAssessment, RiskLevel, Transaction
from pesa_shield.infrastructure.notifications.broadcaster import AlertBroadcaster

NOW = datetime(2026, 3, 10, 14, 0)


def assessment(level: RiskLevel, score: float) -> RiskAssessment:
    return RiskAssessment(
        transaction_id="tx_1",
        risk_score=score,
        risk_level=level,
        risk_factors={"amount_anomaly": score},
        timestamp=NOW,
        recommendations=[],
    )


@pytest.fixture
def transaction() -> Transaction:
    return Transaction(transaction_id="tx_1", amount=-850_000, platform="HaloPesa", type="send", timestamp=NOW)


@pytest.mark.parametrize(
    "level,expected",
    [
        (RiskLevel.CRITICAL, AlertType.CRITICAL),
        (RiskLevel.HIGH, AlertType.SUSPICIOUS),
        (RiskLevel.MEDIUM, AlertType.WARNING),
        (RiskLevel.LOW, AlertType.INFO),
    ],
)
def test_alert_type_mapping(level, expected):
    assert alert_type_for(level) == expected


def test_should_alert_from_medium_up():
    assert not should_alert(assessment(RiskLevel.LOW, 0.5))
    assert should_alert(assessment(RiskLevel.MEDIUM, 0.6))
    assert should_alert(assessment(RiskLevel.HIGH, 0.8))
    assert should_alert(assessment(RiskLevel.CRITICAL, 0.95))


def test_alert_messages(transaction):
    assert build_alert_message(transaction, assessment(RiskLevel.CRITICAL, 0.9712)) == (
        "CRITICAL FRAUD ALERT: Suspicious HaloPesa transaction of TSh 850,000 detected. Risk Score: 97.1%"
    )
    assert build_alert_message(transaction, assessment(RiskLevel.HIGH, 0.85)) == (
        "HIGH RISK: HaloPesa transaction of TSh 850,000 requires verification. Risk Score: 85.0%"
    )
    assert build_alert_message(transaction, assessment(RiskLevel.MEDIUM, 0.6)) == (
        "MEDIUM RISK: HaloPesa transaction of TSh 850,000 flagged for monitoring. Risk Score: 60.0%"
    )
    assert build_alert_message(transaction, assessment(RiskLevel.LOW, 0.2)) == (
        "LOW RISK: HaloPesa transaction of TSh 850,000 processed safely."
    )


def test_create_alert_starts_unread_and_unresolved(transaction):
    alert = create_alert(transaction, assessment(RiskLevel.HIGH, 0.85), NOW)

    assert alert.alert_id.startswith("alert_")
    assert alert.alert_type == AlertType.SUSPICIOUS
    assert alert.timestamp == NOW
    assert not alert.is_read
    assert not alert.is_resolved
    assert alert.should_notify
    assert alert.notification_priority == 4


def test_alert_ids_are_unique(transaction):
    ids = {create_alert(transaction, assessment(RiskLevel.MEDIUM, 0.6), NOW).alert_id for _ in range(50)}

    assert len(ids) == 50


def test_alert_state_machine(transaction):
    alert = create_alert(transaction, assessment(RiskLevel.CRITICAL, 0.97), NOW)

    alert.mark_as_read()
    assert alert.is_read and not alert.is_resolved
    assert alert.alert_type == AlertType.CRITICAL

    alert.resolve("analyst@pesa.tz", "Customer confirmed transfer", NOW + timedelta(hours=1))
    assert alert.is_read and alert.is_resolved
    assert alert.alert_type == AlertType.RESOLVED
    assert alert.resolved_by == "analyst@pesa.tz"
    assert alert.resolved_at == NOW + timedelta(hours=1)
    assert alert.notification_priority == 0
    assert not alert.should_notify
    # Original level is kept on the assessment
    assert alert.risk_assessment.risk_level == RiskLevel.CRITICAL


def test_resolve_from_unread_implies_read(transaction):
    alert = create_alert(transaction, assessment(RiskLevel.MEDIUM, 0.6), NOW)

    alert.resolve("analyst", "False positive", NOW)

    assert alert.is_read


def test_alert_urgency(transaction):
    suspicious = create_alert(transaction, assessment(RiskLevel.HIGH, 0.85), NOW)
    critical = create_alert(transaction, assessment(RiskLevel.CRITICAL, 0.97), NOW)

    assert suspicious.is_urgent(NOW + timedelta(minutes=10))
    assert not suspicious.is_urgent(NOW + timedelta(hours=2))
    assert critical.is_urgent(NOW + timedelta(days=3))


def test_broadcaster_fans_out_to_current_subscribers(transaction):
    broadcaster = AlertBroadcaster()
    first, second = [], []
    broadcaster.subscribe(first.append)
    broadcaster.subscribe(second.append)
    alert = create_alert(transaction, assessment(RiskLevel.MEDIUM, 0.6), NOW)

    delivered = broadcaster.publish(alert)

    assert delivered == 2
    assert first == [alert]
    assert second == [alert]


def test_broadcaster_has_no_replay(transaction):
    broadcaster = AlertBroadcaster()
    early = create_alert(transaction, assessment(RiskLevel.MEDIUM, 0.6), NOW)
    broadcaster.publish(early)

    received = []
    broadcaster.subscribe(received.append)
    late = create_alert(transaction, assessment(RiskLevel.HIGH, 0.85), NOW)
    broadcaster.publish(late)

    assert received == [late]


def test_broadcaster_cancelled_subscription_stops_delivery(transaction):
    broadcaster = AlertBroadcaster()
    received = []
    subscription = broadcaster.subscribe(received.append)
    subscription.cancel()

    assert broadcaster.publish(create_alert(transaction, assessment(RiskLevel.MEDIUM, 0.6), NOW)) == 0
    assert received == []
    assert broadcaster.subscriber_count == 0


def test_broadcaster_isolates_failing_subscriber(transaction):
    broadcaster = AlertBroadcaster()

    def explode(alert):
        raise RuntimeError("dashboard went away")

    received = []
    broadcaster.subscribe(explode)
    broadcaster.subscribe(received.append)

    assert broadcaster.publish(create_alert(transaction, assessment(RiskLevel.MEDIUM, 0.6), NOW)) == 1
    assert len(received) == 1
