"""
E2E tests for user personas driving the engine through the HTTP API.

User personas:
- regular_sender: daytime M-Pesa sends from the registered phone, never alerted
- account_takeover: normal history, then a large night VPN transfer from another phone
- burst_sender: many sends in one day under tightened thresholds
"""

import pytest
from fastapi.testclient import TestClient

DEVICE = "3f1c9a7e" * 8


def send(client: TestClient, transaction_id: str, timestamp: str, **overrides) -> dict:
    payload = {
        "transaction_id": transaction_id,
        "amount": 20000,
        "platform": "M-Pesa",
        "type": "send",
        "timestamp": timestamp,
        "metadata": {"location": "Dar es Salaam", "device_id": DEVICE, "network_type": "wifi"},
    }
    payload.update(overrides)
    response = client.post("/v1/transactions/analyze", json=payload)
    assert response.status_code == 200
    return response.json()


@pytest.mark.integration
def test_regular_sender_is_never_alerted(client: TestClient):
    """
    regular_sender: steady daytime sends on one platform
    Expected: every transaction LOW, no alerts, profile learns the hours
    """
    results = [send(client, f"tx_{hour}", f"2026-03-10T{hour:02d}:00:00") for hour in range(9, 14)]
    last = send(client, "tx_last", "2026-03-10T13:30:00")

    assert all(r["risk_level"] == "low" for r in results + [last])
    assert last["risk_score"] == pytest.approx(0.135)
    assert client.get("/v1/alerts").json() == []

    profile = client.get("/v1/profile").json()
    assert profile["common_transaction_hours"] == [9, 10, 11, 12, 13]
    assert profile["preferred_platforms"] == {"M-Pesa": 6}
    assert profile["average_transaction_amount"] == 20000

    # Erasing data makes the next transaction look like a first one again
    assert client.delete("/v1/data").status_code == 204
    fresh = send(client, "tx_after_erase", "2026-03-10T13:45:00")
    assert fresh["risk_score"] == pytest.approx(0.18)


@pytest.mark.integration
def test_account_takeover_raises_warning(client: TestClient):
    """
    account_takeover: three small sends, then TSh 400,000 at 03:00
    on Tigo Pesa over VPN from an unknown phone
    Expected: MEDIUM risk warning that an analyst can resolve
    """
    for hour in (10, 11, 12):
        send(client, f"tx_{hour}", f"2026-03-10T{hour}:00:00", amount=10000)

    result = send(
        client,
        "tx_takeover",
        "2026-03-10T03:00:00",
        amount=-400000,
        platform="Tigo Pesa",
        metadata={"device_id": "stolen-sim", "network_type": "VPN"},
    )

    assert result["risk_level"] == "medium"
    assert result["risk_score"] == pytest.approx(0.72)
    assert result["alert_generated"] is True
    assert result["requires_manual_review"] is True
    assert "Verify transaction amount with customer" in result["recommendations"]
    assert "Verify device ownership" in result["recommendations"]

    alert = client.get("/v1/alerts").json()[0]
    assert alert["alert_type"] == "warning"
    assert alert["transaction"]["transaction_id"] == "tx_takeover"

    resolved = client.post(
        f"/v1/alerts/{alert['alert_id']}/resolve",
        json={"resolved_by": "fraud-desk", "resolution": "Account frozen, SIM swap confirmed"},
    ).json()
    assert resolved["alert_type"] == "resolved"
    assert resolved["risk_assessment"]["risk_level"] == "medium"

    stats = client.get("/v1/stats").json()
    assert stats["total_transactions"] == 4
    assert stats["alerts_generated"] == 1
    assert stats["blocked_transactions"] == 0


@pytest.mark.integration
def test_burst_sender_under_tight_thresholds(client: TestClient):
    """
    burst_sender: sixteen sends within one hour, operator lowered the medium threshold
    Expected: only the sixteenth send crosses into MEDIUM on frequency alone
    """
    response = client.put("/v1/settings/thresholds", json={"medium": 0.2, "high": 0.5, "critical": 0.9})
    assert response.status_code == 200

    results = [
        send(client, f"tx_{i}", f"2026-03-10T10:{i:02d}:00", amount=10000)
        for i in range(1, 17)
    ]

    assert [r["risk_level"] for r in results[:15]] == ["low"] * 15
    assert results[10]["risk_factors"]["frequency_anomaly"] == 0.6
    assert results[15]["risk_level"] == "medium"
    assert results[15]["risk_factors"]["frequency_anomaly"] == 0.9
    assert results[15]["risk_score"] == pytest.approx(0.24)

    alerts = client.get("/v1/alerts").json()
    assert len(alerts) == 1
    assert alerts[0]["transaction"]["transaction_id"] == "tx_16"
