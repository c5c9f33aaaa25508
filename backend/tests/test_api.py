"""
Tests for API endpoints.
"""

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from fleet_analytics.main import app
from fleet_analytics.utils.sample_data import generate_drive_packets


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def drive_payload():
    """Generated drive with a fixed reference time."""
    return {
        "packets": generate_drive_packets(start=datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)),
        "reference_time": "2024-05-01T08:30:00Z",
    }


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    def test_root(self, client):
        """Root endpoint should return app info."""
        response = client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Fleet Telemetry Analytics"
        assert data["status"] == "running"

    def test_health(self, client):
        """Health endpoint should report active thresholds."""
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "overspeed_kmh" in data["thresholds"]


class TestAnalyticsEndpoint:
    """Tests for POST /devices/{imei}/analytics."""

    def test_drive_report(self, client, drive_payload):
        response = client.post("/devices/356938035643809/analytics", json=drive_payload)
        assert response.status_code == 200
        data = response.json()

        assert data["imei"] == "356938035643809"
        assert data["packet_count"] == 27
        assert len(data["trips"]) == 1
        assert data["trips"][0]["status"] == "completed"
        assert data["trips"][0]["packet_count"] == 23
        assert data["today_distance_km"] > 0
        assert data["movement"] == {"idle_pct": 26, "moving_pct": 74}
        assert data["alerts"]["is_hanged"] is False
        assert data["snapshot"]["gps"] == {"text": "Idle", "tag": "warning"}
        assert data["connection"]["status"] == "Online"
        assert data["battery"]["drain_time"].endswith("m")

    def test_open_trip_flag(self, client, drive_payload):
        drive_payload["packets"] = drive_payload["packets"][:-3]
        drive_payload["include_open_trips"] = True

        response = client.post("/devices/356938035643809/analytics", json=drive_payload)

        assert response.status_code == 200
        assert [t["status"] for t in response.json()["trips"]] == ["open"]

    def test_empty_snapshot(self, client):
        response = client.post(
            "/devices/123/analytics",
            json={"packets": [], "reference_time": "2024-05-01T08:30:00Z"},
        )
        assert response.status_code == 200
        data = response.json()

        assert data["imei"] == "123"
        assert data["trips"] == []
        assert data["today_distance_km"] == 0.0
        assert data["battery"] == {"runtime_hours": "-", "drain_time": "-"}
        assert data["alerts"]["is_hanged"] is True
        assert data["snapshot"]["packet"] is None
        assert data["latest_alert"] is None

    def test_alert_description(self, client, drive_payload):
        drive_payload["packets"].append(
            {"packet": "A", "alert": "SOS", "deviceRawTimestamp": "2024-05-01T08:27:00Z"}
        )

        response = client.post("/devices/356938035643809/analytics", json=drive_payload)

        data = response.json()
        assert data["alerts"]["has_sos"] is True
        assert data["latest_alert"]["standard_code"] == "A1002"

    def test_invalid_body(self, client):
        response = client.post("/devices/123/analytics", json={"packets": "not a list"})
        assert response.status_code == 422


class TestAlertCodeEndpoint:
    """Tests for GET /alert-codes/{code}."""

    def test_error_code_default(self, client):
        response = client.get("/alert-codes/no_sim")
        assert response.status_code == 200
        assert response.json() == {
            "standard_code": "E1011",
            "description": "Device has no SIM card",
            "category": "error",
        }

    def test_alert_code(self, client):
        response = client.get("/alert-codes/A1001", params={"packet_type": "A"})
        assert response.json()["description"] == "Device is charging"

    def test_unknown_code(self, client):
        data = client.get("/alert-codes/zzz").json()
        assert data["standard_code"] == "ZZZ"
        assert data["description"] == "Unknown error"
