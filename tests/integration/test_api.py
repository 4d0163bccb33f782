"""
Integration Tests for the Breath Analysis API

Tests for API endpoints: analysis, history, thresholds, health checks.
Uses async httpx for ASGI app testing.
"""
import pytest
import httpx
from typing import Any, Dict

from odoursense.core.base import CHANNELS, DEFAULT_THRESHOLDS, thresholds_to_dict, to_camel
from odoursense.config import settings
from odoursense.main import app, get_service
from odoursense.services import AnalysisService
from odoursense.storage import JsonFileHistoryStore


def _readings_payload(**overrides) -> Dict[str, Any]:
    """camelCase readings with every gas at 10% of its default warning limit."""
    values = {c.key: DEFAULT_THRESHOLDS[c.key].warning * 0.1 for c in CHANNELS}
    values.update(overrides)
    return {to_camel(key): value for key, value in values.items()}


def _thresholds_payload(**overrides) -> Dict[str, Dict[str, float]]:
    data = thresholds_to_dict(DEFAULT_THRESHOLDS)
    data.update(overrides)
    return data


@pytest.fixture(autouse=True)
def fresh_service():
    """Isolate every test behind its own in-memory service."""
    service = AnalysisService()
    app.dependency_overrides[get_service] = lambda: service
    yield service
    app.dependency_overrides.clear()


@pytest.fixture
async def async_client():
    """Create async test client."""
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client


@pytest.mark.asyncio
class TestHealthEndpoints:
    """Tests for health check and reference endpoints."""

    async def test_root_endpoint(self, async_client):
        """Root returns health info."""
        response = await async_client.get("/")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "healthy"
        assert "version" in data
        assert data["reportsStored"] == 0

    async def test_health_endpoint(self, async_client):
        """/health reports healthy."""
        response = await async_client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    async def test_list_channels(self, async_client):
        """All ten channels are listed with units."""
        response = await async_client.get("/api/v1/channels")
        assert response.status_code == 200

        data = response.json()
        assert len(data) == 10
        assert data[0] == {"key": "acetone", "name": "Acetone", "unit": "ppm"}
        assert {c["key"]: c["unit"] for c in data}["isoprene"] == "ppb"


@pytest.mark.asyncio
class TestAnalyzeEndpoint:
    """Tests for the analysis endpoint."""

    async def test_critical_acetone(self, async_client):
        """Critical acetone alone gives a Critical report."""
        response = await async_client.post(
            "/api/v1/analyze",
            json={"readings": _readings_payload(acetone=6.0), "symptoms": {}},
        )
        assert response.status_code == 200

        data = response.json()
        assert data["id"].startswith("RPT-")
        assert data["riskLevel"] == "Critical"
        assert data["diseases"][0]["probability"] >= 80
        assert data["biomarkerInsights"][0]["status"] == "Critical"
        assert data["recommendation"].startswith("URGENT")

    async def test_healthy_profile(self, async_client):
        """Quiet readings give the healthy sentinel."""
        response = await async_client.post(
            "/api/v1/analyze", json={"readings": _readings_payload()}
        )
        assert response.status_code == 200

        data = response.json()
        assert data["riskLevel"] == "Low"
        assert data["diseases"] == [{"name": "Metabolically Healthy", "probability": 98}]

    async def test_symptoms_accept_either_case(self, async_client):
        """camelCase symptoms are read, unknown ones ignored."""
        response = await async_client.post(
            "/api/v1/analyze",
            json={
                "readings": _readings_payload(hydrogen=21.0),
                "symptoms": {"abdominalPain": True, "unknownSymptom": True},
            },
        )
        assert response.status_code == 200
        assert response.json()["diseases"][0] == {
            "name": "Small Intestinal Bacterial Overgrowth (SIBO)",
            "probability": 60,
        }

    async def test_negative_reading(self, async_client):
        """Negative values map to 422 INVALID_READING."""
        response = await async_client.post(
            "/api/v1/analyze", json={"readings": _readings_payload(methane=-1.0)}
        )
        assert response.status_code == 422

        data = response.json()
        assert data["error"] == "INVALID_READING"
        assert data["details"]["channel"] == "methane"

    async def test_missing_channel(self, async_client):
        """A missing channel fails request validation."""
        readings = _readings_payload()
        del readings["nitricOxide"]
        response = await async_client.post("/api/v1/analyze", json={"readings": readings})
        assert response.status_code == 422

    async def test_threshold_override(self, async_client):
        """Per-request thresholds apply to that request only."""
        response = await async_client.post(
            "/api/v1/analyze",
            json={
                "readings": _readings_payload(acetone=3.0),
                "thresholds": _thresholds_payload(acetone={"warning": 4.0, "critical": 8.0}),
            },
        )
        assert response.status_code == 200
        assert response.json()["biomarkerInsights"][0]["status"] == "Normal"

    async def test_reports_are_stored(self, async_client):
        """Each analysis lands in history."""
        for _ in range(2):
            await async_client.post("/api/v1/analyze", json={"readings": _readings_payload()})

        response = await async_client.get("/api/v1/history")
        assert response.status_code == 200
        assert len(response.json()) == 2

        health = await async_client.get("/health")
        assert health.json()["reportsStored"] == 2


@pytest.mark.asyncio
class TestThresholdEndpoints:
    """Tests for threshold configuration."""

    async def test_get_defaults(self, async_client):
        """Defaults are returned with camelCase keys."""
        response = await async_client.get("/api/v1/thresholds")
        assert response.status_code == 200

        data = response.json()
        assert data["acetone"] == {"warning": 1.8, "critical": 5.0}
        assert len(data) == 10
        assert data["carbonMonoxide"] == {"warning": 5.0, "critical": 9.0}
        assert "carbon_monoxide" not in data

    async def test_put_valid(self, async_client):
        """A full threshold set replaces the stored one."""
        payload = _thresholds_payload(ammonia={"warning": 1.0, "critical": 3.0})
        response = await async_client.put("/api/v1/thresholds", json=payload)
        assert response.status_code == 200

        current = (await async_client.get("/api/v1/thresholds")).json()
        assert current["ammonia"] == {"warning": 1.0, "critical": 3.0}

    async def test_put_inverted_pair(self, async_client):
        """An inverted pair maps to 422 CONFIGURATION_ERROR."""
        payload = _thresholds_payload(ammonia={"warning": 3.0, "critical": 1.0})
        response = await async_client.put("/api/v1/thresholds", json=payload)
        assert response.status_code == 422

        data = response.json()
        assert data["error"] == "CONFIGURATION_ERROR"
        assert data["details"]["channel"] == "ammonia"

    async def test_reset(self, async_client):
        """Reset restores the defaults."""
        payload = _thresholds_payload(ammonia={"warning": 1.0, "critical": 3.0})
        await async_client.put("/api/v1/thresholds", json=payload)

        response = await async_client.post("/api/v1/thresholds/reset")
        assert response.status_code == 200
        assert response.json()["ammonia"] == {"warning": 0.8, "critical": 2.0}


@pytest.mark.asyncio
class TestSensorEndpoint:

    async def test_first_simulated_reading_is_resting(self, async_client):
        """The first simulated reading is the resting snapshot."""
        response = await async_client.get("/api/v1/sensors/simulate")
        assert response.status_code == 200

        data = response.json()
        assert data["acetone"] == 0.5
        assert "carbonMonoxide" in data


@pytest.mark.asyncio
class TestFileBackedHistory:
    """Tests against a JSON history file."""

    async def test_health_counts_stored_reports(self, async_client, tmp_path):
        """Health reports the number of reports in the history file."""
        service = AnalysisService(history_store=JsonFileHistoryStore(tmp_path / "history.json"))
        app.dependency_overrides[get_service] = lambda: service

        await async_client.post("/api/v1/analyze", json={"readings": _readings_payload()})

        response = await async_client.get("/health")
        assert response.json()["reportsStored"] == 1

    async def test_corrupt_history_is_service_unavailable(self, async_client, tmp_path):
        """An unreadable history file maps to 503."""
        path = tmp_path / "history.json"
        path.write_text("{not json")
        service = AnalysisService(history_store=JsonFileHistoryStore(path))
        app.dependency_overrides[get_service] = lambda: service

        response = await async_client.post(
            "/api/v1/analyze", json={"readings": _readings_payload()}
        )
        assert response.status_code == 503

        data = response.json()
        assert data["error"] == "UPSTREAM_UNAVAILABLE"
        assert data["details"]["collaborator"] == "history"


def test_app_debug_follows_settings():
    """The debug flag is passed through to the application."""
    assert app.debug is settings.debug
