"""
Tests for the HTTP API.
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from fastapi.testclient import TestClient

from growthcalc.engines import GrowthEngine
from server import app, get_engine


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def degraded_client():
    app.dependency_overrides[get_engine] = lambda: GrowthEngine(None)
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


class TestHealth:

    def test_health(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "bmi" in data["measures"]

    def test_degraded(self, degraded_client):
        data = degraded_client.get("/api/health").json()
        assert data["status"] == "degraded"
        assert data["pediatric_reference"] is False


class TestBMIEndpoint:

    def test_child(self, client):
        response = client.post("/api/bmi", json={
            "height_cm": 128, "weight_kg": 25, "age_years": 8, "sex": "female",
        })

        assert response.status_code == 200
        data = response.json()
        assert data["is_child"] is True
        assert data["category"] == "healthy"
        assert 40 < data["percentile"] < 45
        assert data["category_info"]["color"] == "text-green-700"

    def test_adult_boundary(self, client):
        response = client.post("/api/bmi", json={
            "height_cm": 200, "weight_kg": 100, "age_years": 30, "sex": "male",
        })

        assert response.status_code == 200
        assert response.json()["category"] == "overweight"

    def test_invalid_measurement(self, client):
        response = client.post("/api/bmi", json={
            "height_cm": 0, "weight_kg": 25, "age_years": 8, "sex": "female",
        })
        assert response.status_code == 422

    def test_extreme_weight(self, client):
        response = client.post("/api/bmi", json={
            "height_cm": 100, "weight_kg": 1e-300, "age_years": 8, "sex": "female",
        })
        assert response.status_code == 422

    def test_unknown_sex(self, client):
        response = client.post("/api/bmi", json={
            "height_cm": 128, "weight_kg": 25, "age_years": 8, "sex": "unknown",
        })
        assert response.status_code == 422

    def test_child_without_reference(self, degraded_client):
        response = degraded_client.post("/api/bmi", json={
            "height_cm": 128, "weight_kg": 25, "age_years": 8, "sex": "female",
        })
        assert response.status_code == 503

    def test_adult_without_reference(self, degraded_client):
        response = degraded_client.post("/api/bmi", json={
            "height_cm": 175, "weight_kg": 70, "age_years": 30, "sex": "female",
        })
        assert response.status_code == 200
        assert response.json()["category"] == "healthy"


class TestTrendEndpoint:

    def test_empty(self, client):
        response = client.post("/api/trends/growth", json={"measurements": []})

        assert response.status_code == 200
        data = response.json()
        assert data["points"] == []
        assert data["count"] == 0
        assert data["summary"] == {"height": None, "weight": None, "bmi": None}

    def test_series(self, client):
        response = client.post("/api/trends/growth", json={"measurements": [
            {"date": "2023-01-10", "height_cm": 120, "weight_kg": 22, "age_years": 7, "sex": "male"},
            {"date": "2024-01-10", "height_cm": 127, "weight_kg": 24.5, "age_years": 8, "sex": "male"},
        ]})

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 2
        assert data["summary"]["weight"]["delta"] == pytest.approx(2.5)
        assert data["points"][1]["bmi"] == pytest.approx(24.5 / 1.27 ** 2)

    def test_unordered(self, client):
        response = client.post("/api/trends/growth", json={"measurements": [
            {"date": "2024-01-10", "height_cm": 127, "weight_kg": 24.5, "age_years": 8, "sex": "male"},
            {"date": "2023-01-10", "height_cm": 120, "weight_kg": 22, "age_years": 7, "sex": "male"},
        ]})
        assert response.status_code == 422


class TestReferenceEndpoint:

    def test_curve(self, client):
        response = client.get("/api/reference/female", params={"percentiles": "5,50,95"})

        assert response.status_code == 200
        data = response.json()
        assert data["percentiles"] == [5.0, 50.0, 95.0]
        assert data["curve"][0]["age_months"] == 24.0
        assert data["curve"][0]["p50"] == pytest.approx(16.13)

    def test_bad_percentile(self, client):
        response = client.get("/api/reference/male", params={"percentiles": "0,50"})
        assert response.status_code == 400

    def test_unknown_sex(self, client):
        assert client.get("/api/reference/robot").status_code == 422
