"""Tests for the health and catalog endpoints."""
import pytest

from billharmony import __version__


@pytest.mark.api
class TestHealthEndpoint:
    """Tests for GET /api/v1/health."""

    def test_healthy(self, client):
        response = client.get("/api/v1/health")

        assert response.status_code == 200
        assert response.json() == {
            "status": "healthy",
            "version": __version__,
            "facilities": 7,
            "procedures": 5,
        }


@pytest.mark.api
class TestCatalogEndpoints:
    """Tests for the read-only catalog endpoints."""

    def test_list_procedures(self, client):
        response = client.get("/api/v1/procedures")

        assert response.status_code == 200
        assert [procedure["id"] for procedure in response.json()] == [
            "MRI",
            "CT Scan",
            "X-Ray",
            "Blood Test",
            "Ultrasound",
        ]

    def test_list_insurers(self, client):
        response = client.get("/api/v1/insurances")

        assert response.status_code == 200
        assert response.json()[0]["id"] == "bluecross"

    def test_get_insurer(self, client):
        response = client.get("/api/v1/insurances/aetna")

        assert response.status_code == 200
        assert [plan["id"] for plan in response.json()["plans"]] == ["aetna-select", "aetna-gold"]

    def test_get_unknown_insurer(self, client):
        response = client.get("/api/v1/insurances/acme")

        assert response.status_code == 404
        assert response.json()["message"] == "Insurer not found (id: acme)"

    def test_get_hospital(self, client):
        response = client.get("/api/v1/hospitals/providence-saint-johns")

        assert response.status_code == 200
        assert response.json()["in_network_insurers"] == ["bluecross", "kaiser"]

    def test_get_unknown_hospital(self, client):
        response = client.get("/api/v1/hospitals/nowhere-general")

        assert response.status_code == 404
