"""Tests for the search endpoints."""
import pytest


@pytest.mark.api
class TestAISearchEndpoint:
    """Tests for POST /api/v1/ai-search."""

    def test_cash_search(self, client):
        response = client.post(
            "/api/v1/ai-search",
            json={"ai_query": "I need an MRI and CT scan, no insurance, 90210, 50 miles"},
        )

        assert response.status_code == 200
        data = response.json()
        assert [result["facility"]["id"] for result in data["results"]] == [
            "uci-medical-center",
            "huntington-pasadena",
            "keck-usc",
            "ucla-ronald-reagan",
            "cedars-sinai",
        ]
        assert data["parsed_data"]["cash_only"] is True
        assert data["parsed_data"]["radius"] == 50
        assert data["missing_info"] is None

    def test_cost_question_needs_insurance(self, client):
        response = client.post("/api/v1/ai-search", json={"ai_query": "How much does an MRI cost near 90210?"})

        assert response.status_code == 200
        data = response.json()
        assert data["results"] == []
        assert data["missing_info"]["required"] == ["insurance"]

    def test_user_profile_fills_insurance(self, client):
        response = client.post(
            "/api/v1/ai-search",
            json={
                "ai_query": "How much does an MRI cost near 90210 within 10 miles?",
                "user_profile": {"insurance": "bluecross", "insurance_plan": "bluecross-premium"},
            },
        )

        assert response.status_code == 200
        first = response.json()["results"][0]
        assert first["facility"]["id"] == "cedars-sinai"
        assert first["in_network"] is True
        assert first["total_price_with_insurance"] == 653
        assert first["procedures"][0]["cost_breakdown"]["deductible"] == 500

    def test_no_location(self, client):
        response = client.post("/api/v1/ai-search", json={"ai_query": "MRI with Aetna"})

        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"

    def test_blank_query(self, client):
        response = client.post("/api/v1/ai-search", json={"ai_query": "   "})

        assert response.status_code == 400

    def test_missing_query(self, client):
        response = client.post("/api/v1/ai-search", json={})

        assert response.status_code == 422
        assert response.json()["error"] == "VALIDATION_ERROR"


@pytest.mark.api
class TestSearchEndpoint:
    """Tests for POST /api/v1/search."""

    def test_search_with_plan(self, client):
        response = client.post(
            "/api/v1/search",
            json={
                "procedure": "MRI",
                "location": "90210",
                "max_distance": 10,
                "insurance": "bluecross",
                "insurance_plan": "bluecross-premium",
            },
        )

        assert response.status_code == 200
        results = response.json()["results"]
        assert [result["facility"]["id"] for result in results] == [
            "cedars-sinai",
            "ucla-ronald-reagan",
            "providence-saint-johns",
        ]
        assert [result["total_price_with_insurance"] for result in results] == [653, 638, 628]
        assert results[0]["insurance_plan"]["id"] == "bluecross-premium"

    def test_search_by_billing_code(self, client):
        response = client.post("/api/v1/search", json={"procedure": "71250", "location": "90210"})

        assert response.status_code == 200
        assert response.json()["parsed_data"]["procedures"] == ["CT Scan"]

    def test_unknown_procedure(self, client):
        response = client.post("/api/v1/search", json={"procedure": "Colonoscopy", "location": "90210"})

        assert response.status_code == 404
        assert response.json()["error"] == "NOT_FOUND"

    def test_unknown_insurer(self, client):
        response = client.post(
            "/api/v1/search",
            json={"procedure": "MRI", "location": "90210", "insurance": "acme"},
        )

        assert response.status_code == 404

    def test_radius_out_of_range(self, client):
        response = client.post("/api/v1/search", json={"procedure": "MRI", "location": "90210", "max_distance": 0})

        assert response.status_code == 400
        assert response.json()["details"]["field"] == "max_distance"
