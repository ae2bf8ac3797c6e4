"""Tests for the charity eligibility endpoint."""
import pytest


@pytest.mark.api
class TestCharityEligibilityEndpoint:
    """Tests for POST /api/v1/charity-eligibility."""

    def test_eligible_household(self, client):
        response = client.post(
            "/api/v1/charity-eligibility",
            json={
                "household_income": 15760,
                "family_size": 1,
                "employment_status": "employed",
                "procedure_cost": 2000,
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["score"] == 95
        assert data["income_percent_of_fpl"] == 100
        assert data["estimated_assistance"] == 2000
        assert data["recommended_program"]["id"] == "hospital-charity-care"
        assert len(data["qualified_programs"]) == 4

    def test_known_hospital(self, client):
        response = client.post(
            "/api/v1/charity-eligibility",
            json={
                "household_income": 78800,
                "family_size": 1,
                "employment_status": "unemployed",
                "hospital_id": "cedars-sinai",
                "procedure_cost": 2000,
            },
        )

        assert response.status_code == 200
        assert response.json()["score"] == 15
        assert response.json()["recommended_program"]["id"] == "unemployment-hardship"

    def test_missing_fields(self, client):
        """Every missing household field is named at once."""
        response = client.post("/api/v1/charity-eligibility", json={"household_income": 30000})

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "VALIDATION_ERROR"
        assert data["details"]["missing"] == ["family_size", "employment_status"]

    def test_invalid_family_size(self, client):
        response = client.post(
            "/api/v1/charity-eligibility",
            json={"household_income": 30000, "family_size": 0, "employment_status": "employed"},
        )

        assert response.status_code == 400
        assert response.json()["details"]["field"] == "family_size"

    def test_unknown_hospital(self, client):
        response = client.post(
            "/api/v1/charity-eligibility",
            json={
                "household_income": 30000,
                "family_size": 3,
                "employment_status": "employed",
                "hospital_id": "nowhere-general",
            },
        )

        assert response.status_code == 404

    def test_negative_cost(self, client):
        response = client.post(
            "/api/v1/charity-eligibility",
            json={
                "household_income": 30000,
                "family_size": 3,
                "employment_status": "employed",
                "procedure_cost": -10,
            },
        )

        assert response.status_code == 422
