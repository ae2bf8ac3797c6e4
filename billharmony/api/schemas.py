"""Request bodies for the HTTP API."""
from typing import Optional

from pydantic import BaseModel, Field

from billharmony.models.search import UserPreferences


class AISearchRequest(BaseModel):
    ai_query: str = Field(min_length=1, description="Free-text request, e.g. 'MRI near 90210 with Aetna'")
    user_profile: Optional[UserPreferences] = None


class SearchRequest(BaseModel):
    procedure: str = Field(min_length=1, description="Procedure id, name or billing code")
    location: str = Field(min_length=1, description="Zip code or 'City, ST'")
    max_distance: int = Field(100, description="Search radius in miles")
    insurance: Optional[str] = None
    insurance_plan: Optional[str] = None


class CharityEligibilityRequest(BaseModel):
    """
    Household screening input.

    The household fields are optional here so that a missing one is reported
    as a validation error naming every missing field at once.
    """

    household_income: Optional[float] = None
    family_size: Optional[int] = None
    employment_status: Optional[str] = None
    zip_code: Optional[str] = None
    hospital_id: Optional[str] = None
    procedure_cost: float = Field(0, ge=0)
