"""Models for charity care eligibility screening."""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from billharmony.models.catalog import AssistanceProgram


class HouseholdProfile(BaseModel):
    """Financial profile of the applicant's household. Never mutated by the scorer."""

    model_config = ConfigDict(frozen=True)

    income: float = Field(ge=0)
    family_size: int = Field(ge=1)
    employment_status: str = Field(min_length=1)
    zip_code: Optional[str] = None


class EligibilityResult(BaseModel):
    score: int = Field(ge=0, le=100)
    income_percent_of_fpl: float
    qualified_programs: List[AssistanceProgram] = Field(default_factory=list)
    estimated_assistance: float = 0
    recommended_program: Optional[AssistanceProgram] = None
    reasoning: str = ""
