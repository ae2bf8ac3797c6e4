"""Request-scoped models for interpreting queries and returning search results."""
from typing import List, Optional

from pydantic import BaseModel, Field

from billharmony.models.catalog import Coordinates, Facility, Plan
from billharmony.models.enums import CareSetting, LocationSource


class ParsedIntent(BaseModel):
    """
    Structured form of a free-text price request.

    When ``explicitly_no_insurance`` is set, insurer and plan are ignored
    downstream even if they were filled in from another source.
    """

    procedures: List[str] = Field(min_length=1)
    insurer_id: Optional[str] = None
    plan_id: Optional[str] = None
    location: str = ""
    radius: int = Field(100, ge=1, le=500)
    explicitly_no_insurance: bool = False

    def effective_insurer(self) -> Optional[str]:
        if self.explicitly_no_insurance:
            return None
        return self.insurer_id or None

    def effective_plan(self) -> Optional[str]:
        if self.effective_insurer() is None:
            return None
        return self.plan_id or None


class ResolvedLocation(BaseModel):
    """Coordinates for a location token, and whether they came from a real match."""

    token: str
    coordinates: Coordinates
    source: LocationSource

    @property
    def is_fallback(self) -> bool:
        return self.source == LocationSource.DEFAULT


class CostBreakdown(BaseModel):
    """Patient-facing explanation of an out-of-pocket estimate."""

    total: float
    deductible: Optional[float] = None
    copay: Optional[float] = None
    coinsurance: Optional[float] = None
    insurance_covers: Optional[float] = None
    explanation: str
    plain_language: str


class ProcedurePrice(BaseModel):
    procedure_id: str
    procedure_name: str
    price_with_insurance: Optional[float] = None
    price_without_insurance: float
    setting: CareSetting = CareSetting.OUTPATIENT
    cost_breakdown: Optional[CostBreakdown] = None


class SearchResultEntry(BaseModel):
    """One facility that can perform every requested procedure within range."""

    facility: Facility
    distance: float
    in_network: bool
    procedures: List[ProcedurePrice]
    total_price_with_insurance: Optional[float] = None
    total_price_without_insurance: float
    insurance_plan: Optional[Plan] = None


class UserPreferences(BaseModel):
    """Saved defaults for a user. Read only; only used to fill gaps in a query."""

    insurance: Optional[str] = None
    insurance_plan: Optional[str] = None
    zip_code: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None

    def location(self) -> str:
        if self.zip_code:
            return self.zip_code
        if self.city and self.state:
            return f"{self.city}, {self.state}"
        return ""


class MissingInfo(BaseModel):
    """Follow-up question returned instead of results when a query can't be priced yet."""

    required: List[str]
    message: str
    context: str


class ParsedData(BaseModel):
    """What the service understood from a query, echoed back to the caller."""

    procedures: List[str]
    insurance: Optional[str] = None
    insurance_plan: Optional[str] = None
    location: str = ""
    radius: int
    zip_code: str = ""
    cash_only: bool = False
    location_source: Optional[LocationSource] = None


class SearchResponse(BaseModel):
    results: List[SearchResultEntry] = Field(default_factory=list)
    parsed_data: ParsedData
    query: str = ""
    missing_info: Optional[MissingInfo] = None
