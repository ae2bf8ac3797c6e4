"""
Domain models.

    from billharmony.models import Facility, ParsedIntent
    from billharmony.models.enums import CoverageType
"""
from billharmony.models.enums import CareSetting, CoverageType, LocationSource, NetworkType
from billharmony.models.catalog import (
    Address,
    AssistanceProgram,
    BillingCode,
    ChargeInfo,
    Coordinates,
    EligibilityCriteria,
    Facility,
    Insurer,
    Plan,
    PlanBenefits,
    Procedure,
)
from billharmony.models.search import (
    CostBreakdown,
    MissingInfo,
    ParsedData,
    ParsedIntent,
    ProcedurePrice,
    ResolvedLocation,
    SearchResponse,
    SearchResultEntry,
    UserPreferences,
)
from billharmony.models.eligibility import EligibilityResult, HouseholdProfile

__all__ = [
    "Address",
    "AssistanceProgram",
    "BillingCode",
    "CareSetting",
    "ChargeInfo",
    "Coordinates",
    "CostBreakdown",
    "CoverageType",
    "EligibilityCriteria",
    "EligibilityResult",
    "Facility",
    "HouseholdProfile",
    "Insurer",
    "LocationSource",
    "MissingInfo",
    "NetworkType",
    "ParsedData",
    "ParsedIntent",
    "Plan",
    "PlanBenefits",
    "Procedure",
    "ProcedurePrice",
    "ResolvedLocation",
    "SearchResponse",
    "SearchResultEntry",
    "UserPreferences",
]
