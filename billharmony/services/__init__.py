"""
Core pricing operations.

Each function takes an optional catalog; without one the process-wide
catalog from the configured data directory is used.

    from billharmony.services import interpret, resolve_location, search

    intent = interpret("MRI near 90210 with Aetna")
    origin = resolve_location(intent.location)
    results = search(intent, origin.coordinates)
"""
from decimal import Decimal
from typing import List, Optional, Sequence, Union

from billharmony.models.catalog import AssistanceProgram, Coordinates
from billharmony.models.eligibility import EligibilityResult, HouseholdProfile
from billharmony.models.search import ParsedIntent, ResolvedLocation, SearchResultEntry
from billharmony.services.catalog import ReferenceCatalog, get_default_catalog
from billharmony.services.eligibility import EligibilityScorer
from billharmony.services.location import LocationResolver
from billharmony.services.query import QueryInterpreter
from billharmony.services.matching import FacilityMatcher


def interpret(text: str, catalog: Optional[ReferenceCatalog] = None) -> ParsedIntent:
    return QueryInterpreter(catalog or get_default_catalog()).parse(text)


def resolve_location(
    token: str,
    catalog: Optional[ReferenceCatalog] = None,
    strict: bool = False,
) -> Optional[ResolvedLocation]:
    """Coordinates for ``token``. With ``strict`` unknown places give None instead of the default."""
    resolver = LocationResolver((catalog or get_default_catalog()).zip_codes)
    if strict:
        return resolver.resolve_strict(token)
    return resolver.resolve(token)


def search(
    intent: ParsedIntent,
    origin: Coordinates,
    catalog: Optional[ReferenceCatalog] = None,
) -> List[SearchResultEntry]:
    return FacilityMatcher().search(intent, origin, catalog or get_default_catalog())


def score_eligibility(
    profile: HouseholdProfile,
    cost: Union[float, int, Decimal],
    programs: Optional[Sequence[AssistanceProgram]] = None,
) -> EligibilityResult:
    """Score a household. ``programs`` defaults to the catalog's program table."""
    if programs is None:
        programs = get_default_catalog().programs
    return EligibilityScorer().score(profile, cost, programs)


__all__ = ["interpret", "resolve_location", "score_eligibility", "search"]
