"""FastAPI dependencies wiring the core services to the shared catalog."""
from fastapi import Depends

from billharmony.config.fpl import get_fpl_table
from billharmony.config.settings import get_settings
from billharmony.services.catalog import ReferenceCatalog, get_default_catalog
from billharmony.services.eligibility import EligibilityScorer
from billharmony.services.location import LocationResolver
from billharmony.services.query import QueryInterpreter
from billharmony.services.matching import AISearchService, FacilityMatcher, StructuredSearchService


def get_catalog() -> ReferenceCatalog:
    return get_default_catalog()


def get_interpreter(catalog: ReferenceCatalog = Depends(get_catalog)) -> QueryInterpreter:
    return QueryInterpreter(catalog, default_radius=get_settings().default_radius_miles)


def get_resolver(catalog: ReferenceCatalog = Depends(get_catalog)) -> LocationResolver:
    return LocationResolver(catalog.zip_codes)


def get_matcher() -> FacilityMatcher:
    return FacilityMatcher()


def get_ai_search_service(
    catalog: ReferenceCatalog = Depends(get_catalog),
    interpreter: QueryInterpreter = Depends(get_interpreter),
    resolver: LocationResolver = Depends(get_resolver),
    matcher: FacilityMatcher = Depends(get_matcher),
) -> AISearchService:
    return AISearchService(catalog, interpreter, resolver, matcher)


def get_structured_search_service(
    catalog: ReferenceCatalog = Depends(get_catalog),
    resolver: LocationResolver = Depends(get_resolver),
    matcher: FacilityMatcher = Depends(get_matcher),
) -> StructuredSearchService:
    return StructuredSearchService(catalog, resolver, matcher)


def get_eligibility_scorer() -> EligibilityScorer:
    return EligibilityScorer(get_fpl_table())
