from billharmony.services.matching.ai_search import AISearchService, StructuredSearchService
from billharmony.services.matching.matcher import FacilityMatcher

__all__ = ["AISearchService", "FacilityMatcher", "StructuredSearchService"]
