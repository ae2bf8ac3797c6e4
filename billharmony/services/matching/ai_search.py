"""
Search orchestration.

``AISearchService`` answers free-text requests: it interprets the text, fills
gaps from the user's saved preferences, resolves the location and runs the
facility matcher. ``StructuredSearchService`` does the same for form input
where the procedure, location and insurance are already separate fields.
"""
from typing import Optional

from billharmony.models.catalog import Procedure
from billharmony.models.search import (
    MissingInfo,
    ParsedData,
    ParsedIntent,
    ResolvedLocation,
    SearchResponse,
    UserPreferences,
)
from billharmony.services.catalog.loader import ReferenceCatalog
from billharmony.services.location.resolver import ZIP_PATTERN, LocationResolver
from billharmony.services.query.interpreter import QueryInterpreter
from billharmony.services.query.keywords import MAX_RADIUS, MIN_RADIUS
from billharmony.services.matching.matcher import FacilityMatcher
from billharmony.utils.errors import NotFoundError, ValidationError
from billharmony.utils.logger import get_logger

logger = get_logger(__name__)

INSURANCE_QUESTION = (
    "To provide accurate cost estimates, we need to know your insurance provider. "
    "What insurance do you have?"
)


def _zip_code_of(location: str) -> str:
    return location if ZIP_PATTERN.match(location) else ""


def _resolve_origin(resolver: LocationResolver, location: str) -> ResolvedLocation:
    origin = resolver.resolve(location)
    if origin is None:
        raise ValidationError(f"Could not find location: {location}", details={"field": "location"})
    return origin


class AISearchService:
    """Free-text price search."""

    def __init__(
        self,
        catalog: ReferenceCatalog,
        interpreter: QueryInterpreter,
        resolver: LocationResolver,
        matcher: FacilityMatcher,
    ):
        self.catalog = catalog
        self.interpreter = interpreter
        self.resolver = resolver
        self.matcher = matcher

    @staticmethod
    def apply_preferences(intent: ParsedIntent, preferences: Optional[UserPreferences]) -> ParsedIntent:
        """
        Fill the insurer, plan and location from saved preferences.

        Only gaps are filled. An explicit "no insurance" in the query always
        wins over a saved insurer.
        """
        updates = {}

        if intent.explicitly_no_insurance:
            updates["insurer_id"] = None
            updates["plan_id"] = None
        elif not intent.insurer_id and preferences and preferences.insurance:
            updates["insurer_id"] = preferences.insurance
            updates["plan_id"] = preferences.insurance_plan or intent.plan_id

        if not intent.location and preferences:
            location = preferences.location()
            if location:
                updates["location"] = location

        if not updates:
            return intent
        return intent.model_copy(update=updates)

    def run(self, query: str, preferences: Optional[UserPreferences] = None) -> SearchResponse:
        """
        Answer a free-text price request.

        Returns a response with ``missing_info`` set instead of results when
        the query asks about cost but no insurer is known.

        Raises:
            ValidationError: if the query is empty or no location can be
                determined from the query or the preferences
        """
        if not query or not query.strip():
            raise ValidationError("Search query is required", details={"field": "ai_query"})

        parsed = self.interpreter.parse(query)
        intent = self.apply_preferences(parsed, preferences)

        if (
            self.interpreter.is_cost_query(query)
            and not intent.effective_insurer()
            and not intent.explicitly_no_insurance
        ):
            logger.info("Cost query without insurance, asking for insurer", procedures=intent.procedures)
            return SearchResponse(
                parsed_data=ParsedData(
                    procedures=intent.procedures,
                    location=intent.location,
                    radius=intent.radius,
                ),
                query=query,
                missing_info=MissingInfo(
                    required=["insurance"],
                    message=INSURANCE_QUESTION,
                    context="cost_query",
                ),
            )

        if not intent.location:
            raise ValidationError(
                "Could not determine location from your query. Please specify a zip code or city, state.",
                details={"field": "location"},
            )

        origin = _resolve_origin(self.resolver, intent.location)
        results = self.matcher.search(intent, origin.coordinates, self.catalog)

        return SearchResponse(
            results=results,
            parsed_data=self._parsed_data(intent, origin),
            query=query,
        )

    @staticmethod
    def _parsed_data(intent: ParsedIntent, origin: ResolvedLocation) -> ParsedData:
        return ParsedData(
            procedures=intent.procedures,
            insurance=intent.effective_insurer(),
            insurance_plan=intent.effective_plan(),
            location=intent.location,
            radius=intent.radius,
            zip_code=_zip_code_of(intent.location),
            cash_only=intent.explicitly_no_insurance,
            location_source=origin.source,
        )


class StructuredSearchService:
    """Form-based price search for a single procedure."""

    def __init__(
        self,
        catalog: ReferenceCatalog,
        resolver: LocationResolver,
        matcher: FacilityMatcher,
    ):
        self.catalog = catalog
        self.resolver = resolver
        self.matcher = matcher

    def find_procedure(self, procedure: str) -> Procedure:
        """
        Look a procedure up by id, name or billing code.

        Raises:
            NotFoundError: if nothing in the catalog matches
        """
        key = (procedure or "").strip()
        found = self.catalog.get_procedure(key)
        if found is None:
            lowered = key.lower()
            found = next((p for p in self.catalog.procedures if p.name.lower() == lowered), None)
        if found is None:
            procedure_id = self.catalog.procedure_for_code(key)
            found = self.catalog.get_procedure(procedure_id) if procedure_id else None
        if found is None:
            raise NotFoundError("Procedure", key)
        return found

    def run(
        self,
        procedure: str,
        location: str,
        radius: int,
        insurance: Optional[str] = None,
        plan: Optional[str] = None,
    ) -> SearchResponse:
        """
        Raises:
            ValidationError: if the location is empty or the radius is out of range
            NotFoundError: if the procedure or the insurer is unknown
        """
        if not location or not location.strip():
            raise ValidationError("Location is required", details={"field": "location"})
        if radius < MIN_RADIUS or radius > MAX_RADIUS:
            raise ValidationError(
                f"max_distance must be between {MIN_RADIUS} and {MAX_RADIUS}",
                details={"field": "max_distance", "value": radius},
            )

        found = self.find_procedure(procedure)
        if insurance and self.catalog.get_insurer(insurance) is None:
            raise NotFoundError("Insurer", insurance)

        intent = ParsedIntent(
            procedures=[found.id],
            insurer_id=insurance or None,
            plan_id=(plan or None) if insurance else None,
            location=location.strip(),
            radius=radius,
        )

        origin = _resolve_origin(self.resolver, intent.location)
        results = self.matcher.search(intent, origin.coordinates, self.catalog)

        return SearchResponse(
            results=results,
            parsed_data=ParsedData(
                procedures=intent.procedures,
                insurance=intent.effective_insurer(),
                insurance_plan=intent.effective_plan(),
                location=intent.location,
                radius=intent.radius,
                zip_code=_zip_code_of(intent.location),
                location_source=origin.source,
            ),
        )
