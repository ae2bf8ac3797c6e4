"""
Free-text query interpretation.

Turns a request such as "MRI and CT scan with Aetna gold near 90210 within 25
miles" into a :class:`~billharmony.models.search.ParsedIntent`. Extraction is
deterministic keyword and pattern matching, run in a fixed priority order:

1. Procedures (billing codes and keywords, re-scanned per conjunction segment)
2. Explicit "no insurance" phrasing
3. Insurer and plan (skipped when step 2 fired)
4. Location (zip code, "City, ST", or a capitalized place name)
5. Search radius

Every scan runs against the full original text, so a billing code is never
consumed before the location scan sees it and vice versa. Interpretation never
raises; a missing signal produces the documented default.
"""
import re
from typing import Dict, Iterator, List, Optional, Tuple

from billharmony.models.search import ParsedIntent
from billharmony.services.catalog.loader import ReferenceCatalog
from billharmony.services.query.keywords import (
    BILLING_CODE_PATTERN,
    CAPITALIZED_RUN_PATTERN,
    CITY_STATE_PATTERN,
    DEFAULT_RADIUS,
    DEFAULT_TABLES,
    MAX_RADIUS,
    MIN_RADIUS,
    RADIUS_PATTERN,
    WITHIN_PATTERN,
    QueryTables,
)
from billharmony.utils.logger import get_logger

logger = get_logger(__name__)


class QueryInterpreter:
    """Parse free-text price requests against a reference catalog."""

    def __init__(
        self,
        catalog: ReferenceCatalog,
        tables: QueryTables = DEFAULT_TABLES,
        default_radius: int = DEFAULT_RADIUS,
    ):
        self.catalog = catalog
        self.tables = tables
        self.default_radius = default_radius

    def parse(self, text: str) -> ParsedIntent:
        """Interpret ``text``. Never raises."""
        text = text or ""
        lowered = text.lower()

        procedures = self.extract_procedures(text)
        explicitly_no_insurance = self.detect_no_insurance(text)

        insurer_id: Optional[str] = None
        plan_id: Optional[str] = None
        if not explicitly_no_insurance:
            insurer_id, plan_id = self.extract_insurance(lowered)

        intent = ParsedIntent(
            procedures=procedures,
            insurer_id=insurer_id,
            plan_id=plan_id,
            location=self.extract_location(text),
            radius=self.extract_radius(text),
            explicitly_no_insurance=explicitly_no_insurance,
        )

        logger.info(
            "Query interpreted",
            procedures=intent.procedures,
            insurer_id=intent.insurer_id,
            plan_id=intent.plan_id,
            has_location=bool(intent.location),
            radius=intent.radius,
            explicitly_no_insurance=intent.explicitly_no_insurance,
        )
        return intent

    # Procedures

    def _scan_procedures(self, segment: str) -> List[str]:
        """Procedure ids mentioned in ``segment``, ordered by where they first appear."""
        hits: Dict[str, int] = {}

        for match in BILLING_CODE_PATTERN.finditer(segment):
            procedure_id = self.catalog.procedure_for_code(match.group(0))
            if procedure_id is not None and procedure_id not in hits:
                hits[procedure_id] = match.start()

        lowered = segment.lower()
        for keyword, procedure_id in self.tables.procedure_keywords.items():
            position = lowered.find(keyword)
            if position == -1:
                continue
            if procedure_id not in hits or position < hits[procedure_id]:
                hits[procedure_id] = position

        # sorted() is stable, so equal positions keep table order
        return [procedure_id for procedure_id, _ in sorted(hits.items(), key=lambda item: item[1])]

    def extract_procedures(self, text: str) -> List[str]:
        """
        Procedure ids requested in ``text``.

        Falls back to every catalog procedure when nothing is recognized.
        """
        found = self._scan_procedures(text)

        conjunction_pattern = self.tables.conjunction_pattern
        if conjunction_pattern.search(text):
            for segment in conjunction_pattern.split(text):
                for procedure_id in self._scan_procedures(segment):
                    if procedure_id not in found:
                        found.append(procedure_id)

        if not found:
            logger.debug("No procedure recognized, defaulting to all procedures")
            return self.catalog.procedure_ids

        return found

    # Insurance

    def detect_no_insurance(self, text: str) -> bool:
        """True if the request explicitly says the patient has no insurance."""
        lowered = text.lower()
        if any(phrase in lowered for phrase in self.tables.no_insurance_phrases):
            return True
        return any(pattern.search(text) for pattern in self.tables.no_insurance_patterns)

    def extract_insurance(self, lowered: str) -> Tuple[Optional[str], Optional[str]]:
        """
        Insurer id and plan id mentioned in lower-cased text.

        The first insurer keyword in table order wins. A plan is only picked
        when a plan keyword appears in the text and names one of that
        insurer's plans.
        """
        insurer_id = next(
            (insurer for keyword, insurer in self.tables.insurer_keywords.items() if keyword in lowered),
            None,
        )
        if insurer_id is None:
            return None, None

        insurer = self.catalog.get_insurer(insurer_id)
        if insurer is None:
            return insurer_id, None

        for keyword in self.tables.plan_keywords:
            if keyword not in lowered:
                continue
            plan = insurer.find_plan(keyword)
            if plan is not None:
                return insurer_id, plan.id

        return insurer_id, None

    def is_cost_query(self, text: str) -> bool:
        """True if the request asks about cost or price."""
        lowered = (text or "").lower()
        return any(phrase in lowered for phrase in self.tables.cost_query_phrases)

    # Location

    def _keyword_spans(self, text: str) -> List[Tuple[int, int]]:
        """Character spans of every insurer and procedure keyword in ``text``."""
        lowered = text.lower()
        spans = []
        for keyword in (*self.tables.insurer_keywords, *self.tables.procedure_keywords):
            spans.extend(match.span() for match in re.finditer(re.escape(keyword), lowered))
        return spans

    @staticmethod
    def _free_pieces(text: str, start: int, end: int, spans: List[Tuple[int, int]]) -> Iterator[str]:
        """
        Word runs of ``text[start:end]`` that do not overlap a keyword span.

        "CT Scan" leaves nothing behind, so "Scan" never becomes a place.
        """
        words: List[str] = []
        for word in re.finditer(r"\S+", text[start:end]):
            word_start, word_end = start + word.start(), start + word.end()
            if any(word_start < span_end and span_start < word_end for span_start, span_end in spans):
                if words:
                    yield " ".join(words)
                words = []
            else:
                words.append(word.group(0))
        if words:
            yield " ".join(words)

    def _is_reserved(self, phrase: str) -> bool:
        """True if ``phrase`` names an insurer, a procedure or only plan tiers."""
        lowered = phrase.lower()
        for keyword in (*self.tables.insurer_keywords, *self.tables.procedure_keywords):
            if re.search(rf"\b{re.escape(keyword)}\b", lowered):
                return True
        return all(word in self.tables.plan_keywords for word in lowered.split())

    def _place_from_run(self, run: str) -> str:
        words = run.split()
        while words and words[0].lower() in self.tables.non_location_words:
            words.pop(0)
        candidate = " ".join(words)
        if not candidate or self._is_reserved(candidate):
            return ""
        return candidate

    def extract_location(self, text: str) -> str:
        """
        Location token in ``text``, or "" when there is none.

        A five-digit token that is a known billing code is only used as the
        location when nothing else qualifies and it is also a known zip code.
        Words that belong to a procedure or insurer name are never part of a
        place name.
        """
        tokens = BILLING_CODE_PATTERN.findall(text)
        for token in tokens:
            if self.catalog.procedure_for_code(token) is None:
                return token
        for token in tokens:
            if token in self.catalog.zip_codes:
                return token

        spans = self._keyword_spans(text)

        city_state = CITY_STATE_PATTERN.search(text)
        if city_state:
            pieces = list(self._free_pieces(text, *city_state.span(1), spans))
            city = ""
            if pieces and " ".join(city_state.group(1).split()).endswith(pieces[-1]):
                city = self._place_from_run(pieces[-1])
            if city:
                return f"{city}, {city_state.group(2)}"

        for match in CAPITALIZED_RUN_PATTERN.finditer(text):
            for piece in self._free_pieces(text, *match.span(1), spans):
                place = self._place_from_run(piece)
                if place:
                    return place

        return ""

    # Radius

    def extract_radius(self, text: str) -> int:
        """Search radius in miles, clamped to [1, 500]."""
        radius = self.default_radius
        match = RADIUS_PATTERN.search(text) or WITHIN_PATTERN.search(text)
        if match:
            radius = int(match.group(1))
        return min(MAX_RADIUS, max(MIN_RADIUS, radius))
