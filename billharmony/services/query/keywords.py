"""Keyword and pattern tables used to interpret free-text price requests.

Tables are ordered: where only one hit is kept (insurer, plan), the first
entry in table order wins.
"""
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Pattern, Tuple

PROCEDURE_KEYWORDS: Mapping[str, str] = MappingProxyType({
    "mri": "MRI",
    "cat scan": "CT Scan",
    "ct scan": "CT Scan",
    "computed tomography": "CT Scan",
    "x-ray": "X-Ray",
    "xray": "X-Ray",
    "ultrasound": "Ultrasound",
    "blood test": "Blood Test",
    "lab test": "Blood Test",
    "cbc": "Blood Test",
    "complete blood count": "Blood Test",
})

CONJUNCTIONS: Tuple[str, ...] = ("and", "plus", "with")

NO_INSURANCE_PHRASES: Tuple[str, ...] = (
    "no insurance",
    "without insurance",
    "uninsured",
    "self-pay",
    "self pay",
    "cash pay",
    "cash payment",
    "cash only",
    "paying cash",
    "no coverage",
    "without coverage",
    "did not provide insurance",
    "they did not provide insurance",
    "they did not provide an insurance",
    "did not provide an insurance",
)

# Tolerates misspellings such as "insureance" or "insurence"
NO_INSURANCE_PATTERNS: Tuple[Pattern, ...] = (
    re.compile(r"did\s+not\s+provide\s+(?:an\s+)?insur[ae][a-z]*", re.IGNORECASE),
    re.compile(r"they\s+did\s+not\s+provide\s+(?:an\s+)?insur[ae][a-z]*", re.IGNORECASE),
)

INSURER_KEYWORDS: Mapping[str, str] = MappingProxyType({
    "bluecross": "bluecross",
    "blue cross": "bluecross",
    "aetna": "aetna",
    "cigna": "cigna",
    "unitedhealthcare": "unitedhealthcare",
    "united healthcare": "unitedhealthcare",
    "humana": "humana",
    "kaiser": "kaiser",
    "kaiser permanente": "kaiser",
    "medicare": "medicare",
    "medicaid": "medicaid",
})

PLAN_KEYWORDS: Tuple[str, ...] = (
    "premium",
    "gold",
    "basic",
    "select",
    "choice",
    "advantage",
    "elite",
    "plus",
    "value",
    "enhanced",
)

COST_QUERY_PHRASES: Tuple[str, ...] = ("cost", "price", "how much", "will cost", "pricing")

# Capitalized words that start requests rather than name places
NON_LOCATION_WORDS = frozenset({
    "i", "im", "my", "me", "we", "our", "please", "need", "find", "show", "get",
    "looking", "where", "what", "how", "which", "who", "can", "could", "would",
    "cheapest", "best", "near", "nearby", "within", "hi", "hello", "hey", "the",
    "a", "an", "is", "are", "do", "does", "cash", "self", "no", "without",
})

BILLING_CODE_PATTERN = re.compile(r"\b\d{5}\b")
CITY_STATE_PATTERN = re.compile(r"([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*),\s*([A-Z]{2})\b")
CAPITALIZED_RUN_PATTERN = re.compile(r"\b([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*)\b")
RADIUS_PATTERN = re.compile(r"(\d+)\s*(?:mile|mi|miles|mile radius|radius)", re.IGNORECASE)
WITHIN_PATTERN = re.compile(r"within\s+(\d+)", re.IGNORECASE)

MIN_RADIUS = 1
MAX_RADIUS = 500
DEFAULT_RADIUS = 100


@dataclass(frozen=True)
class QueryTables:
    """Bundle of tables handed to the interpreter. Build once, share freely."""

    procedure_keywords: Mapping[str, str] = field(default_factory=lambda: PROCEDURE_KEYWORDS)
    conjunctions: Tuple[str, ...] = CONJUNCTIONS
    no_insurance_phrases: Tuple[str, ...] = NO_INSURANCE_PHRASES
    no_insurance_patterns: Tuple[Pattern, ...] = NO_INSURANCE_PATTERNS
    insurer_keywords: Mapping[str, str] = field(default_factory=lambda: INSURER_KEYWORDS)
    plan_keywords: Tuple[str, ...] = PLAN_KEYWORDS
    cost_query_phrases: Tuple[str, ...] = COST_QUERY_PHRASES
    non_location_words: frozenset = field(default=NON_LOCATION_WORDS)

    @property
    def conjunction_pattern(self) -> Pattern:
        words = "|".join(re.escape(word) for word in self.conjunctions)
        return re.compile(rf"\b(?:{words})\b", re.IGNORECASE)


DEFAULT_TABLES = QueryTables()
