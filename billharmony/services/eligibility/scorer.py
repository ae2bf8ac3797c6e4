"""
Charity care eligibility scoring.

Compares a household's income with the Federal Poverty Level for its size,
finds the assistance programs it qualifies for and scores how likely it is to
receive help. A program qualifies when the household is under its income cap
(as a share of FPL or as an absolute amount) OR has one of its listed
employment statuses; any one criterion alone is enough.
"""
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple

from pydantic import ValidationError as PydanticValidationError

from billharmony.config.fpl import FPLTable, get_fpl_table
from billharmony.models.catalog import AssistanceProgram
from billharmony.models.eligibility import EligibilityResult, HouseholdProfile
from billharmony.models.enums import CoverageType
from billharmony.utils.decimal_utils import (
    FINANCIAL_PRECISION,
    Number,
    decimal_to_float,
    format_currency,
    parse_decimal,
    round_half_up,
)
from billharmony.utils.errors import ValidationError
from billharmony.utils.logger import get_logger

logger = get_logger(__name__)

# (max income as % of FPL, score), checked in order
SCORE_STEPS: Tuple[Tuple[int, int], ...] = (
    (100, 95),
    (138, 85),
    (200, 70),
    (250, 50),
    (300, 30),
)

UNEMPLOYED = "unemployed"
UNEMPLOYED_BONUS = 15
MAX_SCORE = 100

HUNDRED = Decimal("100")
ZERO = Decimal("0")


def _normalize_status(status: str) -> str:
    return status.strip().lower()


def build_profile(
    income: Optional[Number],
    family_size: Optional[int],
    employment_status: Optional[str],
    zip_code: Optional[str] = None,
) -> HouseholdProfile:
    """
    Build a household profile from loosely typed input.

    Raises:
        ValidationError: listing every required field that is missing, or
            describing the first invalid value
    """
    missing = [
        name
        for name, value in (
            ("household_income", income),
            ("family_size", family_size),
            ("employment_status", employment_status),
        )
        if value is None or (isinstance(value, str) and not value.strip())
    ]
    if missing:
        raise ValidationError("Missing required fields", details={"missing": missing})

    try:
        return HouseholdProfile(
            income=income,
            family_size=family_size,
            employment_status=str(employment_status).strip(),
            zip_code=zip_code,
        )
    except PydanticValidationError as e:
        error = e.errors()[0]
        raise ValidationError(
            "Invalid household profile",
            details={"field": ".".join(str(part) for part in error["loc"]), "error": error["msg"]},
        ) from e


class EligibilityScorer:
    """Scores a household against a list of assistance programs."""

    def __init__(self, fpl_table: Optional[FPLTable] = None):
        self.fpl_table = fpl_table or get_fpl_table()

    def income_percent_of_fpl(self, income: Number, family_size: int) -> Decimal:
        threshold = Decimal(self.fpl_table.threshold_for(family_size))
        return parse_decimal(income) / threshold * HUNDRED

    @staticmethod
    def base_score(percent_of_fpl: Decimal) -> int:
        for limit, score in SCORE_STEPS:
            if percent_of_fpl <= limit:
                return score
        return 0

    @staticmethod
    def qualifies(
        program: AssistanceProgram,
        percent_of_fpl: Decimal,
        employment_status: str,
        income: Optional[Number] = None,
    ) -> bool:
        """
        True if any one criterion admits the household: the FPL percent cap,
        the absolute income cap or the employment list.
        """
        criteria = program.eligibility

        if criteria.max_income_percent_of_fpl is not None:
            if percent_of_fpl <= parse_decimal(criteria.max_income_percent_of_fpl):
                return True

        if criteria.max_income is not None and income is not None:
            if parse_decimal(income) <= parse_decimal(criteria.max_income):
                return True

        if criteria.employment_status:
            allowed = {_normalize_status(status) for status in criteria.employment_status}
            if _normalize_status(employment_status) in allowed:
                return True

        return False

    @staticmethod
    def assistance_for(program: AssistanceProgram, procedure_cost: Decimal) -> Decimal:
        """How much of ``procedure_cost`` a program would pay."""
        if program.coverage_type == CoverageType.FULL or program.coverage_amount == "full":
            return procedure_cost

        amount = parse_decimal(program.coverage_amount)
        if program.coverage_type == CoverageType.PERCENTAGE:
            return (procedure_cost * amount / HUNDRED).quantize(FINANCIAL_PRECISION)

        # Fixed grants never exceed the bill
        return min(amount, procedure_cost)

    def score(
        self,
        profile: HouseholdProfile,
        procedure_cost: Number,
        programs: Sequence[AssistanceProgram],
    ) -> EligibilityResult:
        """
        Score ``profile`` against ``programs`` for a procedure costing ``procedure_cost``.

        Raises:
            ValidationError: if the profile is missing or the cost is not a
                non-negative amount
        """
        if profile is None:
            raise ValidationError("Household profile is required", details={"field": "profile"})

        cost = parse_decimal(procedure_cost)
        if cost is None or cost < ZERO:
            raise ValidationError(
                "procedure_cost must be a non-negative amount",
                details={"field": "procedure_cost"},
            )

        percent = self.income_percent_of_fpl(profile.income, profile.family_size)

        qualified: List[AssistanceProgram] = []
        best_assistance = ZERO
        recommended: Optional[AssistanceProgram] = None
        for program in programs:
            if not self.qualifies(program, percent, profile.employment_status, profile.income):
                continue
            qualified.append(program)
            assistance = self.assistance_for(program, cost)
            # Strictly greater, so the first program wins a tie
            if recommended is None or assistance > best_assistance:
                best_assistance = assistance
                recommended = program

        score = self.base_score(percent)
        if _normalize_status(profile.employment_status) == UNEMPLOYED:
            score = min(MAX_SCORE, score + UNEMPLOYED_BONUS)

        reasoning = self.reasoning(profile, percent, qualified, best_assistance, cost)

        logger.info(
            "Eligibility scored",
            score=score,
            family_size=profile.family_size,
            qualified_count=len(qualified),
            recommended_program=recommended.id if recommended else None,
        )

        return EligibilityResult(
            score=score,
            income_percent_of_fpl=decimal_to_float(round_half_up(percent, 2)),
            qualified_programs=qualified,
            estimated_assistance=decimal_to_float(best_assistance),
            recommended_program=recommended,
            reasoning=reasoning,
        )

    @staticmethod
    def reasoning(
        profile: HouseholdProfile,
        percent: Decimal,
        qualified: Sequence[AssistanceProgram],
        assistance: Decimal,
        cost: Decimal,
    ) -> str:
        count = len(qualified)
        plural = "" if count == 1 else "s"
        remaining = max(cost - assistance, ZERO)
        return (
            f"Based on your household income of {format_currency(parse_decimal(profile.income))} "
            f"({round_half_up(percent)}% of Federal Poverty Level for a family of {profile.family_size}) "
            f"and {profile.employment_status} employment status, you qualify for {count} "
            f"assistance program{plural}. Your estimated assistance is {format_currency(assistance)}, "
            f"reducing your cost to {format_currency(remaining)}."
        )
