"""
Insurance benefit arithmetic.

A plan's cost sharing is applied to a base price in a fixed order, each step
working on whatever is left unpaid after the previous one:

1. Deductible: ``min(deductible, remaining)``
2. Copay: the full copay, when anything remains (not clamped to remaining)
3. Coinsurance: ``round_half_up(remaining * coinsurance / 100)``, when anything remains
4. Clamp to the out-of-pocket maximum, then to the base price itself

All arithmetic is done in ``Decimal``; floats only appear at the boundary.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Union

from billharmony.models.catalog import Plan, PlanBenefits
from billharmony.models.search import CostBreakdown
from billharmony.utils.decimal_utils import (
    Number,
    decimal_to_float,
    format_currency,
    round_half_up,
    to_decimal,
)

ZERO = Decimal("0")


@dataclass(frozen=True)
class BenefitSplit:
    """How a patient's share of one price breaks down."""

    base_price: Decimal
    deductible: Decimal
    copay: Decimal
    coinsurance: Decimal
    total: Decimal

    @property
    def insurance_covers(self) -> Decimal:
        return self.base_price - self.total


def _benefits_of(plan_or_benefits: Union[Plan, PlanBenefits]) -> PlanBenefits:
    if isinstance(plan_or_benefits, Plan):
        return plan_or_benefits.benefits
    return plan_or_benefits


class BenefitCalculator:
    """Converts a charge into the patient's out-of-pocket amount under a plan."""

    def split(self, base_price: Number, plan: Union[Plan, PlanBenefits]) -> BenefitSplit:
        """Apply the plan's cost sharing to ``base_price`` and keep each component."""
        benefits = _benefits_of(plan)
        base = to_decimal(base_price)
        remaining = base

        deductible = min(to_decimal(benefits.deductible), remaining)
        remaining -= deductible

        copay = ZERO
        plan_copay = to_decimal(benefits.copay)
        if remaining > ZERO and plan_copay > ZERO:
            copay = plan_copay
            remaining -= copay

        coinsurance = ZERO
        percent = to_decimal(benefits.coinsurance)
        if remaining > ZERO and percent > ZERO:
            coinsurance = round_half_up(remaining * percent / Decimal("100"))

        total = deductible + copay + coinsurance
        total = min(total, to_decimal(benefits.out_of_pocket_max))
        total = min(total, base)

        return BenefitSplit(
            base_price=base,
            deductible=deductible,
            copay=copay,
            coinsurance=coinsurance,
            total=total,
        )

    def apply(self, base_price: Number, plan: Union[Plan, PlanBenefits]) -> float:
        """Out-of-pocket amount for ``base_price`` under ``plan``."""
        return decimal_to_float(self.split(base_price, plan).total)

    def explain(
        self,
        price: Number,
        plan: Optional[Plan] = None,
        insurer_name: Optional[str] = None,
    ) -> CostBreakdown:
        """
        Patient-facing breakdown of a price.

        Args:
            price: Base price. For an insured estimate this is the charge the
                plan's benefits are applied to.
            plan: Plan to apply. Without one the price is explained as a cash
                price, or as a negotiated rate when ``insurer_name`` is given.
            insurer_name: Display name of the insurer, if any.

        Returns:
            CostBreakdown with the plain-language sentence filled in
        """
        amount = to_decimal(price)

        if plan is None:
            if insurer_name:
                return CostBreakdown(
                    total=decimal_to_float(amount),
                    explanation=f"This is the rate {insurer_name} has negotiated with this hospital.",
                    plain_language=(
                        f"With {insurer_name}, the negotiated price for this procedure is "
                        f"{format_currency(amount)}. Choose a plan to see your share after "
                        "deductible, copay, and coinsurance."
                    ),
                )
            return CostBreakdown(
                total=decimal_to_float(amount),
                explanation="This is the full cash price you would pay if paying out of pocket.",
                plain_language=(
                    f"Without insurance, you would pay {format_currency(amount)} for this procedure. "
                    "This is the total amount the hospital charges."
                ),
            )

        split = self.split(amount, plan)
        covers = split.insurance_covers
        oop_max = to_decimal(plan.benefits.out_of_pocket_max)

        return CostBreakdown(
            total=decimal_to_float(split.total),
            deductible=decimal_to_float(split.deductible),
            copay=decimal_to_float(split.copay),
            coinsurance=decimal_to_float(split.coinsurance),
            insurance_covers=decimal_to_float(covers),
            explanation=(
                f"This is your out-of-pocket cost based on your {plan.name} plan. "
                f"Your insurance covers {format_currency(covers)}."
            ),
            plain_language=(
                f"Your estimated cost: {format_currency(split.total)}. This includes "
                f"{format_currency(split.deductible)} deductible, {format_currency(split.copay)} copay, "
                f"and {format_currency(split.coinsurance)} coinsurance. Your insurance covers the "
                f"remaining {format_currency(covers)}. Your out-of-pocket maximum is "
                f"{format_currency(oop_max)}."
            ),
        )


_default_calculator = BenefitCalculator()


def apply_benefits(base_price: Number, plan: Union[Plan, PlanBenefits]) -> float:
    """Out-of-pocket amount for ``base_price`` under ``plan``."""
    return _default_calculator.apply(base_price, plan)


def explain_cost(
    price: Number,
    plan: Optional[Plan] = None,
    insurer_name: Optional[str] = None,
) -> CostBreakdown:
    return _default_calculator.explain(price, plan=plan, insurer_name=insurer_name)
