"""Tests for insurance benefit arithmetic."""
from decimal import Decimal

import pytest

from billharmony.models.catalog import PlanBenefits
from billharmony.services.pricing import BenefitCalculator, apply_benefits, explain_cost
from tests.factories import PlanBenefitsFactory, PlanFactory


@pytest.fixture
def premium_plan():
    """500 deductible, 25 copay, 10% coinsurance, 3000 out-of-pocket max."""
    return PlanFactory(id="premium", name="Premium PPO")


@pytest.mark.unit
class TestApplyBenefits:
    """Tests for the deductible, copay, coinsurance sequence."""

    @pytest.mark.parametrize(
        "base_price,expected",
        [
            (1800, 653),
            (1650, 638),
            (1550, 628),
            (1790, 652),
            (300, 300),
            (510, 510),
            (100000, 3000),
        ],
    )
    def test_premium_plan(self, premium_plan, base_price, expected):
        assert apply_benefits(base_price, premium_plan) == expected

    def test_coinsurance_rounds_half_up(self, premium_plan):
        """126.5 of coinsurance becomes 127, not the banker's 126."""
        split = BenefitCalculator().split(1790, premium_plan)

        assert split.coinsurance == Decimal("127")

    def test_copay_is_not_clamped_to_remaining(self, premium_plan):
        """Copay exceeds what's left after the deductible; the base price caps the total."""
        split = BenefitCalculator().split(510, premium_plan)

        assert split.deductible == Decimal("500")
        assert split.copay == Decimal("25")
        assert split.coinsurance == Decimal("0")
        assert split.total == Decimal("510")

    def test_deductible_consumes_everything(self, premium_plan):
        split = BenefitCalculator().split(300, premium_plan)

        assert split.copay == Decimal("0")
        assert split.total == Decimal("300")
        assert split.insurance_covers == Decimal("0")

    def test_out_of_pocket_max_caps_total(self):
        plan = PlanFactory(benefits=PlanBenefitsFactory(out_of_pocket_max=600))

        assert apply_benefits(1800, plan) == 600

    def test_zero_plan_pays_nothing(self):
        assert apply_benefits(1800, PlanBenefits()) == 0

    def test_accepts_benefits_directly(self):
        benefits = PlanBenefitsFactory(deductible=0, copay=0, coinsurance=20, out_of_pocket_max=5000)

        assert apply_benefits(1000, benefits) == 200

    def test_medicaid_plan(self, catalog):
        plan = catalog.get_insurer("medicaid").get_plan("medi-cal")

        assert apply_benefits(720, plan) == 0

    def test_never_exceeds_base(self):
        plan = PlanFactory(benefits=PlanBenefitsFactory(deductible=0, copay=100, coinsurance=0))

        assert apply_benefits(40, plan) == 40


@pytest.mark.unit
class TestExplainCost:
    """Tests for patient-facing breakdowns."""

    def test_cash_price(self):
        breakdown = explain_cost(1800)

        assert breakdown.total == 1800
        assert breakdown.deductible is None
        assert breakdown.plain_language.startswith(
            "Without insurance, you would pay $1,800 for this procedure."
        )

    def test_negotiated_rate_without_plan(self):
        breakdown = explain_cost(1750, insurer_name="Aetna")

        assert breakdown.total == 1750
        assert breakdown.copay is None
        assert "Aetna" in breakdown.explanation
        assert "$1,750" in breakdown.plain_language

    def test_plan_breakdown(self, premium_plan):
        breakdown = explain_cost(1800, plan=premium_plan)

        assert breakdown.total == 653
        assert breakdown.deductible == 500
        assert breakdown.copay == 25
        assert breakdown.coinsurance == 128
        assert breakdown.insurance_covers == 1147
        assert "Premium PPO" in breakdown.explanation
        assert breakdown.plain_language == (
            "Your estimated cost: $653. This includes $500 deductible, $25 copay, "
            "and $128 coinsurance. Your insurance covers the remaining $1,147. "
            "Your out-of-pocket maximum is $3,000."
        )
