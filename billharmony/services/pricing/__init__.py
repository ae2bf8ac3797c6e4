from billharmony.services.pricing.benefits import (
    BenefitCalculator,
    BenefitSplit,
    apply_benefits,
    explain_cost,
)

__all__ = ["BenefitCalculator", "BenefitSplit", "apply_benefits", "explain_cost"]
