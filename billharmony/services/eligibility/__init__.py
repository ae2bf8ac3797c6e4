from billharmony.services.eligibility.scorer import EligibilityScorer, build_profile

__all__ = ["EligibilityScorer", "build_profile"]
