"""Medical procedure price search and charity care eligibility."""

__version__ = "2.0.0"
