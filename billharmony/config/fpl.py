"""Federal Poverty Level table used for charity eligibility.

Thresholds can be overridden per household size via environment variables
(``FPL_BASE_1`` .. ``FPL_BASE_8``) and ``FPL_PER_PERSON_INCREMENT`` when a new
HHS table is published.
"""
import os
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from billharmony.utils.logger import get_logger

logger = get_logger(__name__)

# 2024 HHS poverty guidelines, 48 contiguous states
DEFAULT_FPL_THRESHOLDS = {
    1: 15760,
    2: 21380,
    3: 26980,
    4: 32580,
    5: 38180,
    6: 43780,
    7: 49380,
    8: 54980,
}

DEFAULT_PER_PERSON_INCREMENT = 5600

MAX_TABLE_FAMILY_SIZE = 8


@dataclass(frozen=True)
class FPLTable:
    """Immutable poverty threshold lookup."""

    thresholds: Mapping[int, int]
    per_person_increment: int

    def threshold_for(self, family_size: int) -> int:
        """
        Poverty threshold for a household.

        Sizes above the table extrapolate from the largest entry.

        Raises:
            ValueError: if ``family_size`` is below 1
        """
        if family_size < 1:
            raise ValueError(f"family_size must be >= 1, got {family_size}")
        if family_size <= MAX_TABLE_FAMILY_SIZE:
            return self.thresholds[family_size]
        extra_people = family_size - MAX_TABLE_FAMILY_SIZE
        return self.thresholds[MAX_TABLE_FAMILY_SIZE] + extra_people * self.per_person_increment


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer FPL override", env_var=name, value=raw)
        return default


def get_fpl_table() -> FPLTable:
    """Build the FPL table from defaults and environment overrides."""
    thresholds = {
        size: _env_int(f"FPL_BASE_{size}", default)
        for size, default in DEFAULT_FPL_THRESHOLDS.items()
    }
    return FPLTable(
        thresholds=MappingProxyType(thresholds),
        per_person_increment=_env_int("FPL_PER_PERSON_INCREMENT", DEFAULT_PER_PERSON_INCREMENT),
    )
