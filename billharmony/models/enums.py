"""
Enumerations shared by catalog and request models.

Defined as string enums so they serialize to plain JSON strings.
"""
import enum


class CareSetting(str, enum.Enum):
    """Where a procedure is performed."""

    INPATIENT = "inpatient"
    OUTPATIENT = "outpatient"


class NetworkType(str, enum.Enum):
    """Which facilities a plan's benefits apply to."""

    IN_NETWORK = "in-network"
    OUT_OF_NETWORK = "out-of-network"
    BOTH = "both"


class CoverageType(str, enum.Enum):
    """How an assistance program pays."""

    FULL = "full"
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class LocationSource(str, enum.Enum):
    """How a location token was turned into coordinates."""

    ZIP_TABLE = "zip_table"
    KNOWN_PLACE = "known_place"
    DEFAULT = "default"
