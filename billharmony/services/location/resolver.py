"""Turn a location token (zip code or place name) into coordinates.

This is a lookup, not a geocoder. Zip codes resolve through the catalog's zip
table; anything else is matched by substring against a short list of known
places. Unrecognized tokens get the default coordinate, which is reported with
``LocationSource.DEFAULT`` and logged so callers can tell it apart from a real
match.
"""
import re
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from billharmony.models.catalog import Coordinates
from billharmony.models.enums import LocationSource
from billharmony.models.search import ResolvedLocation
from billharmony.utils.logger import get_logger

logger = get_logger(__name__)

ZIP_PATTERN = re.compile(r"^\d{5}$")


@dataclass(frozen=True)
class KnownPlace:
    name: str
    zip_code: str
    coordinates: Coordinates


# Checked in order; first substring hit wins
KNOWN_PLACES: Tuple[KnownPlace, ...] = (
    KnownPlace("beverly hills", "90210", Coordinates(lat=34.0736, lng=-118.4004)),
    KnownPlace("los angeles", "90033", Coordinates(lat=34.0522, lng=-118.2437)),
    KnownPlace("orange", "92868", Coordinates(lat=33.7879, lng=-117.8531)),
    KnownPlace("san diego", "92103", Coordinates(lat=32.7157, lng=-117.1611)),
    KnownPlace("riverside", "92501", Coordinates(lat=33.9533, lng=-117.3962)),
    KnownPlace("long beach", "90806", Coordinates(lat=33.8044, lng=-118.1950)),
    KnownPlace("santa monica", "90404", Coordinates(lat=34.0195, lng=-118.4912)),
    KnownPlace("pasadena", "91105", Coordinates(lat=34.1478, lng=-118.1445)),
    KnownPlace("glendale", "91206", Coordinates(lat=34.1425, lng=-118.2551)),
    KnownPlace("burbank", "91505", Coordinates(lat=34.1808, lng=-118.3090)),
)

DEFAULT_COORDINATES = KNOWN_PLACES[0].coordinates


class LocationResolver:
    """Resolve location tokens against a zip table and the known-place list."""

    def __init__(
        self,
        zip_codes: Mapping[str, Coordinates],
        known_places: Tuple[KnownPlace, ...] = KNOWN_PLACES,
        default: Optional[Coordinates] = DEFAULT_COORDINATES,
    ):
        self.zip_codes = zip_codes
        self.known_places = known_places
        self.default = default

    def resolve(self, token: str) -> Optional[ResolvedLocation]:
        """
        Resolve a token, falling back to the default coordinate.

        Returns None only for an empty token (or when no default is configured).
        """
        resolved = self.resolve_strict(token)
        if resolved is not None:
            return resolved

        trimmed = (token or "").strip()
        if not trimmed or self.default is None:
            return None

        logger.warning(
            "Location not recognized, using default coordinates",
            location=trimmed,
            lat=self.default.lat,
            lng=self.default.lng,
        )
        return ResolvedLocation(token=trimmed, coordinates=self.default, source=LocationSource.DEFAULT)

    def resolve_strict(self, token: str) -> Optional[ResolvedLocation]:
        """Resolve a token without the default fallback."""
        trimmed = (token or "").strip()
        if not trimmed:
            return None

        if ZIP_PATTERN.match(trimmed):
            coordinates = self.zip_codes.get(trimmed)
            if coordinates is not None:
                return ResolvedLocation(token=trimmed, coordinates=coordinates, source=LocationSource.ZIP_TABLE)

        lowered = trimmed.lower()
        for place in self.known_places:
            if place.name in lowered or place.zip_code in trimmed:
                logger.debug("Location matched known place", location=trimmed, place=place.name)
                return ResolvedLocation(
                    token=trimmed, coordinates=place.coordinates, source=LocationSource.KNOWN_PLACE
                )

        return None
