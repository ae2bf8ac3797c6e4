"""Great-circle distance."""
import math

EARTH_RADIUS_MILES = 3959


def calculate_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """
    Haversine distance in miles, rounded half-up to one decimal place.

    Example:
        >>> calculate_distance(34.0736, -118.4004, 34.0736, -118.4004)
        0.0
    """
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)

    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return math.floor(EARTH_RADIUS_MILES * c * 10 + 0.5) / 10
