from billharmony.services.location.geo import calculate_distance
from billharmony.services.location.resolver import LocationResolver

__all__ = ["LocationResolver", "calculate_distance"]
