"""Special-location (airport, stadium, ...) detection for journey endpoints."""
import math
from typing import Iterable, NamedTuple, Optional

from chauffeur.models.location import DEFAULT_RADIUS_KM

EARTH_RADIUS_KM = 6371.0


class JourneyLocations(NamedTuple):
    pickup: Optional[object]
    dropoff: Optional[object]

    @property
    def pricing_location(self):
        """Location whose rate table prices the journey; pickup wins over dropoff."""
        return self.pickup or self.dropoff


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    dlat = math.radians(lat2 - lat1)
    dlng = math.radians(lng2 - lng1)

    a = (math.sin(dlat / 2) ** 2 +
         math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) *
         math.sin(dlng / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def covers(location, lat: float, lng: float) -> bool:
    if location.lat is None or location.lng is None:
        return False
    radius = location.radius_km or DEFAULT_RADIUS_KM
    return haversine_km(lat, lng, location.lat, location.lng) <= radius


def find_location(locations: Iterable, point) -> Optional[object]:
    """First active location whose radius contains ``point`` (anything with lat/lng)."""
    if point is None:
        return None
    for location in locations:
        if getattr(location, "is_active", True) and covers(location, point.lat, point.lng):
            return location
    return None


def detect_journey_locations(locations: Iterable, pickup, dropoff) -> JourneyLocations:
    locations = list(locations)
    return JourneyLocations(
        pickup=find_location(locations, pickup),
        dropoff=find_location(locations, dropoff),
    )
