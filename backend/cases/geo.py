"""
Distance helpers for live responder tracking.

The owner's screen shows how far away the assigned responder is, stored
on ``Case.current_distance_km`` with two decimals.
"""

import math
from decimal import ROUND_HALF_UP, Decimal

from core.constants import EARTH_RADIUS_KM

_TWO_PLACES = Decimal("0.01")


def _hav(angle: float) -> float:
    return math.sin(angle / 2) ** 2


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance on a sphere of radius ``EARTH_RADIUS_KM``."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    h = _hav(phi2 - phi1) + math.cos(phi1) * math.cos(phi2) * _hav(math.radians(lng2 - lng1))
    # Floating error can push h a hair above 1 for antipodal points.
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(min(h, 1.0)))


def rounded_km(distance: float) -> Decimal:
    """Distance as a two-decimal ``Decimal`` for storage."""
    return Decimal(str(distance)).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)


def distance_to_owner(
    responder_lat: float,
    responder_lng: float,
    owner_lat: float,
    owner_lng: float,
) -> Decimal:
    """Rounded distance from the responder to the owner's reported location."""
    return rounded_km(haversine_km(responder_lat, responder_lng, owner_lat, owner_lng))


def validate_coordinates(latitude: float, longitude: float) -> bool:
    return -90.0 <= latitude <= 90.0 and -180.0 <= longitude <= 180.0
