from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from math import asin, cos, radians, sin, sqrt

"""
Geospatial helpers.

A tiny geometry layer so the ranking and search modules can compute distances
without pulling in heavier GIS dependencies.
"""

EARTH_RADIUS_KM = 6371.0

_ONE_DECIMAL = Decimal("0.1")


@dataclass(frozen=True)
class GeoPoint:
    """A WGS-84 latitude/longitude pair in decimal degrees."""

    lat: float
    lng: float

    def as_latlng(self) -> str:
        """Return the provider's `"lat,lng"` query form."""
        return f"{self.lat},{self.lng}"


def haversine_km(a: GeoPoint, b: GeoPoint) -> float:
    """Compute the unrounded great-circle distance in kilometers."""
    lat1 = radians(a.lat)
    lng1 = radians(a.lng)
    lat2 = radians(b.lat)
    lng2 = radians(b.lng)

    dlat = lat2 - lat1
    dlng = lng2 - lng1

    h = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlng / 2) ** 2
    # Floating drift can push h a hair above 1 for antipodal points.
    h = min(1.0, max(0.0, h))
    return 2 * EARTH_RADIUS_KM * asin(sqrt(h))


def round_one_decimal(value: float) -> float:
    """Round to one decimal place, halves away from zero."""
    return float(Decimal(repr(value)).quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP))


def distance_km(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance between `a` and `b`, rounded to 0.1 km."""
    return round_one_decimal(haversine_km(a, b))
