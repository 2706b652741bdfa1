from __future__ import annotations

from typing import Sequence

from nearshop.domain.models import RankedShop

NOT_AVAILABLE = "N/A"
LOCATION_NOT_SET = "Location not set"


def format_distance(distance_km: float | None) -> str:
    """Short distance label for shop cards, e.g. `2.3km`."""
    if distance_km is None:
        return NOT_AVAILABLE
    return f"{distance_km}km"


def format_location_label(city: str | None, province: str | None) -> str:
    """Header label for the user's location: `City, Province` or whichever part exists."""
    city = (city or "").strip()
    province = (province or "").strip()
    if city and province:
        return f"{city}, {province}"
    return city or province or LOCATION_NOT_SET


def nearest(ranked: Sequence[RankedShop]) -> RankedShop | None:
    """Pick the shop to preselect: first measured one, else the first shop."""
    for item in ranked:
        if item.distance_km is not None:
            return item
    return ranked[0] if ranked else None
