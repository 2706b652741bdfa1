"""
Proximity ranking.

Annotates shops with their distance from a reference point and orders them
nearest-first. Ranking never drops shops: shops without coordinates (or every
shop, when there is no reference point) keep a `None` distance and sort after
all measured shops in their original relative order.
"""

from __future__ import annotations

from typing import Iterable

from nearshop.core.geo import GeoPoint, distance_km
from nearshop.domain.models import RankedShop, ShopLocation


def _sort_key(item: RankedShop) -> tuple[bool, float]:
    # False sorts before True, so measured shops come first.
    if item.distance_km is None:
        return (True, 0.0)
    return (False, item.distance_km)


def rank(reference: GeoPoint | None, shops: Iterable[ShopLocation]) -> list[RankedShop]:
    """Return shops annotated with `distance_km`, nearest first.

    With no reference point the input order is returned unchanged. `sorted`
    is stable, so equal distances and absent distances keep input order.
    """
    shops = list(shops)
    if reference is None:
        return [RankedShop(id=shop.id, distance_km=None) for shop in shops]

    annotated = [
        RankedShop(
            id=shop.id,
            distance_km=distance_km(reference, shop.point) if shop.point is not None else None,
        )
        for shop in shops
    ]
    return sorted(annotated, key=_sort_key)
