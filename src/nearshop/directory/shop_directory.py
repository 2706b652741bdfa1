"""
Shop directory client.

Fetches shop records from the backend API and reduces them to `ShopLocation`s
for ranking. The backend encodes coordinates as strings; anything that does
not parse to an in-range, finite number becomes an absent point instead of
failing the whole page.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Iterable

import httpx

from nearshop.config.settings import Settings
from nearshop.core.errors import TransientNetworkError
from nearshop.core.geo import GeoPoint
from nearshop.core.http import get_json
from nearshop.domain.models import ShopLocation

logger = logging.getLogger(__name__)


def _parse_coordinate(value: Any, *, limit: float) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or abs(number) > limit:
        return None
    return number


def parse_point(latitude: Any, longitude: Any) -> GeoPoint | None:
    """Parse directory-encoded coordinates; None when either part is unusable."""
    lat = _parse_coordinate(latitude, limit=90.0)
    lng = _parse_coordinate(longitude, limit=180.0)
    if lat is None or lng is None:
        return None
    return GeoPoint(lat=lat, lng=lng)


def shop_location_from_record(record: dict[str, Any]) -> ShopLocation | None:
    """Convert one directory record; None when it has no id."""
    shop_id = record.get("id")
    if shop_id is None or str(shop_id).strip() == "":
        return None
    return ShopLocation(
        id=str(shop_id),
        point=parse_point(record.get("latitude"), record.get("longitude")),
    )


def shop_locations_from_records(records: Iterable[Any]) -> list[ShopLocation]:
    out: list[ShopLocation] = []
    for record in records:
        if not isinstance(record, dict):
            logger.warning("Skipping non-object shop record: %r", record)
            continue
        shop = shop_location_from_record(record)
        if shop is None:
            logger.warning("Skipping shop record without id")
            continue
        out.append(shop)
    return out


class ShopDirectoryClient:
    """Reads shop locations from the backend `/shops` listing."""

    def __init__(self, settings: Settings, *, client: httpx.AsyncClient | None = None):
        self._settings = settings
        self._client = client

    async def list_shops(self, *, page: int = 1, limit: int | None = None) -> list[ShopLocation]:
        """Fetch one page of shops.

        Raises:
            TransientNetworkError: On transport failures or an unexpected payload.
        """
        directory = self._settings.directory
        url = f"{directory.base_url.rstrip('/')}/shops"
        params = {"page": page, "limit": limit or directory.page_size}
        try:
            payload = await get_json(
                url,
                params=params,
                timeout_seconds=self._settings.app.http_timeout_seconds,
                client=self._client,
            )
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Shop directory request failed: %s", exc)
            raise TransientNetworkError(f"shop-directory: {exc}") from exc

        records = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(records, list):
            raise TransientNetworkError("shop-directory: response is missing a 'data' list")

        shops = shop_locations_from_records(records)
        logger.debug("Shop directory page=%s returned %s shops", page, len(shops))
        return shops
