"""Place details client: resolves a selected prediction to a coordinate."""

from __future__ import annotations

import logging
from typing import Any

from nearshop.core.errors import NoResultError
from nearshop.core.geo import GeoPoint
from nearshop.domain.models import ResolvedAddress
from nearshop.geocoding.base import GoogleMapsEndpoint, check_status, extract_province_city

logger = logging.getLogger(__name__)


def parse_place_details(payload: dict[str, Any], *, place_id: str) -> ResolvedAddress:
    """Build a `ResolvedAddress` from a place-details response.

    Raises:
        NoResultError: When the result carries no usable geometry.
        ProviderError: On a failure status.
    """
    check_status(payload, endpoint="place-details")

    result = payload.get("result")
    if not isinstance(result, dict):
        raise NoResultError(f"place-details: no result for {place_id}")
    try:
        location = result["geometry"]["location"]
        point = GeoPoint(lat=float(location["lat"]), lng=float(location["lng"]))
    except (KeyError, TypeError, ValueError) as exc:
        raise NoResultError(f"place-details: no geometry for {place_id}") from exc

    province, city = extract_province_city(result.get("address_components"))
    return ResolvedAddress(
        formatted_address=str(result.get("formatted_address") or ""),
        province=province,
        city=city,
        point=point,
    )


class PlaceResolver(GoogleMapsEndpoint):
    """Fetches place details for a prediction's `place_id`."""

    endpoint_name = "place-details"

    async def resolve(self, place_id: str, *, language_code: str | None = None) -> ResolvedAddress:
        provider = self._settings.provider
        params = {"place_id": place_id, "language": language_code or provider.language_code}
        logger.debug("Resolving place_id=%s", place_id)
        payload = await self._get_payload(provider.place_details_url, params)
        resolved = parse_place_details(payload, place_id=place_id)
        logger.info(
            "Resolved place_id=%s to (%.6f, %.6f)", place_id, resolved.point.lat, resolved.point.lng
        )
        return resolved
