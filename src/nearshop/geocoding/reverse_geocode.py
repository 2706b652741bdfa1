"""Reverse geocoding client: coordinate to structured address."""

from __future__ import annotations

import logging
from typing import Any

from nearshop.core.errors import NoResultError
from nearshop.core.geo import GeoPoint
from nearshop.domain.models import ResolvedAddress
from nearshop.geocoding.base import GoogleMapsEndpoint, check_status, extract_province_city

logger = logging.getLogger(__name__)


def parse_reverse_geocode(payload: dict[str, Any], *, point: GeoPoint) -> ResolvedAddress:
    """Build a `ResolvedAddress` from the first reverse-geocode result.

    The returned point is the queried one, not the result's snapped geometry.
    """
    check_status(payload, endpoint="reverse-geocode")

    results = payload.get("results")
    if not isinstance(results, list) or not results or not isinstance(results[0], dict):
        raise NoResultError(f"reverse-geocode: no results for {point.as_latlng()}")

    first = results[0]
    province, city = extract_province_city(first.get("address_components"))
    return ResolvedAddress(
        formatted_address=str(first.get("formatted_address") or ""),
        province=province,
        city=city,
        point=point,
    )


class ReverseGeocoder(GoogleMapsEndpoint):
    endpoint_name = "reverse-geocode"

    async def reverse_geocode(self, point: GeoPoint, *, language_code: str | None = None) -> ResolvedAddress:
        provider = self._settings.provider
        params = {"latlng": point.as_latlng(), "language": language_code or provider.language_code}
        logger.debug("Reverse geocoding %s", point.as_latlng())
        payload = await self._get_payload(provider.reverse_geocode_url, params)
        resolved = parse_reverse_geocode(payload, point=point)
        logger.info("Reverse geocoded %s -> %s", point.as_latlng(), resolved.formatted_address)
        return resolved
