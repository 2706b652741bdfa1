"""
Place autocomplete client.

Turns partial text into `PlacePrediction`s. Autocomplete must never interrupt
typing, so `suggest()` fails open (empty list). The search controller uses
`fetch_predictions()` instead, which still treats any non-OK status as zero
results but lets transport failures through so the state machine can show
`Error`.
"""

from __future__ import annotations

import logging
from typing import Any

from nearshop.core.errors import LocationSearchError
from nearshop.domain.models import PlacePrediction
from nearshop.geocoding.base import STATUS_OK, GoogleMapsEndpoint

logger = logging.getLogger(__name__)


def parse_predictions(payload: dict[str, Any]) -> list[PlacePrediction]:
    """Parse an autocomplete response; anything but status OK yields []."""
    if payload.get("status") != STATUS_OK:
        return []
    raw = payload.get("predictions") or []
    if not isinstance(raw, list):
        return []

    out: list[PlacePrediction] = []
    seen: set[str] = set()
    for item in raw:
        if not isinstance(item, dict):
            continue
        place_id = str(item.get("place_id") or "")
        if not place_id or place_id in seen:
            continue
        seen.add(place_id)
        formatting = item.get("structured_formatting") or {}
        if not isinstance(formatting, dict):
            formatting = {}
        description = str(item.get("description") or "")
        out.append(
            PlacePrediction(
                place_id=place_id,
                description=description,
                main_text=str(formatting.get("main_text") or description),
                secondary_text=str(formatting.get("secondary_text") or ""),
            )
        )
    return out


class PlaceAutocompleteClient(GoogleMapsEndpoint):
    """Queries the provider's place-autocomplete endpoint."""

    endpoint_name = "place-autocomplete"

    async def fetch_predictions(
        self,
        query: str,
        *,
        language_code: str | None = None,
        country_filter: str | None = None,
    ) -> list[PlacePrediction]:
        """Fetch predictions for `query`.

        Raises:
            TransientNetworkError: On transport or parse failures.
            ConfigurationError: If no API key is configured.
        """
        provider = self._settings.provider
        params = {
            "input": query,
            "language": language_code or provider.language_code,
            "components": country_filter or provider.country_filter,
        }
        logger.debug("Autocomplete query=%r", query)
        payload = await self._get_payload(provider.autocomplete_url, params)
        predictions = parse_predictions(payload)
        if payload.get("status") != STATUS_OK:
            logger.debug("Autocomplete status=%s treated as zero results", payload.get("status"))
        return predictions

    async def suggest(
        self,
        query: str,
        *,
        language_code: str | None = None,
        country_filter: str | None = None,
    ) -> list[PlacePrediction]:
        """Fail-open variant: any error yields an empty list."""
        if not query:
            return []
        try:
            return await self.fetch_predictions(
                query, language_code=language_code, country_filter=country_filter
            )
        except LocationSearchError as exc:
            logger.warning("Autocomplete failed for %r: %s", query, exc)
            return []
