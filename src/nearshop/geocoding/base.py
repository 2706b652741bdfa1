"""
Shared plumbing for the Google Maps web-service endpoints.

Every endpoint is a GET returning JSON with a top-level `status`. This module
owns the parts all three clients agree on:
- API key guard (`ConfigurationError` before any network call),
- transport/parse failures mapped to `TransientNetworkError`,
- provider status classification,
- address component extraction (province / city policy).
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

import httpx

from nearshop.config.settings import Settings
from nearshop.core.errors import ConfigurationError, NoResultError, ProviderError, TransientNetworkError
from nearshop.core.http import get_json

logger = logging.getLogger(__name__)

STATUS_OK = "OK"
NO_RESULT_STATUSES = frozenset({"ZERO_RESULTS", "NOT_FOUND"})

PROVINCE_TYPE = "administrative_area_level_1"
CITY_TYPE = "locality"
CITY_FALLBACK_TYPE = "administrative_area_level_2"


def _first_component(components: Iterable[Any], component_type: str) -> str:
    for component in components:
        if not isinstance(component, dict):
            continue
        types = component.get("types") or []
        if isinstance(types, list) and component_type in types:
            return str(component.get("long_name") or "")
    return ""


def extract_province_city(components: Any) -> tuple[str, str]:
    """Return `(province, city)` from provider `address_components`.

    The first `locality` wins for city; `administrative_area_level_2` is only
    consulted when no locality exists, so it never overwrites one.
    """
    if not isinstance(components, list):
        return "", ""
    province = _first_component(components, PROVINCE_TYPE)
    city = _first_component(components, CITY_TYPE) or _first_component(components, CITY_FALLBACK_TYPE)
    return province, city


def check_status(payload: dict[str, Any], *, endpoint: str) -> None:
    """Raise for any non-OK provider status."""
    status = str(payload.get("status") or "")
    if status == STATUS_OK:
        return
    if status in NO_RESULT_STATUSES:
        raise NoResultError(f"{endpoint}: provider returned {status}")
    message = payload.get("error_message")
    raise ProviderError(
        f"{endpoint}: provider returned {status or 'no status'}" + (f" ({message})" if message else ""),
        status=status or None,
    )


class GoogleMapsEndpoint:
    """Base class for one Google Maps web-service client."""

    endpoint_name = "google-maps"

    def __init__(self, settings: Settings, *, client: httpx.AsyncClient | None = None):
        self._settings = settings
        self._client = client

    def _require_api_key(self) -> str:
        api_key = self._settings.provider.api_key
        if not api_key:
            raise ConfigurationError(
                "Google Maps API key is not configured. Set GOOGLE_MAPS_API_KEY."
            )
        return api_key

    async def _get_payload(self, url: str, params: dict[str, Any]) -> dict[str, Any]:
        """GET the endpoint with the API key attached and return the JSON object."""
        query = {**params, "key": self._require_api_key()}
        try:
            payload = await get_json(
                url,
                params=query,
                timeout_seconds=self._settings.app.http_timeout_seconds,
                client=self._client,
            )
        except httpx.HTTPError as exc:
            logger.warning("%s request failed: %s", self.endpoint_name, exc)
            raise TransientNetworkError(f"{self.endpoint_name}: {exc}") from exc
        except ValueError as exc:
            logger.warning("%s returned invalid JSON: %s", self.endpoint_name, exc)
            raise TransientNetworkError(f"{self.endpoint_name}: invalid JSON") from exc

        if not isinstance(payload, dict):
            raise TransientNetworkError(f"{self.endpoint_name}: unexpected response shape")
        return payload
