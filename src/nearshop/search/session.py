"""
Location search session.

One instance per picker screen. It wires the autocomplete controller, the
place resolver, the reverse geocoder and the map capability together and
holds the current resolved address (the reference point for ranking).

Every resolution attempt (prediction selection, map tap, device location) is
tagged with a sequence number; only the latest attempt may replace the resolved
address, so a slow place-details response cannot overwrite a newer map tap.
A failed resolution keeps the previous address and records a user-visible error.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Iterable

import httpx

from nearshop.config.settings import Settings
from nearshop.core.errors import LocationSearchError, MapUnavailableError, NoSelectionError
from nearshop.core.geo import GeoPoint
from nearshop.domain.models import RankedShop, ResolvedAddress, SearchState, ShopLocation
from nearshop.geocoding.autocomplete import PlaceAutocompleteClient
from nearshop.geocoding.place_details import PlaceResolver
from nearshop.geocoding.reverse_geocode import ReverseGeocoder
from nearshop.ranking.proximity import rank
from nearshop.search.capability import MapCapability, MapRegion, select_map_capability
from nearshop.search.controller import SearchQueryController, StateListener

logger = logging.getLogger(__name__)


class LocationSearchSession:
    def __init__(
        self,
        *,
        controller: SearchQueryController,
        resolver: PlaceResolver,
        geocoder: ReverseGeocoder,
        capability: MapCapability,
        language_code: str | None = None,
        enrich_place_details: bool = True,
        initial: ResolvedAddress | None = None,
    ):
        self._controller = controller
        self._resolver = resolver
        self._geocoder = geocoder
        self._capability = capability
        self._language_code = language_code
        self._enrich_place_details = enrich_place_details

        self._resolved = initial
        self._error: LocationSearchError | None = None
        self._resolution_seq = 0
        self._closed = False

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        client: httpx.AsyncClient | None = None,
        capability: MapCapability | None = None,
        on_change: StateListener | None = None,
        initial: ResolvedAddress | None = None,
    ) -> "LocationSearchSession":
        autocomplete = PlaceAutocompleteClient(settings, client=client)
        return cls(
            controller=SearchQueryController.from_settings(settings, autocomplete, on_change=on_change),
            resolver=PlaceResolver(settings, client=client),
            geocoder=ReverseGeocoder(settings, client=client),
            capability=capability if capability is not None else select_map_capability(settings),
            language_code=settings.provider.language_code,
            enrich_place_details=settings.search.enrich_place_details,
            initial=initial,
        )

    # -- read-only views -------------------------------------------------

    @property
    def state(self) -> SearchState:
        return self._controller.state

    @property
    def controller(self) -> SearchQueryController:
        return self._controller

    @property
    def capability(self) -> MapCapability:
        return self._capability

    @property
    def resolved(self) -> ResolvedAddress | None:
        return self._resolved

    @property
    def reference_point(self) -> GeoPoint | None:
        return self._resolved.point if self._resolved is not None else None

    @property
    def last_error(self) -> LocationSearchError | None:
        return self._error

    @property
    def error_message(self) -> str | None:
        if self._error is None:
            return None
        return self._error.user_message or str(self._error)

    # -- typing ----------------------------------------------------------

    def on_query_changed(self, text: str) -> None:
        self._controller.on_query_changed(text)

    def clear_query(self) -> None:
        self._controller.clear()

    # -- resolution ------------------------------------------------------

    async def _resolve(
        self, source: str, attempt: Callable[[], Awaitable[ResolvedAddress]]
    ) -> ResolvedAddress | None:
        if self._closed:
            logger.debug("Ignoring %s resolution on closed session", source)
            return None
        self._resolution_seq += 1
        seq = self._resolution_seq
        try:
            resolved = await attempt()
        except LocationSearchError as exc:
            if seq != self._resolution_seq or self._closed:
                logger.debug("Dropping stale %s failure: %s", source, exc)
                return None
            logger.warning("Resolution via %s failed: %s", source, exc)
            self._error = exc
            return None

        if seq != self._resolution_seq or self._closed:
            logger.debug("Dropping stale %s resolution seq=%s", source, seq)
            return None
        self._resolved = resolved
        self._error = None
        return resolved

    async def _enrich(self, resolved: ResolvedAddress) -> ResolvedAddress:
        """Fill a missing province/city from reverse geocoding; failures are ignored."""
        if not self._enrich_place_details or (resolved.province and resolved.city):
            return resolved
        try:
            extra = await self._geocoder.reverse_geocode(resolved.point, language_code=self._language_code)
        except LocationSearchError as exc:
            logger.info("Skipping address enrichment: %s", exc)
            return resolved
        return resolved.model_copy(
            update={
                "province": resolved.province or extra.province,
                "city": resolved.city or extra.city,
            }
        )

    async def on_prediction_selected(self, place_id: str) -> ResolvedAddress | None:
        """Resolve a tapped prediction and make it the reference point."""
        chosen = next((p for p in self.state.predictions if p.place_id == place_id), None)
        if chosen is not None:
            self._controller.accept_selection(chosen.description)

        async def attempt() -> ResolvedAddress:
            resolved = await self._resolver.resolve(place_id, language_code=self._language_code)
            return await self._enrich(resolved)

        return await self._resolve("place-details", attempt)

    async def on_map_interaction(self, point: GeoPoint) -> ResolvedAddress | None:
        """Reverse geocode a tapped or dragged map coordinate.

        Raises:
            MapUnavailableError: If this host has no interactive map.
        """
        if not self._capability.available:
            raise MapUnavailableError(getattr(self._capability, "reason", None))
        return await self._resolve(
            "map", lambda: self._geocoder.reverse_geocode(point, language_code=self._language_code)
        )

    async def on_current_location(self, point: GeoPoint) -> ResolvedAddress | None:
        """Reverse geocode the device position (no map needed)."""
        return await self._resolve(
            "current-location",
            lambda: self._geocoder.reverse_geocode(point, language_code=self._language_code),
        )

    def confirm(self) -> ResolvedAddress:
        """Return the address to hand back to the caller.

        Raises:
            NoSelectionError: If nothing has been resolved yet.
        """
        if self._resolved is None:
            raise NoSelectionError("no location has been selected")
        return self._resolved

    # -- map / ranking ---------------------------------------------------

    def map_region(self) -> MapRegion | None:
        return self._capability.initial_region(self.reference_point)

    def rank_shops(self, shops: Iterable[ShopLocation]) -> list[RankedShop]:
        return rank(self.reference_point, shops)

    async def drain(self) -> None:
        await self._controller.drain()

    def close(self) -> None:
        self._closed = True
        self._controller.close()
