import asyncio

import pytest

from nearshop.config.settings import Settings
from nearshop.core.errors import MapUnavailableError, NoResultError, NoSelectionError, TransientNetworkError
from nearshop.core.geo import GeoPoint
from nearshop.domain.models import PlacePrediction, ResolvedAddress, SearchPhase, ShopLocation
from nearshop.search.capability import MapCapable, MapUnavailable
from nearshop.search.controller import SearchQueryController
from nearshop.search.session import LocationSearchSession

CENTER = GeoPoint(lat=-32.4827, lng=-58.2363)
TAP = GeoPoint(lat=-32.49, lng=-58.24)

GALARZA = ResolvedAddress(
    formatted_address="Galarza 100, Concepción del Uruguay, Entre Ríos",
    province="Entre Ríos",
    city="Concepción del Uruguay",
    point=CENTER,
)


class StubAutocomplete:
    async def fetch_predictions(self, query, *, language_code=None, country_filter=None):  # noqa: ARG002
        return [PlacePrediction(place_id="galarza", description="Galarza 100, Concepción del Uruguay")]


class StubResolver:
    def __init__(self, results):
        self.results = results
        self.gates: dict[str, asyncio.Event] = {}

    async def resolve(self, place_id, *, language_code=None):  # noqa: ARG002
        gate = self.gates.get(place_id)
        if gate is not None:
            await gate.wait()
        result = self.results[place_id]
        if isinstance(result, Exception):
            raise result
        return result


class StubGeocoder:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls: list[GeoPoint] = []

    async def reverse_geocode(self, point, *, language_code=None):  # noqa: ARG002
        self.calls.append(point)
        if self.error is not None:
            raise self.error
        return self.result.model_copy(update={"point": point})


def _session(*, resolver=None, geocoder=None, capability=None, enrich=True):
    controller = SearchQueryController(StubAutocomplete(), debounce_seconds=0.01)
    return LocationSearchSession(
        controller=controller,
        resolver=resolver or StubResolver({"galarza": GALARZA}),
        geocoder=geocoder or StubGeocoder(result=GALARZA),
        capability=capability or MapCapable(default_center=CENTER),
        enrich_place_details=enrich,
    )


def test_selecting_a_prediction_sets_the_reference_point():
    async def scenario():
        session = _session()
        session.on_query_changed("Galarza")
        await session.drain()
        assert session.state.phase is SearchPhase.RESULTS

        resolved = await session.on_prediction_selected("galarza")
        return session, resolved

    session, resolved = asyncio.run(scenario())

    assert resolved == GALARZA
    assert session.resolved == GALARZA
    assert session.reference_point == CENTER
    assert session.state.query == "Galarza 100, Concepción del Uruguay"
    assert session.state.predictions == ()
    assert session.confirm() == GALARZA


def test_missing_city_is_filled_from_reverse_geocoding():
    partial = GALARZA.model_copy(update={"city": ""})
    geocoder = StubGeocoder(result=GALARZA.model_copy(update={"city": "Centro"}))
    session = _session(resolver=StubResolver({"galarza": partial}), geocoder=geocoder)

    resolved = asyncio.run(session.on_prediction_selected("galarza"))

    assert resolved.city == "Centro"
    assert resolved.province == "Entre Ríos"
    assert resolved.point == CENTER
    assert geocoder.calls == [CENTER]


def test_enrichment_failure_keeps_the_resolved_address():
    partial = GALARZA.model_copy(update={"city": ""})
    geocoder = StubGeocoder(error=TransientNetworkError("reverse-geocode: offline"))
    session = _session(resolver=StubResolver({"galarza": partial}), geocoder=geocoder)

    resolved = asyncio.run(session.on_prediction_selected("galarza"))

    assert resolved == partial
    assert session.last_error is None


def test_enrichment_can_be_disabled():
    partial = GALARZA.model_copy(update={"city": ""})
    geocoder = StubGeocoder(result=GALARZA)
    session = _session(resolver=StubResolver({"galarza": partial}), geocoder=geocoder, enrich=False)

    asyncio.run(session.on_prediction_selected("galarza"))

    assert geocoder.calls == []
    assert session.resolved.city == ""


def test_failed_resolution_keeps_previous_address_and_reports_error():
    resolver = StubResolver({"galarza": GALARZA, "broken": NoResultError("place-details: no geometry")})
    session = _session(resolver=resolver)

    async def scenario():
        await session.on_prediction_selected("galarza")
        return await session.on_prediction_selected("broken")

    assert asyncio.run(scenario()) is None
    assert session.resolved == GALARZA
    assert isinstance(session.last_error, NoResultError)
    assert session.error_message == "Could not determine this location."

    # A later success clears the error.
    asyncio.run(session.on_prediction_selected("galarza"))
    assert session.error_message is None


def test_map_interaction_reverse_geocodes_the_tapped_point():
    geocoder = StubGeocoder(result=GALARZA)
    session = _session(geocoder=geocoder)

    resolved = asyncio.run(session.on_map_interaction(TAP))

    assert resolved.point == TAP
    assert session.reference_point == TAP
    assert geocoder.calls == [TAP]


def test_map_interaction_without_map_support_raises():
    session = _session(capability=MapUnavailable(reason="web build"))

    with pytest.raises(MapUnavailableError, match="web build"):
        asyncio.run(session.on_map_interaction(TAP))
    assert session.map_region() is None


def test_current_location_works_without_a_map():
    session = _session(capability=MapUnavailable(reason="web build"))

    resolved = asyncio.run(session.on_current_location(TAP))

    assert resolved.point == TAP
    assert session.confirm().point == TAP


def test_slow_prediction_resolution_does_not_overwrite_a_newer_map_tap():
    resolver = StubResolver({"galarza": GALARZA})
    session = _session(resolver=resolver)

    async def scenario():
        resolver.gates["galarza"] = asyncio.Event()
        slow = asyncio.create_task(session.on_prediction_selected("galarza"))
        await asyncio.sleep(0)
        await session.on_map_interaction(TAP)
        resolver.gates["galarza"].set()
        return await slow

    assert asyncio.run(scenario()) is None
    assert session.reference_point == TAP


def test_confirm_without_selection_raises():
    session = _session()
    with pytest.raises(NoSelectionError):
        session.confirm()
    assert session.reference_point is None


def test_map_region_follows_the_reference_point():
    session = _session(capability=MapCapable(default_center=CENTER, region_delta=0.02))

    region = session.map_region()
    assert region.center == CENTER
    assert region.lat_delta == region.lng_delta == 0.02

    asyncio.run(session.on_map_interaction(TAP))
    assert session.map_region().center == TAP


def test_rank_shops_uses_the_reference_point():
    shops = [
        ShopLocation(id="far", point=GeoPoint(lat=-32.60, lng=-58.2363)),
        ShopLocation(id="unknown"),
        ShopLocation(id="near", point=CENTER),
    ]
    session = _session()

    assert [r.id for r in session.rank_shops(shops)] == ["far", "unknown", "near"]

    asyncio.run(session.on_prediction_selected("galarza"))
    ranked = session.rank_shops(shops)

    assert [r.id for r in ranked] == ["near", "far", "unknown"]
    assert ranked[0].distance_km == 0.0


def test_clear_query_and_close():
    async def scenario():
        session = _session()
        session.on_query_changed("Galarza")
        session.clear_query()
        cleared = session.state
        session.close()
        late = await session.on_current_location(TAP)
        return session, cleared, late

    session, cleared, late = asyncio.run(scenario())

    assert cleared.phase is SearchPhase.IDLE
    assert cleared.query == ""
    assert late is None
    assert session.resolved is None


def test_from_settings_wires_capability_from_configuration():
    settings = Settings()
    settings = settings.model_copy(update={"map": settings.map.model_copy(update={"enabled": False})})

    session = LocationSearchSession.from_settings(settings)

    assert isinstance(session.capability, MapUnavailable)
    assert session.state.phase is SearchPhase.IDLE
    assert session.controller._debounce_seconds == settings.search.debounce_ms / 1000
