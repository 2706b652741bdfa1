import math

import pytest

from nearshop.core.geo import GeoPoint, distance_km, haversine_km, round_one_decimal

BUENOS_AIRES = GeoPoint(lat=-34.6037, lng=-58.3816)
CONCEPCION_DEL_URUGUAY = GeoPoint(lat=-32.4827, lng=-58.2363)


def test_distance_is_symmetric():
    assert distance_km(BUENOS_AIRES, CONCEPCION_DEL_URUGUAY) == distance_km(
        CONCEPCION_DEL_URUGUAY, BUENOS_AIRES
    )


def test_distance_to_self_is_zero():
    assert distance_km(BUENOS_AIRES, BUENOS_AIRES) == 0.0
    assert distance_km(GeoPoint(lat=0.0, lng=0.0), GeoPoint(lat=0.0, lng=0.0)) == 0.0


def test_buenos_aires_to_concepcion_del_uruguay():
    d = distance_km(BUENOS_AIRES, CONCEPCION_DEL_URUGUAY)
    assert abs(d - 236.0) <= 1.0
    # Result is always reported with one decimal.
    assert d == round(d, 1)


def test_one_degree_of_latitude_on_a_meridian():
    d = haversine_km(GeoPoint(lat=0.0, lng=0.0), GeoPoint(lat=1.0, lng=0.0))
    assert d == pytest.approx(6371.0 * math.pi / 180.0)
    assert distance_km(GeoPoint(lat=0.0, lng=0.0), GeoPoint(lat=1.0, lng=0.0)) == 111.2


def test_antipodal_points_do_not_fail():
    d = haversine_km(GeoPoint(lat=0.0, lng=0.0), GeoPoint(lat=0.0, lng=180.0))
    assert d == pytest.approx(math.pi * 6371.0)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (0.05, 0.1),
        (2.25, 2.3),
        (2.34, 2.3),
        (-0.05, -0.1),
        (0.0, 0.0),
    ],
)
def test_round_one_decimal_rounds_halves_away_from_zero(value, expected):
    assert round_one_decimal(value) == expected


def test_as_latlng_matches_provider_query_form():
    assert GeoPoint(lat=-32.4827, lng=-58.2363).as_latlng() == "-32.4827,-58.2363"
