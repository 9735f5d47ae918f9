import math

import pytest

from itinerary_planner.models.domain import Coordinate
from itinerary_planner.services.geospatial import (
    bearing_degrees,
    distance_km,
    haversine_km,
    normalize_transport_mode,
    search_radius_km,
    travel_time_minutes,
)

ALGIERS = Coordinate(36.75, 3.06)
ORAN = Coordinate(35.6971, -0.6308)


def test_distance_to_self_is_zero():
    for point in (ALGIERS, ORAN, Coordinate(0.0, 0.0), Coordinate(-89.9, 179.9)):
        assert distance_km(point, point) == 0


def test_distance_is_symmetric():
    assert distance_km(ALGIERS, ORAN) == pytest.approx(distance_km(ORAN, ALGIERS))


def test_distance_algiers_oran():
    # roughly 350 km as the crow flies
    assert 340 < distance_km(ALGIERS, ORAN) < 360


def test_one_degree_of_latitude():
    expected = 6371.0 * math.pi / 180
    assert haversine_km(0.0, 0.0, 1.0, 0.0) == pytest.approx(expected)


def test_travel_time_rounds_to_nearest_minute():
    assert travel_time_minutes(2.0, 50) == 2
    assert travel_time_minutes(50.0, 50) == 60
    assert travel_time_minutes(0.0, 50) == 0
    # 22.5 minutes rounds up, not to even
    assert travel_time_minutes(18.75, 50) == 23


@pytest.mark.parametrize(
    "mode,expected",
    [
        ("walking", 5 * 4 * 0.7 / 2),
        ("cycling", 15 * 4 * 0.7 / 2),
        ("driving", 50 * 4 * 0.7 / 2),
        ("marche", 5 * 4 * 0.7 / 2),
        ("teleport", 50 * 4 * 0.7 / 2),
    ],
)
def test_search_radius_per_mode(mode, expected):
    assert search_radius_km(mode, 240) == pytest.approx(expected)


def test_normalize_transport_mode():
    assert normalize_transport_mode(None) == "driving"
    assert normalize_transport_mode(" Velo ") == "cycling"
    assert normalize_transport_mode("WALKING") == "walking"
    assert normalize_transport_mode("boat") == "driving"


def test_bearing_cardinal_directions():
    origin = Coordinate(0.0, 0.0)
    assert bearing_degrees(origin, Coordinate(1.0, 0.0)) == pytest.approx(0.0)
    assert bearing_degrees(origin, Coordinate(0.0, 1.0)) == pytest.approx(90.0)
    assert bearing_degrees(origin, Coordinate(-1.0, 0.0)) == pytest.approx(180.0)
    assert bearing_degrees(origin, Coordinate(0.0, -1.0)) == pytest.approx(270.0)


@pytest.mark.parametrize("lat", range(-89, 90))
def test_antipodal_pairs_are_half_the_circumference(lat):
    km = haversine_km(float(lat), 0.0, float(-lat), 180.0)

    assert km == pytest.approx(math.pi * 6371.0, rel=1e-6)
