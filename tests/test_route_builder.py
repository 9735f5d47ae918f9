import math
import random

import pytest

from itinerary_planner.models.domain import Coordinate, PointOfInterest
from itinerary_planner.services.geospatial import distance_km
from itinerary_planner.services.routing.builder import RouteConstraints, build_route
from itinerary_planner.services.scoring import rank_candidates

ORIGIN = Coordinate(36.75, 3.06)


def _poi(site_id, lat, lon, category="site", services=(), media=0, description=0):
    return PointOfInterest(
        site_id=site_id,
        name=f"Site {site_id}",
        coordinate=Coordinate(lat, lon),
        category=category,
        service_names=tuple(services),
        media_count=media,
        description_length=description,
    )


def _north_of_origin(km: float) -> float:
    return ORIGIN.latitude + math.degrees(km / 6371.0)


def _build(pois, max_stops=5, budget=180, **kwargs):
    candidates = rank_candidates(pois, ORIGIN)
    constraints = RouteConstraints(max_stops=max_stops, time_budget_minutes=budget, **kwargs)
    return build_route(origin=ORIGIN, candidates=candidates, constraints=constraints)


def test_single_monument_scenario():
    poi = _poi(1, _north_of_origin(2.0), ORIGIN.longitude, "monument", ("parking", "cafe"), 1, 600)

    itinerary = _build([poi], max_stops=5, budget=180)

    assert len(itinerary.stops) == 1
    stop = itinerary.stops[0]
    assert stop.candidate.score == pytest.approx(146.0)
    assert stop.candidate.visit_minutes == 75
    assert stop.travel_minutes == 2
    assert stop.elapsed_minutes == 77
    assert stop.sequence == 1
    assert stop.heading_deg == pytest.approx(0.0, abs=1e-6)
    assert itinerary.total_duration_minutes == 77
    assert itinerary.total_distance_km == pytest.approx(2.0)


def test_empty_candidate_set_returns_empty_itinerary():
    itinerary = build_route(origin=ORIGIN, candidates=[], constraints=RouteConstraints(5, 480))

    assert itinerary.stops == []
    assert itinerary.total_distance_km == 0
    assert itinerary.total_duration_minutes == 0
    assert itinerary.origin == ORIGIN


@pytest.mark.parametrize("budget", [50, 60])
def test_budget_at_or_below_floor_yields_no_stops(budget):
    poi = _poi(1, ORIGIN.latitude, ORIGIN.longitude)  # 30 minute visit at the origin

    itinerary = _build([poi], budget=budget)

    assert itinerary.stops == []
    assert itinerary.total_duration_minutes == 0


def test_floor_stops_loop_even_when_a_short_visit_would_fit():
    pois = [_poi(i, ORIGIN.latitude, ORIGIN.longitude) for i in range(1, 4)]

    # 100 -> 70 after the first stop, 70 -> 40 after the second, then the floor applies
    itinerary = _build(pois, max_stops=5, budget=100)

    assert [stop.candidate.site_id for stop in itinerary.stops] == [1, 2]
    assert itinerary.total_duration_minutes == 60


def test_equal_ratio_tie_goes_to_lower_id():
    lat, lon = ORIGIN.latitude, ORIGIN.longitude + 0.01
    candidates = rank_candidates([_poi(7, lat, lon), _poi(3, lat, lon)], ORIGIN)
    constraints = RouteConstraints(max_stops=1, time_budget_minutes=480)

    picks = {
        build_route(origin=ORIGIN, candidates=ordering, constraints=constraints).stops[0].candidate.site_id
        for ordering in (candidates, list(reversed(candidates)))
        for _ in range(3)
    }

    assert picks == {3}


def test_best_value_per_minute_wins_over_highest_score():
    quick = _poi("quick", ORIGIN.latitude, ORIGIN.longitude)  # 100 / 30
    grand = _poi("grand", ORIGIN.latitude, ORIGIN.longitude, "vestige", (), 3, 900)  # 155 / 90

    itinerary = _build([grand, quick], max_stops=1, budget=480)

    assert itinerary.stops[0].candidate.site_id == "quick"


def test_unreachable_candidates_are_skipped():
    far = _poi(1, _north_of_origin(30.0), ORIGIN.longitude, "monument", (), 0, 600)  # 36 + 75 minutes

    itinerary = _build([far], budget=100)

    assert itinerary.stops == []


def test_legs_are_measured_from_previous_stop():
    first = _poi(1, _north_of_origin(1.0), ORIGIN.longitude)
    second = _poi(2, _north_of_origin(26.0), ORIGIN.longitude)

    itinerary = _build([first, second], max_stops=5, budget=480)

    assert [stop.candidate.site_id for stop in itinerary.stops] == [1, 2]
    assert itinerary.stops[0].travel_minutes == 1
    assert itinerary.stops[1].leg_distance_km == pytest.approx(25.0)
    assert itinerary.stops[1].travel_minutes == 30
    assert itinerary.stops[1].elapsed_minutes == 1 + 30 + 30 + 30
    assert itinerary.total_distance_km == pytest.approx(26.0)


def test_duplicate_candidates_are_visited_once():
    poi = _poi(1, ORIGIN.latitude, ORIGIN.longitude)
    candidates = rank_candidates([poi, poi, poi], ORIGIN)

    itinerary = build_route(origin=ORIGIN, candidates=candidates, constraints=RouteConstraints(5, 480))

    assert len(itinerary.stops) == 1


def test_candidate_cap_limits_the_search():
    pois = [_poi(i, ORIGIN.latitude, ORIGIN.longitude) for i in range(1, 6)]

    itinerary = _build(pois, max_stops=5, budget=480, max_candidates=2)

    assert len(itinerary.stops) == 2


def test_route_invariants_hold_for_random_inputs():
    rng = random.Random(20240611)
    categories = ["site", "monument", "vestige"]
    for _ in range(30):
        pois = [
            _poi(
                i,
                ORIGIN.latitude + rng.uniform(-0.3, 0.3),
                ORIGIN.longitude + rng.uniform(-0.3, 0.3),
                rng.choice(categories),
                tuple("guide" if rng.random() < 0.2 else "parking" for _ in range(rng.randint(0, 3))),
                rng.randint(0, 4),
                rng.randint(0, 1200),
            )
            for i in range(rng.randint(0, 40))
        ]
        budget = rng.randint(1, 900)
        max_stops = rng.randint(1, 12)

        itinerary = _build(pois, max_stops=max_stops, budget=budget)

        ids = [stop.candidate.site_id for stop in itinerary.stops]
        assert len(ids) == len(set(ids))
        assert len(itinerary.stops) <= max_stops
        assert itinerary.total_duration_minutes <= budget
        assert sum(stop.total_minutes for stop in itinerary.stops) == itinerary.total_duration_minutes
        if budget <= 60:
            assert itinerary.stops == []
        previous = ORIGIN
        elapsed = 0
        for position, stop in enumerate(itinerary.stops, start=1):
            assert stop.sequence == position
            assert stop.elapsed_minutes > elapsed
            elapsed = stop.elapsed_minutes
            assert stop.leg_distance_km == pytest.approx(distance_km(previous, stop.candidate.coordinate))
            previous = stop.candidate.coordinate


def test_negative_score_candidate_is_still_selected():
    remote = _poi(1, _north_of_origin(60.0), ORIGIN.longitude)  # 100 - 2 * 60 = -20

    itinerary = _build([remote], max_stops=5, budget=480)

    assert [stop.candidate.site_id for stop in itinerary.stops] == [1]
    assert itinerary.stops[0].candidate.score < 0
    assert itinerary.stops[0].travel_minutes == 72


def test_default_constraints_follow_current_settings(monkeypatch):
    from itinerary_planner.services.routing import builder

    monkeypatch.setattr(builder.settings, "default_max_stops", 2)
    monkeypatch.setattr(builder.settings, "default_time_budget_minutes", 120)

    constraints = RouteConstraints()

    assert constraints.max_stops == 2
    assert constraints.time_budget_minutes == 120
