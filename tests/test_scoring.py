import logging
import math

import pytest

from itinerary_planner.models.domain import Coordinate, PointOfInterest
from itinerary_planner.services.scoring import estimate_visit_minutes, rank_candidates, score

ORIGIN = Coordinate(36.75, 3.06)


def _poi(site_id, category="site", services=(), media=0, description=0, details=(), lat=36.76, lon=3.07):
    return PointOfInterest(
        site_id=site_id,
        name=f"Site {site_id}",
        coordinate=Coordinate(lat, lon),
        category=category,
        service_names=tuple(services),
        media_count=media,
        description_length=description,
        detail_kinds=frozenset(details),
    )


def test_score_for_documented_monument():
    poi = _poi(1, category="monument", services=("parking", "toilets"), media=1, description=600)
    assert score(poi, 2.0) == pytest.approx(146.0)


def test_score_for_plain_site_far_away_can_go_negative():
    poi = _poi(2)
    assert score(poi, 0.0) == 100.0
    assert score(poi, 80.0) == pytest.approx(-60.0)


def test_vestige_bonus():
    assert score(_poi(3, category="vestige"), 0.0) == 125.0


def test_monument_and_vestige_bonuses_stack():
    poi = _poi(4, category="monument", details=("vestige",))
    assert score(poi, 0.0) == 155.0
    assert estimate_visit_minutes(poi) == 30 + 30 + 45


def test_visit_minutes():
    assert estimate_visit_minutes(_poi(5)) == 30
    assert estimate_visit_minutes(_poi(6, category="monument", description=600)) == 75
    assert estimate_visit_minutes(_poi(7, category="vestige", description=500)) == 75
    assert estimate_visit_minutes(_poi(8, services=("Visite GUIDEE", "Audio-guide"))) == 60


def test_rank_candidates_orders_by_score_then_id():
    pois = [
        _poi("b", lat=36.75, lon=3.06),
        _poi("a", lat=36.75, lon=3.06),
        _poi("c", category="monument", lat=36.75, lon=3.06),
    ]
    ranked = rank_candidates(pois, ORIGIN)
    assert [candidate.site_id for candidate in ranked] == ["c", "a", "b"]
    assert ranked[0].distance_km == 0
    assert ranked[0].initial_travel_minutes == 0


def test_rank_candidates_scores_relative_to_origin():
    lat = 36.75 + math.degrees(2.0 / 6371.0)
    poi = _poi(1, category="monument", services=("a", "b"), media=1, description=600, lat=lat, lon=3.06)
    (candidate,) = rank_candidates([poi], ORIGIN)
    assert candidate.distance_km == pytest.approx(2.0)
    assert candidate.score == pytest.approx(146.0)
    assert candidate.visit_minutes == 75
    assert candidate.initial_travel_minutes == 2


def test_rank_candidates_flags_double_category(caplog):
    poi = _poi(9, category="vestige", details=("monument",))
    with caplog.at_level(logging.WARNING):
        rank_candidates([poi], ORIGIN)
    assert "both monument and vestige" in caplog.text
