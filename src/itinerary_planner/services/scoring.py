"""Interest scoring and visit-duration estimates for candidate sites."""

from __future__ import annotations

import logging
from typing import Iterable

from ..config import settings
from ..models.domain import Coordinate, PointOfInterest
from .geospatial import distance_km, travel_time_minutes
from .routing.models import ScoredCandidate

logger = logging.getLogger(__name__)

BASE_SCORE = 100.0
MONUMENT_BONUS = 30.0
VESTIGE_BONUS = 25.0
SERVICE_WEIGHT = 5.0
MEDIA_WEIGHT = 10.0
DISTANCE_PENALTY_PER_KM = 2.0

BASE_VISIT_MINUTES = 30
MONUMENT_VISIT_MINUTES = 30
VESTIGE_VISIT_MINUTES = 45
LONG_DESCRIPTION_MINUTES = 15
LONG_DESCRIPTION_CHARS = 500
GUIDED_VISIT_MINUTES = 30


def score(poi: PointOfInterest, distance: float) -> float:
    """Desirability of a site seen from a point ``distance`` km away.

    Monument and vestige bonuses stack when a site carries both detail records.
    The result is not clamped and can be negative for remote sites.
    """
    value = BASE_SCORE
    if poi.is_monument:
        value += MONUMENT_BONUS
    if poi.is_vestige:
        value += VESTIGE_BONUS
    value += poi.service_count * SERVICE_WEIGHT
    value += poi.media_count * MEDIA_WEIGHT
    value -= distance * DISTANCE_PENALTY_PER_KM
    return value


def estimate_visit_minutes(poi: PointOfInterest) -> int:
    minutes = BASE_VISIT_MINUTES
    if poi.is_monument:
        minutes += MONUMENT_VISIT_MINUTES
    if poi.is_vestige:
        minutes += VESTIGE_VISIT_MINUTES
    if poi.description_length > LONG_DESCRIPTION_CHARS:
        minutes += LONG_DESCRIPTION_MINUTES
    if any("guide" in name.lower() for name in poi.service_names):
        minutes += GUIDED_VISIT_MINUTES
    return minutes


def _id_sort_key(site_id) -> tuple:
    # Numeric ids sort before string ids and compare numerically among themselves.
    if isinstance(site_id, (int, float)) and not isinstance(site_id, bool):
        return (0, site_id, "")
    return (1, 0, str(site_id))


def candidate_sort_key(candidate: ScoredCandidate) -> tuple:
    return _id_sort_key(candidate.site_id)


def rank_candidates(
    pois: Iterable[PointOfInterest],
    origin: Coordinate,
    *,
    leg_speed_kmh: float | None = None,
) -> list[ScoredCandidate]:
    """Score every site relative to ``origin`` and order them by interest.

    Highest score first; equal scores fall back to ascending site id.
    """
    speed = leg_speed_kmh or settings.leg_speed_kmh
    ranked: list[ScoredCandidate] = []
    for poi in pois:
        if poi.is_monument and poi.is_vestige:
            logger.warning(
                "Site %s is flagged as both monument and vestige; both bonuses applied", poi.site_id
            )
        distance = distance_km(origin, poi.coordinate)
        ranked.append(
            ScoredCandidate(
                poi=poi,
                distance_km=distance,
                score=score(poi, distance),
                visit_minutes=estimate_visit_minutes(poi),
                initial_travel_minutes=travel_time_minutes(distance, speed),
            )
        )
    ranked.sort(key=lambda candidate: (-candidate.score, candidate_sort_key(candidate)))
    return ranked
