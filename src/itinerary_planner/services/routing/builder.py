"""Greedy, budget-constrained itinerary construction."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from ...config import settings
from ...models.domain import Coordinate
from ..geospatial import bearing_degrees, distance_km, travel_time_minutes
from ..scoring import candidate_sort_key
from .models import Itinerary, ItineraryStop, ScoredCandidate

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RouteConstraints:
    max_stops: int = field(default_factory=lambda: settings.default_max_stops)
    time_budget_minutes: int = field(default_factory=lambda: settings.default_time_budget_minutes)
    min_remaining_minutes: int = field(default_factory=lambda: settings.min_remaining_minutes)
    leg_speed_kmh: float = field(default_factory=lambda: settings.leg_speed_kmh)
    max_candidates: int = field(default_factory=lambda: settings.max_candidates)


def _beats(ratio: float, candidate: ScoredCandidate, best_ratio: float, best: ScoredCandidate) -> bool:
    if ratio != best_ratio:
        return ratio > best_ratio
    return candidate_sort_key(candidate) < candidate_sort_key(best)


def build_route(
    *,
    origin: Coordinate,
    candidates: Sequence[ScoredCandidate],
    constraints: RouteConstraints | None = None,
) -> Itinerary:
    """Build an ordered itinerary by repeatedly picking the best value-per-minute site.

    At each step every unvisited candidate is costed as the leg from the current
    position plus its visit time; candidates that do not fit in the remaining budget
    are skipped and the one with the highest ``score / total_minutes`` wins, ties going
    to the lower site id. Selection stops once ``max_stops`` is reached, the remaining
    budget is at or below ``min_remaining_minutes``, or nothing fits.

    Never raises for an empty candidate list or an unsatisfiable budget; the
    itinerary is simply empty.
    """
    constraints = constraints or RouteConstraints()

    if len(candidates) > constraints.max_candidates:
        logger.warning(
            "Candidate set truncated from %d to %d sites", len(candidates), constraints.max_candidates
        )
        candidates = candidates[: constraints.max_candidates]

    itinerary = Itinerary(origin=origin)
    current = origin
    remaining = constraints.time_budget_minutes
    visited: set = set()

    while len(itinerary.stops) < constraints.max_stops and remaining > constraints.min_remaining_minutes:
        best: ScoredCandidate | None = None
        best_ratio = 0.0
        best_leg_km = 0.0
        best_travel = 0

        for candidate in candidates:
            if candidate.site_id in visited:
                continue
            leg_km = distance_km(current, candidate.coordinate)
            travel = travel_time_minutes(leg_km, constraints.leg_speed_kmh)
            total = travel + candidate.visit_minutes
            if total > remaining:
                continue
            ratio = candidate.score / total
            if best is None or _beats(ratio, candidate, best_ratio, best):
                best, best_ratio, best_leg_km, best_travel = candidate, ratio, leg_km, travel

        if best is None:
            break

        total = best_travel + best.visit_minutes
        remaining -= total
        itinerary.total_distance_km += best_leg_km
        itinerary.total_duration_minutes += total
        itinerary.stops.append(
            ItineraryStop(
                candidate=best,
                sequence=len(itinerary.stops) + 1,
                travel_minutes=best_travel,
                leg_distance_km=best_leg_km,
                heading_deg=bearing_degrees(current, best.coordinate),
                elapsed_minutes=itinerary.total_duration_minutes,
            )
        )
        visited.add(best.site_id)
        current = best.coordinate

    logger.debug(
        "Built route with %d stops, %.2f km, %d min (budget %d min)",
        len(itinerary.stops),
        itinerary.total_distance_km,
        itinerary.total_duration_minutes,
        constraints.time_budget_minutes,
    )
    return itinerary
