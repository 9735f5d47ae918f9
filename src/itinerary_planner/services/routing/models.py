"""Routing domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional

from ...models.domain import Coordinate, PointOfInterest


@dataclass(slots=True)
class ScoredCandidate:
    poi: PointOfInterest
    distance_km: float
    score: float
    visit_minutes: int
    initial_travel_minutes: int = 0

    @property
    def site_id(self):
        return self.poi.site_id

    @property
    def coordinate(self) -> Coordinate:
        return self.poi.coordinate


@dataclass(slots=True)
class ItineraryStop:
    candidate: ScoredCandidate
    sequence: int
    travel_minutes: int
    leg_distance_km: float
    heading_deg: float
    elapsed_minutes: int
    waypoint: Optional[dict[str, Any]] = None

    @property
    def total_minutes(self) -> int:
        return self.travel_minutes + self.candidate.visit_minutes


@dataclass(slots=True)
class Itinerary:
    origin: Coordinate
    stops: List[ItineraryStop] = field(default_factory=list)
    total_distance_km: float = 0.0
    total_duration_minutes: int = 0
    payload: Optional[dict[str, Any]] = None
    enrichment: Optional[dict[str, Any]] = None
    statistics: dict[str, Any] = field(default_factory=dict)
    saved_itinerary_id: Optional[str] = None
