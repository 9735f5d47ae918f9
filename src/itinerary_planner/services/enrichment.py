"""Advisory enrichment attached to a built itinerary.

Every sub-lookup is best-effort: a failing or missing service directory downgrades
the matching block to ``unavailable`` instead of failing the plan.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

from ..config import settings
from ..data.service_directory import ServiceDirectory
from ..models.domain import Coordinate, ServiceSuggestion
from .routing.models import Itinerary, ItineraryStop

logger = logging.getLogger(__name__)

SUCCEEDED = "succeeded"
DEGRADED = "degraded"
UNAVAILABLE = "unavailable"

RESTAURANT_CATEGORY = "restaurant"
LODGING_CATEGORY = "hotel"
MAX_RESTAURANT_SUGGESTIONS = 3
MAX_LODGING_SUGGESTIONS = 1

EXCELLENT_ACCESSIBILITY = 0.7
GOOD_ACCESSIBILITY = 0.4
LONG_ROUTE_MINUTES = 240
FAMILY_LONG_ROUTE_MINUTES = 180

HYDRATION_ADVICE = "Bring water and comfortable shoes."
PACING_ADVICE = "Long itinerary: plan regular breaks."
OPENING_HOURS_ADVICE = "Check monument opening hours before setting out."
ACCESSIBILITY_ADVICE = "Accessibility facilities are limited on this itinerary; contact the sites beforehand."
FAMILY_ADVICE = "Long outing for children: consider shortening the itinerary."


@dataclass(slots=True)
class LookupResult:
    status: str
    items: List[ServiceSuggestion] = field(default_factory=list)
    error: Optional[str] = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "items": [
                {
                    "name": item.name,
                    "category": item.category,
                    "coordinate": item.coordinate.as_dict() if item.coordinate else None,
                    "distance_km": item.distance_km,
                    "anchor": item.anchor,
                }
                for item in self.items
            ],
            "error": self.error,
        }


def _lookup(
    directory: ServiceDirectory | None,
    coordinate: Coordinate,
    category: str,
    limit: int,
    anchor: str,
) -> LookupResult:
    if directory is None:
        return LookupResult(status=UNAVAILABLE, error="service directory not configured")
    try:
        found = directory.find_nearby_services(coordinate, category, limit)
        items = [
            ServiceSuggestion(
                name=item.name,
                category=item.category,
                coordinate=item.coordinate,
                distance_km=item.distance_km,
                anchor=anchor,
            )
            for item in list(found)[:limit]
        ]
    except Exception as exc:
        logger.warning(f"Nearby {category} lookup failed for {anchor}: {exc}")
        return LookupResult(status=UNAVAILABLE, error=str(exc))
    return LookupResult(status=SUCCEEDED if len(items) >= limit else DEGRADED, items=items)


def nearby_restaurants(directory: ServiceDirectory | None, stops: Sequence[ItineraryStop]) -> LookupResult:
    """One restaurant suggestion for each of the first three stops."""
    if directory is None:
        return LookupResult(status=UNAVAILABLE, error="service directory not configured")
    keyed = list(stops[:MAX_RESTAURANT_SUGGESTIONS])
    if not keyed:
        return LookupResult(status=SUCCEEDED)

    results = [
        _lookup(directory, stop.candidate.coordinate, RESTAURANT_CATEGORY, 1, str(stop.candidate.site_id))
        for stop in keyed
    ]
    items = [item for result in results for item in result.items][:MAX_RESTAURANT_SUGGESTIONS]
    errors = [result.error for result in results if result.error]
    if all(result.status == UNAVAILABLE for result in results):
        return LookupResult(status=UNAVAILABLE, error="; ".join(errors) or None)
    status = SUCCEEDED if all(result.status == SUCCEEDED for result in results) else DEGRADED
    return LookupResult(status=status, items=items, error="; ".join(errors) or None)


def nearby_lodging(directory: ServiceDirectory | None, origin: Coordinate) -> LookupResult:
    return _lookup(directory, origin, LODGING_CATEGORY, MAX_LODGING_SUGGESTIONS, "origin")


def has_accessibility_service(service_names: Sequence[str], keywords: Sequence[str] | None = None) -> bool:
    keywords = keywords if keywords is not None else settings.accessibility_keywords
    lowered = [name.lower() for name in service_names]
    return any(keyword.lower() in name for name in lowered for keyword in keywords)


def accessibility_level(ratio: float) -> str:
    if ratio > EXCELLENT_ACCESSIBILITY:
        return "excellent"
    if ratio > GOOD_ACCESSIBILITY:
        return "good"
    return "limited"


def accessibility_summary(stops: Sequence[ItineraryStop], keywords: Sequence[str] | None = None) -> dict[str, Any]:
    accessible = [
        stop.candidate.site_id
        for stop in stops
        if has_accessibility_service(stop.candidate.poi.service_names, keywords)
    ]
    ratio = len(accessible) / len(stops) if stops else 0.0
    return {
        "ratio": ratio,
        "level": accessibility_level(ratio),
        "accessible_stops": accessible,
    }


def build_advisories(
    itinerary: Itinerary,
    transport_mode: str,
    *,
    accessibility_required: bool = False,
    family_friendly: bool = False,
    accessibility: dict[str, Any] | None = None,
) -> list[str]:
    advice: list[str] = []
    if transport_mode == "walking":
        advice.append(HYDRATION_ADVICE)
    if itinerary.total_duration_minutes > LONG_ROUTE_MINUTES:
        advice.append(PACING_ADVICE)
    if any(stop.candidate.poi.is_monument for stop in itinerary.stops):
        advice.append(OPENING_HOURS_ADVICE)
    if accessibility_required and accessibility and accessibility["level"] == "limited":
        advice.append(ACCESSIBILITY_ADVICE)
    if family_friendly and itinerary.total_duration_minutes > FAMILY_LONG_ROUTE_MINUTES:
        advice.append(FAMILY_ADVICE)
    return advice


def build_statistics(itinerary: Itinerary) -> dict[str, Any]:
    categories: list[str] = []
    for stop in itinerary.stops:
        category = stop.candidate.poi.category
        if category not in categories:
            categories.append(category)
    return {
        "stop_count": len(itinerary.stops),
        "total_distance_km": itinerary.total_distance_km,
        "total_duration_minutes": itinerary.total_duration_minutes,
        "categories": categories,
    }


def enrich_itinerary(
    itinerary: Itinerary,
    *,
    directory: ServiceDirectory | None,
    transport_mode: str,
    include_restaurants: bool = True,
    include_lodging: bool = False,
    accessibility_required: bool = False,
    family_friendly: bool = False,
) -> Itinerary:
    """Attach services, accessibility, advisories and statistics to ``itinerary``."""
    services: dict[str, Any] = {}
    if include_restaurants:
        services["restaurants"] = nearby_restaurants(directory, itinerary.stops).as_dict()
    if include_lodging:
        services["lodging"] = nearby_lodging(directory, itinerary.origin).as_dict()

    accessibility = accessibility_summary(itinerary.stops)
    itinerary.enrichment = {
        "transport_mode": transport_mode,
        "services": services,
        "accessibility": accessibility,
        "advisories": build_advisories(
            itinerary,
            transport_mode,
            accessibility_required=accessibility_required,
            family_friendly=family_friendly,
            accessibility=accessibility,
        ),
    }
    itinerary.statistics = build_statistics(itinerary)
    return itinerary
