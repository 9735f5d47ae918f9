"""Itinerary planning orchestration service."""

from __future__ import annotations

import functools
import logging
import math
from dataclasses import dataclass
from typing import Sequence

from ..config import settings
from ..data.service_directory import HttpServiceDirectory, ServiceDirectory, SupabaseServiceDirectory
from ..data.sites_repository import (
    FileSiteRepository,
    SiteRepository,
    SiteRepositoryUnavailable,
    SupabaseSiteRepository,
)
from ..db.supabase import get_supabase_client
from ..models.domain import Coordinate, PointOfInterest
from ..persistence.itineraries import FileItineraryStore, ItineraryStore, SupabaseItineraryStore
from .enrichment import enrich_itinerary, has_accessibility_service
from .geospatial import normalize_transport_mode, search_radius_km
from .routing.builder import RouteConstraints, build_route
from .routing.models import Itinerary
from .scoring import rank_candidates
from .waypoints import attach_waypoints

logger = logging.getLogger(__name__)


class PlannerValidationError(ValueError):
    """Raised for planning input that is rejected before any computation."""


@dataclass(slots=True)
class PlanOptions:
    radius_km: float = settings.default_radius_km
    max_stops: int = settings.default_max_stops
    categories: tuple[str, ...] = settings.default_categories
    time_budget_minutes: int = settings.default_time_budget_minutes
    include_restaurants: bool = True
    include_lodging: bool = False
    transport_mode: str = "driving"
    owner_id: str | None = None
    event_id: str | None = None


@dataclass(slots=True)
class Preferences:
    accessibility: bool = False
    family_friendly: bool = False


def validate_coordinate(coordinate: Coordinate | None) -> Coordinate:
    if coordinate is None:
        raise PlannerValidationError("Starting coordinates are required.")
    try:
        lat = float(coordinate.latitude)
        lon = float(coordinate.longitude)
    except (TypeError, ValueError) as exc:
        raise PlannerValidationError("Starting coordinates must be numeric.") from exc
    if not (math.isfinite(lat) and math.isfinite(lon)):
        raise PlannerValidationError("Starting coordinates must be finite numbers.")
    if not -90.0 <= lat <= 90.0:
        raise PlannerValidationError(f"Latitude {lat} is outside [-90, 90].")
    if not -180.0 <= lon <= 180.0:
        raise PlannerValidationError(f"Longitude {lon} is outside [-180, 180].")
    return Coordinate(lat, lon)


def _require_positive(value: float, label: str) -> None:
    if value is None or not value > 0:
        raise PlannerValidationError(f"{label} must be positive (got {value}).")


def matches_interests(poi: PointOfInterest, interests: Sequence[str]) -> bool:
    wanted = [interest.strip().lower() for interest in interests if interest and interest.strip()]
    if not wanted:
        return True
    tags = {poi.category, *poi.detail_kinds}
    services = [name.lower() for name in poi.service_names]
    return any(interest in tags or any(interest in name for name in services) for interest in wanted)


class PlannerService:
    """Runs search, scoring, routing, enrichment and encoding for one request at a time.

    Holds only read-only collaborators, so a single instance can serve concurrent requests.
    """

    def __init__(
        self,
        site_repository: SiteRepository,
        service_directory: ServiceDirectory | None = None,
        itinerary_store: ItineraryStore | None = None,
    ) -> None:
        self.site_repository = site_repository
        self.service_directory = service_directory
        self.itinerary_store = itinerary_store

    def _find_sites(
        self, origin: Coordinate, radius_km: float, categories: Sequence[str] | None
    ) -> list[PointOfInterest]:
        try:
            return self.site_repository.find_near(origin, radius_km, categories)
        except SiteRepositoryUnavailable:
            raise
        except Exception as exc:
            logger.error(f"Site repository lookup failed: {exc}")
            raise SiteRepositoryUnavailable(f"Site repository lookup failed: {exc}") from exc

    def _persist(self, itinerary: Itinerary, owner_id: str | None, event_id: str | None) -> None:
        if not owner_id or self.itinerary_store is None:
            return
        try:
            itinerary.saved_itinerary_id = self.itinerary_store.save(itinerary, owner_id, event_id=event_id)
        except Exception as exc:
            # The plan is still valid without a saved copy
            logger.warning(f"Failed to save itinerary for owner {owner_id}: {exc}")
            itinerary.saved_itinerary_id = None

    def _plan(
        self,
        origin: Coordinate,
        pois: Sequence[PointOfInterest],
        *,
        constraints: RouteConstraints,
        transport_mode: str,
        include_restaurants: bool,
        include_lodging: bool,
        preferences: Preferences,
        owner_id: str | None,
        event_id: str | None,
    ) -> Itinerary:
        candidates = rank_candidates(pois, origin, leg_speed_kmh=constraints.leg_speed_kmh)
        itinerary = build_route(origin=origin, candidates=candidates, constraints=constraints)
        enrich_itinerary(
            itinerary,
            directory=self.service_directory,
            transport_mode=transport_mode,
            include_restaurants=include_restaurants,
            include_lodging=include_lodging,
            accessibility_required=preferences.accessibility,
            family_friendly=preferences.family_friendly,
        )
        attach_waypoints(itinerary)
        self._persist(itinerary, owner_id, event_id)
        logger.info(
            f"Planned itinerary from ({origin.latitude:.5f}, {origin.longitude:.5f}): "
            f"{len(itinerary.stops)} stops out of {len(candidates)} candidates, "
            f"{itinerary.total_distance_km:.2f} km, {itinerary.total_duration_minutes} min"
        )
        return itinerary

    def plan_from_anchor(self, anchor: Coordinate, options: PlanOptions | None = None) -> Itinerary:
        """Plan an itinerary around an event venue or any fixed anchor point."""
        options = options or PlanOptions()
        anchor = validate_coordinate(anchor)
        _require_positive(options.radius_km, "Search radius")
        _require_positive(options.max_stops, "Maximum number of stops")
        _require_positive(options.time_budget_minutes, "Time budget")

        pois = self._find_sites(anchor, options.radius_km, options.categories)
        return self._plan(
            anchor,
            pois,
            constraints=RouteConstraints(
                max_stops=options.max_stops,
                time_budget_minutes=options.time_budget_minutes,
            ),
            transport_mode=normalize_transport_mode(options.transport_mode),
            include_restaurants=options.include_restaurants,
            include_lodging=options.include_lodging,
            preferences=Preferences(),
            owner_id=options.owner_id,
            event_id=options.event_id,
        )

    def plan_personalized(
        self,
        origin: Coordinate,
        interests: Sequence[str] = (),
        duration_minutes: int = settings.default_personalized_duration_minutes,
        transport_mode: str = "driving",
        preferences: Preferences | None = None,
        owner_id: str | None = None,
    ) -> Itinerary:
        """Plan an itinerary from an arbitrary point sized by transport mode and duration."""
        preferences = preferences or Preferences()
        origin = validate_coordinate(origin)
        _require_positive(duration_minutes, "Duration budget")
        mode = normalize_transport_mode(transport_mode)

        radius = search_radius_km(mode, duration_minutes)
        pois = [poi for poi in self._find_sites(origin, radius, None) if matches_interests(poi, interests)]
        if preferences.accessibility:
            accessible = [poi for poi in pois if has_accessibility_service(poi.service_names)]
            if accessible:
                pois = accessible

        return self._plan(
            origin,
            pois,
            constraints=RouteConstraints(
                max_stops=settings.personalized_max_stops,
                time_budget_minutes=duration_minutes,
            ),
            transport_mode=mode,
            include_restaurants=True,
            include_lodging=False,
            preferences=preferences,
            owner_id=owner_id,
            event_id=None,
        )


@functools.lru_cache(maxsize=1)
def get_planner_service() -> PlannerService:
    """Default wiring: Supabase when configured, local files and HTTP directory otherwise."""
    client = get_supabase_client()
    site_repository = SupabaseSiteRepository(client) if client else FileSiteRepository()
    if settings.service_directory_url:
        service_directory = HttpServiceDirectory()
    elif client:
        service_directory = SupabaseServiceDirectory(client)
    else:
        service_directory = None
    itinerary_store = SupabaseItineraryStore(client) if client else FileItineraryStore()
    return PlannerService(site_repository, service_directory, itinerary_store)
