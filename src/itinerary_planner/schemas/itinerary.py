"""Itinerary request/response schemas."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from ..config import settings
from ..services.routing.models import Itinerary

TransportMode = Literal["walking", "cycling", "driving", "marche", "velo", "voiture"]


class CoordinateModel(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class AnchorItineraryRequest(BaseModel):
    latitude: float = Field(..., ge=-90, le=90, description="Latitude of the event venue or anchor point.")
    longitude: float = Field(..., ge=-180, le=180)
    radius_km: float = Field(default=settings.default_radius_km, gt=0)
    max_stops: int = Field(default=settings.default_max_stops, ge=1)
    categories: List[str] = Field(default_factory=lambda: list(settings.default_categories))
    time_budget_minutes: int = Field(default=settings.default_time_budget_minutes, gt=0)
    include_restaurants: bool = True
    include_lodging: bool = False
    owner_id: Optional[str] = Field(default=None, description="Caller identity; when set the itinerary is saved.")
    event_id: Optional[str] = Field(default=None, description="Event the itinerary is attached to.")


class PersonalizedItineraryRequest(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    interests: List[str] = Field(default_factory=list)
    duration_minutes: int = Field(default=settings.default_personalized_duration_minutes, gt=0)
    transport_mode: TransportMode = "driving"
    accessibility: bool = False
    family_friendly: bool = False
    owner_id: Optional[str] = None


class ItineraryStopModel(BaseModel):
    sequence: int
    site_id: Union[int, str]
    name: str
    category: str
    coordinate: CoordinateModel
    distance_from_origin_km: float
    score: float
    visit_minutes: int
    travel_minutes: int
    leg_distance_km: float
    heading_deg: float
    elapsed_minutes: int
    waypoint: Dict[str, Any]


class ItineraryResponse(BaseModel):
    origin: CoordinateModel
    stops: List[ItineraryStopModel]
    total_distance_km: float
    total_duration_minutes: int
    payload: Dict[str, Any]
    enrichment: Optional[Dict[str, Any]] = None
    statistics: Dict[str, Any] = Field(default_factory=dict)
    saved_itinerary_id: Optional[str] = None

    @classmethod
    def from_itinerary(cls, itinerary: Itinerary) -> "ItineraryResponse":
        return cls(
            origin=CoordinateModel(lat=itinerary.origin.latitude, lng=itinerary.origin.longitude),
            stops=[
                ItineraryStopModel(
                    sequence=stop.sequence,
                    site_id=stop.candidate.site_id,
                    name=stop.candidate.poi.name,
                    category=stop.candidate.poi.category,
                    coordinate=CoordinateModel(
                        lat=stop.candidate.coordinate.latitude,
                        lng=stop.candidate.coordinate.longitude,
                    ),
                    distance_from_origin_km=stop.candidate.distance_km,
                    score=stop.candidate.score,
                    visit_minutes=stop.candidate.visit_minutes,
                    travel_minutes=stop.travel_minutes,
                    leg_distance_km=stop.leg_distance_km,
                    heading_deg=stop.heading_deg,
                    elapsed_minutes=stop.elapsed_minutes,
                    waypoint=stop.waypoint or {},
                )
                for stop in itinerary.stops
            ],
            total_distance_km=itinerary.total_distance_km,
            total_duration_minutes=itinerary.total_duration_minutes,
            payload=itinerary.payload or {},
            enrichment=itinerary.enrichment,
            statistics=itinerary.statistics,
            saved_itinerary_id=itinerary.saved_itinerary_id,
        )
