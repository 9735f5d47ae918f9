"""Waypoint payloads handed to the external code renderer."""

from __future__ import annotations

import json
from typing import Any

from ..config import settings
from .routing.models import Itinerary, ItineraryStop

SITE_WAYPOINT_TYPE = "site_waypoint"
ITINERARY_TYPE = "itinerary"


def external_url(stop: ItineraryStop, template: str | None = None) -> str:
    template = template or settings.site_url_template
    coordinate = stop.candidate.coordinate
    return template.format(lat=coordinate.latitude, lon=coordinate.longitude, id=stop.candidate.site_id)


def site_payload(stop: ItineraryStop, template: str | None = None) -> dict[str, Any]:
    poi = stop.candidate.poi
    return {
        "type": SITE_WAYPOINT_TYPE,
        "id": poi.site_id,
        "name": poi.name,
        "coordinate": poi.coordinate.as_dict(),
        "externalUrl": external_url(stop, template),
    }


def itinerary_payload(itinerary: Itinerary) -> dict[str, Any]:
    return {
        "type": ITINERARY_TYPE,
        "origin": itinerary.origin.as_dict(),
        "stops": [
            {"id": stop.candidate.site_id, "name": stop.candidate.poi.name}
            for stop in itinerary.stops
        ],
    }


def encode_payload(payload: dict[str, Any]) -> str:
    """Serialize a payload into the compact text the renderer turns into an image."""
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"), sort_keys=True)


def attach_waypoints(itinerary: Itinerary, template: str | None = None) -> Itinerary:
    for stop in itinerary.stops:
        stop.waypoint = site_payload(stop, template)
    itinerary.payload = itinerary_payload(itinerary)
    return itinerary
