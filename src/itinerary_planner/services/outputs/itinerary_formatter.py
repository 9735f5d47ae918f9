"""Serializers for itinerary outputs."""

from __future__ import annotations

import csv
import io

from ..routing.models import Itinerary


def itinerary_to_json(itinerary: Itinerary) -> dict:
    return {
        "origin": itinerary.origin.as_dict(),
        "total_distance_km": itinerary.total_distance_km,
        "total_duration_minutes": itinerary.total_duration_minutes,
        "payload": itinerary.payload,
        "enrichment": itinerary.enrichment,
        "statistics": itinerary.statistics,
        "stops": [
            {
                "sequence": stop.sequence,
                "site_id": stop.candidate.site_id,
                "name": stop.candidate.poi.name,
                "category": stop.candidate.poi.category,
                "latitude": stop.candidate.coordinate.latitude,
                "longitude": stop.candidate.coordinate.longitude,
                "score": stop.candidate.score,
                "visit_minutes": stop.candidate.visit_minutes,
                "travel_minutes": stop.travel_minutes,
                "leg_distance_km": stop.leg_distance_km,
                "heading_deg": stop.heading_deg,
                "elapsed_minutes": stop.elapsed_minutes,
                "waypoint": stop.waypoint,
            }
            for stop in itinerary.stops
        ],
    }


def itinerary_to_csv(itinerary: Itinerary) -> str:
    buffer = io.StringIO()
    fieldnames = [
        "sequence",
        "site_id",
        "name",
        "category",
        "latitude",
        "longitude",
        "travel_minutes",
        "visit_minutes",
        "elapsed_minutes",
        "leg_distance_km",
        "score",
    ]
    writer = csv.DictWriter(buffer, fieldnames=fieldnames)
    writer.writeheader()
    for stop in itinerary.stops:
        writer.writerow(
            {
                "sequence": stop.sequence,
                "site_id": stop.candidate.site_id,
                "name": stop.candidate.poi.name,
                "category": stop.candidate.poi.category,
                "latitude": stop.candidate.coordinate.latitude,
                "longitude": stop.candidate.coordinate.longitude,
                "travel_minutes": stop.travel_minutes,
                "visit_minutes": stop.candidate.visit_minutes,
                "elapsed_minutes": stop.elapsed_minutes,
                "leg_distance_km": stop.leg_distance_km,
                "score": stop.candidate.score,
            }
        )
    return buffer.getvalue()
