"""Itinerary store adapters used to keep accepted itineraries."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

from ..config import settings
from ..services.outputs.itinerary_formatter import itinerary_to_csv, itinerary_to_json
from ..services.routing.models import Itinerary

logger = logging.getLogger(__name__)


class ItineraryStore(Protocol):
    def save(self, itinerary: Itinerary, owner_id: str, *, event_id: str | None = None) -> str:
        ...


class FileItineraryStore:
    """Writes ``summary.json`` and ``stops.csv`` into a timestamped directory under ``<root>/itineraries``."""

    def __init__(self, root: Path | None = None) -> None:
        self.root = root

    @property
    def output_root(self) -> Path:
        return (self.root or settings.data_root).resolve() / "itineraries"

    def save(self, itinerary: Itinerary, owner_id: str, *, event_id: str | None = None) -> str:
        stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")
        run_dir = self.output_root / f"itinerary_{owner_id}_{stamp}"
        run_dir.mkdir(parents=True, exist_ok=False)

        summary = itinerary_to_json(itinerary)
        summary["owner_id"] = owner_id
        summary["event_id"] = event_id
        with (run_dir / "summary.json").open("w", encoding="utf-8") as handle:
            json.dump(summary, handle, ensure_ascii=False, indent=2)
        (run_dir / "stops.csv").write_text(itinerary_to_csv(itinerary), encoding="utf-8")
        return run_dir.name


class SupabaseItineraryStore:
    """Inserts the itinerary header, then its ordered stops.

    A failed stops insert removes the header again so no empty itinerary is left behind.
    """

    def __init__(self, client) -> None:
        self.client = client

    def save(self, itinerary: Itinerary, owner_id: str, *, event_id: str | None = None) -> str:
        name = f"Event itinerary {event_id}" if event_id else "Personalized itinerary"
        response = self.client.table("itineraries").insert(
            {
                "name": name,
                "description": "Automatically generated itinerary",
                "created_by": owner_id,
                "event_id": event_id,
                "origin_latitude": itinerary.origin.latitude,
                "origin_longitude": itinerary.origin.longitude,
                "total_distance_km": itinerary.total_distance_km,
                "total_duration_minutes": itinerary.total_duration_minutes,
            }
        ).execute()
        if not response.data:
            raise RuntimeError("Itinerary insert returned no row.")
        itinerary_id = str(response.data[0]["id"])

        stops = [
            {
                "itinerary_id": itinerary_id,
                "site_id": stop.candidate.site_id,
                "event_id": event_id,
                "position": stop.sequence,
            }
            for stop in itinerary.stops
        ]
        if stops:
            try:
                self.client.table("itinerary_stops").insert(stops).execute()
            except Exception:
                logger.warning(f"Stops insert failed for itinerary {itinerary_id}; removing header row")
                self.client.table("itineraries").delete().eq("id", itinerary_id).execute()
                raise
        logger.info(f"Saved itinerary {itinerary_id} with {len(stops)} stops for owner {owner_id}")
        return itinerary_id
