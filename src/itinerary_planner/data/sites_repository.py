"""Site repository adapters supplying documented points of interest near a coordinate.

The planner only consumes :class:`SiteRepository`. Two adapters are provided: a
Supabase-backed one calling the ``sites_within_radius`` RPC, and a JSON catalogue
loaded from the data root for local runs and tests. Both return only sites that
have at least one detail record.
"""

from __future__ import annotations

import functools
import json
import logging
from pathlib import Path
from typing import Any, Iterable, Optional, Protocol, Sequence

from ..config import settings
from ..models.domain import Coordinate, PointOfInterest
from ..services.geospatial import haversine_km

logger = logging.getLogger(__name__)


class SiteRepositoryUnavailable(RuntimeError):
    """Raised when the site catalogue cannot be queried at all."""


class SiteRepository(Protocol):
    def find_near(
        self,
        origin: Coordinate,
        radius_km: float,
        categories: Sequence[str] | None = None,
    ) -> list[PointOfInterest]:
        ...


def _detail_kinds(row: dict[str, Any]) -> frozenset[str]:
    kinds = row.get("detail_kinds") or row.get("details") or []
    if isinstance(kinds, str):
        kinds = [kinds]
    return frozenset(str(kind).strip().lower() for kind in kinds if kind)


def _service_names(row: dict[str, Any]) -> tuple[str, ...]:
    services = row.get("services") or row.get("service_names") or []
    names: list[str] = []
    for service in services:
        if isinstance(service, dict):
            name = service.get("name") or service.get("nom")
        else:
            name = service
        if name:
            names.append(str(name).strip())
    return tuple(names)


def poi_from_row(row: dict[str, Any]) -> PointOfInterest:
    """Convert a catalogue/database row into a :class:`PointOfInterest`."""
    description = row.get("description") or ""
    description_length = row.get("description_length")
    media = row.get("media")
    media_count = row.get("media_count")
    return PointOfInterest(
        site_id=row.get("site_id", row.get("id")),
        name=str(row.get("name") or row.get("nom") or "").strip(),
        coordinate=Coordinate(float(row["latitude"]), float(row["longitude"])),
        category=str(row.get("category") or "site").strip().lower(),
        service_names=_service_names(row),
        media_count=int(media_count) if media_count is not None else len(media or []),
        description_length=int(description_length) if description_length is not None else len(description),
        detail_kinds=_detail_kinds(row),
    )


def _is_documented(row: dict[str, Any]) -> bool:
    if "has_detail" in row:
        return bool(row["has_detail"])
    return bool(_detail_kinds(row)) or bool(row.get("detail"))


def _matches_categories(poi: PointOfInterest, categories: Sequence[str] | None) -> bool:
    if not categories:
        return True
    wanted = {category.strip().lower() for category in categories}
    return poi.category in wanted or bool(poi.detail_kinds & wanted)


def _rows_to_pois(rows: Iterable[dict[str, Any]]) -> list[PointOfInterest]:
    pois: list[PointOfInterest] = []
    for row in rows:
        if not _is_documented(row):
            continue
        try:
            pois.append(poi_from_row(row))
        except (KeyError, ValueError, TypeError) as e:
            logger.warning(f"Skipping invalid site row {row.get('id', row.get('site_id'))}: {e}")
    return pois


class InMemorySiteRepository:
    """Filters a fixed collection of sites by great-circle distance."""

    def __init__(self, pois: Iterable[PointOfInterest]) -> None:
        self.pois = tuple(pois)

    def find_near(
        self,
        origin: Coordinate,
        radius_km: float,
        categories: Sequence[str] | None = None,
    ) -> list[PointOfInterest]:
        return [
            poi
            for poi in self.pois
            if _matches_categories(poi, categories)
            and haversine_km(
                origin.latitude, origin.longitude, poi.coordinate.latitude, poi.coordinate.longitude
            )
            <= radius_km
        ]


@functools.lru_cache(maxsize=1)
def load_sites(source: Optional[Path] = None) -> tuple[PointOfInterest, ...]:
    """Load documented sites from the configured JSON catalogue."""

    json_path = source or settings.sites_file
    if not json_path.exists():
        raise FileNotFoundError(f"Site catalogue not found: {json_path}")
    with json_path.open(mode="r", encoding="utf-8") as handle:
        data = json.load(handle)
    rows = data.get("sites", []) if isinstance(data, dict) else data
    return tuple(_rows_to_pois(rows))


class FileSiteRepository:
    """Reads the JSON catalogue lazily so a missing file only fails the lookup."""

    def __init__(self, source: Optional[Path] = None) -> None:
        self.source = source

    def find_near(
        self,
        origin: Coordinate,
        radius_km: float,
        categories: Sequence[str] | None = None,
    ) -> list[PointOfInterest]:
        try:
            pois = load_sites(self.source)
        except (OSError, ValueError) as exc:
            raise SiteRepositoryUnavailable(f"Site catalogue could not be loaded: {exc}") from exc
        return InMemorySiteRepository(pois).find_near(origin, radius_km, categories)


class SupabaseSiteRepository:
    """Queries the ``sites_within_radius`` RPC and keeps only documented sites."""

    def __init__(self, client) -> None:
        self.client = client

    def find_near(
        self,
        origin: Coordinate,
        radius_km: float,
        categories: Sequence[str] | None = None,
    ) -> list[PointOfInterest]:
        try:
            response = self.client.rpc(
                "sites_within_radius",
                {
                    "lat": origin.latitude,
                    "lng": origin.longitude,
                    "radius_km": radius_km,
                },
            ).execute()
        except Exception as exc:
            logger.error(f"Site lookup failed around {origin}: {exc}")
            raise SiteRepositoryUnavailable(f"Site repository is unreachable: {exc}") from exc

        pois = _rows_to_pois(response.data or [])
        return [poi for poi in pois if _matches_categories(poi, categories)]
