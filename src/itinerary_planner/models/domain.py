"""Domain models for sites, coordinates and nearby services."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

SiteId = Union[int, str]


@dataclass(frozen=True, slots=True)
class Coordinate:
    """WGS84 position in decimal degrees."""

    latitude: float
    longitude: float

    def as_dict(self) -> dict[str, float]:
        return {"lat": self.latitude, "lng": self.longitude}


@dataclass(frozen=True, slots=True)
class PointOfInterest:
    """Represents a documented heritage site supplied by the site repository.

    ``category`` is the site's declared category while ``detail_kinds`` lists the
    detail records joined to it (``monument``, ``vestige``). Both are consulted when
    deciding whether a site counts as a monument or a vestige, so a site can be both.
    """

    site_id: SiteId
    name: str
    coordinate: Coordinate
    category: str = "site"
    service_names: tuple[str, ...] = ()
    media_count: int = 0
    description_length: int = 0
    detail_kinds: frozenset[str] = field(default_factory=frozenset)

    @property
    def service_count(self) -> int:
        return len(self.service_names)

    @property
    def is_monument(self) -> bool:
        return self.category == "monument" or "monument" in self.detail_kinds

    @property
    def is_vestige(self) -> bool:
        return self.category == "vestige" or "vestige" in self.detail_kinds


@dataclass(frozen=True, slots=True)
class ServiceSuggestion:
    """A nearby restaurant, hotel or other amenity returned by the service directory."""

    name: str
    category: str
    coordinate: Coordinate | None = None
    distance_km: float | None = None
    anchor: str | None = None
