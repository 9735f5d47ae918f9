"""Geospatial helper functions."""

from __future__ import annotations

import math

from ..models.domain import Coordinate

EARTH_RADIUS_KM = 6371.0

# Average speeds (km/h) used to size the search radius for a transport mode.
TRANSPORT_SPEEDS_KMH = {
    "walking": 5.0,
    "cycling": 15.0,
    "driving": 50.0,
}
TRANSPORT_MODE_ALIASES = {
    "marche": "walking",
    "walk": "walking",
    "velo": "cycling",
    "bike": "cycling",
    "voiture": "driving",
    "car": "driving",
}
DEFAULT_TRANSPORT_MODE = "driving"

# Share of the duration budget kept for on-site visits.
ON_SITE_RESERVE = 0.3
ROUND_TRIP_FACTOR = 2.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    # Rounding can push antipodal pairs just past 1.
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def distance_km(a: Coordinate, b: Coordinate) -> float:
    return haversine_km(a.latitude, a.longitude, b.latitude, b.longitude)


def bearing_degrees(a: Coordinate, b: Coordinate) -> float:
    """Calculate the initial bearing from ``a`` to ``b``."""

    phi1 = math.radians(a.latitude)
    phi2 = math.radians(b.latitude)
    delta_lambda = math.radians(b.longitude - a.longitude)
    y = math.sin(delta_lambda) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(delta_lambda)
    bearing = math.degrees(math.atan2(y, x))
    return (bearing + 360) % 360


def travel_time_minutes(distance: float, speed_kmh: float) -> int:
    """Minutes needed to cover ``distance`` km at ``speed_kmh``, halves rounded up."""
    return math.floor(distance / speed_kmh * 60 + 0.5)


def normalize_transport_mode(mode: str | None) -> str:
    """Map user supplied transport names onto walking/cycling/driving.

    Unknown values fall back to driving.
    """
    if not mode:
        return DEFAULT_TRANSPORT_MODE
    key = mode.strip().lower()
    key = TRANSPORT_MODE_ALIASES.get(key, key)
    return key if key in TRANSPORT_SPEEDS_KMH else DEFAULT_TRANSPORT_MODE


def search_radius_km(transport_mode: str | None, duration_minutes: float) -> float:
    speed = TRANSPORT_SPEEDS_KMH[normalize_transport_mode(transport_mode)]
    return speed * (duration_minutes / 60) * (1 - ON_SITE_RESERVE) / ROUND_TRIP_FACTOR
