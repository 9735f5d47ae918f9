"""Route group exports."""

from . import health, itineraries

__all__ = ["health", "itineraries"]
