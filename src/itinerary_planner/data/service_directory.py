"""Clients for the nearby-services directory (restaurants, lodging, ...)."""

from __future__ import annotations

import logging
import time
from typing import Any, Protocol

import httpx

from ..config import settings
from ..models.domain import Coordinate, ServiceSuggestion

logger = logging.getLogger(__name__)


class ServiceDirectory(Protocol):
    def find_nearby_services(
        self, coordinate: Coordinate, category: str, limit: int
    ) -> list[ServiceSuggestion]:
        ...


def suggestion_from_row(row: dict[str, Any], category: str) -> ServiceSuggestion:
    lat = row.get("latitude")
    lon = row.get("longitude")
    distance = row.get("distance_km", row.get("distance"))
    return ServiceSuggestion(
        name=str(row.get("name") or row.get("nom") or "").strip(),
        category=str(row.get("category") or row.get("type") or category),
        coordinate=Coordinate(float(lat), float(lon)) if lat is not None and lon is not None else None,
        distance_km=float(distance) if distance is not None else None,
    )


class HttpServiceDirectory:
    """REST client for ``GET {base_url}/services/nearby``."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url or settings.service_directory_url
        if not self.base_url:
            raise ValueError("Service directory base URL is not configured.")
        self.base_url = self.base_url.rstrip("/")
        self.timeout = timeout if timeout is not None else settings.service_directory_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.service_directory_max_retries
        self.backoff_seconds = (
            backoff_seconds if backoff_seconds is not None else settings.service_directory_backoff_seconds
        )
        self._transport = transport

    def _get_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=httpx.Timeout(self.timeout, connect=min(self.timeout, 5.0)),
            transport=self._transport,
        )

    def find_nearby_services(
        self, coordinate: Coordinate, category: str, limit: int
    ) -> list[ServiceSuggestion]:
        params = {
            "lat": coordinate.latitude,
            "lng": coordinate.longitude,
            "category": category,
            "limit": limit,
        }
        url = f"{self.base_url}/services/nearby"

        client = self._get_client()
        try:
            attempt = 0
            while True:
                try:
                    response = client.get(url, params=params)
                    response.raise_for_status()
                    data = response.json()
                    rows = data.get("items", []) if isinstance(data, dict) else data
                    return [suggestion_from_row(row, category) for row in rows][:limit]
                except httpx.HTTPStatusError as e:
                    # 4xx will not improve on retry
                    if e.response.status_code < 500:
                        raise
                    attempt += 1
                    if attempt > self.max_retries:
                        raise
                    time.sleep(self.backoff_seconds * attempt)
                except (httpx.TimeoutException, httpx.NetworkError) as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise ConnectionError(
                            f"Service directory at {self.base_url} is not reachable: {e}"
                        ) from e
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(
                        f"Service directory error, retrying in {wait_time:.1f}s "
                        f"(attempt {attempt}/{self.max_retries}): {e}"
                    )
                    time.sleep(wait_time)
        finally:
            client.close()


class SupabaseServiceDirectory:
    """Looks services up through the ``services_nearby`` RPC."""

    def __init__(self, client) -> None:
        self.client = client

    def find_nearby_services(
        self, coordinate: Coordinate, category: str, limit: int
    ) -> list[ServiceSuggestion]:
        response = self.client.rpc(
            "services_nearby",
            {
                "lat": coordinate.latitude,
                "lng": coordinate.longitude,
                "category": category,
                "max_results": limit,
            },
        ).execute()
        return [suggestion_from_row(row, category) for row in (response.data or [])][:limit]
