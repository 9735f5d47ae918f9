"""Application configuration and settings management."""

from pathlib import Path
from typing import Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="ITP_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Intelligent Itinerary Planner API"
    api_prefix: str = "/api"
    data_root: Path = Field(default=Path("data"), description="Root directory for static data and saved itineraries.")
    sites_file: Path = Field(
        default=Path("data/sites.json"),
        description="Fallback JSON catalogue of documented sites when Supabase is not configured.",
    )

    # Planning defaults
    default_radius_km: float = Field(default=10.0, gt=0.0)
    default_max_stops: int = Field(default=5, ge=1)
    personalized_max_stops: int = Field(default=10, ge=1)
    default_time_budget_minutes: int = Field(default=480, ge=1)
    default_personalized_duration_minutes: int = Field(default=240, ge=1)
    min_remaining_minutes: int = Field(
        default=60,
        ge=0,
        description="No further stop is attempted once the remaining budget drops to this value.",
    )
    leg_speed_kmh: float = Field(default=50.0, gt=0.0, description="Speed used for every in-route leg.")
    max_candidates: int = Field(default=500, ge=1, description="Upper bound on candidates fed to the route builder.")
    default_categories: tuple[str, ...] = Field(default=("monument", "vestige", "site"))
    accessibility_keywords: tuple[str, ...] = Field(
        default=("accessib", "wheelchair", "pmr", "handicap", "ramp"),
        description="Case-insensitive fragments marking a service as accessibility-related.",
    )
    site_url_template: str = Field(
        default="https://www.google.com/maps/dir/?api=1&destination={lat},{lon}",
        description="Template for the external link embedded in each waypoint payload.",
    )

    # Service directory (nearby restaurants / lodging)
    service_directory_url: Optional[str] = Field(
        default=None,
        description="Base URL of the REST service directory (e.g., http://localhost:8081).",
    )
    service_directory_timeout_seconds: float = Field(default=5.0, gt=0.0)
    service_directory_max_retries: int = Field(default=2, ge=0)
    service_directory_backoff_seconds: float = Field(default=0.5, ge=0.0)

    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    # Supabase configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key for backend operations.",
    )

    @field_validator("data_root", "sites_file", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Path:
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser().resolve()

    @field_validator("frontend_allowed_origins", "default_categories", "accessibility_keywords", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()


settings = Settings()
