"""Application configuration and settings management."""

from pathlib import Path
from typing import Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="FIELDROUTE_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Field Route Dispatch API"
    api_prefix: str = "/api"
    data_root: Path = Field(default=Path("data"), description="Root directory for run outputs.")
    save_run_outputs: bool = Field(
        default=True,
        description="Write a JSON summary and CSV route sheet for every optimization run.",
    )
    timezone: str = Field(
        default="UTC",
        description="IANA zone used to interpret job timestamps and the working day.",
    )
    average_speed_mph: float = Field(default=30.0, gt=0.0)
    default_start_hour: int = Field(default=8, ge=0, le=23)
    max_jobs_per_worker: int = Field(default=12, ge=1)
    workload_penalty_per_job: float = Field(
        default=5.0,
        ge=0.0,
        description="Miles-equivalent penalty per job a worker holds above the average.",
    )
    anchor_buffer_minutes: int = Field(
        default=15,
        ge=0,
        description="Headroom kept before a fixed or window appointment when inserting flexible jobs.",
    )
    late_arrival_tolerance_minutes: int = Field(
        default=15,
        ge=0,
        description="Minutes a projected arrival may trail a fixed or window appointment before it is flagged late.",
    )
    worker_colors: tuple[str, ...] = Field(
        default=(
            "#10b981",
            "#3b82f6",
            "#f59e0b",
            "#ef4444",
            "#8b5cf6",
            "#ec4899",
            "#06b6d4",
            "#84cc16",
        ),
    )
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:3000",
            "http://127.0.0.1:3000",
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

    @field_validator("data_root", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Path:
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser().resolve()

    @field_validator("frontend_allowed_origins", "worker_colors", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            # Try JSON first
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            # Try comma-separated
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            # Single value
            if value.strip():
                return (value.strip(),)
        return tuple()


settings = Settings()
