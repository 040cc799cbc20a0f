"""Application settings loaded from environment variables.

Uses pydantic-settings for validation and type coercion. App-specific
settings use the ``GCONNECT_`` prefix; GCP / infrastructure settings use
their canonical environment variable names via ``validation_alias``.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(StrEnum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """Central configuration for the GConnect API.

    Environment variables are loaded from a ``.env`` file when present.
    """

    model_config = SettingsConfigDict(
        env_prefix="GCONNECT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # ── App ────────────────────────────────────────────────────────────
    env: Literal["development", "production"] = "development"

    # ── API ────────────────────────────────────────────────────────────
    api_host: str = Field(default="0.0.0.0", validation_alias="API_HOST")
    api_port: int = Field(default=5000, validation_alias="API_PORT")
    cors_origins: str = Field(default="", validation_alias="CORS_ORIGINS")

    # ── Auth ───────────────────────────────────────────────────────────
    token_secret: str = Field(
        default="dev-secret-change-in-production",
        validation_alias="JWT_SECRET",
    )
    token_ttl_hours: int = Field(default=168, ge=1)  # 7 days
    password_hash_iterations: int = Field(default=310_000, ge=1)

    # ── Vertex AI / Gemini ─────────────────────────────────────────────
    gcp_project_id: str = Field(default="", validation_alias="GCP_PROJECT_ID")
    vertex_ai_model: str = Field(default="gemini-2.0-flash", validation_alias="VERTEX_AI_MODEL")
    vertex_ai_location: str = Field(default="asia-south1", validation_alias="VERTEX_AI_LOCATION")

    # ── Logging ────────────────────────────────────────────────────────
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_format: str = Field(default="json", validation_alias="LOG_FORMAT")

    # ── Listing limits ─────────────────────────────────────────────────
    recommendation_limit: int = Field(default=10, ge=1, le=10)
    notification_limit: int = Field(default=50, ge=1)
    chat_history_limit: int = Field(default=50, ge=1)
    deadline_window_days: int = Field(default=7, ge=1)

    # ── Seed data ──────────────────────────────────────────────────────
    seed_schemes: bool = True

    # ── Derived Properties ─────────────────────────────────────────────

    @property
    def is_production(self) -> bool:
        return self.env == Environment.PRODUCTION

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


# Module-level singleton -- import ``settings`` everywhere.
settings = Settings()
