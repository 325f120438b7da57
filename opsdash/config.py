"""
Hotel Ops Dashboard Configuration

All environment variables and settings for the dashboard API.
"""

from functools import lru_cache
from typing import Any

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ==========================================================================
    # APP
    # ==========================================================================
    app_name: str = "Hotel Ops Dashboard"
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # ==========================================================================
    # AUTH (Supabase Auth issues the access tokens)
    # ==========================================================================
    supabase_url: str
    auth_jwt_audience: str = "authenticated"

    # ==========================================================================
    # METRICS API (pre-aggregated hotel metrics)
    # ==========================================================================
    metrics_api_url: str
    metrics_timeout_seconds: float = 15.0

    # ==========================================================================
    # DASHBOARD BEHAVIOR
    # ==========================================================================
    dashboard_max_points: int = 7
    dashboard_rate_limit_rpm: int = 60
    savings_minutes_per_email: float = 5.0
    savings_hourly_rate: float = 20.0

    # ==========================================================================
    # TENANCY (JSON maps, same shape as the static config files)
    # ==========================================================================
    # USER_CONFIGS: {"<email>": {"tenant_id", "full_name", "role", ...}}
    user_configs: dict[str, dict[str, Any]] = {}
    # HOTEL_GROUP_CONFIGS: {"<tenant_id>": {"id": ["<hotel_id>", ...], "name"}}
    hotel_group_configs: dict[str, dict[str, Any]] = {}
    # HOTEL_CONFIGS: {"<hotel_id>": {"name", "stars", "rooms", "location"}}
    hotel_configs: dict[str, dict[str, Any]] = {}

    # ==========================================================================
    # CORS
    # ==========================================================================
    cors_origins: str = "http://localhost:3000"

    # ==========================================================================
    # SERVER
    # ==========================================================================
    host: str = "0.0.0.0"
    port: int = 8000

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"

    @property
    def jwks_url(self) -> str:
        return f"{self.supabase_url.rstrip('/')}/auth/v1/.well-known/jwks.json"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
