"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    admin_token: str
    crop_session_ttl_seconds: int = 5 * 60
    crop_session_max_operations: int = 3
    sweep_interval_seconds: float = 60.0
    document_cache_ttl_seconds: int = 30
    tenant_header: str = "X-Tenant-Domain"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def normalize_domain(raw: str | None) -> str | None:
    """Normalize a host or tenant domain header value."""
    if raw is None:
        return None
    host = raw.split(",", 1)[0].strip().lower()
    host = host.rsplit(":", 1)[0] if host.rpartition(":")[2].isdigit() else host
    return host or None
