"""Application settings loaded from environment / .env file."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

# Slugs that collide with platform subdomains or infrastructure routes.
DEFAULT_RESERVED_TENANT_SLUGS = [
    "www",
    "kafka",
    "mongo",
    "rtmp",
    "quillhub",
    "quillhub-api",
    "kibana",
    "grafana",
    "dozzle",
    "elastic",
    "stats",
    "storage",
    "minio",
    "stream",
    "broker",
    "admin",
    "auth",
    "api",
    "static",
    "assets",
]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Database ──────────────────────────────────────────
    # Control-plane database. Tenant databases live next to it on the same
    # server (or in the same directory for SQLite).
    database_url: str = "sqlite+aiosqlite:///./data/quillhub_control.db"
    tenant_database_prefix: str = "quill_tenant_"
    db_pool_size: int = 5
    db_max_overflow: int = 10

    # ── Tenants ───────────────────────────────────────────
    reserved_tenant_slugs: list[str] = DEFAULT_RESERVED_TENANT_SLUGS

    # ── Security ──────────────────────────────────────────
    jwt_secret_key: str = "change-me"  # MUST be set in production
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 120

    # ── Enrichment / search ingestion ─────────────────────
    ingestion_service_url: str = ""
    shared_api_key: str = ""

    # ── HTTP ──────────────────────────────────────────────
    allowed_origins: str = "http://localhost:3001"
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
