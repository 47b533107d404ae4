"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support (ADR: developer UX)
    - Defaults provided for all non-secret settings: works out-of-the-box with docker-compose
    - rbac_seed_expected_permissions defaults to the size of the static catalog, so
      growing the catalog moves the short-circuit threshold with it
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache

from rolegate.core.seed_catalog import (
    DEFAULT_SEED_LOCK_KEY, EXPECTED_SYSTEM_PERMISSIONS,
)


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://rolegate:rolegate@db:5432/rolegate"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosted Postgres provides postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # RBAC bootstrap
    rbac_seed_on_startup: bool = True
    rbac_seed_expected_permissions: int = EXPECTED_SYSTEM_PERMISSIONS
    rbac_seed_lock_key: int = DEFAULT_SEED_LOCK_KEY

    # RBAC route registration
    # ADR: off by default, dual any-of/all-of routes keep all-of precedence
    rbac_reject_dual_requirements: bool = False

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
