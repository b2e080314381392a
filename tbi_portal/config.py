"""Portal Settings — every tunable read from the environment (or .env) by pydantic-settings.

Invariants:
    - SECRET_KEY, RESEND_API_KEY, CLEANUP_API_KEY and the admin bootstrap pair come from the environment only
    - get_settings() is cached (lru_cache): single instance per process
    - Missing RESEND_API_KEY is a valid configuration: emails are logged, not sent

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Non-secret defaults point at a local PostgreSQL and the public portal URL
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Process-wide configuration; see get_settings()."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = "postgresql+asyncpg://tbi:tbi@db:5432/tbi"

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosted Postgres URLs come as postgresql://, asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Transactional email (Resend)
    resend_api_key: str = ""
    resend_from_email: str = "TBI Platform <onboarding@resend.dev>"
    resend_api_url: str = "https://api.resend.com"
    email_timeout_seconds: int = 10

    # Public URL used in email links
    app_url: str = "http://localhost:9002"

    # Identity & tokens
    secret_key: str = "dev-change-me"
    session_token_minutes: int = 60 * 24
    mentor_token_days: int = 7
    password_reset_minutes: int = 60
    temporary_password_length: int = 10

    # Maintenance endpoint (expired token cleanup)
    cleanup_api_key: str = ""

    # Admin bootstrap: created on startup when both are set
    admin_email: str | None = None
    admin_password: str | None = None

    # API
    cors_origins: list[str] = ["http://localhost:9002"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
