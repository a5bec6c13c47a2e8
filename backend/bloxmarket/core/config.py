"""
Application configuration settings.

All configuration is loaded from environment variables with sensible defaults.
"""
import json
from typing import Any
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SECRET_KEY = "dev-secret-key-change-in-production"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "BloxMarket API"
    api_debug: bool = True
    log_level: str | None = None  # overrides the debug-derived level
    secret_key: str = DEFAULT_SECRET_KEY  # SECURITY: Must be overridden in production via env var

    # JWT Settings
    jwt_algorithm: str = "HS256"
    jwt_access_token_expire_minutes: int = 60 * 24 * 30  # 30 days
    max_sessions_per_user: int = 5
    bcrypt_rounds: int = 12

    # API Server
    api_host: str = "0.0.0.0"
    api_port: int = 5000
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    # Database
    postgres_host: str = "db"
    postgres_port: int = 5432
    postgres_user: str = "bloxmarket"
    postgres_password: str = "bloxmarket"
    postgres_db: str = "bloxmarket"
    database_url: str | None = None
    db_echo: bool = False
    auto_create_tables: bool = False

    # Redis (rate limiting)
    redis_url: str = "redis://redis:6379/0"
    rate_limit_enabled: bool = True
    requests_per_minute: int = 120
    auth_requests_per_minute: int = 10

    # Uploads
    upload_dir: str = "uploads"
    max_upload_size: int = 10 * 1024 * 1024  # 10MB
    max_application_documents: int = 5
    max_post_images: int = 5

    # Events
    event_ending_soon_hours: int = 24

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: Any) -> list[str]:
        """Parse CORS origins from JSON string or list."""
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [v]
        return v

    @property
    def database_url_computed(self) -> str:
        """Compute database URL from components if not explicitly set."""
        if self.database_url:
            return self.database_url
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def sync_database_url(self) -> str:
        """Synchronous database URL for Alembic migrations."""
        url = self.database_url_computed
        return url.replace("+asyncpg", "").replace("+aiosqlite", "")

    @property
    def is_postgres(self) -> bool:
        return self.database_url_computed.startswith("postgresql")


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    settings = Settings()

    # Security check: warn if using default secret key in production
    if not settings.api_debug and settings.secret_key == DEFAULT_SECRET_KEY:
        import warnings
        warnings.warn(
            "SECURITY WARNING: Using default secret_key in production! "
            "Set SECRET_KEY environment variable to a secure random value.",
            UserWarning
        )

    return settings


settings = get_settings()
