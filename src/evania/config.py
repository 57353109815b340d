"""Application settings via pydantic-settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables with EVANIA_ prefix."""

    model_config = SettingsConfigDict(
        env_prefix="EVANIA_",
        env_file=".env",
        case_sensitive=False,
    )

    # --- Core ---
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"
    database_url: str = "sqlite+aiosqlite:///./evania.db"
    redis_url: str | None = None
    cors_origins: list[str] = ["http://localhost:8081", "http://localhost:19006"]
    rate_limit_requests: int = 100
    rate_limit_window_seconds: int = 60
    log_level: str = "INFO"
    log_format: str = "json"

    # --- Schema / seed data ---
    auto_create_schema: bool = True
    seed_quests: bool = True

    # --- Identity ---
    jwt_secret: str = "dev-secret"
    jwt_algorithm: str = "HS256"
    jwt_expire_days: int = 30
    password_min_length: int = 8
    dev_identity_fallback: bool = True
    demo_user_id: str = "demo-user"

    # --- Progression ---
    default_timezone: str = "Asia/Kolkata"


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
