from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    """Application configuration using pydantic-settings.

    Values are read from a .env file (if present) and the environment.
    Use the exported `settings` instance.
    """

    database_url: str = "sqlite:///database.db"
    database_echo: bool = False
    environment: str = "development"
    log_level: str = "info"
    secret_key: str = "please_change_this"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 30
    refresh_token_expire_minutes: int = 60 * 24 * 7  # 7 days
    # When true, access tokens will be created without an `exp` claim.
    # Do NOT enable in production.
    access_token_no_expiration: bool = False
    # Cookie checked when no bearer token is sent
    auth_cookie_name: str = "study_auth_token"

    # IANA zone used to derive hour of day / day of week from session start times
    timezone: str = "UTC"
    # Defaults for users who have not saved their own study settings
    default_study_duration: int = 25 * 60  # seconds
    default_daily_goal: int = 120 * 60  # seconds
    # 0 disables the performance analytics cache
    analytics_cache_ttl_seconds: int = 300

    cors_origins: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


# singleton settings instance to import across the app
settings = Settings()
