"""
Application configuration using 12-factor environment variables.
"""
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="Chat Message Service")
    app_version: str = Field(default="1.0.0")
    debug: bool = Field(default=False)

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080)

    # Database
    database_url: str = Field(default="sqlite:///./data/chat.db")

    # Sessions
    session_cookie_name: str = Field(default="session")
    session_lifetime_seconds: int = Field(default=12 * 60 * 60, description="Absolute session lifetime")
    session_idle_timeout_seconds: int = Field(default=3 * 60 * 60, description="Idle timeout before a session expires")
    password_hash_iterations: int = Field(default=100_000, ge=1)

    # Messages
    default_page_limit: int = Field(default=100, ge=1)

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")  # json or text

    @property
    def is_sqlite(self) -> bool:
        """Check if the configured store is SQLite."""
        return self.database_url.startswith("sqlite")


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
