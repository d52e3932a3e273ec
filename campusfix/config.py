"""
Configuration management for CampusFix.

Supports environment variables and .env files.
"""
from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CAMPUSFIX_",
        extra="ignore",
    )

    # Application
    app_name: str = "CampusFix"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite:///data/campusfix.db"
    database_pool_size: int = 5
    database_max_overflow: int = 10

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    cors_origins: list[str] = ["*"]
    rate_limit_enabled: bool = True
    default_rate_limit: str = "200/minute"
    redis_url: Optional[str] = None

    # Campus map
    symmetric_graph: bool = True  # Mirror one-way neighbor lists into undirected edges

    # Tickets
    auto_triage: bool = True  # Run keyword triage when a ticket has no priority


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Convenience access
settings = get_settings()
