"""
Centralized settings configuration using Pydantic BaseSettings.

All environment variables are defined here with types, defaults, and validation.
Use get_settings() for a cached, process-wide instance.

Usage:
    from backend.settings import get_settings, Settings

    settings = get_settings()
    print(settings.default_cache_strategy)
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from application.services.cache_strategy import CacheStrategy


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Core Environment
    # -------------------------------------------------------------------------
    environment: str = Field(
        default="development",
        description="Runtime environment: development, staging, production",
    )

    # -------------------------------------------------------------------------
    # Supabase Database (local record cache)
    # -------------------------------------------------------------------------
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL",
    )
    supabase_service_role_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key (full access)",
    )
    supabase_anon_key: Optional[str] = Field(
        default=None,
        description="Supabase anonymous key (limited access)",
    )
    records_table: str = Field(
        default="records",
        description="Table holding cached raw records",
    )

    @property
    def supabase_key(self) -> Optional[str]:
        """Get the best available Supabase key (service role preferred)."""
        return self.supabase_service_role_key or self.supabase_anon_key

    # -------------------------------------------------------------------------
    # Record Network - Relay Gateway
    # -------------------------------------------------------------------------
    relay_gateway_url: str = Field(
        default="http://relay-gateway:8010",
        description="URL for the relay gateway fronting the record network",
    )
    relay_publish_max_attempts: int = Field(
        default=3,
        ge=1,
        description="Attempts per publish before giving up",
    )
    network_enabled: bool = Field(
        default=True,
        description="Allow network reads and publishing; adaptive reads fall back to cache when off",
    )

    # -------------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------------
    default_cache_strategy: CacheStrategy = Field(
        default=CacheStrategy.CACHE_FIRST,
        description="Read strategy used when a caller names none",
    )
    fetch_timeout_ms: int = Field(
        default=10000,
        gt=0,
        description="Hard timeout for each fetch",
    )
    availability_check_timeout_ms: int = Field(
        default=1000,
        gt=0,
        description="Timeout for advisory cache availability checks",
    )
    parse_cache_capacity: int = Field(
        default=1000,
        ge=1,
        description="Parsed records kept per resolver",
    )

    # -------------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------------
    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is a valid value."""
        valid_environments = {"development", "staging", "production", "test"}
        if v.lower() not in valid_environments:
            raise ValueError(
                f"Invalid environment '{v}'. Must be one of: {valid_environments}"
            )
        return v.lower()

    # -------------------------------------------------------------------------
    # Helper Properties
    # -------------------------------------------------------------------------
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_test(self) -> bool:
        """Check if running in test environment."""
        return self.environment == "test"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    For testing, you can clear the cache with get_settings.cache_clear().

    Returns:
        Settings: Application settings instance
    """
    return Settings()
