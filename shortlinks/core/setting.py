"""
Configuration Settings

This module defines application configuration using Pydantic Settings.
All configuration is loaded from environment variables or .env file.

Design Decisions:
- Uses pydantic-settings for type-safe configuration
- Supports multiple environments (production, staging, dev)
- Shortcode format bounds are configuration, not hard-coded regexes
- Remote log shipping is off unless explicitly enabled
"""

from __future__ import annotations

from enum import Enum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ["Settings", "settings"]


class EnvSettingsOptions(Enum):
    """Environment options for deployment."""
    production = "production"
    staging = "staging"
    development = "dev"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables or .env file.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Project Configuration
    ENV_SETTING: EnvSettingsOptions = Field(
        default=EnvSettingsOptions.development,
        description="Environment setting (production, staging, dev)"
    )

    # Application Configuration
    BASE_URL: str = Field(
        default="http://localhost:3000",
        description="Base URL for generating short URLs"
    )

    # Batch / Entry Configuration
    DEFAULT_VALIDITY_MINUTES: int = Field(
        default=30,
        description="Validity applied when an entry does not specify one"
    )
    MAX_VALIDITY_MINUTES: int = Field(
        default=525600,
        description="Longest validity an entry may request (one year)"
    )
    MAX_URLS_PER_BATCH: int = Field(
        default=5,
        description="Maximum number of entries accepted in one submission"
    )

    # Shortcode Configuration
    SHORTCODE_MIN_LENGTH: int = Field(
        default=3,
        description="Minimum length of a custom shortcode"
    )
    SHORTCODE_MAX_LENGTH: int = Field(
        default=12,
        description="Maximum length of a custom shortcode"
    )
    GENERATED_SHORTCODE_LENGTH: int = Field(
        default=6,
        description="Fixed length of generated shortcodes"
    )
    SHORTCODE_MAX_ATTEMPTS: int = Field(
        default=1000,
        description="Random draws tried before giving up on generating a free shortcode"
    )

    # Remote Shortening API (client variant)
    SHORTEN_API_URL: str = Field(
        default="http://localhost:5000/api/shorten",
        description="Endpoint used by the remote shortening client"
    )
    REQUEST_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        description="Timeout for outbound HTTP calls (API client and log collector)"
    )

    # Log Collector Configuration
    LOG_COLLECTOR_URL: str = Field(
        default="http://20.244.56.144/evaluation-service/logs",
        description="Endpoint receiving structured log events"
    )
    LOG_COLLECTOR_ENABLED: bool = Field(
        default=False,
        description="Ship log events to LOG_COLLECTOR_URL"
    )
    LOG_STACK: str = Field(
        default="backend",
        description="Stack label attached to shipped log events (frontend or backend)"
    )


settings = Settings()
