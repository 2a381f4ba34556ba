"""
Application Configuration Module

Centralizes all configuration using environment variables with Pydantic Settings.
Supports three modes:
    - DEVELOPMENT: Uses the mock pizza factory (no network calls)
    - STAGING / PRODUCTION: Calls the real pizza factory over HTTP

The ENV_MODE variable controls which factory implementation is instantiated,
enabling seamless switching between local testing and deployment.

Usage:
    from pizza_service.core.config import get_settings

    settings = get_settings()
    if settings.is_development:
        # Use the mock factory
    else:
        # Call the real factory
"""

import logging
import sys
from enum import Enum
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_JWT_SECRET = "change-me-jwt-secret"
DEFAULT_FACTORY_API_KEY = "change-me-factory-key"


class EnvironmentMode(str, Enum):
    """
    Application environment modes.

    Attributes:
        DEVELOPMENT: Local testing with the mock factory
        PRODUCTION: Live environment with the real factory
        STAGING: Pre-production testing with the real factory
    """
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    STAGING = "staging"


class DenylistBackend(str, Enum):
    """Where revoked session tokens are kept until they expire."""
    DATABASE = "database"
    REDIS = "redis"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables or .env file.
    Secrets (JWT_SECRET, FACTORY_API_KEY) must be replaced outside development.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # ENVIRONMENT
    # ==========================================================================

    env_mode: EnvironmentMode = Field(
        default=EnvironmentMode.DEVELOPMENT,
        description="Application environment mode"
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode with verbose logging"
    )

    # ==========================================================================
    # APPLICATION
    # ==========================================================================

    app_name: str = Field(
        default="JWT Pizza Service",
        description="Application display name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API server host"
    )
    api_port: int = Field(
        default=3000,
        description="API server port"
    )

    # ==========================================================================
    # DATABASE
    # ==========================================================================

    database_url: str = Field(
        default="sqlite+aiosqlite:///./pizza.db",
        description="SQLAlchemy async connection URL (postgresql+psycopg://... in production)"
    )
    database_echo: bool = Field(
        default=False,
        description="Log every SQL statement"
    )

    # ==========================================================================
    # SESSION TOKENS
    # ==========================================================================

    jwt_secret: str = Field(
        default=DEFAULT_JWT_SECRET,
        description="HMAC secret used to sign session tokens"
    )
    jwt_algorithm: str = Field(
        default="HS256",
        description="Session token signing algorithm"
    )
    jwt_ttl_minutes: int = Field(
        default=24 * 60,
        gt=0,
        description="Session token lifetime; revoked tokens are kept this long"
    )
    token_denylist_backend: DenylistBackend = Field(
        default=DenylistBackend.DATABASE,
        description="Storage for revoked tokens (database or redis)"
    )

    # ==========================================================================
    # REDIS
    # ==========================================================================

    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL for the token denylist"
    )

    # ==========================================================================
    # PIZZA FACTORY
    # ==========================================================================

    factory_url: str = Field(
        default="https://pizza-factory.cs329.click",
        description="Base URL of the pizza factory fulfillment service"
    )
    factory_api_key: str = Field(
        default=DEFAULT_FACTORY_API_KEY,
        description="API key sent to the factory; also signs mock pizza tokens"
    )
    factory_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Upper bound on a single factory call"
    )
    mock_factory_failure_rate: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="Probability that the mock factory rejects an order"
    )

    # ==========================================================================
    # BUSINESS CONFIGURATION
    # ==========================================================================

    default_admin_name: str = Field(
        default="常用名字",
        description="Name of the admin seeded on an empty database"
    )
    default_admin_email: str = Field(
        default="a@jwt.com",
        description="Email of the admin seeded on an empty database"
    )
    default_admin_password: Optional[str] = Field(
        default="admin",
        description="Password of the seeded admin; unset to skip seeding"
    )
    orders_per_page: int = Field(
        default=10,
        gt=0,
        description="Page size of a diner's order history"
    )

    # ==========================================================================
    # VALIDATORS
    # ==========================================================================

    @field_validator("env_mode", mode="before")
    @classmethod
    def validate_env_mode(cls, v: str) -> EnvironmentMode:
        """Convert string to EnvironmentMode enum."""
        if isinstance(v, EnvironmentMode):
            return v
        try:
            return EnvironmentMode(v.lower())
        except ValueError:
            valid = [e.value for e in EnvironmentMode]
            raise ValueError(f"Invalid env_mode. Must be one of: {valid}")

    # ==========================================================================
    # COMPUTED PROPERTIES
    # ==========================================================================

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.env_mode == EnvironmentMode.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.env_mode == EnvironmentMode.PRODUCTION

    @property
    def use_real_services(self) -> bool:
        """Check if the real factory should be called."""
        return self.env_mode in (EnvironmentMode.PRODUCTION, EnvironmentMode.STAGING)

    @property
    def database_dialect(self) -> str:
        """Dialect part of the database URL, e.g. 'sqlite' or 'postgresql'."""
        return self.database_url.split(":", 1)[0].split("+", 1)[0]

    # ==========================================================================
    # VALIDATION METHODS
    # ==========================================================================

    def validate_production_config(self) -> list[str]:
        """
        Validate that all required production settings are configured.

        Returns:
            List of setting names still at their insecure defaults
        """
        missing = []

        if self.use_real_services:
            if self.jwt_secret == DEFAULT_JWT_SECRET:
                missing.append("JWT_SECRET")
            if self.factory_api_key == DEFAULT_FACTORY_API_KEY:
                missing.append("FACTORY_API_KEY")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Settings are loaded only once and shared across the application
    lifecycle. Tests call ``get_settings.cache_clear()`` after changing
    the environment.

    Returns:
        Settings: Configured application settings
    """
    return Settings()


# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """
    Configure application-wide logging.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)

    Returns:
        Configured package logger
    """
    settings = get_settings()

    if settings.debug:
        level = logging.DEBUG

    log_format = "%(asctime)s │ %(levelname)-8s │ %(name)-25s │ %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    logging.basicConfig(
        level=level,
        format=log_format,
        datefmt=date_format,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)

    return logging.getLogger("pizza_service")
