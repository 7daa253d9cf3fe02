"""
Application Configuration Module

Centralizes all configuration using environment variables with Pydantic Settings.
Supports three modes:
    - DEVELOPMENT: Logging alert notifier, optional demo stock seeding
    - STAGING / PRODUCTION: Twilio SMS alert notifier

The ENV_MODE variable controls which collaborator services are instantiated
by the service factories.

Usage:
    from fulfillment.core.config import get_settings

    settings = get_settings()
    if settings.seed_demo_inventory:
        # Populate the stock ledger with random demo quantities
"""

import logging
import sys
from enum import Enum
from typing import Optional
from functools import lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvironmentMode(str, Enum):
    """
    Application environment modes.

    Attributes:
        DEVELOPMENT: Local testing with mock collaborators
        PRODUCTION: Live environment with real notification delivery
        STAGING: Pre-production testing with real integrations
    """
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    STAGING = "staging"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables or .env file.
    Sensitive values (API keys) should NEVER be committed to version control.

    Attributes:
        env_mode: Current environment (development/production/staging)
        debug: Enable verbose logging and error details

        # Inventory
        default_low_stock_threshold: Threshold for products without one
        unseen_product_quantity: Quantity reported for uninitialized products
        seed_demo_inventory: Seed every catalog product with random stock

        # Alerts
        alert_notifications_enabled: Dispatch raised alerts through Celery
        redis_url: Redis connection string for Celery
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
        default="Marketplace Fulfillment Service",
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
        default=8001,
        description="API server port"
    )

    # ==========================================================================
    # INVENTORY
    # ==========================================================================

    default_low_stock_threshold: int = Field(
        default=5,
        description="Low-stock threshold applied to newly tracked products"
    )
    unseen_product_quantity: int = Field(
        default=0,
        description="Quantity reported for products never initialized"
    )
    seed_demo_inventory: bool = Field(
        default=False,
        description="Seed every catalog product with a random demo quantity"
    )
    demo_seed: Optional[int] = Field(
        default=None,
        description="Random seed for demo inventory (reproducible demos)"
    )
    demo_stock_min: int = Field(
        default=3,
        description="Lowest random demo quantity"
    )
    demo_stock_max: int = Field(
        default=28,
        description="Highest random demo quantity"
    )

    # ==========================================================================
    # ORDERS
    # ==========================================================================

    recent_orders_hours: int = Field(
        default=24,
        description="Window used by the recent orders query"
    )

    # ==========================================================================
    # REDIS / CELERY
    # ==========================================================================

    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL"
    )
    alert_notifications_enabled: bool = Field(
        default=False,
        description="Queue raised stock alerts for background delivery"
    )

    # ==========================================================================
    # TWILIO (ALERT SMS)
    # ==========================================================================

    twilio_account_sid: Optional[str] = Field(
        default=None,
        description="Twilio Account SID"
    )
    twilio_auth_token: Optional[str] = Field(
        default=None,
        description="Twilio Auth Token"
    )
    twilio_phone_number: Optional[str] = Field(
        default=None,
        description="Twilio phone number for sending SMS"
    )
    alert_sms_recipient: Optional[str] = Field(
        default=None,
        description="Kitchen/manager phone number that receives stock alerts"
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

    @field_validator("default_low_stock_threshold", "unseen_product_quantity")
    @classmethod
    def validate_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Stock quantities and thresholds cannot be negative")
        return v

    @model_validator(mode="after")
    def validate_demo_range(self) -> "Settings":
        if not 0 <= self.demo_stock_min <= self.demo_stock_max:
            raise ValueError("demo_stock_min must be between 0 and demo_stock_max")
        return self

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
        """Check if real external services should be used."""
        return self.env_mode in (EnvironmentMode.PRODUCTION, EnvironmentMode.STAGING)

    # ==========================================================================
    # VALIDATION METHODS
    # ==========================================================================

    def validate_production_config(self) -> list[str]:
        """
        Validate that all required production settings are configured.

        Returns:
            List of missing configuration keys (empty if all present)
        """
        missing = []

        if self.use_real_services and self.alert_notifications_enabled:
            if not self.twilio_account_sid:
                missing.append("TWILIO_ACCOUNT_SID")
            if not self.twilio_auth_token:
                missing.append("TWILIO_AUTH_TOKEN")
            if not self.alert_sms_recipient:
                missing.append("ALERT_SMS_RECIPIENT")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Settings are loaded once per process; call ``get_settings.cache_clear()``
    after changing the environment in tests.

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
    logging.getLogger("twilio.http_client").setLevel(logging.WARNING)

    return logging.getLogger("fulfillment")
