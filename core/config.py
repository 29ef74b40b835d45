"""
Configuration Management Module

This module handles loading, validating, and providing access to application configuration
from environment variables (.env file).

Uses Pydantic Settings for automatic validation and type conversion.

Key Features:
- Loads configuration from .env file
- Provides type-safe access to venue credentials and defaults
- Handles optional settings with sensible defaults

Usage:
    from core.config import settings

    print(settings.alpaca_hostname)
    print(settings.alpaca_sandbox)
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


VALID_TIME_IN_FORCE = ("day", "gtc", "ioc", "fok", "opg", "cls")
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """
    Application Settings

    Values are automatically loaded from environment variables or .env file.

    Attributes:
        alpaca_api_key: API key id sent as APCA-API-KEY-ID
        alpaca_secret_key: API secret sent as APCA-API-SECRET-KEY
        alpaca_hostname: Root hostname substituted into tier URLs
        alpaca_sandbox: Use the paper-trading URLs instead of live ones
        alpaca_default_exchange: Source exchange for quote endpoints
        alpaca_default_time_in_force: Time in force when an order omits it
        alpaca_client_order_id_prefix: Prefix of generated client order ids
        environment: Current environment (development, production)
        log_level: Logging level
    """

    # ============================================
    # Alpaca API Configuration
    # ============================================

    alpaca_api_key: str = Field(
        default="",
        description="Alpaca API key id (required for private and market data tiers)"
    )

    alpaca_secret_key: str = Field(
        default="",
        repr=False,
        description="Alpaca API secret key"
    )

    alpaca_hostname: str = Field(
        default="alpaca.markets",
        description="Hostname substituted into {hostname} URL placeholders"
    )

    alpaca_sandbox: bool = Field(
        default=False,
        description="Route requests to the paper-trading environment"
    )

    # ============================================
    # Trading Defaults
    # ============================================

    alpaca_default_exchange: str = Field(
        default="CBSE",
        description="Source exchange for latest-quote endpoints (avoids crossed cross-venue quotes)"
    )

    alpaca_default_time_in_force: str = Field(
        default="day",
        description="Default order time in force (day, gtc, ioc, fok)"
    )

    alpaca_client_order_id_prefix: str = Field(
        default="tb_",
        description="Prefix for generated client order ids"
    )

    # ============================================
    # Application Configuration
    # ============================================

    environment: str = Field(
        default="development",
        description="Application environment (development, production)"
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False
    )

    @property
    def has_credentials(self) -> bool:
        """True when both key id and secret are configured"""
        return bool(self.alpaca_api_key and self.alpaca_secret_key)


# ============================================
# Global Settings Instance
# ============================================

settings = Settings()


# ============================================
# Configuration Validation
# ============================================

def validate_configuration(config: Settings = None) -> None:
    """
    Validate critical configuration settings.

    Args:
        config: Settings to check (defaults to the global instance)

    Raises:
        ValueError: If configuration is invalid
    """
    # logging.py imports config.py
    from core.logging import logger

    config = config or settings

    if not config.alpaca_hostname or "/" in config.alpaca_hostname:
        raise ValueError(
            f"Invalid ALPACA_HOSTNAME: '{config.alpaca_hostname}'. "
            f"Expected a bare hostname such as 'alpaca.markets'"
        )

    if config.alpaca_default_time_in_force.lower() not in VALID_TIME_IN_FORCE:
        raise ValueError(
            f"Invalid ALPACA_DEFAULT_TIME_IN_FORCE: '{config.alpaca_default_time_in_force}'. "
            f"Must be one of: {', '.join(VALID_TIME_IN_FORCE)}"
        )

    if config.log_level.upper() not in VALID_LOG_LEVELS:
        raise ValueError(
            f"Invalid LOG_LEVEL: '{config.log_level}'. "
            f"Must be one of: {', '.join(VALID_LOG_LEVELS)}"
        )

    logger.info("Configuration validated successfully")
    logger.info(f"Alpaca host: {config.alpaca_hostname} (sandbox={config.alpaca_sandbox})")
    logger.info(f"Credentials configured: {config.has_credentials}")
    logger.info(f"Log level: {config.log_level.upper()}")
