"""
Unified Logging Configuration

This module sets up a centralized logging system for the adapter.
All modules should import and use the logger from this module instead of
using print() statements.

Usage:
    from core.logging import logger, get_logger

    logger.info("General informational messages")
    log = get_logger(__name__)
    log.debug("Detailed debugging information")

Configuration:
    Log level is controlled by the LOG_LEVEL setting in .env file.
    If not set, defaults to INFO.

Notes:
    Credentials and signed headers are never logged.
"""

import logging
import sys
from typing import Optional


APP_LOGGER_NAME = "tradebridge"


def setup_logging(
    log_level: str = "INFO",
    log_format: Optional[str] = None,
    include_timestamp: bool = True,
    include_module: bool = True
) -> logging.Logger:
    """
    Configure and return the application logger.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Custom log format string (uses default if None)
        include_timestamp: Include timestamp in log messages
        include_module: Include module name in log messages

    Returns:
        logging.Logger: Configured logger instance

    Example:
        >>> logger = setup_logging(log_level="DEBUG")
        >>> logger.info("Adapter ready")
        2024-01-01 12:00:00 [INFO] tradebridge: Adapter ready
    """
    if log_format is None:
        format_parts = []

        if include_timestamp:
            format_parts.append("%(asctime)s")

        format_parts.append("[%(levelname)s]")

        if include_module:
            format_parts.append("%(name)s:")

        format_parts.append("%(message)s")

        log_format = " ".join(format_parts)

    level = getattr(logging, log_level.upper(), logging.INFO)

    logger = logging.getLogger(APP_LOGGER_NAME)
    logger.setLevel(level)

    # Library-style setup: configure our own logger only, leave the root alone
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(log_format, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(handler)

    return logger


# ============================================
# Initialize Logger with Settings
# ============================================

try:
    from core.config import settings
    log_level = settings.log_level
except ImportError:
    log_level = "INFO"

logger = setup_logging(log_level=log_level)


# ============================================
# Convenience Functions
# ============================================

def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a specific module or component.

    Args:
        name: Name for the logger (typically __name__)

    Returns:
        logging.Logger: Child of the application logger

    Example:
        >>> log = get_logger("exchanges.alpaca.signer")
        >>> log.name
        'tradebridge.exchanges.alpaca.signer'
    """
    return logging.getLogger(f"{APP_LOGGER_NAME}.{name}")


def set_log_level(level: str) -> None:
    """
    Change the log level at runtime.

    Args:
        level: New log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))


# ============================================
# Log Helper Functions
# ============================================

def log_api_request(exchange: str, method: str, endpoint: str, params: dict = None) -> None:
    """
    Log a built API request with consistent formatting.

    Args:
        exchange: Exchange name (e.g., "alpaca")
        method: HTTP verb
        endpoint: Resolved endpoint path
        params: Request parameters (optional, never includes headers)

    Example:
        >>> log_api_request("alpaca", "GET", "/v2/orders", {"status": "open"})
        [DEBUG] API Request: alpaca GET /v2/orders | Params: {'status': 'open'}
    """
    if params:
        logger.debug(f"API Request: {exchange} {method} {endpoint} | Params: {params}")
    else:
        logger.debug(f"API Request: {exchange} {method} {endpoint}")


def log_venue_error(exchange: str, kind: str, message: str) -> None:
    """
    Log a classified venue error.

    Example:
        >>> log_venue_error("alpaca", "order_not_found", "order is not found")
        [DEBUG] Venue error: alpaca order_not_found | order is not found
    """
    logger.debug(f"Venue error: {exchange} {kind} | {message}")
