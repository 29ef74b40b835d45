"""
Core Utilities Package

This package contains utility functions and helpers used throughout the adapter.

Modules:
    - time: ISO-8601 / epoch timestamp conversion utilities
    - numbers: Optional Decimal/str access for JSON payload values
"""

from core.utils.numbers import decimal_to_string, to_decimal, to_string
from core.utils.time import iso8601, parse8601

__all__ = [
    "decimal_to_string",
    "iso8601",
    "parse8601",
    "to_decimal",
    "to_string",
]
