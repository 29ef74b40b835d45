"""
Number Utilities

Explicit optional-number access for venue payloads. Values arrive as JSON
strings, ints or floats; the canonical schemas want ``Decimal``.

Rules:
    - Missing (None) or empty values map to None ("unknown"), never to zero
    - Strings are parsed directly, so "0.00956419" stays exact
    - Floats go through ``repr`` (shortest round-trip form), not their
      binary expansion
    - Booleans and unparseable values map to None
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional


def to_decimal(value: Any) -> Optional[Decimal]:
    """
    Convert a JSON scalar to Decimal.

    Examples:
        >>> to_decimal("60011.36")
        Decimal('60011.36')
        >>> to_decimal(0.36)
        Decimal('0.36')
        >>> to_decimal(None) is None
        True
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        value = repr(value)
    if not isinstance(value, str):
        return None

    value = value.strip()
    if not value:
        return None
    try:
        result = Decimal(value)
    except InvalidOperation:
        return None
    return result if result.is_finite() else None


def to_string(value: Any) -> Optional[str]:
    """
    Convert a JSON scalar to str, keeping None as None.

    Examples:
        >>> to_string(355681339)
        '355681339'
        >>> to_string("") is None
        True
    """
    if value is None or isinstance(value, (dict, list)):
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    result = str(value)
    return result if result else None


def decimal_to_string(value: Decimal) -> str:
    """
    Render a Decimal in plain (non-exponent) notation.

    Examples:
        >>> decimal_to_string(Decimal("6E+4"))
        '60000'
        >>> decimal_to_string(Decimal("0.010"))
        '0.01'
    """
    text = format(value.normalize(), "f")
    return "0" if text in ("-0", "") else text
