"""
Alpaca Error Classifier

Maps Alpaca error payloads onto the typed error taxonomy in ``core.errors``.

Error Response Format:
    {
      "code": 40410000,
      "message": "order is not found"
    }

Classification (linear):
    1. No ``message`` field: not an error payload, return None and leave
       non-2xx handling to the transport
    2. Exact table: message equals an entry (first match wins)
    3. Broad table: an entry is a substring of the message (first entry in
       declaration order wins)
    4. Otherwise a generic ExchangeError carrying the message

Both tables are ordered tuples, not dicts, so their precedence is explicit.
"""

from typing import Any, Optional, Tuple, Type

from core.errors import (
    BadRequest,
    BadSymbol,
    ExchangeError,
    InsufficientFunds,
    InvalidOrder,
    OrderNotFound,
    PermissionDenied,
    RateLimitExceeded,
)
from core.logging import log_venue_error

ErrorTable = Tuple[Tuple[str, Type[ExchangeError]], ...]


EXACT_ERRORS: ErrorTable = (
    ("oco orders must be limit orders", InvalidOrder),  # {"code":40010001,...}
    ("request body format is invalid", InvalidOrder),  # {"code":40010000,...}
    ("invalid order type for crypto order", InvalidOrder),  # {"code":40010001,...}
    ("buying power or shares is not sufficient.", InsufficientFunds),
    ("order is not found", OrderNotFound),
    ("failed to cancel order", InvalidOrder),
    ("the order is not cancelable", InvalidOrder),
    ("position is not found", BadRequest),
    ("Failed to liquidate", InvalidOrder),
    ("position does not exist", BadRequest),
)

BROAD_ERRORS: ErrorTable = (
    ("input parameters are not recognized", BadRequest),
    ("invalid query parameters", BadRequest),
    ("unauthorized", PermissionDenied),
    ("too many requests", RateLimitExceeded),
    ("not found", BadSymbol),
    ("request is not authorized", PermissionDenied),
    ("forbidden", PermissionDenied),
)


def match_exact(message: str, table: ErrorTable = EXACT_ERRORS) -> Optional[Type[ExchangeError]]:
    """Error class whose entry equals the message, or None."""
    for text, error_class in table:
        if message == text:
            return error_class
    return None


def match_broad(message: str, table: ErrorTable = BROAD_ERRORS) -> Optional[Type[ExchangeError]]:
    """Error class of the first entry contained in the message, or None."""
    for text, error_class in table:
        if text in message:
            return error_class
    return None


def classify_error(payload: Any, exchange: str = "alpaca") -> Optional[ExchangeError]:
    """
    Classify a decoded response body.

    Args:
        payload: JSON-decoded response body
        exchange: Venue id used in error messages

    Returns:
        A typed ExchangeError instance (not raised), or None when the payload
        carries no message

    Examples:
        >>> type(classify_error({"message": "order is not found"}))
        <class 'core.errors.OrderNotFound'>
        >>> type(classify_error({"message": "too many requests today"}))
        <class 'core.errors.RateLimitExceeded'>
        >>> classify_error({"id": "61e6"}) is None
        True
    """
    if not isinstance(payload, dict):
        return None
    message = payload.get("message")
    if message is None:
        return None

    message = str(message)
    error_class = match_exact(message) or match_broad(message) or ExchangeError
    code = payload.get("code")

    error = error_class(
        f"{exchange} {message}",
        exchange=exchange,
        code=code if isinstance(code, int) and not isinstance(code, bool) else None,
        payload=payload,
    )
    log_venue_error(exchange, error.kind.value, message)
    return error


def raise_for_error(payload: Any, exchange: str = "alpaca") -> None:
    """
    Raise the classified error for a payload, if any.

    Raises:
        ExchangeError: Typed subclass matching the venue message
    """
    error = classify_error(payload, exchange)
    if error is not None:
        raise error
