"""
Error Taxonomy

Typed errors shared by every venue adapter. Callers branch on the exception
class (or on its ``kind``), never on the venue's message text.

Hierarchy:
    AdapterError                 generic adapter failure (kind=GENERIC)
    ├── ExchangeError            venue reported an error we could not classify
    │   ├── InvalidOrder
    │   ├── InsufficientFunds
    │   ├── OrderNotFound
    │   ├── BadRequest
    │   │   └── BadSymbol
    │   ├── PermissionDenied
    │   │   └── AuthenticationError
    │   ├── RateLimitExceeded
    │   └── NotSupported
    └── MissingFieldError        upstream payload broke its contract

Usage:
    from core.errors import OrderNotFound

    try:
        exchange.handle_errors(payload)
    except OrderNotFound:
        ...
"""

from enum import Enum, unique
from typing import Any, Dict, Optional


@unique
class ErrorKind(str, Enum):
    """Canonical error categories."""

    INVALID_ORDER = "invalid_order"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    ORDER_NOT_FOUND = "order_not_found"
    BAD_REQUEST = "bad_request"
    PERMISSION_DENIED = "permission_denied"
    RATE_LIMITED = "rate_limited"
    BAD_SYMBOL = "bad_symbol"
    NOT_SUPPORTED = "not_supported"
    GENERIC = "generic"

    def __str__(self) -> str:
        return self.value


class AdapterError(Exception):
    """Base exception for all adapter errors."""

    kind: ErrorKind = ErrorKind.GENERIC

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# Venue Errors
# =============================================================================


class ExchangeError(AdapterError):
    """
    Raised when the venue reports an error.

    Attributes:
        exchange: Venue identifier (e.g., "alpaca")
        code: Venue numeric error code, when the payload carries one
        payload: The decoded error response, kept verbatim
    """

    def __init__(
        self,
        message: str,
        exchange: Optional[str] = None,
        code: Optional[int] = None,
        payload: Any = None,
    ):
        details: Dict[str, Any] = {}
        if exchange:
            details["exchange"] = exchange
        if code is not None:
            details["code"] = code
        super().__init__(message, details)
        self.exchange = exchange
        self.code = code
        self.payload = payload


class InvalidOrder(ExchangeError):
    kind = ErrorKind.INVALID_ORDER


class InsufficientFunds(ExchangeError):
    kind = ErrorKind.INSUFFICIENT_FUNDS


class OrderNotFound(ExchangeError):
    kind = ErrorKind.ORDER_NOT_FOUND


class BadRequest(ExchangeError):
    kind = ErrorKind.BAD_REQUEST


class BadSymbol(BadRequest):
    kind = ErrorKind.BAD_SYMBOL


class PermissionDenied(ExchangeError):
    kind = ErrorKind.PERMISSION_DENIED


class AuthenticationError(PermissionDenied):
    """Raised before signing when an authenticated tier has no credentials."""


class RateLimitExceeded(ExchangeError):
    kind = ErrorKind.RATE_LIMITED


class NotSupported(ExchangeError):
    kind = ErrorKind.NOT_SUPPORTED


# =============================================================================
# Payload Contract Errors
# =============================================================================


class MissingFieldError(AdapterError):
    """Raised when a structurally required field is absent from a payload."""

    def __init__(self, field: str, data: Optional[Dict[str, Any]] = None):
        message = f"Required field '{field}' is missing"
        super().__init__(message, {"field": field})
        self.field = field
        self.available_fields = list(data.keys()) if isinstance(data, dict) else []
