"""
Exchange Interface: Abstract Contract for All Venue Adapters

This module defines the abstract base class that every venue adapter must
implement. An adapter is a stateless transcoder: it turns canonical requests
into concrete HTTP requests and venue payloads into canonical schemas. It
never performs I/O itself; the transport that executes the requests lives
outside this package.

Design Philosophy:
    "Program to an interface, not an implementation"

    Callers work with ExchangeInterface, not a specific venue. Each venue
    plugs its own configuration into the same contract.

Example:
    exchange = AlpacaExchange()
    request = exchange.fetch_ticker_request(market)
    response = transport.execute(request)          # external
    exchange.handle_errors(response)
    ticker = exchange.parse_ticker(response["xbbo"], market)

Capabilities System:
    Each adapter declares which operations it supports via ``capabilities``
    so callers can degrade gracefully.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Mapping, Optional

from core.errors import AdapterError
from core.schemas import OHLCV, Market, Order, OrderBook, SignedRequest, Ticker, Trade


class ExchangeInterface(ABC):
    """
    Abstract Base Class for Venue Adapters

    Class Attributes:
        name: Unique identifier for the venue (lowercase, e.g., "alpaca")
        capabilities: Dictionary indicating which operations this venue supports

    Abstract Methods (MUST be implemented by all adapters):
        - build_request: Sign a logical endpoint into a concrete request
        - list_markets: Build the market catalog from the venue asset list
        - parse_ticker / parse_trade / parse_order_book / parse_ohlcv / parse_order
        - classify_error: Map a venue error payload to a typed error

    Provided Methods:
        - handle_errors: Raise the classified error, if any
        - supports: Capability lookup

    Notes:
        - Implementations must be safe to call concurrently: no mutable state
          after construction
        - Normalizers never raise for missing optional fields
    """

    # ============================================
    # Class Attributes (must be set by subclasses)
    # ============================================

    name: str
    """Unique venue identifier (lowercase). Example: "alpaca" """

    capabilities: Dict[str, bool] = {
        "fetch_markets": False,
        "fetch_ticker": False,
        "fetch_trades": False,
        "fetch_order_book": False,
        "fetch_ohlcv": False,
        "create_order": False,
        "cancel_order": False,
        "cancel_all_orders": False,
        "fetch_order": False,
        "fetch_open_orders": False,
    }
    """Dictionary indicating which operations this venue supports"""

    # ============================================
    # Request Building
    # ============================================

    @abstractmethod
    def build_request(
        self,
        path: str,
        tier: str,
        method: str = "GET",
        params: Optional[Mapping[str, Any]] = None,
    ) -> SignedRequest:
        """
        Build the concrete HTTP request for a logical endpoint.

        Args:
            path: Endpoint template (e.g., "orders/{order_id}")
            tier: API tier name (e.g., "public", "private")
            method: HTTP verb
            params: Path and request parameters

        Returns:
            SignedRequest: url, method, headers and body ready for a transport

        Notes:
            - Must be deterministic: same inputs, same request
            - Idempotency tokens (client order ids) are generated by callers
        """
        ...

    # ============================================
    # Response Normalization
    # ============================================

    @abstractmethod
    def list_markets(self, raw_assets: Iterable[Any]) -> List[Market]:
        """
        Build the canonical market catalog.

        Malformed records are skipped; the rest of the batch is returned.
        """
        ...

    @abstractmethod
    def parse_ticker(self, raw: Any, market: Market) -> Ticker:
        """Normalize a ticker/quote payload."""
        ...

    @abstractmethod
    def parse_trade(self, raw: Any, market: Optional[Market] = None) -> Trade:
        """Normalize a public trade payload."""
        ...

    @abstractmethod
    def parse_order_book(self, raw: Any, symbol: str, timestamp: Optional[int] = None) -> OrderBook:
        """Normalize an order book or best bid/offer payload."""
        ...

    @abstractmethod
    def parse_ohlcv(self, raw: Any) -> OHLCV:
        """Normalize a candlestick payload."""
        ...

    @abstractmethod
    def parse_order(self, raw: Any, market: Optional[Market] = None) -> Order:
        """Normalize an order payload."""
        ...

    # ============================================
    # Error Handling
    # ============================================

    @abstractmethod
    def classify_error(self, payload: Any) -> Optional[AdapterError]:
        """
        Classify a decoded response body.

        Returns:
            A typed error instance, or None when the payload is not an error
        """
        ...

    def handle_errors(self, payload: Any) -> None:
        """
        Raise the classified error for a payload, if any.

        Raises:
            AdapterError: Typed subclass chosen by classify_error
        """
        error = self.classify_error(payload)
        if error is not None:
            raise error

    # ============================================
    # Helper Methods
    # ============================================

    def supports(self, feature: str) -> bool:
        """
        Check if this venue supports a specific operation.

        Example:
            >>> exchange.supports("fetch_ohlcv")
            True
        """
        return self.capabilities.get(feature, False)

    def __repr__(self) -> str:
        """String representation of the adapter."""
        return f"<{self.__class__.__name__}(name='{self.name}')>"
