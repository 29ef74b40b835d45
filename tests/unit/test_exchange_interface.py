"""
Unit Tests for the Exchange Interface

These tests verify that:
- ExchangeInterface is properly defined as an abstract class
- Dummy implementations can inherit and implement the interface
- Capabilities and handle_errors behave the same for every adapter

Run with:
    pytest tests/unit/test_exchange_interface.py -v
"""

import pytest
from typing import Any, Iterable, List, Optional

from core.errors import AdapterError, BadRequest
from core.exchange_interface import ExchangeInterface
from core.schemas import OHLCV, Market, Order, OrderBook, SignedRequest, Ticker, Trade
from exchanges.alpaca import AlpacaExchange


# ============================================
# Dummy Exchange for Testing
# ============================================

class DummyExchange(ExchangeInterface):
    """
    Minimal implementation of ExchangeInterface for testing purposes.

    Every method returns the smallest valid result, so the interface contract
    can be tested without any venue logic.
    """

    name = "dummy"
    capabilities = {
        "fetch_markets": True,
        "fetch_ticker": True,
        "create_order": False,  # Intentionally not supported
    }

    def build_request(self, path: str, tier: str, method: str = "GET", params=None) -> SignedRequest:
        return SignedRequest(url=f"https://dummy.test/{path}", method=method)

    def list_markets(self, raw_assets: Iterable[Any]) -> List[Market]:
        return []

    def parse_ticker(self, raw: Any, market: Market) -> Ticker:
        return Ticker(symbol=market.symbol)

    def parse_trade(self, raw: Any, market: Optional[Market] = None) -> Trade:
        return Trade()

    def parse_order_book(self, raw: Any, symbol: str, timestamp: Optional[int] = None) -> OrderBook:
        return OrderBook(symbol=symbol, timestamp=timestamp)

    def parse_ohlcv(self, raw: Any) -> OHLCV:
        return OHLCV()

    def parse_order(self, raw: Any, market: Optional[Market] = None) -> Order:
        return Order(symbol=market.symbol if market else "")

    def classify_error(self, payload: Any) -> Optional[AdapterError]:
        if isinstance(payload, dict) and "error" in payload:
            return BadRequest(payload["error"], exchange=self.name)
        return None


# ============================================
# Tests for ExchangeInterface
# ============================================

class TestExchangeInterface:
    """Test the abstract ExchangeInterface contract"""

    def test_cannot_instantiate_abstract_interface(self):
        """Verify ExchangeInterface cannot be instantiated directly"""
        with pytest.raises(TypeError):
            ExchangeInterface()

    def test_dummy_exchange_has_required_attributes(self):
        """Verify dummy exchange has name and capabilities"""
        exchange = DummyExchange()
        assert exchange.name == "dummy"
        assert isinstance(exchange.capabilities, dict)

    def test_partial_implementation_is_rejected(self):
        """Verify a subclass missing abstract methods cannot be created"""
        class Partial(ExchangeInterface):
            name = "partial"

            def build_request(self, path, tier, method="GET", params=None):
                return SignedRequest(url=path, method=method)

        with pytest.raises(TypeError):
            Partial()

    def test_supports_method_returns_correct_values(self):
        """Verify supports() checks capabilities correctly"""
        exchange = DummyExchange()
        assert exchange.supports("fetch_ticker") is True
        assert exchange.supports("create_order") is False
        assert exchange.supports("nonexistent_feature") is False

    def test_handle_errors_raises_classified_error(self):
        """Verify handle_errors raises whatever classify_error returns"""
        exchange = DummyExchange()
        with pytest.raises(BadRequest):
            exchange.handle_errors({"error": "bad"})

    def test_handle_errors_passes_success(self):
        """Verify handle_errors is silent for non-error payloads"""
        DummyExchange().handle_errors({"result": "ok"})

    def test_repr(self):
        """Verify the adapter repr names the venue"""
        assert repr(DummyExchange()) == "<DummyExchange(name='dummy')>"


# ============================================
# Tests for Alpaca against the contract
# ============================================

class TestAlpacaImplementsInterface:
    """Test that the Alpaca adapter satisfies the contract"""

    def test_alpaca_implements_exchange_interface(self, exchange):
        """Verify AlpacaExchange is a concrete ExchangeInterface"""
        assert isinstance(exchange, ExchangeInterface)
        assert issubclass(AlpacaExchange, ExchangeInterface)

    def test_alpaca_overrides_every_abstract_method(self):
        """Verify no abstract method is left unimplemented"""
        assert not getattr(AlpacaExchange, "__abstractmethods__", set())

    def test_capability_keys_cover_interface_defaults(self):
        """Verify Alpaca declares every capability the interface lists"""
        assert set(ExchangeInterface.capabilities) <= set(AlpacaExchange.capabilities)
