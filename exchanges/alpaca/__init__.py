"""
Alpaca Exchange Adapter

This module implements the ExchangeInterface for Alpaca's crypto trading and
crypto market data APIs.

API Documentation:
    https://alpaca.markets/docs/

Tiers:
    - public / private: https://api.alpaca.markets/v2 (paper: https://paper-api.alpaca.markets/v2)
    - market_data:      https://data.alpaca.markets/v1beta1

Endpoints Used:
    private:
        - GET    /v2/assets                      - Market catalog
        - POST   /v2/orders                      - Create order
        - GET    /v2/orders                      - List orders
        - DELETE /v2/orders                      - Cancel all orders
        - GET    /v2/orders/{order_id}           - Fetch order
        - DELETE /v2/orders/{order_id}           - Cancel order
    market_data:
        - GET /v1beta1/crypto/{symbol}/xbbo/latest - Best bid/offer (ticker, L1 book)
        - GET /v1beta1/crypto/latest/orderbooks    - Depth book
        - GET /v1beta1/crypto/{symbol}/trades      - Trade prints
        - GET /v1beta1/crypto/{symbol}/bars        - Candlesticks

The adapter only builds requests and normalizes responses; executing the
requests, caching markets and rate limiting belong to the caller.

Structure:
    exchanges/alpaca/
    ├── __init__.py     # This file (AlpacaExchange class)
    ├── config.py       # Frozen venue configuration and API tiers
    ├── precision.py    # Per-symbol precision and minimum size table
    ├── markets.py      # Market catalog builder
    ├── signer.py       # Request signer
    ├── parsers.py      # Response normalizers
    └── errors.py       # Error classifier
"""

import uuid
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional

from core.config import Settings
from core.errors import BadRequest, ExchangeError, InvalidOrder, NotSupported
from core.exchange_interface import ExchangeInterface
from core.logging import logger
from core.schemas import OHLCV, Market, Order, OrderBook, SignedRequest, Ticker, Trade
from core.utils.time import iso8601
from . import parsers
from .config import AlpacaConfig, ApiTier
from .errors import classify_error
from .markets import MarketIndex, parse_markets
from .precision import amount_to_precision, price_to_precision
from .signer import sign


TIMEFRAMES: Mapping[str, str] = MappingProxyType({
    "1m": "1Min",
    "5m": "5Min",
    "15m": "15Min",
    "30m": "30Min",
    "1h": "1Hour",
    "4h": "4Hour",
    "1d": "1Day",
    "1w": "1Week",
    "1M": "1Month",
})

ORDER_SIDES = ("buy", "sell")


class AlpacaExchange(ExchangeInterface):
    """
    Alpaca Crypto Exchange Adapter

    Attributes:
        name: Exchange identifier ("alpaca")
        capabilities: Supported operations
        config: Frozen venue configuration

    Example:
        >>> exchange = AlpacaExchange(api_key="key", secret="secret")
        >>> markets = exchange.list_markets(assets_response)
        >>> btc = exchange.market_index(markets).market("BTC/USD")
        >>>
        >>> request = exchange.create_order_request(btc, "limit", "buy", "0.01", "14000")
        >>> request.url
        'https://api.alpaca.markets/v2/orders'

    Notes:
        - Construction merges Settings with keyword overrides; nothing is
          mutated afterwards, so one instance can serve many threads
        - All numbers in returned schemas are Decimal
    """

    # ============================================
    # Class Attributes
    # ============================================

    name = "alpaca"

    capabilities = {
        "fetch_markets": True,
        "fetch_ticker": True,
        "fetch_trades": True,
        "fetch_order_book": True,
        "fetch_l1_order_book": True,
        "fetch_ohlcv": True,
        "create_order": True,
        "cancel_order": True,
        "cancel_all_orders": True,
        "fetch_order": True,
        "fetch_orders": True,
        "fetch_open_orders": True,
        "fetch_closed_orders": False,
        "fetch_my_trades": False,
        "fetch_balance": False,
    }

    # ============================================
    # Initialization
    # ============================================

    def __init__(self, settings: Optional[Settings] = None, **overrides: Any):
        """
        Initialize the Alpaca adapter.

        Args:
            settings: Deployment settings (defaults to the global instance)
            **overrides: AlpacaConfig fields to override (api_key, secret,
                         sandbox, precision, ...)
        """
        self.config = AlpacaConfig.from_settings(settings, **overrides)
        logger.debug(
            f"AlpacaExchange created (sandbox={self.config.sandbox}, "
            f"credentials={self.config.has_credentials})"
        )

    # ============================================
    # Request Signing
    # ============================================

    def build_request(
        self,
        path: str,
        tier: str = ApiTier.PUBLIC,
        method: str = "GET",
        params: Optional[Mapping[str, Any]] = None,
    ) -> SignedRequest:
        return sign(path, tier, method, params, self.config)

    def _with_defaults(self, request: Dict[str, Any], params: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        merged = dict(request)
        merged.update(params or {})
        return merged

    def _start(self, since: int) -> str:
        start = iso8601(since)
        if start is None:
            raise BadRequest(f"since is out of range: {since}", exchange=self.name)
        return start

    # ============================================
    # Market Data Requests
    # ============================================

    def fetch_markets_request(self, params: Optional[Mapping[str, Any]] = None) -> SignedRequest:
        """GET /v2/assets restricted to crypto assets."""
        request = self._with_defaults({"asset_class": "crypto", "tradeable": True}, params)
        return self.build_request("assets", ApiTier.PRIVATE, "GET", request)

    def fetch_ticker_request(self, market: Market, params: Optional[Mapping[str, Any]] = None) -> SignedRequest:
        """
        GET the latest best bid/offer for a market.

        The source exchange defaults to ``config.default_exchange``: a
        cross-venue quote can show bid > ask.
        """
        request = {"symbol": market.id, "exchanges": self.config.default_exchange}
        return self.build_request(
            "crypto/{symbol}/xbbo/latest",
            ApiTier.MARKET_DATA,
            "GET",
            self._with_defaults(request, params),
        )

    def fetch_l1_order_book_request(self, market: Market, params: Optional[Mapping[str, Any]] = None) -> SignedRequest:
        """Depth-1 book comes from the same best bid/offer endpoint as the ticker."""
        return self.fetch_ticker_request(market, params)

    def fetch_order_book_request(self, market: Market, params: Optional[Mapping[str, Any]] = None) -> SignedRequest:
        """GET the latest full-depth book for a market."""
        request = self._with_defaults({"symbols": market.id}, params)
        return self.build_request("crypto/latest/orderbooks", ApiTier.MARKET_DATA, "GET", request)

    def fetch_trades_request(
        self,
        market: Market,
        since: Optional[int] = None,
        limit: Optional[int] = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> SignedRequest:
        """
        GET trade prints for a market.

        Args:
            since: Epoch ms of the earliest trade (sent as ISO-8601 ``start``)
            limit: Maximum number of trades
        """
        request: Dict[str, Any] = {"symbol": market.id}
        if since is not None:
            request["start"] = self._start(since)
        if limit is not None:
            request["limit"] = int(limit)
        return self.build_request(
            "crypto/{symbol}/trades",
            ApiTier.MARKET_DATA,
            "GET",
            self._with_defaults(request, params),
        )

    def fetch_ohlcv_request(
        self,
        market: Market,
        timeframe: str = "1m",
        since: Optional[int] = None,
        limit: Optional[int] = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> SignedRequest:
        """
        GET candlesticks for a market.

        Raises:
            NotSupported: If the timeframe has no Alpaca equivalent
        """
        if timeframe not in TIMEFRAMES:
            raise NotSupported(
                f"{self.name} does not support timeframe '{timeframe}'. "
                f"Supported: {', '.join(TIMEFRAMES)}",
                exchange=self.name,
            )
        request: Dict[str, Any] = {"symbol": market.id, "timeframe": TIMEFRAMES[timeframe]}
        if since is not None:
            request["start"] = self._start(since)
        if limit is not None:
            request["limit"] = int(limit)
        return self.build_request(
            "crypto/{symbol}/bars",
            ApiTier.MARKET_DATA,
            "GET",
            self._with_defaults(request, params),
        )

    # ============================================
    # Trading Requests
    # ============================================

    def generate_client_order_id(self) -> str:
        """New client order id from the configured prefix and a random uuid."""
        return f"{self.config.client_order_id_prefix}{uuid.uuid4().hex}"

    def create_order_request(
        self,
        market: Market,
        type: str,
        side: str,
        amount: Any,
        price: Any = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> SignedRequest:
        """
        Build a POST /v2/orders request.

        Args:
            market: Resolved market
            type: "market", "limit" or "stop_limit"
            side: "buy" or "sell"
            amount: Quantity in base currency (truncated to amount precision)
            price: Limit price (required for limit-family orders)
            params: Extra fields. Recognized keys:
                - trigger_price / triggerPrice / stop_price: turns a limit
                  order into stop_limit
                - time_in_force / timeInForce: defaults to config
                - client_order_id / clientOrderId: defaults to a generated id
                Anything else is sent to the venue as-is.

        Returns:
            SignedRequest with a JSON body

        Raises:
            InvalidOrder: Bad side, missing limit price, or amount/price below
                          the market increment
            NotSupported: Trigger price on a non-limit order
        """
        extra = dict(params or {})
        if side not in ORDER_SIDES:
            raise InvalidOrder(f"{self.name} order side must be 'buy' or 'sell', got '{side}'", exchange=self.name)

        request: Dict[str, Any] = {
            "symbol": market.id,
            "qty": amount_to_precision(amount, market.precision.amount),
            "side": side,
            "type": type,
        }

        trigger_price = _pop_first(extra, "trigger_price", "triggerPrice", "stop_price")

        is_limit = "limit" in type
        if trigger_price is not None:
            if not is_limit:
                raise NotSupported(
                    f"{self.name} createOrder() does not support stop orders for {type} orders, "
                    f"only stop_limit orders are supported",
                    exchange=self.name,
                )
            request["stop_price"] = price_to_precision(trigger_price, market.precision.price)
            request["type"] = "stop_limit"

        if is_limit:
            if price is None:
                raise InvalidOrder(f"{self.name} {type} orders require a price", exchange=self.name)
            request["limit_price"] = price_to_precision(price, market.precision.price)

        time_in_force = _pop_first(extra, "time_in_force", "timeInForce")
        request["time_in_force"] = time_in_force or self.config.default_time_in_force

        client_order_id = _pop_first(extra, "client_order_id", "clientOrderId")
        request["client_order_id"] = client_order_id or self.generate_client_order_id()

        request.update(extra)
        logger.info(f"Building {request['type']} {side} order for {market.symbol} (qty={request['qty']})")
        return self.build_request("orders", ApiTier.PRIVATE, "POST", request)

    def cancel_order_request(self, id: str, params: Optional[Mapping[str, Any]] = None) -> SignedRequest:
        """DELETE /v2/orders/{order_id}"""
        request = self._with_defaults({"order_id": id}, params)
        return self.build_request("orders/{order_id}", ApiTier.PRIVATE, "DELETE", request)

    def cancel_all_orders_request(self, params: Optional[Mapping[str, Any]] = None) -> SignedRequest:
        """DELETE /v2/orders"""
        return self.build_request("orders", ApiTier.PRIVATE, "DELETE", params)

    def fetch_order_request(self, id: str, params: Optional[Mapping[str, Any]] = None) -> SignedRequest:
        """GET /v2/orders/{order_id}"""
        request = self._with_defaults({"order_id": id}, params)
        return self.build_request("orders/{order_id}", ApiTier.PRIVATE, "GET", request)

    def fetch_orders_request(
        self,
        status: str = "all",
        limit: Optional[int] = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> SignedRequest:
        """GET /v2/orders filtered by status ("open", "closed" or "all")."""
        request: Dict[str, Any] = {"status": status}
        if limit is not None:
            request["limit"] = int(limit)
        return self.build_request("orders", ApiTier.PRIVATE, "GET", self._with_defaults(request, params))

    def fetch_open_orders_request(self, params: Optional[Mapping[str, Any]] = None) -> SignedRequest:
        """GET /v2/orders?status=open"""
        return self.fetch_orders_request("open", params=params)

    # ============================================
    # Markets
    # ============================================

    def list_markets(self, raw_assets: Iterable[Any]) -> List[Market]:
        return parse_markets(raw_assets, self.config)

    def market_index(self, markets: Iterable[Market]) -> MarketIndex:
        """Read-only lookup over a catalog returned by list_markets()."""
        return MarketIndex(markets, self.config.quote_width)

    # ============================================
    # Response Normalization
    # ============================================

    def parse_ticker(self, raw: Any, market: Market) -> Ticker:
        return parsers.parse_ticker(raw, market)

    def parse_trade(self, raw: Any, market: Optional[Market] = None) -> Trade:
        return parsers.parse_trade(raw, market)

    def parse_trades(
        self,
        raws: Optional[Iterable[Any]],
        market: Optional[Market] = None,
        since: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[Trade]:
        return parsers.parse_trades(raws, market, since, limit)

    def parse_order_book(self, raw: Any, symbol: str, timestamp: Optional[int] = None) -> OrderBook:
        return parsers.parse_order_book(raw, symbol, timestamp)

    def parse_ohlcv(self, raw: Any) -> OHLCV:
        return parsers.parse_ohlcv(raw)

    def parse_order(
        self,
        raw: Any,
        market: Optional[Market] = None,
        markets: Optional[MarketIndex] = None,
    ) -> Order:
        return parsers.parse_order(raw, market, markets, self.config.settlement_currency)

    def parse_orders(
        self,
        raws: Optional[Iterable[Any]],
        market: Optional[Market] = None,
        markets: Optional[MarketIndex] = None,
        since: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[Order]:
        return parsers.parse_orders(raws, market, markets, since, limit, self.config.settlement_currency)

    # ============================================
    # Response Unwrapping
    # ============================================

    def parse_ticker_response(self, response: Any, market: Market) -> Ticker:
        """
        Ticker from a latest-quote response.

        Response Format:
            {"symbol": "BTCUSD", "xbbo": {"t": "...", "ap": 60564, "as": 0.36, "bp": 60555, "bs": 0.36}}
        """
        return self.parse_ticker(_unwrap(response, "xbbo", "quote"), market)

    def parse_l1_order_book_response(self, response: Any, market: Market, timestamp: Optional[int] = None) -> OrderBook:
        """Depth-1 OrderBook from a latest-quote response."""
        return self.parse_order_book(_unwrap(response, "xbbo", "quote"), market.symbol, timestamp)

    def parse_order_book_response(self, response: Any, market: Market, timestamp: Optional[int] = None) -> OrderBook:
        """
        Full-depth OrderBook from a latest-orderbooks response.

        Response Format:
            {"orderbooks": {"BTCUSD": {"t": "...", "b": [{"p": .., "s": ..}], "a": [...]}}}
        """
        books = _unwrap(response, "orderbooks")
        book = books.get(market.id) or books.get(market.symbol) or {}
        return self.parse_order_book(book, market.symbol, timestamp)

    def parse_trades_response(
        self,
        response: Any,
        market: Market,
        since: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[Trade]:
        """
        Trades from a trades response.

        Response Format:
            {"symbol": "BTCUSD", "trades": [{"t": "...", "p": 60011.36, "s": 0.00956419, "tks": "S", "i": 237168320}]}
        """
        trades = response.get("trades") if isinstance(response, dict) else response
        return self.parse_trades(trades, market, since, limit)

    def parse_ohlcv_response(
        self,
        response: Any,
        since: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[OHLCV]:
        """
        Bars from a bars response.

        Response Format:
            {"symbol": "BTCUSD", "bars": [{"t": "...", "o": .., "h": .., "l": .., "c": .., "v": ..}]}
        """
        bars = response.get("bars") if isinstance(response, dict) else response
        return parsers.parse_ohlcvs(bars, since, limit)

    # ============================================
    # Error Handling
    # ============================================

    def classify_error(self, payload: Any) -> Optional[ExchangeError]:
        return classify_error(payload, self.config.id)


def _pop_first(params: Dict[str, Any], *keys: str) -> Any:
    """Remove every key from params and return the first non-None value."""
    found = None
    for key in keys:
        value = params.pop(key, None)
        if found is None and value is not None:
            found = value
    return found


def _unwrap(response: Any, *keys: str) -> Dict[str, Any]:
    """First dict found under ``keys``, else the response itself when it is a dict."""
    if not isinstance(response, dict):
        return {}
    for key in keys:
        value = response.get(key)
        if isinstance(value, dict):
            return value
    return response


__all__ = ["AlpacaExchange", "AlpacaConfig", "ApiTier", "MarketIndex", "TIMEFRAMES"]
