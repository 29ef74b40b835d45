"""
Normalized Data Schemas

This module defines Pydantic models for the canonical trading data model.
Every venue adapter converts its broker-specific payloads into these schemas,
so callers work with one venue-agnostic shape.

Key Principle:
    Regardless of which venue the data comes from, it gets normalized into
    these standardized schemas. Unknown values are ``None``, never zero.

Models:
    - Market: Tradable instrument with precision and limits
    - Ticker: Best bid/offer snapshot
    - Trade: Single public trade print
    - OrderBook: Bid/ask price levels
    - OHLCV: Candlestick bar
    - Order: Private order state
    - SignedRequest: Concrete HTTP request description produced by a signer

Conventions:
    - Prices and sizes are ``Decimal`` (never binary floating point)
    - Timestamps are epoch milliseconds (UTC); ``datetime`` keeps the
      ISO-8601 string the venue sent
    - ``info`` retains the untransformed source payload
    - All models are frozen: constructed fresh per call, never mutated
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


PriceLevel = Tuple[Decimal, Optional[Decimal]]


# ============================================
# Base Model
# ============================================

class CanonicalModel(BaseModel):
    """
    Base model for all canonical schemas.

    Frozen so that a parsed entity can be shared between threads and never
    changes after construction.
    """

    model_config = ConfigDict(frozen=True)


# ============================================
# Market Schema
# ============================================

class MinMax(CanonicalModel):
    """Optional lower/upper bound pair."""

    min: Optional[Decimal] = None
    max: Optional[Decimal] = None


class MarketPrecision(CanonicalModel):
    """
    Tick sizes for a market.

    Both values are decimal granularities (e.g., ``Decimal("0.0001")``),
    ``None`` when the venue does not publish them and no override exists.
    """

    amount: Optional[Decimal] = None
    price: Optional[Decimal] = None


class MarketLimits(CanonicalModel):
    """Order size, price and notional limits."""

    amount: MinMax = Field(default_factory=MinMax)
    price: MinMax = Field(default_factory=MinMax)
    cost: MinMax = Field(default_factory=MinMax)


class Market(CanonicalModel):
    """
    Market (Trading Instrument) Data Model

    Attributes:
        id: Identifier the venue expects on the wire (e.g., "BTCUSD")
        symbol: Canonical symbol "BASE/QUOTE" (e.g., "BTC/USD")
        base: Base currency code, uppercase
        quote: Quote currency code, uppercase
        base_id: Base currency id as used by the venue
        quote_id: Quote currency id as used by the venue
        active: True/False when the venue reports a status, None otherwise
        precision: Amount and price tick sizes
        limits: Amount, price and cost bounds
        maker: Maker fee rate (fraction, e.g. 0.003)
        taker: Taker fee rate (fraction)
        info: Raw asset record

    Example:
        >>> Market(id="BTCUSD", symbol="BTC/USD", base="BTC", quote="USD",
        ...        base_id="btc", quote_id="usd")

    Notes:
        - ``symbol == base + "/" + quote`` is enforced on construction
        - ``id`` may differ in case or separator from ``symbol``
    """

    id: str = Field(..., description="Venue market identifier")
    symbol: str = Field(..., description="Canonical BASE/QUOTE symbol")
    base: str
    quote: str
    base_id: str
    quote_id: str
    active: Optional[bool] = None
    type: str = "spot"
    spot: bool = True
    precision: MarketPrecision = Field(default_factory=MarketPrecision)
    limits: MarketLimits = Field(default_factory=MarketLimits)
    maker: Optional[Decimal] = None
    taker: Optional[Decimal] = None
    info: Any = None

    @model_validator(mode="after")
    def check_symbol(self) -> "Market":
        """Ensure symbol is the uppercase BASE/QUOTE join"""
        if self.base != self.base.upper() or self.quote != self.quote.upper():
            raise ValueError(f"base/quote must be uppercase: {self.base}/{self.quote}")
        if self.symbol != f"{self.base}/{self.quote}":
            raise ValueError(
                f"symbol '{self.symbol}' does not match '{self.base}/{self.quote}'"
            )
        return self


# ============================================
# Ticker Schema
# ============================================

class Ticker(CanonicalModel):
    """
    Ticker (Best Bid/Offer) Data Model

    The venue's quote feed only carries the best bid and ask, so every
    statistic (last, open, close, volumes, ...) is explicitly ``None``.
    """

    symbol: str
    timestamp: Optional[int] = None
    datetime: Optional[str] = None
    bid: Optional[Decimal] = None
    bid_volume: Optional[Decimal] = None
    ask: Optional[Decimal] = None
    ask_volume: Optional[Decimal] = None

    # Not provided by a best-bid/offer feed
    high: Optional[Decimal] = None
    low: Optional[Decimal] = None
    vwap: Optional[Decimal] = None
    open: Optional[Decimal] = None
    close: Optional[Decimal] = None
    last: Optional[Decimal] = None
    previous_close: Optional[Decimal] = None
    change: Optional[Decimal] = None
    percentage: Optional[Decimal] = None
    average: Optional[Decimal] = None
    base_volume: Optional[Decimal] = None
    quote_volume: Optional[Decimal] = None

    info: Any = None


# ============================================
# Trade Schema
# ============================================

class Trade(CanonicalModel):
    """
    Public Trade Data Model

    Attributes:
        id: Venue trade id
        side: "buy" or "sell" from the taker-side code, None when unknown
        price: Execution price
        amount: Executed size in base currency
        cost: price * amount when both are known
        taker_or_maker: Always "taker"; the venue does not disclose it
    """

    id: Optional[str] = None
    timestamp: Optional[int] = None
    datetime: Optional[str] = None
    symbol: str = ""
    order: Optional[str] = None
    type: Optional[str] = None
    side: Optional[str] = None
    taker_or_maker: str = "taker"
    price: Optional[Decimal] = None
    amount: Optional[Decimal] = None
    cost: Optional[Decimal] = None
    info: Any = None

    @field_validator("side")
    @classmethod
    def validate_side(cls, v: Optional[str]) -> Optional[str]:
        """Ensure side is one of buy/sell"""
        if v is not None and v not in ("buy", "sell"):
            raise ValueError(f"side must be 'buy' or 'sell', got '{v}'")
        return v


# ============================================
# Order Book Schema
# ============================================

class OrderBook(CanonicalModel):
    """
    Order Book Data Model

    Bids are sorted best (highest) first, asks best (lowest) first. Each level
    is a ``(price, size)`` tuple.

    Notes:
        - Depth 1 when sourced from a quote, full depth from a book endpoint
        - Callers assume ``best_bid <= best_ask``; a crossed venue quote is
          passed through as received
    """

    symbol: str
    bids: List[PriceLevel] = Field(default_factory=list)
    asks: List[PriceLevel] = Field(default_factory=list)
    timestamp: Optional[int] = None
    datetime: Optional[str] = None
    nonce: Optional[int] = None

    @property
    def best_bid(self) -> Optional[PriceLevel]:
        """Highest bid level or None"""
        return self.bids[0] if self.bids else None

    @property
    def best_ask(self) -> Optional[PriceLevel]:
        """Lowest ask level or None"""
        return self.asks[0] if self.asks else None

    @property
    def spread(self) -> Optional[Decimal]:
        """best ask - best bid, None if either side is empty"""
        if not self.bids or not self.asks:
            return None
        return self.asks[0][0] - self.bids[0][0]


# ============================================
# OHLCV Schema
# ============================================

class OHLCV(CanonicalModel):
    """
    Candlestick Bar Data Model

    ``as_tuple()`` returns the fixed field order
    ``(timestamp, open, high, low, close, volume)``.
    """

    timestamp: Optional[int] = None
    open: Optional[Decimal] = None
    high: Optional[Decimal] = None
    low: Optional[Decimal] = None
    close: Optional[Decimal] = None
    volume: Optional[Decimal] = None

    def as_tuple(self) -> Tuple[Optional[int], Optional[Decimal], Optional[Decimal],
                                Optional[Decimal], Optional[Decimal], Optional[Decimal]]:
        return (self.timestamp, self.open, self.high, self.low, self.close, self.volume)


# ============================================
# Order Schema
# ============================================

class Fee(CanonicalModel):
    """Commission charged on an order."""

    cost: Decimal
    currency: str


class Order(CanonicalModel):
    """
    Order Data Model

    Attributes:
        status: "open", "closed", "canceled", or the raw venue status when
                the venue reports something outside the canonical set
        type: "market" or "limit" (limit-family subtypes collapse to "limit")
        fee: Present only when the venue reports a commission
        info: Raw order payload

    Example:
        >>> order.status
        'open'
        >>> order.remaining
        Decimal('0.01')
    """

    id: Optional[str] = None
    client_order_id: Optional[str] = None
    timestamp: Optional[int] = None
    datetime: Optional[str] = None
    last_trade_timestamp: Optional[int] = None
    status: Optional[str] = None
    symbol: str
    type: Optional[str] = None
    time_in_force: Optional[str] = None
    post_only: Optional[bool] = None
    side: Optional[str] = None
    price: Optional[Decimal] = None
    stop_price: Optional[Decimal] = None
    average: Optional[Decimal] = None
    amount: Optional[Decimal] = None
    filled: Optional[Decimal] = None
    remaining: Optional[Decimal] = None
    cost: Optional[Decimal] = None
    fee: Optional[Fee] = None
    info: Any = None


# ============================================
# Signed Request Schema
# ============================================

class SignedRequest(CanonicalModel):
    """
    Concrete HTTP request produced by a venue signer.

    The transport executes it as-is: ``url`` already carries the query
    string for GET/DELETE, ``body`` is a JSON string (or None).
    """

    url: str
    method: str
    headers: Dict[str, str] = Field(default_factory=dict)
    body: Optional[str] = None
