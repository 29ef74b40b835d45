"""
Alpaca Response Normalizers

Pure functions converting Alpaca payloads into the canonical schemas.

Every normalizer is total over its documented input shape: a missing
optional field becomes None ("unknown"), never zero, and never raises. Only
a structurally required field (the symbol of an order with no resolved
market) raises MissingFieldError.

Payload Shapes:
    Quote (xbbo / latest quote):
        {"t": "2022-06-14T13:05:22.642Z", "ax": "CBSE", "ap": "22163.42",
         "as": "0.10021214", "bx": "CBSE", "bp": "22160.03", "bs": "0.03923939"}

    Trade:
        {"t": "2022-06-14T05:00:00.027869Z", "x": "CBSE", "p": "21942.15",
         "s": "0.0001", "tks": "S", "i": "355681339"}

    Bar:
        {"t": "2022-06-14T05:00:00Z", "o": 22000, "h": 22100, "l": 21900,
         "c": 22050, "v": 12.5, "n": 310, "vw": 22011.3}

    Depth book:
        {"t": "...", "b": [{"p": 60555, "s": 0.36}], "a": [{"p": 60564, "s": 0.36}]}

    Order:
        {"id": "6ecfcc34-...", "client_order_id": "tb_1c6c...", "symbol": "BTCUSD",
         "submitted_at": "2022-06-14T13:59:30.221856828Z", "order_type": "limit",
         "side": "buy", "time_in_force": "day", "limit_price": "14000",
         "qty": "0.01", "filled_qty": "0", "status": "accepted", "commission": "0.42"}
"""

from decimal import Decimal
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from core.errors import MissingFieldError
from core.schemas import OHLCV, Fee, Market, Order, OrderBook, PriceLevel, Ticker, Trade
from core.utils.numbers import to_decimal, to_string
from core.utils.time import iso8601, parse8601
from .markets import MarketIndex


# ============================================
# Lookup Tables
# ============================================

ORDER_STATUSES: Mapping[str, str] = MappingProxyType({
    "accepted": "open",
    "new": "open",
    "partially_filled": "open",
    "activated": "open",
    "filled": "closed",
    "canceled": "canceled",
})

TAKER_SIDES: Mapping[str, str] = MappingProxyType({
    "B": "buy",
    "S": "sell",
})

OHLCV_KEYS = (
    ("t", "timestamp"),
    ("o", "open"),
    ("h", "high"),
    ("l", "low"),
    ("c", "close"),
    ("v", "volume"),
)

DEFAULT_SETTLEMENT_CURRENCY = "USD"


def _mul(a: Optional[Decimal], b: Optional[Decimal]) -> Optional[Decimal]:
    if a is None or b is None:
        return None
    return a * b


def _sub(a: Optional[Decimal], b: Optional[Decimal]) -> Optional[Decimal]:
    if a is None or b is None:
        return None
    return a - b


def _as_dict(raw: Any) -> Dict[str, Any]:
    return raw if isinstance(raw, dict) else {}


def _timestamp_of(raw: Dict[str, Any], key: str = "t") -> Optional[int]:
    value = raw.get(key)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return int(value)
    return parse8601(value)


# ============================================
# Ticker
# ============================================

def parse_ticker(raw: Any, market: Market) -> Ticker:
    """
    Normalize a best bid/offer quote into a Ticker.

    Args:
        raw: Quote dictionary (bp, bs, ap, as, t)
        market: Resolved market for the quote

    Returns:
        Ticker with bid/ask fields set and every statistic None
    """
    quote = _as_dict(raw)
    datetime = to_string(quote.get("t"))
    return Ticker(
        symbol=market.symbol,
        timestamp=parse8601(datetime),
        datetime=datetime,
        bid=to_decimal(quote.get("bp")),
        bid_volume=to_decimal(quote.get("bs")),
        ask=to_decimal(quote.get("ap")),
        ask_volume=to_decimal(quote.get("as")),
        info=raw,
    )


# ============================================
# Trades
# ============================================

def parse_trade_side(code: Any) -> Optional[str]:
    """
    Decode the single-letter taker-side code.

    Examples:
        >>> parse_trade_side("B")
        'buy'
        >>> parse_trade_side("X") is None
        True
    """
    if not isinstance(code, str):
        return None
    return TAKER_SIDES.get(code)


def parse_trade(raw: Any, market: Optional[Market] = None) -> Trade:
    """
    Normalize a trade print.

    Args:
        raw: Trade dictionary (t, p, s, tks, i)
        market: Resolved market; when absent the payload's ``symbol`` is used

    Returns:
        Trade with ``taker_or_maker`` fixed to "taker"
    """
    trade = _as_dict(raw)
    symbol = market.symbol if market is not None else (to_string(trade.get("symbol")) or "")
    datetime = to_string(trade.get("t"))
    price = to_decimal(trade.get("p"))
    amount = to_decimal(trade.get("s"))

    return Trade(
        id=to_string(trade.get("i")),
        timestamp=parse8601(datetime),
        datetime=datetime,
        symbol=symbol,
        side=parse_trade_side(trade.get("tks")),
        price=price,
        amount=amount,
        cost=_mul(price, amount),
        info=raw,
    )


def _filter_by_since_limit(items: List[Any], since: Optional[int], limit: Optional[int]) -> List[Any]:
    items = sorted(items, key=lambda x: (x.timestamp is None, x.timestamp or 0))
    if since is not None:
        items = [x for x in items if x.timestamp is not None and x.timestamp >= since]
    if limit is not None:
        items = items[-limit:] if limit > 0 else []
    return items


def parse_trades(
    raws: Optional[Iterable[Any]],
    market: Optional[Market] = None,
    since: Optional[int] = None,
    limit: Optional[int] = None,
) -> List[Trade]:
    """
    Normalize a list of trades, sorted by timestamp.

    Args:
        raws: Trade dictionaries
        market: Resolved market
        since: Keep trades at or after this epoch-ms timestamp
        limit: Keep at most this many of the most recent trades
    """
    trades = [parse_trade(raw, market) for raw in (raws or [])]
    return _filter_by_since_limit(trades, since, limit)


# ============================================
# Order Book
# ============================================

def _level(price: Any, size: Any) -> Optional[PriceLevel]:
    price = to_decimal(price)
    if price is None:
        return None
    return (price, to_decimal(size))


def _levels(entries: Any) -> List[PriceLevel]:
    levels: List[PriceLevel] = []
    for entry in entries or []:
        if isinstance(entry, dict):
            level = _level(entry.get("p"), entry.get("s"))
        elif isinstance(entry, (list, tuple)) and entry:
            level = _level(entry[0], entry[1] if len(entry) > 1 else None)
        else:
            level = None
        if level is not None:
            levels.append(level)
    return levels


def parse_order_book(raw: Any, symbol: str, timestamp: Optional[int] = None) -> OrderBook:
    """
    Normalize a quote or depth book into an OrderBook.

    Accepted shapes:
        - Best bid/offer quote: {"bp", "bs", "ap", "as"} (depth 1)
        - Depth book: {"b": [{"p", "s"}], "a": [{"p", "s"}]}
        - Canonical pairs: {"bids": [[p, s]], "asks": [[p, s]]}

    Args:
        raw: Payload in one of the shapes above
        symbol: Canonical symbol
        timestamp: Epoch ms used when the payload carries no ``t`` (the caller
                   supplies it so this function stays pure)

    Returns:
        OrderBook with bids best (highest) first and asks best (lowest) first

    Notes:
        Levels with an unknown price are dropped. A crossed book
        (best bid > best ask) is returned as received, not corrected.
    """
    book = _as_dict(raw)

    if "bids" in book or "asks" in book:
        bids, asks = _levels(book.get("bids")), _levels(book.get("asks"))
    elif "b" in book or "a" in book:
        bids, asks = _levels(book.get("b")), _levels(book.get("a"))
    else:
        bid, ask = _level(book.get("bp"), book.get("bs")), _level(book.get("ap"), book.get("as"))
        bids = [bid] if bid is not None else []
        asks = [ask] if ask is not None else []

    bids.sort(key=lambda level: level[0], reverse=True)
    asks.sort(key=lambda level: level[0])

    book_timestamp = _timestamp_of(book)
    if book_timestamp is None:
        book_timestamp = timestamp

    return OrderBook(
        symbol=symbol,
        bids=bids,
        asks=asks,
        timestamp=book_timestamp,
        datetime=iso8601(book_timestamp),
    )


# ============================================
# OHLCV
# ============================================

def parse_ohlcv(raw: Any) -> OHLCV:
    """
    Normalize a bar into OHLCV.

    Accepts short keys (t, o, h, l, c, v), long keys (timestamp, open, ...)
    or a positional list already in (timestamp, o, h, l, c, v) order. The
    output field order is fixed regardless of the source naming.

    Example:
        >>> parse_ohlcv({"t": "2022-06-14T05:00:00Z", "o": 1, "h": 2, "l": 1, "c": 2, "v": 3}).as_tuple()
        (1655182800000, Decimal('1'), Decimal('2'), Decimal('1'), Decimal('2'), Decimal('3'))
    """
    if isinstance(raw, (list, tuple)):
        values: Sequence[Any] = list(raw[:6]) + [None] * (6 - min(len(raw), 6))
    else:
        bar = _as_dict(raw)
        values = [
            bar.get(short) if bar.get(short) is not None else bar.get(long)
            for short, long in OHLCV_KEYS
        ]

    timestamp = values[0]
    if isinstance(timestamp, (int, float)) and not isinstance(timestamp, bool):
        timestamp = int(timestamp)
    else:
        timestamp = parse8601(timestamp)

    return OHLCV(
        timestamp=timestamp,
        open=to_decimal(values[1]),
        high=to_decimal(values[2]),
        low=to_decimal(values[3]),
        close=to_decimal(values[4]),
        volume=to_decimal(values[5]),
    )


def parse_ohlcvs(
    raws: Optional[Iterable[Any]],
    since: Optional[int] = None,
    limit: Optional[int] = None,
) -> List[OHLCV]:
    """Normalize a list of bars, sorted by timestamp."""
    bars = [parse_ohlcv(raw) for raw in (raws or [])]
    return _filter_by_since_limit(bars, since, limit)


# ============================================
# Orders
# ============================================

def parse_order_status(status: Optional[str]) -> Optional[str]:
    """
    Map an Alpaca order status to the canonical set.

    Statuses outside the table (e.g., "pending_new", "expired", "rejected")
    are returned unchanged so new venue statuses never break parsing.

    Examples:
        >>> parse_order_status("partially_filled")
        'open'
        >>> parse_order_status("expired")
        'expired'
    """
    if status is None:
        return None
    return ORDER_STATUSES.get(status, status)


def parse_order_type(order_type: Optional[str]) -> Optional[str]:
    """
    Collapse limit-family types (limit, stop_limit) to "limit".

    Examples:
        >>> parse_order_type("stop_limit")
        'limit'
        >>> parse_order_type("market")
        'market'
    """
    if order_type is None:
        return None
    return "limit" if "limit" in order_type else order_type


def parse_order(
    raw: Any,
    market: Optional[Market] = None,
    markets: Optional[MarketIndex] = None,
    settlement_currency: str = DEFAULT_SETTLEMENT_CURRENCY,
) -> Order:
    """
    Normalize an Alpaca order.

    Args:
        raw: Order dictionary
        market: Resolved market; takes precedence over the payload symbol
        markets: Catalog used to resolve the payload symbol when no market
                 is given (the split heuristic is used otherwise)
        settlement_currency: Currency the commission is charged in

    Returns:
        Order with canonical status, type and optional fee

    Raises:
        MissingFieldError: If no market is given and the payload has no symbol
    """
    order = _as_dict(raw)

    if market is not None:
        symbol = market.symbol
    else:
        market_id = to_string(order.get("symbol"))
        if market_id is None:
            raise MissingFieldError("symbol", order)
        index = markets if markets is not None else MarketIndex([])
        symbol = index.symbol_for(market_id)

    commission = to_decimal(order.get("commission"))
    fee = Fee(cost=commission, currency=settlement_currency) if commission is not None else None

    order_type = to_string(order.get("order_type")) or to_string(order.get("type"))
    datetime = to_string(order.get("submitted_at"))
    amount = to_decimal(order.get("qty"))
    filled = to_decimal(order.get("filled_qty"))
    average = to_decimal(order.get("filled_avg_price"))

    return Order(
        id=to_string(order.get("id")),
        client_order_id=to_string(order.get("client_order_id")),
        timestamp=parse8601(datetime),
        datetime=datetime,
        last_trade_timestamp=parse8601(order.get("filled_at")),
        status=parse_order_status(to_string(order.get("status"))),
        symbol=symbol,
        type=parse_order_type(order_type),
        time_in_force=to_string(order.get("time_in_force")),
        side=to_string(order.get("side")),
        price=to_decimal(order.get("limit_price")),
        stop_price=to_decimal(order.get("stop_price")),
        average=average,
        amount=amount,
        filled=filled,
        remaining=_sub(amount, filled),
        cost=_mul(filled, average),
        fee=fee,
        info=raw,
    )


def parse_orders(
    raws: Optional[Iterable[Any]],
    market: Optional[Market] = None,
    markets: Optional[MarketIndex] = None,
    since: Optional[int] = None,
    limit: Optional[int] = None,
    settlement_currency: str = DEFAULT_SETTLEMENT_CURRENCY,
) -> List[Order]:
    """
    Normalize a list of orders, sorted by submission time.

    When ``market`` is given, orders for other symbols are filtered out;
    orders that carry no symbol of their own are attributed to it.
    """
    orders = [
        parse_order(
            raw,
            market if not _as_dict(raw).get("symbol") else None,
            markets,
            settlement_currency,
        )
        for raw in (raws or [])
    ]
    if market is not None:
        orders = [o for o in orders if o.symbol == market.symbol]
    return _filter_by_since_limit(orders, since, limit)
