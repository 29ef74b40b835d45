"""
Alpaca Market Catalog Builder

Turns the raw asset list from ``GET /v2/assets`` into canonical Market records.

Response Format:
    [
      {
        "id": "64bbff51-59d6-4b3c-9351-13ad85e3c752",
        "class": "crypto",
        "exchange": "FTXU",
        "symbol": "BTCUSD",
        "name": "Bitcoin",
        "status": "active",
        "tradable": true,
        "min_order_size": "0.0001",
        "min_trade_increment": "0.0001",
        "price_increment": "1"
      }
    ]

Symbol Derivation:
    - "BTC/USD": split on the separator
    - "BTCUSD": the last ``quote_width`` (3) characters are the quote currency,
      the rest is the base. Every crypto market settles in USD, so base codes
      of 3, 4 or 5 characters all split correctly.

Known Limitation:
    The fixed-width split is lossy. An undelimited id whose quote currency is
    not 3 characters long (e.g., "BTCUSDT") is split as "BTCU/SDT". The
    heuristic is kept as-is rather than guessed at; venues that publish a
    delimited symbol are not affected.
"""

from typing import Any, Dict, Iterable, List, Optional, Tuple

from core.errors import BadSymbol
from core.logging import get_logger
from core.schemas import Market, MarketLimits, MarketPrecision, MinMax
from .config import AlpacaConfig
from .precision import lookup_precision


logger = get_logger(__name__)

SYMBOL_SEPARATOR = "/"


def split_symbol(market_id: str, quote_width: int = 3) -> Tuple[str, str]:
    """
    Split a venue id into uppercase (base, quote).

    Args:
        market_id: Venue identifier, delimited ("BTC/USD") or not ("BTCUSD")
        quote_width: Quote currency width used for undelimited ids

    Returns:
        (base, quote) tuple

    Raises:
        ValueError: If the id cannot produce a non-empty base and quote

    Examples:
        >>> split_symbol("BTCUSD")
        ('BTC', 'USD')
        >>> split_symbol("shibusd")
        ('SHIB', 'USD')
        >>> split_symbol("AAVE/USD")
        ('AAVE', 'USD')
    """
    if SYMBOL_SEPARATOR in market_id:
        base, _, quote = market_id.partition(SYMBOL_SEPARATOR)
    else:
        split_index = max(len(market_id) - quote_width, 0)
        base, quote = market_id[:split_index], market_id[split_index:]

    base, quote = base.strip().upper(), quote.strip().upper()
    if not base or not quote or SYMBOL_SEPARATOR in quote:
        raise ValueError(f"Cannot derive base/quote from market id '{market_id}'")
    return base, quote


def _parse_active(asset: Dict[str, Any]) -> Optional[bool]:
    if asset.get("tradable") is False:
        return False
    status = asset.get("status")
    if status is None:
        return None
    return str(status).lower() == "active"


def parse_market(asset: Dict[str, Any], config: AlpacaConfig) -> Market:
    """
    Convert one raw asset record into a Market.

    Args:
        asset: Raw asset dictionary
        config: Venue configuration (quote width, precision table, fees)

    Returns:
        Market with precision/limits from the precision table

    Raises:
        ValueError: If the record has no usable symbol
    """
    market_id = asset.get("symbol") if isinstance(asset, dict) else None
    if not isinstance(market_id, str) or not market_id.strip():
        raise ValueError("asset record has no symbol")

    market_id = market_id.strip()
    base, quote = split_symbol(market_id, config.quote_width)
    symbol = f"{base}{SYMBOL_SEPARATOR}{quote}"
    override = lookup_precision(symbol, config.precision)

    return Market(
        id=market_id,
        symbol=symbol,
        base=base,
        quote=quote,
        base_id=base.lower(),
        quote_id=quote.lower(),
        active=_parse_active(asset),
        precision=MarketPrecision(amount=override.amount, price=override.price),
        limits=MarketLimits(amount=MinMax(min=override.min_amount)),
        maker=config.maker,
        taker=config.taker,
        info=asset,
    )


def parse_markets(assets: Iterable[Any], config: AlpacaConfig) -> List[Market]:
    """
    Convert a raw asset list into Markets, skipping malformed records.

    A record without a usable symbol is logged and skipped; the rest of the
    batch is still returned.

    Example:
        >>> markets = parse_markets(response, config)
        >>> [m.symbol for m in markets]
        ['BTC/USD', 'ETH/USD']
    """
    markets: List[Market] = []
    skipped = 0

    for index, asset in enumerate(assets or []):
        try:
            markets.append(parse_market(asset, config))
        except ValueError as e:
            skipped += 1
            logger.warning(f"Skipping asset #{index}: {e}")

    logger.info(f"Parsed {len(markets)} markets ({skipped} skipped)")
    return markets


class MarketIndex:
    """
    Read-only lookup over a built market catalog.

    This is not a cache: it is built once from a list and never refreshed.
    Loading and refreshing the catalog belongs to the caller.

    Example:
        >>> index = MarketIndex(parse_markets(assets, config))
        >>> index.by_id("BTCUSD").symbol
        'BTC/USD'
    """

    def __init__(self, markets: Iterable[Market], quote_width: int = 3):
        markets = list(markets)
        self._by_id = {m.id: m for m in markets}
        self._by_symbol = {m.symbol: m for m in markets}
        self.quote_width = quote_width

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, key: str) -> bool:
        return key in self._by_id or key in self._by_symbol

    def by_id(self, market_id: str) -> Optional[Market]:
        return self._by_id.get(market_id)

    def by_symbol(self, symbol: str) -> Optional[Market]:
        return self._by_symbol.get(symbol)

    def market(self, symbol_or_id: str) -> Market:
        """
        Look a market up by canonical symbol or venue id.

        Raises:
            BadSymbol: If neither lookup finds it
        """
        found = self._by_symbol.get(symbol_or_id) or self._by_id.get(symbol_or_id)
        if found is None:
            raise BadSymbol(f"Unknown market: {symbol_or_id}", exchange="alpaca")
        return found

    def symbol_for(self, market_id: str) -> str:
        """
        Canonical symbol for a venue id, falling back to the split heuristic
        for ids not in the catalog (and to the id itself if it cannot split).
        """
        found = self._by_id.get(market_id)
        if found is not None:
            return found.symbol
        try:
            base, quote = split_symbol(market_id, self.quote_width)
        except ValueError:
            return market_id
        return f"{base}{SYMBOL_SEPARATOR}{quote}"
