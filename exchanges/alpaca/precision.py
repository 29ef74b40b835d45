"""
Alpaca Precision and Limits Table

The assets endpoint does not publish tick sizes or minimum order sizes, so
they are kept here, keyed by canonical symbol, from Alpaca's crypto trading
documentation.

Symbols absent from the table have unknown precision and minimum amount
(None), which is not the same as zero.
"""

from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal
from types import MappingProxyType
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict

from core.errors import InvalidOrder
from core.utils.numbers import decimal_to_string, to_decimal


class SymbolPrecision(BaseModel):
    """
    Precision override for one symbol.

    Attributes:
        amount: Order quantity increment
        price: Price increment
        min_amount: Minimum order quantity
    """

    model_config = ConfigDict(frozen=True)

    amount: Optional[Decimal] = None
    price: Optional[Decimal] = None
    min_amount: Optional[Decimal] = None


def _entry(amount: str, price: str, min_amount: str) -> SymbolPrecision:
    return SymbolPrecision(
        amount=Decimal(amount),
        price=Decimal(price),
        min_amount=Decimal(min_amount),
    )


PRECISION_TABLE: Mapping[str, SymbolPrecision] = MappingProxyType({
    "AAVE/USD": _entry("0.01", "0.01", "0.01"),
    "ALGO/USD": _entry("1", "0.0001", "1"),
    "AVAX/USD": _entry("0.1", "0.0005", "0.1"),
    "BAT/USD": _entry("1", "0.01", "1"),
    "BTC/USD": _entry("0.0001", "1", "0.0001"),
    "BCH/USD": _entry("0.0001", "0.025", "0.001"),
    "LINK/USD": _entry("0.1", "0.0005", "0.1"),
    "DAI/USD": _entry("0.1", "0.0001", "0.1"),
    "DOGE/USD": _entry("1", "0.0000005", "1"),
    "ETH/USD": _entry("0.001", "0.1", "0.001"),
    "GRT/USD": _entry("1", "0.00005", "1"),
    "LTC/USD": _entry("0.01", "0.005", "0.01"),
    "MKR/USD": _entry("0.001", "0.5", "0.001"),
    "MATIC/USD": _entry("10", "0.000001", "10"),
    "NEAR/USD": _entry("0.1", "0.001", "0.1"),
    "PAXG/USD": _entry("0.0001", "0.1", "0.0001"),
    "SHIB/USD": _entry("100000", "0.00000001", "100000"),
    "SOL/USD": _entry("0.01", "0.0025", "0.01"),
    "SUSHI/USD": _entry("0.5", "0.0001", "0.5"),
    "USDT/USD": _entry("0.01", "0.0001", "0.01"),
    "TRX/USD": _entry("1", "0.0000025", "1"),
    "UNI/USD": _entry("0.1", "0.001", "0.1"),
    "WBTC/USD": _entry("0.0001", "1", "0.0001"),
    "YFI/USD": _entry("0.001", "5", "0.001"),
})


def lookup_precision(
    symbol: str,
    table: Mapping[str, SymbolPrecision] = PRECISION_TABLE,
) -> SymbolPrecision:
    """
    Get the precision override for a canonical symbol.

    Returns:
        The table entry, or an all-unknown SymbolPrecision when absent
    """
    return table.get(symbol) or SymbolPrecision()


def _to_tick_multiple(value: Any, tick: Optional[Decimal], rounding: str, field: str) -> str:
    number = to_decimal(value)
    if number is None:
        raise InvalidOrder(f"{field} must be a number, got {value!r}")
    if tick is None or tick <= 0:
        return decimal_to_string(number)

    steps = (number / tick).to_integral_value(rounding=rounding)
    result = steps * tick
    if result == 0 and number != 0:
        raise InvalidOrder(
            f"{field} {decimal_to_string(number)} is smaller than the minimum increment "
            f"{decimal_to_string(tick)}"
        )
    return decimal_to_string(result)


def amount_to_precision(amount: Any, tick: Optional[Decimal]) -> str:
    """
    Truncate an order quantity to the amount increment.

    Examples:
        >>> amount_to_precision("0.123456", Decimal("0.0001"))
        '0.1234'

    Raises:
        InvalidOrder: If the amount is not a number or truncates to zero
    """
    return _to_tick_multiple(amount, tick, ROUND_DOWN, "amount")


def price_to_precision(price: Any, tick: Optional[Decimal]) -> str:
    """
    Round a price to the nearest price increment.

    Examples:
        >>> price_to_precision("60011.6", Decimal("1"))
        '60012'
        >>> price_to_precision("0.1234567", Decimal("0.0000025"))
        '0.1234575'

    Raises:
        InvalidOrder: If the price is not a number or rounds to zero
    """
    return _to_tick_multiple(price, tick, ROUND_HALF_UP, "price")
