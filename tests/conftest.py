"""
Shared fixtures: a credentialed adapter and recorded Alpaca payloads.
"""

import pytest

from core.config import Settings
from exchanges.alpaca import AlpacaExchange
from exchanges.alpaca.config import AlpacaConfig


# ============================================
# Adapter Fixtures
# ============================================

@pytest.fixture
def test_settings():
    """Settings isolated from any local .env file"""
    return Settings(_env_file=None, alpaca_sandbox=False)


@pytest.fixture
def config(test_settings):
    """Frozen venue config with credentials"""
    return AlpacaConfig.from_settings(test_settings, api_key="key", secret="secret")


@pytest.fixture
def exchange(test_settings):
    """AlpacaExchange with credentials"""
    return AlpacaExchange(test_settings, api_key="key", secret="secret")


@pytest.fixture
def btc_market(exchange, assets_response):
    """BTC/USD market built from the recorded asset list"""
    return exchange.market_index(exchange.list_markets(assets_response)).market("BTC/USD")


# ============================================
# Recorded Payloads
# ============================================

@pytest.fixture
def assets_response():
    """GET /v2/assets?asset_class=crypto"""
    return [
        {
            "id": "64bbff51-59d6-4b3c-9351-13ad85e3c752",
            "class": "crypto",
            "exchange": "FTXU",
            "symbol": "BTCUSD",
            "name": "Bitcoin",
            "status": "active",
            "tradable": True,
            "marginable": False,
            "shortable": False,
            "easy_to_borrow": False,
            "fractionable": True,
            "min_order_size": "0.0001",
            "min_trade_increment": "0.0001",
            "price_increment": "1",
        },
        {
            "id": "35f33a69-f5d6-4dc9-b158-4485e5e92e4b",
            "class": "crypto",
            "exchange": "FTXU",
            "symbol": "ETH/USD",
            "name": "Ethereum",
            "status": "active",
            "tradable": True,
        },
        {
            "id": "a1b2c3d4-0000-0000-0000-000000000000",
            "class": "crypto",
            "exchange": "FTXU",
            "symbol": "SHIBUSD",
            "name": "Shiba Inu",
            "status": "inactive",
            "tradable": False,
        },
    ]


@pytest.fixture
def quote_payload():
    """Latest best bid/offer (xbbo) body"""
    return {
        "t": "2022-06-14T13:05:22.642Z",
        "ax": "CBSE",
        "ap": "22163.42",
        "as": "0.10021214",
        "bx": "CBSE",
        "bp": "22160.03",
        "bs": "0.03923939",
    }


@pytest.fixture
def trade_payload():
    """Single trade print"""
    return {
        "t": "2022-06-14T05:00:00.027869Z",
        "x": "CBSE",
        "p": "21942.15",
        "s": "0.0001",
        "tks": "S",
        "i": 355681339,
    }


@pytest.fixture
def order_payload():
    """Accepted limit order as returned by POST /v2/orders"""
    return {
        "id": "6ecfcc34-4f2b-4f51-9a73-3a5a1fc1a9a3",
        "client_order_id": "tb_1c6c0a7d9d2e4c7f8a3b2f1e0d9c8b7a",
        "created_at": "2022-06-14T13:59:30.224Z",
        "updated_at": "2022-06-14T13:59:30.224Z",
        "submitted_at": "2022-06-14T13:59:30.221856828Z",
        "filled_at": None,
        "asset_class": "crypto",
        "symbol": "BTCUSD",
        "qty": "0.01",
        "filled_qty": "0",
        "filled_avg_price": None,
        "order_class": "",
        "order_type": "limit",
        "type": "limit",
        "side": "buy",
        "time_in_force": "day",
        "limit_price": "14000",
        "stop_price": None,
        "status": "accepted",
        "commission": "0.42",
    }
