"""
Unit Tests for the Alpaca Request Signer

These tests verify that the signer:
- Resolves tier base URLs for live and paper trading
- Substitutes path placeholders and consumes those params
- Puts GET/DELETE params in the query string and others in a JSON body
- Adds key headers only for authenticated tiers
- Never mutates the caller's params

Run with:
    pytest tests/unit/test_signer.py -v
"""

import json
from decimal import Decimal

import pytest

from core.errors import AuthenticationError, PermissionDenied
from exchanges.alpaca.config import AlpacaConfig, ApiTier
from exchanges.alpaca.signer import (
    KEY_ID_HEADER,
    SECRET_KEY_HEADER,
    extract_params,
    implode_params,
    sign,
)


class TestPathParams:
    """Tests for placeholder handling"""

    def test_extract_params(self):
        """Verify placeholder names are listed in order"""
        assert extract_params("crypto/{symbol}/trades") == ["symbol"]
        assert extract_params("orders") == []

    def test_implode_params_quotes_values(self):
        """Verify values are URL-quoted into the path"""
        assert implode_params("crypto/{symbol}/bars", {"symbol": "BTC/USD"}) == "crypto/BTC%2FUSD/bars"

    def test_missing_placeholder_value_raises(self):
        """Verify a placeholder without a value is an error"""
        with pytest.raises(ValueError):
            implode_params("orders/{order_id}", {})


class TestBaseUrls:
    """Tests for tier URL resolution"""

    @pytest.mark.parametrize("tier,expected", [
        (ApiTier.PUBLIC, "https://api.alpaca.markets/v2"),
        (ApiTier.PRIVATE, "https://api.alpaca.markets/v2"),
        (ApiTier.MARKET_DATA, "https://data.alpaca.markets/v1beta1"),
    ])
    def test_live_urls(self, config, tier, expected):
        """Verify live URLs substitute hostname and version"""
        assert config.base_url(tier) == expected

    def test_sandbox_urls(self, test_settings):
        """Verify sandbox selects the paper-trading host"""
        config = AlpacaConfig.from_settings(test_settings, sandbox=True)
        assert config.base_url(ApiTier.PRIVATE) == "https://paper-api.alpaca.markets/v2"
        assert config.base_url(ApiTier.MARKET_DATA) == "https://data.alpaca.markets/v1beta1"

    def test_custom_hostname(self, test_settings):
        """Verify the hostname setting is substituted"""
        config = AlpacaConfig.from_settings(test_settings, hostname="example.test")
        assert config.base_url(ApiTier.PUBLIC) == "https://api.example.test/v2"

    def test_crypto_alias(self):
        """Verify 'crypto' is accepted for the market data tier"""
        assert ApiTier.from_value("crypto") is ApiTier.MARKET_DATA
        assert ApiTier.from_value("PRIVATE") is ApiTier.PRIVATE
        with pytest.raises(ValueError):
            ApiTier.from_value("futures")


class TestSign:
    """Tests for the full signing step"""

    def test_get_puts_params_in_query(self, config):
        """Verify GET params become an ordered query string with no body"""
        request = sign("orders", ApiTier.PRIVATE, "GET", {"a": 1, "b": 2}, config)

        assert request.method == "GET"
        assert request.url == "https://api.alpaca.markets/v2/orders?a=1&b=2"
        assert request.body is None
        assert "Content-Type" not in request.headers

    def test_post_puts_params_in_json_body(self, config):
        """Verify POST params become a compact JSON body"""
        request = sign("orders", ApiTier.PRIVATE, "POST", {"a": 1, "b": 2}, config)

        assert request.url == "https://api.alpaca.markets/v2/orders"
        assert "?" not in request.url
        assert json.loads(request.body) == {"a": 1, "b": 2}
        assert request.body == '{"a":1,"b":2}'
        assert request.headers["Content-Type"] == "application/json"

    def test_delete_substitutes_path_and_consumes_param(self, config):
        """Verify a consumed path param is not repeated in the query"""
        request = sign("orders/{order_id}", ApiTier.PRIVATE, "DELETE", {"order_id": "61e6"}, config)

        assert request.url == "https://api.alpaca.markets/v2/orders/61e6"
        assert request.method == "DELETE"
        assert request.body is None

    def test_private_tier_adds_key_headers(self, config):
        """Verify both key headers are present for private endpoints"""
        request = sign("account", ApiTier.PRIVATE, "GET", None, config)

        assert request.headers[KEY_ID_HEADER] == "key"
        assert request.headers[SECRET_KEY_HEADER] == "secret"

    def test_market_data_tier_adds_key_headers(self, config):
        """Verify market data is authenticated too"""
        request = sign("crypto/{symbol}/trades", "crypto", "GET", {"symbol": "BTCUSD"}, config)

        assert request.url == "https://data.alpaca.markets/v1beta1/crypto/BTCUSD/trades"
        assert KEY_ID_HEADER in request.headers

    def test_public_tier_has_no_key_headers(self, config):
        """Verify public endpoints never carry credentials"""
        request = sign("clock", ApiTier.PUBLIC, "GET", None, config)

        assert request.headers == {}
        assert request.url == "https://api.alpaca.markets/v2/clock"

    def test_missing_credentials_raise(self, test_settings):
        """Verify authenticated tiers without keys fail before building"""
        config = AlpacaConfig.from_settings(test_settings, api_key="", secret="")

        with pytest.raises(AuthenticationError) as exc_info:
            sign("orders", ApiTier.PRIVATE, "GET", None, config)
        assert isinstance(exc_info.value, PermissionDenied)

    def test_public_tier_without_credentials(self, test_settings):
        """Verify public endpoints work without keys"""
        config = AlpacaConfig.from_settings(test_settings, api_key="", secret="")
        request = sign("clock", ApiTier.PUBLIC, "GET", None, config)
        assert request.headers == {}

    def test_params_are_not_mutated(self, config):
        """Verify the caller's dict is left untouched"""
        params = {"order_id": "61e6", "nested": True}
        sign("orders/{order_id}", ApiTier.PRIVATE, "DELETE", params, config)
        assert params == {"order_id": "61e6", "nested": True}

    def test_none_values_are_dropped(self, config):
        """Verify unset optional params are not sent"""
        request = sign("orders", ApiTier.PRIVATE, "GET", {"status": "open", "limit": None}, config)
        assert request.url.endswith("/orders?status=open")

    def test_scalar_encoding(self, config):
        """Verify booleans, Decimals and lists use the venue's encoding"""
        request = sign(
            "crypto/latest/orderbooks",
            ApiTier.MARKET_DATA,
            "GET",
            {"symbols": ["BTCUSD", "ETHUSD"], "nested": False, "qty": Decimal("1E+1")},
            config,
        )
        assert request.url.endswith("?symbols=BTCUSD%2CETHUSD&nested=false&qty=10")

    def test_decimal_in_json_body(self, config):
        """Verify Decimals are written as plain strings in JSON bodies"""
        request = sign("orders", ApiTier.PRIVATE, "POST", {"qty": Decimal("0.0100")}, config)
        assert json.loads(request.body) == {"qty": "0.01"}

    def test_method_is_uppercased(self, config):
        """Verify lowercase verbs are accepted"""
        request = sign("orders", ApiTier.PRIVATE, "get", {"a": 1}, config)
        assert request.method == "GET"
        assert request.url.endswith("?a=1")

    def test_deterministic(self, config):
        """Verify identical inputs give identical requests"""
        first = sign("orders", ApiTier.PRIVATE, "POST", {"symbol": "BTCUSD", "qty": "1"}, config)
        second = sign("orders", ApiTier.PRIVATE, "POST", {"symbol": "BTCUSD", "qty": "1"}, config)
        assert first == second
