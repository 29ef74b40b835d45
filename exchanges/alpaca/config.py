"""
Alpaca Venue Configuration

Static venue metadata (tier URLs, API versions, trading defaults, precision
overrides) merged with deployment settings and per-instance overrides into
one frozen ``AlpacaConfig`` at construction time.

Usage:
    config = AlpacaConfig.from_settings(settings, sandbox=True)
    config.base_url(ApiTier.PRIVATE)
    # 'https://paper-api.alpaca.markets/v2'
"""

from decimal import Decimal
from enum import Enum, unique
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.config import Settings
from .precision import PRECISION_TABLE, SymbolPrecision


@unique
class ApiTier(str, Enum):
    """API partition with its own base URL, version and auth requirement."""

    PUBLIC = "public"
    PRIVATE = "private"
    MARKET_DATA = "market_data"

    @classmethod
    def from_value(cls, value: Any) -> "ApiTier":
        """
        Create from string value; "crypto" is accepted for the market data tier.

        Raises:
            ValueError: If value is not a known tier
        """
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        if text == "crypto":
            return cls.MARKET_DATA
        return cls(text)

    @property
    def authenticated(self) -> bool:
        """Private and market data tiers carry the key headers."""
        return self in (ApiTier.PRIVATE, ApiTier.MARKET_DATA)


class TierUrls(BaseModel):
    """URL templates per tier; may contain {hostname} and {version}."""

    model_config = ConfigDict(frozen=True)

    public: str
    private: str
    market_data: str

    def for_tier(self, tier: ApiTier) -> str:
        return getattr(self, tier.value)


class TierVersions(BaseModel):
    """API version string per tier."""

    model_config = ConfigDict(frozen=True)

    public: str = "v2"
    private: str = "v2"
    market_data: str = "v1beta1"

    def for_tier(self, tier: ApiTier) -> str:
        return getattr(self, tier.value)


LIVE_URLS = TierUrls(
    public="https://api.{hostname}/{version}",
    private="https://api.{hostname}/{version}",
    market_data="https://data.{hostname}/{version}",
)

SANDBOX_URLS = TierUrls(
    public="https://paper-api.{hostname}/{version}",
    private="https://paper-api.{hostname}/{version}",
    market_data="https://data.{hostname}/{version}",
)

class AlpacaConfig(BaseModel):
    """
    Frozen Alpaca venue configuration.

    Attributes:
        id: Venue identifier used in logs and error feedback
        hostname: Substituted into {hostname}
        sandbox: Select paper-trading URLs
        urls / sandbox_urls: Tier URL templates
        versions: API version per tier
        api_key / secret: Credentials for authenticated tiers
        default_exchange: Source exchange for latest-quote requests
        default_time_in_force: Used when an order omits time in force
        client_order_id_prefix: Prefix for generated client order ids
        quote_width: Quote currency width for undelimited venue ids
        settlement_currency: Currency commissions are charged in
        maker / taker: Base-tier fee rates
        precision: Per-symbol precision overrides keyed by canonical symbol
    """

    model_config = ConfigDict(frozen=True)

    id: str = "alpaca"
    hostname: str = "alpaca.markets"
    sandbox: bool = False
    urls: TierUrls = LIVE_URLS
    sandbox_urls: TierUrls = SANDBOX_URLS
    versions: TierVersions = Field(default_factory=TierVersions)

    api_key: str = ""
    secret: str = Field(default="", repr=False)

    default_exchange: str = "CBSE"
    default_time_in_force: str = "day"
    client_order_id_prefix: str = "tb_"

    quote_width: int = Field(default=3, ge=1)
    settlement_currency: str = "USD"
    maker: Decimal = Decimal("0.003")
    taker: Decimal = Decimal("0.003")

    precision: Mapping[str, SymbolPrecision] = Field(
        default_factory=lambda: PRECISION_TABLE
    )

    @field_validator("precision", mode="after")
    @classmethod
    def freeze_precision(cls, v: Mapping[str, SymbolPrecision]) -> Mapping[str, SymbolPrecision]:
        """Wrap the precision table in a read-only mapping"""
        return MappingProxyType(dict(v))

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, **overrides: Any) -> "AlpacaConfig":
        """
        Build the venue configuration from deployment settings.

        Args:
            settings: Loaded Settings (defaults to the global instance)
            **overrides: Field values that replace both defaults and settings;
                         a ``precision`` override is merged into the table
                         rather than replacing it

        Example:
            >>> config = AlpacaConfig.from_settings(api_key="key", secret="secret")
        """
        if settings is None:
            from core.config import settings as global_settings
            settings = global_settings

        values: Dict[str, Any] = {
            "hostname": settings.alpaca_hostname,
            "sandbox": settings.alpaca_sandbox,
            "api_key": settings.alpaca_api_key,
            "secret": settings.alpaca_secret_key,
            "default_exchange": settings.alpaca_default_exchange,
            "default_time_in_force": settings.alpaca_default_time_in_force.lower(),
            "client_order_id_prefix": settings.alpaca_client_order_id_prefix,
        }

        extra_precision = overrides.pop("precision", None)
        values.update(overrides)
        if extra_precision:
            table = dict(PRECISION_TABLE)
            table.update(extra_precision)
            values["precision"] = table

        return cls.model_validate(values)

    def base_url(self, tier: ApiTier) -> str:
        """Resolved base URL for a tier, placeholders substituted."""
        templates = self.sandbox_urls if self.sandbox else self.urls
        return templates.for_tier(tier).format(
            hostname=self.hostname,
            version=self.versions.for_tier(tier),
        )

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key and self.secret)
