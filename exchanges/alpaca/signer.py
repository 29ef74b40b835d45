"""
Alpaca Request Signer

Builds the concrete HTTP request for a logical endpoint. Alpaca does not use
HMAC signatures: authenticated tiers carry the key id and secret as two
static headers.

Steps:
    1. Resolve the tier base URL (live or paper) and substitute
       {hostname} and {version}
    2. Substitute {param} placeholders in the path from ``params`` and drop
       the consumed keys
    3. GET/DELETE: urlencode the remaining params as the query string
       Other verbs: JSON-encode them as the body with a JSON content type
    4. Private and market data tiers add APCA-API-KEY-ID / APCA-API-SECRET-KEY

Signing is a pure function of its inputs and the frozen configuration: no
network I/O, no shared state, and the caller's ``params`` are not mutated.

Example:
    >>> sign("orders/{order_id}", ApiTier.PRIVATE, "DELETE", {"order_id": "61e6"}, config)
    SignedRequest(url='https://api.alpaca.markets/v2/orders/61e6', method='DELETE', ...)
"""

import json
import re
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union
from urllib.parse import quote, urlencode

from core.errors import AuthenticationError
from core.logging import log_api_request
from core.schemas import SignedRequest
from core.utils.numbers import decimal_to_string
from .config import AlpacaConfig, ApiTier


KEY_ID_HEADER = "APCA-API-KEY-ID"
SECRET_KEY_HEADER = "APCA-API-SECRET-KEY"

QUERY_METHODS = ("GET", "DELETE")

_PLACEHOLDER = re.compile(r"\{([^{}]+)\}")


def extract_params(path: str) -> List[str]:
    """
    Names of the {param} placeholders in a path template.

    Example:
        >>> extract_params("crypto/{symbol}/trades")
        ['symbol']
    """
    return _PLACEHOLDER.findall(path)


def implode_params(path: str, params: Mapping[str, Any]) -> str:
    """
    Substitute {param} placeholders from ``params``.

    Raises:
        ValueError: If a placeholder has no value in params
    """
    def replace(match: "re.Match[str]") -> str:
        name = match.group(1)
        if params.get(name) is None:
            raise ValueError(f"Missing path parameter '{name}' for '{path}'")
        return quote(_encode_scalar(params[name]), safe="")

    return _PLACEHOLDER.sub(replace, path)


def _encode_scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Decimal):
        return decimal_to_string(value)
    return str(value)


def _query_pairs(query: Mapping[str, Any]) -> List[Tuple[str, str]]:
    pairs: List[Tuple[str, str]] = []
    for key, value in query.items():
        if isinstance(value, (list, tuple)):
            # Alpaca takes comma separated lists (symbols=BTCUSD,ETHUSD)
            pairs.append((key, ",".join(_encode_scalar(v) for v in value)))
        else:
            pairs.append((key, _encode_scalar(value)))
    return pairs


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return decimal_to_string(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def sign(
    path: str,
    api: Union[ApiTier, str],
    method: str,
    params: Optional[Mapping[str, Any]],
    config: AlpacaConfig,
) -> SignedRequest:
    """
    Build the final request for a logical endpoint.

    Args:
        path: Endpoint template relative to the tier root (e.g., "orders/{order_id}")
        api: API tier (ApiTier or its string value)
        method: HTTP verb
        params: Path and request parameters
        config: Frozen venue configuration

    Returns:
        SignedRequest with url, method, headers and body

    Raises:
        AuthenticationError: If an authenticated tier has no credentials
        ValueError: If a path placeholder has no value
    """
    tier = ApiTier.from_value(api)
    method = method.upper()
    params = dict(params or {})

    endpoint = "/" + implode_params(path.lstrip("/"), params)
    consumed = set(extract_params(path))
    query = {k: v for k, v in params.items() if k not in consumed and v is not None}

    headers: Dict[str, str] = {}
    if tier.authenticated:
        if not config.has_credentials:
            raise AuthenticationError(
                f"{config.id} requires apiKey and secret for the {tier.value} API",
                exchange=config.id,
            )
        headers[KEY_ID_HEADER] = config.api_key
        headers[SECRET_KEY_HEADER] = config.secret

    log_api_request(config.id, method, endpoint, query)

    body: Optional[str] = None
    if query:
        if method in QUERY_METHODS:
            endpoint += "?" + urlencode(_query_pairs(query))
        else:
            body = json.dumps(query, separators=(",", ":"), default=_json_default)
            headers["Content-Type"] = "application/json"

    return SignedRequest(
        url=config.base_url(tier) + endpoint,
        method=method,
        headers=headers,
        body=body,
    )
