"""
Bitfinex REST client.

This module ties the request pipeline together: every call is signed,
dispatched once over HTTPS and decoded into the parsed JSON document.
"""

import logging
import math
import os
import threading
from decimal import Decimal
from typing import Any, Mapping, Optional

from .constants import (
    DEFAULT_BASE_URL,
    DEFAULT_BOOK_PRECISION,
    DEFAULT_CONFIG,
    DEFAULT_ORDER_TYPE,
    ENDPOINT_ORDER_CANCEL,
    ENDPOINT_ORDER_SUBMIT,
    ENDPOINT_ORDER_UPDATE,
    ENDPOINT_ORDERBOOK,
    ENDPOINT_POSITIONS,
    ENV_BASE_URL,
    MAX_CHUNK_SIZE,
)
from .credentials import Credentials
from .decoder import (
    NOTIFICATION_TEXT_INDEX,
    decode,
    notification_status,
    raise_for_api_error,
)
from .exceptions import ApiError, ConfigurationError, DecodeError, TransportError
from .request import WireRequest, build_request
from .signer import Signer
from .transport import Transport

logger = logging.getLogger(__name__)

_ERROR_SNIPPET_LIMIT = 200


def _decimal_string(value) -> str:
    """Render a number the way the exchange expects: float text, never exponent notation."""
    value = float(value)
    if not math.isfinite(value):
        raise ValueError(f"amounts and prices must be finite, got {value!r}")
    return format(Decimal(repr(value)), "f")


class BitfinexClient:
    """
    Authenticated client for the Bitfinex v2 REST API.

    Holds one credential pair and one nonce sequence for its lifetime. Calls
    are synchronous. Signing and dispatch happen under one lock, so threads
    sharing an instance send their requests in nonce order, one at a time.
    """

    def __init__(self, api_key: str, api_secret: str, base_url: str = DEFAULT_BASE_URL, **config):
        """
        Initialize the client.

        Args:
            api_key: Bitfinex API key
            api_secret: Bitfinex API secret
            base_url: Root URL endpoints are appended to
            **config: Configuration options (timeout, verify_tls, max_response_size, chunk_size)
        """
        self.credentials = Credentials(api_key, api_secret)
        self.base_url = base_url if base_url.endswith('/') else base_url + '/'

        # Merge default config with user overrides
        self.config = {**DEFAULT_CONFIG, **config}
        self._validate_config()

        self.signer = Signer(self.credentials.api_secret)
        self._dispatch_lock = threading.Lock()
        self.transport = Transport(
            timeout=self.config['timeout'],
            verify_tls=self.config['verify_tls'],
            chunk_size=self.config['chunk_size'],
            max_response_size=self.config['max_response_size'],
        )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **config) -> "BitfinexClient":
        """
        Build a client from ``BITFINEX_API_KEY``/``BITFINEX_API_SECRET``.

        ``BITFINEX_BASE_URL`` overrides the base URL when set.

        Raises:
            ConfigurationError: If credentials are missing
        """
        if environ is None:
            environ = os.environ
        credentials = Credentials.from_env(environ)
        base_url = environ.get(ENV_BASE_URL) or DEFAULT_BASE_URL
        return cls(credentials.api_key, credentials.api_secret, base_url, **config)

    def _validate_config(self):
        """Validate client configuration."""
        unknown = set(self.config) - set(DEFAULT_CONFIG)
        if unknown:
            raise ConfigurationError(f"unknown configuration options: {', '.join(sorted(unknown))}")

        if not self.base_url.startswith(('https://', 'http://')):
            raise ConfigurationError(f"base_url must be an http(s) URL, got {self.base_url!r}")

        if self.config['timeout'] is None or self.config['timeout'] <= 0:
            raise ConfigurationError("timeout must be positive")

        if self.config['max_response_size'] <= 0:
            raise ConfigurationError("max_response_size must be positive")

        if not 0 < self.config['chunk_size'] <= MAX_CHUNK_SIZE:
            raise ConfigurationError(f"chunk_size must be between 1 and {MAX_CHUNK_SIZE}")

        if not isinstance(self.config['verify_tls'], bool):
            raise ConfigurationError("verify_tls must be a boolean")

    def build(self, method: str, endpoint: str, body: Any = None) -> WireRequest:
        """Build a signed request without sending it."""
        return build_request(self.credentials, self.signer, method, endpoint, body, self.base_url)

    def request(self, method: str, endpoint: str, body: Any = None) -> Any:
        """
        Sign, send and decode one request.

        Args:
            method: ``GET`` or ``POST``
            endpoint: Endpoint path, e.g. ``auth/r/positions``
            body: JSON-serializable body for POST requests

        Returns:
            Parsed JSON document

        Raises:
            TransportError: Network failure, or a non-2xx answer without a JSON body
            DecodeError: 2xx answer whose body is not valid JSON
            ApiError: Exchange-reported error
        """
        # a later nonce must not reach the exchange before an earlier one
        with self._dispatch_lock:
            wire_request = self.build(method, endpoint, body)
            raw = self.transport.dispatch(wire_request)

        try:
            document = decode(raw.content, endpoint=endpoint)
        except DecodeError as e:
            if raw.ok:
                raise
            snippet = raw.content[:_ERROR_SNIPPET_LIMIT].decode('utf-8', errors='replace')
            raise TransportError(
                f"{wire_request.method} {endpoint} returned HTTP {raw.status_code}: {snippet}",
                endpoint=endpoint,
                cause=e,
            ) from e

        try:
            raise_for_api_error(document, endpoint=endpoint, status_code=raw.status_code)
        except ApiError as e:
            logger.debug("exchange rejected %s %s: %s", wire_request.method, endpoint, e)
            raise
        if not raw.ok:
            raise ApiError(
                f"unexpected HTTP status {raw.status_code}",
                endpoint=endpoint,
                status_code=raw.status_code,
                document=document,
            )
        return document

    def get(self, endpoint: str) -> Any:
        """Make authenticated GET request."""
        return self.request('GET', endpoint)

    def post(self, endpoint: str, json: Any = None) -> Any:
        """Make authenticated POST request."""
        return self.request('POST', endpoint, json)

    def _order_request(self, endpoint: str, body: Mapping[str, Any]) -> Any:
        notification = self.post(endpoint, body)
        if notification_status(notification) == 'ERROR':
            text = notification[NOTIFICATION_TEXT_INDEX] if len(notification) > NOTIFICATION_TEXT_INDEX else None
            raise ApiError(
                text or "order rejected",
                endpoint=endpoint,
                document=notification,
            )
        return notification

    def get_orderbook(self, symbol: str, precision: str = DEFAULT_BOOK_PRECISION) -> Any:
        """Fetch the order book for ``symbol`` at the given price precision."""
        return self.get(ENDPOINT_ORDERBOOK.format(symbol=symbol, precision=precision))

    def place_order(self, symbol: str, amount: float, price: float,
                    order_type: str = DEFAULT_ORDER_TYPE) -> Any:
        """
        Submit a new order.

        Amount and price are sent as decimal strings; a negative amount sells.

        Returns:
            Order notification (see ``decoder.order_ids``)
        """
        body = {
            "type": order_type,
            "symbol": symbol,
            "amount": _decimal_string(amount),
            "price": _decimal_string(price),
        }
        return self._order_request(ENDPOINT_ORDER_SUBMIT, body)

    def modify_order(self, order_id: int, price: float) -> Any:
        """Change the price of an open order."""
        body = {
            "id": order_id,
            "price": _decimal_string(price),
        }
        return self._order_request(ENDPOINT_ORDER_UPDATE, body)

    def cancel_order(self, order_id: int) -> Any:
        """Cancel an open order."""
        return self._order_request(ENDPOINT_ORDER_CANCEL, {"id": order_id})

    def get_positions(self) -> Any:
        """List active positions."""
        return self.post(ENDPOINT_POSITIONS)

    def close(self):
        """Close HTTP session."""
        self.transport.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()

    def __repr__(self):
        return f"{type(self).__name__}(base_url={self.base_url!r})"
