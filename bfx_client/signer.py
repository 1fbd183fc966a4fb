"""
Nonce generation and HMAC-SHA384 request signing.

Bitfinex authenticates a request by an HMAC-SHA384 signature over
``"/v2/" + endpoint + nonce + body``, keyed with the API secret. The nonce
must strictly increase for every request made with the same API key.
"""

import hashlib
import hmac
import threading
import time
from typing import Callable, Optional, Tuple, Union

from .constants import API_VERSION_PREFIX


class NonceGenerator:
    """
    Thread-safe source of strictly increasing millisecond nonces.

    When the clock does not advance past the last issued value (two calls in
    the same millisecond, or the clock stepping backwards) the previous nonce
    is incremented instead.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._last = 0
        self._lock = threading.Lock()

    def next(self) -> str:
        """Issue the next nonce as a decimal string."""
        with self._lock:
            candidate = int(self._clock() * 1000)
            if candidate <= self._last:
                candidate = self._last + 1
            self._last = candidate
            return str(candidate)

    @property
    def last(self) -> int:
        """Most recently issued nonce (0 before the first call)."""
        return self._last


def _as_bytes(body: Union[str, bytes, None]) -> bytes:
    if body is None:
        return b''
    if isinstance(body, bytes):
        return body
    return body.encode('utf-8')


def build_signature_payload(endpoint: str, nonce: str, body: Union[str, bytes, None] = '') -> bytes:
    """Return the canonical bytes the exchange recomputes server-side; the body is used as sent."""
    prefix = f"{API_VERSION_PREFIX}{endpoint}{nonce}".encode('utf-8')
    return prefix + _as_bytes(body)


def compute_signature(secret: str, endpoint: str, nonce: str,
                      body: Union[str, bytes, None] = '') -> str:
    """
    Generate the HMAC-SHA384 signature for one request.

    Args:
        secret: API secret
        endpoint: Endpoint path without the version prefix
        nonce: Nonce string sent in the ``bfx-nonce`` header
        body: Exact request body (empty for GET)

    Returns:
        Lowercase hex digest, 96 characters
    """
    payload = build_signature_payload(endpoint, nonce, body)
    mac = hmac.new(
        secret.encode('utf-8'),
        payload,
        hashlib.sha384
    )
    return mac.hexdigest()


class Signer:
    """Signs requests for a single API secret with its own nonce sequence."""

    def __init__(self, secret: str, nonce_generator: Optional[NonceGenerator] = None):
        self._secret = secret
        self.nonce_generator = nonce_generator or NonceGenerator()

    def sign(self, endpoint: str, body: Union[str, bytes, None] = '') -> Tuple[str, str]:
        """
        Sign a request with a freshly issued nonce.

        Returns:
            Tuple of (nonce, signature)

        Raises:
            ValueError: If the endpoint carries a leading slash or version prefix
        """
        _check_endpoint(endpoint)
        nonce = self.nonce_generator.next()
        return nonce, compute_signature(self._secret, endpoint, nonce, body)

    def __repr__(self):
        return f"{type(self).__name__}(last_nonce={self.nonce_generator.last})"


def _check_endpoint(endpoint: str):
    if not endpoint:
        raise ValueError("endpoint cannot be empty")
    if endpoint.startswith('/'):
        raise ValueError(f"endpoint must be relative, got {endpoint!r}")
    if endpoint.startswith(API_VERSION_PREFIX.lstrip('/')):
        raise ValueError(f"endpoint must not include the {API_VERSION_PREFIX!r} prefix")
