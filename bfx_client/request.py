"""
Assembly of signed wire requests.
"""

import json
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping

from .constants import (
    CONTENT_TYPE_JSON,
    DEFAULT_BASE_URL,
    HEADER_API_KEY,
    HEADER_CONTENT_TYPE,
    HEADER_NONCE,
    HEADER_SIGNATURE,
)
from .credentials import Credentials
from .signer import Signer

SUPPORTED_METHODS = ('GET', 'POST')


@dataclass(frozen=True)
class WireRequest:
    """A fully signed request, ready for the transport."""

    method: str
    url: str
    endpoint: str
    headers: Mapping[str, str]
    body: bytes = b''

    @property
    def nonce(self) -> str:
        return self.headers[HEADER_NONCE]


def serialize_body(value: Any) -> bytes:
    """Serialize a request body exactly as it will be sent and signed."""
    if value is None:
        return b''
    if isinstance(value, bytes):
        return value
    if isinstance(value, str):
        return value.encode('utf-8')
    return json.dumps(value, separators=(',', ':')).encode('utf-8')


def build_request(credentials: Credentials, signer: Signer, method: str, endpoint: str,
                  body: Any = None, base_url: str = DEFAULT_BASE_URL) -> WireRequest:
    """
    Build a signed request.

    Every request is signed, public market-data endpoints included.

    Args:
        credentials: API key/secret pair (key goes into the headers)
        signer: Signer holding the same secret and the nonce sequence
        method: ``GET`` or ``POST``
        endpoint: Endpoint path relative to ``base_url``
        body: JSON-serializable value, pre-serialized ``str``/``bytes``, or None
        base_url: Root URL the endpoint is appended to

    Returns:
        WireRequest

    Raises:
        ValueError: On unsupported methods or a GET with a body
    """
    method = method.upper()
    if method not in SUPPORTED_METHODS:
        raise ValueError(f"unsupported method {method!r}, expected one of {SUPPORTED_METHODS}")

    payload = serialize_body(body)
    if method == 'GET' and payload:
        raise ValueError("GET requests cannot carry a body")

    nonce, signature = signer.sign(endpoint, payload)

    headers = MappingProxyType({
        HEADER_CONTENT_TYPE: CONTENT_TYPE_JSON,
        HEADER_NONCE: nonce,
        HEADER_API_KEY: credentials.api_key,
        HEADER_SIGNATURE: signature,
    })

    return WireRequest(
        method=method,
        url=base_url + endpoint,
        endpoint=endpoint,
        headers=headers,
        body=payload,
    )
