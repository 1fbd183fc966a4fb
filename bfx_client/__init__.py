"""
Bitfinex REST Client Library

A Python client library that signs, sends and decodes requests for the
Bitfinex v2 REST API (HMAC-SHA384 over a monotonic nonce).

Example usage:
    from bfx_client import BitfinexClient

    client = BitfinexClient.from_env()
    book = client.get_orderbook("tBTCUSD")
"""

from .client import BitfinexClient
from .credentials import Credentials
from .decoder import decode, is_error_response, order_ids, raise_for_api_error
from .exceptions import (
    BitfinexClientError,
    ConfigurationError,
    TransportError,
    DecodeError,
    ResponseShapeError,
    ApiError
)
from .request import WireRequest, build_request, serialize_body
from .signer import NonceGenerator, Signer, compute_signature
from .transport import RawResponse, ResponseBuffer, ResponseSink, Transport
from .constants import (
    HEADER_NONCE,
    HEADER_API_KEY,
    HEADER_SIGNATURE,
    DEFAULT_BASE_URL,
    DEFAULT_CONFIG,
    MAX_CHUNK_SIZE
)

__version__ = "1.0.0"
__all__ = [
    "BitfinexClient",
    "Credentials",
    "BitfinexClientError",
    "ConfigurationError",
    "TransportError",
    "DecodeError",
    "ResponseShapeError",
    "ApiError",
    "NonceGenerator",
    "Signer",
    "compute_signature",
    "WireRequest",
    "build_request",
    "serialize_body",
    "Transport",
    "ResponseSink",
    "ResponseBuffer",
    "RawResponse",
    "decode",
    "is_error_response",
    "raise_for_api_error",
    "order_ids",
    "HEADER_NONCE",
    "HEADER_API_KEY",
    "HEADER_SIGNATURE",
    "DEFAULT_BASE_URL",
    "DEFAULT_CONFIG",
    "MAX_CHUNK_SIZE"
]
