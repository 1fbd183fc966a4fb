"""
Constants for the Bitfinex client library.
Values follow the Bitfinex v2 REST authentication scheme.
"""

# HTTP Headers (authenticated endpoints)
HEADER_CONTENT_TYPE = "Content-Type"
HEADER_NONCE = "bfx-nonce"
HEADER_API_KEY = "bfx-apikey"
HEADER_SIGNATURE = "bfx-signature"

CONTENT_TYPE_JSON = "application/json"

# Prefix prepended to the endpoint when building the signature payload
API_VERSION_PREFIX = "/v2/"

DEFAULT_BASE_URL = "https://api-pub.bitfinex.com/"

# Environment variables read by Credentials.from_env / BitfinexClient.from_env
ENV_API_KEY = "BITFINEX_API_KEY"
ENV_API_SECRET = "BITFINEX_API_SECRET"
ENV_BASE_URL = "BITFINEX_BASE_URL"

# Endpoints
ENDPOINT_ORDERBOOK = "book/{symbol}/{precision}"
ENDPOINT_ORDER_SUBMIT = "auth/w/order/submit"
ENDPOINT_ORDER_UPDATE = "auth/w/order/update"
ENDPOINT_ORDER_CANCEL = "auth/w/order/cancel"
ENDPOINT_POSITIONS = "auth/r/positions"

DEFAULT_ORDER_TYPE = "EXCHANGE LIMIT"
DEFAULT_BOOK_PRECISION = "P0"

# Largest single chunk the response sink accepts (C int maximum)
MAX_CHUNK_SIZE = 2 ** 31 - 1
MAX_RESPONSE_SIZE = 32 * 1024 * 1024  # 32MB

# Default configuration values
DEFAULT_CONFIG = {
    'timeout': 30,                   # HTTP timeout in seconds
    'verify_tls': True,              # certificate validation
    'max_response_size': MAX_RESPONSE_SIZE,
    'chunk_size': 8192,              # streaming read size in bytes
}
