"""
Custom exceptions for the Bitfinex client library.
"""


class BitfinexClientError(Exception):
    """Base exception for Bitfinex client errors."""
    pass


class ConfigurationError(BitfinexClientError):
    """Raised when credentials or client configuration are missing or invalid."""
    pass


class TransportError(BitfinexClientError):
    """Raised when the HTTP exchange itself fails (DNS, TLS, timeout, oversized body)."""

    def __init__(self, message, endpoint=None, cause=None):
        super().__init__(message)
        self.endpoint = endpoint
        self.cause = cause


class DecodeError(BitfinexClientError):
    """Raised when a response body is not valid JSON."""

    def __init__(self, message, endpoint=None):
        super().__init__(message)
        self.endpoint = endpoint


class ResponseShapeError(DecodeError):
    """Raised when a valid JSON document does not have the expected layout."""
    pass


class ApiError(BitfinexClientError):
    """Raised when the exchange answers with a well-formed error document."""

    def __init__(self, message, code=None, endpoint=None, status_code=None, document=None):
        self.message = message
        self.code = code
        self.endpoint = endpoint
        self.status_code = status_code
        self.document = document
        super().__init__(self._describe())

    def _describe(self):
        parts = []
        if self.endpoint:
            parts.append(self.endpoint)
        if self.status_code is not None:
            parts.append(f"HTTP {self.status_code}")
        if self.code is not None:
            parts.append(f"code {self.code}")
        prefix = ", ".join(parts)
        return f"{prefix}: {self.message}" if prefix else str(self.message)
