"""
HTTPS transport for signed requests.

The response body is streamed through a pluggable sink so that oversized or
malformed chunks are rejected instead of being silently truncated.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Mapping, Optional

import requests

from .constants import DEFAULT_CONFIG, MAX_CHUNK_SIZE, MAX_RESPONSE_SIZE
from .exceptions import TransportError
from .request import WireRequest

logger = logging.getLogger(__name__)


class ResponseSink:
    """Interface for objects accumulating a streamed response body."""

    def write(self, chunk: bytes) -> int:
        raise NotImplementedError

    def getvalue(self) -> bytes:
        raise NotImplementedError


class ResponseBuffer(ResponseSink):
    """In-memory sink with per-chunk and total size limits."""

    def __init__(self, max_size: int = MAX_RESPONSE_SIZE):
        self.max_size = max_size
        self._parts = []
        self._size = 0

    def write(self, chunk: bytes) -> int:
        """
        Append a chunk.

        Returns:
            Number of bytes accepted

        Raises:
            TransportError: If the chunk is larger than MAX_CHUNK_SIZE or the
                buffer would grow past ``max_size``
        """
        try:
            size = len(chunk)
        except OverflowError as e:
            raise TransportError(f"response chunk size overflow: {e}", cause=e) from e

        if size > MAX_CHUNK_SIZE:
            raise TransportError(
                f"response chunk size {size} exceeds limit {MAX_CHUNK_SIZE}"
            )
        if self._size + size > self.max_size:
            raise TransportError(
                f"response size {self._size + size} exceeds limit {self.max_size}"
            )

        self._parts.append(bytes(chunk))
        self._size += size
        return size

    def getvalue(self) -> bytes:
        return b''.join(self._parts)

    def __len__(self):
        return self._size


@dataclass(frozen=True)
class RawResponse:
    """Undecoded response: status code, body bytes and headers."""

    status_code: int
    content: bytes
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class Transport:
    """
    Performs one HTTPS round trip per signed request.

    Args:
        timeout: Request timeout in seconds
        verify_tls: Validate server certificates (never disable outside development)
        chunk_size: Streaming read size in bytes
        max_response_size: Upper bound on accepted body size
        sink_factory: Callable building a fresh ResponseSink from ``max_response_size``
        session: Optional pre-configured ``requests.Session``
    """

    def __init__(self, timeout: float = DEFAULT_CONFIG['timeout'],
                 verify_tls: bool = DEFAULT_CONFIG['verify_tls'],
                 chunk_size: int = DEFAULT_CONFIG['chunk_size'],
                 max_response_size: int = DEFAULT_CONFIG['max_response_size'],
                 sink_factory: Callable[[int], ResponseSink] = ResponseBuffer,
                 session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.verify_tls = verify_tls
        self.chunk_size = chunk_size
        self.max_response_size = max_response_size
        self.sink_factory = sink_factory
        self.session = session or requests.Session()

        if not verify_tls:
            logger.warning("TLS certificate verification is disabled; use only for local debugging")

    def dispatch(self, wire_request: WireRequest) -> RawResponse:
        """
        Send the request and collect the full response body.

        Raises:
            TransportError: On any network, TLS, timeout or body accumulation failure
        """
        logger.debug(
            "dispatching %s %s nonce=%s",
            wire_request.method, wire_request.endpoint, wire_request.nonce
        )

        try:
            response = self.session.request(
                wire_request.method,
                wire_request.url,
                headers=dict(wire_request.headers),
                data=wire_request.body or None,
                timeout=self.timeout,
                verify=self.verify_tls,
                stream=True,
            )
        except requests.RequestException as e:
            raise TransportError(
                f"{wire_request.method} {wire_request.endpoint} failed: {e}",
                endpoint=wire_request.endpoint,
                cause=e,
            ) from e

        try:
            sink = self.sink_factory(self.max_response_size)
            for chunk in response.iter_content(chunk_size=self.chunk_size):
                if chunk:
                    sink.write(chunk)
        except TransportError as e:
            if e.endpoint is None:
                e.endpoint = wire_request.endpoint
            raise
        except requests.RequestException as e:
            raise TransportError(
                f"{wire_request.method} {wire_request.endpoint} failed while reading body: {e}",
                endpoint=wire_request.endpoint,
                cause=e,
            ) from e
        finally:
            response.close()

        content = sink.getvalue()
        logger.debug(
            "received HTTP %s from %s (%d bytes)",
            response.status_code, wire_request.endpoint, len(content)
        )
        return RawResponse(
            status_code=response.status_code,
            content=content,
            headers=dict(response.headers or {}),
        )

    def close(self):
        """Close HTTP session."""
        if self.session:
            self.session.close()
