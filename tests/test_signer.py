"""
Unit tests for nonce generation and request signing.
"""

import hashlib
import hmac
import threading

import pytest

from bfx_client import NonceGenerator, Signer, compute_signature
from bfx_client.signer import build_signature_payload


class TestNonceGenerator:
    """Test monotonic nonce issuance."""

    def test_millisecond_resolution(self):
        """Test nonce is the clock in whole milliseconds."""
        generator = NonceGenerator(clock=lambda: 1700000000.123456)

        assert generator.next() == "1700000000123"

    def test_same_millisecond_increments(self):
        """Test repeated clock values still yield increasing nonces."""
        generator = NonceGenerator(clock=lambda: 1700000000.0)

        assert generator.next() == "1700000000000"
        assert generator.next() == "1700000000001"
        assert generator.next() == "1700000000002"

    def test_clock_going_backwards(self):
        """Test a clock step backwards never reuses or lowers a nonce."""
        readings = iter([5.0, 2.0, 6.0])
        generator = NonceGenerator(clock=lambda: next(readings))

        assert generator.next() == "5000"
        assert generator.next() == "5001"
        assert generator.next() == "6000"

    def test_format(self):
        """Test nonce is a plain positive decimal string."""
        nonce = NonceGenerator().next()

        assert nonce.isdigit()
        assert str(int(nonce)) == nonce
        assert int(nonce) > 0

    def test_sequential_monotonic(self):
        """Test real clock nonces strictly increase."""
        generator = NonceGenerator()
        nonces = [int(generator.next()) for _ in range(1000)]

        assert all(b > a for a, b in zip(nonces, nonces[1:]))
        assert generator.last == nonces[-1]

    def test_concurrent_unique(self):
        """Test nonces stay unique and ordered per thread under concurrency."""
        generator = NonceGenerator()
        results = {}

        def worker(index):
            results[index] = [int(generator.next()) for _ in range(200)]

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        issued = [nonce for values in results.values() for nonce in values]
        assert len(issued) == len(set(issued)) == 1600
        for values in results.values():
            assert all(b > a for a, b in zip(values, values[1:]))


class TestSignature:
    """Test HMAC-SHA384 signature computation."""

    def test_payload(self):
        """Test canonical payload layout."""
        payload = build_signature_payload("auth/w/order/cancel", "1700000000000", '{"id":1}')

        assert payload == b'/v2/auth/w/order/cancel1700000000000{"id":1}'

    def test_payload_without_body(self):
        """Test empty and missing bodies add nothing."""
        assert build_signature_payload("auth/r/positions", "1") == b"/v2/auth/r/positions1"
        assert build_signature_payload("auth/r/positions", "1", None) == b"/v2/auth/r/positions1"

    def test_known_value(self):
        """Test signature equals HMAC-SHA384 of the canonical payload."""
        signature = compute_signature("secret", "auth/r/positions", "1700000000000")

        expected = hmac.new(
            b"secret",
            b"/v2/auth/r/positions1700000000000",
            hashlib.sha384
        ).hexdigest()
        assert signature == expected

    def test_format(self):
        """Test signature is 96 lowercase hex characters."""
        signature = compute_signature("secret", "book/tBTCUSD/P0", "1")

        assert len(signature) == 96
        assert signature == signature.lower()
        int(signature, 16)  # Should not raise

    def test_deterministic(self):
        """Test same inputs give the same signature."""
        first = compute_signature("secret", "auth/w/order/submit", "42", '{"a":1}')
        second = compute_signature("secret", "auth/w/order/submit", "42", '{"a":1}')

        assert first == second

    def test_bytes_body(self):
        """Test bytes bodies sign the same as their text."""
        assert compute_signature("s", "e", "1", b'{"a":1}') == compute_signature("s", "e", "1", '{"a":1}')

    def test_non_utf8_bytes_body(self):
        """Test raw bytes bodies are signed exactly as sent."""
        body = b'{"note":"\xff\xfe"}'
        signature = compute_signature("secret", "auth/w/order/submit", "42", body)

        expected = hmac.new(
            b"secret",
            b"/v2/auth/w/order/submit42" + body,
            hashlib.sha384
        ).hexdigest()
        assert signature == expected

    @pytest.mark.parametrize("changed", [
        ("other-secret", "auth/w/order/submit", "42", '{"a":1}'),
        ("secret", "auth/w/order/update", "42", '{"a":1}'),
        ("secret", "auth/w/order/submit", "43", '{"a":1}'),
        ("secret", "auth/w/order/submit", "42", '{"a":2}'),
    ])
    def test_any_input_changes_signature(self, changed):
        """Test changing secret, endpoint, nonce or body changes the signature."""
        base = compute_signature("secret", "auth/w/order/submit", "42", '{"a":1}')

        assert compute_signature(*changed) != base


class TestSigner:
    """Test the per-secret signer."""

    def test_sign(self):
        """Test sign returns a fresh nonce and its signature."""
        signer = Signer("secret", NonceGenerator(clock=lambda: 1.0))

        nonce, signature = signer.sign("auth/r/positions")

        assert nonce == "1000"
        assert signature == compute_signature("secret", "auth/r/positions", "1000", "")

    def test_sign_twice_differs(self):
        """Test consecutive signatures differ because the nonce moves."""
        signer = Signer("secret")

        nonce1, signature1 = signer.sign("auth/r/positions")
        nonce2, signature2 = signer.sign("auth/r/positions")

        assert int(nonce2) > int(nonce1)
        assert signature1 != signature2

    @pytest.mark.parametrize("endpoint", ["", "/book/tBTCUSD/P0", "v2/book/tBTCUSD/P0"])
    def test_invalid_endpoint(self, endpoint):
        """Test endpoints with a leading slash or version prefix are rejected."""
        with pytest.raises(ValueError):
            Signer("secret").sign(endpoint)

    def test_repr_hides_secret(self):
        """Test the secret does not leak through repr."""
        assert "secret-value" not in repr(Signer("secret-value"))
