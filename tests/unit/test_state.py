"""
Unit tests for CSRF state generation and signed state tokens.
"""

import re

import jwt

from oauth.state import (
    JWT_ALGORITHM,
    decode_state,
    generate_state,
    sign_state,
    verify_state,
)

SECRET = "test-state-secret"


class TestGenerateState:
    """Tests for the state nonce."""

    def test_is_32_hex_chars(self):
        assert re.fullmatch(r"[0-9a-f]{32}", generate_state())

    def test_is_unique(self):
        states = {generate_state() for _ in range(100)}
        assert len(states) == 100


class TestSignedState:
    """Tests for signing and verifying state tokens."""

    def test_round_trip(self):
        nonce = generate_state()
        token = sign_state(nonce, SECRET)

        assert decode_state(token, SECRET) == nonce
        assert verify_state(nonce, token, SECRET)

    def test_wrong_secret(self):
        nonce = generate_state()
        token = sign_state(nonce, "other-secret")

        assert decode_state(token, SECRET) is None
        assert not verify_state(nonce, token, SECRET)

    def test_expired(self):
        """Test a token past its lifetime is rejected."""
        nonce = generate_state()
        token = sign_state(nonce, SECRET, expires_in=-10)

        assert decode_state(token, SECRET) is None

    def test_nonce_mismatch(self):
        token = sign_state("a" * 32, SECRET)

        assert not verify_state("b" * 32, token, SECRET)

    def test_missing_values(self):
        token = sign_state("a" * 32, SECRET)

        assert not verify_state(None, token, SECRET)
        assert not verify_state("a" * 32, None, SECRET)
        assert not verify_state("", "", SECRET)

    def test_garbage_token(self):
        assert decode_state("not-a-jwt", SECRET) is None

    def test_other_token_type(self):
        """Test a JWT without the state type is rejected."""
        token = jwt.encode(
            {"nonce": "a" * 32, "exp": 9999999999, "type": "access"},
            SECRET,
            algorithm=JWT_ALGORITHM,
        )

        assert decode_state(token, SECRET) is None
