"""CSRF state for the GitHub authorization redirect.

The state value sent to GitHub is a 32-character hex nonce. When state
verification is enabled, the nonce is also signed into a short-lived JWT
that travels in a cookie, so the callback can check the round-tripped value
without any server-side storage.
"""

import hmac
import logging
import secrets
import time
from typing import Optional

import jwt

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"
STATE_EXPIRE_SECONDS = 10 * 60  # 10 minutes
STATE_COOKIE_NAME = "github_oauth_state"
STATE_TOKEN_TYPE = "oauth_state"


def generate_state() -> str:
    """Return a fresh state nonce: 16 random bytes as 32 hex characters."""
    return secrets.token_hex(16)


def sign_state(nonce: str, secret: str, expires_in: int = STATE_EXPIRE_SECONDS) -> str:
    """Create a signed token binding `nonce` to this browser."""
    now = int(time.time())
    payload = {
        "nonce": nonce,
        "iat": now,
        "exp": now + expires_in,
        "type": STATE_TOKEN_TYPE,
    }
    return jwt.encode(payload, secret, algorithm=JWT_ALGORITHM)


def decode_state(token: str, secret: str) -> Optional[str]:
    """Return the nonce inside a signed state token, or None if invalid."""
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[JWT_ALGORITHM],
            options={"require": ["exp", "nonce"]},
        )
    except jwt.ExpiredSignatureError:
        logger.debug("[STATE] State token expired")
        return None
    except jwt.InvalidTokenError as e:
        logger.debug(f"[STATE] Invalid state token: {e}")
        return None

    if payload.get("type") != STATE_TOKEN_TYPE:
        logger.debug("[STATE] Token is not a state token")
        return None

    return payload["nonce"]


def verify_state(state: Optional[str], token: Optional[str], secret: str) -> bool:
    """Check the `state` query value against the signed cookie token."""
    if not state or not token:
        return False

    nonce = decode_state(token, secret)
    if nonce is None:
        return False

    return hmac.compare_digest(nonce, state)
