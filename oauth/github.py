"""GitHub OAuth client calls.

Builds the authorization URL for the popup redirect and exchanges an
authorization code for an access token.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional
from urllib.parse import urlencode

import httpx

logger = logging.getLogger(__name__)

PROVIDER = "github"
AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
ACCESS_TOKEN_URL = "https://github.com/login/oauth/access_token"
USER_AGENT = "github-oauth-popup-provider"


@dataclass(frozen=True)
class TokenExchangeResult:
    """Outcome of a code exchange, handed once to the popup renderer."""

    status: str
    token: Optional[str] = None
    provider: str = PROVIDER
    details: Any = field(default=None)

    @classmethod
    def success(cls, token: str) -> "TokenExchangeResult":
        return cls(status="success", token=token)

    @classmethod
    def error(cls, details: Any) -> "TokenExchangeResult":
        return cls(status="error", details=details)

    @property
    def is_success(self) -> bool:
        return self.status == "success"

    @property
    def content(self) -> Any:
        """Payload delivered to the opener window."""
        if self.is_success:
            # No access_token in the response: the opener gets only the provider
            if self.token is None:
                return {"provider": self.provider}
            return {"token": self.token, "provider": self.provider}
        return self.details


def build_authorize_url(client_id: str, redirect_uri: str, scope: str, state: str) -> str:
    params = {
        "client_id": client_id,
        "redirect_uri": redirect_uri,
        "scope": scope,
        "state": state,
    }
    return f"{AUTHORIZE_URL}?{urlencode(params)}"


def _redacted(result: Any) -> Any:
    if isinstance(result, dict) and "access_token" in result:
        return {**result, "access_token": "***"}
    return result


async def exchange_code(
    client_id: str,
    client_secret: str,
    code: str,
    timeout: float = 10.0,
    transport: httpx.AsyncBaseTransport = None,
) -> TokenExchangeResult:
    """Exchange an authorization code for an access token.

    Provider-reported OAuth errors come back as an error result. Transport
    failures and unparseable responses propagate to the caller.
    """
    async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
        response = await client.post(
            ACCESS_TOKEN_URL,
            json={"client_id": client_id, "client_secret": client_secret, "code": code},
            headers={
                "Content-Type": "application/json",
                "User-Agent": USER_AGENT,
                "Accept": "application/json",
            },
        )

    result = response.json()
    logger.info(f"[TOKEN] GitHub OAuth response ({response.status_code}): {_redacted(result)}")

    if result.get("error"):
        logger.warning(f"[TOKEN] GitHub OAuth error: {result.get('error')}")
        return TokenExchangeResult.error(result)

    return TokenExchangeResult.success(result.get("access_token"))
