"""GitHub OAuth popup endpoints.

This module contains the popup flow endpoints:
- /auth: redirect the popup to GitHub's authorization page
- /callback: exchange the code and relay the result to the opener window
- anything else: plain-text service banner
"""

import logging

import httpx
from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import PlainTextResponse, RedirectResponse

from config import Config
from oauth.github import build_authorize_url, exchange_code, TokenExchangeResult
from oauth.state import STATE_COOKIE_NAME, STATE_EXPIRE_SECONDS, generate_state, sign_state, verify_state
from oauth.templates import render_popup

logger = logging.getLogger(__name__)

# Router for OAuth endpoints
router = APIRouter(tags=["oauth"])

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
BANNER = "GitHub OAuth Provider"


def init_oauth_routes(app: FastAPI, config: Config, transport: httpx.AsyncBaseTransport = None):
    """Attach a validated config to `app` and include the OAuth router.

    `transport` replaces the HTTP transport used for the token exchange.
    Settings live on `app.state`, so each app keeps its own.
    """
    app.state.oauth_config = config
    app.state.oauth_transport = transport
    app.include_router(router)


def _config(request: Request) -> Config:
    return request.app.state.oauth_config


def _origin(request: Request) -> str:
    config = _config(request)
    if config.server_url:
        return config.server_url
    return f"{request.url.scheme}://{request.url.netloc}"


# ============== Authorization Redirect ==============

@router.api_route("/auth", methods=ALL_METHODS)
async def auth(request: Request):
    """Redirect the popup to GitHub's authorization page."""
    config = _config(request)
    state = generate_state()
    redirect_url = build_authorize_url(
        client_id=config.client_id,
        redirect_uri=f"{_origin(request)}/callback",
        scope=config.scope,
        state=state,
    )

    response = RedirectResponse(url=redirect_url, status_code=301)
    if config.verify_state:
        response.set_cookie(
            STATE_COOKIE_NAME,
            sign_state(state, config.state_secret),
            max_age=STATE_EXPIRE_SECONDS,
            path="/callback",
            httponly=True,
            secure=request.url.scheme == "https",
            samesite="lax",
        )
    return response


# ============== Callback ==============

@router.api_route("/callback", methods=ALL_METHODS)
async def callback(request: Request):
    """Exchange the authorization code and render the popup result page."""
    result = await _handle_callback(request)
    request.state.outcome = result.status
    response = render_popup(result.status, result.content)
    if _config(request).verify_state:
        response.delete_cookie(STATE_COOKIE_NAME, path="/callback")
    return response


async def _handle_callback(request: Request) -> TokenExchangeResult:
    config = _config(request)
    params = request.query_params
    code = params.get("code")
    if not code:
        if params.get("error"):
            logger.warning(f"[CALLBACK] GitHub returned error: {params.get('error')}")
        return TokenExchangeResult.error({"error": "No code provided"})

    if config.verify_state:
        cookie = request.cookies.get(STATE_COOKIE_NAME)
        if not verify_state(params.get("state"), cookie, config.state_secret):
            logger.warning("[CALLBACK] State verification failed")
            return TokenExchangeResult.error({"error": "Invalid state"})

    return await exchange_code(
        config.client_id,
        config.client_secret,
        code,
        timeout=config.token_exchange_timeout,
        transport=request.app.state.oauth_transport,
    )


# ============== Server Info ==============

@router.api_route("/{path:path}", methods=ALL_METHODS)
async def info(path: str):
    """Plain-text banner for every other path."""
    return PlainTextResponse(BANNER)
