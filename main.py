"""GitHub OAuth popup provider.

Serves the browser half of a GitHub OAuth popup login:
- /auth redirects the popup to GitHub
- /callback exchanges the code and hands the token to the opener window

Run locally with `python main.py`, or under uvicorn with
`uvicorn --factory main:create_app`.
"""
import logging

import httpx
from fastapi import FastAPI
from supabase import create_client, Client

from config import Config, load_config
from logging_config import setup_logging
from oauth.endpoints import init_oauth_routes
from oauth.middleware import RequestLogMiddleware

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


def create_supabase(config: Config) -> Client:
    """Supabase client for log shipping, or None when not configured."""
    if config.supabase_url and config.supabase_anon_key:
        return create_client(config.supabase_url, config.supabase_anon_key)
    return None


def create_app(config: Config = None, transport: httpx.AsyncBaseTransport = None) -> FastAPI:
    """Build the FastAPI app.

    Raises ConfigError before anything is served if required settings
    (client id and secret) are missing.
    """
    config = (config or load_config()).validate()

    logger.info(f"[STARTUP] Config loaded - client_id: {config.client_id}")
    logger.info(f"[STARTUP] SERVER_URL: {config.server_url or '(request origin)'}")
    logger.info(f"[STARTUP] State verification: {config.verify_state}")

    # Docs routes disabled so every other path reaches the banner route
    app = FastAPI(
        title="GitHub OAuth Provider",
        description="OAuth popup flow for GitHub",
        version=VERSION,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.add_middleware(RequestLogMiddleware)

    init_oauth_routes(app, config, transport=transport)

    return app


# ============== Main Entry Point ==============

if __name__ == "__main__":
    import uvicorn

    config = load_config()
    setup_logging(
        service_name=config.service_name,
        level=config.log_level,
        supabase_client=create_supabase(config),
    )
    app = create_app(config)
    logger.info(f"Starting GitHub OAuth provider on {config.host}:{config.port}")
    uvicorn.run(app, host=config.host, port=config.port)
