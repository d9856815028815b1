"""Request logging and top-level error boundary for the OAuth routes.

Every request produces one log entry tagged by route ([AUTH], [CALLBACK],
[INFO]) carrying the method, path, status and, for callbacks, the outcome.
Anything the routes do not recover from (network failures during the token
exchange, unparseable provider responses, malformed input) becomes a plain
text 500 carrying the error message. No retries are attempted.
"""

import logging
import time

from fastapi import Request
from fastapi.responses import PlainTextResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

ROUTE_TAGS = {"/auth": "AUTH", "/callback": "CALLBACK"}


def route_tag(path: str) -> str:
    return ROUTE_TAGS.get(path, "INFO")


class RequestLogMiddleware(BaseHTTPMiddleware):
    """Log each request and convert uncaught exceptions into `500 Error: <message>`."""

    async def dispatch(self, request: Request, call_next):
        started = time.monotonic()
        tag = route_tag(request.url.path)
        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception(
                f"[{tag}] {request.method} {request.url.path} failed: {e}",
                extra=self._fields(request, 500, started),
            )
            return PlainTextResponse(f"Error: {e}", status_code=500)

        fields = self._fields(request, response.status_code, started)
        outcome = f" ({fields['outcome']})" if fields["outcome"] else ""
        logger.info(
            f"[{tag}] {request.method} {request.url.path} -> {response.status_code}{outcome}",
            extra=fields,
        )
        return response

    @staticmethod
    def _fields(request: Request, status_code: int, started: float) -> dict:
        return {
            "method": request.method,
            "path": request.url.path,
            "status_code": status_code,
            "outcome": getattr(request.state, "outcome", None),
            "duration_ms": round((time.monotonic() - started) * 1000, 1),
        }
