"""
cors.py — Origin echoing for the browser frontend.

Starlette's CORSMiddleware omits the header for unknown origins; this
service instead always answers with an origin: the caller's own when it
is allow-listed or any http://localhost:* port, else the configured
frontend URL. Preflight OPTIONS requests are answered 204 directly.
"""

from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from memory_gateway.core.config import Settings, get_settings

ALLOW_METHODS = "GET, POST, OPTIONS"
ALLOW_HEADERS = "Content-Type, Authorization"


def resolve_cors_origin(origin: Optional[str], allowed: list[str], default: str) -> str:
    """Return the Access-Control-Allow-Origin value for a request Origin."""
    if origin and origin in allowed:
        return origin
    if origin and origin.startswith("http://localhost:"):
        return origin
    return default


class OriginEchoMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        # Resolved per request so dependency overrides apply in tests
        settings: Settings = request.app.dependency_overrides.get(get_settings, get_settings)()
        allow_origin = resolve_cors_origin(
            request.headers.get("origin"),
            settings.cors_allowed_origins,
            settings.frontend_url,
        )

        if request.method == "OPTIONS":
            response = Response(status_code=204)
        else:
            response = await call_next(request)

        response.headers["Access-Control-Allow-Origin"] = allow_origin
        response.headers["Access-Control-Allow-Methods"] = ALLOW_METHODS
        response.headers["Access-Control-Allow-Headers"] = ALLOW_HEADERS
        return response
