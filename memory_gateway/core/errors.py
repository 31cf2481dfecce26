"""
errors.py — Gateway error taxonomy.

Every failure a route can report is a GatewayError subclass. Each carries
the HTTP status to answer with, a human-readable message, and optional
extra JSON fields (videoId, url, details, ...) that are merged into the
response body next to "error".

The app registers gateway_error_handler() once in main.py, so routes and
services simply raise and never build error responses by hand.
"""

import logging
import traceback
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class GatewayError(Exception):
    """Base error. Rendered as {"error": message, **extra}."""

    status_code: int = 500

    def __init__(self, message: str, /, status_code: int | None = None, **extra: Any) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        # None values are dropped so optional fields never appear as null
        self.extra = {k: v for k, v in extra.items() if v is not None}

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.message, **self.extra}


# ── Validation ────────────────────────────────────────────────────────────────

class MissingParameter(GatewayError):
    status_code = 400


class UnsupportedModel(GatewayError):
    status_code = 400


class UnsupportedPlatform(GatewayError):
    status_code = 400


# ── Configuration ─────────────────────────────────────────────────────────────

class ProviderNotConfigured(GatewayError):
    status_code = 500


# ── Upstream ──────────────────────────────────────────────────────────────────

class UpstreamError(GatewayError):
    """Non-2xx or network failure from an external API.

    The message is already prefixed with the provider name.
    """

    status_code = 500


class EmptyUpstreamResponse(GatewayError):
    """A call succeeded but yielded no text (Gemini only)."""

    status_code = 500


class YouTubeApiError(GatewayError):
    """YouTube Data API failure; status comes from the upstream classification."""


class VideoNotFound(GatewayError):
    status_code = 404


class TranscriptUnavailable(GatewayError):
    status_code = 404


class NoMeaningfulContent(GatewayError):
    status_code = 404


class ScrapeFailed(GatewayError):
    status_code = 500


# ── Handler ───────────────────────────────────────────────────────────────────

async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    """Render any GatewayError as JSON with its own status code."""
    if exc.status_code >= 500:
        logger.error("%s %s → %d: %s", request.method, request.url.path, exc.status_code, exc.message)
    else:
        logger.info("%s %s → %d: %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render FastAPI request validation failures in the gateway error shape.

    A body that is not valid JSON is a 500, like any other failure to read
    the request; a missing or mistyped parameter is a 400 naming the field.
    """
    errors = exc.errors()
    if any(err.get("type") == "json_invalid" for err in errors):
        error = GatewayError("Invalid JSON body", status_code=500)
    else:
        error = MissingParameter(
            _invalid_field_message(errors[0] if errors else {}),
            details=[err.get("msg", "") for err in errors] or None,
        )
    return await gateway_error_handler(request, error)


def _invalid_field_message(err: dict[str, Any]) -> str:
    names = [part for part in err.get("loc", ()) if isinstance(part, str)]
    if len(names) < 2:
        return "Invalid request body"
    return f"Invalid {names[1]} parameter"


def unexpected_error(prefix: str, exc: Exception, include_details: bool = False) -> GatewayError:
    """Wrap an uncaught exception as a 500 with a route-specific prefix.

    The traceback is attached as "details" only when include_details is set
    (development mode).
    """
    details = None
    if include_details:
        details = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return GatewayError(f"{prefix}{exc}", status_code=500, details=details)
