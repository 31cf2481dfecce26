"""
http.py — Shared outbound HTTP client dependency.

Every upstream call (AI providers, YouTube Data API, page fetches, social
OAuth) goes through one httpx.AsyncClient per request, supplied by
get_http_client(). Tests replace it with a client backed by
httpx.MockTransport via app.dependency_overrides.
"""

from typing import AsyncIterator

import httpx
from fastapi import Depends

from memory_gateway.core.config import Settings, get_settings

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)


async def get_http_client(
    settings: Settings = Depends(get_settings),
) -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient(
        timeout=settings.http_timeout_seconds,
        follow_redirects=True,
    ) as client:
        yield client


def safe_json(response: httpx.Response) -> dict:
    """Decode a JSON object body, treating anything unparseable as {}."""
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def mask_secret(text: str, secret: str | None) -> str:
    """Replace *secret* in *text* so URLs with ?key=... can be logged."""
    if not secret:
        return text
    return text.replace(secret, "KEY_HIDDEN")
