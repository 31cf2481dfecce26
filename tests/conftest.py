"""
pytest configuration and shared fixtures for the Memory Gateway tests.

Key concern: tests must never reach a real upstream (OpenAI, Anthropic,
Gemini, xAI, YouTube, arbitrary websites) or need real keys.
We achieve this by:
  1. Overriding get_settings with a fresh Settings whose keys are all unset
     (tests switch providers on by assigning attributes).
  2. Overriding get_http_client with an httpx.AsyncClient backed by
     httpx.MockTransport, routed to the StubUpstream fixture which records
     every request and replays queued responses.
  3. Overriding get_transcript_fetcher with StubFetcher so
     youtube-transcript-api is never called.
"""

import os
from typing import Callable, Optional, Union

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

# Set env vars BEFORE importing the app so Settings picks them up correctly
os.environ.setdefault("ENVIRONMENT", "test")

from memory_gateway.core.config import Settings, get_settings  # noqa: E402
from memory_gateway.core.http import get_http_client  # noqa: E402
from memory_gateway.services.transcripts import get_transcript_fetcher  # noqa: E402

_KEY_FIELDS = (
    "openai_api_key",
    "anthropic_api_key",
    "google_api_key",
    "xai_api_key",
    "youtube_api_key",
    "pinterest_client_id",
    "pinterest_client_secret",
    "instagram_client_id",
    "instagram_client_secret",
)


def make_settings(**overrides) -> Settings:
    """Settings isolated from the process environment and any .env file."""
    values = {name: None for name in _KEY_FIELDS}
    values.update(overrides)
    s = Settings(_env_file=None, **values)
    s.environment = "test"
    s.frontend_url = "https://notes.example.com"
    return s


class StubUpstream:
    """
    Callable used as an httpx.MockTransport handler.

    Either queue responses (replayed in order; exceptions are raised), or
    set `handler` to compute a response per request.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.handler: Optional[Callable[[httpx.Request], httpx.Response]] = None
        self._queue: list[Union[httpx.Response, Exception]] = []

    def queue(self, *responses: Union[httpx.Response, Exception]) -> None:
        self._queue.extend(responses)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.handler is not None:
            return self.handler(request)
        if not self._queue:
            raise AssertionError(f"unexpected upstream call: {request.method} {request.url}")
        item = self._queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class StubFetcher:
    """Stand-in for TranscriptFetcher."""

    def __init__(self) -> None:
        self.segments: list[dict] = []
        self.error: Optional[Exception] = None
        self.calls: list[str] = []

    async def fetch(self, video_id: str) -> list[dict]:
        self.calls.append(video_id)
        if self.error is not None:
            raise self.error
        return self.segments


@pytest.fixture()
def settings() -> Settings:
    return make_settings()


@pytest.fixture()
def upstream() -> StubUpstream:
    return StubUpstream()


@pytest.fixture()
def transcript_fetcher() -> StubFetcher:
    return StubFetcher()


@pytest.fixture()
async def client(settings, upstream, transcript_fetcher):
    """
    HTTPX async test client wired to the FastAPI app.

    Usage:
        async def test_something(client, settings, upstream):
            settings.openai_api_key = "sk-test"
            upstream.queue(httpx.Response(200, json={...}))
            response = await client.post("/api/ai/invoke", json={...})
    """
    from memory_gateway.main import app

    async def _http_client():
        async with httpx.AsyncClient(transport=httpx.MockTransport(upstream)) as http:
            yield http

    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_http_client] = _http_client
    app.dependency_overrides[get_transcript_fetcher] = lambda: transcript_fetcher

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
