"""
providers.py — Async clients for the four upstream LLM APIs.

One class per provider, all sharing the same shape:

    client = OpenAIClient(settings, http)
    text = await client.generate("gpt-4o", "hello")

Each client:
  - refuses to run without its API key (ProviderNotConfigured, naming the
    environment variable to set),
  - sends a single-turn user prompt capped at 1000 output tokens,
  - turns any non-2xx answer or network failure into UpstreamError whose
    message starts with the provider name,
  - returns the extracted text stripped of surrounding whitespace.

Gemini is the odd one out: it walks a short fallback chain of
(model id, API version) attempts on 404, and an empty answer is an
error rather than an empty string.

Don't instantiate these per call site; use build_provider() in gateway.py.
"""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

import httpx

from memory_gateway.ai.model_router import gemini_model_id, xai_model_id
from memory_gateway.core.config import Settings
from memory_gateway.core.errors import (
    EmptyUpstreamResponse,
    ProviderNotConfigured,
    UpstreamError,
)
from memory_gateway.core.http import mask_secret, safe_json

logger = logging.getLogger(__name__)

MAX_TOKENS = 1000

OPENAI_URL = "https://api.openai.com/v1/chat/completions"
ANTHROPIC_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"
XAI_URL = "https://api.x.ai/v1/chat/completions"
GEMINI_BASE_URL = "https://generativelanguage.googleapis.com"


def dig(data: Any, *path: Any) -> Any:
    """Walk nested dicts/lists, returning None as soon as a step is missing."""
    for step in path:
        try:
            data = data[step]
        except (KeyError, IndexError, TypeError):
            return None
    return data


def extract_text(data: Any, *path: Any) -> str:
    value = dig(data, *path)
    return value.strip() if isinstance(value, str) else ""


def upstream_message(response: httpx.Response) -> str:
    """error.message from a JSON error body, else the HTTP reason phrase."""
    data = safe_json(response)
    message = dig(data, "error", "message")
    return message or response.reason_phrase


class ProviderClient(ABC):
    """Base class: key check, POST with uniform error mapping."""

    label = ""           # prefix for upstream error messages
    display_name = ""    # used in "not configured" messages
    key_env = ""

    def __init__(self, settings: Settings, http: httpx.AsyncClient) -> None:
        self.settings = settings
        self.http = http

    @property
    def api_key(self) -> str | None:
        return getattr(self.settings, self.key_env.lower())

    def ensure_configured(self) -> str:
        key = self.api_key
        if not key:
            logger.error("%s not found in environment variables", self.key_env)
            raise ProviderNotConfigured(
                f"{self.display_name} API key not configured. "
                f"Please set {self.key_env} in your .env file."
            )
        return key

    async def _post(self, url: str, headers: dict[str, str], body: dict[str, Any]) -> httpx.Response:
        try:
            return await self.http.post(url, headers=headers, json=body)
        except httpx.HTTPError as exc:
            logger.error("%s request failed: %s", self.label, mask_secret(str(exc), self.api_key))
            raise UpstreamError(f"{self.label}: {mask_secret(str(exc), self.api_key) or type(exc).__name__}") from exc

    def _raise_for_status(self, response: httpx.Response) -> None:
        if response.is_success:
            return
        logger.error("%s API error %d: %s", self.label, response.status_code, response.text[:500])
        raise UpstreamError(f"{self.label}: {upstream_message(response)}")

    @abstractmethod
    async def generate(self, model: str, prompt: str) -> str:
        """Send *prompt* to *model* and return the answer text."""


# ─── OpenAI-compatible chat completions ───────────────────────────────────────

class ChatCompletionsClient(ProviderClient):
    url = ""

    def model_id(self, model: str) -> str:
        return model

    async def generate(self, model: str, prompt: str) -> str:
        key = self.ensure_configured()
        response = await self._post(
            self.url,
            headers={"Authorization": f"Bearer {key}", "Content-Type": "application/json"},
            body={
                "model": self.model_id(model),
                "messages": [{"role": "user", "content": prompt}],
                "max_tokens": MAX_TOKENS,
            },
        )
        self._raise_for_status(response)
        return extract_text(response.json(), "choices", 0, "message", "content")


class OpenAIClient(ChatCompletionsClient):
    label = "OpenAI"
    display_name = "OpenAI"
    key_env = "OPENAI_API_KEY"
    url = OPENAI_URL


class XAIClient(ChatCompletionsClient):
    label = "Grok"
    display_name = "xAI"
    key_env = "XAI_API_KEY"
    url = XAI_URL

    def model_id(self, model: str) -> str:
        return xai_model_id(model)


# ─── Anthropic Messages API ───────────────────────────────────────────────────

class AnthropicClient(ProviderClient):
    label = "Anthropic"
    display_name = "Anthropic"
    key_env = "ANTHROPIC_API_KEY"

    async def generate(self, model: str, prompt: str) -> str:
        key = self.ensure_configured()
        response = await self._post(
            ANTHROPIC_URL,
            headers={
                "x-api-key": key,
                "anthropic-version": ANTHROPIC_VERSION,
                "content-type": "application/json",
            },
            body={
                "model": model,
                "messages": [{"role": "user", "content": prompt}],
                "max_tokens": MAX_TOKENS,
            },
        )
        self._raise_for_status(response)
        return extract_text(response.json(), "content", 0, "text")


# ─── Google Gemini (Generative Language API) ──────────────────────────────────

@dataclass(frozen=True)
class GeminiAttempt:
    model: str
    api_version: str


def gemini_attempts(requested_model: str) -> list[GeminiAttempt]:
    """
    Ordered fallback chain for a requested Gemini model.

      1. mapped id on v1beta (free-tier compatible)
      2. mapped id on v1
      3. gemini-1.5-flash-002 on v1beta, only when gemini-1.5-flash was asked for

    The chain advances only on 404; any other outcome ends it.
    """
    model = gemini_model_id(requested_model)
    attempts = [GeminiAttempt(model, "v1beta"), GeminiAttempt(model, "v1")]
    if requested_model == "gemini-1.5-flash":
        attempts.append(GeminiAttempt("gemini-1.5-flash-002", "v1beta"))
    return attempts


class GeminiClient(ProviderClient):
    label = "Gemini"
    display_name = "Google"
    key_env = "GOOGLE_API_KEY"

    def _url(self, attempt: GeminiAttempt) -> str:
        return f"{GEMINI_BASE_URL}/{attempt.api_version}/models/{attempt.model}:generateContent"

    async def generate(self, model: str, prompt: str) -> str:
        key = self.ensure_configured()
        body = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {"maxOutputTokens": MAX_TOKENS, "temperature": 0.7},
        }

        for attempt in gemini_attempts(model):
            logger.info("Calling Gemini %s with model %s", attempt.api_version, attempt.model)
            try:
                response = await self.http.post(
                    self._url(attempt),
                    params={"key": key},
                    headers={"Content-Type": "application/json"},
                    json=body,
                )
            except httpx.HTTPError as exc:
                raise UpstreamError(f"Gemini API Error: {mask_secret(str(exc), key)}") from exc

            if response.status_code != 404:
                break
            logger.warning("Gemini %s returned 404 for %s", attempt.api_version, attempt.model)

        if not response.is_success:
            raise UpstreamError(self._compose_error(response, attempt))

        data = response.json()
        text = extract_text(data, "candidates", 0, "content", "parts", 0, "text")
        if not text:
            logger.warning("Empty response from Gemini: %s", json.dumps(data)[:500])
            raise EmptyUpstreamResponse(
                "Gemini returned an empty response. Please check the API response format."
            )
        return text

    def _compose_error(self, response: httpx.Response, attempt: GeminiAttempt) -> str:
        data = safe_json(response)
        error = data.get("error") if isinstance(data.get("error"), dict) else {}
        message = error.get("message") or data.get("message") or response.reason_phrase
        reason = error.get("status") or error.get("code") or ""
        details = error.get("details") or ""

        logger.error(
            "Gemini API error %d (model=%s, version=%s): %s",
            response.status_code, attempt.model, attempt.api_version, json.dumps(data)[:500],
        )

        text = f"Gemini API Error: {message}"
        if reason:
            text += f" ({reason})"
        if details:
            text += f" - {json.dumps(details)}"
        text += (
            f". Status: {response.status_code}. Model: {attempt.model}. "
            f"API Version: {attempt.api_version}."
            " Please verify your API key is valid and has access to Gemini API."
        )
        return text
