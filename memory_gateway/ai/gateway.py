"""
gateway.py — Single entry point for /api/ai/invoke.

    text = await invoke_model(model, prompt, settings, http)

Flow:
  1. resolve_model()  — unified-auto → concrete model id
  2. classify_model() — exactly one provider, or UnsupportedModel
  3. build_provider() — client constructed with the settings object
  4. generate()       — one upstream call (Gemini: bounded fallback chain)
  5. empty text       → PLACEHOLDER_RESPONSE (Gemini raises instead)
"""

import logging

import httpx

from memory_gateway.ai.model_router import ProviderKind, classify_model, resolve_model
from memory_gateway.ai.providers import (
    AnthropicClient,
    GeminiClient,
    OpenAIClient,
    ProviderClient,
    XAIClient,
)
from memory_gateway.core.config import Settings

logger = logging.getLogger(__name__)

PLACEHOLDER_RESPONSE = "No response generated. Please try again or check your API keys."

_PROVIDERS: dict[ProviderKind, type[ProviderClient]] = {
    ProviderKind.OPENAI: OpenAIClient,
    ProviderKind.ANTHROPIC: AnthropicClient,
    ProviderKind.GEMINI: GeminiClient,
    ProviderKind.XAI: XAIClient,
}


def build_provider(kind: ProviderKind, settings: Settings, http: httpx.AsyncClient) -> ProviderClient:
    return _PROVIDERS[kind](settings, http)


async def invoke_model(model: str, prompt: str, settings: Settings, http: httpx.AsyncClient) -> str:
    actual_model = resolve_model(model, settings)
    kind = classify_model(actual_model)
    provider = build_provider(kind, settings, http)

    logger.info("Dispatching %s to %s", actual_model, kind.value)
    text = await provider.generate(actual_model, prompt)

    if not text:
        logger.warning("Empty response from %s (model=%s)", kind.value, actual_model)
        return PLACEHOLDER_RESPONSE
    return text
