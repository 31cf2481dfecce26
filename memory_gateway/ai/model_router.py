"""
model_router.py — Map a requested model name onto one upstream provider.

Resolution is a pure function of the model string and the configured
keys, so it is unit-testable without any HTTP plumbing:

    resolve_model("unified-auto", settings)  → "gemini-flash-latest" | "gpt-4o" | "gpt-3.5-turbo"
    classify_model("gpt-4o")                 → ProviderKind.OPENAI
    classify_model("claude-3-opus")          → ProviderKind.ANTHROPIC
    classify_model("gemini-2.5-flash")       → ProviderKind.GEMINI
    classify_model("grok-beta")              → ProviderKind.XAI
    classify_model("llama-3")                → raises UnsupportedModel

Precedence is fixed: gpt- prefix, then "claude", then "gemini", then "grok".
"""

import logging
from enum import Enum

from memory_gateway.core.config import Settings
from memory_gateway.core.errors import UnsupportedModel

logger = logging.getLogger(__name__)

UNIFIED_AUTO = "unified-auto"

SUPPORTED_MODELS_HINT = (
    "Supported models: GPT models (gpt-3.5-turbo, gpt-4o, gpt-4-turbo, etc.), "
    "Claude models (claude-3-5-sonnet, claude-3-opus, etc.), "
    "Gemini models (gemini-pro, gemini-1.5-pro, etc.), Grok (grok-beta), or unified-auto"
)

# Retired Gemini ids → current aliases
GEMINI_LEGACY_ALIASES: dict[str, str] = {
    "gemini-pro": "gemini-flash-latest",
    "gemini-1.5-flash": "gemini-flash-latest",
    "gemini-1.5-pro": "gemini-pro-latest",
}

XAI_ALIASES: dict[str, str] = {
    "grok": "grok-beta",
}


class ProviderKind(str, Enum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GEMINI = "gemini"
    XAI = "xai"


def resolve_model(model: str, settings: Settings) -> str:
    """Turn the unified-auto pseudo-model into a concrete model id.

    Google is preferred (free tier), then OpenAI. With neither key the
    result is gpt-3.5-turbo, which later fails as ProviderNotConfigured.
    """
    if model != UNIFIED_AUTO:
        return model

    if settings.google_api_key:
        resolved = "gemini-flash-latest"
    elif settings.openai_api_key:
        resolved = "gpt-4o"
    else:
        resolved = "gpt-3.5-turbo"
    logger.info("Unified mode: using %s", resolved)
    return resolved


def classify_model(model: str) -> ProviderKind:
    """Return the provider that serves *model*; raise UnsupportedModel otherwise."""
    if model.startswith("gpt-"):
        return ProviderKind.OPENAI
    if "claude" in model:
        return ProviderKind.ANTHROPIC
    if model.startswith("gemini-") or "gemini" in model:
        return ProviderKind.GEMINI
    if "grok" in model:
        return ProviderKind.XAI
    raise UnsupportedModel(f"Unsupported model: {model}. {SUPPORTED_MODELS_HINT}")


def gemini_model_id(model: str) -> str:
    """Apply the legacy-name remapping for Gemini."""
    mapped = GEMINI_LEGACY_ALIASES.get(model, model)
    if mapped != model:
        logger.warning("%s is deprecated, using %s instead", model, mapped)
    return mapped


def xai_model_id(model: str) -> str:
    return XAI_ALIASES.get(model, model)
