"""
ai.py — Multi-provider LLM proxy endpoint.

Route:
  POST /api/ai/invoke   { "model": "...", "prompt": "..." } → { "response": "..." }

HOW THE DATA FLOWS
──────────────────
1. Reject a missing model or prompt (400) before any upstream call.
2. invoke_model() resolves unified-auto, classifies the model into one
   provider (unsupported → 400) and calls it (missing key → 500).
3. Upstream failures, including an exhausted Gemini fallback chain, are
   reported once here as 500 "AI request failed: <provider message>",
   with the traceback in "details" only in development.
4. An empty answer from OpenAI / Anthropic / xAI becomes a placeholder
   string; the call still returns 200.
"""

import logging
from typing import Optional

import httpx
from fastapi import APIRouter, Depends

from memory_gateway.ai.gateway import invoke_model
from memory_gateway.core.config import Settings, get_settings
from memory_gateway.core.errors import (
    MissingParameter,
    ProviderNotConfigured,
    UnsupportedModel,
    unexpected_error,
)
from memory_gateway.core.http import get_http_client
from memory_gateway.models.ai import InvokeRequest, InvokeResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ai", tags=["ai"])


@router.post("/invoke", response_model=InvokeResponse)
async def invoke(
    payload: Optional[InvokeRequest] = None,
    settings: Settings = Depends(get_settings),
    http: httpx.AsyncClient = Depends(get_http_client),
) -> InvokeResponse:
    """Forward a single prompt to the provider that serves *model*."""
    payload = payload or InvokeRequest()
    logger.info(
        "Received AI request: model=%s prompt_length=%d",
        payload.model, len(payload.prompt or ""),
    )

    if not payload.model:
        raise MissingParameter("Missing model parameter")
    if not payload.prompt:
        raise MissingParameter("Missing prompt parameter")

    try:
        text = await invoke_model(payload.model, payload.prompt, settings, http)
    except (UnsupportedModel, ProviderNotConfigured):
        raise
    except Exception as exc:
        logger.error("AI Error: %s", exc, exc_info=True)
        raise unexpected_error("AI request failed: ", exc, settings.is_development) from exc

    return InvokeResponse(response=text)
