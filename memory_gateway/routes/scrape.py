"""
scrape.py — Website scraping endpoint.

Route:
  GET /api/scrape?url=...  → { url, title, content, description }

Failures: 400 missing url, 404 nothing meaningful extracted,
500 fetch failure (upstream status embedded in the message).
"""

import logging
from typing import Optional

import httpx
from fastapi import APIRouter, Depends

from memory_gateway.core.config import Settings, get_settings
from memory_gateway.core.errors import GatewayError, MissingParameter, unexpected_error
from memory_gateway.core.http import get_http_client
from memory_gateway.models.scrape import ScrapeResponse
from memory_gateway.services.content_extractor import scrape_website

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["scrape"])


@router.get("/scrape", response_model=ScrapeResponse)
async def scrape(
    url: Optional[str] = None,
    http: httpx.AsyncClient = Depends(get_http_client),
    settings: Settings = Depends(get_settings),
) -> ScrapeResponse:
    if not url:
        raise MissingParameter("Missing URL parameter")

    try:
        return await scrape_website(url, http)
    except GatewayError:
        raise
    except Exception as exc:
        logger.error("Website scrape error for %s: %s", url, exc, exc_info=True)
        raise unexpected_error("Scrape failed: ", exc, settings.is_development) from exc
