"""
social.py — Pinterest / Instagram connection endpoints.

Routes:
  GET  /api/social/test                 — liveness check for this router
  GET  /api/social/connect/{platform}   — OAuth consent URL (?userId=)
  GET  /api/social/callback/{platform}  — OAuth redirect target; always
                                          redirects to <frontend>/settings
  POST /api/social/sync/{platform}      — list pins / media with a token
  GET  /api/social/data                 — placeholder; data lives client-side

Tokens are never stored here; see services/social.py.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import RedirectResponse

from memory_gateway.core.config import Settings, get_settings
from memory_gateway.core.errors import GatewayError, MissingParameter, unexpected_error
from memory_gateway.core.http import get_http_client
from memory_gateway.models.social import (
    ConnectResponse,
    SocialDataResponse,
    SyncRequest,
    SyncResponse,
)
from memory_gateway.services.social import (
    CallbackFailed,
    build_auth_url,
    complete_oauth,
    decode_state,
    encode_connection,
    settings_redirect,
    sync_platform,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/social", tags=["social"])


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url, status_code=302)


def _callback_uri(request: Request, platform: str) -> str:
    base = str(request.base_url).rstrip("/")
    return f"{base}/api/social/callback/{platform}"


@router.get("/test")
async def social_test() -> dict:
    return {
        "status": "ok",
        "message": "Social media routes are loaded",
        "timestamp": datetime.now(tz=timezone.utc).isoformat(),
    }


@router.get("/connect/{platform}", response_model=ConnectResponse)
async def connect(
    platform: str,
    request: Request,
    user_id: Optional[str] = Query(None, alias="userId"),
    settings: Settings = Depends(get_settings),
) -> ConnectResponse:
    if not user_id:
        raise MissingParameter("Missing userId parameter")

    auth_url = build_auth_url(platform, user_id, _callback_uri(request, platform), settings)
    return ConnectResponse(auth_url=auth_url, platform=platform)


@router.get("/callback/{platform}")
async def callback(
    platform: str,
    request: Request,
    code: Optional[str] = None,
    state: Optional[str] = None,
    error: Optional[str] = None,
    settings: Settings = Depends(get_settings),
    http: httpx.AsyncClient = Depends(get_http_client),
) -> RedirectResponse:
    if error:
        return _redirect(settings_redirect(settings, error=error))
    if not code or not state:
        return _redirect(settings_redirect(settings, error="missing_code_or_state"))

    try:
        user_id = str(decode_state(state)["userId"])
    except ValueError:
        return _redirect(settings_redirect(settings, error="invalid_state"))

    logger.info("%s OAuth callback received for user %s", platform, user_id)
    try:
        connection = await complete_oauth(
            platform, code, user_id, _callback_uri(request, platform), settings, http
        )
    except CallbackFailed as exc:
        return _redirect(settings_redirect(settings, error=exc.reason))
    except Exception as exc:
        logger.error("Error handling %s callback: %s", platform, exc, exc_info=True)
        return _redirect(settings_redirect(settings, error=str(exc)))

    return _redirect(
        settings_redirect(settings, connected=platform, data=encode_connection(connection))
    )


@router.post("/sync/{platform}", response_model=SyncResponse)
async def sync(
    platform: str,
    payload: Optional[SyncRequest] = None,
    settings: Settings = Depends(get_settings),
    http: httpx.AsyncClient = Depends(get_http_client),
) -> SyncResponse:
    payload = payload or SyncRequest()
    if not payload.user_id or not payload.access_token:
        raise MissingParameter("Missing userId or accessToken")

    try:
        items = await sync_platform(platform, payload.access_token, http)
    except GatewayError:
        raise
    except Exception as exc:
        logger.error("Error syncing %s: %s", platform, exc, exc_info=True)
        raise unexpected_error("Failed to sync: ", exc, settings.is_development) from exc

    return SyncResponse(platform=platform, synced_count=len(items), data=items)


@router.get("/data", response_model=SocialDataResponse)
async def social_data(
    user_id: Optional[str] = Query(None, alias="userId"),
) -> SocialDataResponse:
    if not user_id:
        raise MissingParameter("Missing userId parameter")
    return SocialDataResponse(user_id=user_id)
