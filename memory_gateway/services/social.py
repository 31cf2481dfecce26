"""
social.py — OAuth connection and content sync for Pinterest and Instagram.

The service never stores tokens: after the OAuth callback the connection
bundle is base64-encoded into the redirect back to the frontend's
/settings page, which persists it in the hosted database.

Flow:
  1. /connect/{platform}  → build_auth_url(): provider consent URL whose
     `state` is base64 JSON {userId, platform}.
  2. /callback/{platform} → complete_oauth(): exchange the code for tokens,
     look up the account, return the frontend redirect URL. Every outcome,
     including failures, is a redirect carrying ?error=<reason>.
  3. /sync/{platform}     → sync_platform(): list pins / media with the
     caller's access token. A failed listing is an empty list.
"""

import base64
import binascii
import json
import logging
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import urlencode

import httpx

from memory_gateway.core.config import Settings
from memory_gateway.core.errors import GatewayError, UnsupportedPlatform
from memory_gateway.core.http import safe_json
from memory_gateway.models.social import SocialConnection, SyncedItem

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlatformSpec:
    name: str
    display_name: str
    authorize_url: str
    scopes: str
    client_id_env: str

    def client_id(self, settings: Settings) -> Optional[str]:
        return getattr(settings, f"{self.name}_client_id")

    def client_secret(self, settings: Settings) -> Optional[str]:
        return getattr(settings, f"{self.name}_client_secret")


PLATFORMS: dict[str, PlatformSpec] = {
    "pinterest": PlatformSpec(
        name="pinterest",
        display_name="Pinterest",
        authorize_url="https://www.pinterest.com/oauth/",
        scopes="boards:read,pins:read,user_accounts:read",
        client_id_env="PINTEREST_CLIENT_ID",
    ),
    "instagram": PlatformSpec(
        name="instagram",
        display_name="Instagram",
        authorize_url="https://api.instagram.com/oauth/authorize",
        scopes="user_profile,user_media",
        client_id_env="INSTAGRAM_CLIENT_ID",
    ),
}


class MissingClientId(GatewayError):
    status_code = 400


class CallbackFailed(Exception):
    """Internal: ends the OAuth callback with ?error=<reason>."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


def get_platform(platform: str) -> PlatformSpec:
    try:
        return PLATFORMS[platform]
    except KeyError:
        raise UnsupportedPlatform(f"Unsupported platform: {platform}") from None


# ── State ─────────────────────────────────────────────────────────────────────

def encode_state(user_id: str, platform: str) -> str:
    raw = json.dumps({"userId": user_id, "platform": platform}, separators=(",", ":"))
    return base64.b64encode(raw.encode("utf-8")).decode("ascii")


def decode_state(state: str) -> dict[str, Any]:
    """Inverse of encode_state(); raises ValueError on anything malformed."""
    try:
        data = json.loads(base64.b64decode(state, validate=True).decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ValueError("invalid state") from exc
    if not isinstance(data, dict) or "userId" not in data:
        raise ValueError("invalid state")
    return data


def settings_redirect(settings: Settings, **params: str) -> str:
    return f"{settings.frontend_url}/settings?{urlencode(params)}"


# ── Connect ───────────────────────────────────────────────────────────────────

def build_auth_url(platform: str, user_id: str, redirect_uri: str, settings: Settings) -> str:
    spec = get_platform(platform)
    client_id = spec.client_id(settings)
    if not client_id:
        logger.warning("%s client ID not configured", spec.display_name)
        raise MissingClientId(
            f"{spec.display_name} client ID not configured. Please set "
            f"{spec.client_id_env} in your .env file and restart the server.",
            code="MISSING_API_KEY",
            platform=platform,
        )

    params = {
        "client_id": client_id,
        "redirect_uri": redirect_uri,
        "response_type": "code",
        "scope": spec.scopes,
        "state": encode_state(user_id, platform),
    }
    logger.info("Initiating %s OAuth for user %s", platform, user_id)
    return f"{spec.authorize_url}?{urlencode(params, safe=',:')}"


# ── Callback ──────────────────────────────────────────────────────────────────

async def complete_oauth(
    platform: str,
    code: str,
    user_id: str,
    redirect_uri: str,
    settings: Settings,
    http: httpx.AsyncClient,
) -> SocialConnection:
    spec = PLATFORMS.get(platform)
    if spec is None:
        raise CallbackFailed("unsupported_platform")

    client_id = spec.client_id(settings)
    client_secret = spec.client_secret(settings)
    if not client_id or not client_secret:
        raise CallbackFailed(f"{platform}_not_configured")

    if platform == "pinterest":
        return await _pinterest_oauth(code, user_id, redirect_uri, client_id, client_secret, http)
    return await _instagram_oauth(code, user_id, redirect_uri, client_id, client_secret, http)


async def _pinterest_oauth(code, user_id, redirect_uri, client_id, client_secret, http) -> SocialConnection:
    token_resp = await http.post(
        "https://api.pinterest.com/v5/oauth/token",
        auth=(client_id, client_secret),
        data={"grant_type": "authorization_code", "code": code, "redirect_uri": redirect_uri},
    )
    if not token_resp.is_success:
        logger.error("Pinterest token exchange failed: %s", safe_json(token_resp))
        raise CallbackFailed("token_exchange_failed")

    tokens = token_resp.json()
    connection = SocialConnection(
        user_id=user_id,
        platform="pinterest",
        access_token=tokens.get("access_token", ""),
        refresh_token=tokens.get("refresh_token"),
        expires_in=tokens.get("expires_in"),
    )

    user_resp = await http.get(
        "https://api.pinterest.com/v5/user_account",
        headers={"Authorization": f"Bearer {connection.access_token}"},
    )
    if user_resp.is_success:
        account = safe_json(user_resp)
        connection.platform_user_id = str(account.get("id") or "")
        connection.platform_username = account.get("username") or ""
    return connection


async def _instagram_oauth(code, user_id, redirect_uri, client_id, client_secret, http) -> SocialConnection:
    token_resp = await http.post(
        "https://api.instagram.com/oauth/access_token",
        data={
            "client_id": client_id,
            "client_secret": client_secret,
            "grant_type": "authorization_code",
            "redirect_uri": redirect_uri,
            "code": code,
        },
    )
    if not token_resp.is_success:
        logger.error("Instagram token exchange failed: %s", safe_json(token_resp))
        raise CallbackFailed("token_exchange_failed")

    tokens = token_resp.json()
    connection = SocialConnection(
        user_id=user_id,
        platform="instagram",
        access_token=tokens.get("access_token", ""),
        platform_user_id=str(tokens.get("user_id") or ""),
    )

    user_resp = await http.get(
        f"https://graph.instagram.com/{connection.platform_user_id}",
        params={"fields": "id,username", "access_token": connection.access_token},
    )
    if user_resp.is_success:
        connection.platform_username = safe_json(user_resp).get("username") or ""
    return connection


def encode_connection(connection: SocialConnection) -> str:
    raw = connection.model_dump_json(by_alias=True)
    return base64.b64encode(raw.encode("utf-8")).decode("ascii")


# ── Sync ──────────────────────────────────────────────────────────────────────

async def sync_platform(platform: str, access_token: str, http: httpx.AsyncClient) -> list[SyncedItem]:
    get_platform(platform)
    logger.info("Syncing %s data", platform)

    if platform == "pinterest":
        resp = await http.get(
            "https://api.pinterest.com/v5/pins",
            headers={"Authorization": f"Bearer {access_token}"},
        )
        if not resp.is_success:
            logger.warning("Pinterest pin listing failed: %d", resp.status_code)
            return []
        return [_pin_item(pin) for pin in safe_json(resp).get("items") or []]

    resp = await http.get(
        "https://graph.instagram.com/me/media",
        params={
            "fields": "id,caption,media_type,media_url,permalink,timestamp",
            "access_token": access_token,
        },
    )
    if not resp.is_success:
        logger.warning("Instagram media listing failed: %d", resp.status_code)
        return []
    return [_media_item(post) for post in safe_json(resp).get("data") or []]


def _pin_item(pin: dict[str, Any]) -> SyncedItem:
    images = (pin.get("media") or {}).get("images") or {}
    return SyncedItem(
        platform="pinterest",
        data_type="pin",
        platform_item_id=str(pin.get("id", "")),
        title=pin.get("title") or "",
        description=pin.get("description") or "",
        image_url=(images.get("564x") or {}).get("url") or "",
        url=pin.get("link") or "",
        metadata={"boardId": pin.get("board_id"), "boardName": pin.get("board_name")},
    )


def _media_item(post: dict[str, Any]) -> SyncedItem:
    return SyncedItem(
        platform="instagram",
        data_type="post",
        platform_item_id=str(post.get("id", "")),
        description=post.get("caption") or "",
        image_url=post.get("media_url") or "",
        url=post.get("permalink") or "",
        metadata={"mediaType": post.get("media_type"), "timestamp": post.get("timestamp")},
    )
