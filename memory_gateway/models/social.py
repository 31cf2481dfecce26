"""
social.py — Pydantic models for the Pinterest / Instagram connection API.
"""

from typing import Any, Optional

from pydantic import Field

from memory_gateway.models.base import CamelModel


class ConnectResponse(CamelModel):
    auth_url: str
    platform: str


class SocialConnection(CamelModel):
    """Token bundle handed back to the frontend after an OAuth callback."""

    user_id:           str
    platform:          str
    access_token:      str = ""
    refresh_token:     Optional[str] = None
    expires_in:        Optional[int] = None
    platform_user_id:  str = ""
    platform_username: str = ""


class SyncRequest(CamelModel):
    user_id:      Optional[str] = None
    access_token: Optional[str] = None


class SyncedItem(CamelModel):
    platform:         str
    data_type:        str              # "pin" | "post"
    platform_item_id: str
    title:            str = ""
    description:      str = ""
    image_url:        str = ""
    url:              str = ""
    metadata:         dict[str, Any] = Field(default_factory=dict)


class SyncResponse(CamelModel):
    platform:     str
    synced_count: int
    data:         list[SyncedItem]


class SocialDataResponse(CamelModel):
    user_id:   str
    platforms: list[str] = Field(default_factory=list)
    data:      list[SyncedItem] = Field(default_factory=list)
