"""
youtube_data.py — Thin async wrapper around the YouTube Data API v3.

Used by the /api/youtube routes and by the transcript resolver's
description fallback.

Graceful degradation: without YOUTUBE_API_KEY the client reports itself
disabled; search/video routes answer 500 and the transcript resolver
skips its description fallback.

Error classification for videos.list follows error.errors[0].reason:
  quotaExceeded → 403, keyInvalid → 401, videoNotFound → 404,
  forbidden → 403, anything else → upstream status.
A 200 with an empty items list is also reported as VideoNotFound (404).
"""

import logging
import re
from typing import Any, Optional

import httpx

from memory_gateway.core.config import Settings
from memory_gateway.core.errors import (
    GatewayError,
    ProviderNotConfigured,
    VideoNotFound,
    YouTubeApiError,
)
from memory_gateway.core.http import BROWSER_USER_AGENT, mask_secret, safe_json
from memory_gateway.models.youtube import VideoDetails, VideoSummary

logger = logging.getLogger(__name__)

YOUTUBE_API_BASE = "https://www.googleapis.com/youtube/v3"

VIDEO_NOT_FOUND_MESSAGE = (
    "Video not found. The video may be private, deleted, or the ID is incorrect."
)

_DURATION_RE = re.compile(r"PT(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?")

# reason → (status, message)
_REASON_ERRORS: dict[str, tuple[int, str]] = {
    "quotaExceeded": (403, "YouTube API quota exceeded. Please check your API key limits."),
    "keyInvalid": (401, "Invalid YouTube API key. Please check your .env file."),
    "videoNotFound": (404, VIDEO_NOT_FOUND_MESSAGE),
    "forbidden": (403, "Access forbidden. The API key may not have permission to access this video."),
}


# ── Duration helpers ──────────────────────────────────────────────────────────

def parse_iso_duration(duration: str) -> tuple[int, int, int]:
    """Split an ISO-8601 duration (PT#H#M#S) into (hours, minutes, seconds).

    Anything without a PT section (e.g. "P0D" on live streams) is (0, 0, 0).
    """
    match = _DURATION_RE.search(duration or "")
    if not match:
        return 0, 0, 0
    hours, minutes, seconds = (int(g) if g else 0 for g in match.groups())
    return hours, minutes, seconds


def duration_seconds(duration: str) -> int:
    hours, minutes, seconds = parse_iso_duration(duration)
    return hours * 3600 + minutes * 60 + seconds


def format_duration(duration: str) -> str:
    """PT4M13S → "04:13", PT1H2M3S → "1:02:03"."""
    hours, minutes, seconds = parse_iso_duration(duration)
    prefix = f"{hours}:" if hours > 0 else ""
    return f"{prefix}{minutes:02d}:{seconds:02d}"


def _thumbnail(snippet: dict[str, Any]) -> Optional[str]:
    thumbnails = snippet.get("thumbnails") or {}
    for variant in ("medium", "default"):
        url = (thumbnails.get(variant) or {}).get("url")
        if url:
            return url
    return None


def _count(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


# ── Client ────────────────────────────────────────────────────────────────────

class YouTubeDataClient:
    def __init__(self, settings: Settings, http: httpx.AsyncClient) -> None:
        self.api_key = settings.youtube_api_key
        self.enabled = bool(self.api_key)
        self.http = http
        self.headers = {
            "Referer": settings.frontend_url,
            "User-Agent": BROWSER_USER_AGENT,
        }

    def ensure_configured(self) -> None:
        if not self.enabled:
            logger.error("YOUTUBE_API_KEY not set")
            raise ProviderNotConfigured(
                "YouTube API key not configured. Please set YOUTUBE_API_KEY in your .env file."
            )

    async def _get(self, resource: str, params: dict[str, Any]) -> httpx.Response:
        url = f"{YOUTUBE_API_BASE}/{resource}"
        logger.debug("YouTube API %s %s", resource, mask_secret(str(params), self.api_key))
        return await self.http.get(url, params={**params, "key": self.api_key}, headers=self.headers)

    async def search(self, query: str, max_results: int = 10) -> list[VideoSummary]:
        """search.list restricted to videos."""
        self.ensure_configured()
        response = await self._get(
            "search",
            {"part": "snippet", "q": query, "maxResults": max_results, "type": "video"},
        )
        data = safe_json(response)
        if not response.is_success:
            logger.error("YouTube search error %d: %s", response.status_code, data)
            message = (data.get("error") or {}).get("message") or "YouTube API error"
            raise YouTubeApiError(message, status_code=response.status_code)

        videos = []
        for item in data.get("items") or []:
            snippet = item.get("snippet") or {}
            videos.append(
                VideoSummary(
                    video_id=(item.get("id") or {}).get("videoId", ""),
                    title=snippet.get("title", ""),
                    description=snippet.get("description", ""),
                    thumbnail=_thumbnail(snippet),
                    channel_title=snippet.get("channelTitle", ""),
                    published_at=snippet.get("publishedAt", ""),
                )
            )
        return videos

    async def get_video(self, video_id: str) -> VideoDetails:
        """videos.list with snippet, contentDetails and statistics."""
        self.ensure_configured()
        response = await self._get(
            "videos",
            {"part": "snippet,contentDetails,statistics", "id": video_id},
        )
        data = safe_json(response)
        if not response.is_success:
            raise self._classify_error(response, data, video_id)

        items = data.get("items") or []
        if not items:
            logger.warning("Video not found in response: %s", video_id)
            raise VideoNotFound(VIDEO_NOT_FOUND_MESSAGE, videoId=video_id)

        video = items[0]
        snippet = video.get("snippet") or {}
        statistics = video.get("statistics") or {}
        duration = (video.get("contentDetails") or {}).get("duration", "")
        return VideoDetails(
            video_id=video.get("id", video_id),
            title=snippet.get("title", ""),
            description=snippet.get("description", ""),
            thumbnail=_thumbnail(snippet),
            channel_title=snippet.get("channelTitle", ""),
            channel_id=snippet.get("channelId", ""),
            published_at=snippet.get("publishedAt", ""),
            duration=duration_seconds(duration),
            duration_formatted=format_duration(duration),
            view_count=_count(statistics.get("viewCount")),
            like_count=_count(statistics.get("likeCount")),
        )

    async def get_description(self, video_id: str) -> Optional[str]:
        """Snippet description for *video_id*, or None if the lookup fails."""
        response = await self._get("videos", {"part": "snippet", "id": video_id})
        data = safe_json(response)
        items = data.get("items") or []
        if not response.is_success or not items:
            reason = ((data.get("error") or {}).get("errors") or [{}])[0].get("reason", "unknown")
            logger.error("Video API lookup failed for %s (reason: %s)", video_id, reason)
            return None
        return (items[0].get("snippet") or {}).get("description")

    def _classify_error(self, response: httpx.Response, data: dict, video_id: str) -> GatewayError:
        error = data.get("error") or {}
        first = (error.get("errors") or [{}])[0]
        reason = first.get("reason")
        logger.error(
            "YouTube API error for %s: %d (reason: %s)", video_id, response.status_code, reason
        )

        if reason in _REASON_ERRORS:
            status, message = _REASON_ERRORS[reason]
            error_cls = VideoNotFound if reason == "videoNotFound" else YouTubeApiError
            return error_cls(
                message, status_code=status, videoId=video_id, details=first.get("message")
            )
        return YouTubeApiError(
            error.get("message") or "YouTube API error",
            status_code=response.status_code,
            details=error or None,
            videoId=video_id,
        )
