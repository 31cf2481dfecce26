"""
transcripts.py — Resolve a text transcript for a YouTube video.

Strategy (an ordered list of attempts, first result wins):
  1. Caption track via youtube-transcript-api. Segments are joined with
     spaces and whitespace-collapsed. Captions that exist but are all
     empty end the chain immediately with TranscriptUnavailable.
  2. Video description via the YouTube Data API, only when a key is
     configured and the description is longer than 100 characters.
     Returned truncated to 2000 characters with fallback=True.

If every attempt passes, TranscriptUnavailable (404) is raised carrying
the caption library's own error message and a suggestion for the user.
"""

import asyncio
import logging
import re
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional

from youtube_transcript_api import YouTubeTranscriptApi

from memory_gateway.core.errors import TranscriptUnavailable
from memory_gateway.models.youtube import TranscriptResponse, TranscriptSegment
from memory_gateway.services.youtube_data import YouTubeDataClient

logger = logging.getLogger(__name__)

MIN_DESCRIPTION_LEN = 100
MAX_DESCRIPTION_LEN = 2000

NO_CAPTIONS_MESSAGE = "This video does not have captions available."
FALLBACK_MESSAGE = "Using video description as transcript (full transcript not available)"
SUGGESTION = "The video may not have captions, or the video may be private/unavailable."

_WS_RE = re.compile(r"\s+")


class TranscriptFetcher:
    """Blocking caption fetch wrapped for use from async code."""

    def __init__(self, api: Optional[YouTubeTranscriptApi] = None) -> None:
        self._api = api or YouTubeTranscriptApi()

    def fetch_sync(self, video_id: str) -> list[dict]:
        fetched = self._api.fetch(video_id)
        return fetched.to_raw_data()

    async def fetch(self, video_id: str) -> list[dict]:
        """Raw segments: [{"text", "start", "duration"}, ...]."""
        return await asyncio.to_thread(self.fetch_sync, video_id)


def get_transcript_fetcher() -> TranscriptFetcher:
    """FastAPI dependency; tests override it with a stub fetcher."""
    return TranscriptFetcher()


def join_segments(segments: list[dict]) -> str:
    text = " ".join(str(seg.get("text") or "") for seg in segments)
    return _WS_RE.sub(" ", text).strip()


Attempt = Callable[[str], Awaitable[Optional[TranscriptResponse]]]


@dataclass
class TranscriptResolver:
    fetcher: TranscriptFetcher
    youtube: YouTubeDataClient
    caption_error: Optional[str] = field(default=None, init=False)

    async def resolve(self, video_id: str) -> TranscriptResponse:
        attempts: list[Attempt] = [self._from_captions, self._from_description]
        for attempt in attempts:
            result = await attempt(video_id)
            if result is not None:
                return result

        message = self.caption_error or NO_CAPTIONS_MESSAGE
        logger.warning("Transcript not available for %s: %s", video_id, message)
        raise TranscriptUnavailable(
            "Transcript not available",
            message=message,
            videoId=video_id,
            suggestion=SUGGESTION,
        )

    async def _from_captions(self, video_id: str) -> Optional[TranscriptResponse]:
        try:
            segments = await self.fetcher.fetch(video_id)
        except Exception as exc:
            # Disabled captions, unavailable video or a blocked IP all
            # fall through to the description.
            logger.warning("Transcript fetch error for %s: %s", video_id, exc)
            self.caption_error = str(exc) or None
            return None

        text = join_segments(segments)
        if not text:
            logger.warning("Empty transcript for video: %s", video_id)
            raise TranscriptUnavailable("Transcript not available", message=NO_CAPTIONS_MESSAGE)

        logger.info("Fetched transcript for %s (%d chars)", video_id, len(text))
        return TranscriptResponse(
            transcript=text,
            segments=[
                TranscriptSegment(
                    text=str(seg.get("text") or ""),
                    start=seg.get("start") or 0.0,
                    duration=seg.get("duration") or 0.0,
                )
                for seg in segments
            ],
            video_id=video_id,
        )

    async def _from_description(self, video_id: str) -> Optional[TranscriptResponse]:
        if not self.youtube.enabled:
            logger.error("YOUTUBE_API_KEY not set, cannot fetch video description")
            return None

        try:
            description = await self.youtube.get_description(video_id)
        except Exception as exc:
            logger.error("Description fallback failed for %s: %s", video_id, exc)
            return None

        if not description or len(description) <= MIN_DESCRIPTION_LEN:
            logger.warning(
                "Video description too short (%d chars)", len(description or "")
            )
            return None

        logger.info("Using description as fallback transcript for video: %s", video_id)
        return TranscriptResponse(
            transcript=description[:MAX_DESCRIPTION_LEN],
            fallback=True,
            message=FALLBACK_MESSAGE,
            video_id=video_id,
        )
