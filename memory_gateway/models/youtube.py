"""
youtube.py — Pydantic models for the YouTube metadata and transcript API.
"""

from typing import Optional

from memory_gateway.models.base import CamelModel


class VideoSummary(CamelModel):
    """One search hit."""

    video_id:      str
    title:         str = ""
    description:   str = ""
    thumbnail:     Optional[str] = None   # medium variant, else default
    channel_title: str = ""
    published_at:  str = ""


class SearchResponse(CamelModel):
    videos: list[VideoSummary]


class VideoDetails(VideoSummary):
    channel_id:         str = ""
    duration:           int = 0      # seconds
    duration_formatted: str = "00:00"
    view_count:         int = 0
    like_count:         int = 0


class TranscriptSegment(CamelModel):
    text:     str
    start:    float = 0.0
    duration: float = 0.0


class TranscriptResponse(CamelModel):
    transcript: str
    video_id:   str
    segments:   Optional[list[TranscriptSegment]] = None
    fallback:   Optional[bool] = None   # True when the description stands in for captions
    message:    Optional[str] = None
