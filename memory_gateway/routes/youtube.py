"""
youtube.py — YouTube metadata and transcript endpoints.

Routes:
  GET /api/youtube/search?q=...&maxResults=10  → { videos: [...] }
  GET /api/youtube/video?id=...                → video object
  GET /api/youtube/transcript?id=...           → { transcript, segments?, fallback?, videoId }

`id` may be a bare video id or any YouTube link; it is normalised first.
Upstream failures keep their classified status (see
services/youtube_data.py); anything unexpected is a 500 with a
route-specific message.
"""

import logging
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, Query

from memory_gateway.core.config import Settings, get_settings
from memory_gateway.core.errors import GatewayError, MissingParameter, unexpected_error
from memory_gateway.core.http import get_http_client
from memory_gateway.models.youtube import SearchResponse, TranscriptResponse, VideoDetails
from memory_gateway.services.transcripts import (
    TranscriptFetcher,
    TranscriptResolver,
    get_transcript_fetcher,
)
from memory_gateway.services.video_ids import normalise_video_id
from memory_gateway.services.youtube_data import YouTubeDataClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/youtube", tags=["youtube"])


def get_youtube_client(
    settings: Settings = Depends(get_settings),
    http: httpx.AsyncClient = Depends(get_http_client),
) -> YouTubeDataClient:
    return YouTubeDataClient(settings, http)


@router.get("/search", response_model=SearchResponse)
async def search_videos(
    q: Optional[str] = None,
    max_results: int = Query(10, alias="maxResults"),
    youtube: YouTubeDataClient = Depends(get_youtube_client),
    settings: Settings = Depends(get_settings),
) -> SearchResponse:
    if not q:
        raise MissingParameter("Missing query parameter (q)")

    try:
        videos = await youtube.search(q, max_results)
    except GatewayError:
        raise
    except Exception as exc:
        logger.error("YouTube search error: %s", exc, exc_info=True)
        raise unexpected_error("YouTube search failed: ", exc, settings.is_development) from exc
    return SearchResponse(videos=videos)


@router.get("/video", response_model=VideoDetails)
async def get_video(
    video_ref: Optional[str] = Query(None, alias="id"),
    youtube: YouTubeDataClient = Depends(get_youtube_client),
    settings: Settings = Depends(get_settings),
) -> VideoDetails:
    if not video_ref:
        raise MissingParameter("Missing video ID parameter (id)")

    video_id = normalise_video_id(video_ref)
    logger.info("Fetching video data for: %s", video_id)
    try:
        return await youtube.get_video(video_id)
    except GatewayError:
        raise
    except Exception as exc:
        logger.error("YouTube video error: %s", exc, exc_info=True)
        raise unexpected_error("YouTube video fetch failed: ", exc, settings.is_development) from exc


@router.get(
    "/transcript",
    response_model=TranscriptResponse,
    response_model_exclude_none=True,
)
async def get_transcript(
    video_ref: Optional[str] = Query(None, alias="id"),
    fetcher: TranscriptFetcher = Depends(get_transcript_fetcher),
    youtube: YouTubeDataClient = Depends(get_youtube_client),
    settings: Settings = Depends(get_settings),
) -> TranscriptResponse:
    if not video_ref:
        raise MissingParameter("Missing video ID parameter (id)")

    video_id = normalise_video_id(video_ref)
    logger.info("Fetching transcript for video: %s", video_id)
    try:
        return await TranscriptResolver(fetcher, youtube).resolve(video_id)
    except GatewayError:
        raise
    except Exception as exc:
        logger.error("YouTube transcript error: %s", exc, exc_info=True)
        raise unexpected_error("Transcript fetch failed: ", exc, settings.is_development) from exc
