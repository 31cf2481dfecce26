"""
video_ids.py — Normalise the many shapes a YouTube video reference takes.

The frontend sometimes sends a pasted link instead of a bare id, so the
video and transcript routes run their `id` through extract_video_id()
before calling any upstream.
"""

import re
from typing import Optional

# Tried in order; shorts first so its 11-char id wins over the generic forms
_VIDEO_ID_PATTERNS = [
    re.compile(r"youtube\.com/shorts/([A-Za-z0-9_-]{11})"),
    re.compile(r"(?:youtube\.com/watch\?v=|youtu\.be/|youtube\.com/embed/|youtube\.com/v/)([^&\n?#]+)"),
    re.compile(r"youtube\.com/watch\?.*v=([^&\n?#]+)"),
    re.compile(r"youtu\.be/([^?\n#]+)"),
]
_BARE_ID_RE = re.compile(r"^[A-Za-z0-9_-]{11}$")


def extract_video_id(value: Optional[str]) -> Optional[str]:
    """Return the video id in *value*, or None if it is not a YouTube reference."""
    if not value:
        return None
    value = value.strip()

    for pattern in _VIDEO_ID_PATTERNS:
        match = pattern.search(value)
        if match and match.group(1):
            return match.group(1)

    if _BARE_ID_RE.match(value):
        return value
    return None


def normalise_video_id(value: str) -> str:
    """extract_video_id(), passing unrecognised strings through unchanged."""
    return extract_video_id(value) or value.strip()
