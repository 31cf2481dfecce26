"""
scrape.py — Pydantic models for the website scraping endpoint.
"""

from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel


class ScrapeResponse(BaseModel):
    url:         str
    title:       str
    content:     str             # description (if any) + body text
    description: Optional[str]   # <meta name="description">, null when absent


@dataclass
class PageSummary:
    """Result of extract_page_summary(); text is untruncated."""

    title:       Optional[str]
    description: Optional[str]
    text:        str
