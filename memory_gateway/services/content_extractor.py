"""
content_extractor.py — Turn a web page into plain text for note-taking.

Strategy:
  - Fetch with httpx using a browser User-Agent; any non-2xx or network
    failure is ScrapeFailed (500).
  - extract_page_summary() pulls <title>, <meta name="description"> and the
    tag-stripped body text with regular expressions. It is a pure function
    so it can be tested without the network.
  - Body text is capped at 5 000 chars (plus "..."), the description is
    prepended, and anything under 50 chars is NoMeaningfulContent (404).

Regex extraction is deliberately best-effort, not an HTML parser: nested
or malformed markup can leak into the text.
"""

import logging
import re
from urllib.parse import urlparse

import httpx

from memory_gateway.core.errors import NoMeaningfulContent, ScrapeFailed
from memory_gateway.core.http import BROWSER_USER_AGENT
from memory_gateway.models.scrape import PageSummary, ScrapeResponse

logger = logging.getLogger(__name__)

_SCRIPT_RE = re.compile(r"<script[^>]*>[\s\S]*?</script>", re.IGNORECASE)
_STYLE_RE  = re.compile(r"<style[^>]*>[\s\S]*?</style>",  re.IGNORECASE)
_TAG_RE    = re.compile(r"<[^>]+>")
_WS_RE     = re.compile(r"\s+")
_TITLE_RE  = re.compile(r"<title[^>]*>([^<]+)</title>", re.IGNORECASE)
_DESC_RE   = re.compile(
    r"""<meta[^>]*name=["']description["'][^>]*content=["']([^"']+)["']""",
    re.IGNORECASE,
)

MAX_TEXT_LEN = 5_000
MIN_CONTENT_LEN = 50


def strip_html(html: str) -> str:
    # Remove script and style blocks first (including JSON-LD, inline JS, CSS)
    text = _SCRIPT_RE.sub("", html)
    text = _STYLE_RE.sub("", text)
    text = _TAG_RE.sub(" ", text)
    text = _WS_RE.sub(" ", text)
    return text.strip()


def extract_page_summary(html: str) -> PageSummary:
    """Title, meta description and full body text of *html* (first matches only)."""
    title_m = _TITLE_RE.search(html)
    desc_m = _DESC_RE.search(html)
    return PageSummary(
        title=title_m.group(1).strip() if title_m else None,
        description=desc_m.group(1).strip() if desc_m else None,
        text=strip_html(html),
    )


def truncate_text(text: str, limit: int = MAX_TEXT_LEN) -> str:
    return text[:limit] + "..." if len(text) > limit else text


def compose_content(summary: PageSummary) -> str:
    body = truncate_text(summary.text)
    return f"{summary.description}\n\n{body}" if summary.description else body


async def fetch_page(url: str, http: httpx.AsyncClient) -> str:
    try:
        resp = await http.get(url, headers={"User-Agent": BROWSER_USER_AGENT})
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        logger.warning("fetch_page failed for %s: %s", url, exc)
        raise ScrapeFailed(f"Failed to scrape website: {str(exc) or type(exc).__name__}", url=url) from exc

    if not resp.is_success:
        logger.warning("fetch_page got HTTP %d for %s", resp.status_code, url)
        raise ScrapeFailed(
            f"Failed to scrape website: HTTP {resp.status_code}: {resp.reason_phrase}",
            url=url,
        )
    return resp.text


async def scrape_website(url: str, http: httpx.AsyncClient) -> ScrapeResponse:
    """Fetch *url* and return its cleaned text content."""
    logger.info("Scraping website: %s", url)
    html = await fetch_page(url, http)
    summary = extract_page_summary(html)
    content = compose_content(summary)

    if len(content.strip()) < MIN_CONTENT_LEN:
        raise NoMeaningfulContent(
            "Could not extract meaningful content from website", url=url
        )

    logger.info("Scraped %s (%d chars)", url, len(content))
    return ScrapeResponse(
        url=url,
        title=summary.title or _hostname(url),
        content=content,
        description=summary.description,
    )


def _hostname(url: str) -> str:
    return urlparse(url).hostname or url
