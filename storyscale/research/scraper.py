"""Article content extraction using trafilatura."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx
import trafilatura

from storyscale.retry import retry_async

logger = logging.getLogger(__name__)

USER_AGENT = "storyscale-research/0.1 (+https://github.com/storyscale)"


@dataclass
class ScrapedPage:
    url: str
    title: str
    content: str
    author: str = ""
    date: str = ""


async def _fetch_html(url: str, timeout: float) -> str:
    """Fetch raw HTML with httpx (async, retryable)."""
    headers = {"User-Agent": USER_AGENT}
    async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
        resp = await client.get(url, headers=headers)
        resp.raise_for_status()
        return resp.text


async def fetch_page(url: str, timeout: float = 15, max_retries: int = 2) -> ScrapedPage:
    """Download a page and extract its main text and metadata.

    Raises on transport failures; a page with no extractable text comes back
    with empty ``content``.
    """
    html = await retry_async(
        _fetch_html, url, timeout, max_retries=max_retries, base_delay=0.5,
    )
    text = trafilatura.extract(html, include_comments=False, include_tables=False) or ""
    meta = trafilatura.extract_metadata(html)

    page = ScrapedPage(url=url, title="", content=text)
    if meta is not None:
        page.title = meta.title or ""
        page.author = meta.author or ""
        page.date = meta.date or ""
    logger.debug("Extracted %d chars from %s", len(text), url)
    return page
