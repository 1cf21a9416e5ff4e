"""RSS/Atom feed search for sources that publish a feed."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone

import feedparser
import httpx

from storyscale.errors import SourceFetchFailure
from storyscale.models import SourceFilters
from storyscale.research import register_research_provider
from storyscale.research.base import BaseResearchProvider, SearchHit
from storyscale.retry import retry_async

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r"<[^>]+>")


def _strip_html(text: str) -> str:
    return _TAG_RE.sub("", text or "").strip()


def _query_terms(query: str) -> list[str]:
    return [w for w in re.findall(r"\w+", query.lower()) if len(w) > 3]


def _published(entry) -> str:
    parsed = entry.get("published_parsed") or entry.get("updated_parsed")
    if not parsed:
        return ""
    return datetime(*parsed[:6], tzinfo=timezone.utc).date().isoformat()


@register_research_provider("feed")
class FeedProvider(BaseResearchProvider):
    """Matches query terms against a source's own feed entries."""

    @property
    def name(self) -> str:
        return "feed"

    async def search(
        self,
        query: str,
        limit: int = 5,
        filters: SourceFilters | None = None,
        search_depth: str = "basic",
        feed_url: str = "",
    ) -> list[SearchHit]:
        if not feed_url:
            raise SourceFetchFailure("feed", "validation", "No feed URL for source")

        body = await retry_async(self._fetch, feed_url, max_retries=2, base_delay=0.5)
        feed = feedparser.parse(body)
        if feed.bozo and not feed.entries:
            raise SourceFetchFailure(feed_url, "validation", f"Unparseable feed: {feed_url}")

        terms = _query_terms(query)
        hits = []
        for entry in feed.entries:
            title = entry.get("title", "")
            summary = _strip_html(entry.get("summary", ""))
            haystack = f"{title} {summary}".lower()
            matched = sum(1 for t in terms if t in haystack)
            if terms and not matched:
                continue
            published = _published(entry)
            if filters is not None and filters.date_from and published:
                if published < filters.date_from:
                    continue
            hits.append(SearchHit(
                url=entry.get("link", ""),
                title=title,
                content=summary or title,
                score=round(matched / len(terms), 3) if terms else 0.5,
                author=entry.get("author", ""),
                published=published,
            ))

        hits = [h for h in hits if h.url]
        hits.sort(key=lambda h: h.score, reverse=True)
        logger.debug("Feed %s matched %d entries for '%s'", feed_url, len(hits), query)
        return hits[:limit]

    async def _fetch(self, url: str) -> str:
        async with httpx.AsyncClient(timeout=15, follow_redirects=True) as client:
            resp = await client.get(url)
            resp.raise_for_status()
            return resp.text
