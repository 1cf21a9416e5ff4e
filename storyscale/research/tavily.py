"""Tavily search API provider."""

from __future__ import annotations

import logging

import httpx

from storyscale.errors import SourceFetchFailure
from storyscale.models import SourceFilters
from storyscale.research import register_research_provider
from storyscale.research.base import BaseResearchProvider, SearchHit
from storyscale.retry import retry_async

logger = logging.getLogger(__name__)

TAVILY_API_URL = "https://api.tavily.com/search"


@register_research_provider("tavily")
class TavilyProvider(BaseResearchProvider):
    """Web search through Tavily, scoped to source domains."""

    @property
    def name(self) -> str:
        return "tavily"

    async def search(
        self,
        query: str,
        limit: int = 5,
        filters: SourceFilters | None = None,
        search_depth: str = "basic",
        feed_url: str = "",
    ) -> list[SearchHit]:
        cfg = self.provider_config
        api_key = cfg.get("api_key", "")
        if not api_key:
            raise SourceFetchFailure("tavily", "unavailable", "Tavily API key not configured")

        payload = {
            "query": query,
            "search_depth": search_depth,
            "max_results": limit,
            "include_answer": False,
        }
        if filters is not None:
            if filters.include_domains:
                payload["include_domains"] = list(filters.include_domains)
            if filters.exclude_domains:
                payload["exclude_domains"] = list(filters.exclude_domains)
            if filters.date_from:
                payload["start_date"] = filters.date_from
            if filters.date_to:
                payload["end_date"] = filters.date_to

        data = await retry_async(
            self._post, api_key, payload,
            max_retries=cfg.get("max_retries", 2), base_delay=0.5,
        )

        hits = []
        for item in data.get("results", []):
            url = item.get("url", "")
            if not url:
                continue
            hits.append(SearchHit(
                url=url,
                title=item.get("title", ""),
                content=item.get("content", ""),
                score=max(0.0, min(1.0, float(item.get("score", 0.5)))),
                published=item.get("published_date", "") or "",
            ))
        logger.debug("Tavily returned %d hits for '%s'", len(hits), query)
        return hits

    async def _post(self, api_key: str, payload: dict) -> dict:
        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        async with httpx.AsyncClient(timeout=self.provider_config.get("timeout", 30)) as client:
            resp = await client.post(TAVILY_API_URL, json=payload, headers=headers)
            resp.raise_for_status()
            return resp.json()
