"""Serper.dev web search provider."""

from __future__ import annotations

import logging

import httpx

from storyscale.errors import SourceFetchFailure
from storyscale.models import SourceFilters
from storyscale.research import register_research_provider
from storyscale.research.base import BaseResearchProvider, SearchHit
from storyscale.retry import retry_async

logger = logging.getLogger(__name__)

SERPER_API_URL = "https://google.serper.dev/search"


@register_research_provider("serper")
class SerperProvider(BaseResearchProvider):
    """Google results via Serper, with ``site:`` scoping per source."""

    @property
    def name(self) -> str:
        return "serper"

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
            raise SourceFetchFailure("serper", "unavailable", "Serper API key not configured")

        q = query
        if filters is not None and filters.include_domains:
            sites = " OR ".join(f"site:{d}" for d in filters.include_domains)
            q = f"{query} {sites}"
        payload = {"q": q, "num": limit, "gl": cfg.get("country", "no")}
        if filters is not None and filters.date_from:
            # Past month
            payload["tbs"] = "qdr:m"

        data = await retry_async(
            self._post, api_key, payload,
            max_retries=cfg.get("max_retries", 2), base_delay=0.5,
        )

        hits = []
        organic = data.get("organic", [])
        for rank, item in enumerate(organic):
            url = item.get("link", "")
            title = item.get("title", "")
            if not url or not title:
                continue
            hits.append(SearchHit(
                url=url,
                title=title,
                content=item.get("snippet", title),
                # Serper has no relevance score; derive one from rank
                score=round(1.0 - rank / max(len(organic), 1) * 0.5, 3),
                published=item.get("date", ""),
            ))
        logger.debug("Serper returned %d hits for '%s'", len(hits), q)
        return hits[:limit]

    async def _post(self, api_key: str, payload: dict) -> dict:
        headers = {
            "X-API-KEY": api_key,
            "Content-Type": "application/json",
        }
        async with httpx.AsyncClient(timeout=self.provider_config.get("timeout", 30)) as client:
            resp = await client.post(SERPER_API_URL, json=payload, headers=headers)
            resp.raise_for_status()
            return resp.json()
