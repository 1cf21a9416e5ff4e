"""Abstract base class for research providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from storyscale.models import SourceFilters
from storyscale.research.scraper import ScrapedPage, fetch_page


@dataclass
class SearchHit:
    """One search result as returned by a provider."""

    url: str
    title: str
    content: str
    score: float = 0.5  # 0-1
    author: str = ""
    published: str = ""


class BaseResearchProvider(ABC):
    """Search and scrape. Errors raise; an empty list means nothing was found."""

    def __init__(self, config: dict):
        self.config = config

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @property
    def provider_config(self) -> dict:
        from storyscale.config import get_research_provider_config

        return get_research_provider_config(self.config, self.name)

    @abstractmethod
    async def search(
        self,
        query: str,
        limit: int = 5,
        filters: SourceFilters | None = None,
        search_depth: str = "basic",
        feed_url: str = "",
    ) -> list[SearchHit]:
        """Search for a query, optionally restricted to domains/dates in filters."""
        ...

    async def scrape(self, url: str) -> ScrapedPage:
        """Fetch and extract one page."""
        return await fetch_page(url)
