"""Research gathering: fetch every selected source concurrently and keep what succeeds."""

from __future__ import annotations

import dataclasses
import logging

from storyscale.cache import CacheStore, research_fingerprint
from storyscale.concurrency import gather_tolerant
from storyscale.config import get_research_config
from storyscale.errors import SourceFetchFailure
from storyscale.models import (
    FetchFailure,
    ResearchItem,
    ResearchResult,
    RoutingDecision,
    SourceFilters,
    SourceSelection,
)
from storyscale.research.base import BaseResearchProvider, SearchHit
from storyscale.trace import PipelineTrace

logger = logging.getLogger(__name__)

ARTICLE_WEIGHT = 1.5
AUTHOR_BONUS = 0.5
DATE_BONUS = 0.3

SOURCE_TYPE_HINTS = (
    ("linkedin.com", "social"),
    ("twitter.com", "social"),
    ("x.com", "social"),
    ("medium.com", "blog"),
    ("techcrunch.com", "news"),
    ("github.com", "code"),
)


def classify_source_type(url: str) -> str:
    host = url.split("//", 1)[-1].split("/", 1)[0].lower()
    for hint, source_type in SOURCE_TYPE_HINTS:
        if host == hint or host.endswith("." + hint):
            return source_type
    return "article"


def research_confidence(items: list[ResearchItem]) -> float:
    """Weighted mean relevance; attributed, dated articles weigh more. 0 when empty."""
    if not items:
        return 0.0
    weighted = 0.0
    total = 0.0
    for item in items:
        weight = ARTICLE_WEIGHT if item.source_type == "article" else 1.0
        if item.author:
            weight += AUTHOR_BONUS
        if item.published:
            weight += DATE_BONUS
        weighted += item.relevance * weight
        total += weight
    return round(min(1.0, weighted / total), 4)


def rank_items(items: list[ResearchItem], limit: int) -> list[ResearchItem]:
    """Deduplicate by url (first wins), sort by relevance, cap."""
    seen: set[str] = set()
    unique = []
    for item in items:
        if item.url in seen:
            continue
        seen.add(item.url)
        unique.append(item)
    unique.sort(key=lambda i: i.relevance, reverse=True)
    return unique[:limit]


class ResearchGatherer:
    """Runs one fetch per SourceSelection through the configured research providers."""

    def __init__(
        self,
        config: dict,
        providers: dict[str, BaseResearchProvider] | None = None,
        cache: CacheStore | None = None,
        trace: PipelineTrace | None = None,
    ):
        self.config = config
        self.settings = get_research_config(config)
        if providers is None:
            from storyscale.research import build_research_providers

            providers = build_research_providers(config)
        self.providers = providers
        self.cache = cache
        self.trace = trace or PipelineTrace()

    def provider_for(self, selection: SourceSelection) -> BaseResearchProvider:
        if selection.source.feed_url and "feed" in self.providers:
            return self.providers["feed"]
        preferred = self.settings["search_provider"]
        if preferred in self.providers:
            return self.providers[preferred]
        for name, provider in self.providers.items():
            if name != "feed":
                return provider
        raise SourceFetchFailure(selection.source.domain, "unavailable", "No research provider")

    async def _fetch(self, selection: SourceSelection) -> list[ResearchItem]:
        source = selection.source
        provider = self.provider_for(selection)
        filters = selection.filters or SourceFilters()
        if not filters.include_domains and provider.name != "feed":
            filters = dataclasses.replace(filters, include_domains=(source.domain,))

        hits = await provider.search(
            selection.query,
            limit=selection.max_results,
            filters=filters,
            search_depth=selection.search_depth,
            feed_url=source.feed_url,
        )

        items = []
        for hit in hits[: selection.max_results]:
            hit = await self._enrich(provider, selection, hit)
            items.append(ResearchItem(
                source_id=source.domain,
                url=hit.url,
                title=hit.title,
                content=hit.content,
                relevance=max(0.0, min(1.0, hit.score)),
                credibility=max(0.0, min(1.0, source.trust_score / 10)),
                author=hit.author,
                published=hit.published,
                source_type=classify_source_type(hit.url),
                metadata={
                    "provider": provider.name,
                    "query": selection.query,
                    "priority": selection.priority,
                    "source_name": source.name,
                    "language": source.language,
                },
            ))
        return items

    async def _enrich(
        self, provider: BaseResearchProvider, selection: SourceSelection, hit: SearchHit,
    ) -> SearchHit:
        """Replace a short snippet with the scraped article when the source allows it."""
        source = selection.source
        if len(hit.content) >= self.settings["scrape_min_chars"]:
            return hit
        if not source.scraping_allowed or source.paywall:
            return hit
        try:
            page = await provider.scrape(hit.url)
        except Exception as exc:
            logger.debug("Scrape of %s failed, keeping snippet: %s", hit.url, exc)
            return hit
        if not page.content:
            return hit
        return dataclasses.replace(
            hit,
            content=page.content,
            title=hit.title or page.title,
            author=hit.author or page.author,
            published=hit.published or page.date,
        )

    async def gather_detailed(
        self, selections: list[SourceSelection],
    ) -> tuple[list[ResearchItem], list[FetchFailure]]:
        batches, failures = await gather_tolerant(
            (self._fetch(s) for s in selections),
            labels=[s.source.domain for s in selections],
            timeout=self.settings["timeout"],
        )
        for failure in failures:
            self.trace.emit(
                "research", "source_failed",
                source=failure.label, kind=failure.kind, error=failure.message,
            )
        items = rank_items(
            [item for batch in batches for item in batch], self.settings["max_items"],
        )
        logger.info(
            "Gathered %d items from %d/%d sources",
            len(items), len(selections) - len(failures), len(selections),
        )
        return items, failures

    async def gather(self, selections: list[SourceSelection]) -> list[ResearchItem]:
        items, _ = await self.gather_detailed(selections)
        return items

    async def research(self, decision: RoutingDecision, enabled: bool = True) -> ResearchResult:
        """Gather for a routing decision, with caching and a confidence score."""
        if not enabled:
            self.trace.emit("research", "research_skipped")
            return ResearchResult(confidence=1.0)

        selections = decision.selections
        key = research_fingerprint(decision.queries, [s.source.domain for s in selections])
        if self.cache is not None:
            cached = await self.cache.get(key)
            if cached is not None:
                self.trace.emit("research", "research_cache_hit", items=len(cached.items))
                return dataclasses.replace(cached, cache_hit=True)

        items, failures = await self.gather_detailed(selections)
        result = ResearchResult(
            items=items,
            failures=failures,
            confidence=research_confidence(items),
        )
        self.trace.emit(
            "research", "research_gathered",
            items=len(items), failures=len(failures), confidence=result.confidence,
        )

        if self.cache is not None and items:
            await self.cache.set(key, result, self.settings["cache_ttl_hours"] * 3600)
        return result
