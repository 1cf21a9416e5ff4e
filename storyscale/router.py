"""Source router: picks research sources for a request and estimates their cost."""

from __future__ import annotations

import dataclasses
import logging
import math
import os
from datetime import date, timedelta

from storyscale.classify import SPECIALIZED_KEYWORDS, choose_strategy, is_specialized_topic
from storyscale.config import LOCAL_LANGUAGE, LOCAL_MARKET, get_router_config
from storyscale.models import (
    ContentRequest,
    RequestClassification,
    RoutingDecision,
    SourceDescriptor,
    SourceFilters,
    SourceSelection,
)
from storyscale.sources import SourceRegistry, load_registry
from storyscale.sources.registry import specialization_matches

logger = logging.getLogger(__name__)

ADVANCED_QUERY_COST = 0.05
BASIC_QUERY_COST = 0.02
PREMIUM_SOURCE_OVERHEAD = 0.03

BASE_TIME_MS = 500
PRIMARY_TIME_MS = 300
SECONDARY_TIME_MS = 250
INTERNATIONAL_TIME_MS = 200
SEQUENTIAL_TIME_MS = 250

MAX_QUERIES = 3
INTERNATIONAL_LOOKBACK_DAYS = 30
SECONDARY_CATEGORIES = ("government", "professional", "industry")

COST_OPTIMIZED_PRIMARY = 2
COST_OPTIMIZED_INTERNATIONAL = 1
COST_NOTE = "Optimized for cost: reduced primary sources and removed secondary sources"


class SourceRouter:
    """Turns a classified request into a RoutingDecision."""

    def __init__(
        self,
        config: dict,
        registry: SourceRegistry | None = None,
        today: date | None = None,
    ):
        self.settings = get_router_config(config)
        self.registry = registry or load_registry()
        self.today = today

    # -- queries ---------------------------------------------------------

    def build_queries(self, request: ContentRequest) -> list[str]:
        queries = [request.topic.strip()]
        if request.keywords:
            queries.append(" ".join(request.keywords))
        if request.seo is not None and request.seo.primary_keyword:
            queries.append(request.seo.primary_keyword)
        if request.output_language == LOCAL_LANGUAGE and request.cultural_context:
            market_query = self._market_query(request)
            if market_query:
                queries.append(market_query)

        unique: list[str] = []
        for q in queries:
            if q and q not in unique:
                unique.append(q)
        return unique[:MAX_QUERIES]

    @staticmethod
    def _market_query(request: ContentRequest) -> str:
        ctx = request.cultural_context
        terms: list[str] = []
        if ctx.market == LOCAL_MARKET:
            terms += ["Norge", "norsk"]
        if ctx.business_type == "b2b":
            terms += ["bedrift", "næringsliv"]
        if ctx.industry:
            terms.append(ctx.industry)
        return f"{request.topic} {' '.join(terms)}" if terms else ""

    # -- eligibility -----------------------------------------------------

    def has_credentials(self, domain: str) -> bool:
        if self.settings["credentials"].get(domain):
            return True
        env_key = "AUTH_" + domain.upper().replace(".", "_").replace("-", "_")
        return bool(os.environ.get(env_key))

    def is_eligible(self, source: SourceDescriptor, min_trust: float) -> bool:
        if source.trust_score < min_trust:
            return False
        return not source.requires_auth or self.has_credentials(source.domain)

    # -- selection -------------------------------------------------------

    def _local_candidates(self, topic: str, count: int) -> list[SourceDescriptor]:
        """Eligible local sources for a topic, in topic-score order."""
        min_trust = self.settings["min_trust_score"]
        ranked = self.registry.for_topic(topic, limit=len(self.registry.local))
        eligible = [s for s in ranked if self.is_eligible(s, min_trust)]
        return eligible[:count]

    def _international_candidates(
        self,
        request: ContentRequest,
        count: int,
        exclude: set[str] = frozenset(),
    ) -> list[SourceDescriptor]:
        def score(source: SourceDescriptor) -> float:
            value = source.trust_score + 2 * specialization_matches(source, request.topic)
            if request.content_type == "article" and "news" in source.content_types:
                value += 1
            if request.content_type == "blog" and source.category == "professional":
                value += 1
            return value

        candidates = [
            s for s in self.registry.international
            if s.domain not in exclude
            and (not s.requires_auth or self.has_credentials(s.domain))
        ]
        return sorted(candidates, key=score, reverse=True)[:count]

    def _select_primary(
        self, request: ContentRequest, strategy: str, queries: list[str],
    ) -> list[SourceSelection]:
        limit = self.settings["max_primary_sources"]
        query = queries[0]

        if strategy in ("norwegian_first", "specialized"):
            return [
                SourceSelection(
                    source=s,
                    priority=1,
                    query=query,
                    search_depth="basic",
                    max_results=3,
                    reason=f"Primary Norwegian source for {', '.join(s.specializations)}",
                )
                for s in self._local_candidates(request.topic, limit)
            ]

        if strategy == "international_first":
            return [
                SourceSelection(
                    source=s,
                    priority=1,
                    query=query,
                    search_depth="basic",
                    max_results=3,
                    reason=f"International authority on {', '.join(s.specializations)}",
                )
                for s in self._international_candidates(request, limit)
            ]

        # Mixed strategies split the primary budget between local and international
        depth = "advanced" if strategy == "comprehensive" else "basic"
        max_results = 3 if strategy == "comprehensive" else 2
        local_count = math.ceil(limit / 2)
        selections = [
            SourceSelection(
                source=s,
                priority=1,
                query=query,
                search_depth=depth,
                max_results=max_results,
                reason=f"Norwegian perspective on {request.topic}",
            )
            for s in self._local_candidates(request.topic, local_count)
        ]
        selections += [
            SourceSelection(
                source=s,
                priority=1,
                query=query,
                search_depth=depth,
                max_results=max_results,
                reason=f"Global perspective on {request.topic}",
            )
            for s in self._international_candidates(request, limit - local_count)
        ]
        return selections

    def _select_secondary(
        self, queries: list[str], primary: list[SourceSelection],
    ) -> list[SourceSelection]:
        covered = {s.source.category for s in primary}
        taken = {s.source.domain for s in primary}
        missing = [c for c in SECONDARY_CATEGORIES if c not in covered]
        min_trust = self.settings["min_trust_score"] - 1
        query = queries[1] if len(queries) > 1 else queries[0]

        selections = []
        for category in missing:
            if len(selections) >= self.settings["max_secondary_sources"]:
                break
            eligible = [
                s for s in self.registry.by_category(category)
                if s.domain not in taken and self.is_eligible(s, min_trust)
            ]
            if not eligible:
                continue
            source = eligible[0]
            taken.add(source.domain)
            selections.append(SourceSelection(
                source=source,
                priority=2,
                query=query,
                search_depth="basic",
                max_results=2,
                reason=f"Supplementary {category} perspective",
            ))
        return selections

    def _select_international(
        self,
        request: ContentRequest,
        strategy: str,
        queries: list[str],
        taken: set[str],
    ) -> list[SourceSelection]:
        if strategy == "norwegian_first" and request.output_language == LOCAL_LANGUAGE:
            return []

        today = self.today or date.today()
        filters = SourceFilters(
            date_from=(today - timedelta(days=INTERNATIONAL_LOOKBACK_DAYS)).isoformat(),
            date_to=today.isoformat(),
        )
        return [
            SourceSelection(
                source=s,
                priority=3,
                query=queries[0],
                search_depth="basic",
                max_results=2,
                filters=filters,
                reason=f"International context from {s.name}",
            )
            for s in self._international_candidates(
                request, self.settings["max_international_sources"], exclude=taken,
            )
        ]

    # -- estimates -------------------------------------------------------

    @staticmethod
    def estimate_cost(
        primary: list[SourceSelection],
        secondary: list[SourceSelection],
        international: list[SourceSelection],
    ) -> float:
        cost = 0.0
        for sel in (*primary, *secondary, *international):
            cost += ADVANCED_QUERY_COST if sel.search_depth == "advanced" else BASIC_QUERY_COST
        for sel in (*primary, *secondary):
            if sel.source.tier == "premium":
                cost += PREMIUM_SOURCE_OVERHEAD
        return round(cost, 4)

    def estimate_time(
        self,
        primary: list[SourceSelection],
        secondary: list[SourceSelection],
        international: list[SourceSelection],
    ) -> int:
        if self.settings["enable_parallel_search"]:
            return BASE_TIME_MS + max(
                len(primary) * PRIMARY_TIME_MS,
                len(secondary) * SECONDARY_TIME_MS,
                len(international) * INTERNATIONAL_TIME_MS,
            )
        total = len(primary) + len(secondary) + len(international)
        return BASE_TIME_MS + total * SEQUENTIAL_TIME_MS

    @staticmethod
    def cultural_relevance(
        request: ContentRequest,
        primary: list[SourceSelection],
        secondary: list[SourceSelection],
    ) -> float:
        """Weighted source authenticity in [0, 1]; primary sources count double."""
        if request.output_language != LOCAL_LANGUAGE:
            return 0.5
        weighted = 0.0
        total = 0.0
        for sel in (*primary, *secondary):
            if sel.source.cultural_authenticity is None:
                continue
            weight = 2.0 if sel.priority == 1 else 1.0
            weighted += sel.source.cultural_authenticity * weight
            total += weight * 10
        return round(weighted / total, 4) if total else 0.0

    # -- entry points ----------------------------------------------------

    def route(
        self,
        request: ContentRequest,
        classification: RequestClassification,
        strategy: str | None = None,
    ) -> RoutingDecision:
        strategy = strategy or choose_strategy(
            request, classification, self.settings["specialized_keywords"],
        )
        queries = self.build_queries(request)
        primary = self._select_primary(request, strategy, queries)
        secondary = self._select_secondary(queries, primary)
        taken = {s.source.domain for s in (*primary, *secondary)}
        international = self._select_international(request, strategy, queries, taken)

        decision = RoutingDecision(
            strategy=strategy,
            primary=primary,
            secondary=secondary,
            international=international,
            queries=queries,
            estimated_cost=self.estimate_cost(primary, secondary, international),
            estimated_time_ms=self.estimate_time(primary, secondary, international),
            cultural_relevance=self.cultural_relevance(request, primary, secondary),
            reasoning=self._reasoning(request, strategy, primary),
        )
        logger.info(
            "Routed %s with %s: %d primary, %d secondary, %d international, est $%.2f",
            request.id, strategy, len(primary), len(secondary),
            len(international), decision.estimated_cost,
        )
        return decision

    def optimize_for_cost(
        self, decision: RoutingDecision, request: ContentRequest | None = None,
    ) -> RoutingDecision:
        """Shrink an over-budget decision. Applying it twice changes nothing more."""
        if decision.estimated_cost <= self.settings["cost_budget"]:
            return decision

        primary = decision.primary[:COST_OPTIMIZED_PRIMARY]
        international = decision.international[:COST_OPTIMIZED_INTERNATIONAL]
        reasoning = list(decision.reasoning)
        if COST_NOTE not in reasoning:
            reasoning.append(COST_NOTE)

        relevance = decision.cultural_relevance
        if request is not None:
            relevance = self.cultural_relevance(request, primary, [])

        optimized = dataclasses.replace(
            decision,
            primary=primary,
            secondary=[],
            international=international,
            estimated_cost=self.estimate_cost(primary, [], international),
            estimated_time_ms=self.estimate_time(primary, [], international),
            cultural_relevance=relevance,
            reasoning=reasoning,
        )
        logger.info(
            "Cost optimization: $%.2f -> $%.2f (budget $%.2f)",
            decision.estimated_cost, optimized.estimated_cost, self.settings["cost_budget"],
        )
        return optimized

    def _reasoning(
        self, request: ContentRequest, strategy: str, primary: list[SourceSelection],
    ) -> list[str]:
        reasons = [f"Using {strategy} strategy for {request.output_language} content"]
        if request.output_language == LOCAL_LANGUAGE:
            reasons.append("Prioritizing Norwegian sources for cultural authenticity")
        keywords = self.settings["specialized_keywords"] or SPECIALIZED_KEYWORDS
        if is_specialized_topic(request.topic, keywords):
            reasons.append("Specialized Norwegian industry focus detected")
        if primary:
            reasons.append(
                "Selected primary sources: " + ", ".join(s.source.name for s in primary)
            )
        if request.cultural_context is not None:
            reasons.append(f"Adapting for {request.cultural_context.market} market")
        return reasons
