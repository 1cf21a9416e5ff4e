"""Source registry: the read-only catalog of research sources.

The catalog ships as ``catalog.yaml`` next to this module. ``load_registry()``
parses it once per process; callers that need a different catalog (tests,
alternative markets) pass a path or build a ``SourceRegistry`` directly.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

import yaml

from storyscale.models import SourceDescriptor

logger = logging.getLogger(__name__)

CATALOG_PATH = Path(__file__).with_name("catalog.yaml")

SPECIALIZATION_MATCH_WEIGHT = 3.0
CATEGORY_MATCH_BONUS = 2.0
SHORT_TAG_CHARS = 3

# topic keyword -> category that gets the bonus
CATEGORY_HINTS = {
    "business": "business",
    "næringsliv": "business",
    "news": "news",
    "nyheter": "news",
    "tech": "industry",
    "teknologi": "industry",
    "government": "government",
    "offentlig": "government",
}


@dataclass(frozen=True)
class SourceGroup:
    name: str
    description: str
    priority: int
    default_quota: int
    sources: tuple[SourceDescriptor, ...]


def _descriptor(entry: dict, category: str | None, international: bool) -> SourceDescriptor:
    return SourceDescriptor(
        domain=entry["domain"],
        name=entry.get("name", entry["domain"]),
        category=entry.get("category", category or "news"),
        language=entry.get("language", "en" if international else "no"),
        trust_score=float(entry.get("trust_score", 5)),
        tier=entry.get("tier", "standard"),
        specializations=tuple(s.lower() for s in entry.get("specializations", [])),
        requires_auth=entry.get("requires_auth", False),
        scraping_allowed=entry.get("scraping_allowed", True),
        api_supported=entry.get("api_supported", False),
        update_frequency=entry.get("update_frequency", "daily"),
        business_relevance=float(entry.get("business_relevance", 0)),
        cultural_authenticity=(
            None if international else float(entry.get("cultural_authenticity", 0))
        ),
        content_types=tuple(entry.get("content_types", [])),
        paywall=entry.get("paywall", False),
        rate_limit=entry.get("rate_limit"),
        feed_url=entry.get("feed_url", ""),
        international=international,
    )


def _contains(haystack: str, needle: str) -> bool:
    # Short tags such as "it" or "ai" only count as whole words
    if len(needle) <= SHORT_TAG_CHARS:
        return re.search(rf"\b{re.escape(needle)}\b", haystack) is not None
    return needle in haystack


def specialization_matches(source: SourceDescriptor, topic: str) -> int:
    """Count specializations that appear in the topic or contain it."""
    topic_lower = topic.lower().strip()
    if not topic_lower:
        return 0
    count = 0
    for spec in source.specializations:
        variants = {spec, spec.replace("-", " ")}
        if any(_contains(topic_lower, v) or _contains(v, topic_lower) for v in variants):
            count += 1
    return count


def topic_score(source: SourceDescriptor, topic: str) -> float:
    """Rank a local source for a topic: specialization hits, category hints, trust, business weight."""
    topic_lower = topic.lower()
    score = SPECIALIZATION_MATCH_WEIGHT * specialization_matches(source, topic)
    for hint, category in CATEGORY_HINTS.items():
        if hint in topic_lower and source.category == category:
            score += CATEGORY_MATCH_BONUS
    score += source.trust_score / 2
    score += source.business_relevance / 3
    return score


def _group_members(match: dict, sources: list[SourceDescriptor]) -> tuple[SourceDescriptor, ...]:
    categories = match.get("category")
    if isinstance(categories, str):
        categories = [categories]
    members = []
    for s in sources:
        if categories and s.category not in categories:
            continue
        if "tier" in match and s.tier != match["tier"]:
            continue
        if "min_trust" in match and s.trust_score < match["min_trust"]:
            continue
        if "domains" in match and s.domain not in match["domains"]:
            continue
        members.append(s)
    return tuple(members)


class SourceRegistry:
    """Lookup helpers over local and international sources."""

    def __init__(
        self,
        local: list[SourceDescriptor],
        international: list[SourceDescriptor],
        groups: list[SourceGroup] | None = None,
    ):
        self.local = tuple(local)
        self.international = tuple(international)
        self.groups = {g.name: g for g in (groups or [])}
        self._by_domain = {s.domain: s for s in (*self.local, *self.international)}

    @classmethod
    def from_file(cls, path: str | Path = CATALOG_PATH) -> SourceRegistry:
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

        local = [
            _descriptor(entry, category, international=False)
            for category, entries in (raw.get("local") or {}).items()
            for entry in entries
        ]
        international = [
            _descriptor(entry, None, international=True)
            for entry in raw.get("international") or []
        ]
        groups = [
            SourceGroup(
                name=name,
                description=cfg.get("description", ""),
                priority=cfg.get("priority", 99),
                default_quota=cfg.get("default_quota", 1),
                sources=_group_members(cfg.get("match", {}), local),
            )
            for name, cfg in (raw.get("groups") or {}).items()
        ]
        logger.info(
            "Loaded %d local and %d international sources from %s",
            len(local), len(international), path,
        )
        return cls(local, international, groups)

    def by_domain(self, domain: str) -> SourceDescriptor | None:
        return self._by_domain.get(domain.lower().removeprefix("www."))

    def is_local(self, domain: str) -> bool:
        source = self.by_domain(domain)
        return source is not None and not source.international

    def all_sources(self) -> list[SourceDescriptor]:
        return [*self.local, *self.international]

    def by_category(self, category: str) -> list[SourceDescriptor]:
        if category == "international":
            return list(self.international)
        return [s for s in self.local if s.category == category]

    def by_specialization(self, specialization: str) -> list[SourceDescriptor]:
        spec = specialization.lower()
        return [s for s in self.local if spec in s.specializations]

    def premium(self) -> list[SourceDescriptor]:
        return [s for s in self.local if s.tier == "premium"]

    def group(self, name: str) -> SourceGroup:
        if name not in self.groups:
            raise KeyError(f"Unknown source group: {name}")
        return self.groups[name]

    def for_topic(self, topic: str, limit: int = 5) -> list[SourceDescriptor]:
        """Local sources ranked by topic score, highest first (stable on ties)."""
        ranked = sorted(self.local, key=lambda s: topic_score(s, topic), reverse=True)
        return ranked[:limit]


@lru_cache(maxsize=None)
def load_registry(path: str | None = None) -> SourceRegistry:
    """Load the catalog once per process."""
    return SourceRegistry.from_file(path or CATALOG_PATH)
