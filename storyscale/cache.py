"""Response cache: store interface, in-memory TTL store and request fingerprints."""

from __future__ import annotations

import hashlib
import json
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from storyscale.config import get_cache_config
from storyscale.models import ContentRequest

logger = logging.getLogger(__name__)


class CacheStore(ABC):
    """Key/value store with per-entry TTL. Writes are last-writer-wins per key."""

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Return the cached value, or None on a miss or expiry."""
        ...

    @abstractmethod
    async def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        ...


@dataclass
class CacheEntry:
    value: Any
    expires_at: float


class MemoryCache(CacheStore):
    """Process-local cache. Each get/set touches one dict slot, so no lock is needed."""

    def __init__(self, max_entries: int = 1000, clock=time.monotonic):
        self.max_entries = max_entries
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self.hits = 0
        self.misses = 0

    async def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
            return None
        if self._clock() >= entry.expires_at:
            self._entries.pop(key, None)
            self.misses += 1
            return None
        self.hits += 1
        return entry.value

    async def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        if ttl_seconds <= 0:
            return
        if key not in self._entries and len(self._entries) >= self.max_entries:
            self._evict()
        self._entries[key] = CacheEntry(value=value, expires_at=self._clock() + ttl_seconds)

    def _evict(self) -> None:
        now = self._clock()
        expired = [k for k, e in self._entries.items() if e.expires_at <= now]
        for k in expired:
            del self._entries[k]
        if len(self._entries) >= self.max_entries:
            # Drop the entry closest to expiry
            oldest = min(self._entries, key=lambda k: self._entries[k].expires_at)
            del self._entries[oldest]

    def __len__(self) -> int:
        return len(self._entries)


def _digest(payload: dict) -> str:
    canonical = json.dumps(payload, sort_keys=True, ensure_ascii=False)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:24]


def request_fingerprint(request: ContentRequest) -> str:
    """Canonical cache key for a generation request."""
    ctx = request.cultural_context
    payload = {
        "content_type": request.content_type,
        "topic": request.topic.strip().lower(),
        "audience": request.audience.strip().lower(),
        "tone": request.tone,
        "length": request.word_count or request.length,
        "industry": (ctx.industry.lower() if ctx else ""),
        "strictness": request.cultural_strictness,
        "language": request.output_language,
    }
    return "content:" + _digest(payload)


def research_fingerprint(queries: list[str], domains: list[str]) -> str:
    return "research:" + _digest({"queries": queries, "domains": sorted(domains)})


def ttl_for(content_type: str, config: dict) -> float:
    """Cache TTL in seconds for a content type."""
    cfg = get_cache_config(config)
    hours = cfg["ttl_hours"].get(content_type, cfg["default_ttl_hours"])
    return float(hours) * 3600
