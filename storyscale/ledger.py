"""Per-caller spend accounting.

A ``UsageTracker`` collects the usage of one request; nothing reaches the
ledger until the request finishes and the tracker is committed. A cancelled
request discards its tracker instead.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass

from storyscale.config import get_ledger_config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UsageEntry:
    provider: str
    model: str
    tokens: int
    cost_usd: float


class CostLedger(ABC):
    """Accumulates spend per caller and answers budget checks."""

    @abstractmethod
    async def record_usage(self, caller_id: str, provider: str, tokens: int, cost_usd: float) -> None:
        ...

    @abstractmethod
    async def check_budget(self, caller_id: str, estimated_cost: float) -> bool:
        """True when ``estimated_cost`` fits in the caller's remaining budget."""
        ...

    @abstractmethod
    def remaining(self, caller_id: str) -> float:
        ...

    async def record_many(self, caller_id: str, entries: list[UsageEntry]) -> None:
        for entry in entries:
            await self.record_usage(caller_id, entry.provider, entry.tokens, entry.cost_usd)


class InMemoryCostLedger(CostLedger):
    def __init__(self, config: dict | None = None):
        settings = get_ledger_config(config or {})
        self.default_budget = float(settings["default_budget"])
        self.budgets = {k: float(v) for k, v in settings["budgets"].items()}
        self.warning_ratio = settings["warning_ratio"]
        self.spent: dict[str, float] = defaultdict(float)
        self.tokens: dict[str, int] = defaultdict(int)
        self.by_provider: dict[tuple[str, str], float] = defaultdict(float)
        self._warned: set[str] = set()
        self._lock = asyncio.Lock()

    def budget_for(self, caller_id: str) -> float:
        return self.budgets.get(caller_id, self.default_budget)

    def remaining(self, caller_id: str) -> float:
        return self.budget_for(caller_id) - self.spent[caller_id]

    async def record_usage(self, caller_id: str, provider: str, tokens: int, cost_usd: float) -> None:
        if tokens < 0 or cost_usd < 0:
            raise ValueError("Usage must be non-negative")
        async with self._lock:
            self.spent[caller_id] += cost_usd
            self.tokens[caller_id] += tokens
            self.by_provider[(caller_id, provider)] += cost_usd
            spent = self.spent[caller_id]
        self._warn_if_near_budget(caller_id, spent)

    async def record_many(self, caller_id: str, entries: list[UsageEntry]) -> None:
        # One lock hold so a request's entries land together
        async with self._lock:
            for entry in entries:
                self.spent[caller_id] += entry.cost_usd
                self.tokens[caller_id] += entry.tokens
                self.by_provider[(caller_id, entry.provider)] += entry.cost_usd
            spent = self.spent[caller_id]
        self._warn_if_near_budget(caller_id, spent)

    def _warn_if_near_budget(self, caller_id: str, spent: float) -> None:
        budget = self.budget_for(caller_id)
        if budget > 0 and spent >= budget * self.warning_ratio and caller_id not in self._warned:
            self._warned.add(caller_id)
            logger.warning(
                "Caller %s has spent $%.4f of $%.2f budget (%.0f%%)",
                caller_id, spent, budget, spent / budget * 100,
            )

    async def check_budget(self, caller_id: str, estimated_cost: float) -> bool:
        async with self._lock:
            return self.spent[caller_id] + estimated_cost <= self.budget_for(caller_id)


class UsageTracker:
    """Usage for one request, held back until commit."""

    def __init__(self, caller_id: str):
        self.caller_id = caller_id
        self.entries: list[UsageEntry] = []
        self.closed = False

    def record(self, provider: str, model: str, tokens: int, cost_usd: float) -> None:
        if self.closed:
            raise RuntimeError("Usage tracker already committed or discarded")
        self.entries.append(UsageEntry(provider, model, tokens, cost_usd))

    @property
    def pending_cost(self) -> float:
        return sum(e.cost_usd for e in self.entries)

    @property
    def pending_tokens(self) -> int:
        return sum(e.tokens for e in self.entries)

    async def commit(self, ledger: CostLedger | None) -> float:
        """Write every pending entry to the ledger; returns the committed cost."""
        if self.closed:
            return 0.0
        self.closed = True
        total = self.pending_cost
        if ledger is not None and self.entries:
            await ledger.record_many(self.caller_id, self.entries)
        logger.debug("Committed $%.4f for %s", total, self.caller_id)
        return total

    def discard(self) -> None:
        if self.entries:
            logger.info(
                "Discarding $%.4f of uncommitted usage for %s",
                self.pending_cost, self.caller_id,
            )
        self.entries.clear()
        self.closed = True
