"""Tests for the cost ledger and per-request usage tracker."""

from __future__ import annotations

import asyncio
import logging

import pytest

from storyscale.ledger import InMemoryCostLedger, UsageEntry, UsageTracker


@pytest.fixture
def ledger():
    return InMemoryCostLedger({"ledger": {"default_budget": 1.0, "budgets": {"big": 100}}})


@pytest.mark.asyncio
async def test_record_and_remaining(ledger):
    await ledger.record_usage("acme", "alpha", 500, 0.25)
    await ledger.record_usage("acme", "beta", 100, 0.05)
    assert ledger.spent["acme"] == pytest.approx(0.30)
    assert ledger.tokens["acme"] == 600
    assert ledger.by_provider[("acme", "alpha")] == pytest.approx(0.25)
    assert ledger.remaining("acme") == pytest.approx(0.70)


def test_per_caller_budgets(ledger):
    assert ledger.budget_for("big") == 100.0
    assert ledger.budget_for("anyone") == 1.0


@pytest.mark.asyncio
async def test_check_budget_is_inclusive(ledger):
    await ledger.record_usage("acme", "alpha", 10, 0.5)
    assert await ledger.check_budget("acme", 0.5)
    assert not await ledger.check_budget("acme", 0.51)
    assert await ledger.check_budget("other", 1.0)


@pytest.mark.asyncio
async def test_negative_usage_rejected(ledger):
    with pytest.raises(ValueError):
        await ledger.record_usage("acme", "alpha", -1, 0.1)
    with pytest.raises(ValueError):
        await ledger.record_usage("acme", "alpha", 1, -0.1)
    assert ledger.spent["acme"] == 0


@pytest.mark.asyncio
async def test_concurrent_records_are_not_lost(ledger):
    await asyncio.gather(*(
        ledger.record_usage("acme", "alpha", 10, 0.001) for _ in range(200)
    ))
    assert ledger.tokens["acme"] == 2000
    assert ledger.spent["acme"] == pytest.approx(0.2)


@pytest.mark.asyncio
async def test_warns_once_near_budget(ledger, caplog):
    with caplog.at_level(logging.WARNING, logger="storyscale.ledger"):
        await ledger.record_usage("acme", "alpha", 10, 0.85)
        await ledger.record_usage("acme", "alpha", 10, 0.05)
    warnings = [r for r in caplog.records if "budget" in r.getMessage()]
    assert len(warnings) == 1
    assert "acme" in warnings[0].getMessage()


@pytest.mark.asyncio
async def test_record_many(ledger):
    await ledger.record_many("acme", [
        UsageEntry("alpha", "gpt-4o", 300, 0.01),
        UsageEntry("beta", "claude", 200, 0.02),
    ])
    assert ledger.spent["acme"] == pytest.approx(0.03)
    assert ledger.by_provider[("acme", "beta")] == pytest.approx(0.02)


# UsageTracker

@pytest.mark.asyncio
async def test_tracker_commit(ledger):
    tracker = UsageTracker("acme")
    tracker.record("alpha", "gpt-4o", 300, 0.01)
    tracker.record("alpha", "gpt-4o", 100, 0.02)
    assert tracker.pending_cost == pytest.approx(0.03)
    assert tracker.pending_tokens == 400
    assert ledger.spent["acme"] == 0

    assert await tracker.commit(ledger) == pytest.approx(0.03)
    assert ledger.spent["acme"] == pytest.approx(0.03)
    # Second commit is a no-op
    assert await tracker.commit(ledger) == 0.0
    assert ledger.spent["acme"] == pytest.approx(0.03)


@pytest.mark.asyncio
async def test_tracker_discard(ledger):
    tracker = UsageTracker("acme")
    tracker.record("alpha", "gpt-4o", 300, 0.5)
    tracker.discard()
    assert tracker.pending_cost == 0
    assert await tracker.commit(ledger) == 0.0
    assert ledger.spent["acme"] == 0


def test_closed_tracker_rejects_records():
    tracker = UsageTracker("acme")
    tracker.discard()
    with pytest.raises(RuntimeError):
        tracker.record("alpha", "gpt-4o", 1, 0.0)


@pytest.mark.asyncio
async def test_commit_without_ledger():
    tracker = UsageTracker("acme")
    tracker.record("alpha", "gpt-4o", 1, 0.25)
    assert await tracker.commit(None) == pytest.approx(0.25)
    assert tracker.closed
