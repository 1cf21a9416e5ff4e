"""Tests for the quality refinement loop."""

from __future__ import annotations

import pytest

from storyscale.errors import AllProvidersFailed
from storyscale.models import (
    AttemptRecord,
    CulturalAdaptationResult,
    Draft,
    GenerationResult,
    QualityAssessment,
)
from storyscale.quality import refine
from storyscale.quality.scorer import grade_for, readiness_for
from storyscale.trace import PipelineTrace


def make_draft(score: float, text: str = "") -> Draft:
    text = text or f"draft scoring {score}"
    return Draft(
        generation=GenerationResult(text=text, provider="alpha", model="m"),
        adaptation=CulturalAdaptationResult(original_text=text, adapted_text=text),
        assessment=QualityAssessment(
            dimensions={}, overall=score, grade=grade_for(score), readiness=readiness_for(score),
        ),
    )


def scripted(scores):
    """A regenerate callback yielding drafts with the given scores in order."""
    calls = []

    async def regenerate(best, iteration):
        calls.append((best.assessment.overall, iteration))
        outcome = scores[len(calls) - 1]
        if isinstance(outcome, BaseException):
            raise outcome
        return make_draft(outcome)

    regenerate.calls = calls
    return regenerate


@pytest.mark.asyncio
async def test_no_refinement_when_threshold_met():
    regenerate = scripted([])
    best, calls = await refine(make_draft(80), regenerate, threshold=70)
    assert best.assessment.overall == 80
    assert calls == 0
    assert regenerate.calls == []


@pytest.mark.asyncio
async def test_improves_until_iterations_exhausted():
    regenerate = scripted([60, 65, 68, 99])
    trace = PipelineTrace()
    best, calls = await refine(make_draft(50), regenerate, threshold=70, trace=trace)
    assert best.assessment.overall == 68
    assert calls == 3
    assert [c[1] for c in regenerate.calls] == [1, 2, 3]
    assert [c[0] for c in regenerate.calls] == [50, 60, 65]
    assert trace.kinds() == ["refine_improved"] * 3


@pytest.mark.asyncio
async def test_stops_when_threshold_reached():
    regenerate = scripted([75, 90])
    best, calls = await refine(make_draft(50), regenerate, threshold=70)
    assert best.assessment.overall == 75
    assert calls == 1


@pytest.mark.asyncio
async def test_worse_draft_is_discarded():
    regenerate = scripted([45, 90])
    trace = PipelineTrace()
    initial = make_draft(50)
    best, calls = await refine(initial, regenerate, threshold=70, trace=trace)
    assert best is initial
    assert calls == 1
    assert trace.kinds() == ["refine_stopped"]


@pytest.mark.asyncio
async def test_equal_score_stops():
    regenerate = scripted([50])
    best, calls = await refine(make_draft(50), regenerate, threshold=70)
    assert best.assessment.overall == 50
    assert calls == 1


@pytest.mark.asyncio
async def test_provider_exhaustion_keeps_best():
    failure = AllProvidersFailed([
        AttemptRecord(candidate="fast", provider="alpha", model="m", outcome="failed", kind="timeout"),
    ])
    regenerate = scripted([60, failure])
    trace = PipelineTrace()
    best, calls = await refine(make_draft(50), regenerate, threshold=70, trace=trace)
    assert best.assessment.overall == 60
    assert calls == 2
    assert trace.kinds() == ["refine_improved", "refine_failed"]


@pytest.mark.asyncio
async def test_other_errors_propagate():
    regenerate = scripted([RuntimeError("bug")])
    with pytest.raises(RuntimeError, match="bug"):
        await refine(make_draft(50), regenerate, threshold=70)


@pytest.mark.asyncio
async def test_iterations_capped_at_three():
    regenerate = scripted([51, 52, 53, 54, 55])
    best, calls = await refine(make_draft(50), regenerate, threshold=100, max_iterations=10)
    assert calls == 3
    assert best.assessment.overall == 53


@pytest.mark.asyncio
@pytest.mark.parametrize("scores", [
    [40, 60, 55],
    [55, 54, 80],
    [70, 71, 72],
    [10, 20, 30],
])
async def test_result_never_worse_than_first_draft(scores):
    regenerate = scripted(scores)
    best, calls = await refine(make_draft(50), regenerate, threshold=95)
    assert best.assessment.overall >= 50
    assert calls <= 3
