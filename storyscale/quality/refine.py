"""Quality-driven refinement loop.

The loop only ever moves to a better draft: a regeneration that does not beat
the best score so far ends the loop and the best draft is kept.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from storyscale.errors import AllProvidersFailed
from storyscale.models import Draft
from storyscale.trace import PipelineTrace

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 3

Regenerate = Callable[[Draft, int], Awaitable[Draft]]


async def refine(
    initial: Draft,
    regenerate: Regenerate,
    threshold: float,
    max_iterations: int = MAX_ITERATIONS,
    trace: PipelineTrace | None = None,
) -> tuple[Draft, int]:
    """Regenerate until the draft reaches ``threshold`` or stops improving.

    ``regenerate(best, iteration)`` produces a new fully assessed draft from
    the current best one. Returns the best draft and the number of
    regeneration calls made (at most ``max_iterations``).
    """
    trace = trace or PipelineTrace()
    best = initial
    calls = 0
    max_iterations = min(max_iterations, MAX_ITERATIONS)

    while best.assessment.overall < threshold and calls < max_iterations:
        calls += 1
        try:
            candidate = await regenerate(best, calls)
        except AllProvidersFailed as exc:
            logger.warning("Refinement iteration %d failed, keeping best draft: %s", calls, exc)
            trace.emit("refine", "refine_failed", iteration=calls, error=exc.message)
            break

        new_score = candidate.assessment.overall
        old_score = best.assessment.overall
        if new_score <= old_score:
            logger.warning(
                "Refinement iteration %d scored %.0f (best %.0f), stopping",
                calls, new_score, old_score,
            )
            trace.emit("refine", "refine_stopped", iteration=calls, score=new_score, best=old_score)
            break

        logger.info("Refinement iteration %d improved %.0f -> %.0f", calls, old_score, new_score)
        trace.emit("refine", "refine_improved", iteration=calls, score=new_score, previous=old_score)
        best = candidate

    return best, calls
