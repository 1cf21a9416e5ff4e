"""Concurrency helpers shared by every parallel external-call site."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Iterable
from typing import TypeVar

from storyscale.models import FetchFailure
from storyscale.retry import classify_failure

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TIMEOUT = 30.0


async def with_timeout(aw: Awaitable[T], timeout: float | None = DEFAULT_TIMEOUT) -> T:
    """Await with an upper bound; a timeout surfaces as asyncio.TimeoutError."""
    if timeout is None:
        return await aw
    return await asyncio.wait_for(aw, timeout=timeout)


async def gather_tolerant(
    tasks: Iterable[Awaitable[T]],
    labels: Iterable[str] | None = None,
    timeout: float | None = None,
) -> tuple[list[T], list[FetchFailure]]:
    """Run awaitables concurrently and keep the successes.

    Every task settles before this returns; one failure never cancels its
    siblings. Results keep task order. Cancelling the caller still cancels
    all tasks.
    """
    tasks = list(tasks)
    labels = list(labels) if labels is not None else [f"task-{i}" for i in range(len(tasks))]
    if len(labels) != len(tasks):
        raise ValueError("labels must match tasks one-to-one")

    results = await asyncio.gather(
        *(with_timeout(t, timeout) for t in tasks),
        return_exceptions=True,
    )

    successes: list[T] = []
    failures: list[FetchFailure] = []
    for label, result in zip(labels, results):
        if isinstance(result, BaseException):
            if not isinstance(result, (Exception, asyncio.CancelledError)):
                raise result
            kind = classify_failure(result)
            logger.warning("Task %s failed (%s): %s", label, kind, result)
            failures.append(FetchFailure(
                label=label,
                error_type=type(result).__name__,
                message=str(result),
                kind=kind,
            ))
        else:
            successes.append(result)
    return successes, failures
