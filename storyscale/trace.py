"""Structured progress trace for one pipeline run.

Components call ``trace.emit(stage, kind, **data)``. Every event is kept on
the trace (and returned with the result); extra observers get each event as it
happens, e.g. to stream progress to a UI.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Protocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TraceEvent:
    stage: str  # classify, route, research, analyze, generate, adapt, assess, refine
    kind: str
    data: dict[str, Any] = field(default_factory=dict)
    elapsed_ms: float = 0.0


class PipelineObserver(Protocol):
    def on_event(self, event: TraceEvent) -> None:
        ...


class PipelineTrace:
    def __init__(self, observers: list[PipelineObserver] | None = None, clock=time.monotonic):
        self.events: list[TraceEvent] = []
        self.observers = list(observers or [])
        self._clock = clock
        self._started = clock()

    def emit(self, stage: str, kind: str, /, **data: Any) -> TraceEvent:
        event = TraceEvent(
            stage=stage,
            kind=kind,
            data=data,
            elapsed_ms=round((self._clock() - self._started) * 1000, 1),
        )
        self.events.append(event)
        for observer in self.observers:
            try:
                observer.on_event(event)
            except Exception:
                logger.exception("Observer %r failed on %s/%s", observer, stage, kind)
        return event

    def of_kind(self, kind: str) -> list[TraceEvent]:
        return [e for e in self.events if e.kind == kind]

    def for_stage(self, stage: str) -> list[TraceEvent]:
        return [e for e in self.events if e.stage == stage]

    def kinds(self) -> list[str]:
        return [e.kind for e in self.events]
