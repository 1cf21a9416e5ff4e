"""Error taxonomy for the generation pipeline.

Only ``AllProvidersFailed`` is fatal to a request. Source failures and budget
skips are recorded and the pipeline moves on; a low quality score is reported
on the result, not raised.
"""

from __future__ import annotations

from typing import Any


class StoryScaleError(Exception):
    """Base exception carrying a machine-readable code and context."""

    code = "STORYSCALE_ERROR"

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error_type": type(self).__name__,
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }


class ValidationError(StoryScaleError):
    """Malformed request. ``reasons`` holds one ``"field: problem"`` string per issue."""

    code = "VALIDATION_FAILED"

    def __init__(self, reasons: list[str]):
        self.reasons = list(reasons)
        super().__init__(
            "Invalid content request: " + "; ".join(self.reasons),
            {"reasons": self.reasons},
        )


class SourceFetchFailure(StoryScaleError):
    """A single research source could not be fetched."""

    code = "SOURCE_FETCH_FAILED"

    def __init__(self, source_id: str, kind: str, message: str = ""):
        self.source_id = source_id
        self.kind = kind
        super().__init__(
            message or f"Fetch from {source_id} failed ({kind})",
            {"source_id": source_id, "kind": kind},
        )


class ProviderFailure(StoryScaleError):
    """A generation provider call failed.

    ``kind`` is one of ``transport``, ``timeout``, ``rate_limit``,
    ``validation`` or ``unavailable``.
    """

    code = "PROVIDER_FAILED"

    def __init__(self, provider: str, kind: str, message: str = "", model: str = ""):
        self.provider = provider
        self.model = model
        self.kind = kind
        super().__init__(
            message or f"{provider} failed ({kind})",
            {"provider": provider, "model": model, "kind": kind},
        )


class BudgetExceeded(StoryScaleError):
    """The caller's remaining budget does not cover an estimated cost."""

    code = "BUDGET_EXCEEDED"

    def __init__(self, caller_id: str, estimated_cost: float, remaining: float):
        self.caller_id = caller_id
        self.estimated_cost = estimated_cost
        self.remaining = remaining
        super().__init__(
            f"Estimated ${estimated_cost:.4f} exceeds remaining budget "
            f"${remaining:.4f} for {caller_id}",
            {
                "caller_id": caller_id,
                "estimated_cost": estimated_cost,
                "remaining": remaining,
            },
        )


class AllProvidersFailed(StoryScaleError):
    """Every candidate in the fallback chain was skipped or failed."""

    code = "NO_PROVIDER_AVAILABLE"

    def __init__(self, attempts: list):
        self.attempts = list(attempts)
        summary = ", ".join(
            f"{a.candidate}={a.outcome}" + (f"({a.kind})" if a.kind else "")
            for a in self.attempts
        )
        super().__init__(
            f"No provider available after {len(self.attempts)} attempts: {summary}",
            {"attempts": [a.to_dict() for a in self.attempts]},
        )
