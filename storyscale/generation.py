"""Generation orchestrator: sequential provider fallback with budget and cache checks.

The chain is a small state machine::

    PENDING -> TRYING(0) -> SUCCESS
                         -> TRYING(1) -> ... -> ALL_FAILED

Each candidate is attempted at most once. Skips (no provider, no budget) and
failures both advance to the next candidate; only an exhausted chain is fatal.
"""

from __future__ import annotations

import asyncio
import dataclasses
import enum
import logging
from dataclasses import dataclass

from storyscale.cache import CacheStore, request_fingerprint, ttl_for
from storyscale.config import get_cache_config, get_candidates, get_generation_config
from storyscale.errors import AllProvidersFailed, BudgetExceeded
from storyscale.ledger import CostLedger, UsageTracker
from storyscale.llm import build_providers
from storyscale.llm.base import BaseLLMProvider
from storyscale.llm.pricing import estimate_cost
from storyscale.llm.prompts import (
    build_system_prompt,
    build_user_prompt,
    completion_tokens,
    prompt_tokens,
)
from storyscale.models import (
    LONG_FORM_TYPES,
    SHORT_FORM_TYPES,
    AttemptRecord,
    ContentAnalysis,
    ContentRequest,
    GenerationResult,
    ResearchResult,
    TokenUsage,
)
from storyscale.retry import classify_failure
from storyscale.trace import PipelineTrace

logger = logging.getLogger(__name__)


class ChainState(enum.Enum):
    PENDING = "pending"
    TRYING = "trying"
    SUCCESS = "success"
    ALL_FAILED = "all_failed"


@dataclass(frozen=True)
class ModelCandidate:
    name: str
    provider: str
    model: str
    family: str = ""
    temperature: float = 0.7
    max_tokens: int = 4000


class FallbackChain:
    """Walks an ordered candidate list, one attempt per candidate."""

    def __init__(self, candidates: list[ModelCandidate]):
        self.candidates = list(candidates)
        self.state = ChainState.PENDING
        self.index = -1
        self.attempts: list[AttemptRecord] = []

    @property
    def current(self) -> ModelCandidate:
        if self.state is not ChainState.TRYING:
            raise RuntimeError(f"No current candidate in state {self.state.value}")
        return self.candidates[self.index]

    def start(self) -> ChainState:
        if self.state is not ChainState.PENDING:
            raise RuntimeError(f"Cannot start chain in state {self.state.value}")
        return self._advance()

    def succeed(self, record: AttemptRecord) -> ChainState:
        self._require_trying()
        self.attempts.append(record)
        self.state = ChainState.SUCCESS
        return self.state

    def fail(self, record: AttemptRecord) -> ChainState:
        """Record a failed or skipped attempt and move on."""
        self._require_trying()
        self.attempts.append(record)
        return self._advance()

    def _advance(self) -> ChainState:
        self.index += 1
        if self.index < len(self.candidates):
            self.state = ChainState.TRYING
        else:
            self.state = ChainState.ALL_FAILED
        return self.state

    def _require_trying(self) -> None:
        if self.state is not ChainState.TRYING:
            raise RuntimeError(f"No attempt in progress (state {self.state.value})")


def load_candidates(config: dict) -> dict[str, ModelCandidate]:
    candidates = {}
    for name, cfg in get_candidates(config).items():
        candidates[name] = ModelCandidate(
            name=name,
            provider=cfg["provider"],
            model=cfg["model"],
            family=cfg.get("family", cfg["provider"]),
            temperature=cfg.get("temperature", 0.7),
            max_tokens=cfg.get("max_tokens", 4000),
        )
    return candidates


def _matches_preference(candidate: ModelCandidate, preferred: str) -> bool:
    preferred = preferred.lower()
    return any(
        preferred in value.lower()
        for value in (candidate.name, candidate.provider, candidate.family)
    )


class GenerationOrchestrator:
    """Generates a draft by walking the fallback chain for a request."""

    def __init__(
        self,
        config: dict,
        providers: dict[str, BaseLLMProvider] | None = None,
        ledger: CostLedger | None = None,
        cache: CacheStore | None = None,
        trace: PipelineTrace | None = None,
    ):
        self.config = config
        self.settings = get_generation_config(config)
        self.candidates = load_candidates(config)
        self.providers = providers if providers is not None else build_providers(config)
        self.ledger = ledger
        self.cache = cache if get_cache_config(config)["enabled"] else None
        self.trace = trace or PipelineTrace()

    def _named(self, names: list[str]) -> list[ModelCandidate]:
        chain = []
        for name in names:
            if name not in self.candidates:
                logger.warning("Chain names unknown candidate %s, ignoring", name)
                continue
            if self.candidates[name] not in chain:
                chain.append(self.candidates[name])
        return chain

    def chain_for(self, request: ContentRequest) -> list[ModelCandidate]:
        """Candidate order: preference first, else content-type chain, else default."""
        default = self._named(self.settings["default_chain"]) or list(self.candidates.values())

        if request.preferred_provider:
            preferred = [c for c in default if _matches_preference(c, request.preferred_provider)]
            if preferred:
                return preferred + [c for c in default if c not in preferred]

        if request.content_type in LONG_FORM_TYPES:
            chain = self._named(self.settings["long_form_chain"])
        elif request.content_type in SHORT_FORM_TYPES:
            chain = self._named(self.settings["short_form_chain"])
        else:
            chain = []
        return chain or default

    def estimate(
        self, candidate: ModelCandidate, request: ContentRequest, research_items: int = 0,
    ) -> float:
        return estimate_cost(
            candidate.model,
            prompt_tokens(research_items),
            completion_tokens(request),
            self.settings["pricing"],
        )

    async def generate(
        self,
        request: ContentRequest,
        research: ResearchResult | None = None,
        analysis: ContentAnalysis | None = None,
        instructions: str | None = None,
        tracker: UsageTracker | None = None,
    ) -> GenerationResult:
        """Generate text for ``request``.

        ``instructions`` replaces the generated user prompt (used for
        refinement) and bypasses the response cache.
        """
        cache_key = None
        if self.cache is not None and instructions is None:
            cache_key = request_fingerprint(request)
            cached = await self.cache.get(cache_key)
            if cached is not None:
                logger.info("Cache hit for %s", request.id)
                self.trace.emit("generate", "cache_hit", key=cache_key, provider=cached.provider)
                return dataclasses.replace(cached, cache_hit=True, cost_usd=0.0)

        system_by_family: dict[str, str] = {}
        user = instructions or build_user_prompt(request, research, analysis)
        research_items = len(research.items) if research else 0
        max_tokens = completion_tokens(request)

        chain = FallbackChain(self.chain_for(request))
        state = chain.start()
        while state is ChainState.TRYING:
            candidate = chain.current
            provider = self.providers.get(candidate.provider)
            if provider is None:
                state = chain.fail(self._skip(candidate, "unavailable", "Provider not configured"))
                continue

            estimated = self.estimate(candidate, request, research_items)
            if self.ledger is not None:
                pending = tracker.pending_cost if tracker else 0.0
                if not await self.ledger.check_budget(request.caller_id, estimated + pending):
                    exc = BudgetExceeded(
                        request.caller_id, estimated,
                        self.ledger.remaining(request.caller_id) - pending,
                    )
                    state = chain.fail(self._skip(candidate, "budget", exc.message))
                    continue

            if candidate.family not in system_by_family:
                system_by_family[candidate.family] = build_system_prompt(request, candidate.family)

            self.trace.emit("generate", "candidate_started", candidate=candidate.name, model=candidate.model)
            try:
                response = await asyncio.wait_for(
                    provider.complete(
                        user,
                        system=system_by_family[candidate.family],
                        model=candidate.model,
                        temperature=candidate.temperature,
                        max_tokens=min(candidate.max_tokens, max_tokens),
                    ),
                    timeout=self.settings["timeout"],
                )
            except Exception as exc:
                kind = classify_failure(exc)
                logger.warning(
                    "Candidate %s (%s) failed (%s): %s",
                    candidate.name, candidate.model, kind, exc,
                )
                state = chain.fail(self._failed(candidate, kind, str(exc) or type(exc).__name__))
                continue

            text = response.text.strip()
            if not text:
                logger.warning("Candidate %s returned empty text", candidate.name)
                state = chain.fail(self._failed(candidate, "validation", "Empty completion"))
                continue

            usage = TokenUsage(prompt=response.input_tokens, completion=response.output_tokens)
            cost = estimate_cost(
                candidate.model, usage.prompt, usage.completion, self.settings["pricing"],
            )
            if tracker is not None:
                tracker.record(candidate.provider, candidate.model, usage.total, cost)
            elif self.ledger is not None:
                await self.ledger.record_usage(request.caller_id, candidate.provider, usage.total, cost)

            chain.succeed(AttemptRecord(
                candidate=candidate.name,
                provider=candidate.provider,
                model=candidate.model,
                outcome="success",
                cost_usd=cost,
            ))
            result = GenerationResult(
                text=text,
                provider=candidate.provider,
                model=candidate.model,
                cost_usd=cost,
                usage=usage,
                candidate=candidate.name,
            )
            logger.info(
                "Generated %d tokens with %s for $%.4f", usage.total, candidate.name, cost,
            )
            self.trace.emit(
                "generate", "generated",
                candidate=candidate.name, tokens=usage.total, cost_usd=cost,
                attempts=len(chain.attempts),
            )
            if cache_key is not None:
                await self.cache.set(cache_key, result, ttl_for(request.content_type, self.config))
            return result

        self.trace.emit("generate", "all_failed", attempts=[a.to_dict() for a in chain.attempts])
        raise AllProvidersFailed(chain.attempts)

    def _skip(self, candidate: ModelCandidate, kind: str, message: str) -> AttemptRecord:
        logger.warning("Skipping candidate %s: %s", candidate.name, message)
        self.trace.emit("generate", "candidate_skipped", candidate=candidate.name, kind=kind)
        return AttemptRecord(
            candidate=candidate.name,
            provider=candidate.provider,
            model=candidate.model,
            outcome="skipped",
            kind=kind,
            message=message,
        )

    def _failed(self, candidate: ModelCandidate, kind: str, message: str) -> AttemptRecord:
        self.trace.emit("generate", "candidate_failed", candidate=candidate.name, kind=kind)
        return AttemptRecord(
            candidate=candidate.name,
            provider=candidate.provider,
            model=candidate.model,
            outcome="failed",
            kind=kind,
            message=message,
        )
