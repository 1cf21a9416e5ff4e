"""Pipeline orchestrator: classify, route, research, analyze, generate, adapt, assess, refine."""

from __future__ import annotations

import asyncio
import logging
from datetime import date

from storyscale.adapt import AdaptationContext, CulturalAdapter
from storyscale.analysis import ContentAnalyzer
from storyscale.cache import CacheStore, MemoryCache
from storyscale.classify import classify
from storyscale.config import get_router_config
from storyscale.generation import GenerationOrchestrator
from storyscale.ledger import CostLedger, InMemoryCostLedger, UsageTracker
from storyscale.llm import build_providers
from storyscale.llm.base import BaseLLMProvider
from storyscale.llm.prompts import build_improvement_prompt
from storyscale.models import (
    ContentAnalysis,
    ContentRequest,
    Draft,
    GenerationResult,
    PipelineResult,
    ResearchResult,
    RoutingDecision,
)
from storyscale.quality import QualityContext, QualityScorer, refine, top_weaknesses
from storyscale.research.base import BaseResearchProvider
from storyscale.research.gatherer import ResearchGatherer
from storyscale.router import SourceRouter
from storyscale.sources import SourceRegistry, load_registry
from storyscale.trace import PipelineObserver, PipelineTrace
from storyscale.validation import validate_request

logger = logging.getLogger(__name__)


class ContentPipeline:
    """Wires the components together for one request at a time.

    Cache, ledger and providers are shared across runs; the trace and the
    usage tracker belong to a single run.
    """

    def __init__(
        self,
        config: dict,
        registry: SourceRegistry | None = None,
        research_providers: dict[str, BaseResearchProvider] | None = None,
        llm_providers: dict[str, BaseLLMProvider] | None = None,
        cache: CacheStore | None = None,
        ledger: CostLedger | None = None,
        observers: list[PipelineObserver] | None = None,
        today: date | None = None,
    ):
        self.config = config
        self.registry = registry or load_registry()
        self.research_providers = research_providers
        self.llm_providers = llm_providers if llm_providers is not None else build_providers(config)
        self.cache = cache if cache is not None else MemoryCache()
        self.ledger = ledger if ledger is not None else InMemoryCostLedger(config)
        self.observers = list(observers or [])
        self.today = today

        self.router = SourceRouter(config, self.registry, today=today)
        self.analyzer = ContentAnalyzer(config, today=today)
        self.adapter = CulturalAdapter()
        self.scorer = QualityScorer(config)

    async def run(self, request: ContentRequest) -> PipelineResult:
        """Run the full pipeline for one request.

        Raises ValidationError before any external call and AllProvidersFailed
        when no candidate could generate the first draft. Usage is committed
        to the ledger when the run ends, or discarded if it is cancelled.
        """
        validate_request(request)
        trace = PipelineTrace(self.observers)
        tracker = UsageTracker(request.caller_id)
        logger.info("Pipeline run %s started (%s, %s)", request.id, request.content_type, request.output_language)

        try:
            result = await self._run(request, trace, tracker)
        except asyncio.CancelledError:
            logger.warning("Pipeline run %s cancelled", request.id)
            tracker.discard()
            trace.emit("pipeline", "cancelled")
            raise
        except Exception:
            logger.exception("Pipeline run %s failed", request.id)
            await tracker.commit(self.ledger)
            raise

        await tracker.commit(self.ledger)
        logger.info(
            "Pipeline run %s completed: score %.0f (%s), %d refinements, $%.4f",
            request.id, result.assessment.overall, result.assessment.grade,
            result.iterations, result.total_cost_usd,
        )
        return result

    async def _run(
        self, request: ContentRequest, trace: PipelineTrace, tracker: UsageTracker,
    ) -> PipelineResult:
        # --- Classify ---
        classification, strategy = classify(
            request, get_router_config(self.config)["specialized_keywords"],
        )
        trace.emit(
            "classify", "classified",
            complexity=classification.complexity, strategy=strategy,
            estimated_tokens=classification.estimated_tokens,
        )

        # --- Route + research (degrades to no research) ---
        routing, research = await self._research(request, classification, strategy, trace)

        # --- Analyze (degrades to an empty analysis) ---
        analysis = self._analyze(request, research, trace)

        # --- Generate first draft ---
        generator = GenerationOrchestrator(
            self.config, self.llm_providers, self.ledger, self.cache, trace,
        )
        generation = await generator.generate(request, research, analysis, tracker=tracker)
        draft = self._finish_draft(request, generation, trace)

        # --- Refine ---
        async def regenerate(best: Draft, iteration: int) -> Draft:
            prompt = build_improvement_prompt(
                best.text, top_weaknesses(best.assessment), request.output_language,
            )
            improved = await generator.generate(request, instructions=prompt, tracker=tracker)
            return self._finish_draft(request, improved, trace)

        threshold = request.quality_threshold
        best, iterations = await refine(
            draft, regenerate, threshold, self.scorer.max_iterations, trace,
        )

        flagged = best.assessment.overall < threshold
        if flagged:
            logger.warning(
                "Request %s below quality threshold: %.0f < %.0f (%s)",
                request.id, best.assessment.overall, threshold, best.assessment.readiness,
            )
            trace.emit(
                "assess", "below_threshold",
                score=best.assessment.overall, threshold=threshold,
                readiness=best.assessment.readiness,
            )

        return PipelineResult(
            request_id=request.id,
            text=best.text,
            classification=classification,
            routing=routing,
            research=research,
            analysis=analysis,
            generation=best.generation,
            adaptation=best.adaptation,
            assessment=best.assessment,
            iterations=iterations,
            flagged=flagged,
            total_cost_usd=round(tracker.pending_cost, 6),
            trace=list(trace.events),
        )

    async def _research(
        self, request, classification, strategy: str, trace: PipelineTrace,
    ) -> tuple[RoutingDecision | None, ResearchResult]:
        try:
            decision = self.router.route(request, classification, strategy)
            decision = self.router.optimize_for_cost(decision, request)
        except Exception:
            logger.exception("Routing failed for %s, continuing without research", request.id)
            trace.emit("route", "route_failed")
            return None, ResearchResult()
        trace.emit(
            "route", "routed",
            strategy=decision.strategy, primary=len(decision.primary),
            secondary=len(decision.secondary), international=len(decision.international),
            estimated_cost=decision.estimated_cost,
        )

        gatherer = ResearchGatherer(
            self.config, self.research_providers, cache=self.cache, trace=trace,
        )
        try:
            research = await gatherer.research(decision, enabled=request.enable_research)
        except Exception:
            logger.exception("Research failed for %s, continuing without it", request.id)
            trace.emit("research", "research_failed")
            research = ResearchResult()
        return decision, research

    def _analyze(
        self, request: ContentRequest, research: ResearchResult, trace: PipelineTrace,
    ) -> ContentAnalysis:
        if not research.items:
            return ContentAnalysis()
        try:
            analysis = self.analyzer.analyze_items(research.items, request.topic)
        except Exception:
            logger.exception("Analysis failed for %s", request.id)
            trace.emit("analyze", "analysis_failed")
            return ContentAnalysis()
        trace.emit(
            "analyze", "analyzed",
            relevance=analysis.relevance_score, insights=len(analysis.insights),
            warnings=len(analysis.warnings),
        )
        return analysis

    def _finish_draft(
        self, request: ContentRequest, generation: GenerationResult, trace: PipelineTrace,
    ) -> Draft:
        """Adapt and assess a generated text."""
        adaptation = self.adapter.adapt(generation.text, AdaptationContext.from_request(request))
        trace.emit(
            "adapt", "adapted",
            changes=len(adaptation.changes), cultural_score=adaptation.cultural_score,
        )
        assessment = self.scorer.assess(
            adaptation.adapted_text, QualityContext.from_request(request, adaptation),
        )
        trace.emit(
            "assess", "assessed",
            score=assessment.overall, grade=assessment.grade, readiness=assessment.readiness,
        )
        return Draft(generation=generation, adaptation=adaptation, assessment=assessment)


async def run_generation(config: dict, request: ContentRequest, **kwargs) -> PipelineResult:
    """Build a pipeline from config and run a single request."""
    return await ContentPipeline(config, **kwargs).run(request)
