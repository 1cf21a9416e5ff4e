"""Core data models for the content generation pipeline."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any

CONTENT_TYPES = ("article", "social", "email", "landing", "ad", "blog")
LENGTHS = ("short", "medium", "long")
TONES = ("professional", "casual", "persuasive", "informative")
MARKETS = ("norway", "nordic", "international")
BUSINESS_TYPES = ("b2b", "b2c", "government")
FORMALITY_LEVELS = ("formal", "neutral", "casual")
STRICTNESS_LEVELS = ("strict", "moderate", "relaxed")

LONG_FORM_TYPES = ("article", "blog")
SHORT_FORM_TYPES = ("social", "email", "ad")


@dataclass(frozen=True)
class CulturalContext:
    """Target market description for a request."""

    market: str = "norway"  # norway, nordic, international
    industry: str = ""
    business_type: str = "b2b"  # b2b, b2c, government
    formality: str = "neutral"  # formal, neutral, casual
    company_size: str = ""


@dataclass(frozen=True)
class SeoRequirements:
    primary_keyword: str = ""
    secondary_keywords: tuple[str, ...] = ()


@dataclass(frozen=True)
class ContentRequest:
    """A submitted content request. Immutable once created."""

    topic: str
    content_type: str = "article"
    output_language: str = "no"
    audience: str = ""
    tone: str = "professional"
    length: str = "medium"  # short, medium, long
    word_count: int | None = None
    keywords: tuple[str, ...] = ()
    cultural_context: CulturalContext | None = None
    seo: SeoRequirements | None = None
    input_language: str | None = None
    company: str = ""
    quality_threshold: float = 70.0
    cultural_strictness: str = "moderate"
    enable_research: bool = True
    preferred_provider: str | None = None
    caller_id: str = "anonymous"
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])

    @property
    def requires_translation(self) -> bool:
        return bool(self.input_language) and self.input_language != self.output_language

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ContentRequest:
        """Build a request from a JSON-shaped dict (unknown keys are ignored)."""
        data = dict(data)
        ctx = data.pop("cultural_context", None)
        seo = data.pop("seo", None)
        keywords = data.pop("keywords", None) or ()
        known = set(cls.__dataclass_fields__)
        kwargs = {k: v for k, v in data.items() if k in known}
        if ctx:
            kwargs["cultural_context"] = CulturalContext(
                **{k: v for k, v in ctx.items() if k in CulturalContext.__dataclass_fields__}
            )
        if seo:
            kwargs["seo"] = SeoRequirements(
                primary_keyword=seo.get("primary_keyword", ""),
                secondary_keywords=tuple(seo.get("secondary_keywords", ())),
            )
        kwargs["keywords"] = tuple(keywords)
        return cls(**kwargs)


@dataclass
class RequestClassification:
    """Derived request profile. Never persisted."""

    complexity: str  # simple, moderate, complex
    estimated_tokens: int
    required_capabilities: list[str] = field(default_factory=list)
    suggested_models: list[str] = field(default_factory=list)
    priority: str = "normal"  # normal, high
    estimated_processing_ms: int = 0
    requires_cultural_adaptation: bool = False
    requires_translation: bool = False


@dataclass(frozen=True)
class SourceDescriptor:
    """A research source from the static catalog."""

    domain: str
    name: str
    category: str  # business, news, professional, government, academic, industry, social
    language: str
    trust_score: float  # 0-10
    tier: str = "standard"  # premium, standard, community
    specializations: tuple[str, ...] = ()
    requires_auth: bool = False
    scraping_allowed: bool = True
    api_supported: bool = False
    update_frequency: str = "daily"
    business_relevance: float = 0.0  # 0-10
    cultural_authenticity: float | None = None  # 0-10, local sources only
    content_types: tuple[str, ...] = ()
    paywall: bool = False
    rate_limit: int | None = None
    feed_url: str = ""
    international: bool = False


@dataclass(frozen=True)
class SourceFilters:
    date_from: str = ""
    date_to: str = ""
    include_domains: tuple[str, ...] = ()
    exclude_domains: tuple[str, ...] = ()
    min_trust_score: float | None = None


@dataclass(frozen=True)
class SourceSelection:
    """One source picked for a request, with how to query it."""

    source: SourceDescriptor
    priority: int  # 1 primary, 2 secondary, 3 international
    query: str
    search_depth: str = "basic"  # basic, advanced
    max_results: int = 3
    filters: SourceFilters | None = None
    reason: str = ""


@dataclass
class RoutingDecision:
    strategy: str
    primary: list[SourceSelection] = field(default_factory=list)
    secondary: list[SourceSelection] = field(default_factory=list)
    international: list[SourceSelection] = field(default_factory=list)
    queries: list[str] = field(default_factory=list)
    estimated_cost: float = 0.0
    estimated_time_ms: int = 0
    cultural_relevance: float = 0.0
    reasoning: list[str] = field(default_factory=list)

    @property
    def selections(self) -> list[SourceSelection]:
        return [*self.primary, *self.secondary, *self.international]


@dataclass
class ResearchItem:
    """A single piece of gathered research, unique by url within a request."""

    source_id: str
    url: str
    title: str
    content: str
    relevance: float = 0.0  # 0-1
    credibility: float = 0.0  # 0-1
    author: str = ""
    published: str = ""
    source_type: str = "article"  # article, news, blog, social, code
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class FetchFailure:
    """A settled task that raised instead of returning."""

    label: str
    error_type: str
    message: str
    kind: str = "transport"


@dataclass
class ResearchResult:
    items: list[ResearchItem] = field(default_factory=list)
    failures: list[FetchFailure] = field(default_factory=list)
    confidence: float = 0.0
    cache_hit: bool = False


@dataclass
class Insight:
    text: str
    category: str
    confidence: float
    relevance: float


@dataclass
class ExtractedFact:
    text: str
    category: str  # statistic, date, company, monetary
    source_sentence: str = ""


@dataclass
class CitableQuote:
    text: str
    attribution: str = ""
    relevance: float = 0.5


@dataclass
class BusinessMetric:
    metric: str  # revenue, growth, market_share
    value: str
    context: str = ""


@dataclass
class LocalTerm:
    term: str
    translation: str
    frequency: int = 1


@dataclass
class AnalysisWarning:
    type: str  # relevance, quality, outdated, paywall, translation
    severity: str  # low, medium, high
    message: str


@dataclass
class ContentAnalysis:
    """Scores and extractions for one analyzed text (or a merge of several)."""

    relevance_score: float = 0.0
    quality_score: float = 0.0
    cultural_score: float = 0.0
    factual_density: float = 0.0
    sentiment: float = 0.0
    readability: float = 0.0
    insights: list[Insight] = field(default_factory=list)
    facts: list[ExtractedFact] = field(default_factory=list)
    quotes: list[CitableQuote] = field(default_factory=list)
    metrics: list[BusinessMetric] = field(default_factory=list)
    local_terms: list[LocalTerm] = field(default_factory=list)
    warnings: list[AnalysisWarning] = field(default_factory=list)


@dataclass
class AdaptationChange:
    type: str  # self-promotion, terminology, tone, consensus, industry, structure
    original: str
    adapted: str
    reason: str
    impact: str = "medium"  # low, medium, high


@dataclass
class CulturalAdaptationResult:
    """Adapted text plus the change log and compliance scores (0-100)."""

    original_text: str
    adapted_text: str
    changes: list[AdaptationChange] = field(default_factory=list)
    compliance_score: float = 100.0
    appropriateness_score: float = 100.0
    cultural_score: float = 100.0
    tone: str = "appropriate"  # appropriate, too_formal, too_casual
    violations: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class TokenUsage:
    prompt: int = 0
    completion: int = 0

    def __post_init__(self):
        if self.prompt < 0 or self.completion < 0:
            raise ValueError("Token counts must be non-negative")

    @property
    def total(self) -> int:
        return self.prompt + self.completion


@dataclass
class GenerationResult:
    text: str
    provider: str
    model: str
    cost_usd: float = 0.0
    usage: TokenUsage = field(default_factory=TokenUsage)
    cache_hit: bool = False
    candidate: str = ""


@dataclass
class AttemptRecord:
    """One step of the provider fallback chain."""

    candidate: str
    provider: str
    model: str
    outcome: str  # success, failed, skipped
    kind: str = ""
    message: str = ""
    cost_usd: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "candidate": self.candidate,
            "provider": self.provider,
            "model": self.model,
            "outcome": self.outcome,
            "kind": self.kind,
            "message": self.message,
            "cost_usd": self.cost_usd,
        }


@dataclass
class DimensionScore:
    score: float  # 0-100
    metrics: dict[str, float] = field(default_factory=dict)
    issues: list[str] = field(default_factory=list)


@dataclass
class Improvement:
    dimension: str
    issue: str
    suggestion: str
    priority: str  # critical, high, medium, low


@dataclass
class QualityAssessment:
    dimensions: dict[str, DimensionScore]
    overall: float
    grade: str
    readiness: str  # ready, needs_review, needs_revision, rejected
    improvements: list[Improvement] = field(default_factory=list)
    strengths: list[str] = field(default_factory=list)


@dataclass
class Draft:
    """One generate/adapt/assess round of the pipeline."""

    generation: GenerationResult
    adaptation: CulturalAdaptationResult
    assessment: QualityAssessment

    @property
    def text(self) -> str:
        return self.adaptation.adapted_text


@dataclass
class PipelineResult:
    request_id: str
    text: str
    classification: RequestClassification
    routing: RoutingDecision | None
    research: ResearchResult
    analysis: ContentAnalysis
    generation: GenerationResult
    adaptation: CulturalAdaptationResult
    assessment: QualityAssessment
    iterations: int = 0
    flagged: bool = False
    total_cost_usd: float = 0.0
    trace: list[Any] = field(default_factory=list)
