"""Request classification and routing strategy selection.

Both functions are pure: same request in, same answer out.
"""

from __future__ import annotations

import math

from storyscale.config import LOCAL_LANGUAGE, LOCAL_MARKET, REGIONAL_MARKET
from storyscale.models import ContentRequest, RequestClassification

STRATEGIES = (
    "norwegian_first",
    "international_first",
    "balanced",
    "specialized",
    "comprehensive",
    "cost_optimized",
    "speed_optimized",
)

SPECIALIZED_KEYWORDS = (
    "oil",
    "gas",
    "olje",
    "maritime",
    "maritim",
    "shipping",
    "salmon",
    "laks",
    "aquaculture",
    "havbruk",
    "sovereign wealth",
    "oljefondet",
    "hydropower",
    "vannkraft",
    "nordic",
    "skandinavia",
)

TIME_SENSITIVE_TYPES = ("social", "ad")
HIGH_PRIORITY_TYPES = ("ad", "email")
STRUCTURED_TYPES = ("article", "landing")

DEFAULT_WORD_COUNT = 500
TOKENS_PER_WORD = 1.5
MS_PER_TOKEN = 10

SUGGESTED_MODELS = {
    "simple": ["gpt-5-mini", "claude-3-sonnet"],
    "moderate": ["gpt-5", "claude-3-sonnet"],
    "complex": ["gpt-5", "claude-3"],
}


def complexity_score(request: ContentRequest) -> int:
    """Additive complexity points; see ``classify_request`` for the buckets."""
    score = 0
    words = request.word_count or DEFAULT_WORD_COUNT
    if words > 1000:
        score += 2
    elif words > 500:
        score += 1
    if request.requires_translation:
        score += 1
    if request.cultural_context is not None:
        score += 2
    if request.seo is not None and request.seo.primary_keyword:
        score += 1
    if request.content_type in STRUCTURED_TYPES:
        score += 1
    return score


def classify_request(request: ContentRequest) -> RequestClassification:
    score = complexity_score(request)
    if score <= 1:
        complexity = "simple"
    elif score <= 3:
        complexity = "moderate"
    else:
        complexity = "complex"

    words = request.word_count or DEFAULT_WORD_COUNT
    multiplier = 2 if request.requires_translation else 1
    tokens = math.ceil(words * TOKENS_PER_WORD * multiplier)

    capabilities = ["basic-generation"]
    if request.requires_translation:
        capabilities.append("translation")
    if request.cultural_context is not None:
        capabilities.append("cultural-adaptation")
    if complexity == "complex":
        capabilities.append("complex-reasoning")

    return RequestClassification(
        complexity=complexity,
        estimated_tokens=tokens,
        required_capabilities=capabilities,
        suggested_models=list(SUGGESTED_MODELS[complexity]),
        priority="high" if request.content_type in HIGH_PRIORITY_TYPES else "normal",
        estimated_processing_ms=tokens * MS_PER_TOKEN,
        requires_cultural_adaptation=(
            request.cultural_context is not None
            or request.output_language == LOCAL_LANGUAGE
        ),
        requires_translation=request.requires_translation,
    )


def is_specialized_topic(topic: str, keywords=SPECIALIZED_KEYWORDS) -> bool:
    topic_lower = topic.lower()
    return any(k.lower() in topic_lower for k in keywords)


def choose_strategy(
    request: ContentRequest,
    classification: RequestClassification,
    specialized_keywords=None,
) -> str:
    """First matching rule wins."""
    local_output = request.output_language == LOCAL_LANGUAGE
    market = request.cultural_context.market if request.cultural_context else None

    if local_output and market == LOCAL_MARKET:
        return "norwegian_first"
    if local_output and market == REGIONAL_MARKET:
        return "balanced"
    if classification.complexity == "complex":
        return "comprehensive"
    if is_specialized_topic(request.topic, specialized_keywords or SPECIALIZED_KEYWORDS):
        return "specialized"
    if classification.complexity == "simple":
        return "cost_optimized"
    if request.content_type in TIME_SENSITIVE_TYPES:
        return "speed_optimized"
    return "balanced"


def classify(
    request: ContentRequest, specialized_keywords=None,
) -> tuple[RequestClassification, str]:
    """Classification plus the routing strategy it implies."""
    classification = classify_request(request)
    return classification, choose_strategy(request, classification, specialized_keywords)
