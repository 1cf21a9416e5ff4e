"""Request validation, run before any external call."""

from __future__ import annotations

from storyscale.errors import ValidationError
from storyscale.models import (
    BUSINESS_TYPES,
    CONTENT_TYPES,
    FORMALITY_LEVELS,
    LENGTHS,
    MARKETS,
    STRICTNESS_LEVELS,
    TONES,
    ContentRequest,
)

SUPPORTED_LANGUAGES = ("no", "en")
MAX_TOPIC_LENGTH = 500


def _check_choice(reasons: list[str], field_name: str, value, allowed) -> None:
    if value not in allowed:
        reasons.append(f"{field_name}: must be one of {', '.join(allowed)} (got {value!r})")


def request_problems(request: ContentRequest) -> list[str]:
    """Return field-level problems with a request (empty when valid)."""
    reasons: list[str] = []

    topic = (request.topic or "").strip()
    if not topic:
        reasons.append("topic: must not be empty")
    elif len(topic) > MAX_TOPIC_LENGTH:
        reasons.append(f"topic: must be at most {MAX_TOPIC_LENGTH} characters")

    _check_choice(reasons, "content_type", request.content_type, CONTENT_TYPES)
    _check_choice(reasons, "output_language", request.output_language, SUPPORTED_LANGUAGES)
    if request.input_language is not None:
        _check_choice(reasons, "input_language", request.input_language, SUPPORTED_LANGUAGES)
    _check_choice(reasons, "tone", request.tone, TONES)
    _check_choice(reasons, "length", request.length, LENGTHS)
    _check_choice(
        reasons, "cultural_strictness", request.cultural_strictness, STRICTNESS_LEVELS,
    )

    if request.word_count is not None and request.word_count <= 0:
        reasons.append("word_count: must be positive")
    if not 0 <= request.quality_threshold <= 100:
        reasons.append("quality_threshold: must be between 0 and 100")
    if not (request.caller_id or "").strip():
        reasons.append("caller_id: must not be empty")

    ctx = request.cultural_context
    if ctx is not None:
        _check_choice(reasons, "cultural_context.market", ctx.market, MARKETS)
        _check_choice(
            reasons, "cultural_context.business_type", ctx.business_type, BUSINESS_TYPES,
        )
        _check_choice(
            reasons, "cultural_context.formality", ctx.formality, FORMALITY_LEVELS,
        )

    return reasons


def validate_request(request: ContentRequest) -> ContentRequest:
    """Raise ValidationError listing every problem, else return the request."""
    reasons = request_problems(request)
    if reasons:
        raise ValidationError(reasons)
    return request
