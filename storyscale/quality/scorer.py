"""Heuristic quality scoring across five dimensions.

Every sub-check is a pure function of the text, a language key and the
marker tables. A dimension starts at 100 and loses ``(100 - sub) * weight``
for each of its sub-checks, so one weak sub-check cannot sink a dimension.
"""

from __future__ import annotations

import logging
import re
import statistics
from collections import Counter
from dataclasses import dataclass, replace

from storyscale.config import LOCAL_LANGUAGE, get_quality_config
from storyscale.models import (
    ContentRequest,
    CulturalAdaptationResult,
    DimensionScore,
    Improvement,
    QualityAssessment,
)
from storyscale.quality.markers import (
    DEFAULT_EXPECTED_WORDS,
    DEFAULT_MARKERS,
    DEFAULT_SUGGESTION,
    DIMENSION_WEIGHTS,
    OPTIMAL_SENTENCE_WORDS,
    OPTIMAL_WORD_CHARS,
    QualityMarkers,
)

logger = logging.getLogger(__name__)

PRIORITY_ORDER = {"critical": 0, "high": 1, "medium": 2, "low": 3}
MAX_IMPROVEMENTS = 10
LONG_SENTENCE_WORDS = 20
VERY_LONG_SENTENCE_WORDS = 30
COMPLEX_WORD_CHARS = 15


@dataclass(frozen=True)
class QualityContext:
    content_type: str = "article"
    language: str = LOCAL_LANGUAGE
    keywords: tuple[str, ...] = ()
    cultural_score: float | None = None  # from the cultural adapter, 0-100

    @classmethod
    def from_request(
        cls,
        request: ContentRequest,
        adaptation: CulturalAdaptationResult | None = None,
    ) -> QualityContext:
        return cls(
            content_type=request.content_type,
            language=request.output_language,
            keywords=tuple(request.keywords),
            cultural_score=adaptation.cultural_score if adaptation else None,
        )

    @property
    def lang_key(self) -> str:
        return "no" if self.language == LOCAL_LANGUAGE else "en"


def _clamp(score: float) -> float:
    return max(0.0, min(100.0, float(score)))


def _sentences(text: str) -> list[str]:
    return [s.strip() for s in re.split(r"[.!?]+", text) if s.strip()]


def _words(text: str) -> list[str]:
    return text.split()


def _has_word(text: str, word: str) -> bool:
    return re.search(rf"(?<!\w){re.escape(word)}(?!\w)", text, re.I) is not None


def _contains(text: str, phrase: str) -> bool:
    return phrase.lower() in text.lower()


# Linguistic

def check_grammar(text: str, lang: str, markers: QualityMarkers = DEFAULT_MARKERS) -> float:
    hits = sum(len(p.findall(text)) for p in markers.grammar_errors[lang])
    return _clamp(100 - 5 * hits)


def check_spelling(text: str, lang: str, markers: QualityMarkers = DEFAULT_MARKERS) -> float:
    hits = sum(1 for phrase in markers.longhand[lang] if _has_word(text, phrase))
    return _clamp(100 - 5 * hits)


def check_punctuation(text: str) -> float:
    score = 100
    segments = re.split(r"[.!?]", text)
    if len(segments[-1].strip()) > 10:
        score -= 10
    for sentence in _sentences(text):
        if len(sentence.split()) > LONG_SENTENCE_WORDS and "," not in sentence:
            score -= 5
    return _clamp(score)


def check_flow(text: str) -> float:
    """Rhythm: sentence lengths should vary, but not wildly."""
    lengths = [len(s.split()) for s in _sentences(text)]
    if len(lengths) < 2:
        return 50.0
    avg = statistics.mean(lengths)
    spread = statistics.pstdev(lengths)
    return _clamp(100 - abs(spread - 0.3 * avg) * 2)


def check_variation(text: str) -> float:
    openers = [s.split()[0].lower() for s in _sentences(text)]
    if not openers:
        return 0.0
    return _clamp(len(set(openers)) / len(openers) * 100)


def check_word_choice(text: str, lang: str, markers: QualityMarkers = DEFAULT_MARKERS) -> float:
    common = set(markers.common_words[lang])
    counts = Counter(
        w for w in (re.sub(r"[^\w-]", "", t.lower()) for t in _words(text))
        if len(w) > 4 and w not in common
    )
    penalty = sum(2 * (n - 3) for n in counts.values() if n > 3)
    return _clamp(100 - penalty)


# Cultural

def jantelov_issues(text: str, lang: str, markers: QualityMarkers = DEFAULT_MARKERS) -> list[str]:
    issues = [
        f"Avoid '{phrase}'" for phrase in markers.self_promotion[lang] if _contains(text, phrase)
    ]
    if markers.comparative[lang].search(text):
        issues.append("Avoid direct comparison with competitors")
    if markers.absolutes[lang].search(text):
        issues.append("Be careful with absolute claims")
    return issues


def check_jantelov(text: str, lang: str, markers: QualityMarkers = DEFAULT_MARKERS) -> float:
    return _clamp(100 - 20 * len(jantelov_issues(text, lang, markers)))


def check_consensus(text: str, lang: str, markers: QualityMarkers = DEFAULT_MARKERS) -> float:
    score = 100
    inclusive = sum(1 for w in markers.inclusive_words[lang] if _has_word(text, w))
    if inclusive < 2:
        score -= 20
    individual = sum(1 for w in markers.individual_words[lang] if _has_word(text, w))
    if individual > 2:
        score -= 15
    return _clamp(score)


def check_cultural_references(text: str, lang: str, markers: QualityMarkers = DEFAULT_MARKERS) -> float:
    hits = sum(1 for m in markers.cultural_markers[lang] if _contains(text, m))
    return _clamp(50 + 10 * hits)


# Business

def check_professionalism(text: str, lang: str, markers: QualityMarkers = DEFAULT_MARKERS) -> float:
    score = 100 - 20 * sum(1 for t in markers.unprofessional if _has_word(text, t))
    if not any(_contains(text, t) for t in markers.professional[lang]):
        score -= 10
    return _clamp(score)


def check_terminology(text: str, lang: str, markers: QualityMarkers = DEFAULT_MARKERS) -> float:
    table = markers.anglicisms if lang == "no" else markers.jargon
    return _clamp(100 - 10 * sum(1 for term in table if _has_word(text, term)))


def check_credibility(text: str, lang: str, markers: QualityMarkers = DEFAULT_MARKERS) -> float:
    score = 70
    if re.search(r"\d+\s*%", text):
        score += 10
    if markers.reference_words[lang].search(text):
        score += 10
    if markers.research_words[lang].search(text):
        score += 10
    if markers.vague_claims[lang].search(text):
        score -= 15
    return _clamp(score)


def check_persuasiveness(text: str, lang: str, markers: QualityMarkers = DEFAULT_MARKERS) -> float:
    return _clamp(60 + 10 * sum(1 for p in markers.persuasion_groups[lang] if p.search(text)))


def check_actionability(text: str, lang: str, markers: QualityMarkers = DEFAULT_MARKERS) -> float:
    score = 50
    if any(_contains(text, w) for w in markers.action_words[lang]):
        score += 15
    if markers.next_steps[lang].search(text):
        score += 20
    return _clamp(score)


# Technical

def check_accuracy(text: str, lang: str, markers: QualityMarkers = DEFAULT_MARKERS) -> float:
    return 80.0 if markers.absolutes[lang].search(text) else 90.0


def check_completeness(text: str, expected_words: int) -> float:
    if expected_words <= 0:
        return 100.0
    return float(round(min(len(_words(text)) / expected_words, 1) * 100))


def check_structure(text: str) -> float:
    score = 100
    stripped = text.strip()
    paragraphs = [p for p in stripped.split("\n\n") if p.strip()]
    if len(paragraphs) < 2 and len(stripped) > 500:
        score -= 20
    if not stripped[:1].isupper():
        score -= 10
    if not stripped.endswith((".", "!", "?")):
        score -= 10
    return _clamp(score)


def check_seo(text: str, content_type: str, keywords: tuple[str, ...] = ()) -> float:
    score = 50
    count = len(_words(text))
    if 300 <= count <= 1500:
        score += 20
    if keywords and any(_contains(text, k) for k in keywords):
        score += 15
    if content_type in ("article", "blog"):
        lines = text.strip().split("\n")
        if re.match(r"^[A-ZÆØÅ].{10,60}$", lines[0]):
            score += 15
        headings = [ln for ln in lines if 0 < len(ln) < 60 and ln[:1].isupper()]
        if len(headings) > 2:
            score += 15
    return _clamp(score)


def check_accessibility(text: str) -> float:
    score = 100
    very_long = [s for s in _sentences(text) if len(s.split()) > VERY_LONG_SENTENCE_WORDS]
    score -= 5 * len(very_long)
    words = _words(text)
    if words and sum(1 for w in words if len(w) > COMPLEX_WORD_CHARS) / len(words) > 0.1:
        score -= 20
    return _clamp(score)


# Engagement

def _first_sentence(text: str) -> str:
    match = re.match(r"\s*(.*?[.!?])(?:\s|$)", text, re.S)
    return match.group(1) if match else text.strip()


def check_hook(text: str, lang: str, markers: QualityMarkers = DEFAULT_MARKERS) -> float:
    first = _first_sentence(text)
    if not first:
        return 0.0
    score = 50
    if first.endswith("?"):
        score += 20
    if markers.direct_address[lang].search(first):
        score += 15
    if len(first) < 100:
        score += 15
    if markers.hook_phrases[lang].search(first):
        score += 20
    return _clamp(score)


def check_readability(text: str) -> float:
    sentences = _sentences(text)
    words = _words(text)
    if not sentences or not words:
        return 0.0
    avg_sentence = len(words) / len(sentences)
    avg_word = len(re.sub(r"\s+", "", text)) / len(words)
    score = 100.0
    if avg_sentence > OPTIMAL_SENTENCE_WORDS:
        score -= (avg_sentence - OPTIMAL_SENTENCE_WORDS) * 2
    if avg_word > OPTIMAL_WORD_CHARS:
        score -= (avg_word - OPTIMAL_WORD_CHARS) * 5
    return _clamp(score)


def check_emotion(text: str, lang: str, markers: QualityMarkers = DEFAULT_MARKERS) -> float:
    score = 40 + 10 * sum(1 for w in markers.emotional_words[lang] if _contains(text, w))
    if markers.storytelling[lang].search(text):
        score += 15
    return _clamp(score)


def check_call_to_action(text: str, lang: str, markers: QualityMarkers = DEFAULT_MARKERS) -> float:
    score = 0
    if any(_contains(text, p) for p in markers.cta_phrases[lang]):
        score = 70
    if markers.urgency[lang].search(text):
        score += 15
    if markers.cta_clarity[lang].search(text):
        score += 15
    return _clamp(score)


def check_shareability(text: str, lang: str, markers: QualityMarkers = DEFAULT_MARKERS) -> float:
    score = 50
    if markers.surprise[lang].search(text):
        score += 10
    if markers.practical_value[lang].search(text):
        score += 15
    if "?" in text:
        score += 10
    if 100 <= len(_words(text)) <= 500:
        score += 15
    return _clamp(score)


# Aggregation

def _dimension(checks: list[tuple[str, float, float, float, str]]) -> DimensionScore:
    """Fold ``(name, sub_score, weight, issue_below, issue)`` rows into a dimension."""
    score = 100.0
    metrics = {}
    issues = []
    for name, sub, weight, floor, issue in checks:
        metrics[name] = sub
        score -= (100 - sub) * weight
        if sub < floor:
            issues.append(issue)
    return DimensionScore(score=round(_clamp(score), 1), metrics=metrics, issues=issues)


def score_dimensions(
    text: str, ctx: QualityContext, markers: QualityMarkers = DEFAULT_MARKERS,
) -> dict[str, DimensionScore]:
    lang = ctx.lang_key
    consensus = check_consensus(text, lang, markers)
    if ctx.cultural_score is not None:
        appropriateness = _clamp(ctx.cultural_score)
    else:
        compliant = not jantelov_issues(text, lang, markers)
        appropriateness = (50 if compliant else 0) + consensus / 2
    expected = markers.expected_words.get(ctx.content_type, DEFAULT_EXPECTED_WORDS)

    return {
        "linguistic": _dimension([
            ("grammar", check_grammar(text, lang, markers), 0.2, 80, "Grammar problems detected"),
            ("spelling", check_spelling(text, lang, markers), 0.2, 90, "Spelled-out phrases have standard abbreviations"),
            ("punctuation", check_punctuation(text), 0.1, 85, "Punctuation problems"),
            ("flow", check_flow(text), 0.2, 70, "The text does not flow naturally"),
            ("variation", check_variation(text), 0.15, 75, "Little variation in sentence openings"),
            ("word_choice", check_word_choice(text, lang, markers), 0.15, 80, "Word choice can be improved"),
        ]),
        "cultural": _dimension([
            ("jantelov", check_jantelov(text, lang, markers), 0.3, 80, "Self-promotional claims"),
            ("consensus", consensus, 0.25, 70, "Missing consensus-building language"),
            ("references", check_cultural_references(text, lang, markers), 0.2, 60, "Few local cultural references"),
            ("appropriateness", appropriateness, 0.25, 75, "Cultural adaptation can be improved"),
        ]),
        "business": _dimension([
            ("professionalism", check_professionalism(text, lang, markers), 0.25, 80, "Unprofessional tone"),
            ("terminology", check_terminology(text, lang, markers), 0.2, 80, "Replace foreign or jargon terms"),
            ("credibility", check_credibility(text, lang, markers), 0.2, 70, "Missing credibility signals"),
            ("persuasiveness", check_persuasiveness(text, lang, markers), 0.2, 70, "Weak value proposition"),
            ("actionability", check_actionability(text, lang, markers), 0.15, 60, "No clear call to action"),
        ]),
        "technical": _dimension([
            ("accuracy", check_accuracy(text, lang, markers), 0.25, 90, "Verify factual claims"),
            ("completeness", check_completeness(text, expected), 0.2, 80, "Content seems incomplete"),
            ("structure", check_structure(text), 0.2, 75, "Structure can be improved"),
            ("seo", check_seo(text, ctx.content_type, ctx.keywords), 0.2, 70, "SEO optimization missing"),
            ("accessibility", check_accessibility(text), 0.15, 80, "Accessibility should be considered"),
        ]),
        "engagement": _dimension([
            ("hook", check_hook(text, lang, markers), 0.25, 70, "Opening could be stronger"),
            ("readability", check_readability(text), 0.2, 75, "Readability can be improved"),
            ("emotion", check_emotion(text, lang, markers), 0.2, 60, "Lacks emotional appeal"),
            ("call_to_action", check_call_to_action(text, lang, markers), 0.2, 70, "Call to action can be strengthened"),
            ("shareability", check_shareability(text, lang, markers), 0.15, 65, "Less suited for sharing"),
        ]),
    }


def overall_score(dimensions: dict[str, DimensionScore]) -> float:
    return float(round(sum(dimensions[d].score * w for d, w in DIMENSION_WEIGHTS.items())))


def grade_for(score: float) -> str:
    if score >= 90:
        return "A"
    if score >= 80:
        return "B"
    if score >= 70:
        return "C"
    if score >= 60:
        return "D"
    return "F"


def readiness_for(score: float) -> str:
    if score >= 85:
        return "ready"
    if score >= 70:
        return "needs_review"
    if score >= 50:
        return "needs_revision"
    return "rejected"


def priority_for(score: float) -> str:
    if score < 40:
        return "critical"
    if score < 60:
        return "high"
    if score < 80:
        return "medium"
    return "low"


def improvements_for(
    dimensions: dict[str, DimensionScore], markers: QualityMarkers = DEFAULT_MARKERS,
) -> list[Improvement]:
    improvements = [
        Improvement(
            dimension=name,
            issue=issue,
            suggestion=markers.suggestions.get(issue, DEFAULT_SUGGESTION),
            priority=priority_for(dim.score),
        )
        for name, dim in dimensions.items()
        for issue in dim.issues
    ]
    improvements.sort(key=lambda i: PRIORITY_ORDER[i.priority])
    return improvements[:MAX_IMPROVEMENTS]


def strengths_for(dimensions: dict[str, DimensionScore]) -> list[str]:
    strengths = [f"Strong {name} quality" for name, dim in dimensions.items() if dim.score >= 85]
    if dimensions["cultural"].metrics.get("jantelov", 0) >= 90:
        strengths.append("Excellent Janteloven compliance")
    if dimensions["engagement"].metrics.get("readability", 0) >= 85:
        strengths.append("Very readable")
    return strengths


def assess(
    text: str, ctx: QualityContext, markers: QualityMarkers = DEFAULT_MARKERS,
) -> QualityAssessment:
    dimensions = score_dimensions(text, ctx, markers)
    overall = overall_score(dimensions)
    return QualityAssessment(
        dimensions=dimensions,
        overall=overall,
        grade=grade_for(overall),
        readiness=readiness_for(overall),
        improvements=improvements_for(dimensions, markers),
        strengths=strengths_for(dimensions),
    )


def top_weaknesses(assessment: QualityAssessment, limit: int = 5) -> list[Improvement]:
    """Improvements to address next, critical and high priority first."""
    ranked = sorted(assessment.improvements, key=lambda i: PRIORITY_ORDER[i.priority])
    return ranked[:limit]


class QualityScorer:
    """Config-aware wrapper around :func:`assess`."""

    def __init__(self, config: dict | None = None, markers: QualityMarkers = DEFAULT_MARKERS):
        settings = get_quality_config(config or {})
        if settings["expected_words"]:
            expected = {**markers.expected_words, **settings["expected_words"]}
            markers = replace(markers, expected_words=expected)
        self.markers = markers
        self.threshold = settings["threshold"]
        self.max_iterations = settings["max_iterations"]

    def assess(self, text: str, ctx: QualityContext) -> QualityAssessment:
        result = assess(text, ctx, self.markers)
        logger.info(
            "Quality %.0f (%s, %s) for %s", result.overall, result.grade,
            result.readiness, ctx.content_type,
        )
        return result
