"""Cultural adapter: six ordered rewrite passes followed by compliance scoring.

Each pass is a plain function ``(text, ctx, tables) -> (text, changes)`` so it
can be tested on its own; ``CulturalAdapter.adapt`` runs them in order.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass

from storyscale.adapt.tables import (
    ABSOLUTE_CLAIMS,
    COMPARATIVE_CLAIMS,
    CONTEXT_OPENER,
    DEFAULT_TABLES,
    EXECUTIVE_AUDIENCE,
    SUSTAINABILITY_CLAUSE,
    SUSTAINABILITY_MARKERS,
    TECHNICAL_AUDIENCE,
    TONE_INDICATOR_LIMIT,
    TRANSPARENCY_SWAP,
    AdaptationTables,
)
from storyscale.config import LOCAL_LANGUAGE
from storyscale.models import AdaptationChange, ContentRequest, CulturalAdaptationResult

logger = logging.getLogger(__name__)

FORMALITY_BY_LEVEL = {"formal": "high", "neutral": "medium", "casual": "low"}

STRUCTURE_WORD_LIMIT = 150
SHORT_OPENER_CHARS = 50
CONSENSUS_MIN_SENTENCES = 4

Changes = list[AdaptationChange]


@dataclass(frozen=True)
class AdaptationContext:
    language: str = LOCAL_LANGUAGE
    formality: str = "medium"  # high, medium, low
    audience: str = ""
    industry: str = ""
    strictness: str = "moderate"  # strict, moderate, relaxed

    @classmethod
    def from_request(cls, request: ContentRequest) -> AdaptationContext:
        ctx = request.cultural_context
        if ctx is not None:
            formality = FORMALITY_BY_LEVEL.get(ctx.formality, "medium")
        else:
            formality = "low" if request.tone == "casual" else "medium"
        return cls(
            language=request.output_language,
            formality=formality,
            audience=request.audience,
            industry=ctx.industry if ctx else "",
            strictness=request.cultural_strictness,
        )

    @property
    def lang_key(self) -> str:
        return "no" if self.language == LOCAL_LANGUAGE else "en"

    @property
    def is_local(self) -> bool:
        return self.language == LOCAL_LANGUAGE


def _match_case(original: str, replacement: str) -> str:
    if replacement and original[:1].isupper():
        return replacement[0].upper() + replacement[1:]
    return replacement


def _phrase_pattern(phrase: str) -> re.Pattern:
    return re.compile(rf"(?<!\w){re.escape(phrase)}(?!\w)", re.IGNORECASE)


def replace_phrases(
    text: str,
    table: dict[str, str],
    change_type: str,
    reason: str,
    impact: str = "medium",
) -> tuple[str, Changes]:
    """Whole-word, case-insensitive replacement, longest phrase first."""
    changes: Changes = []
    for phrase in sorted(table, key=len, reverse=True):
        replacement = table[phrase]

        def _sub(match: re.Match, replacement=replacement) -> str:
            adapted = _match_case(match.group(0), replacement)
            changes.append(AdaptationChange(
                type=change_type,
                original=match.group(0),
                adapted=adapted,
                reason=reason,
                impact=impact,
            ))
            return adapted

        text = _phrase_pattern(phrase).sub(_sub, text)
    return text, changes


def moderate_self_promotion(
    text: str, ctx: AdaptationContext, tables: AdaptationTables = DEFAULT_TABLES,
) -> tuple[str, Changes]:
    text, changes = replace_phrases(
        text, tables.self_promotion, "self-promotion",
        "Boastful claims read poorly in a Jantelov culture", "high",
    )
    if ctx.strictness != "relaxed":
        text, more = replace_phrases(
            text, tables.superlatives, "self-promotion",
            "Absolute claims replaced with measured language", "medium",
        )
        changes += more
    return text, changes


def localize_terminology(
    text: str, ctx: AdaptationContext, tables: AdaptationTables = DEFAULT_TABLES,
) -> tuple[str, Changes]:
    if not ctx.is_local:
        return text, []
    return replace_phrases(
        text, tables.loanwords, "terminology",
        "Norwegian business term preferred over English loanword", "medium",
    )


def _audience_is(audience: str, markers: tuple[str, ...]) -> bool:
    lower = audience.lower()
    return any(m in lower for m in markers)


def adjust_tone(
    text: str, ctx: AdaptationContext, tables: AdaptationTables = DEFAULT_TABLES,
) -> tuple[str, Changes]:
    changes: Changes = []
    if ctx.is_local and ctx.formality == "high":
        text, changes = replace_phrases(
            text, tables.formal_swaps, "tone", "Raised formality for the audience", "low",
        )
    elif ctx.is_local and ctx.formality == "low":
        text, changes = replace_phrases(
            text, tables.casual_swaps, "tone", "Lowered formality for the audience", "low",
        )

    if _audience_is(ctx.audience, EXECUTIVE_AUDIENCE):
        text, more = replace_phrases(
            text, tables.executive_swaps[ctx.lang_key], "tone",
            "Executives prefer direct, strategic phrasing", "medium",
        )
        changes += more
        if ctx.is_local and "strategi" not in text.lower():
            text, more = replace_phrases(
                text, {"plan": "strategisk plan"}, "tone",
                "Strategic framing for executives", "low",
            )
            changes += more
    elif _audience_is(ctx.audience, TECHNICAL_AUDIENCE):
        qualifiers = tables.technical_qualifiers[ctx.lang_key]
        for word, qualified in qualifiers.items():
            prefix = qualified.split()[0]
            pattern = re.compile(rf"(?<!{re.escape(prefix)} )\b{re.escape(word)}\b", re.I)

            def _sub(match: re.Match, qualified=qualified) -> str:
                changes.append(AdaptationChange(
                    type="tone",
                    original=match.group(0),
                    adapted=qualified,
                    reason="Technical readers expect precise terms",
                    impact="low",
                ))
                return qualified

            text = pattern.sub(_sub, text)
    return text, changes


def _split_sentences(text: str) -> list[str]:
    return [s for s in re.split(r"(?<=[.!?])\s+", text.strip()) if s]


def _split_with_gaps(text: str) -> tuple[list[str], list[str]]:
    """Sentences plus the whitespace that followed each one (one gap fewer)."""
    parts = re.split(r"((?<=[.!?])\s+)", text.strip())
    return parts[0::2], parts[1::2]


def inject_consensus(
    text: str, ctx: AdaptationContext, tables: AdaptationTables = DEFAULT_TABLES,
) -> tuple[str, Changes]:
    changes: Changes = []
    if ctx.is_local:
        text, changes = replace_phrases(
            text, tables.pronouns, "consensus",
            "Collective framing over first person singular", "medium",
        )

    lower = text.lower()
    if any(m in lower for m in tables.consensus_markers[ctx.lang_key]):
        return text, changes

    sentences, gaps = _split_with_gaps(text)
    if len(sentences) < CONSENSUS_MIN_SENTENCES:
        return text, changes

    phrase = tables.consensus_sentence[ctx.lang_key] + "."
    at = len(sentences) // 3
    # Appended to sentence at-1 so its original line break stays after the phrase
    sentences[at - 1] = f"{sentences[at - 1]} {phrase}"
    changes.append(AdaptationChange(
        type="consensus",
        original="",
        adapted=phrase,
        reason="Collaborative language builds trust with Norwegian readers",
        impact="medium",
    ))
    return _join(sentences, gaps), changes


def _join(sentences: list[str], gaps: list[str]) -> str:
    out = []
    for i, sentence in enumerate(sentences):
        out.append(sentence)
        if i < len(gaps):
            out.append(gaps[i])
    return "".join(out)


def industry_for(industry: str, tables: AdaptationTables = DEFAULT_TABLES) -> str | None:
    words = set(re.findall(r"\w+", industry.lower()))
    for name, keys in tables.industry_keys.items():
        if words & set(keys):
            return name
    return None


def adapt_for_industry(
    text: str, ctx: AdaptationContext, tables: AdaptationTables = DEFAULT_TABLES,
) -> tuple[str, Changes]:
    industry = industry_for(ctx.industry, tables)
    if industry is None:
        return text, []

    lang = ctx.lang_key
    text, changes = replace_phrases(
        text, tables.industry_terms[lang].get(industry, {}), "industry",
        f"Measured {industry} vocabulary", "medium",
    )

    if industry == "technology":
        if not any(m in text.lower() for m in SUSTAINABILITY_MARKERS[lang]):
            clause = SUSTAINABILITY_CLAUSE[lang]
            text = f"{text.rstrip()} {clause}"
            changes.append(AdaptationChange(
                type="industry", original="", adapted=clause,
                reason="Sustainability is expected in Norwegian tech messaging",
                impact="low",
            ))
    elif industry == "finance":
        old, new = TRANSPARENCY_SWAP[lang]
        pattern = _phrase_pattern(old)
        match = pattern.search(text)
        if match:
            adapted = _match_case(match.group(0), new)
            text = pattern.sub(adapted, text, count=1)
            changes.append(AdaptationChange(
                type="industry", original=match.group(0), adapted=adapted,
                reason="Transparency matters for financial services", impact="low",
            ))
    return text, changes


def optimize_structure(
    text: str, ctx: AdaptationContext, tables: AdaptationTables = DEFAULT_TABLES,
) -> tuple[str, Changes]:
    changes: Changes = []
    text = text.strip()
    sentences = _split_sentences(text)
    if not sentences:
        return text, changes

    if len(text.split()) > STRUCTURE_WORD_LIMIT and "\n\n" not in text and len(sentences) >= 3:
        size = -(-len(sentences) // 3)
        parts, gaps = _split_with_gaps(text)
        gaps = ["\n\n" if (i + 1) % size == 0 else gap for i, gap in enumerate(gaps)]
        text = _join(parts, gaps)
        paragraphs = text.split("\n\n")
        changes.append(AdaptationChange(
            type="structure", original="single paragraph",
            adapted=f"{len(paragraphs)} paragraphs",
            reason="Long unbroken text is hard to read", impact="medium",
        ))

    first = sentences[0]
    if len(first) < SHORT_OPENER_CHARS:
        opener = CONTEXT_OPENER[ctx.lang_key]
        lowered = first
        # Keep acronyms and proper nouns such as "DNB" or "Oslo" capitalised
        if len(first) > 1 and first[0].isupper() and first[1].islower():
            lowered = first[0].lower() + first[1:]
        if not text.startswith(opener):
            text = opener + lowered + text[len(first):]
            changes.append(AdaptationChange(
                type="structure", original=first, adapted=opener + lowered,
                reason="Short opening sentence given business context", impact="low",
            ))
    return text, changes


PASSES: tuple[Callable, ...] = (
    moderate_self_promotion,
    localize_terminology,
    adjust_tone,
    inject_consensus,
    adapt_for_industry,
    optimize_structure,
)


def find_violations(text: str, tables: AdaptationTables = DEFAULT_TABLES) -> list[str]:
    """Unresolved self-promotion, comparative and absolute claims."""
    lower = text.lower()
    issues = [
        f"Self-promotion: '{p}'" for p in tables.violation_phrases
        if _phrase_pattern(p).search(lower)
    ]
    issues += [f"Comparative claim: '{m.group(0)}'" for m in COMPARATIVE_CLAIMS.finditer(text)]
    issues += [f"Absolute claim: '{m.group(0)}'" for m in ABSOLUTE_CLAIMS.finditer(text)]
    return issues


def _count_words(text: str, words: tuple[str, ...]) -> int:
    return sum(len(re.findall(rf"\b{re.escape(w)}\b", text, re.I)) for w in words)


def compliance_score(text: str, tables: AdaptationTables = DEFAULT_TABLES) -> tuple[float, list[str]]:
    violations = find_violations(text, tables)
    positives = sum(
        1 for w in tables.inclusive_indicators
        if re.search(rf"\b{re.escape(w)}\b", text, re.I)
    )
    score = 100 - 10 * len(violations) + 5 * positives
    return float(max(0, min(100, score))), violations


def appropriateness_score(
    text: str, ctx: AdaptationContext, tables: AdaptationTables = DEFAULT_TABLES,
) -> tuple[float, str, list[str]]:
    """Penalize leftover loanwords and a tone that leans too far either way."""
    score = 100.0
    leftovers = []
    if ctx.is_local:
        leftovers = [w for w in tables.loanwords if _phrase_pattern(w).search(text)]
        score -= 5 * len(leftovers)

    tone = "appropriate"
    if _count_words(text, tables.formal_indicators) > TONE_INDICATOR_LIMIT:
        tone = "too_formal"
        score -= 10
    elif _count_words(text, tables.casual_indicators) > TONE_INDICATOR_LIMIT:
        tone = "too_casual"
        score -= 10
    return max(0.0, score), tone, leftovers


def overall_cultural_score(compliance: float, appropriateness: float) -> float:
    return float(round(0.4 * compliance + 0.3 * appropriateness + 30))


def _recommendations(
    compliance: float,
    violations: list[str],
    tone: str,
    leftovers: list[str],
    text: str,
    tables: AdaptationTables,
) -> list[str]:
    recs = []
    if violations:
        recs.append("Reduce self-promotional language and absolute claims (Janteloven)")
    if compliance < 80:
        recs.append("Use more inclusive, collaborative phrasing such as 'vi' and 'sammen'")
    if leftovers:
        recs.append("Replace remaining English business terms: " + ", ".join(leftovers))
    if tone == "too_formal":
        recs.append("Use a less formal tone; Norwegian business writing is direct")
    elif tone == "too_casual":
        recs.append("Use a more professional tone for business readers")
    if not re.search(r"\b(vi|oss|sammen|we|together)\b", text, re.I):
        recs.append("Address the reader as a partner rather than talking about yourself")
    return recs


class CulturalAdapter:
    """Runs the adaptation passes and scores the result."""

    def __init__(self, tables: AdaptationTables = DEFAULT_TABLES, passes=PASSES):
        self.tables = tables
        self.passes = passes

    def adapt(self, text: str, ctx: AdaptationContext) -> CulturalAdaptationResult:
        adapted = text
        changes: Changes = []
        for run_pass in self.passes:
            adapted, pass_changes = run_pass(adapted, ctx, self.tables)
            changes.extend(pass_changes)

        result = self.check(adapted, ctx)
        result.original_text = text
        result.changes = changes
        logger.info(
            "Adapted text with %d changes, cultural score %.0f",
            len(changes), result.cultural_score,
        )
        return result

    def check(self, text: str, ctx: AdaptationContext) -> CulturalAdaptationResult:
        """Score text without rewriting it."""
        compliance, violations = compliance_score(text, self.tables)
        appropriateness, tone, leftovers = appropriateness_score(text, ctx, self.tables)
        return CulturalAdaptationResult(
            original_text=text,
            adapted_text=text,
            compliance_score=compliance,
            appropriateness_score=appropriateness,
            cultural_score=overall_cultural_score(compliance, appropriateness),
            tone=tone,
            violations=violations,
            recommendations=_recommendations(
                compliance, violations, tone, leftovers, text, self.tables,
            ),
        )
