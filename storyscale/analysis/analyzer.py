"""Content analyzer: relevance, quality and cultural scoring plus extraction.

Every scorer is a pure function of ``(text, ..., tables)``. ``ContentAnalyzer``
wires them together with the configured thresholds and caps.
"""

from __future__ import annotations

import html
import logging
import re
from datetime import date

from storyscale.analysis.tables import (
    ATTRIBUTION_VERBS,
    COMPANY_SUFFIX_PATTERN,
    DATE_PATTERN,
    DEFAULT_INSIGHT_CATEGORY,
    DEFAULT_TABLES,
    METRIC_PATTERNS,
    MONETARY_PATTERN,
    QUOTE_PATTERN,
    STATEMENT_PATTERN,
    STATISTIC_MARKER,
    STATISTIC_PATTERN,
    VOWELS,
    AnalysisTables,
)
from storyscale.config import LOCAL_LANGUAGE, get_analysis_config
from storyscale.models import (
    AnalysisWarning,
    BusinessMetric,
    CitableQuote,
    ContentAnalysis,
    ExtractedFact,
    Insight,
    LocalTerm,
    ResearchItem,
)

logger = logging.getLogger(__name__)

_SENTENCE_RE = re.compile(r"[^.!?]+[.!?]+")
_YEAR_RE = re.compile(r"\b(19\d{2}|20\d{2})\b")
_TAG_RE = re.compile(r"<[^>]+>")
_PARAGRAPH_RE = re.compile(r"\n\s*\n")

_VERBS = "|".join(ATTRIBUTION_VERBS)
_NAME = r"[A-ZÆØÅ][\wæøåÆØÅ-]+(?:\s+[A-ZÆØÅ][\wæøåÆØÅ-]+)?"
_ATTRIBUTION_AFTER = re.compile(rf"^[\s,.»”\"]*(?:{_VERBS})\s+({_NAME})")
_ATTRIBUTION_BEFORE = re.compile(rf"({_NAME})\s+(?:{_VERBS})\s*[:,]?\s*$")


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def clean_content(text: str) -> str:
    """Drop markup and entities and collapse whitespace. Blank-line paragraph breaks survive."""
    text = html.unescape(_TAG_RE.sub(" ", text or ""))
    paragraphs = (" ".join(p.split()) for p in _PARAGRAPH_RE.split(text))
    return "\n\n".join(p for p in paragraphs if p)


def split_sentences(text: str) -> list[str]:
    return [s.strip() for s in _SENTENCE_RE.findall(text) if s.strip()]


def related_terms_for(topic: str, tables: AnalysisTables = DEFAULT_TABLES) -> tuple[str, ...]:
    topic_lower = topic.lower()
    for key, terms in tables.related_terms.items():
        if key in topic_lower:
            return terms
    return ()


def score_relevance(text: str, topic: str, tables: AnalysisTables = DEFAULT_TABLES) -> float:
    """Length-weighted topic word coverage plus a bonus per related term."""
    lower = text.lower()
    score = 0.0
    total_weight = 0.0
    for word in topic.lower().split():
        if len(word) <= 3:
            continue
        occurrences = lower.count(word)
        weight = len(word) / 10
        score += min(occurrences * 0.1, 0.3) * weight
        total_weight += weight

    for term in related_terms_for(topic, tables):
        if term.lower() in lower:
            score += 0.1

    if not total_weight:
        return 0.0
    return round(_clamp(score / total_weight), 4)


def score_quality(text: str, source_trust: float) -> float:
    score = source_trust / 10
    words = len(text.split())
    if words >= 300:
        score += 0.1
    if words >= 500:
        score += 0.1
    if len([p for p in re.split(r"\n\s*\n", text) if p.strip()]) >= 3:
        score += 0.05
    if re.search(r"\d", text):
        score += 0.05
    if re.search(r"[\"'«“].+[\"'»”]", text):
        score += 0.05
    if re.search(r"\d{4}|\d{1,2}[/\-]\d{1,2}", text):
        score += 0.05
    return round(_clamp(score), 4)


def score_cultural_fit(text: str, tables: AnalysisTables = DEFAULT_TABLES) -> float:
    """Local flavour: company names, business terms, places and currency."""
    score = 0.0
    for pattern in tables.company_patterns:
        score += len(pattern.findall(text)) * 0.05

    lower = text.lower()
    term_hits = sum(1 for term in tables.business_terms if term in lower)
    score += min(term_hits * 0.02, 0.3)

    score += sum(0.05 for place in tables.places if place in text)
    if tables.currency.search(text):
        score += 0.1
    return round(_clamp(score), 4)


def categorize_insight(sentence: str, tables: AnalysisTables = DEFAULT_TABLES) -> str:
    lower = sentence.lower()
    for category, keywords in tables.insight_categories:
        if category == "statistical_finding":
            if STATISTIC_MARKER.search(lower):
                return category
            continue
        if any(k in lower for k in keywords):
            return category
    return DEFAULT_INSIGHT_CATEGORY


def extract_insights(
    text: str,
    topic: str,
    limit: int,
    tables: AnalysisTables = DEFAULT_TABLES,
) -> list[Insight]:
    topic_words = [w for w in topic.lower().split() if len(w) > 2]
    insights = []
    for sentence in split_sentences(text):
        lower = sentence.lower()
        if not any(ind in lower for ind in tables.insight_indicators):
            continue
        relevance = sum(0.2 for w in topic_words if w in lower)
        if relevance < 0.2:
            continue
        insights.append(Insight(
            text=sentence,
            category=categorize_insight(sentence, tables),
            confidence=round(0.8 + min(relevance * 0.2, 0.2), 4),
            relevance=round(min(relevance, 1.0), 4),
        ))
    insights.sort(key=lambda i: i.confidence * i.relevance, reverse=True)
    return insights[:limit]


def extract_facts(text: str, limit: int) -> list[ExtractedFact]:
    facts = []
    checks = (
        ("statistic", STATISTIC_PATTERN),
        ("date", DATE_PATTERN),
        ("company", COMPANY_SUFFIX_PATTERN),
        ("monetary", MONETARY_PATTERN),
    )
    for sentence in split_sentences(text):
        for category, pattern in checks:
            if len(facts) >= limit:
                return facts
            match = pattern.search(sentence)
            if match:
                facts.append(ExtractedFact(
                    text=match.group(0).strip(),
                    category=category,
                    source_sentence=sentence,
                ))
    return facts


def _quote_relevance(quote: str, tables: AnalysisTables) -> float:
    lower = quote.lower()
    relevance = 0.5
    relevance += sum(0.1 for term in tables.quote_business_terms if term in lower)
    if re.search(r"\d", quote):
        relevance += 0.1
    if 10 <= len(quote.split()) <= 30:
        relevance += 0.1
    return round(_clamp(relevance), 4)


def _attribution(text: str, start: int, end: int) -> str:
    after = _ATTRIBUTION_AFTER.search(text[end:end + 80])
    if after:
        return after.group(1)
    before = _ATTRIBUTION_BEFORE.search(text[max(0, start - 80):start])
    if before:
        return before.group(1)
    return ""


def extract_quotes(
    text: str, limit: int, tables: AnalysisTables = DEFAULT_TABLES,
) -> list[CitableQuote]:
    quotes = []
    for match in QUOTE_PATTERN.finditer(text):
        body = match.group(1).strip()
        quotes.append(CitableQuote(
            text=body,
            attribution=_attribution(text, match.start(), match.end()),
            relevance=_quote_relevance(body, tables),
        ))
    for match in STATEMENT_PATTERN.finditer(text):
        if len(quotes) >= limit:
            break
        quotes.append(CitableQuote(text=match.group(0).strip(), relevance=0.7))
    quotes.sort(key=lambda q: q.relevance, reverse=True)
    return quotes[:limit]


def extract_metrics(text: str, limit: int) -> list[BusinessMetric]:
    metrics = []
    for name, pattern in METRIC_PATTERNS:
        for match in pattern.finditer(text):
            context = text[max(0, match.start() - 40):match.end() + 40].strip()
            metrics.append(BusinessMetric(
                metric=name, value=match.group(1).strip(), context=context,
            ))
    return metrics[:limit]


def extract_local_terms(text: str, tables: AnalysisTables = DEFAULT_TABLES) -> list[LocalTerm]:
    terms = []
    for term, translation in tables.business_terms.items():
        count = len(re.findall(rf"\b{re.escape(term)}\b", text, re.I))
        if count:
            terms.append(LocalTerm(term=term, translation=translation, frequency=count))
    terms.sort(key=lambda t: t.frequency, reverse=True)
    return terms


def score_sentiment(text: str, tables: AnalysisTables = DEFAULT_TABLES) -> float:
    lower = text.lower()
    score = 0.0
    for word in tables.positive_words:
        score += len(re.findall(rf"\b{re.escape(word)}", lower)) * 0.1
    for word in tables.negative_words:
        score -= len(re.findall(rf"\b{re.escape(word)}", lower)) * 0.1
    return round(_clamp(score, -1.0, 1.0), 4)


def count_syllables(word: str) -> int:
    count = 0
    previous_vowel = False
    for char in word.lower():
        is_vowel = char in VOWELS
        if is_vowel and not previous_vowel:
            count += 1
        previous_vowel = is_vowel
    return max(count, 1)


def score_readability(text: str) -> float:
    """Flesch reading ease (0-100) with Norwegian vowels."""
    sentences = [s for s in re.split(r"[.!?]+", text) if s.strip()]
    words = text.split()
    if not sentences or not words:
        return 0.0
    syllables = sum(count_syllables(w) for w in words)
    score = 206.835 - 1.015 * (len(words) / len(sentences)) - 84.6 * (syllables / len(words))
    return round(_clamp(score, 0.0, 100.0), 2)


def detect_warnings(
    text: str,
    relevance: float,
    quality: float,
    min_relevance: float,
    min_quality: float,
    today: date | None = None,
    tables: AnalysisTables = DEFAULT_TABLES,
) -> list[AnalysisWarning]:
    warnings = []
    if relevance < min_relevance:
        warnings.append(AnalysisWarning(
            "relevance", "medium", "Content may not be highly relevant to the topic",
        ))
    if quality < min_quality:
        warnings.append(AnalysisWarning(
            "quality", "medium", "Content quality score is below threshold",
        ))

    current_year = (today or date.today()).year
    if any(int(y) < current_year - 2 for y in _YEAR_RE.findall(text)):
        warnings.append(AnalysisWarning(
            "outdated", "low", "Content references dates more than 2 years old",
        ))

    lower = text.lower()
    if len(text) < 200 or any(m in lower for m in tables.paywall_markers):
        warnings.append(AnalysisWarning(
            "paywall", "high", "Content may be behind a paywall or truncated",
        ))
    if any(m in lower for m in tables.translation_markers):
        warnings.append(AnalysisWarning(
            "translation", "low", "Content appears to be machine translated",
        ))
    return warnings


def _dedupe(items: list, key) -> list:
    seen = set()
    out = []
    for item in items:
        k = key(item)
        if k in seen:
            continue
        seen.add(k)
        out.append(item)
    return out


def merge_analyses(
    analyses: list[ContentAnalysis], weights: list[float] | None = None,
) -> ContentAnalysis:
    """Average the scores and concatenate deduplicated extractions.

    An empty input merges to an all-zero analysis.
    """
    if not analyses:
        return ContentAnalysis()
    if weights is None or len(weights) != len(analyses) or not sum(weights):
        weights = [1.0] * len(analyses)
    total = sum(weights)

    def avg(attr: str) -> float:
        return round(sum(getattr(a, attr) * w for a, w in zip(analyses, weights)) / total, 4)

    terms: dict[str, LocalTerm] = {}
    for a in analyses:
        for t in a.local_terms:
            if t.term in terms:
                terms[t.term].frequency += t.frequency
            else:
                terms[t.term] = LocalTerm(t.term, t.translation, t.frequency)

    insights = _dedupe(
        [i for a in analyses for i in a.insights], lambda i: i.text.lower()[:50],
    )
    insights.sort(key=lambda i: i.confidence * i.relevance, reverse=True)
    quotes = _dedupe([q for a in analyses for q in a.quotes], lambda q: q.text.lower()[:30])
    quotes.sort(key=lambda q: q.relevance, reverse=True)

    return ContentAnalysis(
        relevance_score=avg("relevance_score"),
        quality_score=avg("quality_score"),
        cultural_score=avg("cultural_score"),
        factual_density=avg("factual_density"),
        sentiment=avg("sentiment"),
        readability=avg("readability"),
        insights=insights,
        facts=_dedupe([f for a in analyses for f in a.facts], lambda f: f.text.lower()[:50]),
        quotes=quotes,
        metrics=_dedupe(
            [m for a in analyses for m in a.metrics], lambda m: (m.metric, m.value),
        ),
        local_terms=sorted(terms.values(), key=lambda t: t.frequency, reverse=True),
        warnings=_dedupe(
            [w for a in analyses for w in a.warnings], lambda w: (w.type, w.message),
        ),
    )


class ContentAnalyzer:
    """Applies the configured thresholds and caps to the scoring functions."""

    def __init__(
        self,
        config: dict,
        tables: AnalysisTables = DEFAULT_TABLES,
        today: date | None = None,
    ):
        self.settings = get_analysis_config(config)
        self.tables = tables
        self.today = today

    def analyze(
        self, text: str, source_trust: float, topic: str, language: str = LOCAL_LANGUAGE,
    ) -> ContentAnalysis:
        s = self.settings
        text = clean_content(text)
        relevance = score_relevance(text, topic, self.tables)
        quality = score_quality(text, source_trust)
        local = language == LOCAL_LANGUAGE
        facts = extract_facts(text, s["max_facts"])
        words = len(text.split())

        return ContentAnalysis(
            relevance_score=relevance,
            quality_score=quality,
            cultural_score=score_cultural_fit(text, self.tables) if local else 0.0,
            factual_density=round(len(facts) / words * 100, 4) if words else 0.0,
            sentiment=score_sentiment(text, self.tables),
            readability=score_readability(text),
            insights=extract_insights(text, topic, s["max_insights"], self.tables),
            facts=facts,
            quotes=extract_quotes(text, s["max_quotes"], self.tables),
            metrics=extract_metrics(text, s["max_metrics"]),
            local_terms=(
                extract_local_terms(text, self.tables)
                if local and s["extract_local_terms"] else []
            ),
            warnings=detect_warnings(
                text, relevance, quality,
                s["min_relevance_score"], s["min_quality_score"],
                today=self.today, tables=self.tables,
            ),
        )

    def merge(
        self, analyses: list[ContentAnalysis], weights: list[float] | None = None,
    ) -> ContentAnalysis:
        merged = merge_analyses(analyses, weights)
        s = self.settings
        merged.insights = merged.insights[: s["max_insights"]]
        merged.facts = merged.facts[: s["max_facts"]]
        merged.quotes = merged.quotes[: s["max_quotes"]]
        merged.metrics = merged.metrics[: s["max_metrics"]]
        return merged

    def analyze_items(self, items: list[ResearchItem], topic: str) -> ContentAnalysis:
        """Analyze each research item and merge, weighting by source credibility."""
        analyses = []
        weights = []
        for item in items:
            text = f"{item.title}. {item.content}" if item.title else item.content
            language = item.metadata.get("language", LOCAL_LANGUAGE)
            analyses.append(self.analyze(text, item.credibility * 10, topic, language))
            weights.append(max(item.credibility, 0.1))
        merged = self.merge(analyses, weights)
        logger.info(
            "Analyzed %d items: relevance %.2f, quality %.2f, %d insights",
            len(items), merged.relevance_score, merged.quality_score, len(merged.insights),
        )
        return merged
