"""Keyword and pattern tables used by the content analyzer.

Kept apart from the scoring code so the heuristics can be tested against
small hand-built tables.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

LOCAL_BUSINESS_TERMS = {
    "aksjeselskap": "limited company",
    "virksomhet": "business",
    "næringsliv": "business sector",
    "bedrift": "company",
    "konsern": "group",
    "styre": "board",
    "daglig leder": "CEO",
    "regnskap": "accounts",
    "omsetning": "revenue",
    "overskudd": "profit",
    "underskudd": "deficit",
    "egenkapital": "equity",
    "gjeld": "debt",
    "investering": "investment",
    "marked": "market",
    "konkurranse": "competition",
    "strategi": "strategy",
    "vekst": "growth",
    "innovasjon": "innovation",
    "bærekraft": "sustainability",
    "digitalisering": "digitalization",
    "eksport": "export",
    "import": "import",
    "moms": "VAT",
    "skatt": "tax",
    "tilsyn": "supervision",
    "forskrift": "regulation",
    "lov": "law",
    "konsesjon": "license",
    "børs": "stock exchange",
    "obligasjon": "bond",
    "utbytte": "dividend",
    "fusjon": "merger",
    "oppkjøp": "acquisition",
    "konkurs": "bankruptcy",
    "restrukturering": "restructuring",
}

COMPANY_PATTERNS = (
    re.compile(r"\b[A-ZÆØÅ][a-zæøå]+\s+(?:AS|ASA)\b"),
    re.compile(r"\b(?:Norsk|Norske|Norge|Norwegian)\s+[A-ZÆØÅ][a-zæøå]+"),
    re.compile(r"\b(?:Stat|Kommune)[a-zæøå]*\b"),
    re.compile(r"\b(?:DNB|Telenor|Equinor|Yara|Orkla|Schibsted|Aker|Statkraft)\b"),
)

LOCAL_PLACES = ("Oslo", "Bergen", "Trondheim", "Stavanger", "Norge", "Norway")
LOCAL_CURRENCY = re.compile(r"NOK|kr\.|kroner")

RELATED_TERMS = {
    "technology": ("digital", "software", "IT", "innovation", "tech"),
    "teknologi": ("digital", "programvare", "IT", "innovasjon", "tech"),
    "business": ("company", "market", "economy", "trade", "commerce"),
    "næringsliv": ("bedrift", "marked", "økonomi", "handel"),
    "finance": ("banking", "investment", "money", "capital", "fund"),
    "finans": ("bank", "investering", "kapital", "fond"),
    "energy": ("oil", "gas", "renewable", "power", "electricity"),
    "energi": ("olje", "gass", "fornybar", "kraft", "strøm"),
    "startup": ("entrepreneur", "venture", "innovation", "founder"),
    "gründer": ("oppstart", "investor", "innovasjon", "selskap"),
}

INSIGHT_INDICATORS = (
    "shows that", "indicates", "suggests", "reveals", "demonstrates",
    "according to", "research", "study", "survey", "analysis",
    "trend", "growth", "decline", "increase", "decrease",
    "viser at", "indikerer", "tyder på", "ifølge", "undersøkelse",
)

# Checked in order; first hit wins
INSIGHT_CATEGORIES = (
    ("market_trend", ("market", "marked")),
    ("business_opportunity", ("opportunity", "mulighet")),
    ("competitive_insight", ("competitor", "konkurrent")),
    ("regulatory_update", ("regulation", "forskrift", "regulering")),
    ("industry_development", ("industry", "bransje")),
    ("cultural_context", ("culture", "kultur")),
    ("statistical_finding", ()),
    ("expert_opinion", ("expert", "ekspert")),
)
STATISTIC_MARKER = re.compile(r"\d+\s*%|\d+\s*prosent")
DEFAULT_INSIGHT_CATEGORY = "industry_development"

STATISTIC_PATTERN = re.compile(
    r"\d+[.,]?\d*\s*(?:%|prosent|percent|million|billion|millioner|milliarder)", re.I,
)
DATE_PATTERN = re.compile(r"\b(?:19|20)\d{2}\b|\b\d{1,2}[/.\-]\d{1,2}[/.\-]\d{2,4}\b")
COMPANY_SUFFIX_PATTERN = re.compile(r"\b[A-ZÆØÅ][a-zæøå]+\s+(?:AS|ASA|Ltd|Inc|Group|Gruppen)\b")
MONETARY_PATTERN = re.compile(
    r"[$€£¥]\s*\d[\d,.]*|\bkr\s*\d[\d,.]*|\d[\d,.]*\s*(?:USD|EUR|GBP|NOK|kroner|dollar|euro)\b",
    re.I,
)

QUOTE_PATTERN = re.compile(r"[\"“”«]([^\"“”«»]{20,200})[\"“”»]")
ATTRIBUTION_VERBS = ("sa", "sier", "uttalte", "said", "says", "stated")
STATEMENT_PATTERN = re.compile(r"(?:According to|Ifølge|Based on|Basert på)[^.!?]*[.!?]", re.I)
QUOTE_BUSINESS_TERMS = (
    "market", "growth", "revenue", "profit", "strategy", "innovation",
    "marked", "vekst", "omsetning", "overskudd", "strategi", "innovasjon",
)

METRIC_PATTERNS = (
    ("revenue", re.compile(
        r"revenue\s+of\s+([\d,.]+\s*(?:million|billion|M|B)?\s*(?:USD|EUR|NOK)?)", re.I)),
    ("revenue", re.compile(
        r"omsetning\s+på\s+([\d,.]+\s*(?:millioner|milliarder)?\s*(?:kroner|NOK)?)", re.I)),
    ("growth", re.compile(r"growth\s+of\s+([\d,.]+\s*%)", re.I)),
    ("growth", re.compile(r"increased?\s+by\s+([\d,.]+\s*%)", re.I)),
    ("growth", re.compile(r"vekst\s+på\s+([\d,.]+\s*%)", re.I)),
    ("growth", re.compile(r"økt\s+med\s+([\d,.]+\s*%)", re.I)),
    ("market_share", re.compile(r"market\s+share\s+of\s+([\d,.]+\s*%)", re.I)),
    ("market_share", re.compile(r"markedsandel\s+på\s+([\d,.]+\s*%)", re.I)),
)

POSITIVE_WORDS = (
    "growth", "increase", "improve", "success", "positive", "strong",
    "vekst", "økning", "forbedring", "suksess", "positiv", "sterk",
)
NEGATIVE_WORDS = (
    "decline", "decrease", "loss", "challenge", "negative", "weak",
    "nedgang", "reduksjon", "tap", "utfordring", "negativ", "svak",
)

PAYWALL_MARKERS = ("subscribe", "abonner", "logg inn for å lese", "kun for abonnenter")
TRANSLATION_MARKERS = ("[translation]", "[oversettelse]", "[machine translated]")

VOWELS = "aeiouyæøå"


@dataclass(frozen=True)
class AnalysisTables:
    business_terms: dict[str, str] = field(default_factory=lambda: dict(LOCAL_BUSINESS_TERMS))
    company_patterns: tuple = COMPANY_PATTERNS
    places: tuple[str, ...] = LOCAL_PLACES
    currency: re.Pattern = LOCAL_CURRENCY
    related_terms: dict[str, tuple[str, ...]] = field(
        default_factory=lambda: dict(RELATED_TERMS)
    )
    insight_indicators: tuple[str, ...] = INSIGHT_INDICATORS
    insight_categories: tuple = INSIGHT_CATEGORIES
    positive_words: tuple[str, ...] = POSITIVE_WORDS
    negative_words: tuple[str, ...] = NEGATIVE_WORDS
    paywall_markers: tuple[str, ...] = PAYWALL_MARKERS
    translation_markers: tuple[str, ...] = TRANSLATION_MARKERS
    quote_business_terms: tuple[str, ...] = QUOTE_BUSINESS_TERMS


DEFAULT_TABLES = AnalysisTables()
