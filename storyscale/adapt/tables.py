"""Replacement and indicator tables for cultural adaptation.

Maps are phrase -> replacement. Matching is case-insensitive on whole words and
longer phrases are applied first, so "garantert suksess" wins over "garantert".
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

SELF_PROMOTION = {
    # Norwegian
    "vi er best i": "vi fokuserer på",
    "vi er best på": "vi fokuserer på",
    "markedsledende": "erfaren",
    "nummer én": "blant de fremste",
    "nummer en": "blant de fremste",
    "overlegen": "solid",
    "uslåelig": "konkurransedyktig",
    "revolusjonerende": "nyskapende",
    "banebrytende": "innovativ",
    "eksepsjonell": "god",
    "enestående": "særegen",
    "i verdensklasse": "av høy kvalitet",
    "garantert suksess": "gode muligheter for suksess",
    # English
    "we are the best at": "we focus on",
    "we are the best": "we work hard to do well",
    "market-leading": "experienced",
    "market leader": "established provider",
    "number one": "among the leading",
    "world-class": "high-quality",
    "unbeatable": "competitive",
    "unrivalled": "well-regarded",
    "unrivaled": "well-regarded",
    "second to none": "well-regarded",
    "revolutionary": "innovative",
    "groundbreaking": "innovative",
    "guaranteed success": "good prospects of success",
}

SUPERLATIVES = {
    "alltid": "ofte",
    "aldri": "sjelden",
    "perfekt": "svært god",
    "feilfri": "pålitelig",
    "garantert": "sannsynlig",
    "always": "often",
    "never": "rarely",
    "perfect": "very good",
    "flawless": "reliable",
    "guaranteed": "likely",
}

LOANWORDS = {
    "meeting": "møte",
    "deadline": "frist",
    "feedback": "tilbakemelding",
    "workshop": "arbeidsøkt",
    "brainstorming": "idédugnad",
    "benchmark": "referansepunkt",
    "best practice": "beste praksis",
    "stakeholder": "interessent",
    "stakeholders": "interessenter",
    "compliance": "etterlevelse",
    "performance": "ytelse",
    "scalable": "skalerbar",
    "disruptive": "omveltende",
    "agile": "smidig",
    "lean": "slank",
    "target audience": "målgruppe",
    "value proposition": "verdiforslag",
    "return on investment": "avkastning på investering",
    "key performance indicator": "nøkkelindikator",
}

FORMAL_SWAPS = {
    "hei": "god dag",
    "fint": "utmerket",
    "kult": "interessant",
    "bra": "godt",
}

CASUAL_SWAPS = {
    "god dag": "hei",
    "utmerket": "fint",
    "fremragende": "kjempebra",
    "herved": "nå",
}

EXECUTIVE_SWAPS = {
    "no": {
        "for eksempel, ": "",
        "vi bør vurdere": "vi implementerer",
        "kan være": "er",
    },
    "en": {
        "for example, ": "",
        "we should consider": "we will implement",
        "might be": "is",
    },
}

EXECUTIVE_AUDIENCE = ("leder", "direktør", "ledelse", "executive", "ceo", "c-level", "board")
TECHNICAL_AUDIENCE = ("teknisk", "utvikler", "ingeniør", "technical", "developer", "engineer")

TECHNICAL_QUALIFIERS = {
    "no": {"system": "teknisk system", "løsning": "teknisk løsning"},
    "en": {"system": "technical system", "solution": "technical solution"},
}

PRONOUNS = {
    "jeg": "vi",
    "meg": "oss",
    "min": "vår",
    "mitt": "vårt",
    "mine": "våre",
}

CONSENSUS_MARKERS = {
    "no": (
        "sammen kan vi", "i fellesskap", "gjennom samarbeid", "med felles innsats",
        "vi inviterer til dialog", "la oss utforske", "vi ser frem til å høre",
        "deres innspill er verdifulle", "sammen",
    ),
    "en": (
        "together", "in partnership", "through collaboration", "let us explore",
        "let's explore", "we look forward to hearing", "your input",
    ),
}

CONSENSUS_SENTENCE = {
    "no": "Sammen kan vi finne gode løsninger",
    "en": "Together we can find good solutions",
}

INDUSTRY_KEYS = {
    "technology": ("technology", "teknologi", "tech", "it", "software", "programvare"),
    "finance": ("finance", "finans", "bank", "fintech", "investment"),
    "consulting": ("consulting", "rådgivning", "konsulent"),
}

INDUSTRY_TERMS = {
    "no": {
        "technology": {
            "cutting-edge": "moderne",
            "revolutionary": "nyskapende",
            "game-changing": "betydningsfull",
        },
        "finance": {
            "aggressive growth": "stabil vekst",
            "aggressiv vekst": "stabil vekst",
            "market domination": "sterk markedsposisjon",
            "markedsdominans": "sterk markedsposisjon",
            "unbeatable returns": "gode avkastninger",
        },
        "consulting": {
            "thought leader": "kunnskapsrik rådgiver",
            "industry expert": "erfaren fagperson",
            "transformational": "utviklende",
        },
    },
    "en": {
        "technology": {
            "cutting-edge": "modern",
            "game-changing": "significant",
        },
        "finance": {
            "aggressive growth": "steady growth",
            "market domination": "a strong market position",
            "unbeatable returns": "solid returns",
        },
        "consulting": {
            "thought leader": "knowledgeable advisor",
            "industry expert": "experienced professional",
            "transformational": "developmental",
        },
    },
}

SUSTAINABILITY_MARKERS = {"no": ("bærekraft",), "en": ("sustainab",)}
SUSTAINABILITY_CLAUSE = {
    "no": "Dette bidrar til bærekraftig utvikling.",
    "en": "This supports sustainable development.",
}
TRANSPARENCY_SWAP = {
    "no": ("våre tjenester", "våre transparente tjenester"),
    "en": ("our services", "our transparent services"),
}

CONTEXT_OPENER = {
    "no": "I dagens norske næringsliv, ",
    "en": "In today's business landscape, ",
}

VIOLATION_PHRASES = (
    "markedsledende", "best i", "nummer én", "overlegen", "uslåelig", "i verdensklasse",
    "market-leading", "best in", "number one", "unbeatable", "world-class",
    "we are the best",
)
COMPARATIVE_CLAIMS = re.compile(
    r"bedre enn (?:alle|konkurrent\w*)|better than (?:all|any|the competition|competitors)",
    re.I,
)
ABSOLUTE_CLAIMS = re.compile(
    r"\b(?:alltid|aldri|garantert|always|never|guaranteed)\b|\b100\s?%", re.I,
)

INCLUSIVE_INDICATORS = (
    "sammen", "fellesskap", "samarbeid", "vi", "oss", "felles",
    "together", "we", "us", "collaboration", "partnership",
)
FORMAL_INDICATORS = ("herved", "således", "følgelig", "hereby", "thus", "henceforth")
CASUAL_INDICATORS = ("kjempebra", "kult", "gøy", "awesome", "cool", "super")
TONE_INDICATOR_LIMIT = 2


@dataclass(frozen=True)
class AdaptationTables:
    self_promotion: dict = field(default_factory=lambda: dict(SELF_PROMOTION))
    superlatives: dict = field(default_factory=lambda: dict(SUPERLATIVES))
    loanwords: dict = field(default_factory=lambda: dict(LOANWORDS))
    formal_swaps: dict = field(default_factory=lambda: dict(FORMAL_SWAPS))
    casual_swaps: dict = field(default_factory=lambda: dict(CASUAL_SWAPS))
    executive_swaps: dict = field(default_factory=lambda: dict(EXECUTIVE_SWAPS))
    technical_qualifiers: dict = field(default_factory=lambda: dict(TECHNICAL_QUALIFIERS))
    pronouns: dict = field(default_factory=lambda: dict(PRONOUNS))
    consensus_markers: dict = field(default_factory=lambda: dict(CONSENSUS_MARKERS))
    consensus_sentence: dict = field(default_factory=lambda: dict(CONSENSUS_SENTENCE))
    industry_keys: dict = field(default_factory=lambda: dict(INDUSTRY_KEYS))
    industry_terms: dict = field(default_factory=lambda: dict(INDUSTRY_TERMS))
    violation_phrases: tuple = VIOLATION_PHRASES
    inclusive_indicators: tuple = INCLUSIVE_INDICATORS
    formal_indicators: tuple = FORMAL_INDICATORS
    casual_indicators: tuple = CASUAL_INDICATORS


DEFAULT_TABLES = AdaptationTables()
