"""Marker tables for quality scoring, keyed by language ("no" or "en")."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

# Redundant or awkward constructions, -5 per hit
GRAMMAR_ERRORS = {
    "no": (
        re.compile(r"\bhar fått gjort\b", re.I),
        re.compile(r"\bkun bare\b", re.I),
        re.compile(r"\bbegge to\b", re.I),
        re.compile(r"\bville ha\b", re.I),
    ),
    "en": (
        re.compile(r"\bcould of\b", re.I),
        re.compile(r"\bfree gift\b", re.I),
        re.compile(r"\bend result\b", re.I),
        re.compile(r"\bpast history\b", re.I),
    ),
}

# Spelled-out phrases with a standard abbreviation, -5 per distinct phrase
LONGHAND = {
    "no": {
        "og så videre": "osv.",
        "for eksempel": "f.eks.",
        "det vil si": "dvs.",
        "blant annet": "bl.a.",
    },
    "en": {
        "and so on": "etc.",
        "that is to say": "i.e.",
        "in order to": "to",
    },
}

# Too common to count as repetition
COMMON_WORDS = {
    "no": ("være", "har", "kan", "skal", "vil", "med", "for", "som", "det", "ikke"),
    "en": ("have", "that", "with", "this", "will", "from", "they", "their", "your"),
}

CULTURAL_MARKERS = {
    "no": ("norsk", "norge", "nordisk", "skandinavisk", "bærekraft", "dugnad", "koselig", "friluftsliv"),
    "en": ("norway", "norwegian", "nordic", "scandinavian", "sustainab", "community", "local", "trust"),
}

INCLUSIVE_WORDS = {
    "no": ("vi", "oss", "sammen", "felles", "samarbeid"),
    "en": ("we", "us", "together", "shared", "collaboration"),
}
INDIVIDUAL_WORDS = {
    "no": ("jeg", "min", "mitt"),
    "en": ("i", "my", "mine"),
}

SELF_PROMOTION = {
    "no": ("markedsledende", "best i", "nummer én", "overlegen", "uslåelig"),
    "en": ("market-leading", "best in", "number one", "superior", "unbeatable"),
}
COMPARATIVE = {
    "no": re.compile(r"bedre enn alle|bedre enn konkurrent", re.I),
    "en": re.compile(r"better than (?:all|any|competitors|the competition)", re.I),
}
ABSOLUTES = {
    "no": re.compile(r"\b(?:alltid|aldri|garantert)\b|100\s?%", re.I),
    "en": re.compile(r"\b(?:always|never|guaranteed)\b|100\s?%", re.I),
}

ANGLICISMS = {
    "meeting": "møte",
    "deadline": "frist",
    "feedback": "tilbakemelding",
    "workshop": "arbeidsøkt",
    "brainstorming": "idédugnad",
}
JARGON = {
    "synergy": "cooperation",
    "leverage": "use",
    "paradigm shift": "change",
    "low-hanging fruit": "quick wins",
    "circle back": "follow up",
}

UNPROFESSIONAL = ("lol", "haha", "wtf", "omg")
PROFESSIONAL = {
    "no": ("følgelig", "videre", "således", "henhold"),
    "en": ("therefore", "furthermore", "consequently", "accordingly"),
}

REFERENCE_WORDS = {
    "no": re.compile(r"\b(?:ifølge|viser|indikerer)\b", re.I),
    "en": re.compile(r"\b(?:according to|shows|indicates)\b", re.I),
}
RESEARCH_WORDS = {
    "no": re.compile(r"forskning|studie|undersøkelse", re.I),
    "en": re.compile(r"research|study|survey", re.I),
}
VAGUE_CLAIMS = {
    "no": re.compile(r"mange mener|noen sier|\bkanskje\b", re.I),
    "en": re.compile(r"many believe|some say|\bperhaps\b", re.I),
}

PERSUASION_GROUPS = {
    "no": (
        re.compile(r"fordel|nytte|verdi|gevinst", re.I),
        re.compile(r"løsning|forbedring|effektiv", re.I),
        re.compile(r"resultat|suksess|oppnå", re.I),
        re.compile(r"kan du|vil du|la oss", re.I),
    ),
    "en": (
        re.compile(r"benefit|value|advantage|gain", re.I),
        re.compile(r"solution|improve|efficien", re.I),
        re.compile(r"result|success|achieve", re.I),
        re.compile(r"\b(?:you can|would you|let's|let us)\b", re.I),
    ),
}

ACTION_WORDS = {
    "no": ("bestill", "kjøp", "prøv", "start", "registrer", "last ned", "kontakt", "les mer", "finn ut"),
    "en": ("order", "buy", "try", "start", "register", "download", "contact", "read more", "find out"),
}
NEXT_STEPS = {
    "no": re.compile(r"neste steg|gjør følgende|slik gjør du", re.I),
    "en": re.compile(r"next step|do the following|here's how|here is how", re.I),
}

DIRECT_ADDRESS = {
    "no": re.compile(r"\b(?:du|deg|din|ditt)\b", re.I),
    "en": re.compile(r"\b(?:you|your)\b", re.I),
}
HOOK_PHRASES = {
    "no": re.compile(r"visste du|forestill deg|\btenk\b", re.I),
    "en": re.compile(r"did you know|imagine|picture this", re.I),
}

EMOTIONAL_WORDS = {
    "no": ("glede", "bekymring", "håp", "frykt", "stolt", "trygg", "utfordring", "mulighet", "drøm", "visjon"),
    "en": ("joy", "worry", "hope", "fear", "proud", "safe", "challenge", "opportunity", "dream", "vision"),
}
STORYTELLING = {
    "no": re.compile(r"en gang|forestill deg|la meg fortelle", re.I),
    "en": re.compile(r"once upon|imagine|let me tell", re.I),
}

CTA_PHRASES = {
    "no": ("kontakt oss", "les mer", "bestill", "registrer", "last ned", "finn ut", "kom i gang", "prøv gratis"),
    "en": ("contact us", "read more", "order", "sign up", "download", "find out", "get started", "try it free"),
}
URGENCY = {
    "no": re.compile(r"\b(?:nå|i dag|begrenset|tilbud)\b", re.I),
    "en": re.compile(r"\b(?:now|today|limited|offer)\b", re.I),
}
CTA_CLARITY = {
    "no": re.compile(r"klikk her|trykk på", re.I),
    "en": re.compile(r"click here|tap on", re.I),
}

SURPRISE = {
    "no": re.compile(r"visste du|utrolig|fantastisk", re.I),
    "en": re.compile(r"did you know|incredible|amazing", re.I),
}
PRACTICAL_VALUE = {
    "no": re.compile(r"\b(?:tips|råd|guide|slik)\b", re.I),
    "en": re.compile(r"\b(?:tips|advice|guide|how to)\b", re.I),
}

EXPECTED_WORDS = {
    "article": 500,
    "blog": 500,
    "email": 200,
    "social": 100,
    "landing": 300,
    "ad": 50,
}
DEFAULT_EXPECTED_WORDS = 300

OPTIMAL_SENTENCE_WORDS = 15
OPTIMAL_WORD_CHARS = 6

DIMENSION_WEIGHTS = {
    "linguistic": 0.25,
    "cultural": 0.25,
    "business": 0.20,
    "technical": 0.15,
    "engagement": 0.15,
}

SUGGESTIONS = {
    "Grammar problems detected": "Review the text for grammatical errors and redundant phrasing",
    "Missing consensus-building language": "Add inclusive language such as 'vi', 'sammen', 'felles'",
    "No clear call to action": "End with a clear invitation to act, e.g. 'Kontakt oss i dag'",
    "Self-promotional claims": "Replace boastful claims with measured, evidence-based statements",
    "Missing credibility signals": "Support claims with figures, sources or research",
    "Content seems incomplete": "Expand the text to cover the topic fully",
    "Readability can be improved": "Use shorter sentences and simpler words",
}
DEFAULT_SUGGESTION = "Consider improving this aspect"


@dataclass(frozen=True)
class QualityMarkers:
    grammar_errors: dict = field(default_factory=lambda: dict(GRAMMAR_ERRORS))
    longhand: dict = field(default_factory=lambda: dict(LONGHAND))
    common_words: dict = field(default_factory=lambda: dict(COMMON_WORDS))
    cultural_markers: dict = field(default_factory=lambda: dict(CULTURAL_MARKERS))
    inclusive_words: dict = field(default_factory=lambda: dict(INCLUSIVE_WORDS))
    individual_words: dict = field(default_factory=lambda: dict(INDIVIDUAL_WORDS))
    self_promotion: dict = field(default_factory=lambda: dict(SELF_PROMOTION))
    comparative: dict = field(default_factory=lambda: dict(COMPARATIVE))
    absolutes: dict = field(default_factory=lambda: dict(ABSOLUTES))
    anglicisms: dict = field(default_factory=lambda: dict(ANGLICISMS))
    jargon: dict = field(default_factory=lambda: dict(JARGON))
    unprofessional: tuple = UNPROFESSIONAL
    professional: dict = field(default_factory=lambda: dict(PROFESSIONAL))
    reference_words: dict = field(default_factory=lambda: dict(REFERENCE_WORDS))
    research_words: dict = field(default_factory=lambda: dict(RESEARCH_WORDS))
    vague_claims: dict = field(default_factory=lambda: dict(VAGUE_CLAIMS))
    persuasion_groups: dict = field(default_factory=lambda: dict(PERSUASION_GROUPS))
    action_words: dict = field(default_factory=lambda: dict(ACTION_WORDS))
    next_steps: dict = field(default_factory=lambda: dict(NEXT_STEPS))
    direct_address: dict = field(default_factory=lambda: dict(DIRECT_ADDRESS))
    hook_phrases: dict = field(default_factory=lambda: dict(HOOK_PHRASES))
    emotional_words: dict = field(default_factory=lambda: dict(EMOTIONAL_WORDS))
    storytelling: dict = field(default_factory=lambda: dict(STORYTELLING))
    cta_phrases: dict = field(default_factory=lambda: dict(CTA_PHRASES))
    urgency: dict = field(default_factory=lambda: dict(URGENCY))
    cta_clarity: dict = field(default_factory=lambda: dict(CTA_CLARITY))
    surprise: dict = field(default_factory=lambda: dict(SURPRISE))
    practical_value: dict = field(default_factory=lambda: dict(PRACTICAL_VALUE))
    expected_words: dict = field(default_factory=lambda: dict(EXPECTED_WORDS))
    suggestions: dict = field(default_factory=lambda: dict(SUGGESTIONS))


DEFAULT_MARKERS = QualityMarkers()
