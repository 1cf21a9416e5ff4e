"""Prompt templates and size estimates for content generation."""

from __future__ import annotations

import math

from storyscale.config import LOCAL_LANGUAGE
from storyscale.models import ContentAnalysis, ContentRequest, Improvement, ResearchResult

SYSTEM_BASE = {
    "no": """Du er en ekspert på norsk forretningskommunikasjon med dyp forståelse for norsk kultur og forretningstradisjon.

KULTURELLE PRINSIPPER:
- Følg Janteloven: vær ydmyk, faktabasert og balanser selvtillit med beskjedenhet
- Bruk konsensusbyggende språk som inkluderer alle parter
- Vektlegg samarbeid og kollektive prestasjoner fremfor individuelle
- Unngå overdrivelser og udokumenterte påstander

SPRÅKSTIL:
- Skriv klart og korrekt norsk bokmål
- Bruk aktiv stemme og konkrete eksempler
- Hold setninger korte og presise
- Unngå unødvendige anglisismer""",
    "en": """You are an expert business writer for Nordic and international audiences.

PRINCIPLES:
- Be modest and evidence-based; avoid boastful or absolute claims
- Use inclusive, collaborative language
- Prefer concrete facts, figures and examples
- Keep sentences short and use the active voice""",
}

STRICTNESS_SUFFIX = {
    "no": {
        "strict": "KULTURELL STRENGHET: Følg Janteloven og norske normer strengt. Ingen unntak.",
        "relaxed": "KULTURELL FLEKSIBILITET: Balanser norske normer med internasjonale standarder der passende.",
    },
    "en": {
        "strict": "CULTURAL STRICTNESS: Follow Nordic modesty norms strictly. No exceptions.",
        "relaxed": "CULTURAL FLEXIBILITY: Balance Nordic norms with international conventions where appropriate.",
    },
}

FAMILY_SUFFIX = {
    "openai": "Generate natural, fluent text with varied sentence structure.",
    "anthropic": "Focus on depth and nuance in cultural understanding. Show empathy and insight.",
}

INDUSTRY_CONTEXT = {
    "technology": "Tilpass til norsk teknologisektor med fokus på bærekraft og etisk teknologi.",
    "finance": "Følg norske finansreguleringer og Finanstilsynets retningslinjer.",
    "healthcare": "Respekter norsk helselovgivning og pasientrettigheter.",
    "retail": "Tilpass til norske forbrukervaner og handelstradisjon.",
    "energy": "Inkluder perspektiver på grønn omstilling og norsk energipolitikk.",
}

CONTENT_LABELS = {
    "no": {
        "article": "en fagartikkel",
        "blog": "et blogginnlegg",
        "social": "et innlegg for sosiale medier",
        "email": "en e-post",
        "landing": "tekst til en landingsside",
        "ad": "en annonsetekst",
    },
    "en": {
        "article": "an article",
        "blog": "a blog post",
        "social": "a social media post",
        "email": "an email",
        "landing": "landing page copy",
        "ad": "an ad",
    },
}

GENERATE = {
    "no": """Skriv {label} om {topic} for {audience}.

KONTEKST:
- Bedrift: {company}
- Bransje: {industry}
- Tone: {tone}
- Nøkkelord: {keywords}

FORSKNINGSDATA:
{research}

KULTURELLE HENSYN:
- Unngå selvskryt, fokuser på verdi for leseren
- Bruk "vi" og "oss" fremfor "jeg" og "meg"
- Avslutt med en tydelig handlingsoppfordring

LENGDE: omtrent {words} ord
Svar kun med selve teksten.""",
    "en": """Write {label} about {topic} for {audience}.

CONTEXT:
- Company: {company}
- Industry: {industry}
- Tone: {tone}
- Keywords: {keywords}

RESEARCH:
{research}

GUIDELINES:
- Avoid self-promotion, focus on value for the reader
- Use "we" and "us" rather than "I" and "me"
- End with a clear call to action

LENGTH: about {words} words
Respond with the text only.""",
}

NO_RESEARCH = {
    "no": "Ingen spesifikk forskningsdata tilgjengelig.",
    "en": "No specific research available.",
}

IMPROVE = {
    "no": """Forbedre teksten under. Behold budskapet og lengden, men rett opp disse svakhetene:
{weaknesses}

TEKST:
{text}

Svar kun med den forbedrede teksten.""",
    "en": """Improve the text below. Keep its message and length, but fix these weaknesses:
{weaknesses}

TEXT:
{text}

Respond with the improved text only.""",
}

# Target word counts per content type and length
TARGET_WORDS = {
    "article": {"short": 400, "medium": 750, "long": 1200},
    "blog": {"short": 400, "medium": 750, "long": 1200},
    "social": {"short": 50, "medium": 150, "long": 280},
    "email": {"short": 150, "medium": 250, "long": 400},
    "landing": {"short": 100, "medium": 200, "long": 350},
    "ad": {"short": 25, "medium": 50, "long": 90},
}

TOKENS_PER_WORD = 1.3
BASE_PROMPT_TOKENS = 700
TOKENS_PER_RESEARCH_ITEM = 150
MAX_RESEARCH_ITEMS = 5


def _lang(language: str) -> str:
    return "no" if language == LOCAL_LANGUAGE else "en"


def target_words(request: ContentRequest) -> int:
    if request.word_count:
        return request.word_count
    return TARGET_WORDS.get(request.content_type, TARGET_WORDS["article"]).get(request.length, 750)


def completion_tokens(request: ContentRequest) -> int:
    return math.ceil(target_words(request) * TOKENS_PER_WORD)


def prompt_tokens(research_items: int = 0) -> int:
    return BASE_PROMPT_TOKENS + TOKENS_PER_RESEARCH_ITEM * research_items


def format_research(
    research: ResearchResult | None,
    analysis: ContentAnalysis | None = None,
    language: str = LOCAL_LANGUAGE,
) -> str:
    lang = _lang(language)
    if not research or not research.items:
        return NO_RESEARCH[lang]

    sections = []
    for item in research.items[:MAX_RESEARCH_ITEMS]:
        snippet = " ".join(item.content.split()[:80])
        sections.append(f"SOURCE: {item.source_id} ({item.url})\n{item.title}\n{snippet}")

    if analysis is not None:
        if analysis.insights:
            sections.append("INSIGHTS:\n" + "\n".join(f"- {i.text}" for i in analysis.insights))
        if analysis.facts:
            sections.append("FACTS:\n" + "\n".join(f"- {f.text}" for f in analysis.facts[:5]))
        if analysis.local_terms:
            sections.append("TERMS: " + ", ".join(t.term for t in analysis.local_terms[:5]))
    return "\n\n---\n\n".join(sections)


def build_system_prompt(request: ContentRequest, family: str = "") -> str:
    lang = _lang(request.output_language)
    parts = [SYSTEM_BASE[lang]]
    suffix = STRICTNESS_SUFFIX[lang].get(request.cultural_strictness)
    if suffix:
        parts.append(suffix)
    if family in FAMILY_SUFFIX:
        parts.append(FAMILY_SUFFIX[family])
    return "\n\n".join(parts)


def build_user_prompt(
    request: ContentRequest,
    research: ResearchResult | None = None,
    analysis: ContentAnalysis | None = None,
) -> str:
    lang = _lang(request.output_language)
    ctx = request.cultural_context
    industry = ctx.industry if ctx else ""
    prompt = GENERATE[lang].format(
        label=CONTENT_LABELS[lang].get(request.content_type, request.content_type),
        topic=request.topic,
        audience=request.audience or "-",
        company=request.company or "-",
        industry=industry or "-",
        tone=request.tone,
        keywords=", ".join(request.keywords) or "-",
        research=format_research(research, analysis, request.output_language),
        words=target_words(request),
    )
    if lang == "no" and industry in INDUSTRY_CONTEXT:
        prompt += f"\n\nEKSTRA KONTEKST:\n{INDUSTRY_CONTEXT[industry]}"
    return prompt


def build_improvement_prompt(
    text: str, weaknesses: list[Improvement], language: str = LOCAL_LANGUAGE,
) -> str:
    lines = "\n".join(f"- [{w.priority}] {w.issue}: {w.suggestion}" for w in weaknesses)
    return IMPROVE[_lang(language)].format(weaknesses=lines or "-", text=text)
