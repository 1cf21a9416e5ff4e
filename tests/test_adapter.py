"""Tests for the cultural adaptation passes."""

from __future__ import annotations

import pytest

from storyscale.adapt import AdaptationContext, CulturalAdapter
from storyscale.adapt.adapter import (
    adapt_for_industry,
    adjust_tone,
    appropriateness_score,
    compliance_score,
    industry_for,
    inject_consensus,
    localize_terminology,
    moderate_self_promotion,
    optimize_structure,
    overall_cultural_score,
)
from storyscale.models import ContentRequest, CulturalContext

NO = AdaptationContext(language="no")
EN = AdaptationContext(language="en")


def test_boastful_phrase_is_moderated():
    result = CulturalAdapter().adapt("We are the best at cloud security.", EN)
    assert "we are the best at" not in result.adapted_text.lower()
    assert "we focus on cloud security" in result.adapted_text.lower()
    promo = [c for c in result.changes if c.type == "self-promotion"]
    assert promo[0].original == "We are the best at"
    assert promo[0].adapted == "We focus on"
    assert promo[0].impact == "high"
    assert result.original_text == "We are the best at cloud security."


def test_longest_phrase_wins():
    text, changes = moderate_self_promotion("Dette gir garantert suksess.", NO)
    assert text == "Dette gir gode muligheter for suksess."
    assert len(changes) == 1


def test_relaxed_strictness_keeps_superlatives():
    relaxed = AdaptationContext(language="no", strictness="relaxed")
    text, _ = moderate_self_promotion("Vi er best i bransjen og alltid tilgjengelige.", relaxed)
    assert text == "Vi fokuserer på bransjen og alltid tilgjengelige."
    text, _ = moderate_self_promotion("Vi er alltid tilgjengelige.", NO)
    assert text == "Vi er ofte tilgjengelige."


def test_loanwords_only_for_local_language():
    text, changes = localize_terminology("Vi hadde et meeting om deadline.", NO)
    assert text == "Vi hadde et møte om frist."
    assert [c.type for c in changes] == ["terminology", "terminology"]
    assert localize_terminology("We had a meeting.", EN) == ("We had a meeting.", [])


def test_whole_word_matching():
    text, changes = localize_terminology("Leaning tower.", NO)
    assert text == "Leaning tower."
    assert changes == []


def test_formal_tone():
    formal = AdaptationContext(language="no", formality="high")
    text, changes = adjust_tone("Hei, dette er bra.", formal)
    assert text == "God dag, dette er godt."
    assert all(c.type == "tone" for c in changes)


def test_executive_tone():
    ctx = AdaptationContext(language="no", audience="ledere i norske bedrifter")
    text, _ = adjust_tone("Dette kan være en god plan.", ctx)
    assert text == "Dette er en god strategisk plan."


def test_technical_qualifier_applied_once():
    ctx = AdaptationContext(language="no", audience="utviklere")
    text, changes = adjust_tone("Vi leverer et system.", ctx)
    assert text == "Vi leverer et teknisk system."
    assert len(changes) == 1
    assert adjust_tone("Et teknisk system.", ctx) == ("Et teknisk system.", [])


def test_consensus_sentence_inserted():
    text = "Jeg mener dette. Det er viktig. Vi leverer. Kunden vinner."
    adapted, changes = inject_consensus(text, NO)
    assert adapted == (
        "Vi mener dette. Sammen kan vi finne gode løsninger. "
        "Det er viktig. Vi leverer. Kunden vinner."
    )
    assert [c.type for c in changes] == ["consensus", "consensus"]


def test_consensus_skipped_when_present_or_short():
    text = "Sammen bygger vi. Det er viktig. Vi leverer. Kunden vinner."
    assert inject_consensus(text, NO) == (text, [])
    assert inject_consensus("Kort. Tekst.", NO) == ("Kort. Tekst.", [])


def test_consensus_added_to_multi_paragraph_text():
    text = "Det er viktig. Vi leverer.\n\nKunden vinner. Markedet vokser."
    adapted, changes = inject_consensus(text, NO)
    assert adapted == (
        "Det er viktig. Sammen kan vi finne gode løsninger. Vi leverer.\n\n"
        "Kunden vinner. Markedet vokser."
    )
    assert [c.type for c in changes] == ["consensus"]


def test_consensus_keeps_line_breaks():
    text = "Intro her nå.\n- Punkt en.\n- Punkt to.\n- Punkt tre.\n- Punkt fire."
    adapted, changes = inject_consensus(text, NO)
    assert adapted.count("\n") == 4
    assert adapted.startswith("Intro her nå. Sammen kan vi finne gode løsninger.\n- Punkt en.")
    assert len(changes) == 1


def test_industry_lookup():
    assert industry_for("IT consulting") == "technology"
    assert industry_for("Private banking") is None
    assert industry_for("bank") == "finance"
    assert industry_for("") is None


def test_finance_industry_pass():
    ctx = AdaptationContext(language="no", industry="finance")
    text, changes = adapt_for_industry("Vi tilbyr våre tjenester for aggressiv vekst.", ctx)
    assert text == "Vi tilbyr våre transparente tjenester for stabil vekst."
    assert len(changes) == 2


def test_technology_adds_sustainability():
    ctx = AdaptationContext(language="en", industry="technology")
    text, changes = adapt_for_industry("Our platform is cutting-edge.", ctx)
    assert text == "Our platform is modern. This supports sustainable development."
    assert len(changes) == 2
    again, more = adapt_for_industry(text, ctx)
    assert again == text
    assert more == []


def test_short_opener_gets_context():
    text, changes = optimize_structure("Kort start. Resten av teksten er her.", NO)
    assert text == "I dagens norske næringsliv, kort start. Resten av teksten er her."
    assert changes[0].type == "structure"


def test_opener_keeps_acronyms():
    text, _ = optimize_structure("DNB vokser. Mer tekst.", NO)
    assert text.startswith("I dagens norske næringsliv, DNB vokser.")


def test_long_text_split_into_paragraphs():
    sentence = "Dette er en lang setning som handler om norsk næringsliv og digital utvikling i dag."
    text = " ".join([sentence] * 12)
    adapted, changes = optimize_structure(text, NO)
    assert adapted.count("\n\n") == 2
    assert any(c.adapted == "3 paragraphs" for c in changes)


def test_paragraph_split_keeps_line_breaks():
    sentence = "Dette er en lang setning som handler om norsk næringsliv og digital utvikling i dag."
    text = "\n".join([sentence] * 12)
    adapted, changes = optimize_structure(text, NO)
    assert adapted.count("\n\n") == 2
    assert adapted.count("\n") == 13
    assert any(c.adapted == "3 paragraphs" for c in changes)


def test_compliance_score():
    score, violations = compliance_score("Vi er markedsledende og alltid best.")
    assert len(violations) == 2
    assert score == 85.0
    assert compliance_score("Together we grow.")[0] == 100.0


def test_comparative_claims():
    _, violations = compliance_score("Our tool is better than the competition.")
    assert violations == ["Comparative claim: 'better than the competition'"]


def test_appropriateness():
    score, tone, leftovers = appropriateness_score("Vi hadde et meeting.", NO)
    assert score == 95.0
    assert tone == "appropriate"
    assert leftovers == ["meeting"]

    score, tone, _ = appropriateness_score("kult kult kult", NO)
    assert tone == "too_casual"
    assert score == 90.0


def test_overall_cultural_score():
    assert overall_cultural_score(100, 100) == 100.0
    assert overall_cultural_score(0, 0) == 30.0


def test_check_does_not_rewrite():
    text = "Vi hadde et meeting. Vi er markedsledende."
    result = CulturalAdapter().check(text, NO)
    assert result.adapted_text == text
    assert result.changes == []
    assert any("meeting" in r for r in result.recommendations)
    assert result.violations


def test_context_from_request():
    request = ContentRequest(
        topic="x",
        audience="utviklere",
        cultural_context=CulturalContext(industry="finance", formality="formal"),
        cultural_strictness="strict",
    )
    ctx = AdaptationContext.from_request(request)
    assert ctx.formality == "high"
    assert ctx.industry == "finance"
    assert ctx.strictness == "strict"
    casual = AdaptationContext.from_request(ContentRequest(topic="x", tone="casual"))
    assert casual.formality == "low"


def test_full_adaptation_norwegian(norwegian_request):
    text = (
        "Jeg har en revolusjonerende løsning. Vi hadde et meeting med kunden. "
        "Resultatet ble perfekt. Banken sparte penger. Kundene ble fornøyde."
    )
    result = CulturalAdapter().adapt(text, AdaptationContext.from_request(norwegian_request))
    adapted = result.adapted_text.lower()
    assert "revolusjonerende" not in adapted
    assert "meeting" not in adapted
    assert "perfekt" not in adapted
    assert {c.type for c in result.changes} >= {"self-promotion", "terminology", "consensus"}
    assert 0 <= result.cultural_score <= 100
    assert result.cultural_score == pytest.approx(
        overall_cultural_score(result.compliance_score, result.appropriateness_score),
    )
