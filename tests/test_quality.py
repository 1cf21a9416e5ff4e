"""Tests for heuristic quality scoring."""

from __future__ import annotations

import pytest

from storyscale.models import ContentRequest, CulturalAdaptationResult, DimensionScore
from storyscale.quality import QualityContext, QualityScorer, assess, top_weaknesses
from storyscale.quality.scorer import (
    _dimension,
    check_accuracy,
    check_actionability,
    check_call_to_action,
    check_completeness,
    check_consensus,
    check_credibility,
    check_cultural_references,
    check_emotion,
    check_flow,
    check_grammar,
    check_hook,
    check_jantelov,
    check_persuasiveness,
    check_professionalism,
    check_punctuation,
    check_readability,
    check_seo,
    check_shareability,
    check_spelling,
    check_structure,
    check_terminology,
    check_variation,
    check_word_choice,
    grade_for,
    improvements_for,
    overall_score,
    priority_for,
    readiness_for,
)

GOOD_NORWEGIAN = (
    "Visste du at norske bedrifter kan spare tid med digitale verktøy?\n\n"
    "Ifølge en ny undersøkelse fra SSB bruker 60 % av bedriftene nå skybaserte løsninger. "
    "Sammen med våre kunder ser vi at gevinsten er størst når ansatte får god opplæring. "
    "Følgelig bør ledere planlegge endringen i felles prosesser.\n\n"
    "Bærekraft og trygghet er viktige verdier i norsk næringsliv. "
    "Vi har tro på samarbeid og tydelige resultater.\n\n"
    "Kontakt oss i dag for å finne ut hvordan vi kan hjelpe deg."
)
POOR_NORWEGIAN = "vi er markedsledende og alltid best i alt og uslåelig og overlegen lol"


# Linguistic

def test_grammar_and_spelling():
    assert check_grammar("Vi har fått gjort mye.", "no") == 95
    assert check_grammar("We could of won.", "en") == 95
    assert check_spelling("Vi leverer for eksempel rådgivning og så videre.", "no") == 90
    assert check_spelling("We did it in order to win.", "en") == 95


def test_punctuation():
    assert check_punctuation("Kort.") == 100
    assert check_punctuation("Dette er en setning uten slutt og den fortsetter") == 90


def test_flow_and_variation():
    assert check_flow("Bare en setning.") == 50
    assert check_variation("Vi er. Vi går. Vi ser.") == pytest.approx(100 / 3)
    assert check_variation("Vi er. De går. Alle ser.") == 100
    assert check_variation("") == 0


def test_word_choice_penalizes_repetition():
    assert check_word_choice("digital " * 5, "no") == 96
    assert check_word_choice("være være være være være være", "no") == 100


# Cultural

def test_jantelov():
    assert check_jantelov("Vi er markedsledende og alltid best i klassen.", "no") == 40
    assert check_jantelov("Vi hjelper kundene våre.", "no") == 100
    assert check_jantelov("We are better than the competition.", "en") == 80


def test_consensus():
    assert check_consensus("I did it my way.", "en") == 80
    assert check_consensus("Jeg og min plan, mitt valg.", "no") == 65
    assert check_consensus("Vi gjør det sammen.", "no") == 100


def test_cultural_references():
    assert check_cultural_references("Norsk bærekraft", "no") == 70
    assert check_cultural_references("Nothing here", "en") == 50


# Business

def test_professionalism_and_terminology():
    assert check_professionalism("lol, dette er gøy", "no") == 70
    assert check_professionalism("Følgelig er dette riktig.", "no") == 100
    assert check_terminology("Vi hadde et meeting med feedback.", "no") == 80
    assert check_terminology("We leverage synergy.", "en") == 80


def test_credibility():
    assert check_credibility("A study shows 40% growth.", "en") == 100
    assert check_credibility("Perhaps it works.", "en") == 55


def test_persuasiveness_and_actionability():
    assert check_persuasiveness("This solution delivers value and results.", "en") == 90
    assert check_actionability("Kontakt oss. Neste steg er enkelt.", "no") == 85
    assert check_actionability("Ingenting her.", "no") == 50


# Technical

def test_accuracy_and_completeness():
    assert check_accuracy("It always works.", "en") == 80
    assert check_accuracy("It usually works.", "en") == 90
    assert check_completeness("ord " * 250, 500) == 50
    assert check_completeness("ord " * 600, 500) == 100
    assert check_completeness("ord", 0) == 100


def test_structure():
    assert check_structure("Ryddig tekst.") == 100
    assert check_structure("liten start uten slutt") == 80
    assert check_structure("A" + "a" * 600 + ".") == 80


def test_seo():
    text = "Kort innlegg om skyen og kostnader i dag for alle."
    assert check_seo(text, "social") == 50
    assert check_seo(text, "social", ("skyen",)) == 65


# Engagement

def test_hook():
    assert check_hook("Visste du at norske bedrifter sparer tid? Mer tekst.", "no") == 100
    assert check_hook("Our quarterly report is out. More.", "en") == 65
    assert check_hook("", "en") == 0


def test_readability():
    assert check_readability("Vi er her. Du er der.") == 100
    assert check_readability("") == 0
    assert check_readability("Internasjonaliseringsstrategier kompliserer organisasjonsutvikling.") < 100


def test_emotion_cta_shareability():
    assert check_emotion("Vi har håp og en visjon.", "no") == 60
    assert check_call_to_action("Ingenting.", "no") == 0
    assert check_call_to_action("Kontakt oss i dag.", "no") == 85
    assert check_call_to_action("Kontakt oss i dag. Klikk her.", "no") == 100
    assert check_shareability("Tips: visste du?", "no") == 85


# Aggregation

def test_dimension_fold():
    dim = _dimension([("a", 50, 0.2, 60, "Issue A"), ("b", 100, 0.3, 60, "Issue B")])
    assert dim.score == 90.0
    assert dim.metrics == {"a": 50, "b": 100}
    assert dim.issues == ["Issue A"]


def test_overall_and_bands():
    dims = {d: DimensionScore(score=80) for d in ("linguistic", "cultural", "business", "technical", "engagement")}
    assert overall_score(dims) == 80
    assert [grade_for(s) for s in (95, 85, 75, 65, 10)] == ["A", "B", "C", "D", "F"]
    assert [readiness_for(s) for s in (85, 70, 50, 49)] == ["ready", "needs_review", "needs_revision", "rejected"]
    assert [priority_for(s) for s in (39, 59, 79, 80)] == ["critical", "high", "medium", "low"]


def test_improvements_sorted_and_capped():
    dims = {
        "linguistic": DimensionScore(score=90, issues=["Grammar problems detected"]),
        "business": DimensionScore(score=30, issues=[f"Issue {i}" for i in range(12)]),
    }
    improvements = improvements_for(dims)
    assert len(improvements) == 10
    assert improvements[0].priority == "critical"
    assert all(i.dimension == "business" for i in improvements)
    low = improvements_for({"linguistic": dims["linguistic"]})
    assert low[0].suggestion.startswith("Review the text")


def test_good_text_beats_poor_text():
    ctx = QualityContext(content_type="social", language="no")
    good = assess(GOOD_NORWEGIAN, ctx)
    poor = assess(POOR_NORWEGIAN, ctx)
    assert good.overall > poor.overall
    assert set(good.dimensions) == {"linguistic", "cultural", "business", "technical", "engagement"}
    assert "Self-promotional claims" in poor.dimensions["cultural"].issues
    assert 0 <= poor.overall <= 100
    assert poor.grade == grade_for(poor.overall)


def test_cultural_score_overrides_appropriateness():
    low = assess(GOOD_NORWEGIAN, QualityContext(language="no", cultural_score=20))
    high = assess(GOOD_NORWEGIAN, QualityContext(language="no", cultural_score=100))
    assert low.dimensions["cultural"].metrics["appropriateness"] == 20
    assert high.dimensions["cultural"].score > low.dimensions["cultural"].score


def test_assessment_is_deterministic():
    ctx = QualityContext(language="no")
    assert assess(GOOD_NORWEGIAN, ctx) == assess(GOOD_NORWEGIAN, ctx)


def test_top_weaknesses():
    assessment = assess(POOR_NORWEGIAN, QualityContext(language="no"))
    weaknesses = top_weaknesses(assessment, limit=3)
    assert len(weaknesses) == 3
    order = {"critical": 0, "high": 1, "medium": 2, "low": 3}
    assert [order[w.priority] for w in weaknesses] == sorted(order[w.priority] for w in weaknesses)


def test_context_from_request():
    request = ContentRequest(topic="x", content_type="email", output_language="en", keywords=("cloud",))
    adaptation = CulturalAdaptationResult(original_text="", adapted_text="", cultural_score=77)
    ctx = QualityContext.from_request(request, adaptation)
    assert ctx == QualityContext(content_type="email", language="en", keywords=("cloud",), cultural_score=77)
    assert ctx.lang_key == "en"
    assert QualityContext.from_request(request).cultural_score is None


def test_scorer_config(sample_config):
    scorer = QualityScorer({**sample_config, "quality": {"threshold": 80, "expected_words": {"social": 10}}})
    assert scorer.threshold == 80
    assert scorer.max_iterations == 3
    assert scorer.markers.expected_words["social"] == 10
    assert scorer.markers.expected_words["article"] == 500
    assessment = scorer.assess("Ti ord her er nok for et kort innlegg i dag.", QualityContext(content_type="social"))
    assert assessment.dimensions["technical"].metrics["completeness"] == 100
