"""Tests for LLM providers, pricing and prompt building."""

from __future__ import annotations

import dataclasses
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from storyscale.errors import ProviderFailure
from storyscale.llm import build_provider, build_providers
from storyscale.llm.anthropic_provider import AnthropicProvider
from storyscale.llm.openai_compat import OpenAICompatibleProvider
from storyscale.llm.pricing import FALLBACK_RATE, estimate_cost, rate_for
from storyscale.llm.prompts import (
    NO_RESEARCH,
    build_improvement_prompt,
    build_system_prompt,
    build_user_prompt,
    completion_tokens,
    format_research,
    prompt_tokens,
    target_words,
)
from storyscale.models import Improvement, ResearchItem, ResearchResult


@pytest.fixture
def openai_provider():
    return OpenAICompatibleProvider(
        api_key="test-key",
        base_url="http://localhost:9999",
        default_model="test-model",
        name="alpha",
    )


def _mock_openai_response(content="test response"):
    return {
        "choices": [{"message": {"content": content}}],
        "usage": {"prompt_tokens": 10, "completion_tokens": 20},
    }


def _mock_client(mock_client_cls, mock_resp):
    mock_client = AsyncMock()
    mock_client.post.return_value = mock_resp
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    mock_client_cls.return_value = mock_client
    return mock_client


@pytest.mark.asyncio
@patch("storyscale.llm.openai_compat.httpx.AsyncClient")
async def test_openai_compat_complete(mock_client_cls, openai_provider):
    """OpenAI-compatible provider makes correct API call."""
    mock_resp = MagicMock()
    mock_resp.json.return_value = _mock_openai_response("hei verden")
    mock_resp.raise_for_status = MagicMock()
    mock_client = _mock_client(mock_client_cls, mock_resp)

    response = await openai_provider.complete("test prompt", system="sys", max_tokens=500)

    assert response.text == "hei verden"
    assert response.input_tokens == 10
    assert response.output_tokens == 20
    assert response.model == "test-model"

    call_args = mock_client.post.call_args
    assert call_args.args[0] == "http://localhost:9999/chat/completions"
    payload = call_args.kwargs.get("json")
    assert payload["model"] == "test-model"
    assert payload["max_tokens"] == 500
    assert payload["messages"][0] == {"role": "system", "content": "sys"}
    assert payload["messages"][1] == {"role": "user", "content": "test prompt"}
    assert call_args.kwargs["headers"]["Authorization"] == "Bearer test-key"


@pytest.mark.asyncio
@patch("storyscale.llm.openai_compat.httpx.AsyncClient")
async def test_openai_compat_no_system(mock_client_cls, openai_provider):
    """Without system prompt, only user message is sent."""
    mock_resp = MagicMock()
    mock_resp.json.return_value = _mock_openai_response()
    mock_resp.raise_for_status = MagicMock()
    mock_client = _mock_client(mock_client_cls, mock_resp)

    await openai_provider.complete("test prompt", model="gpt-4o")

    payload = mock_client.post.call_args.kwargs.get("json")
    assert payload["model"] == "gpt-4o"
    assert len(payload["messages"]) == 1
    assert payload["messages"][0]["role"] == "user"


@pytest.mark.asyncio
@patch("storyscale.llm.openai_compat.httpx.AsyncClient")
async def test_openai_compat_http_error_is_classified(mock_client_cls, openai_provider):
    request = httpx.Request("POST", "http://localhost:9999/chat/completions")
    mock_resp = MagicMock()
    mock_resp.raise_for_status = MagicMock(side_effect=httpx.HTTPStatusError(
        "Too Many Requests", request=request, response=httpx.Response(429, request=request),
    ))
    _mock_client(mock_client_cls, mock_resp)

    with pytest.raises(ProviderFailure) as exc_info:
        await openai_provider.complete("test prompt")
    assert exc_info.value.kind == "rate_limit"
    assert exc_info.value.provider == "alpha"
    assert exc_info.value.model == "test-model"


@pytest.mark.asyncio
@patch("storyscale.llm.openai_compat.httpx.AsyncClient")
async def test_openai_compat_malformed_body(mock_client_cls, openai_provider):
    mock_resp = MagicMock()
    mock_resp.json.return_value = {"error": "nope"}
    mock_resp.raise_for_status = MagicMock()
    _mock_client(mock_client_cls, mock_resp)

    with pytest.raises(ProviderFailure) as exc_info:
        await openai_provider.complete("test prompt")
    assert exc_info.value.kind == "validation"


@pytest.mark.asyncio
async def test_openai_public_endpoint_needs_key():
    provider = OpenAICompatibleProvider(api_key="", base_url="", default_model="gpt-4o")
    with pytest.raises(ProviderFailure) as exc_info:
        await provider.complete("hei")
    assert exc_info.value.kind == "unavailable"


@pytest.mark.asyncio
async def test_anthropic_needs_key():
    provider = AnthropicProvider(api_key="", base_url="", default_model="claude-3-haiku-20240307")
    with pytest.raises(ProviderFailure) as exc_info:
        await provider.complete("hei")
    assert exc_info.value.kind == "unavailable"


@pytest.mark.asyncio
async def test_anthropic_complete():
    message = SimpleNamespace(
        content=[SimpleNamespace(text="Hei fra Claude")],
        usage=SimpleNamespace(input_tokens=12, output_tokens=34),
    )
    mock_client = MagicMock()
    mock_client.messages.create = AsyncMock(return_value=message)

    provider = AnthropicProvider(
        api_key="test-key", base_url="", default_model="claude-3-haiku-20240307", name="beta",
    )
    with patch(
        "storyscale.llm.anthropic_provider.anthropic.AsyncAnthropic", return_value=mock_client,
    ) as mock_cls:
        response = await provider.complete("skriv", system="du er", temperature=0.3, max_tokens=99)

    assert response.text == "Hei fra Claude"
    assert (response.input_tokens, response.output_tokens) == (12, 34)
    assert mock_cls.call_args.kwargs["max_retries"] == 0
    kwargs = mock_client.messages.create.call_args.kwargs
    assert kwargs["system"] == "du er"
    assert kwargs["max_tokens"] == 99
    assert kwargs["temperature"] == 0.3
    assert kwargs["messages"] == [{"role": "user", "content": "skriv"}]


def test_build_providers(sample_config):
    providers = build_providers(sample_config)
    assert set(providers) == {"alpha", "beta"}
    assert isinstance(providers["alpha"], OpenAICompatibleProvider)
    assert isinstance(providers["beta"], AnthropicProvider)
    assert providers["beta"].name == "beta"
    assert providers["alpha"].default_model == "gpt-4o"


def test_unknown_provider_type():
    config = {"llm": {"providers": {"x": {"type": "carrier-pigeon"}}}}
    with pytest.raises(ValueError, match="carrier-pigeon"):
        build_provider(config, "x")


# Pricing

def test_known_model_cost():
    assert estimate_cost("gpt-4o", 1000, 1000) == pytest.approx(0.0125)
    assert estimate_cost("claude-3-sonnet-20240229", 700, 975) == pytest.approx(0.016725)


def test_unknown_model_uses_fallback_rate():
    assert rate_for("mystery-model") == FALLBACK_RATE
    assert estimate_cost("mystery-model", 1000, 1000) == pytest.approx(0.0015)


def test_configured_rate_override():
    overrides = {"gpt-4o": {"input": 0.001}}
    assert rate_for("gpt-4o", overrides) == {"input": 0.001, "output": FALLBACK_RATE["output"]}


# Prompts

def test_size_estimates(norwegian_request, english_request):
    assert target_words(norwegian_request) == 750
    assert completion_tokens(norwegian_request) == 975
    assert completion_tokens(english_request) == 195
    assert completion_tokens(dataclasses.replace(english_request, word_count=100)) == 130
    assert prompt_tokens() == 700
    assert prompt_tokens(3) == 1150


def test_system_prompt_by_language_and_family(norwegian_request, english_request):
    no_prompt = build_system_prompt(norwegian_request, "anthropic")
    assert "Janteloven" in no_prompt
    assert "depth and nuance" in no_prompt
    assert "STRENGHET" not in no_prompt

    strict = build_system_prompt(dataclasses.replace(norwegian_request, cultural_strictness="strict"))
    assert "KULTURELL STRENGHET" in strict

    en_prompt = build_system_prompt(english_request, "openai")
    assert "Nordic" in en_prompt
    assert "varied sentence structure" in en_prompt


def test_user_prompt_norwegian(norwegian_request):
    prompt = build_user_prompt(norwegian_request)
    assert prompt.startswith("Skriv en fagartikkel om Digital transformasjon")
    assert "digitalisering, bank" in prompt
    assert NO_RESEARCH["no"] in prompt
    assert "omtrent 750 ord" in prompt
    assert "Finanstilsynets" in prompt


def test_user_prompt_english_has_no_industry_extra(english_request):
    prompt = build_user_prompt(english_request)
    assert prompt.startswith("Write a social media post about Cloud cost optimization")
    assert "EKSTRA KONTEKST" not in prompt


def test_format_research_caps_items():
    items = [
        ResearchItem(source_id=f"s{i}", url=f"https://s{i}.no/a", title=f"Tittel {i}", content="ord " * 200)
        for i in range(7)
    ]
    text = format_research(ResearchResult(items=items))
    assert text.count("SOURCE:") == 5
    assert "SOURCE: s0 (https://s0.no/a)" in text
    assert text.split("\n\n---\n\n")[0].count("ord") == 80


def test_improvement_prompt():
    weaknesses = [
        Improvement("engagement", "No call to action", "End with a clear next step", "high"),
    ]
    prompt = build_improvement_prompt("Original tekst.", weaknesses, "no")
    assert "- [high] No call to action: End with a clear next step" in prompt
    assert prompt.rstrip().endswith("Svar kun med den forbedrede teksten.")
    assert "Original tekst." in prompt
