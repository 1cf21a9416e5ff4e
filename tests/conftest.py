"""Shared test fixtures."""

from __future__ import annotations

import pytest

from storyscale.config import load_config
from storyscale.llm.base import BaseLLMProvider, LLMResponse
from storyscale.models import ContentRequest, CulturalContext, SourceFilters
from storyscale.research.base import BaseResearchProvider, SearchHit


@pytest.fixture
def sample_config(tmp_path):
    """Minimal config for testing (no real API keys)."""
    config_text = """
llm:
  providers:
    alpha:
      type: "openai_compatible"
      api_key: "test-key"
      base_url: "http://localhost:9999"
      default_model: "gpt-4o"
    beta:
      type: "anthropic"
      api_key: "test-key"
      default_model: "claude-3-sonnet-20240229"
  candidates:
    fast:
      provider: "alpha"
      model: "gpt-4o"
      family: "openai"
    deep:
      provider: "beta"
      model: "claude-3-sonnet-20240229"
      family: "anthropic"
    cheap:
      provider: "alpha"
      model: "gpt-5-mini"
      family: "openai"

generation:
  timeout: 5
  default_chain: [fast, deep, cheap]
  long_form_chain: [deep, fast, cheap]
  short_form_chain: [fast, cheap, deep]

research:
  timeout: 5
  search_provider: "fake"
  providers:
    tavily:
      enabled: false
    feed:
      enabled: false

quality:
  threshold: 70
  max_iterations: 3

ledger:
  default_budget: 5.0

logging:
  level: "DEBUG"
  file: "LOG_PLACEHOLDER"
"""
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text(config_text.replace("LOG_PLACEHOLDER", str(tmp_path / "test.log")))
    return load_config(str(cfg_path))


@pytest.fixture
def norwegian_request():
    return ContentRequest(
        topic="Digital transformasjon i norsk bank og finans",
        content_type="article",
        output_language="no",
        audience="ledere i norske bedrifter",
        keywords=("digitalisering", "bank"),
        cultural_context=CulturalContext(market="norway", industry="finance"),
        caller_id="acme",
    )


@pytest.fixture
def english_request():
    return ContentRequest(
        topic="Cloud cost optimization",
        content_type="social",
        output_language="en",
        audience="engineering managers",
        cultural_context=CulturalContext(market="international", industry="technology"),
        caller_id="acme",
    )


class ScriptedLLM(BaseLLMProvider):
    """Returns (or raises) the next scripted outcome on every call."""

    def __init__(self, name: str, script: list, input_tokens: int = 100, output_tokens: int = 200):
        super().__init__(api_key="test-key", base_url="", default_model="test-model", name=name)
        self.script = list(script)
        self.calls: list[dict] = []
        self.input_tokens = input_tokens
        self.output_tokens = output_tokens

    @property
    def provider_name(self) -> str:
        return "scripted"

    async def _do_complete(self, prompt, system, model, temperature, max_tokens):
        self.calls.append({
            "prompt": prompt, "system": system, "model": model,
            "temperature": temperature, "max_tokens": max_tokens,
        })
        outcome = self.script.pop(0) if len(self.script) > 1 else self.script[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return LLMResponse(
            text=outcome,
            input_tokens=self.input_tokens,
            output_tokens=self.output_tokens,
            model=model,
        )


class ScriptedResearch(BaseResearchProvider):
    """Search results per domain; a domain mapped to an exception fails."""

    def __init__(self, results: dict, name: str = "fake"):
        super().__init__({})
        self._name = name
        self.results = results
        self.queries: list[tuple[str, SourceFilters | None]] = []

    @property
    def name(self) -> str:
        return self._name

    async def search(self, query, limit=5, filters=None, search_depth="basic", feed_url=""):
        self.queries.append((query, filters))
        domain = filters.include_domains[0] if filters and filters.include_domains else ""
        outcome = self.results.get(domain, [])
        if isinstance(outcome, BaseException):
            raise outcome
        return list(outcome)

    async def scrape(self, url):
        raise AssertionError("scrape should not be called in tests")


@pytest.fixture
def scripted_llm():
    return ScriptedLLM


@pytest.fixture
def scripted_research():
    return ScriptedResearch


@pytest.fixture
def search_hit():
    def make(url: str, content: str = "", score: float = 0.8, **kwargs) -> SearchHit:
        content = content or (
            "Ifølge en ny undersøkelse fra SSB økte digitaliseringen i norske banker med 25 prosent i 2024. "
            * 8
        )
        return SearchHit(url=url, title=kwargs.pop("title", "Nyhet"), content=content, score=score, **kwargs)

    return make
