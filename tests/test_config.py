"""Tests for config loading, env var resolution and component getters."""

from __future__ import annotations

import pytest

from storyscale.config import (
    get_cache_config,
    get_candidates,
    get_generation_config,
    get_provider_config,
    get_quality_config,
    get_router_config,
    load_config,
)


def test_load_config(sample_config):
    """Config loads and has expected structure."""
    assert "llm" in sample_config
    assert "generation" in sample_config
    assert "research" in sample_config


def test_env_var_resolution(tmp_path, monkeypatch):
    """Environment variables in ${VAR} format are resolved."""
    monkeypatch.setenv("TEST_API_KEY", "my-secret-key")
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text("""
llm:
  providers:
    test:
      api_key: "${TEST_API_KEY}"
      base_url: "https://${TEST_API_KEY}.example.com"
""")
    config = load_config(str(cfg_path))
    assert config["llm"]["providers"]["test"]["api_key"] == "my-secret-key"
    assert config["llm"]["providers"]["test"]["base_url"] == "https://my-secret-key.example.com"


def test_missing_env_var_resolves_empty(tmp_path, monkeypatch):
    monkeypatch.delenv("NOT_SET_ANYWHERE", raising=False)
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text('key: "${NOT_SET_ANYWHERE}"\n')
    assert load_config(str(cfg_path))["key"] == ""


def test_missing_config_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nope.yaml"))


def test_router_defaults_on_empty_config():
    cfg = get_router_config({})
    assert cfg["max_primary_sources"] == 3
    assert cfg["max_secondary_sources"] == 2
    assert cfg["max_international_sources"] == 2
    assert cfg["cost_budget"] == 0.5
    assert cfg["min_trust_score"] == 7


def test_provider_config(sample_config):
    cfg = get_provider_config(sample_config, "beta")
    assert cfg["provider_type"] == "anthropic"
    assert cfg["default_model"] == "claude-3-sonnet-20240229"


def test_candidates_and_chains(sample_config):
    assert set(get_candidates(sample_config)) == {"fast", "deep", "cheap"}
    gen = get_generation_config(sample_config)
    assert gen["long_form_chain"][0] == "deep"
    assert gen["timeout"] == 5


def test_cache_ttl_overrides_merge():
    cfg = get_cache_config({"cache": {"ttl_hours": {"social": 1}}})
    assert cfg["ttl_hours"]["social"] == 1
    assert cfg["ttl_hours"]["landing"] == 720


def test_quality_defaults():
    cfg = get_quality_config({})
    assert cfg["threshold"] == 70
    assert cfg["max_iterations"] == 3
