"""Load configuration from YAML with env var substitution, plus per-component getters."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml

LOCAL_LANGUAGE = "no"
LOCAL_MARKET = "norway"
REGIONAL_MARKET = "nordic"

_ENV_PATTERN = re.compile(r"\$\{([^}]+)\}")


def _load_dotenv(path: str | Path = ".env") -> None:
    """Load a .env file into os.environ (without overwriting existing vars)."""
    env_path = Path(path)
    if not env_path.is_file():
        return
    with open(env_path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, _, value = line.partition("=")
            key = key.strip()
            value = value.strip().strip("'\"")
            if key and key not in os.environ:
                os.environ[key] = value


def _resolve_env_vars(value: Any) -> Any:
    """Recursively resolve ${ENV_VAR} patterns in config values."""
    if isinstance(value, str):
        match = _ENV_PATTERN.search(value)
        if match:
            # A value that is exactly one env var resolves to that var's value
            if match.group(0) == value:
                return os.environ.get(match.group(1), "")
            return _ENV_PATTERN.sub(lambda m: os.environ.get(m.group(1), ""), value)
        return value
    if isinstance(value, dict):
        return {k: _resolve_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_resolve_env_vars(item) for item in value]
    return value


def load_config(path: str | Path = "config.yaml") -> dict[str, Any]:
    """Load config from YAML file and resolve environment variables."""
    _load_dotenv()

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    return _resolve_env_vars(raw)


def get_locale(config: dict) -> dict:
    """Local language and market identifiers."""
    cfg = config.get("locale", {})
    return {
        "language": cfg.get("language", LOCAL_LANGUAGE),
        "market": cfg.get("market", LOCAL_MARKET),
        "regional_market": cfg.get("regional_market", REGIONAL_MARKET),
    }


def get_router_config(config: dict) -> dict:
    """Source router limits and budgets."""
    cfg = config.get("router", {})
    return {
        "max_primary_sources": cfg.get("max_primary_sources", 3),
        "max_secondary_sources": cfg.get("max_secondary_sources", 2),
        "max_international_sources": cfg.get("max_international_sources", 2),
        "enable_parallel_search": cfg.get("enable_parallel_search", True),
        "cost_budget": cfg.get("cost_budget", 0.5),
        "time_budget_ms": cfg.get("time_budget_ms", 5000),
        "min_trust_score": cfg.get("min_trust_score", 7),
        "credentials": cfg.get("credentials") or {},
        "specialized_keywords": cfg.get("specialized_keywords"),
    }


def get_research_config(config: dict) -> dict:
    """Research gathering settings."""
    cfg = config.get("research", {})
    return {
        "timeout": cfg.get("timeout", 30),
        "max_items": cfg.get("max_items", 8),
        "max_retries": cfg.get("max_retries", 2),
        "search_provider": cfg.get("search_provider", "tavily"),
        "scrape_min_chars": cfg.get("scrape_min_chars", 200),
        "cache_ttl_hours": cfg.get("cache_ttl_hours", 24),
        "providers": cfg.get("providers") or {},
    }


def get_research_provider_config(config: dict, name: str) -> dict:
    """Settings block for one research provider."""
    return get_research_config(config)["providers"].get(name, {})


def get_analysis_config(config: dict) -> dict:
    """Content analyzer thresholds and caps."""
    cfg = config.get("analysis", {})
    return {
        "min_relevance_score": cfg.get("min_relevance_score", 0.5),
        "min_quality_score": cfg.get("min_quality_score", 0.6),
        "max_insights": cfg.get("max_insights", 5),
        "max_facts": cfg.get("max_facts", 10),
        "max_quotes": cfg.get("max_quotes", 3),
        "max_metrics": cfg.get("max_metrics", 10),
        "extract_local_terms": cfg.get("extract_local_terms", True),
    }


def get_provider_config(config: dict, name: str) -> dict:
    """Connection settings for a named LLM provider."""
    providers = config.get("llm", {}).get("providers", {})
    provider_cfg = providers.get(name, {})
    return {
        "provider_name": name,
        "provider_type": provider_cfg.get("type", "openai_compatible"),
        "api_key": provider_cfg.get("api_key", ""),
        "base_url": provider_cfg.get("base_url", ""),
        "default_model": provider_cfg.get("default_model", ""),
        "timeout": provider_cfg.get("timeout", 30),
    }


def get_candidates(config: dict) -> dict[str, dict]:
    """Generation candidates keyed by name."""
    return config.get("llm", {}).get("candidates", {})


def get_generation_config(config: dict) -> dict:
    """Fallback chains and per-call limits for generation."""
    cfg = config.get("generation", {})
    return {
        "timeout": cfg.get("timeout", 30),
        "default_chain": cfg.get("default_chain", []),
        "long_form_chain": cfg.get("long_form_chain", []),
        "short_form_chain": cfg.get("short_form_chain", []),
        "pricing": cfg.get("pricing", {}),
    }


def get_quality_config(config: dict) -> dict:
    """Quality threshold and refinement limits."""
    cfg = config.get("quality", {})
    return {
        "threshold": cfg.get("threshold", 70),
        "max_iterations": cfg.get("max_iterations", 3),
        "expected_words": cfg.get("expected_words") or {},
    }


def get_cache_config(config: dict) -> dict:
    """Response cache TTLs (hours) per content type."""
    cfg = config.get("cache", {})
    ttl_hours = {
        "social": 4,
        "email": 12,
        "article": 168,
        "blog": 168,
        "landing": 720,
        "ad": 24,
    }
    ttl_hours.update(cfg.get("ttl_hours") or {})
    return {
        "enabled": cfg.get("enabled", True),
        "ttl_hours": ttl_hours,
        "default_ttl_hours": cfg.get("default_ttl_hours", 24),
    }


def get_ledger_config(config: dict) -> dict:
    """Per-caller budget settings."""
    cfg = config.get("ledger", {})
    return {
        "default_budget": cfg.get("default_budget", 10.0),
        "budgets": cfg.get("budgets") or {},
        "warning_ratio": cfg.get("warning_ratio", 0.8),
    }


def get_log_config(config: dict) -> dict:
    cfg = config.get("logging", {})
    return {
        "level": cfg.get("level", "INFO"),
        "file": cfg.get("file", "logs/storyscale.log"),
    }
