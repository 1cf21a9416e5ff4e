"""Generation provider registry."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from storyscale.llm.base import BaseLLMProvider

PROVIDERS: dict[str, type[BaseLLMProvider]] = {}


def register_provider(name: str):
    """Decorator to register an LLM provider."""

    def decorator(cls):
        PROVIDERS[name] = cls
        return cls

    return decorator


def build_provider(config: dict, name: str) -> BaseLLMProvider:
    """Instantiate the named provider from its ``llm.providers`` block."""
    from storyscale.config import get_provider_config

    provider_cfg = get_provider_config(config, name)
    provider_type = provider_cfg["provider_type"]
    if provider_type not in PROVIDERS:
        raise ValueError(f"Unknown LLM provider type: {provider_type}")
    return PROVIDERS[provider_type](
        api_key=provider_cfg["api_key"],
        base_url=provider_cfg["base_url"],
        default_model=provider_cfg["default_model"],
        timeout=provider_cfg["timeout"],
        name=name,
    )


def build_providers(config: dict) -> dict[str, BaseLLMProvider]:
    """One instance per configured provider, keyed by provider name."""
    names = config.get("llm", {}).get("providers", {})
    return {name: build_provider(config, name) for name in names}


# Import implementations to trigger registration
from storyscale.llm.anthropic_provider import AnthropicProvider  # noqa: E402, F401
from storyscale.llm.openai_compat import OpenAICompatibleProvider  # noqa: E402, F401
