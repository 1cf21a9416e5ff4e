"""Research provider registry."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from storyscale.research.base import BaseResearchProvider

RESEARCH_PROVIDERS: dict[str, type[BaseResearchProvider]] = {}


def register_research_provider(name: str):
    """Decorator to register a research provider."""

    def decorator(cls):
        RESEARCH_PROVIDERS[name] = cls
        return cls

    return decorator


def build_research_providers(config: dict) -> dict[str, BaseResearchProvider]:
    """Instantiate every registered provider that is enabled in config."""
    from storyscale.config import get_research_provider_config

    providers = {}
    for name, cls in RESEARCH_PROVIDERS.items():
        if get_research_provider_config(config, name).get("enabled", False):
            providers[name] = cls(config)
    return providers


# Import implementations to trigger registration
from storyscale.research.feed import FeedProvider  # noqa: E402, F401
from storyscale.research.serper import SerperProvider  # noqa: E402, F401
from storyscale.research.tavily import TavilyProvider  # noqa: E402, F401
