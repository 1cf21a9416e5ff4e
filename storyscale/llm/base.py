"""Abstract base class for LLM providers."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from storyscale.errors import ProviderFailure
from storyscale.retry import classify_failure

logger = logging.getLogger(__name__)


@dataclass
class LLMResponse:
    """Response from an LLM call."""

    text: str
    input_tokens: int = 0
    output_tokens: int = 0
    model: str = ""


class BaseLLMProvider(ABC):
    """Base class for LLM providers.

    Providers make exactly one call per ``complete``; the generation fallback
    chain decides what happens after a failure. Every failure surfaces as a
    ``ProviderFailure`` whose ``kind`` tells transport, timeout, rate limit,
    validation and unavailable apart.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str,
        default_model: str,
        timeout: int = 30,
        name: str = "",
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.default_model = default_model
        self.timeout = timeout
        self.name = name or self.provider_name

    async def complete(
        self,
        prompt: str,
        system: str = "",
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 2000,
    ) -> LLMResponse:
        """Send one completion request and return the response."""
        model = model or self.default_model
        try:
            return await self._do_complete(prompt, system, model, temperature, max_tokens)
        except ProviderFailure:
            raise
        except Exception as exc:
            kind = classify_failure(exc)
            raise ProviderFailure(self.name, kind, f"{self.name}/{model}: {exc}", model=model) from exc

    @abstractmethod
    async def _do_complete(
        self,
        prompt: str,
        system: str,
        model: str,
        temperature: float,
        max_tokens: int,
    ) -> LLMResponse:
        ...

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Human-readable provider name."""
        ...
