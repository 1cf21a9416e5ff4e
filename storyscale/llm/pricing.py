"""Per-1K-token model rates and cost estimation."""

from __future__ import annotations

# USD per 1K tokens
MODEL_RATES: dict[str, dict[str, float]] = {
    "gpt-5": {"input": 0.00125, "output": 0.01},
    "gpt-5-mini": {"input": 0.00025, "output": 0.002},
    "gpt-5-nano": {"input": 0.00005, "output": 0.0004},
    "gpt-4o": {"input": 0.0025, "output": 0.01},
    "gpt-4-turbo-preview": {"input": 0.01, "output": 0.03},
    "claude-3-opus-20240229": {"input": 0.015, "output": 0.075},
    "claude-3-sonnet-20240229": {"input": 0.003, "output": 0.015},
    "claude-3-haiku-20240307": {"input": 0.00025, "output": 0.00125},
}
FALLBACK_RATE = {"input": 0.00025, "output": 0.00125}


def rate_for(model: str, overrides: dict | None = None) -> dict[str, float]:
    """Configured rate first, then the built-in table, then the cheap fallback."""
    if overrides and model in overrides:
        return {**FALLBACK_RATE, **overrides[model]}
    return MODEL_RATES.get(model, FALLBACK_RATE)


def estimate_cost(
    model: str,
    input_tokens: int,
    output_tokens: int,
    overrides: dict | None = None,
) -> float:
    rate = rate_for(model, overrides)
    cost = (input_tokens * rate["input"] + output_tokens * rate["output"]) / 1000
    return round(max(cost, 0.0), 6)
