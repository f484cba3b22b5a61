"""Token and cost accounting for model calls made while drafting."""

import logging
from types import MappingProxyType

logger = logging.getLogger(__name__)

# USD per 1M tokens: (input, output). Keys are model families; dated
# releases resolve to the longest matching prefix.
MODEL_PRICING: MappingProxyType[str, tuple[float, float]] = MappingProxyType({
    "claude-opus-4": (15.0, 75.0),
    "claude-sonnet-4": (3.0, 15.0),
    "claude-haiku-4": (0.80, 4.0),
    "claude-3-5-haiku": (0.80, 4.0),
})

CACHE_READ_RATE = 0.1  # fraction of the input price charged for cached prompt tokens
PER_TOKEN = 1 / 1_000_000


def pricing_for(model: str) -> tuple[float, float] | None:
    matches = [family for family in MODEL_PRICING if model.startswith(family)]
    if not matches:
        return None
    return MODEL_PRICING[max(matches, key=len)]


def estimate_cost(
    model: str,
    tokens_input: int,
    tokens_output: int,
    tokens_cache_read: int = 0,
) -> float:
    """Estimated USD cost of one call; 0.0 for models without a known price."""
    pricing = pricing_for(model)
    if pricing is None:
        logger.warning(f"No pricing found for model '{model}', using $0")
        return 0.0

    input_rate, output_rate = pricing
    billed_input = tokens_input - tokens_cache_read + tokens_cache_read * CACHE_READ_RATE
    return round((billed_input * input_rate + tokens_output * output_rate) * PER_TOKEN, 6)


def log_llm_usage(
    workflow: str,
    model: str,
    provider: str,
    tokens_input: int,
    tokens_output: int,
    duration_ms: int = 0,
    chain: str | None = None,
    tokens_cache_read: int = 0,
) -> float:
    """Record one model call in the usage log and return its estimated cost.

    Never raises; usage accounting must not fail the drafting call.
    """
    try:
        cost = estimate_cost(model, tokens_input, tokens_output, tokens_cache_read)
        logger.info(
            f"LLM usage: {workflow}/{chain or '-'} provider={provider} "
            f"model={model} tokens={tokens_input}+{tokens_output} "
            f"duration_ms={duration_ms} cost=${cost:.4f}"
        )
        return cost
    except Exception as e:
        logger.error(f"Failed to log LLM usage: {e}")
        return 0.0
