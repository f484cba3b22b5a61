"""Output budget for a single generation call.

Explicit limits win: characters need roughly two output tokens each of
headroom, words roughly three. Without limits the declared field type picks
a default. Every budget is capped at MAX_OUTPUT_TOKENS.
"""

from types import MappingProxyType

from autoapply.core.config import get_settings

TOKENS_PER_CHARACTER = 2
TOKENS_PER_WORD = 3

FIELD_TYPE_DEFAULTS: MappingProxyType[str, int] = MappingProxyType({
    "text": 200,
    "textarea": 2000,
    "table": 3000,
    "budget": 2000,
})
DEFAULT_BUDGET = 2000


def max_output_tokens(
    word_limit: int | None = None,
    character_limit: int | None = None,
    field_type: str | None = None,
    ceiling: int | None = None,
) -> int:
    """
    Derive the max output tokens for a generation call.

    Args:
        word_limit: Field word limit, if declared
        character_limit: Field character limit, if declared (takes precedence)
        field_type: Declared field type, used when no limit is set
        ceiling: Override for the configured MAX_OUTPUT_TOKENS

    Returns:
        Token budget, always >= 1 and <= ceiling
    """
    cap = ceiling if ceiling is not None else get_settings().MAX_OUTPUT_TOKENS

    if character_limit:
        budget = character_limit * TOKENS_PER_CHARACTER
    elif word_limit:
        budget = word_limit * TOKENS_PER_WORD
    else:
        budget = FIELD_TYPE_DEFAULTS.get((field_type or "").lower(), DEFAULT_BUDGET)

    return max(1, min(budget, cap))
