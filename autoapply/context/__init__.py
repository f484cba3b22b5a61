"""Prompt context for section drafting.

This module provides:
- Generation prompt assembly from intent, data fit and funder tone
- Output token budgeting from field limits and types
"""

from autoapply.context.prompt_builder import (
    STRATEGY_INSTRUCTIONS,
    build_generation_prompt,
    format_field_name,
)
from autoapply.context.token_budget import FIELD_TYPE_DEFAULTS, max_output_tokens

__all__ = [
    "FIELD_TYPE_DEFAULTS",
    "STRATEGY_INSTRUCTIONS",
    "build_generation_prompt",
    "format_field_name",
    "max_output_tokens",
]
