"""LLM client utilities: the text-generation interface and JSON output parsing."""

import asyncio
import json
import re
import time
from typing import Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel

from autoapply.core.config import get_settings
from autoapply.core.errors import GenerationError
from autoapply.core.llm_usage import log_llm_usage
from autoapply.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T", bound=BaseModel)

GRANT_WRITER_SYSTEM = (
    "You are an expert grant writer with 30+ years of success securing funding "
    "for nonprofits, startups and research teams."
)


@runtime_checkable
class TextGenerator(Protocol):
    """Opaque text-generation capability consumed by the engine.

    Implementations raise GenerationError on failure instead of returning
    partial output.
    """

    async def generate(self, prompt: str, max_output_units: int) -> str: ...


class AnthropicTextGenerator:
    """TextGenerator backed by the Anthropic messages API."""

    def __init__(
        self,
        api_key: str,
        model: str,
        temperature: float = 0.4,
        system: str | None = GRANT_WRITER_SYSTEM,
        workflow: str = "auto_apply",
    ):
        from anthropic import AsyncAnthropic

        self.model = model
        self.temperature = temperature
        self.system = system
        self.workflow = workflow
        self._client = AsyncAnthropic(api_key=api_key)

    async def generate(self, prompt: str, max_output_units: int) -> str:
        kwargs: dict = {
            "model": self.model,
            "max_tokens": max_output_units,
            "temperature": self.temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if self.system:
            kwargs["system"] = self.system

        start = time.monotonic()
        try:
            response = await self._client.messages.create(**kwargs)
        except Exception as e:
            raise GenerationError(f"Anthropic call failed: {e}", model=self.model) from e

        duration_ms = int((time.monotonic() - start) * 1000)
        usage = getattr(response, "usage", None)
        if usage is not None:
            log_llm_usage(
                workflow=self.workflow,
                model=self.model,
                provider="anthropic",
                tokens_input=getattr(usage, "input_tokens", 0) or 0,
                tokens_output=getattr(usage, "output_tokens", 0) or 0,
                duration_ms=duration_ms,
                tokens_cache_read=getattr(usage, "cache_read_input_tokens", 0) or 0,
            )

        text = "".join(
            block.text for block in (response.content or []) if getattr(block, "text", None)
        )
        if not text.strip():
            raise GenerationError("Model returned no text", model=self.model)
        return text


def get_text_generator(model: str | None = None) -> TextGenerator | None:
    """
    Get the configured text generator.

    Args:
        model: Model name override (defaults to GENERATION_MODEL)

    Returns:
        AnthropicTextGenerator, or None when no API key is configured
    """
    settings = get_settings()
    if not settings.ANTHROPIC_API_KEY:
        logger.warning("No Anthropic API key configured; model-backed steps will fall back")
        return None

    return AnthropicTextGenerator(
        api_key=settings.ANTHROPIC_API_KEY,
        model=model or settings.GENERATION_MODEL,
        temperature=settings.GENERATION_TEMPERATURE,
    )


async def generate_with_timeout(
    generator: TextGenerator,
    prompt: str,
    max_output_units: int,
    timeout: float | None = None,
) -> str:
    """
    Call the generator once, bounded by a timeout.

    Args:
        generator: Text generator to call
        prompt: Prompt text
        max_output_units: Output token budget
        timeout: Seconds before giving up (defaults to GENERATION_TIMEOUT_SECONDS)

    Returns:
        Generated text

    Raises:
        GenerationError: On timeout, on generator failure, or on empty output
    """
    limit = timeout if timeout is not None else get_settings().GENERATION_TIMEOUT_SECONDS
    try:
        text = await asyncio.wait_for(generator.generate(prompt, max_output_units), timeout=limit)
    except TimeoutError as e:
        raise GenerationError(f"Generation timed out after {limit}s") from e
    except GenerationError:
        raise
    except Exception as e:
        raise GenerationError(f"Generation failed: {e}") from e

    if not text or not text.strip():
        raise GenerationError("Generator returned empty output")
    return text


def _strip_llm_fences(raw_output: str) -> str:
    """Strip markdown code fences from LLM output.

    Handles: ```json ... ```, ``` ... ```, leading/trailing whitespace.
    """
    cleaned = raw_output.strip()

    fence_match = re.search(r"```(?:json)?\s*\n?(.*?)```", cleaned, re.DOTALL)
    if fence_match:
        return fence_match.group(1).strip()

    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    elif cleaned.startswith("```"):
        cleaned = cleaned[3:]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]
    return cleaned.strip()


def _extract_json_block(cleaned: str) -> str:
    """Return the outermost JSON object or array when prose surrounds it."""
    if cleaned[:1] in ("{", "["):
        return cleaned
    match = re.search(r"(\{.*\}|\[.*\])", cleaned, re.DOTALL)
    return match.group(1) if match else cleaned


def parse_llm_json(raw_output: str, model: type[T]) -> T:
    """
    Parse LLM output as JSON and validate against a Pydantic model.

    Args:
        raw_output: Raw string from LLM response
        model: Pydantic model class to validate against

    Returns:
        Validated Pydantic model instance

    Raises:
        json.JSONDecodeError: If JSON parsing fails after cleanup
        pydantic.ValidationError: If parsed JSON doesn't match schema
    """
    cleaned = _extract_json_block(_strip_llm_fences(raw_output))
    parsed = json.loads(cleaned)
    return model.model_validate(parsed)


def parse_llm_json_dict(raw_output: str) -> dict:
    """
    Parse LLM output as a JSON object, returning a raw dict.

    Raises:
        json.JSONDecodeError: If JSON parsing fails after cleanup
        ValueError: If the JSON is not an object
    """
    cleaned = _extract_json_block(_strip_llm_fences(raw_output))
    parsed = json.loads(cleaned)
    if not isinstance(parsed, dict):
        raise ValueError(f"Expected a JSON object, got {type(parsed).__name__}")
    return parsed


def parse_llm_json_list(raw_output: str) -> list:
    """Parse LLM output as a JSON array.

    Raises:
        json.JSONDecodeError: If JSON parsing fails after cleanup
        ValueError: If the JSON is not an array
    """
    cleaned = _extract_json_block(_strip_llm_fences(raw_output))
    parsed = json.loads(cleaned)
    if not isinstance(parsed, list):
        raise ValueError(f"Expected a JSON array, got {type(parsed).__name__}")
    return parsed
