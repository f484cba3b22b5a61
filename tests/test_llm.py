"""Tests for the text-generation client and LLM output parsing."""

import json
from types import SimpleNamespace

import pytest
from pydantic import BaseModel

from autoapply.core.config import get_settings
from autoapply.core.errors import GenerationError
from autoapply.core.llm import (
    AnthropicTextGenerator,
    TextGenerator,
    generate_with_timeout,
    get_text_generator,
    parse_llm_json,
    parse_llm_json_dict,
    parse_llm_json_list,
)
from autoapply.core.llm_usage import estimate_cost, log_llm_usage, pricing_for
from tests.fakes.fake_generator import FakeTextGenerator


# =============================================================================
# Helpers
# =============================================================================


class _Verdict(BaseModel):
    category: str
    confidence: float = 0.0


class _FakeMessages:
    def __init__(self, response=None, error: Exception | None = None):
        self.response = response
        self.error = error
        self.calls: list[dict] = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.response


def _message(text: str = "Drafted text.") -> SimpleNamespace:
    return SimpleNamespace(
        content=[SimpleNamespace(type="text", text=text)],
        usage=SimpleNamespace(input_tokens=120, output_tokens=40, cache_read_input_tokens=0),
    )


@pytest.fixture
def fake_anthropic(monkeypatch):
    """Replace AsyncAnthropic with a client whose messages.create is scripted."""
    messages = _FakeMessages(response=_message())

    class _FakeClient:
        def __init__(self, api_key: str):
            self.api_key = api_key
            self.messages = messages

    monkeypatch.setattr("anthropic.AsyncAnthropic", _FakeClient)
    return messages


# =============================================================================
# Parsing
# =============================================================================


class TestParseLlmJson:
    def test_fenced_object(self):
        raw = '```json\n{"category": "budget_summary", "confidence": 0.9}\n```'

        assert parse_llm_json_dict(raw) == {"category": "budget_summary", "confidence": 0.9}

    def test_object_wrapped_in_prose(self):
        raw = 'Sure! Here is the analysis: {"category": "other"} Let me know.'

        assert parse_llm_json_dict(raw) == {"category": "other"}

    def test_array_is_not_an_object(self):
        with pytest.raises(ValueError, match="JSON object"):
            parse_llm_json_dict("[1, 2]")

    def test_invalid_json_raises(self):
        with pytest.raises(json.JSONDecodeError):
            parse_llm_json_dict("not json at all")

    def test_list(self):
        raw = '```\n[{"id": "a"}, {"id": "b"}]\n```'

        assert parse_llm_json_list(raw) == [{"id": "a"}, {"id": "b"}]

    def test_object_is_not_a_list(self):
        with pytest.raises(ValueError, match="JSON array"):
            parse_llm_json_list('{"id": "a"}')

    def test_validates_against_model(self):
        verdict = parse_llm_json('{"category": "mission_vision", "confidence": 0.75}', _Verdict)

        assert verdict == _Verdict(category="mission_vision", confidence=0.75)


# =============================================================================
# generate_with_timeout
# =============================================================================


class TestGenerateWithTimeout:
    @pytest.mark.asyncio
    async def test_returns_text_and_passes_budget(self):
        generator = FakeTextGenerator("Answer")

        assert await generate_with_timeout(generator, "prompt", 321) == "Answer"
        assert generator.calls == [("prompt", 321)]

    @pytest.mark.asyncio
    async def test_empty_output_is_an_error(self):
        with pytest.raises(GenerationError, match="empty output"):
            await generate_with_timeout(FakeTextGenerator("   "), "prompt", 10)

    @pytest.mark.asyncio
    async def test_foreign_errors_are_wrapped(self):
        generator = FakeTextGenerator(ConnectionError("reset by peer"))

        with pytest.raises(GenerationError, match="reset by peer"):
            await generate_with_timeout(generator, "prompt", 10)

    @pytest.mark.asyncio
    async def test_timeout(self):
        generator = FakeTextGenerator("late", delay=0.5)

        with pytest.raises(GenerationError, match="timed out"):
            await generate_with_timeout(generator, "prompt", 10, timeout=0.01)

    def test_fake_satisfies_protocol(self):
        assert isinstance(FakeTextGenerator(), TextGenerator)


# =============================================================================
# Anthropic generator
# =============================================================================


class TestAnthropicTextGenerator:
    @pytest.mark.asyncio
    async def test_sends_prompt_and_returns_text(self, fake_anthropic):
        generator = AnthropicTextGenerator(api_key="sk-test", model="claude-sonnet-4-20250514")

        text = await generator.generate("Write the need statement", 750)

        assert text == "Drafted text."
        (call,) = fake_anthropic.calls
        assert call["model"] == "claude-sonnet-4-20250514"
        assert call["max_tokens"] == 750
        assert call["messages"] == [{"role": "user", "content": "Write the need statement"}]
        assert "grant writer" in call["system"]

    @pytest.mark.asyncio
    async def test_no_system_prompt(self, fake_anthropic):
        generator = AnthropicTextGenerator(api_key="sk-test", model="m", system=None)

        await generator.generate("prompt", 10)

        assert "system" not in fake_anthropic.calls[0]

    @pytest.mark.asyncio
    async def test_api_error_becomes_generation_error(self, fake_anthropic):
        fake_anthropic.error = RuntimeError("overloaded")
        generator = AnthropicTextGenerator(api_key="sk-test", model="m")

        with pytest.raises(GenerationError, match="overloaded") as exc_info:
            await generator.generate("prompt", 10)

        assert exc_info.value.model == "m"

    @pytest.mark.asyncio
    async def test_blank_reply_is_an_error(self, fake_anthropic):
        fake_anthropic.response = _message("  ")
        generator = AnthropicTextGenerator(api_key="sk-test", model="m")

        with pytest.raises(GenerationError, match="no text"):
            await generator.generate("prompt", 10)


class TestGetTextGenerator:
    def test_none_without_api_key(self):
        assert get_text_generator() is None

    def test_configured_from_settings(self, monkeypatch, fake_anthropic):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")
        get_settings.cache_clear()
        try:
            generator = get_text_generator()
        finally:
            get_settings.cache_clear()

        assert isinstance(generator, AnthropicTextGenerator)
        assert generator.model == "claude-sonnet-4-20250514"
        assert generator.temperature == 0.4


# =============================================================================
# Usage accounting
# =============================================================================


class TestUsageLogging:
    def test_cost_from_pricing_table(self):
        assert estimate_cost("claude-sonnet-4-20250514", 1_000_000, 0) == 3.0

    def test_cache_reads_are_discounted(self):
        assert estimate_cost("claude-sonnet-4-20250514", 1_000_000, 0, 1_000_000) == 0.3

    def test_dated_release_resolves_to_longest_family(self):
        assert pricing_for("claude-haiku-4-5-20251001") == (0.80, 4.0)
        assert pricing_for("claude-sonnet-4-5-20250929") == (3.0, 15.0)
        assert pricing_for("gpt-4o") is None

    def test_unknown_model_costs_nothing(self):
        assert estimate_cost("mystery-model", 1000, 1000) == 0.0

    def test_log_returns_cost(self):
        cost = log_llm_usage("auto_apply", "claude-haiku-4-5-20251001", "anthropic", 1_000_000, 0)

        assert cost == 0.8
