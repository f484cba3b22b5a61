"""Tests for per-field draft generation across the four generation modes."""

import pytest

from autoapply.chains.generate_section import (
    confidence_score,
    generate_section,
    resolve_generation_mode,
)
from autoapply.core.config import get_settings
from autoapply.core.data_fit import map_data
from autoapply.core.intent_templates import INTENT_TEMPLATES
from autoapply.core.schemas_generation import (
    DataFitMapping,
    GenerationMode,
    MappingStrategy,
    QualityLevel,
)
from autoapply.core.schemas_organization import OrganizationProfile
from autoapply.core.schemas_questions import FieldCategory, FieldMeta
from tests.fakes.fake_generator import FakeTextGenerator, failing_generator


# =============================================================================
# Helpers
# =============================================================================

DRAFT = "Our clinic served 1,200 families in 2023 and reduced emergency visits by 18%."
SETTING_OPTIONS = ["Urban", "Rural", "Suburban"]


def _intent(category: FieldCategory, question: str = "Question"):
    return INTENT_TEMPLATES[category].to_intent(category, question)


def _mapping(strategy=MappingStrategy.DIRECT, relevance=45, **data) -> DataFitMapping:
    return DataFitMapping(
        available_fields=list(data),
        relevant_data=dict(data),
        strategy=strategy,
        relevance_score=relevance,
    )


@pytest.fixture
def short_timeout(monkeypatch):
    monkeypatch.setenv("GENERATION_TIMEOUT_SECONDS", "0.01")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# =============================================================================
# Mode resolution and confidence
# =============================================================================


class TestResolveGenerationMode:
    def test_direct_strategy_wins_over_select(self):
        intent = _intent(FieldCategory.ORGANIZATION_IDENTITY)

        mode = resolve_generation_mode(intent, _mapping(), "select", ["A", "B"])

        assert mode == GenerationMode.DIRECT_FILL

    def test_select_with_options(self):
        intent = _intent(FieldCategory.TARGET_POPULATION)

        mode = resolve_generation_mode(intent, _mapping(MappingStrategy.MISSING, 0), "Select", ["A"])

        assert mode == GenerationMode.SELECT

    def test_select_without_options_composes(self):
        intent = _intent(FieldCategory.TARGET_POPULATION)

        assert resolve_generation_mode(intent, _mapping(), "select", []) == GenerationMode.COMPOSE

    def test_missing_data_needs_input(self):
        intent = _intent(FieldCategory.EVALUATION_PLAN)

        mode = resolve_generation_mode(intent, _mapping(MappingStrategy.MISSING, 0))

        assert mode == GenerationMode.NEEDS_INPUT

    @pytest.mark.parametrize(
        "strategy", [MappingStrategy.DIRECT, MappingStrategy.ADAPT, MappingStrategy.GENERATE]
    )
    def test_otherwise_composes(self, strategy):
        intent = _intent(FieldCategory.PROBLEM_NEED)

        assert resolve_generation_mode(intent, _mapping(strategy)) == GenerationMode.COMPOSE


class TestConfidenceScore:
    @pytest.mark.parametrize(
        "relevance,strategy,words,limit,expected",
        [
            (60, MappingStrategy.DIRECT, 200, 250, 70),
            (60, MappingStrategy.DIRECT, 100, 250, 45),
            (60, MappingStrategy.DIRECT, 300, 250, 60),
            (60, MappingStrategy.DIRECT, 400, 250, 50),
            (60, MappingStrategy.GENERATE, 120, None, 40),
            (20, MappingStrategy.MISSING, 200, 250, 25),
            (5, MappingStrategy.GENERATE, 10, 250, 0),
            (95, MappingStrategy.ADAPT, 240, 250, 100),
        ],
    )
    def test_formula(self, relevance, strategy, words, limit, expected):
        mapping = _mapping(strategy, relevance)

        assert confidence_score(mapping, words, limit) == expected


# =============================================================================
# Direct fill
# =============================================================================


class TestDirectFill:
    @pytest.mark.asyncio
    async def test_copies_profile_value(self, foundation_grant, full_profile):
        intent = _intent(FieldCategory.ORGANIZATION_IDENTITY, "Organization name (legal name)")
        mapping = map_data(intent, full_profile)
        generator = FakeTextGenerator("should not be called")

        response = await generate_section(
            intent, mapping, foundation_grant, generator, field_id="legal-name"
        )

        assert response.field_id == "legal-name"
        assert response.content == "Acme Corp"
        assert response.sources == ["name"]
        assert not response.ai_generated
        assert response.quality.score == 95
        assert response.quality.level == QualityLevel.EXCELLENT
        assert response.mode == GenerationMode.DIRECT_FILL
        assert response.confidence_score == 75
        assert not response.needs_review
        assert generator.call_count == 0

    @pytest.mark.asyncio
    async def test_repeat_fill_is_identical(self, foundation_grant, full_profile):
        intent = _intent(FieldCategory.ORGANIZATION_IDENTITY, "Organization name (legal name)")
        mapping = map_data(intent, full_profile)

        first = await generate_section(intent, mapping, foundation_grant)
        second = await generate_section(intent, mapping, foundation_grant)

        assert first.content == second.content
        assert first.quality == second.quality

    @pytest.mark.asyncio
    async def test_missing_value_asks_for_input(self, foundation_grant):
        intent = _intent(FieldCategory.ORGANIZATION_IDENTITY, "Organization name (legal name)")
        mapping = map_data(intent, OrganizationProfile())

        response = await generate_section(intent, mapping, foundation_grant)

        assert response.content == ""
        assert response.needs_user_input
        assert response.needs_review
        assert response.review_prompt == "Please provide your organization identity"
        assert response.quality.has_issue("MISSING_PROFILE_DATA")
        assert not response.quality.is_valid
        assert response.confidence_score == 0


# =============================================================================
# Select
# =============================================================================


class TestSelect:
    @pytest.mark.asyncio
    async def test_keyword_overlap_picks_option(self, foundation_grant):
        intent = _intent(FieldCategory.TARGET_POPULATION)
        mapping = _mapping(target_market="1,200 low-income rural families")
        generator = FakeTextGenerator("Urban")

        response = await generate_section(
            intent,
            mapping,
            foundation_grant,
            generator,
            meta=FieldMeta(field_type="select", options=SETTING_OPTIONS),
        )

        assert response.content == "Rural"
        assert response.quality.score == 85
        assert not response.needs_review
        assert generator.call_count == 0

    @pytest.mark.asyncio
    async def test_model_answer_must_name_an_option(self, foundation_grant):
        intent = _intent(FieldCategory.TARGET_POPULATION, "Service area setting")
        generator = FakeTextGenerator('"suburban"')

        response = await generate_section(
            intent,
            _mapping(MappingStrategy.MISSING, 0),
            foundation_grant,
            generator,
            meta=FieldMeta(field_type="select", options=SETTING_OPTIONS),
        )

        assert response.content == "Suburban"
        assert response.ai_generated
        assert response.quality.score == 70
        assert response.needs_review
        assert response.review_prompt == "Please verify this selection is correct"
        assert "3. Suburban" in generator.prompts[0]

    @pytest.mark.asyncio
    async def test_undetermined_falls_back_to_first_option(self, foundation_grant):
        intent = _intent(FieldCategory.TARGET_POPULATION)
        generator = FakeTextGenerator("Downtown")

        response = await generate_section(
            intent,
            _mapping(MappingStrategy.MISSING, 0),
            foundation_grant,
            generator,
            meta=FieldMeta(field_type="select", options=SETTING_OPTIONS),
        )

        assert response.content == "Urban"
        assert response.quality.score == 30
        assert response.quality.has_issue("OPTION_UNDETERMINED")
        assert response.review_prompt == "Please select the correct option"


# =============================================================================
# Needs input
# =============================================================================


class TestNeedsInput:
    @pytest.mark.asyncio
    async def test_no_data_skips_model(self, foundation_grant):
        question = "How will you measure success? Describe your evaluation metrics and indicators."
        intent = _intent(FieldCategory.EVALUATION_PLAN, question)
        mapping = map_data(intent, OrganizationProfile())
        generator = FakeTextGenerator(DRAFT)

        response = await generate_section(intent, mapping, foundation_grant, generator)

        assert mapping.strategy == MappingStrategy.MISSING
        assert response.mode == GenerationMode.NEEDS_INPUT
        assert response.content == ""
        assert response.needs_user_input
        assert response.review_prompt == f"Please provide: {question}"
        assert response.quality.has_issue("MISSING_INFORMATION")
        assert generator.call_count == 0

    @pytest.mark.asyncio
    async def test_lists_missing_fields(self, foundation_grant):
        intent = _intent(FieldCategory.PROBLEM_NEED)
        mapping = map_data(intent, OrganizationProfile())

        response = await generate_section(intent, mapping, foundation_grant)

        assert response.review_prompt == (
            "To improve this section, please provide: problem_statement, target_market"
        )


# =============================================================================
# Compose
# =============================================================================


class TestCompose:
    @pytest.mark.asyncio
    async def test_generates_cleans_and_scores(self, foundation_grant, full_profile):
        intent = _intent(FieldCategory.PROBLEM_NEED, "What problem will this solve?")
        mapping = map_data(intent, full_profile)
        generator = FakeTextGenerator(f"Here is a draft response: {DRAFT}")

        response = await generate_section(
            intent,
            mapping,
            foundation_grant,
            generator,
            question="What problem will this solve?",
            meta=FieldMeta(word_limit=250),
            field_id="need",
        )

        assert response.content == DRAFT
        assert response.mode == GenerationMode.COMPOSE
        assert response.ai_generated
        assert response.sources == ["problem_statement", "target_market"]
        assert response.quality.has_issue("TOO_SHORT")
        assert response.quality.level == QualityLevel.GOOD
        assert response.review_prompt is None
        assert not response.needs_review
        assert response.confidence_score == 45
        assert generator.calls[0][1] == 750
        assert '## THE QUESTION\n"What problem will this solve?"' in generator.prompts[0]

    @pytest.mark.asyncio
    async def test_flawed_draft_is_flagged_for_review(self, foundation_grant, full_profile):
        intent = _intent(FieldCategory.PROBLEM_NEED)
        mapping = map_data(intent, full_profile)
        generator = FakeTextGenerator("We will serve [insert number] families next year.")

        response = await generate_section(intent, mapping, foundation_grant, generator)

        assert not response.quality.is_valid
        assert response.needs_review
        assert response.review_prompt.startswith("This response missing data placeholder")

    @pytest.mark.asyncio
    async def test_generator_failure_degrades(self, foundation_grant, full_profile):
        intent = _intent(FieldCategory.PROBLEM_NEED)
        mapping = map_data(intent, full_profile)

        response = await generate_section(
            intent, mapping, foundation_grant, failing_generator(), question="Describe the need"
        )

        assert response.content == ""
        assert response.needs_user_input
        assert response.needs_review
        assert response.review_prompt == "Please provide: Describe the need"
        assert response.quality.has_issue("GENERATION_FAILED")
        assert response.confidence_score == 0

    @pytest.mark.asyncio
    async def test_timeout_degrades(self, short_timeout, foundation_grant, full_profile):
        intent = _intent(FieldCategory.PROBLEM_NEED)
        mapping = map_data(intent, full_profile)
        generator = FakeTextGenerator(DRAFT, delay=0.5)

        response = await generate_section(intent, mapping, foundation_grant, generator)

        assert response.content == ""
        assert response.quality.has_issue("GENERATION_FAILED")
        assert "timed out" in response.quality.issues[0].message

    @pytest.mark.asyncio
    async def test_without_generator_degrades(self, foundation_grant, full_profile):
        intent = _intent(FieldCategory.PROBLEM_NEED)
        mapping = map_data(intent, full_profile)

        response = await generate_section(intent, mapping, foundation_grant)

        assert response.needs_user_input
        assert response.quality.has_issue("GENERATION_FAILED")

    @pytest.mark.asyncio
    async def test_custom_instructions_reach_the_prompt(self, foundation_grant, full_profile):
        intent = _intent(FieldCategory.PROBLEM_NEED)
        mapping = map_data(intent, full_profile)
        generator = FakeTextGenerator(DRAFT)

        await generate_section(
            intent,
            mapping,
            foundation_grant,
            generator,
            custom_instructions="Lead with the 40-mile drive.",
        )

        assert "Lead with the 40-mile drive." in generator.prompts[0]
