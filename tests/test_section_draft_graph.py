"""Tests for the section draft graph."""

import json

import pytest

from autoapply.core.intent_templates import INTENT_TEMPLATES
from autoapply.core.schemas_application import ApplicationSection, SectionType
from autoapply.core.schemas_generation import GeneratedResponse, GenerationMode, MappingStrategy
from autoapply.core.schemas_questions import FieldCategory
from autoapply.core.validation_engine import fixed_quality_result
from autoapply.graphs.section_draft_graph import (
    MAX_STEPS,
    SectionDraftState,
    finalize,
    merge_related_fields,
    run_section_draft,
)
from tests.fakes.fake_generator import FakeTextGenerator

DRAFT = "Our clinic served 1,200 families in 2023 and reduced emergency visits by 18%."


class TestRunSectionDraft:
    @pytest.mark.asyncio
    async def test_identity_section_fills_from_profile(self, foundation_grant, user_context):
        section = ApplicationSection(
            id="organization_name",
            type=SectionType.SHORT_ANSWER,
            title="Organization Name",
            instructions="Legal name of your organization.",
            related_profile_fields=["name"],
        )
        generator = FakeTextGenerator(DRAFT)

        result = await run_section_draft(section, foundation_grant, user_context, generator)

        assert result.section_id == "organization_name"
        assert result.intent.category == FieldCategory.ORGANIZATION_IDENTITY
        assert result.response.content == "Acme Corp"
        assert result.response.mode == GenerationMode.DIRECT_FILL
        assert result.response.field_id == "organization_name"
        assert generator.call_count == 0

    @pytest.mark.asyncio
    async def test_model_classifies_then_composes(self, foundation_grant, user_context):
        section = ApplicationSection(
            id="statement_of_need",
            title="Statement of Need",
            instructions="Explain the problem you are addressing and why it matters.",
            related_profile_fields=["problem_statement", "annualRevenue"],
        )
        generator = FakeTextGenerator(json.dumps({"category": "problem_need"}), DRAFT)

        result = await run_section_draft(section, foundation_grant, user_context, generator)

        assert generator.call_count == 2
        assert result.intent.category == FieldCategory.PROBLEM_NEED
        assert result.intent.data_needed == [
            "problem_statement",
            "target_market",
            "annual_revenue",
        ]
        assert "annual_revenue" in result.mapping.available_fields
        assert result.response.content == DRAFT
        assert result.response.ai_generated
        assert "Statement of Need" in generator.prompts[1]

    @pytest.mark.asyncio
    async def test_budget_section_uses_financial_documents(self, foundation_grant, user_context):
        section = ApplicationSection(
            id="budget_request",
            type=SectionType.BUDGET,
            title="Budget and Request",
            instructions="Provide a budget summary and explain how funds will be used.",
        )

        result = await run_section_draft(section, foundation_grant, user_context)

        assert result.intent.category == FieldCategory.BUDGET_SUMMARY
        assert result.mapping.relevant_document_excerpts[0].startswith(
            "[2023 Audited Financials.pdf]: "
        )
        assert result.response.needs_user_input

    @pytest.mark.asyncio
    async def test_empty_context_needs_input(self, foundation_grant, empty_context):
        section = ApplicationSection(id="need", title="What problem will this solve?")

        result = await run_section_draft(section, foundation_grant, empty_context)

        assert result.mapping.strategy == MappingStrategy.MISSING
        assert result.response.content == ""
        assert result.response.needs_user_input


class TestMergeRelatedFields:
    def test_appends_new_fields_in_snake_case(self):
        intent = INTENT_TEMPLATES[FieldCategory.PROBLEM_NEED].to_intent(
            FieldCategory.PROBLEM_NEED, "Q"
        )

        merged = merge_related_fields(intent, ["targetMarket", "teamSize"])

        assert merged.data_needed == ["problem_statement", "target_market", "team_size"]

    def test_unchanged_intent_is_returned_as_is(self):
        intent = INTENT_TEMPLATES[FieldCategory.PROBLEM_NEED].to_intent(
            FieldCategory.PROBLEM_NEED, "Q"
        )

        assert merge_related_fields(intent, ["problem_statement"]) is intent


class TestFinalize:
    def _state(self, foundation_grant, empty_context, **kwargs) -> SectionDraftState:
        return SectionDraftState(
            section=ApplicationSection(id="s1", title="Section"),
            grant=foundation_grant,
            user_context=empty_context,
            **kwargs,
        )

    def test_empty_draft_is_flagged_for_input(self, foundation_grant, empty_context):
        response = GeneratedResponse(quality=fixed_quality_result(0), confidence_score=40)
        state = self._state(foundation_grant, empty_context, response=response)

        update = finalize(state)

        assert update["response"].needs_user_input
        assert update["response"].needs_review
        assert update["response"].confidence_score == 0
        assert update["notes"] == ["Empty draft flagged for user input"]

    def test_step_limit(self, foundation_grant, empty_context):
        response = GeneratedResponse(quality=fixed_quality_result(0))
        state = self._state(
            foundation_grant, empty_context, response=response, step_count=MAX_STEPS
        )

        with pytest.raises(RuntimeError, match="max steps"):
            finalize(state)
