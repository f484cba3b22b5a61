"""Tests for data-fit mapping: fields, documents, prior answers and strategy."""

import json

import pytest

from autoapply.core.data_fit import (
    find_reusable_text,
    map_data,
    relevance_score,
    select_strategy,
    split_profile_fields,
)
from autoapply.core.document_types import effective_document_type, infer_document_type
from autoapply.core.intent_templates import INTENT_TEMPLATES
from autoapply.core.schemas_generation import ConfidenceLevel, MappingStrategy
from autoapply.core.schemas_organization import (
    Document,
    OrganizationProfile,
    PriorApplication,
    to_snake,
)
from autoapply.core.schemas_questions import FieldCategory


# =============================================================================
# Helpers
# =============================================================================


def _intent(category: FieldCategory, question: str = "Question"):
    return INTENT_TEMPLATES[category].to_intent(category, question)


def _long(text: str, times: int = 3) -> str:
    return " ".join([text] * times)


# =============================================================================
# Profile fields
# =============================================================================


class TestSplitProfileFields:
    def test_blank_values_count_as_missing(self):
        profile = OrganizationProfile(name="Acme Corp", mission="   ", ein=None)

        available, missing = split_profile_fields(["name", "mission", "ein"], profile)

        assert available == {"name": "Acme Corp"}
        assert missing == ["mission", "ein"]

    def test_camel_case_field_names_resolve(self):
        profile = OrganizationProfile.model_validate({"problemStatement": "Long travel times"})

        available, _ = split_profile_fields(["problemStatement"], profile)

        assert available == {"problemStatement": "Long travel times"}

    def test_extra_profile_keys_are_readable(self):
        profile = OrganizationProfile.model_validate({"yearFounded": 1998})

        assert profile.get("year_founded") == "1998"

    def test_acronym_field_names_resolve(self):
        profile = OrganizationProfile(ein="12-3456789")

        available, missing = split_profile_fields(["EIN"], profile)

        assert available == {"EIN": "12-3456789"}
        assert missing == []

    @pytest.mark.parametrize(
        "name, expected",
        [("problemStatement", "problem_statement"), ("EIN", "ein"), ("annual_revenue", "annual_revenue")],
    )
    def test_to_snake(self, name, expected):
        assert to_snake(name) == expected

    def test_no_profile_means_everything_missing(self):
        available, missing = split_profile_fields(["name"], None)

        assert available == {}
        assert missing == ["name"]


# =============================================================================
# Strategy and relevance
# =============================================================================


class TestSelectStrategy:
    @pytest.mark.parametrize(
        "available,needed,docs,prior,expected",
        [
            (0, 3, False, False, MappingStrategy.MISSING),
            (0, 3, False, True, MappingStrategy.MISSING),
            (0, 3, True, False, MappingStrategy.ADAPT),
            (1, 3, False, False, MappingStrategy.GENERATE),
            (1, 3, False, True, MappingStrategy.ADAPT),
            (2, 3, False, False, MappingStrategy.GENERATE),
            (3, 3, False, False, MappingStrategy.DIRECT),
            (7, 10, False, False, MappingStrategy.DIRECT),
        ],
    )
    def test_precedence(self, available, needed, docs, prior, expected):
        assert select_strategy(available, needed, docs, prior) == expected

    def test_monotone_in_available_fields(self):
        order = [MappingStrategy.MISSING, MappingStrategy.GENERATE, MappingStrategy.DIRECT]
        ranks = [order.index(select_strategy(n, 4, False, False)) for n in range(5)]

        assert ranks == sorted(ranks)


class TestRelevanceScore:
    def test_field_contribution_is_capped(self):
        assert relevance_score(10, False, False, MappingStrategy.DIRECT) == 90

    def test_documents_and_prior_add_up_and_clamp(self):
        assert relevance_score(4, True, True, MappingStrategy.DIRECT) == 100

    def test_missing_is_capped_at_twenty(self):
        assert relevance_score(0, False, True, MappingStrategy.MISSING) == 20


# =============================================================================
# Documents and prior answers
# =============================================================================


class TestDocumentRelevance:
    def test_declared_type_matches_document_sources(self):
        intent = _intent(FieldCategory.ORGANIZATIONAL_CAPACITY)
        doc = Document(id="d1", name="fy23.pdf", type="financials", parsed_data="Balance sheet")

        mapping = map_data(intent, None, documents=[doc])

        assert mapping.relevant_document_excerpts == ["[fy23.pdf]: Balance sheet"]

    def test_other_type_is_inferred_from_name(self):
        intent = _intent(FieldCategory.ORGANIZATIONAL_CAPACITY)
        doc = Document(id="d1", name="Form 990 2022.pdf", type="other", parsed_data="Return")

        mapping = map_data(intent, None, documents=[doc])

        assert len(mapping.relevant_document_excerpts) == 1

    def test_section_title_in_text_is_relevant(self):
        intent = _intent(FieldCategory.EVALUATION_PLAN)
        doc = Document(
            id="d1", name="notes.txt", parsed_data="Our logic diagram and Evaluation Plan draft."
        )

        mapping = map_data(intent, None, documents=[doc], section_title="Evaluation Plan")

        assert mapping.relevant_document_excerpts
        assert mapping.strategy == MappingStrategy.ADAPT

    def test_financial_documents_count_for_budget_sections(self):
        intent = _intent(FieldCategory.GOALS_OBJECTIVES)
        doc = Document(id="d1", name="budget.xlsx", type="financials", parsed_data="Totals")

        assert not map_data(intent, None, documents=[doc]).relevant_document_excerpts
        assert map_data(intent, None, documents=[doc], budget_section=True).relevant_document_excerpts

    def test_unparsed_documents_are_ignored(self):
        intent = _intent(FieldCategory.ATTACHMENTS)
        doc = Document(id="d1", name="scan.pdf", type="financials", parsed_data=None)

        assert map_data(intent, None, documents=[doc]).relevant_document_excerpts == []

    def test_excerpt_is_truncated(self):
        intent = _intent(FieldCategory.ATTACHMENTS)
        doc = Document(id="d1", name="big.txt", parsed_data="x" * 4000)

        (excerpt,) = map_data(intent, None, documents=[doc]).relevant_document_excerpts

        assert excerpt == "[big.txt]: " + "x" * 1500


class TestFindReusableText:
    def test_narrative_and_keyed_responses(self):
        app = PriorApplication(
            id="a1",
            grant_title="Rural Wellness Fund",
            narrative="Our mission is to bring preventive care to rural families.",
            responses=json.dumps(
                {
                    "mission_statement": _long("We deliver preventive care in rural counties."),
                    "budget": _long("Personnel and travel costs for two clinics."),
                }
            ),
        )

        texts = find_reusable_text(FieldCategory.MISSION_VISION, [app])

        assert len(texts) == 2
        assert texts[0].startswith("[Previous mission_statement]: ")
        assert texts[1].startswith("[Previous: Rural Wellness Fund]: ")

    def test_short_responses_are_skipped(self):
        app = PriorApplication(
            id="a1", grant_title="Fund", responses=json.dumps({"mission": "Too short."})
        )

        assert find_reusable_text(FieldCategory.MISSION_VISION, [app]) == []

    def test_section_id_match_counts(self):
        app = PriorApplication(
            id="a1",
            grant_title="Fund",
            responses=json.dumps({"q7": _long("A response long enough to be reused later on.")}),
        )

        assert find_reusable_text(FieldCategory.OTHER, [app], section_id="q7")
        assert find_reusable_text(FieldCategory.OTHER, [app]) == []

    def test_at_most_three_best_matches(self):
        apps = [
            PriorApplication(
                id=f"a{i}",
                grant_title=f"Fund {i}",
                narrative=("Our mission and purpose. " * (i + 1)),
            )
            for i in range(5)
        ]

        texts = find_reusable_text(FieldCategory.MISSION_VISION, apps)

        assert [t.split("]")[0] for t in texts] == [
            "[Previous: Fund 4",
            "[Previous: Fund 3",
            "[Previous: Fund 2",
        ]

    def test_malformed_responses_json_is_ignored(self):
        app = PriorApplication(id="a1", grant_title="Fund", responses="{not json")

        assert app.parsed_responses() == {}
        assert find_reusable_text(FieldCategory.MISSION_VISION, [app]) == []


# =============================================================================
# map_data
# =============================================================================


class TestMapData:
    def test_all_fields_available_is_direct_and_high(self, full_profile):
        mapping = map_data(_intent(FieldCategory.PROBLEM_NEED), full_profile)

        assert mapping.strategy == MappingStrategy.DIRECT
        assert mapping.confidence == ConfidenceLevel.HIGH
        assert mapping.relevance_score == 60
        assert set(mapping.relevant_data) == {"problem_statement", "target_market"}
        assert mapping.missing_fields == []
        assert mapping.notes is None

    def test_partial_fields_without_support_is_generate(self, full_profile):
        mapping = map_data(_intent(FieldCategory.ORGANIZATIONAL_CAPACITY), full_profile)

        assert mapping.strategy == MappingStrategy.GENERATE
        assert mapping.confidence == ConfidenceLevel.MEDIUM
        assert mapping.missing_fields == ["previous_funding"]
        assert mapping.notes == "Missing data for: previous_funding"

    def test_empty_profile_is_missing_and_capped(self):
        mapping = map_data(_intent(FieldCategory.PROBLEM_NEED), OrganizationProfile())

        assert mapping.strategy == MappingStrategy.MISSING
        assert mapping.relevance_score == 20
        assert mapping.confidence == ConfidenceLevel.LOW

    def test_documents_upgrade_confidence(self, full_profile):
        intent = _intent(FieldCategory.ORGANIZATIONAL_CAPACITY)
        doc = Document(id="d1", name="fy23.pdf", type="financials", parsed_data="Balance sheet")

        mapping = map_data(intent, full_profile, documents=[doc])

        assert mapping.confidence == ConfidenceLevel.HIGH
        assert mapping.strategy == MappingStrategy.ADAPT
        assert mapping.relevance_score == 80

    def test_prior_answer_sets_high_confidence(self, user_context):
        intent = _intent(FieldCategory.PROBLEM_NEED)
        sparse = OrganizationProfile(problem_statement="Long travel times")

        mapping = map_data(
            intent, sparse, prior_applications=user_context.previous_applications
        )

        assert mapping.confidence == ConfidenceLevel.HIGH
        assert mapping.strategy == MappingStrategy.ADAPT
        assert mapping.reusable_text[0].startswith("[Previous need_statement]: ")
        assert mapping.relevance_score == 70


class TestDocumentTypes:
    @pytest.mark.parametrize(
        "name,content,expected",
        [
            ("Form 990.pdf", None, "990"),
            ("report.pdf", "Report of the Independent Auditor", "audit"),
            ("q3.pdf", "Balance sheet as of June 30", "financials"),
            ("jane_resume.pdf", None, "resume"),
            ("deck.pdf", None, "pitch_deck"),
            ("letter.pdf", "We are proud to support this work", "letters_of_support"),
            ("budget.xlsx", None, "budget_template"),
            ("notes.txt", "Our theory of change", "logic_model"),
            ("2023 annual report.pdf", None, "annual_report"),
            ("photo.png", None, "other"),
        ],
    )
    def test_infer_document_type(self, name, content, expected):
        assert infer_document_type(name, content) == expected

    def test_declared_type_wins_unless_other(self):
        assert effective_document_type("resume", "Form 990.pdf", None) == "resume"
        assert effective_document_type("other", "Form 990.pdf", None) == "990"
        assert effective_document_type("", "Form 990.pdf", None) == "990"
