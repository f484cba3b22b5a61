"""Pydantic models for questions and their resolved intent.

A question is classified into exactly one FieldCategory; the category resolves
to a QuestionIntent describing what a strong answer needs and how to produce it.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# =============================================================================
# Enums
# =============================================================================


class FieldCategory(str, Enum):
    """Closed taxonomy of what a grant question is really asking."""

    ORGANIZATION_IDENTITY = "organization_identity"
    ORGANIZATION_BACKGROUND = "organization_background"
    MISSION_VISION = "mission_vision"
    PROBLEM_NEED = "problem_need"
    SOLUTION_APPROACH = "solution_approach"
    TARGET_POPULATION = "target_population"
    GEOGRAPHIC_SCOPE = "geographic_scope"
    PROJECT_DESCRIPTION = "project_description"
    GOALS_OBJECTIVES = "goals_objectives"
    ACTIVITIES_TIMELINE = "activities_timeline"
    OUTCOMES_IMPACT = "outcomes_impact"
    EVALUATION_PLAN = "evaluation_plan"
    TEAM_QUALIFICATIONS = "team_qualifications"
    ORGANIZATIONAL_CAPACITY = "organizational_capacity"
    PARTNERSHIPS = "partnerships"
    BUDGET_SUMMARY = "budget_summary"
    BUDGET_LINE_ITEMS = "budget_line_items"
    BUDGET_JUSTIFICATION = "budget_justification"
    SUSTAINABILITY = "sustainability"
    DIVERSIFIED_FUNDING = "diversified_funding"
    MATCHING_FUNDS = "matching_funds"
    FINANCIAL_HEALTH = "financial_health"
    INNOVATION = "innovation"
    COMMERCIALIZATION = "commercialization"
    INTELLECTUAL_PROPERTY = "intellectual_property"
    RISK_MITIGATION = "risk_mitigation"
    CONTACT_INFO = "contact_info"
    CERTIFICATIONS = "certifications"
    ATTACHMENTS = "attachments"
    REFERENCES = "references"
    OTHER = "other"

    @property
    def label(self) -> str:
        """Human-readable form, e.g. 'problem need'."""
        return self.value.replace("_", " ")


class ResponseStrategy(str, Enum):
    """How an answer to a question is produced."""

    DIRECT = "direct"  # copy a profile value verbatim
    SYNTHESIZE = "synthesize"  # compose from profile data
    GENERATE = "generate"  # write from scratch around the data
    EXTRACT = "extract"  # pull from uploaded documents


def coerce_category(value: object) -> FieldCategory:
    """Map any value onto the taxonomy; unknown values become OTHER."""
    if isinstance(value, FieldCategory):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower().replace("-", "_").replace(" ", "_")
        try:
            return FieldCategory(normalized)
        except ValueError:
            return FieldCategory.OTHER
    return FieldCategory.OTHER


def coerce_strategy(value: object) -> ResponseStrategy:
    """Map any value onto ResponseStrategy; unknown values become GENERATE."""
    if isinstance(value, ResponseStrategy):
        return value
    if isinstance(value, str):
        try:
            return ResponseStrategy(value.strip().lower())
        except ValueError:
            return ResponseStrategy.GENERATE
    return ResponseStrategy.GENERATE


# =============================================================================
# Questions
# =============================================================================


class FieldMeta(BaseModel):
    """Optional metadata declared by the application form for one field."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    field_type: str | None = Field(default=None, description="text, textarea, select, table, budget, ...")
    options: list[str] = Field(default_factory=list)
    word_limit: int | None = None
    character_limit: int | None = None
    placeholder: str | None = None
    help_text: str | None = None
    required: bool = False


class Question(BaseModel):
    """Raw question text plus optional field metadata."""

    model_config = ConfigDict(frozen=True)

    text: str
    meta: FieldMeta | None = None


class QuestionIntent(BaseModel):
    """What a strong answer to a question needs, and how to produce it."""

    model_config = ConfigDict(frozen=True)

    category: FieldCategory
    sub_category: str | None = None
    core_question: str = Field(..., description="Plain-language restatement of the question")
    looking_for: list[str] = Field(default_factory=list, description="Markers of a strong answer")
    red_flags: list[str] = Field(default_factory=list, description="Pitfalls reviewers penalise")
    data_needed: list[str] = Field(
        default_factory=list, description="Organization profile fields (snake_case)"
    )
    document_sources: list[str] = Field(
        default_factory=list, description="Document type tags that may hold the answer"
    )
    response_strategy: ResponseStrategy = ResponseStrategy.GENERATE
