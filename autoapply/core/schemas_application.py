"""Pydantic models for application sections, suggestions and the roll-up."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from autoapply.core.schemas_generation import DataFitMapping, GeneratedResponse
from autoapply.core.schemas_questions import FieldMeta, QuestionIntent


# =============================================================================
# Sections
# =============================================================================


class SectionType(str, Enum):
    NARRATIVE = "narrative"
    SHORT_ANSWER = "short_answer"
    BUDGET = "budget"
    ATTACHMENT = "attachment"
    CHECKBOX = "checkbox"
    SELECT = "select"
    TABLE = "table"
    CONTACT_INFO = "contact_info"


# Form field type used for output budgeting and option selection
_FIELD_TYPE_BY_SECTION = {
    SectionType.NARRATIVE: "textarea",
    SectionType.SHORT_ANSWER: "text",
    SectionType.BUDGET: "budget",
    SectionType.ATTACHMENT: "text",
    SectionType.CHECKBOX: "select",
    SectionType.SELECT: "select",
    SectionType.TABLE: "table",
    SectionType.CONTACT_INFO: "text",
}


class ApplicationSection(BaseModel):
    """One question or section of a grant application."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    type: SectionType = SectionType.NARRATIVE
    title: str
    instructions: str = ""
    required: bool = True
    word_limit: int | None = None
    character_limit: int | None = None
    evaluation_criteria: list[str] = Field(default_factory=list)
    related_profile_fields: list[str] = Field(default_factory=list)
    options: list[str] = Field(default_factory=list)
    order: int = 0

    @property
    def question_text(self) -> str:
        """Text handed to the classifier: title plus instructions."""
        if self.instructions:
            return f"{self.title}: {self.instructions}"
        return self.title

    def field_meta(self) -> FieldMeta:
        return FieldMeta(
            field_type=_FIELD_TYPE_BY_SECTION[self.type],
            options=self.options,
            word_limit=self.word_limit,
            character_limit=self.character_limit,
            help_text=self.instructions or None,
            required=self.required,
        )


# =============================================================================
# Roll-up
# =============================================================================


class SuggestionType(str, Enum):
    IMPROVEMENT = "improvement"
    WARNING = "warning"
    MISSING_INFO = "missing_info"


class SuggestionPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Suggestion(BaseModel):
    model_config = ConfigDict(frozen=True)

    section_id: str
    type: SuggestionType
    message: str
    priority: SuggestionPriority


class ReadinessLevel(str, Enum):
    READY = "ready"
    NEEDS_WORK = "needs_work"
    NOT_READY = "not_ready"


class ApplicationAggregate(BaseModel):
    """Application-level verdict; always recomputed from the current responses."""

    model_config = ConfigDict(frozen=True)

    completion_score: int = Field(..., ge=0, le=100)
    overall_confidence: int = Field(..., ge=0, le=100)
    overall_score: int = Field(..., ge=0, le=100)
    error_count: int = 0
    missing_requirements: list[str] = Field(default_factory=list)
    suggestions: list[Suggestion] = Field(default_factory=list)
    readiness_level: ReadinessLevel
    summary: str = ""


class ApplicationDraft(BaseModel):
    """Full drafting result for one grant application."""

    model_config = ConfigDict(frozen=True)

    grant_id: str = ""
    funder_type: str
    sections: list[ApplicationSection]
    intents: dict[str, QuestionIntent] = Field(default_factory=dict)
    mappings: dict[str, DataFitMapping] = Field(default_factory=dict)
    responses: dict[str, GeneratedResponse] = Field(default_factory=dict)
    aggregate: ApplicationAggregate

    def section(self, section_id: str) -> ApplicationSection | None:
        return next((s for s in self.sections if s.id == section_id), None)
