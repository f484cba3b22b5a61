"""Pydantic models for data fit, quality scoring and generated responses."""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field


def count_words(text: str) -> int:
    """Whitespace-delimited word count."""
    return len(text.split())


# =============================================================================
# Data fit
# =============================================================================


class MappingStrategy(str, Enum):
    """How much of an answer can come from what the organization already has."""

    DIRECT = "direct"
    ADAPT = "adapt"
    GENERATE = "generate"
    MISSING = "missing"


class ConfidenceLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class DataFitMapping(BaseModel):
    """Result of matching an intent against profile, documents and history."""

    model_config = ConfigDict(frozen=True)

    available_fields: list[str] = Field(default_factory=list)
    missing_fields: list[str] = Field(default_factory=list)
    relevant_data: dict[str, str] = Field(default_factory=dict)
    relevant_document_excerpts: list[str] = Field(default_factory=list)
    reusable_text: list[str] = Field(default_factory=list)
    strategy: MappingStrategy
    relevance_score: int = Field(..., ge=0, le=100)
    confidence: ConfidenceLevel = ConfidenceLevel.LOW
    notes: str | None = None


# =============================================================================
# Quality
# =============================================================================


class IssueType(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    SUGGESTION = "suggestion"


class QualityLevel(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    ACCEPTABLE = "acceptable"
    NEEDS_WORK = "needs_work"
    INSUFFICIENT = "insufficient"


class ValidationIssue(BaseModel):
    """One problem found in a response."""

    model_config = ConfigDict(frozen=True)

    type: IssueType
    code: str  # e.g. WORD_LIMIT_EXCEEDED, VAGUE_LANGUAGE
    message: str
    field: str | None = None
    suggestion: str | None = None


class QualityMetrics(BaseModel):
    """Seven sub-scores plus their weighted overall, all 0-100."""

    model_config = ConfigDict(frozen=True)

    clarity: int = Field(..., ge=0, le=100)
    specificity: int = Field(..., ge=0, le=100)
    relevance: int = Field(..., ge=0, le=100)
    completeness: int = Field(..., ge=0, le=100)
    professionalism: int = Field(..., ge=0, le=100)
    persuasiveness: int = Field(..., ge=0, le=100)
    compliance: int = Field(..., ge=0, le=100)
    overall: int = Field(..., ge=0, le=100)


class QualityResult(BaseModel):
    """Score, level and findings for one response."""

    model_config = ConfigDict(frozen=True)

    score: int = Field(..., ge=0, le=100)
    level: QualityLevel
    is_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)
    improvements: list[str] = Field(default_factory=list)
    strengths: list[str] = Field(default_factory=list)
    metrics: QualityMetrics

    @property
    def error_count(self) -> int:
        return sum(1 for issue in self.issues if issue.type == IssueType.ERROR)

    def has_issue(self, code: str) -> bool:
        return any(issue.code == code for issue in self.issues)


# =============================================================================
# Generated responses
# =============================================================================


class GenerationMode(str, Enum):
    """Dispatch tag chosen once per section before any drafting happens."""

    DIRECT_FILL = "direct_fill"
    SELECT = "select"
    NEEDS_INPUT = "needs_input"
    COMPOSE = "compose"


class GeneratedResponse(BaseModel):
    """A draft answer for one field. Regeneration produces a new instance."""

    model_config = ConfigDict(frozen=True)

    field_id: str = ""
    content: str = ""
    sources: list[str] = Field(default_factory=list)
    ai_generated: bool = False
    quality: QualityResult
    needs_review: bool = False
    review_prompt: str | None = None
    needs_user_input: bool = False
    confidence_score: int = Field(default=0, ge=0, le=100)
    mode: GenerationMode = GenerationMode.COMPOSE
    generated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @computed_field
    @property
    def word_count(self) -> int:
        return count_words(self.content)

    @computed_field
    @property
    def character_count(self) -> int:
        return len(self.content)
