"""Draft one answer from a resolved intent and its data-fit mapping.

The generation mode is chosen once by resolve_generation_mode and dispatched
through GENERATION_HANDLERS:
- DIRECT_FILL copies a profile value verbatim
- SELECT picks one of the declared options
- NEEDS_INPUT returns an empty placeholder asking the user for data
- COMPOSE prompts the model, cleans the output and scores it

Failures never raise: they produce an empty, review-flagged response.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from types import MappingProxyType

from autoapply.chains.select_option import choose_option
from autoapply.context.prompt_builder import build_generation_prompt
from autoapply.context.token_budget import max_output_tokens
from autoapply.core.funder_tone import FunderType, determine_funder_type
from autoapply.core.llm import TextGenerator, generate_with_timeout
from autoapply.core.logging import get_logger
from autoapply.core.response_cleaning import clean_response
from autoapply.core.schemas_generation import (
    DataFitMapping,
    GeneratedResponse,
    GenerationMode,
    IssueType,
    MappingStrategy,
    QualityLevel,
    ValidationIssue,
    count_words,
)
from autoapply.core.schemas_organization import GrantContext
from autoapply.core.schemas_questions import (
    FieldCategory,
    FieldMeta,
    QuestionIntent,
    ResponseStrategy,
)
from autoapply.core.validation_engine import fixed_quality_result, validate

logger = get_logger(__name__)

DIRECT_FILL_SCORE = 95
KEYWORD_SELECT_SCORE = 85
MODEL_SELECT_SCORE = 70
FALLBACK_SELECT_SCORE = 30

# Profile fields tried first, in order, when filling a field verbatim
DIRECT_FIELD_PRIORITY: MappingProxyType[FieldCategory, tuple[str, ...]] = MappingProxyType({
    FieldCategory.ORGANIZATION_IDENTITY: ("name", "ein", "legal_structure"),
    FieldCategory.CONTACT_INFO: ("city", "state", "website"),
    FieldCategory.CERTIFICATIONS: ("ein",),
})


@dataclass(frozen=True)
class SectionRequest:
    """Everything a generation handler needs for one field."""

    field_id: str
    question: str
    intent: QuestionIntent
    mapping: DataFitMapping
    grant: GrantContext
    funder_type: FunderType
    meta: FieldMeta = field(default_factory=FieldMeta)
    generator: TextGenerator | None = None
    evaluation_criteria: list[str] = field(default_factory=list)
    custom_instructions: str | None = None


# =============================================================================
# Dispatch
# =============================================================================


def resolve_generation_mode(
    intent: QuestionIntent,
    mapping: DataFitMapping,
    field_type: str | None = None,
    options: list[str] | None = None,
) -> GenerationMode:
    """Pick exactly one generation mode, in precedence order."""
    if intent.response_strategy == ResponseStrategy.DIRECT:
        return GenerationMode.DIRECT_FILL
    if (field_type or "").lower() == "select" and options:
        return GenerationMode.SELECT
    if mapping.strategy == MappingStrategy.MISSING:
        return GenerationMode.NEEDS_INPUT
    return GenerationMode.COMPOSE


def confidence_score(
    mapping: DataFitMapping, word_count: int, word_limit: int | None = None
) -> int:
    """Confidence in a draft from data relevance, length fit and mapping strategy."""
    score = mapping.relevance_score

    if word_limit:
        ratio = word_count / word_limit
        if 0.7 <= ratio <= 1.0:
            score += 10
        elif ratio < 0.5:
            score -= 15
        elif ratio > 1.2:
            score -= 10

    if mapping.strategy == MappingStrategy.GENERATE:
        score -= 20
    elif mapping.strategy == MappingStrategy.MISSING:
        score = min(score, 25)

    return max(0, min(100, score))


def _issue(
    type_: IssueType, code: str, message: str, suggestion: str | None = None
) -> ValidationIssue:
    return ValidationIssue(type=type_, code=code, message=message, suggestion=suggestion)


# =============================================================================
# Handlers
# =============================================================================


async def _direct_fill(request: SectionRequest) -> GeneratedResponse:
    intent, mapping = request.intent, request.mapping
    candidates = DIRECT_FIELD_PRIORITY.get(intent.category, tuple(intent.data_needed))

    for name in candidates:
        value = mapping.relevant_data.get(name)
        if value:
            return GeneratedResponse(
                field_id=request.field_id,
                content=value,
                sources=[name],
                ai_generated=False,
                quality=fixed_quality_result(DIRECT_FILL_SCORE),
                mode=GenerationMode.DIRECT_FILL,
            )

    missing = mapping.missing_fields or list(candidates)
    quality = fixed_quality_result(
        0,
        issues=[
            _issue(
                IssueType.ERROR,
                "MISSING_PROFILE_DATA",
                "Required information not in profile",
                suggestion=f"Add {', '.join(missing)} to your organization profile",
            )
        ],
    )
    return GeneratedResponse(
        field_id=request.field_id,
        quality=quality,
        needs_review=True,
        review_prompt=f"Please provide your {intent.category.label}",
        needs_user_input=True,
        mode=GenerationMode.DIRECT_FILL,
    )


async def _select(request: SectionRequest) -> GeneratedResponse:
    options = request.meta.options
    relevant = request.mapping.relevant_data
    choice = await choose_option(request.question, options, relevant, request.generator)

    if choice.source == "keyword":
        return GeneratedResponse(
            field_id=request.field_id,
            content=choice.option,
            sources=list(relevant),
            quality=fixed_quality_result(KEYWORD_SELECT_SCORE),
            mode=GenerationMode.SELECT,
        )

    if choice.source == "model":
        quality = fixed_quality_result(
            MODEL_SELECT_SCORE,
            issues=[
                _issue(
                    IssueType.SUGGESTION,
                    "AI_INFERRED_SELECTION",
                    "Selection based on AI inference",
                )
            ],
        )
        return GeneratedResponse(
            field_id=request.field_id,
            content=choice.option,
            sources=list(relevant),
            ai_generated=True,
            quality=quality,
            needs_review=True,
            review_prompt="Please verify this selection is correct",
            mode=GenerationMode.SELECT,
        )

    quality = fixed_quality_result(
        FALLBACK_SELECT_SCORE,
        issues=[
            _issue(
                IssueType.WARNING,
                "OPTION_UNDETERMINED",
                "Could not determine best option",
                suggestion="Please select the appropriate option",
            )
        ],
    )
    return GeneratedResponse(
        field_id=request.field_id,
        content=options[0] if options else "",
        quality=quality,
        needs_review=True,
        review_prompt="Please select the correct option",
        mode=GenerationMode.SELECT,
    )


def input_prompt(question: str, missing_fields: list[str]) -> str:
    if missing_fields:
        return f"To improve this section, please provide: {', '.join(missing_fields)}"
    return f"Please provide: {question}"


async def _needs_input(request: SectionRequest) -> GeneratedResponse:
    quality = fixed_quality_result(
        0,
        issues=[
            _issue(
                IssueType.ERROR,
                "MISSING_INFORMATION",
                "Not enough organization data to draft this answer",
                suggestion="Add the missing details to your profile or answer manually",
            )
        ],
    )
    return GeneratedResponse(
        field_id=request.field_id,
        quality=quality,
        needs_review=True,
        review_prompt=input_prompt(request.question, request.mapping.missing_fields),
        needs_user_input=True,
        mode=GenerationMode.NEEDS_INPUT,
    )


def generation_failed(field_id: str, question: str, reason: str) -> GeneratedResponse:
    """Empty, review-flagged response used when drafting could not complete."""
    quality = fixed_quality_result(
        0,
        issues=[_issue(IssueType.ERROR, "GENERATION_FAILED", f"Generation failed: {reason}")],
        improvements=["Please provide this information manually"],
    )
    return GeneratedResponse(
        field_id=field_id,
        quality=quality,
        needs_review=True,
        review_prompt=f"Please provide: {question}",
        needs_user_input=True,
        mode=GenerationMode.COMPOSE,
    )


async def _compose(request: SectionRequest) -> GeneratedResponse:
    meta = request.meta
    if request.generator is None:
        return generation_failed(request.field_id, request.question, "no text generator configured")

    prompt = build_generation_prompt(
        request.question,
        request.intent,
        request.mapping,
        request.grant,
        request.funder_type,
        word_limit=meta.word_limit,
        character_limit=meta.character_limit,
        evaluation_criteria=request.evaluation_criteria,
        custom_instructions=request.custom_instructions,
    )
    budget = max_output_tokens(meta.word_limit, meta.character_limit, meta.field_type)

    try:
        raw = await generate_with_timeout(request.generator, prompt, budget)
    except Exception as e:
        logger.warning(f"Failed to generate response for {request.field_id}: {e}")
        return generation_failed(request.field_id, request.question, str(e))

    content = clean_response(raw, meta.word_limit, meta.character_limit)
    if not content:
        logger.warning(f"Generated response for {request.field_id} was empty after cleaning")
        return generation_failed(request.field_id, request.question, "empty output")

    quality = validate(
        content,
        request.intent.category,
        meta.word_limit,
        character_limit=meta.character_limit,
        intent=request.intent,
    )
    review_prompt = None
    if quality.level not in (QualityLevel.EXCELLENT, QualityLevel.GOOD):
        first = quality.issues[0].message.lower() if quality.issues else "may need enhancement"
        review_prompt = f"This response {first}"

    return GeneratedResponse(
        field_id=request.field_id,
        content=content,
        sources=list(request.mapping.available_fields),
        ai_generated=True,
        quality=quality,
        needs_review=(
            not quality.is_valid
            or quality.level in (QualityLevel.NEEDS_WORK, QualityLevel.INSUFFICIENT)
        ),
        review_prompt=review_prompt,
        mode=GenerationMode.COMPOSE,
    )


GENERATION_HANDLERS: MappingProxyType[
    GenerationMode, Callable[[SectionRequest], Awaitable[GeneratedResponse]]
] = MappingProxyType({
    GenerationMode.DIRECT_FILL: _direct_fill,
    GenerationMode.SELECT: _select,
    GenerationMode.NEEDS_INPUT: _needs_input,
    GenerationMode.COMPOSE: _compose,
})


# =============================================================================
# Public API
# =============================================================================


async def generate_section(
    intent: QuestionIntent,
    mapping: DataFitMapping,
    grant: GrantContext,
    generator: TextGenerator | None = None,
    *,
    question: str | None = None,
    meta: FieldMeta | None = None,
    field_id: str = "",
    funder_type: FunderType | None = None,
    custom_instructions: str | None = None,
    evaluation_criteria: list[str] | None = None,
) -> GeneratedResponse:
    """
    Produce a draft answer for one field.

    Args:
        intent: Resolved intent
        mapping: Data-fit mapping for the intent
        grant: Grant metadata (tone and prompt context)
        generator: Text generator; only COMPOSE and model-backed SELECT use it
        question: Original question text (defaults to intent.core_question)
        meta: Field metadata with limits, type and options
        field_id: Identifier copied onto the response
        funder_type: Tone archetype (derived from the grant when omitted)
        custom_instructions: Extra guidance, typically supplied on regeneration
        evaluation_criteria: Reviewer criteria to surface in the prompt

    Returns:
        GeneratedResponse with quality and confidence filled in
    """
    meta = meta or FieldMeta()
    request = SectionRequest(
        field_id=field_id,
        question=question or intent.core_question,
        intent=intent,
        mapping=mapping,
        grant=grant,
        funder_type=funder_type or determine_funder_type(grant),
        meta=meta,
        generator=generator,
        evaluation_criteria=list(evaluation_criteria or []),
        custom_instructions=custom_instructions,
    )

    mode = resolve_generation_mode(intent, mapping, meta.field_type, meta.options)
    logger.debug(f"Generating {field_id or intent.category.value} via {mode.value}")
    response = await GENERATION_HANDLERS[mode](request)

    if not response.content:
        return response
    return response.model_copy(
        update={
            "confidence_score": confidence_score(
                mapping, count_words(response.content), meta.word_limit
            )
        }
    )
