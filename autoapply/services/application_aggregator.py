"""Application-level drafting and roll-up.

Drafts every section through the section graph with bounded concurrency,
then derives completion, confidence, suggestions and readiness from the
current responses. The roll-up is a pure function so it can be recomputed
after any single section changes.
"""

import asyncio

from autoapply.chains.generate_section import input_prompt
from autoapply.chains.parse_grant_requirements import parse_grant_requirements
from autoapply.chains.resolve_intent import fallback_intent
from autoapply.core.config import get_settings
from autoapply.core.errors import SectionNotFoundError
from autoapply.core.funder_tone import FunderType, determine_funder_type
from autoapply.core.llm import TextGenerator
from autoapply.core.logging import get_logger
from autoapply.core.schemas_application import (
    ApplicationAggregate,
    ApplicationDraft,
    ApplicationSection,
    SectionType,
    Suggestion,
    SuggestionPriority,
    SuggestionType,
)
from autoapply.core.schemas_generation import (
    DataFitMapping,
    GeneratedResponse,
    GenerationMode,
    IssueType,
    MappingStrategy,
    ValidationIssue,
)
from autoapply.core.schemas_organization import GrantContext, UserContext
from autoapply.core.schemas_questions import FieldCategory
from autoapply.core.validation_engine import (
    application_summary,
    fixed_quality_result,
    readiness_for,
    round_half_up,
)
from autoapply.graphs.section_draft_graph import SectionDraftResult, run_section_draft

logger = get_logger(__name__)

LOW_QUALITY_SCORE = 50
MIN_NARRATIVE_WORDS = 50


# =============================================================================
# Drafting
# =============================================================================


def manual_input_result(section: ApplicationSection, reason: str) -> SectionDraftResult:
    """Placeholder result for a section whose pipeline failed outright."""
    quality = fixed_quality_result(
        0,
        issues=[
            ValidationIssue(
                type=IssueType.ERROR,
                code="GENERATION_FAILED",
                message=f"Drafting failed: {reason}",
            )
        ],
        improvements=["Please provide this information manually"],
    )
    response = GeneratedResponse(
        field_id=section.id,
        quality=quality,
        needs_review=True,
        review_prompt=f"Please provide content for: {section.title}",
        needs_user_input=True,
        mode=GenerationMode.NEEDS_INPUT,
    )
    return SectionDraftResult(
        section_id=section.id,
        intent=fallback_intent(FieldCategory.OTHER, section.question_text),
        mapping=DataFitMapping(strategy=MappingStrategy.MISSING, relevance_score=0),
        response=response,
    )


async def _draft_one(
    section: ApplicationSection,
    grant: GrantContext,
    user_context: UserContext,
    generator: TextGenerator | None,
    funder_type: FunderType,
    custom_instructions: str | None = None,
) -> SectionDraftResult:
    try:
        return await run_section_draft(
            section,
            grant,
            user_context,
            generator=generator,
            funder_type=funder_type,
            custom_instructions=custom_instructions,
        )
    except Exception as e:
        logger.error(
            f"Section {section.id} failed to draft: {e}",
            extra={"section_id": section.id},
        )
        return manual_input_result(section, str(e))


async def draft_sections(
    sections: list[ApplicationSection],
    grant: GrantContext,
    user_context: UserContext,
    generator: TextGenerator | None = None,
    funder_type: FunderType | None = None,
    max_parallel: int | None = None,
) -> dict[str, SectionDraftResult]:
    """
    Draft every section concurrently.

    Args:
        sections: Sections to draft
        grant: Grant metadata
        user_context: Profile, documents and prior applications
        generator: Text generator for model-backed steps
        funder_type: Tone archetype (derived from the grant when omitted)
        max_parallel: Concurrency bound (defaults to GENERATION_CONCURRENCY)

    Returns:
        Fresh dict of section id -> result, in section order
    """
    limit = max_parallel or get_settings().GENERATION_CONCURRENCY
    tone = funder_type or determine_funder_type(grant)
    semaphore = asyncio.Semaphore(max(1, limit))

    async def _run(section: ApplicationSection) -> SectionDraftResult:
        async with semaphore:
            return await _draft_one(section, grant, user_context, generator, tone)

    results: list[SectionDraftResult] = await asyncio.gather(
        *[_run(s) for s in sections],
        return_exceptions=False,
    )

    logger.info(f"Drafted {len(results)} sections with concurrency {limit}")
    return {section.id: result for section, result in zip(sections, results, strict=True)}


# =============================================================================
# Roll-up
# =============================================================================


def _is_complete(response: GeneratedResponse | None) -> bool:
    return bool(response and response.content.strip() and not response.needs_user_input)


def section_suggestions(
    section: ApplicationSection, response: GeneratedResponse
) -> list[Suggestion]:
    suggestions: list[Suggestion] = []

    if section.required and response.needs_user_input:
        detail = response.review_prompt or input_prompt(section.title, [])
        suggestions.append(
            Suggestion(
                section_id=section.id,
                type=SuggestionType.MISSING_INFO,
                message=f'The "{section.title}" section needs additional information: {detail}',
                priority=SuggestionPriority.HIGH,
            )
        )

    if response.quality.score < LOW_QUALITY_SCORE and not response.needs_user_input:
        suggestions.append(
            Suggestion(
                section_id=section.id,
                type=SuggestionType.IMPROVEMENT,
                message=(
                    f'The "{section.title}" section could be strengthened with more '
                    "specific details or data."
                ),
                priority=SuggestionPriority.MEDIUM,
            )
        )

    if section.word_limit and response.word_count > section.word_limit:
        over = response.word_count - section.word_limit
        suggestions.append(
            Suggestion(
                section_id=section.id,
                type=SuggestionType.WARNING,
                message=(
                    f'The "{section.title}" section exceeds the {section.word_limit} '
                    f"word limit by {over} words."
                ),
                priority=SuggestionPriority.HIGH,
            )
        )

    if section.type == SectionType.NARRATIVE and response.word_count < MIN_NARRATIVE_WORDS:
        suggestions.append(
            Suggestion(
                section_id=section.id,
                type=SuggestionType.WARNING,
                message=(
                    f'The "{section.title}" section seems too brief. '
                    "Consider expanding with more details."
                ),
                priority=SuggestionPriority.MEDIUM,
            )
        )

    return suggestions


def aggregate(
    sections: list[ApplicationSection],
    responses: dict[str, GeneratedResponse],
) -> ApplicationAggregate:
    """
    Roll section responses up into an application verdict.

    Completion counts required sections with non-empty content that are not
    waiting on the user. Error count sums error-level issues across responses,
    plus one per required section that has no response at all.
    """
    required = [s for s in sections if s.required]
    completed = [s for s in required if _is_complete(responses.get(s.id))]
    completion = round_half_up(100 * len(completed) / len(required)) if required else 100

    present = [responses[s.id] for s in sections if s.id in responses]
    overall_confidence = (
        round_half_up(sum(r.confidence_score for r in present) / len(present)) if present else 0
    )
    overall_score = (
        round_half_up(sum(r.quality.score for r in present) / len(present)) if present else 0
    )

    missing_requirements = [
        s.title
        for s in required
        if s.id not in responses or responses[s.id].needs_user_input
    ]

    error_count = sum(r.quality.error_count for r in present)
    error_count += sum(1 for s in required if s.id not in responses)

    suggestions: list[Suggestion] = []
    for section in sections:
        response = responses.get(section.id)
        if response is not None:
            suggestions.extend(section_suggestions(section, response))

    readiness = readiness_for(error_count, overall_score)
    strengths = [s for r in present for s in r.quality.strengths]

    return ApplicationAggregate(
        completion_score=completion,
        overall_confidence=overall_confidence,
        overall_score=overall_score,
        error_count=error_count,
        missing_requirements=missing_requirements,
        suggestions=suggestions,
        readiness_level=readiness,
        summary=application_summary(overall_score, readiness, error_count, strengths),
    )


def build_draft(
    grant: GrantContext,
    funder_type: FunderType,
    sections: list[ApplicationSection],
    results: dict[str, SectionDraftResult],
) -> ApplicationDraft:
    responses = {sid: r.response for sid, r in results.items()}
    return ApplicationDraft(
        grant_id=grant.id,
        funder_type=funder_type.value,
        sections=sections,
        intents={sid: r.intent for sid, r in results.items()},
        mappings={sid: r.mapping for sid, r in results.items()},
        responses=responses,
        aggregate=aggregate(sections, responses),
    )


# =============================================================================
# Public API
# =============================================================================


async def draft_application(
    grant: GrantContext,
    user_context: UserContext,
    generator: TextGenerator | None = None,
    sections: list[ApplicationSection] | None = None,
) -> ApplicationDraft:
    """
    Draft a full application.

    Args:
        grant: Grant metadata
        user_context: Profile, documents and prior applications
        generator: Text generator for model-backed steps
        sections: Explicit sections; resolved from the grant when omitted

    Returns:
        ApplicationDraft with per-section results and the aggregate
    """
    if not sections:
        sections = await parse_grant_requirements(grant, generator)
    funder_type = determine_funder_type(grant)

    logger.info(
        f"Drafting {len(sections)} sections for grant {grant.id or grant.title} "
        f"({funder_type.value})"
    )
    results = await draft_sections(sections, grant, user_context, generator, funder_type)
    draft = build_draft(grant, funder_type, sections, results)

    logger.info(
        f"Draft complete: completion {draft.aggregate.completion_score}%, "
        f"readiness {draft.aggregate.readiness_level.value}"
    )
    return draft


async def regenerate_section(
    draft: ApplicationDraft,
    section_id: str,
    grant: GrantContext,
    user_context: UserContext,
    generator: TextGenerator | None = None,
    custom_instructions: str | None = None,
) -> ApplicationDraft:
    """
    Redraft one section and return a new draft.

    The existing draft is not modified. The section's intent, mapping and
    response are replaced and the aggregate is recomputed.

    Raises:
        SectionNotFoundError: If the draft has no section with this id
    """
    section = draft.section(section_id)
    if section is None:
        raise SectionNotFoundError(section_id)

    funder_type = FunderType(draft.funder_type)
    result = await _draft_one(
        section, grant, user_context, generator, funder_type, custom_instructions
    )

    responses = {**draft.responses, section_id: result.response}
    return draft.model_copy(
        update={
            "intents": {**draft.intents, section_id: result.intent},
            "mappings": {**draft.mappings, section_id: result.mapping},
            "responses": responses,
            "aggregate": aggregate(draft.sections, responses),
        }
    )
