"""Section drafting LangGraph pipeline.

analyze (classify + intent) -> map_data -> generate -> finalize
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from langgraph.graph import END, StateGraph

from autoapply.chains.classify_question import classify_question
from autoapply.chains.generate_section import generate_section
from autoapply.chains.resolve_intent import resolve_intent
from autoapply.core.data_fit import map_data
from autoapply.core.funder_tone import FunderType, determine_funder_type
from autoapply.core.llm import TextGenerator
from autoapply.core.logging import get_logger, log_with_context
from autoapply.core.schemas_application import ApplicationSection, SectionType
from autoapply.core.schemas_generation import DataFitMapping, GeneratedResponse
from autoapply.core.schemas_organization import GrantContext, UserContext, to_snake
from autoapply.core.schemas_questions import FieldCategory, QuestionIntent

logger = get_logger(__name__)

MAX_STEPS = 10

_BUDGET_CATEGORIES = {
    FieldCategory.BUDGET_SUMMARY,
    FieldCategory.BUDGET_LINE_ITEMS,
    FieldCategory.BUDGET_JUSTIFICATION,
}


@dataclass
class SectionDraftState:
    """State for the section draft graph."""

    # Input fields
    section: ApplicationSection
    grant: GrantContext
    user_context: UserContext
    generator: TextGenerator | None = None
    funder_type: FunderType | None = None
    custom_instructions: str | None = None

    # Processing state
    step_count: int = 0
    intent: QuestionIntent | None = None
    mapping: DataFitMapping | None = None

    # Output
    response: GeneratedResponse | None = None
    notes: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class SectionDraftResult:
    section_id: str
    intent: QuestionIntent
    mapping: DataFitMapping
    response: GeneratedResponse


def _check_max_steps(state: SectionDraftState) -> SectionDraftState:
    """Check and increment step count, raise if exceeded."""
    state.step_count += 1
    if state.step_count > MAX_STEPS:
        raise RuntimeError(f"Graph exceeded max steps ({MAX_STEPS})")
    return state


def merge_related_fields(intent: QuestionIntent, related: list[str]) -> QuestionIntent:
    """Append the section's declared profile fields to the intent's data needs."""
    merged = list(intent.data_needed)
    for name in related:
        key = to_snake(name)
        if key and key not in merged:
            merged.append(key)
    if merged == intent.data_needed:
        return intent
    return intent.model_copy(update={"data_needed": merged})


async def analyze(state: SectionDraftState) -> dict[str, Any]:
    """Classify the section question and resolve its intent."""
    state = _check_max_steps(state)
    section = state.section
    question = section.question_text
    meta = section.field_meta()

    result = await classify_question(question, state.grant, state.generator, meta)
    intent = await resolve_intent(
        result.category,
        question,
        state.grant,
        generator=state.generator,
        meta=meta,
        model_payload=result.model_payload,
    )
    intent = merge_related_fields(intent, section.related_profile_fields)

    log_with_context(
        logger,
        logging.INFO,
        f"Classified section via {result.source}",
        grant_id=state.grant.id,
        section_id=section.id,
        category=intent.category.value,
        confidence=round(result.confidence, 2),
    )
    return {"intent": intent, "step_count": state.step_count}


def map_section_data(state: SectionDraftState) -> dict[str, Any]:
    """Map profile, documents and prior answers onto the intent."""
    state = _check_max_steps(state)
    section = state.section
    intent = state.intent

    mapping = map_data(
        intent,
        state.user_context.organization,
        documents=state.user_context.documents,
        prior_applications=state.user_context.previous_applications,
        section_title=section.title,
        section_id=section.id,
        budget_section=section.type == SectionType.BUDGET or intent.category in _BUDGET_CATEGORIES,
    )
    return {"mapping": mapping, "step_count": state.step_count}


async def generate(state: SectionDraftState) -> dict[str, Any]:
    """Draft the answer in the mode the intent and mapping call for."""
    state = _check_max_steps(state)
    section = state.section

    response = await generate_section(
        state.intent,
        state.mapping,
        state.grant,
        state.generator,
        question=section.question_text,
        meta=section.field_meta(),
        field_id=section.id,
        funder_type=state.funder_type or determine_funder_type(state.grant),
        custom_instructions=state.custom_instructions,
        evaluation_criteria=section.evaluation_criteria,
    )
    return {"response": response, "step_count": state.step_count}


def finalize(state: SectionDraftState) -> dict[str, Any]:
    """Flag empty drafts for user input and record the outcome."""
    state = _check_max_steps(state)
    response = state.response
    notes = list(state.notes)

    if not response.content.strip() and not response.needs_user_input:
        response = response.model_copy(
            update={"needs_user_input": True, "needs_review": True, "confidence_score": 0}
        )
        notes.append("Empty draft flagged for user input")

    log_with_context(
        logger,
        logging.INFO,
        f"Drafted section: score {response.quality.score}, "
        f"confidence {response.confidence_score}",
        grant_id=state.grant.id,
        section_id=state.section.id,
        mode=response.mode.value,
        needs_user_input=response.needs_user_input,
    )
    return {"response": response, "notes": notes, "step_count": state.step_count}


def _build_graph() -> StateGraph:
    """Build the LangGraph for section drafting."""
    graph = StateGraph(SectionDraftState)

    graph.add_node("analyze", analyze)
    graph.add_node("map_data", map_section_data)
    graph.add_node("generate", generate)
    graph.add_node("finalize", finalize)

    graph.set_entry_point("analyze")
    graph.add_edge("analyze", "map_data")
    graph.add_edge("map_data", "generate")
    graph.add_edge("generate", "finalize")
    graph.add_edge("finalize", END)

    return graph


# Compile the graph once at module load
_compiled_graph = _build_graph().compile()


async def run_section_draft(
    section: ApplicationSection,
    grant: GrantContext,
    user_context: UserContext,
    generator: TextGenerator | None = None,
    funder_type: FunderType | None = None,
    custom_instructions: str | None = None,
) -> SectionDraftResult:
    """
    Run the section draft graph.

    Args:
        section: Section to draft
        grant: Grant metadata
        user_context: Profile, documents and prior applications
        generator: Text generator for model-backed steps
        funder_type: Tone archetype (derived from the grant when omitted)
        custom_instructions: Extra guidance for the drafting prompt

    Returns:
        SectionDraftResult with intent, mapping and response

    Raises:
        RuntimeError: If graph exceeds max steps
    """
    initial_state = SectionDraftState(
        section=section,
        grant=grant,
        user_context=user_context,
        generator=generator,
        funder_type=funder_type,
        custom_instructions=custom_instructions,
    )

    final_state = await _compiled_graph.ainvoke(initial_state)

    # LangGraph returns the final state as a dict
    return SectionDraftResult(
        section_id=section.id,
        intent=final_state["intent"],
        mapping=final_state["mapping"],
        response=final_state["response"],
    )
