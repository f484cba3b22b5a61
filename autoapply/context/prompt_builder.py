"""Generation prompt assembly for grant section drafting.

The prompt is built from independent blocks so empty inputs drop out
cleanly instead of leaving hollow headings:
- the question and what the funder is really asking
- markers of a strong answer and pitfalls to avoid
- category structure, key elements and an optional worked example
- grant context, organization data, document and prior-answer excerpts
- funder tone, strategy instruction, custom guidance and hard limits
"""

from types import MappingProxyType

from autoapply.core.category_guidance import guidance_for
from autoapply.core.funder_tone import FUNDER_TONE_CONFIG, FunderType
from autoapply.core.schemas_generation import DataFitMapping, MappingStrategy
from autoapply.core.schemas_organization import GrantContext
from autoapply.core.schemas_questions import QuestionIntent, ResponseStrategy

DEFAULT_PROMPT_WORD_LIMIT = 500
GRANT_DESCRIPTION_CHARS = 200

STRATEGY_INSTRUCTIONS: MappingProxyType[ResponseStrategy, str] = MappingProxyType({
    ResponseStrategy.DIRECT: (
        "Answer with the exact organization information only. No narrative."
    ),
    ResponseStrategy.SYNTHESIZE: (
        "Synthesize the organization data above into a cohesive narrative. "
        "Every claim should trace back to the data provided."
    ),
    ResponseStrategy.GENERATE: (
        "Write a strong answer following best practices for this question type, "
        "grounded in whatever organization data is available."
    ),
    ResponseStrategy.EXTRACT: (
        "Pull concrete figures and facts from the documents above. "
        "Do not invent numbers that are not in the source material."
    ),
})

ADAPT_INSTRUCTION = (
    "Adapt the previous content to this funder and question rather than copying it verbatim."
)
LIMITED_DATA_NOTE = (
    "Limited organization data available - generate based on typical best practices."
)


def format_field_name(field: str) -> str:
    """'problem_statement' -> 'Problem statement'."""
    words = field.replace("_", " ").strip()
    return words[:1].upper() + words[1:]


def _bullets(items: list[str] | tuple[str, ...]) -> str:
    return "\n".join(f"- {item}" for item in items)


def _block(heading: str, body: str) -> str:
    return f"## {heading}\n{body}"


def build_generation_prompt(
    question: str,
    intent: QuestionIntent,
    mapping: DataFitMapping,
    grant: GrantContext,
    funder_type: FunderType,
    word_limit: int | None = None,
    character_limit: int | None = None,
    evaluation_criteria: list[str] | None = None,
    custom_instructions: str | None = None,
) -> str:
    """
    Render the full drafting prompt for one question.

    Args:
        question: Original question text
        intent: Resolved intent for the question
        mapping: Data-fit mapping with available data and excerpts
        grant: Grant metadata
        funder_type: Tone archetype for the funder
        word_limit: Field word limit (prompt falls back to 500 words)
        character_limit: Field character limit, if any
        evaluation_criteria: Reviewer criteria declared for the section
        custom_instructions: Extra guidance supplied on regeneration

    Returns:
        Prompt text
    """
    guidance = guidance_for(intent.category)
    tone = FUNDER_TONE_CONFIG[funder_type]
    blocks: list[str] = [
        "Generate a response for this grant application field.",
        _block("THE QUESTION", f'"{question}"'),
        _block("WHAT THEY'RE REALLY ASKING", intent.core_question),
    ]

    if intent.looking_for:
        blocks.append(_block("WHAT MAKES A STRONG ANSWER", _bullets(intent.looking_for)))
    if intent.red_flags:
        blocks.append(_block("WHAT TO AVOID", _bullets(intent.red_flags)))

    blocks.append(_block("RESPONSE STRUCTURE", guidance.structure))
    blocks.append(_block("KEY ELEMENTS TO INCLUDE", _bullets(guidance.key_elements)))
    if guidance.example:
        blocks.append(_block("EXAMPLE APPROACH", guidance.example))
    if evaluation_criteria:
        blocks.append(_block("EVALUATION CRITERIA", _bullets(evaluation_criteria)))

    description = (grant.description or "")[:GRANT_DESCRIPTION_CHARS] or "General funding"
    grant_lines = [
        f"- Funder: {grant.funder}",
        f"- Grant: {grant.title}",
        f"- Focus: {description}",
    ]
    if grant.amount:
        grant_lines.append(f"- Amount: {grant.amount}")
    blocks.append(_block("GRANT CONTEXT", "\n".join(grant_lines)))

    if mapping.relevant_data:
        org_data = "\n".join(
            f"- {format_field_name(k)}: {v}" for k, v in mapping.relevant_data.items()
        )
    else:
        org_data = LIMITED_DATA_NOTE
    blocks.append(_block("ORGANIZATION DATA", org_data))

    if mapping.relevant_document_excerpts:
        blocks.append(
            _block("RELEVANT DOCUMENTS", "\n\n".join(mapping.relevant_document_excerpts))
        )
    if mapping.reusable_text:
        blocks.append(
            _block(
                "SIMILAR CONTENT FROM PREVIOUS APPLICATIONS", "\n\n".join(mapping.reusable_text)
            )
        )

    blocks.append(
        _block(
            "WRITING GUIDELINES",
            "\n".join(
                [
                    f"- Tone: {tone.tone}",
                    f"- Emphasize: {', '.join(tone.emphasize)}",
                    f"- Avoid: {', '.join(tone.avoid)}",
                ]
            ),
        )
    )

    approach = [STRATEGY_INSTRUCTIONS[intent.response_strategy]]
    if mapping.strategy == MappingStrategy.ADAPT and mapping.reusable_text:
        approach.append(ADAPT_INSTRUCTION)
    blocks.append(_block("APPROACH", " ".join(approach)))

    if custom_instructions:
        blocks.append(_block("ADDITIONAL GUIDANCE", custom_instructions.strip()))

    constraints = [f"- Word limit: {word_limit or DEFAULT_PROMPT_WORD_LIMIT} words"]
    if character_limit:
        constraints.append(f"- Character limit: {character_limit} characters")
    constraints.extend(
        [
            "- Be specific and use concrete examples",
            "- Use data and metrics when available",
            "- Connect directly to the funder's priorities",
        ]
    )
    blocks.append(_block("CONSTRAINTS", "\n".join(constraints)))

    blocks.append(
        "Write the response now. Be concise, specific, and compelling. "
        "Do not include any preamble or explanation - just the response content."
    )
    return "\n\n".join(blocks)
