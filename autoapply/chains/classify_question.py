"""Question classification chain.

Keyword patterns decide when they are confident; otherwise the model
classifies the question with the field metadata and grant context. When
no model is available, or its answer is unusable, the best low-confidence
pattern guess (or OTHER) is used. Classification never raises.
"""

from dataclasses import dataclass
from typing import Any

from autoapply.core.category_patterns import match_question_pattern
from autoapply.core.config import get_settings
from autoapply.core.llm import TextGenerator, generate_with_timeout, parse_llm_json_dict
from autoapply.core.logging import get_logger
from autoapply.core.schemas_organization import GrantContext
from autoapply.core.schemas_questions import FieldCategory, FieldMeta, coerce_category

logger = get_logger(__name__)

CLASSIFIER_MAX_TOKENS = 1000
GRANT_FOCUS_CHARS = 300


@dataclass(frozen=True)
class ClassificationResult:
    category: FieldCategory
    confidence: float
    source: str  # "pattern", "model" or "fallback"
    model_payload: dict[str, Any] | None = None


def build_classification_prompt(
    question: str, grant: GrantContext, meta: FieldMeta | None = None
) -> str:
    lines = [
        "Analyze this grant application question and determine what the funder really wants to know.",
        "",
        f'QUESTION: "{question}"',
    ]
    if meta is not None:
        if meta.help_text:
            lines.append(f'HELP TEXT: "{meta.help_text}"')
        if meta.placeholder:
            lines.append(f'PLACEHOLDER: "{meta.placeholder}"')
        if meta.options:
            lines.append(f"OPTIONS: {', '.join(meta.options)}")

    focus = (grant.description or "")[:GRANT_FOCUS_CHARS] or "Not specified"
    categories = "\n".join(f"- {c.value}" for c in FieldCategory)

    lines.extend(
        [
            "",
            "GRANT CONTEXT:",
            f"- Funder: {grant.funder}",
            f"- Grant Type: {grant.type or 'General'}",
            f"- Focus: {focus}",
            "",
            "Categorize this question into ONE of these categories:",
            categories,
            "",
            "Respond with JSON only:",
            "{",
            '  "category": "category_name",',
            '  "sub_category": "optional specific aspect",',
            '  "core_question": "what they\'re really asking in simple terms",',
            '  "looking_for": ["what makes a strong answer", "specific elements they want"],',
            '  "red_flags": ["what to avoid", "common mistakes"],',
            '  "data_needed": ["organization fields needed: name, mission, problem_statement, '
            "solution, target_market, team_size, founder_background, annual_revenue, "
            'funding_seeking, previous_funding, ein, website, city, state"],',
            '  "document_sources": ["relevant document types: financials, 990, pitch_deck, '
            'business_plan, resume, letters_of_support"],',
            '  "response_strategy": "direct|synthesize|generate|extract"',
            "}",
        ]
    )
    return "\n".join(lines)


async def classify_question(
    question: str,
    grant: GrantContext,
    generator: TextGenerator | None = None,
    meta: FieldMeta | None = None,
) -> ClassificationResult:
    """
    Classify a question, keeping the model's structured answer when one was made.

    Args:
        question: Raw question text
        grant: Grant metadata passed to the model classifier
        generator: Text generator for the model fallback (None disables it)
        meta: Optional field metadata (help text, placeholder, options)

    Returns:
        ClassificationResult with category, confidence and source
    """
    settings = get_settings()
    match = match_question_pattern(question)

    if match is not None and match.confidence >= settings.PATTERN_CONFIDENCE_THRESHOLD:
        return ClassificationResult(
            category=match.category, confidence=match.confidence, source="pattern"
        )

    if generator is not None:
        prompt = build_classification_prompt(question, grant, meta)
        try:
            raw = await generate_with_timeout(generator, prompt, CLASSIFIER_MAX_TOKENS)
            payload = parse_llm_json_dict(raw)
            category = coerce_category(payload.get("category"))
            logger.debug(f"Model classified question as {category.value}")
            return ClassificationResult(
                category=category, confidence=0.0, source="model", model_payload=payload
            )
        except Exception as e:
            logger.warning(f"Model classification failed, using pattern fallback: {e}")

    if match is not None:
        return ClassificationResult(
            category=match.category, confidence=match.confidence, source="fallback"
        )
    return ClassificationResult(category=FieldCategory.OTHER, confidence=0.0, source="fallback")


async def classify(
    question: str,
    grant: GrantContext,
    generator: TextGenerator | None = None,
    meta: FieldMeta | None = None,
) -> FieldCategory:
    """Classify a question into exactly one category."""
    result = await classify_question(question, grant, generator, meta)
    return result.category
