"""Resolve a classified question into a QuestionIntent.

Templated categories resolve locally. Anything the templates don't cover
(OTHER) goes to the model; when the model is unavailable or returns junk,
a minimal GENERATE intent is returned instead.
"""

from typing import Any

from autoapply.chains.classify_question import (
    CLASSIFIER_MAX_TOKENS,
    build_classification_prompt,
    classify_question,
)
from autoapply.core.intent_templates import INTENT_TEMPLATES
from autoapply.core.llm import TextGenerator, generate_with_timeout, parse_llm_json_dict
from autoapply.core.logging import get_logger
from autoapply.core.schemas_organization import GrantContext, to_snake
from autoapply.core.schemas_questions import (
    FieldCategory,
    FieldMeta,
    QuestionIntent,
    coerce_category,
    coerce_strategy,
)

logger = get_logger(__name__)


def _string_list(value: Any) -> list[str]:
    if isinstance(value, str):
        return [value.strip()] if value.strip() else []
    if not isinstance(value, list):
        return []
    return [str(item).strip() for item in value if str(item).strip()]


def intent_from_payload(
    payload: dict[str, Any], fallback_category: FieldCategory, question: str
) -> QuestionIntent:
    """Build an intent from the model's JSON, tolerating camelCase keys and junk values."""
    data = {to_snake(str(k)): v for k, v in payload.items()}

    category = (
        coerce_category(data["category"]) if data.get("category") else fallback_category
    )
    core_question = data.get("core_question")
    if not isinstance(core_question, str) or not core_question.strip():
        core_question = question

    sub_category = data.get("sub_category")
    if not isinstance(sub_category, str) or not sub_category.strip():
        sub_category = None

    return QuestionIntent(
        category=category,
        sub_category=sub_category,
        core_question=core_question.strip(),
        looking_for=_string_list(data.get("looking_for")),
        red_flags=_string_list(data.get("red_flags")),
        data_needed=[to_snake(f) for f in _string_list(data.get("data_needed"))],
        document_sources=_string_list(data.get("document_sources")),
        response_strategy=coerce_strategy(data.get("response_strategy")),
    )


def fallback_intent(category: FieldCategory, question: str) -> QuestionIntent:
    return QuestionIntent(category=category, core_question=question)


async def resolve_intent(
    category: FieldCategory,
    question: str,
    grant: GrantContext,
    generator: TextGenerator | None = None,
    meta: FieldMeta | None = None,
    model_payload: dict[str, Any] | None = None,
) -> QuestionIntent:
    """
    Resolve the intent behind a question.

    Args:
        category: Category from classification
        question: Original question text
        grant: Grant metadata for the model prompt
        generator: Text generator used for untemplated categories
        meta: Optional field metadata
        model_payload: Structured answer already returned by the model classifier

    Returns:
        QuestionIntent (never raises)
    """
    template = INTENT_TEMPLATES.get(category)
    if template is not None:
        return template.to_intent(category, question)

    if model_payload is not None:
        return intent_from_payload(model_payload, category, question)

    if generator is None:
        return fallback_intent(category, question)

    prompt = build_classification_prompt(question, grant, meta)
    try:
        raw = await generate_with_timeout(generator, prompt, CLASSIFIER_MAX_TOKENS)
        payload = parse_llm_json_dict(raw)
    except Exception as e:
        logger.warning(f"Intent resolution failed for {category.value}, using default: {e}")
        return fallback_intent(category, question)

    return intent_from_payload(payload, category, question)


async def analyze_question(
    question: str,
    grant: GrantContext,
    generator: TextGenerator | None = None,
    meta: FieldMeta | None = None,
) -> QuestionIntent:
    """Classify a question and resolve its intent in one step.

    When the model classified the question, its structured answer is reused
    for untemplated categories instead of making a second call.
    """
    result = await classify_question(question, grant, generator, meta)
    return await resolve_intent(
        result.category,
        question,
        grant,
        generator=generator,
        meta=meta,
        model_payload=result.model_payload,
    )
