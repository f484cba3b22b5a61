"""Model-scored review of a drafted answer, plus combined improvement advice."""

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from autoapply.core.funder_tone import determine_funder_type
from autoapply.core.llm import TextGenerator, generate_with_timeout, parse_llm_json
from autoapply.core.logging import get_logger
from autoapply.core.schemas_organization import GrantContext
from autoapply.core.schemas_questions import FieldCategory
from autoapply.core.validation_engine import improvement_suggestions, validate

logger = get_logger(__name__)

DEEP_REVIEW_MAX_TOKENS = 2000
DEFAULT_REVIEW_SCORE = 70
MAX_FIELD_IMPROVEMENTS = 6

DEEP_REVIEW_PROMPT = """You are a grant writing expert reviewing a response for a {funder_type} grant application.

GRANT: {grant_title}
FUNDER: {funder}
{requirements}
FIELD: {field_title}
CATEGORY: {category}

RESPONSE TO REVIEW:
\"\"\"
{content}
\"\"\"

Evaluate this response as an expert grant reviewer would. Provide:

1. SCORE (0-100): Based on:
   - Clarity and readability
   - Specificity (concrete examples, data)
   - Relevance to the question
   - Persuasiveness
   - Professional tone
   - Alignment with funder priorities

2. FEEDBACK: 2-3 sentences of constructive feedback

3. KEY IMPROVEMENTS: List 2-4 specific improvements that would strengthen this response

4. SUGGESTED REVISION (optional): If the score is below 75, provide a revised version that addresses the main issues while preserving the organization's voice and content

Format your response as JSON:
{{
  "score": number,
  "feedback": "string",
  "key_improvements": ["string", ...],
  "suggested_revision": "string or null"
}}"""


class DeepReview(BaseModel):
    """Reviewer verdict on one response."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    score: int = Field(default=DEFAULT_REVIEW_SCORE, ge=0, le=100)
    feedback: str = "Review completed"
    key_improvements: list[str] = Field(default_factory=list)
    suggested_revision: str | None = None

    @field_validator("score", mode="before")
    @classmethod
    def _clamp_score(cls, value):
        if value is None or value == 0:
            return DEFAULT_REVIEW_SCORE
        if isinstance(value, int | float) and not isinstance(value, bool):
            return max(0, min(100, round(value)))
        return value

    @field_validator("suggested_revision", mode="before")
    @classmethod
    def _blank_revision(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


async def deep_validate_response(
    content: str,
    field_title: str,
    category: FieldCategory,
    grant: GrantContext,
    generator: TextGenerator | None,
) -> DeepReview:
    """
    Ask the model to review a response the way a grant reviewer would.

    Returns a neutral review (score 70) with an explanatory message when the
    model is unavailable or its answer cannot be parsed.
    """
    if generator is None:
        return DeepReview(feedback="Deep review unavailable: no text generator configured")

    prompt = DEEP_REVIEW_PROMPT.format(
        funder_type=determine_funder_type(grant).value,
        grant_title=grant.title,
        funder=grant.funder,
        requirements=f"REQUIREMENTS: {grant.requirements}\n" if grant.requirements else "",
        field_title=field_title,
        category=category.value,
        content=content,
    )

    try:
        raw = await generate_with_timeout(generator, prompt, DEEP_REVIEW_MAX_TOKENS)
    except Exception as e:
        logger.warning(f"Deep validation failed for {field_title}: {e}")
        return DeepReview(feedback="Unable to complete detailed review")

    try:
        return parse_llm_json(raw, DeepReview)
    except (ValueError, ValidationError) as e:
        logger.warning(f"Could not parse deep validation for {field_title}: {e}")
        return DeepReview(feedback="Unable to parse detailed feedback")


async def field_improvements(
    field_title: str,
    content: str,
    category: FieldCategory,
    grant: GrantContext,
    generator: TextGenerator | None = None,
) -> tuple[list[str], DeepReview]:
    """
    Combine heuristic and reviewer advice for one field.

    Returns:
        (up to six suggestions, the deep review). Suggestions are the
        validator's improvements, then the reviewer's, then category tips.
    """
    heuristic = validate(content, category)
    review = await deep_validate_response(content, field_title, category, grant, generator)

    suggestions = [
        *heuristic.improvements,
        *review.key_improvements,
        *improvement_suggestions(category, heuristic.score),
    ]
    return suggestions[:MAX_FIELD_IMPROVEMENTS], review
