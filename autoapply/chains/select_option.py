"""Pick an answer for select/dropdown fields.

Keyword overlap between option words and the organization's data decides
first. The model is only asked when nothing overlaps, and its answer is
accepted only when it names one of the options exactly (ignoring case).
"""

from dataclasses import dataclass

from autoapply.core.llm import TextGenerator, generate_with_timeout
from autoapply.core.logging import get_logger

logger = get_logger(__name__)

SELECT_MAX_TOKENS = 100

SELECT_PROMPT = """Based on this organization information, select the most appropriate option.

Organization Data:
{org_data}

Question: {question}

Options:
{options}

Return ONLY the exact text of the best matching option, nothing else."""


@dataclass(frozen=True)
class OptionChoice:
    option: str | None
    source: str  # "keyword", "model" or "none"
    overlap: int = 0


def best_keyword_option(options: list[str], relevant_data: dict[str, str]) -> tuple[str | None, int]:
    """Return the option whose words occur most in the data; first option wins ties."""
    data_text = " ".join(relevant_data.values()).lower()
    best: str | None = None
    best_overlap = 0
    for option in options:
        overlap = sum(1 for word in option.lower().split() if word in data_text)
        if overlap > best_overlap:
            best, best_overlap = option, overlap
    return best, best_overlap


def match_option(answer: str, options: list[str]) -> str | None:
    wanted = answer.strip().strip('"').strip().lower()
    return next((o for o in options if o.lower() == wanted), None)


async def choose_option(
    question: str,
    options: list[str],
    relevant_data: dict[str, str],
    generator: TextGenerator | None = None,
) -> OptionChoice:
    """
    Choose one of the declared options.

    Args:
        question: Original question text
        options: Declared options, in form order
        relevant_data: Profile values available for this question
        generator: Text generator consulted when no option overlaps the data

    Returns:
        OptionChoice; option is None when neither keywords nor the model decided
    """
    option, overlap = best_keyword_option(options, relevant_data)
    if option is not None:
        return OptionChoice(option=option, source="keyword", overlap=overlap)

    if generator is None or not options:
        return OptionChoice(option=None, source="none")

    prompt = SELECT_PROMPT.format(
        org_data="\n".join(f"- {k}: {v}" for k, v in relevant_data.items()) or "- (none)",
        question=question,
        options="\n".join(f"{i}. {o}" for i, o in enumerate(options, start=1)),
    )
    try:
        answer = await generate_with_timeout(generator, prompt, SELECT_MAX_TOKENS)
    except Exception as e:
        logger.warning(f"Failed to determine select option: {e}")
        return OptionChoice(option=None, source="none")

    matched = match_option(answer, options)
    if matched is None:
        logger.info(f"Model suggested an option outside the list: {answer.strip()[:80]!r}")
        return OptionChoice(option=None, source="none")
    return OptionChoice(option=matched, source="model")
