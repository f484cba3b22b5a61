"""Post-processing of raw model output before it is scored."""

import math
import re

# Conversational lead-ins models put before the actual answer
_PREAMBLE = re.compile(
    r"^(?:Here is|Here's|Based on|Below is|I've written|Let me|Sure,)[^.:\n]*[.:]\s*",
    re.IGNORECASE,
)
_BLANK_LINE_RUN = re.compile(r"(?:[ \t]*\n){3,}")
_WORD = re.compile(r"\S+")
_SENTENCE_END = re.compile(r"[.!?][\"')\]]*$")

ELLIPSIS = "..."
MIN_KEPT_FRACTION = 0.7


def strip_preamble(text: str) -> str:
    """Drop a leading lead-in sentence; a text that is only that sentence is kept."""
    cleaned = text.strip()
    stripped = _PREAMBLE.sub("", cleaned, count=1)
    return stripped or cleaned


def truncate_to_characters(text: str, character_limit: int) -> str:
    if len(text) <= character_limit:
        return text
    if character_limit < len(ELLIPSIS):
        return text[:character_limit]
    keep = character_limit - len(ELLIPSIS)
    return text[:keep].rstrip() + ELLIPSIS


def truncate_to_words(text: str, word_limit: int) -> str:
    """Cut text to at most word_limit words, preferring a sentence boundary.

    The cut lands on the last sentence end that still keeps at least 70% of
    the limit; when there is none, the text is cut after exactly word_limit words.
    """
    words = list(_WORD.finditer(text))
    if len(words) <= word_limit:
        return text

    min_words = math.ceil(word_limit * MIN_KEPT_FRACTION)
    cut = words[word_limit - 1].end()
    for index in range(word_limit - 1, min_words - 2, -1):
        if index < 0:
            break
        if _SENTENCE_END.search(words[index].group()):
            cut = words[index].end()
            break
    return text[:cut]


def clean_response(
    text: str,
    word_limit: int | None = None,
    character_limit: int | None = None,
) -> str:
    """
    Clean raw generated text to fit the field.

    Strips AI preambles, collapses runs of blank lines to one blank line,
    hard-truncates with an ellipsis over the character limit, then trims to
    the word limit at a sentence boundary when one is close enough.
    Whitespace inside the text is otherwise preserved.
    """
    cleaned = strip_preamble(text)
    cleaned = _BLANK_LINE_RUN.sub("\n\n", cleaned)

    if character_limit and len(cleaned) > character_limit:
        cleaned = truncate_to_characters(cleaned, character_limit)

    if word_limit and len(_WORD.findall(cleaned)) > word_limit:
        cleaned = truncate_to_words(cleaned, word_limit)

    return cleaned.strip()
