"""Funder archetypes and the writing tone each one expects."""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType

from autoapply.core.schemas_organization import GrantContext


class FunderType(str, Enum):
    FEDERAL = "federal"
    FOUNDATION = "foundation"
    CORPORATE = "corporate"
    STATE = "state"


@dataclass(frozen=True)
class FunderTone:
    tone: str
    emphasize: tuple[str, ...]
    avoid: tuple[str, ...]


FUNDER_TONE_CONFIG: MappingProxyType[FunderType, FunderTone] = MappingProxyType({
    FunderType.FEDERAL: FunderTone(
        tone="Technical, rigorous, and methodologically detailed",
        emphasize=(
            "Innovation and scientific merit",
            "Broader impacts",
            "Clear methodology and timeline",
            "Budget justification",
            "Measurable outcomes",
            "Alignment with agency priorities",
        ),
        avoid=(
            "Vague claims without evidence",
            "Marketing language",
            "Emotional appeals",
            "Undefined acronyms",
        ),
    ),
    FunderType.FOUNDATION: FunderTone(
        tone="Mission-driven storytelling with impact focus",
        emphasize=(
            "Connection to foundation mission",
            "Human impact and stories",
            "Sustainability plan",
            "Community engagement",
            "Outcomes over outputs",
        ),
        avoid=(
            "Overly technical jargon",
            "Ignoring foundation priorities",
            "Short-term thinking only",
        ),
    ),
    FunderType.CORPORATE: FunderTone(
        tone="Business-oriented with ROI focus",
        emphasize=(
            "Return on investment",
            "Scalability",
            "Brand alignment",
            "Measurable metrics",
            "Market potential",
        ),
        avoid=(
            "Academic language",
            "Ignoring business value",
            "Unrealistic projections",
        ),
    ),
    FunderType.STATE: FunderTone(
        tone="Local impact focused with practical applications",
        emphasize=(
            "State/local benefits",
            "Job creation",
            "Economic development",
            "Compliance with regulations",
            "Partnerships with local organizations",
        ),
        avoid=(
            "Ignoring local context",
            "Generic approaches",
            "Missing state-specific requirements",
        ),
    ),
})

_FEDERAL_FUNDER_MARKERS = ("nsf", "nih", "doe", "sbir", "sttr")
_FOUNDATION_FUNDER_MARKERS = ("foundation", "trust", "fund")
_CORPORATE_FUNDER_MARKERS = ("inc", "corp", "llc")


def determine_funder_type(grant: GrantContext) -> FunderType:
    """Pick the tone archetype from grant type, funder name and category.

    Substring heuristics, checked federal -> foundation -> corporate -> state.
    Foundation is the default since its tone fits the widest range of funders.
    """
    grant_type = (grant.type or "").lower()
    funder = grant.funder.lower()
    category = (grant.category or "").lower()

    if "federal" in grant_type or any(m in funder for m in _FEDERAL_FUNDER_MARKERS):
        return FunderType.FEDERAL
    if "foundation" in grant_type or any(m in funder for m in _FOUNDATION_FUNDER_MARKERS):
        return FunderType.FOUNDATION
    if "corporate" in grant_type or any(m in funder for m in _CORPORATE_FUNDER_MARKERS):
        return FunderType.CORPORATE
    if "state" in grant_type or "state" in category:
        return FunderType.STATE
    return FunderType.FOUNDATION
