"""Heuristic rule tables used by the quality validator."""

import re
from dataclasses import dataclass, field
from types import MappingProxyType

from autoapply.core.schemas_generation import IssueType
from autoapply.core.schemas_questions import FieldCategory


@dataclass(frozen=True)
class RuleGroup:
    """A family of regexes reported as at most one issue per validation pass."""

    code: str
    patterns: tuple[re.Pattern[str], ...]
    message: str
    issue_type: IssueType = IssueType.WARNING
    flag_on_first: bool = False  # otherwise a single pattern must recur
    suggestion: str | None = None


def _ci(*patterns: str) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(p, re.IGNORECASE) for p in patterns)


RULE_GROUPS: tuple[RuleGroup, ...] = (
    RuleGroup(
        code="VAGUE_LANGUAGE",
        patterns=_ci(
            r"\bvery\b",
            r"\breally\b",
            r"\bkind of\b",
            r"\bsort of\b",
            r"\bsomewhat\b",
            r"\bfairly\b",
            r"\bquite\b",
            r"\bsignificant(?:ly)?\b",
            r"\bsubstantial(?:ly)?\b",
            r"\bmany\b",
            r"\bseveral\b",
            r"\bnumerous\b",
        ),
        message="Vague language detected. Use specific numbers and concrete details.",
        suggestion="Replace with specific numbers or concrete examples",
    ),
    RuleGroup(
        code="PASSIVE_VOICE",
        patterns=_ci(
            r"\bwas\s+\w+ed\b",
            r"\bwere\s+\w+ed\b",
            r"\bis\s+being\b",
            r"\bhas\s+been\b",
            r"\bhave\s+been\b",
            r"\bwill\s+be\s+\w+ed\b",
        ),
        message="Consider using active voice for stronger impact.",
    ),
    RuleGroup(
        code="WEAK_VERBS",
        patterns=_ci(
            r"\bwill\s+try\b",
            r"\bhope\s+to\b",
            r"\bplan\s+to\b",
            r"\bintend\s+to\b",
            r"\bwould\s+like\b",
            r"\bmight\b",
            r"\bcould\s+potentially\b",
        ),
        message="Weak or uncertain language. Use confident, action-oriented verbs.",
    ),
    RuleGroup(
        code="FILLER_WORDS",
        patterns=_ci(
            r"\bin\s+order\s+to\b",
            r"\bdue\s+to\s+the\s+fact\b",
            r"\bat\s+this\s+point\s+in\s+time\b",
            r"\bit\s+should\s+be\s+noted\b",
            r"\bit\s+is\s+important\s+to\s+note\b",
        ),
        message="Remove filler phrases for concise writing.",
    ),
    RuleGroup(
        code="MISSING_DATA",
        patterns=(
            re.compile(r"\bX+\b"),
            re.compile(r"\b(?:TBD|TODO|INSERT|PLACEHOLDER)\b"),
            re.compile(r"\[\s*(?:tbd|todo|insert|placeholder|add|enter|your)\b[^\]]*\]", re.IGNORECASE),
            re.compile(r"\[[a-z][a-z /]{2,30}\]"),
            re.compile(r"\[[A-Z][A-Za-z /]{2,30}\]"),
        ),
        message="Missing data placeholder detected. Fill in specific information.",
        issue_type=IssueType.ERROR,
        flag_on_first=True,
    ),
)

WORD_PATTERN = re.compile(r"\b[a-z]+\b")

STOPWORDS = frozenset({
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
    "of", "with", "by", "from", "as", "is", "was", "are", "were", "been",
    "be", "have", "has", "had", "do", "does", "did", "will", "would",
    "could", "should", "may", "might", "must", "shall", "can", "this",
    "that", "these", "those", "it", "its", "they", "them", "their",
    "we", "our", "you", "your", "he", "she", "his", "her", "which",
})

# Frequency is counted over words longer than 3 characters; a word is
# overused when it is longer than 4 characters and appears more than 3 times.
REPETITION_MIN_COUNTED_LENGTH = 4
REPETITION_MIN_FLAGGED_LENGTH = 5
REPETITION_MAX_USES = 3


# =============================================================================
# Category requirements
# =============================================================================


@dataclass(frozen=True)
class CategoryRequirement:
    required: tuple[str, ...]
    recommended: tuple[str, ...]
    min_words: int | None = None
    max_words: int | None = None


C = FieldCategory

CATEGORY_REQUIREMENTS: MappingProxyType[FieldCategory, CategoryRequirement] = MappingProxyType({
    C.PROBLEM_NEED: CategoryRequirement(
        required=("data", "statistics", "impact"),
        recommended=("trends", "root cause", "urgency"),
        min_words=150,
        max_words=500,
    ),
    C.SOLUTION_APPROACH: CategoryRequirement(
        required=("methodology", "activities", "timeline"),
        recommended=("innovation", "evidence-based", "scalability"),
        min_words=200,
        max_words=750,
    ),
    C.OUTCOMES_IMPACT: CategoryRequirement(
        required=("metrics", "measurement", "targets"),
        recommended=("long-term impact", "sustainability", "replication"),
        min_words=150,
        max_words=400,
    ),
    C.BUDGET_SUMMARY: CategoryRequirement(
        required=("amounts", "categories", "justification"),
        recommended=("cost-effectiveness", "leverage", "matching"),
        min_words=100,
        max_words=300,
    ),
    C.TEAM_QUALIFICATIONS: CategoryRequirement(
        required=("credentials", "experience", "roles"),
        recommended=("track record", "capacity", "partnerships"),
        min_words=150,
        max_words=400,
    ),
    C.ORGANIZATION_BACKGROUND: CategoryRequirement(
        required=("mission", "history", "programs"),
        recommended=("achievements", "community connection", "governance"),
        min_words=100,
        max_words=350,
    ),
})


# =============================================================================
# Metric signals
# =============================================================================


@dataclass(frozen=True)
class Signal:
    pattern: re.Pattern[str]
    points: int


PERCENT_PATTERN = re.compile(r"\d+%")
CURRENCY_PATTERN = re.compile(r"\$[\d,]+")
PEOPLE_COUNT_PATTERN = re.compile(
    r"\d+\s*(?:people|participants|users|beneficiaries)", re.IGNORECASE
)
SENTENCE_END_PATTERN = re.compile(r"[.!?]+")

SPECIFICITY_SIGNALS: tuple[Signal, ...] = (
    Signal(PERCENT_PATTERN, 10),
    Signal(CURRENCY_PATTERN, 10),
    Signal(PEOPLE_COUNT_PATTERN, 10),
    Signal(re.compile(r"specifically|in particular|for example", re.IGNORECASE), 5),
)

EVIDENCE_PATTERN = re.compile(r"evidence|research|study|data shows", re.IGNORECASE)

PROFESSIONALISM_PENALTIES: tuple[Signal, ...] = (
    Signal(re.compile(r"\b(?:very|really|kind of|sort of)\b", re.IGNORECASE), 5),
    Signal(re.compile(r"!{2,}"), 10),
    Signal(re.compile(r"\b(?:awesome|amazing|incredible)\b", re.IGNORECASE), 5),
)

PERSUASIVENESS_SIGNALS: tuple[Signal, ...] = (
    Signal(re.compile(r"will\s+(?:achieve|deliver|produce|create|improve)", re.IGNORECASE), 10),
    Signal(re.compile(r"result|impact|outcome|benefit", re.IGNORECASE), 10),
    Signal(re.compile(r"evidence|proven|demonstrated", re.IGNORECASE), 5),
)

STRENGTH_SIGNALS: tuple[tuple[re.Pattern[str], str], ...] = (
    (
        re.compile(r"\d+%|\$[\d,]+|\d+\s*(?:people|participants|users)", re.IGNORECASE),
        "Includes specific metrics and data points",
    ),
    (EVIDENCE_PATTERN, "References evidence-based support"),
    (
        re.compile(r"goal|objective|outcome|result", re.IGNORECASE),
        "Clearly states goals or outcomes",
    ),
)

METRIC_WEIGHTS: MappingProxyType[str, float] = MappingProxyType({
    "clarity": 0.15,
    "specificity": 0.20,
    "relevance": 0.15,
    "completeness": 0.20,
    "professionalism": 0.10,
    "persuasiveness": 0.10,
    "compliance": 0.10,
})

ERROR_PENALTY = 15
WARNING_PENALTY = 5
MAX_ISSUE_PENALTY = 40


# =============================================================================
# Advice
# =============================================================================


@dataclass(frozen=True)
class ScoreBand:
    below: int
    advice: tuple[str, ...] = field(default_factory=tuple)


SCORE_BAND_ADVICE: tuple[ScoreBand, ...] = (
    ScoreBand(
        60,
        (
            "Add specific data points and statistics to support your claims",
            "Use concrete examples to illustrate your points",
            "Ensure all required information is included",
        ),
    ),
    ScoreBand(
        75,
        (
            "Strengthen your opening statement to immediately engage the reader",
            "Add more measurable outcomes and metrics",
            "Connect your work directly to the funder's stated priorities",
        ),
    ),
    ScoreBand(
        90,
        (
            "Polish language for maximum clarity and impact",
            "Ensure smooth transitions between ideas",
            "Double-check alignment with all stated requirements",
        ),
    ),
)

CATEGORY_TIPS: MappingProxyType[FieldCategory, tuple[str, ...]] = MappingProxyType({
    C.PROBLEM_NEED: (
        "Include local or regional data specific to your service area",
        "Reference recent research or trends that highlight urgency",
        "Connect the problem to broader societal impacts",
    ),
    C.SOLUTION_APPROACH: (
        "Clearly explain why your approach will work",
        "Reference evidence or best practices supporting your methods",
        "Include a realistic timeline with milestones",
    ),
    C.OUTCOMES_IMPACT: (
        "Define SMART outcomes (Specific, Measurable, Achievable, Relevant, Time-bound)",
        "Explain your data collection and evaluation methodology",
        "Describe both short-term and long-term impacts",
    ),
    C.BUDGET_SUMMARY: (
        "Justify each budget line item with clear rationale",
        "Show cost-effectiveness or value for money",
        "Mention any matching funds or in-kind contributions",
    ),
    C.TEAM_QUALIFICATIONS: (
        "Highlight specific credentials relevant to this project",
        "Mention past successes or track record",
        "Describe how the team structure supports project success",
    ),
    C.SUSTAINABILITY: (
        "Describe multiple funding sources for continuation",
        "Explain how the program will become self-sustaining",
        "Mention any partnerships that support long-term viability",
    ),
})
MAX_CATEGORY_TIPS = 2
