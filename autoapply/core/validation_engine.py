"""Quality validation and scoring for drafted responses.

Two independent passes feed one result:
- heuristic issue detection (rule groups, word repetition, hard limits)
- category requirement checks (required/recommended concepts, word range)

Seven metrics are derived from simple textual signals, each penalised by a
shared issue penalty, then collapsed into a weighted score and a level.
"""

import math
from collections import Counter
from collections.abc import Mapping
from dataclasses import dataclass, field

from autoapply.core.category_guidance import guidance_for
from autoapply.core.quality_rules import (
    CATEGORY_REQUIREMENTS,
    CATEGORY_TIPS,
    CURRENCY_PATTERN,
    ERROR_PENALTY,
    EVIDENCE_PATTERN,
    MAX_CATEGORY_TIPS,
    MAX_ISSUE_PENALTY,
    METRIC_WEIGHTS,
    PERCENT_PATTERN,
    PERSUASIVENESS_SIGNALS,
    PROFESSIONALISM_PENALTIES,
    REPETITION_MAX_USES,
    REPETITION_MIN_COUNTED_LENGTH,
    REPETITION_MIN_FLAGGED_LENGTH,
    RULE_GROUPS,
    SCORE_BAND_ADVICE,
    SENTENCE_END_PATTERN,
    SPECIFICITY_SIGNALS,
    STOPWORDS,
    STRENGTH_SIGNALS,
    WARNING_PENALTY,
    WORD_PATTERN,
)
from autoapply.core.schemas_application import ReadinessLevel
from autoapply.core.schemas_generation import (
    IssueType,
    QualityLevel,
    QualityMetrics,
    QualityResult,
    ValidationIssue,
    count_words,
)
from autoapply.core.schemas_questions import FieldCategory, QuestionIntent

MIN_CONTENT_CHARS = 10
KEY_ELEMENT_COVERAGE = 0.3
RED_FLAG_MIN_WORD_LENGTH = 5

GOOD_SCORE = 75
MINIMUM_SCORE = 60
MAX_TOLERATED_ERRORS = 2


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def level_for_score(score: int) -> QualityLevel:
    """Step function from score to level."""
    if score >= 90:
        return QualityLevel.EXCELLENT
    if score >= 75:
        return QualityLevel.GOOD
    if score >= 60:
        return QualityLevel.ACCEPTABLE
    if score >= 40:
        return QualityLevel.NEEDS_WORK
    return QualityLevel.INSUFFICIENT


def fixed_quality_result(
    score: int,
    issues: list[ValidationIssue] | None = None,
    improvements: list[str] | None = None,
) -> QualityResult:
    """Quality result with every metric pinned to the given score.

    Used for responses that are not scored heuristically: verbatim profile
    values, option selections and empty placeholders.
    """
    issues = issues or []
    metrics = QualityMetrics(
        clarity=score,
        specificity=score,
        relevance=score,
        completeness=score,
        professionalism=score,
        persuasiveness=score,
        compliance=score,
        overall=score,
    )
    return QualityResult(
        score=score,
        level=level_for_score(score),
        is_valid=not any(i.type == IssueType.ERROR for i in issues),
        issues=issues,
        improvements=improvements or [],
        strengths=[],
        metrics=metrics,
    )


# =============================================================================
# Issue detection
# =============================================================================


def _rule_group_issues(content: str) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    for group in RULE_GROUPS:
        for pattern in group.patterns:
            matches = pattern.findall(content)
            if matches and (group.flag_on_first or len(matches) > 1):
                issues.append(
                    ValidationIssue(
                        type=group.issue_type,
                        code=group.code,
                        message=group.message,
                        suggestion=group.suggestion,
                    )
                )
                break
    return issues


def word_frequency(content: str) -> list[tuple[str, int]]:
    """Non-stopword counts for words longer than 3 characters, most used first."""
    words = [
        w
        for w in WORD_PATTERN.findall(content.lower())
        if w not in STOPWORDS and len(w) >= REPETITION_MIN_COUNTED_LENGTH
    ]
    return Counter(words).most_common()


def _repetition_issue(content: str) -> ValidationIssue | None:
    overused = [
        (word, count)
        for word, count in word_frequency(content)
        if count > REPETITION_MAX_USES and len(word) >= REPETITION_MIN_FLAGGED_LENGTH
    ]
    if not overused:
        return None
    listed = ", ".join(f'"{word}" ({count}x)' for word, count in overused[:3])
    return ValidationIssue(
        type=IssueType.WARNING,
        code="WORD_REPETITION",
        message=f"Overused words: {listed}",
        suggestion="Use synonyms to vary your vocabulary",
    )


def _limit_issues(
    content: str, word_count: int, word_limit: int | None, character_limit: int | None
) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    if word_limit and word_count > word_limit:
        issues.append(
            ValidationIssue(
                type=IssueType.ERROR,
                code="WORD_LIMIT_EXCEEDED",
                message=f"Response exceeds word limit ({word_count}/{word_limit} words)",
                suggestion=f"Reduce content by {word_count - word_limit} words",
            )
        )
    if character_limit and len(content) > character_limit:
        issues.append(
            ValidationIssue(
                type=IssueType.ERROR,
                code="CHARACTER_LIMIT_EXCEEDED",
                message=(
                    f"Response exceeds character limit ({len(content)}/{character_limit} characters)"
                ),
                suggestion=f"Remove {len(content) - character_limit} characters",
            )
        )
    return issues


def _category_checks(
    content: str, category: FieldCategory, word_count: int
) -> tuple[list[ValidationIssue], list[str], list[str]]:
    """Return (issues, improvements, strengths) from the category requirement table."""
    requirement = CATEGORY_REQUIREMENTS.get(category)
    if requirement is None:
        return [], [], []

    issues: list[ValidationIssue] = []
    improvements: list[str] = []
    strengths: list[str] = []

    if requirement.min_words is not None and word_count < requirement.min_words:
        issues.append(
            ValidationIssue(
                type=IssueType.WARNING,
                code="TOO_SHORT",
                message=f"Response may be too brief for {category.label} ({word_count} words)",
                suggestion=f"Consider expanding to at least {requirement.min_words} words",
            )
        )
    if requirement.max_words is not None and word_count > requirement.max_words:
        issues.append(
            ValidationIssue(
                type=IssueType.WARNING,
                code="TOO_LONG",
                message=f"Response is longer than typical for {category.label} ({word_count} words)",
                suggestion=f"Consider tightening to about {requirement.max_words} words",
            )
        )

    lowered = content.lower()
    missing_required = [req for req in requirement.required if req.lower() not in lowered]
    if missing_required:
        improvements.append(f"Consider adding: {', '.join(missing_required)}")

    present_recommended = [rec for rec in requirement.recommended if rec.lower() in lowered]
    if present_recommended:
        strengths.append(f"Includes important elements: {', '.join(present_recommended)}")

    return issues, improvements, strengths


def _intent_checks(
    content: str, intent: QuestionIntent
) -> tuple[list[ValidationIssue], list[str]]:
    """Red-flag and key-element coverage checks against the resolved intent."""
    lowered = content.lower()
    issues: list[ValidationIssue] = []
    improvements: list[str] = []

    flagged = []
    for red_flag in intent.red_flags:
        words = [w for w in red_flag.lower().split() if len(w) >= RED_FLAG_MIN_WORD_LENGTH]
        if any(w in lowered for w in words):
            flagged.append(red_flag)
    if flagged:
        issues.append(
            ValidationIssue(
                type=IssueType.SUGGESTION,
                code="RED_FLAG",
                message=f"May contain: {'; '.join(flagged[:3])}",
                suggestion="Review against what funders penalise for this question",
            )
        )

    key_elements = guidance_for(intent.category).key_elements
    covered = sum(
        1 for element in key_elements if any(w in lowered for w in element.lower().split())
    )
    if covered / max(len(key_elements), 1) < KEY_ELEMENT_COVERAGE:
        improvements.append(
            f"Consider addressing more key elements: {', '.join(key_elements)}"
        )

    return issues, improvements


def _strengths(content: str) -> list[str]:
    return [label for pattern, label in STRENGTH_SIGNALS if pattern.search(content)]


# =============================================================================
# Metrics
# =============================================================================


def _clamp(value: float, low: float, high: float = 100) -> float:
    return max(low, min(high, value))


def compute_metrics(
    content: str, category: FieldCategory, issues: list[ValidationIssue]
) -> dict[str, float]:
    """Raw (unrounded) metric values for the content."""
    word_count = count_words(content)
    sentence_count = len(SENTENCE_END_PATTERN.findall(content))
    avg_sentence_length = word_count / sentence_count if sentence_count else word_count

    error_penalty = sum(ERROR_PENALTY for i in issues if i.type == IssueType.ERROR)
    warning_penalty = sum(WARNING_PENALTY for i in issues if i.type == IssueType.WARNING)
    penalty = min(error_penalty + warning_penalty, MAX_ISSUE_PENALTY)

    clarity = 85
    if avg_sentence_length > 30:
        clarity -= 15
    if avg_sentence_length > 40:
        clarity -= 10
    if avg_sentence_length < 10:
        clarity -= 5

    specificity = 70 + sum(s.points for s in SPECIFICITY_SIGNALS if s.pattern.search(content))

    relevance = 80
    if EVIDENCE_PATTERN.search(content):
        relevance += 5

    completeness = 75
    requirement = CATEGORY_REQUIREMENTS.get(category)
    if requirement is not None and requirement.min_words:
        if word_count >= requirement.min_words:
            completeness += 15
        if word_count >= requirement.min_words * 1.5:
            completeness += 10
        if word_count < requirement.min_words * 0.5:
            completeness -= 20

    professionalism = 85 - sum(
        s.points for s in PROFESSIONALISM_PENALTIES if s.pattern.search(content)
    )
    persuasiveness = 70 + sum(
        s.points for s in PERSUASIVENESS_SIGNALS if s.pattern.search(content)
    )

    return {
        "clarity": _clamp(clarity - penalty * 0.3, 50),
        "specificity": _clamp(specificity - penalty * 0.4, 50),
        "relevance": _clamp(relevance - penalty * 0.2, 50),
        "completeness": _clamp(completeness - penalty * 0.3, 40),
        "professionalism": _clamp(professionalism - penalty * 0.2, 50),
        "persuasiveness": _clamp(persuasiveness - penalty * 0.3, 50),
        "compliance": _clamp(100 - error_penalty - warning_penalty * 0.5, 40),
    }


def weighted_score(metrics: Mapping[str, float]) -> int:
    return round_half_up(sum(metrics[name] * weight for name, weight in METRIC_WEIGHTS.items()))


# =============================================================================
# Public API
# =============================================================================


def validate(
    content: str,
    category: FieldCategory,
    word_limit: int | None = None,
    *,
    character_limit: int | None = None,
    intent: QuestionIntent | None = None,
) -> QualityResult:
    """
    Validate a response and score its quality.

    Args:
        content: Response text (generated or user-written)
        category: Question category, selects requirement checks
        word_limit: Hard word limit; exceeding it is an error
        character_limit: Hard character limit; exceeding it is an error
        intent: Resolved intent, enables red-flag and key-element checks

    Returns:
        QualityResult; is_valid is False iff any error-type issue was found
    """
    if len(content.strip()) < MIN_CONTENT_CHARS:
        return QualityResult(
            score=0,
            level=QualityLevel.INSUFFICIENT,
            is_valid=False,
            issues=[
                ValidationIssue(
                    type=IssueType.ERROR,
                    code="EMPTY_RESPONSE",
                    message="Response is empty or too short",
                    suggestion="Provide a complete response to this question",
                )
            ],
            metrics=QualityMetrics(
                clarity=0,
                specificity=0,
                relevance=0,
                completeness=0,
                professionalism=0,
                persuasiveness=0,
                compliance=0,
                overall=0,
            ),
        )

    word_count = count_words(content)
    issues = _limit_issues(content, word_count, word_limit, character_limit)
    issues.extend(_rule_group_issues(content))

    repetition = _repetition_issue(content)
    if repetition is not None:
        issues.append(repetition)

    category_issues, improvements, strengths = _category_checks(content, category, word_count)
    issues.extend(category_issues)

    if intent is not None:
        intent_issues, intent_improvements = _intent_checks(content, intent)
        issues.extend(intent_issues)
        improvements.extend(intent_improvements)

    strengths.extend(_strengths(content))

    raw = compute_metrics(content, category, issues)
    score = weighted_score(raw)
    metrics = QualityMetrics(
        **{name: round_half_up(value) for name, value in raw.items()},
        overall=score,
    )

    return QualityResult(
        score=score,
        level=level_for_score(score),
        is_valid=not any(i.type == IssueType.ERROR for i in issues),
        issues=issues,
        improvements=improvements,
        strengths=strengths,
        metrics=metrics,
    )


def readiness_for(error_count: int, score: int) -> ReadinessLevel:
    """Application verdict from total error-level issues and mean score."""
    if error_count == 0 and score >= GOOD_SCORE:
        return ReadinessLevel.READY
    if error_count > MAX_TOLERATED_ERRORS or score < MINIMUM_SCORE:
        return ReadinessLevel.NOT_READY
    return ReadinessLevel.NEEDS_WORK


def application_summary(
    score: int, readiness: ReadinessLevel, issue_count: int, strengths: list[str]
) -> str:
    if readiness == ReadinessLevel.READY:
        summary = f"Your application is ready for submission with a quality score of {score}/100."
    elif readiness == ReadinessLevel.NEEDS_WORK:
        summary = (
            f"Your application needs some improvements before submission (score: {score}/100)."
        )
    else:
        summary = (
            f"Your application requires significant work before submission (score: {score}/100)."
        )

    if issue_count > 0:
        summary += f" There are {issue_count} issue(s) to address."
    if strengths:
        summary += f" Strengths include: {'; '.join(strengths[:2])}."
    return summary


@dataclass(frozen=True)
class ResponseEntry:
    content: str
    category: FieldCategory
    word_limit: int | None = None


@dataclass
class ApplicationValidation:
    overall_score: int
    readiness_level: ReadinessLevel
    summary: str
    field_results: dict[str, QualityResult] = field(default_factory=dict)
    application_issues: list[ValidationIssue] = field(default_factory=list)


def validate_application(entries: Mapping[str, ResponseEntry]) -> ApplicationValidation:
    """Validate every response of an application and derive a readiness verdict."""
    field_results: dict[str, QualityResult] = {}
    application_issues: list[ValidationIssue] = []

    for field_id, entry in entries.items():
        result = validate(entry.content, entry.category, entry.word_limit)
        field_results[field_id] = result
        application_issues.extend(
            issue.model_copy(update={"field": field_id})
            for issue in result.issues
            if issue.type == IssueType.ERROR
        )

    overall_score = (
        round_half_up(sum(r.score for r in field_results.values()) / len(field_results))
        if field_results
        else 0
    )

    incomplete = [
        field_id
        for field_id, entry in entries.items()
        if len(entry.content.strip()) < MIN_CONTENT_CHARS
    ]
    if incomplete:
        application_issues.append(
            ValidationIssue(
                type=IssueType.ERROR,
                code="INCOMPLETE_APPLICATION",
                message=f"{len(incomplete)} field(s) are empty or incomplete",
            )
        )

    readiness = readiness_for(len(application_issues), overall_score)
    strengths = [s for r in field_results.values() for s in r.strengths]

    return ApplicationValidation(
        overall_score=overall_score,
        readiness_level=readiness,
        summary=application_summary(overall_score, readiness, len(application_issues), strengths),
        field_results=field_results,
        application_issues=application_issues,
    )


def improvement_suggestions(category: FieldCategory, score: int) -> list[str]:
    """Score-band advice plus up to two category-specific tips."""
    suggestions: list[str] = []
    for band in SCORE_BAND_ADVICE:
        if score < band.below:
            suggestions.extend(band.advice)
            break
    suggestions.extend(CATEGORY_TIPS.get(category, ())[:MAX_CATEGORY_TIPS])
    return suggestions
