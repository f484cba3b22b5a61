"""Keyword patterns mapping raw question text onto the category taxonomy.

Tables here are data, not logic. Keyword lists must stay stable: tests pin
classification results to them.
"""

from dataclasses import dataclass
from types import MappingProxyType

from autoapply.core.schemas_questions import FieldCategory


@dataclass(frozen=True)
class QuestionPattern:
    category: FieldCategory
    keywords: tuple[str, ...]


@dataclass(frozen=True)
class PatternMatch:
    category: FieldCategory
    score: int
    confidence: float


C = FieldCategory

# Evaluated in declaration order; the first pattern wins ties.
QUESTION_PATTERNS: MappingProxyType[str, QuestionPattern] = MappingProxyType({
    "org_name": QuestionPattern(
        C.ORGANIZATION_IDENTITY,
        ("organization name", "legal name", "applicant name", "company name", "entity name"),
    ),
    "ein": QuestionPattern(
        C.ORGANIZATION_IDENTITY,
        ("ein", "tax id", "federal id", "employer identification", "tax exempt"),
    ),
    "duns": QuestionPattern(
        C.CERTIFICATIONS,
        ("duns", "sam", "uei", "unique entity", "cage code"),
    ),
    "address": QuestionPattern(
        C.CONTACT_INFO,
        ("address", "location", "street", "city", "state", "zip", "mailing"),
    ),
    "contact": QuestionPattern(
        C.CONTACT_INFO,
        ("contact", "phone", "email", "authorized representative", "project director", "pi name"),
    ),
    "mission": QuestionPattern(
        C.MISSION_VISION,
        ("mission", "purpose", "what does your organization do", "organization description"),
    ),
    "vision": QuestionPattern(
        C.MISSION_VISION,
        ("vision", "long-term goal", "ultimate aim", "aspiration"),
    ),
    "history": QuestionPattern(
        C.ORGANIZATION_BACKGROUND,
        ("history", "founded", "established", "background", "how long", "years in operation"),
    ),
    "problem": QuestionPattern(
        C.PROBLEM_NEED,
        ("problem", "need", "challenge", "issue", "gap", "what problem", "why is this needed"),
    ),
    "solution": QuestionPattern(
        C.SOLUTION_APPROACH,
        ("solution", "approach", "methodology", "how will you", "proposed project", "what will you do"),
    ),
    "target": QuestionPattern(
        C.TARGET_POPULATION,
        ("target", "serve", "beneficiaries", "population", "who will benefit", "demographics", "clients"),
    ),
    "geography": QuestionPattern(
        C.GEOGRAPHIC_SCOPE,
        ("geographic", "service area", "region", "where", "location of project", "communities served"),
    ),
    "goals": QuestionPattern(
        C.GOALS_OBJECTIVES,
        ("goal", "objective", "outcome", "what do you hope to achieve", "expected results"),
    ),
    "activities": QuestionPattern(
        C.ACTIVITIES_TIMELINE,
        ("activities", "timeline", "milestones", "schedule", "work plan", "tasks", "deliverables"),
    ),
    "evaluation": QuestionPattern(
        C.EVALUATION_PLAN,
        ("evaluation", "measure", "assess", "metrics", "indicators", "how will you know", "success"),
    ),
    "team": QuestionPattern(
        C.TEAM_QUALIFICATIONS,
        ("team", "staff", "personnel", "qualifications", "experience", "who will", "key people", "bios"),
    ),
    "capacity": QuestionPattern(
        C.ORGANIZATIONAL_CAPACITY,
        ("capacity", "capability", "infrastructure", "resources", "able to", "track record"),
    ),
    "partners": QuestionPattern(
        C.PARTNERSHIPS,
        ("partner", "collaborat", "coalition", "alliance", "working with", "mou", "letter of support"),
    ),
    "budget": QuestionPattern(
        C.BUDGET_SUMMARY,
        ("budget", "cost", "funding", "amount requested", "total project cost"),
    ),
    "budget_detail": QuestionPattern(
        C.BUDGET_LINE_ITEMS,
        ("line item", "personnel cost", "equipment", "supplies", "travel", "indirect", "fringe"),
    ),
    "budget_justify": QuestionPattern(
        C.BUDGET_JUSTIFICATION,
        ("justify", "explain cost", "why this amount", "budget narrative", "cost explanation"),
    ),
    "sustainability": QuestionPattern(
        C.SUSTAINABILITY,
        ("sustainability", "after the grant", "long-term", "continue", "maintain", "future funding"),
    ),
    "other_funding": QuestionPattern(
        C.DIVERSIFIED_FUNDING,
        ("other funding", "additional support", "funding sources", "revenue", "diversified"),
    ),
    "match": QuestionPattern(
        C.MATCHING_FUNDS,
        ("match", "cost share", "in-kind", "leverage", "matching funds"),
    ),
    "financial": QuestionPattern(
        C.FINANCIAL_HEALTH,
        ("financial statement", "990", "audit", "revenue", "financial health", "fiscal"),
    ),
    "innovation": QuestionPattern(
        C.INNOVATION,
        ("innovation", "novel", "unique", "different", "new approach", "cutting-edge"),
    ),
    "commercial": QuestionPattern(
        C.COMMERCIALIZATION,
        ("commercial", "market", "customer", "revenue model", "business model", "scale"),
    ),
    "ip": QuestionPattern(
        C.INTELLECTUAL_PROPERTY,
        ("intellectual property", "patent", "trademark", "license", "ip strategy"),
    ),
    "risk": QuestionPattern(
        C.RISK_MITIGATION,
        ("risk", "challenge", "obstacle", "barrier", "mitigation", "contingency"),
    ),
    "impact": QuestionPattern(
        C.OUTCOMES_IMPACT,
        ("impact", "difference", "change", "benefit", "outcome", "result"),
    ),
})


def _keyword_weight(keyword: str) -> int:
    # Multi-word phrases are more specific than incidental substring hits
    return len(keyword.split())


def match_question_pattern(question: str) -> PatternMatch | None:
    """Score every pattern against the question and return the best, if any matched.

    Matching is case-insensitive substring matching. A pattern's score is the
    sum of word counts of its matched keywords; confidence is min(score / 3, 1).
    """
    lowered = question.lower()
    best: PatternMatch | None = None

    for pattern in QUESTION_PATTERNS.values():
        score = sum(_keyword_weight(kw) for kw in pattern.keywords if kw in lowered)
        if score > 0 and (best is None or score > best.score):
            best = PatternMatch(
                category=pattern.category,
                score=score,
                confidence=min(score / 3, 1.0),
            )

    return best


def category_keywords(category: FieldCategory) -> list[str]:
    """Union of every pattern keyword that maps to the category, in table order."""
    keywords: list[str] = []
    for pattern in QUESTION_PATTERNS.values():
        if pattern.category != category:
            continue
        for keyword in pattern.keywords:
            if keyword not in keywords:
                keywords.append(keyword)
    return keywords
