"""Data-fit mapping: how much of an answer the organization already has.

Combines a resolved intent with the organization profile, its parsed
documents and its prior applications. Relevance here is keyword overlap,
not semantic similarity, so every decision can be traced to a literal match.
"""

from dataclasses import dataclass

from autoapply.core.category_patterns import category_keywords
from autoapply.core.document_types import effective_document_type
from autoapply.core.logging import get_logger
from autoapply.core.schemas_generation import ConfidenceLevel, DataFitMapping, MappingStrategy
from autoapply.core.schemas_organization import Document, OrganizationProfile, PriorApplication
from autoapply.core.schemas_questions import FieldCategory, QuestionIntent

logger = get_logger(__name__)

DOCUMENT_EXCERPT_CHARS = 1500
NARRATIVE_EXCERPT_CHARS = 800
RESPONSE_EXCERPT_CHARS = 500
MIN_REUSABLE_RESPONSE_CHARS = 50
MAX_REUSABLE_TEXTS = 3

BASE_RELEVANCE = 30
PER_FIELD_RELEVANCE = 15
MAX_FIELD_RELEVANCE = 60
DOCUMENT_RELEVANCE = 20
PRIOR_ANSWER_RELEVANCE = 25
MISSING_RELEVANCE_CAP = 20
DIRECT_RATIO = 0.7

_BUDGET_CATEGORIES = {
    FieldCategory.BUDGET_SUMMARY,
    FieldCategory.BUDGET_LINE_ITEMS,
    FieldCategory.BUDGET_JUSTIFICATION,
}
_FINANCIAL_DOCUMENT_TYPES = {"financials", "budget_template"}


@dataclass(frozen=True)
class _ReuseCandidate:
    hits: int
    length: int
    text: str


# =============================================================================
# Profile fields
# =============================================================================


def split_profile_fields(
    data_needed: list[str], profile: OrganizationProfile | None
) -> tuple[dict[str, str], list[str]]:
    """Return (available field -> value, missing fields) for the needed fields."""
    available: dict[str, str] = {}
    missing: list[str] = []
    for field in data_needed:
        value = profile.get(field) if profile else None
        if value:
            available[field] = value
        else:
            missing.append(field)
    return available, missing


def confidence_for_ratio(ratio: float) -> ConfidenceLevel:
    if ratio >= 0.8:
        return ConfidenceLevel.HIGH
    if ratio >= 0.5:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.LOW


def _upgrade(level: ConfidenceLevel) -> ConfidenceLevel:
    if level == ConfidenceLevel.LOW:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.HIGH


# =============================================================================
# Documents
# =============================================================================


def _document_is_relevant(
    document: Document,
    intent: QuestionIntent,
    section_title: str | None,
    budget_section: bool,
) -> bool:
    text = (document.parsed_data or "").lower()
    doc_type = effective_document_type(document.type, document.name, document.parsed_data)
    known_type = doc_type != "other"

    for source in intent.document_sources:
        source = source.lower()
        if source == "all":
            return True
        if known_type and (source in doc_type or doc_type in source):
            return True

    if section_title:
        title = section_title.lower()
        if title in text:
            return True
        if known_type and doc_type.replace("_", " ") in title:
            return True

    if intent.category != FieldCategory.OTHER and intent.category.label in text:
        return True

    return budget_section and doc_type in _FINANCIAL_DOCUMENT_TYPES


def extract_document_excerpts(
    intent: QuestionIntent,
    documents: list[Document],
    section_title: str | None = None,
    budget_section: bool = False,
) -> list[str]:
    """Excerpts from documents relevant to the intent, as '[name]: text'."""
    budget_section = budget_section or intent.category in _BUDGET_CATEGORIES
    excerpts: list[str] = []
    for document in documents:
        if not document.parsed_data:
            continue
        if _document_is_relevant(document, intent, section_title, budget_section):
            excerpts.append(f"[{document.name}]: {document.parsed_data[:DOCUMENT_EXCERPT_CHARS]}")
    return excerpts


# =============================================================================
# Prior applications
# =============================================================================


def find_reusable_text(
    category: FieldCategory,
    prior_applications: list[PriorApplication],
    section_id: str | None = None,
) -> list[str]:
    """Best prior narrative/response excerpts for the category, at most three.

    Candidates rank by keyword hits, then by length.
    """
    keywords = category_keywords(category)
    section_key = (section_id or "").lower()
    candidates: list[_ReuseCandidate] = []

    for app in prior_applications:
        if app.narrative:
            lowered = app.narrative.lower()
            hits = sum(1 for kw in keywords if kw in lowered)
            if hits:
                candidates.append(
                    _ReuseCandidate(
                        hits=hits,
                        length=len(app.narrative),
                        text=f"[Previous: {app.grant_title}]: "
                        f"{app.narrative[:NARRATIVE_EXCERPT_CHARS]}",
                    )
                )

        for key, value in app.parsed_responses().items():
            if not isinstance(value, str) or len(value) <= MIN_REUSABLE_RESPONSE_CHARS:
                continue
            lower_key = key.lower()
            hits = sum(1 for kw in keywords if kw in lower_key)
            if section_key and lower_key and (section_key in lower_key or lower_key in section_key):
                hits += 1
            if hits:
                candidates.append(
                    _ReuseCandidate(
                        hits=hits,
                        length=len(value),
                        text=f"[Previous {key}]: {value[:RESPONSE_EXCERPT_CHARS]}",
                    )
                )

    candidates.sort(key=lambda c: (c.hits, c.length), reverse=True)
    return [c.text for c in candidates[:MAX_REUSABLE_TEXTS]]


# =============================================================================
# Mapping
# =============================================================================


def select_strategy(
    available_count: int,
    needed_count: int,
    has_documents: bool,
    has_prior: bool,
) -> MappingStrategy:
    """Strategy from field counts and document/prior presence, in precedence order."""
    ratio = available_count / max(needed_count, 1)
    if available_count == 0 and not has_documents:
        return MappingStrategy.MISSING
    if ratio >= DIRECT_RATIO:
        return MappingStrategy.DIRECT
    if has_prior or has_documents:
        return MappingStrategy.ADAPT
    return MappingStrategy.GENERATE


def relevance_score(
    available_count: int,
    has_documents: bool,
    has_prior: bool,
    strategy: MappingStrategy,
) -> int:
    score = BASE_RELEVANCE + min(PER_FIELD_RELEVANCE * available_count, MAX_FIELD_RELEVANCE)
    if has_documents:
        score += DOCUMENT_RELEVANCE
    if has_prior:
        score += PRIOR_ANSWER_RELEVANCE
    score = max(0, min(100, score))
    if strategy == MappingStrategy.MISSING:
        score = min(score, MISSING_RELEVANCE_CAP)
    return score


def map_data(
    intent: QuestionIntent,
    profile: OrganizationProfile | None,
    documents: list[Document] | None = None,
    prior_applications: list[PriorApplication] | None = None,
    section_title: str | None = None,
    section_id: str | None = None,
    budget_section: bool = False,
) -> DataFitMapping:
    """
    Map organizational data onto an intent.

    Args:
        intent: Resolved question intent
        profile: Organization profile (None means nothing is known)
        documents: Parsed documents
        prior_applications: Previously submitted applications
        section_title: Title of the section being answered, for document matching
        section_id: Section id, matched against keys of prior responses
        budget_section: Treat financial documents as relevant

    Returns:
        DataFitMapping with strategy, relevance and the matched material
    """
    available, missing = split_profile_fields(intent.data_needed, profile)
    excerpts = extract_document_excerpts(
        intent, documents or [], section_title=section_title, budget_section=budget_section
    )
    reusable = find_reusable_text(intent.category, prior_applications or [], section_id)

    has_documents = bool(excerpts)
    has_prior = bool(reusable)

    ratio = len(available) / max(len(intent.data_needed), 1)
    confidence = confidence_for_ratio(ratio)
    if has_documents:
        confidence = _upgrade(confidence)
    if has_prior:
        confidence = ConfidenceLevel.HIGH

    strategy = select_strategy(len(available), len(intent.data_needed), has_documents, has_prior)
    relevance = relevance_score(len(available), has_documents, has_prior, strategy)

    logger.debug(
        f"Mapped {intent.category.value}: {len(available)}/{len(intent.data_needed)} fields, "
        f"{len(excerpts)} docs, {len(reusable)} prior -> {strategy.value} ({relevance})"
    )

    return DataFitMapping(
        available_fields=list(available),
        missing_fields=missing,
        relevant_data=available,
        relevant_document_excerpts=excerpts,
        reusable_text=reusable,
        strategy=strategy,
        relevance_score=relevance,
        confidence=confidence,
        notes=f"Missing data for: {', '.join(missing)}" if missing else None,
    )
