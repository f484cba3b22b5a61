"""Document type inference for uploads whose declared type is missing."""

_CONTENT_SCAN_CHARS = 2000


def infer_document_type(name: str, content: str | None) -> str:
    """Guess a document type tag from the file name and the start of its text.

    Returns one of: 990, audit, financials, resume, business_plan, pitch_deck,
    letters_of_support, budget_template, logic_model, needs_assessment,
    annual_report, other.
    """
    lower_name = name.lower()
    text = (content or "").lower()[:_CONTENT_SCAN_CHARS]

    if "990" in lower_name or "form 990" in text or "return of organization" in text:
        return "990"
    if "audit" in lower_name or "independent auditor" in text:
        return "audit"
    if "financial" in lower_name or "balance sheet" in text or "statement of activities" in text:
        return "financials"
    if (
        "resume" in lower_name
        or "cv" in lower_name
        or ("education" in text and "experience" in text)
    ):
        return "resume"
    if "business plan" in lower_name or ("executive summary" in text and "market" in text):
        return "business_plan"
    if "pitch" in lower_name or "deck" in lower_name:
        return "pitch_deck"
    if "letter" in lower_name and ("support" in text or "partner" in text):
        return "letters_of_support"
    if "budget" in lower_name:
        return "budget_template"
    if "logic model" in lower_name or "theory of change" in text:
        return "logic_model"
    if "needs assessment" in lower_name or "community needs" in text:
        return "needs_assessment"
    if "annual report" in lower_name:
        return "annual_report"
    return "other"


def effective_document_type(declared: str | None, name: str, content: str | None) -> str:
    """Declared type when meaningful, else the inferred one."""
    normalized = (declared or "").strip().lower()
    if normalized and normalized != "other":
        return normalized
    return infer_document_type(name, content)
