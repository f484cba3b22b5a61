"""Read-only inputs supplied by the surrounding application.

Profiles, documents, prior applications and grant metadata are owned by
external stores; the engine never writes them. Every model accepts both
snake_case and camelCase keys so records can be passed straight through
from the API layer.
"""

import json
import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def to_snake(name: str) -> str:
    """Normalize a profile field name: 'problemStatement' -> 'problem_statement', 'EIN' -> 'ein'."""
    name = name.strip()
    if name.isupper():
        return name.lower()
    return _CAMEL_BOUNDARY.sub("_", name).lower()


class _InboundModel(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Organization profile
# =============================================================================


class OrganizationProfile(_InboundModel):
    """Flat mapping of organizational facts to optional string values."""

    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True, extra="allow"
    )

    name: str | None = None
    type: str | None = None
    legal_structure: str | None = None
    ein: str | None = None
    website: str | None = None
    city: str | None = None
    state: str | None = None
    mission: str | None = None
    vision: str | None = None
    problem_statement: str | None = None
    solution: str | None = None
    target_market: str | None = None
    team_size: str | None = None
    founder_background: str | None = None
    annual_revenue: str | None = None
    funding_seeking: str | None = None
    previous_funding: str | None = None

    @field_validator("*", mode="before")
    @classmethod
    def _stringify_scalars(cls, value: Any) -> Any:
        if isinstance(value, bool) or value is None:
            return value
        if isinstance(value, int | float):
            return str(value)
        return value

    def get(self, field: str) -> str | None:
        """Return the trimmed value for a field, or None when absent or blank."""
        key = to_snake(field)
        if key in type(self).model_fields:
            value = getattr(self, key)
        else:
            extras = self.model_extra or {}
            value = extras.get(key, extras.get(field, extras.get(to_camel(key))))

        if value is None:
            return None
        text = str(value).strip()
        return text or None


# =============================================================================
# Documents and history
# =============================================================================


class Document(_InboundModel):
    """Uploaded document with text already extracted by the document service."""

    id: str
    name: str
    type: str = "other"
    parsed_data: str | None = None


class PriorApplication(_InboundModel):
    """Previously submitted application used for reuse detection."""

    id: str
    grant_title: str
    narrative: str | None = None
    responses: str | None = Field(default=None, description="JSON object of sectionId -> text")
    status: str = "submitted"

    def parsed_responses(self) -> dict[str, Any]:
        """Decode the responses JSON; malformed or non-object JSON yields {}."""
        if not self.responses:
            return {}
        try:
            parsed = json.loads(self.responses)
        except (json.JSONDecodeError, TypeError):
            return {}
        return parsed if isinstance(parsed, dict) else {}


class UserContext(_InboundModel):
    """Everything known about the applicant for one drafting run."""

    organization: OrganizationProfile | None = None
    documents: list[Document] = Field(default_factory=list)
    previous_applications: list[PriorApplication] = Field(default_factory=list)

    @property
    def profile(self) -> OrganizationProfile:
        return self.organization or OrganizationProfile()


# =============================================================================
# Grant metadata
# =============================================================================


class GrantContext(_InboundModel):
    """Grant opportunity metadata used for tone selection and prompt context."""

    id: str = ""
    title: str
    funder: str
    type: str | None = None
    category: str | None = None
    description: str | None = None
    requirements: str | None = None
    eligibility: str | None = None
    amount: str | None = None
    amount_min: float | None = None
    amount_max: float | None = None
    deadline: str | None = None
    url: str | None = None

    @field_validator("amount", mode="before")
    @classmethod
    def _stringify_amount(cls, value: Any) -> Any:
        if isinstance(value, int | float) and not isinstance(value, bool):
            return str(value)
        return value
