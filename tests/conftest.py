"""Pytest configuration and fixtures."""

import os

import pytest

from autoapply.core.config import get_settings
from autoapply.core.schemas_organization import (
    Document,
    GrantContext,
    OrganizationProfile,
    PriorApplication,
    UserContext,
)


@pytest.fixture(scope="session", autouse=True)
def setup_test_env():
    """Set up test environment variables."""
    os.environ["AUTOAPPLY_ENV"] = "test"
    os.environ["ANTHROPIC_API_KEY"] = ""
    get_settings.cache_clear()


@pytest.fixture
def foundation_grant() -> GrantContext:
    return GrantContext(
        id="grant-1",
        title="Community Health Access Grant",
        funder="Riverside Health Foundation",
        type="foundation",
        description="Supports community organizations expanding access to preventive care.",
        amount=50000,
    )


@pytest.fixture
def federal_grant() -> GrantContext:
    return GrantContext(
        id="grant-2",
        title="Clean Water Technology Phase I",
        funder="NSF",
        type="federal",
        category="SBIR",
        description="Early-stage research on low-cost water filtration.",
    )


@pytest.fixture
def full_profile() -> OrganizationProfile:
    return OrganizationProfile.model_validate(
        {
            "name": "Acme Corp",
            "ein": "12-3456789",
            "legalStructure": "501(c)(3)",
            "city": "Springfield",
            "state": "IL",
            "website": "https://acme.example.org",
            "mission": "Acme Corp expands access to preventive health care for rural families.",
            "problemStatement": "Rural families in Sangamon County travel 40 miles for care.",
            "solution": "Mobile clinics staffed by nurse practitioners visit 12 towns weekly.",
            "targetMarket": "1,200 low-income rural families",
            "teamSize": 14,
            "founderBackground": "Founded by a nurse practitioner with 20 years in rural care.",
            "annualRevenue": 850000,
            "fundingSeeking": 50000,
        }
    )


@pytest.fixture
def user_context(full_profile) -> UserContext:
    return UserContext(
        organization=full_profile,
        documents=[
            Document(
                id="doc-1",
                name="2023 Audited Financials.pdf",
                type="financials",
                parsed_data="Statement of activities. Total revenue $850,000. Program expenses $610,000.",
            )
        ],
        previous_applications=[
            PriorApplication(
                id="app-1",
                grant_title="Rural Wellness Fund",
                narrative=(
                    "Our mission is to bring preventive care to rural families who face long "
                    "travel times to the nearest clinic."
                ),
                responses='{"need_statement": "Rural residents face a severe shortage of primary care providers in our region."}',
            )
        ],
    )


@pytest.fixture
def empty_context() -> UserContext:
    return UserContext()
