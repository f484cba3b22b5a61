"""Standard application section sets for common grant types."""

from types import MappingProxyType

from autoapply.core.schemas_application import ApplicationSection, SectionType
from autoapply.core.schemas_organization import GrantContext

N = SectionType.NARRATIVE

SECTION_TEMPLATES: MappingProxyType[str, tuple[ApplicationSection, ...]] = MappingProxyType({
    "sbir_phase1": (
        ApplicationSection(
            id="executive_summary",
            type=N,
            title="Executive Summary",
            instructions=(
                "Provide a brief overview of the proposed project including the problem, "
                "solution, and expected outcomes."
            ),
            word_limit=500,
            related_profile_fields=["mission", "solution", "problem_statement"],
            order=1,
        ),
        ApplicationSection(
            id="problem_statement",
            type=N,
            title="Problem Statement",
            instructions=(
                "Describe the problem being addressed, its significance, and current limitations."
            ),
            word_limit=1000,
            evaluation_criteria=["Clarity of problem", "Market need", "Innovation opportunity"],
            related_profile_fields=["problem_statement", "target_market"],
            order=2,
        ),
        ApplicationSection(
            id="technical_approach",
            type=N,
            title="Technical Approach",
            instructions="Detail your methodology, research plan, and technical objectives.",
            word_limit=3000,
            evaluation_criteria=["Technical merit", "Feasibility", "Innovation"],
            related_profile_fields=["solution"],
            order=3,
        ),
        ApplicationSection(
            id="team_qualifications",
            type=N,
            title="Team Qualifications",
            instructions="Describe key personnel qualifications and relevant experience.",
            word_limit=1000,
            evaluation_criteria=["Relevant expertise", "Track record"],
            related_profile_fields=["founder_background", "team_size"],
            order=4,
        ),
        ApplicationSection(
            id="commercialization",
            type=N,
            title="Commercialization Plan",
            instructions=(
                "Outline your path to market including customers, competition, and revenue model."
            ),
            word_limit=1500,
            evaluation_criteria=["Market understanding", "Business model viability"],
            related_profile_fields=["target_market", "annual_revenue"],
            order=5,
        ),
        ApplicationSection(
            id="budget_narrative",
            type=SectionType.BUDGET,
            title="Budget Narrative",
            instructions=(
                "Justify all proposed costs and explain how they support project objectives."
            ),
            word_limit=1000,
            related_profile_fields=["funding_seeking"],
            order=6,
        ),
    ),
    "foundation_general": (
        ApplicationSection(
            id="organization_overview",
            type=N,
            title="Organization Overview",
            instructions="Describe your organization, its mission, and relevant history.",
            word_limit=500,
            related_profile_fields=["name", "mission", "vision"],
            order=1,
        ),
        ApplicationSection(
            id="statement_of_need",
            type=N,
            title="Statement of Need",
            instructions="Explain the problem you are addressing and why it matters.",
            word_limit=750,
            related_profile_fields=["problem_statement", "target_market"],
            order=2,
        ),
        ApplicationSection(
            id="project_description",
            type=N,
            title="Project Description",
            instructions="Describe your proposed project, activities, and timeline.",
            word_limit=1500,
            related_profile_fields=["solution"],
            order=3,
        ),
        ApplicationSection(
            id="outcomes_evaluation",
            type=N,
            title="Outcomes and Evaluation",
            instructions="What outcomes do you expect and how will you measure success?",
            word_limit=500,
            order=4,
        ),
        ApplicationSection(
            id="organizational_capacity",
            type=N,
            title="Organizational Capacity",
            instructions=(
                "Describe your team and organizational ability to execute this project."
            ),
            word_limit=500,
            related_profile_fields=["founder_background", "team_size", "previous_funding"],
            order=5,
        ),
        ApplicationSection(
            id="budget_request",
            type=SectionType.BUDGET,
            title="Budget and Request",
            instructions="Provide a budget summary and explain how funds will be used.",
            word_limit=500,
            related_profile_fields=["funding_seeking", "annual_revenue"],
            order=6,
        ),
        ApplicationSection(
            id="sustainability",
            type=N,
            title="Sustainability Plan",
            instructions="How will this project continue after the grant period?",
            word_limit=300,
            order=7,
        ),
    ),
    "simple_application": (
        ApplicationSection(
            id="project_title",
            type=SectionType.SHORT_ANSWER,
            title="Project Title",
            instructions="Provide a concise title for your project.",
            character_limit=100,
            order=1,
        ),
        ApplicationSection(
            id="organization_name",
            type=SectionType.SHORT_ANSWER,
            title="Organization Name",
            instructions="Legal name of your organization.",
            related_profile_fields=["name"],
            order=2,
        ),
        ApplicationSection(
            id="project_summary",
            type=N,
            title="Project Summary",
            instructions="Briefly describe your project and what you hope to accomplish.",
            word_limit=300,
            related_profile_fields=["mission", "solution"],
            order=3,
        ),
        ApplicationSection(
            id="amount_requested",
            type=SectionType.SHORT_ANSWER,
            title="Amount Requested",
            instructions="How much funding are you requesting?",
            related_profile_fields=["funding_seeking"],
            order=4,
        ),
        ApplicationSection(
            id="use_of_funds",
            type=N,
            title="Use of Funds",
            instructions="How will you use the grant funds?",
            word_limit=500,
            order=5,
        ),
    ),
})

FALLBACK_TEMPLATE = "simple_application"


def template_key_for(grant: GrantContext) -> str | None:
    """Return the template matching the grant, or None when none applies."""
    title = grant.title.lower()
    funder = grant.funder.lower()
    category = (grant.category or "").lower()

    if "sbir" in category or "sbir" in title or "phase 1" in title or "phase i" in title:
        return "sbir_phase1"
    if "foundation" in funder or "trust" in funder:
        return "foundation_general"
    return None


def template_sections(key: str) -> list[ApplicationSection]:
    return list(SECTION_TEMPLATES[key])
