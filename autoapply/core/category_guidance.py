"""Structural guidance for drafting an answer in each question category."""

from dataclasses import dataclass
from types import MappingProxyType

from autoapply.core.schemas_questions import FieldCategory


@dataclass(frozen=True)
class CategoryGuidance:
    structure: str
    key_elements: tuple[str, ...]
    example: str | None = None


C = FieldCategory

CATEGORY_GUIDANCE: MappingProxyType[FieldCategory, CategoryGuidance] = MappingProxyType({
    C.ORGANIZATION_IDENTITY: CategoryGuidance(
        "Direct answer with exact information",
        ("Exact legal name", "Correct format"),
    ),
    C.ORGANIZATION_BACKGROUND: CategoryGuidance(
        "Chronological narrative highlighting key milestones",
        ("Founding story", "Key milestones", "Growth trajectory", "Relevant achievements"),
    ),
    C.MISSION_VISION: CategoryGuidance(
        "Clear, inspiring statement that connects to funder priorities",
        ("Purpose", "Impact", "Values", "Connection to grant"),
    ),
    C.PROBLEM_NEED: CategoryGuidance(
        "Problem -> Evidence -> Impact -> Urgency",
        ("Clear problem definition", "Data/statistics", "Human impact", "Why now"),
        "Example structure: 'In [location], [statistic] of [population] face [problem]. "
        "This results in [consequences]. Without intervention, [future impact]. "
        "Our research shows...'",
    ),
    C.SOLUTION_APPROACH: CategoryGuidance(
        "What -> How -> Why it works -> Evidence",
        ("Clear description", "Methodology", "Evidence base", "Innovation"),
        "Example structure: 'Our approach [name] addresses this through [method]. "
        "This is based on [evidence/research]. What makes this unique is...'",
    ),
    C.TARGET_POPULATION: CategoryGuidance(
        "Who -> Demographics -> Selection -> Numbers",
        ("Specific demographics", "Selection criteria", "Numbers to serve", "Needs"),
    ),
    C.GEOGRAPHIC_SCOPE: CategoryGuidance(
        "Where -> Why there -> Local context",
        ("Specific boundaries", "Rationale", "Local knowledge"),
    ),
    C.PROJECT_DESCRIPTION: CategoryGuidance(
        "Overview -> Components -> Activities -> Timeline",
        ("Clear scope", "Key components", "Logical flow", "Deliverables"),
    ),
    C.GOALS_OBJECTIVES: CategoryGuidance(
        "SMART format: Specific, Measurable, Achievable, Relevant, Time-bound",
        ("Measurable targets", "Timeline", "Alignment with need"),
        "Example: 'By [date], [action verb] [number] [target] resulting in [outcome], "
        "as measured by [metric].'",
    ),
    C.ACTIVITIES_TIMELINE: CategoryGuidance(
        "Phase/Month -> Activities -> Milestones -> Deliverables",
        ("Specific activities", "Realistic timeline", "Dependencies", "Milestones"),
    ),
    C.OUTCOMES_IMPACT: CategoryGuidance(
        "Outputs -> Outcomes -> Impact -> Measurement",
        ("Quantified outputs", "Meaningful outcomes", "Long-term impact", "Metrics"),
        "Differentiate: Outputs (what you produce: 50 workshops), Outcomes (what changes: "
        "200 people gain skills), Impact (long-term: reduced unemployment).",
    ),
    C.EVALUATION_PLAN: CategoryGuidance(
        "Questions -> Indicators -> Methods -> Timeline -> Use",
        (
            "Evaluation questions",
            "Metrics/indicators",
            "Data collection",
            "Analysis plan",
            "Use of findings",
        ),
    ),
    C.TEAM_QUALIFICATIONS: CategoryGuidance(
        "Role -> Person -> Qualifications -> Relevance",
        ("Key roles", "Specific qualifications", "Relevant experience", "Time commitment"),
    ),
    C.ORGANIZATIONAL_CAPACITY: CategoryGuidance(
        "Experience -> Infrastructure -> Track record -> Resources",
        ("Relevant experience", "Systems/infrastructure", "Past success", "Partnerships"),
    ),
    C.PARTNERSHIPS: CategoryGuidance(
        "Partner -> Role -> Value -> Commitment",
        ("Partner names", "Specific roles", "Why this partner", "Documentation"),
    ),
    C.BUDGET_SUMMARY: CategoryGuidance(
        "Category -> Amount -> Percentage of total",
        ("Total request", "Major categories", "Cost reasonableness"),
    ),
    C.BUDGET_LINE_ITEMS: CategoryGuidance(
        "Item -> Quantity x Rate x Duration = Total",
        ("Detailed breakdown", "Calculations shown", "Industry rates"),
    ),
    C.BUDGET_JUSTIFICATION: CategoryGuidance(
        "Item -> Rationale -> Connection to activities",
        ("Clear rationale", "Connection to work plan", "Cost reasonableness"),
        "Example: 'Project Coordinator ($50,000): This FTE will manage day-to-day operations, "
        "coordinate with partners, and ensure milestone completion. Rate is based on [source] "
        "for similar positions in [location].'",
    ),
    C.SUSTAINABILITY: CategoryGuidance(
        "Immediate -> Short-term -> Long-term strategies",
        (
            "Concrete strategies",
            "Diverse sources",
            "Realistic timeline",
            "Institutional commitment",
        ),
    ),
    C.DIVERSIFIED_FUNDING: CategoryGuidance(
        "Source -> Amount -> Status -> Timeline",
        ("Multiple sources", "Confirmed vs. pending", "Percentages"),
    ),
    C.MATCHING_FUNDS: CategoryGuidance(
        "Source -> Type -> Amount -> Documentation",
        ("Eligible sources", "Cash vs. in-kind", "Calculations", "Letters"),
    ),
    C.FINANCIAL_HEALTH: CategoryGuidance(
        "Revenue trends -> Diversification -> Stability indicators",
        ("Revenue growth", "Diverse sources", "Reserves", "Audit status"),
    ),
    C.INNOVATION: CategoryGuidance(
        "What's new -> Evidence -> Comparison -> Potential",
        (
            "Clear differentiation",
            "Evidence base",
            "Comparison to alternatives",
            "Potential impact",
        ),
    ),
    C.COMMERCIALIZATION: CategoryGuidance(
        "Market -> Customers -> Revenue Model -> Path to Scale",
        ("Market size", "Customer validation", "Business model", "Growth strategy"),
    ),
    C.INTELLECTUAL_PROPERTY: CategoryGuidance(
        "Current IP -> Protection Strategy -> Freedom to Operate",
        ("Existing IP", "Filing plans", "Licensing", "Competitive landscape"),
    ),
    C.RISK_MITIGATION: CategoryGuidance(
        "Risk -> Likelihood -> Impact -> Mitigation Strategy",
        ("Key risks identified", "Assessment", "Concrete mitigation", "Contingency plans"),
        "Example format: 'Risk: [description]. Likelihood: [Low/Medium/High]. "
        "Impact: [description]. Mitigation: [specific strategy].'",
    ),
    C.CONTACT_INFO: CategoryGuidance(
        "Direct information in requested format",
        ("Complete information", "Correct format", "Authorized contact"),
    ),
    C.CERTIFICATIONS: CategoryGuidance(
        "Number/ID with verification status",
        ("Valid number", "Correct format", "Active status"),
    ),
    C.ATTACHMENTS: CategoryGuidance(
        "List required documents with status",
        ("All required items", "Correct format", "Page limits"),
    ),
    C.REFERENCES: CategoryGuidance(
        "Name -> Title -> Organization -> Contact -> Relationship",
        ("Appropriate references", "Confirmed availability", "Contact info"),
    ),
    C.OTHER: CategoryGuidance(
        "Responsive answer addressing the question directly",
        ("Direct response", "Relevant details", "Appropriate length"),
    ),
})


def guidance_for(category: FieldCategory) -> CategoryGuidance:
    return CATEGORY_GUIDANCE.get(category, CATEGORY_GUIDANCE[FieldCategory.OTHER])
