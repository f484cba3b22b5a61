"""Static intent templates: what reviewers look for, per question category."""

from dataclasses import dataclass, field
from types import MappingProxyType

from autoapply.core.schemas_questions import FieldCategory, QuestionIntent, ResponseStrategy


@dataclass(frozen=True)
class IntentTemplate:
    looking_for: tuple[str, ...]
    red_flags: tuple[str, ...]
    data_needed: tuple[str, ...]
    response_strategy: ResponseStrategy
    document_sources: tuple[str, ...] = field(default_factory=tuple)

    def to_intent(self, category: FieldCategory, question: str) -> QuestionIntent:
        return QuestionIntent(
            category=category,
            core_question=question,
            looking_for=list(self.looking_for),
            red_flags=list(self.red_flags),
            data_needed=list(self.data_needed),
            document_sources=list(self.document_sources),
            response_strategy=self.response_strategy,
        )


C = FieldCategory
S = ResponseStrategy

# OTHER has no template: it is resolved by the model.
INTENT_TEMPLATES: MappingProxyType[FieldCategory, IntentTemplate] = MappingProxyType({
    C.ORGANIZATION_IDENTITY: IntentTemplate(
        looking_for=("Legal registered name", "Correct EIN format", "Consistency across documents"),
        red_flags=("DBA vs legal name confusion", "Incorrect EIN"),
        data_needed=("name", "ein", "legal_structure"),
        response_strategy=S.DIRECT,
    ),
    C.MISSION_VISION: IntentTemplate(
        looking_for=(
            "Clear articulation of purpose",
            "Alignment with funder priorities",
            "Compelling narrative",
        ),
        red_flags=("Too vague", "Doesn't match funder focus", "Jargon-heavy"),
        data_needed=("mission", "vision"),
        response_strategy=S.DIRECT,
    ),
    C.PROBLEM_NEED: IntentTemplate(
        looking_for=("Data-backed need", "Clear problem definition", "Urgency", "Local context"),
        red_flags=("No evidence", "Too broad", "Doesn't connect to solution"),
        data_needed=("problem_statement", "target_market"),
        document_sources=("needs_assessment", "research"),
        response_strategy=S.SYNTHESIZE,
    ),
    C.SOLUTION_APPROACH: IntentTemplate(
        looking_for=("Clear methodology", "Evidence-based approach", "Innovation", "Feasibility"),
        red_flags=("Vague plans", "No evidence of effectiveness", "Unrealistic"),
        data_needed=("solution",),
        document_sources=("business_plan", "pitch_deck"),
        response_strategy=S.SYNTHESIZE,
    ),
    C.TARGET_POPULATION: IntentTemplate(
        looking_for=(
            "Specific demographics",
            "Numbers served",
            "Selection criteria",
            "Needs of population",
        ),
        red_flags=("Too vague", "No numbers", "Doesn't match funder priorities"),
        data_needed=("target_market",),
        response_strategy=S.SYNTHESIZE,
    ),
    C.TEAM_QUALIFICATIONS: IntentTemplate(
        looking_for=("Relevant experience", "Specific credentials", "Track record", "Roles defined"),
        red_flags=("Generic bios", "No relevant experience", "Key positions unfilled"),
        data_needed=("founder_background", "team_size"),
        document_sources=("resume", "bios"),
        response_strategy=S.SYNTHESIZE,
    ),
    C.BUDGET_SUMMARY: IntentTemplate(
        looking_for=("Clear total", "Reasonable costs", "Alignment with activities"),
        red_flags=("Math errors", "Unrealistic", "Missing categories"),
        data_needed=("funding_seeking",),
        document_sources=("financials", "budget_template"),
        response_strategy=S.EXTRACT,
    ),
    C.BUDGET_LINE_ITEMS: IntentTemplate(
        looking_for=("Detailed breakdown", "Justified costs", "Industry-standard rates"),
        red_flags=("Round numbers everywhere", "Missing fringe", "No indirect"),
        data_needed=("funding_seeking",),
        document_sources=("financials", "budget_template"),
        response_strategy=S.GENERATE,
    ),
    C.SUSTAINABILITY: IntentTemplate(
        looking_for=("Concrete plan", "Diverse funding sources", "Realistic timeline"),
        red_flags=("Only relying on more grants", "Vague", "No plan"),
        data_needed=("annual_revenue", "previous_funding"),
        document_sources=("financials",),
        response_strategy=S.GENERATE,
    ),
    C.OUTCOMES_IMPACT: IntentTemplate(
        looking_for=("Measurable outcomes", "Realistic targets", "Clear metrics"),
        red_flags=("Only outputs not outcomes", "Unmeasurable", "Unrealistic numbers"),
        data_needed=("solution", "target_market"),
        response_strategy=S.GENERATE,
    ),
    C.CONTACT_INFO: IntentTemplate(
        looking_for=("Complete information", "Correct format", "Authorized person"),
        red_flags=("Incomplete", "Wrong format"),
        data_needed=("city", "state", "website"),
        response_strategy=S.DIRECT,
    ),
    C.CERTIFICATIONS: IntentTemplate(
        looking_for=("Valid numbers", "Active registration", "Correct format"),
        red_flags=("Expired", "Invalid format"),
        data_needed=("ein",),
        document_sources=("sam_registration", "certifications"),
        response_strategy=S.DIRECT,
    ),
    C.GEOGRAPHIC_SCOPE: IntentTemplate(
        looking_for=("Specific area", "Rationale for scope", "Local knowledge"),
        red_flags=("Too broad without justification",),
        data_needed=("city", "state", "target_market"),
        response_strategy=S.SYNTHESIZE,
    ),
    C.PROJECT_DESCRIPTION: IntentTemplate(
        looking_for=("Clear description", "Defined scope", "Logical flow"),
        red_flags=("Too vague", "Scope creep", "Unrealistic"),
        data_needed=("solution", "problem_statement"),
        document_sources=("business_plan",),
        response_strategy=S.SYNTHESIZE,
    ),
    C.GOALS_OBJECTIVES: IntentTemplate(
        looking_for=("SMART goals", "Alignment with need", "Measurable"),
        red_flags=("Not measurable", "Too many", "Not aligned"),
        data_needed=("solution",),
        response_strategy=S.GENERATE,
    ),
    C.ACTIVITIES_TIMELINE: IntentTemplate(
        looking_for=("Specific activities", "Realistic timeline", "Milestones"),
        red_flags=("Vague", "Unrealistic", "Missing key activities"),
        data_needed=("solution",),
        document_sources=("project_plan",),
        response_strategy=S.GENERATE,
    ),
    C.EVALUATION_PLAN: IntentTemplate(
        looking_for=("Clear metrics", "Data collection plan", "Use of results"),
        red_flags=("No metrics", "Only outputs", "No plan for use"),
        data_needed=(),
        response_strategy=S.GENERATE,
    ),
    C.ORGANIZATIONAL_CAPACITY: IntentTemplate(
        looking_for=("Relevant experience", "Infrastructure", "Track record"),
        red_flags=("No experience", "Overpromising", "No track record"),
        data_needed=("team_size", "previous_funding", "founder_background"),
        document_sources=("financials", "990"),
        response_strategy=S.SYNTHESIZE,
    ),
    C.PARTNERSHIPS: IntentTemplate(
        looking_for=("Defined roles", "Letters of support", "Strong partners"),
        red_flags=("Vague commitments", "No letters", "Weak partners"),
        data_needed=(),
        document_sources=("letters_of_support", "mou"),
        response_strategy=S.SYNTHESIZE,
    ),
    C.FINANCIAL_HEALTH: IntentTemplate(
        looking_for=("Clean audit", "Diverse revenue", "Stability"),
        red_flags=("Deficits", "Single funder dependency", "No audit"),
        data_needed=("annual_revenue", "previous_funding"),
        document_sources=("financials", "990", "audit"),
        response_strategy=S.EXTRACT,
    ),
    C.BUDGET_JUSTIFICATION: IntentTemplate(
        looking_for=("Clear rationale", "Connection to activities", "Reasonable rates"),
        red_flags=("No justification", "Disconnected from work", "Inflated"),
        data_needed=("funding_seeking",),
        document_sources=("budget_template",),
        response_strategy=S.GENERATE,
    ),
    C.DIVERSIFIED_FUNDING: IntentTemplate(
        looking_for=("Multiple sources", "Realistic projections", "Commitment letters"),
        red_flags=("Only grants", "Speculative", "No documentation"),
        data_needed=("previous_funding", "annual_revenue"),
        document_sources=("financials",),
        response_strategy=S.SYNTHESIZE,
    ),
    C.MATCHING_FUNDS: IntentTemplate(
        looking_for=("Documented match", "Eligible sources", "Calculations"),
        red_flags=("Undocumented", "Ineligible", "Math errors"),
        data_needed=("previous_funding",),
        document_sources=("commitment_letters", "financials"),
        response_strategy=S.EXTRACT,
    ),
    C.INNOVATION: IntentTemplate(
        looking_for=("Clear differentiation", "Evidence base", "Feasibility"),
        red_flags=("Not actually innovative", "Unproven", "Unrealistic"),
        data_needed=("solution",),
        document_sources=("research", "pitch_deck"),
        response_strategy=S.SYNTHESIZE,
    ),
    C.COMMERCIALIZATION: IntentTemplate(
        looking_for=("Market analysis", "Revenue model", "Customer validation"),
        red_flags=("No market research", "Unrealistic projections"),
        data_needed=("target_market", "annual_revenue", "solution"),
        document_sources=("business_plan", "pitch_deck"),
        response_strategy=S.SYNTHESIZE,
    ),
    C.INTELLECTUAL_PROPERTY: IntentTemplate(
        looking_for=("Clear IP strategy", "Protection plan", "Freedom to operate"),
        red_flags=("No strategy", "Infringement risk"),
        data_needed=(),
        document_sources=("patents", "ip_documentation"),
        response_strategy=S.GENERATE,
    ),
    C.RISK_MITIGATION: IntentTemplate(
        looking_for=("Identified risks", "Mitigation strategies", "Contingencies"),
        red_flags=("No risks identified", "No mitigation", "Unrealistic"),
        data_needed=("solution",),
        response_strategy=S.GENERATE,
    ),
    C.ORGANIZATION_BACKGROUND: IntentTemplate(
        looking_for=("Key milestones", "Relevant history", "Growth trajectory"),
        red_flags=("Too brief", "Irrelevant details"),
        data_needed=("mission", "founder_background", "previous_funding"),
        response_strategy=S.SYNTHESIZE,
    ),
    C.ATTACHMENTS: IntentTemplate(
        looking_for=("Required documents", "Correct format", "Complete"),
        red_flags=("Missing documents", "Wrong format"),
        data_needed=(),
        document_sources=("all",),
        response_strategy=S.DIRECT,
    ),
    C.REFERENCES: IntentTemplate(
        looking_for=("Strong references", "Relevant to project", "Confirmed"),
        red_flags=("Weak references", "Not confirmed"),
        data_needed=(),
        document_sources=("letters_of_support",),
        response_strategy=S.DIRECT,
    ),
})
