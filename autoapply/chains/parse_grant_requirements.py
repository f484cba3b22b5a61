"""Turn grant metadata into an ordered list of application sections.

Known grant shapes use a static section template. Otherwise the model reads
the grant description and requirements; if that fails the simple
application template is used.
"""

from typing import Any

from pydantic import ValidationError

from autoapply.core.funder_tone import determine_funder_type
from autoapply.core.llm import TextGenerator, generate_with_timeout, parse_llm_json_list
from autoapply.core.logging import get_logger
from autoapply.core.schemas_application import ApplicationSection, SectionType
from autoapply.core.schemas_organization import GrantContext
from autoapply.core.section_templates import FALLBACK_TEMPLATE, template_key_for, template_sections

logger = get_logger(__name__)

REQUIREMENTS_MAX_TOKENS = 4000

REQUIREMENTS_PROMPT = """Analyze this grant opportunity and extract the required application sections.

Grant Details:
- Title: {title}
- Funder: {funder}
- Type: {type}
- Description: {description}
- Requirements: {requirements}
- Eligibility: {eligibility}

Based on the grant information, identify all required application sections. For each section, provide:
1. A unique id (snake_case)
2. The section type (narrative, short_answer, budget, attachment, checkbox, select, table, contact_info)
3. Title
4. Instructions/requirements
5. Whether it's required
6. Word limit if applicable
7. Evaluation criteria if mentioned
8. Order number

Return your analysis as a JSON array of objects with keys id, type, title, instructions,
required, word_limit, character_limit, evaluation_criteria, related_profile_fields, order.
If requirements aren't specified, infer standard sections for a {funder_type} grant.

Return ONLY valid JSON, no other text."""


def _positive_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


def section_from_payload(item: dict[str, Any], index: int) -> ApplicationSection:
    """Build a section from one model-returned object, filling gaps with defaults."""
    position = index + 1
    raw_type = str(item.get("type") or "").strip().lower()
    try:
        section_type = SectionType(raw_type)
    except ValueError:
        section_type = SectionType.NARRATIVE

    criteria = item.get("evaluation_criteria", item.get("evaluationCriteria")) or []
    related = item.get("related_profile_fields", item.get("relatedProfileFields")) or []
    required = item.get("required")

    return ApplicationSection(
        id=str(item.get("id") or f"section_{position}"),
        type=section_type,
        title=str(item.get("title") or f"Section {position}"),
        instructions=str(item.get("instructions") or ""),
        required=True if required is None else bool(required),
        word_limit=_positive_int(item.get("word_limit", item.get("wordLimit"))),
        character_limit=_positive_int(item.get("character_limit", item.get("characterLimit"))),
        evaluation_criteria=[str(c) for c in criteria] if isinstance(criteria, list) else [],
        related_profile_fields=[str(f) for f in related] if isinstance(related, list) else [],
        order=_positive_int(item.get("order")) or position,
    )


async def parse_grant_requirements(
    grant: GrantContext, generator: TextGenerator | None = None
) -> list[ApplicationSection]:
    """
    Resolve the sections an application for this grant must answer.

    Args:
        grant: Grant metadata
        generator: Text generator used when no template matches

    Returns:
        Non-empty list of sections (never raises)
    """
    key = template_key_for(grant)
    if key is not None:
        logger.info(f"Using section template '{key}' for grant {grant.id or grant.title}")
        return template_sections(key)

    if generator is not None:
        prompt = REQUIREMENTS_PROMPT.format(
            title=grant.title,
            funder=grant.funder,
            type=grant.type or "Unknown",
            description=grant.description or "Not provided",
            requirements=grant.requirements or "Not provided",
            eligibility=grant.eligibility or "Not provided",
            funder_type=determine_funder_type(grant).value,
        )
        try:
            raw = await generate_with_timeout(generator, prompt, REQUIREMENTS_MAX_TOKENS)
            items = parse_llm_json_list(raw)
            sections: list[ApplicationSection] = []
            seen: set[str] = set()
            for i, item in enumerate(items):
                if not isinstance(item, dict):
                    continue
                section = section_from_payload(item, i)
                if section.id in seen:
                    section = section.model_copy(update={"id": f"{section.id}_{i + 1}"})
                seen.add(section.id)
                sections.append(section)
            if sections:
                return sections
            logger.warning("Model returned no usable sections")
        except (ValueError, ValidationError) as e:
            logger.warning(f"Failed to parse grant requirements: {e}")
        except Exception as e:
            logger.warning(f"Grant requirement parsing failed: {e}")

    return template_sections(FALLBACK_TEMPLATE)
