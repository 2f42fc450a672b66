"""
Prompt construction for entity merge review.
"""

from typing import Dict, Optional

from .models import Entity, EntityRef, PropertyValue

SYSTEM_PROMPT = (
    "You are an expert entity resolution system. Your job is to determine if two "
    "entity records refer to the same real-world entity. Answer with only SAME or DIFFERENT."
)

DECISION_GUIDELINES = """DECISION GUIDELINES:

Vote SAME if:
- Labels are identical or clear variations (abbreviations, spelling variants, translations)
- Properties consistently describe the same entity with matching key attributes
- Any differences are due to perspective, date of record, or level of detail

Vote DIFFERENT if:
- Labels refer to distinct entities (different people, places, organizations, or concepts)
- Properties describe conflicting attributes that cannot belong to the same entity
- Temporal information shows non-overlapping existence (e.g., one ended before other began)
- Contextual clues indicate relationship between entities rather than identity (related but not same)

Consider:
- Type must match for entities to be the same
- More detailed properties override less detailed ones
- Relationships mentioned in properties may indicate distinct entities
- Geographic, temporal, and contextual consistency"""


# integral floats below this render without ".0", the way JSON prints them
INTEGRAL_FLOAT_LIMIT = 1e21


def _format_scalar(value) -> str:
    # JSON literals, so the prompt shows what the caller sent
    if value is True:
        return "true"
    if value is False:
        return "false"
    if value is None:
        return "null"
    if isinstance(value, float) and value.is_integer() and abs(value) < INTEGRAL_FLOAT_LIMIT:
        return str(int(value))
    return str(value)


def _format_value(value: PropertyValue) -> str:
    if isinstance(value, EntityRef):
        return f"@{value.code}"
    if isinstance(value, (list, tuple)):
        # null elements leave an empty slot: [1, null, 2] -> "1, , 2"
        return ", ".join("" if v is None else _format_scalar(v) for v in value)
    return _format_scalar(value)


def format_properties(properties: Optional[Dict[str, PropertyValue]]) -> str:
    """Render a property block, one indented ``key: value`` line per entry."""
    if not properties:
        return "Properties:\n  (none)"

    lines = ["Properties:"]
    for key, value in properties.items():
        lines.append(f"  {key}: {_format_value(value)}")
    return "\n".join(lines)


def _format_entity(heading: str, entity: Entity) -> str:
    return (
        f"{heading}:\n"
        f'Label: "{entity.label}"\n'
        f"Type: {entity.type}\n"
        f"{format_properties(entity.properties)}"
    )


def build_prompt(entity1: Entity, entity2: Entity, similarity: float) -> str:
    """
    Build the comparison prompt for a candidate pair.

    Args:
        entity1: First candidate record
        entity2: Second candidate record
        similarity: Upstream similarity score (not clamped)

    Returns:
        Prompt text ending with a one-word answer instruction
    """
    return (
        "TASK: Determine if these two entity records refer to the SAME real-world "
        "entity or DIFFERENT entities.\n"
        "\n"
        f"{_format_entity('ENTITY 1', entity1)}\n"
        "\n"
        f"{_format_entity('ENTITY 2', entity2)}\n"
        "\n"
        f"Semantic Similarity Score: {similarity:.3f}\n"
        "\n"
        f"{DECISION_GUIDELINES}\n"
        "\n"
        "Your answer (one word only):\n"
        "SAME or DIFFERENT"
    )
