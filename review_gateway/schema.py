import math
from typing import Any, List

ENTITY_FIELDS = ["entity1", "entity2"]
REQUIRED_STR_FIELDS = ["label", "type"]

EXPECTED_FORMAT = (
    "Invalid request format. Expected: { entity1: { label, type, properties? }, "
    "entity2: { label, type, properties? }, similarity: number }"
)


def _validate_entity(name: str, entity: Any) -> List[str]:
    if not isinstance(entity, dict):
        return [f"Field '{name}' must be an object"]

    errors: List[str] = []
    for f in REQUIRED_STR_FIELDS:
        if f not in entity:
            errors.append(f"Missing required field: {name}.{f}")
        elif not isinstance(entity[f], str):
            errors.append(f"Field '{name}.{f}' must be a string")

    properties = entity.get("properties")
    if properties is not None and not isinstance(properties, dict):
        errors.append(f"Field '{name}.properties' must be an object if provided")

    return errors


def validate_review_request(data: Any) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.
    Structural checks only; labels and types may be any string.
    """
    if not isinstance(data, dict):
        return ["Request body must be a JSON object"]

    errors: List[str] = []

    for name in ENTITY_FIELDS:
        if name not in data:
            errors.append(f"Missing required field: {name}")
        else:
            errors.extend(_validate_entity(name, data[name]))

    # bool is an int subclass but not a similarity score
    similarity = data.get("similarity")
    if "similarity" not in data:
        errors.append("Missing required field: similarity")
    elif isinstance(similarity, bool) or not isinstance(similarity, (int, float)):
        errors.append("Field 'similarity' must be a number")
    elif not math.isfinite(similarity):
        errors.append("Field 'similarity' must be a finite number")

    return errors
