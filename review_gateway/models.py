"""
Data models for entity pairs, decisions and provider responses.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

Scalar = Union[str, int, float, bool, None]


class Decision(str, Enum):
    """Binary outcome of a merge review."""

    SAME = "SAME"
    DIFFERENT = "DIFFERENT"


@dataclass(frozen=True)
class EntityRef:
    """Property value that points at another entity by its code."""

    code: str


PropertyValue = Union[Scalar, List[Scalar], EntityRef]


def _to_property_value(value: Any) -> PropertyValue:
    if isinstance(value, dict) and value.get("type") == "entity_ref":
        return EntityRef(code=str(value.get("code")))
    if isinstance(value, (list, tuple)):
        return list(value)
    return value


@dataclass
class Entity:
    """Candidate entity record supplied by the caller."""

    label: str
    type: str
    properties: Dict[str, PropertyValue] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Entity":
        """
        Build an Entity from its JSON form.

        Tagged ``{"type": "entity_ref", "code": ...}`` values become EntityRef;
        key order of ``properties`` is preserved.
        """
        raw_properties = data.get("properties") or {}
        properties = {
            key: _to_property_value(value) for key, value in raw_properties.items()
        }
        return cls(label=data["label"], type=data["type"], properties=properties)


@dataclass
class ReviewResult:
    """Decision plus token usage reported by the provider."""

    decision: Decision
    input_tokens: int
    output_tokens: int
    total_tokens: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "decision": self.decision.value,
            "input_tokens": self.input_tokens,
            "output_tokens": self.output_tokens,
            "total_tokens": self.total_tokens,
        }


@dataclass
class CompletionResponse:
    """Chat-completion payload: candidate texts and usage counts."""

    choices: List[str]
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int

    @property
    def first_content(self) -> str:
        return self.choices[0]

    @classmethod
    def from_dict(cls, data: Any) -> "CompletionResponse":
        """
        Parse the provider JSON body.

        Raises:
            ValueError: If choices or usage are missing or malformed
        """
        if not isinstance(data, dict):
            raise ValueError("Malformed completion response: body is not an object")

        raw_choices = data.get("choices")
        if not isinstance(raw_choices, list) or not raw_choices:
            raise ValueError("Malformed completion response: no choices")

        choices: List[str] = []
        for choice in raw_choices:
            message: Optional[dict] = choice.get("message") if isinstance(choice, dict) else None
            if not isinstance(message, dict):
                raise ValueError("Malformed completion response: choice without message")
            content = message.get("content")
            choices.append(content if isinstance(content, str) else "")

        usage = data.get("usage")
        if not isinstance(usage, dict):
            raise ValueError("Malformed completion response: missing usage")

        counts = {}
        for key in ("prompt_tokens", "completion_tokens", "total_tokens"):
            value = usage.get(key)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"Malformed completion response: usage.{key} is not an integer")
            counts[key] = value

        return cls(choices=choices, **counts)
