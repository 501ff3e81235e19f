"""Declarative parameter schemas for tools.

A schema is a tuple of ``Param`` declarations. One generic validator checks a
payload against it, so individual tools never hand-roll argument checks.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from sitewright.errors import ValidationError, Violation

ParamKind = Literal["string", "integer", "boolean", "object", "array", "value"]

_JSON_TYPES: dict[str, dict[str, Any]] = {
    "string": {"type": "string"},
    "integer": {"type": "integer"},
    "boolean": {"type": "boolean"},
    "object": {"type": "object"},
    "array": {"type": "array"},
    "value": {"anyOf": [{"type": "string"}, {"type": "array"}, {"type": "object"}]},
}

_KIND_NAMES = {
    "string": "a string",
    "integer": "an integer",
    "boolean": "a boolean",
    "object": "an object",
    "array": "an array",
    "value": "a string, list or object of strings",
}


@dataclass(frozen=True)
class Param:
    name: str
    kind: ParamKind = "string"
    required: bool = True
    description: str = ""
    choices: tuple[Any, ...] | None = None
    default: Any = None
    min_length: int | None = None


def is_field_value(value: Any) -> bool:
    """True for a string, or lists/mappings that bottom out in strings."""
    if isinstance(value, str):
        return True
    if isinstance(value, list):
        return all(is_field_value(item) for item in value)
    if isinstance(value, dict):
        return all(isinstance(k, str) and is_field_value(v) for k, v in value.items())
    return False


def _matches_kind(kind: str, value: Any) -> bool:
    if kind == "string":
        return isinstance(value, str)
    if kind == "integer":
        return isinstance(value, int) and not isinstance(value, bool)
    if kind == "boolean":
        return isinstance(value, bool)
    if kind == "object":
        return isinstance(value, dict)
    if kind == "array":
        return isinstance(value, list)
    return is_field_value(value)


class ParameterSchema:
    """An ordered set of ``Param`` declarations for one tool."""

    def __init__(self, *params: Param) -> None:
        names = [p.name for p in params]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate parameter names in schema: {names}")
        self.params: tuple[Param, ...] = params

    def __iter__(self):
        return iter(self.params)

    def validate(self, payload: Any) -> dict[str, Any]:
        """Return the payload with defaults filled in.

        Collects every violation before raising ``ValidationError`` so the
        caller sees all problems at once.
        """
        if not isinstance(payload, dict):
            raise ValidationError([Violation(path="$", message="parameters must be an object")])

        violations: list[Violation] = []
        known = {p.name for p in self.params}
        for key in payload:
            if key not in known:
                violations.append(Violation(path=str(key), message="unexpected parameter"))

        cleaned: dict[str, Any] = {}
        for param in self.params:
            value = payload.get(param.name)
            if value is None:
                if param.required:
                    violations.append(Violation(path=param.name, message="is required"))
                elif param.default is not None:
                    cleaned[param.name] = param.default
                continue

            if not _matches_kind(param.kind, value):
                violations.append(
                    Violation(path=param.name, message=f"must be {_KIND_NAMES[param.kind]}")
                )
                continue
            if param.choices is not None and value not in param.choices:
                options = ", ".join(str(c) for c in param.choices)
                violations.append(Violation(path=param.name, message=f"must be one of: {options}"))
                continue
            if param.min_length is not None and isinstance(value, (str, list)):
                length = len(value.strip()) if isinstance(value, str) else len(value)
                if length < param.min_length:
                    violations.append(
                        Violation(
                            path=param.name,
                            message=f"must have length of at least {param.min_length}",
                        )
                    )
                    continue
            cleaned[param.name] = value

        if violations:
            raise ValidationError(violations)
        return cleaned

    def to_json_schema(self) -> dict[str, Any]:
        """JSON Schema object for LLM function calling."""
        properties: dict[str, Any] = {}
        for param in self.params:
            prop = dict(_JSON_TYPES[param.kind])
            if param.description:
                prop["description"] = param.description
            if param.choices is not None:
                prop["enum"] = list(param.choices)
            if param.default is not None:
                prop["default"] = param.default
            if param.min_length is not None:
                prop["minLength" if param.kind == "string" else "minItems"] = param.min_length
            properties[param.name] = prop
        return {
            "type": "object",
            "properties": properties,
            "required": [p.name for p in self.params if p.required],
            "additionalProperties": False,
        }
