"""Builtin content tools.

Handlers are pure functions of (draft copy, validated params); the executor
owns locking, persistence and preview generation.
"""

from __future__ import annotations

import re
from typing import Any

from sitewright.content.extractor import normalize_text
from sitewright.content.models import ContentModel, Section
from sitewright.errors import (
    DuplicateSection,
    FieldNotFound,
    SectionNotFound,
    ValidationError,
    Violation,
)
from sitewright.tools.registry import ToolDefinition, ToolRegistry
from sitewright.tools.schema import Param, ParameterSchema, is_field_value

_SECTION_PARAM = Param(
    "section",
    description="Section label (or section id) as shown in the content model",
    min_length=1,
)


def _require_section(content: ContentModel, ref: str) -> Section:
    section = content.find_section(ref)
    if section is None:
        raise SectionNotFound(ref)
    return section


def _require_field(section: Section, field: str) -> Any:
    if field not in section.fields:
        raise FieldNotFound(section.label, field)
    return section.fields[field]


def _require_list(section: Section, field: str) -> list[Any]:
    value = _require_field(section, field)
    if not isinstance(value, list):
        raise ValidationError([Violation(path="field", message=f"{field!r} is not a list field")])
    return value


def _normalized(value: Any) -> Any:
    """Collapse whitespace in text values, as extraction does."""
    if isinstance(value, str):
        return normalize_text(value)
    if isinstance(value, list):
        return [_normalized(v) for v in value]
    if isinstance(value, dict):
        return {k: _normalized(v) for k, v in value.items()}
    return value


def slugify(label: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", label.lower()).strip("-")
    return slug or "section"


def _unique_id(content: ContentModel, base: str) -> str:
    taken = {s.id for s in content.sections}
    candidate, n = base, 2
    while candidate in taken:
        candidate = f"{base}-{n}"
        n += 1
    return candidate


# ── handlers ──────────────────────────────────────────────────────────


def update_field(content: ContentModel, params: dict[str, Any]) -> tuple[ContentModel, str]:
    section = content.find_section(params["section"])
    if section is None:
        raise FieldNotFound(params["section"], params["field"])
    _require_field(section, params["field"])
    section.fields[params["field"]] = _normalized(params["value"])
    return content, f"Updated {section.label} ({params['field']})"


def add_section(content: ContentModel, params: dict[str, Any]) -> tuple[ContentModel, str]:
    label = params["label"].strip()
    if any(s.label.strip().casefold() == label.casefold() for s in content.sections):
        raise DuplicateSection(label)

    fields = params.get("fields", {})
    bad = [name for name, value in fields.items() if not is_field_value(value)]
    if bad:
        raise ValidationError(
            [Violation(path=f"fields.{name}", message="must be a string, list or object of strings") for name in bad]
        )

    requested_id = params.get("id")
    if requested_id is not None and any(s.id == requested_id for s in content.sections):
        raise ValidationError([Violation(path="id", message=f"section id {requested_id!r} is already in use")])
    section_id = requested_id or _unique_id(content, slugify(label))

    content.sections.append(
        Section(
            id=section_id,
            label=label,
            kind=params.get("kind", "content"),
            fields=_normalized(dict(fields)),
        )
    )
    return content, f"Added section {label}"


def remove_section(content: ContentModel, params: dict[str, Any]) -> tuple[ContentModel, str]:
    section = _require_section(content, params["section"])
    content.sections.remove(section)
    return content, f"Removed section {section.label}"


def update_metadata(content: ContentModel, params: dict[str, Any]) -> tuple[ContentModel, str]:
    setattr(content.metadata, params["field"], normalize_text(params["value"]))
    return content, f"Updated page {params['field']}"


def add_list_item(content: ContentModel, params: dict[str, Any]) -> tuple[ContentModel, str]:
    section = _require_section(content, params["section"])
    items = _require_list(section, params["field"])
    if params["position"] == "start":
        items.insert(0, _normalized(params["item"]))
    else:
        items.append(_normalized(params["item"]))
    return content, f"Added item to {section.label} ({params['field']})"


def remove_list_item(content: ContentModel, params: dict[str, Any]) -> tuple[ContentModel, str]:
    section = _require_section(content, params["section"])
    items = _require_list(section, params["field"])
    index = params["index"]
    if not 0 <= index < len(items):
        raise ValidationError(
            [Violation(path="index", message=f"out of range for a list of {len(items)} items")]
        )
    del items[index]
    return content, f"Removed item {index} from {section.label} ({params['field']})"


# ── definitions ───────────────────────────────────────────────────────

BUILTIN_TOOLS: tuple[ToolDefinition, ...] = (
    ToolDefinition(
        name="update-field",
        description="Replace the value of an existing field in a section.",
        schema=ParameterSchema(
            _SECTION_PARAM,
            Param("field", description="Field name within the section", min_length=1),
            Param("value", kind="value", description="New value for the field"),
        ),
        handler=update_field,
    ),
    ToolDefinition(
        name="add-section",
        description="Append a new section to the page.",
        schema=ParameterSchema(
            Param("label", description="Human-readable section label", min_length=1),
            Param("fields", kind="object", required=False, default={}, description="Initial fields"),
            Param("kind", required=False, default="content", description="Section type, e.g. hero or list"),
            Param("id", required=False, min_length=1, description="Explicit section id"),
        ),
        handler=add_section,
    ),
    ToolDefinition(
        name="remove-section",
        description="Remove a section from the page.",
        schema=ParameterSchema(_SECTION_PARAM),
        handler=remove_section,
    ),
    ToolDefinition(
        name="update-metadata",
        description="Update the page title or meta description.",
        schema=ParameterSchema(
            Param("field", choices=("title", "description"), description="Metadata field"),
            Param("value", description="New text"),
        ),
        handler=update_metadata,
    ),
    ToolDefinition(
        name="add-list-item",
        description="Insert an item into a list field.",
        schema=ParameterSchema(
            _SECTION_PARAM,
            Param("field", description="List field name", min_length=1),
            Param("item", kind="value", description="Item to insert"),
            Param("position", required=False, default="end", choices=("start", "end")),
        ),
        handler=add_list_item,
    ),
    ToolDefinition(
        name="remove-list-item",
        description="Remove an item from a list field by zero-based index.",
        schema=ParameterSchema(
            _SECTION_PARAM,
            Param("field", description="List field name", min_length=1),
            Param("index", kind="integer", description="Zero-based item index"),
        ),
        handler=remove_list_item,
    ),
)


def default_registry() -> ToolRegistry:
    """A fresh registry holding every builtin tool."""
    registry = ToolRegistry()
    for tool in BUILTIN_TOOLS:
        registry.register(tool)
    return registry
