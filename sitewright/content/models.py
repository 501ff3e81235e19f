"""Pydantic models for the page content model and its change set."""

from __future__ import annotations

from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# A field holds text, or lists/mappings of text (paragraph lists, links, images).
FieldValue = Union[str, list[Any], dict[str, Any]]

METADATA_SECTION_ID = "@metadata"
METADATA_SECTION_LABEL = "Metadata"


class PageMetadata(BaseModel):
    title: str = ""
    description: str = ""


class Section(BaseModel):
    """One editable region of the page."""

    id: str = Field(min_length=1)
    label: str = Field(min_length=1)
    kind: str = "content"
    fields: dict[str, FieldValue] = Field(default_factory=dict)

    @field_validator("label")
    @classmethod
    def validate_label(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("label cannot be empty or whitespace")
        return v


class ContentModel(BaseModel):
    """Structured, addressable content extracted from a page."""

    metadata: PageMetadata = Field(default_factory=PageMetadata)
    sections: list[Section] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_sections(self) -> ContentModel:
        ids = [s.id for s in self.sections]
        labels = [s.label for s in self.sections]
        if len(set(ids)) != len(ids):
            raise ValueError("section ids must be unique")
        if len(set(labels)) != len(labels):
            raise ValueError("section labels must be unique")
        return self

    def find_section(self, ref: str) -> Section | None:
        """Find a section by label, falling back to id."""
        for section in self.sections:
            if section.label == ref:
                return section
        for section in self.sections:
            if section.id == ref:
                return section
        return None

    def labels(self) -> list[str]:
        return [s.label for s in self.sections]


class PreviewChange(BaseModel):
    """A single field-level difference between baseline and draft."""

    model_config = ConfigDict(frozen=True)

    change_type: Literal["add", "update", "remove"]
    section_id: str
    section_label: str
    field: str
    old_value: Any = None
    new_value: Any = None
    # Set when the change belongs to adding or removing a whole section.
    whole_section: bool = False
    section_kind: str | None = None


class PreviewData(BaseModel):
    changes: list[PreviewChange] = Field(default_factory=list)
    commit_message: str
