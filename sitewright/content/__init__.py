"""Content model: extraction, change tracking and write-back."""

from sitewright.content.differ import ContentDiffer, apply_changes, diff_content, normalize_value
from sitewright.content.extractor import extract_content, normalize_text
from sitewright.content.generator import render_content
from sitewright.content.models import (
    METADATA_SECTION_ID,
    ContentModel,
    FieldValue,
    PageMetadata,
    PreviewChange,
    PreviewData,
    Section,
)

__all__ = [
    "METADATA_SECTION_ID",
    "ContentDiffer",
    "ContentModel",
    "FieldValue",
    "PageMetadata",
    "PreviewChange",
    "PreviewData",
    "Section",
    "apply_changes",
    "diff_content",
    "extract_content",
    "normalize_text",
    "normalize_value",
    "render_content",
]
