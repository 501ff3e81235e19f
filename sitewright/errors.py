"""Error taxonomy shared across the content-sync pipeline.

Every error carries a stable ``code`` so the tool executor can normalize it
into a ``ToolExecutionResult`` and callers can map it to user-facing text.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class SitewrightError(Exception):
    """Base class for all expected failures."""

    code: str = "error"

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details: dict[str, Any] = details or {}


class ExtractionError(SitewrightError):
    """Markup could not be parsed into a content model."""

    code = "extraction_error"


class Violation(BaseModel):
    """A single schema violation, addressed by parameter path."""

    path: str
    message: str


class ValidationError(SitewrightError):
    """A payload did not match its declared schema."""

    code = "validation_error"

    def __init__(self, violations: list[Violation], message: str | None = None) -> None:
        self.violations = violations
        summary = "; ".join(f"{v.path}: {v.message}" for v in violations)
        super().__init__(
            message or f"Invalid parameters: {summary}",
            details={"violations": [v.model_dump() for v in violations]},
        )


class UnknownTool(SitewrightError):
    code = "unknown_tool"

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown tool: {name!r}", details={"tool": name})


class SectionNotFound(SitewrightError):
    code = "section_not_found"

    def __init__(self, section: str) -> None:
        self.section = section
        super().__init__(f"Section {section!r} not found", details={"section": section})


class FieldNotFound(SitewrightError):
    code = "field_not_found"

    def __init__(self, section: str, field: str) -> None:
        self.section = section
        self.field = field
        super().__init__(
            f"Field {field!r} not found in section {section!r}",
            details={"section": section, "field": field},
        )


class DuplicateSection(SitewrightError):
    code = "duplicate_section"

    def __init__(self, label: str) -> None:
        self.label = label
        super().__init__(f"Section {label!r} already exists", details={"label": label})


class DraftMissing(SitewrightError):
    """No draft exists for a site and nothing was available to seed one."""

    code = "draft_missing"

    def __init__(self, site_id: str) -> None:
        self.site_id = site_id
        super().__init__(f"No draft for site {site_id!r}", details={"site_id": site_id})


class ConfigurationError(SitewrightError):
    code = "configuration_error"


class DecryptionError(SitewrightError):
    code = "decryption_error"


class NotFound(SitewrightError):
    code = "not_found"


class RepositoryError(SitewrightError):
    """Wraps repository-hosting failures with the operation that failed."""

    code = "repository_error"

    def __init__(self, operation: str, cause: Exception, retryable: bool = False) -> None:
        self.operation = operation
        self.retryable = retryable
        super().__init__(
            f"repository {operation} failed: {cause}",
            details={"operation": operation, "retryable": retryable},
        )
        self.__cause__ = cause


class InternalError(SitewrightError):
    code = "internal_error"
