"""ToolExecutor — validates, runs and records tool calls against a draft."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, Field

from sitewright.content.differ import diff_content
from sitewright.content.models import ContentModel, PreviewChange
from sitewright.drafts.store import DraftEntry, DraftStore
from sitewright.errors import DraftMissing, InternalError, SitewrightError, UnknownTool
from sitewright.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

# Produces the initial content for a site that has no draft yet.
Seeder = Callable[[str], ContentModel | None]


class ToolContext(BaseModel):
    site_id: str = Field(min_length=1)


class ToolError(BaseModel):
    code: str
    message: str
    details: dict[str, Any] = Field(default_factory=dict)


class ToolExecutionResult(BaseModel):
    success: bool
    tool: str
    preview: list[PreviewChange] = Field(default_factory=list)
    summary: str = ""
    error: ToolError | None = None

    @classmethod
    def failure(cls, tool: str, exc: SitewrightError) -> ToolExecutionResult:
        return cls(
            success=False,
            tool=tool,
            summary=exc.message,
            error=ToolError(code=exc.code, message=exc.message, details=exc.details),
        )


class ToolExecutor:
    """Runs registered tools against the draft store.

    ``execute`` never raises: every failure comes back as an unsuccessful
    ``ToolExecutionResult`` and leaves the draft as it was.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        store: DraftStore,
        seeder: Seeder | None = None,
    ) -> None:
        self.registry = registry
        self.store = store
        self.seeder = seeder

    def execute(self, name: str, payload: Any, context: ToolContext) -> ToolExecutionResult:
        site_id = context.site_id
        tool = self.registry.get(name)
        if tool is None:
            logger.info("rejected unknown tool %r for site %s", name, site_id)
            return ToolExecutionResult.failure(name, UnknownTool(name))

        try:
            params = tool.schema.validate(payload)
            with self.store.locked(site_id):
                entry = self.store.get_entry(site_id) or self._seed(site_id)
                before = entry.content
                after, summary = tool.handler(before.model_copy(deep=True), params)
                # Re-validate so handler output always satisfies model invariants.
                after = ContentModel.model_validate(after.model_dump())
                written = self.store.set(site_id, after)
                preview = diff_content(before, after)
        except SitewrightError as exc:
            logger.info("tool %s failed for site %s: [%s] %s", name, site_id, exc.code, exc.message)
            return ToolExecutionResult.failure(name, exc)
        except Exception:
            logger.exception(
                "tool %s crashed for site %s (payload keys: %s)",
                name,
                site_id,
                sorted(payload) if isinstance(payload, dict) else type(payload).__name__,
            )
            return ToolExecutionResult.failure(name, InternalError(f"Tool {name!r} failed unexpectedly"))

        logger.info(
            "tool %s applied to site %s (draft v%d, %d change(s))",
            name,
            site_id,
            written.version,
            len(preview),
        )
        return ToolExecutionResult(success=True, tool=name, preview=preview, summary=summary)

    def _seed(self, site_id: str) -> DraftEntry:
        content = self.seeder(site_id) if self.seeder is not None else None
        if content is None:
            raise DraftMissing(site_id)
        logger.debug("seeding draft for %s", site_id)
        return self.store.set(site_id, content, baseline=content)
