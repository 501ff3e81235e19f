"""SyncService — extract, edit, preview and publish a site's content.

Pipeline:
    repository HTML → extract_content → DraftStore (seed)
    → ToolExecutor (repeated) → diff_content → build_commit_message
    → render_content → repository commit
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import Any, TypeVar

from sitewright.assistant.planner import AssistantReply, EditAssistant
from sitewright.commit import build_commit_message
from sitewright.config.models import SitewrightConfig
from sitewright.content.differ import diff_content
from sitewright.content.extractor import extract_content
from sitewright.content.generator import render_content
from sitewright.content.models import ContentModel, PreviewChange, PreviewData
from sitewright.drafts.store import DraftStore
from sitewright.errors import DraftMissing, RepositoryError, SitewrightError
from sitewright.llm.base import LLMProvider
from sitewright.secrets.codec import SecretCodec
from sitewright.sites.models import SiteConfig
from sitewright.sites.store import SiteStore
from sitewright.tools.executor import ToolContext, ToolExecutionResult, ToolExecutor
from sitewright.tools.registry import ToolRegistry
from sitewright.vcs.base import RepositoryProvider
from sitewright.vcs.models import PublishResult, RepoFile

logger = logging.getLogger(__name__)

T = TypeVar("T")

ProviderFactory = Callable[[SiteConfig, SecretCodec], RepositoryProvider]


class SyncService:
    """Orchestrates one site's content round trip.

    Repository calls are bounded by ``vcs.timeout``; the draft lock is only
    taken inside synchronous store calls, never across an await.
    """

    def __init__(
        self,
        config: SitewrightConfig,
        sites: SiteStore,
        drafts: DraftStore,
        registry: ToolRegistry,
        provider_factory: ProviderFactory,
        codec: SecretCodec,
    ) -> None:
        self.config = config
        self.sites = sites
        self.drafts = drafts
        self.registry = registry
        self.provider_factory = provider_factory
        self.codec = codec
        self.executor = ToolExecutor(registry, drafts)

    async def _bounded(self, operation: str, awaitable: Awaitable[T]) -> T:
        timeout = self.config.vcs.timeout
        try:
            return await asyncio.wait_for(awaitable, timeout=timeout)
        except asyncio.TimeoutError as e:
            raise RepositoryError(
                operation, TimeoutError(f"timed out after {timeout:g}s"), retryable=True
            ) from e

    def _provider(self, site: SiteConfig) -> RepositoryProvider:
        return self.provider_factory(site, self.codec)

    def _commit_message(self, changes: list[PreviewChange], timestamp: datetime) -> str:
        cfg = self.config.commit
        return build_commit_message(
            changes,
            timestamp,
            product_tag=cfg.product_tag,
            attribution=cfg.attribution,
            max_headline_changes=cfg.max_headline_changes,
        )

    async def extract(self, site_id: str, *, force: bool = False) -> ContentModel:
        """Seed the site's draft from its published HTML.

        An existing draft is returned as-is unless *force* is set, in which
        case it is discarded and re-extracted.
        """
        if not force:
            existing = self.drafts.get(site_id)
            if existing is not None:
                return existing

        site = self.sites.require_site(site_id)
        page = await self._bounded("read", self._provider(site).get_file_content(site, site.html_file))
        content = extract_content(page.content)
        with self.drafts.locked(site_id):
            # Another caller may have seeded and edited while the read was in flight.
            existing = self.drafts.get(site_id)
            if existing is not None and not force:
                logger.debug("draft for %s seeded concurrently, keeping it", site_id)
                return existing
            self.drafts.set(site_id, content, baseline=content)
        logger.info(
            "extracted %d section(s) from %s for site %s",
            len(content.sections),
            site.html_file,
            site_id,
        )
        return content

    async def run_tool(self, site_id: str, name: str, params: Any) -> ToolExecutionResult:
        """Execute one tool, extracting a draft first if the site has none."""
        if self.drafts.get_entry(site_id) is None:
            try:
                await self.extract(site_id)
            except SitewrightError as exc:
                logger.info("could not seed draft for %s: %s", site_id, exc.message)
                return ToolExecutionResult.failure(name, exc)
        return self.executor.execute(name, params, ToolContext(site_id=site_id))

    def preview(self, site_id: str, timestamp: datetime | None = None) -> PreviewData:
        entry = self.drafts.get_entry(site_id)
        if entry is None:
            raise DraftMissing(site_id)
        changes = diff_content(entry.baseline or ContentModel(), entry.content)
        return PreviewData(
            changes=changes,
            commit_message=self._commit_message(changes, timestamp or datetime.now(timezone.utc)),
        )

    async def publish(self, site_id: str, timestamp: datetime | None = None) -> PublishResult:
        """Write the draft to the repository as one commit.

        A failed write raises and leaves the draft untouched. After success
        the draft is cleared or re-baselined per ``drafts.after_publish``; a
        draft edited while the commit was in flight is always re-baselined.
        """
        entry = self.drafts.get_entry(site_id)
        if entry is None:
            raise DraftMissing(site_id)

        baseline = entry.baseline or ContentModel()
        changes = diff_content(baseline, entry.content)
        if not changes:
            return PublishResult(success=False, message="No changes to publish")

        site = self.sites.require_site(site_id)
        provider = self._provider(site)
        page = await self._bounded("read", provider.get_file_content(site, site.html_file))

        message = self._commit_message(changes, timestamp or datetime.now(timezone.utc))
        files = [
            RepoFile(
                path=site.content_file,
                content=json.dumps(entry.content.model_dump(), indent=2, ensure_ascii=False) + "\n",
            ),
            RepoFile(path=site.html_file, content=render_content(page.content, entry.content, entry.baseline)),
        ]
        result = await self._bounded("publish", provider.publish_files(site, files, message))
        if not result.success:
            logger.warning("publish for %s reported failure: %s", site_id, result.message)
            return result

        self.drafts.mark_published(
            site_id,
            entry.content,
            entry.version,
            clear=self.config.drafts.after_publish == "clear",
        )
        self.sites.touch(site_id)
        logger.info("published %d change(s) for %s (%s)", len(changes), site_id, result.commit_sha)
        return result

    async def chat(self, site_id: str, instruction: str, llm: LLMProvider) -> AssistantReply:
        """Plan and apply edits for a natural-language *instruction*."""
        await self.extract(site_id)
        site = self.sites.require_site(site_id)
        return await EditAssistant(llm, self.executor).run(site_id, site.name, instruction)
