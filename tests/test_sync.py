"""Tests for sitewright.sync — end-to-end pipeline with a mocked repository."""

import asyncio
import json
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from sitewright.content.extractor import extract_content
from sitewright.errors import DraftMissing, NotFound, RepositoryError
from sitewright.sync import SyncService
from sitewright.tools import ToolContext
from sitewright.vcs.models import PublishResult, RepoFile

TS = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)


@pytest.fixture
def service(sample_config, site_store, sample_site, draft_store, registry, mock_repo_provider, codec):
    factory = MagicMock(return_value=mock_repo_provider)
    return SyncService(
        config=sample_config,
        sites=site_store,
        drafts=draft_store,
        registry=registry,
        provider_factory=factory,
        codec=codec,
    )


# ── extract ─────────────────────────────────────────────────────────


class TestExtract:
    async def test_seeds_draft_and_baseline(self, service, draft_store, sample_content, mock_repo_provider):
        content = await service.extract("site-1")
        assert content == sample_content
        entry = draft_store.get_entry("site-1")
        assert entry.content == sample_content
        assert entry.baseline == sample_content
        mock_repo_provider.get_file_content.assert_awaited_once()
        assert mock_repo_provider.get_file_content.await_args.args[1] == "index.html"

    async def test_existing_draft_is_reused(self, service, mock_repo_provider):
        await service.extract("site-1")
        await service.extract("site-1")
        assert mock_repo_provider.get_file_content.await_count == 1

    async def test_force_reextracts(self, service, draft_store, mock_repo_provider):
        await service.extract("site-1")
        await service.run_tool("site-1", "update-metadata", {"field": "title", "value": "x"})
        content = await service.extract("site-1", force=True)
        assert content.metadata.title == "Acme Bakery"
        assert mock_repo_provider.get_file_content.await_count == 2

    async def test_unknown_site(self, service):
        with pytest.raises(NotFound):
            await service.extract("ghost")

    async def test_timeout_is_repository_error(self, service, sample_config, mock_repo_provider):
        sample_config.vcs.timeout = 0.01

        async def _slow(*args):
            await asyncio.sleep(1)

        mock_repo_provider.get_file_content = AsyncMock(side_effect=_slow)
        with pytest.raises(RepositoryError) as exc_info:
            await service.extract("site-1")
        assert exc_info.value.retryable is True


# ── run_tool / preview ──────────────────────────────────────────────


class TestRunToolAndPreview:
    async def test_run_tool_seeds_on_first_use(self, service, draft_store):
        result = await service.run_tool(
            "site-1", "update-field", {"section": "Hero", "field": "headline", "value": "Hello"}
        )
        assert result.success is True
        assert draft_store.get_entry("site-1").baseline is not None

    async def test_run_tool_unknown_site_is_a_result(self, service):
        result = await service.run_tool("ghost", "update-field", {})
        assert result.success is False
        assert result.error.code == "not_found"

    async def test_preview_hero_scenario(self, service, sample_config):
        sample_config.commit.product_tag = "[Product]"
        await service.run_tool(
            "site-1", "update-field", {"section": "Hero", "field": "headline", "value": "Hello"}
        )
        data = service.preview("site-1", TS)
        assert len(data.changes) == 1
        assert data.commit_message.split("\n")[0] == "[Product] Updated Hero (headline)"
        assert data.commit_message.endswith("Timestamp: 2024-01-15T10:30:00.000Z")

    async def test_preview_after_undo_is_empty(self, service):
        await service.run_tool("site-1", "update-field", {"section": "Hero", "field": "headline", "value": "x"})
        await service.run_tool(
            "site-1", "update-field", {"section": "Hero", "field": "headline", "value": "Welcome to Acme"}
        )
        assert service.preview("site-1", TS).changes == []

    async def test_concurrent_first_calls_keep_both_edits(self, service, draft_store, mock_repo_provider, sample_html):
        async def _slow_read(site, path):
            await asyncio.sleep(0.01)
            return RepoFile(path=path, content=sample_html)

        mock_repo_provider.get_file_content = AsyncMock(side_effect=_slow_read)
        results = await asyncio.gather(
            service.run_tool("site-1", "update-field", {"section": "Hero", "field": "headline", "value": "A"}),
            service.run_tool("site-1", "update-field", {"section": "Hero", "field": "tagline", "value": "B"}),
        )

        assert all(r.success for r in results)
        hero = draft_store.get("site-1").find_section("Hero").fields
        assert hero["headline"] == "A"
        assert hero["tagline"] == "B"
        assert len(service.preview("site-1", TS).changes) == 2

    def test_preview_without_draft(self, service):
        with pytest.raises(DraftMissing):
            service.preview("site-1", TS)


# ── publish ─────────────────────────────────────────────────────────


class TestPublish:
    async def _edit(self, service):
        await service.run_tool(
            "site-1", "update-field", {"section": "Hero", "field": "headline", "value": "Hello"}
        )

    async def test_publishes_both_files_in_one_commit(self, service, mock_repo_provider):
        await self._edit(service)
        result = await service.publish("site-1", TS)

        assert result.success is True
        mock_repo_provider.publish_files.assert_awaited_once()
        site, files, message = mock_repo_provider.publish_files.await_args.args
        assert site.id == "site-1"
        by_path = {f.path: f.content for f in files}
        assert set(by_path) == {"content.json", "index.html"}
        assert json.loads(by_path["content.json"])["sections"][0]["fields"]["headline"] == "Hello"
        assert extract_content(by_path["index.html"]).find_section("Hero").fields["headline"] == "Hello"
        assert message.startswith("[Sitewright] Updated Hero (headline)")

    async def test_clears_draft_after_success(self, service, draft_store):
        await self._edit(service)
        await service.publish("site-1", TS)
        assert draft_store.get_entry("site-1") is None

    async def test_rebaseline_mode(self, service, draft_store, sample_config):
        sample_config.drafts.after_publish = "rebaseline"
        await self._edit(service)
        await service.publish("site-1", TS)
        entry = draft_store.get_entry("site-1")
        assert entry.baseline == entry.content
        assert service.preview("site-1", TS).changes == []

    async def test_touches_site(self, service, site_store, sample_site):
        site_store._clock = lambda: "2099-01-01T00:00:00+00:00"
        await self._edit(service)
        await service.publish("site-1", TS)
        assert site_store.require_site("site-1").last_modified == "2099-01-01T00:00:00+00:00"

    async def test_failed_write_leaves_draft(self, service, draft_store, mock_repo_provider):
        await self._edit(service)
        before = draft_store.get_entry("site-1")
        mock_repo_provider.publish_files.side_effect = RepositoryError("publish", RuntimeError("boom"))
        with pytest.raises(RepositoryError):
            await service.publish("site-1", TS)
        assert draft_store.get_entry("site-1") == before

    async def test_unsuccessful_result_leaves_draft(self, service, draft_store, mock_repo_provider):
        await self._edit(service)
        before = draft_store.get_entry("site-1")
        mock_repo_provider.publish_files.return_value = PublishResult(success=False, message="rejected")
        result = await service.publish("site-1", TS)
        assert result.success is False
        assert draft_store.get_entry("site-1") == before

    async def test_edit_during_publish_is_rebaselined(self, service, draft_store, mock_repo_provider):
        await self._edit(service)

        async def _publish(site, files, message):
            # Another request edits the draft while the commit is in flight.
            service.executor.execute(
                "update-metadata", {"field": "title", "value": "Later"}, ToolContext(site_id="site-1")
            )
            return PublishResult(success=True, message="ok", commit_sha="abc")

        mock_repo_provider.publish_files = AsyncMock(side_effect=_publish)
        await service.publish("site-1", TS)

        entry = draft_store.get_entry("site-1")
        assert entry is not None
        assert entry.content.metadata.title == "Later"
        changes = service.preview("site-1", TS).changes
        assert [(c.section_id, c.field) for c in changes] == [("@metadata", "title")]

    async def test_nothing_to_publish(self, service, mock_repo_provider):
        await service.extract("site-1")
        result = await service.publish("site-1", TS)
        assert result.success is False
        mock_repo_provider.publish_files.assert_not_awaited()

    async def test_without_draft(self, service):
        with pytest.raises(DraftMissing):
            await service.publish("site-1", TS)


# ── chat ────────────────────────────────────────────────────────────


class TestChat:
    async def test_runs_planned_actions(self, service, mock_llm_provider, draft_store):
        mock_llm_provider.generate.return_value.content = json.dumps(
            {
                "actions": [{"tool": "update-metadata", "params": {"field": "title", "value": "TEST 123"}}],
                "reply": "Title updated.",
            }
        )
        reply = await service.chat("site-1", "Change the page title to TEST 123", mock_llm_provider)
        assert reply.reply == "Title updated."
        assert reply.succeeded
        assert draft_store.get("site-1").metadata.title == "TEST 123"
        system, user = mock_llm_provider.generate.await_args.args
        assert "Acme Bakery" in system
        assert user == "Change the page title to TEST 123"
