"""Shared test fixtures for Sitewright."""

import pytest
from unittest.mock import AsyncMock, MagicMock

import sitewright.drafts.store as draft_store_module
from sitewright.config.models import SitewrightConfig
from sitewright.content.extractor import extract_content
from sitewright.drafts.store import DraftStore
from sitewright.llm.base import LLMProvider
from sitewright.llm.models import LLMConfig, LLMResponse, TokenUsage
from sitewright.secrets.codec import SecretCodec, get_secret_codec
from sitewright.sites.models import SiteInput
from sitewright.sites.store import SiteStore
from sitewright.tools import ToolExecutor, default_registry
from sitewright.vcs.base import RepositoryProvider
from sitewright.vcs.models import PublishResult, RepoFile

SAMPLE_HTML = """\
<!DOCTYPE html>
<html>
<head>
  <title>Acme Bakery</title>
  <meta name="description" content="Fresh bread daily">
</head>
<body>
  <header id="hero" data-section="Hero" data-section-type="hero">
    <h1 data-field="headline">Welcome to Acme</h1>
    <p data-field="tagline">Fresh bread   every day</p>
    <a data-field="cta" href="/order">Order now</a>
  </header>
  <main>
    <section id="menu">
      <h2>Our Menu</h2>
      <p>Everything is baked in-house.</p>
      <ul><li>Sourdough</li><li>Baguette</li></ul>
    </section>
    <section id="contact">
      <h2>Contact</h2>
      <form><input name="email"></form>
      <p>Write to us.</p>
    </section>
  </main>
  <footer>
    <p>&copy; 2024 Acme</p>
  </footer>
</body>
</html>
"""


@pytest.fixture(autouse=True)
def _reset_process_state(monkeypatch):
    """Process-wide caches must not leak between tests."""
    monkeypatch.setattr(draft_store_module, "_default_store", None)
    get_secret_codec.cache_clear()
    yield
    get_secret_codec.cache_clear()


@pytest.fixture
def sample_html():
    return SAMPLE_HTML


@pytest.fixture
def sample_content():
    return extract_content(SAMPLE_HTML)


@pytest.fixture
def draft_store():
    return DraftStore()


@pytest.fixture
def seeded_store(draft_store, sample_content):
    """A store holding the sample page as both draft and baseline for site-1."""
    draft_store.set("site-1", sample_content, baseline=sample_content)
    return draft_store


@pytest.fixture
def registry():
    return default_registry()


@pytest.fixture
def executor(registry, seeded_store):
    return ToolExecutor(registry, seeded_store)


@pytest.fixture
def codec():
    return SecretCodec("test-session-secret")


@pytest.fixture
def sample_config(tmp_path):
    return SitewrightConfig(
        sites={"path": str(tmp_path / "sites.yaml")},
        output={"base_dir": str(tmp_path / ".sitewright")},
    )


@pytest.fixture
def site_store(tmp_path):
    return SiteStore(tmp_path / "sites.yaml")


@pytest.fixture
def sample_site(site_store, codec):
    return site_store.create_site(
        SiteInput(
            id="site-1",
            name="Acme Bakery",
            github_owner="acme",
            github_repo="bakery-site",
            github_token="ghp_test_token",
        ),
        codec,
    )


@pytest.fixture
def mock_repo_provider(sample_html):
    provider = MagicMock(spec=RepositoryProvider)
    provider.get_file_content = AsyncMock(
        return_value=RepoFile(path="index.html", content=sample_html, sha="abc123")
    )
    provider.publish_files = AsyncMock(
        return_value=PublishResult(
            success=True,
            message="Changes published",
            url="https://acme.github.io/bakery-site/",
            commit_sha="def4567890",
        )
    )
    return provider


@pytest.fixture
def mock_llm_provider():
    provider = MagicMock(spec=LLMProvider)
    provider.config = LLMConfig(provider="anthropic", model="test-model")
    provider.generate = AsyncMock(
        return_value=LLMResponse(
            content='{"actions": [], "reply": "Nothing to change."}',
            usage=TokenUsage(input_tokens=100, output_tokens=20),
            model="test-model",
        )
    )
    return provider
