"""Tests for sitewright.sites — YAML site store and credentials."""

import pytest
import yaml
from pydantic import ValidationError

from sitewright.errors import ConfigurationError, DecryptionError, NotFound
from sitewright.secrets.codec import SecretCodec
from sitewright.sites import SiteInput, SiteStore, SiteUpdate


def _input(**overrides) -> SiteInput:
    data = {
        "name": "Blog",
        "github_owner": "acme",
        "github_repo": "blog",
        "github_token": "ghp_blog",
    }
    data.update(overrides)
    return SiteInput(**data)


class TestSiteInput:
    @pytest.mark.parametrize("field", ["name", "github_owner", "github_repo", "github_token"])
    def test_blank_required_fields_rejected(self, field):
        with pytest.raises(ValidationError):
            _input(**{field: "   "})

    def test_defaults(self):
        data = _input()
        assert data.github_branch == "main"
        assert data.content_file == "content.json"
        assert data.html_file == "index.html"


class TestSiteStore:
    def test_create_encrypts_token(self, site_store, sample_site, codec):
        raw = site_store.path.read_text()
        assert "ghp_test_token" not in raw
        assert codec.decrypt(sample_site.encrypted_token) == "ghp_test_token"

    def test_created_timestamps(self, sample_site):
        assert sample_site.created_at == sample_site.last_modified

    def test_generated_id(self, site_store, codec):
        site = site_store.create_site(_input(), codec)
        assert len(site.id) == 36
        assert site_store.get_site(site.id) == site

    def test_create_with_existing_id_replaces(self, site_store, sample_site, codec):
        site_store.create_site(_input(id="site-1", name="Renamed"), codec)
        sites = site_store.list_sites()
        assert [s.name for s in sites] == ["Renamed"]

    def test_list_is_credential_free(self, site_store, sample_site):
        summary = site_store.list_sites()[0]
        assert summary.id == "site-1"
        assert not hasattr(summary, "encrypted_token")

    def test_require_missing(self, site_store):
        with pytest.raises(NotFound) as exc_info:
            site_store.require_site("ghost")
        assert exc_info.value.code == "not_found"

    def test_update_site(self, site_store, sample_site, codec):
        updated = site_store.update_site(
            "site-1", SiteUpdate(github_branch="gh-pages", github_token="ghp_new"), codec
        )
        assert updated.github_branch == "gh-pages"
        assert updated.name == "Acme Bakery"
        assert codec.decrypt(updated.encrypted_token) == "ghp_new"
        assert site_store.require_site("site-1") == updated

    def test_update_without_token_keeps_it(self, site_store, sample_site, codec):
        updated = site_store.update_site("site-1", SiteUpdate(name="New"), codec)
        assert updated.encrypted_token == sample_site.encrypted_token

    def test_update_missing(self, site_store, codec):
        with pytest.raises(NotFound):
            site_store.update_site("ghost", SiteUpdate(name="x"), codec)

    def test_delete_site(self, site_store, sample_site):
        assert site_store.delete_site("site-1") is True
        assert site_store.delete_site("site-1") is False
        assert site_store.list_sites() == []

    def test_touch_updates_last_modified(self, tmp_path, codec):
        times = iter(["2024-01-01T00:00:00+00:00", "2024-02-01T00:00:00+00:00"])
        store = SiteStore(tmp_path / "sites.yaml", clock=lambda: next(times))
        store.create_site(_input(id="b"), codec)
        touched = store.touch("b")
        assert touched.created_at == "2024-01-01T00:00:00+00:00"
        assert touched.last_modified == "2024-02-01T00:00:00+00:00"

    def test_touch_missing(self, site_store):
        with pytest.raises(NotFound):
            site_store.touch("ghost")

    def test_resolve_credentials(self, sample_site, codec):
        creds = SiteStore.resolve_credentials(sample_site, codec)
        assert creds.token == "ghp_test_token"
        assert "ghp_test_token" not in repr(creds)

    def test_resolve_credentials_wrong_secret(self, sample_site):
        with pytest.raises(DecryptionError):
            SiteStore.resolve_credentials(sample_site, SecretCodec("other"))

    def test_missing_file_is_empty(self, tmp_path):
        assert SiteStore(tmp_path / "none.yaml").list_sites() == []

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "sites.yaml"
        path.write_text("- [unclosed")
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            SiteStore(path).list_sites()

    def test_non_list_file(self, tmp_path):
        path = tmp_path / "sites.yaml"
        path.write_text(yaml.safe_dump({"id": "x"}))
        with pytest.raises(ConfigurationError, match="list of sites"):
            SiteStore(path).list_sites()
