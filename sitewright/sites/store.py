"""SiteStore — YAML-file persistence for managed sites."""

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path

import yaml
from pydantic import ValidationError as PydanticValidationError

from sitewright.errors import ConfigurationError, NotFound
from sitewright.secrets.codec import SecretCodec
from sitewright.sites.models import SiteConfig, SiteCredentials, SiteInput, SiteSummary, SiteUpdate

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class SiteStore:
    """Reads and writes a list of ``SiteConfig`` records in one YAML file."""

    def __init__(self, path: str | Path, clock: Callable[[], str] = _now_iso) -> None:
        self.path = Path(path)
        self._clock = clock
        self._lock = threading.Lock()

    # -- file access -------------------------------------------------------

    def _read(self) -> list[SiteConfig]:
        if not self.path.is_file():
            return []
        try:
            raw = yaml.safe_load(self.path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in site store {self.path}: {e}") from e
        if raw is None:
            return []
        if not isinstance(raw, list):
            raise ConfigurationError(f"Site store {self.path} must contain a list of sites")
        try:
            return [SiteConfig.model_validate(item) for item in raw]
        except PydanticValidationError as e:
            raise ConfigurationError(f"Invalid site record in {self.path}: {e}") from e

    def _write(self, sites: list[SiteConfig]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = [s.model_dump(exclude_none=True) for s in sites]
        self.path.write_text(
            yaml.safe_dump(payload, default_flow_style=False, sort_keys=False),
            encoding="utf-8",
        )
        logger.debug("wrote site store %s (%d sites)", self.path, len(sites))

    # -- queries -----------------------------------------------------------

    def list_sites(self) -> list[SiteSummary]:
        with self._lock:
            return [s.summary() for s in self._read()]

    def get_site(self, site_id: str) -> SiteConfig | None:
        with self._lock:
            return next((s for s in self._read() if s.id == site_id), None)

    def require_site(self, site_id: str) -> SiteConfig:
        site = self.get_site(site_id)
        if site is None:
            raise NotFound(f"Site {site_id!r} not found", details={"site_id": site_id})
        return site

    # -- mutations ---------------------------------------------------------

    def create_site(self, data: SiteInput, codec: SecretCodec) -> SiteConfig:
        """Persist a new site, encrypting its token. An existing id is replaced."""
        now = self._clock()
        site = SiteConfig(
            id=data.id or str(uuid.uuid4()),
            name=data.name,
            github_owner=data.github_owner,
            github_repo=data.github_repo,
            github_branch=data.github_branch,
            content_file=data.content_file,
            html_file=data.html_file,
            custom_schema=data.custom_schema,
            created_at=now,
            last_modified=now,
            encrypted_token=codec.encrypt(data.github_token),
        )
        with self._lock:
            sites = [s for s in self._read() if s.id != site.id]
            sites.append(site)
            self._write(sites)
        logger.info("registered site %s (%s/%s)", site.id, site.github_owner, site.github_repo)
        return site

    def update_site(self, site_id: str, updates: SiteUpdate, codec: SecretCodec) -> SiteConfig:
        with self._lock:
            sites = self._read()
            index = next((i for i, s in enumerate(sites) if s.id == site_id), None)
            if index is None:
                raise NotFound(f"Site {site_id!r} not found", details={"site_id": site_id})
            changes = updates.model_dump(exclude_none=True)
            token = changes.pop("github_token", None)
            if token:
                changes["encrypted_token"] = codec.encrypt(token)
            changes["last_modified"] = self._clock()
            sites[index] = sites[index].model_copy(update=changes)
            self._write(sites)
            return sites[index]

    def delete_site(self, site_id: str) -> bool:
        with self._lock:
            sites = self._read()
            remaining = [s for s in sites if s.id != site_id]
            if len(remaining) == len(sites):
                return False
            self._write(remaining)
        logger.info("removed site %s", site_id)
        return True

    def touch(self, site_id: str) -> SiteConfig:
        """Bump ``last_modified`` after a successful publish."""
        with self._lock:
            sites = self._read()
            for i, site in enumerate(sites):
                if site.id == site_id:
                    sites[i] = site.model_copy(update={"last_modified": self._clock()})
                    self._write(sites)
                    return sites[i]
        raise NotFound(f"Site {site_id!r} not found", details={"site_id": site_id})

    @staticmethod
    def resolve_credentials(site: SiteConfig, codec: SecretCodec) -> SiteCredentials:
        return SiteCredentials(token=codec.decrypt(site.encrypted_token))
