"""DraftSnapshotCache — persists draft entries to JSON between CLI runs."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from sitewright.drafts.store import DraftEntry, DraftStore

logger = logging.getLogger(__name__)


def _sanitize_site_id(site_id: str) -> str:
    """Make a site id safe for use as a filename."""
    name = site_id.replace("/", "_").replace("\\", "_")
    name = name.replace("..", "_")
    name = re.sub(r"[^\w\-\.@]", "", name)
    if not name or name.strip(".") == "":
        name = "_unnamed"
    return name


class DraftSnapshotCache:
    """Reads and writes ``<base_dir>/drafts/<site_id>.json``."""

    def __init__(self, base_dir: str | Path) -> None:
        self.base_dir = Path(base_dir)
        self.drafts_dir = self.base_dir / "drafts"

    def path_for(self, site_id: str) -> Path:
        path = self.drafts_dir / f"{_sanitize_site_id(site_id)}.json"
        if not path.resolve().is_relative_to(self.base_dir.resolve()):
            raise ValueError(f"Draft path escapes base directory: {path}")
        return path

    def save(self, entry: DraftEntry) -> Path:
        path = self.path_for(entry.site_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(entry.model_dump_json(indent=2), encoding="utf-8")
        logger.debug("saved draft snapshot %s (v%d)", path, entry.version)
        return path

    def load(self, site_id: str) -> DraftEntry | None:
        path = self.path_for(site_id)
        if not path.is_file():
            return None
        try:
            return DraftEntry.model_validate_json(path.read_text(encoding="utf-8"))
        except PydanticValidationError:
            logger.warning("ignoring unreadable draft snapshot %s", path)
            return None

    def delete(self, site_id: str) -> bool:
        path = self.path_for(site_id)
        if path.is_file():
            path.unlink()
            return True
        return False

    def restore_into(self, store: DraftStore, site_id: str) -> DraftEntry | None:
        """Load the snapshot for *site_id* into *store*, if one exists."""
        entry = self.load(site_id)
        if entry is not None:
            store.restore(entry)
        return entry

    def sync_from(self, store: DraftStore, site_id: str) -> None:
        """Mirror the store's current entry for *site_id* to disk."""
        entry = store.get_entry(site_id)
        if entry is None:
            self.delete(site_id)
        else:
            self.save(entry)
