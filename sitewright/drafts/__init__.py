"""Per-site draft storage."""

from sitewright.drafts.snapshots import DraftSnapshotCache
from sitewright.drafts.store import DraftEntry, DraftStore, get_draft_store

__all__ = ["DraftEntry", "DraftSnapshotCache", "DraftStore", "get_draft_store"]
