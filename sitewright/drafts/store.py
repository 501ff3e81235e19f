"""Process-wide, per-site cache of draft content models.

Every read-modify-write against a site's entry must run under that site's
lock (``locked`` or ``update``) so concurrent edits are serialized; sites
never contend with each other.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime, timezone

from pydantic import BaseModel, Field

from sitewright.content.models import ContentModel

logger = logging.getLogger(__name__)

_KEEP = object()


class DraftEntry(BaseModel):
    """The in-progress content for one site plus its bookkeeping."""

    site_id: str = Field(min_length=1)
    content: ContentModel
    baseline: ContentModel | None = None
    version: int = Field(default=1, ge=1)
    updated_at: str


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DraftStore:
    """In-memory draft cache with per-site reentrant locks.

    Values are copied on the way in and out so callers can only change a
    draft through ``set``/``update``.
    """

    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        self._entries: dict[str, DraftEntry] = {}
        self._versions: dict[str, int] = {}
        self._locks: dict[str, threading.RLock] = {}
        self._locks_guard = threading.Lock()
        self._clock = clock

    def _lock_for(self, site_id: str) -> threading.RLock:
        with self._locks_guard:
            lock = self._locks.get(site_id)
            if lock is None:
                lock = self._locks[site_id] = threading.RLock()
            return lock

    @contextmanager
    def locked(self, site_id: str) -> Iterator[None]:
        """Hold the site's lock for a read-modify-write sequence."""
        with self._lock_for(site_id):
            yield

    def get_entry(self, site_id: str) -> DraftEntry | None:
        with self.locked(site_id):
            entry = self._entries.get(site_id)
            return entry.model_copy(deep=True) if entry else None

    def get(self, site_id: str) -> ContentModel | None:
        entry = self.get_entry(site_id)
        return entry.content if entry else None

    def set(self, site_id: str, content: ContentModel, *, baseline: object = _KEEP) -> DraftEntry:
        """Store *content* as the site's draft.

        *baseline* defaults to keeping the existing baseline; pass a model
        (or None) to replace it.
        """
        with self.locked(site_id):
            previous = self._entries.get(site_id)
            if baseline is _KEEP:
                baseline = previous.baseline if previous else None
            version = self._versions.get(site_id, 0) + 1
            self._versions[site_id] = version
            entry = DraftEntry(
                site_id=site_id,
                content=content.model_copy(deep=True),
                baseline=baseline.model_copy(deep=True) if isinstance(baseline, ContentModel) else None,
                version=version,
                updated_at=self._clock().isoformat(),
            )
            self._entries[site_id] = entry
            logger.debug(
                "draft write site=%s version=%d sections=%d",
                site_id,
                version,
                len(entry.content.sections),
            )
            return entry.model_copy(deep=True)

    def update(
        self, site_id: str, fn: Callable[[ContentModel | None], ContentModel]
    ) -> DraftEntry:
        """Atomically replace the draft with ``fn(current_draft)``."""
        with self.locked(site_id):
            return self.set(site_id, fn(self.get(site_id)))

    def restore(self, entry: DraftEntry) -> None:
        """Load a previously persisted entry as-is."""
        with self.locked(entry.site_id):
            self._entries[entry.site_id] = entry.model_copy(deep=True)
            self._versions[entry.site_id] = max(self._versions.get(entry.site_id, 0), entry.version)

    def clear(self, site_id: str) -> bool:
        with self.locked(site_id):
            removed = self._entries.pop(site_id, None) is not None
        if removed:
            logger.debug("draft cleared site=%s", site_id)
        return removed

    def mark_published(
        self,
        site_id: str,
        published: ContentModel,
        version: int,
        *,
        clear: bool = True,
    ) -> DraftEntry | None:
        """Record a successful publish of the draft at *version*.

        The entry is cleared only when *clear* is set and nobody wrote to the
        draft since *version*; otherwise the published content becomes the
        new baseline and later edits are kept.
        """
        with self.locked(site_id):
            entry = self._entries.get(site_id)
            if entry is None:
                return None
            if clear and entry.version == version:
                del self._entries[site_id]
                logger.info("draft for %s published and cleared", site_id)
                return None
            entry.baseline = published.model_copy(deep=True)
            logger.info(
                "draft for %s re-baselined (published v%d, current v%d)",
                site_id,
                version,
                entry.version,
            )
            return entry.model_copy(deep=True)

    def site_ids(self) -> list[str]:
        with self._locks_guard:
            return sorted(self._entries)


_default_store: DraftStore | None = None
_default_guard = threading.Lock()


def get_draft_store() -> DraftStore:
    """The process-wide store."""
    global _default_store
    with _default_guard:
        if _default_store is None:
            _default_store = DraftStore()
        return _default_store
