"""Change tracking between a published baseline and the current draft."""

from __future__ import annotations

import json
from typing import Any

from sitewright.content.extractor import normalize_text
from sitewright.content.models import (
    METADATA_SECTION_ID,
    METADATA_SECTION_LABEL,
    ContentModel,
    PreviewChange,
    Section,
)

# Field name used for section-level changes of sections that have no fields.
WHOLE_SECTION_FIELD = "*"

_METADATA_FIELDS = ("title", "description")


def normalize_value(value: Any) -> str:
    """Comparable form of a field value: whitespace-collapsed text or canonical JSON."""
    if value is None:
        return ""
    if isinstance(value, str):
        return normalize_text(value)
    return normalize_text(json.dumps(value, sort_keys=True, ensure_ascii=False))


def _same_section(old: Section, new: Section) -> bool:
    return old.id == new.id and old.kind == new.kind


class ContentDiffer:
    """Compares two content models and replays change lists."""

    @staticmethod
    def diff(baseline: ContentModel, draft: ContentModel) -> list[PreviewChange]:
        """Ordered field-level changes turning *baseline* into *draft*.

        Metadata changes come first, then baseline sections in baseline
        order, then sections that only exist in the draft, in draft order.
        A section present in both is compared field by field when it kept its
        id, kind and relative position; otherwise it is reported as removed
        and re-added. The result is never truncated.
        """
        changes: list[PreviewChange] = []

        for name in _METADATA_FIELDS:
            old_value = getattr(baseline.metadata, name)
            new_value = getattr(draft.metadata, name)
            if normalize_value(old_value) != normalize_value(new_value):
                changes.append(
                    PreviewChange(
                        change_type="update",
                        section_id=METADATA_SECTION_ID,
                        section_label=METADATA_SECTION_LABEL,
                        field=name,
                        old_value=old_value,
                        new_value=new_value,
                    )
                )

        kept = ContentDiffer._kept_labels(baseline, draft)
        draft_by_label = {s.label: s for s in draft.sections}

        for old in baseline.sections:
            if old.label in kept:
                changes.extend(_diff_fields(old, draft_by_label[old.label]))
            else:
                changes.extend(_section_changes(old, "remove"))

        for new in draft.sections:
            if new.label not in kept:
                changes.extend(_section_changes(new, "add"))

        return changes

    @staticmethod
    def _kept_labels(baseline: ContentModel, draft: ContentModel) -> set[str]:
        """Labels of sections that can be diffed in place.

        Walks the draft from the start and keeps sections that exist in the
        baseline with the same id and kind, in increasing baseline order; the
        walk stops at the first section that breaks that run.
        """
        baseline_index = {s.label: i for i, s in enumerate(baseline.sections)}
        baseline_by_label = {s.label: s for s in baseline.sections}
        kept: set[str] = set()
        last_index = -1
        for section in draft.sections:
            index = baseline_index.get(section.label)
            if index is None:
                # Draft-only sections don't break the run if nothing shared follows.
                continue
            if index < last_index or not _same_section(baseline_by_label[section.label], section):
                break
            kept.add(section.label)
            last_index = index

        # A draft-only section sitting before a kept one would be re-appended
        # after it on replay; trim the kept run back to before that point.
        seen_new = False
        for section in draft.sections:
            if section.label in kept:
                if seen_new:
                    kept.discard(section.label)
            else:
                seen_new = True
        return kept

    @staticmethod
    def apply(baseline: ContentModel, changes: list[PreviewChange]) -> ContentModel:
        """Replay *changes* onto a copy of *baseline*."""
        result = baseline.model_copy(deep=True)

        for change in changes:
            if change.section_id == METADATA_SECTION_ID:
                setattr(result.metadata, change.field, change.new_value or "")
                continue

            section = next((s for s in result.sections if s.label == change.section_label), None)

            if change.whole_section and change.change_type == "remove":
                if section is not None:
                    result.sections.remove(section)
                continue

            if change.whole_section and change.change_type == "add":
                if section is None:
                    section = Section(
                        id=change.section_id,
                        label=change.section_label,
                        kind=change.section_kind or "content",
                    )
                    result.sections.append(section)
                if change.field != WHOLE_SECTION_FIELD:
                    section.fields[change.field] = change.new_value
                continue

            if section is None:
                raise ValueError(f"Change targets unknown section {change.section_label!r}")
            if change.change_type == "remove":
                section.fields.pop(change.field, None)
            else:
                section.fields[change.field] = change.new_value

        return result


def _section_changes(section: Section, change_type: str) -> list[PreviewChange]:
    adding = change_type == "add"
    common = dict(
        change_type=change_type,
        section_id=section.id,
        section_label=section.label,
        whole_section=True,
        section_kind=section.kind,
    )
    if not section.fields:
        return [PreviewChange(field=WHOLE_SECTION_FIELD, **common)]
    return [
        PreviewChange(
            field=name,
            old_value=None if adding else value,
            new_value=value if adding else None,
            **common,
        )
        for name, value in section.fields.items()
    ]


def _diff_fields(old: Section, new: Section) -> list[PreviewChange]:
    changes: list[PreviewChange] = []
    names = list(old.fields) + [k for k in new.fields if k not in old.fields]
    for name in names:
        if name not in new.fields:
            changes.append(
                PreviewChange(
                    change_type="remove",
                    section_id=new.id,
                    section_label=new.label,
                    field=name,
                    old_value=old.fields[name],
                )
            )
            continue
        old_value = old.fields.get(name)
        new_value = new.fields[name]
        if name not in old.fields or normalize_value(old_value) != normalize_value(new_value):
            changes.append(
                PreviewChange(
                    change_type="update",
                    section_id=new.id,
                    section_label=new.label,
                    field=name,
                    old_value=old_value,
                    new_value=new_value,
                )
            )
    return changes


def diff_content(baseline: ContentModel, draft: ContentModel) -> list[PreviewChange]:
    """Convenience wrapper around ContentDiffer.diff()."""
    return ContentDiffer.diff(baseline, draft)


def apply_changes(baseline: ContentModel, changes: list[PreviewChange]) -> ContentModel:
    """Convenience wrapper around ContentDiffer.apply()."""
    return ContentDiffer.apply(baseline, changes)
