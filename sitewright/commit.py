"""Commit message synthesis from a change list."""

from __future__ import annotations

from datetime import datetime, timezone

from sitewright.content.models import PreviewChange

DEFAULT_PRODUCT_TAG = "[Sitewright]"
DEFAULT_ATTRIBUTION = "Edited by: Sitewright AI Assistant"
GENERIC_SUMMARY = "Content update"

_VERBS = {"add": "Added", "update": "Updated", "remove": "Removed"}


def format_timestamp(timestamp: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a trailing Z."""
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    utc = timestamp.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_commit_message(
    changes: list[PreviewChange],
    timestamp: datetime,
    *,
    product_tag: str = DEFAULT_PRODUCT_TAG,
    attribution: str = DEFAULT_ATTRIBUTION,
    max_headline_changes: int = 5,
) -> str:
    """Render a deterministic commit message.

    The headline summarizes at most *max_headline_changes* changes; the body
    lists every change in the order given. *timestamp* is taken as a
    parameter so the output depends on nothing but the arguments.
    """
    summary = "; ".join(
        f"{_VERBS[c.change_type]} {c.section_label} ({c.field})"
        for c in changes[:max_headline_changes]
    )
    headline = f"{product_tag} {summary or GENERIC_SUMMARY}"

    parts = [headline]
    if changes:
        body = "\n".join(
            f"- {c.change_type.upper()}: {c.section_label} → {c.field}" for c in changes
        )
        parts.append(f"Changes made:\n{body}")
    parts.append(f"{attribution}\nTimestamp: {format_timestamp(timestamp)}")
    return "\n\n".join(parts)
