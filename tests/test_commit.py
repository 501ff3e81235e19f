"""Tests for sitewright.commit — deterministic commit messages."""

from datetime import datetime, timedelta, timezone

from sitewright.commit import build_commit_message, format_timestamp
from sitewright.content.models import PreviewChange

TS = datetime(2024, 1, 15, 10, 30, 0, tzinfo=timezone.utc)


def _change(change_type="update", label="Hero", field="headline") -> PreviewChange:
    return PreviewChange(
        change_type=change_type,
        section_id=label.lower(),
        section_label=label,
        field=field,
    )


class TestBuildCommitMessage:
    def test_hero_headline_scenario(self):
        message = build_commit_message([_change()], TS, product_tag="[Product]")
        lines = message.split("\n")
        assert lines[0] == "[Product] Updated Hero (headline)"
        assert message.count("- UPDATE: Hero → headline") == 1
        assert [line for line in lines if line.startswith("- ")] == ["- UPDATE: Hero → headline"]

    def test_full_layout(self):
        changes = [_change(), _change("add", "Team", "heading")]
        message = build_commit_message(changes, TS)
        assert message == (
            "[Sitewright] Updated Hero (headline); Added Team (heading)\n"
            "\n"
            "Changes made:\n"
            "- UPDATE: Hero → headline\n"
            "- ADD: Team → heading\n"
            "\n"
            "Edited by: Sitewright AI Assistant\n"
            "Timestamp: 2024-01-15T10:30:00.000Z"
        )

    def test_empty_change_list(self):
        message = build_commit_message([], TS)
        assert message.startswith("[Sitewright] Content update\n\n")
        assert "Changes made" not in message

    def test_headline_caps_changes_but_body_lists_all(self):
        changes = [_change(field=f"f{i}") for i in range(8)]
        message = build_commit_message(changes, TS, max_headline_changes=3)
        headline = message.split("\n")[0]
        assert headline.count("Updated Hero") == 3
        assert message.count("- UPDATE: Hero →") == 8

    def test_remove_verb(self):
        message = build_commit_message([_change("remove", "Footer", "text")], TS)
        assert message.startswith("[Sitewright] Removed Footer (text)")
        assert "- REMOVE: Footer → text" in message

    def test_custom_attribution(self):
        message = build_commit_message([], TS, attribution="Edited by: Ops")
        assert "Edited by: Ops\nTimestamp:" in message

    def test_deterministic(self):
        changes = [_change(), _change("add", "Team", "heading")]
        assert build_commit_message(changes, TS) == build_commit_message(changes, TS)


class TestFormatTimestamp:
    def test_utc_with_milliseconds(self):
        ts = datetime(2024, 1, 15, 10, 30, 0, 123456, tzinfo=timezone.utc)
        assert format_timestamp(ts) == "2024-01-15T10:30:00.123Z"

    def test_naive_is_treated_as_utc(self):
        assert format_timestamp(datetime(2024, 1, 15, 10, 30)) == "2024-01-15T10:30:00.000Z"

    def test_other_zone_is_converted(self):
        ts = datetime(2024, 1, 15, 12, 30, tzinfo=timezone(timedelta(hours=2)))
        assert format_timestamp(ts) == "2024-01-15T10:30:00.000Z"
