from datetime import timedelta

from obsidian_cortex.core.markdown_sections import get_section
from obsidian_cortex.core.tracker import existing_log_entries, parse_tracker_state, sync_tracker

from tests.conftest import FIXED_NOW


def test_create_via_sync_on_empty_document():
    result = sync_tracker("", [{"id": "e18", "status": "open", "title": "New issue"}], now=FIXED_NOW)

    assert result.parse.source == "empty"
    assert result.outcome.created_ids == ["E18"]
    assert "| E18 |  | Open |  | 2026-10-18 | New issue |  |" in get_section(result.body, "Tracker Table")
    assert existing_log_entries(result.body) == [
        "- 2026-10-18T12:00:00.000Z | updated=none | created=E18 | deleted=none | unresolved=none"
    ]
    assert result.body.index("## Tracker State (JSON)") < result.body.index("## Tracker Table")
    assert result.body.index("## Tracker Table") < result.body.index("## Tracker Sync Log")


def test_hand_written_content_is_preserved():
    body = "# Alpha Tracker\n\nTriage rules live here.\n\n## Decisions\n\n- Ship weekly\n"
    result = sync_tracker(body, [{"id": "E1"}], now=FIXED_NOW)

    assert result.body.startswith("# Alpha Tracker\n\nTriage rules live here.\n\n## Decisions\n\n- Ship weekly\n\n")
    assert get_section(result.body, "Decisions") == "- Ship weekly"


def test_second_sync_reads_json_state_and_orders_rows():
    first = sync_tracker("", [{"id": "E1", "status": "blocked"}, {"id": "E2"}], now=FIXED_NOW)
    second = sync_tracker(first.body, [{"id": "e2", "status": "qa"}], now=FIXED_NOW + timedelta(hours=1))

    assert second.parse.source == "json_state"
    assert second.outcome.updated_ids == ["E2"]
    table_rows = get_section(second.body, "Tracker Table").split("\n")[2:]
    assert table_rows[0].startswith("| E2 |  | In Validation |")
    assert table_rows[1].startswith("| E1 |  | Blocked |")
    assert second.summary()["status_counts"] == {"Blocked": 1, "In Validation": 1}


def test_code_fence_in_note_keeps_json_state_authoritative():
    first = sync_tracker("", [{"id": "E1", "note": "see ```code```", "owner": "ann"}], now=FIXED_NOW)
    second = sync_tracker(first.body, [{"id": "E1", "status": "done"}], now=FIXED_NOW + timedelta(hours=1))

    assert second.parse.source == "json_state"
    assert second.parse.warnings == []
    issue = second.issues[0]
    assert (issue.owner, issue.note, issue.created) == ("ann", "see ```code```", "2026-10-18")


def test_log_is_truncated_newest_first():
    body = ""
    moments = [FIXED_NOW + timedelta(minutes=offset) for offset in (0, 1, 2)]
    for moment in moments:
        body = sync_tracker(body, [], max_log_entries=2, now=moment).body

    entries = existing_log_entries(body)
    assert len(entries) == 2
    assert entries[0].startswith("- 2026-10-18T12:02:00.000Z")
    assert entries[1].startswith("- 2026-10-18T12:01:00.000Z")


def test_log_keeps_at_least_one_entry():
    body = sync_tracker("", [], now=FIXED_NOW).body
    body = sync_tracker(body, [], max_log_entries=0, now=FIXED_NOW + timedelta(minutes=1)).body
    assert len(existing_log_entries(body)) == 1


def test_table_rendering_can_be_skipped():
    result = sync_tracker("", [{"id": "E1"}], render_table_section=False, now=FIXED_NOW)
    assert get_section(result.body, "Tracker Table") is None
    assert parse_tracker_state(result.body).issues[0].id == "E1"


def test_legacy_table_is_migrated_into_json_state():
    legacy = "## Issues\n\n| ID | Status | Title |\n|---|---|---|\n| d4 | wip | Slow export |\n"
    result = sync_tracker(legacy, [{"id": "D4", "status": "done"}], now=FIXED_NOW)

    assert result.parse.source == "table_import"
    assert result.outcome.updated_ids == ["D4"]
    reparsed = parse_tracker_state(result.body)
    assert reparsed.source == "json_state"
    assert reparsed.issues[0].status == "Done"
    assert reparsed.issues[0].title == "Slow export"


def test_fallback_warning_and_duplicates_are_logged():
    body = (
        "## Tracker State (JSON)\n\n```json\n[{broken\n```\n\n"
        "| ID | Status |\n|---|---|\n| E1 | Open |\n| E1 | Done |\n"
    )
    result = sync_tracker(body, [], now=FIXED_NOW)

    entry = existing_log_entries(result.body)[0]
    assert "duplicate_ids=E1" in entry
    assert "warnings=Tracker State JSON parse error" in entry
    summary = result.summary()
    assert summary["parse_source"] == "table_import"
    assert summary["duplicate_ids"] == ["E1"]
    assert summary["issue_count"] == 1


def test_unresolved_updates_are_logged():
    result = sync_tracker("", [{"id": "E5", "status": "done"}], create_missing=False, now=FIXED_NOW)
    assert result.outcome.unresolved_ids == ["E5"]
    assert "unresolved=E5" in result.log_entry
    assert "| _none_ |" in get_section(result.body, "Tracker Table")
