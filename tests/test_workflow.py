"""Tests for the session workflow macros.

The orchestrator runs against a fixed clock; file modification times that a
test depends on are set explicitly with ``set_age``.
"""

import json

import pytest

from obsidian_cortex.core.documents import read_document
from obsidian_cortex.core.markdown_sections import get_section
from obsidian_cortex.core.tracker import parse_tracker_state
from obsidian_cortex.core.workflow import WorkflowOrchestrator, summarize_project_context
from obsidian_cortex.data_models import WorkflowPaths
from obsidian_cortex.errors import NoteNotFoundError

from tests.conftest import FIXED_NOW, set_age

CONTEXT_PATH = "Work/Projects/Alpha/_Context.md"
TRACKER_PATH = "Work/Projects/Alpha/Tracker.md"
SESSION_LOG_PATH = "Work/Projects/Alpha/Session Logs/2026-10-18.md"
POINTER_PATH = "Work/Session End Logs/2026-10-18.md"

CONTEXT_NOTE = f"""---
tracker_path: {TRACKER_PATH}
---

# Alpha

## Current Status

- Drafting

## Current Priorities

- Ship sync
- Write docs

## Known Risks/Blockers

- Vendor API

## Blockers

- Review backlog

## Next 3 Actions

- One
- Two

## Next Steps

- Three
- Four
"""


@pytest.fixture
def project_vault(vault, make_note):
    make_note("Home.md", "# Home\n")
    make_note("_Context/Now.md", f"---\nactive_project_context: {CONTEXT_PATH}\n---\n\n# Now\n")
    make_note(CONTEXT_PATH, CONTEXT_NOTE)
    return vault


@pytest.fixture
def orchestrator(project_vault):
    return WorkflowOrchestrator(project_vault, WorkflowPaths(), clock=lambda: FIXED_NOW)


def _tracker_json(issues):
    return "## Tracker State (JSON)\n\n```json\n" + json.dumps(issues) + "\n```\n"


class TestSummaries:
    def test_summarize_project_context(self):
        summary = summarize_project_context(CONTEXT_NOTE.split("---\n", 2)[2])
        assert summary == {
            "priorities": ["Ship sync", "Write docs"],
            "blockers": ["Vendor API", "Review backlog"],
            "next_3_actions": ["One", "Two", "Three"],
        }

    def test_priorities_fallback_section(self):
        summary = summarize_project_context("## Priorities\n\n- Only this\n")
        assert summary["priorities"] == ["Only this"]

    def test_items_are_capped(self):
        body = "## Current Priorities\n\n" + "\n".join(f"- item {n}" for n in range(15))
        assert len(summarize_project_context(body)["priorities"]) == 10


class TestRouting:
    def test_override_wins(self, orchestrator):
        active = orchestrator.resolve_active_project("Work/Projects/Beta/_Context")
        assert (active.project_context_path, active.source) == ("Work/Projects/Beta/_Context.md", "override")

    def test_now_frontmatter(self, orchestrator):
        active = orchestrator.resolve_active_project()
        assert (active.project_context_path, active.source) == (CONTEXT_PATH, "now_frontmatter")

    def test_fallback_without_now_note(self, vault):
        orchestrator = WorkflowOrchestrator(vault, WorkflowPaths(default_project_context_path="P/_Context.md"))
        active = orchestrator.resolve_active_project("  ")
        assert (active.project_context_path, active.source) == ("P/_Context.md", "fallback")


class TestBootstrap:
    def test_loads_startup_notes_and_reports_missing(self, vault, make_note):
        make_note("_Context/Now.md", "# Now\n")
        orchestrator = WorkflowOrchestrator(vault, clock=lambda: FIXED_NOW)

        result = orchestrator.bootstrap_context("Work/Projects/Alpha/_Context", include_recent=False)

        assert result["startup_paths"] == ["Home.md", "_Context/Now.md", CONTEXT_PATH]
        assert result["loaded_successfully"] == 1
        assert result["loaded_notes"][0] == {"path": "Home.md", "success": False, "error": "Note not found"}
        assert result["loaded_notes"][1]["content"] == "# Now"
        assert result["recent"]["enabled"] is False

    def test_recent_files_newest_first(self, orchestrator, project_vault, make_note):
        set_age(project_vault.path / "Home.md", 40)
        set_age(project_vault.path / "_Context/Now.md", 2.5)
        set_age(project_vault.path / CONTEXT_PATH, 0.5)
        set_age(make_note("Work/Projects/Alpha/Old.md", "old"), 9)
        set_age(make_note("Work/Projects/Alpha/Mid.md", "mid"), 1.5)

        result = orchestrator.bootstrap_context(days=7, recent_limit=2)

        recent = result["recent"]
        assert recent["total_found"] == 3
        assert [entry["path"] for entry in recent["files"]] == [CONTEXT_PATH, "Work/Projects/Alpha/Mid.md"]
        assert [entry["days_ago"] for entry in recent["files"]] == [0, 1]

    def test_missing_recent_scope(self, orchestrator):
        with pytest.raises(NoteNotFoundError, match="Recent scope not found: Nope"):
            orchestrator.bootstrap_context(recent_path="Nope")


class TestStartSession:
    def test_routes_and_summarizes(self, orchestrator):
        result = orchestrator.start_session()

        assert result["active_project_context_path"] == CONTEXT_PATH
        assert result["active_project_context_source"] == "now_frontmatter"
        assert result["active_project_dir"] == "Work/Projects/Alpha"
        assert result["summary"]["priorities"] == ["Ship sync", "Write docs"]
        assert result["bootstrap"]["loaded_successfully"] == 3
        assert result["bootstrap"]["recent"]["enabled"] is False

    def test_recent_scan_defaults_to_project_folder(self, orchestrator, project_vault, make_note):
        set_age(project_vault.path / "Home.md", 1)
        set_age(project_vault.path / CONTEXT_PATH, 1)

        result = orchestrator.start_session(include_recent=True)

        recent = result["bootstrap"]["recent"]
        assert recent["scope_path"] == "Work/Projects/Alpha"
        assert [entry["path"] for entry in recent["files"]] == [CONTEXT_PATH]

    def test_missing_context_gives_empty_summary(self, orchestrator):
        result = orchestrator.start_session("Work/Projects/Nope/_Context.md")
        assert result["summary"] == {"priorities": [], "blockers": [], "next_3_actions": []}


class TestCheckpoint:
    def test_full_checkpoint(self, orchestrator, project_vault):
        result = orchestrator.checkpoint(
            status=["Green"],
            priorities=["Release 0.3"],
            next_actions=["a", "b", "c", "d"],
            summary_note="Shipped tracker sync",
            tracker_updates=[{"id": "e1", "status": "qa", "title": "Crash"}],
        )

        assert result["project_context_sections_updated"] == [
            {"section": "Current Status", "action": "updated"},
            {"section": "Current Priorities", "action": "updated"},
            {"section": "Next 3 Actions", "action": "updated"},
        ]
        context = read_document(project_vault, CONTEXT_PATH)
        assert context.frontmatter["tracker_path"] == TRACKER_PATH
        assert get_section(context.body, "Current Status") == "- Shipped tracker sync\n- Green"
        assert get_section(context.body, "Next 3 Actions") == "- a\n- b\n- c"
        assert get_section(context.body, "Known Risks/Blockers") == "- Vendor API"

        assert result["session_log_path"] == SESSION_LOG_PATH
        log_body = read_document(project_vault, SESSION_LOG_PATH).body
        assert log_body.lstrip().startswith("# Session Log — 2026-10-18")
        assert "## Checkpoint (2026-10-18T12:00:00.000Z)" in log_body
        assert f"- Active project context path: `{CONTEXT_PATH}`" in log_body
        assert "- Priorities: Release 0.3" in log_body
        assert "- Next 3 actions: a | b | c" in log_body
        assert "## Tracker Sync" not in log_body

        assert result["pointer_note"] == {"path": POINTER_PATH, "updated": True}
        pointer = read_document(project_vault, POINTER_PATH)
        assert pointer.frontmatter["type"] == "pointer"
        assert f"- [[{SESSION_LOG_PATH}|Alpha Session Log 2026-10-18]]" in pointer.body

        tracker_sync = result["tracker_sync"]
        assert tracker_sync["success"] is True
        assert tracker_sync["created_ids"] == ["E1"]
        tracker = parse_tracker_state(read_document(project_vault, TRACKER_PATH).body)
        assert tracker.issues[0].status == "In Validation"

    def test_second_checkpoint_reuses_pointer(self, orchestrator, project_vault):
        orchestrator.checkpoint(status=["first"], include_tracker_sync=False)
        result = orchestrator.checkpoint(status=["second"], include_tracker_sync=False)

        assert result["pointer_note"]["updated"] is False
        assert result["tracker_sync"] is None
        log_body = read_document(project_vault, SESSION_LOG_PATH).body
        assert log_body.count("## Checkpoint (") == 2
        assert read_document(project_vault, POINTER_PATH).body.count(SESSION_LOG_PATH) == 1

    def test_empty_lists_leave_sections_alone(self, orchestrator, project_vault):
        result = orchestrator.checkpoint(include_tracker_sync=False)

        assert result["project_context_sections_updated"] == []
        assert "- Section updates: none" in read_document(project_vault, SESSION_LOG_PATH).body

    def test_tracker_failure_keeps_earlier_writes(self, orchestrator, project_vault, make_note):
        make_note(TRACKER_PATH, "---\nbad: [\n---\n\nBody\n")

        result = orchestrator.checkpoint(status=["Green"])

        assert result["tracker_sync"]["success"] is False
        assert "YAML" in result["tracker_sync"]["error"]
        assert get_section(read_document(project_vault, CONTEXT_PATH).body, "Current Status") == "- Green"
        assert (project_vault.path / SESSION_LOG_PATH).is_file()

    def test_missing_project_context(self, orchestrator):
        with pytest.raises(NoteNotFoundError, match="Unable to read project context"):
            orchestrator.checkpoint("Work/Projects/Nope/_Context.md", status=["x"])

    def test_session_date_override(self, orchestrator, project_vault):
        result = orchestrator.checkpoint(session_date="2026-10-17", include_tracker_sync=False)
        assert result["session_log_path"] == "Work/Projects/Alpha/Session Logs/2026-10-17.md"
        assert result["pointer_note"]["path"] == "Work/Session End Logs/2026-10-17.md"


class TestTrackerSync:
    def test_creates_tracker_and_logs_to_session(self, orchestrator, project_vault):
        result = orchestrator.tracker_sync(updates=[{"id": "e18", "status": "open", "title": "New issue"}])

        assert result["success"] is True
        assert result["tracker_path"] == TRACKER_PATH
        assert result["tracker_existed"] is False
        assert result["created_ids"] == ["E18"]
        assert result["parse_source"] == "empty"
        assert result["active_project_context_source"] == "now_frontmatter"
        assert result["session_log_path"] == SESSION_LOG_PATH

        log_body = read_document(project_vault, SESSION_LOG_PATH).body
        assert "## Tracker Sync (2026-10-18T12:00:00.000Z)" in log_body
        assert f"- Tracker: `{TRACKER_PATH}`" in log_body
        assert "- Created IDs: E18" in log_body
        assert "- Updated IDs: none" in log_body

    def test_existing_tracker_keeps_frontmatter(self, orchestrator, project_vault, make_note):
        make_note(TRACKER_PATH, "---\ntype: tracker\n---\n\n# Tracker\n\n" + _tracker_json([{"id": "E1"}]))

        result = orchestrator.tracker_sync(updates=[{"id": "E1", "status": "done"}], log_to_session=False)

        assert result["tracker_existed"] is True
        assert result["updated_ids"] == ["E1"]
        assert result["session_log_path"] is None
        tracker = read_document(project_vault, TRACKER_PATH)
        assert tracker.frontmatter["type"] == "tracker"
        assert tracker.body.lstrip().startswith("# Tracker")

    def test_explicit_tracker_path(self, orchestrator, project_vault):
        result = orchestrator.tracker_sync(tracker_path="Shared/Issues", updates=[{"id": "E2"}], log_to_session=False)
        assert result["tracker_path"] == "Shared/Issues.md"
        assert (project_vault.path / "Shared/Issues.md").is_file()

    def test_skipped_without_tracker(self, orchestrator, make_note):
        make_note("Work/Projects/Beta/_Context.md", "# Beta\n")

        result = orchestrator.tracker_sync("Work/Projects/Beta/_Context.md", updates=[{"id": "E1"}])

        assert result["skipped"] is True
        assert result["active_project_context_source"] == "override"

    def test_missing_project_context(self, orchestrator):
        with pytest.raises(NoteNotFoundError):
            orchestrator.tracker_sync("Work/Projects/Nope/_Context.md")


class TestResume:
    def test_before_any_session_activity(self, orchestrator):
        result = orchestrator.resume()

        assert result["active_project_context_path"] == CONTEXT_PATH
        assert result["summary"]["blockers"] == ["Vendor API", "Review backlog"]
        assert result["session_log"] == {"path": SESSION_LOG_PATH, "exists": False, "error": "Note not found"}
        assert result["tracker_snapshot"] == {"path": TRACKER_PATH, "error": "Note not found"}

    def test_after_tracker_sync(self, orchestrator):
        orchestrator.tracker_sync(updates=[{"id": "E1", "status": "qa"}, {"id": "E2"}])

        result = orchestrator.resume()

        assert result["session_log"]["exists"] is True
        assert result["session_log"]["error"] is None
        snapshot = result["tracker_snapshot"]
        assert snapshot["source"] == "json_state"
        assert snapshot["issue_count"] == 2
        assert snapshot["status_counts"] == {"In Validation": 1, "Open": 1}
        assert snapshot["duplicate_ids"] == []

    def test_session_date_and_missing_context(self, orchestrator):
        result = orchestrator.resume(session_date="2026-10-17")
        assert result["session_log"]["path"] == "Work/Projects/Alpha/Session Logs/2026-10-17.md"

        with pytest.raises(NoteNotFoundError, match="Unable to read project context"):
            orchestrator.resume("Work/Projects/Nope/_Context.md")


class TestSessionPointer:
    def test_adds_link_once(self, orchestrator, project_vault, make_note):
        other = "Work/Projects/Beta/Session Logs/2026-10-18.md"
        make_note(POINTER_PATH, f"# Session End Log\n\n- [[{other}|Beta Session Log 2026-10-18]]\n")

        first = orchestrator.ensure_session_pointer("2026-10-18", SESSION_LOG_PATH, "Alpha")
        second = orchestrator.ensure_session_pointer("2026-10-18", SESSION_LOG_PATH, "Alpha")

        assert first == {"path": POINTER_PATH, "updated": True}
        assert second == {"path": POINTER_PATH, "updated": False}
        body = read_document(project_vault, POINTER_PATH).body
        assert body.count("[[") == 2
        assert other in body


class TestStaleStateChecks:
    def test_reports_every_category(self, vault, make_note):
        alpha = make_note(CONTEXT_PATH, f"---\ntracker_path: {TRACKER_PATH}\n---\n\n# Alpha\n")
        alpha_tracker = make_note(
            TRACKER_PATH,
            _tracker_json(
                [
                    {"id": "E1", "status": "In Validation", "updated": "2026-09-18T12:00:00.000Z"},
                    {"id": "E2", "status": "qa", "updated": "2026-10-04T12:00:00.000Z"},
                    {"id": "E3", "status": "In Validation", "last_updated": "2026-09-28"},
                    {"id": "E4", "status": "Done", "updated": "2025-01-01"},
                    {"id": "E5"},
                    {"id": "E5", "status": "Done"},
                    {"id": "E6", "status": "In Validation"},
                ]
            ),
        )
        beta = make_note("Work/Projects/Beta/_Context.md", "---\ntracker_path: Work/Projects/Beta/Tracker.md\n---\n")
        gamma = make_note("Work/Projects/Gamma/_Context.md", "# Gamma\n")
        make_note("Work/Projects/Delta/_Context.md", "---\ntitle: [bad\n---\n")
        make_note("Work/Projects/_Context.md", "# Not a project\n")
        set_age(alpha, 20.5)
        set_age(alpha_tracker, 10.5)
        set_age(beta, 1)
        set_age(gamma, 1)

        orchestrator = WorkflowOrchestrator(vault, clock=lambda: FIXED_NOW)
        result = orchestrator.stale_state_checks()

        assert result["scanned_project_context_count"] == 4
        assert result["checks"] == {
            "tracker_stale_days": 7,
            "validation_stale_days": 14,
            "project_context_stale_days": 14,
        }
        results = result["results"]
        assert results["stale_project_contexts"] == [{"path": CONTEXT_PATH, "days_since_update": 20}]
        assert results["stale_trackers"] == [
            {"project_context_path": CONTEXT_PATH, "tracker_path": TRACKER_PATH, "days_since_update": 10}
        ]
        assert results["missing_trackers"] == [
            {"project_context_path": "Work/Projects/Beta/_Context.md", "tracker_path": "Work/Projects/Beta/Tracker.md"}
        ]
        assert results["duplicate_tracker_ids"] == [{"tracker_path": TRACKER_PATH, "ids": ["E5"]}]
        assert results["stale_in_validation"] == [
            {"tracker_path": TRACKER_PATH, "id": "E1", "status": "In Validation", "days_in_status": 30},
            {"tracker_path": TRACKER_PATH, "id": "E3", "status": "In Validation", "days_in_status": 20},
        ]
        assert result["counts"] == {
            "stale_project_contexts": 1,
            "stale_trackers": 1,
            "missing_trackers": 1,
            "duplicate_tracker_ids": 1,
            "stale_in_validation": 2,
        }

    def test_hand_written_validation_dates_are_aged(self, vault, make_note):
        make_note(CONTEXT_PATH, f"---\ntracker_path: {TRACKER_PATH}\n---\n\n# Alpha\n")
        make_note(
            TRACKER_PATH,
            _tracker_json(
                [
                    {"id": "E1", "status": "In Validation", "updated": "Sep 18, 2026"},
                    {"id": "E2", "status": "In Validation", "updated": "2026/10/10"},
                ]
            ),
        )

        result = WorkflowOrchestrator(vault, clock=lambda: FIXED_NOW).stale_state_checks()

        assert result["results"]["stale_in_validation"] == [
            {"tracker_path": TRACKER_PATH, "id": "E1", "status": "In Validation", "days_in_status": 30},
        ]

    def test_thresholds_are_configurable(self, vault, make_note):
        set_age(make_note("Work/Projects/Alpha/_Context.md", "# Alpha\n"), 3.5)
        orchestrator = WorkflowOrchestrator(vault, clock=lambda: FIXED_NOW)

        assert orchestrator.stale_state_checks(project_context_stale_days=2)["counts"]["stale_project_contexts"] == 1
        # An age equal to the threshold is not stale.
        assert orchestrator.stale_state_checks(project_context_stale_days=3)["counts"]["stale_project_contexts"] == 0

    def test_vault_without_projects_folder(self, vault):
        result = WorkflowOrchestrator(vault, clock=lambda: FIXED_NOW).stale_state_checks()
        assert result["scanned_project_context_count"] == 0
        assert all(count == 0 for count in result["counts"].values())
