import pytest

from obsidian_cortex.core.vault_activity import batch_read_notes, recent_files, vault_stats
from obsidian_cortex.errors import NoteNotFoundError

from tests.conftest import FIXED_NOW, set_age


@pytest.fixture
def populated_vault(vault, make_note):
    set_age(make_note("Home.md", "---\ntype: hub\ntags: [a, b]\n---\n# Home\n"), 1.5)
    set_age(make_note("Work/Plan.md", "---\ntags: a\n---\nplan\n"), 100)
    set_age(make_note("Work/Projects/Alpha/_Context.md", "# Alpha\n"), 10)
    set_age(make_note("Work/Bad.md", "---\ntitle: [bad\n---\n"), 2.5)
    make_note(".obsidian/workspace.md", "hidden")
    return vault


class TestBatchRead:
    def test_records_follow_request_order(self, populated_vault):
        result = batch_read_notes(populated_vault, ["Home", "Missing", "Work/Bad.md"])

        assert (result["requested"], result["successful"], result["failed"]) == (3, 1, 2)
        home, missing, bad = result["results"]
        assert home == {
            "path": "Home.md",
            "success": True,
            "frontmatter": {"type": "hub", "tags": ["a", "b"]},
            "content": "# Home",
        }
        assert missing == {"path": "Missing.md", "success": False, "error": "Note not found"}
        assert bad["success"] is False
        assert bad["error"].startswith("Frontmatter contains invalid YAML")

    def test_raw_content(self, populated_vault):
        result = batch_read_notes(populated_vault, ["Work/Plan.md"], include_frontmatter=False)
        assert result["results"][0]["content"] == "---\ntags: a\n---\nplan\n"


class TestRecentFiles:
    def test_newest_first_within_window(self, populated_vault):
        result = recent_files(populated_vault, days=7, limit=20, now=FIXED_NOW)

        assert result["scope_path"] == ""
        assert result["total_found"] == 2
        assert [(entry["path"], entry["days_ago"]) for entry in result["files"]] == [
            ("Home.md", 1),
            ("Work/Bad.md", 2),
        ]
        assert result["files"][0]["modified"].endswith("Z")

    def test_limit_and_scope(self, populated_vault):
        result = recent_files(populated_vault, "Work", days=30, limit=1, now=FIXED_NOW)

        assert result["scope_path"] == "Work"
        assert result["total_found"] == 2
        assert [entry["path"] for entry in result["files"]] == ["Work/Bad.md"]

    def test_missing_folder(self, populated_vault):
        with pytest.raises(NoteNotFoundError, match="Directory not found: Nope"):
            recent_files(populated_vault, "Nope", now=FIXED_NOW)


class TestVaultStats:
    def test_whole_vault(self, populated_vault):
        result = vault_stats(populated_vault, now=FIXED_NOW)

        assert result["search_path"] == "/"
        assert result["stats"] == {
            "total_files": 4,
            "total_size_kb": 0,
            "with_frontmatter": 2,
            "with_tags": 2,
            "frontmatter_coverage": "50%",
        }
        assert result["activity"] == {"recently_modified": 2, "stale_over_90_days": 1}
        assert result["folders"] == [
            {"folder": "/", "files": 1, "recently_modified": 1},
            {"folder": "Work", "files": 3, "recently_modified": 1},
        ]
        assert result["types"] == {"hub": 1}
        assert result["top_tags"] == [{"tag": "a", "count": 2}, {"tag": "b", "count": 1}]
        assert result["health"] == {
            "frontmatter_coverage": "needs_attention",
            "stale_content": "ok",
            "recent_activity": "active",
        }

    def test_folder_scope_groups_by_subfolder(self, populated_vault):
        result = vault_stats(populated_vault, "Work", now=FIXED_NOW)

        assert result["search_path"] == "Work"
        assert result["folders"] == [
            {"folder": "/", "files": 2, "recently_modified": 1},
            {"folder": "Work/Projects", "files": 1, "recently_modified": 0},
        ]

    def test_empty_vault(self, vault):
        result = vault_stats(vault, now=FIXED_NOW)

        assert result["stats"]["total_files"] == 0
        assert result["stats"]["frontmatter_coverage"] == "0%"
        assert result["folders"] == []
        assert result["health"]["recent_activity"] == "dormant"

    def test_missing_folder(self, vault):
        with pytest.raises(NoteNotFoundError, match="Directory not found: Nope"):
            vault_stats(vault, "Nope", now=FIXED_NOW)
