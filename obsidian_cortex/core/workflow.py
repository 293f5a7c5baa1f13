"""Session workflow macros composed from document I/O, sections and trackers.

:class:`WorkflowOrchestrator` binds a vault, the configured
:class:`~obsidian_cortex.data_models.WorkflowPaths` and a clock, and exposes
one method per macro: bootstrap, start, resume, checkpoint, tracker sync and
the stale-state scan. Methods return JSON-ready dictionaries.
"""

from __future__ import annotations

import logging
import posixpath
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Literal, Optional, Union

from obsidian_cortex.constants import DEFAULT_MAX_LOG_ENTRIES, NEXT_ACTION_LIMIT, SUMMARY_ITEM_LIMIT
from obsidian_cortex.core.dates import days_between, parse_date_input, to_iso_date, to_iso_timestamp, utc_now
from obsidian_cortex.core.documents import (
    NoteDocument,
    append_markdown_block,
    file_exists,
    list_markdown_files,
    read_document,
    stat_mtime,
    write_document,
)
from obsidian_cortex.core.markdown_sections import get_section, parse_bullet_items, to_bullet_section, upsert_section
from obsidian_cortex.core.tracker import (
    STATUS_IN_VALIDATION,
    TrackerIssue,
    TrackerUpdate,
    normalize_status,
    parse_tracker_state,
    status_counts,
    sync_tracker,
)
from obsidian_cortex.core.vault_activity import NoteRecord, read_note_record, recent_files
from obsidian_cortex.core.vault_operations import (
    derive_project_dir,
    ensure_vault_ready,
    normalize_note_path,
    normalize_relative_path,
    resolve_directory_path,
)
from obsidian_cortex.data_models import VaultMetadata, WorkflowPaths
from obsidian_cortex.errors import NoteNotFoundError

logger = logging.getLogger(__name__)

ContextSource = Literal["override", "now_frontmatter", "fallback"]
UpdateLike = Union[TrackerUpdate, Mapping[str, Any]]

STATUS_SECTION = "Current Status"
PRIORITIES_SECTION = "Current Priorities"
BLOCKERS_SECTION = "Known Risks/Blockers"
NEXT_ACTIONS_SECTION = "Next 3 Actions"

_PRIORITY_FALLBACK_SECTION = "Priorities"
_BLOCKER_SECTIONS = (BLOCKERS_SECTION, "Blockers")
_NEXT_ACTION_SECTIONS = (NEXT_ACTIONS_SECTION, "Next Actions", "Next Steps")

# Checked after ``updated`` when dating an In Validation issue.
_EXTRA_DATE_FIELDS = ("last_updated", "date", "modified")


@dataclass
class ActiveProject:
    project_context_path: str
    source: ContextSource


def _join_or_none(items: list[str], separator: str) -> str:
    return separator.join(items) if items else "none"


def summarize_project_context(body: str) -> dict[str, list[str]]:
    """Extract priorities, blockers and the next three actions from a context body.

    Priorities come from ``Current Priorities`` (or ``Priorities`` when that is
    empty); blockers and next actions concatenate their source sections.
    """
    priorities = parse_bullet_items(get_section(body, PRIORITIES_SECTION)) or parse_bullet_items(
        get_section(body, _PRIORITY_FALLBACK_SECTION)
    )

    blockers: list[str] = []
    for heading in _BLOCKER_SECTIONS:
        blockers.extend(parse_bullet_items(get_section(body, heading)))

    next_actions: list[str] = []
    for heading in _NEXT_ACTION_SECTIONS:
        next_actions.extend(parse_bullet_items(get_section(body, heading)))

    return {
        "priorities": priorities[:SUMMARY_ITEM_LIMIT],
        "blockers": blockers[:SUMMARY_ITEM_LIMIT],
        "next_3_actions": next_actions[:NEXT_ACTION_LIMIT],
    }


def _empty_summary() -> dict[str, list[str]]:
    return {"priorities": [], "blockers": [], "next_3_actions": []}


def _project_name(project_dir: str, project_context_path: str) -> str:
    name = posixpath.basename(project_dir or project_context_path)
    return name[:-3] if name.lower().endswith(".md") else name


class WorkflowOrchestrator:
    """Runs the session workflow macros against a single vault."""

    def __init__(
        self,
        vault: VaultMetadata,
        paths: Optional[WorkflowPaths] = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.vault = vault
        self.paths = paths or WorkflowPaths()
        self._clock = clock

    # ==========================================================================
    # HELPERS
    # ==========================================================================

    def _session_log_path(self, project_dir: str, session_date: str) -> str:
        logs_dir = self.paths.session_logs_dirname
        base = f"{project_dir}/{logs_dir}" if project_dir else logs_dir
        return normalize_note_path(f"{base}/{session_date}.md")

    def _tracker_path_from(self, frontmatter: Optional[Mapping[str, Any]]) -> str:
        value = (frontmatter or {}).get(self.paths.tracker_path_field)
        return value if isinstance(value, str) and value.strip() else ""

    def read_note_record(self, note_path: str, include_frontmatter: bool = True) -> NoteRecord:
        return read_note_record(self.vault, note_path, include_frontmatter)

    def _require_project_context(self, project_context_path: str) -> NoteDocument:
        try:
            return read_document(self.vault, project_context_path)
        except NoteNotFoundError as exc:
            raise NoteNotFoundError(f"Unable to read project context: {project_context_path}") from exc

    # ==========================================================================
    # ROUTING AND BOOTSTRAP
    # ==========================================================================

    def resolve_active_project(self, override_path: Optional[str] = None) -> ActiveProject:
        """Choose the active project context note.

        An explicit override wins, then the ``active_project_context`` field of
        the Now note, then the configured default.
        """
        if override_path and override_path.strip():
            return ActiveProject(normalize_note_path(override_path), "override")

        now_record = self.read_note_record(self.paths.now_path)
        if now_record.success and now_record.frontmatter:
            candidate = now_record.frontmatter.get(self.paths.now_context_field)
            if isinstance(candidate, str) and candidate.strip():
                return ActiveProject(normalize_note_path(candidate), "now_frontmatter")

        return ActiveProject(normalize_note_path(self.paths.default_project_context_path), "fallback")

    def _recent_files(self, recent_path: Optional[str], days: int, recent_limit: int) -> dict[str, Any]:
        recent = recent_files(
            self.vault,
            recent_path,
            days=days,
            limit=recent_limit,
            now=self._clock(),
            scope_label="Recent scope",
        )
        return {"enabled": True, **recent}

    def bootstrap_context(
        self,
        project_context_path: Optional[str] = None,
        include_recent: bool = True,
        recent_path: Optional[str] = None,
        days: int = 7,
        recent_limit: int = 10,
        include_frontmatter: bool = True,
    ) -> dict[str, Any]:
        """Load the Home, Now and project context notes, plus recent activity.

        Args:
            project_context_path: Project context note; defaults to the
                configured default project context.
            include_recent: List markdown files modified in the last ``days``.
            recent_path: Folder to restrict the recent scan to.
            days: Look-back window in days.
            recent_limit: Maximum number of recent files returned.
            include_frontmatter: Parse front matter of the loaded notes.

        Raises:
            NoteNotFoundError: If ``recent_path`` does not exist.
        """
        ensure_vault_ready(self.vault)
        context_path = normalize_note_path(project_context_path or self.paths.default_project_context_path)
        startup_paths = [self.paths.home_path, self.paths.now_path, context_path]
        loaded = [self.read_note_record(path, include_frontmatter) for path in startup_paths]

        if include_recent:
            recent = self._recent_files(recent_path, days, recent_limit)
        else:
            recent = {"enabled": False, "days": days, "scope_path": "", "total_found": 0, "files": []}

        return {
            "startup_paths": startup_paths,
            "loaded_notes": [record.as_payload() for record in loaded],
            "loaded_successfully": sum(1 for record in loaded if record.success),
            "recent": recent,
        }

    def _routed_bootstrap(
        self,
        active: ActiveProject,
        include_recent: bool,
        recent_path: Optional[str],
        days: int,
        recent_limit: int,
        include_frontmatter: bool,
    ) -> dict[str, Any]:
        project_dir = derive_project_dir(active.project_context_path)
        effective_recent = ((recent_path or "").strip() or project_dir) if include_recent else ""
        return self.bootstrap_context(
            project_context_path=active.project_context_path,
            include_recent=include_recent,
            recent_path=effective_recent or None,
            days=days,
            recent_limit=recent_limit,
            include_frontmatter=include_frontmatter,
        )

    # ==========================================================================
    # SESSION MACROS
    # ==========================================================================

    def start_session(
        self,
        override_project_context_path: Optional[str] = None,
        include_recent: bool = False,
        recent_path: Optional[str] = None,
        days: int = 7,
        recent_limit: int = 10,
        include_frontmatter: bool = True,
    ) -> dict[str, Any]:
        """Resolve the active project, bootstrap context and summarize the project.

        When ``include_recent`` is set without a ``recent_path`` the recent scan
        is scoped to the project folder.
        """
        active = self.resolve_active_project(override_project_context_path)
        project_dir = derive_project_dir(active.project_context_path)
        bootstrap = self._routed_bootstrap(
            active, include_recent, recent_path, days, recent_limit, include_frontmatter
        )

        summary = _empty_summary()
        for note in bootstrap["loaded_notes"]:
            if note["path"] == active.project_context_path and note["success"] and note.get("content"):
                summary = summarize_project_context(note["content"])
                break

        logger.info("Started session for project context '%s' (%s)", active.project_context_path, active.source)
        return {
            "active_project_context_path": active.project_context_path,
            "active_project_context_source": active.source,
            "active_project_dir": project_dir,
            "summary": summary,
            "bootstrap": bootstrap,
        }

    def resume(
        self,
        override_project_context_path: Optional[str] = None,
        session_date: Optional[str] = None,
        include_recent: bool = False,
        recent_path: Optional[str] = None,
        days: int = 7,
        recent_limit: int = 10,
        include_frontmatter: bool = True,
    ) -> dict[str, Any]:
        """Rebuild working context after a context reset.

        Returns the start-session payload plus the state of the day's session
        log and a read-only snapshot of the project tracker.

        Raises:
            NoteNotFoundError: If the project context note does not exist.
        """
        effective_date = (session_date or "").strip() or to_iso_date(self._clock())
        active = self.resolve_active_project(override_project_context_path)
        project_dir = derive_project_dir(active.project_context_path)
        bootstrap = self._routed_bootstrap(
            active, include_recent, recent_path, days, recent_limit, include_frontmatter
        )

        context = self._require_project_context(active.project_context_path)
        summary = summarize_project_context(context.body)

        session_log: Optional[dict[str, Any]] = None
        if project_dir:
            record = self.read_note_record(self._session_log_path(project_dir, effective_date))
            session_log = {
                "path": record.path,
                "exists": record.success,
                "error": None if record.success else (record.error or "Session log not found"),
            }

        tracker_snapshot: Optional[dict[str, Any]] = None
        tracker_path_raw = self._tracker_path_from(context.frontmatter)
        if tracker_path_raw:
            tracker_path = normalize_note_path(tracker_path_raw)
            record = self.read_note_record(tracker_path)
            if record.success:
                parsed = parse_tracker_state(record.content or "")
                tracker_snapshot = {
                    "path": tracker_path,
                    "source": parsed.source,
                    "issue_count": len(parsed.issues),
                    "status_counts": status_counts(parsed.issues),
                    "duplicate_ids": parsed.duplicate_ids,
                    "warnings": parsed.warnings,
                }
            else:
                tracker_snapshot = {"path": tracker_path, "error": record.error or "Tracker note unavailable"}

        return {
            "active_project_context_path": active.project_context_path,
            "active_project_context_source": active.source,
            "active_project_dir": project_dir,
            "summary": summary,
            "bootstrap": bootstrap,
            "session_log": session_log,
            "tracker_snapshot": tracker_snapshot,
        }

    def ensure_session_pointer(self, session_date: str, project_log_path: str, project_name: str) -> dict[str, Any]:
        """Link a project session log from the vault-level pointer note of the day.

        The pointer note is created on first use; later calls add a link line
        only when no line already links ``project_log_path``.
        """
        pointer_path = normalize_note_path(f"{self.paths.session_log_pointer_dir}/{session_date}.md")
        link = f"[[{project_log_path}|{project_name} Session Log {session_date}]]"

        if not file_exists(self.vault, pointer_path):
            body = "\n".join(
                [
                    f"# Session End Log — {session_date}",
                    "",
                    "> Pointer note. Canonical session details in project-local logs.",
                    "",
                    f"- {link}",
                ]
            )
            write_document(
                self.vault,
                pointer_path,
                body,
                {
                    "title": f"Session End Log {session_date}",
                    "type": "pointer",
                    "created": to_iso_timestamp(self._clock()),
                },
            )
            logger.info("Created session pointer note '%s'", pointer_path)
            return {"path": pointer_path, "updated": True}

        document = read_document(self.vault, pointer_path)
        already_linked = any(
            f"[[{project_log_path}|" in line or f"[[{project_log_path}]]" in line
            for line in document.body.split("\n")
        )
        if already_linked:
            return {"path": pointer_path, "updated": False}

        write_document(self.vault, pointer_path, f"{document.body.rstrip()}\n- {link}\n", document.frontmatter)
        logger.info("Linked '%s' from session pointer note '%s'", project_log_path, pointer_path)
        return {"path": pointer_path, "updated": True}

    def checkpoint(
        self,
        override_project_context_path: Optional[str] = None,
        status: Iterable[str] = (),
        priorities: Iterable[str] = (),
        blockers: Iterable[str] = (),
        next_actions: Iterable[str] = (),
        summary_note: Optional[str] = None,
        session_date: Optional[str] = None,
        include_tracker_sync: bool = True,
        tracker_updates: Iterable[UpdateLike] = (),
    ) -> dict[str, Any]:
        """Persist a checkpoint of the active project.

        Steps, in order: upsert the non-empty bullet sections of the project
        context, append a checkpoint block to the project session log, link the
        log from the day's pointer note and finally sync the tracker. Each step
        writes independently, so a tracker sync failure is reported in
        ``tracker_sync`` while the earlier writes stay in place.

        Raises:
            NoteNotFoundError: If the project context note does not exist.
        """
        now = self._clock()
        effective_date = (session_date or "").strip() or to_iso_date(now)
        active = self.resolve_active_project(override_project_context_path)
        context_path = active.project_context_path
        context = self._require_project_context(context_path)

        status_lines = list(status)
        if summary_note and summary_note.strip():
            status_lines.insert(0, summary_note.strip())

        planned = [
            (STATUS_SECTION, status_lines),
            (PRIORITIES_SECTION, list(priorities)),
            (BLOCKERS_SECTION, list(blockers)),
            (NEXT_ACTIONS_SECTION, list(next_actions)[:NEXT_ACTION_LIMIT]),
        ]
        body = context.body.strip()
        section_updates: list[dict[str, str]] = []
        for heading, items in planned:
            if not items:
                continue
            result = upsert_section(body, heading, to_bullet_section(items), 2)
            body = result.body
            section_updates.append({"section": heading, "action": result.action})

        write_document(self.vault, context_path, body, context.frontmatter)

        project_dir = derive_project_dir(context_path)
        session_log_path = self._session_log_path(project_dir, effective_date)
        summary = summarize_project_context(body)
        described_updates = [f"{item['section']} ({item['action']})" for item in section_updates]
        block = "\n".join(
            [
                f"## Checkpoint ({to_iso_timestamp(now)})",
                f"- Active project context path: `{context_path}`",
                f"- Section updates: {_join_or_none(described_updates, ', ')}",
                f"- Priorities: {_join_or_none(summary['priorities'], ' | ')}",
                f"- Blockers: {_join_or_none(summary['blockers'], ' | ')}",
                f"- Next 3 actions: {_join_or_none(summary['next_3_actions'], ' | ')}",
            ]
        )
        append_markdown_block(self.vault, session_log_path, block, f"# Session Log — {effective_date}")
        pointer = self.ensure_session_pointer(
            effective_date, session_log_path, _project_name(project_dir, context_path)
        )

        tracker_result: Optional[dict[str, Any]] = None
        if include_tracker_sync:
            try:
                tracker_result = self._run_tracker_sync(
                    context_path,
                    updates=tracker_updates,
                    create_missing=True,
                    render_table=True,
                    max_log_entries=DEFAULT_MAX_LOG_ENTRIES,
                    log_to_session=False,
                    session_date=effective_date,
                )
            except (ValueError, OSError) as exc:
                logger.warning("Checkpoint tracker sync failed for '%s': %s", context_path, exc)
                tracker_result = {"success": False, "error": str(exc)}

        logger.info(
            "Checkpoint recorded for '%s' in vault '%s' (sections=%d)",
            context_path,
            self.vault.name,
            len(section_updates),
        )
        return {
            "active_project_context_path": context_path,
            "active_project_context_source": active.source,
            "active_project_dir": project_dir,
            "project_context_sections_updated": section_updates,
            "session_log_path": session_log_path,
            "pointer_note": pointer,
            "summary": summary,
            "tracker_sync": tracker_result,
        }

    # ==========================================================================
    # TRACKER SYNC
    # ==========================================================================

    def _run_tracker_sync(
        self,
        project_context_path: str,
        tracker_path: Optional[str] = None,
        updates: Iterable[UpdateLike] = (),
        create_missing: bool = True,
        render_table: bool = True,
        max_log_entries: int = DEFAULT_MAX_LOG_ENTRIES,
        log_to_session: bool = True,
        session_date: Optional[str] = None,
    ) -> dict[str, Any]:
        now = self._clock()
        effective_date = (session_date or "").strip() or to_iso_date(now)
        context_path = normalize_note_path(project_context_path)
        context = self._require_project_context(context_path)

        if tracker_path and tracker_path.strip():
            resolved_tracker = normalize_note_path(tracker_path)
        else:
            configured = self._tracker_path_from(context.frontmatter)
            resolved_tracker = normalize_note_path(configured) if configured else ""

        if not resolved_tracker:
            return {
                "success": True,
                "skipped": True,
                "reason": "No tracker configured for this project.",
                "project_context_path": context_path,
            }

        tracker_existed = file_exists(self.vault, resolved_tracker)
        if tracker_existed:
            document = read_document(self.vault, resolved_tracker)
            tracker_body, tracker_frontmatter = document.body, document.frontmatter
        else:
            tracker_body, tracker_frontmatter = "", {}

        result = sync_tracker(
            tracker_body,
            list(updates),
            create_missing=create_missing,
            render_table_section=render_table,
            max_log_entries=max_log_entries,
            now=now,
        )
        write_document(self.vault, resolved_tracker, result.body, tracker_frontmatter)
        outcome = result.outcome
        logger.info(
            "Synced tracker '%s' in vault '%s' (updated=%d, created=%d, deleted=%d, unresolved=%d)",
            resolved_tracker,
            self.vault.name,
            len(outcome.updated_ids),
            len(outcome.created_ids),
            len(outcome.deleted_ids),
            len(outcome.unresolved_ids),
        )

        session_log_path: Optional[str] = None
        project_dir = derive_project_dir(context_path)
        if log_to_session and project_dir:
            session_log_path = self._session_log_path(project_dir, effective_date)
            block = "\n".join(
                [
                    f"## Tracker Sync ({to_iso_timestamp(now)})",
                    f"- Tracker: `{resolved_tracker}`",
                    f"- Updated IDs: {_join_or_none(outcome.updated_ids, ', ')}",
                    f"- Created IDs: {_join_or_none(outcome.created_ids, ', ')}",
                    f"- Deleted IDs: {_join_or_none(outcome.deleted_ids, ', ')}",
                    f"- Unresolved IDs: {_join_or_none(outcome.unresolved_ids, ', ')}",
                ]
            )
            append_markdown_block(self.vault, session_log_path, block, f"# Session Log — {effective_date}")

        return {
            "success": True,
            "project_context_path": context_path,
            "tracker_path": resolved_tracker,
            "tracker_existed": tracker_existed,
            **result.summary(),
            "session_log_path": session_log_path,
        }

    def tracker_sync(
        self,
        override_project_context_path: Optional[str] = None,
        tracker_path: Optional[str] = None,
        updates: Iterable[UpdateLike] = (),
        create_missing: bool = True,
        render_table: bool = True,
        max_log_entries: int = DEFAULT_MAX_LOG_ENTRIES,
        log_to_session: bool = True,
        session_date: Optional[str] = None,
    ) -> dict[str, Any]:
        """Apply tracker updates for the active project and record the sync.

        The tracker note is taken from ``tracker_path`` or the project
        context's ``tracker_path`` front-matter field; without either the sync
        is skipped. A missing tracker note is created.

        Raises:
            NoteNotFoundError: If the project context note does not exist.
        """
        active = self.resolve_active_project(override_project_context_path)
        result = self._run_tracker_sync(
            active.project_context_path,
            tracker_path=tracker_path,
            updates=updates,
            create_missing=create_missing,
            render_table=render_table,
            max_log_entries=max_log_entries,
            log_to_session=log_to_session,
            session_date=session_date,
        )
        result["active_project_context_source"] = active.source
        return result

    # ==========================================================================
    # STALE-STATE SCAN
    # ==========================================================================

    def _project_context_files(self) -> list[str]:
        projects_root = normalize_relative_path(self.paths.projects_dir)
        _, projects_dir = resolve_directory_path(self.vault, projects_root)
        if not projects_dir.is_dir():
            return []

        prefix = f"{projects_root}/" if projects_root else ""
        filename = self.paths.project_context_filename.lower()
        matches = []
        for file_path in list_markdown_files(self.vault, projects_root):
            remainder = file_path[len(prefix):]
            if "/" in remainder and posixpath.basename(remainder).lower() == filename:
                matches.append(file_path)
        return matches

    @staticmethod
    def _issue_date(issue: TrackerIssue) -> Optional[datetime]:
        candidates = [issue.updated, *(issue.extra.get(name) for name in _EXTRA_DATE_FIELDS)]
        for value in candidates:
            parsed = parse_date_input(value)
            if parsed is not None:
                return parsed
        return None

    def stale_state_checks(
        self,
        tracker_stale_days: int = 7,
        validation_stale_days: int = 14,
        project_context_stale_days: int = 14,
    ) -> dict[str, Any]:
        """Scan project contexts and their trackers for stale or inconsistent state.

        Ages are whole days; an item is stale when its age exceeds the
        threshold. Unreadable notes are logged and skipped.
        """
        ensure_vault_ready(self.vault)
        now = self._clock()
        context_files = self._project_context_files()

        stale_contexts: list[dict[str, Any]] = []
        stale_trackers: list[dict[str, Any]] = []
        missing_trackers: list[dict[str, Any]] = []
        duplicate_ids: list[dict[str, Any]] = []
        stale_validation: list[dict[str, Any]] = []

        for context_path in context_files:
            try:
                context_age = days_between(stat_mtime(self.vault, context_path), now)
                context = read_document(self.vault, context_path)
            except (ValueError, OSError) as exc:
                logger.warning("Skipping project context '%s' in stale scan: %s", context_path, exc)
                continue

            if context_age > project_context_stale_days:
                stale_contexts.append({"path": context_path, "days_since_update": context_age})

            tracker_path_raw = self._tracker_path_from(context.frontmatter)
            if not tracker_path_raw:
                continue
            try:
                tracker_path = normalize_note_path(tracker_path_raw)
            except ValueError as exc:
                logger.warning("Ignoring tracker path of '%s': %s", context_path, exc)
                continue

            if not file_exists(self.vault, tracker_path):
                missing_trackers.append({"project_context_path": context_path, "tracker_path": tracker_path})
                continue

            try:
                tracker_age = days_between(stat_mtime(self.vault, tracker_path), now)
                tracker = read_document(self.vault, tracker_path)
            except (ValueError, OSError) as exc:
                logger.warning("Skipping tracker '%s' in stale scan: %s", tracker_path, exc)
                continue

            if tracker_age > tracker_stale_days:
                stale_trackers.append(
                    {
                        "project_context_path": context_path,
                        "tracker_path": tracker_path,
                        "days_since_update": tracker_age,
                    }
                )

            state = parse_tracker_state(tracker.body)
            if state.duplicate_ids:
                duplicate_ids.append({"tracker_path": tracker_path, "ids": state.duplicate_ids})

            for issue in state.issues:
                status = normalize_status(issue.status)
                if status != STATUS_IN_VALIDATION:
                    continue
                dated = self._issue_date(issue)
                if dated is None:
                    continue
                days_in_status = days_between(dated, now)
                if days_in_status > validation_stale_days:
                    stale_validation.append(
                        {
                            "tracker_path": tracker_path,
                            "id": issue.id,
                            "status": status,
                            "days_in_status": days_in_status,
                        }
                    )

        results = {
            "stale_project_contexts": stale_contexts,
            "stale_trackers": stale_trackers,
            "missing_trackers": missing_trackers,
            "duplicate_tracker_ids": duplicate_ids,
            "stale_in_validation": stale_validation,
        }
        return {
            "scanned_project_context_count": len(context_files),
            "checks": {
                "tracker_stale_days": tracker_stale_days,
                "validation_stale_days": validation_stale_days,
                "project_context_stale_days": project_context_stale_days,
            },
            "results": results,
            "counts": {name: len(items) for name, items in results.items()},
        }
