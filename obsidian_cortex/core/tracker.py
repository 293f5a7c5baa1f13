"""Tracker documents: structured issue state embedded in a markdown note.

A tracker note carries three machine-maintained sections next to arbitrary
hand-written content:

``## Tracker State (JSON)``
    The canonical issue list as a fenced ``json`` array. Source of truth.
``## Tracker Table``
    A 7-column table rendered from the canonical state.
``## Tracker Sync Log``
    One bullet per sync, newest first, bounded in length.

Parsing never raises on malformed state. A broken JSON block degrades to
importing any issue table found in the note, then to an empty list, and the
reason is reported in ``warnings``.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Literal, Optional, Union

from obsidian_cortex.constants import (
    DEFAULT_MAX_LOG_ENTRIES,
    TRACKER_LOG_HEADING,
    TRACKER_STATE_HEADING,
    TRACKER_TABLE_HEADING,
)
from obsidian_cortex.core.dates import parse_date_input, to_iso_date, to_iso_timestamp, utc_now
from obsidian_cortex.core.markdown_sections import get_section, upsert_section
from obsidian_cortex.core.markdown_tables import parse_tables

logger = logging.getLogger(__name__)

STATUS_OPEN = "Open"
STATUS_IN_PROGRESS = "In Progress"
STATUS_IN_VALIDATION = "In Validation"
STATUS_BLOCKED = "Blocked"
STATUS_DONE = "Done"

_STATUS_SYNONYMS: dict[str, tuple[str, ...]] = {
    STATUS_OPEN: ("open", "new", "todo", "to do", "backlog"),
    STATUS_IN_PROGRESS: ("in progress", "in-progress", "wip", "doing"),
    STATUS_IN_VALIDATION: ("in validation", "validation", "qa", "testing", "in review"),
    STATUS_BLOCKED: ("blocked", "on hold", "hold"),
    STATUS_DONE: ("done", "fixed", "closed", "resolved", "complete", "completed"),
}
_STATUS_LOOKUP = {
    synonym: label for label, synonyms in _STATUS_SYNONYMS.items() for synonym in synonyms
}

# Table row order; unknown statuses sort last.
STATUS_PRECEDENCE = {
    STATUS_OPEN: 1,
    STATUS_IN_PROGRESS: 2,
    STATUS_IN_VALIDATION: 3,
    STATUS_BLOCKED: 4,
    STATUS_DONE: 5,
}
_UNKNOWN_STATUS_RANK = 99

TABLE_HEADERS = ("ID", "Type", "Status", "Priority", "Updated", "Title", "Note")
_TABLE_DIVIDER = "|" + "---|" * len(TABLE_HEADERS)
_PLACEHOLDER_ID = "_none_"
_PLACEHOLDER_ROW = f"| {_PLACEHOLDER_ID} |  | {STATUS_OPEN} |  |  |  |  |"

TEXT_FIELDS = ("title", "type", "priority", "owner", "note")
_KNOWN_FIELDS = frozenset(("id", "status", "created", "updated") + TEXT_FIELDS)

# Legacy table header aliases, checked in order.
_TITLE_HEADERS = ("title", "summary", "issue", "description", "name")
_UPDATED_HEADERS = ("updated", "last updated", "last_updated", "date")
_NOTE_HEADERS = ("note", "notes")

_JSON_FENCE_PATTERN = re.compile(r"```json\s*(.*?)```", re.IGNORECASE | re.DOTALL)

ParseSource = Literal["json_state", "table_import", "empty"]
UpdateAction = Literal["upsert", "delete"]


# ==============================================================================
# RECORDS
# ==============================================================================


@dataclass
class TrackerIssue:
    """One tracked defect or enhancement.

    Well-known fields are attributes; any other keys found in stored state are
    kept verbatim in ``extra`` and written back on serialization.
    """

    id: str
    status: str = STATUS_OPEN
    title: Optional[str] = None
    type: Optional[str] = None
    priority: Optional[str] = None
    owner: Optional[str] = None
    note: Optional[str] = None
    created: Optional[str] = None
    updated: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "TrackerIssue":
        """Build an issue from a stored mapping, normalizing id and status.

        ``created``/``updated`` survive only when they are strings; other text
        fields are stringified when they hold a non-string scalar.
        """
        text_values: dict[str, Optional[str]] = {}
        for name in TEXT_FIELDS:
            value = raw.get(name)
            if value is None or isinstance(value, str):
                text_values[name] = value
            else:
                text_values[name] = str(value)

        created = raw.get("created")
        updated = raw.get("updated")
        return cls(
            id=normalize_issue_id(raw.get("id")),
            status=normalize_status(raw.get("status")),
            created=created if isinstance(created, str) else None,
            updated=updated if isinstance(updated, str) else None,
            extra={key: value for key, value in raw.items() if key not in _KNOWN_FIELDS},
            **text_values,
        )

    def as_payload(self) -> dict[str, Any]:
        """Serialize to a JSON-ready mapping, omitting unset optional fields."""
        payload: dict[str, Any] = {"id": self.id, "status": self.status}
        for name in TEXT_FIELDS + ("created", "updated"):
            value = getattr(self, name)
            if value is not None:
                payload[name] = value
        for key, value in self.extra.items():
            payload.setdefault(key, value)
        return payload


@dataclass
class TrackerUpdate:
    """A caller-supplied change to one issue.

    ``None`` fields are left untouched on existing issues.
    """

    id: str
    action: UpdateAction = "upsert"
    status: Optional[str] = None
    note: Optional[str] = None
    title: Optional[str] = None
    type: Optional[str] = None
    priority: Optional[str] = None
    owner: Optional[str] = None

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "TrackerUpdate":
        action = raw.get("action") or "upsert"
        if action not in ("upsert", "delete"):
            raise ValueError(f"Unsupported tracker update action '{action}'; use 'upsert' or 'delete'.")
        raw_id = raw.get("id")
        return cls(
            id=raw_id if isinstance(raw_id, str) else ("" if raw_id is None else str(raw_id)),
            action=action,
            **{name: raw.get(name) for name in ("status",) + TEXT_FIELDS},
        )


@dataclass
class NormalizedIssues:
    issues: list[TrackerIssue]
    duplicate_ids: list[str]


@dataclass
class TrackerParseResult:
    issues: list[TrackerIssue]
    source: ParseSource
    warnings: list[str] = field(default_factory=list)
    duplicate_ids: list[str] = field(default_factory=list)


@dataclass
class UpdateOutcome:
    issues: list[TrackerIssue]
    updated_ids: list[str] = field(default_factory=list)
    created_ids: list[str] = field(default_factory=list)
    deleted_ids: list[str] = field(default_factory=list)
    unresolved_ids: list[str] = field(default_factory=list)
    duplicate_ids: list[str] = field(default_factory=list)


@dataclass
class TrackerSyncResult:
    """Outcome of :func:`sync_tracker` against one tracker body."""

    body: str
    parse: TrackerParseResult
    outcome: UpdateOutcome
    duplicate_ids: list[str]
    log_entry: str

    @property
    def issues(self) -> list[TrackerIssue]:
        return self.outcome.issues

    def summary(self) -> dict[str, Any]:
        return {
            "parse_source": self.parse.source,
            "warnings": list(self.parse.warnings),
            "duplicate_ids": list(self.duplicate_ids),
            "issue_count": len(self.outcome.issues),
            "status_counts": status_counts(self.outcome.issues),
            "updated_ids": list(self.outcome.updated_ids),
            "created_ids": list(self.outcome.created_ids),
            "deleted_ids": list(self.outcome.deleted_ids),
            "unresolved_ids": list(self.outcome.unresolved_ids),
        }


# ==============================================================================
# NORMALIZATION
# ==============================================================================


def normalize_issue_id(value: Any) -> str:
    """Trim and uppercase an issue id; non-strings yield ``""``."""
    if not isinstance(value, str):
        return ""
    return value.strip().upper()


def normalize_status(status: Any) -> str:
    """Map status synonyms onto canonical labels.

    Unknown values are kept (trimmed); missing or blank values become ``Open``.

    Examples:
        >>> normalize_status("qa")
        'In Validation'
        >>> normalize_status(" Waiting on vendor ")
        'Waiting on vendor'
    """
    if not isinstance(status, str) or not status.strip():
        return STATUS_OPEN
    trimmed = status.strip()
    return _STATUS_LOOKUP.get(trimmed.lower(), trimmed)


def normalize_issues(raw_issues: Iterable[Any]) -> NormalizedIssues:
    """Normalize candidate records and drop duplicate ids.

    The first record seen for an id wins; later records with the same id are
    discarded and their id reported in ``duplicate_ids`` (sorted, unique).
    Records are never merged. Entries without a usable id are dropped.
    """
    issues: list[TrackerIssue] = []
    seen: set[str] = set()
    duplicates: set[str] = set()

    for raw in raw_issues:
        if isinstance(raw, TrackerIssue):
            mapping: Mapping[str, Any] = raw.as_payload()
        elif isinstance(raw, Mapping):
            mapping = raw
        else:
            continue

        issue_id = normalize_issue_id(mapping.get("id"))
        if not issue_id:
            continue
        if issue_id in seen:
            duplicates.add(issue_id)
            continue
        seen.add(issue_id)
        issues.append(TrackerIssue.from_mapping(mapping))

    return NormalizedIssues(issues=issues, duplicate_ids=sorted(duplicates))


def status_counts(issues: Iterable[TrackerIssue]) -> dict[str, int]:
    """Count issues per canonical status, in first-seen order."""
    counts: dict[str, int] = {}
    for issue in issues:
        status = normalize_status(issue.status)
        counts[status] = counts.get(status, 0) + 1
    return counts


# ==============================================================================
# PARSING
# ==============================================================================


def _extract_json_payload(section_content: str) -> str:
    match = _JSON_FENCE_PATTERN.search(section_content)
    return (match.group(1) if match else section_content).strip()


def _cell(row: list[str], index: Optional[int]) -> Optional[str]:
    if index is None or index >= len(row):
        return None
    return row[index]


def _first_index(header_map: Mapping[str, int], names: Iterable[str]) -> Optional[int]:
    for name in names:
        if name in header_map:
            return header_map[name]
    return None


def _import_table_rows(body: str) -> list[dict[str, Any]]:
    """Read issue rows from every table that has both an ID and a Status column."""
    imported: list[dict[str, Any]] = []

    for table in parse_tables(body):
        header_map: dict[str, int] = {}
        for index, header in enumerate(table.headers):
            header_map.setdefault(header.strip().lower(), index)

        id_index = header_map.get("id")
        status_index = header_map.get("status")
        if id_index is None or status_index is None:
            continue

        columns = {
            "title": _first_index(header_map, _TITLE_HEADERS),
            "type": header_map.get("type"),
            "priority": header_map.get("priority"),
            "owner": header_map.get("owner"),
            "note": _first_index(header_map, _NOTE_HEADERS),
            "updated": _first_index(header_map, _UPDATED_HEADERS),
        }

        for row in table.rows:
            raw_id = _cell(row, id_index) or ""
            if not normalize_issue_id(raw_id) or raw_id.strip() == _PLACEHOLDER_ID:
                continue
            record: dict[str, Any] = {
                "id": raw_id,
                "status": _cell(row, status_index) or STATUS_OPEN,
            }
            for name, column in columns.items():
                value = _cell(row, column)
                if value is not None:
                    record[name] = value
            imported.append(record)

    return imported


def parse_tracker_state(body: str) -> TrackerParseResult:
    """Reconstruct the issue list from a tracker note body.

    Order of preference: the fenced JSON array in ``Tracker State (JSON)``,
    then rows imported from any table with ``ID`` and ``Status`` columns, then
    an empty list. Never raises on malformed content.
    """
    warnings: list[str] = []
    section_content = get_section(body, TRACKER_STATE_HEADING)

    if section_content:
        payload = _extract_json_payload(section_content)
        if payload:
            try:
                parsed = json.loads(payload)
            except json.JSONDecodeError as exc:
                warnings.append(f"Tracker State JSON parse error: {exc}")
            else:
                if isinstance(parsed, list):
                    normalized = normalize_issues(parsed)
                    return TrackerParseResult(
                        issues=normalized.issues,
                        source="json_state",
                        warnings=warnings,
                        duplicate_ids=normalized.duplicate_ids,
                    )
                warnings.append("Tracker State JSON is not an array; falling back to table import.")

    if warnings:
        logger.warning("Tracker state degraded: %s", "; ".join(warnings))

    imported = _import_table_rows(body)
    if not imported:
        return TrackerParseResult(issues=[], source="empty", warnings=warnings)

    normalized = normalize_issues(imported)
    return TrackerParseResult(
        issues=normalized.issues,
        source="table_import",
        warnings=warnings,
        duplicate_ids=normalized.duplicate_ids,
    )


# ==============================================================================
# UPDATES
# ==============================================================================


def apply_updates(
    issues: Iterable[Union[TrackerIssue, Mapping[str, Any]]],
    updates: Iterable[Union[TrackerUpdate, Mapping[str, Any]]],
    create_missing: bool = True,
    now: Optional[datetime] = None,
) -> UpdateOutcome:
    """Apply a batch of updates in order against a copy of ``issues``.

    Later updates see the effect of earlier ones, so several updates to the
    same id compose. Unresolvable targets are reported, never raised.

    Args:
        issues: Current issue list (records or mappings).
        updates: Updates to apply, in caller order.
        create_missing: Create issues for upserts whose id does not exist yet.
        now: Clock override for ``created``/``updated`` stamps.

    Returns:
        The resulting issue list plus the ids touched per outcome.
    """
    moment = now or utc_now()
    timestamp = to_iso_timestamp(moment)
    today = to_iso_date(moment)

    initial = normalize_issues(issues)
    working = initial.issues
    outcome = UpdateOutcome(issues=working)

    for raw_update in updates:
        update = raw_update if isinstance(raw_update, TrackerUpdate) else TrackerUpdate.from_mapping(raw_update)
        issue_id = normalize_issue_id(update.id)
        if not issue_id:
            outcome.unresolved_ids.append(update.id)
            continue

        index = next((i for i, issue in enumerate(working) if issue.id == issue_id), None)

        if update.action == "delete":
            if index is None:
                outcome.unresolved_ids.append(issue_id)
            else:
                del working[index]
                outcome.deleted_ids.append(issue_id)
            continue

        if index is None:
            if not create_missing:
                outcome.unresolved_ids.append(issue_id)
                continue
            working.append(
                TrackerIssue(
                    id=issue_id,
                    status=normalize_status(update.status or STATUS_OPEN),
                    created=today,
                    updated=timestamp,
                    **{name: (getattr(update, name) or "").strip() for name in TEXT_FIELDS},
                )
            )
            outcome.created_ids.append(issue_id)
            continue

        existing = working[index]
        changes: dict[str, Any] = {
            "status": normalize_status(update.status or existing.status),
            "updated": timestamp,
        }
        for name in TEXT_FIELDS:
            value = getattr(update, name)
            if value is not None:
                changes[name] = value.strip()
        working[index] = replace(existing, extra=dict(existing.extra), **changes)
        outcome.updated_ids.append(issue_id)

    final = normalize_issues(working)
    outcome.issues = final.issues
    outcome.duplicate_ids = sorted(set(initial.duplicate_ids) | set(final.duplicate_ids))
    return outcome


# ==============================================================================
# RENDERING
# ==============================================================================


def sanitize_table_cell(value: Any) -> str:
    """Make a value safe for a single table cell."""
    if not isinstance(value, str):
        return ""
    return value.replace("\r\n", " ").replace("\n", " ").replace("|", "\\|").strip()


def _display_updated(value: Optional[str]) -> str:
    parsed = parse_date_input(value)
    if parsed is not None:
        return to_iso_date(parsed)
    return value or ""


def render_table(issues: Iterable[TrackerIssue]) -> str:
    """Render the fixed 7-column tracker table.

    Rows are ordered by status precedence (Open, In Progress, In Validation,
    Blocked, Done, anything else) and then by id.
    """
    header = "| " + " | ".join(TABLE_HEADERS) + " |"
    ordered = sorted(
        issues,
        key=lambda issue: (
            STATUS_PRECEDENCE.get(normalize_status(issue.status), _UNKNOWN_STATUS_RANK),
            issue.id,
        ),
    )
    if not ordered:
        return "\n".join([header, _TABLE_DIVIDER, _PLACEHOLDER_ROW])

    rows = []
    for issue in ordered:
        cells = (
            issue.id,
            issue.type or "",
            normalize_status(issue.status),
            issue.priority or "",
            _display_updated(issue.updated),
            issue.title or "",
            issue.note or "",
        )
        rows.append("| " + " | ".join(sanitize_table_cell(cell) for cell in cells) + " |")
    return "\n".join([header, _TABLE_DIVIDER, *rows])


def render_state_block(issues: Iterable[TrackerIssue]) -> str:
    """Render the canonical state as a fenced, pretty-printed JSON array.

    Backticks only occur inside JSON strings, so they are written as
    ``\\u0060`` and a value containing a code fence cannot close the block.
    """
    payload = json.dumps([issue.as_payload() for issue in issues], indent=2, ensure_ascii=False)
    payload = payload.replace("`", "\\u0060")
    return f"```json\n{payload}\n```"


def render_tracker_state(issues: Iterable[TrackerIssue], body: str = "") -> str:
    """Upsert the ``Tracker State (JSON)`` section of ``body`` with ``issues``."""
    return upsert_section(body, TRACKER_STATE_HEADING, render_state_block(issues), 2).body


def _id_list(ids: list[str]) -> str:
    return ",".join(ids) if ids else "none"


def build_log_entry(
    moment: datetime,
    outcome: UpdateOutcome,
    duplicate_ids: list[str],
    warnings: list[str],
) -> str:
    """Build the single-line sync log bullet for one sync."""
    parts = [
        to_iso_timestamp(moment),
        f"updated={_id_list(outcome.updated_ids)}",
        f"created={_id_list(outcome.created_ids)}",
        f"deleted={_id_list(outcome.deleted_ids)}",
        f"unresolved={_id_list(outcome.unresolved_ids)}",
    ]
    if duplicate_ids:
        parts.append(f"duplicate_ids={','.join(duplicate_ids)}")
    if warnings:
        parts.append("warnings=" + "; ".join(" ".join(warning.split()) for warning in warnings))
    return "- " + " | ".join(parts)


def existing_log_entries(body: str) -> list[str]:
    section = get_section(body, TRACKER_LOG_HEADING)
    if not section:
        return []
    return [line.strip() for line in section.split("\n") if line.strip().startswith("- ")]


# ==============================================================================
# SYNC
# ==============================================================================


def sync_tracker(
    body: str,
    updates: Iterable[Union[TrackerUpdate, Mapping[str, Any]]],
    create_missing: bool = True,
    render_table_section: bool = True,
    max_log_entries: int = DEFAULT_MAX_LOG_ENTRIES,
    now: Optional[datetime] = None,
) -> TrackerSyncResult:
    """Parse, update and re-render one tracker note body.

    The state section is always rewritten; the table section only when
    ``render_table_section`` is set. A log bullet is prepended to the sync log,
    which keeps at most ``max_log_entries`` (minimum 1) entries. Content outside
    the three tracker sections is preserved.
    """
    moment = now or utc_now()
    parsed = parse_tracker_state(body)
    outcome = apply_updates(parsed.issues, updates, create_missing=create_missing, now=moment)
    duplicate_ids = sorted(set(parsed.duplicate_ids) | set(outcome.duplicate_ids))

    next_body = render_tracker_state(outcome.issues, body)
    if render_table_section:
        next_body = upsert_section(next_body, TRACKER_TABLE_HEADING, render_table(outcome.issues), 2).body

    log_entry = build_log_entry(moment, outcome, duplicate_ids, parsed.warnings)
    entries = [log_entry, *existing_log_entries(next_body)][: max(1, max_log_entries)]
    next_body = upsert_section(next_body, TRACKER_LOG_HEADING, "\n".join(entries), 2).body

    return TrackerSyncResult(
        body=next_body,
        parse=parsed,
        outcome=outcome,
        duplicate_ids=duplicate_ids,
        log_entry=log_entry,
    )
