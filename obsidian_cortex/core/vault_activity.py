"""Read-only vault views: batch reads, recent activity and vault statistics.

Nothing here writes to the vault. Per-note failures are reported inside the
result instead of raised, so one unreadable note never hides the others.
"""

from __future__ import annotations

import logging
import posixpath
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Iterable, Optional

from obsidian_cortex.core.dates import days_between, to_iso_timestamp, utc_now
from obsidian_cortex.core.documents import list_markdown_files, read_document, read_raw, stat_mtime
from obsidian_cortex.core.vault_operations import (
    ensure_vault_ready,
    normalize_note_path,
    resolve_directory_path,
    resolve_vault_path,
)
from obsidian_cortex.data_models import VaultMetadata
from obsidian_cortex.errors import NoteNotFoundError

logger = logging.getLogger(__name__)

RECENT_ACTIVITY_DAYS = 7
STALE_CONTENT_DAYS = 90
TOP_TAG_LIMIT = 10
_ROOT_FOLDER = "/"


@dataclass
class NoteRecord:
    """Outcome of loading one note for a multi-note response."""

    path: str
    success: bool
    frontmatter: Optional[dict[str, Any]] = None
    content: Optional[str] = None
    error: Optional[str] = None

    def as_payload(self) -> dict[str, Any]:
        if not self.success:
            return {"path": self.path, "success": False, "error": self.error}
        return {
            "path": self.path,
            "success": True,
            "frontmatter": self.frontmatter,
            "content": self.content,
        }


# ==============================================================================
# NOTE READS
# ==============================================================================


def read_note_record(vault: VaultMetadata, note_path: str, include_frontmatter: bool = True) -> NoteRecord:
    """Load a note without raising.

    Missing notes yield ``error="Note not found"``; other failures carry the
    exception message. Without front matter parsing, ``content`` is the raw
    file text.
    """
    try:
        if not include_frontmatter:
            normalized, raw_text = read_raw(vault, note_path)
            return NoteRecord(path=normalized, success=True, content=raw_text)
        document = read_document(vault, note_path)
    except NoteNotFoundError:
        try:
            normalized = normalize_note_path(note_path)
        except ValueError:
            normalized = note_path
        return NoteRecord(path=normalized, success=False, error="Note not found")
    except (ValueError, OSError) as exc:
        logger.warning("Could not load note '%s': %s", note_path, exc)
        return NoteRecord(path=note_path, success=False, error=str(exc))

    return NoteRecord(
        path=document.path,
        success=True,
        frontmatter=document.frontmatter or None,
        content=document.body.strip(),
    )


def batch_read_notes(
    vault: VaultMetadata,
    note_paths: Iterable[str],
    include_frontmatter: bool = True,
) -> dict[str, Any]:
    """Read several notes in request order, one record per path.

    Raises:
        ValueError: If the vault directory is missing.
    """
    ensure_vault_ready(vault)
    records = [read_note_record(vault, path, include_frontmatter) for path in note_paths]
    successful = sum(1 for record in records if record.success)
    return {
        "vault": vault.name,
        "requested": len(records),
        "successful": successful,
        "failed": len(records) - successful,
        "results": [record.as_payload() for record in records],
    }


# ==============================================================================
# ACTIVITY
# ==============================================================================


def _resolve_scope(vault: VaultMetadata, folder: Optional[str], label: str) -> str:
    if not folder or not folder.strip():
        return ""
    scope_path, scope_dir = resolve_directory_path(vault, folder)
    if not scope_dir.is_dir():
        raise NoteNotFoundError(f"{label} not found: {scope_path or _ROOT_FOLDER}")
    return scope_path


def recent_files(
    vault: VaultMetadata,
    folder: Optional[str] = None,
    days: int = 7,
    limit: int = 20,
    now: Optional[datetime] = None,
    scope_label: str = "Directory",
) -> dict[str, Any]:
    """List markdown files modified within the last ``days`` days, newest first.

    Args:
        vault: Vault to scan.
        folder: Folder to restrict the scan to; the whole vault when omitted.
        days: Look-back window.
        limit: Maximum number of files returned; ``total_found`` counts all.
        now: Clock override.
        scope_label: Prefix of the not-found message for a missing ``folder``.

    Raises:
        NoteNotFoundError: If ``folder`` does not exist.
    """
    ensure_vault_ready(vault)
    scope_path = _resolve_scope(vault, folder, scope_label)

    moment = now or utc_now()
    cutoff = moment - timedelta(days=days)
    found: list[tuple[datetime, dict[str, Any]]] = []
    for file_path in list_markdown_files(vault, scope_path):
        try:
            modified = stat_mtime(vault, file_path)
        except OSError as exc:
            logger.warning("Skipping '%s' in recent scan: %s", file_path, exc)
            continue
        if modified < cutoff:
            continue
        found.append(
            (
                modified,
                {
                    "path": file_path,
                    "modified": to_iso_timestamp(modified),
                    "days_ago": days_between(modified, moment),
                },
            )
        )

    found.sort(key=lambda item: item[0], reverse=True)
    return {
        "scope_path": scope_path,
        "days": days,
        "total_found": len(found),
        "files": [entry for _, entry in found[:limit]],
    }


# ==============================================================================
# STATISTICS
# ==============================================================================


def _folder_key(scope_path: str, file_path: str) -> str:
    """Top-level folder of ``file_path`` below the scan scope (``/`` for direct files)."""
    relative = file_path[len(scope_path) + 1 :] if scope_path else file_path
    head, _, rest = relative.partition("/")
    if not rest:
        return _ROOT_FOLDER
    return posixpath.join(scope_path, head) if scope_path else head


def _tag_values(raw_tags: Any) -> list[str]:
    if isinstance(raw_tags, str):
        return [tag.strip().lstrip("#") for tag in raw_tags.replace(",", " ").split() if tag.strip("# ")]
    if isinstance(raw_tags, list):
        return [str(tag).strip().lstrip("#") for tag in raw_tags if str(tag).strip("# ")]
    return []


def vault_stats(
    vault: VaultMetadata,
    folder: Optional[str] = None,
    now: Optional[datetime] = None,
) -> dict[str, Any]:
    """Summarize file counts, front-matter coverage and activity for a vault scope.

    ``folders`` breaks file counts and recent activity down by top-level
    folder under the scope. Notes whose front matter cannot be parsed still
    count as files but not towards coverage.

    Raises:
        NoteNotFoundError: If ``folder`` does not exist.
    """
    ensure_vault_ready(vault)
    scope_path = _resolve_scope(vault, folder, "Directory")

    moment = now or utc_now()
    recent_cutoff = moment - timedelta(days=RECENT_ACTIVITY_DAYS)
    stale_cutoff = moment - timedelta(days=STALE_CONTENT_DAYS)

    files = list_markdown_files(vault, scope_path)
    total_size = with_frontmatter = with_tags = recently_modified = stale = 0
    tag_counts: Counter[str] = Counter()
    type_counts: Counter[str] = Counter()
    folders: dict[str, dict[str, int]] = {}

    for file_path in files:
        try:
            modified = stat_mtime(vault, file_path)
            size = resolve_vault_path(vault, file_path).stat().st_size
        except OSError as exc:
            logger.warning("Skipping '%s' in vault stats: %s", file_path, exc)
            continue

        folder_entry = folders.setdefault(_folder_key(scope_path, file_path), {"files": 0, "recently_modified": 0})
        folder_entry["files"] += 1
        total_size += size
        if modified > recent_cutoff:
            recently_modified += 1
            folder_entry["recently_modified"] += 1
        if modified < stale_cutoff:
            stale += 1

        try:
            metadata = read_document(vault, file_path).frontmatter
        except (ValueError, OSError) as exc:
            logger.warning("Front matter of '%s' skipped in vault stats: %s", file_path, exc)
            continue
        if not metadata:
            continue

        with_frontmatter += 1
        tags = _tag_values(metadata.get("tags"))
        if tags:
            with_tags += 1
            tag_counts.update(tags)
        note_type = metadata.get("type")
        if isinstance(note_type, str) and note_type.strip():
            type_counts[note_type.strip()] += 1

    total_files = len(files)
    coverage = with_frontmatter / total_files if total_files else 0.0
    return {
        "vault": vault.name,
        "search_path": scope_path or _ROOT_FOLDER,
        "stats": {
            "total_files": total_files,
            "total_size_kb": round(total_size / 1024),
            "with_frontmatter": with_frontmatter,
            "with_tags": with_tags,
            "frontmatter_coverage": f"{round(coverage * 100)}%",
        },
        "activity": {
            "recently_modified": recently_modified,
            "stale_over_90_days": stale,
        },
        "folders": [{"folder": name, **counts} for name, counts in sorted(folders.items())],
        "types": dict(sorted(type_counts.items())),
        "top_tags": [{"tag": tag, "count": count} for tag, count in tag_counts.most_common(TOP_TAG_LIMIT)],
        "health": {
            "frontmatter_coverage": "good" if total_files and coverage > 0.8 else "needs_attention",
            "stale_content": "needs_review" if total_files and stale / total_files > 0.3 else "ok",
            "recent_activity": "active" if recently_modified else "dormant",
        },
    }
