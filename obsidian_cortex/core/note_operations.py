"""Core business logic for note-level operations.

Every write goes through :func:`obsidian_cortex.core.documents.write_document`,
so the ``updated`` front-matter field is refreshed no matter which operation
performed it.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Literal, Optional

from obsidian_cortex.core.documents import (
    read_document,
    read_raw,
    sanitize_frontmatter,
    write_document,
)
from obsidian_cortex.core.markdown_sections import strip_heading_markers, upsert_section
from obsidian_cortex.core.vault_operations import ensure_vault_ready, resolve_note_path
from obsidian_cortex.data_models import VaultMetadata
from obsidian_cortex.errors import NoteNotFoundError

logger = logging.getLogger(__name__)

WriteMode = Literal["overwrite", "append", "prepend"]
AppendPosition = Literal["end", "start"]
FrontmatterAction = Literal["get", "set", "merge"]

DEFAULT_APPEND_SEPARATOR = "\n\n---\n\n"


# ==============================================================================
# HELPER FUNCTIONS
# ==============================================================================


def _deep_merge_dicts(base: dict[str, Any], updates: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge two dictionaries without mutating inputs."""
    merged: dict[str, Any] = copy.deepcopy(base)
    for key, value in updates.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge_dicts(merged[key], value)
        else:
            merged[key] = value
    return merged


def _require_existing(vault: VaultMetadata, note_path: str) -> str:
    ensure_vault_ready(vault)
    normalized, full_path = resolve_note_path(vault, note_path)
    if not full_path.is_file():
        raise NoteNotFoundError(f"Note not found: {normalized}")
    return normalized


# ==============================================================================
# NOTE OPERATIONS
# ==============================================================================


def read_note(vault: VaultMetadata, note_path: str, include_frontmatter: bool = True) -> dict[str, Any]:
    """Read a note, optionally splitting its front matter from the body.

    Args:
        vault: Vault metadata.
        note_path: Vault-relative note path (``.md`` optional).
        include_frontmatter: When ``True`` return parsed front matter and the
            trimmed body separately; otherwise return the raw file text.

    Returns:
        Dictionary with vault, path and content (plus frontmatter when parsed).

    Raises:
        NoteNotFoundError: If the note does not exist.
    """
    if not include_frontmatter:
        normalized, raw_text = read_raw(vault, note_path)
        return {"vault": vault.name, "path": normalized, "content": raw_text}

    document = read_document(vault, note_path)
    return {
        "vault": vault.name,
        "path": document.path,
        "frontmatter": document.frontmatter or None,
        "content": document.body.strip(),
    }


def write_note(
    vault: VaultMetadata,
    note_path: str,
    content: str,
    frontmatter: Optional[dict[str, Any]] = None,
    mode: WriteMode = "overwrite",
) -> dict[str, Any]:
    """Create or update a note.

    Existing front matter is preserved; ``frontmatter`` is merged over it
    (top-level keys replace existing ones). ``append``/``prepend`` combine the
    new content with the existing body separated by a blank line.

    Args:
        vault: Vault metadata.
        note_path: Vault-relative note path.
        content: Markdown body to write.
        frontmatter: Optional fields to merge into the front matter.
        mode: ``overwrite``, ``append`` or ``prepend``.

    Returns:
        Dictionary with vault, path, mode and whether the note was created.

    Raises:
        ValueError: If ``mode`` is unknown or the front matter is not YAML-safe.
    """
    if mode not in ("overwrite", "append", "prepend"):
        raise ValueError(f"Unsupported write mode '{mode}'.")

    ensure_vault_ready(vault)
    normalized, full_path = resolve_note_path(vault, note_path)
    created = not full_path.is_file()

    existing_metadata: dict[str, Any] = {}
    existing_body = ""
    if not created:
        document = read_document(vault, normalized)
        existing_metadata, existing_body = document.frontmatter, document.body

    merged_metadata = {**existing_metadata, **sanitize_frontmatter(frontmatter or {})}

    if mode == "overwrite":
        body = content
    elif mode == "append":
        body = f"{existing_body.strip()}\n\n{content}".strip()
    else:
        body = f"{content}\n\n{existing_body.strip()}".strip()

    write_document(vault, normalized, body, merged_metadata)
    logger.info("Wrote note '%s' in vault '%s' (mode=%s, created=%s)", normalized, vault.name, mode, created)
    return {"vault": vault.name, "path": normalized, "mode": mode, "created": created}


def append_to_note(
    vault: VaultMetadata,
    note_path: str,
    content: str,
    separator: str = DEFAULT_APPEND_SEPARATOR,
    position: AppendPosition = "end",
) -> dict[str, Any]:
    """Add content to the end (or start) of an existing note.

    Raises:
        NoteNotFoundError: If the note does not exist; use :func:`write_note`
            to create notes.
    """
    if position not in ("end", "start"):
        raise ValueError(f"Unsupported append position '{position}'.")

    try:
        normalized = _require_existing(vault, note_path)
    except NoteNotFoundError as exc:
        raise NoteNotFoundError(f"{exc}. Use write_vault_note to create new notes.") from exc

    document = read_document(vault, normalized)
    existing = document.body.strip()
    if position == "end":
        body = f"{existing}{separator}{content}"
    else:
        body = f"{content}{separator}{existing}"

    write_document(vault, normalized, body, document.frontmatter)
    logger.info("Added content to note '%s' in vault '%s' (position=%s)", normalized, vault.name, position)
    return {"vault": vault.name, "path": normalized, "position": position}


def delete_note(vault: VaultMetadata, note_path: str) -> dict[str, Any]:
    """Delete a note.

    Raises:
        NoteNotFoundError: If the note does not exist.
    """
    normalized = _require_existing(vault, note_path)
    _, full_path = resolve_note_path(vault, normalized)
    full_path.unlink()
    logger.info("Deleted note '%s' in vault '%s'", normalized, vault.name)
    return {"vault": vault.name, "path": normalized, "status": "deleted"}


def move_note(vault: VaultMetadata, from_path: str, to_path: str) -> dict[str, Any]:
    """Move or rename a note without overwriting an existing destination.

    Raises:
        NoteNotFoundError: If the source note does not exist.
        FileExistsError: If a file already exists at the destination.
    """
    ensure_vault_ready(vault)
    source, source_path = resolve_note_path(vault, from_path)
    destination, destination_path = resolve_note_path(vault, to_path)

    if not source_path.is_file():
        raise NoteNotFoundError(f"Source note not found: {source}")
    if destination_path.exists():
        raise FileExistsError(f"Destination already exists: {destination}")

    destination_path.parent.mkdir(parents=True, exist_ok=True)
    source_path.rename(destination_path)
    logger.info("Moved note from '%s' to '%s' in vault '%s'", source, destination, vault.name)
    return {"vault": vault.name, "from": source, "to": destination}


def manage_frontmatter(
    vault: VaultMetadata,
    note_path: str,
    action: FrontmatterAction = "get",
    data: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    """Read, replace (``set``) or deep-merge (``merge``) a note's front matter.

    Args:
        vault: Vault metadata.
        note_path: Vault-relative note path.
        action: ``get``, ``set`` or ``merge``.
        data: Front-matter fields; required for ``set`` and ``merge``.

    Returns:
        Dictionary with vault, path, action and the resulting front matter.

    Raises:
        NoteNotFoundError: If the note does not exist.
        ValueError: If ``data`` is missing for a write or is not YAML-safe.
    """
    if action not in ("get", "set", "merge"):
        raise ValueError(f"Unsupported frontmatter action '{action}'.")

    normalized = _require_existing(vault, note_path)
    document = read_document(vault, normalized)

    if action == "get":
        return {"vault": vault.name, "path": normalized, "action": action, "frontmatter": document.frontmatter}

    if data is None:
        raise ValueError("Data is required for set/merge operations.")

    updates = sanitize_frontmatter(data)
    metadata = updates if action == "set" else _deep_merge_dicts(document.frontmatter, updates)
    write_document(vault, normalized, document.body, metadata)

    written = read_document(vault, normalized).frontmatter
    logger.info(
        "Frontmatter %s for note '%s' in vault '%s' (fields=%s)",
        "replaced" if action == "set" else "merged",
        normalized,
        vault.name,
        ", ".join(sorted(updates)) or "none",
    )
    return {"vault": vault.name, "path": normalized, "action": action, "frontmatter": written}


def upsert_note_section(
    vault: VaultMetadata,
    note_path: str,
    heading: str,
    content: str,
    level: int = 2,
) -> dict[str, Any]:
    """Replace or insert a heading-delimited section in a stored note.

    Front matter is preserved (and ``updated`` refreshed).

    Returns:
        Dictionary with vault, path, heading line and ``action``
        (``updated`` or ``inserted``).

    Raises:
        NoteNotFoundError: If the note does not exist.
        ValueError: If ``level`` is outside 1-6 or ``heading`` is empty.
    """
    normalized = _require_existing(vault, note_path)
    document = read_document(vault, normalized)
    result = upsert_section(document.body, heading, content, level)
    write_document(vault, normalized, result.body, document.frontmatter)

    heading_line = f"{'#' * level} {strip_heading_markers(heading)}"
    logger.info(
        "Section '%s' %s in note '%s' (vault '%s')",
        heading_line,
        result.action,
        normalized,
        vault.name,
    )
    return {"vault": vault.name, "path": normalized, "heading": heading_line, "action": result.action}
