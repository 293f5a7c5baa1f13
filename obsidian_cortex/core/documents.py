"""Document I/O: front-matter aware reads and writes inside a vault.

This is the only module that touches note files directly. Writes go through
:func:`write_document`, whose :func:`touches_updated` decorator refreshes the
``updated`` front-matter field on every call.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional

import frontmatter
import yaml

from obsidian_cortex.constants import MAX_FRONTMATTER_BYTES
from obsidian_cortex.core.dates import today_iso
from obsidian_cortex.core.vault_operations import (
    ensure_vault_ready,
    resolve_directory_path,
    resolve_note_path,
    resolve_vault_path,
    vault_relative_path,
)
from obsidian_cortex.data_models import VaultMetadata
from obsidian_cortex.errors import NoteNotFoundError

logger = logging.getLogger(__name__)


@dataclass
class NoteDocument:
    """A note split into front matter and markdown body."""

    path: str
    frontmatter: dict[str, Any] = field(default_factory=dict)
    body: str = ""


# ==============================================================================
# HELPER FUNCTIONS
# ==============================================================================


def _to_yaml_safe(value: Any, key_path: str) -> Any:
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [_to_yaml_safe(item, f"{key_path}[{index}]") for index, item in enumerate(value)]
    if isinstance(value, Mapping):
        nested: dict[str, Any] = {}
        for sub_key, sub_value in value.items():
            if not isinstance(sub_key, str) or not sub_key.strip():
                raise ValueError(f"Frontmatter key '{key_path}.{sub_key}' must be a non-empty string.")
            nested[sub_key] = _to_yaml_safe(sub_value, f"{key_path}.{sub_key}")
        return nested
    raise ValueError(f"Frontmatter field '{key_path}' uses unsupported type '{type(value).__name__}'.")


def sanitize_frontmatter(metadata: Mapping[str, Any]) -> dict[str, Any]:
    """Return a YAML-safe copy of ``metadata``.

    Dates become ISO strings, tuples become lists. Keys must be non-empty strings
    and the serialized block must stay under ``MAX_FRONTMATTER_BYTES``.

    Raises:
        ValueError: If a key or value cannot be represented, or the block is too large.
    """
    if not isinstance(metadata, Mapping):
        raise ValueError("Frontmatter must be a dictionary of key/value pairs.")

    sanitized: dict[str, Any] = {}
    for key, value in metadata.items():
        if not isinstance(key, str) or not key.strip():
            raise ValueError("Frontmatter keys must be non-empty strings.")
        sanitized[key] = _to_yaml_safe(value, key)

    try:
        dumped = yaml.safe_dump(sanitized, sort_keys=False)
    except yaml.YAMLError as exc:
        raise ValueError(f"Frontmatter cannot be serialized to YAML: {exc}") from exc

    if len(dumped.encode("utf-8")) > MAX_FRONTMATTER_BYTES:
        raise ValueError(
            f"Frontmatter exceeds maximum size of {MAX_FRONTMATTER_BYTES // 1024}KB."
        )
    return sanitized


def split_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Split raw note text into ``(metadata, body)``.

    Date values parsed by YAML are returned as ISO strings so that callers (and
    JSON responses) only ever see plain scalars.

    Raises:
        ValueError: If a front-matter block exists but is not valid YAML.
    """
    if not text:
        return {}, ""

    try:
        post = frontmatter.loads(text)
    except yaml.YAMLError as exc:
        raise ValueError(f"Frontmatter contains invalid YAML: {exc}") from exc
    except (TypeError, ValueError) as exc:
        # e.g. a front-matter block that is a YAML list instead of a mapping
        raise ValueError(f"Unable to parse frontmatter: {exc}") from exc

    metadata = dict(post.metadata or {})
    try:
        metadata = sanitize_frontmatter(metadata)
    except ValueError:
        # Unusual YAML types are kept as parsed; only writes must be YAML-safe.
        logger.warning("Frontmatter contains values that cannot be normalized; keeping raw values")
    content = post.content if post.content is not None else ""
    return metadata, content


def join_frontmatter(metadata: Mapping[str, Any], body: str) -> str:
    """Serialize metadata and body back into markdown.

    An empty mapping produces the body alone, without a front-matter block.
    """
    if not metadata:
        return body

    post = frontmatter.Post(body)
    post.metadata.update(metadata)
    return frontmatter.dumps(post) + "\n"


def touches_updated(write: Callable[..., str]) -> Callable[..., str]:
    """Decorate a document writer so every write stamps ``updated`` with today's date."""

    @functools.wraps(write)
    def wrapper(
        vault: VaultMetadata,
        note_path: str,
        body: str,
        frontmatter_data: Optional[Mapping[str, Any]] = None,
    ) -> str:
        stamped = dict(frontmatter_data or {})
        stamped["updated"] = today_iso()
        return write(vault, note_path, body, stamped)

    return wrapper


# ==============================================================================
# DOCUMENT OPERATIONS
# ==============================================================================


def file_exists(vault: VaultMetadata, relative_path: str) -> bool:
    return resolve_vault_path(vault, relative_path).exists()


def read_document(vault: VaultMetadata, note_path: str) -> NoteDocument:
    """Read a note and split its front matter.

    Raises:
        NoteNotFoundError: If the note does not exist.
        ValueError: If the note is not UTF-8 or its front matter is invalid YAML.
    """
    ensure_vault_ready(vault)
    normalized, full_path = resolve_note_path(vault, note_path)
    if not full_path.is_file():
        raise NoteNotFoundError(f"Note not found: {normalized}")

    try:
        raw_text = full_path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise ValueError(f"Note '{normalized}' is not UTF-8 encoded and cannot be processed.") from exc

    metadata, body = split_frontmatter(raw_text)
    return NoteDocument(path=normalized, frontmatter=metadata, body=body)


def read_raw(vault: VaultMetadata, note_path: str) -> tuple[str, str]:
    """Return ``(normalized_path, raw_text)`` without parsing front matter."""
    ensure_vault_ready(vault)
    normalized, full_path = resolve_note_path(vault, note_path)
    if not full_path.is_file():
        raise NoteNotFoundError(f"Note not found: {normalized}")
    return normalized, full_path.read_text(encoding="utf-8")


@touches_updated
def write_document(
    vault: VaultMetadata,
    note_path: str,
    body: str,
    frontmatter_data: Optional[Mapping[str, Any]] = None,
) -> str:
    """Write ``body`` with ``frontmatter_data`` to a note, creating folders as needed.

    The body is normalized to end with exactly one newline.

    Returns:
        The normalized vault-relative note path.
    """
    ensure_vault_ready(vault)
    normalized, full_path = resolve_note_path(vault, note_path)
    full_path.parent.mkdir(parents=True, exist_ok=True)

    metadata = sanitize_frontmatter(frontmatter_data or {})
    final_body = body.rstrip() + "\n"
    full_path.write_text(join_frontmatter(metadata, final_body), encoding="utf-8")
    logger.info("Wrote note '%s' in vault '%s'", normalized, vault.name)
    return normalized


def append_markdown_block(
    vault: VaultMetadata,
    note_path: str,
    block: str,
    fallback_title: Optional[str] = None,
    separator: str = "\n\n---\n\n",
) -> bool:
    """Append a markdown block to a note, creating the note when it is missing.

    A new note starts with ``fallback_title`` (default ``# <file name>``).
    Existing notes keep their front matter; the block follows ``separator``.

    Returns:
        ``True`` when the note was created by this call.
    """
    normalized, full_path = resolve_note_path(vault, note_path)
    if not full_path.is_file():
        title = fallback_title or f"# {Path(normalized).stem}"
        write_document(vault, normalized, f"{title}\n\n{block.strip()}\n")
        return True

    document = read_document(vault, normalized)
    next_body = f"{document.body.rstrip()}{separator}{block.strip()}\n"
    write_document(vault, normalized, next_body, document.frontmatter)
    return False


def list_markdown_files(vault: VaultMetadata, directory: str = "") -> list[str]:
    """List markdown files below ``directory`` as sorted vault-relative paths.

    Dot-prefixed files and folders (``.obsidian``, ``.git``, ...) are skipped.

    Raises:
        NoteNotFoundError: If ``directory`` does not exist.
    """
    ensure_vault_ready(vault)
    normalized, root = resolve_directory_path(vault, directory)
    if not root.is_dir():
        raise NoteNotFoundError(f"Directory not found: {normalized or '/'}")

    files: list[str] = []
    for path in root.rglob("*.md"):
        relative_parts = path.relative_to(root).parts
        if any(part.startswith(".") for part in relative_parts) or not path.is_file():
            continue
        files.append(vault_relative_path(vault, path))
    return sorted(files)


def stat_mtime(vault: VaultMetadata, relative_path: str) -> datetime:
    """Return the modification time of a vault file as an aware UTC datetime."""
    full_path = resolve_vault_path(vault, relative_path)
    try:
        stat = full_path.stat()
    except FileNotFoundError as exc:
        raise NoteNotFoundError(f"File not found: {relative_path}") from exc
    return datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc)
