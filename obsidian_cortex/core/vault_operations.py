"""Core vault operations and path validation.

Every filesystem-touching operation funnels user-supplied paths through
:func:`normalize_relative_path` (pure string validation) and then
:func:`resolve_vault_path` (filesystem-level sandbox check) before any I/O.
"""

from __future__ import annotations

import posixpath
import re
from pathlib import Path

from obsidian_cortex.data_models import VaultMetadata
from obsidian_cortex.errors import InvalidPathError

_DRIVE_PATTERN = re.compile(r"^[A-Za-z]:")


def ensure_vault_ready(vault: VaultMetadata) -> None:
    """Ensure the target vault directory is accessible before performing operations.

    Raises:
        FileNotFoundError: If the vault path does not exist or is not a directory.
    """
    if not vault.path.is_dir():
        raise FileNotFoundError(f"Vault '{vault.name}' is not accessible at {vault.path}")


def normalize_relative_path(user_path: str) -> str:
    """Normalize a user-supplied relative path and block vault traversal.

    Accepts either separator convention and returns a slash-separated path with
    no leading ``./``. The vault root itself normalizes to ``""``.

    Args:
        user_path: Path relative to the vault root, e.g. ``Projects\\Alpha/_Context.md``.

    Returns:
        The normalized vault-relative path.

    Raises:
        InvalidPathError: If the path is absolute (POSIX, UNC or drive-letter) or
            normalizes to a location outside the vault root.

    Examples:
        >>> normalize_relative_path("./Projects//Alpha/../Beta")
        'Projects/Beta'
    """
    raw = user_path.strip().replace("\\", "/")
    if raw.startswith("/") or _DRIVE_PATTERN.match(raw):
        raise InvalidPathError(f"Absolute paths are not allowed: {user_path}")

    normalized = posixpath.normpath(raw) if raw else "."
    if normalized == ".." or normalized.startswith("../"):
        raise InvalidPathError(f"Path escapes vault root: {user_path}")

    return "" if normalized == "." else normalized


def normalize_note_path(user_path: str) -> str:
    """Normalize a note path and ensure it carries a ``.md`` suffix.

    An existing suffix is recognized case-insensitively (``Notes/Plan.MD`` is
    left as is).

    Raises:
        InvalidPathError: If the path is empty, absolute or escapes the vault.
    """
    normalized = normalize_relative_path(user_path)
    if not normalized:
        raise InvalidPathError("Note path cannot be empty.")
    return normalized if normalized.lower().endswith(".md") else f"{normalized}.md"


def resolve_vault_path(vault: VaultMetadata, relative_path: str) -> Path:
    """Resolve a vault-relative path to an absolute path inside the vault.

    The path is normalized again and the resolved result re-checked against the
    vault root, which also catches symlinks pointing outside the vault.

    Raises:
        InvalidPathError: If the resolved path escapes the vault root.
    """
    normalized = normalize_relative_path(relative_path)
    vault_root = vault.path.resolve(strict=False)
    candidate = (vault_root / normalized).resolve(strict=False) if normalized else vault_root

    if not candidate.is_relative_to(vault_root):
        raise InvalidPathError(f"Path escapes vault root: {relative_path}")

    return candidate


def resolve_note_path(vault: VaultMetadata, note_path: str) -> tuple[str, Path]:
    """Return ``(normalized_path, absolute_path)`` for a note."""
    normalized = normalize_note_path(note_path)
    return normalized, resolve_vault_path(vault, normalized)


def resolve_directory_path(vault: VaultMetadata, dir_path: str) -> tuple[str, Path]:
    """Return ``(normalized_path, absolute_path)`` for a folder (``""`` is the root)."""
    normalized = normalize_relative_path(dir_path)
    return normalized, resolve_vault_path(vault, normalized)


def vault_relative_path(vault: VaultMetadata, path: Path) -> str:
    """Convert an absolute path inside the vault into a forward-slash relative path."""
    relative = path.resolve(strict=False).relative_to(vault.path.resolve(strict=False))
    return relative.as_posix()


def derive_project_dir(project_context_path: str) -> str:
    """Return the folder holding a project context note (``""`` at the vault root)."""
    directory = posixpath.dirname(project_context_path.replace("\\", "/"))
    return "" if directory in ("", ".") else directory
