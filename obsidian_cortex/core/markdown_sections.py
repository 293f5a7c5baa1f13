"""Heading-delimited section lookup and upsert for markdown bodies.

A section starts at a heading line and runs until the next heading of the same
or a shallower level (or the end of the document). Headings are matched by
text only, case-insensitively, regardless of their level.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import Literal, Optional

_BULLET_PATTERN = re.compile(r"^(?:[-*]|\d+\.)\s+(.*)$")
_BLANK_RUN_PATTERN = re.compile(r"\n{3,}")

EMPTY_BULLET_SECTION = "- _No updates_"


@dataclass(frozen=True)
class SectionBounds:
    """Line span of a section: ``start`` is the heading line, ``end`` is exclusive."""

    start: int
    end: int
    level: int


@dataclass(frozen=True)
class SectionUpsert:
    body: str
    action: Literal["updated", "inserted"]


class _ScanState(enum.Enum):
    OUTSIDE_SECTION = "outside-section"
    INSIDE_SECTION = "inside-section"


# ==============================================================================
# HELPER FUNCTIONS
# ==============================================================================


def _normalize_heading_key(value: str) -> str:
    """Normalize heading text for case-insensitive comparisons."""
    return " ".join(value.strip().split()).lower()


def strip_heading_markers(heading: str) -> str:
    """Drop leading ``#`` markers a caller may have included (``"## Tasks"`` → ``"Tasks"``)."""
    return heading.strip().lstrip("#").strip()


def _parse_heading_line(line: str) -> Optional[tuple[int, str]]:
    """Return ``(level, title)`` when ``line`` is an ATX heading, else ``None``.

    A heading is 1-6 ``#`` characters followed by whitespace and text; leading
    and trailing whitespace on the line is ignored.
    """
    stripped = line.strip()
    level = len(stripped) - len(stripped.lstrip("#"))
    if not 1 <= level <= 6:
        return None
    rest = stripped[level:]
    if not rest or not rest[0].isspace():
        return None
    return level, rest.strip()


def _split_lines(body: str) -> list[str]:
    return body.replace("\r\n", "\n").split("\n")


def _finalize(text: str) -> str:
    """Collapse runs of blank lines and end the document with one newline."""
    collapsed = _BLANK_RUN_PATTERN.sub("\n\n", text)
    return collapsed.lstrip("\n").rstrip() + "\n"


# ==============================================================================
# SECTION OPERATIONS
# ==============================================================================


def find_section(body: str, heading: str) -> Optional[SectionBounds]:
    """Locate the first section whose heading text matches ``heading``.

    Args:
        body: Markdown text (front matter already removed).
        heading: Heading text, with or without leading ``#`` markers.

    Returns:
        The section's line bounds, or ``None`` when no heading matches.
    """
    target = _normalize_heading_key(strip_heading_markers(heading))
    if not target:
        return None

    lines = _split_lines(body)
    state = _ScanState.OUTSIDE_SECTION
    start = level = 0

    for index, line in enumerate(lines):
        parsed = _parse_heading_line(line)
        if parsed is None:
            continue
        line_level, title = parsed

        if state is _ScanState.OUTSIDE_SECTION:
            if _normalize_heading_key(title) == target:
                state = _ScanState.INSIDE_SECTION
                start, level = index, line_level
        elif line_level <= level:
            return SectionBounds(start=start, end=index, level=level)

    if state is _ScanState.INSIDE_SECTION:
        return SectionBounds(start=start, end=len(lines), level=level)
    return None


def find_boundary_heading(content: str, level: int) -> Optional[str]:
    """Return the first heading line in ``content`` at ``level`` or shallower."""
    for line in _split_lines(content):
        parsed = _parse_heading_line(line)
        if parsed is not None and parsed[0] <= level:
            return line.strip()
    return None


def get_section(body: str, heading: str) -> Optional[str]:
    """Return the trimmed text between a heading line and its section boundary."""
    bounds = find_section(body, heading)
    if bounds is None:
        return None
    lines = _split_lines(body)
    return "\n".join(lines[bounds.start + 1 : bounds.end]).strip()


def upsert_section(body: str, heading: str, content: str, level: int = 2) -> SectionUpsert:
    """Replace a section's heading and content, or append it when missing.

    The rebuilt block is ``<level hashes> <heading>``, a blank line, then the
    trimmed ``content``. An existing section is matched by heading text alone,
    so its level may change. Text outside the section is kept, blank-line runs
    are collapsed to a single blank line and the result ends with one newline.
    Applying the same upsert twice yields the same body as applying it once,
    provided ``content`` holds no heading at ``level`` or shallower (see
    :func:`find_boundary_heading`); such a heading would end the section early
    and be kept as following text on the next upsert.

    Raises:
        ValueError: If ``level`` is outside 1-6 or ``heading`` is empty.
    """
    if not 1 <= level <= 6:
        raise ValueError(f"Heading level must be between 1 and 6, got {level}.")
    title = strip_heading_markers(heading)
    if not title:
        raise ValueError("Heading cannot be empty.")

    heading_line = f"{'#' * level} {title}"
    section_text = content.replace("\r\n", "\n").lstrip("\n").rstrip()
    payload = f"{heading_line}\n\n{section_text}" if section_text else heading_line

    normalized = body.replace("\r\n", "\n").rstrip()
    bounds = find_section(normalized, title)

    if bounds is None:
        combined = f"{normalized}\n\n{payload}" if normalized else payload
        return SectionUpsert(body=_finalize(combined), action="inserted")

    lines = normalized.split("\n")
    following = lines[bounds.end :]
    merged = lines[: bounds.start] + payload.split("\n")
    if following:
        merged.append("")
        merged.extend(following)
    return SectionUpsert(body=_finalize("\n".join(merged)), action="updated")


# ==============================================================================
# BULLET LISTS
# ==============================================================================


def parse_bullet_items(section_content: Optional[str]) -> list[str]:
    """Extract the text of ``-``, ``*`` and ``1.`` list items from section content."""
    if not section_content:
        return []

    items: list[str] = []
    for line in section_content.split("\n"):
        match = _BULLET_PATTERN.match(line.strip())
        if match and match.group(1).strip():
            items.append(match.group(1).strip())
    return items


def to_bullet_section(items: list[str]) -> str:
    """Render items as a ``-`` bullet list (a placeholder bullet when empty)."""
    cleaned = [item.strip() for item in items if item.strip()]
    if not cleaned:
        return EMPTY_BULLET_SECTION
    return "\n".join(f"- {item}" for item in cleaned)
