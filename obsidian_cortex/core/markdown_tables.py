"""Pipe-table extraction from markdown bodies.

Used only to import legacy tracker tables; rendering always goes from
structured state to table text, never back.
"""

from __future__ import annotations

from dataclasses import dataclass, field

_DIVIDER_CHARS = frozenset("|-: \t")


@dataclass
class MarkdownTable:
    headers: list[str]
    rows: list[list[str]] = field(default_factory=list)


def split_table_row(line: str) -> list[str]:
    """Split ``| a | b |`` into ``["a", "b"]``; lines without a pipe yield ``[]``."""
    trimmed = line.strip()
    if "|" not in trimmed:
        return []
    if trimmed.startswith("|"):
        trimmed = trimmed[1:]
    if trimmed.endswith("|"):
        trimmed = trimmed[:-1]
    return [cell.strip() for cell in trimmed.split("|")]


def is_divider_row(line: str) -> bool:
    """True for header dividers such as ``|---|:---:|`` or ``--- | ---``."""
    stripped = line.strip()
    return (
        bool(stripped)
        and "|" in stripped
        and "-" in stripped
        and set(stripped) <= _DIVIDER_CHARS
    )


def parse_tables(body: str) -> list[MarkdownTable]:
    """Return every pipe table in ``body`` in document order.

    A table is a line containing ``|`` immediately followed by a divider row.
    Data rows are the ``|``-containing lines that follow, up to the first blank
    or non-table line.
    """
    lines = body.replace("\r\n", "\n").split("\n")
    tables: list[MarkdownTable] = []

    index = 0
    while index < len(lines) - 1:
        header_line = lines[index]
        if "|" not in header_line or not is_divider_row(lines[index + 1]):
            index += 1
            continue

        headers = split_table_row(header_line)
        rows: list[list[str]] = []
        cursor = index + 2
        while cursor < len(lines):
            row_line = lines[cursor]
            if "|" not in row_line or not row_line.strip():
                break
            rows.append(split_table_row(row_line))
            cursor += 1

        tables.append(MarkdownTable(headers=headers, rows=rows))
        index = cursor
    return tables
