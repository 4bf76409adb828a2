"""Locate pipe tables inside a larger Markdown document.

A table starts at a line containing a pipe that is immediately followed by a
separator row, and runs over the consecutive non-blank lines that contain a
pipe. Lines inside fenced code blocks (3+ backticks or tildes) are never
considered.

Thread Safety:
All functions are pure, safe to call from any thread.

"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from mesita.tablemodel.ranges import is_separator_row


@dataclass(frozen=True, slots=True)
class ResolvedTable:
    """One table found in a document.

    ``text`` is ``doc[start:end]``; it never includes a trailing newline.

    """

    start: int
    end: int
    text: str


@dataclass(slots=True)
class _Fence:
    char: str
    count: int


def _lines_with_offsets(doc: str) -> Iterator[tuple[str, int]]:
    offset = 0
    for line in doc.split("\n"):
        yield line, offset
        offset += len(line) + 1


def _fence_opener(line: str) -> _Fence | None:
    stripped = line.lstrip(" ")
    if len(line) - len(stripped) >= 4 or not stripped:
        return None
    char = stripped[0]
    if char not in "`~":
        return None
    count = len(stripped) - len(stripped.lstrip(char))
    if count < 3:
        return None
    # Backtick fences cannot have backticks in the info string
    if char == "`" and "`" in stripped[count:]:
        return None
    return _Fence(char, count)


def _closes_fence(line: str, fence: _Fence) -> bool:
    stripped = line.lstrip(" ")
    if len(line) - len(stripped) >= 4:
        return False
    count = len(stripped) - len(stripped.lstrip(fence.char))
    if count < fence.count:
        return False
    return stripped[count:].strip() == ""


def iter_unfenced_lines(doc: str) -> Iterator[tuple[str, int]]:
    """Yield ``(line, offset)`` for lines outside fenced code blocks.

    Fence delimiter lines themselves are not yielded.
    """
    fence: _Fence | None = None
    for line, offset in _lines_with_offsets(doc):
        if fence is not None:
            if _closes_fence(line, fence):
                fence = None
            continue
        opener = _fence_opener(line)
        if opener is not None:
            fence = opener
            continue
        yield line, offset


def find_tables(doc: str) -> list[ResolvedTable]:
    """Find every pipe table in ``doc``, in document order.

    Example:
        >>> [t.text for t in find_tables("intro\\n\\n| a |\\n| --- |\\n| 1 |\\n")]
        ['| a |\\n| --- |\\n| 1 |']
    """
    lines = list(_lines_with_offsets(doc))
    tables: list[ResolvedTable] = []
    fence: _Fence | None = None
    index = 0

    while index < len(lines):
        line, offset = lines[index]

        if fence is not None:
            if _closes_fence(line, fence):
                fence = None
            index += 1
            continue

        opener = _fence_opener(line)
        if opener is not None:
            fence = opener
            index += 1
            continue

        if (
            "|" in line
            and line.strip()
            and index + 1 < len(lines)
            and is_separator_row(lines[index + 1][0])
        ):
            last = index + 1
            while (
                last + 1 < len(lines)
                and lines[last + 1][0].strip()
                and "|" in lines[last + 1][0]
            ):
                last += 1
            last_line, last_offset = lines[last]
            end = last_offset + len(last_line)
            tables.append(ResolvedTable(offset, end, doc[offset:end]))
            index = last + 1
            continue

        index += 1

    return tables


def resolve_table_at(doc: str, pos: int) -> ResolvedTable | None:
    """Return the table whose span ``[start, end]`` contains ``pos``."""
    for table in find_tables(doc):
        if table.start <= pos <= table.end:
            return table
        if table.start > pos:
            break
    return None


def trim_trailing_non_table_lines(text: str) -> str:
    """Drop trailing lines without a pipe, keeping at least two lines.

    Used when a host reports a table span that swallowed the paragraph line
    following it.
    """
    lines = text.split("\n")
    while len(lines) > 2 and "|" not in lines[-1]:
        lines.pop()
    return "\n".join(lines)


__all__ = [
    "ResolvedTable",
    "find_tables",
    "iter_unfenced_lines",
    "resolve_table_at",
    "trim_trailing_non_table_lines",
]
