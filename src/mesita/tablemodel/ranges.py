"""Position-accurate cell ranges for Markdown pipe tables.

Maps table text to the exact ``[start, end)`` offsets of every header and
body cell. The parser slices cell text out of these ranges, so what the
structural model shows is byte-for-byte what cell editing later targets.

Trimming rules:
- Leading/trailing pipes are optional table syntax, not cell boundaries.
- Each cell range is whitespace-trimmed at both ends.
- An empty or whitespace-only cell becomes a zero-width insertion point one
  character after the cell's untrimmed start (clamped to its end), so typing
  lands inside the cell instead of against a delimiter.

Thread Safety:
All functions are pure, safe to call from any thread.

"""

from __future__ import annotations

from mesita.model import CellCoords, CellRange, TableCellRanges
from mesita.tablemodel.scanner import scan_table_row

_SEPARATOR_CHARS = frozenset(" |:-")


def is_separator_row(line: str) -> bool:
    """Check if a line is a valid separator row.

    A separator row contains only spaces, ``-``, ``:`` and ``|``, with at
    least one ``-``.
    """
    trimmed = line.strip()
    if "-" not in trimmed:
        return False
    return all(char in _SEPARATOR_CHARS for char in trimmed)


def non_blank_lines(text: str) -> list[tuple[str, int]]:
    """Enumerate non-blank lines with their absolute offsets in ``text``."""
    result: list[tuple[str, int]] = []
    offset = 0
    for line in text.split("\n"):
        if line.strip():
            result.append((line, offset))
        offset += len(line) + 1
    return result


def _trim_bounds(line: str, start: int, end: int) -> tuple[int, int]:
    while start < end and line[start].isspace():
        start += 1
    while end > start and line[end - 1].isspace():
        end -= 1
    return start, end


def inner_delimiters(line: str) -> tuple[int, int, tuple[int, ...]]:
    """Split a row into its inner span and the delimiters between cells.

    Returns:
        ``(inner_start, inner_end, delimiters)`` where the optional leading
        and trailing pipes have been excluded from the inner span and from
        the delimiter list.
    """
    trim_start, trim_end = _trim_bounds(line, 0, len(line))
    delimiters = scan_table_row(line)

    inner_start = trim_start
    inner_end = trim_end
    if delimiters and delimiters[0] == trim_start:
        inner_start += 1
    if delimiters and delimiters[-1] == trim_end - 1 and trim_end - 1 >= inner_start:
        inner_end -= 1

    inner = tuple(d for d in delimiters if inner_start <= d < inner_end)
    return inner_start, inner_end, inner


def _cell_bounds(line: str, start: int, end: int) -> tuple[int, int]:
    trimmed_start, trimmed_end = _trim_bounds(line, start, end)
    if trimmed_start == trimmed_end:
        # Whitespace-only cell: pin a stable insertion point inside it
        insertion = min(start + 1, end)
        return insertion, insertion
    return trimmed_start, trimmed_end


def line_cell_ranges(line: str, line_offset: int = 0) -> tuple[CellRange, ...]:
    """Compute cell ranges for one table line.

    Args:
        line: Table line (without newline)
        line_offset: Offset of the line within the table text

    Returns:
        One range per cell, offsets relative to the table text
    """
    trim_start, trim_end = _trim_bounds(line, 0, len(line))
    if trim_end <= trim_start:
        return ()

    inner_start, inner_end, delimiters = inner_delimiters(line)

    ranges: list[CellRange] = []
    segment_start = inner_start
    for delimiter in delimiters:
        start, end = _cell_bounds(line, segment_start, delimiter)
        ranges.append(CellRange(line_offset + start, line_offset + end))
        segment_start = delimiter + 1

    start, end = _cell_bounds(line, segment_start, inner_end)
    ranges.append(CellRange(line_offset + start, line_offset + end))
    return tuple(ranges)


def compute_cell_ranges(text: str) -> TableCellRanges | None:
    """Compute per-cell source ranges (relative to ``text``).

    Returns None when ``text`` is not a structurally valid table: fewer than
    two non-blank lines, a header without a pipe, or a second line that is
    not a separator row. Body lines without a pipe are skipped; ragged rows
    are passed through as-is.

    Example:
        >>> ranges = compute_cell_ranges("| a | b |\\n| --- | --- |")
        >>> ranges.headers
        (CellRange(start=2, end=3), CellRange(start=6, end=7))
    """
    lines = non_blank_lines(text)
    if len(lines) < 2:
        return None

    header_line, header_offset = lines[0]
    separator_line, _ = lines[1]
    if "|" not in header_line:
        return None
    if not is_separator_row(separator_line):
        return None

    headers = line_cell_ranges(header_line, header_offset)
    rows = tuple(
        line_cell_ranges(line, offset) for line, offset in lines[2:] if "|" in line
    )
    return TableCellRanges(headers=headers, rows=rows)


def get_cell_range(ranges: TableCellRanges, coords: CellCoords) -> CellRange | None:
    """Look up the range for ``coords``; None when out of range."""
    if coords.col < 0:
        return None
    if coords.section == "header":
        row = ranges.headers
    else:
        if not 0 <= coords.row < len(ranges.rows):
            return None
        row = ranges.rows[coords.row]
    if coords.col >= len(row):
        return None
    return row[coords.col]


def find_cell_at(ranges: TableCellRanges, relative_pos: int) -> CellCoords | None:
    """Find the cell whose range contains ``relative_pos`` (inclusive bounds).

    Inverse of ``get_cell_range``. Header cells are checked first.
    """
    for col, cell in enumerate(ranges.headers):
        if cell.contains(relative_pos):
            return CellCoords("header", 0, col)
    for row_index, row in enumerate(ranges.rows):
        for col, cell in enumerate(row):
            if cell.contains(relative_pos):
                return CellCoords("body", row_index, col)
    return None


def resolve_cell_doc_range(
    table_from: int, ranges: TableCellRanges, coords: CellCoords
) -> CellRange | None:
    """Resolve ``coords`` to an absolute document range."""
    relative = get_cell_range(ranges, coords)
    if relative is None:
        return None
    return relative.shifted(table_from)
