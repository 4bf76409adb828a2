"""Table text <-> TableData.

Parsing slices header and body text straight out of the ranges computed by
``compute_cell_ranges``, so the structural model never disagrees with what
cell editing targets. Serialization emits the canonical minimal form:

    | a | b |
    | :--- | ---: |
    | 1 | 2 |

One space of padding around each delimiter, no column alignment padding,
lines joined with ``\\n`` and no trailing newline.

"""

from __future__ import annotations

from mesita.config import get_editor_config
from mesita.model import Alignment, TableData
from mesita.tablemodel.manipulation import normalize_columns
from mesita.tablemodel.ranges import (
    compute_cell_ranges,
    inner_delimiters,
    non_blank_lines,
)

MIN_SEPARATOR_DASHES = 3


def parse_alignment(cell: str) -> Alignment:
    """Parse a separator cell into an alignment.

    Example:
        >>> parse_alignment(" :---: ")
        'center'
        >>> parse_alignment("---") is None
        True
    """
    trimmed = cell.strip()
    left = trimmed.startswith(":")
    right = trimmed.endswith(":")
    if left and right:
        return "center"
    if left:
        return "left"
    if right:
        return "right"
    return None


def split_row(line: str) -> tuple[str, ...]:
    """Split one row into trimmed cell texts.

    Uses the same delimiter and edge-pipe rules as the range computer.
    """
    inner_start, inner_end, delimiters = inner_delimiters(line)
    cells: list[str] = []
    segment_start = inner_start
    for delimiter in delimiters:
        cells.append(line[segment_start:delimiter].strip())
        segment_start = delimiter + 1
    cells.append(line[segment_start:inner_end].strip())
    return tuple(cells)


def parse_table(text: str) -> TableData | None:
    """Parse table text into a TableData.

    Returns None if ``text`` is not a valid table; callers treat that as
    "not a table", never as an error.
    """
    ranges = compute_cell_ranges(text)
    if ranges is None:
        return None

    separator_line, _ = non_blank_lines(text)[1]
    alignments = tuple(parse_alignment(cell) for cell in split_row(separator_line))

    headers = tuple(text[cell.start : cell.end] for cell in ranges.headers)
    rows = tuple(
        tuple(text[cell.start : cell.end] for cell in row) for row in ranges.rows
    )
    return TableData(headers=headers, alignments=alignments, rows=rows)


def _separator_cell(alignment: Alignment, dashes: int) -> str:
    rule = "-" * dashes
    if alignment == "center":
        return f":{rule}:"
    if alignment == "left":
        return f":{rule}"
    if alignment == "right":
        return f"{rule}:"
    return rule


def _join_row(cells: tuple[str, ...]) -> str:
    return "| " + " | ".join(cells) + " |"


def serialize_table(table: TableData) -> str:
    """Serialize a TableData to canonical table text.

    Normalizes column counts first, so ragged input gains empty cells rather
    than losing content.

    Example:
        >>> serialize_table(TableData(("A", "B"), ("left", None), (("1",),)))
        '| A | B |\\n| :--- | --- |\\n| 1 |  |'
    """
    normalized = normalize_columns(table).table
    dashes = max(MIN_SEPARATOR_DASHES, get_editor_config().separator_dashes)

    lines = [_join_row(normalized.headers)]
    lines.append(
        _join_row(tuple(_separator_cell(a, dashes) for a in normalized.alignments))
    )
    lines.extend(_join_row(row) for row in normalized.rows)
    return "\n".join(lines)


__all__ = [
    "MIN_SEPARATOR_DASHES",
    "parse_alignment",
    "parse_table",
    "serialize_table",
    "split_row",
]
