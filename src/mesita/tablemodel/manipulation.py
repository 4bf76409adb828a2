"""Pure structural operations on TableData.

Every operation returns a ``TableResult``:

- ``Changed(table)``: the operation produced a new value
- ``Unchanged(table, reason)``: the operation was refused; ``table`` is the
  identical input object, so ``result.table is original`` also holds

Refusal is a normal outcome (deleting the last column, moving past an edge,
out-of-bounds index), never an exception.

Column-count consistency:
Parsed tables may be ragged. Every acting operation first right-pads
headers, alignments and rows to the effective width (see
``TableData.column_count``), so no cell content is ever silently dropped.

Example:
    >>> table = TableData(("A",), (None,), (("1",),))
    >>> result = delete_column(table, 0)
    >>> result.changed, result.table is table
    (False, True)

"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from mesita.model import Alignment, TableData
from mesita.utils.logger import get_logger

logger = get_logger(__name__)

InsertPosition = Literal["before", "after"]

# Row index used by swap_rows for the header row
HEADER_ROW = -1


@dataclass(frozen=True, slots=True)
class Changed:
    """An operation produced a new table."""

    table: TableData

    @property
    def changed(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Unchanged:
    """An operation was refused; ``table`` is the untouched input."""

    table: TableData
    reason: str = ""

    @property
    def changed(self) -> bool:
        return False


TableResult = Changed | Unchanged


def unwrap(result: TableResult) -> TableData:
    """Return the table carried by ``result``, changed or not."""
    return result.table


def _refuse(table: TableData, reason: str) -> Unchanged:
    logger.debug("Table operation refused: %s", reason)
    return Unchanged(table, reason)


def _pad(values: tuple, width: int, filler: object) -> tuple:
    if len(values) >= width:
        return values
    return values + (filler,) * (width - len(values))


def normalize_columns(table: TableData) -> TableResult:
    """Right-pad headers, alignments and rows to the effective width.

    Already-normalized tables come back as ``Unchanged``.
    """
    if table.is_normalized:
        return Unchanged(table, "already normalized")

    width = table.column_count
    return Changed(
        TableData(
            headers=_pad(table.headers, width, ""),
            alignments=_pad(table.alignments, width, None),
            rows=tuple(_pad(row, width, "") for row in table.rows),
        )
    )


def _normalized(table: TableData) -> TableData:
    return normalize_columns(table).table


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


# =============================================================================
# Rows
# =============================================================================


def insert_row(table: TableData, index: int, where: InsertPosition) -> TableResult:
    """Insert an empty body row before or after body row ``index``.

    The target index is clamped into ``[0, row_count]``; insertion never
    refuses.
    """
    normalized = _normalized(table)
    target = index if where == "before" else index + 1
    position = _clamp(target, 0, len(normalized.rows))

    rows = list(normalized.rows)
    rows.insert(position, ("",) * normalized.column_count)
    return Changed(
        TableData(headers=normalized.headers, alignments=normalized.alignments, rows=tuple(rows))
    )


def delete_row(table: TableData, index: int) -> TableResult:
    """Delete body row ``index``.

    Refused when the table has a single body row (a table always keeps at
    least one) or ``index`` is out of bounds.
    """
    if len(table.rows) <= 1:
        return _refuse(table, "cannot delete the last body row")
    if not 0 <= index < len(table.rows):
        return _refuse(table, f"row index {index} out of bounds")

    normalized = _normalized(table)
    rows = normalized.rows[:index] + normalized.rows[index + 1 :]
    return Changed(
        TableData(headers=normalized.headers, alignments=normalized.alignments, rows=rows)
    )


def swap_rows(table: TableData, i: int, j: int) -> TableResult:
    """Swap two rows. Index ``HEADER_ROW`` (-1) names the header row.

    Alignments stay with their column positions when the header moves.
    Any other negative index, or an index past the last body row, is
    refused.
    """
    row_count = len(table.rows)
    for index in (i, j):
        if index < HEADER_ROW or index >= row_count:
            return _refuse(table, f"row index {index} out of bounds")

    normalized = _normalized(table)
    all_rows = [normalized.headers, *normalized.rows]
    # Shift so the header sits at position 0
    all_rows[i + 1], all_rows[j + 1] = all_rows[j + 1], all_rows[i + 1]
    return Changed(
        TableData(
            headers=all_rows[0],
            alignments=normalized.alignments,
            rows=tuple(all_rows[1:]),
        )
    )


# =============================================================================
# Columns
# =============================================================================


def insert_column(table: TableData, index: int, where: InsertPosition) -> TableResult:
    """Insert an empty column before or after column ``index``.

    The target index is clamped into ``[0, column_count]``.
    """
    normalized = _normalized(table)
    target = index if where == "before" else index + 1
    position = _clamp(target, 0, normalized.column_count)

    def insert(values: tuple, filler: object) -> tuple:
        return values[:position] + (filler,) + values[position:]

    return Changed(
        TableData(
            headers=insert(normalized.headers, ""),
            alignments=insert(normalized.alignments, None),
            rows=tuple(insert(row, "") for row in normalized.rows),
        )
    )


def delete_column(table: TableData, index: int) -> TableResult:
    """Delete column ``index``.

    Operates on the effective width, so ragged input is tolerated. Refused
    when only one column remains or ``index`` is out of bounds.
    """
    width = table.column_count
    if width <= 1:
        return _refuse(table, "cannot delete the last column")
    if not 0 <= index < width:
        return _refuse(table, f"column index {index} out of bounds")

    normalized = _normalized(table)

    def remove(values: tuple) -> tuple:
        return values[:index] + values[index + 1 :]

    return Changed(
        TableData(
            headers=remove(normalized.headers),
            alignments=remove(normalized.alignments),
            rows=tuple(remove(row) for row in normalized.rows),
        )
    )


def swap_columns(table: TableData, i: int, j: int) -> TableResult:
    """Swap header cell, alignment and every row's cell at ``i`` and ``j``.

    Swapping a column with itself still returns ``Changed`` with equal
    content.
    """
    width = table.column_count
    for index in (i, j):
        if not 0 <= index < width:
            return _refuse(table, f"column index {index} out of bounds")

    normalized = _normalized(table)

    def swap(values: tuple) -> tuple:
        items = list(values)
        items[i], items[j] = items[j], items[i]
        return tuple(items)

    return Changed(
        TableData(
            headers=swap(normalized.headers),
            alignments=swap(normalized.alignments),
            rows=tuple(swap(row) for row in normalized.rows),
        )
    )


def update_column_alignment(
    table: TableData, index: int, alignment: Alignment
) -> TableResult:
    """Set one column's alignment. Out-of-bounds ``index`` is refused."""
    normalized = _normalized(table)
    if not 0 <= index < len(normalized.alignments):
        return _refuse(table, f"column index {index} out of bounds")

    alignments = list(normalized.alignments)
    alignments[index] = alignment
    return Changed(
        TableData(
            headers=normalized.headers,
            alignments=tuple(alignments),
            rows=normalized.rows,
        )
    )


__all__ = [
    "HEADER_ROW",
    "Changed",
    "InsertPosition",
    "TableResult",
    "Unchanged",
    "delete_column",
    "delete_row",
    "insert_column",
    "insert_row",
    "normalize_columns",
    "swap_columns",
    "swap_rows",
    "unwrap",
    "update_column_alignment",
]
