"""Header-aware row and column semantics.

Translates "current cell + intent" into table manipulation calls. The rules
that differ from plain body-row manipulation all concern the header:

- Insert before the header: a new empty header is created and the old
  header becomes the first body row (header content is never destroyed).
- Insert after the header: a new empty first body row, header untouched.
- Delete the header: the first body row is promoted; refused when that
  would leave no body rows.
- Move the header down: swap with the first body row. Moving it up is
  always refused.
- Move body row 0 up: swap into the header position.

Thread Safety:
All functions are pure, safe to call from any thread.

"""

from __future__ import annotations

from typing import Literal

from mesita.model import ActiveCell, CellCoords, TableData
from mesita.tablemodel.manipulation import (
    HEADER_ROW,
    Changed,
    InsertPosition,
    TableResult,
    Unchanged,
    delete_row,
    insert_row,
    normalize_columns,
    swap_columns,
    swap_rows,
)
from mesita.utils.logger import get_logger

logger = get_logger(__name__)

CellLike = CellCoords | ActiveCell
RowDirection = Literal["up", "down"]
ColumnDirection = Literal["left", "right"]


def _refuse(table: TableData, reason: str) -> Unchanged:
    logger.debug("Command refused: %s", reason)
    return Unchanged(table, reason)


def insert_row_for_cell(
    table: TableData, cell: CellLike, where: InsertPosition
) -> TableResult:
    """Insert a row relative to the cell's row.

    Example:
        >>> table = TableData(("H1", "H2"), (None, None), (("R1", "R2"),))
        >>> result = insert_row_for_cell(table, CellCoords("header", 0, 0), "before")
        >>> result.table.headers, result.table.rows
        (('', ''), (('H1', 'H2'), ('R1', 'R2')))
    """
    if cell.section != "header":
        return insert_row(table, cell.row, where)

    normalized = normalize_columns(table).table
    empty = ("",) * normalized.column_count
    if where == "after":
        return Changed(
            TableData(
                headers=normalized.headers,
                alignments=normalized.alignments,
                rows=(empty, *normalized.rows),
            )
        )
    return Changed(
        TableData(
            headers=empty,
            alignments=normalized.alignments,
            rows=(normalized.headers, *normalized.rows),
        )
    )


def delete_row_for_cell(table: TableData, cell: CellLike) -> TableResult:
    """Delete the cell's row, promoting the first body row for a header."""
    if cell.section != "header":
        return delete_row(table, cell.row)

    if len(table.rows) <= 1:
        return _refuse(table, "deleting the header would leave no body rows")

    normalized = normalize_columns(table).table
    return Changed(
        TableData(
            headers=normalized.rows[0],
            alignments=normalized.alignments,
            rows=normalized.rows[1:],
        )
    )


def move_row_for_cell(
    table: TableData, cell: CellLike, direction: RowDirection
) -> TableResult:
    """Move the cell's row one step, treating the header as row -1."""
    if not table.rows:
        return _refuse(table, "table has no body rows")

    current = HEADER_ROW if cell.section == "header" else cell.row
    if direction == "up":
        if current == HEADER_ROW:
            return _refuse(table, "cannot move the header up")
        target = current - 1
    else:
        if current == len(table.rows) - 1:
            return _refuse(table, "cannot move the last row down")
        target = current + 1

    return swap_rows(table, current, target)


def move_column_for_cell(
    table: TableData, cell: CellLike, direction: ColumnDirection
) -> TableResult:
    """Move the cell's column one step left or right."""
    width = table.column_count
    if width <= 1:
        return _refuse(table, "table has a single column")

    if direction == "left":
        if cell.col == 0:
            return _refuse(table, "cannot move the first column left")
        target = cell.col - 1
    else:
        if cell.col == width - 1:
            return _refuse(table, "cannot move the last column right")
        target = cell.col + 1

    return swap_columns(table, cell.col, target)


__all__ = [
    "CellLike",
    "ColumnDirection",
    "RowDirection",
    "delete_row_for_cell",
    "insert_row_for_cell",
    "move_column_for_cell",
    "move_row_for_cell",
]
