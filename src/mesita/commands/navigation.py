"""Keyboard navigation between cells.

``next`` and ``previous`` move along the reading order (Tab / Shift-Tab),
wrapping between rows and across the header boundary. ``up`` and ``down``
move within the column. Navigation stops at the table edges: the result is
None and the caller keeps the current cell.
"""

from __future__ import annotations

from typing import Literal

from mesita.model import CellCoords, TableCellRanges

NavigationDirection = Literal["next", "previous", "up", "down"]


def next_cell_coords(
    ranges: TableCellRanges,
    current: CellCoords,
    direction: NavigationDirection,
) -> CellCoords | None:
    """Compute the cell reached by moving ``direction`` from ``current``.

    Column bounds come from the header width.

    Example:
        >>> from mesita.tablemodel.ranges import compute_cell_ranges
        >>> ranges = compute_cell_ranges("| a | b |\\n| - | - |\\n| 1 | 2 |")
        >>> next_cell_coords(ranges, CellCoords("header", 0, 1), "next")
        CellCoords(section='body', row=0, col=0)
    """
    col_count = len(ranges.headers)
    row_count = len(ranges.rows)
    section = current.section
    row = current.row
    col = current.col

    if direction == "next":
        col += 1
        if col >= col_count:
            col = 0
            if section == "header":
                section, row = "body", 0
            else:
                row += 1
    elif direction == "previous":
        col -= 1
        if col < 0:
            if section == "header":
                return None
            col = col_count - 1
            if row == 0:
                section = "header"
            else:
                row -= 1
    elif direction == "down":
        if section == "header":
            section, row = "body", 0
        else:
            row += 1
    else:
        if section == "header":
            return None
        if row == 0:
            section = "header"
        else:
            row -= 1

    if section == "body" and row >= row_count:
        return None
    return CellCoords(section, row, col)


__all__ = ["NavigationDirection", "next_cell_coords"]
