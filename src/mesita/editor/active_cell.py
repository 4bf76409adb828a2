"""Active cell state transitions.

States are ``None`` (inactive) and an ``ActiveCell``. A transaction moves
between them in this order:

1. The first ``SetActiveCell`` or ``ClearActiveCell`` effect wins outright.
   A set cell is already in new-document coordinates and is not mapped.
2. An undo/redo that changes table structure, or touches text outside the
   previously active cell, deactivates it. A stale pointer into a rebuilt
   table is never kept.
3. Otherwise the cell is mapped through the document changes, with
   insertions exactly at ``cell_from`` extending the cell backward and at
   ``cell_to`` extending it forward. A mapping that breaks the ordering
   invariant deactivates.

The isolated editor's cell window follows the same
association rule independently.
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from mesita.editor.changes import ChangeSet
from mesita.editor.effects import ClearActiveCell, SetActiveCell, SetCellRange
from mesita.model import ActiveCell, CellRange
from mesita.tablemodel.structural import is_structural_change

if TYPE_CHECKING:
    from mesita.editor.state import Transaction


def map_active_cell(cell: ActiveCell, changes: ChangeSet) -> ActiveCell | None:
    """Map ``cell`` through ``changes``; None if the result is invalid."""
    if not changes.changes:
        return cell
    mapped = replace(
        cell,
        table_from=changes.map_pos(cell.table_from, -1),
        table_to=changes.map_pos(cell.table_to, 1),
        cell_from=changes.map_pos(cell.cell_from, -1),
        cell_to=changes.map_pos(cell.cell_to, 1),
    )
    return mapped if mapped.is_valid() else None


def map_cell_range(cell_range: CellRange, changes: ChangeSet) -> CellRange:
    """Map the isolated editor's cell window through ``changes``."""
    if not changes.changes:
        return cell_range
    start = changes.map_pos(cell_range.start, -1)
    end = changes.map_pos(cell_range.end, 1)
    return CellRange(start, max(start, end))


def _invalidated_by_history(cell: ActiveCell, tr: Transaction) -> bool:
    if not (tr.is_user_event("undo") or tr.is_user_event("redo")):
        return False
    if tr.changes.touches_outside(cell.cell_from, cell.cell_to):
        return True
    return is_structural_change(tr.start_state.doc, tr.changes)


def update_active_cell(value: ActiveCell | None, tr: Transaction) -> ActiveCell | None:
    """Compute the active cell after ``tr``."""
    for effect in tr.effects:
        if isinstance(effect, ClearActiveCell):
            return None
        if isinstance(effect, SetActiveCell):
            return effect.cell

    if value is None or not tr.doc_changed:
        return value

    if not tr.sync and _invalidated_by_history(value, tr):
        return None

    return map_active_cell(value, tr.changes)


def update_cell_range(value: CellRange | None, tr: Transaction) -> CellRange | None:
    """Compute the isolated editor's cell window after ``tr``."""
    for effect in tr.effects:
        if isinstance(effect, SetCellRange):
            return effect.range

    if value is None or not tr.doc_changed:
        return value
    return map_cell_range(value, tr.changes)


__all__ = ["map_active_cell", "map_cell_range", "update_active_cell", "update_cell_range"]
