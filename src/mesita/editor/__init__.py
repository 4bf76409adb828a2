"""Editor core for Mesita.

Provides:
- changes: change sets, position mapping, selections
- state: immutable editor state and transactions with admission filters
- active_cell: the active cell state field and its mapping rules
- policy: input sanitization and the cell editor's transaction filter
- guard: the main-document guard for the active cell
- navigation: the navigation lock
- cell_editor: the isolated cell editing surface
- session: the controller tying both surfaces, history and commands together
"""

from mesita.editor.active_cell import map_active_cell, update_active_cell
from mesita.editor.cell_editor import CellEditor, CursorPlacement
from mesita.editor.changes import Change, ChangeSet, Selection
from mesita.editor.effects import (
    ClearActiveCell,
    Effect,
    RebuildTable,
    SetActiveCell,
    SetCellRange,
)
from mesita.editor.guard import create_active_cell_guard
from mesita.editor.navigation import NavigationLock, Scheduler, ThreadingScheduler
from mesita.editor.policy import (
    convert_newlines,
    create_cell_transaction_filter,
    escape_unescaped_pipes,
    sanitize_insert,
)
from mesita.editor.session import HistoryEntry, TableEditorSession, on_navigation_complete
from mesita.editor.state import EditorState, Transaction, TransactionFilter, TransactionSpec

__all__ = [
    # Changes
    "Change",
    "ChangeSet",
    "Selection",
    # State
    "EditorState",
    "Transaction",
    "TransactionFilter",
    "TransactionSpec",
    # Effects
    "ClearActiveCell",
    "Effect",
    "RebuildTable",
    "SetActiveCell",
    "SetCellRange",
    # Active cell
    "map_active_cell",
    "update_active_cell",
    # Admission
    "convert_newlines",
    "create_active_cell_guard",
    "create_cell_transaction_filter",
    "escape_unescaped_pipes",
    "sanitize_insert",
    # Navigation
    "NavigationLock",
    "Scheduler",
    "ThreadingScheduler",
    # Surfaces
    "CellEditor",
    "CursorPlacement",
    "HistoryEntry",
    "TableEditorSession",
    "on_navigation_complete",
]
