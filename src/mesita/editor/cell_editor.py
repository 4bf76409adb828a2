"""The isolated cell editor surface.

The cell editor mirrors the whole document but only admits edits inside
its cell window (``state.cell_range``), through the cell transaction
filter. It owns no history: local edits are forwarded to the main document
as sync transactions, and the main document's history covers them.

Main-document edits arrive here as sync transactions. The cell window is
mapped through them independently of the main document's active cell; the
two are expected to stay congruent.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Literal

from mesita.editor.changes import ChangeSet, Selection
from mesita.editor.effects import SetCellRange
from mesita.editor.policy import create_cell_transaction_filter
from mesita.editor.state import EditorState, Transaction, TransactionSpec
from mesita.errors import MesitaError
from mesita.model import CellRange

CursorPlacement = Literal["start", "end"]


class CellEditor:
    """Secondary editing surface for one cell."""

    __slots__ = ("_state",)

    def __init__(
        self, doc: str, cell_range: CellRange, cursor: CursorPlacement = "start"
    ) -> None:
        pos = cell_range.start if cursor == "start" else cell_range.end
        self._state = EditorState(
            doc=doc,
            selection=Selection.cursor(pos),
            cell_range=cell_range,
            filters=(create_cell_transaction_filter(),),
        )

    @property
    def state(self) -> EditorState:
        return self._state

    @property
    def doc(self) -> str:
        return self._state.doc

    @property
    def selection(self) -> Selection:
        return self._state.selection

    @property
    def cell_range(self) -> CellRange:
        cell_range = self._state.cell_range
        if cell_range is None:
            raise MesitaError("Cell editor state has no cell window")
        return cell_range

    @property
    def cell_text(self) -> str:
        cell_range = self.cell_range
        return self._state.slice(cell_range.start, cell_range.end)

    def dispatch(self, spec: TransactionSpec) -> Transaction:
        """Apply a local edit. Local edits never enter history."""
        tr = self._state.update(replace(spec, add_to_history=False))
        self._state = tr.state
        return tr

    def select(self, anchor: int, head: int | None = None) -> Transaction:
        """Move the selection; clamped into the cell window."""
        return self.dispatch(
            TransactionSpec(selection=Selection(anchor, anchor if head is None else head))
        )

    def apply_sync(
        self, changes: ChangeSet, cell_range: CellRange | None = None
    ) -> Transaction:
        """Apply main-document changes, optionally resetting the window."""
        effects = (SetCellRange(cell_range),) if cell_range is not None else ()
        tr = self._state.update(
            TransactionSpec(
                changes=changes.changes,
                effects=effects,
                sync=True,
                add_to_history=False,
            )
        )
        self._state = tr.state
        return tr


__all__ = ["CellEditor", "CursorPlacement"]
