"""Immutable editor state and transactions.

An ``EditorState`` is a snapshot: document text, selection, and the tracked
fields (active cell, isolated cell window). ``state.update(spec)`` never
mutates; it returns a ``Transaction`` holding both the start state and the
resulting state.

Admission:
Every spec passes through the state's transaction filters in order. A
filter returns the spec unchanged, a rewritten spec, or None to reject it.
A rejected spec is dropped wholesale: the transaction's resulting state is
the start state.

Selection:
An explicit selection in the (filtered) spec is used as-is, clamped to the
new document. Without one, the previous selection is mapped through the
changes with "land after inserted content" association.

"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field, replace

from mesita.editor.active_cell import update_active_cell, update_cell_range
from mesita.editor.changes import Change, ChangeSet, Selection
from mesita.editor.effects import (
    ClearActiveCell,
    Effect,
    RebuildTable,
    SetActiveCell,
    SetCellRange,
)
from mesita.model import ActiveCell, CellRange
from mesita.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class TransactionSpec:
    """A proposed edit.

    Attributes:
        changes: Replacements in start-document coordinates
        selection: Explicit resulting selection, or None to map the old one
        effects: State effects to apply
        sync: Cross-surface synchronization edit; bypasses admission rules
        user_event: Origin tag such as ``"input"``, ``"undo"``, ``"redo"``
        add_to_history: Whether the main surface records this edit for undo
        filter: Run transaction filters; history replay turns this off

    """

    changes: tuple[Change, ...] = ()
    selection: Selection | None = None
    effects: tuple[Effect, ...] = ()
    sync: bool = False
    user_event: str | None = None
    add_to_history: bool = True
    filter: bool = True

    @property
    def doc_changing(self) -> bool:
        return any(c.start != c.end or c.insert for c in self.changes)


TransactionFilter = Callable[["EditorState", TransactionSpec], TransactionSpec | None]


@dataclass(frozen=True, slots=True)
class Transaction:
    """The outcome of ``EditorState.update``."""

    start_state: EditorState
    spec: TransactionSpec
    changes: ChangeSet
    state: EditorState
    rejected: bool = False

    @property
    def effects(self) -> tuple[Effect, ...]:
        return self.spec.effects

    @property
    def sync(self) -> bool:
        return self.spec.sync

    @property
    def doc_changed(self) -> bool:
        return not self.changes.is_empty

    @property
    def selection_set(self) -> bool:
        return self.spec.selection is not None

    def is_user_event(self, name: str) -> bool:
        """Match ``user_event`` exactly or as a dotted prefix (``"input"``
        matches ``"input.paste"``)."""
        event = self.spec.user_event
        if event is None:
            return False
        return event == name or event.startswith(name + ".")

    @property
    def rebuild_targets(self) -> tuple[int, ...]:
        return tuple(e.table_from for e in self.effects if isinstance(e, RebuildTable))


@dataclass(frozen=True, slots=True)
class EditorState:
    """Snapshot of one editing surface."""

    doc: str
    selection: Selection = field(default_factory=lambda: Selection.cursor(0))
    active_cell: ActiveCell | None = None
    cell_range: CellRange | None = None
    filters: tuple[TransactionFilter, ...] = ()

    def slice(self, start: int, end: int) -> str:
        return self.doc[start:end]

    def update(self, spec: TransactionSpec) -> Transaction:
        """Admit ``spec`` and compute the resulting state."""
        admitted: TransactionSpec | None = spec
        filters = self.filters if spec.filter else ()
        for admit in filters:
            admitted = admit(self, admitted)
            if admitted is None:
                logger.debug("Transaction rejected by %s", getattr(admit, "__name__", admit))
                return Transaction(
                    start_state=self,
                    spec=spec,
                    changes=ChangeSet.empty(len(self.doc)),
                    state=self,
                    rejected=True,
                )

        changes = ChangeSet.of(admitted.changes, len(self.doc))
        doc = changes.apply(self.doc) if changes.changes else self.doc

        if admitted.selection is not None:
            selection = admitted.selection.clamp(0, len(doc))
        else:
            selection = self.selection.map(changes, assoc=1)

        draft = Transaction(start_state=self, spec=admitted, changes=changes, state=self)
        state = replace(
            self,
            doc=doc,
            selection=selection,
            active_cell=update_active_cell(self.active_cell, draft),
            cell_range=update_cell_range(self.cell_range, draft),
        )
        return replace(draft, state=state)


__all__ = [
    "ClearActiveCell",
    "EditorState",
    "Effect",
    "RebuildTable",
    "SetActiveCell",
    "SetCellRange",
    "Transaction",
    "TransactionFilter",
    "TransactionSpec",
]
