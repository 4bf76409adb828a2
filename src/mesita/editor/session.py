"""Editor session: the main document, the isolated cell editor, and history.

``TableEditorSession`` is the controller a host embeds. It owns:

- the main ``EditorState`` (guarded by the active cell guard)
- at most one ``CellEditor`` for the active cell
- the ``NavigationLock`` serializing cell activation
- a table parse cache
- undo/redo history for the main document

Two surfaces, one document:
Edits made in the cell editor are applied there first (through the cell
filter), then forwarded to the main document as sync transactions. Edits
made on the main document are forwarded to the cell editor as sync
transactions. Both surfaces hold the full text; after every commit the
cell editor's window is expected to match the active cell.

Ordering:
Edits can be queued on either surface and applied with ``flush()``. All
queued main edits are applied before any queued cell edit; cell edits are
rebased through the main edits applied ahead of them, and text inserted by
the main document at the same position stays first.

Example:
    >>> session = TableEditorSession("| a | b |\\n| --- | --- |\\n| 1 | 2 |")
    >>> session.activate_cell(0, CellCoords("body", 0, 1))
    True
    >>> session.type_in_cell("|x") is not None
    True
    >>> session.doc.splitlines()[-1]
    '| 1 | \\\\|x2 |'

Thread Safety:
Not thread-safe. Drive a session from one thread; only the navigation
lock's timeout may fire elsewhere.

"""

from __future__ import annotations

from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, replace

from mesita.cache import LRUTableParseCache, TableParseCache, parse_table_cached
from mesita.commands.navigation import NavigationDirection, next_cell_coords
from mesita.commands.table_commands import (
    Operation,
    TableCommand,
    TargetRule,
    apply_command,
    compute_active_cell_for_table_text,
    get_command,
    new_table_text,
)
from mesita.commands.table_commands import insert_row_at_bottom as _insert_row_at_bottom
from mesita.editor.cell_editor import CellEditor, CursorPlacement
from mesita.editor.changes import Change, ChangeSet, Selection
from mesita.editor.effects import ClearActiveCell, Effect, RebuildTable, SetActiveCell
from mesita.editor.guard import create_active_cell_guard
from mesita.editor.navigation import NavigationLock, Scheduler
from mesita.editor.state import EditorState, Transaction, TransactionSpec
from mesita.model import ActiveCell, CellCoords, TableData
from mesita.tablemodel.locate import ResolvedTable, find_tables, resolve_table_at
from mesita.tablemodel.ranges import compute_cell_ranges, find_cell_at
from mesita.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    """One undoable main-document edit."""

    changes: ChangeSet
    inverse: ChangeSet
    selection_before: Selection
    selection_after: Selection


class TableEditorSession:
    """Controller for structural table editing over one document.

    Args:
        doc: Initial document text
        scheduler: Timer source for the navigation lock timeout
        cache: Table parse cache; an LRU cache sized from config by default

    """

    def __init__(
        self,
        doc: str = "",
        *,
        scheduler: Scheduler | None = None,
        cache: TableParseCache | None = None,
    ) -> None:
        self._lock = NavigationLock(scheduler)
        self._cache: TableParseCache = cache if cache is not None else LRUTableParseCache()
        self._guard = create_active_cell_guard(self.is_cell_editor_open)
        self._state = EditorState(doc, filters=(self._guard,))
        self._cell_editor: CellEditor | None = None
        self._undo_stack: list[HistoryEntry] = []
        self._redo_stack: list[HistoryEntry] = []
        self._main_queue: deque[TransactionSpec] = deque()
        self._cell_queue: deque[TransactionSpec] = deque()
        self._raw_mode = False

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

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
    def active_cell(self) -> ActiveCell | None:
        return self._state.active_cell

    @property
    def cell_editor(self) -> CellEditor | None:
        return self._cell_editor

    @property
    def navigation_lock(self) -> NavigationLock:
        return self._lock

    @property
    def raw_mode(self) -> bool:
        return self._raw_mode

    @property
    def can_undo(self) -> bool:
        return bool(self._undo_stack)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo_stack)

    def is_cell_editor_open(self) -> bool:
        return self._cell_editor is not None

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    def dispatch(self, spec: TransactionSpec) -> Transaction:
        """Propose an edit on the main document."""
        tr = self._state.update(spec)
        if not tr.rejected:
            self._commit_main(tr)
        return tr

    def dispatch_cell(self, spec: TransactionSpec) -> Transaction | None:
        """Propose an edit on the cell editor.

        Returns None when no cell editor is open. Accepted document changes
        are forwarded to the main document as a sync transaction.
        """
        editor = self._cell_editor
        if editor is None:
            return None
        tr = editor.dispatch(spec)
        if tr.rejected or not tr.doc_changed:
            return tr
        main_tr = self._state.update(
            TransactionSpec(changes=tr.changes.changes, sync=True, user_event=spec.user_event)
        )
        self._commit_main(main_tr, from_cell=True)
        return tr

    def _commit_main(
        self, tr: Transaction, *, from_cell: bool = False, record: bool = True
    ) -> None:
        self._state = tr.state
        if record and tr.doc_changed:
            self._record(tr)
        self._sync_cell_editor(tr, from_cell=from_cell)

    def _record(self, tr: Transaction) -> None:
        if not tr.spec.add_to_history:
            # Stored offsets no longer line up with the document
            self._undo_stack.clear()
            self._redo_stack.clear()
            return
        self._undo_stack.append(
            HistoryEntry(
                changes=tr.changes,
                inverse=tr.changes.invert(tr.start_state.doc),
                selection_before=tr.start_state.selection,
                selection_after=tr.state.selection,
            )
        )
        self._redo_stack.clear()

    def _sync_cell_editor(self, tr: Transaction, *, from_cell: bool) -> None:
        editor = self._cell_editor
        if editor is None:
            return
        cell = self._state.active_cell
        if cell is None:
            self._close_cell_editor()
            return
        if tr.rebuild_targets or any(isinstance(e, SetActiveCell) for e in tr.effects):
            self._open_cell_editor(cell, "start")
            return
        if tr.doc_changed and not from_cell:
            editor.apply_sync(tr.changes)
        self.check_congruence()

    # -------------------------------------------------------------------------
    # Queued edits
    # -------------------------------------------------------------------------

    def queue_main(self, spec: TransactionSpec) -> None:
        self._main_queue.append(spec)

    def queue_cell(self, spec: TransactionSpec) -> None:
        """Queue a cell edit expressed against the document as it is now."""
        self._cell_queue.append(spec)

    def flush(self) -> list[Transaction]:
        """Apply queued edits: every main edit first, then cell edits.

        Each cell edit is rebased through the main edits that landed ahead
        of it. Cell edits queued while no cell editor is open, or once it
        has closed, are dropped.
        """
        results: list[Transaction] = []
        # Length of the document the queued cell edits were written against
        cell_length = len(self._state.doc)

        applied: list[ChangeSet] = []
        while self._main_queue:
            tr = self.dispatch(self._main_queue.popleft())
            results.append(tr)
            if not tr.rejected and tr.doc_changed:
                applied.append(tr.changes)

        while self._cell_queue:
            spec = self._cell_queue.popleft()
            if self._cell_editor is None:
                logger.debug("Dropping queued cell edit: no cell editor open")
                continue

            original = ChangeSet.of(spec.changes, cell_length)
            rebased = original
            selection = spec.selection
            transformed: list[ChangeSet] = []
            for main in applied:
                transformed.append(main.rebase(rebased, before=True))
                if selection is not None:
                    selection = selection.map(main, assoc=1)
                rebased = rebased.rebase(main, before=False)

            tr = self.dispatch_cell(replace(spec, changes=rebased.changes, selection=selection))
            if tr is None:
                continue
            results.append(tr)
            if not tr.rejected:
                cell_length = original.new_length
                applied = transformed

        return results

    # -------------------------------------------------------------------------
    # Cell activation and navigation
    # -------------------------------------------------------------------------

    def activate_cell(
        self,
        table_from: int,
        coords: CellCoords,
        cursor: CursorPlacement = "start",
        *,
        defer_release: bool = False,
    ) -> bool:
        """Make ``coords`` in the table at ``table_from`` the active cell.

        Takes the navigation lock; a request made while it is held is
        dropped and returns False. The lock is released when activation
        finishes, or left for ``complete_navigation()`` when
        ``defer_release`` is set. Out-of-range coordinates are clamped.
        """
        if self._raw_mode:
            return False
        if not self._lock.acquire():
            logger.debug("Cell activation dropped: navigation in progress")
            return False

        table = resolve_table_at(self._state.doc, table_from)
        cell = (
            compute_active_cell_for_table_text(table.start, table.text, coords)
            if table is not None
            else None
        )
        if cell is None:
            logger.debug("Cell activation failed: no table at %d", table_from)
            self._lock.release()
            return False

        self._close_cell_editor()
        self.dispatch(
            TransactionSpec(
                effects=(SetActiveCell(cell),),
                selection=Selection.cursor(cell.cell_from),
            )
        )
        self._open_cell_editor(cell, cursor)
        if not defer_release:
            self._lock.release()
        return True

    def activate_cell_at(self, pos: int, cursor: CursorPlacement = "start") -> bool:
        """Activate the cell containing ``pos``.

        A position on the separator row or outside every cell of the table
        activates the first body cell.
        """
        table = resolve_table_at(self._state.doc, pos)
        if table is None:
            return False
        ranges = compute_cell_ranges(table.text)
        if ranges is None:
            return False
        coords = find_cell_at(ranges, pos - table.start) or CellCoords("body", 0, 0)
        return self.activate_cell(table.start, coords, cursor)

    def complete_navigation(self) -> None:
        """Release a lock held by ``activate_cell(..., defer_release=True)``."""
        self._lock.release()

    def navigate(self, direction: NavigationDirection, cursor: CursorPlacement = "start") -> bool:
        """Move the active cell. Returns False at the table edges."""
        cell = self.active_cell
        if cell is None:
            return False
        table = resolve_table_at(self._state.doc, cell.cell_from)
        if table is None:
            return False
        ranges = compute_cell_ranges(table.text)
        if ranges is None:
            return False
        target = next_cell_coords(ranges, cell.coords, direction)
        if target is None:
            return False
        return self.activate_cell(table.start, target, cursor)

    def deactivate(self) -> None:
        """Close the cell editor and clear the active cell."""
        self._close_cell_editor()
        if self.active_cell is not None:
            self.dispatch(TransactionSpec(effects=(ClearActiveCell(),)))

    def edit_as_raw_text(self) -> None:
        """Leave structural editing; tables are edited as plain text."""
        self.deactivate()
        self._raw_mode = True

    def exit_raw_mode(self) -> None:
        self._raw_mode = False

    def switch_document(self, text: str) -> None:
        """Replace the document wholesale, dropping all per-document state."""
        self._lock.reset()
        self._close_cell_editor()
        self._main_queue.clear()
        self._cell_queue.clear()
        self._undo_stack.clear()
        self._redo_stack.clear()
        self._state = EditorState(text, filters=(self._guard,))

    def _open_cell_editor(self, cell: ActiveCell, cursor: CursorPlacement) -> None:
        self._cell_editor = CellEditor(self._state.doc, cell.cell_range, cursor)

    def _close_cell_editor(self) -> None:
        self._cell_editor = None

    # -------------------------------------------------------------------------
    # Structural commands
    # -------------------------------------------------------------------------

    def _parse(self, text: str) -> TableData | None:
        return parse_table_cached(text, self._cache)

    def run_command(self, command: str | TableCommand) -> bool:
        """Run a table command on the active cell's table.

        The whole table is replaced in one edit, the active cell moves to
        the command's target, and the cell editor reopens there.

        Raises:
            CommandError: If ``command`` names no registered command

        """
        if isinstance(command, str):
            command = get_command(command)
        cell = self.active_cell
        if cell is None:
            return False

        table_text = self._state.slice(cell.table_from, cell.table_to)
        outcome = apply_command(command, cell.table_from, table_text, cell.coords, parse=self._parse)
        if outcome is None:
            return False

        effects: list[Effect] = [SetActiveCell(outcome.active_cell)]
        if outcome.rebuild:
            rebuild = RebuildTable(outcome.table_from)
            logger.debug("Command %s rebuilds table %s", command.name, rebuild.table_id)
            effects.append(rebuild)
        self._close_cell_editor()
        tr = self.dispatch(
            TransactionSpec(
                changes=(Change(outcome.table_from, outcome.table_to, outcome.text),),
                selection=Selection.cursor(outcome.active_cell.cell_from),
                effects=tuple(effects),
                user_event="table.command",
            )
        )
        if self.active_cell is not None and not self._raw_mode:
            self._open_cell_editor(self.active_cell, "start")
        return not tr.rejected

    def run_table_operation(
        self, operation: Operation, target: TargetRule, *, rebuild: bool = True
    ) -> bool:
        """Run an ad-hoc operation with its target rule on the active table."""
        return self.run_command(TableCommand("custom", operation, target, rebuild))

    def insert_row_at_bottom(self, target_col: int) -> bool:
        return self.run_command(_insert_row_at_bottom(target_col))

    def insert_table(self, pos: int | None = None) -> bool:
        """Insert an empty table at ``pos`` (default: the cursor) and
        activate its first header cell."""
        self.deactivate()
        if pos is None:
            pos = self._state.selection.head
        tr = self.dispatch(
            TransactionSpec(
                changes=(Change(pos, pos, "\n" + new_table_text() + "\n"),),
                user_event="input.table",
            )
        )
        if tr.rejected:
            return False
        return self.activate_cell(pos + 1, CellCoords("header", 0, 0))

    def type_in_cell(self, text: str) -> Transaction | None:
        """Replace the cell editor's selection with ``text``.

        The cursor lands after the inserted text.
        """
        editor = self._cell_editor
        if editor is None:
            return None
        selection = editor.selection
        return self.dispatch_cell(
            TransactionSpec(
                changes=(Change(selection.start, selection.end, text),),
                selection=Selection.cursor(selection.start + len(text)),
                user_event="input.type",
            )
        )

    # -------------------------------------------------------------------------
    # History
    # -------------------------------------------------------------------------

    def undo(self) -> Transaction | None:
        if not self._undo_stack:
            return None
        entry = self._undo_stack.pop()
        tr = self._replay(entry.inverse, entry.selection_before, "undo")
        self._redo_stack.append(entry)
        return tr

    def redo(self) -> Transaction | None:
        if not self._redo_stack:
            return None
        entry = self._redo_stack.pop()
        tr = self._replay(entry.changes, entry.selection_after, "redo")
        self._undo_stack.append(entry)
        return tr

    def _replay(self, changes: ChangeSet, selection: Selection, event: str) -> Transaction:
        had_cell = self.active_cell is not None
        tr = self._state.update(
            TransactionSpec(
                changes=changes.changes,
                selection=selection,
                user_event=event,
                add_to_history=False,
                filter=False,
            )
        )
        self._commit_main(tr, record=False)
        if had_cell and self.active_cell is None and not self._raw_mode:
            # The edit reached outside the cell; reopen wherever the cursor is
            self.activate_cell_at(self._state.selection.head)
        return tr

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def tables(self) -> list[ResolvedTable]:
        return find_tables(self._state.doc)

    def table_data_at(self, pos: int) -> TableData | None:
        table = resolve_table_at(self._state.doc, pos)
        if table is None:
            return None
        return self._parse(table.text)

    def check_congruence(self) -> bool:
        """Check that the cell editor still mirrors the active cell.

        Logs a warning and returns False on divergence.
        """
        editor = self._cell_editor
        cell = self.active_cell
        if editor is None or cell is None:
            return True
        if editor.cell_range != cell.cell_range or editor.doc != self._state.doc:
            logger.warning(
                "Cell editor diverged from active cell: window %r, cell %r",
                editor.cell_range,
                cell.cell_range,
            )
            return False
        return True


def on_navigation_complete(session: TableEditorSession, callback: Callable[[], None]) -> None:
    """Run ``callback`` once the session's pending navigation completes.

    Runs it immediately when no navigation is in progress.
    """
    if session.navigation_lock.locked:
        session.navigation_lock.set_pending_callback(callback)
    else:
        callback()


__all__ = ["HistoryEntry", "TableEditorSession", "on_navigation_complete"]
