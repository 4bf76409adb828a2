"""Tests for editor state, transactions and the active cell field."""

from mesita.editor.active_cell import map_active_cell, map_cell_range
from mesita.editor.changes import Change, ChangeSet, Selection
from mesita.editor.effects import ClearActiveCell, RebuildTable, SetActiveCell, SetCellRange
from mesita.editor.state import EditorState, TransactionSpec
from mesita.model import ActiveCell, CellRange, table_id

TABLE = "| A | B |\n| --- | --- |\n| 1 | 2 |"
CELL = ActiveCell(0, 33, 30, 31, "body", 0, 1)


def insert(pos: int, text: str, **kwargs: object) -> TransactionSpec:
    return TransactionSpec(changes=(Change(pos, pos, text),), **kwargs)  # type: ignore[arg-type]


class TestUpdate:
    """EditorState.update()."""

    def test_applies_changes(self) -> None:
        tr = EditorState("hello").update(insert(5, "!"))
        assert tr.state.doc == "hello!"
        assert tr.start_state.doc == "hello"
        assert tr.doc_changed

    def test_selection_lands_after_insertion(self) -> None:
        state = EditorState("ab", selection=Selection.cursor(1))
        assert state.update(insert(1, "XY")).state.selection == Selection.cursor(3)

    def test_explicit_selection_is_clamped(self) -> None:
        tr = EditorState("abc").update(TransactionSpec(selection=Selection(1, 99)))
        assert tr.state.selection == Selection(1, 3)
        assert tr.selection_set
        assert not tr.doc_changed

    def test_state_is_immutable(self) -> None:
        state = EditorState("abc")
        state.update(insert(0, "x"))
        assert state.doc == "abc"

    def test_doc_changing(self) -> None:
        assert not TransactionSpec(changes=(Change(1, 1, ""),)).doc_changing
        assert insert(1, "x").doc_changing


class TestFilters:
    """Transaction filters: accept, rewrite, reject."""

    def test_reject(self) -> None:
        state = EditorState("abc", filters=(lambda s, spec: None,))
        tr = state.update(insert(0, "x"))
        assert tr.rejected
        assert tr.state is state
        assert not tr.doc_changed

    def test_rewrite(self) -> None:
        def upper(state: EditorState, spec: TransactionSpec) -> TransactionSpec:
            changes = tuple(Change(c.start, c.end, c.insert.upper()) for c in spec.changes)
            return TransactionSpec(changes=changes)

        tr = EditorState("abc", filters=(upper,)).update(insert(3, "d"))
        assert tr.state.doc == "abcD"

    def test_filters_run_in_order(self) -> None:
        seen: list[str] = []

        def first(state: EditorState, spec: TransactionSpec) -> TransactionSpec:
            seen.append("first")
            return spec

        def second(state: EditorState, spec: TransactionSpec) -> TransactionSpec:
            seen.append("second")
            return spec

        EditorState("", filters=(first, second)).update(insert(0, "x"))
        assert seen == ["first", "second"]

    def test_filter_false_bypasses(self) -> None:
        state = EditorState("abc", filters=(lambda s, spec: None,))
        tr = state.update(insert(0, "x", filter=False))
        assert not tr.rejected
        assert tr.state.doc == "xabc"


class TestTransactionAccessors:
    """User events and effects."""

    def test_user_event_prefix(self) -> None:
        tr = EditorState("").update(insert(0, "x", user_event="input.paste"))
        assert tr.is_user_event("input")
        assert tr.is_user_event("input.paste")
        assert not tr.is_user_event("inp")
        assert not tr.is_user_event("undo")

    def test_rebuild_targets(self) -> None:
        tr = EditorState("").update(TransactionSpec(effects=(RebuildTable(7),)))
        assert tr.rebuild_targets == (7,)

    def test_rebuild_effect_identity(self) -> None:
        assert RebuildTable(7).table_id == table_id(7)
        assert RebuildTable(7).table_id != RebuildTable(8).table_id


class TestActiveCellField:
    """Active cell transitions."""

    def state(self) -> EditorState:
        return EditorState(TABLE, active_cell=CELL)

    def test_insert_at_cell_start_extends_backward(self) -> None:
        cell = self.state().update(insert(30, "x")).state.active_cell
        assert cell is not None
        assert (cell.cell_from, cell.cell_to, cell.table_to) == (30, 32, 34)

    def test_insert_at_cell_end_extends_forward(self) -> None:
        cell = self.state().update(insert(31, "x")).state.active_cell
        assert cell is not None
        assert (cell.cell_from, cell.cell_to) == (30, 32)

    def test_insert_before_table_shifts(self) -> None:
        cell = self.state().update(insert(0, "# t\n")).state.active_cell
        assert cell is not None
        assert cell.table_from == 0
        assert (cell.cell_from, cell.cell_to) == (34, 35)

    def test_set_effect_wins(self) -> None:
        other = ActiveCell(0, 33, 2, 3, "header", 0, 0)
        tr = self.state().update(insert(30, "x", effects=(SetActiveCell(other),)))
        assert tr.state.active_cell == other

    def test_clear_effect(self) -> None:
        tr = self.state().update(TransactionSpec(effects=(ClearActiveCell(),)))
        assert tr.state.active_cell is None

    def test_first_effect_wins(self) -> None:
        tr = self.state().update(
            TransactionSpec(effects=(ClearActiveCell(), SetActiveCell(CELL)))
        )
        assert tr.state.active_cell is None

    def test_undo_outside_cell_deactivates(self) -> None:
        spec = TransactionSpec(changes=(Change(2, 3, "Z"),), user_event="undo")
        assert self.state().update(spec).state.active_cell is None

    def test_structural_redo_inside_cell_deactivates(self) -> None:
        spec = TransactionSpec(changes=(Change(30, 31, "\n"),), user_event="redo")
        assert self.state().update(spec).state.active_cell is None

    def test_undo_of_cell_text_keeps_cell(self) -> None:
        spec = TransactionSpec(changes=(Change(30, 31, "Z"),), user_event="undo")
        assert self.state().update(spec).state.active_cell == CELL

    def test_ordinary_edit_outside_cell_maps(self) -> None:
        cell = self.state().update(
            TransactionSpec(changes=(Change(2, 3, "ZZ"),))
        ).state.active_cell
        assert cell is not None
        assert (cell.cell_from, cell.cell_to) == (31, 32)

    def test_map_active_cell_without_changes(self) -> None:
        assert map_active_cell(CELL, ChangeSet.empty(33)) is CELL


class TestCellRangeField:
    """The isolated editor's window."""

    def test_set_cell_range(self) -> None:
        state = EditorState(TABLE, cell_range=CellRange(30, 31))
        tr = state.update(TransactionSpec(effects=(SetCellRange(CellRange(2, 3)),)))
        assert tr.state.cell_range == CellRange(2, 3)

    def test_maps_like_the_active_cell(self) -> None:
        changes = ChangeSet.of([Change(30, 30, "a"), Change(31, 31, "b")], 33)
        assert map_cell_range(CellRange(30, 31), changes) == CellRange(30, 33)

    def test_collapsed_by_deletion(self) -> None:
        changes = ChangeSet.of([Change(24, 33, "")], 33)
        assert map_cell_range(CellRange(30, 31), changes) == CellRange(24, 24)
