"""End-to-end tests for TableEditorSession."""

import logging

import pytest

from mesita.config import EditorConfig, editor_config_context
from mesita.editor.changes import Change, Selection
from mesita.editor.session import TableEditorSession, on_navigation_complete
from mesita.editor.state import TransactionSpec
from mesita.errors import CommandError
from mesita.model import CellCoords, CellRange, TableData
from mesita.tablemodel.manipulation import Changed
from mesita.tablemodel.parsing import parse_table

# Cell "1" spans [26, 27), cell "2" spans [30, 31)
TABLE = "| A | B |\n| --- | --- |\n| 1 | 2 |"


def body(row: int, col: int) -> CellCoords:
    return CellCoords("body", row, col)


@pytest.fixture
def session(scheduler) -> TableEditorSession:
    return TableEditorSession(TABLE, scheduler=scheduler)


@pytest.fixture
def active(session: TableEditorSession) -> TableEditorSession:
    assert session.activate_cell(0, body(0, 1))
    return session


class TestActivation:
    """activate_cell() and friends."""

    def test_activate_cell(self, active: TableEditorSession) -> None:
        cell = active.active_cell
        assert cell is not None
        assert (cell.cell_from, cell.cell_to) == (30, 31)
        assert cell.coords == body(0, 1)
        assert active.cell_editor is not None
        assert active.cell_editor.cell_range == CellRange(30, 31)
        assert active.selection == Selection.cursor(30)
        assert not active.navigation_lock.locked

    def test_cursor_at_end(self, session: TableEditorSession) -> None:
        session.activate_cell(0, body(0, 1), "end")
        assert session.cell_editor is not None
        assert session.cell_editor.selection == Selection.cursor(31)

    def test_out_of_range_coords_are_clamped(self, session: TableEditorSession) -> None:
        assert session.activate_cell(0, body(9, 9))
        assert session.active_cell is not None
        assert session.active_cell.coords == body(0, 1)

    def test_no_table(self, session: TableEditorSession) -> None:
        session.switch_document("no table")
        assert not session.activate_cell(0, body(0, 0))
        assert not session.navigation_lock.locked

    def test_activate_cell_at_position(self, session: TableEditorSession) -> None:
        assert session.activate_cell_at(27)
        assert session.active_cell is not None
        assert session.active_cell.coords == body(0, 0)

    def test_activate_on_separator_falls_back_to_first_body_cell(
        self, session: TableEditorSession
    ) -> None:
        assert session.activate_cell_at(12)
        assert session.active_cell is not None
        assert session.active_cell.coords == body(0, 0)

    def test_activate_outside_tables(self, scheduler) -> None:
        session = TableEditorSession("intro\n\n" + TABLE, scheduler=scheduler)
        assert not session.activate_cell_at(2)
        assert session.active_cell is None

    def test_deactivate(self, active: TableEditorSession) -> None:
        active.deactivate()
        assert active.active_cell is None
        assert active.cell_editor is None


class TestNavigationLock:
    """Rapid navigation is serialized."""

    def test_request_during_navigation_is_dropped(self, session: TableEditorSession) -> None:
        assert session.activate_cell(0, body(0, 0), defer_release=True)
        assert not session.activate_cell(0, body(0, 1))
        assert session.active_cell is not None
        assert session.active_cell.coords == body(0, 0)

        session.complete_navigation()
        assert session.activate_cell(0, body(0, 1))

    def test_completion_callback(self, session: TableEditorSession) -> None:
        calls: list[str] = []
        session.activate_cell(0, body(0, 0), defer_release=True)
        on_navigation_complete(session, lambda: calls.append("done"))
        assert calls == []
        session.complete_navigation()
        assert calls == ["done"]

    def test_completion_callback_without_navigation(self, session: TableEditorSession) -> None:
        calls: list[str] = []
        on_navigation_complete(session, lambda: calls.append("now"))
        assert calls == ["now"]

    def test_stuck_navigation_times_out(
        self, session: TableEditorSession, scheduler, caplog: pytest.LogCaptureFixture
    ) -> None:
        session.activate_cell(0, body(0, 0), defer_release=True)
        with caplog.at_level(logging.WARNING, logger="mesita"):
            scheduler.fire_all()
        assert not session.navigation_lock.locked
        assert "timed out" in caplog.text
        assert session.activate_cell(0, body(0, 1))


class TestNavigate:
    """navigate()."""

    def test_tab_order(self, scheduler) -> None:
        session = TableEditorSession(TABLE, scheduler=scheduler)
        session.activate_cell(0, CellCoords("header", 0, 1))
        assert session.navigate("next")
        assert session.active_cell is not None
        assert session.active_cell.coords == body(0, 0)
        assert session.cell_editor is not None
        assert session.cell_editor.cell_text == "1"

    def test_edge_keeps_cell(self, active: TableEditorSession) -> None:
        assert not active.navigate("next")
        assert not active.navigate("down")
        assert active.active_cell is not None
        assert active.active_cell.coords == body(0, 1)

    def test_up_into_header(self, active: TableEditorSession) -> None:
        assert active.navigate("up", "end")
        assert active.active_cell is not None
        assert active.active_cell.coords == CellCoords("header", 0, 1)
        assert active.cell_editor is not None
        assert active.cell_editor.selection == Selection.cursor(7)

    def test_without_active_cell(self, session: TableEditorSession) -> None:
        assert not session.navigate("next")


class TestTyping:
    """Edits in the cell editor reach the document."""

    def test_typing_syncs_both_surfaces(self, active: TableEditorSession) -> None:
        active.type_in_cell("x")
        assert active.doc == TABLE.replace("| 2 |", "| x2 |")
        assert active.cell_editor is not None
        assert active.cell_editor.doc == active.doc
        assert active.active_cell is not None
        assert active.active_cell.cell_range == CellRange(30, 32)
        assert active.check_congruence()

    def test_typed_pipe_is_escaped(self, active: TableEditorSession) -> None:
        active.type_in_cell("|x")
        assert active.doc.splitlines()[-1] == "| 1 | \\|x2 |"
        table = parse_table(active.doc)
        assert table is not None
        assert table.rows == (("1", "\\|x2"),)
        assert active.cell_editor is not None
        assert active.cell_editor.selection == Selection.cursor(33)

    def test_newline_becomes_marker(self, active: TableEditorSession) -> None:
        with editor_config_context(EditorConfig(line_break_marker="<br/>")):
            active.type_in_cell("a\nb")
        assert active.doc.splitlines()[-1] == "| 1 | a<br/>b2 |"

    def test_replaces_selection(self, active: TableEditorSession) -> None:
        assert active.cell_editor is not None
        active.cell_editor.select(30, 31)
        active.type_in_cell("two")
        assert active.doc.endswith("| two |")

    def test_cursor_lands_after_text_typed_over_selection(
        self, active: TableEditorSession
    ) -> None:
        assert active.cell_editor is not None
        active.cell_editor.select(30, 31)
        active.type_in_cell("x")
        assert active.cell_editor.selection == Selection.cursor(31)

        active.cell_editor.select(30, 31)
        active.type_in_cell("|")
        assert active.doc.endswith("| \\| |")
        assert active.cell_editor.selection == Selection.cursor(32)
        assert active.check_congruence()

    def test_unescaping_a_pipe_is_rejected(self, scheduler) -> None:
        doc = "| A | B |\n| --- | --- |\n| a\\|b | 2 |"
        session = TableEditorSession(doc, scheduler=scheduler)
        session.activate_cell(0, body(0, 0))

        tr = session.dispatch_cell(TransactionSpec(changes=(Change(27, 28, ""),)))
        assert tr is not None and tr.rejected
        assert session.cell_editor is not None
        session.cell_editor.select(27)
        typed = session.type_in_cell("\\")
        assert typed is not None and typed.rejected
        assert session.doc == doc

        table = parse_table(session.doc)
        assert table is not None
        assert table.rows == (("a\\|b", "2"),)

    def test_no_cell_editor(self, session: TableEditorSession) -> None:
        assert session.type_in_cell("x") is None
        assert session.dispatch_cell(TransactionSpec()) is None

    def test_cell_edit_outside_window_rejected(self, active: TableEditorSession) -> None:
        tr = active.dispatch_cell(TransactionSpec(changes=(Change(0, 1, ""),)))
        assert tr is not None
        assert tr.rejected
        assert active.doc == TABLE


class TestMainDocumentGuard:
    """Direct main-document edits while a cell is being edited."""

    def test_outside_edit_rejected(self, active: TableEditorSession) -> None:
        tr = active.dispatch(TransactionSpec(changes=(Change(0, 1, ""),)))
        assert tr.rejected
        assert active.doc == TABLE

    def test_inside_edit_synced_to_cell_editor(self, active: TableEditorSession) -> None:
        tr = active.dispatch(TransactionSpec(changes=(Change(31, 31, "|"),)))
        assert not tr.rejected
        assert active.doc.endswith("| 2\\| |")
        assert active.cell_editor is not None
        assert active.cell_editor.doc == active.doc
        assert active.check_congruence()

    def test_edits_allowed_when_no_cell_editor(self, session: TableEditorSession) -> None:
        tr = session.dispatch(TransactionSpec(changes=(Change(0, 0, "# T\n\n"),)))
        assert not tr.rejected
        assert session.doc.startswith("# T")

    def test_divergence_is_reported(
        self, active: TableEditorSession, caplog: pytest.LogCaptureFixture
    ) -> None:
        assert active.cell_editor is not None
        # Bypass forwarding on purpose
        active.cell_editor.dispatch(TransactionSpec(changes=(Change(30, 30, "q"),)))
        with caplog.at_level(logging.WARNING, logger="mesita"):
            assert not active.check_congruence()
        assert "diverged" in caplog.text


class TestCommands:
    """run_command() and friends."""

    def test_insert_row_below(self, active: TableEditorSession) -> None:
        assert active.run_command("insert_row_below")
        assert active.doc == TABLE + "\n|  |  |"
        cell = active.active_cell
        assert cell is not None
        assert cell.coords == body(1, 1)
        assert (cell.cell_from, cell.cell_to) == (39, 39)
        assert active.cell_editor is not None
        assert active.cell_editor.cell_range == CellRange(39, 39)
        assert active.check_congruence()

    def test_typing_after_command(self, active: TableEditorSession) -> None:
        active.run_command("insert_row_below")
        active.type_in_cell("new")
        assert active.doc.splitlines()[-1] == "|  | new |"

    def test_refused_command(self, active: TableEditorSession) -> None:
        assert not active.run_command("delete_row")
        assert active.doc == TABLE
        assert active.active_cell is not None

    def test_unknown_command(self, active: TableEditorSession) -> None:
        with pytest.raises(CommandError):
            active.run_command("no_such_command")

    def test_without_active_cell(self, session: TableEditorSession) -> None:
        assert not session.run_command("insert_row_below")

    def test_table_after_other_content(self, scheduler) -> None:
        session = TableEditorSession("# Title\n\n" + TABLE + "\n\nafter", scheduler=scheduler)
        assert session.activate_cell(9, CellCoords("header", 0, 0))
        assert session.run_command("insert_column_left")
        assert session.doc.startswith("# Title\n\n|  | A | B |")
        assert session.doc.endswith("\n\nafter")
        assert session.active_cell is not None
        assert session.active_cell.coords == CellCoords("header", 0, 0)

    def test_run_table_operation(self, active: TableEditorSession) -> None:
        def replace_headers(table: TableData, cell: CellCoords) -> Changed:
            return Changed(TableData(("X", "Y"), table.alignments, table.rows))

        assert active.run_table_operation(replace_headers, lambda c, o, n: c)
        assert active.doc.startswith("| X | Y |")

    def test_insert_row_at_bottom(self, active: TableEditorSession) -> None:
        assert active.insert_row_at_bottom(0)
        assert active.active_cell is not None
        assert active.active_cell.coords == body(1, 0)

    def test_table_data_uses_cache(self, session: TableEditorSession) -> None:
        first = session.table_data_at(5)
        assert first is not None
        assert session.table_data_at(5) is first
        assert session.table_data_at(len(TABLE) + 5) is None

    def test_tables(self, session: TableEditorSession) -> None:
        assert [t.start for t in session.tables()] == [0]


class TestInsertTable:
    """insert_table()."""

    def test_insert_into_empty_document(self, scheduler) -> None:
        session = TableEditorSession("", scheduler=scheduler)
        assert session.insert_table(0)
        assert session.doc == "\n|  |  |\n| --- | --- |\n|  |  |\n"
        cell = session.active_cell
        assert cell is not None
        assert cell.coords == CellCoords("header", 0, 0)
        assert cell.cell_from == 3

    def test_insert_at_cursor(self, scheduler) -> None:
        session = TableEditorSession("text", scheduler=scheduler)
        session.dispatch(TransactionSpec(selection=Selection.cursor(4)))
        assert session.insert_table()
        assert session.doc.startswith("text\n|  |  |")


class TestHistory:
    """undo() / redo()."""

    def test_undo_text_edit_keeps_cell(self, active: TableEditorSession) -> None:
        active.type_in_cell("x")
        assert active.undo() is not None
        assert active.doc == TABLE
        cell = active.active_cell
        assert cell is not None
        assert cell.cell_range == CellRange(30, 31)
        assert active.check_congruence()

    def test_undo_structural_command_reactivates_at_cursor(
        self, active: TableEditorSession
    ) -> None:
        active.run_command("insert_row_below")
        active.undo()
        assert active.doc == TABLE
        cell = active.active_cell
        assert cell is not None
        assert cell.coords == body(0, 1)
        assert active.cell_editor is not None
        assert active.check_congruence()

    def test_redo(self, active: TableEditorSession) -> None:
        active.run_command("insert_row_below")
        active.undo()
        active.redo()
        assert active.doc == TABLE + "\n|  |  |"
        assert active.active_cell is not None
        assert active.active_cell.coords == body(1, 1)

    def test_new_edit_clears_redo(self, active: TableEditorSession) -> None:
        active.type_in_cell("x")
        active.undo()
        assert active.can_redo
        active.type_in_cell("y")
        assert not active.can_redo

    def test_empty_history(self, session: TableEditorSession) -> None:
        assert session.undo() is None
        assert session.redo() is None

    def test_unrecorded_edit_clears_history(self, session: TableEditorSession) -> None:
        session.dispatch(TransactionSpec(changes=(Change(0, 0, "a"),)))
        assert session.can_undo
        session.dispatch(TransactionSpec(changes=(Change(0, 0, "b"),), add_to_history=False))
        assert not session.can_undo

    def test_activation_is_not_recorded(self, active: TableEditorSession) -> None:
        assert not active.can_undo


class TestModes:
    """Raw text mode and document switching."""

    def test_raw_mode(self, active: TableEditorSession) -> None:
        active.edit_as_raw_text()
        assert active.raw_mode
        assert active.active_cell is None
        assert not active.activate_cell(0, body(0, 0))
        # The whole document is editable again
        assert not active.dispatch(TransactionSpec(changes=(Change(0, 0, "intro\n\n"),))).rejected

        active.exit_raw_mode()
        assert active.activate_cell_at(9)
        assert active.active_cell is not None
        assert active.active_cell.coords == CellCoords("header", 0, 0)

    def test_switch_document(self, session: TableEditorSession) -> None:
        session.activate_cell(0, body(0, 0), defer_release=True)
        session.type_in_cell("x")
        session.switch_document("| n |\n| --- |\n| 1 |")
        assert not session.navigation_lock.locked
        assert session.active_cell is None
        assert session.cell_editor is None
        assert not session.can_undo
        assert session.activate_cell(0, CellCoords("header", 0, 0))


class TestQueuedEdits:
    """flush() ordering."""

    def test_main_edits_flush_before_cell_edits(self, active: TableEditorSession) -> None:
        active.queue_cell(TransactionSpec(changes=(Change(30, 30, "c"),)))
        active.queue_main(TransactionSpec(changes=(Change(30, 30, "M"),)))
        results = active.flush()

        assert len(results) == 2
        assert active.doc.endswith("| Mc2 |")
        assert active.check_congruence()

    def test_cell_edit_rebased_past_main_insertion(self, active: TableEditorSession) -> None:
        active.queue_cell(TransactionSpec(changes=(Change(31, 31, "!"),)))
        active.queue_main(TransactionSpec(changes=(Change(30, 30, "pre"),)))
        active.flush()
        assert active.doc.endswith("| pre2! |")

    def test_sequential_cell_edits(self, active: TableEditorSession) -> None:
        active.queue_cell(TransactionSpec(changes=(Change(30, 30, "a"),)))
        active.queue_cell(TransactionSpec(changes=(Change(32, 32, "b"),)))
        active.queue_main(TransactionSpec(changes=(Change(31, 31, "M"),)))
        active.flush()
        assert active.doc.endswith("| a2Mb |")

    def test_cell_edits_dropped_without_editor(self, session: TableEditorSession) -> None:
        session.queue_cell(TransactionSpec(changes=(Change(30, 30, "c"),)))
        assert session.flush() == []
        assert session.doc == TABLE
