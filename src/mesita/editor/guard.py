"""Main-document guard for the active cell.

While the isolated cell editor is open, every edit proposed against the
main document must stay inside the active cell. This catches input that
reaches the main surface directly (platform focus quirks, context-menu
paste) and would otherwise delete delimiter pipes.

Let through untouched:
- specs that do not change the document
- sync specs forwarded from the cell editor
- anything while no cell editor is open or no cell is active
- whole-table rewrites carrying a ``RebuildTable`` effect

Everything else is rejected unless contained in ``[cell_from, cell_to]``,
and accepted inserts are sanitized like typing in the cell editor. Edits
that would add or remove a delimiter on the row are rejected as well.
"""

from __future__ import annotations

from collections.abc import Callable

from mesita.editor.changes import ChangeSet
from mesita.editor.effects import RebuildTable
from mesita.editor.policy import admit_cell_edit
from mesita.editor.state import EditorState, TransactionFilter, TransactionSpec
from mesita.utils.logger import get_logger

logger = get_logger(__name__)


def create_active_cell_guard(is_cell_editor_open: Callable[[], bool]) -> TransactionFilter:
    """Build the main-document guard.

    Args:
        is_cell_editor_open: Queried per spec; the guard is inert while it
            returns False
    """

    def active_cell_guard(state: EditorState, spec: TransactionSpec) -> TransactionSpec | None:
        if not spec.doc_changing or spec.sync:
            return spec
        if not is_cell_editor_open():
            return spec

        cell = state.active_cell
        if cell is None:
            return spec
        if any(isinstance(effect, RebuildTable) for effect in spec.effects):
            return spec

        changes = ChangeSet.of(spec.changes, len(state.doc))
        if changes.touches_outside(cell.cell_from, cell.cell_to):
            logger.debug(
                "Main edit rejected: outside active cell [%d, %d]", cell.cell_from, cell.cell_to
            )
            return None

        return admit_cell_edit(state.doc, spec, changes)

    return active_cell_guard


__all__ = ["create_active_cell_guard"]
