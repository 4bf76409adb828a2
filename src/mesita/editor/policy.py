"""Sanitization policy for text entering a cell.

Cells live on a single line between pipes, so inserted text is rewritten
before it is committed:

1. Line breaks (``\\r\\n``, ``\\r``, ``\\n``) become the configured inline
   marker (``<br>`` by default).
2. Unescaped pipes become ``\\|``. Whether a pipe is already escaped is
   decided by the length of the backslash run before it, counted across the
   insertion boundary: backslashes already in the document right before the
   insertion point belong to the same run as backslashes in the inserted
   text. Backslashes are never escaped themselves.

Escaping is idempotent: text whose pipes are all escaped comes back
unchanged.

Example:
    >>> escape_unescaped_pipes("a|b")
    'a\\\\|b'
    >>> escape_unescaped_pipes("|", preceding_backslashes=1)
    '|'

"""

from __future__ import annotations

import re
from dataclasses import replace

from mesita.config import get_editor_config
from mesita.editor.changes import Change, ChangeSet, Selection
from mesita.editor.state import EditorState, TransactionFilter, TransactionSpec
from mesita.tablemodel.structural import alters_row_delimiters
from mesita.utils.logger import get_logger

logger = get_logger(__name__)

_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")


def convert_newlines(text: str, marker: str | None = None) -> str:
    """Replace every line break in ``text`` with ``marker``.

    ``marker`` defaults to the active config's ``line_break_marker``.
    """
    if marker is None:
        marker = get_editor_config().line_break_marker
    return _LINE_BREAK_RE.sub(marker, text)


def count_trailing_backslashes(doc: str, pos: int) -> int:
    """Count consecutive backslashes in ``doc`` ending right before ``pos``."""
    count = 0
    index = pos - 1
    while index >= 0 and doc[index] == "\\":
        count += 1
        index -= 1
    return count


def escape_unescaped_pipes(text: str, preceding_backslashes: int = 0) -> str:
    """Escape each pipe preceded by an even-length backslash run."""
    if "|" not in text:
        return text

    parts: list[str] = []
    run = preceding_backslashes
    for char in text:
        if char == "\\":
            run += 1
            parts.append(char)
            continue
        if char == "|" and run % 2 == 0:
            parts.append("\\|")
        else:
            parts.append(char)
        run = 0
    return "".join(parts)


def sanitize_insert(doc: str, pos: int, text: str) -> str:
    """Rewrite ``text`` for insertion into ``doc`` at ``pos``."""
    if "\n" in text or "\r" in text:
        text = convert_newlines(text)
    if "|" in text:
        text = escape_unescaped_pipes(text, count_trailing_backslashes(doc, pos))
    return text


def sanitize_changes(doc: str, changes: ChangeSet) -> tuple[tuple[Change, ...], bool]:
    """Sanitize every insert in ``changes``.

    Returns:
        ``(changes, rewritten)`` where ``rewritten`` is True if any insert
        differs from the original
    """
    sanitized = tuple(
        Change(c.start, c.end, sanitize_insert(doc, c.start, c.insert)) for c in changes
    )
    return sanitized, sanitized != changes.changes


def cursor_after_changes(changes: ChangeSet) -> Selection:
    """Cursor right after the last replacement, in new-document coordinates."""
    last = changes.changes[-1]
    return Selection.cursor(changes.map_pos(last.end, 1))


def admit_cell_edit(
    doc: str, spec: TransactionSpec, changes: ChangeSet
) -> TransactionSpec | None:
    """Sanitize an in-cell edit, or reject it if it would change the row's delimiters.

    A rewritten edit collapses the selection to a cursor after the last
    inserted text.
    """
    sanitized, rewritten = sanitize_changes(doc, changes)
    admitted = ChangeSet(sanitized, changes.doc_length) if rewritten else changes
    if alters_row_delimiters(doc, admitted):
        logger.debug("Cell edit rejected: would change the row's delimiters")
        return None
    if not rewritten:
        return spec
    return replace(spec, changes=sanitized, selection=cursor_after_changes(admitted))


def create_cell_transaction_filter() -> TransactionFilter:
    """Build the admission filter for the isolated cell editor.

    The filter reads the editor's cell window from ``state.cell_range``:

    - sync specs pass untouched
    - selection-only specs are clamped into the cell window
    - edits touching text outside the window are rejected
    - inserts are sanitized; a rewritten edit puts the cursor after the
      last inserted text
    - edits that would add or remove a delimiter on the row are rejected
    - an explicit selection is clamped into the mapped window

    """

    def cell_filter(state: EditorState, spec: TransactionSpec) -> TransactionSpec | None:
        if spec.sync:
            return spec

        cell_range = state.cell_range
        if cell_range is None:
            return spec

        if not spec.doc_changing:
            if spec.selection is None:
                return spec
            return replace(spec, selection=spec.selection.clamp(cell_range.start, cell_range.end))

        changes = ChangeSet.of(spec.changes, len(state.doc))
        if changes.touches_outside(cell_range.start, cell_range.end):
            logger.debug(
                "Cell edit rejected: outside [%d, %d]", cell_range.start, cell_range.end
            )
            return None

        admitted = admit_cell_edit(state.doc, spec, changes)
        if admitted is not spec or spec.selection is None:
            return admitted
        new_start = changes.map_pos(cell_range.start, -1)
        new_end = changes.map_pos(cell_range.end, 1)
        return replace(spec, selection=spec.selection.clamp(new_start, new_end))

    return cell_filter


__all__ = [
    "admit_cell_edit",
    "convert_newlines",
    "count_trailing_backslashes",
    "create_cell_transaction_filter",
    "cursor_after_changes",
    "escape_unescaped_pipes",
    "sanitize_changes",
    "sanitize_insert",
]
