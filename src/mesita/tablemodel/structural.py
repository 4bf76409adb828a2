"""Detect edits that change table topology.

A structural edit inserts or deletes a newline (row topology) or an
unescaped pipe (column topology). Anything else is an in-cell text edit.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from mesita.tablemodel.scanner import scan_table_row

if TYPE_CHECKING:
    from mesita.editor.changes import ChangeSet


def has_unescaped_pipe(text: str) -> bool:
    """Check if ``text`` contains a pipe not preceded by an odd backslash run.

    Example:
        >>> has_unescaped_pipe("a\\\\|b")
        False
        >>> has_unescaped_pipe("a\\\\\\\\|b")
        True
    """
    backslash_run = 0
    for char in text:
        if char == "\\":
            backslash_run += 1
            continue
        if char == "|" and backslash_run % 2 == 0:
            return True
        backslash_run = 0
    return False


def is_structural_change(doc: str, changes: ChangeSet) -> bool:
    """Check whether applying ``changes`` to ``doc`` alters table topology."""
    for change in changes:
        deleted = doc[change.start : change.end]
        if "\n" in deleted or "\n" in change.insert:
            return True
        if has_unescaped_pipe(deleted) or has_unescaped_pipe(change.insert):
            return True
    return False


def alters_row_delimiters(doc: str, changes: ChangeSet) -> bool:
    """Check whether ``changes`` add or remove a delimiter on a row they touch.

    Unlike ``is_structural_change`` this rescans the edited rows, so it also
    catches edits whose own text holds no pipe but that change how an
    existing pipe scans: deleting the backslash of ``\\|``, or typing a
    backslash right before it. Line breaks always count.

    Example:
        >>> from mesita.editor.changes import Change, ChangeSet
        >>> doc = "| a\\\\|b | 2 |"
        >>> alters_row_delimiters(doc, ChangeSet.of([Change(3, 4, "")], len(doc)))
        True
    """
    for change in changes:
        if "\n" in doc[change.start : change.end] or "\n" in change.insert:
            return True

    old_lines = doc.split("\n")
    new_lines = changes.apply(doc).split("\n")
    for index in {doc.count("\n", 0, change.start) for change in changes}:
        if len(scan_table_row(old_lines[index])) != len(scan_table_row(new_lines[index])):
            return True
    return False


def is_full_document_replace(doc: str, changes: ChangeSet) -> bool:
    """Check for a single change replacing all of ``doc`` (external reload)."""
    items = list(changes)
    if len(items) != 1:
        return False
    change = items[0]
    return change.start == 0 and change.end == len(doc)


__all__ = [
    "alters_row_delimiters",
    "has_unescaped_pipe",
    "is_full_document_replace",
    "is_structural_change",
]
