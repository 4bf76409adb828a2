"""Named table commands and their target-cell rules.

Each command pairs a header-aware operation with a rule for where the
active cell should land in the transformed table. Commands register
themselves by name:

    >>> command = get_command("insert_row_below")
    >>> command.target(CellCoords("header", 0, 1), None, None)
    CellCoords(section='body', row=0, col=1)

``apply_command`` runs a command against table text and returns the
replacement text plus the next active cell, ready to be dispatched as a
single whole-table edit.

"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from mesita.commands.semantics import (
    delete_row_for_cell,
    insert_row_for_cell,
    move_column_for_cell,
    move_row_for_cell,
)
from mesita.config import get_editor_config
from mesita.errors import CommandError
from mesita.model import ActiveCell, Alignment, CellCoords, TableCellRanges, TableData
from mesita.tablemodel.manipulation import (
    Changed,
    TableResult,
    delete_column,
    insert_column,
    update_column_alignment,
)
from mesita.tablemodel.parsing import MIN_SEPARATOR_DASHES, parse_table, serialize_table
from mesita.tablemodel.ranges import compute_cell_ranges, get_cell_range
from mesita.utils.logger import get_logger

logger = get_logger(__name__)

Operation = Callable[[TableData, CellCoords], TableResult]
TargetRule = Callable[[CellCoords, TableData, TableData], CellCoords]


@dataclass(frozen=True, slots=True)
class TableCommand:
    """A structural command: operation plus target-cell rule.

    Attributes:
        name: Registry name
        operation: Header-aware table operation
        target: Maps (old cell, old table, new table) to the next cell
        rebuild: Whether the rendered table must be rebuilt afterwards

    """

    name: str
    operation: Operation
    target: TargetRule
    rebuild: bool = True


@dataclass(frozen=True, slots=True)
class CommandOutcome:
    """Result of applying a command to one table's text."""

    table_from: int
    table_to: int
    text: str
    active_cell: ActiveCell
    rebuild: bool


# Registry of built-in commands
TABLE_COMMANDS: dict[str, TableCommand] = {}


def register_command(
    name: str, operation: Operation, *, rebuild: bool = True
) -> Callable[[TargetRule], TargetRule]:
    """Decorator registering ``operation`` with the decorated target rule.

    Usage:
        @register_command("delete_column", lambda t, c: delete_column(t, c.col))
        def _delete_column_target(cell, old, new):
            ...

    """

    def decorator(target: TargetRule) -> TargetRule:
        TABLE_COMMANDS[name] = TableCommand(name, operation, target, rebuild)
        return target

    return decorator


def get_command(name: str) -> TableCommand:
    """Get a registered command by name.

    Raises:
        CommandError: If the name is not registered

    """
    if name not in TABLE_COMMANDS:
        raise CommandError(name, tuple(sorted(TABLE_COMMANDS)))
    return TABLE_COMMANDS[name]


def _same_cell(cell: CellCoords, old: TableData, new: TableData) -> CellCoords:
    return cell


# =============================================================================
# Rows
# =============================================================================


@register_command("insert_row_above", lambda t, c: insert_row_for_cell(t, c, "before"))
def _insert_row_above_target(cell: CellCoords, old: TableData, new: TableData) -> CellCoords:
    # Header stays header: the new empty header takes its place
    return cell


@register_command("insert_row_below", lambda t, c: insert_row_for_cell(t, c, "after"))
def _insert_row_below_target(cell: CellCoords, old: TableData, new: TableData) -> CellCoords:
    if cell.section == "header":
        return CellCoords("body", 0, cell.col)
    return CellCoords("body", cell.row + 1, cell.col)


@register_command("delete_row", delete_row_for_cell)
def _delete_row_target(cell: CellCoords, old: TableData, new: TableData) -> CellCoords:
    # The row that slid into the deleted index; clamped later
    return cell


@register_command("move_row_up", lambda t, c: move_row_for_cell(t, c, "up"))
def _move_row_up_target(cell: CellCoords, old: TableData, new: TableData) -> CellCoords:
    if cell.row == 0:
        return CellCoords("header", 0, cell.col)
    return CellCoords("body", cell.row - 1, cell.col)


@register_command("move_row_down", lambda t, c: move_row_for_cell(t, c, "down"))
def _move_row_down_target(cell: CellCoords, old: TableData, new: TableData) -> CellCoords:
    if cell.section == "header":
        return CellCoords("body", 0, cell.col)
    return CellCoords("body", cell.row + 1, cell.col)


# =============================================================================
# Columns
# =============================================================================


@register_command("insert_column_left", lambda t, c: insert_column(t, c.col, "before"))
def _insert_column_left_target(cell: CellCoords, old: TableData, new: TableData) -> CellCoords:
    return cell


@register_command("insert_column_right", lambda t, c: insert_column(t, c.col, "after"))
def _insert_column_right_target(cell: CellCoords, old: TableData, new: TableData) -> CellCoords:
    return CellCoords(cell.section, cell.row, cell.col + 1)


@register_command("delete_column", lambda t, c: delete_column(t, c.col))
def _delete_column_target(cell: CellCoords, old: TableData, new: TableData) -> CellCoords:
    # Same index, now holding the column to the right; clamped later
    return cell


@register_command("move_column_left", lambda t, c: move_column_for_cell(t, c, "left"))
def _move_column_left_target(cell: CellCoords, old: TableData, new: TableData) -> CellCoords:
    return CellCoords(cell.section, cell.row, cell.col - 1)


@register_command("move_column_right", lambda t, c: move_column_for_cell(t, c, "right"))
def _move_column_right_target(cell: CellCoords, old: TableData, new: TableData) -> CellCoords:
    return CellCoords(cell.section, cell.row, cell.col + 1)


# =============================================================================
# Alignment and formatting
# =============================================================================


def _alignment_operation(alignment: Alignment) -> Operation:
    def operation(table: TableData, cell: CellCoords) -> TableResult:
        return update_column_alignment(table, cell.col, alignment)

    return operation


register_command("align_left", _alignment_operation("left"))(_same_cell)
register_command("align_center", _alignment_operation("center"))(_same_cell)
register_command("align_right", _alignment_operation("right"))(_same_cell)
register_command("align_none", _alignment_operation(None))(_same_cell)

# Always Changed, so the table is re-serialized in canonical form
register_command("format_table", lambda t, c: Changed(t))(_same_cell)


def insert_row_at_bottom(target_col: int) -> TableCommand:
    """Build a command that appends a row after the cell's row.

    The cursor lands in the new row at ``target_col``.
    """

    def target(cell: CellCoords, old: TableData, new: TableData) -> CellCoords:
        if cell.section == "header":
            return CellCoords("body", 0, target_col)
        return CellCoords("body", cell.row + 1, target_col)

    return TableCommand(
        name="insert_row_at_bottom",
        operation=lambda t, c: insert_row_for_cell(t, c, "after"),
        target=target,
    )


# =============================================================================
# Applying commands
# =============================================================================


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def clamp_target_to_ranges(target: CellCoords, ranges: TableCellRanges) -> CellCoords:
    """Clamp ``target`` into the cells that actually exist in ``ranges``.

    The column is clamped into the header width. A body target falls back
    to the header when there are no body rows, and ragged rows clamp the
    column again to the row's own length.
    """
    col_count = len(ranges.headers)
    col = _clamp(target.col, 0, col_count - 1) if col_count > 0 else 0

    if target.section == "header" or not ranges.rows:
        return CellCoords("header", 0, col)

    row = _clamp(target.row, 0, len(ranges.rows) - 1)
    row_col_count = len(ranges.rows[row])
    col = _clamp(col, 0, row_col_count - 1) if row_col_count > 0 else 0
    return CellCoords("body", row, col)


def compute_active_cell_for_table_text(
    table_from: int, table_text: str, target: CellCoords
) -> ActiveCell | None:
    """Build the ActiveCell for ``target`` inside ``table_text``.

    Returns None if ``table_text`` is not a valid table.
    """
    ranges = compute_cell_ranges(table_text)
    if ranges is None:
        return None

    clamped = clamp_target_to_ranges(target, ranges)
    relative = get_cell_range(ranges, clamped)
    if relative is None:
        return None

    return ActiveCell(
        table_from=table_from,
        table_to=table_from + len(table_text),
        cell_from=table_from + relative.start,
        cell_to=table_from + relative.end,
        section=clamped.section,
        row=clamped.row,
        col=clamped.col,
    )


def apply_command(
    command: TableCommand,
    table_from: int,
    table_text: str,
    cell: CellCoords,
    *,
    parse: Callable[[str], TableData | None] = parse_table,
) -> CommandOutcome | None:
    """Run ``command`` on one table's text.

    Returns None when the text is not a table, the operation is refused, or
    the target cell cannot be resolved in the new text.

    Args:
        parse: Table parser, e.g. a cached one
    """
    table = parse(table_text)
    if table is None:
        logger.debug("Command %s: text at %d is not a table", command.name, table_from)
        return None

    result = command.operation(table, cell)
    if not result.changed:
        return None

    new_text = serialize_table(result.table)
    target = command.target(cell, table, result.table)
    active_cell = compute_active_cell_for_table_text(table_from, new_text, target)
    if active_cell is None:
        logger.debug("Command %s: no target cell for %r", command.name, target)
        return None

    return CommandOutcome(
        table_from=table_from,
        table_to=table_from + len(table_text),
        text=new_text,
        active_cell=active_cell,
        rebuild=command.rebuild,
    )


def new_table_text(columns: int | None = None) -> str:
    """Text of an empty table with one header row and one body row.

    Example:
        >>> new_table_text()
        '|  |  |\\n| --- | --- |\\n|  |  |'
    """
    config = get_editor_config()
    count = max(1, columns if columns is not None else config.new_table_columns)
    rule = "-" * max(MIN_SEPARATOR_DASHES, config.separator_dashes)
    empty_row = "|" + "  |" * count
    separator = "| " + " | ".join([rule] * count) + " |"
    return "\n".join([empty_row, separator, empty_row])


__all__ = [
    "TABLE_COMMANDS",
    "CommandOutcome",
    "TableCommand",
    "apply_command",
    "clamp_target_to_ranges",
    "compute_active_cell_for_table_text",
    "get_command",
    "insert_row_at_bottom",
    "new_table_text",
    "register_command",
]
