"""Command layer for Mesita.

Provides:
- semantics: header-aware row/column operations for the active cell
- table_commands: named commands with target-cell rules, and the function
  that applies them to table text
- navigation: Tab/arrow movement between cells
"""

from mesita.commands.navigation import NavigationDirection, next_cell_coords
from mesita.commands.semantics import (
    delete_row_for_cell,
    insert_row_for_cell,
    move_column_for_cell,
    move_row_for_cell,
)
from mesita.commands.table_commands import (
    TABLE_COMMANDS,
    CommandOutcome,
    TableCommand,
    apply_command,
    clamp_target_to_ranges,
    compute_active_cell_for_table_text,
    get_command,
    insert_row_at_bottom,
    new_table_text,
    register_command,
)

__all__ = [
    "TABLE_COMMANDS",
    "CommandOutcome",
    "NavigationDirection",
    "TableCommand",
    "apply_command",
    "clamp_target_to_ranges",
    "compute_active_cell_for_table_text",
    "delete_row_for_cell",
    "get_command",
    "insert_row_at_bottom",
    "insert_row_for_cell",
    "move_column_for_cell",
    "move_row_for_cell",
    "new_table_text",
    "next_cell_coords",
    "register_command",
]
