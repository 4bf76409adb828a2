"""
Mesita: structural editing for Markdown pipe tables.

Mesita keeps a Markdown document as plain text and layers table-aware
editing over it: a parser and canonical serializer for pipe tables, exact
source offsets for every cell, header-aware row/column commands, and an
editor core that confines typing to one "active cell" without ever
corrupting the table's delimiter structure.

Quick Start:
    >>> from mesita import parse_table, serialize_table
    >>> table = parse_table("| a | b |\\n|:-|-:|\\n| 1 | 2 |")
    >>> table.alignments
    ('left', 'right')
    >>> print(serialize_table(table))
    | a | b |
    | :--- | ---: |
    | 1 | 2 |

    >>> # Or drive a whole editing session
    >>> from mesita import CellCoords, TableEditorSession
    >>> session = TableEditorSession("| a | b |\\n| --- | --- |\\n| 1 | 2 |")
    >>> session.activate_cell(0, CellCoords("body", 0, 0))
    True
    >>> session.run_command("insert_row_below")
    True
    >>> session.active_cell.coords
    CellCoords(section='body', row=1, col=0)

Installation:
    pip install mesita               # zero runtime dependencies
    pip install mesita[test]         # + pytest, hypothesis
"""

from mesita.cache import (
    CachedTable,
    LRUTableParseCache,
    TableParseCache,
    parse_table_cached,
)
from mesita.commands import (
    TABLE_COMMANDS,
    CommandOutcome,
    TableCommand,
    apply_command,
    get_command,
    new_table_text,
    next_cell_coords,
    register_command,
)
from mesita.config import (
    EditorConfig,
    editor_config_context,
    get_editor_config,
    reset_editor_config,
    set_editor_config,
)
from mesita.content import (
    RenderableContent,
    build_renderable_content,
    collect_definition_block,
    unescape_pipes_for_rendering,
)
from mesita.editor import (
    CellEditor,
    Change,
    ChangeSet,
    EditorState,
    NavigationLock,
    Selection,
    TableEditorSession,
    Transaction,
    TransactionSpec,
)
from mesita.errors import ChangeError, CommandError, MesitaError, SerializationError
from mesita.model import (
    ActiveCell,
    Alignment,
    CellCoords,
    CellRange,
    TableCellRanges,
    TableData,
    TableSection,
    table_id,
)
from mesita.serialization import from_dict, from_json, to_dict, to_json
from mesita.tablemodel import (
    Changed,
    ResolvedTable,
    TableResult,
    Unchanged,
    compute_cell_ranges,
    find_cell_at,
    find_tables,
    get_cell_range,
    parse_table,
    resolve_table_at,
    scan_table_row,
    serialize_table,
)

__version__ = "0.1.0"

__all__ = [
    # Model
    "ActiveCell",
    "Alignment",
    "CellCoords",
    "CellRange",
    "TableCellRanges",
    "TableData",
    "TableSection",
    "table_id",
    # Table model
    "Changed",
    "ResolvedTable",
    "TableResult",
    "Unchanged",
    "compute_cell_ranges",
    "find_cell_at",
    "find_tables",
    "get_cell_range",
    "parse_table",
    "resolve_table_at",
    "scan_table_row",
    "serialize_table",
    # Commands
    "TABLE_COMMANDS",
    "CommandOutcome",
    "TableCommand",
    "apply_command",
    "get_command",
    "new_table_text",
    "next_cell_coords",
    "register_command",
    # Editor
    "CellEditor",
    "Change",
    "ChangeSet",
    "EditorState",
    "NavigationLock",
    "Selection",
    "TableEditorSession",
    "Transaction",
    "TransactionSpec",
    # Configuration
    "EditorConfig",
    "editor_config_context",
    "get_editor_config",
    "reset_editor_config",
    "set_editor_config",
    # Cache
    "CachedTable",
    "LRUTableParseCache",
    "TableParseCache",
    "parse_table_cached",
    # Rendering boundary
    "RenderableContent",
    "build_renderable_content",
    "collect_definition_block",
    "unescape_pipes_for_rendering",
    # Serialization
    "from_dict",
    "from_json",
    "to_dict",
    "to_json",
    # Errors
    "ChangeError",
    "CommandError",
    "MesitaError",
    "SerializationError",
    # Version
    "__version__",
]
