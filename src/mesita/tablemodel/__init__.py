"""Table model subsystem for Mesita.

Pure functions over table text and TableData, leaf-first:
- `scanner`: unescaped delimiter offsets in one row
- `ranges`: exact per-cell source ranges for a whole table
- `parsing`: table text <-> TableData
- `manipulation`: insert/delete/swap/align operations with tagged results
- `locate`: find tables inside a larger document
- `structural`: detect edits that change row/column topology

Example:
    >>> from mesita.tablemodel import parse_table, serialize_table
    >>> serialize_table(parse_table("|a|b|\\n|-|-|\\n|1|2|"))
    '| a | b |\\n| --- | --- |\\n| 1 | 2 |'

"""

from mesita.tablemodel.locate import (
    ResolvedTable,
    find_tables,
    resolve_table_at,
    trim_trailing_non_table_lines,
)
from mesita.tablemodel.manipulation import (
    HEADER_ROW,
    Changed,
    TableResult,
    Unchanged,
    delete_column,
    delete_row,
    insert_column,
    insert_row,
    normalize_columns,
    swap_columns,
    swap_rows,
    unwrap,
    update_column_alignment,
)
from mesita.tablemodel.parsing import (
    parse_alignment,
    parse_table,
    serialize_table,
    split_row,
)
from mesita.tablemodel.ranges import (
    compute_cell_ranges,
    find_cell_at,
    get_cell_range,
    is_separator_row,
    line_cell_ranges,
    resolve_cell_doc_range,
)
from mesita.tablemodel.scanner import scan_table_row
from mesita.tablemodel.structural import (
    alters_row_delimiters,
    has_unescaped_pipe,
    is_full_document_replace,
    is_structural_change,
)

__all__ = [
    # Scanner / ranges
    "scan_table_row",
    "compute_cell_ranges",
    "find_cell_at",
    "get_cell_range",
    "is_separator_row",
    "line_cell_ranges",
    "resolve_cell_doc_range",
    # Parsing
    "parse_alignment",
    "parse_table",
    "serialize_table",
    "split_row",
    # Manipulation
    "HEADER_ROW",
    "Changed",
    "TableResult",
    "Unchanged",
    "delete_column",
    "delete_row",
    "insert_column",
    "insert_row",
    "normalize_columns",
    "swap_columns",
    "swap_rows",
    "unwrap",
    "update_column_alignment",
    # Documents
    "ResolvedTable",
    "find_tables",
    "resolve_table_at",
    "trim_trailing_non_table_lines",
    "alters_row_delimiters",
    "has_unescaped_pipe",
    "is_full_document_replace",
    "is_structural_change",
]
