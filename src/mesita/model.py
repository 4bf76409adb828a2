"""Typed value objects for Mesita.

All model types are frozen dataclasses with slots:
- Immutability: every manipulation produces a new value, nothing is shared
  and mutated behind a caller's back
- Equality: structural comparison works out of the box (round-trip tests)
- Pattern matching: Python 3.10+ match statements work naturally

Offsets are 0-based character offsets. Ranges are half-open ``[start, end)``;
a zero-width range (``start == end``) is an insertion point.

Thread Safety:
All values are frozen (immutable) and safe to share across threads.

"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

Alignment = Literal["left", "center", "right"] | None
TableSection = Literal["header", "body"]

ALIGNMENTS: tuple[Alignment, ...] = ("left", "center", "right", None)


# =============================================================================
# Structural table model
# =============================================================================


@dataclass(frozen=True, slots=True)
class TableData:
    """Structural view of one Markdown pipe table.

    Headers are unique by position, not by value. As parsed, rows may be
    ragged (tolerant of malformed source); manipulation normalizes first.

    Markdown:
        | A | B |
        | :--- | ---: |
        | 1 | 2 |

    Model:
        TableData(headers=("A", "B"), alignments=("left", "right"),
                  rows=(("1", "2"),))

    """

    headers: tuple[str, ...]
    alignments: tuple[Alignment, ...]
    rows: tuple[tuple[str, ...], ...] = ()

    @property
    def column_count(self) -> int:
        """Effective width: max of header, alignment and longest row lengths."""
        width = max(len(self.headers), len(self.alignments))
        for row in self.rows:
            width = max(width, len(row))
        return width

    @property
    def is_normalized(self) -> bool:
        """True when headers, alignments and every row share one width."""
        width = self.column_count
        return (
            len(self.headers) == width
            and len(self.alignments) == width
            and all(len(row) == width for row in self.rows)
        )


# =============================================================================
# Source ranges
# =============================================================================


@dataclass(frozen=True, slots=True)
class CellRange:
    """Half-open ``[start, end)`` offset range of one cell's trimmed text.

    Offsets are relative to whatever text the range was computed from (table
    text for the range computer, the whole document once resolved).

    """

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(f"CellRange start {self.start} is after end {self.end}")

    @property
    def is_empty(self) -> bool:
        return self.start == self.end

    def contains(self, pos: int) -> bool:
        """Inclusive containment: a cursor at either edge is inside the cell."""
        return self.start <= pos <= self.end

    def shifted(self, delta: int) -> CellRange:
        return CellRange(self.start + delta, self.end + delta)


@dataclass(frozen=True, slots=True)
class TableCellRanges:
    """Per-cell ranges for a whole table. Rows may be ragged."""

    headers: tuple[CellRange, ...]
    rows: tuple[tuple[CellRange, ...], ...] = ()


# =============================================================================
# Cell identity
# =============================================================================


@dataclass(frozen=True, slots=True)
class CellCoords:
    """Coordinates of a cell within a table.

    ``row`` is relative to its section; the header row is always row 0.

    """

    section: TableSection
    row: int
    col: int

    def __post_init__(self) -> None:
        if self.section == "header" and self.row != 0:
            object.__setattr__(self, "row", 0)


@dataclass(frozen=True, slots=True)
class ActiveCell:
    """The single cell currently targeted for isolated editing.

    Invariant: ``table_from <= cell_from <= cell_to <= table_to`` and
    ``row == 0`` whenever ``section == "header"``. Positions are absolute
    document offsets.

    """

    table_from: int
    table_to: int
    cell_from: int
    cell_to: int
    section: TableSection
    row: int
    col: int

    @property
    def coords(self) -> CellCoords:
        return CellCoords(self.section, self.row, self.col)

    @property
    def cell_range(self) -> CellRange:
        return CellRange(self.cell_from, self.cell_to)

    def is_valid(self) -> bool:
        """Check the ordering and header-row invariants."""
        if not 0 <= self.table_from <= self.cell_from <= self.cell_to <= self.table_to:
            return False
        return self.section == "body" or self.row == 0


def table_id(table_from: int) -> str:
    """Identity string for a table.

    Currently derived from the table's starting offset; callers should treat
    it as opaque so the derivation can change.
    """
    return str(table_from)


__all__ = [
    "ALIGNMENTS",
    "ActiveCell",
    "Alignment",
    "CellCoords",
    "CellRange",
    "TableCellRanges",
    "TableData",
    "TableSection",
    "table_id",
]
