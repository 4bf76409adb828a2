"""State effects carried by transactions.

Effects are explicit instructions attached to a transaction, applied by the
state fields that understand them:

- ``SetActiveCell`` / ``ClearActiveCell``: active cell transitions
- ``SetCellRange``: replace the isolated editor's cell window outright
- ``RebuildTable``: the rendered table at ``table_from`` must be rebuilt
  (marks a whole-table rewrite the guard lets through)
"""

from __future__ import annotations

from dataclasses import dataclass

from mesita.model import ActiveCell, CellRange, table_id


@dataclass(frozen=True, slots=True)
class SetActiveCell:
    cell: ActiveCell


@dataclass(frozen=True, slots=True)
class ClearActiveCell:
    pass


@dataclass(frozen=True, slots=True)
class SetCellRange:
    range: CellRange


@dataclass(frozen=True, slots=True)
class RebuildTable:
    table_from: int

    @property
    def table_id(self) -> str:
        """Opaque identity of the table to rebuild."""
        return table_id(self.table_from)


Effect = SetActiveCell | ClearActiveCell | SetCellRange | RebuildTable


__all__ = ["ClearActiveCell", "Effect", "RebuildTable", "SetActiveCell", "SetCellRange"]
