"""Document changes and position mapping.

A ``ChangeSet`` is an ordered list of non-overlapping replacements, all in
the coordinates of the document they apply to. Positions tracked across an
edit (active cell bounds, cursor, the isolated editor's cell window) are
carried through it with ``ChangeSet.map_pos``.

Association:
``assoc`` decides which side of an edit a position sticks to when the edit
happens exactly at that position.

- ``assoc < 0``: stay before text inserted at ``pos``
- ``assoc > 0``: move after text inserted at ``pos``

A position inside a deleted range collapses to the start of the
replacement (``assoc < 0``) or its end (``assoc > 0``). The start of a
replaced range always maps to the start of the replacement, and its end to
the end of the replacement.

Example:
    >>> changes = ChangeSet.of([Change(5, 5, "xy")], doc_length=10)
    >>> changes.map_pos(5, assoc=-1), changes.map_pos(5, assoc=1)
    (5, 7)

"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from mesita.errors import ChangeError


@dataclass(frozen=True, slots=True)
class Change:
    """Replace ``[start, end)`` of the old document with ``insert``."""

    start: int
    end: int
    insert: str = ""

    @property
    def is_insertion(self) -> bool:
        return self.start == self.end

    @property
    def length_delta(self) -> int:
        return len(self.insert) - (self.end - self.start)


@dataclass(frozen=True, slots=True)
class ChangeSet:
    """Validated, sorted, non-overlapping changes against one document.

    Build with ``ChangeSet.of``; the constructor does not validate.

    """

    changes: tuple[Change, ...]
    doc_length: int

    @classmethod
    def of(cls, changes: Iterable[Change], doc_length: int) -> ChangeSet:
        """Validate and sort ``changes`` for a document of ``doc_length``.

        Raises:
            ChangeError: On out-of-document ranges, ``end < start``, or
                overlapping changes

        """
        ordered = sorted(changes, key=lambda c: (c.start, c.end))
        previous_end = 0
        for change in ordered:
            if change.end < change.start:
                raise ChangeError("Change ends before it starts", change.start, change.end)
            if change.start < 0 or change.end > doc_length:
                raise ChangeError(
                    f"Change outside document of length {doc_length}",
                    change.start,
                    change.end,
                )
            if change.start < previous_end:
                raise ChangeError("Overlapping changes", change.start, change.end)
            previous_end = change.end
        return cls(tuple(ordered), doc_length)

    @classmethod
    def empty(cls, doc_length: int) -> ChangeSet:
        return cls((), doc_length)

    def __iter__(self) -> Iterator[Change]:
        return iter(self.changes)

    def __len__(self) -> int:
        return len(self.changes)

    @property
    def is_empty(self) -> bool:
        """True when applying this set leaves every document unchanged."""
        return all(c.start == c.end and not c.insert for c in self.changes)

    @property
    def new_length(self) -> int:
        return self.doc_length + sum(c.length_delta for c in self.changes)

    def apply(self, doc: str) -> str:
        """Apply to ``doc`` (which must have ``doc_length`` characters)."""
        if len(doc) != self.doc_length:
            raise ChangeError(
                f"Change set expects a document of length {self.doc_length}, got {len(doc)}"
            )
        parts: list[str] = []
        pos = 0
        for change in self.changes:
            parts.append(doc[pos : change.start])
            parts.append(change.insert)
            pos = change.end
        parts.append(doc[pos:])
        return "".join(parts)

    def invert(self, doc: str) -> ChangeSet:
        """Build the change set that undoes this one.

        ``doc`` is the document this set applies to; the inverse applies to
        the result.
        """
        inverted: list[Change] = []
        delta = 0
        for change in self.changes:
            start = change.start + delta
            inverted.append(Change(start, start + len(change.insert), doc[change.start : change.end]))
            delta += change.length_delta
        return ChangeSet(tuple(inverted), self.new_length)

    def map_pos(self, pos: int, assoc: int = -1) -> int:
        """Map an old-document position into the new document."""
        delta = 0
        for change in self.changes:
            if change.start > pos:
                break
            length = change.end - change.start
            if change.end > pos or (change.end == pos and assoc < 0 and not length):
                new_start = change.start + delta
                if pos == change.start or assoc < 0:
                    return new_start
                return new_start + len(change.insert)
            delta += len(change.insert) - length
        return pos + delta

    def touches_outside(self, start: int, end: int) -> bool:
        """True if any change touches text outside ``[start, end]``."""
        return any(c.start < start or c.end > end for c in self.changes)

    def inserted_text(self) -> str:
        return "".join(c.insert for c in self.changes)

    def rebase(self, over: ChangeSet, *, before: bool) -> ChangeSet:
        """Re-express these changes after concurrent changes ``over``.

        Both sets must apply to the same document. Ranges never swallow
        text ``over`` inserted at their edges. A pure insertion at the same
        position as a concurrent one lands before it when ``before`` is
        True, after it otherwise.
        """
        insert_assoc = -1 if before else 1
        rebased: list[Change] = []
        # Changes collapsed by a concurrent deletion must not overlap
        floor = 0
        for change in self.changes:
            if change.is_insertion:
                pos = max(floor, over.map_pos(change.start, insert_assoc))
                rebased.append(Change(pos, pos, change.insert))
                floor = pos
                continue
            start = max(floor, over.map_pos(change.start, 1))
            end = max(start, over.map_pos(change.end, -1))
            rebased.append(Change(start, end, change.insert))
            floor = end
        return ChangeSet.of(rebased, over.new_length)


@dataclass(frozen=True, slots=True)
class Selection:
    """A single selection range; ``anchor == head`` is a cursor."""

    anchor: int
    head: int

    @classmethod
    def cursor(cls, pos: int) -> Selection:
        return cls(pos, pos)

    @property
    def start(self) -> int:
        return min(self.anchor, self.head)

    @property
    def end(self) -> int:
        return max(self.anchor, self.head)

    @property
    def empty(self) -> bool:
        return self.anchor == self.head

    def map(self, changes: ChangeSet, assoc: int = 1) -> Selection:
        return Selection(changes.map_pos(self.anchor, assoc), changes.map_pos(self.head, assoc))

    def clamp(self, start: int, end: int) -> Selection:
        """Clamp both ends into ``[start, end]``."""

        def clamp_pos(pos: int) -> int:
            return max(start, min(end, pos))

        return Selection(clamp_pos(self.anchor), clamp_pos(self.head))


__all__ = ["Change", "ChangeSet", "Selection"]
