"""Content-addressed table parse cache.

Table text is parsed on every activation, command and navigation step, and
most of those hit the same few tables. Parsed ``TableData`` values are
immutable, so they are cached under the SHA256 of the table text (see
``hash_table_text``). Each entry keeps the text it was parsed from, and a hit
is only used when that text matches.

Thread Safety:
    LRUTableParseCache is not thread-safe. Sessions own one cache each and
    are driven from a single thread.

Example:
    >>> cache = LRUTableParseCache(capacity=2)
    >>> first = parse_table_cached("| a |\\n| --- |", cache)
    >>> parse_table_cached("| a |\\n| --- |", cache) is first
    True
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from typing import Protocol

from mesita.config import get_editor_config
from mesita.model import TableData
from mesita.tablemodel.parsing import parse_table
from mesita.utils.hashing import hash_table_text
from mesita.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class CachedTable:
    """A parsed table and the text it was parsed from."""

    text: str
    table: TableData


class TableParseCache(Protocol):
    """Protocol for table parse caches keyed by ``hash_table_text``."""

    def get(self, key: str) -> CachedTable | None:
        """Return the cached entry if present, else None."""
        ...

    def put(self, key: str, entry: CachedTable) -> None:
        """Store a parsed entry."""
        ...


class LRUTableParseCache:
    """Bounded least-recently-used parse cache.

    Capacity defaults to the active config's ``parse_cache_size``.
    """

    __slots__ = ("_capacity", "_data")

    def __init__(self, capacity: int | None = None) -> None:
        if capacity is None:
            capacity = get_editor_config().parse_cache_size
        if capacity < 1:
            raise ValueError(f"Cache capacity must be positive, got {capacity}")
        self._capacity = capacity
        self._data: OrderedDict[str, CachedTable] = OrderedDict()

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: str) -> bool:
        return key in self._data

    def get(self, key: str) -> CachedTable | None:
        entry = self._data.get(key)
        if entry is not None:
            self._data.move_to_end(key)
        return entry

    def put(self, key: str, entry: CachedTable) -> None:
        self._data[key] = entry
        self._data.move_to_end(key)
        while len(self._data) > self._capacity:
            evicted, _ = self._data.popitem(last=False)
            logger.debug("Parse cache evicted %s", evicted)

    def clear(self) -> None:
        self._data.clear()


def parse_table_cached(text: str, cache: TableParseCache | None = None) -> TableData | None:
    """Parse ``text``, consulting ``cache`` first.

    Texts that are not tables are not cached. An entry stored under the
    same key for different text is replaced.
    """
    if cache is None:
        return parse_table(text)

    key = hash_table_text(text)
    cached = cache.get(key)
    if cached is not None:
        if cached.text == text:
            logger.debug("Parse cache hit %s", key)
            return cached.table
        logger.debug("Parse cache key %s holds different text; reparsing", key)

    table = parse_table(text)
    if table is not None:
        cache.put(key, CachedTable(text, table))
    return table


__all__ = ["CachedTable", "LRUTableParseCache", "TableParseCache", "parse_table_cached"]
