"""Utility modules for Mesita.

Provides:
- hashing: hash_str, hash_table_text for cache keys
- logger: get_logger for logging
"""

from mesita.utils.hashing import hash_str, hash_table_text
from mesita.utils.logger import get_logger

__all__ = [
    "get_logger",
    "hash_str",
    "hash_table_text",
]
