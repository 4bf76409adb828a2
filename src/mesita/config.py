"""ContextVar-based editor configuration for Mesita.

Provides thread-local configuration using Python's ContextVars (PEP 567).
Every component reads the active config at call time, so a host can scope a
different line-break marker or lock timeout to one editor without touching
module state.

Usage:
    from mesita.config import EditorConfig, editor_config_context

    with editor_config_context(EditorConfig(line_break_marker="<br/>")):
        session.type_in_cell("a\\nb")  # inserts "a<br/>b"

"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class EditorConfig:
    """Immutable editor configuration.

    Attributes:
        line_break_marker: Inline marker that replaces newlines typed or
            pasted into a cell
        navigation_lock_timeout: Seconds before a held navigation lock is
            force-released
        separator_dashes: Dashes per separator cell when serializing
            (never fewer than three)
        parse_cache_size: Capacity of the LRU table parse cache
        new_table_columns: Column count of a freshly inserted table

    """

    line_break_marker: str = "<br>"
    navigation_lock_timeout: float = 1.0
    separator_dashes: int = 3
    parse_cache_size: int = 50
    new_table_columns: int = 2

    @classmethod
    def from_dict(cls, config_dict: dict) -> "EditorConfig":
        """Create EditorConfig from dictionary.

        Only includes keys that are valid EditorConfig fields; unknown keys
        are silently ignored.

        Args:
            config_dict: Dictionary with config values. Keys should match
                EditorConfig attribute names.

        Returns:
            New EditorConfig instance with values from dict.

        Example:
            >>> config = EditorConfig.from_dict({
            ...     "line_break_marker": "<br/>",
            ...     "unknown_key": "ignored",
            ... })
            >>> config.line_break_marker
            '<br/>'

        """
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in config_dict.items() if k in valid_fields}
        return cls(**filtered)


# Module-level default config (reused, never recreated)
_DEFAULT_CONFIG: EditorConfig = EditorConfig()

_editor_config: ContextVar[EditorConfig] = ContextVar(
    "editor_config",
    default=_DEFAULT_CONFIG,
)


def get_editor_config() -> EditorConfig:
    """Get current editor configuration (thread-local)."""
    return _editor_config.get()


def set_editor_config(config: EditorConfig) -> None:
    """Set editor configuration for current context.

    Args:
        config: EditorConfig instance to use for this context.

    """
    _editor_config.set(config)


def reset_editor_config() -> None:
    """Reset to default configuration."""
    _editor_config.set(_DEFAULT_CONFIG)


@contextmanager
def editor_config_context(config: EditorConfig) -> Iterator[None]:
    """Context manager for temporary config changes.

    Args:
        config: EditorConfig to use within the context.

    Yields:
        None

    Example:
        >>> with editor_config_context(EditorConfig(separator_dashes=5)):
        ...     get_editor_config().separator_dashes
        5

    """
    previous = _editor_config.get()
    _editor_config.set(config)
    try:
        yield
    finally:
        _editor_config.set(previous)


__all__ = [
    "EditorConfig",
    "editor_config_context",
    "get_editor_config",
    "reset_editor_config",
    "set_editor_config",
]
