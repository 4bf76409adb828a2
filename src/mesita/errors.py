"""Exception classes for Mesita.

Provides standardized exceptions for programming errors at Mesita's API
boundary. Expected domain outcomes are NOT exceptions:

- text that is not a table parses to ``None``
- a refused structural operation returns ``Unchanged``
- an edit escaping the active cell is rejected (``Transaction.rejected``)
- a busy navigation lock makes ``acquire()`` return ``False``
"""

from __future__ import annotations


class MesitaError(Exception):
    """Base exception for all Mesita errors.

    Subclass this for specific error categories.
    """

    pass


class ChangeError(MesitaError, ValueError):
    """A change set is malformed.

    Raised when changes fall outside the document, have ``end < start``,
    or overlap one another.
    """

    def __init__(self, message: str, start: int | None = None, end: int | None = None) -> None:
        """Initialize change error with the offending range.

        Args:
            message: Error description
            start: Start offset of the offending change (optional)
            end: End offset of the offending change (optional)
        """
        self.message = message
        self.start = start
        self.end = end

        location = ""
        if start is not None:
            location = f" [{start}, {end if end is not None else start})"

        super().__init__(f"{message}{location}")


class SerializationError(MesitaError, ValueError):
    """Error reconstructing a model value from a dict or JSON payload."""

    pass


class CommandError(MesitaError, KeyError):
    """Unknown table command name."""

    def __init__(self, command_name: str, available: tuple[str, ...] = ()) -> None:
        """Initialize command error.

        Args:
            command_name: Name that failed to resolve
            available: Registered command names, for the message
        """
        self.command_name = command_name
        self.available = available
        listing = ", ".join(available)
        super().__init__(f"Unknown table command: {command_name!r}. Available: {listing}")

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the message readable.
        return str(self.args[0])
