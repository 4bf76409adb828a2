"""Minimal logging utilities for Mesita.

Provides a simple get_logger function that wraps the standard library logging.
Mesita never installs handlers; the host application decides where records go.

Example:
    >>> from mesita.utils.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.warning("Navigation lock timed out - forcing release")
"""

from __future__ import annotations

import logging


def get_logger(name: str) -> logging.Logger:
    """Get a logger for the given name.

    Returns a standard library logger with the "mesita." prefix.

    Args:
        name: Logger name (typically __name__)

    Returns:
        logging.Logger instance

    Example:
        >>> logger = get_logger("session")
        >>> logger.name
        'mesita.session'
    """
    if not (name == "mesita" or name.startswith("mesita.")):
        name = f"mesita.{name}"
    return logging.getLogger(name)
