"""Renderer boundary helpers for cell content.

A cell is rendered as standalone Markdown, outside its table. Two things
change at that boundary:

- ``\\|`` no longer needs escaping, so it is unescaped for display.
- Reference-style links (``[text][label]``) only resolve if the document's
  link reference definitions travel with the cell, so a definition block is
  appended when the cell could contain such a link.

The returned ``cache_key`` is the exact payload handed to the renderer, so
renderers can key their result cache on it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from mesita.tablemodel.locate import iter_unfenced_lines

_ESCAPED_PIPE_RE = re.compile(r"\\(\|)")
_DEFINITION_RE = re.compile(r"^ {0,3}\[((?:[^\]\\]|\\.)+)\]:[ \t]*(\S+)")
_LOOKS_LIKE_DEFINITION_RE = re.compile(r"^\s*\[[^\]]+\]:\s*\S")


@dataclass(frozen=True, slots=True)
class RenderableContent:
    """Cell content prepared for the renderer.

    Attributes:
        display_text: Unescaped cell text, for raw display while rendering
        cache_key: Payload to render (display text plus definitions, if any)

    """

    display_text: str
    cache_key: str


def unescape_pipes_for_rendering(text: str) -> str:
    r"""Turn ``\|`` back into ``|``.

    Example:
        >>> unescape_pipes_for_rendering(r"a \| b")
        'a | b'
    """
    return _ESCAPED_PIPE_RE.sub(r"\1", text)


def collect_definitions(doc: str) -> dict[str, str]:
    """Collect link reference definitions as lowercase label -> URL.

    The first definition of a label wins. Fenced code is skipped.
    """
    definitions: dict[str, str] = {}
    for line, _ in iter_unfenced_lines(doc):
        match = _DEFINITION_RE.match(line)
        if match is None:
            continue
        label = match.group(1).lower()
        definitions.setdefault(label, match.group(2))
    return definitions


def collect_definition_block(doc: str) -> str:
    """Build the Markdown definition block appended to cell payloads.

    Example:
        >>> collect_definition_block("See [x].\\n\\n[X]: https://example.com\\n")
        '[x]: https://example.com'
    """
    return "\n".join(f"[{label}]: {url}" for label, url in collect_definitions(doc).items())


def build_renderable_content(cell_text: str, definition_block: str) -> RenderableContent:
    """Build the display text and renderer payload for one cell.

    The definition block is appended only when the cell contains ``[`` and
    is not itself shaped like a definition. Empty cells render empty.
    """
    display_text = unescape_pipes_for_rendering(cell_text)
    append = (
        bool(display_text)
        and bool(definition_block)
        and "[" in display_text
        and _LOOKS_LIKE_DEFINITION_RE.match(display_text) is None
    )
    cache_key = f"{display_text}\n\n{definition_block}" if append else display_text
    return RenderableContent(display_text=display_text, cache_key=cache_key)


__all__ = [
    "RenderableContent",
    "build_renderable_content",
    "collect_definition_block",
    "collect_definitions",
    "unescape_pipes_for_rendering",
]
