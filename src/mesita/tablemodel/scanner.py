"""Delimiter scanner for one Markdown table row.

All cell-boundary logic goes through ``scan_table_row``; nothing else in
Mesita splits on ``|`` by hand. The scanner is deliberately more forgiving
than a full Markdown parser so that temporarily malformed rows (mid-edit)
still yield usable boundaries.

Rules, in priority order:

1. A backslash escapes exactly the next character. Runs of backslashes pair
   up: ``\\\\|`` is a literal backslash followed by a delimiter.
2. A run of N backticks opens a code span that closes at the next run of
   exactly N backticks. Inside the span, pipes are not delimiters and
   backslashes are literal.
3. A backtick run with no matching closer is literal text; scanning
   continues normally after it.

Thread Safety:
Pure function over its input, safe to call from any thread.

"""

from __future__ import annotations


def scan_table_row(line: str) -> tuple[int, ...]:
    """Return offsets of the unescaped pipe delimiters in ``line``.

    No trimming is performed; leading and trailing pipes are reported like
    any other delimiter.

    Args:
        line: One line of table text (without its newline)

    Returns:
        Ascending tuple of delimiter offsets

    Example:
        >>> scan_table_row("| a | b | c |")
        (0, 4, 8, 12)
        >>> scan_table_row("| a\\\\|b | c |")
        (0, 7, 11)
    """
    delimiters: list[int] = []
    pos = 0
    line_len = len(line)

    while pos < line_len:
        char = line[pos]

        if char == "\\":
            # Skip the escaped character (if any)
            pos += 2
            continue

        if char == "`":
            run_start = pos
            while pos < line_len and line[pos] == "`":
                pos += 1
            run_len = pos - run_start

            close_pos = _find_code_span_close(line, pos, run_len)
            if close_pos != -1:
                pos = close_pos + run_len
            # Unmatched run: literal, keep scanning after it
            continue

        if char == "|":
            delimiters.append(pos)
        pos += 1

    return tuple(delimiters)


def _find_code_span_close(line: str, start: int, run_len: int) -> int:
    """Find the closing backtick run of exactly ``run_len`` backticks.

    Returns the offset of the closing run, or -1 if there is none.
    """
    pos = start
    line_len = len(line)
    while True:
        idx = line.find("`", pos)
        if idx == -1:
            return -1
        count = 0
        check_pos = idx
        while check_pos < line_len and line[check_pos] == "`":
            count += 1
            check_pos += 1
        if count == run_len:
            return idx
        pos = check_pos
