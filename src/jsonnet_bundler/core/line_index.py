"""Line-offset index for converting (line, column) pairs to byte offsets.

The table is built once per source buffer. Entry ``i`` is the byte offset
at which 0-indexed line ``i`` starts, so a lookup is a single addition.

Example:
    >>> offsets = build_line_offsets(b"local x = 1;\\nx\\n")
    >>> offsets
    [0, 13, 15]
    >>> line_col_to_offset(offsets, 1, 0)
    13
"""

from __future__ import annotations


def build_line_offsets(source: bytes) -> list[int]:
    """Return the start offset of every line in ``source``.

    The result always starts with 0 and has one more entry than there are
    newline bytes in the buffer.
    """
    offsets = [0]
    start = source.find(b"\n")
    while start != -1:
        offsets.append(start + 1)
        start = source.find(b"\n", start + 1)
    return offsets


def line_col_to_offset(line_offsets: list[int], line: int, col: int) -> int:
    """Convert a 0-indexed line and column to an absolute byte offset.

    Lines outside the table resolve to 0. Callers rely on span verification
    to reject whatever that produces.
    """
    if line < 0 or line >= len(line_offsets):
        return 0
    return line_offsets[line] + col
