"""Replacement records and their application to a source buffer.

All replacements for one file are computed against the original, never
modified buffer. Applying them from the highest begin offset down keeps
every pending range valid: a splice only shifts bytes that lie after it,
and everything after it has already been rewritten.

Example:
    >>> apply_replacements(b"local x = 1; x", [
    ...     Replacement(6, 7, "_p_x"),
    ...     Replacement(13, 14, "_p_x"),
    ... ])
    b'local _p_x = 1; _p_x'
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True)
class Replacement:
    """A pending edit of the original source.

    Attributes:
        begin_offset: First byte of the replaced range.
        end_offset: Byte just past the replaced range.
        new_value: Text written in place of the range.
    """

    begin_offset: int
    end_offset: int
    new_value: str

    def __post_init__(self) -> None:
        if self.begin_offset > self.end_offset:
            raise ValueError(
                f"Replacement begins after it ends: "
                f"{self.begin_offset} > {self.end_offset}"
            )


def apply_replacements(source: bytes, replacements: Iterable[Replacement]) -> bytes:
    """Apply every replacement to ``source`` and return the new buffer.

    Args:
        source: The original buffer all offsets refer to.
        replacements: Non-overlapping edits, in any order.

    Returns:
        The rewritten buffer. ``source`` itself is left untouched.
    """
    ordered = sorted(replacements, key=lambda rep: rep.begin_offset, reverse=True)

    out = source
    limit = len(source)
    for rep in ordered:
        # overlapping edits mean the collectors are broken
        assert rep.end_offset <= limit, f"overlapping replacement at {rep.begin_offset}"
        out = out[:rep.begin_offset] + rep.new_value.encode("utf-8") + out[rep.end_offset:]
        limit = rep.begin_offset
    return out
