"""Span resolution and verification.

A span is the half-open byte range ``[begin, end)`` an identifier occupies
in the original source buffer. Spans are computed from parser locations
(1-indexed line/column pairs) through the line-offset index and are then
checked against the source text before any edit is accepted: parser
columns count characters while offsets count bytes, so a multi-byte
character earlier on the same line shifts the computed span.

Example:
    >>> source = b"local x = 1; x"
    >>> offsets = build_line_offsets(source)
    >>> span = resolve_span(offsets, 1, 7, 1, 8)
    >>> verify_span(source, span, "x")
    Span(begin=6, end=7)
"""

from __future__ import annotations

from typing import NamedTuple

from jsonnet_bundler.core.line_index import line_col_to_offset


class SpanMismatchError(ValueError):
    """Raised when a resolved span does not contain the expected identifier.

    Attributes:
        expected: Identifier that should have been found.
        actual: Text actually found at the span (decoded leniently).
        span: The offending span, or None when the location was unset.
    """

    def __init__(self, expected: str, actual: str, span: "Span | None") -> None:
        if span is None:
            message = f"no location available for '{expected}'"
        else:
            message = (
                f"span [{span.begin}:{span.end}] holds {actual!r}, "
                f"expected {expected!r}"
            )
        super().__init__(message)
        self.expected = expected
        self.actual = actual
        self.span = span


class Span(NamedTuple):
    """Half-open byte range in the original source buffer."""

    begin: int
    end: int


def resolve_span(
    line_offsets: list[int],
    begin_line: int,
    begin_column: int,
    end_line: int,
    end_column: int,
) -> Span:
    """Resolve a 1-indexed location pair to a byte span.

    Args:
        line_offsets: Table produced by ``build_line_offsets``.
        begin_line: 1-indexed line of the first character.
        begin_column: 1-indexed column of the first character.
        end_line: 1-indexed line of the end position.
        end_column: 1-indexed column just past the last character.

    Returns:
        The corresponding ``Span``.
    """
    begin = line_col_to_offset(line_offsets, begin_line - 1, begin_column - 1)
    end = line_col_to_offset(line_offsets, end_line - 1, end_column - 1)
    return Span(begin, end)


def verify_span(source: bytes, span: Span, expected: str) -> Span:
    """Check that ``source[span]`` is literally ``expected``.

    Returns:
        The span unchanged, so calls can be chained.

    Raises:
        SpanMismatchError: If the slice differs from the identifier.
    """
    found = source[span.begin:span.end]
    if found != expected.encode("utf-8"):
        raise SpanMismatchError(expected, found.decode("utf-8", errors="replace"), span)
    return span
