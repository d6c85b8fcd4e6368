"""Source spans and line lookup.

Provides the Span dataclass used by every event, and LineIndex for mapping
offsets back to line numbers.

Offsets are indices into the Python ``str`` holding the source. Spans are
half-open: ``source[span.start:span.end]`` is the covered text.

Thread Safety:
Span is frozen (immutable) and LineIndex is read-only after construction,
so both are safe to share across threads.

"""

from __future__ import annotations

import re
from bisect import bisect_right
from dataclasses import dataclass

from pespunte.errors import SpanBoundsError

# Same line terminators markdown-it recognises after normalization
_LINE_BREAK = re.compile(r"\r\n?|\n")


@dataclass(frozen=True, slots=True)
class Span:
    """Half-open range ``[start, end)`` into the source text.

    Attributes:
        start: First covered offset
        end: One past the last covered offset

    Examples:
            >>> span = Span(2, 7)
            >>> "# Title\\n"[span.start:span.end]
            'Title'
            >>> span.length
            5

    """

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0 or self.end < self.start:
            raise ValueError(f"malformed span [{self.start}, {self.end})")

    @property
    def length(self) -> int:
        return self.end - self.start

    def __str__(self) -> str:
        return f"[{self.start}, {self.end})"

    @property
    def is_empty(self) -> bool:
        return self.start == self.end

    def contains(self, offset: int) -> bool:
        """Check whether an offset falls inside the span."""
        return self.start <= offset < self.end

    def cover(self, other: Span) -> Span:
        """Create the smallest span covering this span and other."""
        return Span(min(self.start, other.start), max(self.end, other.end))

    def check_within(self, length: int) -> None:
        """Raise SpanBoundsError unless the span fits a source of the given length."""
        if self.end > length:
            raise SpanBoundsError(self.start, self.end, length)

    @classmethod
    def empty_at(cls, offset: int) -> Span:
        """Create a zero-width span at offset."""
        return cls(offset, offset)


class LineIndex:
    """Offset to line-number lookup for one source text.

    Lines are 0-indexed. A line break belongs to the line it terminates,
    so the offset of ``"\\n"`` in ``"a\\nb"`` is on line 0.

    Usage:
            >>> index = LineIndex("# Title\\n\\nBody\\n")
            >>> index.line_of(0), index.line_of(7), index.line_of(9)
            (0, 0, 2)
            >>> index.line_start(2)
            9

    """

    __slots__ = ("_length", "_starts")

    def __init__(self, source: str) -> None:
        self._length = len(source)
        self._starts: list[int] = [0]
        self._starts.extend(m.end() for m in _LINE_BREAK.finditer(source))

    def __len__(self) -> int:
        """Number of line starts (a trailing line break opens an empty last line)."""
        return len(self._starts)

    def line_of(self, offset: int) -> int:
        """Return the line containing offset."""
        if offset < 0 or offset > self._length:
            raise SpanBoundsError(offset, offset, self._length, "offset")
        return bisect_right(self._starts, offset) - 1

    def line_start(self, line: int) -> int:
        """Return the offset where line begins.

        Lines past the last one map to the end of the source, which
        lets parser line ranges ``[first, last)`` be converted directly.
        """
        if line >= len(self._starts):
            return self._length
        return self._starts[line]
