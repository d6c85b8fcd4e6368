"""Writer: rebuilds output text from source spans and inserted text.

The writer keeps one cursor into the source, ``last_emitted``. Everything
before it has been dealt with (copied or skipped); everything after it has
not. The three primitives move that cursor forward only:

- ``copy_through(offset)`` copies ``source[last_emitted:offset]`` verbatim
- ``skip_to(offset)`` drops ``source[last_emitted:offset]``
- ``insert(text)`` adds new text without consuming source

Because the cursor never moves backwards, no source text is ever duplicated,
and as long as the final ``copy_through(len(source))`` is issued none is lost
unless it was explicitly skipped.

Output parts are appended to a list and joined once at the end, O(n) total.

Thread Safety:
    Writer instances are local to each ``apply()`` call.
    No shared mutable state.

"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from pespunte.errors import RegionBoundsError, SpanBoundsError
from pespunte.span import Span


class Writer:
    """Output accumulator anchored to source offsets.

    Usage:
            >>> writer = Writer("# Title\\n\\nBody\\n")
            >>> writer.copy_through(7)
            >>> writer.insert(" (draft)")
            >>> writer.copy_through(len(writer.source))
            >>> writer.build()
            '# Title (draft)\\n\\nBody\\n'

    """

    __slots__ = ("_limit", "_parts", "_source", "last_emitted")

    def __init__(self, source: str) -> None:
        self._source = source
        self._parts: list[str] = []
        self._limit: int | None = None
        self.last_emitted = 0

    def __repr__(self) -> str:
        return f"Writer(last_emitted={self.last_emitted}, parts={len(self._parts)})"

    @property
    def source(self) -> str:
        return self._source

    @property
    def limit(self) -> int:
        """Furthest offset the writer may currently move to."""
        return len(self._source) if self._limit is None else self._limit

    def _check(self, offset: int) -> None:
        if offset < 0 or offset > len(self._source):
            raise SpanBoundsError(offset, offset, len(self._source), "offset")
        if self._limit is not None and offset > self._limit:
            raise RegionBoundsError(offset, self._limit)

    # -- Primitives ------------------------------------------------------------

    def copy_through(self, offset: int) -> None:
        """Copy source from last_emitted up to offset.

        No-op when offset is at or before last_emitted.
        """
        self._check(offset)
        if offset <= self.last_emitted:
            return
        self._parts.append(self._source[self.last_emitted : offset])
        self.last_emitted = offset

    def skip_to(self, offset: int) -> None:
        """Drop source from last_emitted up to offset.

        No-op when offset is at or before last_emitted.
        """
        self._check(offset)
        if offset > self.last_emitted:
            self.last_emitted = offset

    def insert(self, text: str) -> None:
        """Append new text; last_emitted is unchanged."""
        if text:
            self._parts.append(text)

    # -- Conveniences ----------------------------------------------------------

    def replace(self, span: Span, text: str) -> None:
        """Copy up to span, emit text in its place, and drop the span's source."""
        self.copy_through(span.start)
        self.insert(text)
        self.skip_to(span.end)

    def delete(self, span: Span) -> None:
        """Copy up to span and drop the span's source."""
        self.copy_through(span.start)
        self.skip_to(span.end)

    def pending(self) -> str:
        """Source text between last_emitted and the current limit."""
        return self._source[self.last_emitted : self.limit]

    @contextmanager
    def bounded(self, end: int) -> Iterator[Writer]:
        """Restrict the writer to offsets up to end for the duration.

        Used while a rewrite callback owns a region. On exit, whatever the
        callback left of the region is dropped.
        """
        self._check(end)
        previous = self._limit
        self._limit = end
        try:
            yield self
        finally:
            self._limit = previous
        self.skip_to(end)

    def build(self) -> str:
        """Join all parts into the output string."""
        return "".join(self._parts)
