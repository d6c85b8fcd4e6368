"""Forward-only cursor over a document's event stream.

The cursor is the driver's view of "where are we": the current event, what
comes next, and how offsets map to lines. It never rewinds.

While advancing, the cursor checks the two properties the rest of the engine
builds on: event starts never decrease, and every span lies inside the
source. A violation raises an InvariantViolation; nothing is repaired.

Thread Safety:
    A cursor is owned by a single scan. Create one per ``apply()`` call
    (``Document.cursor()`` does this).

"""

from __future__ import annotations

from collections.abc import Sequence

from pespunte.errors import SpanOrderError
from pespunte.events import Event
from pespunte.span import LineIndex


class EventCursor:
    """Steppable, peekable position in an event sequence.

    Usage:
            >>> cursor = EventCursor(source, events)
            >>> while not cursor.at_end:
            ...     handle(cursor.current)
            ...     cursor.advance()

    Attributes:
        source: The document's source text
        index: Position of the current event (``len(events)`` at end)

    """

    __slots__ = ("_events", "_lines", "index", "source")

    def __init__(
        self,
        source: str,
        events: Sequence[Event],
        lines: LineIndex | None = None,
    ) -> None:
        self.source = source
        self._events = events
        self._lines = lines if lines is not None else LineIndex(source)
        self.index = 0
        if events:
            self._check(0)

    def __repr__(self) -> str:
        return f"EventCursor(index={self.index}, current={self.current!r})"

    @property
    def current(self) -> Event | None:
        """Event under the cursor, or None at end of stream."""
        if self.index < len(self._events):
            return self._events[self.index]
        return None

    @property
    def at_end(self) -> bool:
        return self.index >= len(self._events)

    @property
    def previous(self) -> Event | None:
        """Event just before the cursor, if any."""
        if 0 < self.index <= len(self._events):
            return self._events[self.index - 1]
        return None

    def peek(self, n: int = 1) -> Event | None:
        """Look n events ahead without consuming anything."""
        position = self.index + n
        if 0 <= position < len(self._events):
            return self._events[position]
        return None

    def advance(self) -> Event | None:
        """Move to the next event and return it (None at end of stream)."""
        if self.at_end:
            return None
        self.index += 1
        if self.at_end:
            return None
        self._check(self.index)
        return self._events[self.index]

    def line_of(self, offset: int) -> int:
        """Return the 0-indexed line containing offset."""
        return self._lines.line_of(offset)

    def _check(self, index: int) -> None:
        event = self._events[index]
        event.span.check_within(len(self.source))
        if index > 0:
            previous = self._events[index - 1]
            if event.start < previous.start:
                raise SpanOrderError(index, previous.start, event.start)
