"""Document: immutable source text plus its event stream.

A Document is what the driver scans. It is built once per ``apply()`` call
(or once by the caller and reused across several calls; the Document itself
holds no scan state).

Thread Safety:
    Document is frozen and its events are immutable, so one Document may be
    scanned from several threads at once as long as each scan uses its own
    cursor and matcher tree.

"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from pespunte.config import RewriteConfig
from pespunte.cursor import EventCursor
from pespunte.events import Event
from pespunte.parsing import parse_events
from pespunte.span import LineIndex, Span


@dataclass(frozen=True, slots=True)
class Document:
    """Source text and the events derived from it.

    Attributes:
        source: Markdown source text
        events: Event stream, in source order

    Example:
        >>> doc = Document.parse("# Title\\n\\nBody text.\\n")
        >>> doc.events[0].tag.level
        1
        >>> doc.text(doc.events[1].span)
        'Title'

    """

    source: str
    events: tuple[Event, ...]
    _lines: LineIndex = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_lines", LineIndex(self.source))

    @classmethod
    def parse(cls, source: str, *, config: RewriteConfig | None = None) -> Document:
        """Parse source with the markdown-it event source."""
        return cls(source, tuple(parse_events(source, config=config)))

    @classmethod
    def from_events(cls, source: str, events: Iterable[Event]) -> Document:
        """Wrap events produced by some other event source."""
        return cls(source, tuple(events))

    def __len__(self) -> int:
        return len(self.events)

    def cursor(self) -> EventCursor:
        """Create a fresh cursor positioned on the first event."""
        return EventCursor(self.source, self.events, self._lines)

    def text(self, span: Span) -> str:
        """Return the source text covered by span."""
        return self.source[span.start : span.end]

    def line_of(self, offset: int) -> int:
        """Return the 0-indexed line containing offset."""
        return self._lines.line_of(offset)
