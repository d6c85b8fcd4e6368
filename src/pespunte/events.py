"""Event, Tag, and their kind enums.

The event source turns a markdown document into a flat stream of Event
objects. Containers (headings, paragraphs, emphasis, links, ...) appear as a
START/END pair carrying a Tag; everything else is a leaf event.

Every event carries a Span into the original source:

- START spans cover the whole element (block elements cover whole lines,
  including the final line break).
- END spans cover the closing delimiter of inline elements, and are
  zero-width at the end of the content for block elements.
- Leaf spans cover the literal text they stand for when it can be located.

Event starts never decrease along the stream; the cursor relies on this.

Thread Safety:
Event and Tag are frozen (immutable) and safe to share across threads.
EventKind and TagKind are enums (inherently immutable).

"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from pespunte.span import Span


class EventKind(Enum):
    """Kinds of events in the stream."""

    # Containers
    START = auto()
    END = auto()

    # Leaves
    TEXT = auto()
    CODE = auto()  # `code`
    HTML = auto()  # inline or block raw HTML
    SOFT_BREAK = auto()
    HARD_BREAK = auto()
    RULE = auto()  # ---, ***, ___
    FOOTNOTE_REFERENCE = auto()  # [^ref]


class TagKind(Enum):
    """Kinds of container elements."""

    # Blocks
    HEADING = auto()
    PARAGRAPH = auto()
    BLOCK_QUOTE = auto()
    BULLET_LIST = auto()
    ORDERED_LIST = auto()
    LIST_ITEM = auto()
    CODE_BLOCK = auto()
    TABLE = auto()
    TABLE_HEAD = auto()
    TABLE_BODY = auto()
    TABLE_ROW = auto()
    TABLE_CELL = auto()

    # Inlines
    EMPHASIS = auto()
    STRONG = auto()
    STRIKETHROUGH = auto()
    LINK = auto()
    IMAGE = auto()

    # Anything the parser reports that has no dedicated kind (plugins)
    OTHER = auto()


@dataclass(frozen=True, slots=True)
class Tag:
    """Description of a container element.

    Attributes:
        kind: Element kind
        block: True for block-level containers
        name: Parser's own name for the element (e.g. "heading", "em")
        level: Heading level 1-6 (headings only)
        url: Destination (links and images)
        title: Title attribute (links and images)
        info: Info string of fenced code blocks

    """

    kind: TagKind
    block: bool
    name: str = ""
    level: int | None = None
    url: str | None = None
    title: str | None = None
    info: str | None = None


@dataclass(frozen=True, slots=True)
class Event:
    """One structural unit of the document.

    Attributes:
        kind: Event kind
        span: Source range the event stands for
        tag: Container description (START and END only)
        text: Literal payload of leaf events (text, code, html, footnote label)

    """

    kind: EventKind
    span: Span
    tag: Tag | None = None
    text: str = ""

    def __repr__(self) -> str:
        """Compact repr for debugging."""
        if self.tag is not None:
            label = self.tag.kind.name
            if self.tag.level is not None:
                label = f"{label}{self.tag.level}"
            return f"Event({self.kind.name}, {label}, {self.span})"
        val = self.text
        if len(val) > 20:
            val = val[:17] + "..."
        return f"Event({self.kind.name}, {val!r}, {self.span})"

    @property
    def start(self) -> int:
        return self.span.start

    @property
    def end(self) -> int:
        return self.span.end

    def is_start(self, kind: TagKind | None = None) -> bool:
        """Check for a START event, optionally of a given tag kind."""
        if self.kind is not EventKind.START:
            return False
        return kind is None or (self.tag is not None and self.tag.kind is kind)

    def is_end(self, kind: TagKind | None = None) -> bool:
        """Check for an END event, optionally of a given tag kind."""
        if self.kind is not EventKind.END:
            return False
        return kind is None or (self.tag is not None and self.tag.kind is kind)
