"""Rewritten bindings and the rewrite driver.

A Rewritten binds a start matcher and a stop matcher to a callback. The
driver scans the document once:

    SEARCHING ──start fires──▶ EDITING ──stop fires / end of stream──▶ SEARCHING

In SEARCHING the source is copied through verbatim. When a start matcher
fires on event *i* the source up to that event is flushed and the driver
collects events until the stop matcher fires on event *j*. Events *i* to
*j - 1* form the Region handed to the callback. The region ends where event
*j* starts at the latest, so the stop event's text is never handed over;
event *j* may itself open the next region.

While SEARCHING, every binding's start and stop matcher is evaluated once per
event, in registration order, and the first start match wins. While EDITING
only the active binding's matchers are evaluated; the others are not
consulted again until the region closes. On the event that closes a region
the remaining bindings are evaluated too, so that event can open the next
region.

Example:
    >>> from pespunte import Heading, Rewritten, apply
    >>> def add_note(region, writer):
    ...     writer.copy_through(region.events[-1].end)
    ...     writer.insert("\\n> note\\n")
    >>> program = Rewritten(Heading(1), Heading(1).then_start_of_next_line(), add_note)
    >>> apply("# Title\\n\\nBody text.\\n", program).text
    '# Title\\n> note\\n\\nBody text.\\n'

Thread Safety:
    ``apply()`` keeps its cursor and writer local. Matchers are mutated while
    scanning, so concurrent calls need their own bindings (``fresh()``).

"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum, auto

from pespunte.config import RewriteConfig, UnterminatedPolicy, get_rewrite_config
from pespunte.cursor import EventCursor
from pespunte.document import Document
from pespunte.errors import InvariantViolation, UnterminatedRegionError
from pespunte.events import Event
from pespunte.matchers.algebra import CursorPredicate, Matcher, as_matcher, evaluate
from pespunte.protocols import RewriteCallback
from pespunte.span import Span
from pespunte.utils.logger import get_logger
from pespunte.writer import Writer

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class Region:
    """The part of the document handed to one callback invocation.

    Attributes:
        source: Full source text of the document
        events: Events inside the region, starting with the one that
            opened it
        span: Source range the callback has authority over
        first_index: Stream index of the opening event
        terminated: False when the stop matcher never fired and the region
            runs to the end of the document

    """

    source: str = field(repr=False)
    events: tuple[Event, ...]
    span: Span
    first_index: int
    terminated: bool = True

    @property
    def text(self) -> str:
        """Source text of the region."""
        return self.source[self.span.start : self.span.end]

    @property
    def opening(self) -> Event:
        """The event whose start match opened the region."""
        return self.events[0]


@dataclass(frozen=True, slots=True)
class RewriteResult:
    """Outcome of ``apply()``.

    Attributes:
        text: The rewritten document
        regions: Number of regions handed to callbacks
        unterminated: Regions whose stop matcher never fired (only filled
            under UnterminatedPolicy.HAND_TO_CALLBACK)

    """

    text: str
    regions: int = 0
    unterminated: tuple[Region, ...] = ()

    def __str__(self) -> str:
        return self.text

    @property
    def complete(self) -> bool:
        """True when every opened region was closed by its stop matcher."""
        return not self.unterminated


@dataclass(slots=True, init=False)
class Rewritten:
    """Binds start and stop matchers to a rewrite callback.

    Attributes:
        start: Opens a region on the event it accepts
        stop: Closes the region on the event it accepts (that event is not
            part of the region). None makes every region exactly one event
            long.
        callback: Receives each region and the writer

    """

    start: Matcher
    stop: Matcher | None
    callback: RewriteCallback

    def __init__(
        self,
        start: Matcher | CursorPredicate,
        stop: Matcher | CursorPredicate | None,
        callback: RewriteCallback,
    ) -> None:
        self.start = as_matcher(start)
        self.stop = as_matcher(stop) if stop is not None else None
        self.callback = callback

    def reset(self) -> None:
        """Reset the state of both matchers."""
        self.start.reset()
        if self.stop is not None:
            self.stop.reset()

    def fresh(self) -> Rewritten:
        """Copy with fresh matcher trees; the callback is shared."""
        stop = self.stop.fresh() if self.stop is not None else None
        return Rewritten(self.start.fresh(), stop, self.callback)

    def apply(self, source: str | Document, *, config: RewriteConfig | None = None) -> RewriteResult:
        """Run this binding alone over source."""
        return apply(source, self, config=config)


class _Mode(Enum):
    SEARCHING = auto()
    EDITING = auto()


class _Driver:
    """One scan of one document. Not reusable."""

    __slots__ = (
        "_active",
        "_active_index",
        "_collected",
        "_config",
        "_document",
        "_first_index",
        "_mode",
        "_regions",
        "_rewrites",
        "_unterminated",
        "_writer",
    )

    def __init__(
        self,
        document: Document,
        rewrites: tuple[Rewritten, ...],
        config: RewriteConfig,
    ) -> None:
        self._document = document
        self._rewrites = rewrites
        self._config = config
        self._writer = Writer(document.source)
        self._mode = _Mode.SEARCHING
        self._active: Rewritten | None = None
        self._active_index = -1
        self._first_index = -1
        self._collected: list[Event] = []
        self._regions = 0
        self._unterminated: list[Region] = []

    def run(self) -> RewriteResult:
        cursor = self._document.cursor()
        while (event := cursor.current) is not None:
            started: dict[int, bool] = {}

            if self._mode is _Mode.EDITING and self._step(self._active_index, cursor, started):
                self._close(stop=event)

            if self._mode is _Mode.SEARCHING:
                for position in range(len(self._rewrites)):
                    if position not in started:
                        self._step(position, cursor, started)
                for position in sorted(started):
                    if started[position]:
                        self._open(position, cursor.index, event)
                        break

            if self._mode is _Mode.EDITING:
                self._collected.append(event)
                if self._active is not None and self._active.stop is None:
                    self._close()

            cursor.advance()

        if self._mode is _Mode.EDITING:
            self._close_at_end()

        self._writer.copy_through(len(self._document.source))
        return RewriteResult(
            text=self._writer.build(),
            regions=self._regions,
            unterminated=tuple(self._unterminated),
        )

    def _step(self, position: int, cursor: EventCursor, started: dict[int, bool]) -> bool:
        """Evaluate one binding's matchers; record the start result, return the stop result."""
        binding = self._rewrites[position]
        started[position] = evaluate(binding.start, cursor)
        return binding.stop is not None and evaluate(binding.stop, cursor)

    def _open(self, position: int, index: int, event: Event) -> None:
        self._writer.copy_through(event.start)
        self._mode = _Mode.EDITING
        self._active = self._rewrites[position]
        self._active_index = position
        self._first_index = index
        self._collected = []
        logger.debug("Opened edit region at event %d (offset %d)", index, event.start)

    def _close(self, stop: Event | None = None) -> None:
        events = tuple(self._collected)
        end = max(event.end for event in events)
        if stop is not None:
            # The stop event and everything after it stay outside the region
            end = max(events[0].start, min(end, stop.start))
        self._hand_over(Region(
            source=self._document.source,
            events=events,
            span=Span(events[0].start, end),
            first_index=self._first_index,
        ))

    def _close_at_end(self) -> None:
        events = tuple(self._collected)
        source = self._document.source
        if self._config.unterminated is UnterminatedPolicy.FAIL:
            raise UnterminatedRegionError(self._first_index, events[0].start, len(source))

        region = Region(
            source=source,
            events=events,
            span=Span(events[0].start, len(source)),
            first_index=self._first_index,
            terminated=False,
        )
        logger.warning(
            "Edit region opened at event %d was still open at end of document; "
            "handing the rest of the document to the callback",
            self._first_index,
        )
        self._unterminated.append(region)
        self._hand_over(region)

    def _hand_over(self, region: Region) -> None:
        active = self._active
        if active is None:
            raise InvariantViolation("region handed over with no active binding")
        with self._writer.bounded(region.span.end) as writer:
            active.callback(region, writer)
        logger.debug("Closed edit region %s after %d events", region.span, len(region.events))
        self._regions += 1
        self._mode = _Mode.SEARCHING
        self._active = None
        self._active_index = -1
        self._collected = []


def apply(
    source: str | Document,
    rewrites: Rewritten | Iterable[Rewritten],
    *,
    config: RewriteConfig | None = None,
) -> RewriteResult:
    """Rewrite source with one or more bindings.

    Args:
        source: Markdown text, or a Document parsed earlier
        rewrites: One binding, or several in priority order
        config: Rewrite configuration (uses the context's if None)

    Returns:
        RewriteResult with the new text. Regions left open at the end of
        the document are listed in ``unterminated``.

    Raises:
        UnterminatedRegionError: A region was left open and the policy is
            UnterminatedPolicy.FAIL.
        InvariantViolation: The event stream broke its ordering or bounds
            contract.
    """
    config = config or get_rewrite_config()
    document = source if isinstance(source, Document) else Document.parse(source, config=config)
    bindings = (rewrites,) if isinstance(rewrites, Rewritten) else tuple(rewrites)
    return _Driver(document, bindings, config).run()


def rewrite(
    source: str | Document,
    *rewrites: Rewritten,
    config: RewriteConfig | None = None,
) -> str:
    """Like ``apply()`` but return only the text."""
    return apply(source, rewrites, config=config).text


def rewrite_between(
    source: str | Document,
    start: Matcher | CursorPredicate,
    stop: Matcher | CursorPredicate,
    callback: RewriteCallback,
    *,
    config: RewriteConfig | None = None,
) -> str:
    """Run a single start/stop/callback binding and return the text."""
    return apply(source, Rewritten(start, stop, callback), config=config).text


# =============================================================================
# Ready-made bindings
# =============================================================================


def insert_before(text: str, matcher: Matcher | CursorPredicate) -> Rewritten:
    """Insert text before every event the matcher accepts.

    Example:
        >>> from pespunte import Heading, insert_before, rewrite
        >>> rewrite("# A\\n", insert_before("<!-- top -->\\n", Heading(1)))
        '<!-- top -->\\n# A\\n'
    """

    def callback(region: Region, writer: Writer) -> None:
        writer.insert(text)
        writer.copy_through(region.span.end)

    return Rewritten(matcher, None, callback)


def insert_after(text: str, matcher: Matcher | CursorPredicate) -> Rewritten:
    """Insert text after the span of every event the matcher accepts.

    Block START events span whole lines, so inserting after a heading start
    puts the text on the line below the heading.
    """

    def callback(region: Region, writer: Writer) -> None:
        writer.copy_through(region.span.end)
        writer.insert(text)

    return Rewritten(matcher, None, callback)


def replace_between(
    start: Matcher | CursorPredicate,
    stop: Matcher | CursorPredicate,
    text: str,
) -> Rewritten:
    """Replace each region from a start match up to a stop match with text."""

    def callback(region: Region, writer: Writer) -> None:
        writer.insert(text)

    return Rewritten(start, stop, callback)
