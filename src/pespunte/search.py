"""Read-only queries: where does a matcher fire?

These helpers run a matcher over a whole document without rewriting
anything. They drive the matcher exactly like the rewrite driver does, so a
matcher that finds the right events here will anchor edits at the same
places.

Matchers are consumed: pass ``matcher.fresh()`` to keep the original's
state untouched.
"""

from __future__ import annotations

from collections.abc import Iterator

from pespunte.cursor import EventCursor
from pespunte.document import Document
from pespunte.events import Event
from pespunte.matchers.algebra import CursorPredicate, Matcher, as_matcher, evaluate


def _as_document(document: Document | str) -> Document:
    if isinstance(document, Document):
        return document
    return Document.parse(document)


def _scan(matcher: Matcher, cursor: EventCursor) -> Iterator[int]:
    while not cursor.at_end:
        if evaluate(matcher, cursor):
            yield cursor.index
        cursor.advance()


def match_indices(
    matcher: Matcher | CursorPredicate,
    document: Document | str,
) -> Iterator[int]:
    """Yield the indices of events the matcher accepts.

    Example:
        >>> doc = Document.parse("# Header\\nsome text\\n# Header\\n")
        >>> list(match_indices(exact_text("Header"), doc))
        [1, 7]
    """
    document = _as_document(document)
    return _scan(as_matcher(matcher), document.cursor())


def first_match(matcher: Matcher | CursorPredicate, document: Document | str) -> int | None:
    """Index of the first event the matcher accepts, or None."""
    return next(match_indices(matcher, document), None)


def is_in(matcher: Matcher | CursorPredicate, document: Document | str) -> bool:
    """Check whether the matcher accepts any event of document."""
    return first_match(matcher, document) is not None


def between(
    start: Matcher | CursorPredicate,
    end: Matcher | CursorPredicate,
    document: Document | str,
) -> tuple[Event, ...] | None:
    """Events from the first start match to the following end match, inclusive.

    The end matcher only sees events from the start match onwards. When it
    never fires, everything from the start match to the end of the
    document is returned.

    Returns:
        The inclusive slice of events, or None when start never matches.
    """
    document = _as_document(document)
    start_index = first_match(start, document)
    if start_index is None:
        return None

    rest = document.events[start_index:]
    cursor = EventCursor(document.source, rest)
    end_index = next(_scan(as_matcher(end), cursor), None)
    if end_index is None:
        return rest
    return rest[: end_index + 1]
