"""Ready-made predicates over event payloads.

Each helper returns a Predicate, so the results compose with the rest of
the algebra (``exact_text("Usage").then_start_of_next_line()``).
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from pespunte.events import EventKind, TagKind
from pespunte.matchers.algebra import Predicate

if TYPE_CHECKING:
    from pespunte.cursor import EventCursor


def text(predicate: Callable[[str], bool], *, name: str = "text") -> Predicate:
    """Match TEXT events whose content satisfies predicate."""

    def check(cursor: EventCursor) -> bool:
        event = cursor.current
        return event is not None and event.kind is EventKind.TEXT and predicate(event.text)

    return Predicate(check, name=name)


def exact_text(needle: str) -> Predicate:
    """Match TEXT events whose content is exactly needle.

    Not to be confused with ``text_containing``.
    """
    return text(lambda content: content == needle, name=f"exact_text({needle!r})")


def text_containing(needle: str) -> Predicate:
    """Match TEXT events whose content contains needle."""
    return text(lambda content: needle in content, name=f"text_containing({needle!r})")


def link_with_url_containing(needle: str) -> Predicate:
    """Match the START of a link whose URL contains needle."""

    def check(cursor: EventCursor) -> bool:
        event = cursor.current
        return (
            event is not None
            and event.is_start(TagKind.LINK)
            and event.tag is not None
            and needle in (event.tag.url or "")
        )

    return Predicate(check, name=f"link_with_url_containing({needle!r})")
