"""The matcher algebra.

A matcher answers "does the stream match here?" for the event under a
cursor. The set of variants is closed:

Matcher
├── Always            constant true
├── Heading           heading START events (optionally of one level)
├── And               both sides true; both sides always evaluated
├── OneShot           first true of the inner matcher, then false forever
├── FallingEdge       inner matcher went from true to false
├── StartOfNextLine   first event on a later line than an inner match
└── Predicate         any callable over the cursor

``evaluate`` dispatches over the variants with a single match statement.
The three stateful variants keep their state in an explicit value and
advance it through a pure step function (``one_shot_step``,
``falling_edge_step``, ``next_line_step``), so each timing pattern can be
tested by feeding it plain sequences of observations.

State contract:
    Matchers are built once and then driven across one scan. State carries
    over into the next scan unless ``reset()`` is called or a fresh tree is
    built with ``fresh()``. Reusing a fired OneShot is not an error; it simply
    keeps reporting false.

Thread Safety:
    A matcher tree that has not been run yet may be shared read-only; each
    concurrent scan must run its own copy (``matcher.fresh()``).

"""

from __future__ import annotations

import copy
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING, Self, TypeAlias

from pespunte.events import TagKind

if TYPE_CHECKING:
    from pespunte.cursor import EventCursor
    from pespunte.document import Document

CursorPredicate: TypeAlias = Callable[["EventCursor"], bool]


class Matcher:
    """Base class for all matcher variants.

    Provides evaluation, combinator sugar and state management. Variants
    carry data only; behaviour lives in ``evaluate``.

    """

    __slots__ = ()

    def matches(self, cursor: EventCursor) -> bool:
        """Evaluate at the cursor's current event, updating private state."""
        return evaluate(self, cursor)

    def __call__(self, cursor: EventCursor) -> bool:
        return evaluate(self, cursor)

    # -- Combinators -----------------------------------------------------------

    def __and__(self, other: Matcher | CursorPredicate) -> And:
        return And(self, as_matcher(other))

    def __rand__(self, other: CursorPredicate) -> And:
        return And(as_matcher(other), self)

    def and_(self, other: Matcher | CursorPredicate) -> And:
        """Match when self and other both match."""
        return And(self, as_matcher(other))

    def fuse(self) -> OneShot:
        """Wrap self so it only ever returns true once."""
        return OneShot(self)

    def falling_edge(self) -> FallingEdge:
        """Match when self goes from true to false."""
        return FallingEdge(self)

    def then_start_of_next_line(self) -> StartOfNextLine:
        """Wait until self matches, then match the first event on a later line."""
        return StartOfNextLine(self)

    # -- State -----------------------------------------------------------------

    def children(self) -> tuple[Matcher, ...]:
        """Direct sub-matchers."""
        return ()

    def reset(self) -> None:
        """Return this matcher and its sub-matchers to their initial state."""
        for child in self.children():
            child.reset()

    def fresh(self) -> Self:
        """Deep copy of this matcher tree with all state reset."""
        clone = copy.deepcopy(self)
        clone.reset()
        return clone

    # -- Searching -------------------------------------------------------------

    def first_match(self, document: Document) -> int | None:
        """Index of the first event this matcher accepts."""
        from pespunte.search import first_match

        return first_match(self, document)

    def is_in(self, document: Document) -> bool:
        """Check whether this matcher accepts any event of document."""
        from pespunte.search import is_in

        return is_in(self, document)


# =============================================================================
# Stateless variants
# =============================================================================


@dataclass(slots=True)
class Always(Matcher):
    """Matches every event."""


@dataclass(slots=True)
class Heading(Matcher):
    """Matches heading START events.

    Attributes:
        level: Only match headings of this level (1-6); any level when None

    """

    level: int | None = None

    def __post_init__(self) -> None:
        if self.level is not None and not 1 <= self.level <= 6:
            raise ValueError(f"heading level must be between 1 and 6, got {self.level}")


@dataclass(slots=True)
class Predicate(Matcher):
    """User-supplied check over the cursor.

    The callable receives the cursor and may read ``cursor.current``,
    ``cursor.peek()``, ``cursor.source`` and so on. Any state it keeps is its
    own business; ``reset()`` does not reach into it.

    """

    func: CursorPredicate
    name: str = ""

    def __repr__(self) -> str:
        name = self.name or getattr(self.func, "__name__", "predicate")
        return f"Predicate({name})"


@dataclass(slots=True)
class And(Matcher):
    """Matches when both sides match.

    Both sides are evaluated on every event, even when the left one is
    false, so stateful sub-matchers see the whole stream.

    """

    left: Matcher
    right: Matcher

    def children(self) -> tuple[Matcher, ...]:
        return (self.left, self.right)


# =============================================================================
# Stateful variants
# =============================================================================


class OneShotState(Enum):
    """Has the inner matcher fired yet?"""

    ARMED = auto()
    FIRED = auto()


def one_shot_step(state: OneShotState, observed: bool) -> tuple[OneShotState, bool]:
    """Advance a one-shot by one observation.

    Returns:
        (new state, reported result)
    """
    if state is OneShotState.FIRED:
        return state, False
    if observed:
        return OneShotState.FIRED, True
    return state, False


def falling_edge_step(previous: bool, observed: bool) -> tuple[bool, bool]:
    """Advance a falling-edge detector by one observation.

    The state is simply the previous observation.

    Returns:
        (new state, reported result)
    """
    return observed, previous and not observed


class NextLinePhase(Enum):
    """Is a start-of-next-line matcher waiting for a line change?"""

    WAITING = auto()
    ARMED = auto()


@dataclass(frozen=True, slots=True)
class NextLineState:
    """State of a start-of-next-line matcher.

    Attributes:
        phase: WAITING for an inner match, or ARMED and watching lines
        line: Last line covered by the most recent inner match (-1 if none)

    """

    phase: NextLinePhase = NextLinePhase.WAITING
    line: int = -1


def next_line_step(
    state: NextLineState,
    observed: bool,
    start_line: int,
    end_line: int,
) -> tuple[NextLineState, bool]:
    """Advance a start-of-next-line matcher by one event.

    Args:
        state: Current state
        observed: Whether the inner matcher accepted this event
        start_line: Line on which this event starts
        end_line: Line holding this event's last character

    Returns:
        (new state, reported result)
    """
    fired = state.phase is NextLinePhase.ARMED and start_line > state.line
    if observed:
        return NextLineState(NextLinePhase.ARMED, max(state.line, end_line)), fired
    if fired:
        return NextLineState(), True
    return state, False


@dataclass(slots=True)
class OneShot(Matcher):
    """Matches only the first time the inner matcher does.

    After firing the inner matcher is no longer consulted.

    """

    inner: Matcher
    state: OneShotState = OneShotState.ARMED

    def children(self) -> tuple[Matcher, ...]:
        return (self.inner,)

    def reset(self) -> None:
        self.state = OneShotState.ARMED
        self.inner.reset()


@dataclass(slots=True)
class FallingEdge(Matcher):
    """Matches the first event after the inner matcher stops matching."""

    inner: Matcher
    previous: bool = False

    def children(self) -> tuple[Matcher, ...]:
        return (self.inner,)

    def reset(self) -> None:
        self.previous = False
        self.inner.reset()


@dataclass(slots=True)
class StartOfNextLine(Matcher):
    """Matches the first event that starts on a later line than an inner match.

    The inner matcher is evaluated on every event. A new inner match while
    armed moves the watched line forward instead of firing early.

    """

    inner: Matcher
    state: NextLineState = field(default_factory=NextLineState)

    def children(self) -> tuple[Matcher, ...]:
        return (self.inner,)

    def reset(self) -> None:
        self.state = NextLineState()
        self.inner.reset()


# =============================================================================
# Evaluation
# =============================================================================


def as_matcher(obj: Matcher | CursorPredicate) -> Matcher:
    """Accept a matcher as-is and wrap a plain callable in a Predicate."""
    if isinstance(obj, Matcher):
        return obj
    if callable(obj):
        return Predicate(obj)
    raise TypeError(f"expected a Matcher or a callable, got {type(obj).__name__}")


def evaluate(matcher: Matcher, cursor: EventCursor) -> bool:
    """Evaluate matcher at the cursor's current event.

    Stateful variants update their state as a side effect. At end of stream
    every variant reports false without touching its state.
    """
    event = cursor.current
    if event is None:
        return False

    match matcher:
        case Always():
            return True

        case Heading(level=level):
            return (
                event.is_start(TagKind.HEADING)
                and event.tag is not None
                and (level is None or event.tag.level == level)
            )

        case And(left=left, right=right):
            left_matched = evaluate(left, cursor)
            right_matched = evaluate(right, cursor)
            return left_matched and right_matched

        case OneShot(inner=inner, state=state):
            if state is OneShotState.FIRED:
                return False
            matcher.state, result = one_shot_step(state, evaluate(inner, cursor))
            return result

        case FallingEdge(inner=inner, previous=previous):
            matcher.previous, result = falling_edge_step(previous, evaluate(inner, cursor))
            return result

        case StartOfNextLine(inner=inner, state=state):
            observed = evaluate(inner, cursor)
            start_line = cursor.line_of(event.start)
            end_line = cursor.line_of(max(event.start, event.end - 1))
            matcher.state, result = next_line_step(state, observed, start_line, end_line)
            return result

        case Predicate(func=func):
            return bool(func(cursor))

        case _:
            raise TypeError(f"unknown matcher variant: {type(matcher).__name__}")
