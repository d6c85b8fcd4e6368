"""Matchers: composable, possibly stateful predicates over an event stream.

Example:
    >>> from pespunte.matchers import Heading, exact_text
    >>> section_end = Heading(2).falling_edge()
    >>> after_usage = exact_text("Usage").then_start_of_next_line()
"""

from pespunte.matchers.algebra import (
    Always,
    And,
    CursorPredicate,
    FallingEdge,
    Heading,
    Matcher,
    NextLinePhase,
    NextLineState,
    OneShot,
    OneShotState,
    Predicate,
    StartOfNextLine,
    as_matcher,
    evaluate,
    falling_edge_step,
    next_line_step,
    one_shot_step,
)
from pespunte.matchers.text import (
    exact_text,
    link_with_url_containing,
    text,
    text_containing,
)

__all__ = [
    "Always",
    "And",
    "CursorPredicate",
    "FallingEdge",
    "Heading",
    "Matcher",
    "NextLinePhase",
    "NextLineState",
    "OneShot",
    "OneShotState",
    "Predicate",
    "StartOfNextLine",
    "as_matcher",
    "evaluate",
    "exact_text",
    "falling_edge_step",
    "link_with_url_containing",
    "next_line_step",
    "one_shot_step",
    "text",
    "text_containing",
]
