"""
Pespunte: Span-preserving Markdown rewriting

Rewrites a Markdown document by editing only the regions you point at.
Everything outside those regions comes out byte-for-byte identical to the
input: no re-rendering, no normalised whitespace, no reordered markup.

A rewrite is a start matcher, a stop matcher and a callback. Matchers
select events from the document's event stream; the callback receives
each selected region together with a writer that copies, skips or inserts
text.

Quick Start:
    >>> from pespunte import Heading, Rewritten, rewrite
    >>> def add_note(region, writer):
    ...     writer.copy_through(region.events[-1].end)
    ...     writer.insert("\\n> note\\n")
    >>> rewrite(
    ...     "# Title\\n\\nBody text.\\n",
    ...     Rewritten(Heading(1), Heading(1).then_start_of_next_line(), add_note),
    ... )
    '# Title\\n> note\\n\\nBody text.\\n'

Ready-made bindings:
    >>> from pespunte import exact_text, insert_after
    >>> rewrite("## Usage\\n\\ntext\\n", insert_after("<!-- usage -->\\n", Heading(2)))
    '## Usage\\n<!-- usage -->\\n\\ntext\\n'

Searching:
    >>> from pespunte import Document, first_match
    >>> first_match(exact_text("Usage"), Document.parse("## Usage\\n"))
    1

Installation:
    pip install pespunte
"""

from pespunte.config import (
    RewriteConfig,
    UnterminatedPolicy,
    get_rewrite_config,
    reset_rewrite_config,
    rewrite_config_context,
    set_rewrite_config,
)
from pespunte.cursor import EventCursor
from pespunte.document import Document
from pespunte.errors import (
    InvariantViolation,
    PespunteError,
    RegionBoundsError,
    RewriteError,
    SpanBoundsError,
    SpanOrderError,
    UnterminatedRegionError,
)
from pespunte.events import Event, EventKind, Tag, TagKind
from pespunte.matchers import (
    Always,
    And,
    CursorPredicate,
    FallingEdge,
    Heading,
    Matcher,
    OneShot,
    Predicate,
    StartOfNextLine,
    as_matcher,
    evaluate,
    exact_text,
    link_with_url_containing,
    text,
    text_containing,
)
from pespunte.parsing import create_parser, parse_events
from pespunte.protocols import RewriteCallback
from pespunte.rewriter import (
    Region,
    RewriteResult,
    Rewritten,
    apply,
    insert_after,
    insert_before,
    replace_between,
    rewrite,
    rewrite_between,
)
from pespunte.search import between, first_match, is_in, match_indices
from pespunte.span import LineIndex, Span
from pespunte.writer import Writer

__version__ = "0.1.0"

__all__ = [
    # Rewriting
    "apply",
    "rewrite",
    "rewrite_between",
    "Rewritten",
    "Region",
    "RewriteResult",
    "RewriteCallback",
    "Writer",
    "insert_before",
    "insert_after",
    "replace_between",
    # Documents and events
    "Document",
    "Event",
    "EventKind",
    "EventCursor",
    "Tag",
    "TagKind",
    "Span",
    "LineIndex",
    "create_parser",
    "parse_events",
    # Matchers
    "Matcher",
    "CursorPredicate",
    "Always",
    "And",
    "FallingEdge",
    "Heading",
    "OneShot",
    "Predicate",
    "StartOfNextLine",
    "as_matcher",
    "evaluate",
    "exact_text",
    "link_with_url_containing",
    "text",
    "text_containing",
    # Searching
    "between",
    "first_match",
    "is_in",
    "match_indices",
    # Configuration
    "RewriteConfig",
    "UnterminatedPolicy",
    "get_rewrite_config",
    "set_rewrite_config",
    "reset_rewrite_config",
    "rewrite_config_context",
    # Errors
    "PespunteError",
    "InvariantViolation",
    "SpanOrderError",
    "SpanBoundsError",
    "RewriteError",
    "UnterminatedRegionError",
    "RegionBoundsError",
    # Version
    "__version__",
]
