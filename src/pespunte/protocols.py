"""Protocols for Pespunte.

Defines the contract for rewrite callbacks.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from pespunte.rewriter import Region
    from pespunte.writer import Writer


class RewriteCallback(Protocol):
    """Edits one region of the document.

    Called once per region with the region's events and a writer that is
    positioned at the region start and bounded by the region end.

    The callback decides what the region becomes:

    - ``writer.copy_through(offset)`` keeps source text up to offset
    - ``writer.skip_to(offset)`` drops source text up to offset
    - ``writer.insert(text)`` adds new text

    Region text the callback neither copies nor skips is dropped when it
    returns. The return value is ignored.

    Thread Safety:
        Callbacks run synchronously inside ``apply()``. They may keep state,
        but then must not be shared between concurrent ``apply()`` calls.

    """

    def __call__(self, region: Region, writer: Writer) -> object:
        """Rewrite region through writer."""
        ...
