"""Exception classes for Pespunte.

Two families of errors exist:

- ``InvariantViolation``: the event stream or the rewrite bookkeeping broke a
  contract the engine relies on (spans out of order or out of bounds). These
  signal a bug in the event source or in the driver and are never repaired.
- ``RewriteError``: recoverable problems with a particular rewrite program,
  such as an edit region whose stop matcher never fired.
"""

from __future__ import annotations


class PespunteError(Exception):
    """Base exception for all Pespunte errors.

    Subclass this for specific error categories.
    """

    pass


class InvariantViolation(PespunteError):
    """An internal contract was broken.

    Raised when the event source or the driver produces state the engine
    cannot work with. Callers are not expected to recover from this.
    """

    pass


class SpanOrderError(InvariantViolation):
    """Event starts went backwards in the stream."""

    def __init__(self, index: int, previous_start: int, start: int) -> None:
        """Initialize span order error.

        Args:
            index: Position of the offending event in the stream
            previous_start: Start offset of the preceding event
            start: Start offset of the offending event
        """
        self.index = index
        self.previous_start = previous_start
        self.start = start
        super().__init__(
            f"event {index} starts at {start}, before the previous event ({previous_start})"
        )


class SpanBoundsError(InvariantViolation):
    """A span or offset lies outside the source text."""

    def __init__(self, start: int, end: int, length: int, what: str = "span") -> None:
        """Initialize span bounds error.

        Args:
            start: Start offset that was used
            end: End offset that was used
            length: Length of the source text
            what: Short description of the offending value
        """
        self.start = start
        self.end = end
        self.length = length
        super().__init__(f"{what} [{start}, {end}) is outside source of length {length}")


class RewriteError(PespunteError):
    """Recoverable error raised by a rewrite program.

    The source document is untouched; the caller may fix the program
    and try again.
    """

    pass


class UnterminatedRegionError(RewriteError):
    """A start matcher fired but its stop matcher never did."""

    def __init__(self, event_index: int, start: int, end: int) -> None:
        """Initialize unterminated region error.

        Args:
            event_index: Index of the event that opened the region
            start: Offset where the region starts
            end: Offset where the source ends
        """
        self.event_index = event_index
        self.start = start
        self.end = end
        super().__init__(
            f"edit region opened at event {event_index} (offset {start}) "
            f"was still open at end of document (offset {end})"
        )


class RegionBoundsError(RewriteError):
    """A rewrite callback tried to write past the end of its region."""

    def __init__(self, offset: int, region_end: int) -> None:
        self.offset = offset
        self.region_end = region_end
        super().__init__(f"offset {offset} is past the end of the edit region ({region_end})")
