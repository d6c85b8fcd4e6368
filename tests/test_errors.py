"""Tests for the exception hierarchy and messages."""

import pytest

from pespunte.errors import (
    InvariantViolation,
    PespunteError,
    RegionBoundsError,
    RewriteError,
    SpanBoundsError,
    SpanOrderError,
    UnterminatedRegionError,
)


class TestHierarchy:
    """Both families share PespunteError."""

    @pytest.mark.parametrize(
        ("error", "family"),
        [
            (SpanOrderError(1, 5, 3), InvariantViolation),
            (SpanBoundsError(0, 9, 4), InvariantViolation),
            (UnterminatedRegionError(2, 10, 20), RewriteError),
            (RegionBoundsError(9, 4), RewriteError),
        ],
    )
    def test_family(self, error: PespunteError, family: type) -> None:
        assert isinstance(error, family)
        assert isinstance(error, PespunteError)

    def test_families_are_distinct(self) -> None:
        assert not issubclass(InvariantViolation, RewriteError)
        assert not issubclass(RewriteError, InvariantViolation)


class TestMessages:
    """Messages carry the offending offsets."""

    def test_span_order(self) -> None:
        err = SpanOrderError(4, 10, 7)
        assert "event 4" in str(err)
        assert "7" in str(err)
        assert "10" in str(err)

    def test_span_bounds(self) -> None:
        err = SpanBoundsError(3, 12, 8, "offset")
        assert str(err) == "offset [3, 12) is outside source of length 8"

    def test_unterminated(self) -> None:
        err = UnterminatedRegionError(2, 10, 20)
        assert err.event_index == 2
        assert "offset 10" in str(err)

    def test_region_bounds(self) -> None:
        err = RegionBoundsError(9, 4)
        assert err.offset == 9
        assert err.region_end == 4
        assert "9" in str(err)
