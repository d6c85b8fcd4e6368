"""Tests for the Writer."""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from pespunte import Span, Writer
from pespunte.errors import RegionBoundsError, RewriteError, SpanBoundsError


class TestPrimitives:
    """copy_through, skip_to, insert."""

    def test_copy_through(self) -> None:
        writer = Writer("hello world")
        writer.copy_through(5)
        assert writer.build() == "hello"
        assert writer.last_emitted == 5

    def test_copy_through_is_idempotent(self) -> None:
        writer = Writer("hello world")
        writer.copy_through(5)
        writer.copy_through(5)
        writer.copy_through(3)
        assert writer.build() == "hello"
        assert writer.last_emitted == 5

    def test_skip_to_drops_text(self) -> None:
        writer = Writer("hello world")
        writer.copy_through(5)
        writer.skip_to(6)
        writer.copy_through(11)
        assert writer.build() == "helloworld"

    def test_skip_backwards_is_noop(self) -> None:
        writer = Writer("abc")
        writer.copy_through(2)
        writer.skip_to(1)
        assert writer.last_emitted == 2

    def test_insert_does_not_consume(self) -> None:
        writer = Writer("ab")
        writer.copy_through(1)
        writer.insert("-")
        assert writer.last_emitted == 1
        writer.copy_through(2)
        assert writer.build() == "a-b"

    def test_insert_at_start(self) -> None:
        writer = Writer("body")
        writer.insert("head\n")
        writer.copy_through(4)
        assert writer.build() == "head\nbody"

    def test_offset_out_of_range(self) -> None:
        writer = Writer("abc")
        with pytest.raises(SpanBoundsError):
            writer.copy_through(4)
        with pytest.raises(SpanBoundsError):
            writer.skip_to(-1)

    @given(st.text(max_size=50), st.lists(st.integers(min_value=0, max_value=50)))
    @settings(max_examples=100)
    def test_copy_only_reproduces_source(self, source: str, offsets: list[int]) -> None:
        writer = Writer(source)
        for offset in offsets:
            writer.copy_through(min(offset, len(source)))
        writer.copy_through(len(source))
        assert writer.build() == source


class TestConveniences:
    """replace, delete, pending."""

    def test_replace(self) -> None:
        writer = Writer("# Old\n")
        writer.replace(Span(2, 5), "New")
        writer.copy_through(6)
        assert writer.build() == "# New\n"

    def test_delete(self) -> None:
        writer = Writer("keep drop keep")
        writer.delete(Span(4, 9))
        writer.copy_through(14)
        assert writer.build() == "keep keep"

    def test_pending(self) -> None:
        writer = Writer("abcdef")
        writer.copy_through(2)
        assert writer.pending() == "cdef"


class TestBounded:
    """Writer restricted to an edit region."""

    def test_limit_enforced(self) -> None:
        writer = Writer("abcdef")
        with pytest.raises(RegionBoundsError) as exc_info:
            with writer.bounded(3):
                writer.copy_through(4)
        assert isinstance(exc_info.value, RewriteError)
        assert exc_info.value.region_end == 3

    def test_unconsumed_region_dropped(self) -> None:
        writer = Writer("abcdef")
        with writer.bounded(3) as bounded:
            bounded.copy_through(1)
        assert writer.last_emitted == 3
        writer.copy_through(6)
        assert writer.build() == "adef"

    def test_limit_restored(self) -> None:
        writer = Writer("abcdef")
        with writer.bounded(3):
            assert writer.limit == 3
            assert writer.pending() == "abc"
        assert writer.limit == 6

    def test_limit_restored_after_error(self) -> None:
        writer = Writer("abcdef")
        with pytest.raises(KeyError):
            with writer.bounded(3):
                raise KeyError("boom")
        assert writer.limit == 6
        assert writer.last_emitted == 0
