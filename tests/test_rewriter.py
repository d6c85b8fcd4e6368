"""Tests for Rewritten bindings and the rewrite driver."""

import logging

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from pespunte import (
    Always,
    Document,
    Heading,
    Predicate,
    Region,
    RewriteConfig,
    Rewritten,
    UnterminatedPolicy,
    Writer,
    apply,
    exact_text,
    insert_after,
    insert_before,
    replace_between,
    rewrite,
    rewrite_between,
    rewrite_config_context,
)
from pespunte.errors import RegionBoundsError, UnterminatedRegionError

NEVER = Predicate(lambda cursor: False, name="never")
FAIL = RewriteConfig(unterminated=UnterminatedPolicy.FAIL)


def keep(region: Region, writer: Writer) -> None:
    writer.copy_through(region.span.end)


def bracket(region: Region, writer: Writer) -> None:
    writer.insert("<")
    writer.copy_through(region.span.end)
    writer.insert(">")


def add_note(region: Region, writer: Writer) -> None:
    writer.copy_through(region.events[-1].end)
    writer.insert("\n> note\n")


class TestEndToEnd:
    """The note-after-heading scenario."""

    def test_note_after_heading(self) -> None:
        program = Rewritten(Heading(1), Heading(1).then_start_of_next_line(), add_note)
        result = apply("# Title\n\nBody text.\n", program)
        assert result.text == "# Title\n> note\n\nBody text.\n"
        assert result.regions == 1
        assert result.complete

    def test_region_passed_to_callback(self) -> None:
        regions: list[Region] = []

        def capture(region: Region, writer: Writer) -> None:
            regions.append(region)
            keep(region, writer)

        program = Rewritten(Heading(1), Heading(1).then_start_of_next_line(), capture)
        apply("# Title\n\nBody text.\n", program)
        (region,) = regions
        assert region.first_index == 0
        assert region.opening.tag.level == 1
        assert len(region.events) == 3
        assert region.text == "# Title\n"
        assert region.terminated

    def test_no_match_leaves_document_untouched(self) -> None:
        source = "plain\n\ntext\n"
        result = apply(source, Rewritten(Heading(), NEVER, bracket))
        assert result.text == source
        assert result.regions == 0


class TestIdentity:
    """Copy-only programs reproduce the source exactly."""

    @given(st.text(max_size=300))
    @settings(max_examples=100)
    def test_copy_everything(self, source: str) -> None:
        program = Rewritten(Always(), NEVER, keep)
        assert rewrite(source, program) == source

    @given(st.text(alphabet="# abc\n*-`>", max_size=200))
    @settings(max_examples=100)
    def test_copy_every_region(self, source: str) -> None:
        program = Rewritten(Heading(), Heading().falling_edge(), keep)
        assert rewrite(source, program) == source

    @given(st.text(max_size=200))
    @settings(max_examples=50)
    def test_no_bindings(self, source: str) -> None:
        assert rewrite(source) == source

    def test_empty_document(self) -> None:
        assert rewrite("", Rewritten(Always(), NEVER, bracket)) == ""


class TestRegions:
    """Region boundaries and driver ordering."""

    def test_stop_event_opens_next_region(self) -> None:
        result = apply("# A\n\n# B\n", Rewritten(Heading(), Heading(), bracket))
        assert result.text == "<# A\n>\n<# B\n>"
        assert result.regions == 2
        assert len(result.unterminated) == 1

    def test_first_registered_binding_wins(self) -> None:
        calls: list[str] = []

        def first(region: Region, writer: Writer) -> None:
            calls.append("first")
            keep(region, writer)

        def second(region: Region, writer: Writer) -> None:
            calls.append("second")
            keep(region, writer)

        rewrite(
            "# A\n",
            Rewritten(Heading(1), None, first),
            Rewritten(Heading(1), None, second),
        )
        assert calls == ["first"]

    def test_only_active_stop_counts(self) -> None:
        # The second binding's stop fires on every event but is not active
        source = "# A\n\ntext\n\n## B\n"
        result = rewrite(
            source,
            Rewritten(Heading(1), Heading(2), bracket),
            Rewritten(Heading(2), Always(), bracket),
        )
        # The second region stops on the heading text, which stays outside it
        assert result == "<# A\n\ntext\n>\n<## >B\n"

    def test_stop_event_inside_region_block_is_kept(self) -> None:
        source = "# Title\n\nBody text.\n"
        program = replace_between(Heading(1), exact_text("Body text."), "X\n")
        assert rewrite(source, program) == "X\nBody text.\n"

    def test_region_ends_at_stop_event_start(self) -> None:
        regions: list[Region] = []

        def capture(region: Region, writer: Writer) -> None:
            regions.append(region)
            keep(region, writer)

        source = "# Title\n\nBody text.\n"
        # The paragraph START opened inside the region spans past the stop event
        assert rewrite(source, Rewritten(Heading(1), exact_text("Body text."), capture)) == source
        (region,) = regions
        assert region.events[-1].end == len(source)
        assert region.span.end == source.index("Body")
        assert region.text == "# Title\n\n"

    def test_other_bindings_idle_while_editing(self) -> None:
        counts = {"start_a": 0, "stop_a": 0, "start_b": 0, "stop_b": 0}

        def counter(key: str, result: bool = False) -> Predicate:
            def check(cursor) -> bool:
                counts[key] += 1
                return result

            return Predicate(check, name=key)

        doc = Document.parse("# A\n\ntext\n")
        apply(
            doc,
            [
                Rewritten(Heading(1) & counter("start_a", True), counter("stop_a"), keep),
                Rewritten(counter("start_b", True), counter("stop_b"), keep),
            ],
        )
        # The first binding opens on event 0 and stays open to the end
        assert counts == {"start_a": len(doc), "stop_a": len(doc), "start_b": 1, "stop_b": 1}

    def test_every_binding_evaluated_while_searching(self) -> None:
        seen: list[str] = []

        def counter(key: str) -> Predicate:
            def check(cursor) -> bool:
                seen.append(key)
                return False

            return Predicate(check, name=key)

        doc = Document.parse("a\n\nb\n")
        apply(
            doc,
            [
                Rewritten(counter("start_a"), counter("stop_a"), keep),
                Rewritten(counter("start_b"), counter("stop_b"), keep),
            ],
        )
        assert seen == ["start_a", "stop_a", "start_b", "stop_b"] * len(doc)

    def test_bindings_rejoin_on_closing_event(self) -> None:
        seen: list[int] = []

        def record(cursor) -> bool:
            seen.append(cursor.index)
            return False

        doc = Document.parse("# A\n\n## B\n")
        apply(doc, [Rewritten(Heading(1), Heading(2), keep), Rewritten(record, None, keep)])
        # Idle on events 1 and 2 inside the region, back on the closing event 3
        assert seen == [0, 3, 4, 5]

    def test_pending_start_not_spent_inside_another_region(self) -> None:
        source = "# A\n\n## B\n\n## C\n"
        result = rewrite(
            source,
            Rewritten(Heading(1), Heading(2).falling_edge(), keep),
            insert_before("<!--x-->\n", Heading(2).fuse()),
        )
        assert result == "# A\n\n## B\n\n<!--x-->\n## C\n"

    def test_region_events_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        program = Rewritten(Heading(1), Heading(1).then_start_of_next_line(), keep)
        with caplog.at_level(logging.DEBUG, logger="pespunte.rewriter"):
            rewrite("# Title\n\nBody text.\n", program)
        assert "Opened edit region at event 0" in caplog.text
        assert "Closed edit region [0, 8)" in caplog.text

    def test_stateful_stop_keeps_timing_while_searching(self) -> None:
        # The stop matcher is driven from the first event, so it is already
        # armed by the heading when the region opens on the heading text.
        source = "# Title\n\nBody text.\n"
        program = Rewritten(exact_text("Title"), Heading(1).then_start_of_next_line(), bracket)
        assert rewrite(source, program) == "# <Title>\n\nBody text.\n"

    def test_uncopied_region_text_is_dropped(self) -> None:
        program = Rewritten(Heading(2), Heading(2).then_start_of_next_line(), lambda r, w: None)
        assert rewrite("## Gone\n\nkept\n", program) == "\nkept\n"

    def test_callback_cannot_write_past_region(self) -> None:
        def greedy(region: Region, writer: Writer) -> None:
            writer.copy_through(len(region.source))

        with pytest.raises(RegionBoundsError):
            rewrite("# A\n\ntext\n", Rewritten(Heading(1), None, greedy))

    def test_callable_matchers_accepted(self) -> None:
        program = Rewritten(lambda cursor: cursor.index == 0, None, bracket)
        assert isinstance(program.start, Predicate)
        assert program.stop is None
        assert rewrite("# A\n", program) == "<# A\n>"


class TestUnterminated:
    """Regions still open at the end of the document."""

    def test_handed_to_callback(self, caplog: pytest.LogCaptureFixture) -> None:
        seen: list[Region] = []

        def capture(region: Region, writer: Writer) -> None:
            seen.append(region)
            writer.insert("[")
            writer.copy_through(region.span.end)
            writer.insert("]")

        with caplog.at_level(logging.WARNING, logger="pespunte"):
            result = apply("intro\n\n# A\n\nrest\n", Rewritten(Heading(1), NEVER, capture))

        assert result.text == "intro\n\n[# A\n\nrest\n]"
        assert not result.complete
        assert seen[0].terminated is False
        assert seen[0].span.end == len("intro\n\n# A\n\nrest\n")
        assert result.unterminated == (seen[0],)
        assert "still open at end of document" in caplog.text

    def test_fail_policy(self) -> None:
        called: list[Region] = []
        program = Rewritten(Heading(1), NEVER, lambda region, writer: called.append(region))
        with pytest.raises(UnterminatedRegionError) as exc_info:
            apply("text\n\n# A\n", program, config=FAIL)
        assert exc_info.value.event_index == 3
        assert exc_info.value.start == 6
        assert exc_info.value.end == 10
        assert called == []

    def test_fail_policy_from_context(self) -> None:
        with rewrite_config_context(FAIL):
            with pytest.raises(UnterminatedRegionError):
                rewrite("# A\n", Rewritten(Heading(1), NEVER, keep))

    def test_fail_policy_ignores_closed_regions(self) -> None:
        program = Rewritten(Heading(1), Heading(1).then_start_of_next_line(), add_note)
        assert rewrite("# T\n\nx\n", program, config=FAIL) == "# T\n> note\n\nx\n"


class TestReadyMadeBindings:
    """insert_before, insert_after, replace_between, rewrite_between."""

    def test_insert_before(self) -> None:
        assert rewrite("# A\n", insert_before("<!-- top -->\n", Heading(1))) == (
            "<!-- top -->\n# A\n"
        )

    def test_insert_after_every_match(self) -> None:
        source = "## A\n\n## B\n"
        assert rewrite(source, insert_after("x\n", Heading(2))) == "## A\nx\n\n## B\nx\n"

    def test_insert_after_once(self) -> None:
        source = "## A\n\n## B\n"
        assert rewrite(source, insert_after("x\n", Heading(2).fuse())) == "## A\nx\n\n## B\n"

    def test_replace_between(self) -> None:
        source = "## Old\n\ntext\n\n## Next\n"
        program = replace_between(exact_text("Old"), Heading(2), "X")
        assert rewrite(source, program) == "## X\n## Next\n"

    def test_rewrite_between(self) -> None:
        source = "# Title\n\nBody text.\n"
        out = rewrite_between(source, Heading(1), Heading(1).then_start_of_next_line(), add_note)
        assert out == "# Title\n> note\n\nBody text.\n"


class TestRewrittenState:
    """Bindings carry matcher state between runs."""

    def test_fused_binding_spent_after_one_run(self) -> None:
        binding = insert_before("!", Heading(1).fuse())
        assert binding.apply("# A\n").text == "!# A\n"
        assert binding.apply("# A\n").text == "# A\n"
        binding.reset()
        assert binding.apply("# A\n").text == "!# A\n"

    def test_fresh_copies_matchers(self) -> None:
        binding = insert_before("!", Heading(1).fuse())
        copy = binding.fresh()
        binding.apply("# A\n")
        assert copy.apply("# A\n").text == "!# A\n"
        assert copy.callback is binding.callback

    def test_document_reused(self) -> None:
        doc = Document.parse("# A\n")
        binding = insert_before("!", Heading(1))
        assert rewrite(doc, binding) == rewrite(doc, binding.fresh()) == "!# A\n"
