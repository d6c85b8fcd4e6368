"""Event source: markdown-it tokens to span-carrying events.

markdown-it reports block tokens with line ranges (``token.map``) and inline
tokens without any position at all. This module rebuilds offsets:

- Block containers span their whole lines, including the final line break.
  ATX headings start at their first ``#`` rather than the line start.
- Inline delimiters and literal text are located by scanning forward through
  the enclosing block. Text that cannot be found verbatim (entities,
  backslash escapes) gets a zero-width span at the scan position.
- END events of blocks sit at the end of the block's content, before its
  trailing line break, so "the line of the heading" stays the heading's line.

The scan only ever moves forward, so event starts never decrease.

Thread Safety:
    ``parse_events`` builds a fresh MarkdownIt instance per call (unless a
    factory is configured) and keeps all state in locals.

"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import replace
from typing import TYPE_CHECKING

from markdown_it import MarkdownIt

from pespunte.config import RewriteConfig, get_rewrite_config
from pespunte.events import Event, EventKind, Tag, TagKind
from pespunte.span import LineIndex, Span

if TYPE_CHECKING:
    from markdown_it.token import Token

_TAG_KINDS: dict[str, TagKind] = {
    "heading": TagKind.HEADING,
    "paragraph": TagKind.PARAGRAPH,
    "blockquote": TagKind.BLOCK_QUOTE,
    "bullet_list": TagKind.BULLET_LIST,
    "ordered_list": TagKind.ORDERED_LIST,
    "list_item": TagKind.LIST_ITEM,
    "table": TagKind.TABLE,
    "thead": TagKind.TABLE_HEAD,
    "tbody": TagKind.TABLE_BODY,
    "tr": TagKind.TABLE_ROW,
    "th": TagKind.TABLE_CELL,
    "td": TagKind.TABLE_CELL,
    "em": TagKind.EMPHASIS,
    "strong": TagKind.STRONG,
    "s": TagKind.STRIKETHROUGH,
    "link": TagKind.LINK,
    "image": TagKind.IMAGE,
}

_LINE_END_CHARS = "\r\n"


def create_parser(config: RewriteConfig | None = None) -> MarkdownIt:
    """Build the markdown-it instance used as event source.

    Args:
        config: Rewrite configuration (uses the context's if None)

    Returns:
        A CommonMark MarkdownIt instance with the configured extensions,
        or whatever ``config.parser_factory`` returns.
    """
    config = config or get_rewrite_config()
    if config.parser_factory is not None:
        return config.parser_factory()

    md = MarkdownIt("commonmark")
    if config.tables_enabled:
        md.enable("table")
    if config.strikethrough_enabled:
        md.enable("strikethrough")
    return md


def parse_events(source: str, *, config: RewriteConfig | None = None) -> list[Event]:
    """Parse markdown source into a flat event stream.

    Args:
        source: Markdown source text
        config: Rewrite configuration (uses the context's if None)

    Returns:
        Events in source order, each with a span into ``source``.

    Example:
        >>> [e.kind.name for e in parse_events("# Hi\\n")]
        ['START', 'TEXT', 'END']
    """
    tokens = create_parser(config).parse(source)
    return _EventBuilder(source).build(tokens)


def _tag_for(token: Token, *, block: bool) -> Tag:
    name = token.type.removesuffix("_open").removesuffix("_close")
    kind = _TAG_KINDS.get(name, TagKind.OTHER)
    level = None
    if kind is TagKind.HEADING and token.tag[1:].isdigit():
        level = int(token.tag[1:])

    url = None
    if kind is TagKind.LINK:
        url = token.attrGet("href")
    elif kind is TagKind.IMAGE:
        url = token.attrGet("src")
    title = token.attrGet("title") if kind in (TagKind.LINK, TagKind.IMAGE) else None

    return Tag(
        kind=kind,
        block=block,
        name=name,
        level=level,
        url=str(url) if url is not None else None,
        title=str(title) if title is not None else None,
    )


class _EventBuilder:
    """Walks the token tree once and appends events.

    Holds the only mutable state of a parse: the output list, the stack of
    open block containers and the furthest offset consumed by inline scans.
    """

    __slots__ = ("_consumed", "_events", "_lines", "_open", "_source")

    def __init__(self, source: str) -> None:
        self._source = source
        self._lines = LineIndex(source)
        self._events: list[Event] = []
        self._open: list[tuple[Tag, Span]] = []
        self._consumed = 0

    def build(self, tokens: Sequence[Token]) -> list[Event]:
        for token in tokens:
            self._block_token(token)
        return self._events

    # -- Helpers ---------------------------------------------------------------

    def _last_start(self) -> int:
        return self._events[-1].start if self._events else 0

    def _floor(self) -> int:
        """Earliest offset the next event may start at."""
        return max(self._last_start(), self._consumed)

    def _line_span(self, token: Token) -> Span | None:
        if token.map is None:
            return None
        first, last = token.map
        start = max(self._lines.line_start(first), self._last_start())
        return Span(start, max(start, self._lines.line_start(last)))

    def _line_span_or_floor(self, token: Token) -> Span:
        span = self._line_span(token)
        return span if span is not None else Span.empty_at(self._floor())

    def _enclosing_end(self) -> int:
        return self._open[-1][1].end if self._open else len(self._source)

    def _trimmed_end(self, span: Span) -> int:
        end = span.end
        while end > span.start and self._source[end - 1] in _LINE_END_CHARS:
            end -= 1
        return end

    def _emit(self, event: Event) -> None:
        self._events.append(event)

    # -- Block level -----------------------------------------------------------

    def _block_token(self, token: Token) -> None:
        if token.nesting == 1:
            if not token.hidden:
                self._open_block(token)
            return
        if token.nesting == -1:
            if not token.hidden:
                self._close_block()
            return

        match token.type:
            case "inline":
                self._inline_token(token)
            case "fence" | "code_block":
                self._code_block(token)
            case "hr":
                span = self._line_span_or_floor(token)
                self._emit(Event(EventKind.RULE, Span(span.start, self._trimmed_end(span))))
            case "html_block":
                span = self._line_span_or_floor(token)
                self._emit(Event(EventKind.HTML, span, text=token.content))
            case _:
                # Plugin blocks without an event kind are copied through untouched
                pass

    def _open_block(self, token: Token) -> None:
        tag = _tag_for(token, block=True)
        span = self._line_span(token)
        if span is None:
            start = self._floor()
            span = Span(start, max(start, self._enclosing_end()))
        elif tag.kind is TagKind.HEADING and token.markup.startswith("#"):
            marker = self._source.find(token.markup, span.start, span.end)
            if marker != -1:
                span = Span(marker, span.end)

        self._emit(Event(EventKind.START, span, tag=tag))
        self._open.append((tag, span))
        self._consumed = max(self._consumed, span.start)

    def _close_block(self) -> None:
        tag, span = self._open.pop()
        end = max(self._trimmed_end(span), self._floor())
        self._emit(Event(EventKind.END, Span.empty_at(end), tag=tag))
        self._consumed = max(self._consumed, end)

    def _code_block(self, token: Token) -> None:
        span = self._line_span_or_floor(token)
        info = token.info.strip() or None
        tag = Tag(kind=TagKind.CODE_BLOCK, block=True, name=token.type, info=info)
        self._emit(Event(EventKind.START, span, tag=tag))

        if token.type == "fence" and token.map is not None:
            first, last = token.map
            body_start = max(span.start, min(self._lines.line_start(first + 1), span.end))
            body_end = span.end
            if last - first > 1 and self._closes_fence(last - 1, token.markup):
                body_end = self._lines.line_start(last - 1)
            body = Span(body_start, max(body_start, body_end))
        else:
            body = Span(span.start, self._trimmed_end(span))

        if token.content:
            self._emit(Event(EventKind.TEXT, body, text=token.content))
        end = max(self._trimmed_end(span), self._floor())
        self._emit(Event(EventKind.END, Span.empty_at(end), tag=tag))
        self._consumed = max(self._consumed, end)

    def _closes_fence(self, line: int, markup: str) -> bool:
        start = self._lines.line_start(line)
        end = self._lines.line_start(line + 1)
        text = self._source[start:end].strip()
        return bool(markup) and text.startswith(markup) and not text.strip(markup[0])

    # -- Inline level ----------------------------------------------------------

    def _inline_token(self, token: Token) -> None:
        region = self._line_span(token)
        limit = region.end if region is not None else self._enclosing_end()
        start = max(region.start if region is not None else 0, self._floor())
        scanner = _InlineScanner(self._source, start, max(start, limit), self._emit)
        scanner.scan(token.children or [])
        scanner.finish()
        self._consumed = max(self._consumed, scanner.pos)


class _InlineScanner:
    """Locates inline tokens inside one block region, left to right."""

    __slots__ = ("_emit", "_limit", "_open", "_source", "pos")

    def __init__(
        self,
        source: str,
        start: int,
        limit: int,
        emit: Callable[[Event], None],
    ) -> None:
        self._source = source
        self._limit = limit
        self._emit = emit
        self._open: list[tuple[Event, list[Event]]] = []
        self.pos = start

    def _find(self, needle: str) -> Span:
        """Find needle at or after pos; advance past it when found."""
        if needle:
            found = self._source.find(needle, self.pos, self._limit)
            if found != -1:
                self.pos = found + len(needle)
                return Span(found, self.pos)
        return Span.empty_at(self.pos)

    def _skip_destination(self, span: Span) -> Span:
        """Extend a link's closing bracket over ``(dest)`` or ``[label]``."""
        source, end = self._source, span.end
        if end >= self._limit:
            return span
        if source[end] == "(":
            depth = 0
            for i in range(end, self._limit):
                if source[i] == "(":
                    depth += 1
                elif source[i] == ")":
                    depth -= 1
                    if depth == 0:
                        self.pos = i + 1
                        return Span(span.start, self.pos)
        elif source[end] == "[":
            close = source.find("]", end, self._limit)
            if close != -1:
                self.pos = close + 1
                return Span(span.start, self.pos)
        return span

    def scan(self, children: Sequence[Token]) -> None:
        for child in children:
            self._child(child)

    def finish(self) -> None:
        # Unbalanced delimiters from a plugin: close them where the scan stopped
        while self._open:
            self._pop(Span.empty_at(self.pos))

    def _add(self, event: Event) -> None:
        if self._open:
            self._open[-1][1].append(event)
        else:
            self._emit(event)

    def _child(self, child: Token) -> None:
        if child.nesting == 1:
            self._open_inline(child)
            return
        if child.nesting == -1:
            self._close_inline(child)
            return

        match child.type:
            case "text":
                if child.content:
                    self._add(Event(EventKind.TEXT, self._find(child.content), text=child.content))
            case "code_inline":
                self._add(Event(EventKind.CODE, self._code_span(child), text=child.content))
            case "html_inline":
                self._add(Event(EventKind.HTML, self._find(child.content), text=child.content))
            case "softbreak":
                self._add(Event(EventKind.SOFT_BREAK, self._find("\n")))
            case "hardbreak":
                self._add(Event(EventKind.HARD_BREAK, self._find("\n")))
            case "image":
                self._image(child)
            case "footnote_ref":
                label = str((child.meta or {}).get("label", ""))
                start = self._find("[^")
                close = self._find("]")
                span = Span(start.start, max(start.end, close.end))
                self._add(Event(EventKind.FOOTNOTE_REFERENCE, span, text=label))
            case _:
                pass

    def _code_span(self, child: Token) -> Span:
        opening = self._find(child.markup)
        closing = self._find(child.markup)
        if closing.is_empty:
            return opening
        return Span(opening.start, closing.end)

    def _open_inline(self, child: Token) -> None:
        if child.type == "link_open":
            needle = "<" if child.markup == "autolink" else "["
        else:
            needle = child.markup
        tag = _tag_for(child, block=False)
        event = Event(EventKind.START, self._find(needle), tag=tag)
        self._push(event)

    def _close_inline(self, child: Token) -> None:
        if child.type == "link_close":
            if child.markup == "autolink":
                span = self._find(">")
            else:
                span = self._skip_destination(self._find("]"))
        else:
            span = self._find(child.markup)
        self._pop(span)

    def _image(self, child: Token) -> None:
        tag = _tag_for(child, block=False)
        self._push(Event(EventKind.START, self._find("!["), tag=tag))
        self.scan(child.children or [])
        self._pop(self._skip_destination(self._find("]")))

    def _push(self, event: Event) -> None:
        """Hold a START event back until its END fixes the full span."""
        self._open.append((event, []))

    def _pop(self, close: Span) -> None:
        start, inner = self._open.pop()
        start = replace(start, span=Span(start.start, max(start.end, close.end)))
        end = Event(EventKind.END, close, tag=start.tag)
        for event in (start, *inner, end):
            self._add(event)
