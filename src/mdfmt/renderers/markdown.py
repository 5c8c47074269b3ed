"""Markdown renderer: event stream to canonical Markdown text.

The renderer is a single-pass state machine. Block events drive a
ContextStack that knows the prefix of every output line; inline events
are accumulated by an InlineRenderer until their block closes, at which
point the block is laid out and written.

Canonical block forms:
    heading         # Title                  (ATX, never wrapped)
    bullet list     - item                   (* for an adjacent sibling list)
    ordered list    1. item                  (1) for an adjacent sibling list)
    block quote     > text
    code block      ```lang                  (indented code becomes fenced)
    rule            ---                      (___ where --- would misparse)
    table           | a | b |
    html block      verbatim

Tight lists keep their items and child blocks packed; everything else is
separated by exactly one blank line.

Thread Safety:
    MarkdownRenderer instances hold per-document state. Create one per
    render, or reuse one sequentially; render() resets all state.

"""

from __future__ import annotations

import re
from collections.abc import Iterable

from mdfmt.buffer import LineBuffer
from mdfmt.config import FormatOptions, OrderedListMode, WrapMode
from mdfmt.context import ContextStack
from mdfmt.errors import ConsistencyError
from mdfmt.events import (
    Autolink,
    BlockEnd,
    BlockKind,
    BlockStart,
    BlockType,
    Code,
    EmphasisEnd,
    EmphasisStart,
    Event,
    HardBreak,
    HtmlBlock,
    Image,
    InlineHtml,
    LinkEnd,
    LinkStart,
    Rule,
    SoftBreak,
    StrikeEnd,
    StrikeStart,
    StrongEnd,
    StrongStart,
    Text,
)
from mdfmt.inline import InlineRenderer
from mdfmt.utils.logger import get_logger
from mdfmt.wrap import join_words, wrap_tokens

logger = get_logger(__name__)

_DELIMITERS = {
    None: "---",
    "left": ":--",
    "right": "--:",
    "center": ":-:",
}

# Blocks whose close separates them from a following sibling
_SEPARATED = frozenset({
    BlockType.PARAGRAPH,
    BlockType.HEADING,
    BlockType.LIST,
    BlockType.LIST_ITEM,
    BlockType.BLOCK_QUOTE,
    BlockType.CODE_BLOCK,
    BlockType.HTML_BLOCK,
    BlockType.TABLE,
})


class MarkdownRenderer:
    """Render a stream of formatting events to Markdown text.

    Usage:
        >>> from mdfmt.source import EventSource
        >>> renderer = MarkdownRenderer(FormatOptions(width=40))
        >>> renderer.render(EventSource().events("*  one\\n*  two"))
        '- one\\n- two\\n'

    """

    __slots__ = (
        "_cells",
        "_inline",
        "_options",
        "_out",
        "_raw",
        "_rows",
        "_separate",
        "_stack",
    )

    def __init__(self, options: FormatOptions | None = None) -> None:
        """Initialize renderer.

        Args:
            options: Formatting options. Defaults to FormatOptions().
        """
        self._options = options if options is not None else FormatOptions()
        self._reset()

    def _reset(self) -> None:
        self._stack = ContextStack()
        self._out = LineBuffer()
        self._inline: InlineRenderer | None = None
        self._raw: list[str] | None = None
        self._rows: list[list[str]] = []
        self._cells: list[str] = []
        self._separate = False

    def render(self, events: Iterable[Event]) -> str:
        """Render events to a complete document.

        Args:
            events: Event stream, consumed once

        Returns:
            Formatted Markdown ending in exactly one newline, or the empty
            string for a document with no content.

        Raises:
            ConsistencyError: If the stream is malformed (unbalanced blocks,
                inline content outside a block, mismatched spans).
        """
        self._reset()
        for event in events:
            self._dispatch(event)
        if self._stack.is_open():
            raise ConsistencyError("document ended with a block open", self._stack.top.kind.name, None)
        logger.debug("rendered %d lines", len(self._out))
        return self._out.build()

    def _dispatch(self, event: Event) -> None:
        match event:
            case BlockStart(kind=kind):
                self._start(kind)
            case BlockEnd(kind=kind):
                self._end(kind)
            case Text(content=content):
                if self._raw is not None:
                    self._raw.append(content)
                else:
                    self._inline_target().text(content)
            case Code(code=code):
                self._inline_target().code(code)
            case InlineHtml(html=html):
                self._inline_target().html(html)
            case SoftBreak():
                self._inline_target().soft_break()
            case HardBreak():
                self._inline_target().hard_break()
            case EmphasisStart():
                self._inline_target().open("emphasis")
            case EmphasisEnd():
                self._inline_target().close("emphasis")
            case StrongStart():
                self._inline_target().open("strong")
            case StrongEnd():
                self._inline_target().close("strong")
            case StrikeStart():
                self._inline_target().open("strikethrough")
            case StrikeEnd():
                self._inline_target().close("strikethrough")
            case LinkStart(url=url, title=title):
                self._inline_target().open("link", url=url, title=title)
            case LinkEnd():
                self._inline_target().close("link")
            case Image(url=url, alt=alt, title=title):
                self._inline_target().image(url, alt, title)
            case Autolink(url=url, text=text):
                self._inline_target().autolink(url, text)
            case Rule():
                self._require_block_level("rule")
                self._rule()
            case HtmlBlock(html=html):
                self._require_block_level("html_block")
                self._open_block()
                self._write_raw(_raw_lines(html))
                self._stack.record(BlockKind.html_block())
                self._separate = True

    def _inline_target(self) -> InlineRenderer:
        if self._inline is None:
            raise ConsistencyError("inline content outside a text block")
        return self._inline

    # =========================================================================
    # Block starts
    # =========================================================================

    def _require_block_level(self, name: str) -> None:
        if self._inline is not None or self._raw is not None:
            raise ConsistencyError("block opened inside a leaf block", None, name)

    def _start(self, kind: BlockKind) -> None:
        self._require_block_level(kind.name)

        match kind.type:
            case BlockType.PARAGRAPH:
                self._open_block()
                self._stack.push(kind)
                self._inline = InlineRenderer(keep_soft_breaks=self._options.wrap is WrapMode.PRESERVE)
            case BlockType.HEADING:
                self._open_block()
                self._stack.push(kind)
                self._inline = InlineRenderer(single_line=True)
            case BlockType.LIST:
                self._open_block()
                parent = self._stack.top
                previous = parent.last_child
                frame = self._stack.push(kind)
                # Two adjacent lists with the same marker would merge on re-parse
                frame.alternate = (
                    previous is not None
                    and previous.type is BlockType.LIST
                    and previous.ordered == kind.ordered
                    and not parent.last_child_alternate
                )
            case BlockType.LIST_ITEM:
                self._start_item(kind)
            case BlockType.BLOCK_QUOTE:
                self._open_block()
                self._stack.push(kind)
            case BlockType.CODE_BLOCK | BlockType.HTML_BLOCK:
                self._open_block()
                self._stack.push(kind)
                self._raw = []
            case BlockType.TABLE:
                self._open_block()
                self._stack.push(kind)
                self._rows = []
            case BlockType.TABLE_ROW:
                self._require_parent(BlockType.TABLE, kind)
                self._stack.push(kind)
                self._cells = []
            case BlockType.TABLE_CELL:
                self._require_parent(BlockType.TABLE_ROW, kind)
                self._stack.push(kind)
                self._inline = InlineRenderer(escape_pipes=True, single_line=True)
            case _:
                raise ConsistencyError("unexpected block", None, kind.name)

    def _start_item(self, kind: BlockKind) -> None:
        self._require_parent(BlockType.LIST, kind)
        parent = self._stack.top
        if self._separate and not parent.kind.tight:
            self._out.blank(self._stack.blank_prefix())
        self._separate = False

        if parent.kind.ordered:
            number = parent.next_number if self._options.ordered_list is OrderedListMode.ASCENDING else 1
            parent.next_number += 1
            marker = f"{number}{')' if parent.alternate else '.'} "
        else:
            marker = "* " if parent.alternate else "- "
        self._stack.push(kind, marker=marker)

    def _open_block(self) -> None:
        """Write the blank line that separates a block from its previous sibling."""
        if self._separate and not self._stack.tight():
            self._out.blank(self._stack.blank_prefix())
        self._separate = False

    def _require_parent(self, block_type: BlockType, kind: BlockKind) -> None:
        if self._stack.top.type is not block_type:
            raise ConsistencyError(
                f"{kind.name} outside {block_type.name.lower()}", block_type.name.lower(), self._stack.top.kind.name
            )

    # =========================================================================
    # Block ends
    # =========================================================================

    def _end(self, kind: BlockKind) -> None:
        frame = self._stack.pop(kind)

        match kind.type:
            case BlockType.PARAGRAPH:
                items = self._take_inline().finish()
                width = self._options.width - self._stack.continuation_width()
                self._write(wrap_tokens(items, mode=self._options.wrap, width=width))
            case BlockType.HEADING:
                text = join_words(self._take_inline().finish())
                hashes = "#" * frame.kind.level
                self._write([f"{hashes} {text}" if text else hashes])
            case BlockType.LIST_ITEM:
                if frame.marker_pending:
                    # Empty item: the marker alone
                    self._out.line((self._stack.take_prefix() + frame.marker).rstrip())
            case BlockType.BLOCK_QUOTE:
                if frame.last_child is None:
                    self._out.line(self._stack.take_prefix() + ">")
            case BlockType.CODE_BLOCK:
                self._write_code(frame.kind, "".join(self._take_raw()))
            case BlockType.HTML_BLOCK:
                self._write_raw(_raw_lines("".join(self._take_raw())))
            case BlockType.TABLE_CELL:
                self._cells.append(join_words(self._take_inline().finish()))
            case BlockType.TABLE_ROW:
                self._rows.append(self._cells)
                self._cells = []
            case BlockType.TABLE:
                self._write_table(frame.kind, self._rows)
                self._rows = []

        if kind.type in _SEPARATED:
            self._separate = True

    def _take_inline(self) -> InlineRenderer:
        inline = self._inline_target()
        self._inline = None
        return inline

    def _take_raw(self) -> list[str]:
        raw = self._raw if self._raw is not None else []
        self._raw = None
        return raw

    # =========================================================================
    # Leaf blocks
    # =========================================================================

    def _rule(self) -> None:
        # Packed directly under a paragraph, --- would turn it into a heading;
        # as an item's first line it may read as another list marker
        glued = self._separate and self._stack.tight()
        previous = self._stack.top.last_child
        self._open_block()
        after_paragraph = glued and previous is not None and previous.type is BlockType.PARAGRAPH
        self._write(["___" if after_paragraph or self._stack.marker_pending() else "---"])
        self._stack.record(BlockKind(BlockType.RULE))
        self._separate = True

    def _write_code(self, kind: BlockKind, body: str) -> None:
        lines = body.split("\n")
        if body.endswith("\n"):
            lines.pop()
        while lines and not lines[-1].strip():
            lines.pop()

        info = kind.language or ""
        char = "~" if "`" in info else "`"
        longest = max((len(run) for run in re.findall(f"{re.escape(char)}+", body)), default=0)
        fence = char * max(3, longest + 1)

        self._write([fence + info])
        self._write_raw(lines)
        self._write([fence])

    def _write_table(self, kind: BlockKind, rows: list[list[str]]) -> None:
        if not rows:
            return
        columns = max(len(kind.alignments), *(len(row) for row in rows))
        aligns = list(kind.alignments) + [None] * (columns - len(kind.alignments))
        header, *body = rows

        lines = [_table_row(header, columns)]
        lines.append(_table_row([_DELIMITERS.get(align, "---") for align in aligns], columns))
        lines.extend(_table_row(row, columns) for row in body)
        self._write(lines)

    # =========================================================================
    # Output
    # =========================================================================

    def _write(self, lines: list[str]) -> None:
        """Write rendered lines behind the current prefix.

        A line may hold newlines from a hard break inside an inline
        construct; each physical line gets its own prefix.
        """
        for line in lines:
            for piece in line.split("\n"):
                self._out.line(self._stack.take_prefix() + piece)

    def _write_raw(self, lines: list[str]) -> None:
        """Write verbatim lines; empty lines carry only the quote markers."""
        for line in lines:
            if line:
                self._out.line(self._stack.take_prefix() + line)
            elif self._stack.marker_pending():
                self._out.line(self._stack.take_prefix().rstrip())
            else:
                self._out.line(self._stack.blank_prefix())


def _raw_lines(text: str) -> list[str]:
    return text.rstrip("\n").split("\n") if text.strip("\n") else []


def _table_row(cells: list[str], columns: int) -> str:
    padded = cells + [""] * (columns - len(cells))
    return "| " + " | ".join(padded) + " |"
