"""Event source: Markdown text to a flat stream of mdfmt events.

Wraps markdown-it-py configured for CommonMark plus the GFM table and
strikethrough extensions, and translates its token stream into the typed
events in ``mdfmt.events``.

The parser is configured to keep source spelling wherever the formatter
must write text back:
- ``text_join`` is disabled so backslash escapes and entity references
  arrive as ``text_special`` tokens carrying their original markup
- link normalization and validation are disabled so destinations are
  reproduced as written (``javascript:`` links stay links)

Example:
    >>> from mdfmt.source import EventSource
    >>> events = list(EventSource().events("# Hi"))
    >>> events[0]
    BlockStart(kind=BlockKind(type=<BlockType.HEADING: 2>, level=1, ...))

Thread Safety:
    MarkdownIt keeps all parse state in per-call objects; a configured
    instance is read-only and safe to share across threads.

"""

from collections.abc import Iterator, Sequence
from functools import cache

from markdown_it import MarkdownIt
from markdown_it.token import Token

from mdfmt.events import (
    Autolink,
    BlockEnd,
    BlockKind,
    BlockStart,
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
from mdfmt.inline import code_span
from mdfmt.utils.logger import get_logger

logger = get_logger(__name__)

# Closing token types that end a block opened by this module
_BLOCK_CLOSERS = frozenset({
    "paragraph_close",
    "heading_close",
    "bullet_list_close",
    "ordered_list_close",
    "list_item_close",
    "blockquote_close",
    "table_close",
    "tr_close",
    "th_close",
    "td_close",
})

# Inline tokens that map one-to-one onto payload-free events
_SIMPLE_INLINE: dict[str, Event] = {
    "softbreak": SoftBreak(),
    "hardbreak": HardBreak(),
    "em_open": EmphasisStart(),
    "em_close": EmphasisEnd(),
    "strong_open": StrongStart(),
    "strong_close": StrongEnd(),
    "s_open": StrikeStart(),
    "s_close": StrikeEnd(),
    "link_close": LinkEnd(),
}


def _keep_link(url: str) -> str:
    return url


def _accept_link(url: str) -> bool:
    return True


def create_parser() -> MarkdownIt:
    """Build a MarkdownIt instance configured for formatting.

    Returns:
        CommonMark parser with tables and strikethrough, raw HTML allowed,
        escapes preserved, and links left exactly as written.
    """
    md = MarkdownIt("commonmark", {"html": True})
    md.enable(["table", "strikethrough"])
    md.disable("text_join")
    md.validateLink = _accept_link
    md.normalizeLink = _keep_link
    md.normalizeLinkText = _keep_link
    return md


@cache
def _shared_parser() -> MarkdownIt:
    return create_parser()


class EventSource:
    """Produces formatting events from Markdown text.

    Usage:
        >>> source = EventSource()
        >>> for event in source.events("Some *text*"):
        ...     print(event)

    """

    __slots__ = ("_md",)

    def __init__(self, md: MarkdownIt | None = None) -> None:
        """Initialize the event source.

        Args:
            md: Preconfigured MarkdownIt instance. Defaults to a shared
                instance from create_parser().
        """
        self._md = md if md is not None else _shared_parser()

    def events(self, source: str) -> Iterator[Event]:
        """Parse source and yield its events in document order."""
        tokens = self._md.parse(source)
        logger.debug("parsed %d chars into %d block tokens", len(source), len(tokens))
        return self._block_events(tokens)

    def _block_events(self, tokens: Sequence[Token]) -> Iterator[Event]:
        open_blocks: list[BlockKind] = []

        for index, token in enumerate(tokens):
            if token.type in _BLOCK_CLOSERS:
                yield BlockEnd(open_blocks.pop())
                continue

            kind: BlockKind | None = None
            match token.type:
                case "paragraph_open":
                    kind = BlockKind.paragraph()
                case "heading_open":
                    kind = BlockKind.heading(int(token.tag[1:]))
                case "bullet_list_open":
                    kind = BlockKind.list_block(tight=_is_tight(tokens, index))
                case "ordered_list_open":
                    kind = BlockKind.list_block(
                        ordered=True,
                        start=int(token.attrGet("start") or 1),
                        tight=_is_tight(tokens, index),
                    )
                case "list_item_open":
                    kind = BlockKind.list_item()
                case "blockquote_open":
                    kind = BlockKind.block_quote()
                case "table_open":
                    kind = BlockKind.table(_table_alignments(tokens, index))
                case "tr_open":
                    kind = BlockKind.table_row()
                case "th_open" | "td_open":
                    kind = BlockKind.table_cell()
                case "fence" | "code_block":
                    code = BlockKind.code_block(token.info.strip() if token.type == "fence" else None)
                    yield BlockStart(code)
                    yield Text(token.content)
                    yield BlockEnd(code)
                case "html_block":
                    yield HtmlBlock(token.content)
                case "hr":
                    yield Rule()
                case "inline":
                    yield from _inline_events(token.children or [])
                case "thead_open" | "thead_close" | "tbody_open" | "tbody_close":
                    pass
                case _:
                    logger.debug("skipping unsupported token %s", token.type)

            if kind is not None:
                open_blocks.append(kind)
                yield BlockStart(kind)


def _is_tight(tokens: Sequence[Token], index: int) -> bool:
    """Whether the list opened at ``tokens[index]`` is tight.

    markdown-it hides the paragraphs that are direct children of a tight
    list's items; the first such paragraph decides. A list whose items hold
    no paragraphs at all renders identically either way and counts as tight.
    """
    level = tokens[index].level
    for token in tokens[index + 1 :]:
        if token.level == level and token.nesting == -1:
            break
        if token.type == "paragraph_open" and token.level == level + 2:
            return token.hidden
    return True


def _table_alignments(tokens: Sequence[Token], index: int) -> tuple[str | None, ...]:
    aligns: list[str | None] = []
    for token in tokens[index + 1 :]:
        if token.type == "th_open":
            style = str(token.attrGet("style") or "")
            aligns.append(style.removeprefix("text-align:") or None)
        elif token.type == "tr_close":
            break
    return tuple(aligns)


def _inline_events(children: Sequence[Token]) -> Iterator[Event]:
    index = 0
    while index < len(children):
        token = children[index]
        index += 1

        simple = _SIMPLE_INLINE.get(token.type)
        if simple is not None:
            yield simple
            continue

        match token.type:
            case "text":
                yield Text(token.content)
            case "text_special":
                # Escape or entity: keep the source spelling
                yield Text(token.markup)
            case "code_inline":
                yield Code(token.content)
            case "html_inline":
                yield InlineHtml(token.content)
            case "link_open" if token.markup == "autolink":
                text = ""
                while index < len(children) and children[index].type != "link_close":
                    text += children[index].content
                    index += 1
                index += 1  # link_close
                yield Autolink(str(token.attrGet("href") or ""), text)
            case "link_open":
                yield LinkStart(str(token.attrGet("href") or ""), _title(token))
            case "image":
                yield Image(
                    str(token.attrGet("src") or ""),
                    _alt_text(token.children or []),
                    _title(token),
                )
            case _:
                logger.debug("skipping unsupported inline token %s", token.type)


def _title(token: Token) -> str | None:
    title = token.attrGet("title")
    return str(title) if title else None


def _alt_text(children: Sequence[Token]) -> str:
    """Image alt text in source spelling, minus nested inline markup.

    Alt text is plain text once rendered, so emphasis and link markers
    inside it carry no meaning and are dropped.
    """
    parts: list[str] = []
    for token in children:
        match token.type:
            case "text" | "html_inline":
                parts.append(token.content)
            case "text_special":
                parts.append(token.markup)
            case "code_inline":
                parts.append(code_span(token.content))
            case "softbreak" | "hardbreak":
                parts.append(" ")
            case "image":
                parts.append(_alt_text(token.children or []))
    return "".join(parts)
