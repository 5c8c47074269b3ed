"""Typed formatting events for mdfmt.

The event source turns Markdown text into a flat, ordered stream of these
events; the renderer consumes the stream exactly once, front to back.

All events are frozen dataclasses with slots for:
- Immutability: produced once, consumed once, never mutated
- Pattern matching: ``match event: case Text(): ...`` works naturally
- Memory efficiency: __slots__ keeps long streams cheap

Event Hierarchy:
Event
├── BlockStart(kind) / BlockEnd(kind)
├── Text, Code, InlineHtml
├── SoftBreak, HardBreak
├── EmphasisStart/End, StrongStart/End, StrikeStart/End
├── LinkStart/LinkEnd, Image, Autolink
└── Rule, HtmlBlock

Thread Safety:
All events are frozen (immutable) and safe to share across threads.

"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Literal

Alignment = Literal["left", "center", "right"] | None


class BlockType(Enum):
    """Discriminant for BlockKind."""

    DOCUMENT = auto()  # root context frame only
    PARAGRAPH = auto()
    HEADING = auto()
    LIST = auto()
    LIST_ITEM = auto()
    BLOCK_QUOTE = auto()
    CODE_BLOCK = auto()
    HTML_BLOCK = auto()
    TABLE = auto()
    TABLE_ROW = auto()
    TABLE_CELL = auto()
    RULE = auto()  # context record only; rules arrive as Rule events


@dataclass(frozen=True, slots=True)
class BlockKind:
    """A block-level construct, with the attributes its variant needs.

    Use the classmethod constructors rather than filling fields by hand.

    Attributes:
        type: Which variant this is
        level: Heading level (1-6), HEADING only
        ordered: True for ordered lists, LIST only
        start: Declared number of the first item, ordered LIST only
        tight: False if the list's items are separated by blank lines
        language: Info string of a fenced code block, or None
        alignments: Column alignments, TABLE only

    """

    type: BlockType
    level: int = 0
    ordered: bool = False
    start: int = 1
    tight: bool = True
    language: str | None = None
    alignments: tuple[Alignment, ...] = field(default=())

    @classmethod
    def paragraph(cls) -> "BlockKind":
        return cls(BlockType.PARAGRAPH)

    @classmethod
    def heading(cls, level: int) -> "BlockKind":
        if not 1 <= level <= 6:
            raise ValueError(f"heading level must be 1-6, got {level}")
        return cls(BlockType.HEADING, level=level)

    @classmethod
    def list_block(cls, *, ordered: bool = False, start: int = 1, tight: bool = True) -> "BlockKind":
        return cls(BlockType.LIST, ordered=ordered, start=start, tight=tight)

    @classmethod
    def list_item(cls) -> "BlockKind":
        return cls(BlockType.LIST_ITEM)

    @classmethod
    def block_quote(cls) -> "BlockKind":
        return cls(BlockType.BLOCK_QUOTE)

    @classmethod
    def code_block(cls, language: str | None = None) -> "BlockKind":
        return cls(BlockType.CODE_BLOCK, language=language or None)

    @classmethod
    def html_block(cls) -> "BlockKind":
        return cls(BlockType.HTML_BLOCK)

    @classmethod
    def table(cls, alignments: tuple[Alignment, ...] = ()) -> "BlockKind":
        return cls(BlockType.TABLE, alignments=alignments)

    @classmethod
    def table_row(cls) -> "BlockKind":
        return cls(BlockType.TABLE_ROW)

    @classmethod
    def table_cell(cls) -> "BlockKind":
        return cls(BlockType.TABLE_CELL)

    @property
    def name(self) -> str:
        """Short name for error messages."""
        return self.type.name.lower()


# =============================================================================
# Block events
# =============================================================================


@dataclass(frozen=True, slots=True)
class BlockStart:
    """Opens a block; must be balanced by a BlockEnd of the same type."""

    kind: BlockKind


@dataclass(frozen=True, slots=True)
class BlockEnd:
    """Closes the innermost open block."""

    kind: BlockKind


@dataclass(frozen=True, slots=True)
class Rule:
    """Thematic break (``---``, ``***``, ``___``)."""


@dataclass(frozen=True, slots=True)
class HtmlBlock:
    """Raw HTML block, passed through verbatim."""

    html: str


# =============================================================================
# Inline events
# =============================================================================


@dataclass(frozen=True, slots=True)
class Text:
    """Literal text, exactly as it must be written back.

    Backslash escapes and entity references keep their source spelling,
    so ``\\*`` stays ``\\*`` rather than becoming a bare asterisk.
    Inside a code block this is the raw code body.

    """

    content: str


@dataclass(frozen=True, slots=True)
class Code:
    """Inline code span content (without the backtick fence)."""

    code: str


@dataclass(frozen=True, slots=True)
class InlineHtml:
    """Raw inline HTML tag or comment."""

    html: str


@dataclass(frozen=True, slots=True)
class SoftBreak:
    """Line ending inside a paragraph with no forced-break semantics."""


@dataclass(frozen=True, slots=True)
class HardBreak:
    """Forced line break (two trailing spaces or a trailing backslash)."""


@dataclass(frozen=True, slots=True)
class EmphasisStart:
    pass


@dataclass(frozen=True, slots=True)
class EmphasisEnd:
    pass


@dataclass(frozen=True, slots=True)
class StrongStart:
    pass


@dataclass(frozen=True, slots=True)
class StrongEnd:
    pass


@dataclass(frozen=True, slots=True)
class StrikeStart:
    pass


@dataclass(frozen=True, slots=True)
class StrikeEnd:
    pass


@dataclass(frozen=True, slots=True)
class LinkStart:
    """Opens a link; the link text follows as inline events."""

    url: str
    title: str | None = None


@dataclass(frozen=True, slots=True)
class LinkEnd:
    pass


@dataclass(frozen=True, slots=True)
class Image:
    """Complete image; alt text is already in its source spelling."""

    url: str
    alt: str
    title: str | None = None


@dataclass(frozen=True, slots=True)
class Autolink:
    """``<url>`` autolink. ``text`` is what the reader sees (no ``mailto:``)."""

    url: str
    text: str = ""


type Event = (
    BlockStart
    | BlockEnd
    | Rule
    | HtmlBlock
    | Text
    | Code
    | InlineHtml
    | SoftBreak
    | HardBreak
    | EmphasisStart
    | EmphasisEnd
    | StrongStart
    | StrongEnd
    | StrikeStart
    | StrikeEnd
    | LinkStart
    | LinkEnd
    | Image
    | Autolink
)
