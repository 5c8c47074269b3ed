"""Word-wrap engine.

Turns a paragraph's inline tokens into physical lines that fit the
available width, according to the wrap mode:

- ALWAYS: greedy fill; source soft breaks become spaces
- NEVER: one line per paragraph; source soft breaks become spaces
- PRESERVE: source soft breaks are kept; only over-long lines are split

Breaks the engine inserts for width are written as hard breaks (two
trailing spaces). A hard break re-parses as exactly one forced break, so a
second pass sees the same segments and makes the same decisions; this is
what keeps formatting idempotent. Source hard breaks are always kept.

Nothing written at the start of a line may open a block. Inserted breaks
never land before such a word; after a source break, the word is escaped
(``\\#``, ``1\\.``, ``\\>``).

Tokens are either breakable text (split at whitespace) or atomic
constructs such as ``[text](url)``, which are never split. Runs of
whitespace collapse to one space before any decision is made.

Example:
    >>> wrap_tokens([Token("one two three four")], mode=WrapMode.ALWAYS, width=10)
    ['one two  ', 'three four']

"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum, auto

from mdfmt.config import WrapMode

# Line ending of a hard break, minus the newline
HARD_BREAK = "  "

_SPACES = re.compile(r"[ \t\r\n]+")

# Words that would open a new block (or a setext underline, or a table)
# if an inserted break left them at the start of a line.
_UNSAFE_LINE_START = re.compile(
    r"(?:[-+*=_|:]+|\d+[.)]|#{1,6})$"
    r"|>|<|`{3,}[^`]*$|~~~"
)

# Ordered list marker; the delimiter is what gets escaped
_ORDERED_MARKER = re.compile(r"(\d+)[.)]$")

_HTML_BLOCK_TAGS = (
    "address|article|aside|base|basefont|blockquote|body|caption|center|col|colgroup|dd|details|"
    "dialog|dir|div|dl|dt|fieldset|figcaption|figure|footer|form|frame|frameset|h[1-6]|head|header|"
    "hr|html|iframe|legend|li|link|main|menu|menuitem|nav|noframes|ol|optgroup|option|p|param|"
    "search|section|source|summary|table|tbody|td|tfoot|th|thead|title|tr|track|ul"
)
# Raw HTML that may interrupt a paragraph (CommonMark HTML blocks 1 to 6)
_HTML_BLOCK_START = re.compile(
    rf"<(?:(?:script|pre|style|textarea)(?:[\s>]|$)|!|\?|/?(?:{_HTML_BLOCK_TAGS})(?:[\s/>]|$))",
    re.IGNORECASE,
)


@dataclass(frozen=True, slots=True)
class Token:
    """A piece of inline output.

    Attributes:
        text: Rendered text
        breakable: True for plain text that may be split at whitespace;
            False for an atomic construct

    """

    text: str
    breakable: bool = True


@dataclass(frozen=True, slots=True)
class Break:
    """A line break from the source. ``hard`` for forced breaks."""

    hard: bool


class Terminator(Enum):
    """What ends a segment of words."""

    SOFT = auto()
    HARD = auto()
    END = auto()


@dataclass(slots=True)
class Segment:
    """Words between two source breaks, and the break that ends them."""

    words: list[str]
    end: Terminator


def split_segments(items: Iterable[Token | Break]) -> list[Segment]:
    """Group tokens into whitespace-separated words, split at source breaks.

    Atomic tokens glue onto neighbouring text with no whitespace between
    them, so ``see `code`,`` stays one word.
    """
    segments: list[Segment] = []
    words: list[str] = []
    current = ""

    for item in items:
        if isinstance(item, Break):
            if current:
                words.append(current)
                current = ""
            segments.append(Segment(words, Terminator.HARD if item.hard else Terminator.SOFT))
            words = []
            continue

        if not item.breakable:
            current += item.text
            continue

        first, *rest = _SPACES.split(item.text)
        current += first
        for piece in rest:
            if current:
                words.append(current)
            current = piece

    if current:
        words.append(current)
    segments.append(Segment(words, Terminator.END))
    return segments


def join_words(items: Iterable[Token | Break]) -> str:
    """Collapse tokens onto a single line, breaks included (headings, cells)."""
    return " ".join(word for segment in split_segments(items) for word in segment.words)


def wrap_tokens(items: Iterable[Token | Break], *, mode: WrapMode, width: int) -> list[str]:
    """Wrap one paragraph's tokens into lines.

    Args:
        items: Inline tokens and source breaks, in order
        mode: Wrap mode
        width: Width available to text, i.e. line width minus the prefix

    Returns:
        Physical lines without prefixes or newlines. Lines ending in a hard
        break carry the trailing HARD_BREAK spaces.
    """
    segments = split_segments(items)
    if mode is not WrapMode.PRESERVE:
        segments = _join_soft(segments)

    segments = _guard_line_starts([segment for segment in segments if segment.words])
    if not segments:
        return []
    # A paragraph never ends in a break
    segments[-1].end = Terminator.END

    width = max(width, 1)
    lines: list[str] = []
    for segment in segments:
        if mode is WrapMode.NEVER:
            line = " ".join(segment.words)
            lines.append(line + HARD_BREAK if segment.end is Terminator.HARD else line)
        else:
            lines.extend(_fill(_units(segment.words), segment.end, width))
    return lines


def escape_line_start(line: str) -> str:
    """Backslash-escape block syntax at the start of a continuation line.

    The parser strips the indentation of a paragraph's continuation lines,
    so text that was indented in the source lands at column zero and could
    open a heading, list, quote, fence, or setext underline there.

    Example:
        >>> escape_line_start("# not a heading")
        '\\\\# not a heading'
        >>> escape_line_start("2. not a list")
        '2\\\\. not a list'
    """
    word = line.split(" ", 1)[0]
    if not _UNSAFE_LINE_START.match(word):
        return line
    if word.startswith("<"):
        # Inline HTML other than a block opener is harmless here
        return "\\" + line if _HTML_BLOCK_START.match(line) else line
    if ordered := _ORDERED_MARKER.match(word):
        digits = ordered[1]
        return f"{digits}\\{line[len(digits):]}"
    return "\\" + line


def guard_continuations(text: str) -> str:
    """Make every line of a multi-line atom after the first safe to start a line.

    A line after a soft break that would open an HTML block is pulled back
    onto the previous line; anything else is escaped.
    """
    first, *rest = text.split("\n")
    lines = [first]
    for line in rest:
        if not lines[-1].endswith(HARD_BREAK) and _HTML_BLOCK_START.match(line):
            lines[-1] = f"{lines[-1]} {line}"
        else:
            lines.append(escape_line_start(line))
    return "\n".join(lines)


def _guard_line_starts(segments: list[Segment]) -> list[Segment]:
    """Escape the first word of every segment that starts a new line."""
    guarded: list[Segment] = []
    for segment in segments:
        if guarded:
            previous = guarded[-1]
            first = segment.words[0]
            if previous.end is Terminator.SOFT and _HTML_BLOCK_START.match(first):
                # Raw HTML cannot be escaped; give up the soft break instead
                previous.words.extend(segment.words)
                previous.end = segment.end
                continue
            segment.words[0] = escape_line_start(first)
        guarded.append(segment)
    return guarded


def _join_soft(segments: list[Segment]) -> list[Segment]:
    joined: list[Segment] = []
    pending: list[str] = []
    for segment in segments:
        pending.extend(segment.words)
        if segment.end is not Terminator.SOFT:
            joined.append(Segment(pending, segment.end))
            pending = []
    return joined


def _units(words: list[str]) -> list[str]:
    """Glue words that must not start (or end) an inserted line to a neighbour."""
    units: list[str] = []
    for word in words:
        if units and (_UNSAFE_LINE_START.match(word) or units[-1].endswith("\\")):
            units[-1] = f"{units[-1]} {word}"
        else:
            units.append(word)
    return units


def _fill(units: list[str], end: Terminator, width: int) -> list[str]:
    """Greedy line fill.

    Every line that ends in a break gets HARD_BREAK appended, so its text is
    held to ``width - len(HARD_BREAK)``. Only the final unit of a segment
    that does not end in a hard break may use the full width. A unit that
    fits nowhere goes on a line by itself.
    """
    lines: list[str] = []
    line = ""
    last = len(units) - 1

    for index, unit in enumerate(units):
        if not line:
            line = unit
            continue
        limit = width if index == last and end is not Terminator.HARD else width - len(HARD_BREAK)
        # Atoms may span physical lines; only the line being extended counts
        candidate = f"{line} {unit}"
        if len(line.rsplit("\n", 1)[-1]) + 1 + len(unit.split("\n", 1)[0]) <= limit:
            line = candidate
        else:
            lines.append(line + HARD_BREAK)
            line = unit

    lines.append(line + HARD_BREAK if end is Terminator.HARD else line)
    return lines
