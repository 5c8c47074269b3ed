"""Inline renderer: inline events to canonical, wrap-ready tokens.

Every inline construct (emphasis, strong, strikethrough, code span, link,
image, autolink, inline HTML) is rendered to its canonical spelling and
handed to the wrap engine as a single atomic token, so no construct is ever
split across a line boundary. Plain text outside constructs stays breakable.
Literal asterisks in text are written as ``\\*``: emphasis is always
spelled with ``*``, and an unescaped literal could pair with it.

Canonical spellings:
    strong          **text**
    emphasis        *text*          (source ``_`` or ``*``)
    strikethrough   ~~text~~
    code span       `code`          (fence grows past inner backtick runs)
    link            [text](url "title")
    autolink        [text](url)     (downgraded: the event carries no origin)
    image           ![alt](url "title")

Thread Safety:
    InlineRenderer instances are local to one block of one format call.

"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from mdfmt.errors import ConsistencyError
from mdfmt.wrap import Break, Token, guard_continuations

_BACKTICK_RUNS = re.compile(r"`+")
_WHITESPACE = re.compile(r"[ \t\r\n]+")
_AUTOLINK_PUNCTUATION = re.compile(r"[\\`*_\[\]<>&~]")
# Pipes not already escaped
_UNESCAPED_PIPE = re.compile(r"(?<!\\)\|")
# Literal asterisks would pair with the emphasis markers written around them
_UNESCAPED_STAR = re.compile(r"(?<!\\)\*")

# Span kind -> (opening marker, closing marker)
_MARKERS: dict[str, tuple[str, str]] = {
    "emphasis": ("*", "*"),
    "strong": ("**", "**"),
    "strikethrough": ("~~", "~~"),
}


def code_span(code: str) -> str:
    """Render inline code with the shortest safe backtick fence.

    The fence is one backtick longer than the longest run inside the code.
    A single space of padding is added on both sides when the content
    starts or ends with a backtick, or starts and ends with a space, since
    the parser would otherwise merge or strip those characters.

    Example:
        >>> code_span("a`b")
        '``a`b``'
        >>> code_span("`x")
        '`` `x ``'
    """
    longest = max((len(run) for run in _BACKTICK_RUNS.findall(code)), default=0)
    fence = "`" * (longest + 1)
    if code.startswith("`") or code.endswith("`"):
        code = f" {code} "
    elif code.startswith(" ") and code.endswith(" ") and code.strip(" "):
        code = f" {code} "
    return f"{fence}{code}{fence}"


def link_destination(url: str) -> str:
    """Render a link destination so it re-parses to the same URL.

    Angle brackets are used when the URL is empty, holds whitespace, or has
    parentheses that do not balance.
    """
    if not url or any(c in url for c in " \t\n<>") or not _parens_balanced(url):
        escaped = url.replace("\\", "\\\\").replace("<", "\\<").replace(">", "\\>")
        return f"<{escaped}>"
    return url


def link_title(title: str | None) -> str:
    """Render the optional ``"title"`` segment, including its leading space."""
    if not title:
        return ""
    escaped = title.replace("\\", "\\\\").replace('"', '\\"')
    return f' "{escaped}"'


def _parens_balanced(url: str) -> bool:
    depth = 0
    for char in url:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth < 0:
                return False
    return depth == 0


@dataclass(slots=True)
class _Span:
    """An open inline construct collecting its rendered contents."""

    kind: str
    url: str = ""
    title: str | None = None
    parts: list[str] = field(default_factory=list)


class InlineRenderer:
    """Accumulate inline events for one block into wrap-engine tokens.

    Top-level text stays breakable; everything inside an open construct is
    flattened into the construct's atomic token when it closes.

    Usage:
        >>> inline = InlineRenderer()
        >>> inline.text("Use ")
        >>> inline.code("x = 1")
        >>> inline.text(" here.")
        >>> [t.text for t in inline.finish()]
        ['Use ', '`x = 1`', ' here.']

    """

    __slots__ = ("_escape_pipes", "_items", "_keep_soft_breaks", "_single_line", "_spans")

    def __init__(
        self,
        *,
        escape_pipes: bool = False,
        single_line: bool = False,
        keep_soft_breaks: bool = False,
    ) -> None:
        """Initialize an empty inline renderer.

        Args:
            escape_pipes: Escape ``|`` in text and code (table cells)
            single_line: Output must fit on one line (headings, cells), so
                hard breaks inside constructs become spaces
            keep_soft_breaks: Keep soft breaks inside constructs as newlines
                (PRESERVE mode) instead of spaces
        """
        self._escape_pipes = escape_pipes
        self._single_line = single_line
        self._keep_soft_breaks = keep_soft_breaks and not single_line
        self._items: list[Token | Break] = []
        self._spans: list[_Span] = []

    # -------------------------------------------------------------------------
    # Leaves
    # -------------------------------------------------------------------------

    def text(self, content: str) -> None:
        content = _UNESCAPED_STAR.sub(r"\\*", content)
        if self._escape_pipes:
            content = _escape_pipes(content)
        if self._spans:
            self._spans[-1].parts.append(_WHITESPACE.sub(" ", content))
        else:
            self._items.append(Token(content))

    def code(self, code: str) -> None:
        rendered = code_span(code)
        if self._escape_pipes:
            rendered = _escape_pipes(rendered)
        self._atom(rendered)

    def html(self, html: str) -> None:
        self._atom(html)

    def image(self, url: str, alt: str, title: str | None = None) -> None:
        self._atom(f"![{alt}]({link_destination(url)}{link_title(title)})")

    def autolink(self, url: str, text: str = "") -> None:
        # Autolink text is literal; as link text its punctuation would be markup
        label = _AUTOLINK_PUNCTUATION.sub(r"\\\g<0>", text or url)
        self._atom(f"[{label}]({link_destination(url)})")

    def soft_break(self) -> None:
        if self._spans:
            self._spans[-1].parts.append("\n" if self._keep_soft_breaks else " ")
        else:
            self._items.append(Break(hard=False))

    def hard_break(self) -> None:
        if self._spans:
            # Kept inside the atom; the block renderer prefixes the new line
            self._spans[-1].parts.append(" " if self._single_line else "  \n")
        else:
            self._items.append(Break(hard=True))

    # -------------------------------------------------------------------------
    # Constructs
    # -------------------------------------------------------------------------

    def open(self, kind: str, *, url: str = "", title: str | None = None) -> None:
        """Open an emphasis, strong, strikethrough, or link span."""
        self._spans.append(_Span(kind, url, title))

    def close(self, kind: str) -> None:
        """Close the innermost span, which must be of ``kind``.

        Raises:
            ConsistencyError: If no span is open or the innermost differs.
        """
        if not self._spans or self._spans[-1].kind != kind:
            expected = self._spans[-1].kind if self._spans else None
            raise ConsistencyError("inline span closed out of order", expected, kind)

        span = self._spans.pop()
        inner = "".join(span.parts)
        if span.kind == "link":
            rendered = f"[{inner}]({link_destination(span.url)}{link_title(span.title)})"
        else:
            opening, closing = _MARKERS[span.kind]
            rendered = f"{opening}{inner}{closing}"
        self._atom(rendered)

    def finish(self) -> list[Token | Break]:
        """Return the collected tokens and reset.

        Raises:
            ConsistencyError: If a span is still open.
        """
        if self._spans:
            raise ConsistencyError("inline span left open", self._spans[-1].kind, None)
        items, self._items = self._items, []
        return items

    def _atom(self, rendered: str) -> None:
        if self._spans:
            self._spans[-1].parts.append(rendered)
        elif "\n" in rendered:
            self._items.append(Token(guard_continuations(rendered), breakable=False))
        else:
            self._items.append(Token(rendered, breakable=False))


def _escape_pipes(content: str) -> str:
    return _UNESCAPED_PIPE.sub(r"\\|", content)
