"""
mdfmt: Opinionated Markdown Formatter

Rewrites CommonMark/GFM documents into one canonical spelling: ATX
headings, ``-`` bullets, renumbered ordered lists, fenced code, ``---``
rules, piped tables, and prose wrapped to a configurable width. Formatting
is idempotent: formatting formatted output changes nothing.

Quick Start:
    >>> from mdfmt import format_markdown
    >>> format_markdown("#   Title\\n\\n*  one\\n*  two")
    '# Title\\n\\n- one\\n- two\\n'

    >>> # Options
    >>> from mdfmt import FormatOptions, WrapMode
    >>> options = FormatOptions(width=72, wrap=WrapMode.ALWAYS)
    >>> text = format_markdown(source, options)

    >>> # Or keep a configured formatter around
    >>> from mdfmt import Formatter
    >>> fmt = Formatter(options)
    >>> fmt.check("# Title\\n")
    True

Frontmatter:
    A leading ``---`` metadata block is passed through byte for byte and
    never parsed as Markdown.

Installation:
    pip install mdfmt               # Library and the ``mdfmt`` command

"""

from collections.abc import Iterable
from dataclasses import dataclass

from mdfmt.cache import DictFormatCache, FormatCache, hash_content, hash_options
from mdfmt.config import (
    FormatOptions,
    OrderedListMode,
    WrapMode,
    format_options_context,
    get_format_options,
    reset_format_options,
    set_format_options,
)
from mdfmt.errors import ConfigurationError, ConsistencyError, MdfmtError, SourceError
from mdfmt.events import BlockKind, BlockType, Event
from mdfmt.frontmatter import join_frontmatter, split_frontmatter
from mdfmt.renderers.markdown import MarkdownRenderer
from mdfmt.source import EventSource
from mdfmt.utils.logger import get_logger

__version__ = "0.1.0"

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class FormatResult:
    """Formatted text plus whether formatting changed anything.

    Attributes:
        content: The formatted document
        changed: True if ``content`` differs from the input

    """

    content: str
    changed: bool


def format_markdown(
    source: str,
    options: FormatOptions | None = None,
    *,
    cache: FormatCache | None = None,
) -> str:
    """Format a Markdown document.

    Args:
        source: Markdown source text, optionally starting with frontmatter
        options: Formatting options (uses the context default if None)
        cache: Optional content-addressed format cache. When provided,
            checks the cache before formatting; on miss, formats and stores
            the result.

    Returns:
        Formatted Markdown ending in exactly one newline, or the empty
        string for an empty document.

    Raises:
        ConsistencyError: If the parsed document cannot be rendered.

    Example:
        >>> format_markdown("Some  *emphasis*  here")
        'Some *emphasis* here\\n'
    """
    return format_with_result(source, options, cache=cache).content


def format_with_result(
    source: str,
    options: FormatOptions | None = None,
    *,
    cache: FormatCache | None = None,
) -> FormatResult:
    """Format a document and report whether it changed.

    One engine invocation serves both the output and the change flag, so
    check mode costs no more than formatting.

    Args:
        source: Markdown source text
        options: Formatting options (uses the context default if None)
        cache: Optional content-addressed format cache

    Returns:
        FormatResult with the formatted content and the changed flag.
    """
    opts = options if options is not None else get_format_options()

    if cache is not None:
        content_hash = hash_content(source)
        options_hash = hash_options(opts)
        cached = cache.get(content_hash, options_hash)
        if cached is not None:
            logger.debug("format cache hit (%s)", content_hash[:12])
            return FormatResult(cached, cached != source)

    formatted = _format(source, opts)

    if cache is not None:
        cache.put(content_hash, options_hash, formatted)

    return FormatResult(formatted, formatted != source)


def check_markdown(source: str, options: FormatOptions | None = None) -> bool:
    """Return True if the document is already formatted.

    Example:
        >>> check_markdown("# Title\\n")
        True
        >>> check_markdown("Title\\n=====\\n")
        False
    """
    return not format_with_result(source, options).changed


def render_events(events: Iterable[Event], options: FormatOptions | None = None) -> str:
    """Render an already-produced event stream.

    For callers that build or transform events themselves. The stream must
    be balanced; frontmatter is not handled here.

    Raises:
        ConsistencyError: If the stream is malformed.
    """
    opts = options if options is not None else get_format_options()
    return MarkdownRenderer(opts).render(events)


def _format(source: str, options: FormatOptions) -> str:
    frontmatter, body = split_frontmatter(source)
    rendered = MarkdownRenderer(options).render(EventSource().events(body))
    logger.debug("formatted %d chars into %d chars", len(source), len(rendered))
    return join_frontmatter(frontmatter, rendered)


class Formatter:
    """Reusable formatter bound to one set of options.

    Usage:
        >>> fmt = Formatter(FormatOptions(width=60))
        >>> fmt("*  item")
        '- item\\n'
        >>> fmt.check("- item\\n")
        True

        >>> # Share a cache across calls
        >>> fmt = Formatter(cache=DictFormatCache())
        >>> outputs = fmt.format_many(["# A", "# B", "# A"])

    Thread Safety:
        Options are immutable and every call builds its own render state.
        Safe to share one Formatter between threads, provided the cache (if
        any) is thread-safe; DictFormatCache is.

    """

    __slots__ = ("_cache", "_options")

    def __init__(
        self,
        options: FormatOptions | None = None,
        *,
        cache: FormatCache | None = None,
    ) -> None:
        """Initialize formatter.

        Args:
            options: Formatting options. Captured from the context default
                at construction time when None.
            cache: Optional format cache used by every call
        """
        self._options = options if options is not None else get_format_options()
        self._cache = cache

    @property
    def options(self) -> FormatOptions:
        return self._options

    def __call__(self, source: str) -> str:
        """Format one document."""
        return self.format(source)

    def format(self, source: str) -> str:
        """Format one document."""
        return format_markdown(source, self._options, cache=self._cache)

    def format_with_result(self, source: str) -> FormatResult:
        """Format one document and report whether it changed."""
        return format_with_result(source, self._options, cache=self._cache)

    def check(self, source: str) -> bool:
        """Return True if the document is already formatted."""
        return not self.format_with_result(source).changed

    def format_many(self, sources: Iterable[str]) -> list[str]:
        """Format several documents in order."""
        return [self.format(source) for source in sources]


__all__ = [  # noqa: RUF022
    # Main API
    "format_markdown",
    "format_with_result",
    "check_markdown",
    "render_events",
    "Formatter",
    "FormatResult",
    # Configuration
    "FormatOptions",
    "WrapMode",
    "OrderedListMode",
    "format_options_context",
    "get_format_options",
    "set_format_options",
    "reset_format_options",
    # Cache
    "FormatCache",
    "DictFormatCache",
    "hash_content",
    "hash_options",
    # Events
    "Event",
    "BlockKind",
    "BlockType",
    "EventSource",
    "MarkdownRenderer",
    # Frontmatter
    "split_frontmatter",
    "join_frontmatter",
    # Errors
    "MdfmtError",
    "ConfigurationError",
    "ConsistencyError",
    "SourceError",
]
