"""Content-addressed format cache for mdfmt.

Provides (content_hash, options_hash) -> formatted text caching so that
unchanged documents are not re-parsed and re-rendered. Useful for editors
and watch loops that format the same buffers repeatedly.

Thread Safety:
    DictFormatCache guards get/put with a lock and may be shared by the
    batch driver's worker threads.

Example:
    >>> from mdfmt import format_markdown, DictFormatCache
    >>> cache = DictFormatCache()
    >>> out1 = format_markdown("# Hello", cache=cache)
    >>> out2 = format_markdown("# Hello", cache=cache)  # Cache hit
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Protocol

from mdfmt.utils.hashing import hash_str

if TYPE_CHECKING:
    from mdfmt.config import FormatOptions


class FormatCache(Protocol):
    """Protocol for content-addressed format caches.

    Cache key is (content_hash, options_hash). Cached value is the
    formatted document text.
    """

    def get(self, content_hash: str, options_hash: str) -> str | None:
        """Return cached output if present, else None."""
        ...

    def put(self, content_hash: str, options_hash: str, formatted: str) -> None:
        """Store formatted output in cache."""
        ...


class DictFormatCache:
    """In-memory format cache using a dict, safe to share between threads."""

    __slots__ = ("_data", "_lock")

    def __init__(self) -> None:
        self._data: dict[tuple[str, str], str] = {}
        self._lock = threading.Lock()

    def get(self, content_hash: str, options_hash: str) -> str | None:
        """Return cached output if present, else None."""
        with self._lock:
            return self._data.get((content_hash, options_hash))

    def put(self, content_hash: str, options_hash: str, formatted: str) -> None:
        """Store formatted output in cache."""
        with self._lock:
            self._data[(content_hash, options_hash)] = formatted

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)


def hash_content(source: str) -> str:
    """Compute SHA256 hash of source for cache key.

    Args:
        source: Markdown source text

    Returns:
        Hex digest of SHA256 hash
    """
    return hash_str(source)


def hash_options(options: FormatOptions) -> str:
    """Compute hash of FormatOptions for cache key.

    Args:
        options: FormatOptions to hash

    Returns:
        Hex digest of the options hash
    """
    parts = (
        str(options.width),
        options.wrap.value,
        options.ordered_list.value,
    )
    return hash_str("|".join(parts))


__all__ = [
    "DictFormatCache",
    "FormatCache",
    "hash_content",
    "hash_options",
]
