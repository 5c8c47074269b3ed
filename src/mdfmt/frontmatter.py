"""Frontmatter guard.

A document may open with a metadata block delimited by ``---`` lines. The
block is opaque: it is cut off before parsing and glued back on unchanged,
byte for byte, including its own line endings.

Example:
    >>> fm, body = split_frontmatter("---\\ntitle: x\\n---\\n# Hi\\n")
    >>> fm
    '---\\ntitle: x\\n---\\n'
    >>> body
    '# Hi\\n'
"""

from __future__ import annotations

import re

# Opening delimiter must be the very first line
_OPEN = re.compile(r"---[ \t]*\r?\n")
# Closing delimiter: a line holding only ---, terminated by a newline or EOF
_CLOSE = re.compile(r"^---[ \t]*(?:\r?\n|\Z)", re.MULTILINE)


def split_frontmatter(source: str) -> tuple[str | None, str]:
    """Split a leading frontmatter block from the Markdown body.

    Args:
        source: Full document text

    Returns:
        (frontmatter, body). ``frontmatter`` is the exact text of the block
        including both delimiter lines, or None when the document has no
        frontmatter (or the block is never closed).
    """
    opening = _OPEN.match(source)
    if opening is None:
        return None, source

    closing = _CLOSE.search(source, opening.end())
    if closing is None:
        return None, source

    return source[: closing.end()], source[closing.end() :]


def join_frontmatter(frontmatter: str | None, body: str) -> str:
    """Re-attach frontmatter in front of the formatted body.

    One blank line separates the block from a non-empty body. The block
    itself is never modified.

    Args:
        frontmatter: Block returned by split_frontmatter, or None
        body: Formatted Markdown body

    Returns:
        Complete document text.
    """
    if frontmatter is None:
        return body
    if not body:
        return frontmatter
    # A non-empty body implies the closing delimiter ended with a newline
    return frontmatter + "\n" + body
