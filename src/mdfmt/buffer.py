"""Line buffer for formatted output.

Collects output one physical line at a time and joins once at the end,
the same append-then-join approach as a string builder. The buffer owns
the document-level output rules: no leading or trailing blank lines, and
exactly one final newline when there is any content.

Thread Safety:
    LineBuffer instances are local to each render() call.
    No shared mutable state.

"""

from __future__ import annotations


class LineBuffer:
    """Accumulate output lines.

    Usage:
        >>> out = LineBuffer()
        >>> out.line("# Title")
        >>> out.blank()
        >>> out.line("Body text.")
        >>> out.build()
        '# Title\\n\\nBody text.\\n'

    """

    __slots__ = ("_lines",)

    def __init__(self) -> None:
        """Initialize empty LineBuffer."""
        self._lines: list[str] = []

    def line(self, text: str) -> None:
        """Append one line (no newline)."""
        self._lines.append(text)

    def blank(self, prefix: str = "") -> None:
        """Append a separator line carrying only ``prefix`` (e.g. ``">"``).

        Separators are never written at the very start of the output or
        twice in a row.
        """
        if self._lines and self._lines[-1] != prefix:
            self._lines.append(prefix)

    def build(self) -> str:
        """Join the lines into the final document.

        Returns:
            Lines joined by newlines, ending in exactly one newline, or the
            empty string for an empty document.
        """
        lines = self._lines
        end = len(lines)
        while end and not lines[end - 1]:
            end -= 1
        if not end:
            return ""
        return "\n".join(lines[:end]) + "\n"

    def __len__(self) -> int:
        """Return number of lines."""
        return len(self._lines)

    def __bool__(self) -> bool:
        """Return True if any lines have been appended."""
        return bool(self._lines)
