"""Context stack: the block nesting the renderer is currently inside.

One frame per open block, pushed on BlockStart and popped on the matching
BlockEnd in strict LIFO order. The stack answers the question every output
line asks: what goes in front of me?

Prefix composition walks the frames bottom to top:
- BlockQuote adds ``"> "`` (``">"`` on a blank line)
- ListItem adds its marker (``"- "``, ``"3. "``) on the item's first line,
  and the same width of spaces on every later line
- everything else, code blocks included, adds nothing

Example:
    >>> stack = ContextStack()
    >>> quote = stack.push(BlockKind.block_quote())
    >>> item = stack.push(BlockKind.list_item(), marker="- ")
    >>> stack.take_prefix()
    '> - '
    >>> stack.take_prefix()
    '>   '

Thread Safety:
    A ContextStack belongs to a single format call. No shared state.

"""

from __future__ import annotations

from dataclasses import dataclass

from mdfmt.errors import ConsistencyError
from mdfmt.events import BlockKind, BlockType

_DOCUMENT = BlockKind(BlockType.DOCUMENT)


@dataclass(slots=True)
class ContextFrame:
    """One open block plus the rendering state derived for it.

    Attributes:
        kind: The block being rendered
        marker: List item marker including its trailing space
        marker_pending: True until the item's first line has been written
        next_number: Next ordinal for an ordered list's items
        alternate: True if this list uses the alternate marker character
        last_child: Kind of the most recently finished child block
        last_child_alternate: Whether that child was a list using the
            alternate marker

    """

    kind: BlockKind
    marker: str = ""
    marker_pending: bool = False
    next_number: int = 1
    alternate: bool = False
    last_child: BlockKind | None = None
    last_child_alternate: bool = False

    @property
    def type(self) -> BlockType:
        return self.kind.type


class ContextStack:
    """Stack of open block frames above a permanent document root.

    The root frame is never popped; it records the last top-level block so
    that sibling rules (e.g., two adjacent lists) work at every depth.

    """

    __slots__ = ("_frames",)

    def __init__(self) -> None:
        self._frames: list[ContextFrame] = [ContextFrame(_DOCUMENT)]

    def push(self, kind: BlockKind, *, marker: str = "") -> ContextFrame:
        """Open a block.

        Args:
            kind: Block being opened
            marker: List item marker, written on the item's first line

        Returns:
            The new frame.
        """
        frame = ContextFrame(kind, marker=marker, marker_pending=bool(marker))
        if kind.type is BlockType.LIST:
            frame.next_number = kind.start
        self._frames.append(frame)
        return frame

    def pop(self, kind: BlockKind) -> ContextFrame:
        """Close the innermost block, which must be of the same type as ``kind``.

        The closed block is recorded as the last child of its parent.

        Raises:
            ConsistencyError: If nothing is open or the innermost block is a
                different type.
        """
        if len(self._frames) == 1:
            raise ConsistencyError("block closed with nothing open", None, kind.name)
        top = self._frames[-1]
        if top.type is not kind.type:
            raise ConsistencyError("block closed out of order", top.kind.name, kind.name)

        self._frames.pop()
        parent = self._frames[-1]
        parent.last_child = top.kind
        parent.last_child_alternate = top.alternate
        return top

    def record(self, kind: BlockKind) -> None:
        """Note a leaf block that has no start/end pair (rule, raw HTML)."""
        self.top.last_child = kind
        self.top.last_child_alternate = False

    @property
    def top(self) -> ContextFrame:
        """Innermost frame (the root when nothing is open)."""
        return self._frames[-1]

    @property
    def depth(self) -> int:
        """Number of open blocks."""
        return len(self._frames) - 1

    def is_open(self) -> bool:
        return len(self._frames) > 1

    def inside(self, block_type: BlockType) -> bool:
        """Whether any open frame is of ``block_type``."""
        return any(frame.type is block_type for frame in self._frames[1:])

    def marker_pending(self) -> bool:
        """Whether some list item has not written its first line yet."""
        return any(frame.marker_pending for frame in self._frames)

    def current_prefix(self) -> str:
        """Prefix for the next line, without consuming pending markers."""
        parts: list[str] = []
        for frame in self._frames[1:]:
            if frame.type is BlockType.BLOCK_QUOTE:
                parts.append("> ")
            elif frame.type is BlockType.LIST_ITEM:
                parts.append(frame.marker if frame.marker_pending else " " * len(frame.marker))
        return "".join(parts)

    def take_prefix(self) -> str:
        """Prefix for the next content line; pending item markers are used up."""
        prefix = self.current_prefix()
        for frame in self._frames:
            frame.marker_pending = False
        return prefix

    def blank_prefix(self) -> str:
        """Prefix for a blank line: quote markers only, trailing space stripped."""
        return self.current_prefix().rstrip()

    def continuation_width(self) -> int:
        """Width taken by the prefix of every line after an item's first.

        Markers and their indentation have the same width, so this is also
        the width of a first line.
        """
        return len(self.current_prefix())

    def tight(self) -> bool:
        """Whether blocks at the current position are packed without blank lines.

        True inside a list item whose list is tight, looking through nothing
        else: a blockquote inside a tight item starts a fresh context.
        """
        for index in range(len(self._frames) - 1, 0, -1):
            frame = self._frames[index]
            if frame.type is BlockType.LIST_ITEM:
                return self._frames[index - 1].kind.tight
            if frame.type is BlockType.LIST:
                return frame.kind.tight
            if frame.type is BlockType.BLOCK_QUOTE:
                return False
        return False
