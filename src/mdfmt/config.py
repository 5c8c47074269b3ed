"""Formatting options and ContextVar-based defaults for mdfmt.

Options are a frozen dataclass validated at construction time, so an
invalid width or mode fails before any content is touched.

Thread Safety:
    FormatOptions is immutable. The default-options ContextVar is
    context-local: each thread (and each asyncio task) sees its
    own value, so concurrent batch workers never interfere.

Usage:
    from mdfmt.config import FormatOptions, WrapMode

    options = FormatOptions(width=72, wrap=WrapMode.ALWAYS)

    # Or accept raw strings (e.g., from a CLI or a JS-style options dict)
    options = FormatOptions.from_dict({"width": 72, "wrap": "always"})

    # Scoped defaults for callers that pass options=None
    with format_options_context(options):
        text = format_markdown(source)

"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from enum import Enum
from typing import Any

from mdfmt.errors import ConfigurationError


class WrapMode(str, Enum):
    """How prose is wrapped.

    ALWAYS: reflow every paragraph to fit the width
    NEVER: unwrap each paragraph onto one line
    PRESERVE: keep the author's line breaks (default)

    """

    ALWAYS = "always"
    NEVER = "never"
    PRESERVE = "preserve"

    @classmethod
    def parse(cls, value: "WrapMode | str") -> "WrapMode":
        """Coerce an enum member or case-insensitive literal.

        Raises:
            ConfigurationError: If the literal is not a known mode.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise ConfigurationError("wrap", value, "expected always, never, or preserve")


class OrderedListMode(str, Enum):
    """How ordered list items are numbered.

    ASCENDING: 1. 2. 3. starting from the list's declared start (default)
    ONE: 1. 1. 1.

    """

    ASCENDING = "ascending"
    ONE = "one"

    @classmethod
    def parse(cls, value: "OrderedListMode | str") -> "OrderedListMode":
        """Coerce an enum member or case-insensitive literal.

        Raises:
            ConfigurationError: If the literal is not a known mode.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise ConfigurationError("ordered_list", value, "expected ascending or one")


@dataclass(frozen=True, slots=True)
class FormatOptions:
    """Immutable formatting configuration.

    Created once per invocation (or per Formatter instance) and only ever
    read by the engine.

    Attributes:
        width: Maximum line width, structural prefixes included (> 0)
        wrap: Prose wrapping mode
        ordered_list: Ordered list numbering mode

    """

    width: int = 80
    wrap: WrapMode = WrapMode.PRESERVE
    ordered_list: OrderedListMode = OrderedListMode.ASCENDING

    def __post_init__(self) -> None:
        # bool is an int subclass; True is not a width
        if isinstance(self.width, bool) or not isinstance(self.width, int):
            raise ConfigurationError("width", self.width, "expected a positive integer")
        if self.width <= 0:
            raise ConfigurationError("width", self.width, "expected a positive integer")
        # Frozen: coerce string literals in place
        object.__setattr__(self, "wrap", WrapMode.parse(self.wrap))
        object.__setattr__(self, "ordered_list", OrderedListMode.parse(self.ordered_list))

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> "FormatOptions":
        """Create FormatOptions from a dictionary.

        Only keys that are FormatOptions fields are used; unknown keys are
        silently ignored. Values are validated like the constructor's.

        Args:
            config_dict: Mapping of option names to values. Mode values may be
                enum members or string literals.

        Returns:
            New FormatOptions instance.

        Raises:
            ConfigurationError: If any recognized value is invalid.

        Example:
            >>> options = FormatOptions.from_dict({"width": 60, "wrap": "never", "x": 1})
            >>> options.wrap
            <WrapMode.NEVER: 'never'>

        """
        valid_fields = {f for f in cls.__dataclass_fields__}
        filtered = {k: v for k, v in config_dict.items() if k in valid_fields}
        return cls(**filtered)


# Module-level default options (reused, never recreated)
_DEFAULT_OPTIONS: FormatOptions = FormatOptions()

_format_options: ContextVar[FormatOptions] = ContextVar(
    "format_options",
    default=_DEFAULT_OPTIONS,
)


def get_format_options() -> FormatOptions:
    """Get the default options for the current context.

    Used by the API when a caller passes ``options=None``.
    """
    return _format_options.get()


def set_format_options(options: FormatOptions) -> None:
    """Set the default options for the current context.

    Only affects the current thread's context. Other threads are unaffected.
    """
    _format_options.set(options)


def reset_format_options() -> None:
    """Reset to the module-level default options."""
    _format_options.set(_DEFAULT_OPTIONS)


@contextmanager
def format_options_context(options: FormatOptions) -> Iterator[None]:
    """Context manager for temporary default options.

    Args:
        options: FormatOptions to use within the context.

    Yields:
        None

    Example:
        >>> with format_options_context(FormatOptions(width=40)):
        ...     get_format_options().width
        40

    Thread Safety:
        Only affects the current context. Restores the previous options even
        if an exception is raised.

    """
    previous = _format_options.get()
    _format_options.set(options)
    try:
        yield
    finally:
        _format_options.set(previous)


__all__ = [
    "FormatOptions",
    "OrderedListMode",
    "WrapMode",
    "format_options_context",
    "get_format_options",
    "reset_format_options",
    "set_format_options",
]
