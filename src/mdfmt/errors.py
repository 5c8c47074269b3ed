"""Exception classes for mdfmt.

Provides standardized exceptions for error handling throughout mdfmt.
"""

from __future__ import annotations

from os import PathLike
from typing import Any


class MdfmtError(Exception):
    """Base exception for all mdfmt errors.

    Subclass this for specific error categories.
    """

    pass


class ConfigurationError(MdfmtError):
    """Invalid formatting options.

    Raised before any content is processed, so a document is never
    partially formatted with bad options.
    """

    def __init__(self, option: str, value: Any, message: str) -> None:
        """Initialize configuration error.

        Args:
            option: Name of the offending option (e.g., "width")
            value: The rejected value
            message: Description of what was expected
        """
        self.option = option
        self.value = value
        super().__init__(f"Invalid {option} {value!r}: {message}")


class ConsistencyError(MdfmtError):
    """The event stream violated the renderer's nesting discipline.

    Raised when a block end does not match the innermost open block, when
    inline spans are closed out of order, or when the stream ends with
    constructs still open. Never expected from a well-formed event source.
    """

    def __init__(self, message: str, expected: str | None = None, found: str | None = None) -> None:
        """Initialize consistency error.

        Args:
            message: Error description
            expected: Name of the construct that was open (optional)
            found: Name of the construct the stream tried to close (optional)
        """
        self.expected = expected
        self.found = found

        detail = ""
        if expected is not None or found is not None:
            detail = f" (expected {expected or 'nothing'}, found {found or 'nothing'})"
        super().__init__(f"{message}{detail}")


class SourceError(MdfmtError):
    """A file could not be read, decoded, or written.

    Reported per file by the batch driver; never aborts a batch.
    """

    def __init__(self, path: str | PathLike[str], message: str) -> None:
        """Initialize source error.

        Args:
            path: Path of the failing file
            message: Description of the failure
        """
        self.path = str(path)
        self.message = message
        super().__init__(f"{self.path}: {message}")
