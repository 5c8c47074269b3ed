"""Logging helpers for mdfmt.

Library modules only emit records through ``get_logger``; every logger sits
under the ``mdfmt`` namespace so one level setting covers the package.
Handlers are installed by the application, which for the ``mdfmt`` command
means ``configure_logging`` driven by ``-v``.

Example:
    >>> from mdfmt.utils.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.debug("Formatting document")
"""

from __future__ import annotations

import logging
import sys

ROOT = "mdfmt"

_FORMAT = "%(levelname)s %(name)s: %(message)s"


class _StderrHandler(logging.StreamHandler):
    """Write to whatever ``sys.stderr`` is at emit time, not at setup."""

    def __init__(self) -> None:
        logging.Handler.__init__(self)

    @property
    def stream(self):  # type: ignore[override]
        return sys.stderr


def get_logger(name: str) -> logging.Logger:
    """Return the logger for ``name`` inside the ``mdfmt`` namespace.

    Example:
        >>> get_logger("batch").name
        'mdfmt.batch'
    """
    if not (name == ROOT or name.startswith(f"{ROOT}.")):
        name = f"{ROOT}.{name}"
    return logging.getLogger(name)


def configure_logging(*, verbose: bool = False) -> logging.Logger:
    """Send package records to stderr for command-line use.

    Per-file progress is logged at DEBUG, so it only shows with ``verbose``;
    failures are logged at WARNING and always show. Calling this again
    replaces the handler rather than adding a second one.

    Returns:
        The package root logger.
    """
    root = logging.getLogger(ROOT)
    for handler in list(root.handlers):
        if isinstance(handler, _StderrHandler):
            root.removeHandler(handler)

    handler = _StderrHandler()
    handler.setFormatter(logging.Formatter(_FORMAT))
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)
    return root
