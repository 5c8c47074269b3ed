"""Batch driver: format or check many Markdown files at once.

Inputs are file paths, directories (searched recursively for ``.md``
files), or glob patterns. Directories named in the exclusion list are
skipped wherever they appear below a search root.

Files are processed on a fixed-size thread pool, one file per task. Each
file gets its own FileResult: any failure while reading, formatting or
writing a file becomes that file's error and the rest of the batch still
runs.

Example:
    >>> from mdfmt.batch import check_files
    >>> for result in check_files(["docs/"]):
    ...     if result.changed:
    ...         print("would reformat", result.path)

Thread Safety:
    Workers share only the immutable options and, if given, a
    thread-safe format cache. Results are returned in input order.

"""

from __future__ import annotations

import glob
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from functools import partial
from pathlib import Path

from mdfmt import Formatter
from mdfmt.cache import FormatCache
from mdfmt.config import FormatOptions
from mdfmt.errors import MdfmtError, SourceError
from mdfmt.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_EXCLUDES: tuple[str, ...] = ("node_modules", "target", ".git", "vendor", "dist", "build")

MARKDOWN_SUFFIX = ".md"


@dataclass(frozen=True, slots=True)
class FileResult:
    """Outcome for one file.

    Attributes:
        path: The file, as resolved from the inputs
        changed: True if formatting changed (or would change) the file
        error: Failure message, or None on success

    """

    path: str
    changed: bool
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def collect_excludes(extra: Iterable[str] = (), *, use_defaults: bool = True) -> frozenset[str]:
    """Build the set of excluded directory names.

    Args:
        extra: Additional directory names to exclude
        use_defaults: Include DEFAULT_EXCLUDES

    Returns:
        Directory names to skip during discovery.
    """
    names = set(DEFAULT_EXCLUDES) if use_defaults else set()
    names.update(extra)
    return frozenset(names)


def resolve_paths(patterns: Iterable[str], excludes: Iterable[str] = DEFAULT_EXCLUDES) -> list[Path]:
    """Expand file paths, directories, and globs into Markdown files.

    Explicit file paths are kept as long as they have the ``.md`` suffix,
    even inside an excluded directory. Each file appears once, in the
    order it was first found.

    Args:
        patterns: Paths, directories, or glob patterns
        excludes: Directory names to skip while searching

    Returns:
        Markdown files to process.
    """
    excluded = frozenset(excludes)
    found: dict[Path, None] = {}

    for pattern in patterns:
        path = Path(pattern)
        if path.is_dir():
            for entry in sorted(path.rglob("*")):
                if entry.is_file() and _is_markdown(entry) and not _excluded(entry.relative_to(path), excluded):
                    found.setdefault(entry, None)
        elif path.is_file():
            if _is_markdown(path):
                found.setdefault(path, None)
        else:
            for match in sorted(glob.glob(pattern, recursive=True)):
                entry = Path(match)
                if entry.is_file() and _is_markdown(entry) and not _excluded(entry, excluded):
                    found.setdefault(entry, None)

    logger.debug("resolved %d markdown files", len(found))
    return list(found)


def format_files(
    patterns: Iterable[str],
    options: FormatOptions | None = None,
    *,
    excludes: Iterable[str] = (),
    use_default_excludes: bool = True,
    jobs: int | None = None,
    cache: FormatCache | None = None,
) -> list[FileResult]:
    """Format matching files in place.

    Only files whose content changes are rewritten.

    Args:
        patterns: Paths, directories, or glob patterns
        options: Formatting options (uses the context default if None)
        excludes: Additional directory names to skip
        use_default_excludes: Also skip DEFAULT_EXCLUDES
        jobs: Worker threads (None lets the executor decide)
        cache: Optional thread-safe format cache

    Returns:
        One FileResult per resolved file, in resolution order.
    """
    return _run(patterns, options, excludes, use_default_excludes, jobs, cache, write=True)


def check_files(
    patterns: Iterable[str],
    options: FormatOptions | None = None,
    *,
    excludes: Iterable[str] = (),
    use_default_excludes: bool = True,
    jobs: int | None = None,
    cache: FormatCache | None = None,
) -> list[FileResult]:
    """Report which matching files are not formatted. Nothing is written.

    Takes the same arguments as format_files().
    """
    return _run(patterns, options, excludes, use_default_excludes, jobs, cache, write=False)


def _run(
    patterns: Iterable[str],
    options: FormatOptions | None,
    excludes: Iterable[str],
    use_default_excludes: bool,
    jobs: int | None,
    cache: FormatCache | None,
    *,
    write: bool,
) -> list[FileResult]:
    paths = resolve_paths(patterns, collect_excludes(excludes, use_defaults=use_default_excludes))
    if not paths:
        return []

    # Options are captured here; worker threads do not see this context
    formatter = Formatter(options, cache=cache)
    worker = partial(_process_file, formatter=formatter, write=write)
    with ThreadPoolExecutor(max_workers=jobs) as executor:
        return list(executor.map(worker, paths))


def _process_file(path: Path, *, formatter: Formatter, write: bool) -> FileResult:
    try:
        content = read_source(path)
        result = formatter.format_with_result(content)
        if write and result.changed:
            write_source(path, result.content)
    except SourceError as e:
        logger.warning("%s", e)
        return FileResult(str(path), changed=False, error=e.message)
    except MdfmtError as e:
        logger.warning("%s: %s", path, e)
        return FileResult(str(path), changed=False, error=str(e))
    except Exception as e:
        # Any failure stays with its own file
        logger.exception("%s: unexpected failure", path)
        return FileResult(str(path), changed=False, error=f"unexpected error: {e}")

    logger.debug("%s: %s", path, "changed" if result.changed else "unchanged")
    return FileResult(str(path), changed=result.changed)


def read_source(path: Path) -> str:
    """Read a file as UTF-8 with its line endings untouched.

    Raises:
        SourceError: If the file cannot be read or is not valid UTF-8.
    """
    try:
        with open(path, encoding="utf-8", newline="") as f:
            return f.read()
    except UnicodeDecodeError as e:
        raise SourceError(path, f"not valid UTF-8 ({e.reason} at byte {e.start})") from e
    except OSError as e:
        raise SourceError(path, f"failed to read: {e.strerror or e}") from e


def write_source(path: Path, content: str) -> None:
    """Write formatted content back, byte for byte.

    Raises:
        SourceError: If the file cannot be written.
    """
    try:
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(content)
    except OSError as e:
        raise SourceError(path, f"failed to write: {e.strerror or e}") from e


def _is_markdown(path: Path) -> bool:
    return path.suffix.lower() == MARKDOWN_SUFFIX


def _excluded(path: Path, excludes: frozenset[str]) -> bool:
    return any(part in excludes for part in path.parts[:-1])
