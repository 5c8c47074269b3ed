"""Command-line interface for mdfmt.

Usage:
    mdfmt README.md                 # print formatted output
    mdfmt --write docs/             # format every .md file in place
    mdfmt --check "**/*.md"         # exit 1 if anything needs formatting
    cat notes.md | mdfmt --stdin    # filter stdin to stdout

Exit codes:
    0   success, or every checked file is already formatted
    1   --check found unformatted files, or a file failed
    2   usage or configuration error

"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence

from mdfmt import __version__, format_with_result
from mdfmt.batch import (
    DEFAULT_EXCLUDES,
    FileResult,
    check_files,
    collect_excludes,
    format_files,
    read_source,
    resolve_paths,
)
from mdfmt.config import FormatOptions, OrderedListMode, WrapMode
from mdfmt.errors import ConfigurationError, MdfmtError
from mdfmt.utils.logger import configure_logging

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mdfmt",
        description="A fast, opinionated Markdown formatter",
    )
    parser.add_argument(
        "paths",
        nargs="*",
        metavar="PATH",
        help="Markdown files, directories, or glob patterns (- for stdin)",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("-w", "--write", action="store_true", help="Write formatted output back to files")
    mode.add_argument("-c", "--check", action="store_true", help="Check if files are formatted (exit 1 if not)")
    parser.add_argument("--stdin", action="store_true", help="Read from standard input")
    parser.add_argument("--width", type=int, default=80, help="Maximum line width (default: 80)")
    parser.add_argument(
        "--wrap",
        type=str.lower,
        choices=[m.value for m in WrapMode],
        default=WrapMode.PRESERVE.value,
        help="Prose wrapping (default: preserve)",
    )
    parser.add_argument(
        "--ordered-list",
        type=str.lower,
        choices=[m.value for m in OrderedListMode],
        default=OrderedListMode.ASCENDING.value,
        help="Ordered list numbering (default: ascending)",
    )
    parser.add_argument(
        "--exclude",
        action="append",
        default=[],
        metavar="DIR",
        help="Additional directory name to exclude (repeatable)",
    )
    parser.add_argument(
        "--no-default-excludes",
        action="store_true",
        help=f"Don't exclude {', '.join(DEFAULT_EXCLUDES)} by default",
    )
    parser.add_argument("-j", "--jobs", type=int, default=None, help="Worker threads for multiple files")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("-V", "--version", action="version", version=f"mdfmt {__version__}")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line.

    Args:
        argv: Arguments without the program name (defaults to sys.argv)

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=args.verbose)

    try:
        options = FormatOptions(width=args.width, wrap=args.wrap, ordered_list=args.ordered_list)
    except ConfigurationError as e:
        _error(str(e))
        return EXIT_USAGE
    if args.jobs is not None and args.jobs < 1:
        _error(f"--jobs must be at least 1, got {args.jobs}")
        return EXIT_USAGE

    if args.stdin or args.paths == ["-"]:
        return _run_stdin(options, check=args.check)
    if not args.paths:
        parser.print_usage(sys.stderr)
        _error("no input; pass paths or --stdin")
        return EXIT_USAGE
    if "-" in args.paths:
        _error("- (stdin) cannot be combined with other paths")
        return EXIT_USAGE

    batch = {
        "excludes": args.exclude,
        "use_default_excludes": not args.no_default_excludes,
        "jobs": args.jobs,
    }
    if args.check:
        return _report_check(check_files(args.paths, options, **batch))
    if args.write:
        return _report_write(format_files(args.paths, options, **batch))
    return _run_stdout(args.paths, options, collect_excludes(args.exclude, use_defaults=not args.no_default_excludes))


def _run_stdin(options: FormatOptions, *, check: bool) -> int:
    try:
        result = format_with_result(sys.stdin.read(), options)
    except MdfmtError as e:
        _error(str(e))
        return EXIT_FAILED
    if check:
        if result.changed:
            print("Would reformat: <stdin>")
            return EXIT_FAILED
        return EXIT_OK
    sys.stdout.write(result.content)
    return EXIT_OK


def _run_stdout(patterns: list[str], options: FormatOptions, excludes: frozenset[str]) -> int:
    # Printing only makes sense for exactly one file
    paths = resolve_paths(patterns, excludes)
    if not paths:
        _error("No markdown files found.")
        return EXIT_USAGE
    if len(paths) > 1:
        _error("Cannot output multiple files to stdout. Use --write to format in-place.")
        return EXIT_USAGE

    try:
        result = format_with_result(read_source(paths[0]), options)
    except MdfmtError as e:
        _error(str(e))
        return EXIT_FAILED
    sys.stdout.write(result.content)
    return EXIT_OK


def _report_check(results: list[FileResult]) -> int:
    if not results:
        _error("No markdown files found.")
        return EXIT_USAGE

    failed = _report_errors(results)
    would_change = [r for r in results if r.ok and r.changed]
    for result in would_change:
        print(f"Would reformat: {result.path}")

    checked = sum(1 for r in results if r.ok)
    if would_change:
        print(f"{len(would_change)} file(s) would be reformatted", file=sys.stderr)
    else:
        print(f"All {checked} file(s) are formatted correctly", file=sys.stderr)
    return EXIT_FAILED if would_change or failed else EXIT_OK


def _report_write(results: list[FileResult]) -> int:
    if not results:
        _error("No markdown files found.")
        return EXIT_USAGE

    failed = _report_errors(results)
    for result in results:
        if result.ok and result.changed:
            print(f"Formatted: {result.path}")
    return EXIT_FAILED if failed else EXIT_OK


def _report_errors(results: list[FileResult]) -> bool:
    failed = False
    for result in results:
        if result.error is not None:
            _error(f"{result.path}: {result.error}")
            failed = True
    return failed


def _error(message: str) -> None:
    print(f"Error: {message}", file=sys.stderr)


if __name__ == "__main__":
    sys.exit(main())
