"""Tests for the public API: format functions, FormatResult, and Formatter."""

import pytest

import mdfmt
from mdfmt import (
    ConsistencyError,
    DictFormatCache,
    FormatOptions,
    Formatter,
    FormatResult,
    OrderedListMode,
    WrapMode,
    check_markdown,
    format_markdown,
    format_options_context,
    format_with_result,
    render_events,
)
from mdfmt.events import BlockEnd, BlockKind, BlockStart, Text

MESSY = "#   Simple Document\n\n*  First item\n* Second item\n"
CLEAN = "# Simple Document\n\n- First item\n- Second item\n"


class TestFormatMarkdown:
    def test_round_trip(self) -> None:
        assert format_markdown(MESSY) == CLEAN

    def test_formatted_output_is_stable(self) -> None:
        assert format_markdown(CLEAN) == CLEAN

    def test_deterministic(self) -> None:
        assert format_markdown(MESSY) == format_markdown(MESSY)

    def test_ascending_numbers(self) -> None:
        assert format_markdown("1. a\n1. b\n1. c") == "1. a\n2. b\n3. c\n"

    def test_one_numbers(self) -> None:
        options = FormatOptions(ordered_list=OrderedListMode.ONE)
        assert format_markdown("1. a\n2. b\n3. c", options) == "1. a\n1. b\n1. c\n"

    def test_always_wrap(self) -> None:
        options = FormatOptions(width=20, wrap=WrapMode.ALWAYS)
        out = format_markdown("one two three four five six seven", options)
        assert out == "one two three four  \nfive six seven\n"
        assert format_markdown(out, options) == out

    def test_crlf_input(self) -> None:
        assert format_markdown("# A\r\n\r\n*  b\r\n") == "# A\n\n- b\n"

    def test_frontmatter_passthrough(self) -> None:
        assert format_markdown("---\ntitle: x\n---\n# Hi\n") == "---\ntitle: x\n---\n\n# Hi\n"


class TestFormatWithResult:
    def test_changed(self) -> None:
        result = format_with_result(MESSY)
        assert result == FormatResult(CLEAN, changed=True)

    def test_unchanged(self) -> None:
        result = format_with_result(CLEAN)
        assert result.content == CLEAN
        assert not result.changed

    def test_missing_final_newline_counts_as_change(self) -> None:
        assert format_with_result("# A").changed

    def test_result_is_frozen(self) -> None:
        result = format_with_result(CLEAN)
        with pytest.raises(AttributeError):
            result.changed = True  # type: ignore[misc]

    def test_context_options_used(self) -> None:
        with format_options_context(FormatOptions(ordered_list=OrderedListMode.ONE)):
            assert format_with_result("1. a\n1. b\n").content == "1. a\n1. b\n"


class TestCheckMarkdown:
    def test_formatted(self) -> None:
        assert check_markdown(CLEAN)

    def test_unformatted(self) -> None:
        assert not check_markdown(MESSY)

    def test_empty(self) -> None:
        assert check_markdown("")

    def test_options_respected(self) -> None:
        source = "1. a\n1. b\n"
        assert not check_markdown(source)
        assert check_markdown(source, FormatOptions(ordered_list=OrderedListMode.ONE))


class TestRenderEvents:
    def test_hand_built_stream(self) -> None:
        paragraph = BlockKind.paragraph()
        assert render_events([BlockStart(paragraph), Text("hi  there"), BlockEnd(paragraph)]) == "hi there\n"

    def test_empty_stream(self) -> None:
        assert render_events([]) == ""

    def test_unbalanced_stream(self) -> None:
        with pytest.raises(ConsistencyError):
            render_events([BlockStart(BlockKind.paragraph())])


# =========================================================================
# Formatter
# =========================================================================


class TestFormatter:
    def test_callable(self) -> None:
        assert Formatter()(MESSY) == CLEAN

    def test_options_bound(self) -> None:
        fmt = Formatter(FormatOptions(ordered_list=OrderedListMode.ONE))
        assert fmt.format("1. a\n2. b") == "1. a\n1. b\n"
        assert fmt.options.ordered_list is OrderedListMode.ONE

    def test_context_captured_at_construction(self) -> None:
        with format_options_context(FormatOptions(width=10, wrap=WrapMode.ALWAYS)):
            fmt = Formatter()
        assert fmt.options.width == 10
        assert fmt("one two three four") == "one two  \nthree four\n"

    def test_check(self) -> None:
        fmt = Formatter()
        assert fmt.check(CLEAN)
        assert not fmt.check(MESSY)

    def test_format_with_result(self) -> None:
        assert Formatter().format_with_result(MESSY).changed

    def test_format_many_keeps_order(self) -> None:
        assert Formatter().format_many(["#  B", "#  A"]) == ["# B\n", "# A\n"]

    def test_shared_cache(self) -> None:
        cache = DictFormatCache()
        fmt = Formatter(cache=cache)
        assert fmt.format_many([MESSY, MESSY, CLEAN]) == [CLEAN, CLEAN, CLEAN]
        assert len(cache) == 2


class TestPackage:
    def test_version(self) -> None:
        assert mdfmt.__version__ == "0.1.0"

    def test_all_exports_resolve(self) -> None:
        for name in mdfmt.__all__:
            assert hasattr(mdfmt, name), name
