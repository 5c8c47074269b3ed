"""Tests for the word-wrap engine."""

import pytest

from mdfmt.config import WrapMode
from mdfmt.wrap import (
    HARD_BREAK,
    Break,
    Segment,
    Terminator,
    Token,
    escape_line_start,
    guard_continuations,
    join_words,
    split_segments,
    wrap_tokens,
)

# =========================================================================
# Segmenting
# =========================================================================


class TestSplitSegments:
    """Tokens are grouped into words and split at source breaks."""

    def test_breaks_end_segments(self) -> None:
        segments = split_segments([Token("a b"), Break(hard=False), Token("c"), Break(hard=True), Token("d")])
        assert segments == [
            Segment(["a", "b"], Terminator.SOFT),
            Segment(["c"], Terminator.HARD),
            Segment(["d"], Terminator.END),
        ]

    def test_whitespace_runs_collapse(self) -> None:
        assert split_segments([Token("  a \t  b  ")])[0].words == ["a", "b"]

    def test_atoms_glue_to_adjacent_text(self) -> None:
        items = [Token("see "), Token("`x`", breakable=False), Token(", ok")]
        assert split_segments(items)[0].words == ["see", "`x`,", "ok"]

    def test_atoms_keep_inner_spaces(self) -> None:
        items = [Token("a "), Token("[two words](u)", breakable=False)]
        assert split_segments(items)[0].words == ["a", "[two words](u)"]

    def test_join_words_ignores_breaks(self) -> None:
        assert join_words([Token("a"), Break(hard=True), Token("b  c")]) == "a b c"


# =========================================================================
# Modes
# =========================================================================


class TestWrapModes:
    """Each wrap mode treats source breaks differently."""

    items = [Token("one two"), Break(hard=False), Token("three")]

    def test_preserve_keeps_soft_breaks(self) -> None:
        assert wrap_tokens(self.items, mode=WrapMode.PRESERVE, width=80) == ["one two", "three"]

    def test_always_joins_soft_breaks(self) -> None:
        assert wrap_tokens(self.items, mode=WrapMode.ALWAYS, width=80) == ["one two three"]

    def test_never_joins_soft_breaks(self) -> None:
        assert wrap_tokens(self.items, mode=WrapMode.NEVER, width=80) == ["one two three"]

    def test_never_ignores_width(self) -> None:
        assert wrap_tokens(self.items, mode=WrapMode.NEVER, width=3) == ["one two three"]

    @pytest.mark.parametrize("mode", list(WrapMode))
    def test_hard_breaks_always_kept(self, mode: WrapMode) -> None:
        items = [Token("a"), Break(hard=True), Token("b")]
        assert wrap_tokens(items, mode=mode, width=80) == ["a" + HARD_BREAK, "b"]

    @pytest.mark.parametrize("mode", list(WrapMode))
    def test_trailing_break_dropped(self, mode: WrapMode) -> None:
        assert wrap_tokens([Token("a"), Break(hard=True)], mode=mode, width=80) == ["a"]

    def test_empty_paragraph(self) -> None:
        assert wrap_tokens([Token("   ")], mode=WrapMode.ALWAYS, width=80) == []


# =========================================================================
# Filling
# =========================================================================


class TestFill:
    """Greedy fill with inserted hard breaks."""

    def test_inserted_breaks_are_hard(self) -> None:
        lines = wrap_tokens([Token("one two three four")], mode=WrapMode.ALWAYS, width=10)
        assert lines == ["one two  ", "three four"]

    def test_room_reserved_for_break_marker(self) -> None:
        # "one two three four" is 18 wide: fits a 20 column line with "  "
        lines = wrap_tokens([Token("one two three four five six seven")], mode=WrapMode.ALWAYS, width=20)
        assert lines == ["one two three four  ", "five six seven"]

    def test_last_line_uses_full_width(self) -> None:
        assert wrap_tokens([Token("abcd efgh")], mode=WrapMode.ALWAYS, width=9) == ["abcd efgh"]

    def test_lines_fit_width(self) -> None:
        text = "the quick brown fox jumps over the lazy dog " * 5
        for line in wrap_tokens([Token(text)], mode=WrapMode.ALWAYS, width=24):
            assert len(line) <= 24

    def test_overlong_word_gets_own_line(self) -> None:
        lines = wrap_tokens([Token("a supercalifragilistic b")], mode=WrapMode.ALWAYS, width=8)
        assert lines == ["a  ", "supercalifragilistic  ", "b"]

    def test_atoms_never_split(self) -> None:
        items = [Token("see "), Token("[a long link text](http://example.com)", breakable=False)]
        lines = wrap_tokens(items, mode=WrapMode.ALWAYS, width=10)
        assert lines == ["see  ", "[a long link text](http://example.com)"]

    def test_preserve_splits_only_long_lines(self) -> None:
        items = [Token("short"), Break(hard=False), Token("this line is too long")]
        lines = wrap_tokens(items, mode=WrapMode.PRESERVE, width=12)
        assert lines == ["short", "this line  ", "is too long"]

    def test_width_below_one_is_clamped(self) -> None:
        assert wrap_tokens([Token("a b")], mode=WrapMode.ALWAYS, width=0) == ["a  ", "b"]


class TestLineStartGuard:
    """Words that would start a new block never begin an inserted line."""

    @pytest.mark.parametrize("word", ["-", "+", "*", "=", "#", "###", "1.", "12)", ">", "```", "|", "---"])
    def test_unsafe_word_stays_on_previous_line(self, word: str) -> None:
        lines = wrap_tokens([Token(f"aaaa bbbb {word} cccc")], mode=WrapMode.ALWAYS, width=10)
        assert not any(line.startswith(word) for line in lines)
        assert any(f"bbbb {word}" in line for line in lines)

    def test_safe_words_break_normally(self) -> None:
        lines = wrap_tokens([Token("aaaa bbbb word cccc")], mode=WrapMode.ALWAYS, width=10)
        assert lines == ["aaaa  ", "bbbb  ", "word cccc"]

    def test_trailing_backslash_glued_to_next_word(self) -> None:
        lines = wrap_tokens([Token("aaaa bbbb\\ cccc")], mode=WrapMode.ALWAYS, width=10)
        assert "bbbb\\ cccc" in lines


# =========================================================================
# Escaping after source breaks
# =========================================================================


class TestEscapeLineStart:
    @pytest.mark.parametrize(
        ("line", "expected"),
        [
            ("# x", "\\# x"),
            ("### x", "\\### x"),
            ("- x", "\\- x"),
            ("===", "\\==="),
            ("| a |", "\\| a |"),
            (":-- x", "\\:-- x"),
            ("> x", "\\> x"),
            (">x", "\\>x"),
            ("```py", "\\```py"),
            ("~~~", "\\~~~"),
            ("1. x", "1\\. x"),
            ("12) x", "12\\) x"),
        ],
    )
    def test_block_syntax_escaped(self, line: str, expected: str) -> None:
        assert escape_line_start(line) == expected

    @pytest.mark.parametrize("line", ["word", "#hashtag", "1.5 times", "-x", "<span>a</span>", "<http://x.com>", ""])
    def test_ordinary_text_unchanged(self, line: str) -> None:
        assert escape_line_start(line) == line

    @pytest.mark.parametrize("line", ["<div>", "</p>", "<!-- note -->", "<script>", "<?php"])
    def test_block_html_escaped(self, line: str) -> None:
        assert escape_line_start(line) == "\\" + line


class TestGuardContinuations:
    def test_single_line_unchanged(self) -> None:
        assert guard_continuations("*# a*") == "*# a*"

    def test_soft_break_line_escaped(self) -> None:
        assert guard_continuations("*a\n# b*") == "*a\n\\# b*"

    def test_hard_break_line_escaped(self) -> None:
        assert guard_continuations("*a  \n1. b*") == "*a  \n1\\. b*"

    def test_block_html_after_soft_break_joined(self) -> None:
        assert guard_continuations("*a\n<div> b*") == "*a <div> b*"

    def test_block_html_after_hard_break_escaped(self) -> None:
        assert guard_continuations("*a  \n<div> b*") == "*a  \n\\<div> b*"


class TestSegmentStarts:
    """The first word after a source break is made safe in every mode."""

    def test_soft_break_preserved_and_escaped(self) -> None:
        items = [Token("foo"), Break(hard=False), Token("# bar")]
        assert wrap_tokens(items, mode=WrapMode.PRESERVE, width=80) == ["foo", "\\# bar"]

    @pytest.mark.parametrize("mode", list(WrapMode))
    def test_hard_break_escaped(self, mode: WrapMode) -> None:
        items = [Token("foo"), Break(hard=True), Token("1. bar")]
        assert wrap_tokens(items, mode=mode, width=80) == ["foo" + HARD_BREAK, "1\\. bar"]

    def test_soft_break_joined_needs_no_escape(self) -> None:
        items = [Token("foo"), Break(hard=False), Token("# bar")]
        assert wrap_tokens(items, mode=WrapMode.ALWAYS, width=80) == ["foo # bar"]

    def test_block_html_pulls_soft_break_back(self) -> None:
        items = [Token("foo"), Break(hard=False), Token("<div>", breakable=False), Token(" bar")]
        assert wrap_tokens(items, mode=WrapMode.PRESERVE, width=80) == ["foo <div> bar"]

    def test_block_html_after_hard_break_escaped(self) -> None:
        items = [Token("foo"), Break(hard=True), Token("<div>", breakable=False)]
        assert wrap_tokens(items, mode=WrapMode.PRESERVE, width=80) == ["foo" + HARD_BREAK, "\\<div>"]

    def test_multiline_atom_measured_by_its_first_line(self) -> None:
        items = [Token("aaaa "), Token("*bb\ncccccccccc*", breakable=False)]
        assert wrap_tokens(items, mode=WrapMode.ALWAYS, width=10) == ["aaaa *bb\ncccccccccc*"]
