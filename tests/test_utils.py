"""Tests for mdfmt utility modules and the output line buffer."""

import logging

import pytest

from mdfmt.buffer import LineBuffer


class TestGetLogger:
    def test_prefix_added(self) -> None:
        from mdfmt.utils.logger import get_logger

        assert get_logger("mymodule").name == "mdfmt.mymodule"

    def test_package_names_unchanged(self) -> None:
        from mdfmt.utils.logger import get_logger

        assert get_logger("mdfmt").name == "mdfmt"
        assert get_logger("mdfmt.batch").name == "mdfmt.batch"

    def test_returns_stdlib_logger(self) -> None:
        from mdfmt.utils.logger import get_logger

        logger = get_logger("x")
        assert isinstance(logger, logging.Logger)
        assert logger is logging.getLogger("mdfmt.x")

    def test_batch_failures_logged(self, tmp_path, caplog) -> None:
        from mdfmt.batch import check_files

        bad = tmp_path / "bad.md"
        bad.write_bytes(b"\xff\xfe")
        with caplog.at_level(logging.WARNING, logger="mdfmt"):
            check_files([str(bad)])
        assert any("not valid UTF-8" in record.getMessage() for record in caplog.records)


class TestConfigureLogging:
    @pytest.fixture(autouse=True)
    def _restore(self):
        root = logging.getLogger("mdfmt")
        handlers, level = list(root.handlers), root.level
        yield
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_level_follows_verbose(self) -> None:
        from mdfmt.utils.logger import configure_logging

        assert configure_logging(verbose=True).level == logging.DEBUG
        assert configure_logging().level == logging.WARNING

    def test_repeat_calls_keep_one_handler(self) -> None:
        from mdfmt.utils.logger import configure_logging

        root = logging.getLogger("mdfmt")
        before = len(root.handlers)
        configure_logging()
        configure_logging(verbose=True)
        assert len(root.handlers) == before + 1

    def test_writes_to_current_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        from mdfmt.utils.logger import configure_logging, get_logger

        configure_logging()
        get_logger("batch").warning("%s: not valid UTF-8", "bad.md")
        get_logger("batch").debug("hidden")
        err = capsys.readouterr().err
        assert "WARNING mdfmt.batch: bad.md: not valid UTF-8" in err
        assert "hidden" not in err


class TestHashStr:
    def test_sha256_default(self) -> None:
        from mdfmt.utils.hashing import hash_str

        assert hash_str("hello") == "2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824"

    def test_truncate(self) -> None:
        from mdfmt.utils.hashing import hash_str

        assert hash_str("hello world", truncate=16) == "b94d27b9934d3e08"

    def test_md5(self) -> None:
        from mdfmt.utils.hashing import hash_str

        assert hash_str("hello", algorithm="md5") == "5d41402abc4b2a76b9719d911017c592"


# =========================================================================
# LineBuffer
# =========================================================================


class TestLineBuffer:
    def test_empty(self) -> None:
        out = LineBuffer()
        assert not out
        assert out.build() == ""

    def test_single_final_newline(self) -> None:
        out = LineBuffer()
        out.line("a")
        out.line("b")
        assert out.build() == "a\nb\n"
        assert len(out) == 2

    def test_no_leading_blank(self) -> None:
        out = LineBuffer()
        out.blank()
        out.line("a")
        assert out.build() == "a\n"

    def test_no_double_blank(self) -> None:
        out = LineBuffer()
        out.line("a")
        out.blank()
        out.blank()
        out.line("b")
        assert out.build() == "a\n\nb\n"

    def test_prefixed_blank(self) -> None:
        out = LineBuffer()
        out.line("> a")
        out.blank(">")
        out.blank(">")
        out.line("> b")
        assert out.build() == "> a\n>\n> b\n"

    def test_trailing_blanks_dropped(self) -> None:
        out = LineBuffer()
        out.line("a")
        out.blank()
        out.line("")
        assert out.build() == "a\n"
