"""Tests for evo.installer.keys -- raw input splitting and key naming."""

from __future__ import annotations

import pytest

from evo.installer.keys import KeyBuffer, Key, is_printable, parse_key, split_keys

KEY_UP = "\x1b[A"
KEY_ENTER = "\r"


class TestSplitKeys:
    """Cut raw chunks into key tokens."""

    def test_single_character(self) -> None:
        assert split_keys("a") == ["a"]

    def test_pasted_text_is_one_token_per_char(self) -> None:
        assert split_keys("abc") == ["a", "b", "c"]

    def test_csi_arrow_kept_whole(self) -> None:
        assert split_keys("\x1b[A") == ["\x1b[A"]

    def test_ss3_arrow_kept_whole(self) -> None:
        assert split_keys("\x1bOB") == ["\x1bOB"]

    def test_mixed_chunk(self) -> None:
        assert split_keys("x\x1b[Dy\r") == ["x", "\x1b[D", "y", "\r"]

    def test_csi_with_parameters(self) -> None:
        assert split_keys("\x1b[1;5C!") == ["\x1b[1;5C", "!"]

    def test_lone_escape(self) -> None:
        assert split_keys("\x1b") == ["\x1b"]

    def test_empty(self) -> None:
        assert split_keys("") == []

    def test_escape_before_letter_keeps_letter(self) -> None:
        assert split_keys("\x1bq") == ["\x1b", "q"]


class TestKeyBuffer:
    """Join escape sequences that arrive across several reads."""

    def test_arrow_split_after_csi_introducer(self) -> None:
        keys = KeyBuffer()
        assert keys.feed("a\x1b[") == ["a"]
        assert keys.pending == "\x1b["
        assert keys.feed("A") == [KEY_UP]
        assert keys.feed(KEY_ENTER) == [KEY_ENTER]
        assert keys.pending == ""

    def test_bare_escape_held(self) -> None:
        keys = KeyBuffer()
        assert keys.feed("x\x1b") == ["x"]
        assert keys.feed("[B") == ["\x1b[B"]

    def test_ss3_introducer_held(self) -> None:
        keys = KeyBuffer()
        assert keys.feed("\x1bO") == []
        assert keys.feed("C") == ["\x1bOC"]

    def test_csi_parameters_held(self) -> None:
        keys = KeyBuffer()
        assert keys.feed("\x1b[1;") == []
        assert keys.feed("5C") == ["\x1b[1;5C"]

    def test_complete_chunk_passes_through(self) -> None:
        keys = KeyBuffer()
        assert keys.feed("ab\x1b[D\r") == ["a", "b", "\x1b[D", KEY_ENTER]
        assert keys.pending == ""

    def test_escape_then_letter_is_not_held(self) -> None:
        keys = KeyBuffer()
        assert keys.feed("\x1bq") == ["\x1b", "q"]
        assert keys.pending == ""


class TestParseKey:
    """Name the keys prompts react to."""

    @pytest.mark.parametrize(
        "token, expected",
        [
            ("\x1b[A", Key.up),
            ("\x1b[B", Key.down),
            ("\x1b[C", Key.right),
            ("\x1b[D", Key.left),
            ("\x1bOA", Key.up),
            ("\r", Key.enter),
            ("\n", Key.enter),
            ("\x7f", Key.backspace),
            ("\x08", Key.backspace),
        ],
    )
    def test_known_sequences(self, token: str, expected: str) -> None:
        assert parse_key(token) == expected

    def test_printable_has_no_name(self) -> None:
        assert parse_key("a") is None


class TestIsPrintable:
    def test_letters_and_unicode(self) -> None:
        assert is_printable("a")
        assert is_printable("ї")
        assert is_printable(" ")

    def test_controls_rejected(self) -> None:
        assert not is_printable("\r")
        assert not is_printable("\x7f")
        assert not is_printable("\x1b")
        assert not is_printable("\x03")

    def test_multi_char_rejected(self) -> None:
        assert not is_printable("\x1b[A")
        assert not is_printable("ab")
