"""Tests for key decoding, the refresh timer and the key reader."""

from __future__ import annotations

import io
import threading

import pytest

from grmon.monitor.commands import KEY_BINDINGS, Command, decode_key, split_keys
from grmon.monitor.workers import KeyReader, RefreshTimer


class TestDecodeKey:
    @pytest.mark.parametrize(
        "data, expected",
        [
            ("r", Command.REFRESH),
            ("p", Command.TOGGLE_PAUSE),
            ("s", Command.TOGGLE_SORT),
            ("f", Command.SET_FILTER),
            ("\x1b[A", Command.CURSOR_UP),
            ("\x1b[B", Command.CURSOR_DOWN),
            ("k", Command.CURSOR_UP),
            ("j", Command.CURSOR_DOWN),
            ("\r", Command.TOGGLE_EXPAND),
            ("q", Command.QUIT),
        ],
    )
    def test_bound_keys(self, data: str, expected: Command):
        assert decode_key(data) is expected

    def test_unbound_key(self):
        assert decode_key("z") is None

    def test_unbound_escape_sequence(self):
        """Right arrow is a whole sequence, not its first byte."""
        assert decode_key("\x1b[C") is None

    def test_no_binding_posts_tick(self):
        assert Command.TICK not in KEY_BINDINGS.values()

    def test_bare_escape_is_unbound(self):
        """A lone ESC may be the first half of an arrow key, so it never quits."""
        assert decode_key("\x1b") is None


class TestSplitKeys:
    def test_several_keys_in_one_read(self):
        assert split_keys("jjq") == (["j", "j", "q"], "")

    def test_escape_sequences_kept_whole(self):
        assert split_keys("\x1b[Bk\x1bOA") == (["\x1b[B", "k", "\x1bOA"], "")

    def test_unbound_sequence_with_parameters(self):
        assert split_keys("\x1b[15~r") == (["\x1b[15~", "r"], "")

    @pytest.mark.parametrize("tail", ["\x1b", "\x1b[", "\x1b[1;5"])
    def test_incomplete_sequence_returned(self, tail: str):
        assert split_keys("j" + tail) == (["j"], tail)

    def test_escape_followed_by_plain_key(self):
        assert split_keys("\x1bq") == (["\x1b", "q"], "")


class TestRefreshTimer:
    def test_posts_ticks_until_stopped(self):
        ticked = threading.Event()
        posted: list[Command] = []

        def post(command: Command) -> None:
            posted.append(command)
            ticked.set()

        with RefreshTimer(post, tick_seconds=0.01) as timer:
            assert ticked.wait(2.0)
            assert timer.running
        assert not timer.running
        assert set(posted) == {Command.TICK}

    def test_stop_is_prompt(self):
        timer = RefreshTimer(lambda c: None, tick_seconds=60.0)
        timer.start()
        timer.stop()
        assert not timer.running

    def test_rejects_non_positive_tick(self):
        with pytest.raises(ValueError):
            RefreshTimer(lambda c: None, tick_seconds=0)


class TestKeyReader:
    def test_non_tty_is_inert(self):
        posted: list[Command] = []
        with KeyReader(posted.append, stream=io.StringIO("q")):
            pass
        assert posted == []

    def test_arrow_split_across_reads(self):
        """An arrow key arriving in two reads moves the cursor and does not quit."""
        posted: list[Command] = []
        reader = KeyReader(posted.append, stream=io.StringIO())

        pending = reader.feed("\x1b")
        assert posted == []
        assert reader.feed(pending + "[B") == ""

        assert posted == [Command.CURSOR_DOWN]

    def test_every_key_in_a_read_is_posted(self):
        posted: list[Command] = []
        reader = KeyReader(posted.append, stream=io.StringIO())
        reader.feed("jjzs")
        assert posted == [Command.CURSOR_DOWN, Command.CURSOR_DOWN, Command.TOGGLE_SORT]
