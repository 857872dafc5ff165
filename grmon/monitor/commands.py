"""Commands consumed by the monitor session, and the keys bound to them."""

from __future__ import annotations

import re
from enum import Enum


class Command(str, Enum):
    """Every state change in the monitor is one of these."""

    REFRESH = "refresh"
    TOGGLE_PAUSE = "toggle_pause"
    TOGGLE_SORT = "toggle_sort"
    SET_FILTER = "set_filter"
    CURSOR_UP = "cursor_up"
    CURSOR_DOWN = "cursor_down"
    TOGGLE_EXPAND = "toggle_expand"
    QUIT = "quit"
    # Posted by the refresh timer; the session decides whether a poll is due.
    TICK = "tick"


KEY_BINDINGS: dict[str, Command] = {
    "r": Command.REFRESH,
    "p": Command.TOGGLE_PAUSE,
    "s": Command.TOGGLE_SORT,
    "f": Command.SET_FILTER,
    "k": Command.CURSOR_UP,
    "\x1b[A": Command.CURSOR_UP,
    "\x1bOA": Command.CURSOR_UP,
    "j": Command.CURSOR_DOWN,
    "\x1b[B": Command.CURSOR_DOWN,
    "\x1bOB": Command.CURSOR_DOWN,
    "\r": Command.TOGGLE_EXPAND,
    "\n": Command.TOGGLE_EXPAND,
    "q": Command.QUIT,
}

# A complete CSI or SS3 sequence, e.g. "\x1b[A", "\x1bOB", "\x1b[15~".
_ESCAPE_RE = re.compile(r"\x1b[\[O][0-9;]*[\x40-\x7e]")
# What a sequence looks like while its remaining bytes are still in flight.
_PARTIAL_ESCAPE_RE = re.compile(r"\x1b(?:[\[O][0-9;]*)?")


def decode_key(data: str) -> Command | None:
    """Map raw terminal input to a command, or ``None`` if unbound."""
    if data in KEY_BINDINGS:
        return KEY_BINDINGS[data]
    if len(data) > 1 and data.startswith("\x1b"):
        # Unbound escape sequence (function keys, other arrows).
        return None
    return KEY_BINDINGS.get(data[:1])


def split_keys(data: str) -> tuple[list[str], str]:
    """Split one terminal read into individual keys.

    Returns the keys and any trailing, incomplete escape sequence.  The
    caller prepends that remainder to its next read, so an arrow key
    delivered across two reads still decodes as one key.
    """
    keys: list[str] = []
    pos = 0
    while pos < len(data):
        if data[pos] != "\x1b":
            keys.append(data[pos])
            pos += 1
            continue
        match = _ESCAPE_RE.match(data, pos)
        if match is not None:
            keys.append(match.group(0))
            pos = match.end()
            continue
        partial = _PARTIAL_ESCAPE_RE.match(data, pos)
        if partial.end() == len(data):
            return keys, data[pos:]
        # ESC followed by something that cannot continue a sequence.
        keys.append("\x1b")
        pos += 1
    return keys, ""
