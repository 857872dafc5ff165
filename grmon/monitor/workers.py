"""Background workers that feed the session's command queue.

Neither worker touches monitor state.  They only post commands; the
session applies them on its own thread.
"""

from __future__ import annotations

import logging
import os
import select
import sys
import threading
from collections.abc import Callable
from typing import TextIO

from grmon.monitor.commands import Command, decode_key, split_keys

logger = logging.getLogger(__name__)

PostCommand = Callable[[Command], None]


class RefreshTimer:
    """Posts ``Command.TICK`` every ``tick_seconds`` until stopped.

    The session checks on each tick whether the refresh interval has
    elapsed, so the timer itself carries no refresh logic.
    """

    def __init__(self, post: PostCommand, tick_seconds: float = 0.5) -> None:
        if tick_seconds <= 0:
            raise ValueError("tick_seconds must be > 0")
        self._post = post
        self._tick = tick_seconds
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._run, name="grmon-timer", daemon=True)
        self._thread.start()

    def _run(self) -> None:
        while not self._stop.wait(self._tick):
            self._post(Command.TICK)

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join()

    def __enter__(self) -> RefreshTimer:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()


class KeyReader:
    """Reads keys from a terminal in cbreak mode and posts bound commands.

    Does nothing when ``stream`` is not a TTY (or on platforms without
    ``termios``), leaving the session driven by the timer alone.
    """

    def __init__(self, post: PostCommand, stream: TextIO | None = None) -> None:
        self._post = post
        self._stream = stream if stream is not None else sys.stdin
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._saved_attrs: list | None = None

    def start(self) -> None:
        if self._thread is not None:
            return
        try:
            import termios
            import tty
        except ImportError:
            logger.warning("keyboard input unavailable: no termios on this platform")
            return
        if not self._stream.isatty():
            logger.info("stdin is not a terminal; keyboard input disabled")
            return

        fd = self._stream.fileno()
        self._saved_attrs = termios.tcgetattr(fd)
        tty.setcbreak(fd)
        self._thread = threading.Thread(
            target=self._run, args=(fd,), name="grmon-keys", daemon=True
        )
        self._thread.start()

    def _run(self, fd: int) -> None:
        pending = ""
        while not self._stop.is_set():
            ready, _, _ = select.select([fd], [], [], 0.1)
            if not ready:
                continue
            chunk = os.read(fd, 16)
            if not chunk:
                return
            pending = self.feed(pending + chunk.decode("utf-8", errors="ignore"))

    def feed(self, data: str) -> str:
        """Post a command for every bound key in ``data``.

        Returns the incomplete escape sequence left at the end, if any.
        """
        keys, remainder = split_keys(data)
        for key in keys:
            command = decode_key(key)
            if command is not None:
                self._post(command)
        return remainder

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
        if self._saved_attrs is not None:
            import termios

            termios.tcsetattr(self._stream.fileno(), termios.TCSADRAIN, self._saved_attrs)
            self._saved_attrs = None

    def __enter__(self) -> KeyReader:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()
