"""MonitorSession — the single-threaded command loop of the live monitor.

All monitor state (engine mode, view state, last error) changes here and
only here.  The refresh timer and the key reader run on their own
threads but merely post ``(Command, argument)`` pairs onto a queue that
this loop drains.

A display pass owns the terminal (Rich ``Live`` plus the key reader and,
in live mode, the refresh timer).  Commands that need the plain terminal
or a different timer setup, such as the filter prompt or pause toggling,
end the pass; the follow-up runs with the terminal released and a fresh
pass starts afterwards.
"""

from __future__ import annotations

import logging
import queue
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any, TextIO

from rich.live import Live
from rich.prompt import Prompt

from grmon.core.engine import LiveStateEngine
from grmon.core.source import TransportError
from grmon.models.view import MonitorView, ViewMode
from grmon.monitor.commands import Command
from grmon.monitor.projection import ViewProjection
from grmon.monitor.renderer import MonitorRenderer
from grmon.monitor.workers import KeyReader, RefreshTimer

logger = logging.getLogger(__name__)

# Commands that only make sense against a frozen view.
_FROZEN_ONLY = frozenset({Command.CURSOR_UP, Command.CURSOR_DOWN, Command.TOGGLE_EXPAND})


class MonitorSession:
    """Drives engine, projection and renderer from a command queue.

    Parameters
    ----------
    engine:
        The live state engine to poll.
    projection:
        View projection holding sort, filter and cursor state.
    renderer:
        Rich renderer; its console is used for ``Live`` and prompts.
    interval_seconds:
        Seconds between automatic refreshes.  ``0`` disables the timer.
    tick_seconds:
        How often the timer wakes to check whether a refresh is due.
    key_stream:
        Terminal to read keys from.  Defaults to stdin.
    """

    def __init__(
        self,
        engine: LiveStateEngine,
        projection: ViewProjection,
        renderer: MonitorRenderer,
        *,
        interval_seconds: int = 5,
        tick_seconds: float = 0.5,
        key_stream: TextIO | None = None,
    ) -> None:
        self._engine = engine
        self._projection = projection
        self._renderer = renderer
        self._interval = interval_seconds
        self._tick = tick_seconds
        self._key_stream = key_stream
        self._commands: queue.Queue[tuple[Command, Any]] = queue.Queue()
        self._last_refresh_at: datetime | None = None
        self._last_error: str | None = None
        self._follow_up: Callable[[], None] | None = None
        self._quit = False

        self._handlers: dict[Command, Callable[[Any], bool]] = {
            Command.REFRESH: self._on_refresh,
            Command.TICK: self._on_tick,
            Command.TOGGLE_PAUSE: self._on_toggle_pause,
            Command.TOGGLE_SORT: self._on_toggle_sort,
            Command.SET_FILTER: self._on_set_filter,
            Command.CURSOR_UP: lambda _: self._projection.move_cursor(-1),
            Command.CURSOR_DOWN: lambda _: self._projection.move_cursor(1),
            Command.TOGGLE_EXPAND: lambda _: self._projection.toggle_expand_current(),
            Command.QUIT: self._on_quit,
        }

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def engine(self) -> LiveStateEngine:
        return self._engine

    @property
    def mode(self) -> ViewMode:
        return ViewMode.FROZEN if self._engine.frozen else ViewMode.LIVE

    @property
    def quitting(self) -> bool:
        return self._quit

    @property
    def last_error(self) -> str | None:
        return self._last_error

    @property
    def pending_follow_up(self) -> bool:
        return self._follow_up is not None

    def view(self) -> MonitorView:
        """Build the frame the renderer should draw next."""
        state = self._projection.state
        frozen = self._engine.frozen
        return MonitorView(
            rows=self._projection.rows(show_cursor=frozen),
            total_count=self._projection.total_count,
            mode=self.mode,
            sort_key=state.sort_key,
            filter_text=state.filter_text,
            source=self._engine.source.label,
            last_refresh=self._last_refresh_at,
            last_error=self._last_error,
        )

    # ------------------------------------------------------------------
    # Command dispatch
    # ------------------------------------------------------------------

    def post(self, command: Command, argument: Any = None) -> None:
        """Queue a command; safe to call from any thread."""
        self._commands.put((command, argument))

    def handle(self, command: Command, argument: Any = None) -> bool:
        """Apply one command.  Returns whether the view needs re-rendering."""
        if command in _FROZEN_ONLY and not self._engine.frozen:
            return False
        return self._handlers[command](argument)

    def refresh(self) -> bool:
        """Poll the engine and feed the result to the projection.

        A failed poll keeps the previous rows and records the error for
        the footer.
        """
        try:
            snapshot = self._engine.poll()
        except TransportError as exc:
            logger.warning("refresh failed: %s", exc)
            self._last_error = str(exc)
            return False
        self._last_error = None
        self._last_refresh_at = datetime.now(timezone.utc)
        self._projection.update(snapshot.routines)
        return True

    def _on_refresh(self, _: Any) -> bool:
        self.refresh()
        return True

    def _on_tick(self, _: Any) -> bool:
        if self._engine.frozen or self._interval <= 0:
            return False
        elapsed = self._engine.seconds_since_refresh()
        if elapsed is not None and elapsed < self._interval:
            return False
        self.refresh()
        return True

    def _on_toggle_pause(self, _: Any) -> bool:
        self._follow_up = self.toggle_pause
        return False

    def toggle_pause(self) -> None:
        self._engine.freeze(not self._engine.frozen)

    def _on_toggle_sort(self, _: Any) -> bool:
        key = self._projection.toggle_sort()
        logger.debug("sort key now %s", key.value)
        return True

    def _on_set_filter(self, argument: Any) -> bool:
        if argument is None:
            self._follow_up = self.prompt_filter
            return False
        self._projection.set_filter(str(argument))
        return True

    def prompt_filter(self) -> None:
        text = Prompt.ask(
            "[bold]Filter[/bold] (empty clears)",
            default="",
            show_default=False,
            console=self._renderer.console,
        )
        self._projection.set_filter(text.strip())

    def _on_quit(self, _: Any) -> bool:
        self._quit = True
        return False

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    def run(self) -> None:
        """Run until a ``QUIT`` command is handled."""
        self.refresh()
        while not self._quit:
            follow_up = self.display_pass()
            if follow_up is not None:
                follow_up()

    def display_pass(self) -> Callable[[], None] | None:
        """Own the terminal until quit or a follow-up action is requested."""
        self._follow_up = None
        timer = None
        if self._interval > 0 and not self._engine.frozen:
            timer = RefreshTimer(self.post, self._tick)

        with Live(
            self._renderer.render_view(self.view()),
            console=self._renderer.console,
            auto_refresh=False,
            screen=True,
        ) as live, KeyReader(self.post, self._key_stream):
            if timer is not None:
                timer.start()
            try:
                while not self._quit and self._follow_up is None:
                    command, argument = self._commands.get()
                    if self.handle(command, argument):
                        live.update(self._renderer.render_view(self.view()), refresh=True)
            finally:
                if timer is not None:
                    timer.stop()

        self._drain_ticks()
        return self._follow_up

    def _drain_ticks(self) -> None:
        pending: list[tuple[Command, Any]] = []
        while True:
            try:
                item = self._commands.get_nowait()
            except queue.Empty:
                break
            if item[0] is not Command.TICK:
                pending.append(item)
        for item in pending:
            self._commands.put(item)
