"""Rich terminal renderer for the goroutine monitor.

Turns a ``MonitorView`` into Rich renderables: a table of goroutines
with colour-coded states, and a footer describing mode, sort, filter and
refresh status.

Color scheme
------------
- green     : running
- yellow    : runnable
- cyan      : IO wait
- blue      : channel and select waits
- magenta   : syscall
- red       : lock and semaphore waits
- dim       : sleep and idle
"""

from __future__ import annotations

from rich.console import Console, Group
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from grmon.models.view import MonitorView, RowView, SortKey

# ---------------------------------------------------------------------------
# State -> Rich style mapping
# ---------------------------------------------------------------------------

_STATE_STYLES: dict[str, str] = {
    "running": "bold green",
    "runnable": "yellow",
    "IO wait": "cyan",
    "chan receive": "blue",
    "chan send": "blue",
    "chan receive (nil chan)": "blue",
    "chan send (nil chan)": "blue",
    "select": "blue",
    "select (no cases)": "blue",
    "syscall": "magenta",
    "semacquire": "red",
    "sync.Mutex.Lock": "red",
    "sync.RWMutex.Lock": "red",
    "sync.RWMutex.RLock": "red",
    "sync.Cond.Wait": "red",
    "sleep": "dim",
    "sleeping": "dim",
    "idle": "dim",
}

_SORT_LABELS: dict[SortKey, str] = {
    SortKey.BY_ID: "id",
    SortKey.BY_STATE: "state",
}

KEY_HELP = "r refresh  p pause  s sort  f filter  ↑/↓ move  enter expand  q quit"

# Lines taken by panel border, padding, table header and footer.
_CHROME_LINES = 9


def state_style(state: str) -> str:
    return _STATE_STYLES.get(state, "")


def window_rows(rows: list[RowView], height: int | None) -> list[RowView]:
    """Pick the slice of ``rows`` that fits in ``height`` lines.

    The selected row is always kept on screen.  Expanded rows count for
    as many lines as they display.
    """
    if height is None or not rows:
        return rows
    height = max(height, 1)

    cursor = next((i for i, row in enumerate(rows) if row.selected), 0)
    start = cursor
    used = len(rows[cursor].lines)
    # Grow upwards first so the cursor sits low on the page when scrolling down.
    while start > 0 and used + len(rows[start - 1].lines) <= height // 2 + 1:
        start -= 1
        used += len(rows[start].lines)
    end = cursor + 1
    while end < len(rows) and used + len(rows[end].lines) <= height:
        used += len(rows[end].lines)
        end += 1
    while start > 0 and used + len(rows[start - 1].lines) <= height:
        start -= 1
        used += len(rows[start].lines)
    return rows[start:end]


class MonitorRenderer:
    """Renders ``MonitorView`` as Rich terminal output.

    Parameters
    ----------
    console:
        Rich Console instance.  A new one is created if not provided.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    # ------------------------------------------------------------------
    # Frame render
    # ------------------------------------------------------------------

    def render_view(self, view: MonitorView, *, fit: bool = True) -> Panel:
        """Render a full monitor frame.

        With ``fit`` the table is windowed to the console height around
        the selected row.
        """
        height = self.console.size.height - _CHROME_LINES if fit else None
        table = self._build_table(window_rows(view.rows, height), view)

        footer = Text.from_markup(self._footer_markup(view))
        if view.last_error:
            footer.append("\n")
            footer.append(f"refresh failed: {view.last_error}", style="bold red")

        mode = "[bold yellow]PAUSED[/bold yellow]" if view.is_frozen else "[green]LIVE[/green]"
        return Panel(
            Group(table, Text(""), footer),
            title=f"[bold]grmon[/bold] {mode}",
            subtitle=KEY_HELP,
            border_style="blue",
            padding=(0, 1),
        )

    def _build_table(self, rows: list[RowView], view: MonitorView) -> Table:
        table = Table(
            show_header=True,
            header_style="bold cyan",
            expand=True,
            show_lines=False,
            pad_edge=True,
        )

        table.add_column("#", style="dim", width=7, justify="right")
        table.add_column("State", min_width=14)
        table.add_column("Trace", ratio=1, overflow="fold")

        for row in rows:
            routine = row.routine
            style = state_style(routine.state)
            state_cell = Text(routine.state, style=style)
            trace_cell = Text("\n".join(row.lines), style="bold" if row.expanded else "")
            table.add_row(
                str(routine.id),
                state_cell,
                trace_cell,
                style="reverse" if row.selected and view.is_frozen else None,
            )

        return table

    @staticmethod
    def _footer_markup(view: MonitorView) -> str:
        parts: list[str] = [
            f"[bold]Source:[/bold] {escape(view.source)}",
            f"[bold]Goroutines:[/bold] {view.visible_count}/{view.total_count}",
            f"[bold]Sort:[/bold] {_SORT_LABELS[view.sort_key]}",
        ]
        if view.filter_text:
            parts.append(f"[yellow][bold]Filter:[/bold] {escape(view.filter_text)}[/yellow]")
        if view.last_refresh is not None:
            parts.append(
                f"[bold]Refreshed:[/bold] {view.last_refresh.strftime('%H:%M:%S')}"
            )
        return "  |  ".join(parts)

    # ------------------------------------------------------------------
    # Standalone print
    # ------------------------------------------------------------------

    def print_view(self, view: MonitorView) -> None:
        """Print a single frame, unwindowed, to the console."""
        self.console.print(self.render_view(view, fit=False))
