"""``grmon dump [PATHS...]`` — print the goroutine table once.

The single-shot counterpart of ``watch``: fetch (or replay), apply sort
and filter, print, exit.  Exit code 1 when the dump cannot be obtained.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from grmon.cli.commands._source import build_source
from grmon.config import config
from grmon.core.ingest import IngestionError
from grmon.core.source import HttpSnapshotSource, TransportError
from grmon.models.view import MonitorView, SortKey, ViewMode, ViewState
from grmon.monitor.projection import ViewProjection
from grmon.monitor.renderer import MonitorRenderer

console = Console()


def dump_cmd(
    paths: list[Path] = typer.Argument(
        None,
        help="Saved dumps, directories or .zip archives to read instead of fetching.",
    ),
    host: str = typer.Option(config.host, "--host", "-H", help="Target host:port."),
    endpoint: str = typer.Option(
        config.endpoint, "--endpoint", "-e", help="Base path of the pprof handlers."
    ),
    timeout: float = typer.Option(
        config.fetch_timeout_seconds, "--timeout", "-t", help="HTTP request timeout in seconds."
    ),
    sort: SortKey = typer.Option(config.default_sort, "--sort", "-s", help="Row ordering."),
    filter_text: str = typer.Option(
        "", "--filter", "-f", help="Only show goroutines whose stack contains this text."
    ),
    expand: bool = typer.Option(
        False, "--expand", "-x", help="Show full stacks instead of the top frame."
    ),
) -> None:
    """Print the current goroutines as a table and exit."""
    try:
        source = build_source(
            paths, host=host, endpoint=endpoint, timeout=timeout, settings=config
        )
        if isinstance(source, HttpSnapshotSource):
            with source:
                snapshot = source.fetch()
        else:
            snapshot = source.fetch()
    except (IngestionError, TransportError) as exc:
        console.print(f"[bold red]Cannot read goroutine dump:[/bold red] {exc}")
        raise typer.Exit(code=1)

    projection = ViewProjection(ViewState(sort_key=sort, filter_text=filter_text))
    projection.update(snapshot.routines)
    if expand:
        for routine in projection.visible_rows():
            projection.toggle_expand(routine.id)

    view = MonitorView(
        rows=projection.rows(show_cursor=False),
        total_count=projection.total_count,
        mode=ViewMode.FROZEN,
        sort_key=sort,
        filter_text=filter_text,
        source=source.label,
        last_refresh=snapshot.captured_at,
    )
    MonitorRenderer(console=console).print_view(view)
