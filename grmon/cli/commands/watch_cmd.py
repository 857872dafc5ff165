"""``grmon watch [PATHS...]`` — the interactive goroutine monitor.

Without paths, polls the target's pprof endpoint every ``--interval``
seconds.  With paths, replays the saved dumps and starts paused.
"""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console

from grmon.cli.commands._source import build_source
from grmon.config import config
from grmon.core.engine import LiveStateEngine
from grmon.core.ingest import IngestionError
from grmon.core.source import HttpSnapshotSource
from grmon.models.view import ViewState
from grmon.monitor.projection import ViewProjection
from grmon.monitor.renderer import MonitorRenderer
from grmon.monitor.session import MonitorSession

console = Console()
logger = logging.getLogger(__name__)


def watch_cmd(
    paths: list[Path] = typer.Argument(
        None,
        help="Saved dumps, directories or .zip archives to replay instead of polling.",
    ),
    host: str = typer.Option(
        config.host,
        "--host",
        "-H",
        help="Target host:port serving net/http/pprof.",
    ),
    endpoint: str = typer.Option(
        config.endpoint,
        "--endpoint",
        "-e",
        help="Base path of the pprof handlers.",
    ),
    interval: int = typer.Option(
        config.interval_seconds,
        "--interval",
        "-i",
        min=0,
        help="Seconds between refreshes; 0 starts paused.",
    ),
    timeout: float = typer.Option(
        config.fetch_timeout_seconds,
        "--timeout",
        "-t",
        help="HTTP request timeout in seconds.",
    ),
) -> None:
    """Watch goroutines in a live table.

    Keys: r refresh, p pause/resume, s sort, f filter, arrows move,
    enter expand (paused only), q quit.
    """
    try:
        source = build_source(
            paths, host=host, endpoint=endpoint, timeout=timeout, settings=config
        )
    except IngestionError as exc:
        console.print(f"[bold red]Cannot load dumps:[/bold red] {exc}")
        raise typer.Exit(code=1)

    frozen = bool(paths) or interval == 0
    logger.info("watching %s (frozen=%s, interval=%ss)", source.label, frozen, interval)

    engine = LiveStateEngine(source, frozen=frozen)
    projection = ViewProjection(ViewState(sort_key=config.default_sort))
    session = MonitorSession(
        engine,
        projection,
        MonitorRenderer(console=console),
        interval_seconds=interval,
        tick_seconds=config.tick_seconds,
    )
    try:
        session.run()
    except KeyboardInterrupt:
        pass
    finally:
        if isinstance(source, HttpSnapshotSource):
            source.close()
