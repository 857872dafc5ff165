"""Main Typer application — imports and registers all CLI commands.

Entry point: ``grmon`` (configured via pyproject.toml project.scripts).
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from grmon import __version__
from grmon.cli.commands.dump_cmd import dump_cmd
from grmon.cli.commands.watch_cmd import watch_cmd
from grmon.config import config
from grmon.log_setup import configure_logging

app = typer.Typer(
    name="grmon",
    help="grmon: live terminal viewer for goroutine stack dumps.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommands
app.command(name="watch", help="Watch goroutines in a live, interactive table.")(watch_cmd)
app.command(name="dump", help="Print the goroutine table once and exit.")(dump_cmd)


def _version_callback(value: bool) -> None:
    if value:
        Console().print(f"grmon {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        config.log_level, "--log-level", help="Log level for the grmon logger."
    ),
    log_file: Path = typer.Option(
        config.log_file, "--log-file", help="Write logs to this file instead of stderr."
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
) -> None:
    """Configure logging before any subcommand runs."""
    configure_logging(log_level, log_file)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
