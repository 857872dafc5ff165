"""grmon CLI — Typer-based command-line interface.

Provides the ``grmon`` command with a ``watch`` subcommand for the
interactive monitor and a ``dump`` subcommand for one-shot output.

All output uses Rich for formatted terminal display.
"""
