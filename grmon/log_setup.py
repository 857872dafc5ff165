"""Logging setup for the ``grmon`` logger tree.

The interactive monitor owns the terminal, so log records either go to a
file or through Rich's handler on stderr where they interleave cleanly
with console output.
"""

from __future__ import annotations

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

_ROOT_LOGGER = "grmon"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "WARNING", log_file: Path | None = None) -> logging.Logger:
    """Install a single handler on the ``grmon`` logger.

    Calling this again replaces the previous handler rather than stacking
    a second one.
    """
    logger = logging.getLogger(_ROOT_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handler: logging.Handler
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setFormatter(logging.Formatter(_FILE_FORMAT))
    else:
        handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            rich_tracebacks=False,
        )

    logger.addHandler(handler)
    logger.setLevel(level.upper())
    logger.propagate = False
    return logger
