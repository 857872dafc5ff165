"""Runtime configuration — env-driven via pydantic-settings.

Reads ``GRMON_*`` environment variables and an optional ``.env`` file.
Command-line options take precedence over anything set here.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from grmon.models.view import SortKey


class GrmonConfig(BaseSettings):
    """Settings for the goroutine monitor.

    Examples
    --------
    Override via environment::

        export GRMON_HOST=10.0.0.5:6060
        export GRMON_INTERVAL_SECONDS=2
        export GRMON_LOG_FILE=/tmp/grmon.log
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="GRMON_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Network target
    host: str = "localhost:1234"
    endpoint: str = "/debug/pprof"
    fetch_timeout_seconds: float = Field(default=10.0, gt=0)

    # Refresh cadence; 0 starts the monitor paused
    interval_seconds: int = Field(default=5, ge=0)
    tick_seconds: float = Field(default=0.5, gt=0)

    # Replay ingestion
    archive_member_suffix: str = "debug=2.txt"

    # View defaults
    default_sort: SortKey = SortKey.BY_ID

    # Logging
    log_level: str = "WARNING"
    log_file: Path | None = None


# Module-level singleton — import as `from grmon.config import config`
config = GrmonConfig()
