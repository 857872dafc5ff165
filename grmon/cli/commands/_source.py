"""Shared helpers for choosing the snapshot source from CLI arguments."""

from __future__ import annotations

from pathlib import Path

from grmon.config import GrmonConfig
from grmon.core.ingest import read_dump_paths
from grmon.core.source import HttpSnapshotSource, ReplaySnapshotSource, SnapshotSource


def build_source(
    paths: list[Path] | None,
    *,
    host: str,
    endpoint: str,
    timeout: float,
    settings: GrmonConfig,
) -> SnapshotSource:
    """Return a replay source when paths are given, otherwise an HTTP source.

    Raises ``IngestionError`` if any replay path cannot be read.
    """
    if paths:
        data = read_dump_paths(paths, member_suffix=settings.archive_member_suffix)
        label = ", ".join(str(p) for p in paths)
        return ReplaySnapshotSource(data, label=f"replay: {label}")
    return HttpSnapshotSource(host, endpoint, timeout=timeout)
