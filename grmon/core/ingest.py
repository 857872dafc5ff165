"""Replay ingestion — load saved dumps from files, directories and archives.

Each path is handled as follows:

- a directory is walked recursively, in sorted order;
- a ``.zip`` archive contributes every member whose name ends with the
  dump suffix (``debug=2.txt`` by default);
- any other file is read whole.

All pieces are concatenated, each followed by a newline, into a single
buffer for ``ReplaySnapshotSource``.
"""

from __future__ import annotations

import logging
import zipfile
from collections.abc import Iterable
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_MEMBER_SUFFIX = "debug=2.txt"
ARCHIVE_SUFFIXES = (".zip",)


class IngestionError(RuntimeError):
    """Raised when a replay input cannot be opened or read."""


def _iter_files(path: Path) -> Iterable[Path]:
    if path.is_dir():
        for child in sorted(path.rglob("*")):
            if child.is_file():
                yield child
    else:
        yield path


def _read_archive(path: Path, member_suffix: str) -> list[bytes]:
    chunks: list[bytes] = []
    with zipfile.ZipFile(path) as archive:
        for info in archive.infolist():
            if info.is_dir() or not info.filename.endswith(member_suffix):
                continue
            chunks.append(archive.read(info))
            logger.debug("read %s from archive %s", info.filename, path)
    return chunks


def read_dump_paths(
    paths: Iterable[Path | str],
    member_suffix: str = DEFAULT_MEMBER_SUFFIX,
) -> bytes:
    """Concatenate every dump found under ``paths``.

    Raises
    ------
    IngestionError
        If any path is missing, unreadable, or a corrupt archive.
    """
    buffer = bytearray()
    for raw_path in paths:
        root = Path(raw_path)
        if not root.exists():
            raise IngestionError(f"No such file or directory: {root}")

        for file_path in _iter_files(root):
            try:
                if file_path.suffix.lower() in ARCHIVE_SUFFIXES:
                    chunks = _read_archive(file_path, member_suffix)
                else:
                    chunks = [file_path.read_bytes()]
            except (OSError, zipfile.BadZipFile) as exc:
                raise IngestionError(f"Cannot read {file_path}: {exc}") from exc

            for chunk in chunks:
                buffer.extend(chunk)
                buffer.extend(b"\n")

    logger.info("loaded %d bytes of replay input", len(buffer))
    return bytes(buffer)
