"""Snapshot sources — where raw goroutine dumps come from.

Two backends satisfy the ``SnapshotSource`` protocol:

1. **HttpSnapshotSource** — fetches ``/goroutine?debug=2`` from a live
   process's pprof handler with a bounded timeout.
2. **ReplaySnapshotSource** — re-parses bytes loaded once at startup from
   files or archives (see ``grmon.core.ingest``).

Exactly one source is chosen at startup; there is no switching at runtime.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

import httpx

from grmon.core.parser import parse_dump
from grmon.models.routine import Snapshot

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0
DUMP_PATH = "goroutine?debug=2"


class TransportError(RuntimeError):
    """Raised when a dump cannot be fetched from the target.

    Covers unreachable hosts, timeouts and non-success HTTP statuses.
    Callers keep showing the last good snapshot.
    """


@runtime_checkable
class SnapshotSource(Protocol):
    """Protocol for anything that can produce a fresh ``Snapshot``."""

    @property
    def label(self) -> str:
        """Short human-readable description of the source."""
        ...

    def fetch(self) -> Snapshot:
        """Return a newly parsed snapshot or raise ``TransportError``."""
        ...


def build_dump_url(host: str, endpoint: str) -> str:
    """Build the debug=2 goroutine URL for ``host`` and base ``endpoint``."""
    base = endpoint.strip("/")
    path = f"{base}/{DUMP_PATH}" if base else DUMP_PATH
    return f"http://{host}/{path}"


class HttpSnapshotSource:
    """Fetches goroutine dumps over HTTP.

    Parameters
    ----------
    host:
        ``host:port`` of the process exposing ``net/http/pprof``.
    endpoint:
        Base path of the pprof handlers.  Defaults to ``/debug/pprof``.
    timeout:
        Overall request timeout in seconds.
    transport:
        Optional ``httpx`` transport, used by tests to avoid the network.
    """

    def __init__(
        self,
        host: str,
        endpoint: str = "/debug/pprof",
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._url = build_dump_url(host, endpoint)
        self._client = httpx.Client(timeout=timeout, transport=transport)

    @property
    def url(self) -> str:
        return self._url

    @property
    def label(self) -> str:
        return self._url

    def fetch(self) -> Snapshot:
        try:
            response = self._client.get(self._url)
        except httpx.HTTPError as exc:
            raise TransportError(f"GET {self._url} failed: {exc}") from exc

        if not response.is_success:
            raise TransportError(
                f"GET {self._url} returned HTTP {response.status_code}"
            )

        snapshot = parse_dump(response.content)
        logger.debug(
            "fetched %d bytes, %d goroutines from %s",
            len(response.content),
            len(snapshot),
            self._url,
        )
        return snapshot

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> HttpSnapshotSource:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class ReplaySnapshotSource:
    """Serves a dump that was loaded into memory before the monitor started.

    Every ``fetch()`` re-parses the stored bytes, so callers always get
    records they are free to modify.
    """

    def __init__(self, data: bytes, label: str = "replay") -> None:
        self._data = data
        self._label = label

    @property
    def label(self) -> str:
        return self._label

    def fetch(self) -> Snapshot:
        return parse_dump(self._data)
