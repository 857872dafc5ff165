"""LiveStateEngine — the poll / freeze cycle over a snapshot source.

While live, every ``poll()`` fetches from the source, retains the result
as the last good snapshot and hands the caller a clone of it.  While
frozen, ``poll()`` never touches the source: it hands out a deep clone of
the frozen baseline.  Either way a caller that rewrites a record for
display cannot corrupt the baseline or what the next poll returns.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from grmon.core.source import SnapshotSource
from grmon.models.routine import Routine, Snapshot

logger = logging.getLogger(__name__)


def clone_snapshot(snapshot: Snapshot) -> Snapshot:
    """Return a copy of ``snapshot`` sharing no mutable state with it.

    Every record and every ``trace`` list is new.  Records with an empty
    trace are left out.
    """
    return Snapshot(
        routines=[
            Routine(
                id=r.id,
                state=r.state,
                created_by=r.created_by,
                trace=list(r.trace),
            )
            for r in snapshot.routines
            if r.trace
        ],
        captured_at=snapshot.captured_at,
    )


class LiveStateEngine:
    """Owns the retained snapshot and the frozen baseline.

    Parameters
    ----------
    source:
        Where fresh snapshots come from.
    frozen:
        Start in frozen mode.  The first ``poll()`` then fetches once and
        adopts the result as the baseline.
    clock:
        Monotonic clock used for ``last_refresh``; injectable for tests.
    """

    def __init__(
        self,
        source: SnapshotSource,
        *,
        frozen: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._source = source
        self._clock = clock
        self._frozen = frozen
        self._retained: Snapshot | None = None
        self._baseline: Snapshot | None = None
        self._last_refresh: float | None = None

    @property
    def source(self) -> SnapshotSource:
        return self._source

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def retained(self) -> Snapshot | None:
        """The last snapshot successfully fetched from the source."""
        return self._retained

    @property
    def last_refresh(self) -> float | None:
        """Clock reading of the last successful fetch, or ``None``."""
        return self._last_refresh

    def seconds_since_refresh(self) -> float | None:
        if self._last_refresh is None:
            return None
        return self._clock() - self._last_refresh

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    def poll(self) -> Snapshot:
        """Return the current snapshot.

        Raises ``TransportError`` when a fetch fails; retained state is
        left untouched in that case.
        """
        if self._frozen:
            if self._baseline is None:
                self._baseline = clone_snapshot(self._fetch())
            return clone_snapshot(self._baseline)
        return self._fetch()

    def _fetch(self) -> Snapshot:
        snapshot = self._source.fetch()
        self._retained = snapshot
        self._last_refresh = self._clock()
        logger.debug("poll: %d goroutines from %s", len(snapshot), self._source.label)
        # Callers get their own copy; the retained snapshot stays untouched.
        return clone_snapshot(snapshot)

    # ------------------------------------------------------------------
    # Mode
    # ------------------------------------------------------------------

    def freeze(self, on: bool) -> None:
        """Enter or leave frozen mode.

        Freezing captures a clone of the retained snapshot as the
        baseline; thawing discards it so the next poll fetches again.
        """
        if on:
            if not self._frozen and self._retained is not None:
                self._baseline = clone_snapshot(self._retained)
            self._frozen = True
            logger.info("view frozen")
        else:
            self._baseline = None
            self._frozen = False
            logger.info("view live")
