"""ViewProjection — derives the visible rows from the full goroutine set.

The projection holds the most recent record list plus a ``ViewState``
(sort key, filter, cursor, expanded ids).  It knows nothing about the
terminal; renderers consume ``rows()`` and the session builds a
``MonitorView`` from it.
"""

from __future__ import annotations

from collections.abc import Iterable

from grmon.models.routine import Routine
from grmon.models.view import RowView, SortKey, ViewState


def sort_routines(routines: Iterable[Routine], key: SortKey) -> list[Routine]:
    """Order by ascending id, or by state with ascending id as tiebreak."""
    if key == SortKey.BY_STATE:
        return sorted(routines, key=lambda r: (r.state, r.id))
    return sorted(routines, key=lambda r: r.id)


def filter_routines(routines: Iterable[Routine], needle: str) -> list[Routine]:
    """Keep records with a trace entry containing ``needle`` (case-sensitive)."""
    if not needle:
        return list(routines)
    return [r for r in routines if r.matches(needle)]


class ViewProjection:
    """Sort, filter and cursor logic over the current records.

    Parameters
    ----------
    state:
        Initial view state.  A fresh ``ViewState`` is used if omitted.
    """

    def __init__(self, state: ViewState | None = None) -> None:
        self._state = state or ViewState()
        self._routines: list[Routine] = []

    @property
    def state(self) -> ViewState:
        return self._state

    @property
    def total_count(self) -> int:
        return len(self._routines)

    def update(self, routines: Iterable[Routine]) -> None:
        """Replace the record set, keeping sort, filter and expanded ids."""
        self._routines = list(routines)
        self._clamp_cursor()

    # ------------------------------------------------------------------
    # Derivation
    # ------------------------------------------------------------------

    def visible_rows(self) -> list[Routine]:
        ordered = sort_routines(self._routines, self._state.sort_key)
        return filter_routines(ordered, self._state.filter_text)

    def current(self) -> Routine | None:
        """The record under the cursor, if any."""
        rows = self.visible_rows()
        if not rows:
            return None
        return rows[min(self._state.cursor, len(rows) - 1)]

    def rows(self, *, show_cursor: bool = True) -> list[RowView]:
        expanded = self._state.expanded
        cursor = self._state.cursor
        return [
            RowView(
                routine=routine,
                expanded=routine.id in expanded,
                selected=show_cursor and index == cursor,
            )
            for index, routine in enumerate(self.visible_rows())
        ]

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def move_cursor(self, delta: int) -> bool:
        """Move the cursor by ``delta`` rows, clamped to the visible set.

        Returns whether the cursor position changed.
        """
        count = len(self.visible_rows())
        if count == 0:
            return False
        old = self._state.cursor
        new = max(0, min(old + delta, count - 1))
        self._state.cursor = new
        return new != old

    def toggle_expand(self, routine_id: int) -> None:
        expanded = self._state.expanded
        if routine_id in expanded:
            expanded.discard(routine_id)
        else:
            expanded.add(routine_id)

    def toggle_expand_current(self) -> bool:
        routine = self.current()
        if routine is None:
            return False
        self.toggle_expand(routine.id)
        return True

    def toggle_sort(self) -> SortKey:
        self._state.sort_key = self._state.sort_key.toggled()
        return self._state.sort_key

    def set_filter(self, text: str) -> None:
        self._state.filter_text = text
        self._clamp_cursor()

    def _clamp_cursor(self) -> None:
        count = len(self.visible_rows())
        self._state.cursor = max(0, min(self._state.cursor, count - 1))
