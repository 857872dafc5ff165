"""View-side models: sort keys, modes, view state and rendered rows."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict

from grmon.models.routine import Routine


class SortKey(str, Enum):
    """Ordering applied to the visible rows."""

    BY_ID = "by-id"
    BY_STATE = "by-state"

    def toggled(self) -> SortKey:
        return SortKey.BY_STATE if self is SortKey.BY_ID else SortKey.BY_ID


class ViewMode(str, Enum):
    """Whether the monitor is following the target or showing a frozen baseline."""

    LIVE = "live"
    FROZEN = "frozen"


class ViewState(BaseModel):
    """User-controlled view settings. Mutated by commands, never persisted."""

    model_config = ConfigDict(validate_assignment=True)

    sort_key: SortKey = SortKey.BY_ID
    filter_text: str = ""
    cursor: int = 0
    expanded: set[int] = set()


class RowView(BaseModel):
    """One visible row, prepared for a renderer."""

    model_config = ConfigDict(frozen=True)

    routine: Routine
    expanded: bool = False
    selected: bool = False

    @property
    def summary(self) -> str:
        """Single-line description: the innermost frame."""
        return self.routine.trace[0] if self.routine.trace else ""

    @property
    def lines(self) -> list[str]:
        """Trace lines to show — the full stack when expanded."""
        if not self.expanded:
            return [self.summary]
        lines = list(self.routine.trace)
        if self.routine.created_by:
            lines.append(f"created by {self.routine.created_by}")
        return lines


class MonitorView(BaseModel):
    """Everything the renderer needs to draw one frame."""

    model_config = ConfigDict(frozen=True)

    rows: list[RowView] = []
    total_count: int = 0
    mode: ViewMode = ViewMode.LIVE
    sort_key: SortKey = SortKey.BY_ID
    filter_text: str = ""
    source: str = ""
    last_refresh: datetime | None = None
    last_error: str | None = None

    @property
    def visible_count(self) -> int:
        return len(self.rows)

    @property
    def is_frozen(self) -> bool:
        return self.mode == ViewMode.FROZEN
