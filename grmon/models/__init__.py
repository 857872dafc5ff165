"""grmon data models — Pydantic v2."""

from grmon.models.routine import Routine, Snapshot
from grmon.models.view import MonitorView, RowView, SortKey, ViewMode, ViewState

__all__ = [
    "MonitorView",
    "Routine",
    "RowView",
    "Snapshot",
    "SortKey",
    "ViewMode",
    "ViewState",
]
