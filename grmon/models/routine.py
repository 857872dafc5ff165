"""Goroutine records and the snapshots that hold them."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


class Routine(BaseModel):
    """One goroutine as it appeared in a single stack dump.

    ``trace`` holds one entry per frame, innermost first, each entry the
    call line and its ``file:line +0xoff`` location joined by a space.
    The model is left mutable so display code may rewrite a copy.
    """

    id: int
    state: str
    created_by: str = ""
    trace: list[str] = []

    def matches(self, needle: str) -> bool:
        """True when any trace entry contains ``needle`` literally."""
        return any(needle in frame for frame in self.trace)


class Snapshot(BaseModel):
    """All goroutines captured from one dump, in dump order."""

    model_config = ConfigDict(frozen=True)

    routines: list[Routine] = []
    captured_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    @property
    def ids(self) -> list[int]:
        return [r.id for r in self.routines]

    def __len__(self) -> int:
        return len(self.routines)
