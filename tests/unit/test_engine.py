"""Tests for LiveStateEngine — polling, freezing and clone isolation.

Verifies that:
1. Live polls fetch and retain the last good snapshot.
2. Failed polls leave retained state untouched.
3. Frozen polls never fetch and return independent deep clones.
4. Thawing resumes fetching.
"""

from __future__ import annotations

import pytest

from grmon.core.engine import LiveStateEngine, clone_snapshot
from grmon.core.source import TransportError
from grmon.models.routine import Routine, Snapshot


class _Clock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


# ---------------------------------------------------------------------------
# Test: Live polling
# ---------------------------------------------------------------------------


class TestLivePolling:
    """Unfrozen polls go to the source every time."""

    def test_poll_fetches_and_retains(self, fake_source_factory, two_block_dump):
        source = fake_source_factory(two_block_dump)
        engine = LiveStateEngine(source)

        snapshot = engine.poll()

        assert snapshot.ids == [1, 2]
        assert engine.retained is not None
        assert engine.retained.ids == [1, 2]
        assert engine.retained is not snapshot
        assert source.fetch_count == 1

    def test_each_poll_fetches(self, fake_source_factory, two_block_dump):
        source = fake_source_factory(two_block_dump)
        engine = LiveStateEngine(source)
        engine.poll()
        engine.poll()
        assert source.fetch_count == 2

    def test_failure_keeps_retained(self, fake_source_factory, two_block_dump, transport_error):
        """A failed fetch propagates and does not replace the last good snapshot."""
        source = fake_source_factory(two_block_dump, transport_error)
        clock = _Clock()
        engine = LiveStateEngine(source, clock=clock)

        good = engine.poll()
        clock.now = 200.0
        with pytest.raises(TransportError):
            engine.poll()

        assert engine.retained.ids == good.ids
        assert engine.last_refresh == 100.0

    def test_last_refresh_tracks_success(self, fake_source_factory, two_block_dump):
        clock = _Clock()
        engine = LiveStateEngine(fake_source_factory(two_block_dump), clock=clock)
        assert engine.last_refresh is None
        assert engine.seconds_since_refresh() is None

        engine.poll()
        clock.now = 103.5
        assert engine.seconds_since_refresh() == pytest.approx(3.5)


# ---------------------------------------------------------------------------
# Test: Frozen polling
# ---------------------------------------------------------------------------


class TestFrozenPolling:
    """Frozen polls replay clones of the baseline without fetching."""

    def test_frozen_poll_does_not_fetch(self, fake_source_factory, two_block_dump):
        source = fake_source_factory(two_block_dump)
        engine = LiveStateEngine(source)
        engine.poll()
        engine.freeze(True)

        engine.poll()
        engine.poll()

        assert source.fetch_count == 1
        assert engine.frozen is True

    def test_freeze_idempotence_under_mutation(self, fake_source_factory, two_block_dump):
        """Mutating one frozen poll's trace[0] never shows up in the next poll."""
        engine = LiveStateEngine(fake_source_factory(two_block_dump))
        engine.poll()
        engine.freeze(True)

        first = engine.poll()
        first.routines[0].trace[0] = first.routines[0].state
        first.routines[1].trace.append("extra")
        second = engine.poll()

        assert second.ids == [1, 2]
        assert second.routines[0].trace == ["main.worker() /a.go:10 +0x1"]
        assert second.routines[1].trace == ["main.idle() /b.go:20 +0x2"]
        assert [r.state for r in second.routines] == ["running", "sleeping"]

    def test_baseline_isolated_from_live_result(self, fake_source_factory, two_block_dump):
        """Freezing clones the retained snapshot, so later edits to it do not leak."""
        engine = LiveStateEngine(fake_source_factory(two_block_dump))
        live = engine.poll()
        engine.freeze(True)
        live.routines[0].trace[0] = "mutated after freeze"

        assert engine.poll().routines[0].trace[0] == "main.worker() /a.go:10 +0x1"

    def test_live_result_edits_before_freeze_do_not_leak(
        self, fake_source_factory, two_block_dump
    ):
        """Rewriting a live poll for display, then pausing, keeps the baseline intact."""
        engine = LiveStateEngine(fake_source_factory(two_block_dump))
        live = engine.poll()
        live.routines[0].trace[0] = live.routines[0].state
        engine.freeze(True)

        assert engine.poll().routines[0].trace[0] == "main.worker() /a.go:10 +0x1"
        assert engine.retained.routines[0].trace[0] == "main.worker() /a.go:10 +0x1"

    def test_frozen_without_baseline_fetches_once(self, fake_source_factory, two_block_dump):
        """Starting frozen (replay, interval 0) adopts the first fetch as baseline."""
        source = fake_source_factory(two_block_dump)
        engine = LiveStateEngine(source, frozen=True)

        assert engine.poll().ids == [1, 2]
        assert engine.poll().ids == [1, 2]
        assert source.fetch_count == 1

    def test_frozen_without_baseline_failure_propagates(
        self, fake_source_factory, transport_error, two_block_dump
    ):
        source = fake_source_factory(transport_error, two_block_dump)
        engine = LiveStateEngine(source, frozen=True)
        with pytest.raises(TransportError):
            engine.poll()
        assert engine.poll().ids == [1, 2]

    def test_thaw_resumes_fetching(self, fake_source_factory, two_block_dump):
        second_dump = two_block_dump.replace("goroutine 2 ", "goroutine 3 ")
        source = fake_source_factory(two_block_dump, second_dump)
        engine = LiveStateEngine(source)
        engine.poll()
        engine.freeze(True)
        engine.poll()

        engine.freeze(False)

        assert engine.frozen is False
        assert engine.poll().ids == [1, 3]
        assert source.fetch_count == 2

    def test_refreeze_takes_new_baseline(self, fake_source_factory, two_block_dump):
        second_dump = two_block_dump.replace("goroutine 2 ", "goroutine 3 ")
        engine = LiveStateEngine(fake_source_factory(two_block_dump, second_dump))
        engine.poll()
        engine.freeze(True)
        engine.freeze(False)
        engine.poll()
        engine.freeze(True)
        assert engine.poll().ids == [1, 3]


# ---------------------------------------------------------------------------
# Test: clone_snapshot
# ---------------------------------------------------------------------------


class TestCloneSnapshot:
    def test_clone_shares_no_lists(self):
        original = Snapshot(
            routines=[Routine(id=1, state="running", trace=["a", "b"])]
        )
        clone = clone_snapshot(original)
        assert clone.routines[0] is not original.routines[0]
        assert clone.routines[0].trace is not original.routines[0].trace
        assert clone.routines[0].trace == ["a", "b"]
        assert clone.captured_at == original.captured_at

    def test_clone_drops_empty_traces(self):
        original = Snapshot(
            routines=[
                Routine(id=1, state="running", trace=["a"]),
                Routine(id=2, state="idle", trace=[]),
            ]
        )
        assert clone_snapshot(original).ids == [1]
