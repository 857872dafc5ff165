"""Shared test fixtures for grmon."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from grmon.core.parser import parse_dump
from grmon.core.source import TransportError
from grmon.models.routine import Routine, Snapshot

# Two-block dump: goroutine 1 has no creator, goroutine 2 has a creator
# trailer separated from its frames by a blank line.
TWO_BLOCK_DUMP = (
    "goroutine 1 [running]:\n"
    "main.worker()\n"
    "\t/a.go:10 +0x1\n"
    "\n"
    "goroutine 2 [sleeping]:\n"
    "main.idle()\n"
    "\t/b.go:20 +0x2\n"
    "\n"
    "created by main.main\n"
    "\t/b.go:5 +0x3\n"
)

REALISTIC_DUMP = """\
goroutine 18 [chan receive, 5 minutes]:
main.consume(0xc000010000)
	/src/app/main.go:41 +0x45
created by main.main in goroutine 1
	/src/app/main.go:20 +0x8f

goroutine 1 [select]:
net/http.(*Server).Serve(0xc0000a2000, {0x7a1d20, 0xc0000b4000})
	/usr/local/go/src/net/http/server.go:3056 +0x3a5
main.main()
	/src/app/main.go:25 +0x13c

goroutine 7 [IO wait]:
internal/poll.runtime_pollWait(0x7f1c, 0x72)
	/usr/local/go/src/runtime/netpoll.go:343 +0x85
internal/poll.(*pollDesc).wait(0xc0000a0080, 0x0, 0x0)
	/usr/local/go/src/internal/poll/fd_poll_runtime.go:84 +0x27
created by net/http.(*Server).Serve in goroutine 1
	/usr/local/go/src/net/http/server.go:3086 +0x5cb

goroutine 9 [chan receive]:
main.consume(0xc000010060)
	/src/app/main.go:41 +0x45
created by main.main in goroutine 1
	/src/app/main.go:21 +0x9a
"""


class FakeSource:
    """Snapshot source that replays a scripted list of results.

    Each item is either a dump string (parsed on fetch) or an exception
    instance (raised on fetch).  The last item repeats once the script
    runs out.
    """

    def __init__(self, *results: str | Exception, label: str = "fake") -> None:
        self._results = list(results)
        self._label = label
        self.fetch_count = 0

    @property
    def label(self) -> str:
        return self._label

    def fetch(self) -> Snapshot:
        index = min(self.fetch_count, len(self._results) - 1)
        self.fetch_count += 1
        result = self._results[index]
        if isinstance(result, Exception):
            raise result
        return parse_dump(result)


@pytest.fixture
def two_block_dump() -> str:
    return TWO_BLOCK_DUMP


@pytest.fixture
def realistic_dump() -> str:
    return REALISTIC_DUMP


@pytest.fixture
def fake_source_factory() -> Callable[..., FakeSource]:
    """Factory fixture: build a FakeSource from scripted results."""
    return FakeSource


@pytest.fixture
def transport_error() -> TransportError:
    return TransportError("GET http://localhost:1234/debug/pprof/goroutine?debug=2 failed")


@pytest.fixture
def make_routine() -> Callable[..., Routine]:
    """Factory fixture: build a Routine with sensible defaults."""

    def _factory(routine_id: int = 1, state: str = "running", **overrides: Any) -> Routine:
        defaults: dict[str, Any] = {
            "id": routine_id,
            "state": state,
            "trace": [f"main.fn{routine_id}() /main.go:{routine_id} +0x1"],
        }
        defaults.update(overrides)
        return Routine(**defaults)

    return _factory
