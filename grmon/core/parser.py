"""Parser for the verbose goroutine dump (``goroutine?debug=2``).

A dump is a sequence of blocks, one per goroutine::

    goroutine 7 [chan receive, 5 minutes]:
    main.consume(0xc000010000)
    	/src/app/main.go:41 +0x45
    created by main.main in goroutine 1
    	/src/app/main.go:20 +0x8f

The parser is line-driven rather than blank-line-driven: a header line
opens a record, every following line belongs to it until the next header.
Nothing here raises on malformed input — unusable blocks are skipped and
logged at DEBUG level, so a truncated capture still yields every
goroutine that made it through intact.
"""

from __future__ import annotations

import logging
import re

from grmon.models.routine import Routine, Snapshot

logger = logging.getLogger(__name__)

# Newer runtimes insert ``gp=0x.. m=.. mp=0x..`` between the id and the state.
_HEADER_RE = re.compile(r"^goroutine\s+(\d+)\b[^\[]*\[([^\]]*)\]:?$")
_CREATED_BY = "created by "
# "/path/file.go:123 +0x45", the offset is absent on some frames.
_LOCATION_RE = re.compile(r"^\S.*:\d+(?:\s+\+0x[0-9a-fA-F]+)?$")


class _Block:
    """Accumulates the lines of one goroutine while the dump is scanned."""

    def __init__(self, routine_id: int, state: str, indent: int = 0) -> None:
        self.routine_id = routine_id
        self.state = state
        self.indent = indent
        self.trace: list[str] = []
        self.created_by = ""
        self._call: str | None = None
        self._in_trailer = False

    def add_call(self, line: str) -> None:
        self._flush_call()
        if line.startswith(_CREATED_BY):
            self._in_trailer = True
            self._call = line[len(_CREATED_BY):].strip()
        else:
            self._in_trailer = False
            self._call = line

    def add_location(self, location: str) -> None:
        if self._call is None:
            # Location without a call line; nothing to attach it to.
            return
        if self._in_trailer:
            self.created_by = f"{self._call} {location}"
            self._in_trailer = False
        else:
            self.trace.append(f"{self._call} {location}")
        self._call = None

    def _flush_call(self) -> None:
        # A call line with no location (e.g. "...additional frames elided...")
        if self._call is not None:
            if self._in_trailer:
                self.created_by = self._call
            else:
                self.trace.append(self._call)
        self._call = None
        self._in_trailer = False

    def finish(self) -> Routine | None:
        self._flush_call()
        if not self.trace:
            return None
        return Routine(
            id=self.routine_id,
            state=self.state,
            created_by=self.created_by,
            trace=self.trace,
        )


def parse_header(line: str) -> tuple[int, str] | None:
    """Return ``(id, state)`` for a goroutine header line, else ``None``.

    The state is cut at its first comma so wait durations such as
    ``"chan receive, 5 minutes"`` collapse to ``"chan receive"``.
    """
    match = _HEADER_RE.match(line.strip())
    if match is None:
        return None
    state = match.group(2).split(",", 1)[0].strip()
    return int(match.group(1)), state


def _indent(raw_line: str) -> int:
    return len(raw_line) - len(raw_line.lstrip())


def _is_location(line: str, indent: int, block: _Block) -> bool:
    """Whether a stripped line is a source location rather than a call.

    Locations are recognised by their ``file:line`` shape.  Failing that,
    a line indented deeper than its block header counts as one, which
    keeps dumps that were uniformly indented (pasted from a log) intact.
    """
    if _LOCATION_RE.match(line):
        return True
    return indent > block.indent


def parse_dump(raw: bytes | str) -> Snapshot:
    """Parse a verbose goroutine dump into a ``Snapshot``.

    Records keep dump order.  Blocks without any frame are dropped, and
    when an id repeats (several captures concatenated) the first block
    wins.
    """
    text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw

    blocks: list[_Block] = []
    current: _Block | None = None

    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line:
            continue

        header = parse_header(line)
        if header is not None:
            current = _Block(*header, indent=_indent(raw_line))
            blocks.append(current)
            continue

        if current is None:
            # Preamble before the first header.
            continue

        if _is_location(line, _indent(raw_line), current):
            current.add_location(line)
        else:
            current.add_call(line)

    routines: list[Routine] = []
    seen: set[int] = set()
    for block in blocks:
        routine = block.finish()
        if routine is None:
            logger.debug("skipping goroutine %d: no parsable frames", block.routine_id)
            continue
        if routine.id in seen:
            logger.debug("skipping goroutine %d: duplicate id", routine.id)
            continue
        seen.add(routine.id)
        routines.append(routine)

    logger.debug("parsed %d goroutines from %d blocks", len(routines), len(blocks))
    return Snapshot(routines=routines)
