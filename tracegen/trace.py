"""Trace emission.

The trace is a plain text stream consumed by external tooling:

1. The first line lists the set contents after population, in ascending
   order, each key followed by ``", "``.
2. Every operation attempt then produces one ``"<kind> - <value>"`` line,
   where ``kind`` is an :class:`~tracegen.common.OpKind` value.

Lines carry neither the thread identity nor the outcome of the operation;
outcomes are recovered by replaying the trace against a fresh set.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TextIO

from tracegen.common import OpKind


@dataclass(slots=True, frozen=True)
class TraceEvent:
    """A single operation attempt."""

    kind: OpKind
    value: int

    def format(self) -> str:
        return f"{int(self.kind)} - {self.value}\n"


def format_initial(keys: Iterable[int]) -> str:
    """Format the initial-contents line (trailing separator included)."""
    return "".join(f"{key}, " for key in keys) + "\n"


class TraceWriter:
    """Writes trace lines to a text stream shared by every worker.

    Each line goes out in a single ``write()`` call made under the writer's
    lock, so lines from different threads never interleave mid-line.  The
    order between threads' lines is whatever order they reach the lock in.
    """

    __slots__ = ("stream", "lines", "_lock")

    def __init__(self, stream: TextIO) -> None:
        self.stream = stream
        self.lines = 0
        self._lock = threading.Lock()

    def write_initial(self, keys: Iterable[int]) -> None:
        line = format_initial(keys)
        with self._lock:
            self.stream.write(line)

    def record(self, kind: OpKind, value: int) -> None:
        """Emit one operation-attempt line."""
        line = TraceEvent(kind, value).format()
        with self._lock:
            self.stream.write(line)
            self.lines += 1

    def flush(self) -> None:
        with self._lock:
            self.stream.flush()
