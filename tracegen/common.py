"""Shared data structures for tracegen."""

from __future__ import annotations

import enum
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tracegen.rand import RandomStream

DEFAULT_OPERATIONS = 10000
DEFAULT_INITIAL = 256
DEFAULT_NUM_THREADS = 1
DEFAULT_RANGE = DEFAULT_INITIAL * 2
DEFAULT_SEED = 0
DEFAULT_UPDATE = 20


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class TraceGenError(Exception):
    """Base class for every error raised by tracegen."""


class ConfigurationError(TraceGenError, ValueError):
    """Raised when a run configuration fails validation."""


class WorkerError(TraceGenError):
    """Raised when a worker thread cannot be started or crashed mid-run."""


class BarrierAbortedError(TraceGenError):
    """Raised inside :meth:`Barrier.cross` once the barrier has been aborted."""


class SetCorruptedError(TraceGenError):
    """Raised by :meth:`OrderedSet.check` when the ordering invariant is broken."""


# ---------------------------------------------------------------------------
# Trace vocabulary
# ---------------------------------------------------------------------------


class OpKind(enum.IntEnum):
    """Operation kind as written in the trace."""

    INSERT = 0
    REMOVE = 1
    CONTAINS = 2


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Config:
    """Resolved configuration of one run.

    Attributes:
        operations: Operations performed by each worker.
        initial: Number of keys inserted before the workers start.
        num_threads: Number of worker threads.
        range: Keys are drawn from ``[1, range]``.
        seed: Seed of the global seed source; 0 means time-based.
        update: Percentage of operations that are mutations (0-100).
        alternate: Strictly alternate insert and remove attempts per worker.
    """

    operations: int = DEFAULT_OPERATIONS
    initial: int = DEFAULT_INITIAL
    num_threads: int = DEFAULT_NUM_THREADS
    range: int = DEFAULT_RANGE
    seed: int = DEFAULT_SEED
    update: int = DEFAULT_UPDATE
    alternate: bool = True

    def validate(self) -> None:
        """Raise :class:`ConfigurationError` describing the first invalid field."""
        if self.operations < 0:
            raise ConfigurationError(f"operations must be >= 0, got {self.operations}")
        if self.initial < 0:
            raise ConfigurationError(f"initial size must be >= 0, got {self.initial}")
        if self.num_threads <= 0:
            raise ConfigurationError(f"number of threads must be > 0, got {self.num_threads}")
        if self.range <= 0:
            raise ConfigurationError(f"range must be > 0, got {self.range}")
        if self.range < self.initial:
            raise ConfigurationError(
                f"range ({self.range}) must be >= initial size ({self.initial}), "
                "otherwise the set can never be populated"
            )
        if not 0 <= self.update <= 100:
            raise ConfigurationError(f"update rate must be within [0, 100], got {self.update}")

    def describe(self) -> Iterator[str]:
        """Yield the configuration block of the run summary."""
        yield f"Operations   : {self.operations}"
        yield f"Initial size : {self.initial}"
        yield f"Nb threads   : {self.num_threads}"
        yield f"Value range  : {self.range}"
        yield f"Seed         : {self.seed}"
        yield f"Update rate  : {self.update}"
        yield f"Alternate    : {int(self.alternate)}"


# ---------------------------------------------------------------------------
# Per-worker state and run outcome
# ---------------------------------------------------------------------------


@dataclass(slots=True, eq=False)
class ThreadContext:
    """State owned by one worker thread.

    The controller builds the context before the thread starts and reads it
    back only after the thread has been joined.
    """

    index: int
    ops: int
    rng: RandomStream
    range: int
    update: int
    alternate: bool
    nb_add: int = 0
    nb_remove: int = 0
    nb_contains: int = 0
    nb_found: int = 0
    diff: int = 0
    error: BaseException | None = None

    @property
    def reads(self) -> int:
        return self.nb_contains

    @property
    def updates(self) -> int:
        return self.nb_add + self.nb_remove

    def describe(self) -> Iterator[str]:
        yield f"Thread {self.index}"
        yield f"  #add        : {self.nb_add}"
        yield f"  #remove     : {self.nb_remove}"
        yield f"  #contains   : {self.nb_contains}"
        yield f"  #found      : {self.nb_found}"


@dataclass
class RunResult:
    """Outcome of :func:`tracegen.driver.run`.

    Attributes:
        config: The configuration the run used.
        contexts: One context per worker, in thread order.
        initial_size: Set size right after population.
        actual_size: Set size after every worker joined.
        expected_size: ``initial_size`` plus the sum of the workers' deltas.
        duration: Wall-clock seconds between the barrier and the last join.
    """

    config: Config
    contexts: list[ThreadContext] = field(default_factory=list)
    initial_size: int = 0
    actual_size: int = 0
    expected_size: int = 0
    duration: float = 0.0

    @property
    def consistent(self) -> bool:
        return self.actual_size == self.expected_size

    @property
    def reads(self) -> int:
        return sum(ctx.reads for ctx in self.contexts)

    @property
    def updates(self) -> int:
        return sum(ctx.updates for ctx in self.contexts)

    @property
    def total_operations(self) -> int:
        return self.reads + self.updates
