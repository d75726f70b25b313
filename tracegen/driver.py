"""
Concurrent workload driver.

The controller populates a fresh :class:`~tracegen.intset.OrderedSet`,
dumps its contents to the trace, then starts one worker thread per
configured thread.  Workers and controller rendezvous at a
:class:`~tracegen.barrier.Barrier` so nobody gets a head start, after which
each worker runs its fixed budget of operations against the shared set and
traces every attempt.  Once all workers have been joined, the controller
checks that the final set size matches the initial size plus the workers'
net insert/remove deltas.

Example::

    import sys
    from tracegen.common import Config
    from tracegen.driver import run

    result = run(Config(operations=1000, num_threads=4), sys.stderr)
    assert result.consistent
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from typing import TextIO

from tracegen.barrier import Barrier
from tracegen.common import BarrierAbortedError, Config, OpKind, RunResult, ThreadContext, WorkerError
from tracegen.intset import OrderedSet
from tracegen.rand import RandomStream, SeedSource
from tracegen.trace import TraceWriter

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Population
# ---------------------------------------------------------------------------


def populate(intset: OrderedSet, rng: RandomStream, initial: int, key_range: int) -> int:
    """Insert random keys from ``[1, key_range]`` until *initial* of them stuck.

    Draws that hit a key already in the set are retried, not counted.

    Returns:
        The number of draws it took.
    """
    if initial > key_range:
        raise ValueError(f"cannot place {initial} distinct keys in [1, {key_range}]")
    added = 0
    draws = 0
    while added < initial:
        draws += 1
        if intset.add(rng.rand_range(key_range) + 1):
            added += 1
    logger.debug("populated %d keys in %d draws", initial, draws)
    return draws


# ---------------------------------------------------------------------------
# Worker
# ---------------------------------------------------------------------------


def run_operations(ctx: ThreadContext, intset: OrderedSet, trace: TraceWriter) -> None:
    """Run the operation loop of one worker until its budget is spent.

    In alternate mode the worker keeps one pending key: an insert attempt
    sets it and the next mutation is a remove attempt of that same key,
    which clears it.  The pending key is kept even when the insert was a
    duplicate, so the trace strictly alternates insert/remove attempts.
    """
    rng = ctx.rng
    pending: int | None = None
    while ctx.ops > 0:
        ctx.ops -= 1
        op = rng.rand_range(100)
        if op < ctx.update:
            if ctx.alternate:
                if pending is None:
                    val = rng.rand_range(ctx.range) + 1
                    if intset.add(val):
                        ctx.diff += 1
                    ctx.nb_add += 1
                    pending = val
                    trace.record(OpKind.INSERT, val)
                else:
                    val, pending = pending, None
                    if intset.remove(val):
                        ctx.diff -= 1
                    ctx.nb_remove += 1
                    trace.record(OpKind.REMOVE, val)
            else:
                val = rng.rand_range(ctx.range) + 1
                if op & 0x01 == 0:
                    if intset.add(val):
                        ctx.diff += 1
                    ctx.nb_add += 1
                    trace.record(OpKind.INSERT, val)
                else:
                    if intset.remove(val):
                        ctx.diff -= 1
                    ctx.nb_remove += 1
                    trace.record(OpKind.REMOVE, val)
        else:
            val = rng.rand_range(ctx.range) + 1
            if intset.contains(val):
                ctx.nb_found += 1
            ctx.nb_contains += 1
            trace.record(OpKind.CONTAINS, val)


def _worker(ctx: ThreadContext, intset: OrderedSet, barrier: Barrier, trace: TraceWriter) -> None:
    """Thread entry point: wait for the cohort, then run the operation loop.

    Exceptions are parked on the context for the controller to re-raise
    after join.
    """
    try:
        barrier.cross()
    except BarrierAbortedError:
        logger.debug("worker %d released by aborted barrier", ctx.index)
        return
    try:
        run_operations(ctx, intset, trace)
    except Exception as e:
        ctx.error = e


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------


def make_contexts(config: Config, seeds: SeedSource) -> list[ThreadContext]:
    """Build one context per worker, each with its own stream."""
    return [
        ThreadContext(
            index=i,
            ops=config.operations,
            rng=seeds.stream(),
            range=config.range,
            update=config.update,
            alternate=config.alternate,
        )
        for i in range(config.num_threads)
    ]


def _start_workers(
    contexts: list[ThreadContext], intset: OrderedSet, barrier: Barrier, trace: TraceWriter
) -> list[threading.Thread]:
    threads: list[threading.Thread] = []
    for ctx in contexts:
        t = threading.Thread(
            target=_worker,
            args=(ctx, intset, barrier, trace),
            name=f"tracegen-{ctx.index}",
            daemon=True,
        )
        try:
            t.start()
        except RuntimeError as e:
            # Release whoever is already parked at the barrier before bailing out
            barrier.abort(e)
            for started in threads:
                started.join()
            raise WorkerError(f"error creating thread {ctx.index}: {e}") from e
        threads.append(t)
    logger.debug("started %d worker threads", len(threads))
    return threads


def run(
    config: Config,
    trace_stream: TextIO,
    *,
    seeds: SeedSource | None = None,
    on_populated: Callable[[int], None] | None = None,
) -> RunResult:
    """Execute one full stress run and return its counters.

    Args:
        config: Run configuration; validated before anything is created.
        trace_stream: Text stream receiving the trace.
        seeds: Seed source to draw the per-context streams from.  Defaults
            to one built from ``config.seed``.
        on_populated: Called with the set size once population is done and
            the initial contents are traced, before any worker is started.

    Returns:
        A :class:`RunResult`.  ``result.consistent`` is False when the final
        set size does not match the expected size; that is reported, not
        raised.

    Raises:
        ConfigurationError: if *config* is invalid.
        WorkerError: if a worker thread could not be started or crashed.
    """
    config.validate()
    if not config.alternate and config.range != config.initial * 2:
        logger.warning("range is not twice the initial set size")

    if seeds is None:
        seeds = SeedSource(config.seed)
    main_rng = seeds.stream()
    trace = TraceWriter(trace_stream)
    intset = OrderedSet()
    result = RunResult(config=config)

    try:
        populate(intset, main_rng, config.initial, config.range)
        result.initial_size = intset.size()
        trace.write_initial(intset)
        if on_populated is not None:
            on_populated(result.initial_size)

        result.contexts = make_contexts(config, seeds)
        barrier = Barrier(config.num_threads + 1)
        threads = _start_workers(result.contexts, intset, barrier, trace)

        barrier.cross()
        start = time.monotonic()
        for t in threads:
            t.join()
        result.duration = time.monotonic() - start
        trace.flush()

        for ctx in result.contexts:
            if ctx.error is not None:
                raise WorkerError(f"worker {ctx.index} failed: {ctx.error!r}") from ctx.error

        result.expected_size = result.initial_size + sum(ctx.diff for ctx in result.contexts)
        result.actual_size = intset.size()
        if not result.consistent:
            logger.error(
                "set size mismatch: %d (expected: %d)",
                result.actual_size,
                result.expected_size,
            )
    finally:
        intset.clear()
    return result
