"""Rendezvous barrier used to release every worker at the same instant."""

from __future__ import annotations

import threading

from tracegen.common import BarrierAbortedError


class Barrier:
    """Block *count* participants until all of them have called :meth:`cross`.

    The barrier resets itself once a cohort has crossed, so it can be reused.
    There is no timeout: a participant that never shows up blocks the others
    forever, unless the owner calls :meth:`abort`.
    """

    def __init__(self, count: int) -> None:
        if count <= 0:
            raise ValueError(f"barrier needs at least one participant, got {count}")
        self.count = count
        self.crossing = 0
        self.generation = 0
        self.error: BaseException | None = None
        self.condition = threading.Condition(threading.Lock())

    def cross(self) -> None:
        """Arrive at the barrier and wait for the rest of the cohort.

        Raises:
            BarrierAbortedError: if :meth:`abort` was called before or while
                this participant was waiting.
        """
        with self.condition:
            if self.error is not None:
                raise BarrierAbortedError("barrier was aborted") from self.error
            self.crossing += 1
            if self.crossing < self.count:
                generation = self.generation
                while generation == self.generation and self.error is None:
                    self.condition.wait()
                if generation == self.generation:
                    raise BarrierAbortedError("barrier was aborted") from self.error
            else:
                # Last one in releases everybody and resets for the next cohort
                self.crossing = 0
                self.generation += 1
                self.condition.notify_all()

    def abort(self, error: BaseException | None = None) -> None:
        """Wake every waiter with :class:`BarrierAbortedError`."""
        with self.condition:
            self.error = error if error is not None else BarrierAbortedError("barrier was aborted")
            self.crossing = 0
            self.condition.notify_all()

    @property
    def waiting(self) -> int:
        """Number of participants currently blocked in :meth:`cross`."""
        with self.condition:
            return self.crossing
