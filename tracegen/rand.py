"""Per-thread pseudo-random streams.

A single :class:`SeedSource` is created per run from the user-supplied seed
(or from the wall clock when that seed is 0).  It hands out one 48-bit seed
per context, and each context owns a private :class:`RandomStream`, so the
workers never contend on a shared generator and a given per-thread seed
always reproduces the same sequence of draws.
"""

from __future__ import annotations

import random
import time

SEED_BITS = 48


class RandomStream:
    """Independent uniform stream seeded with a 48-bit value."""

    __slots__ = ("seed", "_rng")

    def __init__(self, seed: int) -> None:
        self.seed = seed & ((1 << SEED_BITS) - 1)
        self._rng = random.Random(self.seed)

    def rand_range(self, n: int) -> int:
        """Return a value uniformly distributed in ``[0, n)``."""
        if n <= 0:
            raise ValueError(f"rand_range needs a positive bound, got {n}")
        v = int(self._rng.random() * n)
        assert 0 <= v < n, f"rand_range({n}) produced {v}"
        return v

    def __repr__(self) -> str:
        return f"RandomStream(seed=0x{self.seed:012x})"


class SeedSource:
    """Global seed source from which every per-context stream is derived.

    Args:
        seed: Seed of the source; 0 selects a time-based seed, which is then
            available as :attr:`seed` so the run can be reported.
    """

    def __init__(self, seed: int = 0) -> None:
        if seed == 0:
            seed = int(time.time())
        self.seed = seed
        self._rng = random.Random(seed)

    def next_seed(self) -> int:
        return self._rng.getrandbits(SEED_BITS)

    def stream(self) -> RandomStream:
        """Return a fresh stream seeded from the next 48 bits of this source."""
        return RandomStream(self.next_seed())
