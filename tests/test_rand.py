"""Tests for the per-thread random streams."""

from __future__ import annotations

import pytest

from tracegen.rand import SEED_BITS, RandomStream, SeedSource


class TestRandomStream:
    @pytest.mark.parametrize("n", [1, 2, 10, 100, 512, 2**31 - 1])
    def test_rand_range_bounds(self, n: int) -> None:
        rng = RandomStream(0xDEADBEEF)
        for _ in range(100000):
            v = rng.rand_range(n)
            assert 0 <= v < n

    def test_rand_range_one_is_always_zero(self) -> None:
        rng = RandomStream(1)
        assert {rng.rand_range(1) for _ in range(100)} == {0}

    def test_rand_range_covers_small_domain(self) -> None:
        rng = RandomStream(99)
        assert {rng.rand_range(10) for _ in range(2000)} == set(range(10))

    @pytest.mark.parametrize("n", [0, -1])
    def test_rand_range_rejects_empty_domain(self, n: int) -> None:
        with pytest.raises(ValueError, match="positive"):
            RandomStream(1).rand_range(n)

    def test_same_seed_same_sequence(self) -> None:
        a = RandomStream(42)
        b = RandomStream(42)
        assert [a.rand_range(1000) for _ in range(50)] == [b.rand_range(1000) for _ in range(50)]

    def test_seed_truncated_to_48_bits(self) -> None:
        rng = RandomStream(1 << SEED_BITS | 5)
        assert rng.seed == 5
        assert repr(rng) == "RandomStream(seed=0x000000000005)"


class TestSeedSource:
    def test_streams_are_independent(self) -> None:
        source = SeedSource(7)
        a = source.stream()
        b = source.stream()
        assert a.seed != b.seed

    def test_fixed_seed_is_reproducible(self) -> None:
        first = [SeedSource(7).next_seed() for _ in range(3)]
        assert first == [SeedSource(7).next_seed() for _ in range(3)]

    def test_seeds_fit_in_48_bits(self) -> None:
        source = SeedSource(3)
        for _ in range(100):
            assert 0 <= source.next_seed() < 1 << SEED_BITS

    def test_zero_seed_is_time_based(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("tracegen.rand.time.time", lambda: 1700000000.5)
        source = SeedSource(0)
        assert source.seed == 1700000000
        assert source.next_seed() == SeedSource(1700000000).next_seed()
