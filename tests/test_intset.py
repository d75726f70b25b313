"""Tests for the sorted linked-list integer set."""

from __future__ import annotations

import random

import pytest

from tracegen.common import SetCorruptedError
from tracegen.intset import MAX, MIN, Node, OrderedSet

# ---------------------------------------------------------------------------
# Single operations
# ---------------------------------------------------------------------------


class TestBasicOperations:
    def test_new_set_is_empty(self) -> None:
        s = OrderedSet()
        assert s.size() == 0
        assert list(s) == []
        s.check()

    def test_add_then_contains(self) -> None:
        s = OrderedSet()
        assert s.add(7)
        assert s.contains(7)

    def test_remove_then_contains(self) -> None:
        s = OrderedSet()
        s.add(7)
        assert s.remove(7)
        assert not s.contains(7)

    def test_double_add_grows_by_one(self) -> None:
        s = OrderedSet()
        assert s.add(3) is True
        assert s.add(3) is False
        assert s.size() == 1

    def test_remove_absent_key(self) -> None:
        s = OrderedSet()
        s.add(1)
        s.add(5)
        assert s.remove(3) is False
        assert s.size() == 2

    def test_contains_absent_key(self) -> None:
        s = OrderedSet()
        s.add(2)
        s.add(4)
        assert not s.contains(1)
        assert not s.contains(3)
        assert not s.contains(5)

    def test_iteration_is_ascending(self) -> None:
        s = OrderedSet()
        for key in (9, 1, 5, 3, 7):
            s.add(key)
        assert list(s) == [1, 3, 5, 7, 9]
        assert len(s) == 5

    def test_negative_and_zero_keys(self) -> None:
        s = OrderedSet()
        for key in (0, -4, 4):
            s.add(key)
        assert list(s) == [-4, 0, 4]


# ---------------------------------------------------------------------------
# Sentinels
# ---------------------------------------------------------------------------


class TestSentinels:
    @pytest.mark.parametrize("key", [MIN, MAX, MIN - 1, MAX + 1])
    def test_sentinel_keys_rejected(self, key: int) -> None:
        s = OrderedSet()
        with pytest.raises(ValueError, match="sentinel"):
            s.add(key)
        with pytest.raises(ValueError):
            s.remove(key)
        with pytest.raises(ValueError):
            s.contains(key)

    def test_sentinels_never_reported_as_members(self) -> None:
        s = OrderedSet()
        s.add(1)
        assert MIN not in s
        assert MAX not in s
        assert "1" not in s
        assert 1 in s

    def test_keys_next_to_sentinels(self) -> None:
        s = OrderedSet()
        assert s.add(MIN + 1)
        assert s.add(MAX - 1)
        assert list(s) == [MIN + 1, MAX - 1]
        s.check()


# ---------------------------------------------------------------------------
# Invariant
# ---------------------------------------------------------------------------


class TestInvariant:
    def test_random_sequence_keeps_order(self) -> None:
        """Mirror a long random operation sequence against a builtin set."""
        rng = random.Random(1234)
        s = OrderedSet()
        model: set[int] = set()
        for _ in range(3000):
            key = rng.randint(1, 64)
            op = rng.randrange(3)
            if op == 0:
                assert s.add(key) == (key not in model)
                model.add(key)
            elif op == 1:
                assert s.remove(key) == (key in model)
                model.discard(key)
            else:
                assert s.contains(key) == (key in model)
            s.check()
            assert s.size() == len(model)
        assert list(s) == sorted(model)

    def test_check_detects_out_of_order_keys(self) -> None:
        s = OrderedSet()
        s.add(1)
        s.add(2)
        s.head.next.key = 5
        with pytest.raises(SetCorruptedError, match="follows"):
            s.check()

    def test_check_detects_missing_tail(self) -> None:
        s = OrderedSet()
        s.head.next = Node(3)
        with pytest.raises(SetCorruptedError, match="tail sentinel"):
            s.check()


# ---------------------------------------------------------------------------
# Reclamation
# ---------------------------------------------------------------------------


class TestRemovedNodes:
    def test_removed_node_still_leads_back_into_the_list(self) -> None:
        """A traversal parked on a node that gets unlinked can keep walking."""
        s = OrderedSet()
        for key in (1, 2, 3):
            s.add(key)
        parked = s.head.next.next  # node 2
        s.remove(2)
        assert parked.key == 2
        assert parked.next.key == 3
        assert list(s) == [1, 3]

    def test_clear_leaves_only_sentinels(self) -> None:
        s = OrderedSet()
        for key in range(1, 20):
            s.add(key)
        s.clear()
        assert s.size() == 0
        assert s.head.next.key == MAX
        s.check()
        assert s.add(4)
