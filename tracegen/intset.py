"""
Sorted singly-linked integer set used as the target of the stress workload.

The list is bounded by two sentinel nodes holding :data:`MIN` and
:data:`MAX`, so every traversal stops at the first node whose key is not
less than the target without checking for the end of the list.

None of the operations take a lock.  Workers call them concurrently on a
shared instance and the resulting races are what the trace is meant to
expose, so do not add synchronization here.

Under CPython the interpreter only switches threads between bytecodes every
few milliseconds, so lost updates are rare in practice; how often a race
shows up is bounded by that switching, not by anything in this module.

Unlinked nodes are never recycled: a removed node keeps its ``next`` link
and lives until the last traversal holding it moves on, after which the
garbage collector reclaims it.  A thread that is standing on a node while
another thread unlinks it therefore keeps walking a stale but well-formed
chain instead of touching freed memory.
"""

from __future__ import annotations

from collections.abc import Iterator

from tracegen.common import SetCorruptedError

MIN = -(2**31)
MAX = 2**31 - 1


class Node:
    __slots__ = ("key", "next")

    def __init__(self, key: int, next: Node | None = None) -> None:  # noqa: A002
        self.key = key
        self.next = next

    def __repr__(self) -> str:
        return f"Node({self.key})"


class OrderedSet:
    """Strictly ascending set of integers strictly between MIN and MAX."""

    def __init__(self) -> None:
        tail = Node(MAX)
        self.head = Node(MIN, tail)

    def _locate(self, key: int) -> tuple[Node, Node]:
        """Return ``(prev, next)`` where ``next`` is the first node with ``next.key >= key``."""
        if not MIN < key < MAX:
            raise ValueError(f"key {key} collides with a sentinel; keys must lie in ({MIN}, {MAX})")
        prev = self.head
        nxt = prev.next
        while nxt.key < key:
            prev = nxt
            nxt = prev.next
        return prev, nxt

    def contains(self, key: int) -> bool:
        _, nxt = self._locate(key)
        return nxt.key == key

    def add(self, key: int) -> bool:
        """Insert *key*; return False if it was already present."""
        prev, nxt = self._locate(key)
        if nxt.key == key:
            return False
        prev.next = Node(key, nxt)
        return True

    def remove(self, key: int) -> bool:
        """Unlink *key*; return False if it was absent."""
        prev, nxt = self._locate(key)
        if nxt.key != key:
            return False
        prev.next = nxt.next
        return True

    def size(self) -> int:
        """Count the nodes strictly between the two sentinels."""
        count = 0
        node = self.head.next
        while node.next is not None:
            count += 1
            node = node.next
        return count

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, int) or not MIN < key < MAX:
            return False
        return self.contains(key)

    def __iter__(self) -> Iterator[int]:
        node = self.head.next
        while node.next is not None:
            yield node.key
            node = node.next

    def __repr__(self) -> str:
        return f"OrderedSet({list(self)!r})"

    def check(self) -> None:
        """Verify the ordering invariant; only meaningful while no operation is in flight.

        Raises:
            SetCorruptedError: if the keys are not strictly ascending or a
                sentinel is missing from either end.
        """
        if self.head.key != MIN:
            raise SetCorruptedError(f"head sentinel holds {self.head.key}, expected {MIN}")
        prev = self.head
        node = prev.next
        while node is not None:
            if node.key <= prev.key:
                raise SetCorruptedError(f"key {node.key} follows {prev.key}")
            prev = node
            node = node.next
        if prev.key != MAX:
            raise SetCorruptedError(f"list ends with {prev.key}, expected tail sentinel {MAX}")

    def clear(self) -> None:
        """Drop every key, leaving only the sentinels."""
        node = self.head.next
        while node.next is not None:
            nxt = node.next
            node.next = None
            node = nxt
        self.head.next = node
