"""Capacity-limited, insertion-ordered event buffer.

Every recorder keeps its events in a BoundedEventBuffer. Appending past
capacity evicts from the head (strict FIFO) and hands the evicted items
back to the caller so it can maintain side indexes.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterator
from typing import Generic, TypeVar

T = TypeVar("T")


class BoundedEventBuffer(Generic[T]):
    """Ordered container that evicts its oldest entries on overflow.

    Args:
        capacity: Maximum number of items retained. Must be >= 1.
    """

    def __init__(self, capacity: int) -> None:
        _check_capacity(capacity)
        self._capacity = capacity
        self._items: deque[T] = deque()

    @property
    def capacity(self) -> int:
        return self._capacity

    def resize(self, capacity: int) -> list[T]:
        """Change capacity, evicting oldest items if the buffer shrinks.

        Returns:
            The evicted items, oldest first.
        """
        _check_capacity(capacity)
        self._capacity = capacity
        return self._trim()

    def append(self, item: T) -> list[T]:
        """Insert at the tail and evict from the head down to capacity.

        Returns:
            The evicted items, oldest first (usually empty or one item).
        """
        self._items.append(item)
        return self._trim()

    def snapshot_newest_first(self) -> tuple[T, ...]:
        """Immutable reverse-chronological view of the contents."""
        return tuple(reversed(self._items))

    def snapshot(self) -> tuple[T, ...]:
        """Immutable insertion-ordered (oldest first) view of the contents."""
        return tuple(self._items)

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def _trim(self) -> list[T]:
        evicted: list[T] = []
        while len(self._items) > self._capacity:
            evicted.append(self._items.popleft())
        return evicted


def _check_capacity(capacity: int) -> None:
    if capacity < 1:
        raise ValueError(f"Buffer capacity must be >= 1, got {capacity}")
