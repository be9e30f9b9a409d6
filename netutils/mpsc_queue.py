"""A FIFO queue for many producer threads and one consumer thread."""

from __future__ import annotations

from collections import deque
from typing import Generic, TypeVar

T = TypeVar("T")


class MpscQueue(Generic[T]):
    """Multiple-producer, single-consumer FIFO queue.

    ``enqueue`` may be called from any thread; ``dequeue`` from one thread.
    """

    def __init__(self) -> None:
        self._items: deque[T] = deque()

    def enqueue(self, item: T) -> None:
        """Put an item at the back of the queue."""
        self._items.append(item)

    def dequeue(self) -> T:
        """Remove and return the front item; raise IndexError if empty."""
        try:
            return self._items.popleft()
        except IndexError:
            raise IndexError("dequeue from an empty queue") from None

    def empty(self) -> bool:
        """True if the queue holds no items."""
        return not self._items

    def __len__(self) -> int:
        return len(self._items)