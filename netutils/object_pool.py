"""A thread-safe pool of reusable objects."""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Generic, TypeVar

T = TypeVar("T")


class ObjectPool(Generic[T]):
    """Hands out idle objects, creating new ones with ``factory`` when none are left."""

    def __init__(self, factory: Callable[[], T]) -> None:
        self._factory = factory
        self._objects: list[T] = []
        self._lock = threading.Lock()

    def __copy__(self):
        raise TypeError(f"{type(self).__name__} cannot be copied")

    def __deepcopy__(self, memo):
        raise TypeError(f"{type(self).__name__} cannot be copied")

    def get_object(self) -> T:
        """Take an idle object from the pool, or make a new one."""
        with self._lock:
            if self._objects:
                return self._objects.pop()
        return self._factory()

    def release(self, obj: T) -> None:
        """Return an object to the pool for reuse."""
        with self._lock:
            self._objects.append(obj)

    @contextmanager
    def borrow(self) -> Iterator[T]:
        """Lend an object for the duration of a ``with`` block."""
        obj = self.get_object()
        try:
            yield obj
        finally:
            self.release(obj)

    def __len__(self) -> int:
        with self._lock:
            return len(self._objects)