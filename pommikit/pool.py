"""A simple thread-safe object pool."""

from __future__ import annotations

import io
import threading
from typing import Callable, Generic, TypeVar

__all__ = ["Pool"]

T = TypeVar("T")


def _reset(item: object) -> None:
    if isinstance(item, bytearray):
        del item[:]
    elif isinstance(item, (io.BytesIO, io.StringIO)):
        item.seek(0)
        item.truncate(0)


class Pool(Generic[T]):
    """Keeps spare objects for reuse; makes new ones with ``factory`` when empty."""

    def __init__(self, factory: Callable[[], T]) -> None:
        self._factory = factory
        self._items: list[T] = []
        self._lock = threading.Lock()

    def get(self) -> T:
        """Take an object from the pool, creating one if the pool is empty."""
        with self._lock:
            if self._items:
                return self._items.pop()
        return self._factory()

    def put(self, item: T) -> None:
        """Return an object to the pool as it is."""
        with self._lock:
            self._items.append(item)

    def put_and_reset(self, item: T) -> None:
        """Empty a byte or text buffer, then return it to the pool.

        Objects that are not buffers are returned unchanged.
        """
        _reset(item)
        self.put(item)