"""An in-memory cache that holds its values only weakly."""

from __future__ import annotations

import threading
import weakref
from typing import Generic, Optional, TypeVar

__all__ = ["Cache"]

T = TypeVar("T")


class Cache(Generic[T]):
    """Maps string keys to weakly referenced values.

    An entry disappears once nothing else holds its value; a lookup of
    such an entry removes it and reports a miss.
    """

    def __init__(self) -> None:
        self._store: dict[str, weakref.ref] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[T]:
        """Return the live value for ``key``, or None when absent or collected."""
        with self._lock:
            ref = self._store.get(key)
            if ref is None:
                return None
            value = ref()
            if value is None:
                del self._store[key]
            return value

    def set(self, key: str, value: T) -> None:
        """Store a weak reference to ``value``; it must support weak references."""
        ref = weakref.ref(value)
        with self._lock:
            self._store[key] = ref

    def delete(self, key: str) -> None:
        """Remove ``key`` if present."""
        with self._lock:
            self._store.pop(key, None)

    def count(self) -> int:
        """Number of stored entries, including any not yet found to be dead."""
        with self._lock:
            return len(self._store)

    def __len__(self) -> int:
        return self.count()