import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

K = TypeVar("K")
V = TypeVar("V")


@dataclass
class _Entry(Generic[V]):
    value: V
    fetched_at: float


class ExpiringCache(Generic[K, V]):
    """Key/value cache whose entries expire ttl_seconds after they were stored.

    The clock is injectable so expiry can be driven explicitly in tests.
    A ttl of zero disables caching.
    """

    def __init__(
        self,
        ttl_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds < 0:
            raise ValueError("ttl_seconds must not be negative")
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[K, _Entry[V]] = {}

    def get(self, key: K) -> V | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.fetched_at >= self._ttl:
            del self._entries[key]
            return None
        return entry.value

    def put(self, key: K, value: V) -> None:
        if self._ttl == 0:
            return
        self._entries[key] = _Entry(value=value, fetched_at=self._clock())

    def get_or_load(self, key: K, loader: Callable[[], V]) -> V:
        """Return the cached value, calling loader and storing on a miss."""
        cached = self.get(key)
        if cached is not None:
            return cached
        value = loader()
        self.put(key, value)
        return value

    def invalidate(self, key: K | None = None) -> None:
        """Drop one key, or every entry when key is None."""
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)
