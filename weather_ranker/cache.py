import time
from typing import Callable, Dict, Generic, Hashable, Iterator, Optional, Tuple, TypeVar

V = TypeVar("V")


class TTLCache(Generic[V]):
    """Simple TTL-backed key-value cache.

    Parameters
    ----------
    ttl_seconds : float
        Time-to-live in seconds. An entry is fresh while `now - stored_at < ttl`.
    clock : Callable[[], float]
        Returns the current time in seconds. Defaults to `time.time`; tests
        pass a fake clock to cross TTL boundaries deterministically.

    Notes
    -----
    - Operations are O(1) average time.
    - Expired entries are kept until overwritten, so diagnostics can still
      report them (with zero remaining TTL). `get` simply ignores them.
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.time):
        self.ttl = ttl_seconds
        self.clock = clock
        self._store: Dict[Hashable, Tuple[float, V]] = {}

    def get(self, key: Hashable) -> Optional[V]:
        """Return the cached value for `key` if present and not expired.

        Returns
        -------
        Optional[V]
            The stored value, or `None` if the key is missing or the entry expired.
        """

        item = self._store.get(key)
        if item is None:
            return None
        ts, value = item
        if self.clock() - ts >= self.ttl:
            return None
        return value

    def set(self, key: Hashable, value: V) -> float:
        """Insert or replace a value for `key`, timestamped for TTL accounting.

        Returns
        -------
        float
            The timestamp recorded for the entry.
        """

        ts = self.clock()
        self._store[key] = (ts, value)
        return ts

    def stored_at(self, key: Hashable) -> Optional[float]:
        item = self._store.get(key)
        return item[0] if item else None

    def items(self) -> Iterator[Tuple[Hashable, float]]:
        """Yield `(key, stored_at)` pairs in insertion order, expired ones included."""

        for key, (ts, _) in list(self._store.items()):
            yield key, ts

    def __len__(self) -> int:
        return len(self._store)
