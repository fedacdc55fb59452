"""Key-value store with TTL semantics, shared by sessions and rate limiting.

``KeyValueStore`` is the seam a shared backend (Redis, memcached) plugs into;
``MemoryStore`` is the single-process implementation used by default. It keeps
everything in a dict, so it does not work across multiple app instances.
"""
import logging
import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class KeyValueStore:
    """Interface for a TTL key-value store."""

    def get(self, key: str) -> Optional[Any]:
        raise NotImplementedError

    def set(self, key: str, value: Any, ttl: float) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError

    def incr(self, key: str, ttl: float) -> int:
        """Increment a counter; the TTL is set only when the key is created."""
        raise NotImplementedError

    def ttl(self, key: str) -> Optional[float]:
        """Seconds until ``key`` expires, or None if absent."""
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError


class MemoryStore(KeyValueStore):
    """In-process store with lazy pruning and a capacity cap.

    Expired entries are dropped on read and, at most once per ``prune_interval``,
    in a full sweep. When ``max_entries`` is exceeded the oldest entries are
    evicted first.
    """

    def __init__(
        self,
        prune_interval: float = 86400,
        max_entries: int = 10_000,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.prune_interval = prune_interval
        self.max_entries = max_entries
        self._clock = clock
        self._data: "OrderedDict[str, tuple[Any, float]]" = OrderedDict()
        self._lock = threading.Lock()
        self._last_prune = clock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            self._maybe_prune()
            entry = self._live_entry(key)
            return entry[0] if entry else None

    def set(self, key: str, value: Any, ttl: float) -> None:
        with self._lock:
            self._maybe_prune()
            self._data.pop(key, None)
            self._data[key] = (value, self._clock() + ttl)
            self._enforce_capacity()

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def incr(self, key: str, ttl: float) -> int:
        with self._lock:
            self._maybe_prune()
            entry = self._live_entry(key)
            if entry is None:
                self._data[key] = (1, self._clock() + ttl)
                self._enforce_capacity()
                return 1
            count, expires_at = entry
            self._data[key] = (count + 1, expires_at)
            return count + 1

    def ttl(self, key: str) -> Optional[float]:
        with self._lock:
            entry = self._live_entry(key)
            if entry is None:
                return None
            return max(entry[1] - self._clock(), 0.0)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()
            self._last_prune = self._clock()

    def prune(self) -> int:
        """Drop every expired entry; returns how many were removed."""
        with self._lock:
            return self._prune()

    # Callers must hold self._lock for everything below.

    def _live_entry(self, key: str) -> Optional[tuple[Any, float]]:
        entry = self._data.get(key)
        if entry is None:
            return None
        if entry[1] <= self._clock():
            del self._data[key]
            return None
        return entry

    def _maybe_prune(self) -> None:
        if self._clock() - self._last_prune >= self.prune_interval:
            self._prune()

    def _prune(self) -> int:
        now = self._clock()
        expired = [k for k, (_, expires_at) in self._data.items() if expires_at <= now]
        for k in expired:
            del self._data[k]
        self._last_prune = now
        if expired:
            logger.debug("Pruned %d expired entries", len(expired))
        return len(expired)

    def _enforce_capacity(self) -> None:
        if len(self._data) <= self.max_entries:
            return
        self._prune()
        while len(self._data) > self.max_entries:
            evicted, _ = self._data.popitem(last=False)
            logger.warning("Store at capacity (%d); evicted %s", self.max_entries, evicted.split(":", 1)[0])
