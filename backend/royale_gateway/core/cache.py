"""
Expiring in-process key/value store backing the in-memory projection cache.
"""

import threading
import time
from typing import Any, Callable, Dict, NamedTuple, Optional

import structlog

logger = structlog.get_logger(__name__)


class _Entry(NamedTuple):
    value: Any
    expires_at: float


class TTLCache:
    """Thread-safe map whose entries go stale ``ttl`` seconds after being written.

    An entry is fresh while ``clock() < expires_at``. When the map is full the
    oldest write is evicted first.
    """

    def __init__(
        self,
        maxsize: int = 1000,
        ttl: int = 300,
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            maxsize: Maximum number of entries
            ttl: Seconds an entry stays fresh
            clock: Source of the current time in seconds
        """
        self.maxsize = maxsize
        self.ttl = ttl
        self.clock = clock
        self.entries: Dict[str, _Entry] = {}
        self.lock = threading.RLock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def get(self, key: str) -> Optional[Any]:
        """Fresh value for ``key``, or None. Stale entries are dropped on read."""
        with self.lock:
            entry = self.entries.get(key)
            if entry is not None and self.clock() < entry.expires_at:
                self._hits += 1
                return entry.value

            if entry is not None:
                del self.entries[key]
            self._misses += 1
            return None

    def set(self, key: str, value: Any) -> None:
        """Write ``value``, restarting its lifetime."""
        with self.lock:
            # Rewrites move the key to the back of the eviction order
            self.entries.pop(key, None)
            if len(self.entries) >= self.maxsize:
                oldest = next(iter(self.entries))
                del self.entries[oldest]
                self._evictions += 1
                if self._evictions % 1000 == 1:
                    logger.info(
                        "Cache full, evicting oldest entries",
                        maxsize=self.maxsize,
                        evictions=self._evictions,
                    )
            self.entries[key] = _Entry(value, self.clock() + self.ttl)

    def stats(self) -> Dict[str, Any]:
        """Size and hit/miss counters for the health endpoint."""
        with self.lock:
            lookups = self._hits + self._misses
            return {
                "size": len(self.entries),
                "maxsize": self.maxsize,
                "ttl_seconds": self.ttl,
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
                "hit_rate": self._hits / lookups if lookups else 0.0,
            }

    def __len__(self) -> int:
        return len(self.entries)
