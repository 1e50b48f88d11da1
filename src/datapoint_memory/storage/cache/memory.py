"""
In-memory TTL cache implementation.

Bounded, time-aware key/value store used for deduplication and rate
limiting. Suitable for a single process; for several replicas sharing one
vector store, use the Redis implementation instead.
"""

import logging
import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Optional, Tuple

logger = logging.getLogger(__name__)


class InMemoryTTLCache:
    """
    In-memory implementation of the TTLCache protocol.

    Entries live in an OrderedDict ordered by last write. Once ``max_entries``
    is reached the oldest entry is evicted; expired entries are dropped when
    read. All operations hold a lock, so the cache can be shared between the
    event loop and worker threads.
    """

    def __init__(
        self,
        max_entries: int = 1000,
        default_ttl: Optional[float] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the cache.

        Args:
            max_entries: Maximum number of keys kept (default: 1000)
            default_ttl: TTL in seconds for set() calls without one (None = no expiry)
            clock: Time source in seconds (injectable for tests)
        """
        self._entries: "OrderedDict[str, Tuple[Any, Optional[float]]]" = OrderedDict()
        self._max_entries = max_entries
        self._default_ttl = default_ttl
        self._clock = clock
        self._lock = threading.Lock()

        logger.info(
            f"InMemoryTTLCache initialized (max_entries={max_entries}, default_ttl={default_ttl})"
        )

    def _live_entry(self, key: str) -> Optional[Tuple[Any, Optional[float]]]:
        entry = self._entries.get(key)
        if entry is None:
            return None

        _, expires_at = entry
        if expires_at is not None and self._clock() >= expires_at:
            del self._entries[key]
            return None

        return entry

    def has(self, key: str) -> bool:
        with self._lock:
            return self._live_entry(key) is not None

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._live_entry(key)
            return entry[0] if entry is not None else None

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        ttl = self._default_ttl if ttl is None else ttl
        expires_at = self._clock() + ttl if ttl is not None else None

        with self._lock:
            if key in self._entries:
                del self._entries[key]
            elif len(self._entries) >= self._max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug(f"Evicted oldest cache entry {evicted}")

            self._entries[key] = (value, expires_at)

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    def purge_expired(self) -> int:
        """Drop all expired entries. Returns the number removed."""
        now = self._clock()
        with self._lock:
            expired = [
                key
                for key, (_, expires_at) in self._entries.items()
                if expires_at is not None and now >= expires_at
            ]
            for key in expired:
                del self._entries[key]

        if expired:
            logger.debug(f"Purged {len(expired)} expired cache entries")
        return len(expired)
