# produce_tracker/storage/ttl_cache.py

"""In-memory TTL cache with an injectable clock."""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from produce_tracker.config.settings import Settings

logger = logging.getLogger("produce_tracker.cache")

T = TypeVar("T")


@dataclass
class CacheEntry:
    """A cached value and the clock reading when it was stored."""

    value: Any
    timestamp: float


class TTLCache:
    """Key/value cache whose entries expire after ``ttl`` seconds.

    The clock is injectable so tests control expiry without sleeping.
    Each service owns its own instance; nothing is module-global.
    """

    def __init__(
        self,
        ttl: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl: float = (
            Settings.ANALYTICS_CACHE_TTL if ttl is None else ttl
        )
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def __len__(self) -> int:
        self._evict_expired(self._clock())
        return len(self._entries)

    def get(self, key: str) -> Any | None:
        """Return the live value for *key*, or ``None`` on miss."""
        now = self._clock()
        self._evict_expired(now)
        entry = self._entries.get(key)
        if entry is None:
            return None
        logger.debug("Cache hit for '%s'", key)
        return entry.value

    def set(self, key: str, value: Any) -> None:
        """Store *value* under *key*, resetting its age."""
        self._entries[key] = CacheEntry(
            value=value, timestamp=self._clock(),
        )
        logger.debug("Cached '%s'", key)

    def get_or_compute(self, key: str, compute: Callable[[], T]) -> T:
        """Return the cached value, computing and storing it on miss.

        Exceptions from *compute* propagate and nothing is cached.
        """
        cached = self.get(key)
        if cached is not None:
            return cached  # type: ignore[no-any-return]
        value = compute()
        self.set(key, value)
        return value

    def invalidate(self, key: str | None = None) -> int:
        """Drop one key, or every entry when *key* is ``None``.

        Returns the number of entries removed.
        """
        if key is None:
            count = len(self._entries)
            self._entries.clear()
        else:
            count = 1 if self._entries.pop(key, None) is not None else 0
        if count:
            logger.info("Cache invalidated (%d entries removed)", count)
        return count

    def _evict_expired(self, now: float) -> None:
        """Remove entries older than the TTL threshold."""
        before = len(self._entries)
        self._entries = {
            k: e
            for k, e in self._entries.items()
            if now - e.timestamp < self._ttl
        }
        evicted = before - len(self._entries)
        if evicted:
            logger.debug("Evicted %d expired cache entries", evicted)
