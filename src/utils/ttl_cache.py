"""
Scorecard — In-Memory TTL Cache

Process-local key -> value cache with a fixed time-to-live. The clock is
injectable so tests can advance time without sleeping.

Not persisted across restarts.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Generic, Hashable, NamedTuple, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CacheStats(NamedTuple):
    entries: int
    hits: int
    misses: int
    expired: int


class TTLCache(Generic[K, V]):
    """
    Usage:
        cache: TTLCache[str, str] = TTLCache(ttl_seconds=86400)
        cache.set("paul skenes", "Baseball")
        cache.get("paul skenes")  # "Baseball" until the entry is a day old
    """

    def __init__(self, ttl_seconds: float, clock: Clock = utc_now):
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[K, tuple[V, datetime]] = {}
        self._hits = 0
        self._misses = 0
        self._expired = 0

    def _is_fresh(self, stored_at: datetime) -> bool:
        return (self._clock() - stored_at).total_seconds() < self._ttl_seconds

    def get(self, key: K) -> V | None:
        """Return the cached value, or None if absent or stale (stale entries are dropped)."""
        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return None
        value, stored_at = entry
        if not self._is_fresh(stored_at):
            del self._entries[key]
            self._expired += 1
            self._misses += 1
            return None
        self._hits += 1
        return value

    def set(self, key: K, value: V) -> None:
        self._entries[key] = (value, self._clock())

    def expire(self, key: K) -> bool:
        """Drop one entry. Returns whether it was present."""
        return self._entries.pop(key, None) is not None

    def purge_expired(self) -> int:
        stale = [key for key, (_, stored_at) in self._entries.items() if not self._is_fresh(stored_at)]
        for key in stale:
            del self._entries[key]
        self._expired += len(stale)
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()
        self._hits = 0
        self._misses = 0
        self._expired = 0

    def stats(self) -> CacheStats:
        return CacheStats(
            entries=len(self._entries),
            hits=self._hits,
            misses=self._misses,
            expired=self._expired,
        )

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        entry = self._entries.get(key)  # type: ignore[arg-type]
        return entry is not None and self._is_fresh(entry[1])
