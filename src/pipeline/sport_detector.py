"""
Scorecard — Sport Detector

Resolves the sport for a card, cheapest source first:

1. Keyword table (players, league terms, unambiguous team names) over the title
2. ESPN player search on the extracted player name

ESPN results are cached by lowercased player name for SPORT_CACHE_TTL_SECONDS,
explicit "not found" results included. A failed lookup (network error, bad
response) is NOT cached, so the next run retries it.

The detector always answers with a sport string; "Unknown" is the sentinel
for "no source could classify this", never None.
"""

from __future__ import annotations

import asyncio

import structlog

from src.config import Sport, settings
from src.engine.sport_keywords import detect_sport_from_keywords
from src.pipeline.espn import ESPNClient
from src.utils.ttl_cache import CacheStats, TTLCache

logger = structlog.get_logger(__name__)


def needs_detection(sport: str | None) -> bool:
    """Null, blank and "Unknown" are all equivalent: never classified."""
    return not sport or not sport.strip() or sport.strip().lower() == Sport.UNKNOWN.value.lower()


class SportDetector:
    """
    Usage:
        async with ESPNClient() as client:
            detector = SportDetector(client)
            sport = await detector.detect_sport(title, player_name)
    """

    def __init__(
        self,
        client: ESPNClient | None = None,
        cache: TTLCache[str, str] | None = None,
    ):
        self._client = client
        self._cache: TTLCache[str, str] = (
            cache if cache is not None else TTLCache(settings.SPORT_CACHE_TTL_SECONDS)
        )
        self._locks: dict[str, asyncio.Lock] = {}

    async def detect_sport(self, title: str | None, player_name: str | None = None) -> str:
        """
        Classify one card.

        Args:
            title: Raw listing title.
            player_name: Extracted player name, used for the ESPN fallback.

        Returns:
            A Sport value string ("Unknown" when every source misses).
        """
        sport = detect_sport_from_keywords(title)
        if sport is not None:
            return sport.value
        if player_name and player_name.strip():
            return await self.lookup_player_sport(player_name)
        return Sport.UNKNOWN.value

    async def lookup_player_sport(self, player_name: str) -> str:
        """ESPN lookup with the per-name cache in front of it."""
        key = " ".join(player_name.lower().split())
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug("sport_cache_hit", player_name=key, sport=cached)
            return cached

        lock = self._locks.setdefault(key, asyncio.Lock())
        try:
            async with lock:
                return await self._lookup_locked(key, player_name)
        finally:
            # Tasks already waiting keep their reference; later callers hit the cache
            if self._locks.get(key) is lock:
                del self._locks[key]

    async def _lookup_locked(self, key: str, player_name: str) -> str:
        # Another task may have filled it while we waited
        if key in self._cache:
            cached = self._cache.get(key)
            if cached is not None:
                return cached

        logger.debug("sport_cache_miss", player_name=key)
        if self._client is None:
            return Sport.UNKNOWN.value

        sport = await self._client.lookup_sport(player_name)
        if sport is None:
            logger.warning("sport_lookup_failed_not_cached", player_name=key)
            return Sport.UNKNOWN.value

        self._cache.set(key, sport.value)
        return sport.value

    def clear_cache(self) -> None:
        self._cache.clear()
        self._locks.clear()

    def cache_stats(self) -> CacheStats:
        return self._cache.stats()
