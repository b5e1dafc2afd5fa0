"""
Output Caching Utilities
========================
In-memory store for rendered GET responses, grouped by tags so that writes
can evict every response they might have changed.

Features:
- TTL (Time To Live) per entry
- LRU (Least Recently Used) eviction
- Tag-based invalidation

Usage:
    from app.utils.cache import output_cache, MOVIES_TAG

    key = output_cache.make_key(request.url.path, str(request.query_params))
    cached = output_cache.get(key)
    ...
    version = output_cache.tag_version(MOVIES_TAG)
    body = ...  # read from the database
    output_cache.set(key, body, ttl=60, tags=[MOVIES_TAG], versions={MOVIES_TAG: version})

    # After a write
    output_cache.evict_by_tag(MOVIES_TAG)
"""
from typing import Any, Dict, Iterable, Optional
from collections import OrderedDict
from datetime import datetime, timedelta
import hashlib
import json
import logging
import os

logger = logging.getLogger(__name__)

MOVIES_TAG = "movies"
OUTPUT_CACHE_TTL = int(os.getenv("OUTPUT_CACHE_TTL", "60"))


class CacheStore:
    """
    Simple in-memory cache with TTL, LRU eviction and tags.
    Per-process: every worker keeps its own copy.
    """

    def __init__(self, max_size: int = 1000):
        """
        Initialize cache store.

        Args:
            max_size: Maximum number of items in cache (LRU eviction)
        """
        self._cache: OrderedDict = OrderedDict()
        self._tag_versions: Dict[str, int] = {}
        self._max_size = max_size
        self._hits = 0
        self._misses = 0

    @staticmethod
    def make_key(*parts: Any) -> str:
        """Create a stable cache key from request parts"""
        key_str = json.dumps(parts, sort_keys=True, default=str)
        return hashlib.md5(key_str.encode()).hexdigest()

    def get(self, key: str) -> Optional[Any]:
        """
        Get value from cache if exists and not expired.

        Returns:
            Cached value or None if not found/expired
        """
        if key not in self._cache:
            self._misses += 1
            return None

        value, expiry, _ = self._cache[key]

        if expiry and datetime.now() > expiry:
            del self._cache[key]
            self._misses += 1
            return None

        # Move to end (LRU)
        self._cache.move_to_end(key)
        self._hits += 1
        return value

    def tag_version(self, tag: str) -> int:
        """Bumped by every evict_by_tag; read it before computing a value to cache"""
        return self._tag_versions.get(tag, 0)

    def set(
        self,
        key: str,
        value: Any,
        ttl: Optional[int] = None,
        tags: Iterable[str] = (),
        versions: Optional[Dict[str, int]] = None,
    ) -> bool:
        """
        Set value in cache with optional TTL and tags.

        Args:
            key: Cache key
            value: Value to cache
            ttl: Time to live in seconds (None = no expiration)
            tags: Labels used by evict_by_tag
            versions: Tag versions seen before the value was computed; if a
                tag was evicted since, the value is stale and is not stored

        Returns:
            Whether the value was stored
        """
        if versions and any(self.tag_version(tag) != seen for tag, seen in versions.items()):
            logger.debug(f"Skipped stale cache write for key: {key}")
            return False

        expiry = datetime.now() + timedelta(seconds=ttl) if ttl else None

        self._cache[key] = (value, expiry, frozenset(tags))
        self._cache.move_to_end(key)

        if len(self._cache) > self._max_size:
            oldest_key = next(iter(self._cache))
            del self._cache[oldest_key]
            logger.debug(f"Evicted cache key: {oldest_key}")

        return True

    def evict_by_tag(self, tag: str) -> int:
        """Drop every entry carrying the tag; returns how many went"""
        self._tag_versions[tag] = self.tag_version(tag) + 1
        stale = [key for key, (_, _, tags) in self._cache.items() if tag in tags]
        for key in stale:
            del self._cache[key]
        logger.debug(f"Evicted {len(stale)} cache entries tagged '{tag}'")
        return len(stale)

    def clear(self) -> None:
        self._cache.clear()
        self._hits = 0
        self._misses = 0
        logger.info("Cache cleared")

    def get_stats(self) -> dict:
        total_requests = self._hits + self._misses
        hit_rate = (self._hits / total_requests * 100) if total_requests > 0 else 0

        return {
            'size': len(self._cache),
            'max_size': self._max_size,
            'hits': self._hits,
            'misses': self._misses,
            'hit_rate': f"{hit_rate:.2f}%"
        }


# Global cache instance
output_cache = CacheStore(max_size=1000)


def evict_movies() -> None:
    """Invalidation hook the write endpoints call after a successful change"""
    output_cache.evict_by_tag(MOVIES_TAG)
