"""
In-memory cache module for Obsidian GitHub MCP Server.

Contains the ContentCache class for caching note bodies fetched from GitHub.
"""

import time
from collections import OrderedDict
from collections.abc import Callable
from typing import NamedTuple

import structlog

logger = structlog.get_logger(__name__)


class CacheKey(NamedTuple):
    """Fully-qualified location of a cached file."""

    owner: str
    repo: str
    path: str


class CacheEntry(NamedTuple):
    content: str
    fetched_at: float


class ContentCache:
    """In-memory cache for note bodies. Avoids repeated GitHub fetches.

    Entries are valid while ``now - fetched_at < ttl``; stale entries behave as
    absent and are dropped when read. Without ``max_entries`` the cache grows
    for the whole process lifetime. With it, the least recently used entries
    are evicted once the capacity is exceeded.
    """

    def __init__(
        self,
        ttl: float = 300,
        max_entries: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        if max_entries is not None and max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self.ttl = ttl
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[CacheKey, CacheEntry] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: CacheKey) -> bool:
        return self.get(key) is not None

    def get(self, key: CacheKey) -> str | None:
        """Return cached content for key, or None when absent or stale."""
        entry = self._entries.get(key)
        if entry is None:
            return None

        if self._clock() - entry.fetched_at >= self.ttl:
            del self._entries[key]
            logger.debug("cache_expired", path=key.path)
            return None

        self._entries.move_to_end(key)
        return entry.content

    def put(self, key: CacheKey, content: str) -> None:
        """Store content for key, overwriting any previous entry."""
        self._entries[key] = CacheEntry(content=content, fetched_at=self._clock())
        self._entries.move_to_end(key)

        if self.max_entries is not None:
            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("cache_evicted", path=evicted.path)

    def invalidate(self, key: CacheKey) -> bool:
        """Drop a single entry. Returns True if it was present."""
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        """Drop every entry."""
        count = len(self._entries)
        self._entries.clear()
        logger.info("cache_cleared", entries=count)
