"""
Tests for the content cache.
"""

import pytest

from obsidian_github_mcp.cache import CacheKey, ContentCache


KEY = CacheKey("octocat", "notes", "Welcome.md")


# ============== Tests for ContentCache ==============

class TestContentCache:
    """Tests for the ContentCache class."""

    def test_cache_initialization(self, clock):
        """Test ContentCache starts empty with the given TTL."""
        cache = ContentCache(ttl=30, clock=clock)

        assert cache.ttl == 30
        assert cache.max_entries is None
        assert len(cache) == 0

    def test_rejects_non_positive_ttl(self):
        """Test a zero TTL is refused."""
        with pytest.raises(ValueError):
            ContentCache(ttl=0)

    def test_get_missing_key(self, clock):
        """Test get returns None for unknown keys."""
        cache = ContentCache(ttl=60, clock=clock)

        assert cache.get(KEY) is None

    def test_put_then_get(self, clock):
        """Test content is returned within the TTL window."""
        cache = ContentCache(ttl=60, clock=clock)
        cache.put(KEY, "# Welcome")

        clock.advance(59.9)

        assert cache.get(KEY) == "# Welcome"
        assert KEY in cache

    def test_entry_expires_at_ttl(self, clock):
        """Test an entry is treated as absent once now - fetched_at reaches the TTL."""
        cache = ContentCache(ttl=60, clock=clock)
        cache.put(KEY, "# Welcome")

        clock.advance(60)

        assert cache.get(KEY) is None
        assert len(cache) == 0

    def test_put_overwrites_and_refreshes(self, clock):
        """Test re-putting a key replaces content and restarts its TTL."""
        cache = ContentCache(ttl=60, clock=clock)
        cache.put(KEY, "old")
        clock.advance(50)
        cache.put(KEY, "new")
        clock.advance(50)

        assert cache.get(KEY) == "new"

    def test_keys_are_repository_scoped(self, clock):
        """Test the same path in another repository is a different entry."""
        cache = ContentCache(ttl=60, clock=clock)
        cache.put(KEY, "mine")

        assert cache.get(CacheKey("someone", "notes", "Welcome.md")) is None

    def test_invalidate(self, clock):
        """Test invalidate drops one entry."""
        cache = ContentCache(ttl=60, clock=clock)
        cache.put(KEY, "content")

        assert cache.invalidate(KEY) is True
        assert cache.invalidate(KEY) is False
        assert cache.get(KEY) is None

    def test_clear(self, clock):
        """Test clear drops every entry."""
        cache = ContentCache(ttl=60, clock=clock)
        cache.put(KEY, "a")
        cache.put(CacheKey("octocat", "notes", "b.md"), "b")

        cache.clear()

        assert len(cache) == 0

    def test_unbounded_by_default(self, clock):
        """Test the cache keeps every entry without a capacity."""
        cache = ContentCache(ttl=60, clock=clock)
        for i in range(500):
            cache.put(CacheKey("octocat", "notes", f"{i}.md"), str(i))

        assert len(cache) == 500

    def test_lru_eviction(self, clock):
        """Test the least recently used entry is evicted past capacity."""
        cache = ContentCache(ttl=60, max_entries=2, clock=clock)
        a = CacheKey("octocat", "notes", "a.md")
        b = CacheKey("octocat", "notes", "b.md")
        c = CacheKey("octocat", "notes", "c.md")

        cache.put(a, "a")
        cache.put(b, "b")
        assert cache.get(a) == "a"  # a becomes most recently used
        cache.put(c, "c")

        assert len(cache) == 2
        assert cache.get(b) is None
        assert cache.get(a) == "a"
        assert cache.get(c) == "c"
