"""
Tests for the response cache.

Tests cover:
- get/set with TTL expiry against an injected clock
- invalidate() and invalidate_prefix()
- Disabled caching (ttl <= 0)
- Concurrent access
"""

import threading

from gpt_trainer.api.cache import (
    AGENTS_KEY_PREFIX,
    CACHE_MAX_AGE,
    MISS,
    ResponseCache,
    agents_key,
)


class TestGetSet:
    """Tests for get() and set()."""

    def test_missing_key_returns_miss(self, response_cache):
        assert response_cache.get("tags") is MISS
        assert not MISS

    def test_fresh_entry_is_returned(self, response_cache):
        response_cache.set("tags", ["a"])
        assert response_cache.get("tags") == ["a"]

    def test_falsy_values_are_cached(self, response_cache):
        """Test that an empty list is a hit, not a miss."""
        response_cache.set("tags", [])
        assert response_cache.get("tags") == []
        assert "tags" in response_cache

    def test_entry_expires_at_ttl(self, response_cache, clock):
        response_cache.set("tags", ["a"])
        clock.advance(299)
        assert response_cache.get("tags") == ["a"]
        clock.advance(1)
        assert response_cache.get("tags") is MISS

    def test_expired_entry_is_dropped(self, response_cache, clock):
        response_cache.set("tags", ["a"])
        clock.advance(400)
        response_cache.get("tags")
        assert len(response_cache) == 0

    def test_zero_ttl_disables_caching(self, clock):
        cache = ResponseCache(ttl=0, clock=clock)
        cache.set("tags", ["a"])
        assert cache.get("tags") is MISS

    def test_default_ttl(self):
        assert ResponseCache().ttl == CACHE_MAX_AGE


class TestInvalidation:
    """Tests for invalidate(), invalidate_prefix() and clear()."""

    def test_invalidate(self, response_cache):
        response_cache.set("tags", ["a"])
        assert response_cache.invalidate("tags") is True
        assert response_cache.invalidate("tags") is False
        assert "tags" not in response_cache

    def test_invalidate_prefix(self, response_cache):
        response_cache.set(agents_key("cb-1"), [])
        response_cache.set(agents_key("cb-2"), [])
        response_cache.set("chatbots", [])

        removed = response_cache.invalidate_prefix(AGENTS_KEY_PREFIX)

        assert removed == 2
        assert "chatbots" in response_cache
        assert len(response_cache) == 1

    def test_clear(self, response_cache):
        response_cache.set("tags", [])
        response_cache.set("chatbots", [])
        response_cache.clear()
        assert len(response_cache) == 0

    def test_agents_key(self):
        assert agents_key("cb-1") == "agents:cb-1"


class TestGenerations:
    """Tests for generation-checked stores."""

    def test_store_with_current_generation(self, response_cache):
        generation = response_cache.generation("tags")
        assert response_cache.set("tags", ["a"], generation=generation) is True
        assert response_cache.get("tags") == ["a"]

    def test_store_skipped_after_invalidate(self, response_cache):
        generation = response_cache.generation("tags")
        response_cache.invalidate("tags")

        assert response_cache.set("tags", ["stale"], generation=generation) is False
        assert "tags" not in response_cache

    def test_store_skipped_after_prefix_invalidation(self, response_cache):
        key = agents_key("cb-1")
        generation = response_cache.generation(key)
        response_cache.invalidate_prefix(AGENTS_KEY_PREFIX)

        assert response_cache.set(key, ["stale"], generation=generation) is False
        assert key not in response_cache

    def test_store_skipped_after_clear(self, response_cache):
        generation = response_cache.generation("chatbots")
        response_cache.clear()
        assert response_cache.set("chatbots", [], generation=generation) is False

    def test_other_keys_unaffected(self, response_cache):
        generation = response_cache.generation("tags")
        response_cache.invalidate("chatbots")
        assert response_cache.set("tags", ["a"], generation=generation) is True

    def test_unconditional_set_still_stores(self, response_cache):
        response_cache.invalidate("tags")
        assert response_cache.set("tags", ["a"]) is True


class TestConcurrency:
    """Tests for thread safety."""

    def test_parallel_writers_and_readers(self, response_cache):
        errors = []

        def worker(n):
            try:
                for i in range(200):
                    key = f"k{(n + i) % 5}"
                    response_cache.set(key, [n, i])
                    value = response_cache.get(key)
                    assert value is MISS or len(value) == 2
                    response_cache.invalidate(key)
            except AssertionError as e:
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
