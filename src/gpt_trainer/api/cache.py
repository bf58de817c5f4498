"""Response caching with TTL support.

Provides an in-process cache for slowly changing API collections, keyed by
collection name ("data_sources", "chatbots", "tags", "agents:<chatbot>").
"""

from __future__ import annotations

import os
import threading
import time
from typing import Any, Callable

# Collection keys
DATA_SOURCES_KEY = "data_sources"
CHATBOTS_KEY = "chatbots"
TAGS_KEY = "tags"
AGENTS_KEY_PREFIX = "agents:"

# Default cache TTL in seconds (can be overridden with GPT_TRAINER_CACHE_TTL)
CACHE_MAX_AGE = 300

# Apply environment variable override
if os.environ.get("GPT_TRAINER_CACHE_TTL"):
    try:
        CACHE_MAX_AGE = int(os.environ["GPT_TRAINER_CACHE_TTL"])
    except ValueError:
        pass  # Keep default if invalid


class _Miss:
    def __repr__(self) -> str:
        return "MISS"

    def __bool__(self) -> bool:
        return False


MISS: Any = _Miss()


def agents_key(chatbot_uuid: str) -> str:
    """Cache key for the agent list of one chatbot."""
    return f"{AGENTS_KEY_PREFIX}{chatbot_uuid}"


class ResponseCache:
    """Thread-safe key -> (value, expiry) store.

    Args:
        ttl: Seconds an entry stays valid after it is written.
            Defaults to CACHE_MAX_AGE.
        clock: Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        ttl: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl = CACHE_MAX_AGE if ttl is None else ttl
        self._clock = clock
        self._entries: dict[str, tuple[Any, float]] = {}
        self._generations: dict[str, int] = {}
        self._epoch = 0
        self._lock = threading.RLock()

    def get(self, key: str) -> Any:
        """Return the cached value, or MISS if absent or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return MISS
            value, expires_at = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return MISS
            return value

    def generation(self, key: str) -> tuple[int, int]:
        """Token that changes whenever key is invalidated.

        Capture it before fetching a value and pass it to set(), so a fetch
        that overlapped an invalidation does not store stale data.
        """
        with self._lock:
            return (self._epoch, self._generations.get(key, 0))

    def set(self, key: str, value: Any, generation: tuple[int, int] | None = None) -> bool:
        """Store a value for the configured TTL.

        Args:
            key: Cache key.
            value: Value to store.
            generation: Result of generation(key) taken before the value was
                fetched. The store is skipped if key was invalidated since.

        Returns:
            True if the value was stored.
        """
        if self.ttl <= 0:
            return False
        with self._lock:
            if generation is not None and generation != self.generation(key):
                return False
            self._entries[key] = (value, self._clock() + self.ttl)
            return True

    def invalidate(self, key: str) -> bool:
        """Drop one entry. Returns True if something was removed."""
        with self._lock:
            self._generations[key] = self._generations.get(key, 0) + 1
            return self._entries.pop(key, None) is not None

    def invalidate_prefix(self, prefix: str) -> int:
        """Drop every entry whose key starts with prefix."""
        with self._lock:
            # Keys under prefix may be mid-fetch with no entry yet
            self._epoch += 1
            doomed = [k for k in self._entries if k.startswith(prefix)]
            for key in doomed:
                del self._entries[key]
            return len(doomed)

    def clear(self) -> None:
        with self._lock:
            self._epoch += 1
            self._entries.clear()

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not MISS

    def __len__(self) -> int:
        with self._lock:
            now = self._clock()
            return sum(1 for _, expires_at in self._entries.values() if expires_at > now)


__all__ = [
    "CACHE_MAX_AGE",
    "DATA_SOURCES_KEY",
    "CHATBOTS_KEY",
    "TAGS_KEY",
    "AGENTS_KEY_PREFIX",
    "MISS",
    "agents_key",
    "ResponseCache",
]
