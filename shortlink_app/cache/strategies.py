"""
Cache strategies using Strategy Pattern.
Allows switching between different cache backends (Redis, In-Memory, Null).
"""

import functools
import threading
import time
from abc import ABC, abstractmethod
from typing import Dict, Optional, Tuple

import redis

from shortlink_app.exceptions import CacheError


def handle_redis_error(method):
    """Wrap RedisCache methods so redis failures surface as CacheError"""

    @functools.wraps(method)
    async def wrapper(self, *args, **kwargs):
        try:
            return await method(self, *args, **kwargs)
        except redis.exceptions.RedisError as e:
            raise CacheError(f"Redis {method.__name__} failed: {e}") from e

    return wrapper


class CacheStrategy(ABC):
    """
    Abstract base class for cache strategies.

    This is the Strategy Pattern interface - allows multiple cache implementations
    without changing the service layer code.

    All methods are async because cache operations involve I/O (network for Redis).
    Backends raise CacheError when the cache itself is unavailable; callers
    decide whether that failure is tolerable.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """
        Get value from cache.

        Args:
            key: Cache key

        Returns:
            Cached value or None if not found (or expired)
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: str, ttl: int = 3600) -> bool:
        """
        Set value in cache with TTL (Time To Live).

        Args:
            key: Cache key
            value: Value to cache
            ttl: Time to live in seconds (default: 1 hour)

        Returns:
            True if successful, False otherwise
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """
        Delete key from cache. Deleting a missing key is not an error.

        Args:
            key: Cache key

        Returns:
            True if deleted, False if key didn't exist
        """
        pass

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Check if key exists in cache"""
        pass

    @abstractmethod
    async def get_ttl(self, key: str) -> Optional[int]:
        """
        Remaining time to live of a key.

        Returns:
            Seconds left, or None if the key is missing or has no expiry
        """
        pass

    @abstractmethod
    async def clear(self) -> bool:
        """Clear all cache entries"""
        pass


class RedisCache(CacheStrategy):
    """
    Redis cache implementation.

    Production cache with:
    - Distributed caching (multiple servers can share cache)
    - Server-side TTL enforcement (SETEX)
    - Atomic operations

    The client is synchronous; methods are async for interface consistency.
    """

    def __init__(self, redis_client):
        """
        Initialize Redis cache.

        Args:
            redis_client: Redis client instance (redis.Redis)
        """
        self.redis = redis_client

    @handle_redis_error
    async def get(self, key: str) -> Optional[str]:
        value = self.redis.get(key)
        if value is None:
            return None
        return value.decode("utf-8") if isinstance(value, bytes) else value

    @handle_redis_error
    async def set(self, key: str, value: str, ttl: int = 3600) -> bool:
        return bool(self.redis.setex(key, ttl, value))

    @handle_redis_error
    async def delete(self, key: str) -> bool:
        return bool(self.redis.delete(key))

    @handle_redis_error
    async def exists(self, key: str) -> bool:
        return bool(self.redis.exists(key))

    @handle_redis_error
    async def get_ttl(self, key: str) -> Optional[int]:
        # -2: missing key, -1: key without expiry
        ttl = self.redis.ttl(key)
        return ttl if ttl is not None and ttl >= 0 else None

    @handle_redis_error
    async def clear(self) -> bool:
        """Clear all Redis keys (use with caution!)"""
        self.redis.flushdb()
        return True


class InMemoryCache(CacheStrategy):
    """
    In-memory cache implementation using a Python dict.

    Entries carry an absolute expiry on the monotonic clock and are dropped
    lazily when read after that point. A lock guards the dict because FastAPI
    runs sync dependencies on a thread pool.

    Pros:
    - Very fast (no network overhead)
    - No external dependencies
    - Good for development and testing

    Cons:
    - Not distributed (each process has its own cache)
    - Lost on restart
    """

    def __init__(self, clock=time.monotonic):
        """
        Args:
            clock: Source of monotonic seconds (overridable in tests)
        """
        self._clock = clock
        self._cache: Dict[str, Tuple[str, float]] = {}
        self._lock = threading.Lock()

    def _live_entry(self, key: str) -> Optional[Tuple[str, float]]:
        # Caller holds the lock
        entry = self._cache.get(key)
        if entry is None:
            return None
        if entry[1] <= self._clock():
            del self._cache[key]
            return None
        return entry

    async def get(self, key: str) -> Optional[str]:
        with self._lock:
            entry = self._live_entry(key)
            return entry[0] if entry else None

    async def set(self, key: str, value: str, ttl: int = 3600) -> bool:
        with self._lock:
            self._cache[key] = (value, self._clock() + ttl)
        return True

    async def delete(self, key: str) -> bool:
        with self._lock:
            return self._cache.pop(key, None) is not None

    async def exists(self, key: str) -> bool:
        with self._lock:
            return self._live_entry(key) is not None

    async def get_ttl(self, key: str) -> Optional[int]:
        with self._lock:
            entry = self._live_entry(key)
            if entry is None:
                return None
            return max(0, int(round(entry[1] - self._clock())))

    async def clear(self) -> bool:
        with self._lock:
            self._cache.clear()
        return True


class NullCache(CacheStrategy):
    """
    Null Object Pattern - cache that does nothing.

    Used for:
    - Testing (when you want to test without cache)
    - Disabling cache in certain environments

    Every read is a miss, so the store is always consulted.
    """

    async def get(self, key: str) -> Optional[str]:
        """Always returns None (cache miss)"""
        return None

    async def set(self, key: str, value: str, ttl: int = 3600) -> bool:
        return True

    async def delete(self, key: str) -> bool:
        return True

    async def exists(self, key: str) -> bool:
        return False

    async def get_ttl(self, key: str) -> Optional[int]:
        return None

    async def clear(self) -> bool:
        return True
