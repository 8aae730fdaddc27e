"""
Cache module for the URL shortener.
Implements Strategy Pattern for flexible cache backends.
"""

from .strategies import CacheStrategy, RedisCache, InMemoryCache, NullCache
from .factory import CacheFactory, CacheBackend
from .keys import link_cache_key

__all__ = [
    "CacheStrategy",
    "RedisCache",
    "InMemoryCache",
    "NullCache",
    "CacheFactory",
    "CacheBackend",
    "link_cache_key",
]
