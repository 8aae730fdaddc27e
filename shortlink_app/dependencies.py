"""
FastAPI dependencies for dependency injection.

This module provides the cache singleton, a per-request link store and the
link service built from them.

Pattern: Dependency Injection
- Loose coupling between components
- Easy to test (override get_db / get_cache)
- Flexible (swap implementations via config)
"""

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.orm import Session

from shortlink_app.cache.factory import CacheFactory, CacheBackend
from shortlink_app.cache.strategies import CacheStrategy
from shortlink_app.config import settings
from shortlink_app.database.connection import get_db
from shortlink_app.services.link_service import LinkService
from shortlink_app.storage.factory import LinkStoreFactory, StoreBackend
from shortlink_app.storage.strategies import LinkStoreStrategy


@lru_cache()
def get_cache() -> CacheStrategy:
    """
    Get cache instance (singleton).

    Factory gets config from settings internally.
    @lru_cache ensures this is called only once.
    """
    backend = CacheBackend(settings.cache_backend)
    return CacheFactory.create(backend)


def get_link_store(db: Session = Depends(get_db)) -> LinkStoreStrategy:
    """Get the link store for this request's database session"""
    return LinkStoreFactory.create(StoreBackend(settings.store_backend), db)


def get_link_service(
    store: LinkStoreStrategy = Depends(get_link_store),
    cache: CacheStrategy = Depends(get_cache),
) -> LinkService:
    """
    Get LinkService with all dependencies injected.

    Controllers depend on the service only; the service depends on
    infrastructure (store, cache).
    """
    return LinkService(store=store, cache=cache)
