"""
Link store module.

This module implements the Strategy Pattern for the authoritative link store.
"""

from .strategies import LinkStoreStrategy, SQLAlchemyLinkStore, InMemoryLinkStore
from .factory import LinkStoreFactory, StoreBackend

__all__ = [
    "LinkStoreStrategy",
    "SQLAlchemyLinkStore",
    "InMemoryLinkStore",
    "LinkStoreFactory",
    "StoreBackend",
]
