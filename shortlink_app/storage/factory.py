"""
Factory for creating link store instances.
"""

import logging
from enum import Enum
from typing import Optional

from sqlalchemy.orm import Session

from .strategies import LinkStoreStrategy, SQLAlchemyLinkStore, InMemoryLinkStore


logger = logging.getLogger(__name__)


class StoreBackend(Enum):
    """Available link store backends"""
    SQLALCHEMY = "sqlalchemy"
    MEMORY = "memory"


class LinkStoreFactory:
    """
    Factory for link stores.

    The SQLAlchemy store wraps a session, so a new one is built for every
    session handed in. The in-memory store holds the data itself and is a
    singleton, otherwise each request would see an empty store.
    """

    _memory_instance: InMemoryLinkStore = None

    @classmethod
    def create(cls, backend: StoreBackend, db: Optional[Session] = None) -> LinkStoreStrategy:
        """
        Args:
            backend: Type of store backend (from enum)
            db: Database session, required for the SQLAlchemy backend

        Returns:
            Store instance for this request or sweep run
        """
        if backend == StoreBackend.SQLALCHEMY:
            if db is None:
                raise ValueError("SQLAlchemy link store needs a database session")
            return SQLAlchemyLinkStore(db)

        elif backend == StoreBackend.MEMORY:
            if cls._memory_instance is None:
                cls._memory_instance = InMemoryLinkStore()
                logger.info("In-memory link store initialized")
            return cls._memory_instance

        raise ValueError(f"Unknown store backend: {backend}")

    @classmethod
    def clear_instance(cls):
        """Clear cached in-memory instance (for testing)"""
        cls._memory_instance = None
