"""
Link store strategies using Strategy Pattern.

The store is the authoritative source of link records:
- SQLAlchemy: relational database (SQLite, PostgreSQL, ...)
- In-memory: dict-backed store for development and testing
"""

import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from shortlink_app.exceptions import LinkAlreadyExistsError
from shortlink_app.models.link import Link
from shortlink_app.schemas.link import LinkRecord
from shortlink_app.storage.helpers import handle_database_error


class LinkStoreStrategy(ABC):
    """
    Abstract base class for link stores.

    Methods are synchronous: the service awaits only cache I/O and calls the
    store directly, like the SQLAlchemy session it usually wraps.

    Implementations raise DataStoreError when the store is unreachable and
    LinkAlreadyExistsError when an insert hits an existing id.
    """

    @abstractmethod
    def exists(self, link_id: str) -> bool:
        """Check whether a record with this id is stored (expired or not)"""
        pass

    @abstractmethod
    def find_by_id(self, link_id: str) -> Optional[LinkRecord]:
        """
        Fetch one record.

        Returns:
            The record, or None if no record has this id
        """
        pass

    @abstractmethod
    def save(self, record: LinkRecord) -> LinkRecord:
        """
        Insert a new record.

        Args:
            record: Record to insert, timestamps are filled in by the store

        Returns:
            The stored record including created_at/updated_at
        """
        pass

    @abstractmethod
    def delete_by_id(self, link_id: str) -> None:
        """Delete the record with this id, if any"""
        pass

    @abstractmethod
    def delete(self, record: LinkRecord) -> None:
        """Delete the given record, if still present"""
        pass

    @abstractmethod
    def find_all_with_expiry_before(self, timestamp: datetime) -> List[LinkRecord]:
        """
        Records whose expiry has been reached at the given instant.

        Records with expires_at <= timestamp are returned; records without an
        expiry never are.
        """
        pass


class SQLAlchemyLinkStore(LinkStoreStrategy):
    """
    Relational link store backed by a SQLAlchemy session.

    The primary key on links.id is the final uniqueness guard: two requests
    that both pass the existence check still cannot insert the same id.
    """

    def __init__(self, db: Session):
        """
        Args:
            db: Database session (one per request or per sweep run)
        """
        self.db = db

    @handle_database_error
    def exists(self, link_id: str) -> bool:
        return self.db.query(Link.id).filter(Link.id == link_id).first() is not None

    @handle_database_error
    def find_by_id(self, link_id: str) -> Optional[LinkRecord]:
        link = self.db.query(Link).filter(Link.id == link_id).first()
        return LinkRecord.model_validate(link) if link else None

    @handle_database_error
    def save(self, record: LinkRecord) -> LinkRecord:
        link = Link(id=record.id, target_url=record.target_url, expires_at=record.expires_at)
        self.db.add(link)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise LinkAlreadyExistsError(f"Link '{record.id}' already exists") from e
        self.db.refresh(link)
        return LinkRecord.model_validate(link)

    @handle_database_error
    def delete_by_id(self, link_id: str) -> None:
        self.db.query(Link).filter(Link.id == link_id).delete(synchronize_session="fetch")
        self.db.commit()

    def delete(self, record: LinkRecord) -> None:
        self.delete_by_id(record.id)

    @handle_database_error
    def find_all_with_expiry_before(self, timestamp: datetime) -> List[LinkRecord]:
        links = (
            self.db.query(Link)
            .filter(Link.expires_at.isnot(None), Link.expires_at <= timestamp)
            .all()
        )
        return [LinkRecord.model_validate(link) for link in links]


class InMemoryLinkStore(LinkStoreStrategy):
    """
    Dict-backed link store.

    Pros:
    - No database needed (development, tests)

    Cons:
    - Not shared between processes
    - Lost on restart
    """

    def __init__(self):
        self._records: Dict[str, LinkRecord] = {}
        self._lock = threading.Lock()

    def exists(self, link_id: str) -> bool:
        with self._lock:
            return link_id in self._records

    def find_by_id(self, link_id: str) -> Optional[LinkRecord]:
        with self._lock:
            return self._records.get(link_id)

    def save(self, record: LinkRecord) -> LinkRecord:
        now = datetime.now(timezone.utc)
        stored = record.model_copy(update={"created_at": now, "updated_at": now})
        with self._lock:
            if record.id in self._records:
                raise LinkAlreadyExistsError(f"Link '{record.id}' already exists")
            self._records[record.id] = stored
        return stored

    def delete_by_id(self, link_id: str) -> None:
        with self._lock:
            self._records.pop(link_id, None)

    def delete(self, record: LinkRecord) -> None:
        self.delete_by_id(record.id)

    def find_all_with_expiry_before(self, timestamp: datetime) -> List[LinkRecord]:
        with self._lock:
            return [
                record for record in self._records.values()
                if record.expires_at is not None and record.expires_at <= timestamp
            ]

    def clear(self) -> None:
        """Drop every record (for testing)"""
        with self._lock:
            self._records.clear()
