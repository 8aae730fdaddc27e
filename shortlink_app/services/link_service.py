import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from pydantic import ValidationError

from shortlink_app.cache.keys import link_cache_key
from shortlink_app.cache.strategies import CacheStrategy, NullCache
from shortlink_app.config import settings
from shortlink_app.exceptions import (
    BadRequestError,
    CacheError,
    ConflictError,
    LinkAlreadyExistsError,
    LinkExpiredError,
    NotFoundError,
)
from shortlink_app.schemas.link import LinkRecord, LinkResponse
from shortlink_app.services.short_id_generator import ShortIdGenerator
from shortlink_app.services.short_id_validator import ensure_valid_short_id
from shortlink_app.storage.strategies import LinkStoreStrategy


logger = logging.getLogger(__name__)


class LinkService:
    """
    Link service with dependency injection for store and cache.

    Implements the Cache-Aside pattern:
    - The store is authoritative, the cache is a TTL-bounded mirror
    - Writes go to the store first, then the cache
    - Reads try the cache, fall back to the store and repopulate the cache
    - Expiry is re-checked on every read, whichever layer served it

    Methods are async because of cache I/O; store calls are sync.
    """

    def __init__(
        self,
        store: LinkStoreStrategy,
        cache: Optional[CacheStrategy] = None,
        id_generator: Optional[ShortIdGenerator] = None,
        base_url: str = settings.base_url,
        cache_ttl: int = settings.cache_ttl,
    ):
        """
        Initialize link service with dependencies.

        Args:
            store: Authoritative link store
            cache: Cache strategy (NullCache when omitted)
            id_generator: Generator for ids when the caller gives none
            base_url: Public origin used to build short URLs
            cache_ttl: Cache TTL in seconds for links without their own TTL
        """
        self.store = store
        self.cache = cache if cache is not None else NullCache()
        self.id_generator = id_generator or ShortIdGenerator()
        self.base_url = base_url
        self.cache_ttl = cache_ttl

    async def create_link(
        self,
        target_url: str,
        custom_id: Optional[str] = None,
        ttl_hours: Optional[int] = None,
    ) -> LinkResponse:
        """Create a new short link

        Process:
        1. Resolve the id (validated custom id, or one generated id) and check it is free
        2. Compute expires_at from ttl_hours (None means never expires)
        3. Persist to the store
        4. Cache the record, bounded by ttl_hours or the default cache TTL
        5. Return the record with its public short URL

        Raises:
            BadRequestError: custom_id breaks a rule or ttl_hours is not positive
            ConflictError: the id is already in use
        """
        if ttl_hours is not None and ttl_hours <= 0:
            raise BadRequestError("ttl must be a positive number of hours.")

        link_id = self._resolve_id(custom_id)

        expires_at = None
        if ttl_hours is not None:
            expires_at = datetime.now(timezone.utc) + timedelta(hours=ttl_hours)

        try:
            record = self.store.save(
                LinkRecord(id=link_id, target_url=str(target_url), expires_at=expires_at)
            )
        except LinkAlreadyExistsError:
            logger.warning("Short id '%s' was taken between check and insert", link_id)
            raise ConflictError()

        cache_ttl = ttl_hours * 3600 if ttl_hours is not None else self.cache_ttl
        await self._cache_record(record, cache_ttl)

        short_url = self.build_short_url(record.id)
        logger.info("Created short URL: %s", short_url)

        return LinkResponse(
            id=record.id,
            target_url=record.target_url,
            short_url=short_url,
            expires_at=record.expires_at,
            created_at=record.created_at,
        )

    async def get_link(self, link_id: str) -> LinkRecord:
        """
        Get a live link using the Cache-Aside pattern.

        Flow:
        1. Cache hit: expired entries are evicted and reported as expired,
           live entries are returned without touching the store
        2. Cache miss: read the store
        3. Expired in the store: report expired, the sweeper removes it later
        4. Live in the store: populate cache and return

        Raises:
            NotFoundError: no record with this id
            LinkExpiredError: the record exists but has expired
        """
        cache_key = link_cache_key(link_id)
        now = datetime.now(timezone.utc)

        # Step 1: Try cache first
        cached = await self._read_cached(cache_key)
        if cached is not None:
            if cached.is_expired(now):
                logger.warning("Short URL '%s' expired (cache)", link_id)
                await self._evict(cache_key)
                raise LinkExpiredError()
            return cached

        # Step 2: Cache miss, query the store
        record = self.store.find_by_id(link_id)
        if record is None:
            raise NotFoundError()

        if record.is_expired(now):
            logger.warning("Short URL '%s' expired", link_id)
            raise LinkExpiredError()

        # Step 3: Populate cache for next time
        await self._cache_record(record, self.cache_ttl)
        return record

    async def delete_link(self, link_id: str) -> None:
        """
        Delete a link from the store, then invalidate its cache entry.

        Raises:
            NotFoundError: no record with this id
        """
        if not self.store.exists(link_id):
            raise NotFoundError()

        self.store.delete_by_id(link_id)
        await self.cache.delete(link_cache_key(link_id))
        logger.info("Deleted short URL with ID: %s", link_id)

    def build_short_url(self, link_id: str) -> str:
        return f"{self.base_url.rstrip('/')}/{link_id}"

    def _resolve_id(self, custom_id: Optional[str]) -> str:
        """Pick the id and check it is free; custom and generated ids conflict alike"""
        if custom_id:
            ensure_valid_short_id(custom_id)
            link_id = custom_id
        else:
            link_id = self.id_generator.generate()

        if self.store.exists(link_id):
            logger.warning("Short ID '%s' already exists", link_id)
            raise ConflictError()
        return link_id

    async def _read_cached(self, cache_key: str) -> Optional[LinkRecord]:
        payload = await self.cache.get(cache_key)
        if payload is None:
            return None
        try:
            return LinkRecord.model_validate_json(payload)
        except ValidationError:
            logger.warning("Discarding unreadable cache entry %s", cache_key)
            await self._evict(cache_key)
            return None

    async def _cache_record(self, record: LinkRecord, ttl: int) -> None:
        try:
            await self.cache.set(link_cache_key(record.id), record.model_dump_json(), ttl=ttl)
        except CacheError as e:
            logger.warning("Could not cache %s: %s", record.id, e)

    async def _evict(self, cache_key: str) -> None:
        try:
            await self.cache.delete(cache_key)
        except CacheError as e:
            logger.warning("Could not evict %s: %s", cache_key, e)
