import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from shortlink_app.cache.keys import link_cache_key
from shortlink_app.cache.strategies import InMemoryCache
from shortlink_app.exceptions import (
    BadRequestError,
    CacheError,
    ConflictError,
    LinkExpiredError,
    NotFoundError,
)
from shortlink_app.schemas.link import LinkRecord
from shortlink_app.services.link_service import LinkService
from shortlink_app.storage.strategies import InMemoryLinkStore


class SequenceGenerator:
    """Hands out predetermined ids"""

    def __init__(self, ids):
        self.ids = list(ids)
        self.calls = 0

    def generate(self):
        self.calls += 1
        return self.ids.pop(0)


class FailingWriteCache(InMemoryCache):
    """Cache whose writes and deletes always fail"""

    async def set(self, key, value, ttl=3600):
        raise CacheError("cache is down")

    async def delete(self, key):
        raise CacheError("cache is down")


class BlindStore(InMemoryLinkStore):
    """Store whose existence check misses concurrent inserts"""

    def exists(self, link_id):
        return False


def past(hours=1):
    return datetime.now(timezone.utc) - timedelta(hours=hours)


def future(hours=1):
    return datetime.now(timezone.utc) + timedelta(hours=hours)


@pytest.fixture
def service(memory_store, cache):
    return LinkService(store=memory_store, cache=cache, base_url="http://sho.rt")


class TestCreateLink:
    """Test link creation"""

    def test_create_then_get_round_trip(self, service):
        created = asyncio.run(service.create_link("https://example.com"))

        assert created.target_url == "https://example.com"
        assert created.expires_at is None
        assert created.short_url == f"http://sho.rt/{created.id}"

        fetched = asyncio.run(service.get_link(created.id))
        assert fetched.id == created.id
        assert fetched.target_url == "https://example.com"
        assert fetched.expires_at is None

    def test_create_with_custom_id(self, service, memory_store):
        created = asyncio.run(service.create_link("https://example.com/a", custom_id="myLink1"))

        assert created.id == "myLink1"
        assert created.short_url == "http://sho.rt/myLink1"
        assert memory_store.exists("myLink1")

    def test_trailing_slash_in_base_url(self, memory_store):
        service = LinkService(store=memory_store, base_url="http://sho.rt/")
        created = asyncio.run(service.create_link("https://example.com", custom_id="abc123"))

        assert created.short_url == "http://sho.rt/abc123"

    def test_create_with_ttl_sets_expiry(self, service):
        before = datetime.now(timezone.utc)
        created = asyncio.run(service.create_link("https://example.com", ttl_hours=2))
        after = datetime.now(timezone.utc)

        assert before + timedelta(hours=2) <= created.expires_at <= after + timedelta(hours=2)

    def test_custom_id_conflict(self, service):
        asyncio.run(service.create_link("https://example.com/1", custom_id="dup123X"))

        with pytest.raises(ConflictError) as exc_info:
            asyncio.run(service.create_link("https://example.com/2", custom_id="dup123X"))

        assert exc_info.value.status_code == 409
        assert exc_info.value.message == "The provided ID already exists. Please choose a different ID."

    def test_conflict_does_not_overwrite_existing_record(self, service):
        asyncio.run(service.create_link("https://example.com/1", custom_id="dup123X"))

        with pytest.raises(ConflictError):
            asyncio.run(service.create_link("https://example.com/2", custom_id="dup123X"))

        fetched = asyncio.run(service.get_link("dup123X"))
        assert fetched.target_url == "https://example.com/1"

    def test_invalid_custom_id(self, service):
        with pytest.raises(BadRequestError) as exc_info:
            asyncio.run(service.create_link("https://example.com", custom_id="abc"))

        assert exc_info.value.message == "custom_id must be at least 6 characters long."

    @pytest.mark.parametrize("ttl_hours", [0, -1])
    def test_non_positive_ttl_is_rejected(self, service, ttl_hours):
        with pytest.raises(BadRequestError):
            asyncio.run(service.create_link("https://example.com", ttl_hours=ttl_hours))

    def test_empty_custom_id_means_generated(self, service):
        created = asyncio.run(service.create_link("https://example.com", custom_id=""))

        assert len(created.id) == 6

    def test_generated_id_collision_is_a_conflict(self, memory_store, cache):
        """A taken generated id is reported like a taken custom id, without regenerating"""
        memory_store.save(LinkRecord(id="abc123", target_url="https://taken.example"))
        generator = SequenceGenerator(["abc123", "xyz789"])
        service = LinkService(store=memory_store, cache=cache, id_generator=generator)

        with pytest.raises(ConflictError) as exc_info:
            asyncio.run(service.create_link("https://example.com"))

        assert exc_info.value.status_code == 409
        assert generator.calls == 1
        assert not memory_store.exists("xyz789")
        assert memory_store.find_by_id("abc123").target_url == "https://taken.example"

    def test_duplicate_on_insert_reports_conflict(self, cache):
        """The store's own uniqueness guard catches what the existence check missed"""
        store = BlindStore()
        service = LinkService(store=store, cache=cache)
        asyncio.run(service.create_link("https://example.com/1", custom_id="race123"))

        with pytest.raises(ConflictError):
            asyncio.run(service.create_link("https://example.com/2", custom_id="race123"))

    def test_cache_write_failure_does_not_fail_create(self, memory_store):
        service = LinkService(store=memory_store, cache=FailingWriteCache())

        created = asyncio.run(service.create_link("https://example.com", custom_id="abc123"))

        assert created.id == "abc123"
        assert memory_store.exists("abc123")


class TestCacheBounds:
    """Test cache entry TTLs"""

    def test_cache_ttl_follows_link_ttl(self, service, cache):
        created = asyncio.run(service.create_link("https://example.com", ttl_hours=1))

        ttl = asyncio.run(cache.get_ttl(link_cache_key(created.id)))
        assert 3590 <= ttl <= 3600

    def test_cache_ttl_defaults_to_24_hours(self, service, cache):
        created = asyncio.run(service.create_link("https://example.com"))

        ttl = asyncio.run(cache.get_ttl(link_cache_key(created.id)))
        assert 86390 <= ttl <= 86400

    def test_cache_holds_record_json(self, service, cache):
        created = asyncio.run(service.create_link("https://example.com", custom_id="abc123"))

        payload = asyncio.run(cache.get("url:abc123"))
        cached = LinkRecord.model_validate_json(payload)
        assert cached.id == created.id
        assert cached.target_url == "https://example.com"


class TestGetLink:
    """Test cache-aside reads and expiry"""

    def test_cache_hit_skips_store(self, service, memory_store):
        asyncio.run(service.create_link("https://example.com", custom_id="abc123"))
        memory_store.clear()

        fetched = asyncio.run(service.get_link("abc123"))
        assert fetched.target_url == "https://example.com"

    def test_cache_miss_populates_cache(self, service, memory_store, cache):
        memory_store.save(LinkRecord(id="abc123", target_url="https://example.com", expires_at=future()))

        fetched = asyncio.run(service.get_link("abc123"))

        assert fetched.target_url == "https://example.com"
        assert asyncio.run(cache.exists("url:abc123"))
        # Read-through uses the default cache TTL
        ttl = asyncio.run(cache.get_ttl("url:abc123"))
        assert 86390 <= ttl <= 86400

    def test_unknown_id(self, service):
        with pytest.raises(NotFoundError) as exc_info:
            asyncio.run(service.get_link("doesNotExist"))

        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "The provided ID could not be found."

    def test_expired_in_cache_is_evicted(self, service, cache):
        record = LinkRecord(id="old123", target_url="https://example.com", expires_at=past())
        asyncio.run(cache.set("url:old123", record.model_dump_json(), ttl=3600))

        with pytest.raises(LinkExpiredError) as exc_info:
            asyncio.run(service.get_link("old123"))

        assert exc_info.value.status_code == 410
        assert asyncio.run(cache.get("url:old123")) is None

    def test_expired_in_store_is_kept_for_sweeper(self, service, memory_store, cache):
        memory_store.save(LinkRecord(id="old123", target_url="https://example.com", expires_at=past()))

        with pytest.raises(LinkExpiredError):
            asyncio.run(service.get_link("old123"))

        assert memory_store.exists("old123")
        assert asyncio.run(cache.get("url:old123")) is None

    def test_expiry_boundary_counts_as_expired(self):
        now = datetime.now(timezone.utc)
        record = LinkRecord(id="abc123", target_url="https://example.com", expires_at=now)

        assert record.is_expired(now)
        assert not record.is_expired(now - timedelta(seconds=1))

    def test_unreadable_cache_entry_falls_back_to_store(self, service, memory_store, cache):
        memory_store.save(LinkRecord(id="abc123", target_url="https://example.com"))
        asyncio.run(cache.set("url:abc123", "not json", ttl=60))

        fetched = asyncio.run(service.get_link("abc123"))

        assert fetched.target_url == "https://example.com"
        cached = LinkRecord.model_validate_json(asyncio.run(cache.get("url:abc123")))
        assert cached.id == "abc123"

    def test_cache_failure_on_read_through_is_tolerated(self, memory_store):
        memory_store.save(LinkRecord(id="abc123", target_url="https://example.com"))
        service = LinkService(store=memory_store, cache=FailingWriteCache())

        fetched = asyncio.run(service.get_link("abc123"))
        assert fetched.id == "abc123"

    def test_without_cache_reads_store(self, memory_store):
        memory_store.save(LinkRecord(id="abc123", target_url="https://example.com"))
        service = LinkService(store=memory_store)

        assert asyncio.run(service.get_link("abc123")).target_url == "https://example.com"


class TestDeleteLink:
    """Test deletion from store and cache"""

    def test_delete_then_get(self, service, memory_store, cache):
        asyncio.run(service.create_link("https://example.com", custom_id="abc123"))

        asyncio.run(service.delete_link("abc123"))

        assert not memory_store.exists("abc123")
        assert asyncio.run(cache.get("url:abc123")) is None
        with pytest.raises(NotFoundError):
            asyncio.run(service.get_link("abc123"))

    def test_delete_unknown_id(self, service):
        with pytest.raises(NotFoundError):
            asyncio.run(service.delete_link("doesNotExist"))

    def test_delete_expired_link(self, service, memory_store):
        memory_store.save(LinkRecord(id="old123", target_url="https://example.com", expires_at=past()))

        asyncio.run(service.delete_link("old123"))

        assert not memory_store.exists("old123")


class TestWithDatabase:
    """Same flows against the SQLAlchemy store"""

    def test_round_trip(self, sql_store, cache):
        service = LinkService(store=sql_store, cache=cache)
        created = asyncio.run(service.create_link("https://example.com", custom_id="abc123", ttl_hours=1))

        assert created.created_at is not None

        asyncio.run(cache.clear())
        fetched = asyncio.run(service.get_link("abc123"))
        assert fetched.target_url == "https://example.com"
        assert fetched.expires_at.tzinfo is not None

    def test_expired_record(self, sql_store, cache):
        sql_store.save(LinkRecord(id="old123", target_url="https://example.com", expires_at=past()))
        service = LinkService(store=sql_store, cache=cache)

        with pytest.raises(LinkExpiredError):
            asyncio.run(service.get_link("old123"))

    def test_delete(self, sql_store, cache):
        service = LinkService(store=sql_store, cache=cache)
        asyncio.run(service.create_link("https://example.com", custom_id="abc123"))

        asyncio.run(service.delete_link("abc123"))

        with pytest.raises(NotFoundError):
            asyncio.run(service.get_link("abc123"))
