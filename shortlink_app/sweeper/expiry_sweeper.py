"""
Expiry Sweeper

Periodically removes expired links from the store and the cache.

Architecture:
- Runs at wall-clock multiples of its interval (top of every hour by default)
- Opens a fresh database session per run
- Store calls run in worker threads, off the event loop
- Deletes each expired record from the store, then its cache entry
- A store failure on one record is logged and the run moves on; the record
  is still expired, so the next run picks it up again
- A cache failure after the store delete is only logged; the stale entry
  expires with its own TTL and reads re-check expiry anyway

It runs inside the web app (started from the FastAPI lifespan) or as its own
process: python -m shortlink_app.sweeper.expiry_sweeper
"""

import asyncio
import logging
import signal
from datetime import datetime, timezone
from typing import Callable

from sqlalchemy.orm import Session

from shortlink_app.cache.keys import link_cache_key
from shortlink_app.cache.strategies import CacheStrategy
from shortlink_app.config import settings
from shortlink_app.database.connection import SessionLocal
from shortlink_app.exceptions import CacheError, DataStoreError
from shortlink_app.storage.factory import LinkStoreFactory, StoreBackend
from shortlink_app.storage.strategies import LinkStoreStrategy


logger = logging.getLogger(__name__)


def default_store_factory(db: Session) -> LinkStoreStrategy:
    return LinkStoreFactory.create(StoreBackend(settings.store_backend), db)


def seconds_until_next_run(now: datetime, interval_seconds: int) -> float:
    """
    Delay until the next wall-clock multiple of interval_seconds.

    With the default 3600 this is the next top of the hour (UTC). When now
    sits exactly on a boundary the following boundary is returned.
    """
    elapsed = now.timestamp() % interval_seconds
    return interval_seconds - elapsed


class ExpirySweeper:
    """
    Recurring purge job for expired links.

    Features:
    - Clock-aligned schedule
    - Store first, then cache, per record
    - Survives per-record and per-run failures
    """

    def __init__(
        self,
        cache: CacheStrategy,
        db_session_factory: Callable[[], Session] = SessionLocal,
        store_factory: Callable[[Session], LinkStoreStrategy] = default_store_factory,
        interval_seconds: int = settings.sweeper_interval_seconds,
    ):
        """
        Initialize sweeper with dependencies.

        Args:
            cache: Cache strategy holding link entries
            db_session_factory: Factory for creating database sessions
            store_factory: Builds the link store for a session
            interval_seconds: Period between runs
        """
        self.cache = cache
        self.db_session_factory = db_session_factory
        self.store_factory = store_factory
        self.interval_seconds = interval_seconds
        self.running = False
        self.runs = 0
        self._stop_event = asyncio.Event()

    async def sweep(self) -> int:
        """
        Run one purge pass.

        Returns:
            Number of records removed from the store
        """
        # Store calls are blocking; they run in worker threads so requests
        # sharing this event loop keep being served during a sweep
        db = await asyncio.to_thread(self.db_session_factory)
        purged = 0
        try:
            store = self.store_factory(db)
            expired = await asyncio.to_thread(
                store.find_all_with_expiry_before, datetime.now(timezone.utc)
            )

            for record in expired:
                try:
                    await asyncio.to_thread(store.delete, record)
                except DataStoreError as e:
                    logger.error("Failed to delete expired URL %s: %s", record.id, e)
                    continue
                purged += 1
                logger.info("Deleted expired URL with ID: %s", record.id)

                try:
                    await self.cache.delete(link_cache_key(record.id))
                except CacheError as e:
                    # The record is gone from the store; the stale entry dies with its TTL
                    logger.warning("Could not evict cache entry for expired URL %s: %s", record.id, e)
        finally:
            await asyncio.to_thread(db.close)

        self.runs += 1
        logger.info("Expiry sweep finished, %d expired URL(s) removed", purged)
        return purged

    async def start(self):
        """Run sweeps on schedule until stop() is called"""
        self.running = True
        self._stop_event.clear()
        logger.info("Expiry sweeper started (interval %ss)", self.interval_seconds)

        while self.running:
            delay = seconds_until_next_run(datetime.now(timezone.utc), self.interval_seconds)
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=delay)
                break
            except asyncio.TimeoutError:
                pass

            try:
                await self.sweep()
            except Exception:
                logger.exception("Expiry sweep failed")

        logger.info("Expiry sweeper stopped after %d run(s)", self.runs)

    def stop(self):
        """Stop the sweeper gracefully"""
        self.running = False
        self._stop_event.set()


async def main():
    """Main entry point for a standalone sweeper process"""
    from shortlink_app.cache.factory import CacheFactory, CacheBackend
    from shortlink_app.logging_config import setup_logging

    setup_logging(settings.log_level)

    cache = CacheFactory.create(CacheBackend(settings.cache_backend))
    sweeper = ExpirySweeper(cache=cache)

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, sweeper.stop)

    await sweeper.start()


if __name__ == "__main__":
    asyncio.run(main())
