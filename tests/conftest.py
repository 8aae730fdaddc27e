"""
Test configuration and fixtures for the URL shortener.
This centralizes all test setup, making individual tests clean.
"""

import os

# Settings are read at import time, so the test environment goes first
os.environ["DATABASE_URL"] = "sqlite:///./test.db"
os.environ["CACHE_BACKEND"] = "memory"
os.environ["STORE_BACKEND"] = "sqlalchemy"
os.environ["SWEEPER_ENABLED"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from main import app
from shortlink_app.cache.strategies import InMemoryCache
from shortlink_app.database.connection import Base, get_db
from shortlink_app.dependencies import get_cache
from shortlink_app.storage.strategies import InMemoryLinkStore, SQLAlchemyLinkStore

# Test database configuration
SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    This ensures tests are isolated and don't affect each other.
    """
    # Create tables
    Base.metadata.create_all(bind=engine)

    # Create session
    db = TestingSessionLocal()

    try:
        yield db
    finally:
        # Cleanup
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def cache():
    """Fresh in-memory cache per test"""
    return InMemoryCache()


@pytest.fixture(scope="function")
def memory_store():
    return InMemoryLinkStore()


@pytest.fixture(scope="function")
def sql_store(db_session):
    return SQLAlchemyLinkStore(db_session)


@pytest.fixture(scope="function")
def client(db_session, cache):
    """
    Create a test client with database and cache dependencies overridden.
    This is the main fixture that API tests will use.
    """
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_cache] = lambda: cache

    with TestClient(app) as test_client:
        yield test_client

    # Clean up overrides
    app.dependency_overrides.clear()
