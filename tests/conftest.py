"""
Pytest configuration and fixtures for the item API tests.

Provides a migrated SQLite database per test, the store, executor,
recorder and service built on it, and store stubs that are slow or
always fail for exercising deadlines and fallbacks.
"""

import pytest
from fastapi.testclient import TestClient

from item_api.app.core.config import Settings
from item_api.app.core.db import init_db
from item_api.app.core.diagnostics import FallbackRecorder
from item_api.app.core.executor import BoundedExecutor
from item_api.app.main import create_app
from item_api.app.schemas.item import ItemCreate
from item_api.app.services.item_service import ItemService
from item_api.app.services.item_store import ItemStore

from stubs import FailingStore, SlowStore


@pytest.fixture
def db_path(tmp_path):
    path = str(tmp_path / "items.db")
    init_db(path)
    return path


@pytest.fixture
def store(db_path):
    return ItemStore(db_path)


@pytest.fixture
def widget(store):
    return store.save(ItemCreate(name="Widget", category="Hardware"))


@pytest.fixture
def executor():
    pool = BoundedExecutor(
        min_workers=2,
        max_workers=4,
        queue_capacity=10,
        name_prefix="TestThread-",
        keep_alive=1.0,
    )
    yield pool
    # Slow stubs may still be sleeping in a worker.
    pool.shutdown(wait=False)


@pytest.fixture
def recorder():
    return FallbackRecorder(capacity=50)


@pytest.fixture
def service(store, executor, recorder):
    return ItemService(store, executor, recorder, timeout=1.0, combine_timeout=2.0)


@pytest.fixture
def make_service(store, executor, recorder):
    """Build a service around a stub wrapping the test store."""

    def factory(stub_store=None, **kwargs):
        kwargs.setdefault("timeout", 1.0)
        kwargs.setdefault("combine_timeout", 2.0)
        return ItemService(stub_store or store, executor, recorder, **kwargs)

    return factory


@pytest.fixture
def slow_store(store):
    return lambda delay: SlowStore(store, delay)


@pytest.fixture
def failing_store():
    return FailingStore()


@pytest.fixture
def app_settings(tmp_path):
    return Settings(
        database_url=str(tmp_path / "api.db"),
        executor_min_workers=2,
        executor_max_workers=4,
        executor_queue_capacity=10,
        operation_timeout_seconds=1.0,
        combine_timeout_seconds=2.0,
        related_keyword="ware",
    )


@pytest.fixture
def app(app_settings):
    return create_app(app_settings)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client
