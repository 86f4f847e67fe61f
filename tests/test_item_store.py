"""
Tests for the SQLite item store and the migration runner.
"""

import sqlite3

import pytest

from item_api.app.core.db import get_cursor, init_db
from item_api.app.schemas.item import ItemCreate, ItemRead
from item_api.app.services.item_store import ItemStore


def test_save_assigns_ids(store):
    first = store.save(ItemCreate(name="Widget", category="Hardware"))
    second = store.save(ItemCreate(name="Gadget", category="Hardware"))

    assert first.id is not None
    assert second.id > first.id
    assert store.get(first.id) == first


def test_get_missing_returns_none(store):
    assert store.get(12345) is None


def test_list_filters_by_exact_category(store):
    widget = store.save(ItemCreate(name="Widget", category="Hardware"))
    store.save(ItemCreate(name="Editor", category="Software"))

    assert [item.name for item in store.list()] == ["Widget", "Editor"]
    assert store.list("Hardware") == [widget]
    assert store.list("hardware") == []


def test_find_by_name(store):
    widget = store.save(ItemCreate(name="Widget", category="Hardware"))
    store.save(ItemCreate(name="Widgets", category="Hardware"))

    assert store.find_by_name("Widget") == [widget]


def test_save_with_id_replaces_fields(store, widget):
    saved = store.save(ItemRead(id=widget.id, name="Sprocket", category="Parts"))

    assert saved.id == widget.id
    assert store.get(widget.id) == ItemRead(id=widget.id, name="Sprocket", category="Parts")
    assert len(store.list()) == 1


def test_save_with_id_does_not_recreate_deleted_item(store, widget):
    store.delete_by_id(widget.id)

    assert store.save(ItemRead(id=widget.id, name="Sprocket", category="Parts")) is None
    assert store.get(widget.id) is None
    assert store.list() == []


def test_delete_and_exists(store, widget):
    assert store.exists_by_id(widget.id)
    store.delete_by_id(widget.id)
    assert not store.exists_by_id(widget.id)
    # Deleting again is a no-op.
    store.delete_by_id(widget.id)


def test_init_db_is_idempotent(db_path):
    init_db(db_path)
    with get_cursor(db_path) as cursor:
        versions = [row["version"] for row in cursor.execute("SELECT version FROM migrations ORDER BY version")]
    assert versions == [1, 2]


def test_missing_schema_raises(tmp_path):
    store = ItemStore(str(tmp_path / "empty.db"))
    with pytest.raises(sqlite3.OperationalError):
        store.get(1)
