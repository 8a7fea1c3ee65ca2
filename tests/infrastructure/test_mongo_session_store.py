"""Mongo Session Store - document shape and query contracts against a mocked collection.

Invariants:
    - Documents are {_id, session, expires}
    - Expired documents read as absent
    - Naive datetimes from the driver are treated as UTC
"""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

from bookstore.core.session_state import SessionRecord
from bookstore.infrastructure.session_store import MongoSessionStore


def _collection():
    collection = MagicMock()
    collection.find_one = AsyncMock(return_value=None)
    collection.replace_one = AsyncMock()
    collection.update_one = AsyncMock()
    collection.delete_one = AsyncMock()
    collection.delete_many = AsyncMock(return_value=SimpleNamespace(deleted_count=3))
    return collection


async def test_get_missing_returns_none():
    store = MongoSessionStore(_collection())
    assert await store.get("nope") is None


async def test_get_maps_document_to_record():
    collection = _collection()
    expires = datetime.now(timezone.utc) + timedelta(hours=1)
    collection.find_one.return_value = {
        "_id": "sid", "session": {"user_id": "u1", "role": "admin"}, "expires": expires,
    }
    record = await MongoSessionStore(collection).get("sid")

    assert record.id == "sid"
    assert record.is_admin
    assert not record.is_new
    collection.find_one.assert_awaited_once_with({"_id": "sid"})


async def test_get_expired_document_is_absent():
    collection = _collection()
    collection.find_one.return_value = {
        "_id": "sid", "session": {},
        "expires": datetime.now(timezone.utc) - timedelta(seconds=1),
    }
    assert await MongoSessionStore(collection).get("sid") is None


async def test_get_accepts_naive_datetimes():
    collection = _collection()
    naive = (datetime.now(timezone.utc) + timedelta(hours=1)).replace(tzinfo=None)
    collection.find_one.return_value = {"_id": "sid", "session": {}, "expires": naive}
    record = await MongoSessionStore(collection).get("sid")
    assert record.expires_at.tzinfo is timezone.utc


async def test_set_upserts_full_document():
    collection = _collection()
    record = SessionRecord(id="sid", data={"k": "v"})
    await MongoSessionStore(collection).set(record, 60)

    (query, doc), kwargs = collection.replace_one.await_args
    assert query == {"_id": "sid"}
    assert doc["session"] == {"k": "v"}
    assert doc["expires"] == record.expires_at
    assert kwargs == {"upsert": True}


async def test_touch_only_moves_expiry():
    collection = _collection()
    await MongoSessionStore(collection).touch("sid", 60)
    (query, update), _ = collection.update_one.await_args
    assert query == {"_id": "sid"}
    assert list(update["$set"]) == ["expires"]


async def test_delete_and_purge():
    collection = _collection()
    store = MongoSessionStore(collection)
    await store.delete("sid")
    collection.delete_one.assert_awaited_once_with({"_id": "sid"})
    assert await store.purge_expired() == 3
    (query,), _ = collection.delete_many.await_args
    assert "$lt" in query["expires"]
