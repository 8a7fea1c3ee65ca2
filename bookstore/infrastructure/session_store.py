"""Mongo Session Store - SessionStore implementation over the `sessions` collection.

Invariants:
    - Documents are shaped {_id: session id, session: data, expires: datetime}
    - get() treats an expired document as absent (TTL monitor runs only every ~60s)
    - set() is a single upsert; touch() a single update: per-document atomicity
      is the only concurrency guarantee
    - delete() of an unknown id is a no-op

Design Decisions:
    - Document shape compatible with connect-mongo so sessions survive a
      rolling deploy from the previous server
"""

import logging
from datetime import datetime, timedelta, timezone

from pymongo.asynchronous.collection import AsyncCollection

from bookstore.core.domain_types import SessionId
from bookstore.core.session_state import SessionRecord

logger = logging.getLogger(__name__)


class MongoSessionStore:
    """Persists SessionRecord documents in MongoDB."""

    def __init__(self, collection: AsyncCollection):
        self._collection = collection

    async def get(self, session_id: SessionId) -> SessionRecord | None:
        doc = await self._collection.find_one({"_id": session_id})
        if doc is None:
            return None
        record = SessionRecord(
            id=SessionId(doc["_id"]),
            data=dict(doc.get("session") or {}),
            expires_at=_as_utc(doc["expires"]),
        )
        if record.is_expired():
            logger.debug("session_expired_on_read", extra={"session_id": session_id})
            return None
        return record

    async def set(self, record: SessionRecord, ttl_seconds: int) -> None:
        expires = _expiry(ttl_seconds)
        await self._collection.replace_one(
            {"_id": record.id},
            {"_id": record.id, "session": record.data, "expires": expires},
            upsert=True,
        )
        record.expires_at = expires

    async def touch(self, session_id: SessionId, ttl_seconds: int) -> None:
        await self._collection.update_one(
            {"_id": session_id}, {"$set": {"expires": _expiry(ttl_seconds)}},
        )

    async def delete(self, session_id: SessionId) -> None:
        await self._collection.delete_one({"_id": session_id})

    async def purge_expired(self) -> int:
        result = await self._collection.delete_many(
            {"expires": {"$lt": datetime.now(timezone.utc)}},
        )
        return result.deleted_count


def _expiry(ttl_seconds: int) -> datetime:
    return datetime.now(timezone.utc) + timedelta(seconds=ttl_seconds)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
