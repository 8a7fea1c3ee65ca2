"""Document Store Connection - long-lived MongoDB client for the session store.

Invariants:
    - One client per process, created lazily (constructing it does no IO)
    - connect() pings the server; the first network round-trip happens there
    - ensure_session_indexes() is idempotent (create_index on an existing index is a no-op)
    - Datetimes come back timezone-aware (tz_aware=True)

Design Decisions:
    - PyMongo's native asyncio client over a thread-pool wrapper
    - TTL index on `expires` with expireAfterSeconds=0: the server removes
      sessions at their own expiry instant, the purge job only covers the lag
"""

import logging

from pymongo import AsyncMongoClient
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.asynchronous.database import AsyncDatabase

logger = logging.getLogger(__name__)

SESSIONS_COLLECTION = "sessions"


class MongoConnection:
    """Owns the AsyncMongoClient and hands out collections."""

    def __init__(self, uri: str, database: str, timeout_ms: int = 5000):
        self._uri = uri
        self._database_name = database
        self.client: AsyncMongoClient = AsyncMongoClient(
            uri, tz_aware=True, serverSelectionTimeoutMS=timeout_ms,
        )

    @property
    def database(self) -> AsyncDatabase:
        return self.client[self._database_name]

    @property
    def sessions(self) -> AsyncCollection:
        return self.database[SESSIONS_COLLECTION]

    async def connect(self) -> None:
        """Round-trip to the server; raises if unreachable."""
        await self.client.admin.command("ping")
        logger.info(
            "Connected to document store",
            extra={"database": self._database_name},
        )

    async def ensure_session_indexes(self) -> None:
        await self.sessions.create_index("expires", expireAfterSeconds=0)

    async def health_check(self) -> bool:
        try:
            await self.client.admin.command("ping")
            return True
        except Exception as e:
            logger.error(f"Document store health check failed: {e}")
            return False

    async def close(self) -> None:
        await self.client.close()
