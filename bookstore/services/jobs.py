"""Built-in Jobs - session purge and database heartbeat.

Invariants:
    - Jobs never raise on an unhealthy dependency they only observe (heartbeat)
    - purge_expired_sessions returns the number of removed records
"""

import logging

from bookstore.config import Settings
from bookstore.core.repository_protocols import SessionStore
from bookstore.infrastructure.database import DatabaseSessionManager
from bookstore.services.scheduler import TaskRunner

logger = logging.getLogger(__name__)


async def purge_expired_sessions(store: SessionStore) -> int:
    removed = await store.purge_expired()
    if removed:
        logger.info(f"Purged {removed} expired session(s)", extra={"job": "purge_sessions"})
    return removed


async def database_heartbeat(db: DatabaseSessionManager) -> bool:
    healthy = await db.health_check()
    if not healthy:
        logger.warning("Database heartbeat failed", extra={"job": "db_heartbeat"})
    return healthy


def register_default_jobs(
    runner: TaskRunner,
    settings: Settings,
    store: SessionStore,
    db: DatabaseSessionManager,
) -> None:
    runner.register(
        "purge_sessions",
        settings.session_purge_interval_seconds,
        lambda: purge_expired_sessions(store),
    )
    runner.register(
        "db_heartbeat",
        settings.db_heartbeat_interval_seconds,
        lambda: database_heartbeat(db),
    )
