"""Persistence Bootstrap - creates schemas and connects stores before traffic is accepted.

Invariants:
    - Steps run strictly in order: users table, orders table, catalog tables,
      document-store connect, session indexes
    - Every step is idempotent; re-running against an initialized store is safe
    - The first failing step stops the sequence and raises BootstrapError naming it
    - No retry, no partial-degradation mode
    - Document-store steps are skipped only when no MongoConnection is wired
      (an app built around a non-Mongo session store)

Design Decisions:
    - Steps as a named list: the failing step name reaches the log line and
      the exit path without string parsing
    - Per-table creation (not metadata.create_all): the users/orders order is
      explicit because orders references users
"""

import logging
from collections.abc import Awaitable, Callable

from bookstore.core.errors import BootstrapError
from bookstore.infrastructure.database import DatabaseSessionManager
from bookstore.infrastructure.mongo import MongoConnection
from bookstore.models import Book, Order, Review, User

logger = logging.getLogger(__name__)

BootstrapStep = tuple[str, Callable[[], Awaitable[None]]]


def bootstrap_steps(
    db: DatabaseSessionManager, mongo: MongoConnection | None,
) -> list[BootstrapStep]:
    steps: list[BootstrapStep] = [
        ("create_users_table", lambda: db.create_table(User.__table__)),
        ("create_orders_table", lambda: db.create_table(Order.__table__)),
        ("create_books_table", lambda: db.create_table(Book.__table__)),
        ("create_reviews_table", lambda: db.create_table(Review.__table__)),
    ]
    if mongo is not None:
        steps += [
            ("connect_document_store", mongo.connect),
            ("ensure_session_indexes", mongo.ensure_session_indexes),
        ]
    return steps


async def run_bootstrap(steps: list[BootstrapStep]) -> None:
    """Await each step in order; wrap the first failure in BootstrapError."""
    for name, step in steps:
        try:
            await step()
        except Exception as exc:
            logger.error(
                f"Bootstrap step {name} failed: {exc}",
                exc_info=True,
                extra={"step": name},
            )
            raise BootstrapError(name, str(exc)) from exc
        logger.info(f"Bootstrap step {name} done", extra={"step": name})


async def bootstrap_persistence(
    db: DatabaseSessionManager, mongo: MongoConnection | None,
) -> None:
    await run_bootstrap(bootstrap_steps(db, mongo))
