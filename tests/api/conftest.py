"""API test fixtures - app wired to SQLite in-memory and an in-memory session store.

Invariants:
    - Every test gets a fresh database and a fresh session store
    - The app is bootstrapped through bootstrap_app (tables created by the real
      bootstrap steps), so lifecycle is READY before the first request
    - Requests come from the configured frontend origin unless a test says otherwise

Design Decisions:
    - StaticPool: aiosqlite :memory: must share one connection across sessions
    - No MongoConnection wired: the document-store bootstrap steps are skipped
"""

import pytest
from argon2 import PasswordHasher
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from bookstore.config import Settings
from bookstore.core.domain_types import UserRole
from bookstore.core.passwords import hash_password
from bookstore.infrastructure.bootstrap import bootstrap_persistence
from bookstore.infrastructure.database import DatabaseSessionManager
from bookstore.main import bootstrap_app, create_app
from bookstore.models.book import Book
from bookstore.models.user import User
from tests.fakes.memory_session_store import InMemorySessionStore
from tests.fakes.recording_bus import RecordingEventBus

FRONTEND = "http://frontend.test"
PASSWORD = "correct-horse-battery"
FAST_HASHER = PasswordHasher(time_cost=1, memory_cost=8, parallelism=1)


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        frontend_url=FRONTEND,
        session_secret="test-secret",
        database_url="sqlite+aiosqlite:///:memory:",
    )


@pytest.fixture
async def db_manager():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", poolclass=StaticPool, echo=False,
    )
    manager = DatabaseSessionManager.from_engine(engine)
    yield manager
    await engine.dispose()


@pytest.fixture
def session_store():
    return InMemorySessionStore()


@pytest.fixture
def event_bus():
    return RecordingEventBus()


@pytest.fixture
async def app(settings, db_manager, session_store, event_bus):
    application = create_app(
        settings,
        db=db_manager,
        session_store=session_store,
        event_bus=event_bus,
        bootstrap=lambda: bootstrap_persistence(db_manager, None),
    )
    await bootstrap_app(application)
    return application


@pytest.fixture
async def client(app):
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={"Origin": FRONTEND},
    ) as c:
        yield c


async def _create_user(db_manager, email: str, role: UserRole) -> User:
    async with db_manager.session() as db:
        user = User(
            email=email, name=email.split("@")[0],
            password_hash=hash_password(PASSWORD, FAST_HASHER),
            role=role.value,
        )
        db.add(user)
        await db.commit()
        return user


@pytest.fixture
async def customer(db_manager):
    return await _create_user(db_manager, "reader@example.com", UserRole.CUSTOMER)


@pytest.fixture
async def admin_user(db_manager):
    return await _create_user(db_manager, "admin@example.com", UserRole.ADMIN)


@pytest.fixture
async def customer_client(client, customer):
    res = await client.post(
        "/auth/login", json={"email": customer.email, "password": PASSWORD},
    )
    assert res.status_code == 200
    return client


@pytest.fixture
async def admin_client(client, admin_user):
    res = await client.post(
        "/auth/login", json={"email": admin_user.email, "password": PASSWORD},
    )
    assert res.status_code == 200
    return client


@pytest.fixture
async def seed_book(db_manager):
    async with db_manager.session() as db:
        book = Book(title="Dune", author="Frank Herbert", price_cents=1299)
        db.add(book)
        await db.commit()
        return book
