"""Bookstore API - application factory and process entry point.

Invariants:
    - Pipeline, route groups, realtime channel, subscribers and jobs are all
      registered synchronously inside create_app(); nothing is registered later
    - The listener never binds before persistence bootstrap has succeeded
    - Bootstrap failure: lifecycle FAILED -> TERMINATED, exit code 1, port untouched
    - LISTENING is recorded only once the listening socket is bound; a bind
      failure exits with code 1 as well
    - Every exit path after the clients were built disposes them (close_stores)
    - Services live on app.state (db, mongo, session_store, event_bus,
      realtime, task_runner, lifecycle)

Usage:
    bookstore                                   # console script -> main()
    python -m bookstore
    uvicorn bookstore.main:create_app --factory # bootstrap runs in lifespan

Design Decisions:
    - Factory over module-level app: importing the module opens no clients,
      and tests build apps with in-memory collaborators
    - main() awaits bootstrap itself before starting uvicorn so the exit code
      on failure is 1; under `uvicorn --factory` the lifespan runs it instead
      and uvicorn refuses to bind when it raises
"""

import asyncio
import logging
import socket
import sys
from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from bookstore.api.error_handlers import register_error_handlers
from bookstore.api.middleware import RequestPipelineMiddleware, build_default_stages
from bookstore.api.routes.compose import default_route_groups, mount_route_groups
from bookstore.config import Settings, get_settings
from bookstore.core.domain_types import LifecycleState
from bookstore.core.errors import BootstrapError
from bookstore.core.lifecycle import ServerLifecycle
from bookstore.core.repository_protocols import SessionStore
from bookstore.infrastructure.bootstrap import bootstrap_persistence
from bookstore.infrastructure.database import DatabaseSessionManager
from bookstore.infrastructure.mongo import MongoConnection
from bookstore.infrastructure.observability import setup_logging
from bookstore.infrastructure.realtime import RealtimeChannel
from bookstore.infrastructure.session_store import MongoSessionStore
from bookstore.services.event_bus import EventBus
from bookstore.services.jobs import register_default_jobs
from bookstore.services.order_events import register_order_subscribers
from bookstore.services.scheduler import TaskRunner

logger = logging.getLogger(__name__)

Bootstrap = Callable[[], Awaitable[None]]


async def bootstrap_app(app: FastAPI) -> None:
    """UNINITIALIZED -> BOOTSTRAPPING -> READY, or -> FAILED -> TERMINATED."""
    lifecycle: ServerLifecycle = app.state.lifecycle
    lifecycle.begin_bootstrap()
    logger.info("Bootstrapping persistence", extra={"state": lifecycle.state.value})
    try:
        await app.state.bootstrap()
    except BootstrapError as exc:
        lifecycle.fail(exc)
        raise
    except Exception as exc:
        error = BootstrapError("unknown", str(exc))
        lifecycle.fail(error)
        raise error from exc
    lifecycle.mark_ready()
    logger.info("Persistence ready", extra={"state": lifecycle.state.value})


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    state = app.state
    if state.lifecycle.state is LifecycleState.UNINITIALIZED:
        await bootstrap_app(app)
    state.task_runner.start()
    logger.info("Bookstore API started")
    yield
    logger.info("Bookstore API shutting down")
    await state.task_runner.stop()
    await state.event_bus.drain()
    await close_stores(app)


def create_app(
    settings: Settings | None = None,
    *,
    db: DatabaseSessionManager | None = None,
    mongo: MongoConnection | None = None,
    session_store: SessionStore | None = None,
    event_bus: EventBus | None = None,
    bootstrap: Bootstrap | None = None,
) -> FastAPI:
    """Build the app with every registration done up front."""
    settings = settings or get_settings()
    db = db or DatabaseSessionManager(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    if session_store is None:
        mongo = mongo or MongoConnection(
            settings.mongodb_uri,
            settings.mongodb_database,
            timeout_ms=settings.mongodb_timeout_ms,
        )
        session_store = MongoSessionStore(mongo.sessions)
    event_bus = event_bus or EventBus()

    app = FastAPI(
        title="Bookstore API", version="1.0.0", lifespan=lifespan,
        docs_url="/docs", redoc_url=None,
    )
    app.state.settings = settings
    app.state.lifecycle = ServerLifecycle()
    app.state.db = db
    app.state.mongo = mongo
    app.state.session_store = session_store
    app.state.event_bus = event_bus
    app.state.bootstrap = bootstrap or (lambda: bootstrap_persistence(db, mongo))

    # Pipeline stages run in order: body, logging, CORS rejection, session, access log
    app.add_middleware(
        RequestPipelineMiddleware,
        stages=build_default_stages(settings, session_store),
    )
    # Added last, so outermost: Access-Control-* headers and preflights
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["GET", "HEAD", "PUT", "PATCH", "POST", "DELETE"],
        allow_headers=["*"],
        max_age=600,
    )
    register_error_handlers(app)
    mount_route_groups(app, default_route_groups())

    realtime = RealtimeChannel()
    realtime.subscribe_to(event_bus)
    app.state.realtime = realtime
    register_order_subscribers(event_bus)

    runner = TaskRunner()
    register_default_jobs(runner, settings, session_store, db)
    app.state.task_runner = runner
    return app


async def close_stores(app: FastAPI) -> None:
    state = app.state
    await state.db.dispose()
    if state.mongo is not None:
        await state.mongo.close()


def bind_listener(host: str, port: int) -> socket.socket:
    """Bind the listening socket up front so a bind failure is reported here."""
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
    except OSError:
        sock.close()
        raise
    return sock


async def serve(app: FastAPI) -> int:
    """Bootstrap, bind, then serve. Returns the process exit code."""
    settings: Settings = app.state.settings
    try:
        await bootstrap_app(app)
    except BootstrapError as exc:
        logger.critical(
            f"Error initializing database: {exc.message}",
            extra={"error_code": exc.code, "state": app.state.lifecycle.state.value},
        )
        await close_stores(app)
        return 1
    try:
        listener = bind_listener(settings.host, settings.port)
    except OSError as exc:
        logger.critical(
            f"Cannot bind {settings.host}:{settings.port}: {exc}",
            extra={"port": settings.port, "state": app.state.lifecycle.state.value},
        )
        await close_stores(app)
        return 1
    server = uvicorn.Server(uvicorn.Config(
        app, host=settings.host, port=settings.port,
        log_config=None, access_log=False,
    ))
    app.state.lifecycle.mark_listening()
    logger.info(f"Server running on port {settings.port}", extra={"port": settings.port})
    try:
        await server.serve(sockets=[listener])
    finally:
        listener.close()
    return 0


def main() -> None:
    """Console entry point."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    exit_code = asyncio.run(serve(create_app(settings)))
    if exit_code:
        sys.exit(exit_code)


if __name__ == "__main__":
    main()
