"""Router Composer - binds resource routers to path prefixes and authorization gates.

Invariants:
    - The binding table is a tuple of frozen RouteGroups, fixed at app build time
    - A group's gate is attached as a router-level dependency: it runs before
      the resource handler on every request to that group, or never
    - Unmatched paths fall through to the HTTPException handler (404 envelope)

Bindings (default_route_groups):
    /auth     -> no gate
    /orders   -> is_authenticated
    /reviews  -> no gate
    /books    -> no gate
    /admin    -> is_admin
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from fastapi import APIRouter, Depends, FastAPI

from bookstore.api.dependencies import is_admin, is_authenticated
from bookstore.api.routes import admin, auth, books, health, home, orders, reviews, socket


@dataclass(frozen=True)
class RouteGroup:
    prefix: str
    router: APIRouter
    gate: Callable | None = None


def default_route_groups() -> tuple[RouteGroup, ...]:
    return (
        RouteGroup("/auth", auth.router),
        RouteGroup("/orders", orders.router, gate=is_authenticated),
        RouteGroup("/reviews", reviews.router),
        RouteGroup("/books", books.router),
        RouteGroup("/admin", admin.router, gate=is_admin),
    )


def mount_route_groups(app: FastAPI, groups: Sequence[RouteGroup]) -> None:
    app.include_router(home.router)
    app.include_router(health.router)
    app.include_router(socket.router)
    for group in groups:
        app.include_router(
            group.router,
            prefix=group.prefix,
            dependencies=[Depends(group.gate)] if group.gate else [],
        )
