"""Route Dependencies - authorization gate, session and service accessors.

Invariants:
    - is_authenticated / is_admin raise the error from core/authorization.py;
      the handler they guard never runs on failure
    - Services are read from app.state, never from module globals
"""

from uuid import UUID

from fastapi import Depends, Request

from bookstore.core.authorization import check_admin, check_authenticated
from bookstore.core.errors import UnauthorizedError
from bookstore.core.session_state import SessionRecord
from bookstore.services.event_bus import EventBus


def get_session(request: Request) -> SessionRecord | None:
    return getattr(request.state, "session", None)


async def is_authenticated(
    session: SessionRecord | None = Depends(get_session),
) -> None:
    error = check_authenticated(session)
    if error is not None:
        raise error


async def is_admin(
    session: SessionRecord | None = Depends(get_session),
) -> None:
    error = check_admin(session)
    if error is not None:
        raise error


def require_session(
    session: SessionRecord | None = Depends(get_session),
) -> SessionRecord:
    """Session for handlers that mutate it (login/logout)."""
    if session is None:
        raise RuntimeError("Session stage not installed")
    return session


def current_user_id(
    session: SessionRecord | None = Depends(get_session),
) -> UUID:
    error = check_authenticated(session)
    if error is not None:
        raise error
    try:
        return UUID(session.user_id)
    except ValueError:
        raise UnauthorizedError()


def get_event_bus(request: Request) -> EventBus:
    return request.app.state.event_bus
