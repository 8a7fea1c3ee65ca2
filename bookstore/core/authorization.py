"""Authorization Gate - pure capability checks over session state.

Invariants:
    - All functions are PURE: no IO, no side effects, session is never mutated
    - Return the error on violation, None on success
    - check_admin implies check_authenticated (anonymous -> 401, not 403)

Design Decisions:
    - Return errors (not raise): the FastAPI dependency in api/dependencies.py
      raises, and the pure checks stay testable without a request object
"""

from bookstore.core.errors import ForbiddenError, UnauthorizedError
from bookstore.core.domain_types import UserRole
from bookstore.core.session_state import SessionRecord


def check_authenticated(session: SessionRecord | None) -> UnauthorizedError | None:
    """Pass iff the session denotes a logged-in principal."""
    if session is None or not session.is_authenticated:
        return UnauthorizedError()
    return None


def check_admin(
    session: SessionRecord | None,
) -> UnauthorizedError | ForbiddenError | None:
    """Pass iff the principal is logged in and carries the admin role."""
    error = check_authenticated(session)
    if error is not None:
        return error
    if not session.is_admin:
        return ForbiddenError(UserRole.ADMIN.value)
    return None
