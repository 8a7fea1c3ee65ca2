"""Authorization Gate - pure capability checks over session state.

Tests cover:
    - anonymous / missing session -> UnauthorizedError
    - logged-in customer passes check_authenticated, fails check_admin with 403
    - admin passes both
    - destroyed session no longer counts as logged in
    - checks never mutate the session
"""

from bookstore.core.authorization import check_admin, check_authenticated
from bookstore.core.domain_types import UserRole
from bookstore.core.errors import ForbiddenError, UnauthorizedError
from bookstore.core.session_state import SessionRecord


def _session(role: UserRole | None = None) -> SessionRecord:
    record = SessionRecord.create(ttl_seconds=60)
    if role is not None:
        record.login("7f1f3c1e-7d7e-4a77-9c55-3f0c1e0b6a01", role)
    return record


def test_missing_session_is_unauthorized():
    assert isinstance(check_authenticated(None), UnauthorizedError)


def test_anonymous_session_is_unauthorized():
    error = check_authenticated(_session())
    assert isinstance(error, UnauthorizedError)
    assert error.http_status == 401


def test_logged_in_customer_is_authenticated():
    assert check_authenticated(_session(UserRole.CUSTOMER)) is None


def test_customer_is_forbidden_from_admin():
    error = check_admin(_session(UserRole.CUSTOMER))
    assert isinstance(error, ForbiddenError)
    assert error.http_status == 403
    assert error.required_role == "admin"


def test_anonymous_admin_check_is_unauthorized_not_forbidden():
    assert isinstance(check_admin(_session()), UnauthorizedError)


def test_admin_passes_both_checks():
    session = _session(UserRole.ADMIN)
    assert check_authenticated(session) is None
    assert check_admin(session) is None


def test_destroyed_session_is_unauthorized():
    session = _session(UserRole.ADMIN)
    session.destroy()
    assert isinstance(check_authenticated(session), UnauthorizedError)


def test_checks_do_not_mutate_session():
    session = _session(UserRole.CUSTOMER)
    session.modified = False
    check_authenticated(session)
    check_admin(session)
    assert session.modified is False
