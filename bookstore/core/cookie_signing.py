"""Cookie Signing - HMAC-SHA256 signatures for the session cookie value.

Invariants:
    - sign() output is "<session_id>.<hex digest>"
    - unsign() returns None for anything not produced by sign() with the same secret
    - Comparison is constant-time (hmac.compare_digest)
"""

import hashlib
import hmac

from bookstore.core.domain_types import SessionId


def _digest(value: str, secret: str) -> str:
    return hmac.new(
        secret.encode("utf-8"), value.encode("utf-8"), hashlib.sha256,
    ).hexdigest()


def sign(session_id: SessionId, secret: str) -> str:
    return f"{session_id}.{_digest(session_id, secret)}"


def unsign(cookie_value: str | None, secret: str) -> SessionId | None:
    if not cookie_value or "." not in cookie_value:
        return None
    session_id, _, signature = cookie_value.rpartition(".")
    if not session_id or not hmac.compare_digest(signature, _digest(session_id, secret)):
        return None
    return SessionId(session_id)
