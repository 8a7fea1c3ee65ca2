"""Session State - server-side record attached to every request by the session stage.

Invariants:
    - id is opaque and unguessable (secrets.token_urlsafe)
    - set()/pop()/login() mark the record modified; reads never do
    - destroy() wins over every other flag: a destroyed record is deleted, not saved
    - rotate() keeps data, issues a new id and remembers the old one for deletion

Design Decisions:
    - Plain dataclass, no IO: the session stage decides when to hit the store
    - Principal stored as two keys (user_id, role) to keep the stored document
      flat and readable in the database shell
"""

import secrets
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

from bookstore.core.domain_types import SessionId, UserRole

USER_ID_KEY = "user_id"
ROLE_KEY = "role"


def new_session_id() -> SessionId:
    return SessionId(secrets.token_urlsafe(32))


@dataclass
class SessionRecord:
    id: SessionId
    data: dict[str, Any] = field(default_factory=dict)
    expires_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc) + timedelta(days=14),
    )
    is_new: bool = False
    modified: bool = False
    destroyed: bool = False
    rotated_from: SessionId | None = None

    @classmethod
    def create(cls, ttl_seconds: int) -> "SessionRecord":
        return cls(
            id=new_session_id(),
            expires_at=datetime.now(timezone.utc) + timedelta(seconds=ttl_seconds),
            is_new=True,
        )

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self.data[key] = value
        self.modified = True

    def pop(self, key: str, default: Any = None) -> Any:
        if key in self.data:
            self.modified = True
        return self.data.pop(key, default)

    def rotate(self) -> None:
        """Issue a fresh id for the same data (login fixation guard)."""
        if self.rotated_from is None and not self.is_new:
            self.rotated_from = self.id
        self.id = new_session_id()
        self.modified = True

    def destroy(self) -> None:
        self.data.clear()
        self.destroyed = True

    def login(self, user_id: str, role: UserRole) -> None:
        self.rotate()
        self.set(USER_ID_KEY, user_id)
        self.set(ROLE_KEY, role.value)

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or datetime.now(timezone.utc)) >= self.expires_at

    @property
    def user_id(self) -> str | None:
        return self.data.get(USER_ID_KEY)

    @property
    def role(self) -> str | None:
        return self.data.get(ROLE_KEY)

    @property
    def is_authenticated(self) -> bool:
        return not self.destroyed and bool(self.user_id)

    @property
    def is_admin(self) -> bool:
        return self.is_authenticated and self.role == UserRole.ADMIN.value
