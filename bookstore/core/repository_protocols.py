"""Boundary Protocols - contracts between core and shell.

Invariants:
    - Core NEVER imports from shell; dependency arrows point inward only
    - Store methods are async because implementations do IO
    - Atomicity is whatever the backing store guarantees per document;
      no in-process locking is assumed

Design Decisions:
    - Protocol over ABC: structural subtyping, the Mongo store and the test
      fake share no base class
"""

from typing import Any, Protocol

from bookstore.core.domain_types import SessionId
from bookstore.core.session_state import SessionRecord


class SessionStore(Protocol):
    """Key-value contract for session persistence, keyed by session id."""
    async def get(self, session_id: SessionId) -> SessionRecord | None: ...
    async def set(self, record: SessionRecord, ttl_seconds: int) -> None: ...
    async def touch(self, session_id: SessionId, ttl_seconds: int) -> None: ...
    async def delete(self, session_id: SessionId) -> None: ...
    async def purge_expired(self) -> int: ...


class EventPublisher(Protocol):
    """The publish half of the event bus, as seen by route handlers."""
    def publish(self, event_name: str, payload: Any) -> Any: ...
