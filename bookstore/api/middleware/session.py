"""Session Stage - resolves or creates the session record and persists it on the way out.

Invariants:
    - request.state.session is always set once this stage has run
    - A missing, tampered or expired cookie yields a new record (is_new=True)
    - New or modified records are saved and the signed cookie is (re)issued
    - Unmodified existing records are touched, no Set-Cookie
    - Destroyed records are deleted and the cookie cleared
    - After rotate(), the previous id is deleted from the store
    - Cookie is HTTP-only, SameSite=Lax, path "/"

Design Decisions:
    - New sessions are saved even when untouched (saveUninitialized semantics),
      so every first response carries a cookie
    - Store failures on read fail the request (503). A failed save of a
      modified record (a login, for instance) replaces the response with 503
      and issues no cookie; a failed save of an untouched new record is
      logged and the response kept
    - The new record is saved before the rotated-out id is deleted
"""

import logging
from typing import Any

from bookstore.api.error_handlers import build_error_response
from bookstore.api.middleware.driver import BaseStage
from bookstore.core.cookie_signing import sign, unsign
from bookstore.core.errors import DatabaseError
from bookstore.core.pipeline import CONTINUE, RequestContext, StageResult
from bookstore.core.repository_protocols import SessionStore
from bookstore.core.session_state import SessionRecord

logger = logging.getLogger(__name__)


class SessionStage(BaseStage):
    name = "session"

    def __init__(
        self,
        store: SessionStore,
        secret: str,
        cookie_name: str,
        ttl_seconds: int,
        secure: bool = False,
    ):
        self.store = store
        self.secret = secret
        self.cookie_name = cookie_name
        self.ttl_seconds = ttl_seconds
        self.secure = secure

    async def process(self, ctx: RequestContext) -> StageResult:
        request = ctx.request
        session_id = unsign(request.cookies.get(self.cookie_name), self.secret)
        try:
            record = await self.store.get(session_id) if session_id else None
        except Exception as exc:
            raise DatabaseError("Session store unavailable", "session lookup") from exc
        if record is None:
            record = SessionRecord.create(self.ttl_seconds)
            logger.debug("session_created", extra={"session_id": record.id[:8]})
        ctx.state["session"] = record
        request.state.session = record
        return CONTINUE

    async def finalize(self, ctx: RequestContext, response: Any) -> Any:
        record: SessionRecord | None = ctx.state.get("session")
        if record is None:
            return response
        if record.destroyed:
            if record.rotated_from is not None:
                await self.store.delete(record.rotated_from)
            if not record.is_new:
                await self.store.delete(record.id)
            response.delete_cookie(
                self.cookie_name, path="/", httponly=True, samesite="lax",
            )
            return response
        if record.is_new or record.modified:
            try:
                await self.store.set(record, self.ttl_seconds)
            except Exception as exc:
                return self._save_failed(record, response, exc)
            if record.rotated_from is not None:
                await self.store.delete(record.rotated_from)
            response.set_cookie(
                self.cookie_name,
                sign(record.id, self.secret),
                max_age=self.ttl_seconds,
                path="/",
                httponly=True,
                samesite="lax",
                secure=self.secure,
            )
        else:
            await self.store.touch(record.id, self.ttl_seconds)
        return response

    def _save_failed(self, record: SessionRecord, response: Any, exc: Exception) -> Any:
        logger.error(
            f"Session save failed: {exc}",
            exc_info=True,
            extra={"session_id": record.id[:8]},
        )
        if not record.modified:
            # Untouched new session: the next request simply gets another one
            return response
        return build_error_response(
            DatabaseError("Session store unavailable", "session save"),
        )
