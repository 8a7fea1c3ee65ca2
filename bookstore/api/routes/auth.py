"""Auth Routes - registration, login, logout and current principal.

Invariants:
    - Login rotates the session id before storing the principal
    - Logout destroys the session; the session stage deletes it and clears the cookie
    - Unknown email and wrong password produce the same 401
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.api.dependencies import current_user_id, require_session
from bookstore.core.domain_types import UserRole
from bookstore.core.errors import (
    ConflictError, InvalidCredentialsError, ResourceNotFoundError,
)
from bookstore.core.passwords import hash_password, verify_password
from bookstore.core.session_state import SessionRecord
from bookstore.infrastructure.database import get_db
from bookstore.models.user import User
from bookstore.schemas.auth import LoginRequest, RegisterRequest, UserResponse

logger = logging.getLogger(__name__)
router = APIRouter(tags=["auth"])


async def _find_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


@router.post(
    "/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED,
)
async def register(body: RegisterRequest, db: AsyncSession = Depends(get_db)):
    if await _find_by_email(db, body.email) is not None:
        raise ConflictError("Email already registered")
    user = User(
        email=body.email,
        name=body.name,
        password_hash=hash_password(body.password),
        role=UserRole.CUSTOMER.value,
    )
    db.add(user)
    await db.commit()
    logger.info("user_registered")
    return user


@router.post("/login", response_model=UserResponse)
async def login(
    body: LoginRequest,
    session: SessionRecord = Depends(require_session),
    db: AsyncSession = Depends(get_db),
):
    user = await _find_by_email(db, body.email)
    if user is None or not verify_password(body.password, user.password_hash):
        raise InvalidCredentialsError()
    session.login(str(user.id), UserRole(user.role))
    return user


@router.post("/logout")
async def logout(session: SessionRecord = Depends(require_session)):
    session.destroy()
    return {"status": "logged_out"}


@router.get("/me", response_model=UserResponse)
async def me(
    user_id: UUID = Depends(current_user_id),
    db: AsyncSession = Depends(get_db),
):
    user = await db.get(User, user_id)
    if user is None:
        raise ResourceNotFoundError("User", str(user_id))
    return user
