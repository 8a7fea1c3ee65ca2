"""Review Routes - public listing; posting requires a logged-in principal.

Invariants:
    - The group is mounted without a gate; only POST checks the session
    - A review references an existing book
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.api.dependencies import current_user_id
from bookstore.core.errors import ResourceNotFoundError
from bookstore.infrastructure.database import get_db
from bookstore.models.book import Book
from bookstore.models.review import Review
from bookstore.schemas.review import ReviewCreate, ReviewResponse

router = APIRouter(tags=["reviews"])


@router.get("", response_model=list[ReviewResponse])
async def list_reviews(
    book_id: UUID | None = Query(None),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    query = select(Review).order_by(Review.created_at.desc())
    if book_id is not None:
        query = query.where(Review.book_id == book_id)
    result = await db.execute(query.limit(limit).offset(offset))
    return result.scalars().all()


@router.post(
    "", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED,
)
async def create_review(
    body: ReviewCreate,
    user_id: UUID = Depends(current_user_id),
    db: AsyncSession = Depends(get_db),
):
    if await db.get(Book, body.book_id) is None:
        raise ResourceNotFoundError("Book", str(body.book_id))
    review = Review(
        book_id=body.book_id,
        user_id=user_id,
        rating=body.rating,
        comment=body.comment,
    )
    db.add(review)
    await db.commit()
    return review
