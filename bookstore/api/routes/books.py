"""Book Routes - public catalog reads."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.core.errors import ResourceNotFoundError
from bookstore.infrastructure.database import get_db
from bookstore.models.book import Book
from bookstore.schemas.book import BookResponse

router = APIRouter(tags=["books"])


@router.get("", response_model=list[BookResponse])
async def list_books(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    author: str | None = Query(None, max_length=200),
    db: AsyncSession = Depends(get_db),
):
    query = select(Book).order_by(Book.title)
    if author:
        query = query.where(Book.author == author)
    result = await db.execute(query.limit(limit).offset(offset))
    return result.scalars().all()


@router.get("/{book_id}", response_model=BookResponse)
async def get_book(book_id: UUID, db: AsyncSession = Depends(get_db)):
    book = await db.get(Book, book_id)
    if book is None:
        raise ResourceNotFoundError("Book", str(book_id))
    return book
