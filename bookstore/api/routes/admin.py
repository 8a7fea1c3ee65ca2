"""Admin Routes - catalog management and order oversight.

Invariants:
    - Mounted behind is_admin (compose.py); no handler re-checks the role
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.core.domain_types import OrderStatus
from bookstore.core.errors import ResourceNotFoundError
from bookstore.infrastructure.database import get_db
from bookstore.models.book import Book
from bookstore.models.order import Order
from bookstore.models.user import User
from bookstore.schemas.auth import UserResponse
from bookstore.schemas.book import BookCreate, BookResponse
from bookstore.schemas.order import OrderResponse, OrderStatusUpdate

logger = logging.getLogger(__name__)
router = APIRouter(tags=["admin"])


@router.get("/users", response_model=list[UserResponse])
async def list_users(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(User).order_by(User.created_at).limit(limit).offset(offset),
    )
    return result.scalars().all()


@router.get("/orders", response_model=list[OrderResponse])
async def list_orders(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    status_filter: OrderStatus | None = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
):
    query = select(Order).order_by(Order.created_at.desc())
    if status_filter is not None:
        query = query.where(Order.status == status_filter.value)
    result = await db.execute(query.limit(limit).offset(offset))
    return result.scalars().all()


@router.patch("/orders/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: UUID,
    body: OrderStatusUpdate,
    db: AsyncSession = Depends(get_db),
):
    order = await db.get(Order, order_id)
    if order is None:
        raise ResourceNotFoundError("Order", str(order_id))
    order.status = body.status.value
    await db.commit()
    logger.info(
        f"Order status set to {order.status}", extra={"order_id": str(order_id)},
    )
    return order


@router.post(
    "/books", response_model=BookResponse, status_code=status.HTTP_201_CREATED,
)
async def create_book(body: BookCreate, db: AsyncSession = Depends(get_db)):
    book = Book(**body.model_dump())
    db.add(book)
    await db.commit()
    return book
