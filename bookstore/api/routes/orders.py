"""Order Routes - placement and the caller's order history.

Invariants:
    - Mounted behind is_authenticated (compose.py); handlers assume a principal
    - orderPlaced is published only after the order row is committed
    - The handler neither knows nor waits for orderPlaced subscribers
    - A user only ever sees their own orders here (admin sees all via /admin)
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.api.dependencies import current_user_id, get_event_bus
from bookstore.core.domain_types import EventName, OrderStatus
from bookstore.core.errors import ResourceNotFoundError
from bookstore.core.repository_protocols import EventPublisher
from bookstore.infrastructure.database import get_db
from bookstore.models.book import Book
from bookstore.models.order import Order
from bookstore.schemas.order import OrderCreate, OrderResponse

logger = logging.getLogger(__name__)
router = APIRouter(tags=["orders"])


@router.post(
    "", response_model=OrderResponse, status_code=status.HTTP_201_CREATED,
)
async def place_order(
    body: OrderCreate,
    user_id: UUID = Depends(current_user_id),
    db: AsyncSession = Depends(get_db),
    bus: EventPublisher = Depends(get_event_bus),
):
    book_ids = [item.book_id for item in body.items]
    result = await db.execute(select(Book).where(Book.id.in_(book_ids)))
    books = {book.id: book for book in result.scalars().all()}
    for book_id in book_ids:
        if book_id not in books:
            raise ResourceNotFoundError("Book", str(book_id))

    items = [
        {
            "book_id": str(item.book_id),
            "title": books[item.book_id].title,
            "quantity": item.quantity,
            "unit_price_cents": books[item.book_id].price_cents,
        }
        for item in body.items
    ]
    order = Order(
        user_id=user_id,
        items=items,
        total_cents=sum(i["quantity"] * i["unit_price_cents"] for i in items),
        shipping_address=body.shipping_address,
        status=OrderStatus.PLACED.value,
    )
    db.add(order)
    await db.commit()

    bus.publish(EventName.ORDER_PLACED, order.to_event_payload())
    logger.info("order_placed", extra={"order_id": str(order.id)})
    return order


@router.get("", response_model=list[OrderResponse])
async def list_my_orders(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user_id: UUID = Depends(current_user_id),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(Order)
        .where(Order.user_id == user_id)
        .order_by(Order.created_at.desc())
        .limit(limit)
        .offset(offset),
    )
    return result.scalars().all()


@router.get("/{order_id}", response_model=OrderResponse)
async def get_my_order(
    order_id: UUID,
    user_id: UUID = Depends(current_user_id),
    db: AsyncSession = Depends(get_db),
):
    order = await db.get(Order, order_id)
    if order is None or order.user_id != user_id:
        raise ResourceNotFoundError("Order", str(order_id))
    return order
