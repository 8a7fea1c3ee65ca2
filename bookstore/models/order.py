"""Order ORM - a placed order and its line items.

Invariants:
    - user_id references users.id
    - items is a JSON array of {book_id, title, quantity, unit_price_cents}
    - total_cents is computed once at placement and never recomputed
    - status transitions are owned by admin routes (placed -> shipped -> delivered | cancelled)

Design Decisions:
    - JSON column for items: line items are read back whole, never queried by field
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from bookstore.core.domain_types import OrderStatus
from bookstore.db.base import Base


class Order(Base):
    __tablename__ = "orders"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    items: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    total_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    shipping_address: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=OrderStatus.PLACED.value,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def to_event_payload(self) -> dict:
        """Plain dict shape published with orderPlaced (in-process subscribers only)."""
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "items": self.items,
            "total_cents": self.total_cents,
            "shipping_address": self.shipping_address,
            "status": self.status,
            "created_at": self.created_at.isoformat(),
        }
