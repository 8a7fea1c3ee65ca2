"""Order Schemas - placement payload and order responses.

Invariants:
    - An order has 1-50 line items, each with quantity 1-100
    - Duplicate book_ids in one order are rejected
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from bookstore.core.domain_types import OrderStatus


class OrderItemRequest(BaseModel):
    book_id: UUID
    quantity: int = Field(ge=1, le=100)


class OrderCreate(BaseModel):
    items: list[OrderItemRequest] = Field(min_length=1, max_length=50)
    shipping_address: str = Field(min_length=5, max_length=1000)

    @field_validator("shipping_address")
    @classmethod
    def strip_address(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("shipping_address cannot be empty or whitespace")
        return v

    @model_validator(mode="after")
    def reject_duplicate_books(self):
        book_ids = [item.book_id for item in self.items]
        if len(book_ids) != len(set(book_ids)):
            raise ValueError("each book may appear only once per order")
        return self


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    items: list[dict]
    total_cents: int
    shipping_address: str
    status: str
    created_at: datetime


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
