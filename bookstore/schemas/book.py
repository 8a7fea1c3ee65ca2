"""Book Schemas - catalog payloads."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class BookCreate(BaseModel):
    title: str = Field(min_length=1, max_length=300)
    author: str = Field(min_length=1, max_length=200)
    description: str | None = Field(None, max_length=10_000)
    price_cents: int = Field(ge=0)


class BookResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    author: str
    description: str | None = None
    price_cents: int
