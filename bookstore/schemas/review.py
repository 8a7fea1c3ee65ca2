"""Review Schemas - rating 1-5 plus optional comment."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ReviewCreate(BaseModel):
    book_id: UUID
    rating: int = Field(ge=1, le=5)
    comment: str | None = Field(None, max_length=5000)


class ReviewResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    book_id: UUID
    user_id: UUID
    rating: int
    comment: str | None = None
    created_at: datetime
