"""Pydantic schemas for blog endpoints."""

from datetime import datetime

from pydantic import BaseModel


class BlogResponse(BaseModel):
    id: int
    title: str
    description: str
    thumbnail: str | None
    owner_id: int | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
