"""Music source schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from galant.models.piece import ScoreFormat


class MusicSourceCreate(BaseModel):
    """Schema for registering a score collection."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    base_url: str = Field(..., min_length=1, max_length=2048)
    index_file: str | None = Field(None, max_length=512)
    composer: str = Field(..., min_length=1, max_length=255)
    score_format: ScoreFormat = ScoreFormat.MEI
    active: bool = True


class MusicSourceResponse(MusicSourceCreate):
    """Schema for music source response."""

    id: UUID
    created_at: datetime

    class Config:
        from_attributes = True
