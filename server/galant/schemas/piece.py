"""Piece schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from galant.models.piece import ScoreFormat


class PieceBase(BaseModel):
    """Base piece schema."""

    title: str = Field(..., min_length=1, max_length=255)
    composer: str = Field(..., min_length=1, max_length=255)
    score_format: ScoreFormat = ScoreFormat.MEI


class PieceCreate(PieceBase):
    """Schema for uploading a piece."""

    score_data: str = Field(..., min_length=1, description="Raw symbolic score data")


class PieceUpdate(BaseModel):
    """Schema for updating a piece."""

    title: str | None = Field(None, min_length=1, max_length=255)
    composer: str | None = Field(None, min_length=1, max_length=255)
    score_format: ScoreFormat | None = None
    score_data: str | None = Field(None, min_length=1)


class PieceSummary(PieceBase):
    """Piece without its score data, for listings."""

    id: UUID
    contributor_id: UUID | None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PieceResponse(PieceSummary):
    """Schema for piece response."""

    score_data: str


class PieceListResponse(BaseModel):
    """Schema for paginated piece list response."""

    items: list[PieceSummary]
    total: int
    page: int
    page_size: int
