"""Comment schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from galant.models.comment import CommentType


class CommentCreate(BaseModel):
    """Schema for commenting on selected score elements."""

    comment_type: CommentType = CommentType.TEXT
    content: str = Field(..., min_length=1)
    uri: str | None = Field(None, max_length=2048)
    element_ids: list[str] = Field(..., min_length=1)

    @model_validator(mode="after")
    def check_link(self) -> "CommentCreate":
        if self.comment_type == CommentType.LINK and not self.uri:
            raise ValueError("Link comments need a uri")
        return self


class CommentResponse(BaseModel):
    """Schema for comment response."""

    id: UUID
    piece_id: UUID
    user_id: UUID
    comment_type: CommentType
    content: str
    uri: str | None
    element_ids: list[str]
    created_at: datetime

    class Config:
        from_attributes = True
