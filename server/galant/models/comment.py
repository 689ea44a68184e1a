"""Free-text comments attached to selected score elements."""

import uuid
from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import Column, DateTime, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from galant.db.base import Base
from galant.db.types import JSONList


class CommentType(PyEnum):
    """Comment type enumeration."""

    TEXT = "text"
    LINK = "link"


class Comment(Base):
    """A contributor's remark on a set of score elements."""

    __tablename__ = "comments"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    piece_id = Column(UUID(as_uuid=True), ForeignKey("pieces.id"), nullable=False, index=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    comment_type = Column(String(10), default=CommentType.TEXT.value, nullable=False)
    content = Column(Text, nullable=False)
    uri = Column(String(2048), nullable=True)
    element_ids = Column(JSONList, default=list, nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    piece = relationship("Piece", back_populates="comments")
    user = relationship("User")

    def __repr__(self) -> str:
        return f"<Comment(id={self.id}, piece_id={self.piece_id}, type={self.comment_type})>"
