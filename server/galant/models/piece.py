"""Piece model."""

import uuid
from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import Column, DateTime, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from galant.db.base import Base


class ScoreFormat(PyEnum):
    """Symbolic score formats the render engine accepts."""

    MEI = "mei"
    MUSICXML = "musicxml"
    HUMDRUM = "humdrum"
    ABC = "abc"
    PAE = "pae"


class Piece(Base):
    """An uploaded score and its raw symbolic data."""

    __tablename__ = "pieces"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    title = Column(String(255), nullable=False, index=True)
    composer = Column(String(255), nullable=False, index=True)
    score_format = Column(String(20), default=ScoreFormat.MEI.value, nullable=False)
    score_data = Column(Text, nullable=False)
    contributor_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    # Relationships
    contributor = relationship("User")
    schema_links = relationship("SchemaPiece", back_populates="piece", cascade="all, delete-orphan")
    comments = relationship("Comment", back_populates="piece", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<Piece(id={self.id}, title={self.title}, composer={self.composer})>"
