"""Persisted schema annotations: schema-piece links and event placements."""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from galant.db.base import Base


class SchemaPiece(Base):
    """One annotation pass linking a schema to a piece."""

    __tablename__ = "schema_pieces"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    schema_id = Column(UUID(as_uuid=True), ForeignKey("schemata.id"), nullable=False, index=True)
    piece_id = Column(UUID(as_uuid=True), ForeignKey("pieces.id"), nullable=False, index=True)
    contributor_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True, index=True)
    measure_start = Column(Integer, nullable=True)
    measure_end = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    # Relationships
    schema = relationship("Schema")
    piece = relationship("Piece", back_populates="schema_links")
    contributor = relationship("User")
    placements = relationship(
        "EventPlacement",
        back_populates="link",
        cascade="all, delete-orphan",
        order_by="EventPlacement.position",
    )

    def __repr__(self) -> str:
        return f"<SchemaPiece(id={self.id}, schema_id={self.schema_id}, piece_id={self.piece_id})>"


class EventPlacement(Base):
    """A schema event pinned to a location inside the rendered piece."""

    __tablename__ = "event_placements"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    link_id = Column(UUID(as_uuid=True), ForeignKey("schema_pieces.id"), nullable=False, index=True)
    event_id = Column(UUID(as_uuid=True), ForeignKey("schema_events.id"), nullable=False, index=True)
    piece_location = Column(String(255), nullable=False)
    position = Column(Integer, nullable=False, default=0)

    link = relationship("SchemaPiece", back_populates="placements")
    event = relationship("SchemaEvent")

    def __repr__(self) -> str:
        return f"<EventPlacement(event_id={self.event_id}, location={self.piece_location})>"
