"""Galant schema and schema event models."""

import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from galant.db.base import Base


class Schema(Base):
    """A named annotation template with a fixed number of event slots."""

    __tablename__ = "schemata"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    name = Column(String(255), nullable=False, index=True)
    citation = Column(Text, nullable=True)
    schema_type = Column(String(50), nullable=False)
    event_count = Column(Integer, nullable=False)
    active = Column(Boolean, default=False, nullable=False, index=True)
    contributor_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    __table_args__ = (CheckConstraint("event_count > 0", name="ck_schemata_event_count"),)

    # Relationships
    contributor = relationship("User")
    events = relationship(
        "SchemaEvent",
        back_populates="schema",
        cascade="all, delete-orphan",
        order_by="SchemaEvent.index",
    )

    def __repr__(self) -> str:
        return f"<Schema(id={self.id}, name={self.name}, event_count={self.event_count})>"


class SchemaEvent(Base):
    """One indexed, typed slot of a schema."""

    __tablename__ = "schema_events"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    schema_id = Column(UUID(as_uuid=True), ForeignKey("schemata.id"), nullable=False, index=True)
    index = Column(Integer, nullable=False)
    category = Column(String(20), nullable=False)
    value = Column(String(50), nullable=False, default="")

    __table_args__ = (
        UniqueConstraint("schema_id", "category", "index", name="uq_schema_events_slot"),
    )

    schema = relationship("Schema", back_populates="events")

    def __repr__(self) -> str:
        return f"<SchemaEvent(schema_id={self.schema_id}, {self.category}[{self.index}]={self.value!r})>"
