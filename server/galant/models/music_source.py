"""External collections pieces can be imported from."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, String, Text
from sqlalchemy.dialects.postgresql import UUID

from galant.db.base import Base


class MusicSource(Base):
    """A catalogued score collection."""

    __tablename__ = "music_sources"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    name = Column(String(255), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    base_url = Column(String(2048), nullable=False)
    index_file = Column(String(512), nullable=True)
    composer = Column(String(255), nullable=False)
    score_format = Column(String(20), nullable=False)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<MusicSource(id={self.id}, name={self.name})>"
