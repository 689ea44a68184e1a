"""Catalogue of score collections."""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from galant.core.errors import ValidationFailure
from galant.models.music_source import MusicSource


class MusicSourceService:
    """Service for music sources."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def list_sources(self, active: bool | None = None) -> list[MusicSource]:
        query = select(MusicSource)
        if active is not None:
            query = query.where(MusicSource.active == active)
        result = await self.db.execute(query.order_by(MusicSource.name))
        return list(result.scalars().all())

    async def create_source(self, **fields) -> MusicSource:
        """
        Register a collection.

        Raises:
            ValidationFailure: If the name is taken
        """
        source = MusicSource(**fields)
        self.db.add(source)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise ValidationFailure(f"Music source {fields.get('name')!r} already exists") from e
        await self.db.refresh(source)
        return source
