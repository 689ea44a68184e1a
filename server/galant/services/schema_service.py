"""Schema service for annotation templates and their events."""

from typing import Any, Iterable
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from galant.core.categories import EventCategory
from galant.core.errors import ValidationFailure
from galant.core.event_table import build_event_table
from galant.models.annotation import SchemaPiece
from galant.models.schema import Schema, SchemaEvent
from galant.overlay.session import SelectedSchema
from galant.overlay.staging import SchemaEventRef


class SchemaService:
    """Service for schema management operations."""

    def __init__(self, db: AsyncSession) -> None:
        """Initialize schema service with database session."""
        self.db = db

    async def create_schema(
        self,
        contributor_id: UUID,
        name: str,
        schema_type: str,
        event_count: int,
        citation: str | None = None,
        active: bool = False,
        events: Iterable[tuple[int, str, str]] = (),
    ) -> Schema:
        """
        Create a schema with its initial events.

        Args:
            events: (index, category, value) triples

        Raises:
            ValidationFailure: If an event falls outside the schema
        """
        if event_count <= 0:
            raise ValidationFailure("Event count must be positive")

        schema = Schema(
            name=name,
            citation=citation,
            schema_type=schema_type,
            event_count=event_count,
            active=active,
            contributor_id=contributor_id,
        )
        seen = set()
        for index, category, value in events:
            self._check_slot(schema, index, category)
            if (index, category) in seen:
                raise ValidationFailure(f"Duplicate event {category}[{index}]")
            seen.add((index, category))
            schema.events.append(SchemaEvent(index=index, category=EventCategory(category).value, value=value))

        self.db.add(schema)
        await self.db.commit()
        return await self.get_schema(schema.id)

    async def get_schema(self, schema_id: UUID) -> Schema | None:
        """Get schema by ID with its events loaded."""
        result = await self.db.execute(
            select(Schema)
            .where(Schema.id == schema_id)
            .options(selectinload(Schema.events))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_schemata(
        self,
        contributor_id: UUID | None = None,
        active: bool | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[Schema], int]:
        """
        List schemata with filtering and pagination.

        Returns:
            Tuple of (schemata list, total count)
        """
        query = select(Schema)
        if contributor_id:
            query = query.where(Schema.contributor_id == contributor_id)
        if active is not None:
            query = query.where(Schema.active == active)

        count_query = select(func.count()).select_from(query.subquery())
        total = (await self.db.execute(count_query)).scalar_one()

        query = query.options(selectinload(Schema.events)).order_by(Schema.name).limit(limit).offset(offset)
        result = await self.db.execute(query)
        return list(result.scalars().all()), total

    async def update_schema(self, schema: Schema, changes: dict[str, Any]) -> Schema:
        for field, value in changes.items():
            setattr(schema, field, value)
        await self.db.commit()
        return await self.get_schema(schema.id)

    async def delete_schema(self, schema: Schema) -> None:
        """
        Delete a schema and its events.

        Raises:
            ValidationFailure: If pieces are annotated with it
        """
        links = await self.db.execute(
            select(func.count()).select_from(SchemaPiece).where(SchemaPiece.schema_id == schema.id)
        )
        if links.scalar_one():
            raise ValidationFailure("Schema is used by annotations")
        await self.db.delete(schema)
        await self.db.commit()

    async def set_event(self, schema: Schema, index: int, category: str, value: str) -> SchemaEvent:
        """
        Create or overwrite the event in one slot.

        Raises:
            ValidationFailure: If the index is outside the schema's event count
        """
        self._check_slot(schema, index, category)
        category = EventCategory(category).value
        for event in schema.events:
            if event.index == index and event.category == category:
                event.value = value
                break
        else:
            event = SchemaEvent(schema_id=schema.id, index=index, category=category, value=value)
            schema.events.append(event)
        await self.db.commit()
        await self.db.refresh(event)
        return event

    @staticmethod
    def _check_slot(schema: Schema, index: int, category: str) -> None:
        if not 0 <= index < schema.event_count:
            raise ValidationFailure(f"Event index {index} outside 0..{schema.event_count - 1}")
        try:
            EventCategory(category)
        except ValueError as e:
            raise ValidationFailure(f"Unknown event category: {category}") from e

    @staticmethod
    def event_table(schema: Schema) -> dict[str, list[str]]:
        return build_event_table(schema.event_count, schema.events)

    @staticmethod
    def to_selection(schema: Schema) -> SelectedSchema:
        """Snapshot of a schema for placing its events in a score session."""
        return SelectedSchema(
            id=schema.id,
            name=schema.name,
            events=tuple(
                SchemaEventRef(
                    id=event.id,
                    index=event.index,
                    category=EventCategory(event.category),
                    value=event.value,
                )
                for event in schema.events
            ),
        )
