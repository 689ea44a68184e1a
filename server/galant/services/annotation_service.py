"""Persisted schema annotations of pieces."""

from typing import Iterable, Sequence
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from galant.core.categories import EventCategory
from galant.core.errors import NotFoundError, ValidationFailure
from galant.models.annotation import EventPlacement, SchemaPiece
from galant.models.piece import Piece
from galant.models.schema import Schema
from galant.overlay.compositor import OverlayAnnotation
from galant.overlay.staging import TemporaryAnnotation

logger = structlog.get_logger(__name__)


class AnnotationService:
    """Service for schema-piece links and their event placements."""

    def __init__(self, db: AsyncSession) -> None:
        """Initialize annotation service with database session."""
        self.db = db

    def _link_query(self):
        return select(SchemaPiece).options(
            selectinload(SchemaPiece.schema).selectinload(Schema.events),
            selectinload(SchemaPiece.placements),
            selectinload(SchemaPiece.contributor),
        )

    async def get_link(self, link_id: UUID) -> SchemaPiece | None:
        result = await self.db.execute(
            self._link_query().where(SchemaPiece.id == link_id).execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_for_piece(self, piece_id: UUID) -> list[SchemaPiece]:
        """All schema annotations of a piece, oldest first."""
        result = await self.db.execute(
            self._link_query().where(SchemaPiece.piece_id == piece_id).order_by(SchemaPiece.created_at)
        )
        return list(result.scalars().all())

    async def create_link(
        self,
        piece_id: UUID,
        schema_id: UUID,
        contributor_id: UUID | None,
        placements: Sequence[tuple[UUID, str]],
        measure_start: int | None = None,
        measure_end: int | None = None,
    ) -> SchemaPiece:
        """
        Create a schema annotation with all its placements in one transaction.

        Args:
            placements: (event id, piece location) pairs in placement order

        Raises:
            NotFoundError: If the piece or schema does not exist
            ValidationFailure: If a placement does not fit the schema
        """
        piece = (await self.db.execute(select(Piece.id).where(Piece.id == piece_id))).scalar_one_or_none()
        if piece is None:
            raise NotFoundError("Piece not found")

        result = await self.db.execute(
            select(Schema).where(Schema.id == schema_id).options(selectinload(Schema.events))
        )
        schema = result.scalar_one_or_none()
        if schema is None:
            raise NotFoundError("Schema not found")

        if not placements:
            raise ValidationFailure("An annotation needs at least one placement")
        if measure_start is not None and measure_end is not None and measure_start > measure_end:
            raise ValidationFailure("Measure range is reversed")

        schema_events = {event.id for event in schema.events}
        placed: set[UUID] = set()
        for event_id, _ in placements:
            if event_id not in schema_events:
                raise ValidationFailure(f"Event {event_id} does not belong to schema {schema.name}")
            if event_id in placed:
                raise ValidationFailure(f"Event {event_id} is placed more than once")
            placed.add(event_id)

        link = SchemaPiece(
            schema_id=schema_id,
            piece_id=piece_id,
            contributor_id=contributor_id,
            measure_start=measure_start,
            measure_end=measure_end,
            placements=[
                EventPlacement(event_id=event_id, piece_location=location, position=position)
                for position, (event_id, location) in enumerate(placements)
            ],
        )
        self.db.add(link)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise ValidationFailure("Annotation conflicts with existing data") from e

        logger.info(
            "Created schema annotation",
            link_id=str(link.id),
            piece_id=str(piece_id),
            schema_id=str(schema_id),
            placements=len(placements),
        )
        return await self.get_link(link.id)

    @staticmethod
    def to_response(link: SchemaPiece) -> dict:
        """Shape of one entry of a piece's annotation listing."""
        contributor = None
        if link.contributor is not None:
            contributor = link.contributor.name or link.contributor.email
        return {
            "id": link.id,
            "schema_id": link.schema_id,
            "schema_name": link.schema.name,
            "event_count": link.schema.event_count,
            "schema_type": link.schema.schema_type,
            "contributor": contributor,
            "measure_start": link.measure_start,
            "measure_end": link.measure_end,
            "events": [
                {"id": e.id, "index": e.index, "category": e.category, "value": e.value}
                for e in link.schema.events
            ],
            "annotations": [
                {"id": p.id, "event_id": p.event_id, "piece_location": p.piece_location}
                for p in link.placements
            ],
        }

    @staticmethod
    def overlay_annotations(links: Iterable[SchemaPiece]) -> list[OverlayAnnotation]:
        """Markers for persisted placements, grouped by their schema."""
        annotations = []
        for link in links:
            events = {event.id: event for event in link.schema.events}
            for placement in link.placements:
                event = events.get(placement.event_id)
                if event is None:
                    continue
                annotations.append(
                    OverlayAnnotation(
                        element_id=placement.piece_location,
                        category=EventCategory(event.category),
                        value=event.value,
                        group_key=str(link.schema_id),
                        group_label=link.schema.name,
                    )
                )
        return annotations


class PieceAnnotationGateway:
    """Submits a score session's staged placements as an annotation of its piece."""

    def __init__(self, service: AnnotationService, piece_id: UUID, contributor_id: UUID | None) -> None:
        self.service = service
        self.piece_id = piece_id
        self.contributor_id = contributor_id

    async def create_link(
        self,
        schema_id: UUID,
        measure_start: int,
        measure_end: int,
        placements: Sequence[TemporaryAnnotation],
    ) -> SchemaPiece:
        return await self.service.create_link(
            piece_id=self.piece_id,
            schema_id=schema_id,
            contributor_id=self.contributor_id,
            placements=[(p.event.id, p.piece_location) for p in placements],
            measure_start=measure_start,
            measure_end=measure_end,
        )
