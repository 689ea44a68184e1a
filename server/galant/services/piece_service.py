"""Piece service for uploaded scores."""

from typing import Any
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from galant.models.piece import Piece


class PieceService:
    """Service for piece management operations."""

    def __init__(self, db: AsyncSession) -> None:
        """Initialize piece service with database session."""
        self.db = db

    async def create_piece(
        self,
        contributor_id: UUID,
        title: str,
        composer: str,
        score_format: str,
        score_data: str,
    ) -> Piece:
        piece = Piece(
            title=title,
            composer=composer,
            score_format=score_format,
            score_data=score_data,
            contributor_id=contributor_id,
        )
        self.db.add(piece)
        await self.db.commit()
        await self.db.refresh(piece)
        return piece

    async def get_piece(self, piece_id: UUID) -> Piece | None:
        """Get piece by ID."""
        result = await self.db.execute(select(Piece).where(Piece.id == piece_id))
        return result.scalar_one_or_none()

    async def list_pieces(
        self,
        contributor_id: UUID | None = None,
        composer: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[Piece], int]:
        """
        List pieces with filtering and pagination.

        Returns:
            Tuple of (pieces list, total count)
        """
        query = select(Piece)
        if contributor_id:
            query = query.where(Piece.contributor_id == contributor_id)
        if composer:
            query = query.where(Piece.composer == composer)

        count_query = select(func.count()).select_from(query.subquery())
        total = (await self.db.execute(count_query)).scalar_one()

        query = query.order_by(Piece.composer, Piece.title).limit(limit).offset(offset)
        result = await self.db.execute(query)
        return list(result.scalars().all()), total

    async def update_piece(self, piece: Piece, changes: dict[str, Any]) -> Piece:
        for field, value in changes.items():
            setattr(piece, field, value)
        await self.db.commit()
        await self.db.refresh(piece)
        return piece

    async def delete_piece(self, piece: Piece) -> None:
        """Delete a piece with its annotations and comments."""
        await self.db.delete(piece)
        await self.db.commit()
