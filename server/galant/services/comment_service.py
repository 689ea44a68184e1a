"""Comments on selected score elements."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from galant.models.comment import Comment


class CommentService:
    """Service for piece comments."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def list_for_piece(self, piece_id: UUID) -> list[Comment]:
        result = await self.db.execute(
            select(Comment).where(Comment.piece_id == piece_id).order_by(Comment.created_at)
        )
        return list(result.scalars().all())

    async def create_comment(
        self,
        piece_id: UUID,
        user_id: UUID,
        comment_type: str,
        content: str,
        element_ids: list[str],
        uri: str | None = None,
    ) -> Comment:
        comment = Comment(
            piece_id=piece_id,
            user_id=user_id,
            comment_type=comment_type,
            content=content,
            uri=uri,
            element_ids=element_ids,
        )
        self.db.add(comment)
        await self.db.commit()
        await self.db.refresh(comment)
        return comment
