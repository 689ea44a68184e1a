"""Comments on score elements of a piece."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from galant.db.session import get_db
from galant.dependencies import get_current_active_user
from galant.models.user import User
from galant.schemas.comment import CommentCreate, CommentResponse
from galant.services.comment_service import CommentService
from galant.services.piece_service import PieceService

router = APIRouter()


@router.get("/{piece_id}/comments", response_model=list[CommentResponse], status_code=status.HTTP_200_OK)
async def list_comments(
    piece_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[CommentResponse]:
    """List comments on a piece, oldest first."""
    comments = await CommentService(db).list_for_piece(piece_id)
    return [CommentResponse.model_validate(comment) for comment in comments]


@router.post("/{piece_id}/comments", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def create_comment(
    piece_id: UUID,
    comment_data: CommentCreate,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> CommentResponse:
    """
    Comment on selected score elements.

    - **element_ids**: Ids of the selected notes
    - **comment_type**: `text`, or `link` with a **uri**
    """
    if not await PieceService(db).get_piece(piece_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Piece not found")

    comment = await CommentService(db).create_comment(
        piece_id=piece_id,
        user_id=current_user.id,
        comment_type=comment_data.comment_type.value,
        content=comment_data.content,
        element_ids=comment_data.element_ids,
        uri=comment_data.uri,
    )
    return CommentResponse.model_validate(comment)
