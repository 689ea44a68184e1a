"""Piece endpoints."""

from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from galant.db.session import get_db
from galant.dependencies import get_current_active_user
from galant.models.piece import Piece
from galant.models.user import User
from galant.schemas.piece import PieceCreate, PieceListResponse, PieceResponse, PieceSummary, PieceUpdate
from galant.services.piece_service import PieceService

router = APIRouter()


async def _get_piece_or_404(service: PieceService, piece_id: UUID) -> Piece:
    piece = await service.get_piece(piece_id)
    if not piece:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Piece not found")
    return piece


def _page(pieces: list[Piece], total: int, limit: int, offset: int) -> PieceListResponse:
    return PieceListResponse(
        items=[PieceSummary.model_validate(piece) for piece in pieces],
        total=total,
        page=offset // limit + 1 if limit > 0 else 1,
        page_size=limit,
    )


@router.post("", response_model=PieceResponse, status_code=status.HTTP_201_CREATED)
async def create_piece(
    piece_data: PieceCreate,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> PieceResponse:
    """
    Upload a piece.

    - **title**, **composer**: Catalogue information
    - **score_format**: Symbolic format of the data (default MEI)
    - **score_data**: Raw symbolic score data
    """
    piece = await PieceService(db).create_piece(
        contributor_id=current_user.id,
        title=piece_data.title,
        composer=piece_data.composer,
        score_format=piece_data.score_format.value,
        score_data=piece_data.score_data,
    )
    return PieceResponse.model_validate(piece)


@router.get("", response_model=PieceListResponse, status_code=status.HTTP_200_OK)
async def list_pieces(
    db: Annotated[AsyncSession, Depends(get_db)],
    composer: Optional[str] = Query(None, description="Filter by composer"),
    limit: int = Query(50, ge=1, le=100, description="Page size"),
    offset: int = Query(0, ge=0, description="Page offset"),
) -> PieceListResponse:
    """List all pieces, without their score data."""
    pieces, total = await PieceService(db).list_pieces(composer=composer, limit=limit, offset=offset)
    return _page(pieces, total, limit, offset)


@router.get("/mine", response_model=PieceListResponse, status_code=status.HTTP_200_OK)
async def list_my_pieces(
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    limit: int = Query(50, ge=1, le=100, description="Page size"),
    offset: int = Query(0, ge=0, description="Page offset"),
) -> PieceListResponse:
    """List pieces uploaded by the current user."""
    pieces, total = await PieceService(db).list_pieces(
        contributor_id=current_user.id, limit=limit, offset=offset
    )
    return _page(pieces, total, limit, offset)


@router.get("/{piece_id}", response_model=PieceResponse, status_code=status.HTTP_200_OK)
async def get_piece(
    piece_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> PieceResponse:
    """
    Get a piece with its score data.

    Returns 404 if piece not found.
    """
    piece = await _get_piece_or_404(PieceService(db), piece_id)
    return PieceResponse.model_validate(piece)


@router.put("/{piece_id}", response_model=PieceResponse, status_code=status.HTTP_200_OK)
async def update_piece(
    piece_id: UUID,
    piece_data: PieceUpdate,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> PieceResponse:
    """
    Update a piece.

    Returns 404 if piece not found, 403 if user didn't upload it.
    """
    service = PieceService(db)
    piece = await _get_piece_or_404(service, piece_id)
    if piece.contributor_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to modify this piece"
        )

    piece = await service.update_piece(piece, piece_data.model_dump(exclude_none=True, mode="json"))
    return PieceResponse.model_validate(piece)


@router.delete("/{piece_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_piece(
    piece_id: UUID,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> None:
    """
    Delete a piece with its annotations and comments.

    Returns 404 if piece not found, 403 if user didn't upload it.
    """
    service = PieceService(db)
    piece = await _get_piece_or_404(service, piece_id)
    if piece.contributor_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to delete this piece"
        )

    await service.delete_piece(piece)
