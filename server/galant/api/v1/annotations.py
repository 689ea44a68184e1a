"""Schema annotations of a piece."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from galant.db.session import get_db
from galant.dependencies import get_current_active_user
from galant.models.user import User
from galant.schemas.annotation import SchemaAnnotationCreate, SchemaAnnotationResponse
from galant.services.annotation_service import AnnotationService

router = APIRouter()


@router.get(
    "/{piece_id}/schema-annotations",
    response_model=list[SchemaAnnotationResponse],
    status_code=status.HTTP_200_OK,
)
async def list_schema_annotations(
    piece_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[SchemaAnnotationResponse]:
    """All schema annotations of a piece, each with its schema's events and placements."""
    service = AnnotationService(db)
    links = await service.list_for_piece(piece_id)
    return [SchemaAnnotationResponse.model_validate(service.to_response(link)) for link in links]


@router.post(
    "/{piece_id}/schema-annotations",
    response_model=SchemaAnnotationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_schema_annotation(
    piece_id: UUID,
    annotation_data: SchemaAnnotationCreate,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SchemaAnnotationResponse:
    """
    Annotate a piece with a schema in one atomic create.

    Returns 404 if the piece or schema is missing, 422 if a placement's event
    is not part of the schema or an event is placed twice.
    """
    service = AnnotationService(db)
    link = await service.create_link(
        piece_id=piece_id,
        schema_id=annotation_data.schema_id,
        contributor_id=current_user.id,
        placements=[(a.event_id, a.piece_location) for a in annotation_data.annotations],
        measure_start=annotation_data.measure_start,
        measure_end=annotation_data.measure_end,
    )
    return SchemaAnnotationResponse.model_validate(service.to_response(link))
