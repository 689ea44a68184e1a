"""Schema endpoints."""

from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from galant.db.session import get_db
from galant.dependencies import get_current_active_user
from galant.models.schema import Schema
from galant.models.user import User
from galant.schemas.schema import (
    SchemaCreate,
    SchemaEventCreate,
    SchemaEventResponse,
    SchemaResponse,
    SchemaTableResponse,
    SchemaUpdate,
)
from galant.services.schema_service import SchemaService

router = APIRouter()


async def _get_schema_or_404(service: SchemaService, schema_id: UUID) -> Schema:
    schema = await service.get_schema(schema_id)
    if not schema:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Schema not found")
    return schema


def _require_owner(schema: Schema, user: User) -> None:
    if schema.contributor_id != user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to modify this schema"
        )


@router.post("", response_model=SchemaResponse, status_code=status.HTTP_201_CREATED)
async def create_schema(
    schema_data: SchemaCreate,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SchemaResponse:
    """
    Create a schema.

    - **event_count**: Number of event slots, fixed from now on
    - **events**: Optional initial events (index, category, value)
    """
    schema = await SchemaService(db).create_schema(
        contributor_id=current_user.id,
        name=schema_data.name,
        schema_type=schema_data.schema_type,
        event_count=schema_data.event_count,
        citation=schema_data.citation,
        active=schema_data.active,
        events=[(e.index, e.category.value, e.value) for e in schema_data.events],
    )
    return SchemaResponse.model_validate(schema)


@router.get("", response_model=list[SchemaResponse], status_code=status.HTTP_200_OK)
async def list_schemata(
    db: Annotated[AsyncSession, Depends(get_db)],
    active: Optional[bool] = Query(None, description="Filter by active flag"),
    limit: int = Query(50, ge=1, le=100, description="Page size"),
    offset: int = Query(0, ge=0, description="Page offset"),
) -> list[SchemaResponse]:
    """List schemata with their events."""
    schemata, _ = await SchemaService(db).list_schemata(active=active, limit=limit, offset=offset)
    return [SchemaResponse.model_validate(schema) for schema in schemata]


@router.get("/mine", response_model=list[SchemaResponse], status_code=status.HTTP_200_OK)
async def list_my_schemata(
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[SchemaResponse]:
    """List schemata created by the current user."""
    schemata, _ = await SchemaService(db).list_schemata(contributor_id=current_user.id, limit=100)
    return [SchemaResponse.model_validate(schema) for schema in schemata]


@router.get("/{schema_id}", response_model=SchemaResponse, status_code=status.HTTP_200_OK)
async def get_schema(
    schema_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SchemaResponse:
    """Get a schema with its events."""
    schema = await _get_schema_or_404(SchemaService(db), schema_id)
    return SchemaResponse.model_validate(schema)


@router.get("/{schema_id}/table", response_model=SchemaTableResponse, status_code=status.HTTP_200_OK)
async def get_schema_table(
    schema_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SchemaTableResponse:
    """Events as a grid: one row per category, one column per index, blanks for unset slots."""
    service = SchemaService(db)
    schema = await _get_schema_or_404(service, schema_id)
    return SchemaTableResponse(
        schema_id=schema.id,
        name=schema.name,
        event_count=schema.event_count,
        rows=service.event_table(schema),
    )


@router.put("/{schema_id}", response_model=SchemaResponse, status_code=status.HTTP_200_OK)
async def update_schema(
    schema_id: UUID,
    schema_data: SchemaUpdate,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SchemaResponse:
    """
    Update a schema's description.

    Returns 404 if schema not found, 403 if user didn't create it.
    """
    service = SchemaService(db)
    schema = await _get_schema_or_404(service, schema_id)
    _require_owner(schema, current_user)

    # Only the citation may be cleared
    changes = {
        field: value
        for field, value in schema_data.model_dump(exclude_unset=True).items()
        if value is not None or field == "citation"
    }
    schema = await service.update_schema(schema, changes)
    return SchemaResponse.model_validate(schema)


@router.post(
    "/{schema_id}/events", response_model=SchemaEventResponse, status_code=status.HTTP_201_CREATED
)
async def set_schema_event(
    schema_id: UUID,
    event_data: SchemaEventCreate,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SchemaEventResponse:
    """
    Set the value of one event slot, creating it if needed.

    Returns 422 if the index is outside the schema's event count.
    """
    service = SchemaService(db)
    schema = await _get_schema_or_404(service, schema_id)
    _require_owner(schema, current_user)

    event = await service.set_event(schema, event_data.index, event_data.category.value, event_data.value)
    return SchemaEventResponse.model_validate(event)


@router.delete("/{schema_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_schema(
    schema_id: UUID,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> None:
    """
    Delete a schema and its events.

    Returns 404 if schema not found, 403 if user didn't create it, 422 if
    pieces are annotated with it.
    """
    service = SchemaService(db)
    schema = await _get_schema_or_404(service, schema_id)
    _require_owner(schema, current_user)
    await service.delete_schema(schema)
