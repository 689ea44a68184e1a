"""Music source endpoints."""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from galant.db.session import get_db
from galant.dependencies import get_current_active_user
from galant.models.user import User
from galant.schemas.music_source import MusicSourceCreate, MusicSourceResponse
from galant.services.music_source_service import MusicSourceService

router = APIRouter()


@router.get("", response_model=list[MusicSourceResponse], status_code=status.HTTP_200_OK)
async def list_music_sources(
    db: Annotated[AsyncSession, Depends(get_db)],
    active: Optional[bool] = Query(None, description="Filter by active flag"),
) -> list[MusicSourceResponse]:
    """List catalogued score collections."""
    sources = await MusicSourceService(db).list_sources(active=active)
    return [MusicSourceResponse.model_validate(source) for source in sources]


@router.post("", response_model=MusicSourceResponse, status_code=status.HTTP_201_CREATED)
async def create_music_source(
    source_data: MusicSourceCreate,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MusicSourceResponse:
    """Register a score collection; names are unique."""
    source = await MusicSourceService(db).create_source(**source_data.model_dump(mode="json"))
    return MusicSourceResponse.model_validate(source)
