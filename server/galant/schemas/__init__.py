"""Pydantic schemas for request/response validation."""

from galant.schemas.user import UserResponse, UserUpdate
from galant.schemas.piece import PieceCreate, PieceListResponse, PieceResponse, PieceSummary, PieceUpdate
from galant.schemas.schema import (
    SchemaCreate,
    SchemaEventCreate,
    SchemaEventResponse,
    SchemaResponse,
    SchemaTableResponse,
    SchemaUpdate,
)
from galant.schemas.annotation import PlacementCreate, SchemaAnnotationCreate, SchemaAnnotationResponse
from galant.schemas.comment import CommentCreate, CommentResponse
from galant.schemas.music_source import MusicSourceCreate, MusicSourceResponse

__all__ = [
    "UserResponse",
    "UserUpdate",
    "PieceCreate",
    "PieceListResponse",
    "PieceResponse",
    "PieceSummary",
    "PieceUpdate",
    "SchemaCreate",
    "SchemaEventCreate",
    "SchemaEventResponse",
    "SchemaResponse",
    "SchemaTableResponse",
    "SchemaUpdate",
    "PlacementCreate",
    "SchemaAnnotationCreate",
    "SchemaAnnotationResponse",
    "CommentCreate",
    "CommentResponse",
    "MusicSourceCreate",
    "MusicSourceResponse",
]
