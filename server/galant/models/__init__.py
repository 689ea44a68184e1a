"""SQLAlchemy models."""

from galant.models.user import User
from galant.models.piece import Piece, ScoreFormat
from galant.models.schema import Schema, SchemaEvent
from galant.models.annotation import SchemaPiece, EventPlacement
from galant.models.comment import Comment, CommentType
from galant.models.music_source import MusicSource

__all__ = [
    "User",
    "Piece",
    "ScoreFormat",
    "Schema",
    "SchemaEvent",
    "SchemaPiece",
    "EventPlacement",
    "Comment",
    "CommentType",
    "MusicSource",
]
