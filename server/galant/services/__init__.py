"""Application services."""

from galant.services.annotation_service import AnnotationService, PieceAnnotationGateway
from galant.services.comment_service import CommentService
from galant.services.music_source_service import MusicSourceService
from galant.services.piece_service import PieceService
from galant.services.schema_service import SchemaService
from galant.services.user_service import UserService

__all__ = [
    "AnnotationService",
    "PieceAnnotationGateway",
    "CommentService",
    "MusicSourceService",
    "PieceService",
    "SchemaService",
    "UserService",
]
