"""Score annotation overlay: rendering, pointer tracking, markers and staging."""

from galant.overlay.compositor import OverlayAnnotation, compose
from galant.overlay.geometry import Candidate, NotePositionCache, Point, Rect, nearest_element
from galant.overlay.render_adapter import ScoreRenderAdapter
from galant.overlay.session import ScoreSession, SelectedSchema, SessionRegistry
from galant.overlay.staging import SchemaEventRef, TemporaryAnnotation, TemporaryAnnotationSet
from galant.overlay.tracker import ClickSelection, DragTracker, Drop, MeasureResolver

__all__ = [
    "OverlayAnnotation",
    "compose",
    "Candidate",
    "NotePositionCache",
    "Point",
    "Rect",
    "nearest_element",
    "ScoreRenderAdapter",
    "ScoreSession",
    "SelectedSchema",
    "SessionRegistry",
    "SchemaEventRef",
    "TemporaryAnnotation",
    "TemporaryAnnotationSet",
    "ClickSelection",
    "DragTracker",
    "Drop",
    "MeasureResolver",
]
