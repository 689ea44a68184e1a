"""Score session schemas."""

from enum import Enum
from uuid import UUID

from pydantic import Field, model_validator

from galant.core.categories import EventCategory
from galant.schemas.base import CamelModel


class SessionCreate(CamelModel):
    """Schema for opening a score view on a piece."""

    piece_id: UUID
    wait: bool = Field(True, description="Wait for the score to load before responding")


class SessionResponse(CamelModel):
    """State of one score view."""

    id: str
    piece_id: UUID | None
    status: str
    page: int
    page_count: int
    schema_id: UUID | None = None
    highlighted: str | None = None
    selected: str | None = None
    pending_count: int = 0
    error: str | None = None


class PageRequest(CamelModel):
    page: int


class MeasureJump(CamelModel):
    measure: int


class PointerAction(str, Enum):
    """Pointer input forwarded by the client."""

    MOVE = "move"
    RELEASE = "release"
    LEAVE = "leave"


class PointerEvent(CamelModel):
    """Pointer position in the page's SVG user units."""

    action: PointerAction
    x: float | None = None
    y: float | None = None
    event_id: UUID | None = Field(None, description="Schema event being dragged")

    @model_validator(mode="after")
    def check_position(self) -> "PointerEvent":
        if self.action == PointerAction.MOVE and (self.x is None or self.y is None):
            raise ValueError("move needs x and y")
        if (self.x is None) != (self.y is None):
            raise ValueError("x and y go together")
        return self


class ClickRequest(CamelModel):
    element_id: str | None = None
    x: float | None = None
    y: float | None = None

    @model_validator(mode="after")
    def check_target(self) -> "ClickRequest":
        if self.element_id is None and (self.x is None or self.y is None):
            raise ValueError("click needs an elementId or x and y")
        return self


class Bounds(CamelModel):
    x: float
    y: float
    width: float = Field(..., ge=0)
    height: float = Field(..., ge=0)


class BoundsUpdate(CamelModel):
    """Element bounds measured by the client, keyed by element id."""

    bounds: dict[str, Bounds]


class SchemaSelection(CamelModel):
    schema_id: UUID | None = None


class PendingAnnotationCreate(CamelModel):
    """
    Stage an event.

    With an element id the event is placed on that note; without one the
    event toggles on the clicked note.
    """

    event_id: UUID
    element_id: str | None = None


class PendingAnnotationResponse(CamelModel):
    local_id: str
    event_id: UUID
    index: int
    category: EventCategory
    value: str
    piece_location: str
    measure: int


class PendingListResponse(CamelModel):
    items: list[PendingAnnotationResponse]
    measure_start: int | None = None
    measure_end: int | None = None


class DropResponse(CamelModel):
    element_id: str
    measure: int


class PointerResponse(CamelModel):
    phase: str
    highlighted: str | None = None
    drop: DropResponse | None = None
    pending: PendingAnnotationResponse | None = None


class ClickResponse(CamelModel):
    selected: str | None = None
