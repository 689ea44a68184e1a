"""Galant schema schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from galant.core.categories import EventCategory


class SchemaEventBase(BaseModel):
    """One slot of a schema."""

    index: int = Field(..., ge=0)
    category: EventCategory
    value: str = Field("", max_length=50)


class SchemaEventCreate(SchemaEventBase):
    """Schema for setting a schema event."""

    pass


class SchemaEventResponse(SchemaEventBase):
    """Schema for schema event response."""

    id: UUID

    class Config:
        from_attributes = True


class SchemaBase(BaseModel):
    """Base schema fields."""

    name: str = Field(..., min_length=1, max_length=255)
    citation: str | None = None
    schema_type: str = Field(..., min_length=1, max_length=50)
    active: bool = False


class SchemaCreate(SchemaBase):
    """Schema for creating a schema with its events."""

    event_count: int = Field(..., gt=0, description="Number of event slots, fixed at creation")
    events: list[SchemaEventCreate] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_events(self) -> "SchemaCreate":
        seen = set()
        for event in self.events:
            if event.index >= self.event_count:
                raise ValueError(f"Event index {event.index} outside 0..{self.event_count - 1}")
            slot = (event.category, event.index)
            if slot in seen:
                raise ValueError(f"Duplicate event {event.category.value}[{event.index}]")
            seen.add(slot)
        return self


class SchemaUpdate(BaseModel):
    """Schema for updating a schema; the event count cannot change."""

    name: str | None = Field(None, min_length=1, max_length=255)
    citation: str | None = None
    schema_type: str | None = Field(None, min_length=1, max_length=50)
    active: bool | None = None


class SchemaResponse(SchemaBase):
    """Schema for schema response."""

    id: UUID
    event_count: int
    contributor_id: UUID | None
    created_at: datetime
    updated_at: datetime
    events: list[SchemaEventResponse]

    class Config:
        from_attributes = True


class SchemaTableResponse(BaseModel):
    """Events laid out as one row per category and one column per index."""

    schema_id: UUID
    name: str
    event_count: int
    rows: dict[str, list[str]]
