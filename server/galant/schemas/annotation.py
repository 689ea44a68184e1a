"""Persisted schema annotation schemas."""

from uuid import UUID

from pydantic import Field, model_validator

from galant.schemas.base import CamelModel
from galant.schemas.schema import SchemaEventResponse


class PlacementCreate(CamelModel):
    """One event pinned to a piece location."""

    event_id: UUID
    piece_location: str = Field(..., min_length=1, max_length=255)


class PlacementResponse(PlacementCreate):
    """Schema for placement response."""

    id: UUID


class SchemaAnnotationCreate(CamelModel):
    """Schema for creating one schema annotation with all its placements."""

    schema_id: UUID
    measure_start: int | None = Field(None, ge=1)
    measure_end: int | None = Field(None, ge=1)
    annotations: list[PlacementCreate] = Field(..., min_length=1)

    @model_validator(mode="after")
    def check_measure_range(self) -> "SchemaAnnotationCreate":
        if (
            self.measure_start is not None
            and self.measure_end is not None
            and self.measure_start > self.measure_end
        ):
            raise ValueError("measureStart must not be after measureEnd")
        return self


class SchemaAnnotationResponse(CamelModel):
    """A schema annotation of a piece, with the schema's events."""

    id: UUID
    schema_id: UUID
    schema_name: str
    event_count: int
    schema_type: str
    contributor: str | None = None
    measure_start: int | None = None
    measure_end: int | None = None
    events: list[SchemaEventResponse]
    annotations: list[PlacementResponse]
