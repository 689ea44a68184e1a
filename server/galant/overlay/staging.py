"""Client-local staging of placements that have not been persisted yet."""

import uuid
from dataclasses import dataclass
from typing import Any, Protocol, Sequence

import structlog

from galant.core.categories import EventCategory
from galant.core.errors import EmptySubmission, PersistenceError, SubmissionRejected

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class SchemaEventRef:
    """Reference to one slot of a schema."""

    id: uuid.UUID
    index: int
    category: EventCategory
    value: str


@dataclass(frozen=True)
class TemporaryAnnotation:
    local_id: str
    event: SchemaEventRef
    piece_location: str
    measure: int

    @property
    def category(self) -> EventCategory:
        return self.event.category

    @property
    def value(self) -> str:
        return self.event.value


class AnnotationGateway(Protocol):
    """Persistence boundary for one atomic schema annotation create."""

    async def create_link(
        self,
        schema_id: uuid.UUID,
        measure_start: int,
        measure_end: int,
        placements: Sequence[TemporaryAnnotation],
    ) -> Any: ...


class TemporaryAnnotationSet:
    """
    Ordered set of staged placements.

    Duplicate placements of one event are allowed here; the persistence layer
    decides whether a submission is acceptable.
    """

    def __init__(self) -> None:
        self._items: list[TemporaryAnnotation] = []

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self):
        return iter(list(self._items))

    @property
    def items(self) -> list[TemporaryAnnotation]:
        return list(self._items)

    def add(self, event: SchemaEventRef, piece_location: str, measure: int) -> TemporaryAnnotation:
        annotation = TemporaryAnnotation(
            local_id=uuid.uuid4().hex,
            event=event,
            piece_location=piece_location,
            measure=measure,
        )
        self._items.append(annotation)
        return annotation

    def remove(self, local_id: str) -> bool:
        """Drop one entry; returns False when it was not staged."""
        for position, annotation in enumerate(self._items):
            if annotation.local_id == local_id:
                del self._items[position]
                return True
        return False

    def remove_by_event(self, event_id: uuid.UUID) -> int:
        """Drop every entry placing ``event_id``; returns how many went."""
        kept = [a for a in self._items if a.event.id != event_id]
        removed = len(self._items) - len(kept)
        self._items = kept
        return removed

    def has_event(self, event_id: uuid.UUID) -> bool:
        return any(a.event.id == event_id for a in self._items)

    def clear(self) -> None:
        self._items = []

    def measure_range(self) -> tuple[int, int] | None:
        if not self._items:
            return None
        measures = [a.measure for a in self._items]
        return min(measures), max(measures)

    async def submit(self, schema_id: uuid.UUID | None, gateway: AnnotationGateway) -> Any:
        """
        Persist the staged set as one schema annotation.

        The submitted entries leave the set only after the gateway succeeds;
        entries staged while the gateway runs stay staged.

        Raises:
            EmptySubmission: Nothing staged or no schema selected
            SubmissionRejected: The gateway refused the create
        """
        if schema_id is None:
            raise EmptySubmission("No schema selected")
        measure_range = self.measure_range()
        if measure_range is None:
            raise EmptySubmission("No annotations to submit")

        placements = self.items
        measure_start, measure_end = measure_range
        try:
            result = await gateway.create_link(schema_id, measure_start, measure_end, placements)
        except PersistenceError as e:
            logger.warning("Annotation submission rejected", schema_id=str(schema_id), error=str(e))
            raise SubmissionRejected(str(e)) from e

        logger.info(
            "Annotations submitted",
            schema_id=str(schema_id),
            count=len(placements),
            measure_start=measure_start,
            measure_end=measure_end,
        )
        self.discard(placements)
        return result

    def discard(self, annotations: Sequence[TemporaryAnnotation]) -> int:
        """Drop the given entries, keeping anything staged since they were read."""
        local_ids = {a.local_id for a in annotations}
        kept = [a for a in self._items if a.local_id not in local_ids]
        removed = len(self._items) - len(kept)
        self._items = kept
        return removed
