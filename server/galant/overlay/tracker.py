"""Turn pointer input over a rendered page into score element ids."""

from dataclasses import dataclass
from typing import Callable

import structlog

from galant.config import settings
from galant.core.errors import ElementNotFound
from galant.core.state_machine import GesturePhase, validate_transition
from galant.overlay.geometry import NotePositionCache, Point
from galant.overlay.render_adapter import ScoreRenderAdapter
from galant.overlay.svg import ScorePage

logger = structlog.get_logger(__name__)

DEFAULT_MEASURE = 1


@dataclass(frozen=True)
class Drop:
    """A completed drag: the note it landed on and that note's measure."""

    element_id: str
    measure: int


class MeasureResolver:
    """
    Derive the 1-based measure number of a note.

    Walks from the note to its enclosing measure container and asks the engine
    for the measure's original ``n`` attribute. Any failure falls back to
    measure 1, or raises ElementNotFound when ``strict`` is set.
    """

    def __init__(self, adapter: ScoreRenderAdapter, strict: bool | None = None) -> None:
        self.adapter = adapter
        self.strict = settings.REJECT_UNRESOLVED_MEASURES if strict is None else strict

    def resolve(self, page: ScorePage, note_id: str) -> int:
        measure_id = page.enclosing_id(note_id, settings.MEASURE_CLASS)
        if measure_id is None:
            return self._fallback(note_id, "no enclosing measure")

        label = self.adapter.attribute_of(measure_id, settings.MEASURE_NUMBER_ATTRIBUTE)
        if label is None:
            return self._fallback(note_id, f"measure {measure_id} has no number")

        try:
            number = int(label)
        except ValueError:
            return self._fallback(note_id, f"measure {measure_id} number {label!r} is not an integer")
        if number < 1:
            return self._fallback(note_id, f"measure {measure_id} number {number} out of range")
        return number

    def _fallback(self, note_id: str, reason: str) -> int:
        if self.strict:
            raise ElementNotFound(note_id, f"Cannot resolve measure for {note_id}: {reason}")
        logger.warning("Measure resolution failed, using default", note_id=note_id, reason=reason)
        return DEFAULT_MEASURE


class DragTracker:
    """
    Pointer drag gesture: ``Idle -> Dragging(id) -> Dropped | Cancelled``.

    Each move re-resolves the nearest candidate. With no candidates a move
    resolves nothing and the phase does not change.
    """

    def __init__(self, positions: NotePositionCache, measure_of: Callable[[str], int]) -> None:
        self.positions = positions
        self.measure_of = measure_of
        self.phase = GesturePhase.IDLE
        self.candidate_id: str | None = None
        self.last_drop: Drop | None = None

    def _transition(self, next_phase: GesturePhase) -> None:
        is_valid, error = validate_transition(self.phase.value, next_phase.value)
        if not is_valid:
            raise ValueError(error)
        self.phase = next_phase

    def move(self, point: Point) -> str | None:
        """Pointer moved over the page; returns the highlighted candidate."""
        element_id = self.positions.nearest(point)
        if element_id is None:
            return self.candidate_id if self.phase is GesturePhase.DRAGGING else None
        self._transition(GesturePhase.DRAGGING)
        self.candidate_id = element_id
        return element_id

    def release(self, point: Point | None = None) -> Drop | None:
        """Pointer released; completes the gesture when dragging."""
        if point is not None:
            self.move(point)
        if self.phase is not GesturePhase.DRAGGING or self.candidate_id is None:
            return None
        drop = Drop(self.candidate_id, self.measure_of(self.candidate_id))
        self._transition(GesturePhase.DROPPED)
        self.last_drop = drop
        self.candidate_id = None
        logger.debug("Drop resolved", element_id=drop.element_id, measure=drop.measure)
        return drop

    def leave(self) -> None:
        """Pointer left the tracking surface without a drop."""
        if self.phase is GesturePhase.DRAGGING:
            self._transition(GesturePhase.CANCELLED)
            self.candidate_id = None

    def reset(self) -> None:
        if self.phase in (GesturePhase.DROPPED, GesturePhase.CANCELLED):
            self._transition(GesturePhase.IDLE)
        elif self.phase is GesturePhase.DRAGGING:
            self._transition(GesturePhase.CANCELLED)
            self._transition(GesturePhase.IDLE)
        self.candidate_id = None

    @property
    def highlighted(self) -> str | None:
        return self.candidate_id if self.phase is GesturePhase.DRAGGING else None


class ClickSelection:
    """Click toggle keyed by element identity: ``Unselected <-> Selected(id)``."""

    def __init__(self) -> None:
        self.selected_id: str | None = None

    def click(self, element_id: str) -> str | None:
        if self.selected_id == element_id:
            self.selected_id = None
        else:
            self.selected_id = element_id
        return self.selected_id

    def clear(self) -> None:
        self.selected_id = None
