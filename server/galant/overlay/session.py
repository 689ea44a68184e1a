"""One open score view: render adapter, trackers and staged annotations."""

import asyncio
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

import structlog

from galant.config import settings
from galant.core.errors import (
    ElementNotFound,
    NavigationError,
    ScoreLoadError,
    ScoreNotReady,
    SelectionRequired,
)
from galant.overlay import compositor
from galant.overlay.compositor import OverlayAnnotation
from galant.overlay.engine import EngineFactory, RenderEngine
from galant.overlay.geometry import Candidate, NotePositionCache, Point, Rect
from galant.overlay.render_adapter import ScoreRenderAdapter
from galant.overlay.staging import AnnotationGateway, SchemaEventRef, TemporaryAnnotation, TemporaryAnnotationSet
from galant.overlay.tracker import ClickSelection, DragTracker, Drop, MeasureResolver

logger = structlog.get_logger(__name__)

PENDING_GROUP = "pending"


class SessionStatus:
    EMPTY = "empty"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class SelectedSchema:
    id: uuid.UUID
    name: str
    events: tuple[SchemaEventRef, ...] = field(default_factory=tuple)

    def event(self, event_id: uuid.UUID) -> SchemaEventRef | None:
        for event in self.events:
            if event.id == event_id:
                return event
        return None


class ScoreSession:
    """
    State of one score view.

    Loading runs the engine in a worker thread. Every other operation runs on
    the event loop and requires a loaded score.
    """

    def __init__(self, engine: RenderEngine, piece_id: uuid.UUID | None = None):
        self.id = uuid.uuid4().hex
        self.piece_id = piece_id
        self.adapter = ScoreRenderAdapter(engine)
        self.measures = MeasureResolver(self.adapter)
        self.positions = NotePositionCache()
        self.tracker = DragTracker(self.positions, self._measure_of)
        self.selection = ClickSelection()
        self.staged = TemporaryAnnotationSet()
        self.schema: SelectedSchema | None = None
        self.page = 1
        self.load_error: ScoreLoadError | None = None

        self._client_bounds: dict[str, Rect] = {}
        self._bounds_version = 0
        self._load_generation = 0
        self._loading = False
        self._engine_lock = asyncio.Lock()
        self._ready = asyncio.Event()

    # Loading

    @property
    def status(self) -> str:
        if self._loading:
            return SessionStatus.LOADING
        if self.load_error is not None:
            return SessionStatus.FAILED
        if self._ready.is_set():
            return SessionStatus.READY
        return SessionStatus.EMPTY

    @property
    def page_count(self) -> int:
        return self.adapter.page_count

    async def load(self, symbolic_data: str) -> int | None:
        """
        Load score data, superseding any load still in flight.

        Returns the page count, or None when a newer load superseded this one.
        """
        self._load_generation += 1
        generation = self._load_generation
        self._ready.clear()
        self._loading = True
        self.load_error = None

        try:
            async with self._engine_lock:
                if generation != self._load_generation:
                    return None
                try:
                    page_count = await asyncio.to_thread(self.adapter.load, symbolic_data)
                except ScoreLoadError as e:
                    if generation != self._load_generation:
                        return None
                    self._fail(e)
                    raise
                except Exception as e:
                    if generation != self._load_generation:
                        return None
                    error = ScoreLoadError(f"Score could not be rendered: {e}", self.adapter.engine_log())
                    self._fail(error)
                    raise error from e

            if generation != self._load_generation:
                logger.info("Discarding superseded score load", session_id=self.id, generation=generation)
                return None

            self._loading = False
            self.page = 1
            self._reset_view()
            self._ready.set()
            logger.info("Score session ready", session_id=self.id, pages=page_count)
            return page_count
        finally:
            # Cancelled loads settle too; the newest load owns the flags.
            if generation == self._load_generation and self._loading:
                self._fail(ScoreLoadError("Score load was cancelled"))

    def _fail(self, error: ScoreLoadError) -> None:
        self.load_error = error
        self._loading = False
        self._ready.set()
        logger.warning("Score load failed", session_id=self.id, error=str(error))

    async def wait_ready(self, timeout: float | None = None) -> None:
        """
        Block until the current load settles.

        Raises:
            ScoreNotReady: The load did not settle in time
            ScoreLoadError: The load failed
        """
        if not self._ready.is_set():
            timeout = settings.SESSION_LOAD_TIMEOUT if timeout is None else timeout
            try:
                await asyncio.wait_for(self._ready.wait(), timeout)
            except asyncio.TimeoutError as e:
                raise ScoreNotReady("Score is still loading") from e
        if self.load_error is not None:
            raise self.load_error

    def _require_ready(self) -> None:
        if self._loading or not self._ready.is_set():
            raise ScoreNotReady("Score is not loaded yet")
        if self.load_error is not None:
            raise self.load_error

    # Navigation

    def go_to_page(self, page: int) -> int:
        self._require_ready()
        target = self.adapter.clamp_page(page)
        if target != self.page:
            self.page = target
            self._reset_view()
        return self.page

    def next_page(self) -> int:
        return self.go_to_page(self.page + 1)

    def previous_page(self) -> int:
        return self.go_to_page(self.page - 1)

    def jump_to_measure(self, measure: int) -> int:
        """
        Show the page containing a measure.

        Raises:
            NavigationError: No such measure; the current page is kept
        """
        self._require_ready()
        page = self.adapter.locate_page(self.adapter.measure_id(measure)) if measure >= 1 else None
        if page is None or page > self.page_count:
            raise NavigationError("Measure not found")
        return self.go_to_page(page)

    def _reset_view(self) -> None:
        self.tracker.reset()
        self.selection.clear()
        self._client_bounds = {}
        self._bounds_version += 1
        self.positions.invalidate()

    # Geometry

    def record_bounds(self, bounds: Mapping[str, Rect]) -> None:
        """Use bounds measured by the client for elements of the current page."""
        self._require_ready()
        self._client_bounds.update(bounds)
        self._bounds_version += 1

    def bounds_of(self, element_id: str) -> Rect | None:
        bounds = self._client_bounds.get(element_id)
        if bounds is not None:
            return bounds
        return self.adapter.element_bounds(self.page, element_id)

    def _current_positions(self) -> NotePositionCache:
        version = (self.adapter.generation, self.page, self._bounds_version)
        if not self.positions.is_current(version):
            candidates = [
                Candidate(c.element_id, self._client_bounds.get(c.element_id, c.bounds))
                for c in self.adapter.candidates(self.page, settings.NOTE_CLASS)
            ]
            self.positions.rebuild(candidates, version)
        return self.positions

    def _measure_of(self, element_id: str) -> int:
        return self.measures.resolve(self.adapter.page(self.page), element_id)

    # Pointer input

    def pointer_move(self, point: Point) -> str | None:
        self._require_ready()
        self._current_positions()
        return self.tracker.move(point)

    def pointer_release(self, point: Point | None = None) -> Drop | None:
        self._require_ready()
        self._current_positions()
        return self.tracker.release(point)

    def pointer_leave(self) -> None:
        self._require_ready()
        self.tracker.leave()

    def click(self, element_id: str | None = None, point: Point | None = None) -> str | None:
        """Toggle the click selection on an element, or on the note nearest a point."""
        self._require_ready()
        if element_id is None and point is not None:
            element_id = self._current_positions().nearest(point)
        if element_id is None:
            return self.selection.selected_id
        if self.adapter.page(self.page).find(element_id) is None:
            raise ElementNotFound(element_id)
        return self.selection.click(element_id)

    # Schema and staged annotations

    def select_schema(self, schema: SelectedSchema | None) -> None:
        """Switch the schema being placed; staged placements belong to the old one."""
        previous = self.schema.id if self.schema else None
        current = schema.id if schema else None
        if previous != current:
            self.staged.clear()
        self.schema = schema

    def _schema_event(self, event_id: uuid.UUID) -> SchemaEventRef:
        if self.schema is None:
            raise SelectionRequired("Select a schema first")
        event = self.schema.event(event_id)
        if event is None:
            raise ElementNotFound(str(event_id), f"Event {event_id} is not part of schema {self.schema.name}")
        return event

    def place(self, event_id: uuid.UUID, element_id: str, measure: int | None = None) -> TemporaryAnnotation:
        """Stage an event on a note of the current page."""
        self._require_ready()
        event = self._schema_event(event_id)
        if self.adapter.page(self.page).find(element_id) is None:
            raise ElementNotFound(element_id)
        if measure is None:
            measure = self._measure_of(element_id)
        return self.staged.add(event, element_id, measure)

    def drop(self, event_id: uuid.UUID, point: Point | None = None) -> TemporaryAnnotation | None:
        """Finish a drag of ``event_id``; stages it on the note it landed on."""
        self._schema_event(event_id)
        landed = self.pointer_release(point)
        if landed is None:
            return None
        return self.place(event_id, landed.element_id, landed.measure)

    def toggle_event(self, event_id: uuid.UUID) -> TemporaryAnnotation | None:
        """
        Click-pair placement: stage the event on the selected note, or retract
        it when it is already staged.
        """
        self._schema_event(event_id)
        if self.staged.has_event(event_id):
            self.staged.remove_by_event(event_id)
            return None
        if self.selection.selected_id is None:
            raise SelectionRequired("Select a note first")
        return self.place(event_id, self.selection.selected_id)

    async def submit(self, gateway: AnnotationGateway) -> Any:
        return await self.staged.submit(self.schema.id if self.schema else None, gateway)

    # Overlay

    @property
    def highlighted(self) -> str | None:
        return self.tracker.highlighted or self.selection.selected_id

    def pending_overlay(self) -> list[OverlayAnnotation]:
        label = f"{self.schema.name} (pending)" if self.schema else "Pending"
        return [
            OverlayAnnotation(
                element_id=a.piece_location,
                category=a.category,
                value=a.value,
                group_key=PENDING_GROUP,
                group_label=label,
                temporary=True,
            )
            for a in self.staged
        ]

    def compose(self, persisted: Iterable[OverlayAnnotation] = ()) -> str:
        """Current page with the highlight, persisted and pending markers."""
        self._require_ready()
        annotations = list(persisted) + self.pending_overlay()
        return compositor.compose(
            self.adapter.render_page(self.page),
            self.highlighted,
            annotations,
            self.bounds_of,
        )


class SessionRegistry:
    """In-memory score sessions, evicting the least recently used beyond ``max_sessions``."""

    def __init__(self, engine_factory: EngineFactory, max_sessions: int | None = None):
        self.engine_factory = engine_factory
        self.max_sessions = max_sessions or settings.MAX_SESSIONS
        self._sessions: OrderedDict[str, ScoreSession] = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self, piece_id: uuid.UUID | None = None) -> ScoreSession:
        session = ScoreSession(self.engine_factory(), piece_id=piece_id)
        self._sessions[session.id] = session
        while len(self._sessions) > self.max_sessions:
            evicted_id, _ = self._sessions.popitem(last=False)
            logger.info("Evicted score session", session_id=evicted_id)
        return session

    def get(self, session_id: str) -> ScoreSession | None:
        session = self._sessions.get(session_id)
        if session is not None:
            self._sessions.move_to_end(session_id)
        return session

    def remove(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None
