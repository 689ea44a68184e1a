"""Tests for score sessions over a fake engine."""

import asyncio
import threading
import uuid

import pytest

from conftest import INVALID_SCORE_DATA, SCORE_DATA, UNLAYABLE_SCORE_DATA, FakeEngine
from galant.core.categories import EventCategory
from galant.core.errors import (
    ElementNotFound,
    NavigationError,
    ScoreLoadError,
    ScoreNotReady,
    SelectionRequired,
)
from galant.core.state_machine import GesturePhase
from galant.overlay.geometry import Point, Rect
from galant.overlay.session import ScoreSession, SelectedSchema, SessionRegistry
from galant.overlay.staging import SchemaEventRef

MELODY = SchemaEventRef(id=uuid.uuid4(), index=0, category=EventCategory.MELODY, value="5")
BASS = SchemaEventRef(id=uuid.uuid4(), index=1, category=EventCategory.BASS, value="3")
PRINNER = SelectedSchema(id=uuid.uuid4(), name="Prinner", events=(MELODY, BASS))


@pytest.fixture
async def session() -> ScoreSession:
    session = ScoreSession(FakeEngine())
    await session.load(SCORE_DATA)
    return session


@pytest.mark.asyncio
async def test_load_makes_session_ready():
    session = ScoreSession(FakeEngine())
    assert session.status == "empty"

    assert await session.load(SCORE_DATA) == 2

    await session.wait_ready(timeout=1)
    assert session.status == "ready"
    assert session.page == 1
    assert session.page_count == 2


@pytest.mark.asyncio
async def test_operations_before_load_are_rejected():
    session = ScoreSession(FakeEngine())

    with pytest.raises(ScoreNotReady):
        session.compose()
    with pytest.raises(ScoreNotReady):
        session.pointer_move(Point(0, 0))


@pytest.mark.asyncio
async def test_wait_ready_times_out():
    session = ScoreSession(FakeEngine())

    with pytest.raises(ScoreNotReady):
        await session.wait_ready(timeout=0.01)


@pytest.mark.asyncio
async def test_failed_load_is_reported():
    session = ScoreSession(FakeEngine())

    with pytest.raises(ScoreLoadError):
        await session.load(INVALID_SCORE_DATA)

    assert session.status == "failed"
    with pytest.raises(ScoreLoadError):
        await session.wait_ready(timeout=1)
    with pytest.raises(ScoreLoadError):
        session.go_to_page(1)


@pytest.mark.asyncio
async def test_superseded_load_is_discarded():
    session = ScoreSession(FakeEngine())

    first = asyncio.create_task(session.load(SCORE_DATA))
    second = asyncio.create_task(session.load(SCORE_DATA))

    assert await asyncio.gather(first, second) == [None, 2]
    assert session.status == "ready"
    assert session.adapter.generation == 2


@pytest.mark.asyncio
async def test_reload_after_failure_recovers():
    session = ScoreSession(FakeEngine())
    with pytest.raises(ScoreLoadError):
        await session.load(INVALID_SCORE_DATA)

    assert await session.load(SCORE_DATA) == 2
    assert session.status == "ready"


@pytest.mark.asyncio
async def test_engine_layout_error_fails_session():
    session = ScoreSession(FakeEngine())

    with pytest.raises(ScoreLoadError, match="layout failed"):
        await session.load(UNLAYABLE_SCORE_DATA)

    assert session.status == "failed"
    with pytest.raises(ScoreLoadError):
        await session.wait_ready(timeout=0.05)


@pytest.mark.asyncio
async def test_unexpected_load_error_fails_session(monkeypatch):
    session = ScoreSession(FakeEngine())

    def explode(symbolic_data):
        raise RuntimeError("engine crashed")

    monkeypatch.setattr(session.adapter, "load", explode)

    with pytest.raises(ScoreLoadError, match="engine crashed") as exc_info:
        await session.load(SCORE_DATA)

    assert isinstance(exc_info.value.__cause__, RuntimeError)
    assert session.status == "failed"
    assert session.load_error is exc_info.value
    with pytest.raises(ScoreLoadError):
        session.go_to_page(1)


class BlockingEngine(FakeEngine):
    def __init__(self) -> None:
        super().__init__()
        self.release = threading.Event()

    def loadData(self, data: str) -> bool:
        self.release.wait(timeout=5)
        return super().loadData(data)


@pytest.mark.asyncio
async def test_cancelled_load_fails_session():
    engine = BlockingEngine()
    session = ScoreSession(engine)

    task = asyncio.create_task(session.load(SCORE_DATA))
    await asyncio.sleep(0.01)
    assert session.status == "loading"

    task.cancel()
    try:
        with pytest.raises(asyncio.CancelledError):
            await task
    finally:
        engine.release.set()

    assert session.status == "failed"
    with pytest.raises(ScoreLoadError, match="cancelled"):
        await session.wait_ready(timeout=0.05)


@pytest.mark.asyncio
async def test_wait_ready_with_zero_timeout():
    session = ScoreSession(FakeEngine())

    with pytest.raises(ScoreNotReady):
        await session.wait_ready(timeout=0)

    await session.load(SCORE_DATA)
    await session.wait_ready(timeout=0)


@pytest.mark.asyncio
async def test_page_navigation_clamps(session):
    assert session.next_page() == 2
    assert session.next_page() == 2
    assert session.previous_page() == 1
    assert session.previous_page() == 1
    assert session.go_to_page(7) == 2


@pytest.mark.asyncio
async def test_jump_to_measure(session):
    assert session.jump_to_measure(1) == 1
    assert session.jump_to_measure(3) == 2
    assert session.jump_to_measure(2) == 1


@pytest.mark.asyncio
async def test_jump_to_missing_measure_keeps_page(session):
    session.go_to_page(2)

    with pytest.raises(NavigationError, match="Measure not found"):
        session.jump_to_measure(99)

    assert session.page == 2


@pytest.mark.asyncio
@pytest.mark.parametrize("measure", [0, -3])
async def test_jump_to_nonpositive_measure(session, measure):
    with pytest.raises(NavigationError, match="Measure not found"):
        session.jump_to_measure(measure)

    assert session.page == 1


@pytest.mark.asyncio
async def test_pointer_drag_and_drop(session):
    assert session.pointer_move(Point(112, 108)) == "n1"
    assert session.pointer_move(Point(505, 215)) == "n3"

    drop = session.pointer_release()

    assert (drop.element_id, drop.measure) == ("n3", 2)
    assert session.tracker.phase is GesturePhase.DROPPED


@pytest.mark.asyncio
async def test_pointer_leave_cancels(session):
    session.pointer_move(Point(112, 108))
    session.pointer_leave()

    assert session.tracker.phase is GesturePhase.CANCELLED
    assert session.pointer_release() is None


@pytest.mark.asyncio
async def test_page_change_resets_pointer_state(session):
    session.pointer_move(Point(112, 108))
    session.click("n2")

    session.next_page()

    assert session.highlighted is None
    assert session.pointer_move(Point(0, 0)) == "n4"


@pytest.mark.asyncio
async def test_recorded_bounds_override_rendered_layout(session):
    session.record_bounds({"n1": Rect(1000, 1000, 10, 10)})

    assert session.pointer_move(Point(1004, 1004)) == "n1"
    assert session.bounds_of("n1") == Rect(1000, 1000, 10, 10)
    assert session.bounds_of("n2") == Rect(300, 100, 20, 20)


@pytest.mark.asyncio
async def test_click_toggles_selection(session):
    assert session.click("n2") == "n2"
    assert session.click(point=Point(110, 110)) == "n1"
    assert session.click("n1") is None

    with pytest.raises(ElementNotFound):
        session.click("n4")


@pytest.mark.asyncio
async def test_drop_stages_dragged_event(session):
    session.select_schema(PRINNER)
    session.pointer_move(Point(505, 215))

    staged = session.drop(MELODY.id)

    assert staged.piece_location == "n3"
    assert staged.measure == 2
    assert staged.event == MELODY
    assert len(session.staged) == 1


@pytest.mark.asyncio
async def test_placement_needs_schema(session):
    with pytest.raises(SelectionRequired):
        session.place(MELODY.id, "n1")


@pytest.mark.asyncio
async def test_placement_of_foreign_event(session):
    session.select_schema(PRINNER)

    with pytest.raises(ElementNotFound):
        session.place(uuid.uuid4(), "n1")


@pytest.mark.asyncio
async def test_toggle_event_places_and_retracts(session):
    session.select_schema(PRINNER)

    with pytest.raises(SelectionRequired):
        session.toggle_event(BASS.id)

    session.click("n2")
    staged = session.toggle_event(BASS.id)
    assert staged.piece_location == "n2"
    assert staged.measure == 1

    assert session.toggle_event(BASS.id) is None
    assert len(session.staged) == 0


@pytest.mark.asyncio
async def test_switching_schema_clears_staged(session):
    session.select_schema(PRINNER)
    session.place(MELODY.id, "n1")

    session.select_schema(PRINNER)
    assert len(session.staged) == 1

    session.select_schema(SelectedSchema(id=uuid.uuid4(), name="Romanesca"))
    assert len(session.staged) == 0


@pytest.mark.asyncio
async def test_compose_draws_pending_markers(session):
    session.select_schema(PRINNER)
    session.place(MELODY.id, "n1")
    session.click("n1")

    markup = session.compose()

    assert "galant-pending" in markup
    assert "Prinner (pending)" in markup
    assert "stroke-dasharray" in markup
    assert 'class="note selected"' in markup
    assert session.compose() == markup


@pytest.mark.asyncio
async def test_submit_goes_through_staging(session):
    class Gateway:
        async def create_link(self, schema_id, measure_start, measure_end, placements):
            return (schema_id, measure_start, measure_end, len(placements))

    session.select_schema(PRINNER)
    session.place(MELODY.id, "n3")
    session.place(BASS.id, "n1")

    assert await session.submit(Gateway()) == (PRINNER.id, 1, 2, 2)
    assert len(session.staged) == 0


def test_registry_evicts_least_recently_used():
    registry = SessionRegistry(FakeEngine, max_sessions=2)
    first = registry.create()
    second = registry.create()

    assert registry.get(first.id) is first
    registry.create()

    assert len(registry) == 2
    assert registry.get(second.id) is None
    assert registry.get(first.id) is first
    assert registry.remove(first.id) is True
    assert registry.remove(first.id) is False
