"""Tests for drag tracking, click selection and measure resolution."""

import pytest

from conftest import SCORE_DATA
from galant.core.errors import ElementNotFound
from galant.core.state_machine import GesturePhase, validate_transition
from galant.overlay.geometry import Candidate, NotePositionCache, Point, Rect
from galant.overlay.render_adapter import ScoreRenderAdapter
from galant.overlay.tracker import ClickSelection, DragTracker, Drop, MeasureResolver


@pytest.fixture
def positions() -> NotePositionCache:
    cache = NotePositionCache()
    cache.rebuild(
        [
            Candidate("n1", Rect(100, 100, 20, 20)),
            Candidate("n2", Rect(300, 100, 20, 20)),
        ],
        version=1,
    )
    return cache


@pytest.fixture
def tracker(positions) -> DragTracker:
    return DragTracker(positions, measure_of=lambda element_id: {"n1": 1, "n2": 4}[element_id])


def test_drag_follows_nearest_note(tracker):
    assert tracker.phase is GesturePhase.IDLE

    assert tracker.move(Point(105, 110)) == "n1"
    assert tracker.phase is GesturePhase.DRAGGING
    assert tracker.move(Point(290, 90)) == "n2"
    assert tracker.highlighted == "n2"


def test_release_drops_on_candidate_with_measure(tracker):
    tracker.move(Point(105, 110))

    drop = tracker.release(Point(305, 115))

    assert drop == Drop("n2", 4)
    assert tracker.phase is GesturePhase.DROPPED
    assert tracker.highlighted is None
    assert tracker.last_drop == drop


def test_release_without_drag_does_nothing(tracker):
    assert tracker.release() is None
    assert tracker.phase is GesturePhase.IDLE


def test_leave_cancels_drag(tracker):
    tracker.move(Point(105, 110))
    tracker.leave()

    assert tracker.phase is GesturePhase.CANCELLED
    assert tracker.highlighted is None
    assert tracker.release() is None


def test_new_drag_after_drop(tracker):
    tracker.move(Point(105, 110))
    tracker.release()

    assert tracker.move(Point(300, 100)) == "n2"
    assert tracker.phase is GesturePhase.DRAGGING


def test_no_candidates_no_transition():
    tracker = DragTracker(NotePositionCache(), measure_of=lambda element_id: 1)

    assert tracker.move(Point(10, 10)) is None
    assert tracker.phase is GesturePhase.IDLE
    assert tracker.release(Point(10, 10)) is None


def test_reset_returns_to_idle(tracker):
    tracker.move(Point(105, 110))
    tracker.reset()
    assert tracker.phase is GesturePhase.IDLE

    tracker.move(Point(105, 110))
    tracker.release()
    tracker.reset()
    assert tracker.phase is GesturePhase.IDLE


def test_gesture_transitions():
    assert validate_transition("idle", "dragging") == (True, None)
    assert validate_transition("dragging", "dragging") == (True, None)

    is_valid, error = validate_transition("idle", "dropped")
    assert not is_valid
    assert "Invalid transition" in error

    is_valid, error = validate_transition("flying", "idle")
    assert not is_valid
    assert "Unknown current phase" in error


def test_click_selection_toggles():
    selection = ClickSelection()

    assert selection.click("n1") == "n1"
    assert selection.click("n2") == "n2"
    assert selection.click("n2") is None
    assert selection.selected_id is None


class TestMeasureResolver:
    """Measure numbers come from the enclosing measure's original label."""

    @pytest.fixture
    def adapter(self, fake_engine) -> ScoreRenderAdapter:
        adapter = ScoreRenderAdapter(fake_engine)
        adapter.load(SCORE_DATA)
        return adapter

    def test_resolves_enclosing_measure(self, adapter):
        resolver = MeasureResolver(adapter, strict=False)

        assert resolver.resolve(adapter.page(1), "n2") == 1
        assert resolver.resolve(adapter.page(1), "n3") == 2
        assert resolver.resolve(adapter.page(2), "n4") == 3

    def test_falls_back_to_first_measure(self, adapter):
        resolver = MeasureResolver(adapter, strict=False)

        assert resolver.resolve(adapter.page(2), "orphan") == 1
        assert resolver.resolve(adapter.page(1), "missing") == 1

    def test_unusable_label_falls_back(self, adapter, fake_engine, monkeypatch):
        monkeypatch.setattr(fake_engine, "getElementAttr", lambda xml_id: {"n": "1a"})

        assert MeasureResolver(adapter, strict=False).resolve(adapter.page(1), "n1") == 1

    def test_strict_rejects_unresolved(self, adapter):
        resolver = MeasureResolver(adapter, strict=True)

        assert resolver.resolve(adapter.page(1), "n3") == 2
        with pytest.raises(ElementNotFound):
            resolver.resolve(adapter.page(2), "orphan")
