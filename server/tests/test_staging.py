"""Tests for the temporary annotation set."""

import asyncio
import uuid

import pytest

from galant.core.categories import EventCategory
from galant.core.errors import EmptySubmission, ValidationFailure, SubmissionRejected
from galant.overlay.staging import SchemaEventRef, TemporaryAnnotationSet


class RecordingGateway:
    """Persistence boundary double that records every create."""

    def __init__(self, error: Exception | None = None) -> None:
        self.calls = []
        self.error = error

    async def create_link(self, schema_id, measure_start, measure_end, placements):
        self.calls.append((schema_id, measure_start, measure_end, list(placements)))
        if self.error is not None:
            raise self.error
        return {"schema_id": schema_id, "placements": len(placements)}


def event(index: int = 0, category: EventCategory = EventCategory.MELODY, value: str = "5") -> SchemaEventRef:
    return SchemaEventRef(id=uuid.uuid4(), index=index, category=category, value=value)


@pytest.fixture
def staged() -> TemporaryAnnotationSet:
    return TemporaryAnnotationSet()


def test_add_generates_unique_local_ids(staged):
    melody = event()

    first = staged.add(melody, "n1", 3)
    second = staged.add(melody, "n2", 4)

    assert first.local_id != second.local_id
    assert [a.piece_location for a in staged] == ["n1", "n2"]
    assert first.category is EventCategory.MELODY
    assert first.value == "5"


def test_add_then_remove_restores_set(staged):
    staged.add(event(), "n1", 1)
    before = staged.items

    added = staged.add(event(1), "n2", 2)
    assert staged.remove(added.local_id) is True

    assert staged.items == before


def test_remove_unknown_is_noop(staged):
    staged.add(event(), "n1", 1)

    assert staged.remove("nope") is False
    assert len(staged) == 1


def test_remove_by_event_only_touches_that_event(staged):
    melody = event(0)
    bass = event(0, EventCategory.BASS, "1")
    staged.add(melody, "n1", 1)
    staged.add(bass, "n1", 1)
    staged.add(melody, "n4", 2)

    assert staged.remove_by_event(melody.id) == 2

    assert [a.event for a in staged] == [bass]
    assert not staged.has_event(melody.id)


def test_clear(staged):
    staged.add(event(), "n1", 1)
    staged.clear()

    assert len(staged) == 0
    assert staged.measure_range() is None


def test_measure_range(staged):
    for measure in [3, 1, 4, 1, 5]:
        staged.add(event(), f"n{measure}", measure)

    assert staged.measure_range() == (1, 5)


@pytest.mark.asyncio
async def test_submit_empty_never_calls_gateway(staged):
    gateway = RecordingGateway()

    with pytest.raises(EmptySubmission):
        await staged.submit(uuid.uuid4(), gateway)

    assert gateway.calls == []


@pytest.mark.asyncio
async def test_submit_without_schema(staged):
    gateway = RecordingGateway()
    staged.add(event(), "n1", 1)

    with pytest.raises(EmptySubmission):
        await staged.submit(None, gateway)

    assert gateway.calls == []
    assert len(staged) == 1


@pytest.mark.asyncio
async def test_submit_success_clears(staged):
    gateway = RecordingGateway()
    schema_id = uuid.uuid4()
    for measure in [3, 1, 4, 1, 5]:
        staged.add(event(), f"n{measure}", measure)

    result = await staged.submit(schema_id, gateway)

    assert result == {"schema_id": schema_id, "placements": 5}
    schema_sent, start, end, placements = gateway.calls[0]
    assert (schema_sent, start, end) == (schema_id, 1, 5)
    assert [p.measure for p in placements] == [3, 1, 4, 1, 5]
    assert len(staged) == 0


@pytest.mark.asyncio
async def test_submit_failure_keeps_staged(staged):
    gateway = RecordingGateway(error=ValidationFailure("Event is placed more than once"))
    staged.add(event(), "n1", 1)
    staged.add(event(1), "n2", 2)
    before = set(staged.items)

    with pytest.raises(SubmissionRejected) as exc_info:
        await staged.submit(uuid.uuid4(), gateway)

    assert exc_info.value.message == "Event is placed more than once"
    assert set(staged.items) == before
    assert len(gateway.calls) == 1


class SlowGateway(RecordingGateway):
    async def create_link(self, schema_id, measure_start, measure_end, placements):
        await asyncio.sleep(0.05)
        return await super().create_link(schema_id, measure_start, measure_end, placements)


@pytest.mark.asyncio
async def test_entry_staged_during_submit_survives(staged):
    gateway = SlowGateway()
    first = staged.add(event(), "n1", 1)

    submission = asyncio.create_task(staged.submit(uuid.uuid4(), gateway))
    await asyncio.sleep(0.01)
    late = staged.add(event(1), "n2", 2)
    await submission

    sent = gateway.calls[0][3]
    assert sent == [first]
    assert staged.items == [late]


def test_discard_only_drops_given_entries(staged):
    first = staged.add(event(), "n1", 1)
    second = staged.add(event(1), "n2", 2)

    assert staged.discard([first]) == 1
    assert staged.discard([first]) == 0
    assert staged.items == [second]
