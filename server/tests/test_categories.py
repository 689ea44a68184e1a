"""Tests for event categories and the event table."""

from dataclasses import dataclass

import pytest

from galant.core.categories import (
    MARKER_STYLES,
    EventCategory,
    MarkerSide,
    marker_offset,
    marker_style,
)
from galant.core.event_table import build_event_table


@dataclass
class Event:
    index: int
    category: str
    value: str


def test_every_category_has_a_marker_style():
    assert set(MARKER_STYLES) == set(EventCategory)


@pytest.mark.parametrize(
    "category, side",
    [
        (EventCategory.MELODY, MarkerSide.ABOVE),
        (EventCategory.METER, MarkerSide.ABOVE),
        (EventCategory.BASS, MarkerSide.BELOW),
        (EventCategory.FIGURES, MarkerSide.BELOW),
        (EventCategory.ROMAN, MarkerSide.BELOW),
    ],
)
def test_marker_side(category, side):
    assert marker_style(category).side is side
    offset = marker_offset(category, anchor_height=20, radius=90, gap=40)
    assert (offset < 0) == (side is MarkerSide.ABOVE)


def test_marker_tiers_do_not_overlap():
    bass = marker_offset(EventCategory.BASS, 20, 90, 40)
    figures = marker_offset(EventCategory.FIGURES, 20, 90, 40)
    roman = marker_offset(EventCategory.ROMAN, 20, 90, 40)

    assert bass == 140
    assert figures - bass == 2 * 90 + 40
    assert roman - figures == 2 * 90 + 40


def test_marker_style_accepts_value():
    assert marker_style("bass") == MARKER_STYLES[EventCategory.BASS]


def test_event_table_fills_placed_slots():
    table = build_event_table(3, [Event(0, "melody", "5"), Event(1, "bass", "3")])

    assert set(table) == {c.value for c in EventCategory}
    assert all(len(row) == 3 for row in table.values())
    assert table["melody"] == ["5", "", ""]
    assert table["bass"] == ["", "3", ""]
    for category, row in table.items():
        if category != "bass":
            assert row[1] == ""


def test_event_table_ignores_out_of_range_events():
    table = build_event_table(2, [Event(2, "melody", "1"), Event(-1, "bass", "2")])

    assert table["melody"] == ["", ""]
    assert table["bass"] == ["", ""]
