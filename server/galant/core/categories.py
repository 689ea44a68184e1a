"""Schema event categories and how their markers sit around a note."""

from dataclasses import dataclass
from enum import Enum


class EventCategory(str, Enum):
    """Closed vocabulary of schema event categories."""

    MELODY = "melody"
    BASS = "bass"
    METER = "meter"
    FIGURES = "figures"
    ROMAN = "roman"


class MarkerSide(str, Enum):
    """Vertical side of the anchor note a marker is drawn on."""

    ABOVE = "above"
    BELOW = "below"


@dataclass(frozen=True)
class MarkerStyle:
    """Placement and colouring of one category's markers."""

    side: MarkerSide
    tier: int  # 1 = closest to the note
    fill: str
    text_fill: str


# Melody circles are filled black, bass circles white, as on the schema cards.
MARKER_STYLES: dict[EventCategory, MarkerStyle] = {
    EventCategory.MELODY: MarkerStyle(MarkerSide.ABOVE, 1, "#000000", "#ffffff"),
    EventCategory.METER: MarkerStyle(MarkerSide.ABOVE, 2, "#f2f2f2", "#000000"),
    EventCategory.BASS: MarkerStyle(MarkerSide.BELOW, 1, "#ffffff", "#000000"),
    EventCategory.FIGURES: MarkerStyle(MarkerSide.BELOW, 2, "#fff7e0", "#000000"),
    EventCategory.ROMAN: MarkerStyle(MarkerSide.BELOW, 3, "#e8f0ff", "#000000"),
}

missing = set(EventCategory) - set(MARKER_STYLES)
if missing:
    raise RuntimeError(f"No marker style for categories: {sorted(c.value for c in missing)}")
del missing


def marker_style(category: EventCategory) -> MarkerStyle:
    """Return the marker style for a category."""
    return MARKER_STYLES[EventCategory(category)]


def marker_offset(category: EventCategory, anchor_height: float, radius: float, gap: float) -> float:
    """
    Vertical offset of a marker center from the anchor center.

    Negative values point up (SVG y grows downwards). Each tier clears the
    note glyph and the markers of the tiers below it.
    """
    style = marker_style(category)
    distance = anchor_height / 2 + gap + radius + (style.tier - 1) * (2 * radius + gap)
    return -distance if style.side is MarkerSide.ABOVE else distance
