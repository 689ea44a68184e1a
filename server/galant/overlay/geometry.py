"""Points, boxes and nearest-element resolution in page coordinates."""

import math
from dataclasses import dataclass
from typing import Iterable, Mapping


@dataclass(frozen=True)
class Point:
    """A position in SVG user units of one rendered page."""

    x: float
    y: float

    def distance_to(self, other: "Point") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)


@dataclass(frozen=True)
class Rect:
    """Axis-aligned bounding box."""

    x: float
    y: float
    width: float
    height: float

    @property
    def center(self) -> Point:
        return Point(self.x + self.width / 2, self.y + self.height / 2)

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def union(self, other: "Rect") -> "Rect":
        left = min(self.x, other.x)
        top = min(self.y, other.y)
        return Rect(left, top, max(self.right, other.right) - left, max(self.bottom, other.bottom) - top)


@dataclass(frozen=True)
class Candidate:
    """A selectable element and its bounding box."""

    element_id: str
    bounds: Rect


def nearest_element(point: Point, candidates: Iterable[Candidate]) -> str | None:
    """
    Resolve the candidate whose box center is closest to ``point``.

    Proximity rather than hit-testing: stems and beams are too thin to hit
    reliably in dense notation. Ties keep the first candidate encountered, so
    the result is deterministic for a fixed traversal order. Returns None when
    there are no candidates.
    """
    best_id = None
    best_distance = math.inf
    for candidate in candidates:
        distance = point.distance_to(candidate.bounds.center)
        if distance < best_distance:
            best_id = candidate.element_id
            best_distance = distance
    return best_id


class NotePositionCache:
    """
    Element id -> center point, rebuilt whenever the rendered page changes.

    A lookup aid only; the rendered page stays the source of truth.
    """

    def __init__(self) -> None:
        self._candidates: list[Candidate] = []
        self._positions: dict[str, Point] = {}
        self._version: object = None

    def rebuild(self, candidates: Iterable[Candidate], version: object) -> None:
        """Replace all entries, tagging them with the render they came from."""
        self._candidates = list(candidates)
        self._positions = {c.element_id: c.bounds.center for c in self._candidates}
        self._version = version

    def is_current(self, version: object) -> bool:
        return self._version is not None and self._version == version

    def invalidate(self) -> None:
        self._candidates = []
        self._positions = {}
        self._version = None

    def nearest(self, point: Point) -> str | None:
        return nearest_element(point, self._candidates)

    def get(self, element_id: str) -> Point | None:
        return self._positions.get(element_id)

    def as_mapping(self) -> Mapping[str, Point]:
        return dict(self._positions)

    def __len__(self) -> int:
        return len(self._positions)

    def __contains__(self, element_id: object) -> bool:
        return element_id in self._positions
