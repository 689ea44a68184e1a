"""Grid view of a schema's events."""

from typing import Iterable, Protocol

from galant.core.categories import EventCategory


class EventLike(Protocol):
    index: int
    category: str
    value: str


def build_event_table(event_count: int, events: Iterable[EventLike]) -> dict[str, list[str]]:
    """
    Lay out schema events as one row per category and one column per index.

    Unset slots stay empty strings. Events outside ``[0, event_count)`` are
    ignored.
    """
    table = {category.value: [""] * event_count for category in EventCategory}
    for event in events:
        row = table.get(EventCategory(event.category).value)
        if row is not None and 0 <= event.index < event_count:
            row[event.index] = event.value
    return table
