"""Core application modules."""

from galant.core.categories import EventCategory, MarkerSide, marker_offset, marker_style
from galant.core.event_table import build_event_table
from galant.core.security import create_access_token, decode_access_token
from galant.core.state_machine import GesturePhase, validate_transition

__all__ = [
    "EventCategory",
    "MarkerSide",
    "marker_offset",
    "marker_style",
    "build_event_table",
    "create_access_token",
    "decode_access_token",
    "GesturePhase",
    "validate_transition",
]
