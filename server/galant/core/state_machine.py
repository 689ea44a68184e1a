"""Drag gesture state machine for managing valid phase transitions."""

from enum import Enum


class GesturePhase(str, Enum):
    """Phase of one pointer drag gesture over the score."""

    IDLE = "idle"
    DRAGGING = "dragging"
    DROPPED = "dropped"
    CANCELLED = "cancelled"


# Valid phase transition matrix
VALID_TRANSITIONS: dict[str, set[str]] = {
    GesturePhase.IDLE.value: {GesturePhase.DRAGGING.value},
    GesturePhase.DRAGGING.value: {
        GesturePhase.DRAGGING.value,  # Pointer moved, candidate re-resolved
        GesturePhase.DROPPED.value,
        GesturePhase.CANCELLED.value,
    },
    GesturePhase.DROPPED.value: {
        GesturePhase.IDLE.value,
        GesturePhase.DRAGGING.value,  # Next gesture starts straight away
    },
    GesturePhase.CANCELLED.value: {
        GesturePhase.IDLE.value,
        GesturePhase.DRAGGING.value,
    },
}


def validate_transition(current_phase: str, next_phase: str) -> tuple[bool, str | None]:
    """
    Validate if a phase transition is allowed.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if current_phase not in VALID_TRANSITIONS:
        return False, f"Unknown current phase: {current_phase}"

    if next_phase not in VALID_TRANSITIONS:
        return False, f"Unknown next phase: {next_phase}"

    allowed_next = VALID_TRANSITIONS[current_phase]
    if next_phase not in allowed_next:
        return (
            False,
            f"Invalid transition from {current_phase} to {next_phase}. "
            f"Allowed transitions: {', '.join(sorted(allowed_next))}",
        )

    return True, None
