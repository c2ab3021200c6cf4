"""Voice-clone lifecycle states."""

from enum import Enum


class CloneState(str, Enum):
    """Lifecycle state of a voice clone within a session.

    IDLE -> SUBMITTING -> PROCESSING -> {READY, ERROR, NOT_FOUND}
    """

    IDLE = "idle"
    SUBMITTING = "submitting"
    PROCESSING = "processing"
    READY = "ready"
    ERROR = "error"
    NOT_FOUND = "not_found"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES


TERMINAL_STATES = frozenset({CloneState.READY, CloneState.ERROR, CloneState.NOT_FOUND})

# States from which a fresh submit may start a new lifecycle instance
SUBMITTABLE_STATES = frozenset({CloneState.IDLE, CloneState.ERROR, CloneState.NOT_FOUND})
