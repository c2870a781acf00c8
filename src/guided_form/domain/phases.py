"""States of the guided form machine."""

from __future__ import annotations

from enum import Enum


class MachineState(str, Enum):
    """
    Marker recorded on each state snapshot. Transitions are driven by the intent and the
    pending sub-state, so the marker is mainly for observability and terminal checks.
    """

    INIT = "INIT"
    ASK = "ASK"
    CAPTURE = "CAPTURE"
    VALIDATE = "VALIDATE"
    CONFIRM = "CONFIRM"
    NEXT_FIELD = "NEXT_FIELD"
    BACK = "BACK"
    EDIT_PREVIOUS = "EDIT_PREVIOUS"
    SKIP = "SKIP"
    PREVIEW = "PREVIEW"
    END_REVIEW = "END_REVIEW"
    FINALIZE = "FINALIZE"
    CANCELLED = "CANCELLED"


# No further field capture happens from these states
TERMINAL_STATES = frozenset({MachineState.CANCELLED, MachineState.FINALIZE})


def is_terminal(state: MachineState) -> bool:
    return state in TERMINAL_STATES
