"""Command vocabulary: classify a raw user message into an intent."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from guided_form.domain.phases import MachineState
from guided_form.domain.state import ConversationState


class IntentType(str, Enum):
    """What the user's message asks the machine to do."""

    ANSWER = "answer"
    BACK = "back"
    EDIT = "edit"
    SKIP = "skip"
    PREVIEW = "preview"
    CANCEL = "cancel"
    HELP = "help"
    CONFIRM_YES = "confirm_yes"
    CONFIRM_NO = "confirm_no"
    FINALIZE = "finalize"


class Intent(BaseModel):
    """One classified user message."""

    type: IntentType
    value: str | None = Field(default=None, description="For ANSWER: the trimmed message")
    field_id: str | None = Field(default=None, description="For EDIT: the target field id")


CONFIRM_YES_WORDS = frozenset({"yes", "y", "confirm", "correct"})
CONFIRM_NO_WORDS = frozenset({"no", "n", "change", "edit"})

_COMMANDS: dict[str, IntentType] = {
    "back": IntentType.BACK,
    "previous": IntentType.BACK,
    "skip": IntentType.SKIP,
    "preview": IntentType.PREVIEW,
    "show progress": IntentType.PREVIEW,
    "review": IntentType.PREVIEW,
    "cancel": IntentType.CANCEL,
    "quit": IntentType.CANCEL,
    "exit": IntentType.CANCEL,
    "help": IntentType.HELP,
    "?": IntentType.HELP,
}

_REVIEW_STATES = frozenset({MachineState.END_REVIEW, MachineState.FINALIZE})


def parse_intent(user_message: str, state: ConversationState) -> Intent:
    """
    Classify a message. Confirmation words win while a value awaits confirmation,
    so an answer of literally "yes" cannot be entered in that window.
    """
    text = (user_message or "").strip()
    msg = text.lower()

    if state.flags.awaiting_confirmation:
        if msg in CONFIRM_YES_WORDS:
            return Intent(type=IntentType.CONFIRM_YES)
        if msg in CONFIRM_NO_WORDS:
            return Intent(type=IntentType.CONFIRM_NO)

    command = _COMMANDS.get(msg)
    if command is not None:
        return Intent(type=command)

    if msg.startswith("edit "):
        return Intent(type=IntentType.EDIT, field_id=msg[5:].strip())

    if msg == "finalize" and state.current_state in _REVIEW_STATES:
        return Intent(type=IntentType.FINALIZE)

    return Intent(type=IntentType.ANSWER, value=text)
