"""Conversation state models. Each transition produces a new snapshot; answers are confirmed values only."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from guided_form.domain.phases import MachineState


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AwaitingConfirmation(BaseModel):
    """A validated, normalized value waiting for the user's yes/no."""

    kind: Literal["awaiting_confirmation"] = "awaiting_confirmation"
    field_id: str
    value: str


class AwaitingSkipConfirmation(BaseModel):
    """User asked to skip a required field; a second skip confirms."""

    kind: Literal["awaiting_skip_confirmation"] = "awaiting_skip_confirmation"
    field_id: str


PendingAction = Annotated[
    Union[AwaitingConfirmation, AwaitingSkipConfirmation],
    Field(discriminator="kind"),
]


class Flags(BaseModel):
    """Review flag plus at most one pending sub-state."""

    has_required_gaps: bool = False
    pending: PendingAction | None = None

    @property
    def awaiting_confirmation(self) -> bool:
        return isinstance(self.pending, AwaitingConfirmation)

    @property
    def awaiting_skip_confirmation(self) -> bool:
        return isinstance(self.pending, AwaitingSkipConfirmation)

    @property
    def confirmation_field(self) -> str | None:
        return self.pending.field_id if isinstance(self.pending, AwaitingConfirmation) else None

    @property
    def confirmation_value(self) -> str | None:
        return self.pending.value if isinstance(self.pending, AwaitingConfirmation) else None


class EditHistoryEntry(BaseModel):
    """Append-only audit record."""

    field_id: str
    timestamp: datetime = Field(default_factory=utcnow)
    action: str = Field(..., description="confirmed | skipped")


class FieldMetrics(BaseModel):
    """Per-field answer attempts; created on the first answer to the field."""

    ask_count: int = Field(default=0, ge=0)
    started_at: datetime = Field(default_factory=utcnow)
    completed_at: datetime | None = None


class SessionMetadata(BaseModel):
    started_at: datetime = Field(default_factory=utcnow)
    field_metrics: dict[str, FieldMetrics] = Field(default_factory=dict)
    total_re_asks: int = Field(default=0, ge=0)


class ConversationState(BaseModel):
    """Full guided form state for one session. Callers treat it as a read-only snapshot."""

    doc_type: str
    schema_version: str
    current_state: MachineState = MachineState.INIT
    current_field_index: int = Field(default=0, ge=0, description="== len(fields) means past the last field")
    answers: dict[str, str] = Field(default_factory=dict, description="field_id -> confirmed normalized value")
    skipped: list[str] = Field(default_factory=list, description="Ordered, duplicate-free field ids")
    edit_history: list[EditHistoryEntry] = Field(default_factory=list)
    flags: Flags = Field(default_factory=Flags)
    metadata: SessionMetadata = Field(default_factory=SessionMetadata)

    @property
    def awaiting_confirmation(self) -> bool:
        return self.flags.awaiting_confirmation

    @property
    def awaiting_skip_confirmation(self) -> bool:
        return self.flags.awaiting_skip_confirmation

    def copy_for_transition(self) -> ConversationState:
        """Deep copy so a transition never mutates the caller's snapshot."""
        return self.model_copy(deep=True)
