"""Turn results: one model per action, discriminated on `action`."""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter

from guided_form.config.models import FieldDefinition
from guided_form.domain.state import ConversationState
from guided_form.domain.summary import CompletionSummary


class Preview(BaseModel):
    completed: dict[str, str] = Field(default_factory=dict, description="label -> confirmed value")
    skipped: list[str] = Field(default_factory=list, description="Skipped field ids")
    remaining: list[str] = Field(default_factory=list, description="Labels still to answer from the current field on")


class ReviewSummary(BaseModel):
    completed_fields: int
    total_fields: int
    required_gaps: list[str] = Field(default_factory=list)
    skipped_fields: list[str] = Field(default_factory=list)


class _Result(BaseModel):
    state: ConversationState
    message: str | None = None
    ask_field: FieldDefinition | None = Field(default=None, description="Field the caller should prompt for")


class AskField(_Result):
    action: Literal["ask_field"] = "ask_field"
    ask_field: FieldDefinition


class ConfirmValue(_Result):
    action: Literal["confirm_value"] = "confirm_value"
    field: FieldDefinition
    value: str


class ValidationFailed(_Result):
    action: Literal["validation_error"] = "validation_error"
    ask_field: FieldDefinition
    errors: list[str]


class ShowPreview(_Result):
    action: Literal["show_preview"] = "show_preview"
    preview: Preview


class EndReview(_Result):
    action: Literal["end_review"] = "end_review"
    review: ReviewSummary


class ConfirmSkip(_Result):
    action: Literal["confirm_skip"] = "confirm_skip"
    field: FieldDefinition


class ShowHelp(_Result):
    action: Literal["show_help"] = "show_help"
    commands: dict[str, str] = Field(default_factory=dict, description="Enabled command -> description")


class AskAgain(_Result):
    action: Literal["ask_again"] = "ask_again"


class ErrorResult(_Result):
    action: Literal["error"] = "error"
    # None only when a first turn failed before any state existed
    state: ConversationState | None
    message: str


class Cancelled(_Result):
    action: Literal["cancel"] = "cancel"


class Complete(_Result):
    action: Literal["complete"] = "complete"


class Finalized(_Result):
    action: Literal["finalize"] = "finalize"
    summary: CompletionSummary


TurnResult = Annotated[
    Union[
        AskField,
        ConfirmValue,
        ValidationFailed,
        ShowPreview,
        EndReview,
        ConfirmSkip,
        ShowHelp,
        AskAgain,
        ErrorResult,
        Cancelled,
        Complete,
        Finalized,
    ],
    Field(discriminator="action"),
]

turn_result_adapter: TypeAdapter[TurnResult] = TypeAdapter(TurnResult)
