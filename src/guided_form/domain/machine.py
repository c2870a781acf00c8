"""Guided form FSM: initial state and the pure transition function.

Every handler works on a deep copy of the incoming state and returns a TurnResult;
user input never raises. Values are committed to `answers` only after the user
confirms them.
"""

from __future__ import annotations

import structlog

from guided_form.config.models import FieldDefinition, Schema
from guided_form.domain.intent import Intent, IntentType
from guided_form.domain.normalizers import normalize_value
from guided_form.domain.phases import MachineState, is_terminal
from guided_form.domain.results import (
    AskAgain,
    AskField,
    Cancelled,
    Complete,
    ConfirmSkip,
    ConfirmValue,
    EndReview,
    ErrorResult,
    Finalized,
    Preview,
    ReviewSummary,
    ShowHelp,
    ShowPreview,
    TurnResult,
    ValidationFailed,
)
from guided_form.domain.state import (
    AwaitingConfirmation,
    AwaitingSkipConfirmation,
    ConversationState,
    EditHistoryEntry,
    FieldMetrics,
    utcnow,
)
from guided_form.domain.summary import build_completion_summary, required_gaps
from guided_form.domain.validators import validate_field

log = structlog.get_logger(__name__)

# Intents still served once the form is cancelled or finalized
_READ_ONLY_INTENTS = frozenset({IntentType.PREVIEW, IntentType.HELP})


def create_initial_state(doc_type: str, schema: Schema) -> ConversationState:
    return ConversationState(
        doc_type=doc_type,
        schema_version=schema.version,
        current_state=MachineState.INIT,
        current_field_index=0,
    )


def get_current_field(state: ConversationState, schema: Schema) -> FieldDefinition | None:
    """Field at the pointer, or None once past the last field."""
    if state.current_field_index >= len(schema.fields):
        return None
    return schema.fields[state.current_field_index]


def process_transition(state: ConversationState, schema: Schema, intent: Intent) -> TurnResult:
    """Dispatch one intent against the current state. Never mutates `state`."""
    if is_terminal(state.current_state) and intent.type not in _READ_ONLY_INTENTS:
        verb = "cancelled" if state.current_state == MachineState.CANCELLED else "finalized"
        return ErrorResult(
            state=state,
            message=f"This form has been {verb}. Start a new session to begin again.",
        )

    # A pending skip confirmation only survives an immediately repeated "skip"
    if state.flags.awaiting_skip_confirmation and intent.type not in (
        IntentType.SKIP,
        *_READ_ONLY_INTENTS,
    ):
        state = state.copy_for_transition()
        state.flags.pending = None

    field = get_current_field(state, schema)

    if intent.type == IntentType.BACK:
        return handle_back(state, schema)
    if intent.type == IntentType.EDIT:
        return handle_edit(state, schema, intent.field_id or "")
    if intent.type == IntentType.SKIP:
        return handle_skip(state, schema, field)
    if intent.type == IntentType.PREVIEW:
        return handle_preview(state, schema)
    if intent.type == IntentType.CANCEL:
        return handle_cancel(state)
    if intent.type == IntentType.HELP:
        return handle_help(state, schema)
    if intent.type == IntentType.CONFIRM_YES:
        return handle_confirm_yes(state, schema)
    if intent.type == IntentType.CONFIRM_NO:
        return handle_confirm_no(state, field)
    if intent.type == IntentType.FINALIZE:
        return handle_finalize(state, schema, field)
    return handle_answer(state, field, intent.value or "")


def handle_back(state: ConversationState, schema: Schema) -> TurnResult:
    if state.current_field_index <= 0:
        return ErrorResult(state=state, message="Already at the first field.")

    new_state = state.copy_for_transition()
    new_state.current_field_index -= 1
    new_state.flags.pending = None
    new_state.current_state = MachineState.BACK
    prev_field = schema.fields[new_state.current_field_index]
    return AskField(
        state=new_state,
        message=f"Going back to: {prev_field.label}",
        ask_field=prev_field,
    )


def handle_edit(state: ConversationState, schema: Schema, field_id: str) -> TurnResult:
    index = schema.index_of(field_id)
    if index == -1:
        return ErrorResult(
            state=state,
            message=f'Field "{field_id}" not found. Available fields: {", ".join(schema.field_ids)}',
        )

    new_state = state.copy_for_transition()
    new_state.current_field_index = index
    new_state.flags.pending = None
    new_state.current_state = MachineState.EDIT_PREVIOUS
    target = schema.fields[index]
    return AskField(state=new_state, message=f"Editing: {target.label}", ask_field=target)


def handle_skip(
    state: ConversationState,
    schema: Schema,
    field: FieldDefinition | None,
) -> TurnResult:
    if field is None:
        return Complete(state=state, message="No more fields to skip.")

    pending = state.flags.pending
    confirming_this_field = isinstance(pending, AwaitingSkipConfirmation) and pending.field_id == field.id

    new_state = state.copy_for_transition()

    if field.required and not confirming_this_field:
        new_state.flags.pending = AwaitingSkipConfirmation(field_id=field.id)
        return ConfirmSkip(
            state=new_state,
            message=(
                f'"{field.label}" is required. Are you sure you want to skip it? '
                "(It will be flagged for review later.) "
                "Type 'skip' again to confirm, or provide an answer."
            ),
            field=field,
        )

    # A confirmed answer is kept; skipping it only moves on
    if field.id not in new_state.skipped and field.id not in new_state.answers:
        new_state.skipped.append(field.id)
        new_state.edit_history.append(EditHistoryEntry(field_id=field.id, action="skipped"))

    new_state.current_field_index += 1
    new_state.flags.pending = None
    new_state.current_state = MachineState.SKIP

    next_field = get_current_field(new_state, schema)
    if next_field is None:
        return handle_end_review(new_state, schema)
    return AskField(state=new_state, message="Skipped. Moving to next field.", ask_field=next_field)


def handle_preview(state: ConversationState, schema: Schema) -> TurnResult:
    """Read-only summary of progress; the returned state is the input state."""
    completed = {f.label: state.answers[f.id] for f in schema.fields if f.id in state.answers}
    remaining = [
        f.label
        for f in schema.fields[state.current_field_index:]
        if f.id not in state.answers
    ]
    preview = Preview(completed=completed, skipped=list(state.skipped), remaining=remaining)
    return ShowPreview(state=state, preview=preview)


def handle_cancel(state: ConversationState) -> TurnResult:
    new_state = state.copy_for_transition()
    new_state.current_state = MachineState.CANCELLED
    new_state.flags.pending = None
    return Cancelled(state=new_state, message="Form cancelled. Progress has not been saved.")


def handle_help(state: ConversationState, schema: Schema) -> TurnResult:
    commands = {name: cfg.description for name, cfg in schema.commands.items() if cfg.enabled}
    help_text = "\n".join(f"• {name}: {desc}" for name, desc in commands.items())
    return ShowHelp(state=state, message=f"Available commands:\n{help_text}", commands=commands)


def handle_confirm_yes(state: ConversationState, schema: Schema) -> TurnResult:
    pending = state.flags.pending
    if not isinstance(pending, AwaitingConfirmation):
        return ErrorResult(state=state, message="Nothing to confirm right now.")

    new_state = state.copy_for_transition()
    new_state.answers[pending.field_id] = pending.value
    if pending.field_id in new_state.skipped:
        new_state.skipped.remove(pending.field_id)
    new_state.edit_history.append(EditHistoryEntry(field_id=pending.field_id, action="confirmed"))
    new_state.flags.pending = None
    new_state.current_field_index += 1
    new_state.current_state = MachineState.NEXT_FIELD

    next_field = get_current_field(new_state, schema)
    if next_field is None:
        return handle_end_review(new_state, schema)
    return AskField(state=new_state, message="Confirmed!", ask_field=next_field)


def handle_confirm_no(state: ConversationState, field: FieldDefinition | None) -> TurnResult:
    new_state = state.copy_for_transition()
    new_state.flags.pending = None
    new_state.current_state = MachineState.ASK
    return AskAgain(state=new_state, message="No problem, let's try again.", ask_field=field)


def handle_answer(state: ConversationState, field: FieldDefinition | None, value: str) -> TurnResult:
    if field is None:
        return ErrorResult(state=state, message="No current field to answer.")

    new_state = state.copy_for_transition()
    metrics = new_state.metadata.field_metrics.setdefault(field.id, FieldMetrics())
    metrics.ask_count += 1

    normalized = normalize_value(field, value) or ""
    result = validate_field(field, normalized)

    if not result.valid:
        new_state.metadata.total_re_asks += 1
        new_state.current_state = MachineState.ASK
        log.debug(
            "validation_failed",
            field_id=field.id,
            errors=result.errors,
            ask_count=metrics.ask_count,
        )
        return ValidationFailed(
            state=new_state,
            message=" ".join(result.errors),
            ask_field=field,
            errors=result.errors,
        )

    metrics.completed_at = utcnow()
    new_state.flags.pending = AwaitingConfirmation(field_id=field.id, value=normalized)
    new_state.current_state = MachineState.CONFIRM
    return ConfirmValue(state=new_state, field=field, value=normalized)


def handle_end_review(state: ConversationState, schema: Schema) -> TurnResult:
    """Advisory review once the pointer passes the last field; never blocks finalize."""
    new_state = state.copy_for_transition()
    new_state.current_state = MachineState.END_REVIEW
    gaps = required_gaps(new_state, schema)
    new_state.flags.has_required_gaps = bool(gaps)
    review = ReviewSummary(
        completed_fields=len(new_state.answers),
        total_fields=len(schema.fields),
        required_gaps=gaps,
        skipped_fields=list(new_state.skipped),
    )
    return EndReview(state=new_state, review=review)


def handle_finalize(
    state: ConversationState,
    schema: Schema,
    field: FieldDefinition | None,
) -> TurnResult:
    if field is not None:
        return ErrorResult(state=state, message="Finish or skip the remaining fields before finalizing.")

    new_state = state.copy_for_transition()
    new_state.current_state = MachineState.FINALIZE
    new_state.flags.has_required_gaps = bool(required_gaps(new_state, schema))
    return Finalized(
        state=new_state,
        message="Form finalized.",
        summary=build_completion_summary(new_state, schema),
    )
