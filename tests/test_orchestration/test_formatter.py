"""Formatter: chat text per action."""

from __future__ import annotations

from guided_form.config.models import FieldDefinition, Schema
from guided_form.domain.results import (
    AskAgain,
    AskField,
    ConfirmValue,
    EndReview,
    ErrorResult,
    Preview,
    ReviewSummary,
    ShowPreview,
    ValidationFailed,
)
from guided_form.domain.state import ConversationState
from guided_form.orchestration.formatter import format_field_ask, format_response


def _state() -> ConversationState:
    return ConversationState(doc_type="charter", schema_version="1.0")


def test_field_ask_includes_hints() -> None:
    field = FieldDefinition(
        id="project_name",
        label="Project Title",
        required=True,
        help_text="The name stakeholders know.",
        example="Portal 2025",
    )
    assert format_field_ask(field) == (
        '**Project Title** — The name stakeholders know. (e.g., "Portal 2025") *[Required]*'
    )


def test_ask_field_prefixes_message(three_field_schema: Schema) -> None:
    result = AskField(state=_state(), message="Confirmed!", ask_field=three_field_schema.fields[1])
    assert format_response(result, three_field_schema) == "Confirmed!\n\n**Email** *[Required]*"


def test_confirmation_truncates_long_values(three_field_schema: Schema) -> None:
    result = ConfirmValue(state=_state(), field=three_field_schema.fields[0], value="x" * 150)
    text = format_response(result)
    assert text == f'Got it: "{"x" * 100}..."\n\nConfirm? (yes/no)'


def test_validation_error_text(three_field_schema: Schema) -> None:
    result = ValidationFailed(
        state=_state(),
        message="Minimum length is 3 characters.",
        ask_field=three_field_schema.fields[0],
        errors=["Minimum length is 3 characters."],
    )
    text = format_response(result)
    assert text.startswith("**Validation Issue:** Minimum length is 3 characters.")
    assert text.endswith("Let's try again for **Name**.")


def test_preview_uses_labels_for_skipped(three_field_schema: Schema) -> None:
    preview = Preview(completed={"Name": "Alice Corp"}, skipped=["email"], remaining=["Start Date"])
    text = format_response(ShowPreview(state=_state(), preview=preview), three_field_schema)
    assert "- **Name**: Alice Corp" in text
    assert "### ⊘ Skipped:\n- Email" in text
    assert "### ⋯ Remaining: 1 fields" in text


def test_end_review_with_gaps(mixed_schema: Schema) -> None:
    review = ReviewSummary(completed_fields=1, total_fields=3, required_gaps=["Owner"], skipped_fields=["notes", "owner"])
    text = format_response(EndReview(state=_state(), review=review), mixed_schema)
    assert "You've completed **1 of 3** fields." in text
    assert "- Owner" in text
    assert "### Optional Fields Skipped:\n- Notes" in text
    assert "Ready to finalize?" not in text


def test_end_review_ready_to_finalize(mixed_schema: Schema) -> None:
    review = ReviewSummary(completed_fields=3, total_fields=3)
    text = format_response(EndReview(state=_state(), review=review), mixed_schema)
    assert text.endswith('or "edit <field_id>" to make changes.')


def test_ask_again_and_error(three_field_schema: Schema) -> None:
    again = AskAgain(state=_state(), message="No problem, let's try again.", ask_field=three_field_schema.fields[0])
    assert format_response(again) == "No problem, let's try again.\n\n**Name** *[Required]*"
    error = ErrorResult(state=None, message="System error: boom")
    assert format_response(error) == "System error: boom"
