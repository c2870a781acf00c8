"""Render turn results as chat text (markdown). Consumes `action`; never changes state."""

from __future__ import annotations

from guided_form.config.models import FieldDefinition, Schema
from guided_form.domain.results import (
    AskAgain,
    AskField,
    ConfirmValue,
    EndReview,
    Finalized,
    Preview,
    ReviewSummary,
    ShowPreview,
    TurnResult,
    ValidationFailed,
)


def _truncate(value: str, limit: int) -> str:
    return value[:limit] + "..." if len(value) > limit else value


def format_field_ask(field: FieldDefinition) -> str:
    ask = f"**{field.label}**"
    if field.help_text:
        ask += f" — {field.help_text}"
    if field.example:
        ask += f' (e.g., "{field.example}")'
    if field.required:
        ask += " *[Required]*"
    return ask


def format_confirmation(value: str) -> str:
    return f'Got it: "{_truncate(value, 100)}"\n\nConfirm? (yes/no)'


def format_validation_error(field: FieldDefinition, errors: list[str]) -> str:
    message = f"**Validation Issue:** {' '.join(errors)}\n\n"
    message += f"Let's try again for **{field.label}**."
    if field.example:
        message += f' (e.g., "{field.example}")'
    return message


def _label_for(schema: Schema | None, field_id: str) -> str:
    field = schema.field_by_id(field_id) if schema else None
    return field.label if field else field_id


def _is_required(schema: Schema | None, field_id: str) -> bool:
    field = schema.field_by_id(field_id) if schema else None
    return bool(field and field.required)


def format_preview(preview: Preview, schema: Schema | None = None) -> str:
    parts = ["## Progress Summary", ""]
    if preview.completed:
        parts.append("### ✓ Completed:")
        for label, value in preview.completed.items():
            parts.append(f"- **{label}**: {_truncate(value, 50)}")
        parts.append("")
    if preview.skipped:
        parts.append("### ⊘ Skipped:")
        for field_id in preview.skipped:
            parts.append(f"- {_label_for(schema, field_id)}")
        parts.append("")
    if preview.remaining:
        parts.append(f"### ⋯ Remaining: {len(preview.remaining)} fields")
        parts.append("")
    parts.append("Type anything to continue, or use a command (back, edit, skip, help).")
    return "\n".join(parts)


def format_end_review(review: ReviewSummary, schema: Schema | None = None) -> str:
    parts = [
        "## Form Complete!",
        "",
        f"You've completed **{review.completed_fields} of {review.total_fields}** fields.",
        "",
    ]
    if review.required_gaps:
        parts.append("### ⚠ Required Fields Missing:")
        parts.extend(f"- {label}" for label in review.required_gaps)
        parts.append("")
        parts.append('Would you like to fill these in now? (Type "edit <field_id>" to jump to a field)')
        parts.append("")

    optional_skipped = [
        field_id for field_id in review.skipped_fields if not _is_required(schema, field_id)
    ]
    if optional_skipped:
        parts.append("### Optional Fields Skipped:")
        parts.extend(f"- {_label_for(schema, field_id)}" for field_id in optional_skipped)
        parts.append("")

    if not review.required_gaps:
        parts.append(
            '**Ready to finalize?** Type "finalize" to generate your document, '
            'or "edit <field_id>" to make changes.'
        )
    return "\n".join(parts).rstrip()


def format_response(result: TurnResult, schema: Schema | None = None) -> str:
    """Chat message for one turn result."""
    if isinstance(result, AskField):
        ask = format_field_ask(result.ask_field)
        return f"{result.message}\n\n{ask}" if result.message else ask
    if isinstance(result, ConfirmValue):
        return format_confirmation(result.value)
    if isinstance(result, ValidationFailed):
        return format_validation_error(result.ask_field, result.errors)
    if isinstance(result, ShowPreview):
        return format_preview(result.preview, schema)
    if isinstance(result, EndReview):
        return format_end_review(result.review, schema)
    if isinstance(result, AskAgain):
        if result.ask_field is None:
            return result.message or ""
        return f"{result.message}\n\n{format_field_ask(result.ask_field)}"
    if isinstance(result, Finalized):
        gaps = result.summary.required_gaps
        note = f" {len(gaps)} required field(s) are flagged for review." if gaps else ""
        return f"{result.message} Captured {result.summary.field_count} fields.{note}"
    return result.message or "Continue..."
