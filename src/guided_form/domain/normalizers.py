"""Value normalization applied before validation and storage."""

from __future__ import annotations

from guided_form.config.models import FieldDefinition


def _capitalize_words(value: str) -> str:
    # Split on single spaces so repeated spaces survive as empty tokens
    return " ".join(w[:1].upper() + w[1:].lower() for w in value.split(" "))


def normalize_value(field: FieldDefinition, value: str | None) -> str | None:
    """Trim, then apply type-specific cleanup. Falsy input is returned unchanged."""
    if not value:
        return value

    normalized = value.strip()
    if field.type == "date":
        normalized = normalized.replace("/", "-")
    elif field.type == "person_name":
        normalized = _capitalize_words(normalized)
    return normalized
