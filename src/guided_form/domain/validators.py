"""Pure field validators: type checks, length limits, custom rules. No I/O."""

from __future__ import annotations

import json
import re
from datetime import date

from pydantic import BaseModel, Field

from guided_form.config.models import FieldDefinition, MinWordCount, NoSpecialCharsStart

REQUIRED_ERROR = "This field is required."
DEFAULT_NAME_MAX_LENGTH = 100

EMAIL_RE = re.compile(r"^[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+$")
URL_RE = re.compile(r"^https?://[^\s/$.?#].[^\s]*$", re.IGNORECASE)
_SPECIAL_START_RE = re.compile(r"^[^a-zA-Z0-9]")


class ValidationResult(BaseModel):
    """Outcome of validating one raw value against one field."""

    valid: bool
    errors: list[str] = Field(default_factory=list)


def _is_blank(value: str | None) -> bool:
    return value is None or value.strip() == ""


def _check_text_length(field: FieldDefinition, value: str) -> list[str]:
    errors = []
    if field.min_length and len(value) < field.min_length:
        errors.append(f"Minimum length is {field.min_length} characters.")
    if field.max_length and len(value) > field.max_length:
        errors.append(f"Maximum length is {field.max_length} characters.")
    return errors


def _check_date(field: FieldDefinition, value: str) -> list[str]:
    pattern = field.validation.pattern if field.validation else None
    if not pattern:
        return []
    if not re.search(pattern, value):
        return ["Date must be in YYYY-MM-DD format."]
    try:
        date.fromisoformat(value)
    except ValueError:
        return ["Invalid date."]
    return []


def _check_person_name(field: FieldDefinition, value: str) -> list[str]:
    limit = field.max_length or DEFAULT_NAME_MAX_LENGTH
    if len(value) > limit:
        return [f"Name is too long (max {limit} characters)."]
    return []


def _check_object_list(field: FieldDefinition, value: str) -> list[str]:
    """Value is a JSON array of records; each record is checked against the child fields."""
    try:
        items = json.loads(value)
    except (json.JSONDecodeError, RecursionError):
        return ["Please provide the entries as a JSON list."]
    if not isinstance(items, list) or not all(isinstance(i, dict) for i in items):
        return ["Please provide the entries as a JSON list of objects."]
    errors = []
    for n, item in enumerate(items, start=1):
        for child in field.fields or []:
            raw = item.get(child.id)
            child_value = "" if raw is None else str(raw)
            for err in validate_field(child, child_value).errors:
                errors.append(f"Item {n}, {child.label}: {err}")
    return errors


def _check_email(value: str) -> list[str]:
    return [] if EMAIL_RE.match(value) else ["Please enter a valid email address."]


def _check_number(value: str) -> list[str]:
    try:
        float(value.replace(",", ""))
    except ValueError:
        return ["Please enter a number."]
    return []


def _check_url(value: str) -> list[str]:
    return [] if URL_RE.match(value) else ["Please enter a valid URL (starting with http:// or https://)."]


def apply_custom_rule(rule: NoSpecialCharsStart | MinWordCount, value: str) -> str | None:
    """Return an error message when value breaks the rule, else None."""
    if isinstance(rule, NoSpecialCharsStart):
        if _SPECIAL_START_RE.match(value):
            return "Should not start with special characters."
    elif isinstance(rule, MinWordCount):
        if len(value.split()) < rule.count:
            return f"Please provide at least {rule.count} words."
    return None


def validate_field(field: FieldDefinition, value: str | None) -> ValidationResult:
    """
    Validate a raw value against a field definition.

    A required field with a blank value yields a single error and no further checks.
    An optional blank value is valid. Otherwise type checks run first, then custom rules;
    every failing check contributes its own error.
    """
    if field.required and _is_blank(value):
        return ValidationResult(valid=False, errors=[REQUIRED_ERROR])
    if _is_blank(value):
        return ValidationResult(valid=True)

    v = value.strip()
    errors: list[str] = []

    if field.type in ("short_text", "long_text"):
        errors.extend(_check_text_length(field, v))
    elif field.type == "date":
        errors.extend(_check_date(field, v))
    elif field.type == "person_name":
        errors.extend(_check_person_name(field, v))
    elif field.type == "object_list":
        errors.extend(_check_object_list(field, v))
    elif field.type == "email":
        errors.extend(_check_email(v))
    elif field.type == "number":
        errors.extend(_check_number(v))
    elif field.type == "url":
        errors.extend(_check_url(v))

    if field.validation:
        for rule in field.validation.custom_rules:
            err = apply_custom_rule(rule, v)
            if err:
                errors.append(err)

    return ValidationResult(valid=not errors, errors=errors)
