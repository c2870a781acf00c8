"""Pydantic models for guided form schemas. Central contract for loading and validation."""

from __future__ import annotations

import re
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# --- Custom validation rules ---

_MIN_WORD_COUNT_RE = re.compile(r"^min_word_count_(\d+)$")


class NoSpecialCharsStart(BaseModel):
    """Value must start with a letter or digit."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["no_special_chars_start"] = "no_special_chars_start"


class MinWordCount(BaseModel):
    """Value must contain at least `count` whitespace-delimited words."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["min_word_count"] = "min_word_count"
    count: int = Field(..., ge=1)


CustomRule = Annotated[Union[NoSpecialCharsStart, MinWordCount], Field(discriminator="kind")]


def parse_custom_rule(name: str) -> NoSpecialCharsStart | MinWordCount:
    """Map a schema rule name (e.g. "min_word_count_10") to its typed rule."""
    if name == "no_special_chars_start":
        return NoSpecialCharsStart()
    m = _MIN_WORD_COUNT_RE.match(name)
    if m:
        return MinWordCount(count=int(m.group(1)))
    raise ValueError(f"Unknown custom rule: {name}")


# --- Field configuration ---

FieldType = Literal[
    "short_text",
    "long_text",
    "date",
    "person_name",
    "object_list",
    "email",
    "number",
    "url",
]


class FieldValidation(BaseModel):
    """Format and custom-rule constraints for a field."""

    model_config = ConfigDict(frozen=True)

    pattern: str | None = Field(default=None, description="Regex the trimmed value must match")
    custom_rules: list[CustomRule] = Field(default_factory=list)

    @field_validator("pattern")
    @classmethod
    def _pattern_compiles(cls, v: str | None) -> str | None:
        if v is not None:
            try:
                re.compile(v)
            except re.error as e:
                raise ValueError(f"Invalid pattern {v!r}: {e}") from e
        return v

    @field_validator("custom_rules", mode="before")
    @classmethod
    def _parse_rule_names(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, list):
            return [parse_custom_rule(item) if isinstance(item, str) else item for item in v]
        return v


class FieldDefinition(BaseModel):
    """One collectible field. Order within the schema is presentation order."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Unique field identifier (e.g. project_name)")
    label: str = Field(..., description="Human-readable label shown when asking")
    type: FieldType = Field(default="short_text", description="Drives validation and normalization")
    required: bool = False
    min_length: int | None = Field(default=None, ge=0)
    max_length: int | None = Field(default=None, ge=1)
    validation: FieldValidation | None = None
    # Only for type="object_list": the columns of each repeated record
    fields: list[FieldDefinition] | None = None
    # Presentation hints, used by the formatter only
    help_text: str | None = None
    placeholder: str | None = None
    example: str | None = None

    @model_validator(mode="after")
    def _check_children(self) -> FieldDefinition:
        if self.type == "object_list":
            if not self.fields:
                raise ValueError(f"Field {self.id!r}: object_list requires child fields")
            for child in self.fields:
                if child.type == "object_list":
                    raise ValueError(f"Field {self.id!r}: nested object_list is not supported")
        elif self.fields:
            raise ValueError(f"Field {self.id!r}: only object_list fields may declare child fields")
        if (
            self.min_length is not None
            and self.max_length is not None
            and self.min_length > self.max_length
        ):
            raise ValueError(f"Field {self.id!r}: min_length exceeds max_length")
        return self


# --- Schema-level settings ---


class SchemaMetadata(BaseModel):
    """Descriptive metadata used in the opening greeting."""

    title: str = Field(default="document")
    estimated_time_minutes: int = Field(default=10, ge=0)
    description: str | None = None


class CommandConfig(BaseModel):
    """A user command as advertised by the help action."""

    enabled: bool = True
    description: str = ""


def default_commands() -> dict[str, CommandConfig]:
    return {
        "back": CommandConfig(description="Return to the previous field"),
        "edit <field_id>": CommandConfig(description="Jump to a specific field"),
        "skip": CommandConfig(description="Skip the current field"),
        "preview": CommandConfig(description="Show captured values so far"),
        "help": CommandConfig(description="Show available commands"),
        "cancel": CommandConfig(description="Cancel the form"),
        "finalize": CommandConfig(description="Generate the document after the last field"),
    }


# --- Top-level schema ---


class Schema(BaseModel):
    """Full guided form schema for one document type, loaded from YAML."""

    document_type: str = Field(..., min_length=1)
    version: str = Field(default="1.0")
    metadata: SchemaMetadata = Field(default_factory=SchemaMetadata)
    fields: list[FieldDefinition] = Field(..., min_length=1, description="Fields to collect in order")
    commands: dict[str, CommandConfig] = Field(default_factory=default_commands)

    @field_validator("version", mode="before")
    @classmethod
    def _version_as_str(cls, v: Any) -> Any:
        # YAML reads `version: 1.0` as a float
        if isinstance(v, (int, float)):
            return str(v)
        return v

    @model_validator(mode="after")
    def _unique_ids(self) -> Schema:
        seen: set[str] = set()
        for f in self.fields:
            if f.id in seen:
                raise ValueError(f"Duplicate field id: {f.id}")
            seen.add(f.id)
        return self

    @property
    def field_ids(self) -> list[str]:
        return [f.id for f in self.fields]

    def index_of(self, field_id: str) -> int:
        """Position of field_id in presentation order, or -1."""
        for i, f in enumerate(self.fields):
            if f.id == field_id:
                return i
        return -1

    def field_by_id(self, field_id: str) -> FieldDefinition | None:
        i = self.index_of(field_id)
        return self.fields[i] if i >= 0 else None
