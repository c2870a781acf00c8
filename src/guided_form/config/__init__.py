"""Schema models and loading."""

from guided_form.config.models import (
    CommandConfig,
    FieldDefinition,
    FieldValidation,
    MinWordCount,
    NoSpecialCharsStart,
    Schema,
    SchemaMetadata,
)
from guided_form.config.loader import (
    SchemaSource,
    StaticSchemaSource,
    YamlSchemaSource,
    load_schema,
)

__all__ = [
    "CommandConfig",
    "FieldDefinition",
    "FieldValidation",
    "MinWordCount",
    "NoSpecialCharsStart",
    "Schema",
    "SchemaMetadata",
    "SchemaSource",
    "StaticSchemaSource",
    "YamlSchemaSource",
    "load_schema",
]
