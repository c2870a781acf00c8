"""Load and validate guided form schemas from YAML."""

from __future__ import annotations

import asyncio
import os
import re
from pathlib import Path
from typing import Protocol, runtime_checkable

import structlog
import yaml
from pydantic import ValidationError

from guided_form.config.models import Schema
from guided_form.exceptions import SchemaLoadError

log = structlog.get_logger(__name__)

SCHEMAS_DIR_ENV = "GUIDED_FORM_SCHEMAS_DIR"

_DOC_TYPE_RE = re.compile(r"^[A-Za-z0-9_-]+$")


def default_schemas_dir() -> Path:
    """Directory holding <doc_type>.yaml files: env override, else the packaged schemas."""
    override = os.environ.get(SCHEMAS_DIR_ENV)
    if override:
        return Path(override)
    return Path(__file__).resolve().parent.parent / "schemas"


def load_schema(doc_type: str, schemas_dir: str | Path | None = None) -> Schema:
    """
    Load <schemas_dir>/<doc_type>.yaml and validate into Schema.
    Raises SchemaLoadError on a missing, empty, unparsable or invalid file.
    """
    if not _DOC_TYPE_RE.match(doc_type or ""):
        raise SchemaLoadError(doc_type, "invalid document type name")

    base = Path(schemas_dir) if schemas_dir is not None else default_schemas_dir()
    path = base / f"{doc_type}.yaml"
    if not path.exists():
        raise SchemaLoadError(doc_type, f"schema file not found: {path}")

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        raise SchemaLoadError(doc_type, str(e)) from e
    if data is None:
        raise SchemaLoadError(doc_type, "schema file is empty")
    if isinstance(data, dict):
        data.setdefault("document_type", doc_type)

    try:
        schema = Schema.model_validate(data)
    except ValidationError as e:
        raise SchemaLoadError(doc_type, f"invalid schema: {e}") from e

    log.info("schema_loaded", doc_type=doc_type, version=schema.version, fields=len(schema.fields))
    return schema


@runtime_checkable
class SchemaSource(Protocol):
    """Protocol for resolving a document type to its schema (may perform I/O)."""

    async def load(self, doc_type: str) -> Schema:
        """Return the schema or raise SchemaLoadError."""
        ...


class YamlSchemaSource:
    """Reads schemas from a directory of YAML files. File I/O runs in a worker thread."""

    def __init__(self, schemas_dir: str | Path | None = None) -> None:
        self._dir = Path(schemas_dir) if schemas_dir is not None else None

    async def load(self, doc_type: str) -> Schema:
        return await asyncio.to_thread(load_schema, doc_type, self._dir)


class StaticSchemaSource:
    """Serves pre-built Schema objects. Useful for embedding and tests."""

    def __init__(self, schemas: dict[str, Schema] | None = None) -> None:
        self._schemas = dict(schemas or {})
        self.load_count = 0

    async def load(self, doc_type: str) -> Schema:
        self.load_count += 1
        schema = self._schemas.get(doc_type)
        if schema is None:
            raise SchemaLoadError(doc_type, "unknown document type")
        return schema
