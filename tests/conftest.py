"""Pytest fixtures: schemas, schema sources, orchestrator, state factories."""

from __future__ import annotations

from pathlib import Path

import pytest

from guided_form.config.loader import StaticSchemaSource, load_schema
from guided_form.config.models import FieldDefinition, FieldValidation, Schema, SchemaMetadata
from guided_form.domain.machine import create_initial_state
from guided_form.domain.phases import MachineState
from guided_form.domain.state import ConversationState
from guided_form.infrastructure.state_store import InMemoryStateStore
from guided_form.orchestration.orchestrator import GuidedFormOrchestrator

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


@pytest.fixture
def three_field_schema() -> Schema:
    """Three required fields: name (min 3 chars), email, start_date."""
    return Schema(
        document_type="charter",
        version="1.0",
        metadata=SchemaMetadata(title="Project Charter", estimated_time_minutes=5),
        fields=[
            FieldDefinition(id="name", label="Name", type="short_text", required=True, min_length=3),
            FieldDefinition(id="email", label="Email", type="email", required=True),
            FieldDefinition(
                id="start_date",
                label="Start Date",
                type="date",
                required=True,
                validation=FieldValidation(pattern=DATE_PATTERN),
            ),
        ],
    )


@pytest.fixture
def mixed_schema() -> Schema:
    """Required, optional, required: exercises skip confirmation and end review gaps."""
    return Schema(
        document_type="mixed",
        version="2.0",
        fields=[
            FieldDefinition(id="title", label="Title", type="short_text", required=True),
            FieldDefinition(id="notes", label="Notes", type="long_text", required=False),
            FieldDefinition(id="owner", label="Owner", type="person_name", required=True),
        ],
    )


@pytest.fixture
def schema_source(three_field_schema: Schema, mixed_schema: Schema) -> StaticSchemaSource:
    return StaticSchemaSource({"charter": three_field_schema, "mixed": mixed_schema})


@pytest.fixture
def orchestrator(schema_source: StaticSchemaSource) -> GuidedFormOrchestrator:
    return GuidedFormOrchestrator(schema_source)


@pytest.fixture
def state_store() -> InMemoryStateStore:
    return InMemoryStateStore()


@pytest.fixture
def ask_state(three_field_schema: Schema) -> ConversationState:
    """Fresh state positioned on the first field."""
    state = create_initial_state("charter", three_field_schema)
    state.current_state = MachineState.ASK
    return state


@pytest.fixture
def schemas_dir() -> Path:
    """Packaged schema directory."""
    return Path(__file__).resolve().parent.parent / "src" / "guided_form" / "schemas"


@pytest.fixture
def charter_schema(schemas_dir: Path) -> Schema:
    return load_schema("charter", schemas_dir)
