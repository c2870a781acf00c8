"""Top-level entry point: resolve the schema, parse intent, run one transition."""

from __future__ import annotations

import structlog

from guided_form.config.loader import SchemaSource, YamlSchemaSource
from guided_form.config.models import Schema
from guided_form.domain.intent import parse_intent
from guided_form.domain.machine import create_initial_state, get_current_field, process_transition
from guided_form.domain.phases import MachineState
from guided_form.domain.results import AskField, ErrorResult, TurnResult
from guided_form.domain.state import ConversationState
from guided_form.exceptions import SchemaLoadError

log = structlog.get_logger(__name__)

INIT_MESSAGE = "__INIT__"


class GuidedFormOrchestrator:
    """Schema source + per-doc-type schema cache. Holds no session state."""

    def __init__(self, schema_source: SchemaSource | None = None) -> None:
        self._source = schema_source or YamlSchemaSource()
        self._schemas: dict[str, Schema] = {}

    async def get_schema(self, doc_type: str) -> Schema:
        """Cached schema for doc_type; loads on first use. Raises SchemaLoadError."""
        schema = self._schemas.get(doc_type)
        if schema is None:
            schema = await self._source.load(doc_type)
            self._schemas[doc_type] = schema
        return schema

    async def process(
        self,
        state: ConversationState | None,
        user_message: str,
        doc_type: str = "charter",
    ) -> TurnResult:
        """
        Run one turn. With no state (or an INIT state) start a new form and ask the
        first field; otherwise classify the message and apply the transition.
        A schema that cannot be loaded yields an error result carrying the caller's
        state unchanged.
        """
        try:
            if state is None or state.current_state == MachineState.INIT:
                return await self._start(doc_type)

            schema = await self.get_schema(state.doc_type)
            if schema.version != state.schema_version:
                log.warning(
                    "schema_version_mismatch",
                    doc_type=state.doc_type,
                    state_version=state.schema_version,
                    schema_version=schema.version,
                )
            intent = parse_intent(user_message, state)
            result = process_transition(state, schema, intent)
        except SchemaLoadError as e:
            log.error("schema_load_failed", doc_type=e.doc_type, reason=e.reason)
            return ErrorResult(state=state, message=f"System error: {e.message}")

        log.info(
            "turn_processed",
            doc_type=state.doc_type,
            intent=intent.type.value,
            action=result.action,
            field_index=result.state.current_field_index if result.state else None,
        )
        return result

    async def _start(self, doc_type: str) -> TurnResult:
        schema = await self.get_schema(doc_type)
        state = create_initial_state(doc_type, schema)
        state.current_state = MachineState.ASK
        first_field = get_current_field(state, schema)
        log.info("form_started", doc_type=doc_type, schema_version=schema.version)
        return AskField(
            state=state,
            message=(
                f"Let's create your {schema.metadata.title}. "
                f"This should take about {schema.metadata.estimated_time_minutes} minutes."
            ),
            ask_field=first_field,
        )
