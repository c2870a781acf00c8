"""Hand-off payload for the document renderer once the form is finalized."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from guided_form.config.models import Schema
from guided_form.domain.state import ConversationState, FieldMetrics, utcnow


class CompletionSummary(BaseModel):
    """Answers plus audit metadata for the finalization subsystem."""

    doc_type: str
    schema_version: str
    answers: dict[str, str] = Field(default_factory=dict)
    document_data: dict[str, Any] = Field(
        default_factory=dict,
        description="Answers with object_list values decoded into lists of records",
    )
    field_count: int = 0
    required_gaps: list[str] = Field(default_factory=list, description="Labels of unanswered required fields")
    skipped_fields: list[str] = Field(default_factory=list)
    total_re_asks: int = 0
    duration_seconds: float | None = None
    field_metrics: dict[str, FieldMetrics] = Field(default_factory=dict)


def required_gaps(state: ConversationState, schema: Schema) -> list[str]:
    """Labels of required fields with no confirmed answer, in schema order."""
    return [f.label for f in schema.fields if f.required and f.id not in state.answers]


def _document_data(state: ConversationState, schema: Schema) -> dict[str, Any]:
    data: dict[str, Any] = {}
    for f in schema.fields:
        if f.id not in state.answers:
            continue
        value = state.answers[f.id]
        if f.type == "object_list":
            # Validated on capture; an optional blank answer decodes to no records
            data[f.id] = json.loads(value) if value else []
        else:
            data[f.id] = value
    return data


def build_completion_summary(
    state: ConversationState,
    schema: Schema,
    now: datetime | None = None,
) -> CompletionSummary:
    now = now or utcnow()
    return CompletionSummary(
        doc_type=state.doc_type,
        schema_version=state.schema_version,
        answers=dict(state.answers),
        document_data=_document_data(state, schema),
        field_count=len(state.answers),
        required_gaps=required_gaps(state, schema),
        skipped_fields=list(state.skipped),
        total_re_asks=state.metadata.total_re_asks,
        duration_seconds=(now - state.metadata.started_at).total_seconds(),
        field_metrics={k: v.model_copy() for k, v in state.metadata.field_metrics.items()},
    )
