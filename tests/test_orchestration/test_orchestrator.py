"""Orchestrator: session start, documented scenarios, schema load failures, caching."""

from __future__ import annotations

import asyncio
from pathlib import Path

from guided_form.config.loader import StaticSchemaSource, YamlSchemaSource
from guided_form.domain.phases import MachineState
from guided_form.domain.results import AskField, ConfirmValue, ErrorResult, ValidationFailed
from guided_form.domain.state import ConversationState
from guided_form.orchestration.orchestrator import INIT_MESSAGE, GuidedFormOrchestrator


def test_init_asks_first_field(orchestrator: GuidedFormOrchestrator) -> None:
    result = asyncio.run(orchestrator.process(None, INIT_MESSAGE, "charter"))
    assert isinstance(result, AskField)
    assert result.ask_field.id == "name"
    assert result.state.current_state == MachineState.ASK
    assert result.message == "Let's create your Project Charter. This should take about 5 minutes."


def test_init_state_restarts(orchestrator: GuidedFormOrchestrator) -> None:
    stale = ConversationState(doc_type="charter", schema_version="1.0", answers={"name": "Old"})
    result = asyncio.run(orchestrator.process(stale, "hello", "charter"))
    assert isinstance(result, AskField)
    assert result.state.answers == {}


def test_documented_three_field_scenario(orchestrator: GuidedFormOrchestrator) -> None:
    async def run() -> None:
        result = await orchestrator.process(None, INIT_MESSAGE, "charter")
        assert result.ask_field.id == "name"

        result = await orchestrator.process(result.state, "A", "charter")
        assert isinstance(result, ValidationFailed)
        assert result.state.current_field_index == 0
        assert result.state.metadata.total_re_asks == 1

        result = await orchestrator.process(result.state, "Alice Corp", "charter")
        assert isinstance(result, ConfirmValue)

        result = await orchestrator.process(result.state, "yes", "charter")
        assert isinstance(result, AskField)
        assert result.ask_field.id == "email"
        assert result.state.answers["name"] == "Alice Corp"

        result = await orchestrator.process(result.state, "back", "charter")
        assert isinstance(result, AskField)
        assert result.ask_field.id == "name"
        assert result.state.current_field_index == 0
        assert result.state.answers["name"] == "Alice Corp"

    asyncio.run(run())


def test_schema_loaded_once_per_doc_type(
    orchestrator: GuidedFormOrchestrator,
    schema_source: StaticSchemaSource,
) -> None:
    async def run() -> None:
        result = await orchestrator.process(None, INIT_MESSAGE, "charter")
        for message in ("Alice Corp", "yes", "preview"):
            result = await orchestrator.process(result.state, message, "charter")
        assert schema_source.load_count == 1

    asyncio.run(run())


def test_state_doc_type_wins_over_argument(orchestrator: GuidedFormOrchestrator) -> None:
    async def run() -> None:
        result = await orchestrator.process(None, INIT_MESSAGE, "mixed")
        result = await orchestrator.process(result.state, "edit owner", "charter")
        assert isinstance(result, AskField)
        assert result.ask_field.id == "owner"

    asyncio.run(run())


def test_init_load_failure_returns_error() -> None:
    orchestrator = GuidedFormOrchestrator(StaticSchemaSource({}))
    result = asyncio.run(orchestrator.process(None, INIT_MESSAGE, "charter"))
    assert isinstance(result, ErrorResult)
    assert result.state is None
    assert result.message.startswith("System error: Failed to load schema for charter")


def test_load_failure_preserves_prior_state(tmp_path: Path) -> None:
    prior = ConversationState(
        doc_type="memo",
        schema_version="1.0",
        current_state=MachineState.ASK,
        answers={"subject": "Budget"},
    )
    orchestrator = GuidedFormOrchestrator(YamlSchemaSource(tmp_path))
    result = asyncio.run(orchestrator.process(prior, "yes", "memo"))
    assert isinstance(result, ErrorResult)
    assert result.state == prior
    assert "schema file not found" in result.message


def test_default_source_reads_packaged_schemas() -> None:
    orchestrator = GuidedFormOrchestrator()
    result = asyncio.run(orchestrator.process(None, INIT_MESSAGE, "charter"))
    assert isinstance(result, AskField)
    assert result.ask_field.id == "project_name"


def test_non_utf8_schema_returns_error(tmp_path: Path) -> None:
    (tmp_path / "bad.yaml").write_bytes(b"\xff\xfe\x00garbage")
    orchestrator = GuidedFormOrchestrator(YamlSchemaSource(tmp_path))
    result = asyncio.run(orchestrator.process(None, INIT_MESSAGE, "bad"))
    assert isinstance(result, ErrorResult)
    assert result.message.startswith("System error: Failed to load schema for bad")
