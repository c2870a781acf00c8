"""CLI argument parsing and the interactive loop, driven by scripted input."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Iterator

import pytest

from guided_form.cli import parse_args, run_interactive
from guided_form.config.models import Schema
from guided_form.infrastructure.state_store import InMemoryStateStore
from guided_form.orchestration.orchestrator import GuidedFormOrchestrator
from guided_form.orchestration.runtime import GuidedFormRuntime


def _script(monkeypatch: pytest.MonkeyPatch, lines: list[str]) -> None:
    feed: Iterator[str] = iter(lines)

    def fake_input(prompt: str = "") -> str:
        try:
            return next(feed)
        except StopIteration:
            raise EOFError from None

    monkeypatch.setattr("builtins.input", fake_input)


def test_parse_args_defaults() -> None:
    args = parse_args([])
    assert args.doc_type == "charter"
    assert args.schemas_dir is None
    assert args.session == "cli-session"
    assert args.debug is False


def test_parse_args_short_flags() -> None:
    args = parse_args(["-t", "memo", "-d", "/tmp/schemas", "--debug"])
    assert args.doc_type == "memo"
    assert args.schemas_dir == "/tmp/schemas"
    assert args.debug is True


def test_interactive_loop_stops_on_cancel(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    orchestrator: GuidedFormOrchestrator,
) -> None:
    _script(monkeypatch, ["", "cancel", "never read"])
    runtime = GuidedFormRuntime(orchestrator, InMemoryStateStore())
    asyncio.run(run_interactive(runtime, "cli", "charter"))
    out = capsys.readouterr().out
    assert "Let's create your" in out
    assert "Form cancelled" in out


def test_interactive_loop_prints_document_on_finalize(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    three_field_schema: Schema,
    orchestrator: GuidedFormOrchestrator,
) -> None:
    lines: list[str] = []
    for field in three_field_schema.fields:
        # a required field is only skipped on a repeated "skip"
        lines.extend(["skip", "skip"] if field.required else ["skip"])
    lines.append("finalize")
    _script(monkeypatch, lines)
    runtime = GuidedFormRuntime(orchestrator, InMemoryStateStore())
    asyncio.run(run_interactive(runtime, "cli", "charter"))
    out = capsys.readouterr().out
    assert "Form finalized." in out
    after_reply = out.split("Form finalized.", 1)[1].split("\n", 1)[1]
    document = json.loads(after_reply)
    assert document == {}


def test_interactive_loop_ends_on_eof(
    monkeypatch: pytest.MonkeyPatch,
    orchestrator: GuidedFormOrchestrator,
) -> None:
    _script(monkeypatch, [])
    runtime = GuidedFormRuntime(orchestrator, InMemoryStateStore())
    asyncio.run(run_interactive(runtime, "cli", "charter"))
    state = asyncio.run(runtime.get_state("cli"))
    assert state is not None
