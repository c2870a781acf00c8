"""Interactive CLI for guided form intake."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from guided_form.config.loader import YamlSchemaSource, load_schema
from guided_form.domain.results import Finalized
from guided_form.exceptions import SchemaLoadError
from guided_form.infrastructure.state_store import InMemoryStateStore
from guided_form.logging import configure_logging
from guided_form.orchestration.orchestrator import GuidedFormOrchestrator
from guided_form.orchestration.runtime import GuidedFormRuntime

_END_ACTIONS = ("cancel", "finalize")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Guided form intake demo")
    p.add_argument("--doc-type", "-t", default="charter", help="Document type (schema name)")
    p.add_argument("--schemas-dir", "-d", default=None, help="Directory of <doc_type>.yaml schemas")
    p.add_argument("--session", "-s", default="cli-session", help="Session ID")
    p.add_argument("--debug", action="store_true", help="Pretty console logging at DEBUG level")
    return p.parse_args(argv)


async def run_interactive(runtime: GuidedFormRuntime, session_id: str, doc_type: str) -> None:
    reply = await runtime.start_session(session_id, doc_type)
    print(reply.text)
    print()
    while True:
        try:
            line = input("You: ").strip()
        except EOFError:
            break
        if not line:
            continue
        reply = await runtime.handle_message(session_id, line, doc_type)
        print(f"Assistant: {reply.text}")
        print()
        if isinstance(reply.result, Finalized):
            print(json.dumps(reply.result.summary.document_data, indent=2))
        if reply.action in _END_ACTIONS:
            break


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(debug=args.debug, level=logging.DEBUG if args.debug else logging.WARNING)

    # Fail fast on a bad schema instead of starting a session that can only error
    try:
        load_schema(args.doc_type, args.schemas_dir)
    except SchemaLoadError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    orchestrator = GuidedFormOrchestrator(YamlSchemaSource(args.schemas_dir))
    runtime = GuidedFormRuntime(orchestrator, InMemoryStateStore())

    asyncio.run(run_interactive(runtime, args.session, args.doc_type))
    return 0


if __name__ == "__main__":
    sys.exit(main())
