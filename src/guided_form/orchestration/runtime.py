"""Guided form runtime: routes messages by session id and persists state between turns."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from pydantic import BaseModel

from guided_form.domain.phases import is_terminal
from guided_form.domain.results import ErrorResult, TurnResult
from guided_form.domain.state import ConversationState
from guided_form.exceptions import SessionNotFoundError
from guided_form.infrastructure.state_store import StateStore
from guided_form.logging import bind_context, clear_context
from guided_form.orchestration.formatter import format_response
from guided_form.orchestration.orchestrator import INIT_MESSAGE, GuidedFormOrchestrator

log = structlog.get_logger(__name__)


class TurnReply(BaseModel):
    """Rendered chat text plus the structured result it came from."""

    text: str
    result: TurnResult

    @property
    def action(self) -> str:
        return self.result.action


def _is_finished(reply: TurnReply) -> bool:
    state = reply.result.state
    return state is not None and is_terminal(state.current_state)


class GuidedFormRuntime:
    """
    Holds orchestrator + state store; serializes turns per session_id.

    A session's lock is dropped once no turn is using it and the session reached a
    terminal state (cancelled or finalized), or when end_session is called.
    """

    def __init__(self, orchestrator: GuidedFormOrchestrator, state_store: StateStore) -> None:
        self._orchestrator = orchestrator
        self._store = state_store
        self._locks: dict[str, asyncio.Lock] = {}
        self._waiting: dict[str, int] = {}

    @asynccontextmanager
    async def _session_turn(self, session_id: str) -> AsyncIterator[list[TurnReply]]:
        lock = self._locks.get(session_id)
        if lock is None:
            lock = self._locks[session_id] = asyncio.Lock()
        self._waiting[session_id] = self._waiting.get(session_id, 0) + 1
        replies: list[TurnReply] = []
        try:
            async with lock:
                yield replies
        finally:
            self._waiting[session_id] -= 1
            if not self._waiting[session_id]:
                del self._waiting[session_id]
                if replies and _is_finished(replies[-1]):
                    self._locks.pop(session_id, None)

    async def start_session(self, session_id: str, doc_type: str = "charter") -> TurnReply:
        """Start (or restart) a form for session_id and return the greeting + first ask."""
        async with self._session_turn(session_id) as replies:
            reply = await self._run(session_id, None, INIT_MESSAGE, doc_type)
            replies.append(reply)
        return reply

    async def handle_message(
        self,
        session_id: str,
        user_message: str,
        doc_type: str = "charter",
    ) -> TurnReply:
        """
        Process one user message for session_id. A session with no stored state is
        started instead, and the message is treated as the opening turn.
        """
        async with self._session_turn(session_id) as replies:
            state = await self._store.get(session_id)
            reply = await self._run(session_id, state, user_message, doc_type)
            replies.append(reply)
        return reply

    async def get_state(self, session_id: str) -> ConversationState | None:
        return await self._store.get(session_id)

    async def require_state(self, session_id: str) -> ConversationState:
        state = await self._store.get(session_id)
        if state is None:
            raise SessionNotFoundError(session_id)
        return state

    async def end_session(self, session_id: str) -> None:
        await self._store.delete(session_id)
        self._locks.pop(session_id, None)
        log.info("session_ended", session_id=session_id)

    async def _run(
        self,
        session_id: str,
        state: ConversationState | None,
        user_message: str,
        doc_type: str,
    ) -> TurnReply:
        bind_context(session_id=session_id)
        try:
            result = await self._orchestrator.process(state, user_message, doc_type)
            if result.state is not None:
                await self._store.set(session_id, result.state)
            # Non-error results imply the schema is already cached
            schema = None
            if not isinstance(result, ErrorResult):
                schema = await self._orchestrator.get_schema(result.state.doc_type)
            text = format_response(result, schema)
        finally:
            clear_context()
        return TurnReply(text=text, result=result)

