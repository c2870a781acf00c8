"""Session storage for guided form snapshots: Protocol + in-memory implementation."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from guided_form.domain.state import ConversationState


@runtime_checkable
class StateStore(Protocol):
    """Where a host keeps one ConversationState snapshot per session between turns."""

    async def get(self, session_id: str) -> ConversationState | None:
        """Snapshot for session, or None if the session was never started or has ended."""
        ...

    async def set(self, session_id: str, state: ConversationState) -> None:
        """Replace the stored snapshot for session."""
        ...

    async def delete(self, session_id: str) -> None:
        """Forget a session. Unknown ids are ignored."""
        ...


class InMemoryStateStore:
    """
    Dict of snapshots keyed by session id. Snapshots are copied in and out, so a caller
    holding a returned state cannot change what the next turn sees. Single process only.
    """

    def __init__(self) -> None:
        self._snapshots: dict[str, ConversationState] = {}

    async def get(self, session_id: str) -> ConversationState | None:
        state = self._snapshots.get(session_id)
        return state.model_copy(deep=True) if state is not None else None

    async def set(self, session_id: str, state: ConversationState) -> None:
        self._snapshots[session_id] = state.model_copy(deep=True)

    async def delete(self, session_id: str) -> None:
        self._snapshots.pop(session_id, None)

    def session_ids(self, doc_type: str | None = None) -> list[str]:
        """Stored session ids, optionally only those filling in doc_type."""
        return [
            sid
            for sid, state in self._snapshots.items()
            if doc_type is None or state.doc_type == doc_type
        ]
