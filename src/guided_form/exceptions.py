"""Exception hierarchy for the guided form engine.

User input never raises: bad answers and unknown commands become result actions.
Only configuration and host-level lookups raise.
"""

from __future__ import annotations


class GuidedFormError(Exception):
    """Base exception for all guided form errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class SchemaLoadError(GuidedFormError):
    """Schema for a document type is missing or malformed."""

    def __init__(self, doc_type: str, reason: str) -> None:
        self.doc_type = doc_type
        self.reason = reason
        super().__init__(f"Failed to load schema for {doc_type}: {reason}")


class SessionNotFoundError(GuidedFormError):
    """No conversation state stored for the session id."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"Session not found: {session_id}")
