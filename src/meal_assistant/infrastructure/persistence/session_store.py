"""
infrastructure.persistence.session_store - In-memory session registry.

Sessions live only as long as the process; a restart loses both the
transcripts and the candidate sets.
"""

from __future__ import annotations

import logging

from meal_assistant.application.context import Session
from meal_assistant.domain.exceptions import SessionNotFound

logger = logging.getLogger(__name__)


class InMemorySessionStore:
    def __init__(self):
        self._sessions: dict[str, Session] = {}

    def add(self, session: Session) -> None:
        self._sessions[session.session_id] = session
        logger.debug("Stored session %s (%d active)", session.session_id, len(self._sessions))

    def get(self, session_id: str) -> Session:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise SessionNotFound(f"Session '{session_id}' not found") from None

    def remove(self, session_id: str) -> None:
        if self._sessions.pop(session_id, None) is None:
            raise SessionNotFound(f"Session '{session_id}' not found")

    def __len__(self) -> int:
        return len(self._sessions)
