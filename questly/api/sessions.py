"""In-memory registry of running play sessions.

Sessions are ephemeral: they live in this process and are never written to
disk. Each session owns its own `StoryNavigator`. A session is torn down when
the client deletes or finishes it, when it sits untouched for longer than
``idle_timeout`` seconds, or when the app shuts down.
"""

import logging
import time
import uuid

from questly.errors import SessionError
from questly.models import CharacterSnapshot
from questly.navigator import StoryNavigator
from questly.store import EventStore

logger = logging.getLogger(__name__)


class SessionRegistry:
    def __init__(
        self,
        store: EventStore,
        start_event_id: str,
        idle_timeout: float | None = None,
        clock=time.monotonic,
    ) -> None:
        self._store = store
        self._start_event_id = start_event_id
        self._idle_timeout = idle_timeout
        self._clock = clock
        self._sessions: dict[str, StoryNavigator] = {}
        self._touched: dict[str, float] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def create(
        self, character: CharacterSnapshot, start_event_id: str | None = None
    ) -> tuple[str, StoryNavigator]:
        self.sweep()
        navigator = StoryNavigator(
            self._store, character, start_event_id or self._start_event_id
        )
        session_id = uuid.uuid4().hex
        self._sessions[session_id] = navigator
        self._touched[session_id] = self._clock()
        logger.info("Session %s created for character %s", session_id, character.id)
        return session_id, navigator

    def get(self, session_id: str) -> StoryNavigator:
        navigator = self._sessions.get(session_id)
        if navigator is None:
            raise SessionError(f"Session {session_id!r} not found")
        self._touched[session_id] = self._clock()
        return navigator

    def close(self, session_id: str) -> bool:
        navigator = self._sessions.pop(session_id, None)
        self._touched.pop(session_id, None)
        if navigator is None:
            return False
        navigator.close()
        logger.info("Session %s closed", session_id)
        return True

    def sweep(self) -> int:
        """Close sessions idle for longer than the timeout; returns how many."""
        if not self._idle_timeout:
            return 0
        cutoff = self._clock() - self._idle_timeout
        idle = [sid for sid, touched in self._touched.items() if touched < cutoff]
        for session_id in idle:
            logger.info("Session %s idle, dropping", session_id)
            self.close(session_id)
        return len(idle)

    def close_all(self) -> None:
        for session_id in list(self._sessions):
            self.close(session_id)
