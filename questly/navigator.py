"""Story navigator — walks the event graph for one play session.

State machine:

    NEW            start()                  → LOADING
    LOADING        start event found        → ACTIVE
    LOADING        start event missing      → FAILED
    ACTIVE         choose(i), has next id   → LOADING
    LOADING        next event found         → ACTIVE (new event)
    LOADING        next event missing       → END_OF_BRANCH (same event)
    ACTIVE         choose(i), no next id    → END_OF_BRANCH
    END_OF_BRANCH  finish()                 → TERMINAL
    ACTIVE         finish(), no options     → TERMINAL
    LOADING        fetch raised             → state before the fetch
    any            close()                  → CLOSED

FAILED means the start event is missing: a configuration error, surfaced to
the caller as `EventNotFound`. TERMINAL, FAILED and CLOSED are absorbing.

Reaching the end of a branch never finishes the session by itself; an
explicit `finish()` is required. A dangling ``nextEventId`` is treated like an
intentional ending and leaves the session on the event the player chose from.

Only the newest navigation may apply its result. Each fetch takes a token;
starting a new navigation cancels the in-flight fetch, and a result arriving
with an old token is dropped.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum

from pydantic import BaseModel, Field

from questly.errors import EventNotFound, MissingCharacter, SessionError
from questly.gate import OptionView, annotate_options, is_eligible
from questly.models import CharacterSnapshot, Event
from questly.store import EventStore

logger = logging.getLogger(__name__)

DEFAULT_START_EVENT_ID = "start_forest"


class SessionState(str, Enum):
    NEW = "new"
    LOADING = "loading"
    ACTIVE = "active"
    END_OF_BRANCH = "end_of_branch"
    TERMINAL = "terminal"
    FAILED = "failed"
    CLOSED = "closed"


class EventView(BaseModel):
    """What a renderer shows for a session at one moment."""

    state: SessionState
    character: CharacterSnapshot
    event: Event | None = None
    options: list[OptionView] = Field(default_factory=list)
    can_finish: bool = False
    finished: bool = False


_STALE = object()


class StoryNavigator:
    """Owns the traversal state of one play session.

    Args:
        store:          Where events are fetched from.
        character:      Snapshot gating the options; frozen for the session.
        start_event_id: Logical id of the first event.
    """

    def __init__(
        self,
        store: EventStore,
        character: CharacterSnapshot | None,
        start_event_id: str = DEFAULT_START_EVENT_ID,
    ) -> None:
        if character is None:
            raise MissingCharacter()
        self._store = store
        self._character = character
        self._start_event_id = start_event_id
        self._state = SessionState.NEW
        self._current_event: Event | None = None
        self._token = 0
        self._pending: asyncio.Task | None = None

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def character(self) -> CharacterSnapshot:
        return self._character

    @property
    def start_event_id(self) -> str:
        return self._start_event_id

    @property
    def current_event(self) -> Event | None:
        return self._current_event

    @property
    def end_of_branch(self) -> bool:
        return self._state is SessionState.END_OF_BRANCH

    @property
    def finished(self) -> bool:
        return self._state in (SessionState.TERMINAL, SessionState.FAILED, SessionState.CLOSED)

    @property
    def last_request_token(self) -> int:
        return self._token

    @property
    def can_finish(self) -> bool:
        if self._state is SessionState.END_OF_BRANCH:
            return True
        return (
            self._state is SessionState.ACTIVE
            and self._current_event is not None
            and self._current_event.is_terminal
        )

    def view(self) -> EventView:
        options: list[OptionView] = []
        if (
            self._current_event is not None
            and not self.finished
            and not self.can_finish
        ):
            options = annotate_options(self._character, self._current_event)
        return EventView(
            state=self._state,
            character=self._character,
            event=self._current_event,
            options=options,
            can_finish=self.can_finish,
            finished=self.finished,
        )

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def start(self) -> EventView:
        """Load the start event. Raises `EventNotFound` when it does not exist."""
        if self._state is not SessionState.NEW:
            raise SessionError(f"Session already started (state={self._state.value})")

        self._state = SessionState.LOADING
        try:
            result = await self._load(self._start_event_id)
        except BaseException:
            self._restore(SessionState.NEW)
            raise
        if result is _STALE:
            return self.view()
        if result is None:
            self._state = SessionState.FAILED
            logger.error("Start event %r not found; session cannot begin", self._start_event_id)
            raise EventNotFound(self._start_event_id)

        self._current_event = result
        self._state = SessionState.ACTIVE
        return self.view()

    async def choose(self, index: int) -> EventView:
        """Select option ``index`` of the current event.

        A selection made while an earlier one is still loading supersedes it.
        After the session has finished this is a no-op.
        """
        if self.finished:
            return self.view()
        if self._state is SessionState.END_OF_BRANCH:
            raise SessionError("This branch has ended; finish the adventure")
        event = self._current_event
        if event is None:
            raise SessionError("Session has not started")
        if not 0 <= index < len(event.options):
            raise SessionError(f"Option {index} does not exist on event {event.id!r}")

        option = event.options[index]
        if not is_eligible(self._character, option):
            req = option.requirement
            raise SessionError(f"Option {index} requires {req.stat} >= {req.min_value}")

        if option.ends_story:
            self._supersede()
            self._state = SessionState.END_OF_BRANCH
            return self.view()

        self._state = SessionState.LOADING
        try:
            result = await self._load(option.next_event_id)
        except BaseException:
            self._restore(SessionState.ACTIVE)
            raise
        if result is _STALE:
            return self.view()
        if result is None:
            logger.warning(
                "Option %r on event %r points to missing event %r; ending branch",
                option.text, event.id, option.next_event_id,
            )
            self._state = SessionState.END_OF_BRANCH
            return self.view()

        self._current_event = result
        self._state = SessionState.ACTIVE
        return self.view()

    def finish(self) -> EventView:
        """Explicitly end the adventure from an end-of-branch or option-less event."""
        if self.finished:
            return self.view()
        if not self.can_finish:
            raise SessionError("The adventure cannot be finished from here")
        self._state = SessionState.TERMINAL
        return self.view()

    def close(self) -> None:
        """Tear the session down, cancelling any in-flight fetch."""
        self._supersede()
        self._state = SessionState.CLOSED

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    def _restore(self, state: SessionState) -> None:
        # Only when the failed fetch was the newest navigation.
        if self._state is SessionState.LOADING and self._pending is None:
            self._state = state

    def _supersede(self) -> int:
        self._token += 1
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None
        return self._token

    async def _load(self, event_id: str):
        """Fetch ``event_id`` as the newest navigation.

        Returns the event, None when missing, or `_STALE` when a newer
        navigation took over while this one was in flight. Store errors of a
        superseded fetch are dropped along with its result.
        """
        token = self._supersede()
        task = asyncio.ensure_future(self._store.fetch_event(event_id))
        self._pending = task
        try:
            event = await task
        except asyncio.CancelledError:
            if token != self._token and not _being_cancelled():
                logger.debug("Fetch of %r cancelled by newer navigation", event_id)
                return _STALE
            raise
        except Exception:
            if token != self._token:
                logger.debug("Dropping error of superseded fetch of %r", event_id, exc_info=True)
                return _STALE
            raise
        finally:
            if self._pending is task:
                self._pending = None

        if token != self._token:
            logger.warning("Discarding stale fetch of %r (token %d < %d)", event_id, token, self._token)
            return _STALE
        return event


def _being_cancelled() -> bool:
    task = asyncio.current_task()
    return task is not None and task.cancelling() > 0
