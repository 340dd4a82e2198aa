"""Exceptions raised by the story engine and its store adapters."""

from __future__ import annotations


class QuestlyError(RuntimeError):
    """Base class for every error the engine raises."""


class EventNotFound(QuestlyError):
    """No event document matches a logical event id."""

    def __init__(self, event_id: str) -> None:
        super().__init__(f"Event {event_id!r} not found")
        self.event_id = event_id


class StoreUnavailable(QuestlyError):
    """The document store could not be reached or returned garbage.

    Retryable: the session that hit it is left in its last known state.
    """


class MissingCharacter(QuestlyError):
    """A play session was requested without a character snapshot."""

    def __init__(self, character_id: str | None = None) -> None:
        if character_id:
            message = f"Character {character_id!r} not found"
        else:
            message = "A character is required to start a play session"
        super().__init__(message)
        self.character_id = character_id


class SessionError(QuestlyError):
    """An action that the current session state does not allow."""
