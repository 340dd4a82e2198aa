"""Play session endpoints: start, choose, finish, tear down."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from questly.api.deps import get_character_source, get_sessions
from questly.api.sessions import SessionRegistry
from questly.characters import CharacterSource, load_snapshot
from questly.errors import EventNotFound, MissingCharacter, SessionError, StoreUnavailable
from questly.navigator import EventView, StoryNavigator

from .models import ChooseBody, CreateSession

logger = logging.getLogger(__name__)

router = APIRouter()

CHARACTER_SELECTION_PATH = "/dashboard/characters"


def _render(session_id: str, view: EventView) -> dict:
    return {"session_id": session_id, **view.model_dump(mode="json", by_alias=True)}


def _navigator(sessions: SessionRegistry, session_id: str) -> StoryNavigator:
    try:
        return sessions.get(session_id)
    except SessionError as e:
        raise HTTPException(404, str(e))


@router.post("/sessions", status_code=201)
async def create_session(
    body: CreateSession,
    sessions: SessionRegistry = Depends(get_sessions),
    characters: CharacterSource = Depends(get_character_source),
):
    """Start a play session for a character and load the start event."""
    try:
        if body.character is not None:
            character = body.character
        elif body.character_id:
            character = await load_snapshot(characters, body.character_id)
        else:
            raise MissingCharacter()
    except MissingCharacter as e:
        raise HTTPException(404, {"message": str(e), "redirect": CHARACTER_SELECTION_PATH})
    except StoreUnavailable as e:
        raise HTTPException(503, str(e))

    session_id, navigator = sessions.create(character, body.start_event_id)
    try:
        view = await navigator.start()
    except EventNotFound as e:
        sessions.close(session_id)
        logger.error("Session %s could not start: %s", session_id, e)
        raise HTTPException(500, f"Story is misconfigured: {e}")
    except StoreUnavailable as e:
        sessions.close(session_id)
        raise HTTPException(503, str(e))
    return _render(session_id, view)


@router.get("/sessions/{session_id}")
async def get_session(session_id: str, sessions: SessionRegistry = Depends(get_sessions)):
    """Current view of a session."""
    return _render(session_id, _navigator(sessions, session_id).view())


@router.post("/sessions/{session_id}/choose")
async def choose_option(
    session_id: str, body: ChooseBody, sessions: SessionRegistry = Depends(get_sessions)
):
    """Pick an option of the current event."""
    navigator = _navigator(sessions, session_id)
    try:
        view = await navigator.choose(body.index)
    except SessionError as e:
        raise HTTPException(400, str(e))
    except StoreUnavailable as e:
        raise HTTPException(503, str(e))
    return _render(session_id, view)


@router.post("/sessions/{session_id}/finish")
async def finish_session(session_id: str, sessions: SessionRegistry = Depends(get_sessions)):
    """End the adventure. The finished session is torn down after this reply."""
    navigator = _navigator(sessions, session_id)
    try:
        view = navigator.finish()
    except SessionError as e:
        raise HTTPException(400, str(e))
    sessions.close(session_id)
    return _render(session_id, view)


@router.delete("/sessions/{session_id}")
async def delete_session(session_id: str, sessions: SessionRegistry = Depends(get_sessions)):
    """Tear a session down."""
    if not sessions.close(session_id):
        raise HTTPException(404, "Session not found")
    return {"ok": True}
