"""Request-scoped accessors for the objects `create_app` wires onto ``app.state``."""

from fastapi import Request

from questly.api.sessions import SessionRegistry
from questly.characters import CharacterSource
from questly.config import Settings
from questly.store import EventStore


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_event_store(request: Request) -> EventStore:
    return request.app.state.event_store


def get_character_source(request: Request) -> CharacterSource:
    return request.app.state.character_source


def get_sessions(request: Request) -> SessionRegistry:
    return request.app.state.sessions
