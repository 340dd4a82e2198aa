from contextlib import asynccontextmanager

from fastapi import FastAPI

from questly.api.routes import router
from questly.api.sessions import SessionRegistry
from questly.characters import CharacterSource
from questly.config import Settings, build_stores, load_settings
from questly.store import EventStore


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    app.state.sessions.close_all()


def create_app(
    settings: Settings | None = None,
    event_store: EventStore | None = None,
    character_source: CharacterSource | None = None,
) -> FastAPI:
    resolved = settings or load_settings()
    if event_store is None or character_source is None:
        default_events, default_characters = build_stores(resolved)
        if event_store is None:
            event_store = default_events
        if character_source is None:
            character_source = default_characters

    app = FastAPI(title="Questly", lifespan=lifespan)
    app.state.settings = resolved
    app.state.event_store = event_store
    app.state.character_source = character_source
    app.state.sessions = SessionRegistry(
        event_store, resolved.start_event_id, idle_timeout=resolved.session_idle_timeout
    )
    app.include_router(router, prefix="/api")
    return app


# Default app instance for uvicorn (uses environment / .env settings)
app = create_app()
