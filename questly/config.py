"""Application settings, read from the environment (and ``.env``).

    QUESTLY_STORE            "json" (default) or "firestore"
    DATA_DIR                 JSON store directory (default: ./data)
    QUESTLY_START_EVENT_ID   first event of every session (default: start_forest)
    QUESTLY_STORE_TIMEOUT    store request timeout in seconds (default: 10)
    QUESTLY_STORE_RETRIES    extra attempts after a store failure (default: 1)
    QUESTLY_SESSION_IDLE     seconds before an untouched session is dropped (default: 3600)
    FIRESTORE_PROJECT_ID     required when QUESTLY_STORE=firestore
    FIRESTORE_API_KEY        web API key, optional
    FIRESTORE_TOKEN          Firebase ID token forwarded as bearer, optional
    FIRESTORE_URL            REST root override, e.g. an emulator
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel

from questly.characters import CharacterSource, FirestoreCharacterSource, JsonCharacterSource
from questly.firestore import FIRESTORE_URL, FirestoreClient
from questly.navigator import DEFAULT_START_EVENT_ID
from questly.store import EventStore, FirestoreEventStore, JsonEventStore, RetryingEventStore

ROOT = Path(__file__).parent.parent
DEFAULT_DATA_DIR = ROOT / "data"


class Settings(BaseModel):
    store: Literal["json", "firestore"] = "json"
    data_dir: Path = DEFAULT_DATA_DIR
    start_event_id: str = DEFAULT_START_EVENT_ID
    store_timeout: float = 10.0
    store_retries: int = 1
    session_idle_timeout: float = 3600.0
    firestore_project_id: str = ""
    firestore_api_key: str = ""
    firestore_token: str = ""
    firestore_url: str = FIRESTORE_URL


def load_settings() -> Settings:
    """Build settings from environment variables, loading ``.env`` first."""
    load_dotenv(ROOT / ".env")
    return Settings(
        store=os.getenv("QUESTLY_STORE", "json"),
        data_dir=Path(os.getenv("DATA_DIR", str(DEFAULT_DATA_DIR))),
        start_event_id=os.getenv("QUESTLY_START_EVENT_ID", DEFAULT_START_EVENT_ID),
        store_timeout=float(os.getenv("QUESTLY_STORE_TIMEOUT", "10")),
        store_retries=int(os.getenv("QUESTLY_STORE_RETRIES", "1")),
        session_idle_timeout=float(os.getenv("QUESTLY_SESSION_IDLE", "3600")),
        firestore_project_id=os.getenv("FIRESTORE_PROJECT_ID", ""),
        firestore_api_key=os.getenv("FIRESTORE_API_KEY", ""),
        firestore_token=os.getenv("FIRESTORE_TOKEN", ""),
        firestore_url=os.getenv("FIRESTORE_URL", FIRESTORE_URL),
    )


def _firestore_client(settings: Settings) -> FirestoreClient:
    if not settings.firestore_project_id:
        raise ValueError("FIRESTORE_PROJECT_ID is required when QUESTLY_STORE=firestore")
    return FirestoreClient(
        project_id=settings.firestore_project_id,
        api_key=settings.firestore_api_key,
        token=settings.firestore_token,
        base_url=settings.firestore_url,
        timeout=settings.store_timeout,
    )


def build_stores(settings: Settings) -> tuple[EventStore, CharacterSource]:
    """Construct the event store (with retry) and character source for the settings."""
    if settings.store == "firestore":
        client = _firestore_client(settings)
        events: EventStore = FirestoreEventStore(client)
        characters: CharacterSource = FirestoreCharacterSource(client)
    else:
        events = JsonEventStore(settings.data_dir)
        characters = JsonCharacterSource(settings.data_dir)
    if settings.store_retries > 0:
        events = RetryingEventStore(events, retries=settings.store_retries)
    return events, characters
