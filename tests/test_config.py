"""Tests for questly.config — settings from the environment and store wiring."""

from pathlib import Path

import pytest

from questly.characters import FirestoreCharacterSource, JsonCharacterSource
from questly.config import Settings, build_stores, load_settings
from questly.store import FirestoreEventStore, JsonEventStore, RetryingEventStore


def test_defaults(monkeypatch):
    for name in ("QUESTLY_STORE", "QUESTLY_START_EVENT_ID", "QUESTLY_STORE_TIMEOUT",
                 "QUESTLY_STORE_RETRIES", "QUESTLY_SESSION_IDLE", "FIRESTORE_PROJECT_ID"):
        monkeypatch.delenv(name, raising=False)
    settings = load_settings()
    assert settings.store == "json"
    assert settings.start_event_id == "start_forest"
    assert settings.store_timeout == 10.0
    assert settings.store_retries == 1
    assert settings.session_idle_timeout == 3600.0
    assert settings.data_dir == Path("data-tests")


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("QUESTLY_STORE", "firestore")
    monkeypatch.setenv("QUESTLY_START_EVENT_ID", "prologue")
    monkeypatch.setenv("QUESTLY_STORE_TIMEOUT", "2.5")
    monkeypatch.setenv("QUESTLY_STORE_RETRIES", "3")
    monkeypatch.setenv("QUESTLY_SESSION_IDLE", "60")
    monkeypatch.setenv("FIRESTORE_PROJECT_ID", "questly-dev")
    settings = load_settings()
    assert settings.store == "firestore"
    assert settings.start_event_id == "prologue"
    assert settings.store_timeout == 2.5
    assert settings.store_retries == 3
    assert settings.session_idle_timeout == 60.0
    assert settings.firestore_project_id == "questly-dev"


def test_json_stores_wrapped_in_retry(data_dir):
    events, characters = build_stores(Settings(data_dir=data_dir))
    assert isinstance(events, RetryingEventStore)
    assert isinstance(events.inner, JsonEventStore)
    assert isinstance(characters, JsonCharacterSource)


def test_retry_disabled(data_dir):
    events, _ = build_stores(Settings(data_dir=data_dir, store_retries=0))
    assert isinstance(events, JsonEventStore)


def test_firestore_stores():
    events, characters = build_stores(
        Settings(store="firestore", firestore_project_id="questly-dev")
    )
    assert isinstance(events.inner, FirestoreEventStore)
    assert isinstance(characters, FirestoreCharacterSource)


def test_firestore_requires_project():
    with pytest.raises(ValueError, match="FIRESTORE_PROJECT_ID"):
        build_stores(Settings(store="firestore"))
