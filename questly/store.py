"""Event stores — where the navigator reads story nodes from.

The navigator depends only on the `EventStore` protocol:

    async def fetch_event(self, event_id: str) -> Event | None: ...

`None` means no document carries that logical id. Network and parse failures
raise `StoreUnavailable`.

Three implementations are provided:

    MemoryEventStore    — events held in a list. Tests and demos.
    JsonEventStore      — a single events.json array on disk.
    FirestoreEventStore — the "events" collection of a Firestore project.

Logical ids are not enforced unique by any of the backing stores. When
several documents share an id, the first match in the store's own stable
order wins: list/file order for the in-process stores, ascending document
name for Firestore. `questly.graph.validate_event_graph` reports duplicates
so they can be fixed at authoring time.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable, Iterable
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from questly.errors import StoreUnavailable
from questly.firestore import FirestoreClient
from questly.models import Event

logger = logging.getLogger(__name__)


class EventStore(Protocol):
    async def fetch_event(self, event_id: str) -> Event | None: ...


def _first_match(events: Iterable[Event], event_id: str) -> Event | None:
    for event in events:
        if event.id == event_id:
            return event
    return None


class MemoryEventStore:
    """Events held in memory, in insertion order."""

    def __init__(self, events: Iterable[Event | dict] = ()) -> None:
        self._events = [e if isinstance(e, Event) else Event.model_validate(e) for e in events]

    def add(self, event: Event | dict) -> Event:
        if not isinstance(event, Event):
            event = Event.model_validate(event)
        self._events.append(event)
        return event

    def list_events(self) -> list[Event]:
        return list(self._events)

    async def fetch_event(self, event_id: str) -> Event | None:
        return _first_match(self._events, event_id)


class JsonEventStore:
    """Events stored as a JSON array in ``{data_dir}/events.json``."""

    FILENAME = "events.json"

    def __init__(self, data_dir: Path) -> None:
        self._path = data_dir / self.FILENAME

    @property
    def path(self) -> Path:
        return self._path

    def list_events(self) -> list[Event]:
        if not self._path.is_file():
            return []
        try:
            raw = json.loads(self._path.read_text())
            return [Event.model_validate(e) for e in raw]
        except (ValueError, ValidationError) as e:
            raise StoreUnavailable(f"Cannot read events from {self._path}") from e

    def save_events(self, events: Iterable[Event]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = [e.model_dump(by_alias=True, exclude_none=True) for e in events]
        self._path.write_text(json.dumps(payload, indent=2))

    async def fetch_event(self, event_id: str) -> Event | None:
        logger.debug("event fetch id=%s path=%s", event_id, self._path)
        return _first_match(self.list_events(), event_id)


class FirestoreEventStore:
    """Looks events up by their ``id`` field in a Firestore collection."""

    def __init__(self, client: FirestoreClient, collection: str = "events") -> None:
        self._client = client
        self._collection = collection

    async def fetch_event(self, event_id: str) -> Event | None:
        docs = await self._client.query_equal(self._collection, "id", event_id, limit=1)
        if not docs:
            return None
        try:
            return Event.model_validate(docs[0])
        except ValidationError as e:
            raise StoreUnavailable(f"Event {event_id!r} has an invalid document") from e


# ---------------------------------------------------------------------------
# Retry
# ---------------------------------------------------------------------------

class RetryingEventStore:
    """Wraps a store so `StoreUnavailable` is retried with exponential backoff.

    After ``retries`` extra attempts the last error propagates.
    """

    def __init__(self, inner: EventStore, retries: int = 1, backoff: float = 0.2) -> None:
        self._inner = inner
        self._fetch = with_retry(inner.fetch_event, retries=retries, backoff=backoff)

    @property
    def inner(self) -> EventStore:
        return self._inner

    async def fetch_event(self, event_id: str) -> Event | None:
        return await self._fetch(event_id)


def with_retry(
    fetch: Callable[[str], Awaitable[Event | None]],
    retries: int = 1,
    backoff: float = 0.2,
) -> Callable[[str], Awaitable[Event | None]]:
    async def fetch_with_retry(event_id: str) -> Event | None:
        attempt = 0
        while True:
            try:
                return await fetch(event_id)
            except StoreUnavailable as e:
                if attempt >= retries:
                    raise
                delay = backoff * (2 ** attempt)
                attempt += 1
                logger.warning(
                    "Event fetch id=%s failed (%s), retry %d/%d in %.2fs",
                    event_id, e, attempt, retries, delay,
                )
                await asyncio.sleep(delay)

    return fetch_with_retry
