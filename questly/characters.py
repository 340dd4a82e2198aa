"""Character sources — how the hosting app obtains a `CharacterSnapshot`.

The navigator never fetches characters itself; it is handed a snapshot once,
at session start. These adapters exist so the play API can turn a character
id into that snapshot:

    JsonCharacterSource      — ``{data_dir}/characters.json`` array.
    FirestoreCharacterSource — ``characters/{id}`` documents.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from questly.errors import MissingCharacter, StoreUnavailable
from questly.firestore import FirestoreClient
from questly.models import CharacterSnapshot


class CharacterSource(Protocol):
    async def get_character(self, character_id: str) -> CharacterSnapshot | None: ...


async def load_snapshot(source: CharacterSource, character_id: str) -> CharacterSnapshot:
    """Fetch a snapshot or raise `MissingCharacter`."""
    character = await source.get_character(character_id)
    if character is None:
        raise MissingCharacter(character_id)
    return character


class JsonCharacterSource:
    FILENAME = "characters.json"

    def __init__(self, data_dir: Path) -> None:
        self._path = data_dir / self.FILENAME

    def list_characters(self) -> list[CharacterSnapshot]:
        if not self._path.is_file():
            return []
        try:
            return [CharacterSnapshot.model_validate(c) for c in json.loads(self._path.read_text())]
        except (ValueError, ValidationError) as e:
            raise StoreUnavailable(f"Cannot read characters from {self._path}") from e

    def save_characters(self, characters: Iterable[CharacterSnapshot]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = [c.model_dump(by_alias=True, exclude_none=True) for c in characters]
        self._path.write_text(json.dumps(payload, indent=2))

    async def get_character(self, character_id: str) -> CharacterSnapshot | None:
        for character in self.list_characters():
            if character.id == character_id:
                return character
        return None


class FirestoreCharacterSource:
    def __init__(self, client: FirestoreClient, collection: str = "characters") -> None:
        self._client = client
        self._collection = collection

    async def get_character(self, character_id: str) -> CharacterSnapshot | None:
        doc = await self._client.get_document(self._collection, character_id)
        if doc is None:
            return None
        doc.setdefault("id", doc.get("docId", character_id))
        try:
            return CharacterSnapshot.model_validate(doc)
        except ValidationError as e:
            raise StoreUnavailable(f"Character {character_id!r} has an invalid document") from e
