"""Pydantic request models for API endpoints."""

from pydantic import BaseModel, model_validator

from questly.models import CharacterSnapshot


class CreateSession(BaseModel):
    """Either a stored character id or an inline snapshot."""

    character_id: str | None = None
    character: CharacterSnapshot | None = None
    start_event_id: str | None = None

    @model_validator(mode="after")
    def _one_character(self):
        if self.character_id and self.character is not None:
            raise ValueError("Pass character_id or character, not both")
        return self


class ChooseBody(BaseModel):
    index: int
