"""Core domain models.

The navigator, the stat gate and every store adapter operate on these types.
Pydantic is used for validation and serialisation at every data boundary.
Stored documents use camelCase field names (``nextEventId``, ``minValue``,
``classId``); Python code uses the snake_case attributes.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Literal, get_args

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

StatName = Literal[
    "vitality",
    "attack",
    "defense",
    "intelligence",
    "dexterity",
    "perception",
]

STAT_NAMES: tuple[str, ...] = get_args(StatName)


class _Document(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Requirement(_Document):
    """A single stat threshold gating an option.

    ``stat`` is kept as a plain string so documents carrying an unknown stat
    still load; the gate compares those against 0.
    """

    stat: str | None = None
    min_value: int = Field(default=0, alias="minValue")

    @field_validator("min_value", mode="before")
    @classmethod
    def _null_min_is_zero(cls, value):
        return 0 if value is None or value == "" else value


class Option(_Document):
    """A choice attached to an event; an edge in the story graph."""

    text: str
    next_event_id: str | None = Field(default=None, alias="nextEventId")
    requirements: Requirement | None = None

    @field_validator("text")
    @classmethod
    def _text_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("option text must not be empty")
        return value

    @property
    def ends_story(self) -> bool:
        return not self.next_event_id

    @property
    def requirement(self) -> Requirement | None:
        """The requirement, or None when absent or carrying no stat."""
        if self.requirements is None or not self.requirements.stat:
            return None
        return self.requirements


class Event(_Document):
    """A narrative node. An event with no options is terminal."""

    id: str
    title: str = ""
    text: str = ""
    options: list[Option] = Field(default_factory=list)
    doc_id: str | None = Field(default=None, alias="docId")  # storage record id

    @property
    def is_terminal(self) -> bool:
        return not self.options


class CharacterSnapshot(_Document):
    """Frozen read of a character for the lifetime of one play session.

    ``stats`` is a read-only mapping; the model dumps it as a plain dict.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    name: str
    class_id: str | None = Field(default=None, alias="classId")
    stats: Mapping[str, int] = Field(default_factory=dict, validate_default=True)

    @field_validator("stats")
    @classmethod
    def _freeze_stats(cls, value: Mapping[str, int]) -> Mapping[str, int]:
        for name, amount in value.items():
            if amount < 0:
                raise ValueError(f"stat {name!r} must be non-negative")
        return MappingProxyType(dict(value))

    @field_serializer("stats")
    def _dump_stats(self, value: Mapping[str, int]) -> dict[str, int]:
        return dict(value)

    def stat(self, name: str) -> int:
        """Return a stat value, 0 when the character does not carry it."""
        return self.stats.get(name, 0)
