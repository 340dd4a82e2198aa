"""Stat gate: decides which options a character may pick."""

from __future__ import annotations

from pydantic import BaseModel

from questly.models import CharacterSnapshot, Event, Option, Requirement


class OptionView(BaseModel):
    """An option as a renderer needs it: position, label and whether it is selectable."""

    index: int
    text: str
    enabled: bool
    ends_story: bool
    requirement: Requirement | None = None


def is_eligible(character: CharacterSnapshot, option: Option) -> bool:
    """True when the character satisfies the option's requirement.

    Options without a requirement (or with an empty ``stat``) are always
    eligible. A stat the character does not carry counts as 0.
    """
    requirement = option.requirement
    if requirement is None:
        return True
    return character.stat(requirement.stat) >= requirement.min_value


def annotate_options(character: CharacterSnapshot, event: Event) -> list[OptionView]:
    """Return the event's options in display order, each flagged enabled or not."""
    return [
        OptionView(
            index=i,
            text=option.text,
            enabled=is_eligible(character, option),
            ends_story=option.ends_story,
            requirement=option.requirement,
        )
        for i, option in enumerate(event.options)
    ]
