"""Tests for questly.models."""

import pytest
from pydantic import ValidationError

from questly.models import STAT_NAMES, CharacterSnapshot, Event, Option


class TestOption:
    def test_camel_case_document_fields(self) -> None:
        o = Option.model_validate(
            {"text": "Fight", "nextEventId": "clearing",
             "requirements": {"stat": "attack", "minValue": 3}}
        )
        assert o.next_event_id == "clearing"
        assert o.requirements.stat == "attack"
        assert o.requirements.min_value == 3

    def test_snake_case_names_accepted(self) -> None:
        o = Option(text="Sneak", next_event_id="clearing")
        assert o.next_event_id == "clearing"

    def test_empty_next_id_ends_story(self) -> None:
        assert Option(text="Go home", nextEventId="").ends_story
        assert Option(text="Go home").ends_story
        assert not Option(text="On", nextEventId="x").ends_story

    def test_blank_text_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Option(text="   ")

    def test_empty_requirements_object_means_no_requirement(self) -> None:
        o = Option.model_validate({"text": "Walk", "requirements": {}})
        assert o.requirement is None

    def test_requirement_without_min_value_defaults_to_zero(self) -> None:
        o = Option.model_validate({"text": "Look", "requirements": {"stat": "perception"}})
        assert o.requirement.min_value == 0

    def test_dump_uses_document_names(self) -> None:
        o = Option(text="Fight", next_event_id="clearing")
        dumped = o.model_dump(by_alias=True, exclude_none=True)
        assert dumped == {"text": "Fight", "nextEventId": "clearing"}


class TestEvent:
    def test_options_default_empty_and_terminal(self) -> None:
        e = Event(id="the_end", title="The End", text="Fin.")
        assert e.options == []
        assert e.is_terminal

    def test_option_order_preserved(self) -> None:
        e = Event.model_validate(
            {"id": "a", "options": [{"text": "one"}, {"text": "two"}, {"text": "three"}]}
        )
        assert [o.text for o in e.options] == ["one", "two", "three"]
        assert not e.is_terminal

    def test_doc_id_read_from_document(self) -> None:
        e = Event.model_validate({"id": "a", "docId": "Xy12"})
        assert e.doc_id == "Xy12"


class TestCharacterSnapshot:
    def test_missing_stat_reads_as_zero(self) -> None:
        c = CharacterSnapshot(id="c1", name="Aldric", stats={"attack": 4})
        assert c.stat("attack") == 4
        assert c.stat("perception") == 0
        assert c.stat("charisma") == 0

    def test_frozen(self) -> None:
        c = CharacterSnapshot(id="c1", name="Aldric")
        with pytest.raises(ValidationError):
            c.name = "Other"

    def test_source_dict_mutation_does_not_leak(self) -> None:
        stats = {"attack": 2}
        c = CharacterSnapshot(id="c1", name="Aldric", stats=stats)
        stats["attack"] = 99
        assert c.stat("attack") == 2

    def test_stats_are_read_only(self) -> None:
        c = CharacterSnapshot(id="c1", name="Aldric", stats={"attack": 1})
        with pytest.raises(TypeError):
            c.stats["attack"] = 99
        assert c.stat("attack") == 1
        with pytest.raises(TypeError):
            CharacterSnapshot(id="c2", name="Nobody").stats["attack"] = 1

    def test_stats_dump_as_plain_dict(self) -> None:
        c = CharacterSnapshot(id="c1", name="Aldric", stats={"attack": 1})
        assert c.model_dump(mode="json")["stats"] == {"attack": 1}
        assert type(c.model_dump()["stats"]) is dict

    def test_negative_stat_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CharacterSnapshot(id="c1", name="Aldric", stats={"attack": -1})

    def test_class_id_alias(self) -> None:
        c = CharacterSnapshot.model_validate({"id": "c1", "name": "A", "classId": "warrior"})
        assert c.class_id == "warrior"


def test_six_stat_names() -> None:
    assert STAT_NAMES == (
        "vitality", "attack", "defense", "intelligence", "dexterity", "perception",
    )
