"""Demo story playthroughs against the JSON store."""

import pytest

from questly.characters import JsonCharacterSource, load_snapshot
from questly.demo import create_demo_data
from questly.errors import SessionError
from questly.navigator import SessionState, StoryNavigator
from questly.store import JsonEventStore


async def _session(data_dir, character_id: str) -> StoryNavigator:
    create_demo_data(data_dir)
    character = await load_snapshot(JsonCharacterSource(data_dir), character_id)
    nav = StoryNavigator(JsonEventStore(data_dir), character)
    await nav.start()
    return nav


async def test_warrior_cannot_climb(data_dir):
    nav = await _session(data_dir, "aldric")
    view = await nav.choose(0)  # Fight
    assert view.event.id == "clearing"
    assert [o.enabled for o in view.options] == [False, True, True]
    with pytest.raises(SessionError):
        await nav.choose(0)


async def test_scholar_reads_runes_and_climbs(data_dir):
    nav = await _session(data_dir, "mirela")
    assert [o.enabled for o in nav.view().options] == [False, True, True]
    view = await nav.choose(2)
    assert view.event.id == "rune_circle"
    view = await nav.choose(0)
    assert view.event.id == "clearing"
    view = await nav.choose(0)
    assert view.event.id == "watchtower"
    assert view.can_finish
    assert nav.finish().state is SessionState.TERMINAL


async def test_reaching_into_the_well_ends_branch(data_dir):
    nav = await _session(data_dir, "aldric")
    await nav.choose(1)  # Sneak
    await nav.choose(1)  # Look down the well
    view = await nav.choose(0)  # Reach for it
    assert view.state is SessionState.END_OF_BRANCH
    assert view.event.id == "the_well"
