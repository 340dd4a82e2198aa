"""Create a demo story and characters for development/testing."""

from pathlib import Path

from questly.characters import JsonCharacterSource
from questly.models import CharacterSnapshot, Event
from questly.store import JsonEventStore

DEMO_EVENTS = [
    {
        "id": "start_forest",
        "title": "The Forest",
        "text": "Mist hangs between the pines. Somewhere ahead a wolf growls, "
        "and a narrow trail slips away toward a clearing.",
        "options": [
            {
                "text": "Fight",
                "nextEventId": "clearing",
                "requirements": {"stat": "attack", "minValue": 3},
            },
            {"text": "Sneak", "nextEventId": "clearing"},
            {
                "text": "Read the old runes on the stones",
                "nextEventId": "rune_circle",
                "requirements": {"stat": "intelligence", "minValue": 4},
            },
        ],
    },
    {
        "id": "clearing",
        "title": "The Clearing",
        "text": "Moonlight pools in a ring of broken stones. A ruined watchtower "
        "leans over a well that smells of iron.",
        "options": [
            {
                "text": "Climb the watchtower",
                "nextEventId": "watchtower",
                "requirements": {"stat": "dexterity", "minValue": 3},
            },
            {"text": "Look down the well", "nextEventId": "the_well"},
            {"text": "Walk back home", "nextEventId": ""},
        ],
    },
    {
        "id": "rune_circle",
        "title": "The Rune Circle",
        "text": "The runes warn of a beast bound beneath the clearing. "
        "You now know where not to step.",
        "options": [{"text": "Continue to the clearing", "nextEventId": "clearing"}],
    },
    {
        "id": "watchtower",
        "title": "The Watchtower",
        "text": "From the top you see the whole valley, and the road out of it. "
        "Your journey ends here, at dawn.",
        "options": [],
    },
    {
        "id": "the_well",
        "title": "The Well",
        "text": "Cold air rises from below. Something glints in the dark water.",
        "options": [
            {
                "text": "Reach for it",
                "nextEventId": "",
                "requirements": {"stat": "perception", "minValue": 2},
            },
            {"text": "Step away", "nextEventId": "clearing"},
        ],
    },
]

DEMO_CHARACTERS = [
    {
        "id": "aldric",
        "name": "Aldric",
        "classId": "warrior",
        "stats": {
            "vitality": 6, "attack": 5, "defense": 4,
            "intelligence": 1, "dexterity": 2, "perception": 2,
        },
    },
    {
        "id": "mirela",
        "name": "Mirela",
        "classId": "scholar",
        "stats": {
            "vitality": 3, "attack": 2, "defense": 2,
            "intelligence": 6, "dexterity": 3, "perception": 4,
        },
    },
]


def create_demo_data(data_dir: Path) -> None:
    """Overwrite the JSON store in ``data_dir`` with the demo story."""
    JsonEventStore(data_dir).save_events(Event.model_validate(e) for e in DEMO_EVENTS)
    JsonCharacterSource(data_dir).save_characters(
        CharacterSnapshot.model_validate(c) for c in DEMO_CHARACTERS
    )
