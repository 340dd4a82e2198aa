"""Questly story engine: stat-gated branching narrative over a document store."""

from questly.errors import (  # noqa: F401
    EventNotFound,
    MissingCharacter,
    QuestlyError,
    SessionError,
    StoreUnavailable,
)
from questly.gate import OptionView, annotate_options, is_eligible  # noqa: F401
from questly.models import STAT_NAMES, CharacterSnapshot, Event, Option, Requirement  # noqa: F401
from questly.navigator import (  # noqa: F401
    DEFAULT_START_EVENT_ID,
    EventView,
    SessionState,
    StoryNavigator,
)
