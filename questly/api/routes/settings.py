"""Health check and story validation endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from questly.api.deps import get_event_store, get_settings
from questly.config import Settings
from questly.errors import StoreUnavailable
from questly.graph import format_issue, has_errors, validate_event_graph
from questly.store import EventStore

router = APIRouter()


@router.get("/health")
async def health():
    """Health check."""
    return {"status": "ok"}


@router.get("/events/validate")
async def validate_events(
    store: EventStore = Depends(get_event_store),
    settings: Settings = Depends(get_settings),
):
    """Check the story graph for dangling edges, duplicate ids and unreachable events."""
    source = getattr(store, "inner", store)
    if not hasattr(source, "list_events"):
        raise HTTPException(501, "The configured event store cannot list events")
    try:
        events = source.list_events()
    except StoreUnavailable as e:
        raise HTTPException(503, str(e))
    issues = validate_event_graph(events, settings.start_event_id)
    return {
        "ok": not has_errors(issues),
        "event_count": len(events),
        "issues": [format_issue(issue) for issue in issues],
    }
