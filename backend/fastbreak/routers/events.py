"""Event API routes: delegates to event_service and query_composer."""
import logging
from typing import Any, Optional
from fastapi import APIRouter, Body, Depends, Query, status

from fastbreak.auth.session import SessionProvider
from fastbreak.config import settings
from fastbreak.dependencies import get_event_store, get_session_provider
from fastbreak.schemas.event import EventListOut, EventOut
from fastbreak.services import event_service
from fastbreak.services.query_composer import list_events as run_event_query
from fastbreak.stores.interfaces import EventStore

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/", response_model=EventListOut)
def list_events(
    search: Optional[str] = Query(None, description="Case-insensitive substring of the event name"),
    sport: Optional[str] = Query(None, description='Sport name, or "Other" for unlisted sports'),
    store: EventStore = Depends(get_event_store),
    sessions: SessionProvider = Depends(get_session_provider),
):
    """List events ascending by date, with optional filters."""
    listing = run_event_query(
        store, sessions, search, sport, require_auth=settings.READS_REQUIRE_AUTH
    )
    return EventListOut(events=listing.events, current_user_id=listing.current_user_id)


@router.post("/", response_model=EventOut, status_code=status.HTTP_201_CREATED)
def create_event(
    payload: dict[str, Any] = Body(...),
    store: EventStore = Depends(get_event_store),
    sessions: SessionProvider = Depends(get_session_provider),
):
    """Create an event owned by the signed-in user."""
    return event_service.create_event(store, sessions, payload)


@router.put("/{event_id}", response_model=EventOut)
def update_event(
    event_id: str,
    payload: dict[str, Any] = Body(...),
    store: EventStore = Depends(get_event_store),
    sessions: SessionProvider = Depends(get_session_provider),
):
    """Replace an event's fields (owner only)."""
    return event_service.update_event(store, sessions, {**payload, "id": event_id})


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event(
    event_id: str,
    store: EventStore = Depends(get_event_store),
    sessions: SessionProvider = Depends(get_session_provider),
):
    """Delete an event permanently (owner only)."""
    event_service.delete_event(store, sessions, event_id)
