"""Read-side query composition for the event list."""
import logging
from dataclasses import dataclass
from typing import Any, Optional

from fastbreak.errors import Unauthorized
from fastbreak.sports import KNOWN_SPORTS, is_other
from fastbreak.stores.interfaces import EventStore
from fastbreak.stores.predicates import Contains, ILike, NotIn, Order, Predicate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EventQuery:
    predicates: tuple[Predicate, ...]
    order: Order


@dataclass
class EventListing:
    """Events plus the resolved caller, so ownership can be shown per row."""

    events: list[dict[str, Any]]
    current_user_id: Optional[str] = None


class QueryComposer:
    """Builds event list queries from free-text and sport filters.

    ``known_sports`` defines the complement used for the "Other" bucket.
    """

    def __init__(self, known_sports: tuple[str, ...] = KNOWN_SPORTS) -> None:
        self.known_sports = tuple(known_sports)

    def compose(self, search: Optional[str] = None, sport: Optional[str] = None) -> EventQuery:
        predicates: list[Predicate] = []
        search = (search or "").strip()
        sport = (sport or "").strip()

        if search:
            predicates.append(Contains("name", search))
        if sport:
            if is_other(sport):
                predicates.append(NotIn("sport", self.known_sports))
            else:
                predicates.append(ILike("sport", sport))

        return EventQuery(predicates=tuple(predicates), order=Order("date", ascending=True))


def list_events(
    store: EventStore,
    sessions,
    search: Optional[str] = None,
    sport: Optional[str] = None,
    *,
    composer: Optional[QueryComposer] = None,
    require_auth: bool = False,
) -> EventListing:
    """Run the filtered, date-ascending event query."""
    identity = sessions.get_current_user()
    if require_auth and identity is None:
        raise Unauthorized()

    query = (composer or QueryComposer()).compose(search, sport)
    events = store.select(query.predicates, query.order)
    logger.debug("Listed %d events (search=%r, sport=%r)", len(events), search, sport)
    return EventListing(events=events, current_user_id=identity.id if identity else None)
