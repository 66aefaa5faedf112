"""Event mutations behind the authorization gate.

Every mutation resolves the caller from the session provider first and
fails with ``Unauthorized`` before the store is touched. Ownership is never
taken from the payload:

- create stamps ``user_id`` with the resolved identity,
- update/delete AND the target id with ``user_id = <identity>``, so a row
  owned by someone else is indistinguishable from a missing one.
"""
import logging
import uuid
from typing import Any, Mapping, Optional

import pydantic

from fastbreak.errors import MissingIdentifier, NotOwned, Unauthorized, ValidationError
from fastbreak.schemas.auth import Identity
from fastbreak.schemas.event import EventPayload
from fastbreak.stores.interfaces import EventStore
from fastbreak.stores.predicates import Eq

logger = logging.getLogger(__name__)


def require_identity(sessions) -> Identity:
    identity = sessions.get_current_user()
    if identity is None:
        raise Unauthorized()
    return identity


def _format_error(error: Mapping[str, Any]) -> str:
    field = ".".join(str(part) for part in error.get("loc", ()))
    message = str(error.get("msg", "Invalid value")).removeprefix("Value error, ")
    return f"{field}: {message}" if field else message


def validate_payload(payload: Mapping[str, Any]) -> EventPayload:
    """Validate against the event schema; nothing invalid reaches the store."""
    try:
        return EventPayload.model_validate(payload)
    except pydantic.ValidationError as exc:
        raise ValidationError([_format_error(e) for e in exc.errors()]) from exc


def _canonical_id(event_id: str) -> str:
    try:
        return str(uuid.UUID(event_id))
    except ValueError:
        raise ValidationError(["id: Input should be a valid UUID"]) from None


def _owned_by(event_id: str, identity: Identity) -> list:
    return [Eq("id", event_id), Eq("user_id", identity.id)]


def create_event(store: EventStore, sessions, payload: Mapping[str, Any]) -> dict[str, Any]:
    """Insert a new event owned by the caller."""
    identity = require_identity(sessions)
    event = validate_payload(payload)

    supplied_owner = payload.get("user_id")
    if supplied_owner is not None and supplied_owner != identity.id:
        logger.warning("Discarding client-supplied user_id on create by %s", identity.id)

    row = event.to_row()
    row["user_id"] = identity.id
    created = store.insert(row)
    logger.info("Created event '%s' (%s) for user %s", event.name, created.get("id"), identity.id)
    return created


def update_event(store: EventStore, sessions, payload: Mapping[str, Any]) -> dict[str, Any]:
    """Replace the editable fields of an event the caller owns."""
    identity = require_identity(sessions)
    if not payload.get("id"):
        raise MissingIdentifier("update")
    event = validate_payload(payload)
    event_id = str(event.id)

    changed = store.update(event.to_row(), _owned_by(event_id, identity))
    if changed == 0:
        logger.warning("Update of event %s by user %s matched no rows", event_id, identity.id)
        raise NotOwned(event_id)

    rows = store.select(_owned_by(event_id, identity))
    if not rows:
        raise NotOwned(event_id)
    logger.info("Updated event %s for user %s", event_id, identity.id)
    return rows[0]


def delete_event(store: EventStore, sessions, event_id: Optional[str]) -> None:
    """Permanently remove an event the caller owns."""
    identity = require_identity(sessions)
    if not event_id:
        raise MissingIdentifier("delete")
    event_id = _canonical_id(event_id)

    removed = store.delete(_owned_by(event_id, identity))
    if removed == 0:
        logger.warning("Delete of event %s by user %s matched no rows", event_id, identity.id)
        raise NotOwned(event_id)
    logger.info("Deleted event %s for user %s", event_id, identity.id)
