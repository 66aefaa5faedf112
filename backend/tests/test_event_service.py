"""Authorization gate tests against a mocked store.

The store is an autospec of EventStore so "never touched" can be asserted
directly.
"""
import uuid
from unittest.mock import create_autospec

import pytest

from fastbreak.errors import MissingIdentifier, NotOwned, Unauthorized, ValidationError
from fastbreak.schemas.auth import Identity
from fastbreak.services import event_service
from fastbreak.stores.interfaces import EventStore
from fastbreak.stores.predicates import Eq

ALICE = Identity(id=str(uuid.uuid4()), email="alice@example.com")
BOB_ID = str(uuid.uuid4())


class StubSessions:
    def __init__(self, identity=None):
        self.identity = identity

    def get_current_user(self):
        return self.identity


def _payload(**overrides):
    payload = {
        "name": "Wimbledon Final",
        "sport": "Tennis",
        "date": "2030-07-14T14:00:00+00:00",
        "venues": ["Centre Court"],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def store():
    return create_autospec(EventStore, instance=True)


class TestUnauthenticated:

    def test_create(self, store):
        with pytest.raises(Unauthorized):
            event_service.create_event(store, StubSessions(), _payload())
        assert store.method_calls == []

    def test_update(self, store):
        with pytest.raises(Unauthorized):
            event_service.update_event(store, StubSessions(), _payload(id=str(uuid.uuid4())))
        assert store.method_calls == []

    def test_delete(self, store):
        with pytest.raises(Unauthorized):
            event_service.delete_event(store, StubSessions(), str(uuid.uuid4()))
        assert store.method_calls == []

    def test_checked_before_validation(self, store):
        """An anonymous caller learns nothing about payload validity."""
        with pytest.raises(Unauthorized):
            event_service.create_event(store, StubSessions(), {"venues": []})


class TestCreate:

    def test_owner_forced_to_identity(self, store):
        store.insert.side_effect = lambda row: {**row, "id": "new"}
        created = event_service.create_event(store, StubSessions(ALICE), _payload(user_id=BOB_ID))
        row = store.insert.call_args.args[0]
        assert row["user_id"] == ALICE.id
        assert created["user_id"] == ALICE.id

    def test_empty_venues_never_reach_store(self, store):
        with pytest.raises(ValidationError) as exc_info:
            event_service.create_event(store, StubSessions(ALICE), _payload(venues=[]))
        assert "venues: At least one venue required" in exc_info.value.errors
        store.insert.assert_not_called()

    def test_missing_fields_reported(self, store):
        with pytest.raises(ValidationError) as exc_info:
            event_service.create_event(store, StubSessions(ALICE), {"venues": ["X"]})
        fields = {e.split(":")[0] for e in exc_info.value.errors}
        assert {"name", "sport", "date"} <= fields

    def test_store_receives_utc_date(self, store):
        store.insert.side_effect = lambda row: {**row, "id": "new"}
        event_service.create_event(
            store, StubSessions(ALICE),
            _payload(date="2030-01-10T09:00:00", timezone="Europe/Berlin"),
        )
        row = store.insert.call_args.args[0]
        assert row["date"].isoformat() == "2030-01-10T08:00:00+00:00"


class TestUpdate:

    def test_missing_identifier(self, store):
        with pytest.raises(MissingIdentifier):
            event_service.update_event(store, StubSessions(ALICE), _payload())
        assert store.method_calls == []

    def test_predicate_scoped_to_owner(self, store):
        event_id = str(uuid.uuid4())
        store.update.return_value = 1
        store.select.return_value = [{"id": event_id, "user_id": ALICE.id}]

        event_service.update_event(store, StubSessions(ALICE), _payload(id=event_id))

        fields, predicates = store.update.call_args.args
        assert predicates == [Eq("id", event_id), Eq("user_id", ALICE.id)]
        assert "user_id" not in fields
        assert "id" not in fields

    def test_zero_rows_raises_not_owned(self, store):
        store.update.return_value = 0
        with pytest.raises(NotOwned) as exc_info:
            event_service.update_event(store, StubSessions(ALICE), _payload(id=str(uuid.uuid4())))
        assert exc_info.value.message == "Event not found"
        store.select.assert_not_called()

    def test_invalid_payload_never_reaches_store(self, store):
        with pytest.raises(ValidationError):
            event_service.update_event(
                store, StubSessions(ALICE), _payload(id=str(uuid.uuid4()), venues=[])
            )
        store.update.assert_not_called()


class TestDelete:

    def test_predicate_scoped_to_owner(self, store):
        event_id = str(uuid.uuid4())
        store.delete.return_value = 1
        event_service.delete_event(store, StubSessions(ALICE), event_id)
        store.delete.assert_called_once_with([Eq("id", event_id), Eq("user_id", ALICE.id)])

    def test_zero_rows_raises_not_owned(self, store):
        store.delete.return_value = 0
        with pytest.raises(NotOwned):
            event_service.delete_event(store, StubSessions(ALICE), str(uuid.uuid4()))

    def test_missing_identifier(self, store):
        with pytest.raises(MissingIdentifier):
            event_service.delete_event(store, StubSessions(ALICE), "")

    def test_identifier_canonicalized(self, store):
        event_id = str(uuid.uuid4())
        store.delete.return_value = 1
        event_service.delete_event(store, StubSessions(ALICE), event_id.upper())
        store.delete.assert_called_once_with([Eq("id", event_id), Eq("user_id", ALICE.id)])

    def test_malformed_identifier_never_reaches_store(self, store):
        with pytest.raises(ValidationError):
            event_service.delete_event(store, StubSessions(ALICE), "not-a-uuid")
        store.delete.assert_not_called()
