"""SQLAlchemy implementation of the EventStore."""
import logging
from datetime import datetime, timezone
from typing import Any, Optional, Sequence

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from fastbreak.errors import StoreError
from fastbreak.models.event import Event
from fastbreak.stores.interfaces import EVENT_COLUMNS, EventStore, check_column
from fastbreak.stores.predicates import Contains, Eq, ILike, NotIn, Order, Predicate

logger = logging.getLogger(__name__)


def _row(event: Event) -> dict[str, Any]:
    return {column: getattr(event, column) for column in EVENT_COLUMNS}


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _clause(predicate: Predicate):
    column = getattr(Event, check_column(predicate.column))
    if isinstance(predicate, Eq):
        return column == predicate.value
    if isinstance(predicate, Contains):
        return column.ilike(f"%{_escape_like(predicate.text)}%", escape="\\")
    if isinstance(predicate, ILike):
        return func.lower(column) == func.lower(predicate.value)
    if isinstance(predicate, NotIn):
        return func.lower(column).notin_([func.lower(v) for v in predicate.values])
    raise TypeError(f"Unsupported predicate {predicate!r}")


class SqlEventStore(EventStore):
    """Relational event store using the SQLAlchemy ORM."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def _fail(self, exc: SQLAlchemyError, action: str) -> StoreError:
        self._db.rollback()
        logger.error("Event %s failed: %s", action, exc)
        orig = getattr(exc, "orig", None)
        return StoreError(str(orig) if orig is not None else str(exc))

    def insert(self, row: dict[str, Any]) -> dict[str, Any]:
        event = Event(**row)
        try:
            self._db.add(event)
            self._db.commit()
            self._db.refresh(event)
        except SQLAlchemyError as exc:
            raise self._fail(exc, "insert") from exc
        return _row(event)

    def select(
        self,
        predicates: Sequence[Predicate] = (),
        order: Optional[Order] = None,
    ) -> list[dict[str, Any]]:
        query = self._db.query(Event).filter(*[_clause(p) for p in predicates])
        if order is not None:
            column = getattr(Event, check_column(order.column))
            query = query.order_by(column.asc() if order.ascending else column.desc())
        try:
            return [_row(event) for event in query.all()]
        except SQLAlchemyError as exc:
            raise self._fail(exc, "select") from exc

    def update(self, fields: dict[str, Any], predicates: Sequence[Predicate]) -> int:
        values = {check_column(k): v for k, v in fields.items()}
        values["updated_at"] = datetime.now(timezone.utc)
        try:
            count = (
                self._db.query(Event)
                .filter(*[_clause(p) for p in predicates])
                .update(values, synchronize_session=False)
            )
            self._db.commit()
        except SQLAlchemyError as exc:
            raise self._fail(exc, "update") from exc
        return count

    def delete(self, predicates: Sequence[Predicate]) -> int:
        try:
            count = (
                self._db.query(Event)
                .filter(*[_clause(p) for p in predicates])
                .delete(synchronize_session=False)
            )
            self._db.commit()
        except SQLAlchemyError as exc:
            raise self._fail(exc, "delete") from exc
        return count
