"""Store interfaces (repository pattern).

Stores are swappable and exchange plain row dicts keyed by column name.
Each call is a single statement against the backing store; there is no
cross-call transaction.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence

from fastbreak.stores.predicates import Order, Predicate

EVENT_COLUMNS = (
    "id",
    "user_id",
    "name",
    "sport",
    "description",
    "date",
    "venues",
    "created_at",
    "updated_at",
)


class EventStore(ABC):
    """Interface for persistence of the ``events`` table."""

    @abstractmethod
    def insert(self, row: dict[str, Any]) -> dict[str, Any]:
        """Insert a row and return it as stored (with id and timestamps)."""
        ...

    @abstractmethod
    def select(
        self,
        predicates: Sequence[Predicate] = (),
        order: Optional[Order] = None,
    ) -> list[dict[str, Any]]:
        """Return rows matching every predicate."""
        ...

    @abstractmethod
    def update(self, fields: dict[str, Any], predicates: Sequence[Predicate]) -> int:
        """Apply ``fields`` to rows matching every predicate; return rows changed."""
        ...

    @abstractmethod
    def delete(self, predicates: Sequence[Predicate]) -> int:
        """Remove rows matching every predicate; return rows removed."""
        ...


def check_column(column: str) -> str:
    if column not in EVENT_COLUMNS:
        raise ValueError(f"Unknown events column '{column}'")
    return column
