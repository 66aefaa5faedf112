"""Filter predicates understood by every EventStore implementation."""
from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class Eq:
    """Exact equality."""

    column: str
    value: Any


@dataclass(frozen=True)
class Contains:
    """Case-insensitive substring match."""

    column: str
    text: str


@dataclass(frozen=True)
class ILike:
    """Case-insensitive equality."""

    column: str
    value: str


@dataclass(frozen=True)
class NotIn:
    """Case-insensitive negated set membership."""

    column: str
    values: tuple[str, ...]


@dataclass(frozen=True)
class Order:
    column: str
    ascending: bool = True


Predicate = Union[Eq, Contains, ILike, NotIn]
