"""Hosted REST implementation of the EventStore.

Talks to the ``/rest/v1/events`` resource of the hosted Postgres project.
Reads are sent with the public anon key plus the caller's access token, so
the project's row-level policies still apply. Mutations use the service key
when one is configured; ownership is already carried by the predicates.
"""
import logging
from datetime import datetime
from typing import Any, Optional, Sequence

import httpx

from fastbreak.errors import StoreError
from fastbreak.stores.interfaces import EventStore, check_column
from fastbreak.stores.predicates import Contains, Eq, ILike, NotIn, Order, Predicate

logger = logging.getLogger(__name__)

TABLE = "events"


def _escape_pattern(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _pattern(text: str) -> str:
    # PostgREST reads "*" as "%" and offers no escape for it; "_" matches the
    # literal star and select() drops the rows it over-matches
    return _escape_pattern(text).replace("*", "_")


def _starred(predicates: Sequence[Predicate]) -> list:
    return [
        p for p in predicates
        if (isinstance(p, Contains) and "*" in p.text)
        or (isinstance(p, ILike) and "*" in p.value)
    ]


def _matches(row: dict[str, Any], predicate: Predicate) -> bool:
    value = str(row.get(predicate.column) or "").lower()
    if isinstance(predicate, Contains):
        return predicate.text.lower() in value
    return predicate.value.lower() == value


def _quote(value: str) -> str:
    # Double quotes keep commas and parentheses out of the filter grammar
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _encode(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def build_params(
    predicates: Sequence[Predicate] = (),
    order: Optional[Order] = None,
) -> list[tuple[str, str]]:
    """Translate predicates into query-string filters."""
    params: list[tuple[str, str]] = []
    exclusions: list[str] = []
    for p in predicates:
        column = check_column(p.column)
        if isinstance(p, Eq):
            params.append((column, f"eq.{_encode(p.value)}"))
        elif isinstance(p, Contains):
            params.append((column, f"ilike.*{_pattern(p.text)}*"))
        elif isinstance(p, ILike):
            params.append((column, f"ilike.{_pattern(p.value)}"))
        elif isinstance(p, NotIn):
            if any("*" in v for v in p.values):
                raise ValueError(f"Cannot exclude values containing \"*\" on {column}")
            # "in" is case-sensitive; a chain of negated ilikes is not
            exclusions.extend(
                f"{column}.not.ilike.{_quote(_escape_pattern(v))}" for v in p.values
            )
        else:
            raise TypeError(f"Unsupported predicate {p!r}")
    if exclusions:
        params.append(("and", "(" + ",".join(exclusions) + ")"))
    if order is not None:
        direction = "asc" if order.ascending else "desc"
        params.append(("order", f"{check_column(order.column)}.{direction}"))
    return params


class PostgrestEventStore(EventStore):
    """Event store backed by the hosted project's REST interface."""

    def __init__(
        self,
        client: httpx.Client,
        base_url: str,
        anon_key: str,
        service_key: str = "",
        access_token: Optional[str] = None,
    ) -> None:
        self._client = client
        self._url = f"{base_url.rstrip('/')}/rest/v1/{TABLE}"
        self._anon_key = anon_key
        self._service_key = service_key
        self._access_token = access_token

    def _headers(self, write: bool) -> dict[str, str]:
        if write and self._service_key:
            key, bearer = self._service_key, self._service_key
        else:
            key, bearer = self._anon_key, self._access_token or self._anon_key
        headers = {"apikey": key, "Authorization": f"Bearer {bearer}"}
        if write:
            headers["Prefer"] = "return=representation"
        return headers

    def _request(self, method: str, *, write: bool, params=None, json=None) -> list[dict[str, Any]]:
        try:
            response = self._client.request(
                method, self._url, params=params, json=json, headers=self._headers(write)
            )
        except httpx.HTTPError as exc:
            logger.error("Event store %s request failed: %s", method, exc)
            raise StoreError("Event store is unavailable") from exc
        if response.status_code >= 400:
            message = _error_message(response)
            logger.error("Event store %s rejected (%d): %s", method, response.status_code, message)
            raise StoreError(message)
        if not response.content:
            return []
        return response.json()

    def insert(self, row: dict[str, Any]) -> dict[str, Any]:
        body = {k: _encode(v) for k, v in row.items()}
        rows = self._request("POST", write=True, json=body)
        if not rows:
            raise StoreError("Insert returned no row")
        return rows[0]

    def select(
        self,
        predicates: Sequence[Predicate] = (),
        order: Optional[Order] = None,
    ) -> list[dict[str, Any]]:
        params = [("select", "*")] + build_params(predicates, order)
        rows = self._request("GET", write=False, params=params)
        starred = _starred(predicates)
        if starred:
            rows = [row for row in rows if all(_matches(row, p) for p in starred)]
        return rows

    def _check_writable(self, predicates: Sequence[Predicate]) -> None:
        if _starred(predicates):
            raise ValueError("Mutations cannot filter on a literal \"*\"")

    def update(self, fields: dict[str, Any], predicates: Sequence[Predicate]) -> int:
        self._check_writable(predicates)
        body = {check_column(k): _encode(v) for k, v in fields.items()}
        return len(self._request("PATCH", write=True, params=build_params(predicates), json=body))

    def delete(self, predicates: Sequence[Predicate]) -> int:
        self._check_writable(predicates)
        return len(self._request("DELETE", write=True, params=build_params(predicates)))


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"Event store error ({response.status_code})"
    if isinstance(body, dict):
        return body.get("message") or body.get("error") or str(body)
    return str(body)
