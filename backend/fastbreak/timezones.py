"""UTC <-> viewer-local conversion at the presentation boundary.

Events are stored in UTC. Payloads may carry a naive local datetime together
with an IANA zone name; dashboard rows can be rendered back into a zone.
"""
from datetime import datetime, timezone
from typing import Optional

import pytz


def normalize_to_utc(value: datetime, tz_name: Optional[str] = None) -> datetime:
    """Return ``value`` as an aware UTC datetime.

    Naive values are localized in ``tz_name`` when given, otherwise taken as UTC.
    Raises ``pytz.UnknownTimeZoneError`` for an unknown zone name.
    """
    if value.tzinfo is None:
        if tz_name:
            value = pytz.timezone(tz_name).localize(value)
        else:
            value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_local(value: datetime, tz_name: str) -> datetime:
    """Convert a stored (UTC) datetime into the viewer's zone."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(pytz.timezone(tz_name))


def is_valid_timezone(tz_name: str) -> bool:
    return tz_name in pytz.all_timezones_set
