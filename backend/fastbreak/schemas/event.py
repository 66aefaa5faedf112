"""Pydantic schemas for Events."""
from __future__ import annotations
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import UUID
from pydantic import BaseModel, field_validator, model_validator

from fastbreak.timezones import is_valid_timezone, normalize_to_utc


class EventPayload(BaseModel):
    """Client-submitted event fields for create and update.

    Unknown keys (``user_id`` included) are dropped: ownership always comes
    from the resolved identity.
    """

    id: Optional[UUID] = None
    name: str
    sport: str
    date: datetime
    timezone: Optional[str] = None
    description: Optional[str] = None
    venues: list[str]

    model_config = {"extra": "ignore"}

    @field_validator("name")
    @classmethod
    def _name_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Event name is required")
        return value

    @field_validator("sport")
    @classmethod
    def _sport_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Sport is required")
        return value

    @field_validator("description")
    @classmethod
    def _blank_description(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value

    @field_validator("venues", mode="before")
    @classmethod
    def _split_venue_string(cls, value: Any) -> Any:
        # Form inputs send "Stadium A, Arena B"
        if isinstance(value, str):
            return value.split(",")
        return value

    @field_validator("venues")
    @classmethod
    def _venues_required(cls, value: list[str]) -> list[str]:
        venues = [v.strip() for v in value if v.strip()]
        if not venues:
            raise ValueError("At least one venue required")
        return venues

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not is_valid_timezone(value):
            raise ValueError(f"Unknown timezone '{value}'")
        return value

    @model_validator(mode="after")
    def _date_to_utc(self) -> "EventPayload":
        self.date = normalize_to_utc(self.date, self.timezone)
        return self

    def to_row(self) -> dict[str, Any]:
        """Columns a client may write."""
        return {
            "name": self.name,
            "sport": self.sport,
            "description": self.description,
            "date": self.date,
            "venues": self.venues,
        }


class EventOut(BaseModel):
    id: str
    user_id: str
    name: str
    sport: str
    description: Optional[str] = None
    date: datetime
    venues: list[str]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

    @field_validator("date", "created_at", "updated_at")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        # SQLite hands back naive values; everything is stored in UTC
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class EventListOut(BaseModel):
    events: list[EventOut]
    current_user_id: Optional[str] = None


class DashboardEventOut(EventOut):
    is_owner: bool = False
    local_date: Optional[datetime] = None


class DashboardOut(BaseModel):
    display_name: str
    current_user_id: Optional[str] = None
    search: str = ""
    sport: str = ""
    sports: list[str]
    events: list[DashboardEventOut]
