"""Event ORM model."""
import uuid
from sqlalchemy import Column, String, Text, DateTime, JSON, Index
from sqlalchemy.sql import func
from fastbreak.database import Base


class Event(Base):
    __tablename__ = "events"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    # Owner comes from the hosted auth service, so there is no local FK target
    user_id = Column(String(36), nullable=False)
    name = Column(String(255), nullable=False)
    sport = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    date = Column(DateTime(timezone=True), nullable=False)
    venues = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("ix_events_user_id", "user_id"),
        Index("ix_events_date", "date"),
    )
