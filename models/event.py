from sqlalchemy import Column, String, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid
import enum

from database.connection import Base


class EventStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    ACTIVE = "active"
    COMPLETED = "completed"


class Event(Base):
    """
    Event model - one night of bingo at a venue

    event_code is "<venue slug>--<YYYY-MM-DD>" and never changes once created.
    At most one event per venue is active at a time.
    start_at is stored as naive UTC.
    """
    __tablename__ = "events"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    venue_id = Column(String, ForeignKey("venues.id"), nullable=False, index=True)
    event_code = Column(String, unique=True, nullable=False, index=True)
    name = Column(String, nullable=True)
    start_at = Column(DateTime, nullable=True)
    status = Column(Enum(EventStatus), default=EventStatus.SCHEDULED, nullable=False)
    config_key = Column(String, nullable=True)  # legacy pointer into the local event table
    created_at = Column(DateTime, default=datetime.utcnow)

    venue = relationship("Venue", back_populates="events")
    games = relationship(
        "EventGame",
        back_populates="event",
        cascade="all, delete-orphan",
        order_by="EventGame.game_number",
    )

    def __repr__(self):
        return f"<Event(code={self.event_code}, status={self.status})>"
