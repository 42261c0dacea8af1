from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid

from database.connection import Base


class Venue(Base):
    """
    Venue model - represents a bar or pub hosting bingo nights
    Venues are provisioned by an operator and looked up by their slug
    """
    __tablename__ = "venues"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    slug = Column(String, unique=True, nullable=False, index=True)
    name = Column(String, nullable=True)
    time_zone = Column(String, nullable=True)  # IANA name, falls back to DEFAULT_TIME_ZONE
    created_at = Column(DateTime, default=datetime.utcnow)

    events = relationship("Event", back_populates="venue", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Venue(slug={self.slug})>"
