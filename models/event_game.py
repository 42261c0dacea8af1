from sqlalchemy import Column, String, Integer, ForeignKey, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
import uuid
import enum

from database.connection import Base

BONUS_GAME_NUMBER = 6
SCORED_GAME_NUMBERS = (1, 2, 3, 4, 5)


class DisplayMode(str, enum.Enum):
    TITLE = "title"
    ARTIST = "artist"


class EventGame(Base):
    """
    EventGame model - one of the six rounds of an event
    Games 1-5 are scored; game 6 is the optional bonus round
    """
    __tablename__ = "event_games"
    __table_args__ = (UniqueConstraint("event_id", "game_number", name="uq_event_game_number"),)

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = Column(String, ForeignKey("events.id"), nullable=False, index=True)
    game_number = Column(Integer, nullable=False)
    playlist_key = Column(String, nullable=False)
    display_mode = Column(Enum(DisplayMode), default=DisplayMode.TITLE, nullable=False)
    pattern_id = Column(Integer, ForeignKey("patterns.id"), nullable=True)

    event = relationship("Event", back_populates="games")

    @property
    def is_bonus(self) -> bool:
        return self.game_number == BONUS_GAME_NUMBER

    def __repr__(self):
        return f"<EventGame(event_id={self.event_id}, game={self.game_number}, playlist={self.playlist_key})>"
