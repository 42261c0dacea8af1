from database.connection import Base
from models.venue import Venue
from models.event import Event, EventStatus
from models.event_game import EventGame, DisplayMode, BONUS_GAME_NUMBER, SCORED_GAME_NUMBERS
from models.pattern import Pattern

__all__ = [
    "Base", "Venue", "Event", "EventStatus", "EventGame", "DisplayMode",
    "BONUS_GAME_NUMBER", "SCORED_GAME_NUMBERS", "Pattern",
]
