from pydantic import BaseModel, Field
from typing import Optional, List


class GameIn(BaseModel):
    game_number: int
    playlist_key: str
    display_mode: Optional[str] = None  # None: title
    pattern_id: Optional[int] = None


class GamesUpdate(BaseModel):
    venue_slug: str = Field(..., min_length=1)
    # Omitted: update the venue's currently active event
    event_code: Optional[str] = None
    games: List[GameIn]


class BonusUpdate(BaseModel):
    venue_slug: str = Field(..., min_length=1)
    event_code: str = Field(..., min_length=1)
    playlist_key: str
    display_mode: Optional[str] = None  # None: title


class BonusClear(BaseModel):
    venue_slug: str = Field(..., min_length=1)
    event_code: str = Field(..., min_length=1)
